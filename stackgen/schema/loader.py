"""Schema document loading.

Reads the JSON schema from disk and validates it into a :class:`Schema`.
Every failure mode (missing file, bad JSON, wrong shape) is reported as a
``SchemaLoadError`` so the CLI can stop before the output directory is
touched.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from stackgen.errors import SchemaLoadError
from stackgen.schema.models import Schema
from stackgen.utils import load_json


def load_schema(path: str | Path) -> Schema:
    """Load and validate the schema document at *path*.

    Raises:
        SchemaLoadError: If the path does not exist, is not a file, is not
            valid JSON, or does not match the schema shape.
    """
    schema_path = Path(path)
    if not schema_path.exists():
        raise SchemaLoadError(schema_path, "file does not exist")
    if not schema_path.is_file():
        raise SchemaLoadError(schema_path, "not a regular file")

    try:
        data = load_json(schema_path)
    except json.JSONDecodeError as exc:
        raise SchemaLoadError(
            schema_path, f"invalid JSON at line {exc.lineno} column {exc.colno}: {exc.msg}"
        ) from exc
    except UnicodeDecodeError as exc:
        raise SchemaLoadError(schema_path, "file is not UTF-8 text") from exc

    return parse_schema(data, source=schema_path)


def parse_schema(data: Any, source: str | Path = "<schema>") -> Schema:
    """Validate an already-decoded schema document.

    Args:
        data: The decoded JSON value.
        source: Label used in error messages.

    Raises:
        SchemaLoadError: If *data* is not an object or fails validation.
    """
    if not isinstance(data, dict):
        raise SchemaLoadError(
            source, f"top-level value must be an object, got {type(data).__name__}"
        )
    try:
        return Schema.model_validate(data)
    except ValidationError as exc:
        raise SchemaLoadError(source, _format_validation_error(exc)) from exc


def _format_validation_error(exc: ValidationError) -> str:
    """Flatten pydantic errors into ``loc: message`` pairs."""
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ())) or "<root>"
        parts.append(f"{loc}: {err.get('msg', 'invalid')}")
    return "; ".join(parts)
