"""Shared pytest fixtures for the stackgen test suite.

Provides reusable fixtures for:
- Schema documents (dicts, files on disk, parsed models)
- Resolved feature configurations
- A pinned migration clock
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable

import pytest

from stackgen.scaffolder.features import ResolvedConfig
from stackgen.schema import Schema, parse_schema


# ---------------------------------------------------------------------------
# Schema documents
# ---------------------------------------------------------------------------

@pytest.fixture
def blog_schema_data() -> dict[str, Any]:
    """Minimal one-entity schema as it would appear in schema.json."""
    return {
        "projectName": "Blog",
        "entities": [{"name": "Post", "tableName": "posts"}],
    }


@pytest.fixture
def rich_schema_data() -> dict[str, Any]:
    """Two entities with fields and an auth entity."""
    return {
        "projectName": "Shop",
        "database": "postgres",
        "authEntity": "User",
        "entities": [
            {
                "name": "User",
                "tableName": "users",
                "fields": [
                    {"name": "email", "type": "string", "required": True},
                    {"name": "password", "type": "string", "required": True},
                    {"name": "isAdmin", "type": "boolean"},
                ],
            },
            {
                "name": "BlogPost",
                "tableName": "blog_posts",
                "fields": [
                    {"name": "title", "type": "string", "required": True},
                    {"name": "views", "type": "integer"},
                    {"name": "publishedAt", "type": "date"},
                ],
            },
        ],
    }


@pytest.fixture
def write_schema(tmp_path: Path) -> Callable[[Any], Path]:
    """Return a helper that dumps a document to ``tmp_path/schema.json``."""

    def _write(data: Any, name: str = "schema.json") -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(data), encoding="utf-8")
        return path

    return _write


@pytest.fixture
def blog_schema(blog_schema_data) -> Schema:
    return parse_schema(blog_schema_data)


@pytest.fixture
def rich_schema(rich_schema_data) -> Schema:
    return parse_schema(rich_schema_data)


# ---------------------------------------------------------------------------
# Feature configurations
# ---------------------------------------------------------------------------

@pytest.fixture
def default_config() -> ResolvedConfig:
    """Flags at their command-line defaults."""
    return ResolvedConfig(graphql=False, docker=True, ci=True, terraform=True, admin_panel=False)


@pytest.fixture
def all_on_config() -> ResolvedConfig:
    return ResolvedConfig(graphql=True, docker=True, ci=True, terraform=True, admin_panel=True)


@pytest.fixture
def all_off_config() -> ResolvedConfig:
    return ResolvedConfig(graphql=False, docker=False, ci=False, terraform=False, admin_panel=False)


# ---------------------------------------------------------------------------
# Clock
# ---------------------------------------------------------------------------

FIXED_MS = 1_700_000_000_000


@pytest.fixture
def fixed_clock() -> Callable[[], int]:
    """A clock frozen at a single millisecond."""
    return lambda: FIXED_MS
