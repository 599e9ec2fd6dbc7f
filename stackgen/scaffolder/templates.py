"""Jinja2 template rendering for project scaffolding.

Provides the ``TemplateRenderer`` class, which loads Jinja2 templates from
the ``stackgen/scaffolder/templates/`` directory and renders them with
artifact context data.  Undefined variables are errors
(``StrictUndefined``), so a template referring to something the context
does not provide fails loudly instead of emitting an empty string.

Any object with a matching ``render`` method can stand in for the renderer
(see :class:`TemplateBackend`).
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping, Protocol

from jinja2 import (
    Environment,
    FileSystemLoader,
    StrictUndefined,
    TemplateError,
    TemplateNotFound,
    TemplateSyntaxError,
)

from stackgen.errors import RenderError, TemplateNotFoundError
from stackgen.naming import to_camel, to_kebab, to_pascal


# ---------------------------------------------------------------------------
# Template directory discovery
# ---------------------------------------------------------------------------

_DEFAULT_TEMPLATE_DIR = Path(__file__).parent / "templates"


class TemplateBackend(Protocol):
    """Anything that can turn a template id and a context into text."""

    def render(self, template_id: str, context: Mapping[str, Any]) -> str:
        ...


# ---------------------------------------------------------------------------
# TemplateRenderer
# ---------------------------------------------------------------------------


class TemplateRenderer:
    """Renders Jinja2 templates for project scaffolding.

    Templates are ``.j2`` files under a configurable template directory and
    are addressed by their path relative to it, e.g.
    ``"backend/src/server.ts.j2"``.
    """

    def __init__(self, template_dir: str | Path | None = None) -> None:
        if template_dir is None:
            template_dir = _DEFAULT_TEMPLATE_DIR
        self.template_dir = Path(template_dir)
        self.env = Environment(
            loader=FileSystemLoader(str(self.template_dir)),
            autoescape=False,
            undefined=StrictUndefined,
            keep_trailing_newline=True,
            trim_blocks=True,
            lstrip_blocks=True,
        )
        self.env.filters["pascal_case"] = to_pascal
        self.env.filters["camel_case"] = to_camel
        self.env.filters["kebab_case"] = to_kebab

    # -- Single template rendering -----------------------------------------

    def render(self, template_id: str, context: Mapping[str, Any]) -> str:
        """Render a single template with the provided context.

        Raises:
            TemplateNotFoundError: If *template_id* (or a template it
                includes) does not exist.
            RenderError: If the template is malformed, references an
                undefined variable, or raises while running (for example
                when a pass-through entity key has an unexpected shape).
                ``destination`` is ``None``; the caller knows where the
                output was headed.
        """
        try:
            template = self.env.get_template(template_id)
            return template.render(**context)
        except TemplateNotFound as exc:
            raise TemplateNotFoundError(exc.name or template_id) from exc
        except TemplateSyntaxError as exc:
            raise RenderError(
                template_id, None, f"syntax error at line {exc.lineno}: {exc.message}"
            ) from exc
        except TemplateError as exc:
            raise RenderError(template_id, None, str(exc)) from exc
        except Exception as exc:
            raise RenderError(template_id, None, f"{type(exc).__name__}: {exc}") from exc

    # -- Utility -----------------------------------------------------------

    def has_template(self, template_id: str) -> bool:
        """Return ``True`` if *template_id* exists under the template root."""
        return (self.template_dir / template_id).is_file()

    def list_templates(self, prefix: str = "") -> list[str]:
        """Return a sorted list of all ``.j2`` template paths under *prefix*.

        Paths are relative to the template root and use forward slashes.
        """
        search_dir = self.template_dir / prefix if prefix else self.template_dir
        if not search_dir.is_dir():
            return []
        return sorted(
            p.relative_to(self.template_dir).as_posix()
            for p in search_dir.rglob("*.j2")
        )
