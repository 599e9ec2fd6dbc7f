"""Error taxonomy for the stackgen generation engine.

Every error raised by the engine derives from :class:`GeneratorError` so the
CLI can report any of them with a single handler.  None of them are retried:
each one reflects a static misconfiguration (bad schema, missing template,
conflicting artifact paths) that re-running cannot fix.
"""

from __future__ import annotations

from pathlib import Path


class GeneratorError(Exception):
    """Base class for all stackgen errors."""


class SchemaLoadError(GeneratorError):
    """Raised when the schema document is missing or malformed."""

    def __init__(self, path: str | Path, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"Cannot load schema {self.path}: {reason}")


class TemplateNotFoundError(GeneratorError):
    """Raised when a planned artifact references a template that is not shipped."""

    def __init__(self, template_id: str) -> None:
        self.template_id = template_id
        super().__init__(f"Template not found: {template_id}")


class RenderError(GeneratorError):
    """Raised when the templating backend fails for a specific artifact."""

    def __init__(
        self,
        template_id: str,
        destination: str | Path | None,
        reason: str,
    ) -> None:
        self.template_id = template_id
        self.destination = destination
        self.reason = reason
        target = f" -> {destination}" if destination is not None else ""
        super().__init__(f"Failed to render {template_id}{target}: {reason}")


class DuplicateArtifactError(GeneratorError):
    """Raised when two planned artifacts target the same destination path."""

    def __init__(self, destination: str, first_template: str, second_template: str) -> None:
        self.destination = destination
        self.first_template = first_template
        self.second_template = second_template
        super().__init__(
            f"Destination {destination} is produced by both "
            f"{first_template} and {second_template}"
        )
