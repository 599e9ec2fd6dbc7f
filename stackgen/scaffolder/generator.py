"""Main scaffolding orchestrator.

Takes a loaded ``Schema`` and its ``ResolvedConfig`` and generates the full
project tree: an Express/TypeScript backend, an Angular frontend, and the
enabled infrastructure artifacts.  The run is:

1. plan every artifact (fails on conflicting destinations before anything
   on disk changes),
2. clear the output root and build the directory skeleton,
3. render each artifact in plan order and write it through the file sink.

Errors abort the run immediately; files already written are left in place.
"""

from __future__ import annotations

import asyncio
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Optional

from stackgen.errors import RenderError
from stackgen.naming import to_camel, to_kebab, to_pascal
from stackgen.schema.models import Schema
from stackgen.utils import create_progress, write_file

from .features import ResolvedConfig
from .planner import Artifact, ArtifactPlanner
from .skeleton import SkeletonBuilder
from .templates import TemplateBackend, TemplateRenderer


@dataclass
class GenerationResult:
    """Outcome of a successful :meth:`ProjectGenerator.generate` run."""

    root: Path
    written: list[Path] = field(default_factory=list)
    duration: float = 0.0

    @property
    def file_count(self) -> int:
        return len(self.written)


class ProjectGenerator:
    """Drives planning, skeleton creation, and rendering for one schema.

    Args:
        schema: The loaded schema.
        config: Feature flags resolved for this run.
        backend: Templating backend; defaults to the bundled
            :class:`TemplateRenderer`.
        clock: Millisecond time source for migration stamps (tests pin it).
        quiet: Disable the progress bar.
    """

    def __init__(
        self,
        schema: Schema,
        config: ResolvedConfig,
        backend: Optional[TemplateBackend] = None,
        clock: Optional[Callable[[], int]] = None,
        quiet: bool = False,
    ) -> None:
        self.schema = schema
        self.config = config
        self.backend = backend if backend is not None else TemplateRenderer()
        self.planner = ArtifactPlanner(schema, config, clock=clock)
        self.skeleton = SkeletonBuilder(config)
        self.quiet = quiet
        self._lock: Optional[asyncio.Lock] = None

    # -- Public API --------------------------------------------------------

    async def generate(self, output_dir: str | Path) -> GenerationResult:
        """Regenerate the whole project under *output_dir*.

        *output_dir* is cleared first.  Concurrent calls on the same
        generator run one after the other.

        Raises:
            DuplicateArtifactError: Two artifacts target the same path
                (raised before the output directory is touched).
            TemplateNotFoundError: A planned template is not shipped.
            RenderError: A template failed to render.
            OSError: The file sink failed.
        """
        if self._lock is None:
            self._lock = asyncio.Lock()
        async with self._lock:
            return await self._generate(Path(output_dir))

    async def _generate(self, root: Path) -> GenerationResult:
        started = time.perf_counter()
        artifacts = list(self.planner.plan())

        await self.skeleton.prepare(root)

        result = GenerationResult(root=root)
        if self.quiet:
            for artifact in artifacts:
                result.written.append(await self.render_artifact(root, artifact))
        else:
            with create_progress() as progress:
                task = progress.add_task("Rendering", total=len(artifacts))
                for artifact in artifacts:
                    progress.update(task, description=artifact.destination)
                    result.written.append(await self.render_artifact(root, artifact))
                    progress.advance(task)

        result.duration = time.perf_counter() - started
        return result

    async def render_artifact(self, root: Path, artifact: Artifact) -> Path:
        """Render one artifact and write it below *root*.

        Raises:
            TemplateNotFoundError: The artifact's template does not exist.
            RenderError: The backend failed, or the destination would land
                outside *root*.
        """
        out = root / artifact.destination
        if not out.resolve().is_relative_to(root.resolve()):
            raise RenderError(artifact.template_id, out, "destination escapes the output root")

        try:
            content = self.backend.render(artifact.template_id, self.build_context(artifact))
        except RenderError as exc:
            raise RenderError(artifact.template_id, out, exc.reason) from exc

        return await asyncio.to_thread(write_file, out, content)

    # -- Context building --------------------------------------------------

    def build_context(self, artifact: Artifact) -> dict[str, Any]:
        """Build the template context for *artifact*.

        Layers, lowest precedence first: naming helpers, schema fields (plus
        the whole ``schema``), then the artifact's own context.
        """
        return {
            "to_pascal": to_pascal,
            "to_camel": to_camel,
            "to_kebab": to_kebab,
            **self.schema.template_fields(),
            "schema": self.schema,
            **artifact.context,
        }
