"""Output directory skeleton.

Clears the output root and lays down the directory tree that planned
artifacts land in.  Generation is full-regeneration, not incremental: any
previous contents of the output root are discarded.
"""

from __future__ import annotations

import asyncio
from pathlib import Path

from stackgen.utils import clear_dir, ensure_dir

from .features import ResolvedConfig

_BASE_DIRS: tuple[str, ...] = (
    "backend/src/models",
    "backend/src/controllers",
    "backend/src/routes",
    "backend/src/middleware",
    "backend/src/config",
    "backend/migrations",
    "backend/tests",
    "backend/uploads",
    "frontend/src/app/core/auth",
    "frontend/src/app/features",
    "frontend/src/app/shared",
)


class SkeletonBuilder:
    """Prepares the output root before any artifact is rendered."""

    def __init__(self, config: ResolvedConfig) -> None:
        self.config = config

    def directories(self) -> list[str]:
        """Return the directories to create, relative to the output root."""
        dirs = list(_BASE_DIRS)
        if self.config.graphql:
            dirs.append("backend/src/graphql")
        if self.config.admin_panel:
            dirs.extend(["frontend/src/app/@theme/layouts", "frontend/src/app/pages"])
        if self.config.terraform:
            dirs.append("terraform")
        if self.config.ci:
            dirs.append(".github/workflows")
        return dirs

    async def prepare(self, root: str | Path) -> Path:
        """Clear *root* and create the directory skeleton inside it.

        This is destructive: an existing *root* is removed with everything
        below it.  Filesystem errors propagate unchanged.

        Returns:
            The output root as a ``Path``.
        """
        root_path = Path(root)
        await asyncio.to_thread(clear_dir, root_path)
        await asyncio.gather(
            *(asyncio.to_thread(ensure_dir, root_path / d) for d in self.directories())
        )
        return root_path
