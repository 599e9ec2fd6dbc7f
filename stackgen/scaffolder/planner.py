"""Artifact planning.

Decides *which* files a run produces, where they go, and what each template
sees.  Nothing here touches the filesystem: the planner yields
:class:`Artifact` records in a fixed stage order and the generator renders
them.

Stage order (see :meth:`ArtifactPlanner.stages`):

1. ``ROOT_INFRA``      -- Dockerfiles/compose, CI workflow, Terraform (each gated)
2. ``BACKEND_FIXED``   -- manifest, config, server, middleware, auth routes
3. ``BACKEND_ENTITY``  -- model, migration, test, controller, route per entity
4. ``BACKEND_ROUTES``  -- route aggregation over all entities
5. ``GRAPHQL``         -- type definitions and resolvers (gated)
6. ``FRONTEND_FIXED``  -- Angular shell, app module, auth core
7. ``FRONTEND_ENTITY`` -- feature module, service, list/form views per entity
8. ``ADMIN_PANEL``     -- ngx-admin theme, pages module, dashboard (gated)
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import Enum
from itertools import chain
from typing import Any, Callable, Iterable, Iterator, Optional

from stackgen.errors import DuplicateArtifactError
from stackgen.naming import to_camel, to_kebab, to_pascal
from stackgen.schema.models import Entity, Schema

from .features import ResolvedConfig


class Stage(str, Enum):
    """Planning stage an artifact belongs to, in emission order."""
    ROOT_INFRA = "root_infra"
    BACKEND_FIXED = "backend_fixed"
    BACKEND_ENTITY = "backend_entity"
    BACKEND_ROUTES = "backend_routes"
    GRAPHQL = "graphql"
    FRONTEND_FIXED = "frontend_fixed"
    FRONTEND_ENTITY = "frontend_entity"
    ADMIN_PANEL = "admin_panel"


@dataclass(frozen=True)
class Artifact:
    """One file to generate.

    Attributes:
        stage: The planning stage that produced the artifact.
        template_id: Template path relative to the template root.
        destination: POSIX path relative to the output root.
        context: Artifact-specific template variables.  These take precedence
            over schema fields of the same name when rendering.
    """

    stage: Stage
    template_id: str
    destination: str
    context: dict[str, Any] = field(default_factory=dict)


# ---------------------------------------------------------------------------
# Artifact tables: (template id, destination)
# ---------------------------------------------------------------------------

_DOCKER_FILES: tuple[tuple[str, str], ...] = (
    ("docker/Dockerfile.backend.j2", "backend/Dockerfile"),
    ("docker/Dockerfile.frontend.j2", "frontend/Dockerfile"),
    ("docker/docker-compose.yml.j2", "docker-compose.yml"),
)

_CI_FILES: tuple[tuple[str, str], ...] = (
    ("ci/github-workflow.yml.j2", ".github/workflows/ci.yml"),
)

_TERRAFORM_FILES: tuple[tuple[str, str], ...] = (
    ("terraform/main.tf.j2", "terraform/main.tf"),
    ("terraform/variables.tf.j2", "terraform/variables.tf"),
    ("terraform/outputs.tf.j2", "terraform/outputs.tf"),
    ("terraform/terraform.tfvars.example.j2", "terraform/terraform.tfvars.example"),
)

_BACKEND_FILES: tuple[tuple[str, str], ...] = (
    ("backend/package.json.j2", "backend/package.json"),
    ("backend/tsconfig.json.j2", "backend/tsconfig.json"),
    ("backend/env.example.j2", "backend/.env.example"),
    ("backend/src/server.ts.j2", "backend/src/server.ts"),
    ("backend/src/config/database.ts.j2", "backend/src/config/database.ts"),
    ("backend/src/middleware/auth.ts.j2", "backend/src/middleware/auth.ts"),
    ("backend/src/middleware/upload.ts.j2", "backend/src/middleware/upload.ts"),
    ("backend/src/middleware/error.ts.j2", "backend/src/middleware/error.ts"),
    ("backend/src/routes/auth.ts.j2", "backend/src/routes/auth.ts"),
)

# Destinations are formatted with name, kebab, table_name and stamp.
_BACKEND_ENTITY_FILES: tuple[tuple[str, str], ...] = (
    ("backend/src/models/model.ts.j2", "backend/src/models/{name}.ts"),
    ("backend/migrations/create-table.ts.j2", "backend/migrations/{stamp}-create-{table_name}.ts"),
    ("backend/tests/model.test.ts.j2", "backend/tests/{name}.test.ts"),
    ("backend/src/controllers/controller.ts.j2", "backend/src/controllers/{name}Controller.ts"),
    ("backend/src/routes/route.ts.j2", "backend/src/routes/{kebab}.ts"),
)

_GRAPHQL_FILES: tuple[tuple[str, str], ...] = (
    ("backend/src/graphql/typeDefs.ts.j2", "backend/src/graphql/typeDefs.ts"),
    ("backend/src/graphql/resolvers.ts.j2", "backend/src/graphql/resolvers.ts"),
)

_FRONTEND_FILES: tuple[tuple[str, str], ...] = (
    ("frontend/package.json.j2", "frontend/package.json"),
    ("frontend/angular.json.j2", "frontend/angular.json"),
    ("frontend/tsconfig.json.j2", "frontend/tsconfig.json"),
    ("frontend/src/index.html.j2", "frontend/src/index.html"),
    ("frontend/src/main.ts.j2", "frontend/src/main.ts"),
    ("frontend/src/polyfills.ts.j2", "frontend/src/polyfills.ts"),
    ("frontend/src/styles.scss.j2", "frontend/src/styles.scss"),
    ("frontend/src/app/app.module.ts.j2", "frontend/src/app/app.module.ts"),
    ("frontend/src/app/app-routing.module.ts.j2", "frontend/src/app/app-routing.module.ts"),
    ("frontend/src/app/app.component.html.j2", "frontend/src/app/app.component.html"),
    ("frontend/src/app/app.component.ts.j2", "frontend/src/app/app.component.ts"),
    ("frontend/src/app/core/auth/auth.service.ts.j2", "frontend/src/app/core/auth/auth.service.ts"),
    ("frontend/src/app/core/auth/jwt.interceptor.ts.j2", "frontend/src/app/core/auth/jwt.interceptor.ts"),
    ("frontend/src/app/core/auth/auth.guard.ts.j2", "frontend/src/app/core/auth/auth.guard.ts"),
)

_FEATURE_DIR = "frontend/src/app/features/{kebab}"

_FRONTEND_ENTITY_FILES: tuple[tuple[str, str], ...] = (
    ("frontend/src/app/features/entity/entity.module.ts.j2", _FEATURE_DIR + "/{kebab}.module.ts"),
    ("frontend/src/app/features/entity/entity.service.ts.j2", _FEATURE_DIR + "/{kebab}.service.ts"),
    ("frontend/src/app/features/entity/entity-list.component.html.j2", _FEATURE_DIR + "/{kebab}-list.component.html"),
    ("frontend/src/app/features/entity/entity-list.component.ts.j2", _FEATURE_DIR + "/{kebab}-list.component.ts"),
    ("frontend/src/app/features/entity/entity-form.component.html.j2", _FEATURE_DIR + "/{kebab}-form.component.html"),
    ("frontend/src/app/features/entity/entity-form.component.ts.j2", _FEATURE_DIR + "/{kebab}-form.component.ts"),
)

_ADMIN_FILES: tuple[tuple[str, str], ...] = (
    ("frontend/src/app/@theme/theme.module.ts.j2", "frontend/src/app/@theme/theme.module.ts"),
    ("frontend/src/app/@theme/styles/themes.scss.j2", "frontend/src/app/@theme/styles/themes.scss"),
    ("frontend/src/app/pages/pages.module.ts.j2", "frontend/src/app/pages/pages.module.ts"),
    ("frontend/src/app/pages/dashboard/dashboard.component.html.j2", "frontend/src/app/pages/dashboard/dashboard.component.html"),
    ("frontend/src/app/pages/dashboard/dashboard.component.ts.j2", "frontend/src/app/pages/dashboard/dashboard.component.ts"),
)

# Admin artifacts that enumerate the entities as navigable sections.
_ADMIN_ENTITY_AWARE = frozenset({
    "frontend/src/app/pages/pages.module.ts.j2",
    "frontend/src/app/pages/dashboard/dashboard.component.html.j2",
    "frontend/src/app/pages/dashboard/dashboard.component.ts.j2",
})


# ---------------------------------------------------------------------------
# Migration stamps
# ---------------------------------------------------------------------------


def _wall_clock_ms() -> int:
    return time.time_ns() // 1_000_000


class MigrationClock:
    """Hands out strictly increasing millisecond stamps for migration files.

    Stamps follow the wall clock but never repeat or go backwards: when two
    calls land in the same millisecond (or the clock steps back), the next
    stamp is the previous one plus one.
    """

    def __init__(self, now: Optional[Callable[[], int]] = None) -> None:
        self._now = now or _wall_clock_ms
        self._last: Optional[int] = None

    def next_stamp(self) -> int:
        stamp = self._now()
        if self._last is not None and stamp <= self._last:
            stamp = self._last + 1
        self._last = stamp
        return stamp


# ---------------------------------------------------------------------------
# Planner
# ---------------------------------------------------------------------------


class ArtifactPlanner:
    """Enumerates every artifact for a schema and its resolved features.

    The plan is deterministic for a given schema, config, and clock.  Each
    call to :meth:`plan` starts a fresh :class:`MigrationClock`, so a fixed
    ``clock`` yields identical plans on every call.
    """

    def __init__(
        self,
        schema: Schema,
        config: ResolvedConfig,
        clock: Optional[Callable[[], int]] = None,
    ) -> None:
        self.schema = schema
        self.config = config
        self.clock = clock

    @staticmethod
    def stages() -> tuple[Stage, ...]:
        """Return the stages in the order :meth:`plan` emits them."""
        return tuple(Stage)

    # -- Public API --------------------------------------------------------

    def plan(self) -> Iterator[Artifact]:
        """Yield every artifact in stage order.

        Raises:
            DuplicateArtifactError: If two artifacts share a destination.
                Raised when the second one is reached, before it is yielded.
        """
        migrations = MigrationClock(self.clock)
        seen: dict[str, str] = {}
        stages = chain(
            self._root_infra(),
            self._backend_fixed(),
            self._backend_entities(migrations),
            self._backend_routes(),
            self._graphql(),
            self._frontend_fixed(),
            self._frontend_entities(),
            self._admin_panel(),
        )
        for artifact in stages:
            first = seen.get(artifact.destination)
            if first is not None:
                raise DuplicateArtifactError(artifact.destination, first, artifact.template_id)
            seen[artifact.destination] = artifact.template_id
            yield artifact

    # -- Stages ------------------------------------------------------------

    def _root_infra(self) -> Iterator[Artifact]:
        if self.config.docker:
            yield from self._fixed(Stage.ROOT_INFRA, _DOCKER_FILES)
        if self.config.ci:
            yield from self._fixed(Stage.ROOT_INFRA, _CI_FILES)
        if self.config.terraform:
            yield from self._fixed(Stage.ROOT_INFRA, _TERRAFORM_FILES)

    def _backend_fixed(self) -> Iterator[Artifact]:
        yield from self._fixed(Stage.BACKEND_FIXED, _BACKEND_FILES)

    def _backend_entities(self, migrations: MigrationClock) -> Iterator[Artifact]:
        for entity in self.schema.entities:
            names = _entity_names(entity)
            stamp = migrations.next_stamp()
            for template_id, pattern in _BACKEND_ENTITY_FILES:
                ctx = self._entity_context(entity, names)
                if "{stamp}" in pattern:
                    ctx["migration_stamp"] = stamp
                yield self._artifact(
                    Stage.BACKEND_ENTITY,
                    template_id,
                    pattern.format(stamp=stamp, table_name=entity.table_name, **names),
                    ctx,
                )

    def _backend_routes(self) -> Iterator[Artifact]:
        yield self._artifact(
            Stage.BACKEND_ROUTES,
            "backend/src/routes/index.ts.j2",
            "backend/src/routes/index.ts",
            {"entities": self._entity_dicts()},
        )

    def _graphql(self) -> Iterator[Artifact]:
        if not self.config.graphql:
            return
        ctx = {"entities": self._entity_dicts(), "auth_entity": self.schema.auth_entity}
        for template_id, destination in _GRAPHQL_FILES:
            yield self._artifact(Stage.GRAPHQL, template_id, destination, dict(ctx))

    def _frontend_fixed(self) -> Iterator[Artifact]:
        yield from self._fixed(Stage.FRONTEND_FIXED, _FRONTEND_FILES)

    def _frontend_entities(self) -> Iterator[Artifact]:
        for entity in self.schema.entities:
            names = _entity_names(entity)
            for template_id, pattern in _FRONTEND_ENTITY_FILES:
                yield self._artifact(
                    Stage.FRONTEND_ENTITY,
                    template_id,
                    pattern.format(**names),
                    self._entity_context(entity, names),
                )

    def _admin_panel(self) -> Iterator[Artifact]:
        if not self.config.admin_panel:
            return
        for template_id, destination in _ADMIN_FILES:
            ctx: dict[str, Any] = {}
            if template_id in _ADMIN_ENTITY_AWARE:
                ctx["entities"] = self._entity_dicts()
            yield self._artifact(Stage.ADMIN_PANEL, template_id, destination, ctx)

    # -- Helpers -----------------------------------------------------------

    def _fixed(
        self, stage: Stage, files: Iterable[tuple[str, str]]
    ) -> Iterator[Artifact]:
        for template_id, destination in files:
            yield self._artifact(stage, template_id, destination, {})

    def _artifact(
        self,
        stage: Stage,
        template_id: str,
        destination: str,
        context: dict[str, Any],
    ) -> Artifact:
        # Resolved flags shadow the schema's raw tri-state fields.
        return Artifact(
            stage=stage,
            template_id=template_id,
            destination=destination,
            context={**self.config.as_dict(), **context},
        )

    def _entity_context(self, entity: Entity, names: dict[str, str]) -> dict[str, Any]:
        return {"entity": entity.template_dict(), **names}

    def _entity_dicts(self) -> list[dict[str, Any]]:
        return [e.template_dict() for e in self.schema.entities]


def _entity_names(entity: Entity) -> dict[str, str]:
    """Naming variants used in destinations and per-entity contexts."""
    return {
        "name": entity.name,
        "pascal": to_pascal(entity.name),
        "camel": to_camel(entity.name),
        "kebab": to_kebab(entity.name),
    }
