"""Feature flag resolution.

Combines the command-line feature defaults with the schema-level overrides
into one immutable :class:`ResolvedConfig`.  Resolution happens once per run;
every downstream decision (which artifacts to plan, which directories to
create, what templates see) reads the resolved value and nothing else.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict

from stackgen.schema.models import Schema

FEATURE_FLAGS: tuple[str, ...] = ("graphql", "docker", "ci", "terraform", "admin_panel")


class FeatureDefaults(BaseModel):
    """Command-line defaults for the optional capabilities."""

    model_config = ConfigDict(frozen=True)

    graphql: bool = False
    docker: bool = True
    ci: bool = True
    terraform: bool = True
    admin_panel: bool = False


class ResolvedConfig(BaseModel):
    """The final feature set for one generation run."""

    model_config = ConfigDict(frozen=True)

    graphql: bool
    docker: bool
    ci: bool
    terraform: bool
    admin_panel: bool

    def as_dict(self) -> dict[str, bool]:
        """Return a plain ``{flag: enabled}`` mapping."""
        return {name: getattr(self, name) for name in FEATURE_FLAGS}

    def enabled(self) -> list[str]:
        """Return the names of enabled features, in declaration order."""
        return [name for name in FEATURE_FLAGS if getattr(self, name)]


def resolve_features(schema: Schema, defaults: FeatureDefaults | None = None) -> ResolvedConfig:
    """Resolve every feature flag for *schema*.

    An explicit ``True``/``False`` in the schema wins; ``None`` defers to the
    matching entry in *defaults*.
    """
    defaults = defaults or FeatureDefaults()
    resolved: dict[str, bool] = {}
    for name in FEATURE_FLAGS:
        override = getattr(schema, name)
        resolved[name] = getattr(defaults, name) if override is None else override
    return ResolvedConfig(**resolved)
