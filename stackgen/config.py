"""stackgen run configuration.

Typed options for one generator run.  The CLI builds a ``GeneratorOptions``
from its arguments (with defaults taken from the environment) and the engine
only ever sees the validated model.
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import BaseModel, Field

from stackgen.scaffolder.features import FeatureDefaults

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


class GeneratorOptions(BaseModel):
    """Options supplied by the command line for a single generation run.

    The five feature booleans are *defaults* only: a schema that sets the
    matching flag explicitly overrides them.
    """

    schema_path: Path = Field(default=Path("schema.json"))
    output_dir: Path = Field(default=Path("my-app"))
    graphql: bool = Field(default=False, description="Generate the GraphQL layer")
    docker: bool = Field(default=True, description="Generate Dockerfiles and compose file")
    ci: bool = Field(default=True, description="Generate the GitHub Actions workflow")
    terraform: bool = Field(default=True, description="Generate AWS Terraform files")
    admin_panel: bool = Field(default=False, description="Generate the ngx-admin dashboard")
    quiet: bool = Field(default=False, description="Suppress progress and summary output")

    def feature_defaults(self) -> FeatureDefaults:
        """Return the command-line feature defaults as a ``FeatureDefaults``."""
        return FeatureDefaults(
            graphql=self.graphql,
            docker=self.docker,
            ci=self.ci,
            terraform=self.terraform,
            admin_panel=self.admin_panel,
        )

    @classmethod
    def from_env(cls) -> "GeneratorOptions":
        """Build ``GeneratorOptions`` from environment variables.

        Recognised variables (all optional):
            STACKGEN_SCHEMA, STACKGEN_OUTPUT, STACKGEN_GRAPHQL, STACKGEN_DOCKER,
            STACKGEN_CI, STACKGEN_TERRAFORM, STACKGEN_ADMIN.

        Raises:
            ValueError: If a boolean variable holds an unrecognised value.
        """
        kwargs: dict[str, object] = {}
        if os.environ.get("STACKGEN_SCHEMA"):
            kwargs["schema_path"] = Path(os.environ["STACKGEN_SCHEMA"])
        if os.environ.get("STACKGEN_OUTPUT"):
            kwargs["output_dir"] = Path(os.environ["STACKGEN_OUTPUT"])

        flag_vars = {
            "graphql": "STACKGEN_GRAPHQL",
            "docker": "STACKGEN_DOCKER",
            "ci": "STACKGEN_CI",
            "terraform": "STACKGEN_TERRAFORM",
            "admin_panel": "STACKGEN_ADMIN",
        }
        for field_name, var in flag_vars.items():
            raw = os.environ.get(var)
            if raw:
                kwargs[field_name] = _parse_bool(var, raw)

        return cls(**kwargs)


def _parse_bool(name: str, raw: str) -> bool:
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean (got {raw!r})")
