"""stackgen scaffolder -- generates complete full-stack project trees.

This package takes a loaded ``Schema`` and renders an Express/TypeScript
backend, an Angular frontend, and optional Docker, GitHub Actions, Terraform,
and ngx-admin artifacts.

Quick usage::

    from stackgen.schema import load_schema
    from stackgen.scaffolder import FeatureDefaults, ProjectGenerator, resolve_features

    schema = load_schema("schema.json")
    config = resolve_features(schema, FeatureDefaults())
    generator = ProjectGenerator(schema, config)
    result = await generator.generate("my-app")
"""

from stackgen.scaffolder.features import FeatureDefaults, ResolvedConfig, resolve_features
from stackgen.scaffolder.generator import GenerationResult, ProjectGenerator
from stackgen.scaffolder.planner import Artifact, ArtifactPlanner, MigrationClock, Stage
from stackgen.scaffolder.skeleton import SkeletonBuilder
from stackgen.scaffolder.templates import TemplateBackend, TemplateRenderer

__all__ = [
    "Artifact",
    "ArtifactPlanner",
    "FeatureDefaults",
    "GenerationResult",
    "MigrationClock",
    "ProjectGenerator",
    "ResolvedConfig",
    "SkeletonBuilder",
    "Stage",
    "TemplateBackend",
    "TemplateRenderer",
    "resolve_features",
]
