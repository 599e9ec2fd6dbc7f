"""Tests for the ProjectGenerator orchestrator.

Covers:
- Context layering (helpers < schema fields < artifact context)
- Rendering through an injected backend
- RenderError wrapping with the destination
- Destinations escaping the output root
- Full-regeneration semantics of generate()
"""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Mapping
from unittest.mock import MagicMock, patch

import pytest

from stackgen.errors import DuplicateArtifactError, RenderError, TemplateNotFoundError
from stackgen.naming import to_kebab
from stackgen.scaffolder.generator import GenerationResult, ProjectGenerator
from stackgen.scaffolder.planner import Artifact, Stage
from stackgen.scaffolder.templates import TemplateRenderer
from stackgen.schema import parse_schema

pytestmark = pytest.mark.unit


class EchoBackend:
    """Backend that writes the template id, and records every call."""

    def __init__(self) -> None:
        self.calls: list[tuple[str, Mapping[str, Any]]] = []

    def render(self, template_id: str, context: Mapping[str, Any]) -> str:
        self.calls.append((template_id, context))
        return f"// {template_id}\n"


@pytest.fixture
def backend() -> EchoBackend:
    return EchoBackend()


@pytest.fixture
def generator(blog_schema, default_config, backend, fixed_clock) -> ProjectGenerator:
    return ProjectGenerator(blog_schema, default_config, backend=backend, clock=fixed_clock, quiet=True)


# ---------------------------------------------------------------------------
# __init__
# ---------------------------------------------------------------------------


class TestInit:
    def test_default_backend(self, blog_schema, default_config):
        gen = ProjectGenerator(blog_schema, default_config)
        assert isinstance(gen.backend, TemplateRenderer)

    def test_injected_backend(self, generator, backend):
        assert generator.backend is backend

    def test_planner_and_skeleton_share_config(self, generator, default_config):
        assert generator.planner.config is default_config
        assert generator.skeleton.config is default_config


# ---------------------------------------------------------------------------
# build_context
# ---------------------------------------------------------------------------


class TestBuildContext:
    def test_layers(self, generator, blog_schema):
        artifact = Artifact(Stage.BACKEND_FIXED, "x.j2", "x", {"extra": 1})
        ctx = generator.build_context(artifact)
        assert ctx["to_kebab"] is to_kebab
        assert ctx["project_name"] == "Blog"
        assert ctx["schema"] is blog_schema
        assert ctx["extra"] == 1

    def test_artifact_context_wins(self, generator):
        artifact = Artifact(
            Stage.BACKEND_FIXED, "x.j2", "x",
            {"project_name": "Override", "to_kebab": "shadowed", "docker": False},
        )
        ctx = generator.build_context(artifact)
        assert ctx["project_name"] == "Override"
        assert ctx["to_kebab"] == "shadowed"
        assert ctx["docker"] is False

    def test_resolved_flags_shadow_raw_schema(self, blog_schema_data, default_config, backend):
        schema = parse_schema({**blog_schema_data, "terraform": None})
        gen = ProjectGenerator(schema, default_config, backend=backend)
        artifact = next(gen.planner.plan())
        ctx = gen.build_context(artifact)
        assert ctx["terraform"] is True
        assert gen.schema.terraform is None


# ---------------------------------------------------------------------------
# render_artifact
# ---------------------------------------------------------------------------


class TestRenderArtifact:
    async def test_writes_rendered_content(self, generator, tmp_path):
        artifact = Artifact(Stage.BACKEND_FIXED, "backend/src/server.ts.j2", "backend/src/server.ts")
        out = await generator.render_artifact(tmp_path, artifact)
        assert out == tmp_path / "backend/src/server.ts"
        assert out.read_text(encoding="utf-8") == "// backend/src/server.ts.j2\n"

    async def test_render_error_gets_destination(self, blog_schema, default_config, tmp_path):
        failing = MagicMock()
        failing.render.side_effect = RenderError("a.j2", None, "boom")
        gen = ProjectGenerator(blog_schema, default_config, backend=failing, quiet=True)

        with pytest.raises(RenderError) as exc_info:
            await gen.render_artifact(tmp_path, Artifact(Stage.BACKEND_FIXED, "a.j2", "out/a.ts"))

        assert exc_info.value.destination == tmp_path / "out/a.ts"
        assert exc_info.value.reason == "boom"
        assert not (tmp_path / "out/a.ts").exists()

    async def test_template_not_found_propagates(self, blog_schema, default_config, tmp_path):
        failing = MagicMock()
        failing.render.side_effect = TemplateNotFoundError("gone.j2")
        gen = ProjectGenerator(blog_schema, default_config, backend=failing, quiet=True)

        with pytest.raises(TemplateNotFoundError):
            await gen.render_artifact(tmp_path, Artifact(Stage.BACKEND_FIXED, "gone.j2", "a.ts"))

    async def test_bad_pass_through_field_becomes_render_error(self, default_config, tmp_path):
        schema = parse_schema({
            "projectName": "Blog",
            "entities": [{"name": "Post", "tableName": "posts", "fields": 5}],
        })
        gen = ProjectGenerator(schema, default_config, quiet=True)
        artifact = next(a for a in gen.planner.plan() if a.template_id.endswith("model.ts.j2"))

        with pytest.raises(RenderError) as exc_info:
            await gen.render_artifact(tmp_path, artifact)

        assert exc_info.value.destination == tmp_path / "backend/src/models/Post.ts"
        assert exc_info.value.reason.startswith("TypeError:")

    async def test_destination_outside_root(self, generator, tmp_path, backend):
        root = tmp_path / "app"
        root.mkdir()
        artifact = Artifact(Stage.BACKEND_FIXED, "x.j2", "../escaped.ts")

        with pytest.raises(RenderError, match="escapes the output root"):
            await generator.render_artifact(root, artifact)

        assert backend.calls == []
        assert not (tmp_path / "escaped.ts").exists()


# ---------------------------------------------------------------------------
# generate
# ---------------------------------------------------------------------------


class TestGenerate:
    async def test_writes_every_planned_artifact(self, generator, tmp_path, backend):
        result = await generator.generate(tmp_path / "app")

        assert isinstance(result, GenerationResult)
        assert result.root == tmp_path / "app"
        planned = [a.destination for a in generator.planner.plan()]
        assert result.written == [tmp_path / "app" / d for d in planned]
        assert result.file_count == 43
        assert all(p.is_file() for p in result.written)
        assert [c[0] for c in backend.calls] == [a.template_id for a in generator.planner.plan()]
        assert result.duration >= 0

    async def test_clears_previous_output(self, generator, tmp_path):
        root = tmp_path / "app"
        (root / "stale").mkdir(parents=True)
        (root / "stale" / "old.ts").write_text("old", encoding="utf-8")

        await generator.generate(root)

        assert not (root / "stale").exists()

    async def test_duplicates_fail_before_touching_output(self, default_config, backend, tmp_path):
        schema = parse_schema({"projectName": "Clash", "entities": [{"name": "Auth", "tableName": "a"}]})
        gen = ProjectGenerator(schema, default_config, backend=backend, quiet=True)
        root = tmp_path / "app"
        root.mkdir()
        (root / "keep.txt").write_text("keep", encoding="utf-8")

        with pytest.raises(DuplicateArtifactError):
            await gen.generate(root)

        assert (root / "keep.txt").read_text(encoding="utf-8") == "keep"
        assert backend.calls == []

    async def test_failure_leaves_partial_tree(self, blog_schema, default_config, tmp_path):
        calls = {"n": 0}

        def render(template_id, context):
            calls["n"] += 1
            if calls["n"] == 3:
                raise RenderError(template_id, None, "boom")
            return "ok\n"

        failing = MagicMock()
        failing.render.side_effect = render
        gen = ProjectGenerator(blog_schema, default_config, backend=failing, quiet=True)

        with pytest.raises(RenderError):
            await gen.generate(tmp_path / "app")

        assert (tmp_path / "app/backend/Dockerfile").is_file()
        assert (tmp_path / "app/frontend/Dockerfile").is_file()
        assert not (tmp_path / "app/docker-compose.yml").exists()

    async def test_concurrent_calls_do_not_interleave(self, generator, tmp_path):
        first, second = await asyncio.gather(
            generator.generate(tmp_path / "app"),
            generator.generate(tmp_path / "app"),
        )
        assert first.file_count == second.file_count
        assert all(p.is_file() for p in second.written)

    async def test_progress_bar_when_not_quiet(self, blog_schema, default_config, backend, tmp_path):
        gen = ProjectGenerator(blog_schema, default_config, backend=backend)
        with patch("stackgen.scaffolder.generator.create_progress") as mock_progress:
            progress = mock_progress.return_value.__enter__.return_value
            result = await gen.generate(tmp_path / "app")

        mock_progress.assert_called_once()
        progress.add_task.assert_called_once_with("Rendering", total=result.file_count)
        assert progress.advance.call_count == result.file_count

    async def test_accepts_str_output_dir(self, generator, tmp_path):
        result = await generator.generate(str(tmp_path / "app"))
        assert isinstance(result.root, Path)
