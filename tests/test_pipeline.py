"""Unit tests for the create-project flow (nodeforge.pipeline).

Covers:
- Validation before any write
- Partial-tree cleanup on GenerationError
- Post-generation ordering and warning collection
- Stub frontend notices surfacing in the result
"""

from __future__ import annotations

from pathlib import Path
from unittest.mock import AsyncMock, patch

import pytest

from nodeforge.errors import GenerationError, PostGenerationError, ProjectValidationError
from nodeforge.pipeline import CreateProjectFlow

pytestmark = pytest.mark.unit


@pytest.fixture
def post_mocks():
    """Patch every post-generation entry point used by the flow."""
    with patch(
        "nodeforge.pipeline.setup_git_repository", AsyncMock(return_value=True)
    ) as git, patch(
        "nodeforge.pipeline.check_node_toolchain",
        AsyncMock(return_value={"node": "v20.0.0", "npm": "10.0.0"}),
    ) as toolchain, patch(
        "nodeforge.pipeline.install_dependencies", AsyncMock(return_value=[])
    ) as install, patch(
        "nodeforge.pipeline.run_project_tests", AsyncMock(return_value=True)
    ) as tests, patch(
        "nodeforge.pipeline.start_dev_server", AsyncMock(return_value=4242)
    ) as dev, patch(
        "nodeforge.pipeline.open_in_editor", AsyncMock(return_value=4243)
    ) as editor:
        yield {
            "git": git,
            "toolchain": toolchain,
            "install": install,
            "tests": tests,
            "dev": dev,
            "editor": editor,
        }


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


class TestValidate:
    def test_collision_detected_before_generation(self, make_config, settings, output_dir):
        (output_dir / "demo-app").mkdir()
        (output_dir / "demo-app" / "keep.txt").write_text("mine", encoding="utf-8")
        flow = CreateProjectFlow(make_config(), settings)
        with pytest.raises(ProjectValidationError):
            flow.validate()
        assert (output_dir / "demo-app" / "keep.txt").read_text(encoding="utf-8") == "mine"

    async def test_run_rejects_collision_without_writing(self, make_config, settings, output_dir):
        (output_dir / "demo-app").mkdir()
        flow = CreateProjectFlow(make_config(), settings)
        with pytest.raises(ProjectValidationError):
            await flow.run()
        assert list((output_dir / "demo-app").iterdir()) == []

    def test_project_root(self, make_config, settings, output_dir):
        flow = CreateProjectFlow(make_config(name="x"), settings)
        assert flow.project_root == output_dir / "x"


# ---------------------------------------------------------------------------
# Generation
# ---------------------------------------------------------------------------


class TestGenerate:
    async def test_generates_tree(self, make_config, settings, output_dir):
        result = await CreateProjectFlow(make_config(), settings).generate()
        assert result.root == output_dir / "demo-app"
        assert (result.backend / "package.json").exists()

    async def test_partial_tree_removed_on_failure(self, make_config, settings, output_dir):
        flow = CreateProjectFlow(make_config(frontend="vanilla"), settings)
        with patch(
            "nodeforge.scaffolder.composer.FrontendGenerator.generate",
            AsyncMock(side_effect=OSError("disk full")),
        ):
            with pytest.raises(GenerationError) as exc_info:
                await flow.generate()
        assert exc_info.value.step == "frontend"
        assert not (output_dir / "demo-app").exists()


# ---------------------------------------------------------------------------
# Post-generation
# ---------------------------------------------------------------------------


class TestPostGenerate:
    async def test_nothing_runs_when_disabled(self, make_config, settings, post_mocks):
        await CreateProjectFlow(make_config(), settings).run()
        for mock in post_mocks.values():
            mock.assert_not_awaited()

    async def test_all_steps_run(self, make_config, settings, post_mocks):
        config = make_config(
            git_init=True, install_deps=True, features=["testing"], run_after_create=["test"]
        )
        flow = CreateProjectFlow(config, settings)
        result = await flow.run()
        post_mocks["git"].assert_awaited_once_with(result.root)
        post_mocks["install"].assert_awaited_once_with(result.root)
        post_mocks["tests"].assert_awaited_once_with(result.root)
        assert flow.warnings == []

    async def test_install_failure_is_a_warning(self, make_config, settings, post_mocks, output_dir):
        post_mocks["install"].side_effect = PostGenerationError("npm install (backend)", "exit code 1")
        flow = CreateProjectFlow(make_config(install_deps=True), settings)
        result = await flow.run()
        assert (output_dir / "demo-app" / "backend" / "package.json").exists()
        assert any("npm install (backend) failed" in w for w in result.notices)

    async def test_missing_npm_skips_install(self, make_config, settings, post_mocks):
        post_mocks["toolchain"].return_value = {"node": None, "npm": None}
        flow = CreateProjectFlow(make_config(install_deps=True), settings)
        await flow.run()
        post_mocks["install"].assert_not_awaited()
        assert any("npm was not found" in w for w in flow.warnings)

    async def test_git_without_commit_warns(self, make_config, settings, post_mocks):
        post_mocks["git"].return_value = False
        flow = CreateProjectFlow(make_config(git_init=True), settings)
        await flow.run()
        assert "git repository initialised without an initial commit" in flow.warnings

    async def test_tests_without_testing_feature_warn(self, make_config, settings, post_mocks):
        flow = CreateProjectFlow(make_config(run_after_create=["test"]), settings)
        await flow.run()
        post_mocks["tests"].assert_not_awaited()
        assert any("testing is not enabled" in w for w in flow.warnings)

    async def test_failing_tests_warn(self, make_config, settings, post_mocks):
        post_mocks["tests"].return_value = False
        config = make_config(features=["testing"], run_after_create=["test"])
        flow = CreateProjectFlow(config, settings)
        await flow.run()
        assert any("backend tests failed" in w for w in flow.warnings)

    async def test_dev_server_and_editor_launched(self, make_config, settings, post_mocks):
        config = make_config(run_after_create=["dev", "vscode"])
        flow = CreateProjectFlow(config, settings)
        result = await flow.run()
        post_mocks["dev"].assert_awaited_once_with(result.root)
        post_mocks["editor"].assert_awaited_once_with(result.root)
        assert flow.warnings == []

    async def test_missing_editor_is_a_warning(self, make_config, settings, post_mocks):
        post_mocks["editor"].side_effect = PostGenerationError("open in code", "could not start code")
        flow = CreateProjectFlow(make_config(run_after_create=["vscode"]), settings)
        await flow.run()
        post_mocks["dev"].assert_not_awaited()
        assert any("could not start code" in w for w in flow.warnings)


class TestNotices:
    async def test_stub_frontend_notice(self, make_config, settings):
        result = await CreateProjectFlow(make_config(frontend="react"), settings).run()
        assert result.frontend_status == "stub"
        assert any("React" in notice for notice in result.notices)
