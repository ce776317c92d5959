"""Shared pytest fixtures for the nodeforge test suite.

Provides reusable fixtures for:
- Output directories for generated projects
- Ready-made ``ProjectConfig`` instances for the common scenarios
- Settings pointed at a temporary directory
- Mock subprocess helpers
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable
from unittest.mock import AsyncMock, MagicMock

import pytest

from nodeforge.config import ProjectConfig, Settings, build_config


# ---------------------------------------------------------------------------
# Paths & Directories
# ---------------------------------------------------------------------------

@pytest.fixture
def output_dir(tmp_path: Path) -> Path:
    """Empty parent directory that generated projects are written into."""
    out = tmp_path / "output"
    out.mkdir()
    yield out


@pytest.fixture
def settings(output_dir: Path) -> Settings:
    """Settings writing into ``output_dir``."""
    return Settings(output_dir=output_dir)


# ---------------------------------------------------------------------------
# Configurations
# ---------------------------------------------------------------------------

@pytest.fixture
def make_config() -> Callable[..., ProjectConfig]:
    """Factory building a ``ProjectConfig`` with test-friendly defaults.

    Post-generation side effects (git, npm install) are off unless a test
    asks for them.

    Usage:
        def test_x(make_config):
            config = make_config(name="x", frontend="vue")
    """
    def factory(**overrides: Any) -> ProjectConfig:
        kwargs: dict[str, Any] = {
            "name": "demo-app",
            "git_init": False,
            "install_deps": False,
        }
        kwargs.update(overrides)
        return build_config(**kwargs)

    return factory


@pytest.fixture
def api_config(make_config) -> ProjectConfig:
    """TypeScript API with postgres, auth and jest tests, no frontend."""
    return make_config(
        name="demo-api",
        backend_lang="TypeScript",
        frontend="none",
        database="postgres",
        features={"auth", "testing"},
    )


@pytest.fixture
def web_config(make_config) -> ProjectConfig:
    """Vanilla frontend talking to a backend on port 4000."""
    return make_config(
        name="demo-web",
        frontend="vanilla",
        port=4000,
        connect_to_backend=True,
    )


# ---------------------------------------------------------------------------
# Mock Subprocess (generic)
# ---------------------------------------------------------------------------

@pytest.fixture
def mock_subprocess():
    """Mock asyncio subprocess for testing command execution.

    Returns a factory that creates mock subprocess instances with configurable
    stdout, stderr, and return codes.

    Usage:
        def test_command(mock_subprocess):
            proc = mock_subprocess(stdout="output", returncode=0)
            with patch("asyncio.create_subprocess_exec", return_value=proc):
                ...
    """
    def factory(
        stdout: str = "",
        stderr: str = "",
        returncode: int = 0,
    ) -> AsyncMock:
        mock_proc = AsyncMock()
        mock_proc.communicate = AsyncMock(
            return_value=(stdout.encode("utf-8"), stderr.encode("utf-8"))
        )
        mock_proc.returncode = returncode
        mock_proc.pid = 99999
        mock_proc.kill = MagicMock()
        mock_proc.wait = AsyncMock(return_value=returncode)
        return mock_proc

    return factory
