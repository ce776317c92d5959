"""Unit tests for utility functions (nodeforge.utils).

Tests cover:
- run_command (success, failure, missing executable, timeout, env vars)
- write_text / write_json (use tmp_path)
- format_duration
- Rich output helpers and progress sinks
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from nodeforge.utils import (
    create_progress,
    format_duration,
    null_progress,
    print_banner,
    print_error,
    print_success,
    print_summary_table,
    print_warning,
    progress_sink_for,
    run_command,
    write_json,
    write_text,
)

pytestmark = pytest.mark.unit


# ---------------------------------------------------------------------------
# run_command
# ---------------------------------------------------------------------------


class TestRunCommand:
    async def test_successful_command_list(self):
        returncode, stdout, stderr = await run_command(["echo", "hello"])
        assert returncode == 0
        assert "hello" in stdout

    async def test_successful_command_string(self):
        returncode, stdout, _ = await run_command("echo world")
        assert returncode == 0
        assert "world" in stdout

    async def test_failing_command(self):
        returncode, _, _ = await run_command("exit 3")
        assert returncode == 3

    async def test_missing_executable(self):
        returncode, _, stderr = await run_command(["definitely-not-a-real-binary-xyz"])
        assert returncode == 127
        assert stderr

    async def test_cwd(self, tmp_path: Path):
        returncode, stdout, _ = await run_command(["pwd"], cwd=tmp_path)
        assert returncode == 0
        assert Path(stdout).resolve() == tmp_path.resolve()

    async def test_env_vars_merged(self):
        returncode, stdout, _ = await run_command(
            "echo $NODEFORGE_TEST_VAR", env={"NODEFORGE_TEST_VAR": "forged"}
        )
        assert returncode == 0
        assert stdout == "forged"

    async def test_timeout(self, mock_subprocess):
        proc = mock_subprocess()
        with patch("asyncio.create_subprocess_exec", return_value=proc), patch(
            "asyncio.wait_for", side_effect=asyncio.TimeoutError
        ):
            returncode, _, stderr = await run_command(["sleep", "10"], timeout=1)
        assert returncode == -1
        assert "timed out" in stderr
        proc.kill.assert_called_once()


# ---------------------------------------------------------------------------
# File helpers
# ---------------------------------------------------------------------------


class TestFileHelpers:
    async def test_write_text_creates_parents(self, tmp_path: Path):
        target = tmp_path / "a" / "b" / "file.txt"
        out = await write_text(target, "content")
        assert out == target
        assert target.read_text(encoding="utf-8") == "content"

    async def test_write_json_format(self, tmp_path: Path):
        target = await write_json(tmp_path / "data.json", {"b": 1, "a": [1, 2]})
        text = target.read_text(encoding="utf-8")
        assert text.endswith("}\n")
        assert '  "b": 1' in text
        assert json.loads(text) == {"b": 1, "a": [1, 2]}


# ---------------------------------------------------------------------------
# format_duration
# ---------------------------------------------------------------------------


class TestFormatDuration:
    @pytest.mark.parametrize(
        "seconds,expected",
        [
            (3.7, "3.7s"),
            (0, "0.0s"),
            (-5, "0.0s"),
            (65.2, "1m 5s"),
            (3661.0, "1h 1m 1s"),
        ],
    )
    def test_format(self, seconds, expected):
        assert format_duration(seconds) == expected


# ---------------------------------------------------------------------------
# Output helpers
# ---------------------------------------------------------------------------


class TestOutputHelpers:
    def test_print_helpers_do_not_raise(self):
        print_banner("nodeforge", "body")
        print_success("ok")
        print_warning("careful")
        print_error("bad")
        print_summary_table({"Project": "demo", "Duration": "1.0s"})

    def test_null_progress_accepts_messages(self):
        assert null_progress("anything") is None

    def test_progress_sink_updates_task(self):
        progress = MagicMock()
        sink = progress_sink_for(progress, 7)
        sink("Writing package.json")
        progress.update.assert_called_once_with(7, description="Writing package.json")

    def test_create_progress_context(self):
        with create_progress() as progress:
            task = progress.add_task("step", total=None)
            progress_sink_for(progress, task)("next")
