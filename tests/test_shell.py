import subprocess
from unittest.mock import patch

import pytest

from autoswe.errors import ShellTimeoutError, ToolError
from autoswe.tools.shell import ShellExecutor

BLOCKED = ["rm -rf /", "mkfs", ":(){:|:&};:"]


def test_blocked_command_basic(tmp_path):
    executor = ShellExecutor(project_root=str(tmp_path), blocked_commands=BLOCKED)

    with pytest.raises(ToolError, match="blocked"):
        executor.execute("rm -rf /")


def test_blocked_command_with_quotes_and_spacing(tmp_path):
    executor = ShellExecutor(project_root=str(tmp_path), blocked_commands=BLOCKED)

    assert executor.block_reason('r"m"  -rf   /') is not None
    assert executor.block_reason("MKFS.ext4 /dev/sdb1") is not None


def test_safe_command_allowed(tmp_path):
    (tmp_path / "sample.txt").write_text("content", encoding="utf-8")
    executor = ShellExecutor(project_root=str(tmp_path), blocked_commands=BLOCKED)

    assert executor.execute("echo hello").strip() == "hello"
    assert "sample.txt" in executor.execute("ls")


def test_runs_in_project_root(tmp_path):
    executor = ShellExecutor(project_root=str(tmp_path))
    assert executor.execute("pwd").strip() == str(tmp_path.resolve())


def test_stderr_section(tmp_path):
    executor = ShellExecutor(project_root=str(tmp_path))

    result = executor.execute("echo out; echo err 1>&2")

    assert result == "out\n\nSTDERR:\nerr\n"


def test_failure_with_output_is_returned(tmp_path):
    executor = ShellExecutor(project_root=str(tmp_path))

    result = executor.execute("echo partial; exit 3")

    assert result.startswith("partial")
    assert result.endswith("[exit code: 3]")


def test_silent_failure_is_error(tmp_path):
    executor = ShellExecutor(project_root=str(tmp_path))

    with pytest.raises(ToolError, match="exit code 1"):
        executor.execute("false")


def test_empty_success(tmp_path):
    executor = ShellExecutor(project_root=str(tmp_path))
    assert executor.execute("true") == "(no output)"


def test_timeout_handling(tmp_path):
    executor = ShellExecutor(project_root=str(tmp_path), timeout=1)

    with patch(
        "autoswe.tools.shell.subprocess.run",
        side_effect=subprocess.TimeoutExpired(cmd="bash -c sleep 5", timeout=1),
    ):
        with pytest.raises(ShellTimeoutError) as exc:
            executor.execute("sleep 5")

    assert str(exc.value) == "bash error: timed out after 1s"
