import subprocess
from unittest.mock import patch

import pytest

from autoswe.errors import ToolError
from autoswe.tools.file_ops import FileOps


@pytest.fixture
def ops(tmp_path):
    return FileOps(str(tmp_path))


class TestReadWrite:
    def test_write_creates_parents(self, ops, tmp_path):
        msg = ops.write_file("pkg/sub/mod.py", "x = 1\n")

        target = tmp_path / "pkg" / "sub" / "mod.py"
        assert target.read_text(encoding="utf-8") == "x = 1\n"
        assert msg.startswith("File written successfully to ")
        assert msg.endswith("mod.py")

    def test_read_relative_and_absolute(self, ops, tmp_path):
        (tmp_path / "notes.txt").write_text("hello", encoding="utf-8")
        assert ops.read_file("notes.txt") == "hello"
        assert ops.read_file(str(tmp_path / "notes.txt")) == "hello"

    def test_read_missing_file(self, ops):
        with pytest.raises(ToolError, match="file not found"):
            ops.read_file("nope.txt")

    def test_read_directory_is_error(self, ops, tmp_path):
        (tmp_path / "pkg").mkdir()
        with pytest.raises(ToolError, match="not a file"):
            ops.read_file("pkg")

    def test_read_latin1_fallback(self, ops, tmp_path):
        (tmp_path / "legacy.txt").write_bytes(b"caf\xe9")
        assert ops.read_file("legacy.txt") == "caf\xe9"


class TestListFiles:
    def test_dirs_first_with_sizes(self, ops, tmp_path):
        (tmp_path / "b.txt").write_text("12345", encoding="utf-8")
        (tmp_path / "a_dir").mkdir()
        (tmp_path / "A.md").write_text("", encoding="utf-8")

        lines = ops.list_files().splitlines()

        assert lines == ["[DIR]  a_dir", "[FILE] A.md (0 bytes)", "[FILE] b.txt (5 bytes)"]

    def test_subdirectory(self, ops, tmp_path):
        (tmp_path / "src").mkdir()
        (tmp_path / "src" / "main.py").write_text("pass\n", encoding="utf-8")
        assert ops.list_files("src") == "[FILE] main.py (5 bytes)"

    def test_empty_directory(self, ops):
        assert ops.list_files() == "(empty directory)"

    def test_missing_directory(self, ops):
        with pytest.raises(ToolError, match="not found"):
            ops.list_files("ghost")


class TestSearch:
    def test_finds_matches_with_relative_paths(self, ops, tmp_path):
        (tmp_path / "app.py").write_text("def health():\n    return 'ok'\n", encoding="utf-8")

        result = ops.search("def health")

        assert "app.py:1:def health():" in result
        assert str(tmp_path) not in result

    def test_no_matches(self, ops, tmp_path):
        (tmp_path / "app.py").write_text("pass\n", encoding="utf-8")
        assert ops.search("zzz_not_here") == "No matches found"

    def test_skips_vendor_dirs(self, ops, tmp_path):
        (tmp_path / "node_modules").mkdir()
        (tmp_path / "node_modules" / "lib.js").write_text("needle\n", encoding="utf-8")
        assert ops.search("needle") == "No matches found"

    def test_grep_fallback(self, ops, tmp_path):
        (tmp_path / "a.txt").write_text("needle here\n", encoding="utf-8")
        ops._rg_available = False
        assert "a.txt:1:needle here" in ops.search("needle")

    def test_timeout_is_tool_error(self, ops):
        with patch(
            "autoswe.tools.file_ops.subprocess.run",
            side_effect=subprocess.TimeoutExpired(cmd="rg", timeout=30),
        ):
            ops._rg_available = True
            with pytest.raises(ToolError, match="timed out"):
                ops.search("anything")
