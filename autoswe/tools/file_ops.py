"""File operations: read, write, list, search."""

import subprocess
from pathlib import Path
from typing import Optional

from ..errors import ToolError
from ..logger import get_logger

_log = get_logger(__name__)


class FileOps:
    SKIP_DIRS = {
        ".git", ".svn", ".hg", ".venv", "venv",
        "node_modules", "__pycache__", ".mypy_cache",
        ".pytest_cache", ".tox",
    }

    def __init__(self, project_root: str, search_timeout: int = 30):
        self.project_root = Path(project_root).resolve()
        self.search_timeout = search_timeout
        self._rg_available: Optional[bool] = None

    def _resolve(self, path: str) -> Path:
        """Relative paths hang off the project root; absolute paths are used as given."""
        p = Path(path).expanduser()
        if not p.is_absolute():
            p = self.project_root / p
        return p

    def read_file(self, path: str) -> str:
        fp = self._resolve(path)
        if not fp.exists():
            raise ToolError("read_file", f"file not found: {path}")
        if not fp.is_file():
            raise ToolError("read_file", f"not a file: {path}")
        try:
            return fp.read_text(encoding="utf-8")
        except UnicodeDecodeError:
            try:
                return fp.read_text(encoding="latin-1")
            except (OSError, UnicodeDecodeError):
                raise ToolError("read_file", f"cannot read binary file: {path}")
        except OSError as e:
            raise ToolError("read_file", f"failed to read file: {e}")

    def write_file(self, path: str, content: str) -> str:
        fp = self._resolve(path)
        try:
            fp.parent.mkdir(parents=True, exist_ok=True)
            fp.write_text(content, encoding="utf-8")
        except OSError as e:
            raise ToolError("write_file", f"failed to write file: {e}")
        return f"File written successfully to {fp}"

    def list_files(self, path: Optional[str] = None) -> str:
        fp = self._resolve(path) if path else self.project_root
        if not fp.exists():
            raise ToolError("list_files", f"not found: {path}")
        if not fp.is_dir():
            raise ToolError("list_files", f"not a directory: {path}")

        try:
            entries = sorted(fp.iterdir(), key=lambda e: (not e.is_dir(), e.name.lower()))
        except OSError as e:
            raise ToolError("list_files", f"failed to list directory: {e}")

        lines = []
        for entry in entries:
            if entry.is_dir():
                lines.append(f"[DIR]  {entry.name}")
            else:
                try:
                    size = entry.stat().st_size
                except OSError:
                    size = 0
                lines.append(f"[FILE] {entry.name} ({size} bytes)")
        return "\n".join(lines) if lines else "(empty directory)"

    def search(self, pattern: str, path: Optional[str] = None) -> str:
        fp = self._resolve(path) if path else self.project_root

        # Try ripgrep first (much faster), fallback to grep
        if self._has_ripgrep():
            cmd = ["rg", "--no-heading", "--line-number", "--color=never"]
            for d in self.SKIP_DIRS:
                cmd.extend(["-g", f"!{d}/"])
        else:
            cmd = ["grep", "-rnI", "--color=never"]
            for d in self.SKIP_DIRS:
                cmd.extend(["--exclude-dir", d])
        cmd.extend(["--", pattern, str(fp)])

        try:
            result = subprocess.run(cmd, capture_output=True, text=True,
                                    timeout=self.search_timeout, cwd=str(self.project_root))
        except subprocess.TimeoutExpired:
            raise ToolError("search", f"timed out after {self.search_timeout}s")

        # rg and grep both exit 1 on "no matches"
        if result.returncode == 1 and not result.stdout:
            return "No matches found"
        if result.returncode not in (0, 1):
            raise ToolError("search", result.stderr.strip() or f"exit code {result.returncode}")

        return result.stdout.replace(str(self.project_root) + "/", "")

    def _has_ripgrep(self) -> bool:
        """Check if ripgrep is available."""
        if self._rg_available is not None:
            return self._rg_available
        try:
            subprocess.run(["rg", "--version"], capture_output=True, timeout=2)
            self._rg_available = True
        except (FileNotFoundError, subprocess.TimeoutExpired):
            self._rg_available = False
        _log.debug("ripgrep available: %s", self._rg_available)
        return self._rg_available
