"""Shell command execution with a blocklist guard."""

import os
import re
import subprocess
from pathlib import Path
from typing import List, Optional

from ..errors import ShellTimeoutError, ToolError
from ..logger import get_logger

_log = get_logger(__name__)


class ShellExecutor:
    """Run ``bash -c`` in the project root, refusing configured blocked commands."""

    def __init__(self, project_root: str, blocked_commands: Optional[List[str]] = None,
                 timeout: int = 120):
        self.project_root = Path(project_root).resolve()
        self.timeout = timeout
        self.blocked = [b for b in (blocked_commands or []) if b.strip()]
        self._compact_blocked = [(b, self._compact(b)) for b in self.blocked]

    @staticmethod
    def _compact(command: str) -> str:
        """Drop quotes, escapes and whitespace so `r"m" -rf  /` still matches `rm -rf /`."""
        normalized = command.lower().replace("\\\n", " ")
        normalized = re.sub(r"[\'\"`\\]", "", normalized)
        return re.sub(r"\s+", "", normalized)

    def block_reason(self, command: str) -> Optional[str]:
        compact = self._compact(command)
        for raw, blocked in self._compact_blocked:
            if blocked and blocked in compact:
                return f"matches blocked command '{raw}'"
        return None

    def execute(self, command: str) -> str:
        reason = self.block_reason(command)
        if reason:
            _log.warning("Command blocked: %s", reason)
            raise ToolError("bash", f"blocked: {reason}")

        _log.debug("Executing command: %s", command[:100])

        try:
            result = subprocess.run(
                ["bash", "-c", command],
                capture_output=True,
                text=True,
                timeout=self.timeout,
                cwd=str(self.project_root),
                env={**os.environ, "TERM": "dumb"},
            )
        except subprocess.TimeoutExpired:
            raise ShellTimeoutError(self.timeout)
        except OSError as e:
            raise ToolError("bash", f"{type(e).__name__}: {e}")

        output = result.stdout
        if result.stderr:
            output += "\nSTDERR:\n" + result.stderr

        # A failing command that printed something is still useful to the model.
        if result.returncode != 0 and not output.strip():
            raise ToolError("bash", f"command failed with exit code {result.returncode}")
        if result.returncode != 0:
            output += f"\n[exit code: {result.returncode}]"

        return output if output.strip() else "(no output)"
