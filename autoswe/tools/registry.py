"""Tool registry: dict-based dispatch over the fixed action vocabulary."""
from typing import Any, Callable, Dict, List, Optional

from ..errors import ToolError
from ..logger import get_logger
from .file_ops import FileOps
from .shell import ShellExecutor

_log = get_logger(__name__)


class _ToolEntry:
    """Single tool registration: handler + schema."""
    __slots__ = ("handler", "schema")

    def __init__(self, handler: Callable, schema: dict):
        self.handler = handler
        self.schema = schema


def _schema(name: str, description: str, properties: dict,
            required: list) -> dict:
    """Build an OpenAI-compatible function schema."""
    return {
        "type": "function",
        "function": {
            "name": name,
            "description": description,
            "parameters": {
                "type": "object",
                "properties": properties,
                "required": required,
            },
        },
    }


# Shorthand helper for property definitions
_S = lambda desc, **kw: {"type": "string", "description": desc, **kw}


class ToolRegistry:
    """Action executor: ``execute(name, args)`` returns text or raises ToolError."""

    TOOL_NAMES = ("bash", "read_file", "write_file", "list_files", "search")

    def __init__(self, project_root: str, blocked_commands: Optional[list] = None,
                 command_timeout: int = 120):
        self.project_root = project_root
        self.file_ops = FileOps(project_root, search_timeout=command_timeout)
        self.shell = ShellExecutor(project_root, blocked_commands, command_timeout)
        self._tools: Dict[str, _ToolEntry] = {}
        self._register_tools()

    def _register_tools(self):
        """Register every tool with its schema and handler."""
        f = self.file_ops
        T = _ToolEntry
        S = _schema

        self._tools["bash"] = T(
            handler=lambda **a: self.shell.execute(a["command"]),
            schema=S("bash", "Execute bash commands in the working directory",
                     {"command": _S("The bash command to execute")},
                     ["command"]),
        )
        self._tools["read_file"] = T(
            handler=lambda **a: f.read_file(a["path"]),
            schema=S("read_file", "Read the contents of a file",
                     {"path": _S("The path to the file to read")},
                     ["path"]),
        )
        self._tools["write_file"] = T(
            handler=lambda **a: f.write_file(a["path"], a["content"]),
            schema=S("write_file", "Write content to a file, creating parent directories as needed",
                     {"path": _S("The path to the file to write"),
                      "content": _S("The content to write to the file")},
                     ["path", "content"]),
        )
        self._tools["list_files"] = T(
            handler=lambda **a: f.list_files(a.get("path")),
            schema=S("list_files", "List files and directories in a given path",
                     {"path": _S("The directory path to list (optional, defaults to working directory)")},
                     []),
        )
        self._tools["search"] = T(
            handler=lambda **a: f.search(a["pattern"], a.get("path")),
            schema=S("search", "Search for a pattern in files using grep/ripgrep",
                     {"pattern": _S("The pattern to search for"),
                      "path": _S("The path to search in (optional, defaults to working directory)")},
                     ["pattern"]),
        )

    @property
    def schemas(self) -> List[dict]:
        return [entry.schema for entry in self._tools.values()]

    def execute(self, tool_name: str, arguments: Dict[str, Any]) -> str:
        """Dispatch a tool call by name."""
        entry = self._tools.get(tool_name)
        if not entry:
            raise ToolError(tool_name, f"unknown tool: {tool_name}")
        if "_raw" in arguments:
            raise ToolError(tool_name, f"arguments are not valid JSON: {arguments['_raw']!r}")

        try:
            return entry.handler(**arguments)
        except ToolError:
            raise
        except KeyError as e:
            raise ToolError(tool_name, f"missing argument: {e}")
        except TypeError as e:
            raise ToolError(tool_name, f"bad arguments: {e}")
        except Exception as e:
            _log.exception("Unexpected failure in tool %s", tool_name)
            raise ToolError(tool_name, f"{type(e).__name__}: {e}")

    @staticmethod
    def describe_call(tool_name: str, arguments: Dict[str, Any]) -> str:
        """One-line summary of a call for console output."""
        match tool_name:
            case "bash":
                cmd = str(arguments.get("command", ""))
                return cmd[:100] + "..." if len(cmd) > 100 else cmd
            case "read_file" | "write_file":
                return str(arguments.get("path", ""))
            case "search":
                return f"'{arguments.get('pattern', '')}'"
            case "list_files":
                return str(arguments.get("path") or "current directory")
            case _:
                return ""
