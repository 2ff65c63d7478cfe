from .registry import ToolRegistry
from .file_ops import FileOps
from .shell import ShellExecutor
__all__ = ["ToolRegistry", "FileOps", "ShellExecutor"]
