"""Structured error types for the agent system."""


class AgentError(Exception):
    """Base error for all agent operations."""
    pass


class WorkspaceError(AgentError):
    """Raised when the target directory is missing or unusable."""

    def __init__(self, path: str, reason: str = "does not exist"):
        self.path = path
        super().__init__(f"Working directory {reason}: {path}")


class PlanningError(AgentError):
    """No usable plan could be produced. Fatal to the run."""
    pass


class ExecutionError(AgentError):
    """The completion service failed while a task was running. Fatal to that task only."""

    def __init__(self, task_id: str, message: str):
        self.task_id = task_id
        super().__init__(f"{task_id}: {message}")


class ExtractionFailure(AgentError):
    """A plan marker was found but no task lines could be recognised."""
    pass


class TaskStateError(AgentError):
    """Raised on an illegal task status transition."""

    def __init__(self, task_id: str, current: str, target: str):
        self.task_id = task_id
        self.current = current
        self.target = target
        super().__init__(f"{task_id}: cannot move from '{current}' to '{target}'")


class ToolError(AgentError):
    """Error raised during tool execution."""

    def __init__(self, tool_name: str, message: str):
        self.tool_name = tool_name
        super().__init__(f"{tool_name} error: {message}")


class ShellTimeoutError(ToolError):
    """Raised when a shell command exceeds its timeout."""

    def __init__(self, timeout: int):
        self.timeout = timeout
        super().__init__("bash", f"timed out after {timeout}s")
