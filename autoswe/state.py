"""Run state: tasks, plans, tagged conversation messages and their transitions."""

import copy
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Union

from .errors import TaskStateError


class TaskStatus(Enum):
    PENDING = "pending"
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"
    FAILED = "failed"


_TERMINAL = frozenset({TaskStatus.COMPLETED, TaskStatus.FAILED})

# Allowed forward moves; everything else raises TaskStateError.
_TRANSITIONS = {
    TaskStatus.PENDING: frozenset({TaskStatus.IN_PROGRESS}),
    TaskStatus.IN_PROGRESS: _TERMINAL,
    TaskStatus.COMPLETED: frozenset(),
    TaskStatus.FAILED: frozenset(),
}


@dataclass
class Task:
    """One unit of work in a plan."""

    id: str
    description: str
    status: TaskStatus = TaskStatus.PENDING
    output: str = ""
    error: str = ""
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    exhausted: bool = False  # completed by the round budget, not by the model

    def _move(self, target: TaskStatus):
        if target not in _TRANSITIONS[self.status]:
            raise TaskStateError(self.id, self.status.value, target.value)
        self.status = target

    def start(self):
        self._move(TaskStatus.IN_PROGRESS)
        self.started_at = datetime.now()

    def complete(self, output: str, exhausted: bool = False):
        self._move(TaskStatus.COMPLETED)
        self.output = output
        self.exhausted = exhausted
        self.completed_at = datetime.now()

    def fail(self, error: str):
        self._move(TaskStatus.FAILED)
        self.error = error
        self.completed_at = datetime.now()


@dataclass(frozen=True)
class Plan:
    """Ordered, non-empty task sequence produced once per run."""

    tasks: tuple
    summary: str = ""
    created_at: datetime = field(default_factory=datetime.now)
    approved: bool = True  # there is no human approval gate

    def __post_init__(self):
        if not self.tasks:
            raise ValueError("A plan needs at least one task")
        object.__setattr__(self, "tasks", tuple(self.tasks))
        if not self.summary:
            object.__setattr__(self, "summary", f"Plan with {len(self.tasks)} tasks")

    def __len__(self) -> int:
        return len(self.tasks)

    def __iter__(self):
        return iter(self.tasks)

    def count(self, status: TaskStatus) -> int:
        return sum(1 for t in self.tasks if t.status == status)


# ── Conversation payloads ─────────────────────────────────


@dataclass
class ToolCall:
    id: str
    name: str
    arguments: Dict[str, Any]


@dataclass
class ToolResult:
    tool_call_id: str
    output: str
    is_error: bool = False


@dataclass
class Text:
    text: str


@dataclass
class ToolInvocations:
    """Assistant turn requesting one or more actions, with optional accompanying text."""
    calls: List[ToolCall]
    text: str = ""


@dataclass
class ToolResults:
    """User turn echoing action outputs back to the model."""
    results: List[ToolResult]


MessageContent = Union[Text, ToolInvocations, ToolResults]


@dataclass
class Message:
    role: str  # "user" | "assistant"
    content: MessageContent

    @classmethod
    def user(cls, text: str) -> "Message":
        return cls(role="user", content=Text(text))

    @classmethod
    def assistant(cls, text: str) -> "Message":
        return cls(role="assistant", content=Text(text))


# ── Run state ─────────────────────────────────────────────


@dataclass
class RunState:
    """Mutable record of one agent run, owned by the orchestrator."""

    working_dir: str
    original_request: str
    messages: List[Message] = field(default_factory=list)
    plan: Optional[Plan] = None
    current_task: Optional[Task] = None
    completed_tasks: List[Task] = field(default_factory=list)
    errors: List[str] = field(default_factory=list)
    prompt_tokens: int = 0
    completion_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.completion_tokens

    def add_message(self, message: Message):
        self.messages.append(message)

    def record_usage(self, usage: Optional[Dict[str, int]]):
        if not usage:
            return
        self.prompt_tokens += usage.get("prompt_tokens", 0) or 0
        self.completion_tokens += usage.get("completion_tokens", 0) or 0

    def install_plan(self, plan: Plan):
        if self.plan is not None:
            raise ValueError("A plan is already installed for this run")
        self.plan = plan

    def start_task(self, task: Task):
        task.start()
        self.current_task = task

    def complete_task(self, task: Task, output: str, exhausted: bool = False):
        task.complete(output, exhausted=exhausted)
        # Snapshot so later reads are independent of the live plan task.
        self.completed_tasks.append(copy.deepcopy(task))
        self.current_task = None

    def fail_task(self, task: Task, error: str):
        task.fail(error)
        self.errors.append(f"{task.id}: {error}")
        self.current_task = None

    def next_pending_task(self) -> Optional[Task]:
        if self.plan is None:
            return None
        for task in self.plan.tasks:
            if task.status == TaskStatus.PENDING:
                return task
        return None
