"""Orchestrator: plan once, run every task in order, report the outcome."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from rich.console import Console

from .agents import Executor, Planner
from .config import Config
from .errors import ExecutionError, PlanningError, WorkspaceError
from .llm import LLMAdapter
from .logger import get_logger
from .rendering import RunRenderer
from .state import Message, RunState, Task, TaskStatus
from .tools import ToolRegistry

_log = get_logger(__name__)


@dataclass
class RunSummary:
    """Final report of a run."""

    total: int
    completed: int
    failed: int
    pending: int
    exhausted: int = 0
    errors: List[str] = field(default_factory=list)
    tasks: List[Task] = field(default_factory=list)
    prompt_tokens: int = 0
    completion_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.prompt_tokens + self.completion_tokens

    @property
    def all_completed(self) -> bool:
        return self.total > 0 and self.completed == self.total

    @property
    def outcome(self) -> str:
        if self.all_completed:
            return "All tasks completed successfully!"
        return f"Partial completion: {self.completed}/{self.total} tasks done"

    @classmethod
    def from_state(cls, run_state: RunState) -> "RunSummary":
        plan = run_state.plan
        tasks = list(plan.tasks) if plan else []
        return cls(
            total=len(tasks),
            completed=plan.count(TaskStatus.COMPLETED) if plan else 0,
            failed=plan.count(TaskStatus.FAILED) if plan else 0,
            pending=plan.count(TaskStatus.PENDING) if plan else 0,
            exhausted=sum(1 for t in tasks if t.exhausted),
            errors=list(run_state.errors),
            tasks=tasks,
            prompt_tokens=run_state.prompt_tokens,
            completion_tokens=run_state.completion_tokens,
        )


class Orchestrator:
    """Sequences the Planner and the Executor over one run."""

    def __init__(self, run_state: RunState, planner: Planner, executor: Executor,
                 renderer: Optional[RunRenderer] = None):
        self.state = run_state
        self.planner = planner
        self.executor = executor
        self.renderer = renderer or RunRenderer()

    @classmethod
    def from_config(cls, config: Config, request: str, working_dir: str,
                    console: Optional[Console] = None) -> "Orchestrator":
        """Wire adapters, tools and both phases from a resolved Config."""
        renderer = RunRenderer(console)
        tools = ToolRegistry(
            project_root=working_dir,
            blocked_commands=config.blocked_commands,
            command_timeout=config.command_timeout,
        )
        planner_llm = LLMAdapter(timeout=config.llm_timeout,
                                 **config.get_planner_preset().get_llm_kwargs())
        executor_llm = LLMAdapter(timeout=config.llm_timeout,
                                  **config.get_executor_preset().get_llm_kwargs())

        planner = Planner(
            planner_llm, tools, renderer,
            max_rounds=config.planning_rounds,
            output_limit=config.planning_output_chars,
            max_plan_items=config.max_plan_items,
        )
        executor = Executor(
            executor_llm, tools, renderer,
            max_rounds=config.execution_rounds,
            output_limit=config.execution_output_chars,
            completion_phrases=config.completion_phrases,
        )
        run_state = RunState(working_dir=working_dir, original_request=request)
        return cls(run_state, planner, executor, renderer)

    def _validate_workspace(self):
        path = Path(self.state.working_dir)
        if not path.exists():
            raise WorkspaceError(self.state.working_dir)
        if not path.is_dir():
            raise WorkspaceError(self.state.working_dir, reason="is not a directory")

    def run(self) -> RunSummary:
        """Plan, then execute every task in plan order.

        Raises WorkspaceError before any completion request when the working
        directory is unusable, and PlanningError when no plan is produced.
        Task failures are recorded and never stop the run.
        """
        self._validate_workspace()
        self.state.add_message(Message.user(self.state.original_request))
        self.renderer.render_banner(self.state.working_dir, self.state.original_request)

        self.renderer.render_phase("Phase 1: Planning")
        try:
            self.planner.generate_plan(self.state)
        except PlanningError as e:
            _log.error("Planning failed: %s", e)
            self.renderer.render_fatal(f"Planning failed: {e}")
            raise

        plan = self.state.plan
        if plan is None or len(plan) == 0:
            self.renderer.render_fatal("No plan generated")
            raise PlanningError("no plan generated")
        self.renderer.render_plan(plan)

        self.renderer.render_phase("Phase 2: Execution")
        total = len(plan)
        index = 0
        while True:
            task = self.state.next_pending_task()
            if task is None:
                break
            index += 1
            self.renderer.render_task_start(index, total, task)
            try:
                self.executor.execute_task(self.state, task)
            except ExecutionError as e:
                _log.warning("Continuing after task failure: %s", e)

        summary = RunSummary.from_state(self.state)
        _log.info("Run finished: %d completed (%d exhausted), %d failed, %d pending",
                  summary.completed, summary.exhausted, summary.failed, summary.pending)
        self.state.add_message(Message.assistant(summary.outcome))
        self.renderer.render_summary(summary)
        return summary
