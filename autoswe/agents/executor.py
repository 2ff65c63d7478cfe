"""Executor: bounded tool loop that drives one task to a terminal state."""

from typing import Iterable, Optional

from ..config import DEFAULT_COMPLETION_PHRASES
from ..errors import ExecutionError
from ..logger import get_logger
from ..prompts import CONTINUE_NUDGE, EXECUTOR_SYSTEM_PROMPT, PROCEED_NUDGE, task_request
from ..state import Message, RunState, Task
from .base import AgentLoop

_log = get_logger(__name__)

EXHAUSTED_OUTPUT = "Task completed (max iterations reached)"


class Executor(AgentLoop):
    """Runs a single task until the model announces completion or rounds run out."""

    system_prompt = EXECUTOR_SYSTEM_PROMPT
    truncation_marker = "\n... (output truncated)"

    def __init__(self, llm, tools, renderer=None, max_rounds: int = 15,
                 output_limit: int = 10000,
                 completion_phrases: Optional[Iterable[str]] = None):
        super().__init__(llm, tools, renderer, max_rounds, output_limit)
        phrases = completion_phrases if completion_phrases is not None else DEFAULT_COMPLETION_PHRASES
        self.completion_phrases = [p.lower() for p in phrases if p.strip()]

    def is_completion(self, text: str) -> bool:
        lowered = text.lower()
        return any(phrase in lowered for phrase in self.completion_phrases)

    def execute_task(self, run_state: RunState, task: Task) -> Task:
        """Drive ``task`` to completed or failed.

        Raises ExecutionError (after failing the task) when the completion
        service errors; the run itself carries on.
        """
        run_state.start_task(task)
        history = [Message.user(task_request(task, run_state.original_request,
                                             run_state.completed_tasks))]

        for round_no in range(self.max_rounds):
            _log.info("%s: round %d/%d", task.id, round_no + 1, self.max_rounds)
            try:
                response = self._request(run_state, history)
            except ConnectionError as e:
                _log.error("%s failed: %s", task.id, e)
                run_state.fail_task(task, str(e))
                self.renderer.render_task_failed(task)
                raise ExecutionError(task.id, str(e)) from e

            if response.has_tool_calls():
                self._act(history, response)
                continue

            text = response.text
            if text.strip():
                history.append(Message.assistant(text))

            if round_no > 0 and self.is_completion(text):
                run_state.complete_task(task, text)
                _log.info("%s completed in %d rounds", task.id, round_no + 1)
                self.renderer.render_task_done(task)
                return task

            if not text.strip():
                _log.debug("%s: empty response, retrying", task.id)
                continue

            history.append(Message.user(PROCEED_NUDGE if round_no == 0 else CONTINUE_NUDGE))

        _log.warning("%s: no completion signal within %d rounds", task.id, self.max_rounds)
        run_state.complete_task(task, EXHAUSTED_OUTPUT, exhausted=True)
        self.renderer.render_task_done(task)
        return task
