"""Planner: bounded exploration of the working directory, then plan extraction."""

from typing import List, Optional

from ..errors import ExtractionFailure, PlanningError
from ..logger import get_logger
from ..plan_extractor import extract_plan
from ..prompts import FINAL_PLAN_REQUEST, PLAN_FORMAT_NUDGE, PLANNER_SYSTEM_PROMPT, planning_request
from ..state import Message, Plan, RunState
from .base import AgentLoop

_log = get_logger(__name__)


class Planner(AgentLoop):
    """Explores with tools for up to ``max_rounds`` rounds and installs a Plan."""

    system_prompt = PLANNER_SYSTEM_PROMPT
    truncation_marker = "\n... (truncated)"
    exploring = True

    def __init__(self, llm, tools, renderer=None, max_rounds: int = 5,
                 output_limit: int = 5000, max_plan_items: int = 0):
        super().__init__(llm, tools, renderer, max_rounds, output_limit)
        self.max_plan_items = max_plan_items

    def generate_plan(self, run_state: RunState) -> Plan:
        """Install a plan into ``run_state`` or raise PlanningError.

        The exploration conversation is private to this call; nothing from it
        is written to ``run_state.messages``.
        """
        self.renderer.render_note("Analyzing codebase and generating plan...")
        history = [Message.user(planning_request(run_state.original_request))]

        try:
            plan = self._explore(run_state, history)
            if plan is None:
                plan = self._request_final_plan(run_state, history)
        except ConnectionError as e:
            _log.error("Planning aborted by completion service error: %s", e)
            raise PlanningError(f"failed to get LLM response: {e}") from e

        if plan is None:
            _log.error("No plan after %d exploration rounds and a final request", self.max_rounds)
            raise PlanningError(
                f"failed to generate a valid plan after {self.max_rounds} exploration rounds")

        run_state.install_plan(plan)
        _log.info("Installed plan with %d tasks", len(plan))
        self.renderer.render_note(f"Generated plan with {len(plan)} tasks")
        return plan

    def _explore(self, run_state: RunState, history: List[Message]) -> Optional[Plan]:
        for round_no in range(self.max_rounds):
            _log.info("Planning round %d/%d", round_no + 1, self.max_rounds)
            response = self._request(run_state, history)

            if response.has_tool_calls():
                self._act(history, response)
                continue

            text = response.text
            plan = self._try_extract(text)
            if plan is not None:
                return plan
            if not text.strip():
                _log.debug("Empty planning response, retrying")
                continue

            history.append(Message.assistant(text))
            # The final request supplies its own instruction after the last round.
            if round_no < self.max_rounds - 1:
                history.append(Message.user(PLAN_FORMAT_NUDGE))
        return None

    def _request_final_plan(self, run_state: RunState, history: List[Message]) -> Optional[Plan]:
        _log.info("Exploration budget spent, requesting final plan")
        history.append(Message.user(FINAL_PLAN_REQUEST))
        response = self._request(run_state, history, tool_choice="none")
        return self._try_extract(response.text)

    def _try_extract(self, text: str) -> Optional[Plan]:
        try:
            return extract_plan(text, self.max_plan_items)
        except ExtractionFailure as e:
            _log.warning("Plan marker found but unusable: %s", e)
            return None
