"""Shared plumbing for the planning and execution loops."""

from typing import List, Optional

from ..errors import ToolError
from ..llm import LLMAdapter, LLMResponse
from ..logger import get_logger
from ..rendering import RunRenderer
from ..state import Message, RunState, ToolCall, ToolInvocations, ToolResult, ToolResults
from ..tools.registry import ToolRegistry

_log = get_logger(__name__)


def truncate_output(output: str, limit: int, marker: str) -> str:
    if limit and len(output) > limit:
        return output[:limit] + marker
    return output


class AgentLoop:
    """Base for a bounded request/act loop against the completion service."""

    system_prompt: str = ""
    truncation_marker: str = "\n... (truncated)"
    exploring: bool = False

    def __init__(self, llm: LLMAdapter, tools: ToolRegistry,
                 renderer: Optional[RunRenderer] = None,
                 max_rounds: int = 5, output_limit: int = 5000):
        self.llm = llm
        self.tools = tools
        self.renderer = renderer or RunRenderer()
        self.max_rounds = max_rounds
        self.output_limit = output_limit

    def _request(self, run_state: RunState, history: List[Message],
                 tool_choice: str = "auto") -> LLMResponse:
        """One completion call; ``ConnectionError`` propagates to the caller."""
        response = self.llm.chat(
            history,
            system=self.system_prompt,
            tools=self.tools.schemas,
            tool_choice=tool_choice,
        )
        run_state.record_usage(response.usage)
        return response

    def _run_tool_calls(self, calls: List[ToolCall]) -> ToolResults:
        """Execute each call in order; failures become erroring results."""
        results = []
        for call in calls:
            self.renderer.render_tool_call(call.name, call.arguments, exploring=self.exploring)
            try:
                output = self.tools.execute(call.name, call.arguments)
                is_error = False
            except ToolError as e:
                _log.warning("Tool %s failed: %s", call.name, e)
                self.renderer.render_tool_error(str(e))
                output = f"Error: {e}"
                is_error = True
            output = truncate_output(output, self.output_limit, self.truncation_marker)
            results.append(ToolResult(tool_call_id=call.id, output=output, is_error=is_error))
        return ToolResults(results)

    def _act(self, history: List[Message], response: LLMResponse):
        """Append the assistant's invocation turn and the matching results turn."""
        history.append(Message(
            role="assistant",
            content=ToolInvocations(calls=list(response.tool_calls), text=response.text),
        ))
        history.append(Message(role="user", content=self._run_tool_calls(response.tool_calls)))
