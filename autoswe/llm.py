"""LLM adapter via litellm."""

import json
import uuid
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import litellm

from .logger import get_logger
from .state import Message, Text, ToolCall, ToolInvocations, ToolResults

litellm.suppress_debug_info = True

_log = get_logger(__name__)


@dataclass
class LLMResponse:
    content: Optional[str] = None
    tool_calls: Optional[List[ToolCall]] = None
    usage: Optional[Dict] = None

    @property
    def text(self) -> str:
        return self.content or ""

    def has_tool_calls(self) -> bool:
        return bool(self.tool_calls)


def to_openai_messages(history: List[Message]) -> List[Dict[str, Any]]:
    """Flatten tagged messages into the OpenAI chat format litellm expects."""
    out: List[Dict[str, Any]] = []
    for msg in history:
        match msg.content:
            case Text(text=text):
                out.append({"role": msg.role, "content": text})
            case ToolInvocations(calls=calls, text=text):
                out.append({
                    "role": "assistant",
                    "content": text or None,
                    "tool_calls": [
                        {"id": c.id, "type": "function",
                         "function": {"name": c.name, "arguments": json.dumps(c.arguments)}}
                        for c in calls
                    ],
                })
            case ToolResults(results=results):
                for r in results:
                    content = r.output
                    if r.is_error and not content.startswith("Error:"):
                        content = f"Error: {content}"
                    out.append({"role": "tool", "tool_call_id": r.tool_call_id, "content": content})
            case _:
                raise TypeError(f"Unsupported message content: {type(msg.content).__name__}")
    return out


class LLMAdapter:
    """Completion service. Credentials and deadlines are passed in explicitly,
    never read from the process environment here."""

    def __init__(self, model: str, temperature: float = 0.0,
                 max_tokens: int = 8192, api_base: Optional[str] = None,
                 api_key: Optional[str] = None, region: Optional[str] = None,
                 timeout: Optional[float] = None):
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens
        self.api_base = api_base
        self.api_key = api_key
        self.region = region
        self.timeout = timeout
        self._seen_call_ids: set = set()

    def _build_kwargs(self, messages: List[Dict[str, Any]],
                      tools: Optional[List[Dict]],
                      tool_choice: str = "auto") -> Dict[str, Any]:
        kwargs: Dict[str, Any] = {
            "model": self.model, "messages": messages,
            "temperature": self.temperature, "max_tokens": self.max_tokens,
        }
        if tools:
            kwargs["tools"] = tools
            kwargs["tool_choice"] = tool_choice
        if self.api_base:
            kwargs["api_base"] = self.api_base
        if self.api_key:
            kwargs["api_key"] = self.api_key
        if self.region:
            kwargs["aws_region_name"] = self.region
        if self.timeout:
            kwargs["timeout"] = self.timeout
        return kwargs

    def chat(self, history: List[Message], system: str = "",
             tools: Optional[List[Dict]] = None,
             tool_choice: str = "auto") -> LLMResponse:
        """Send one request. ``tool_choice="none"`` keeps schemas visible but forbids calls."""
        messages = to_openai_messages(history)
        if system:
            messages.insert(0, {"role": "system", "content": system})
        kwargs = self._build_kwargs(messages, tools, tool_choice)

        try:
            response = litellm.completion(**kwargs)
        except litellm.exceptions.AuthenticationError as e:
            raise ConnectionError(f"Auth failed. Check API key.\n{e}")
        except litellm.exceptions.Timeout as e:
            raise ConnectionError(f"LLM request timed out after {self.timeout}s: {e}")
        except litellm.exceptions.APIConnectionError as e:
            raise ConnectionError(f"Cannot connect: model={self.model}, base={self.api_base or 'default'}\n{e}")
        except Exception as e:
            raise ConnectionError(f"LLM error: {type(e).__name__}: {e}")

        return self._parse_response(response)

    def _parse_response(self, response) -> LLMResponse:
        if not response.choices:
            raise ConnectionError("LLM error: response contained no choices")
        msg = response.choices[0].message

        tool_calls = None
        if getattr(msg, "tool_calls", None):
            tool_calls = []
            for tc in msg.tool_calls:
                try:
                    args = json.loads(tc.function.arguments or "{}")
                except json.JSONDecodeError:
                    args = {"_raw": tc.function.arguments}
                if not isinstance(args, dict):
                    args = {"_raw": args}
                call_id = tc.id
                # Some local servers repeat ids like "call_0" across rounds.
                if not call_id or call_id in self._seen_call_ids:
                    call_id = f"call_{uuid.uuid4().hex[:12]}"
                self._seen_call_ids.add(call_id)
                tool_calls.append(ToolCall(id=call_id, name=tc.function.name, arguments=args))

        usage = None
        if getattr(response, "usage", None):
            usage = {"prompt_tokens": response.usage.prompt_tokens,
                     "completion_tokens": response.usage.completion_tokens,
                     "total_tokens": response.usage.total_tokens}

        _log.debug("LLM response: %d chars, %d tool call(s)",
                   len(msg.content or ""), len(tool_calls or []))
        return LLMResponse(content=msg.content, tool_calls=tool_calls, usage=usage)
