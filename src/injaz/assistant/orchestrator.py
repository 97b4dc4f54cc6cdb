"""Conversation loop shared by the web chat and the Telegram bot.

The model sees the history and the tool declarations. Any function calls it
emits are executed in order, their results are sent back in a single turn,
and the model's next text becomes the reply.
"""

from dataclasses import dataclass, field
from typing import Any, Protocol

import structlog

from injaz.clients.gemini import GeminiResponse
from injaz.config import get_settings
from injaz.tools.definitions import ALL_TOOLS

logger = structlog.get_logger(__name__)

_ROLE_ALIASES = {"user": "user", "assistant": "assistant", "model": "assistant"}


class LLMClient(Protocol):
    async def generate(
        self,
        system_prompt: str,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]] | None = None,
    ) -> GeminiResponse: ...


class ToolRunner(Protocol):
    async def execute(self, tool_name: str, arguments: dict[str, Any]) -> dict[str, Any]: ...


@dataclass
class AssistantReply:
    """Final text plus every tool result produced along the way."""

    content: str
    tool_results: list[dict[str, Any]] = field(default_factory=list)
    usage: dict[str, int] = field(default_factory=lambda: {"input_tokens": 0, "output_tokens": 0})


def normalize_history(messages: list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Validate chat messages and map them onto the client's roles."""
    history = []
    for message in messages:
        role = _ROLE_ALIASES.get(str(message.get("role", "")).lower())
        if role is None:
            raise ValueError(f"Unsupported message role: {message.get('role')!r}")
        history.append({"role": role, "content": message.get("content") or ""})
    return history


class ConversationOrchestrator:
    """Runs the generate, execute tools, generate again loop."""

    def __init__(
        self,
        llm: LLMClient,
        executor: ToolRunner,
        tools: list[dict[str, Any]] | None = None,
        max_tool_rounds: int | None = None,
    ):
        self.llm = llm
        self.executor = executor
        self.tools = tools if tools is not None else ALL_TOOLS
        if max_tool_rounds is None:
            max_tool_rounds = get_settings().ai_max_tool_rounds
        if max_tool_rounds < 1:
            raise ValueError("max_tool_rounds must be at least 1")
        self.max_tool_rounds = max_tool_rounds

    async def run(self, messages: list[dict[str, Any]], system_prompt: str) -> AssistantReply:
        """Answer the last user message in ``messages``.

        Raises:
            ValueError: If the history is empty or has an unknown role.
        """
        if not messages:
            raise ValueError("Conversation history is empty")

        history = normalize_history(messages)
        log = logger.bind(message_count=len(history))
        usage = {"input_tokens": 0, "output_tokens": 0}

        response = await self.llm.generate(system_prompt, history, self.tools)
        _add_usage(usage, response)

        tool_results: list[dict[str, Any]] = []
        rounds = 0
        while response.tool_calls and rounds < self.max_tool_rounds:
            rounds += 1
            history.append(
                {
                    "role": "assistant",
                    "content": response.content,
                    "tool_calls": response.tool_calls,
                }
            )
            for call in response.tool_calls:
                result = await self.executor.execute(call["name"], call.get("arguments") or {})
                tool_results.append({"name": call["name"], "response": result})
                history.append(
                    {"role": "tool_result", "tool_name": call["name"], "content": result}
                )

            log.info("tool_round_completed", round=rounds, calls=len(response.tool_calls))
            response = await self.llm.generate(system_prompt, history, self.tools)
            _add_usage(usage, response)

        if response.tool_calls:
            log.warning(
                "tool_rounds_exhausted",
                rounds=rounds,
                dropped_calls=[call["name"] for call in response.tool_calls],
            )

        log.info("assistant_replied", tool_results=len(tool_results), chars=len(response.content))
        return AssistantReply(content=response.content, tool_results=tool_results, usage=usage)


def _add_usage(total: dict[str, int], response: GeminiResponse) -> None:
    for key in total:
        total[key] += (response.usage or {}).get(key, 0)
