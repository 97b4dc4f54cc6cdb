"""Tests for the assistant conversation loop and prompts."""

from unittest.mock import AsyncMock

import pytest

from injaz.assistant.orchestrator import ConversationOrchestrator, normalize_history
from injaz.assistant.prompts import DEFAULT_SYSTEM_PROMPT, TELEGRAM_INSTRUCTIONS, build_system_prompt
from injaz.clients.gemini import GeminiResponse


def _reply(content="", tool_calls=None, input_tokens=10, output_tokens=3):
    return GeminiResponse(
        content=content,
        tool_calls=tool_calls or [],
        stop_reason="tool_use" if tool_calls else "end_turn",
        usage={"input_tokens": input_tokens, "output_tokens": output_tokens},
    )


@pytest.fixture
def executor():
    runner = AsyncMock()
    runner.execute = AsyncMock(return_value={"success": True, "result": {"message": "ok"}})
    return runner


class TestNormalizeHistory:
    def test_model_role_maps_to_assistant(self):
        history = normalize_history(
            [{"role": "user", "content": "hi"}, {"role": "model", "content": None}]
        )

        assert history == [
            {"role": "user", "content": "hi"},
            {"role": "assistant", "content": ""},
        ]

    def test_unknown_role_rejected(self):
        with pytest.raises(ValueError, match="system"):
            normalize_history([{"role": "system", "content": "x"}])


class TestConversationOrchestrator:
    async def test_plain_answer_skips_tools(self, mock_llm, executor):
        mock_llm.generate.return_value = _reply("Revenue is up.")
        orchestrator = ConversationOrchestrator(mock_llm, executor)

        reply = await orchestrator.run([{"role": "user", "content": "How are we doing?"}], "sys")

        assert reply.content == "Revenue is up."
        assert reply.tool_results == []
        executor.execute.assert_not_called()
        mock_llm.generate.assert_awaited_once()

    def test_zero_tool_rounds_rejected(self, mock_llm, executor):
        with pytest.raises(ValueError, match="max_tool_rounds"):
            ConversationOrchestrator(mock_llm, executor, max_tool_rounds=0)

    def test_explicit_tool_rounds_override_settings(self, mock_llm, executor):
        orchestrator = ConversationOrchestrator(mock_llm, executor, max_tool_rounds=3)

        assert orchestrator.max_tool_rounds == 3

    async def test_tool_calls_run_in_order_then_follow_up(self, mock_llm, executor):
        calls = [
            {"id": "1", "name": "lookup_party", "arguments": {"name": "acme"}},
            {"id": "2", "name": "get_dashboard", "arguments": {}},
        ]
        mock_llm.generate.side_effect = [
            _reply(tool_calls=calls),
            _reply("Acme is a client; revenue is 10k.", input_tokens=20, output_tokens=8),
        ]
        orchestrator = ConversationOrchestrator(mock_llm, executor)

        reply = await orchestrator.run([{"role": "user", "content": "Who is Acme?"}], "sys")

        assert reply.content == "Acme is a client; revenue is 10k."
        assert [r["name"] for r in reply.tool_results] == ["lookup_party", "get_dashboard"]
        assert reply.tool_results[0]["response"]["success"] is True
        assert [c.args for c in executor.execute.await_args_list] == [
            ("lookup_party", {"name": "acme"}),
            ("get_dashboard", {}),
        ]
        assert reply.usage == {"input_tokens": 30, "output_tokens": 11}

        follow_up_history = mock_llm.generate.await_args_list[1].args[1]
        assert [m["role"] for m in follow_up_history] == [
            "user",
            "assistant",
            "tool_result",
            "tool_result",
        ]
        assert follow_up_history[1]["tool_calls"] == calls
        assert follow_up_history[2]["tool_name"] == "lookup_party"

    async def test_single_round_by_default(self, mock_llm, executor):
        call = [{"id": "1", "name": "get_dashboard", "arguments": {}}]
        mock_llm.generate.side_effect = [
            _reply(tool_calls=call),
            _reply("Checking again", tool_calls=call),
        ]
        orchestrator = ConversationOrchestrator(mock_llm, executor)

        reply = await orchestrator.run([{"role": "user", "content": "stats"}], "sys")

        assert reply.content == "Checking again"
        assert executor.execute.await_count == 1
        assert mock_llm.generate.await_count == 2

    async def test_more_rounds_when_configured(self, mock_llm, executor):
        call = [{"id": "1", "name": "get_dashboard", "arguments": {}}]
        mock_llm.generate.side_effect = [
            _reply(tool_calls=call),
            _reply(tool_calls=call),
            _reply("Done"),
        ]
        orchestrator = ConversationOrchestrator(mock_llm, executor, max_tool_rounds=3)

        reply = await orchestrator.run([{"role": "user", "content": "stats"}], "sys")

        assert reply.content == "Done"
        assert executor.execute.await_count == 2

    async def test_tools_are_passed_to_model(self, mock_llm, executor):
        mock_llm.generate.return_value = _reply("ok")
        tools = [{"name": "only_tool", "description": "x", "input_schema": {"type": "object"}}]
        orchestrator = ConversationOrchestrator(mock_llm, executor, tools=tools)

        await orchestrator.run([{"role": "user", "content": "hi"}], "sys")

        assert mock_llm.generate.await_args.args == ("sys", [{"role": "user", "content": "hi"}], tools)

    async def test_empty_history_rejected(self, mock_llm, executor):
        orchestrator = ConversationOrchestrator(mock_llm, executor)

        with pytest.raises(ValueError):
            await orchestrator.run([], "sys")


class TestPrompts:
    def test_default_prompt(self):
        assert build_system_prompt() == DEFAULT_SYSTEM_PROMPT

    def test_extra_context_and_telegram(self):
        prompt = build_system_prompt("We invoice in USD.", telegram=True)

        assert prompt.startswith(DEFAULT_SYSTEM_PROMPT)
        assert "\n\nAdditional context:\nWe invoice in USD." in prompt
        assert prompt.endswith(TELEGRAM_INSTRUCTIONS)
        assert "create_draft_payment" in prompt
