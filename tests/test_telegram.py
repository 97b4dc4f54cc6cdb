"""Tests for the Telegram client and bot bridge."""

import json
from unittest.mock import AsyncMock

import httpx
import pytest

from injaz.assistant.prompts import TELEGRAM_INSTRUCTIONS
from injaz.clients.gemini import GeminiResponse
from injaz.config.settings import get_settings
from injaz.telegram import TelegramAPIError, TelegramBridge, TelegramClient

USER_ID = "user-1"


def _reply(content: str) -> GeminiResponse:
    return GeminiResponse(content=content, tool_calls=[], stop_reason="end_turn", usage={})


def _mock_transport_client(client: TelegramClient, handler) -> TelegramClient:
    client._client = httpx.AsyncClient(
        base_url=client.base_url, transport=httpx.MockTransport(handler)
    )
    return client


@pytest.fixture
def fresh_settings():
    """Clear cached settings around tests that change the environment."""
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestTelegramClient:
    async def test_send_message_uses_markdown(self):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json={"ok": True, "result": {"message_id": 7}})

        async with _mock_transport_client(TelegramClient(token="42:abc"), handler) as client:
            result = await client.send_message(99, "*hi*")

        assert result == {"message_id": 7}
        assert requests[0].url.path.endswith("/sendMessage")
        assert "42:abc" in requests[0].url.path
        assert json.loads(requests[0].content) == {
            "chat_id": 99,
            "text": "*hi*",
            "parse_mode": "Markdown",
        }

    async def test_plain_text_omits_parse_mode(self):
        bodies = []

        def handler(request: httpx.Request) -> httpx.Response:
            bodies.append(json.loads(request.content))
            return httpx.Response(200, json={"ok": True, "result": {}})

        client = _mock_transport_client(TelegramClient(token="42:abc"), handler)
        await client.send_message(1, "plain", parse_mode=None)
        await client.close()

        assert "parse_mode" not in bodies[0]

    async def test_api_error_carries_status(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                400, json={"ok": False, "description": "Bad Request: can't parse entities"}
            )

        client = _mock_transport_client(TelegramClient(token="42:abc"), handler)

        with pytest.raises(TelegramAPIError) as exc_info:
            await client.send_message(1, "_broken")

        assert exc_info.value.status_code == 400
        assert "can't parse entities" in str(exc_info.value)
        await client.close()

    async def test_network_error_is_wrapped(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("unreachable", request=request)

        client = _mock_transport_client(TelegramClient(token="42:abc"), handler)

        with pytest.raises(TelegramAPIError, match="sendMessage"):
            await client.send_message(1, "hi")
        await client.close()

    async def test_get_file_path_and_download(self):
        def handler(request: httpx.Request) -> httpx.Response:
            if request.url.path.endswith("/getFile"):
                assert json.loads(request.content) == {"file_id": "voice-1"}
                return httpx.Response(
                    200, json={"ok": True, "result": {"file_path": "voice/file_1.oga"}}
                )
            assert request.url.path.startswith("/file/bot")
            assert request.url.path.endswith("/voice/file_1.oga")
            return httpx.Response(200, content=b"OggS-audio")

        client = _mock_transport_client(TelegramClient(token="42:abc"), handler)

        path = await client.get_file_path("voice-1")
        audio = await client.download_file(path)
        await client.close()

        assert path == "voice/file_1.oga"
        assert audio == b"OggS-audio"


@pytest.fixture
def telegram():
    bot = AsyncMock(spec=TelegramClient)
    bot.send_message = AsyncMock(return_value={})
    bot.get_file_path = AsyncMock(return_value="voice/file_1.oga")
    bot.download_file = AsyncMock(return_value=b"OggS-audio")
    return bot


@pytest.fixture
def bridge(telegram, mock_llm, session_factory, org, user):
    mock_llm.generate.return_value = _reply("Recorded the payment.")
    return TelegramBridge(telegram, mock_llm, session_factory, acting_user_id=USER_ID)


class TestTelegramBridge:
    async def test_text_message_is_answered(self, bridge, telegram, mock_llm):
        result = await bridge.handle_update(
            {"update_id": 1, "message": {"chat": {"id": 55}, "text": "How much did we earn?"}}
        )

        assert result == {"ok": True}
        system_prompt, history, _tools = mock_llm.generate.await_args.args
        assert system_prompt.endswith(TELEGRAM_INSTRUCTIONS)
        assert history == [{"role": "user", "content": "How much did we earn?"}]
        telegram.send_message.assert_awaited_once_with(55, "Recorded the payment.")
        mock_llm.transcribe.assert_not_called()

    async def test_voice_note_is_transcribed_and_echoed(self, bridge, telegram, mock_llm):
        mock_llm.transcribe.return_value = "paid the plumber 300"

        await bridge.handle_update(
            {"message": {"chat": {"id": 55}, "voice": {"file_id": "voice-1"}}}
        )

        telegram.get_file_path.assert_awaited_once_with("voice-1")
        telegram.download_file.assert_awaited_once_with("voice/file_1.oga")
        mock_llm.transcribe.assert_awaited_once_with(b"OggS-audio", "audio/ogg")
        sent = [c.args for c in telegram.send_message.await_args_list]
        assert sent == [(55, "🎤 _paid the plumber 300_"), (55, "Recorded the payment.")]

    async def test_rejected_echo_markdown_is_resent_plain(self, bridge, telegram, mock_llm):
        mock_llm.transcribe.return_value = "paid ahmed_store 300"
        telegram.send_message.side_effect = [
            TelegramAPIError("Bad Request", status_code=400),
            {},
            {},
        ]

        result = await bridge.handle_update(
            {"message": {"chat": {"id": 55}, "voice": {"file_id": "voice-1"}}}
        )

        assert result == {"ok": True}
        assert mock_llm.generate.await_count == 1
        calls = telegram.send_message.await_args_list
        assert calls[1].args == (55, "🎤 _paid ahmed_store 300_")
        assert calls[1].kwargs == {"parse_mode": None}
        assert calls[2].args == (55, "Recorded the payment.")

    async def test_failed_echo_still_reaches_assistant(self, bridge, telegram, mock_llm):
        mock_llm.transcribe.return_value = "paid the plumber 300"
        telegram.send_message.side_effect = [
            TelegramAPIError("Bad Gateway", status_code=502),
            {},
        ]

        await bridge.handle_update(
            {"message": {"chat": {"id": 55}, "voice": {"file_id": "voice-1"}}}
        )

        assert mock_llm.generate.await_count == 1
        assert telegram.send_message.await_args_list[-1].args == (55, "Recorded the payment.")

    async def test_empty_transcript_gets_no_reply(self, bridge, telegram, mock_llm):
        mock_llm.transcribe.return_value = ""

        await bridge.handle_update({"message": {"chat": {"id": 55}, "voice": {"file_id": "v"}}})

        mock_llm.generate.assert_not_called()
        telegram.send_message.assert_not_called()

    async def test_markdown_rejection_falls_back_to_plain_text(self, bridge, telegram):
        telegram.send_message.side_effect = [
            TelegramAPIError("Bad Request", status_code=400),
            {},
        ]

        result = await bridge.handle_update({"message": {"chat": {"id": 55}, "text": "hi"}})

        assert result == {"ok": True}
        assert telegram.send_message.await_args_list[1].kwargs == {"parse_mode": None}

    async def test_failures_are_acknowledged(self, bridge, telegram, mock_llm):
        mock_llm.generate.side_effect = RuntimeError("model down")

        result = await bridge.handle_update({"message": {"chat": {"id": 55}, "text": "hi"}})

        assert result == {"ok": True}
        telegram.send_message.assert_not_called()

    @pytest.mark.parametrize(
        "update",
        [{}, {"edited_message": {"text": "x"}}, {"message": {"chat": {"id": 1}, "sticker": {}}}],
    )
    async def test_other_updates_are_ignored(self, bridge, mock_llm, update):
        assert await bridge.handle_update(update) == {"ok": True}
        mock_llm.generate.assert_not_called()

    async def test_unknown_acting_user_is_dropped(self, telegram, mock_llm, session_factory, org):
        mock_llm.generate.return_value = _reply("ok")
        bridge = TelegramBridge(telegram, mock_llm, session_factory, acting_user_id="ghost")

        await bridge.handle_update({"message": {"chat": {"id": 1}, "text": "hi"}})

        telegram.send_message.assert_awaited_once_with(1, "ok")


class TestWebhookSecret:
    def test_no_secret_configured_allows_all(self, fresh_settings, monkeypatch):
        monkeypatch.delenv("TELEGRAM_WEBHOOK_SECRET", raising=False)

        assert TelegramBridge.is_authorized(None) is True

    def test_secret_must_match(self, fresh_settings, monkeypatch):
        monkeypatch.setenv("TELEGRAM_WEBHOOK_SECRET", "s3cret")

        assert TelegramBridge.is_authorized("s3cret") is True
        assert TelegramBridge.is_authorized("wrong") is False
        assert TelegramBridge.is_authorized(None) is False
