"""Bridges Telegram bot updates into the assistant.

Text messages go straight to the assistant. Voice notes are transcribed
first, the transcript is echoed back to the chat, and the assistant is told
to turn described payments into drafts.
"""

import asyncio
import hmac
from collections.abc import Callable
from typing import Any

import structlog
from sqlalchemy.orm import Session

from injaz.assistant.orchestrator import ConversationOrchestrator
from injaz.assistant.prompts import build_system_prompt
from injaz.clients.gemini import GeminiClient
from injaz.config import bind_request_context, get_settings
from injaz.db.models import User
from injaz.services.users import get_or_create_organization
from injaz.telegram.client import TelegramAPIError, TelegramClient
from injaz.tools.executor import ExecutionContext, ToolExecutor

logger = structlog.get_logger(__name__)

VOICE_MIME_TYPE = "audio/ogg"


class TelegramBridge:
    """Handles one Telegram update at a time.

    ``handle_update`` never raises: Telegram retries failed webhooks, so every
    update is acknowledged and failures only reach the logs.
    """

    def __init__(
        self,
        telegram: TelegramClient,
        llm: GeminiClient,
        session_factory: Callable[[], Session],
        acting_user_id: str | None = None,
    ):
        self.telegram = telegram
        self.llm = llm
        self.session_factory = session_factory
        self.acting_user_id = acting_user_id or get_settings().telegram_user_id

    @staticmethod
    def is_authorized(secret_header: str | None) -> bool:
        """Check the webhook secret token when one is configured."""
        expected = get_settings().telegram_webhook_secret.get_secret_value()
        if not expected:
            return True
        return hmac.compare_digest(secret_header or "", expected)

    async def handle_update(self, update: dict[str, Any]) -> dict[str, bool]:
        message = (update or {}).get("message") or {}
        if not message.get("text") and not message.get("voice"):
            return {"ok": True}

        chat_id = (message.get("chat") or {}).get("id")
        bind_request_context(chat_id=chat_id, update_id=update.get("update_id"))

        try:
            text = message.get("text") or ""
            if message.get("voice"):
                text = await self._transcribe_voice(chat_id, message["voice"]["file_id"])
            if not text:
                return {"ok": True}

            reply = await self._ask_assistant(text)
            await self._send_reply(chat_id, reply or "Done.")
            logger.info("telegram_update_handled", voice=bool(message.get("voice")))
        except Exception:
            logger.exception("telegram_update_failed")
        return {"ok": True}

    async def _transcribe_voice(self, chat_id: int, file_id: str) -> str:
        file_path = await self.telegram.get_file_path(file_id)
        if not file_path:
            logger.warning("telegram_voice_missing_path", file_id=file_id)
            return ""
        audio = await self.telegram.download_file(file_path)
        text = await self.llm.transcribe(audio, VOICE_MIME_TYPE)
        if text:
            # A failed echo must not keep the transcript from the assistant
            try:
                await self._send_reply(chat_id, f"🎤 _{text}_")
            except TelegramAPIError as e:
                logger.warning(
                    "telegram_transcript_echo_failed", chat_id=chat_id, status=e.status_code
                )
        return text

    async def _ask_assistant(self, text: str) -> str:
        session = self.session_factory()
        try:
            context = await asyncio.to_thread(self._execution_context, session)
            orchestrator = ConversationOrchestrator(self.llm, ToolExecutor(context))
            reply = await orchestrator.run(
                [{"role": "user", "content": text}],
                build_system_prompt(telegram=True),
            )
            return reply.content
        finally:
            session.close()

    def _execution_context(self, session: Session) -> ExecutionContext:
        organization = get_or_create_organization(session)
        session.commit()
        return ExecutionContext(
            org_id=organization.id,
            user_id=self._acting_user(session),
            session=session,
        )

    def _acting_user(self, session: Session) -> str | None:
        if not self.acting_user_id:
            return None
        if session.get(User, self.acting_user_id) is None:
            logger.warning("telegram_user_not_found", user_id=self.acting_user_id)
            return None
        return self.acting_user_id

    async def _send_reply(self, chat_id: int, text: str) -> None:
        try:
            await self.telegram.send_message(chat_id, text)
        except TelegramAPIError as e:
            # Model output is not always valid Telegram Markdown
            if e.status_code != 400:
                raise
            logger.warning("telegram_markdown_rejected", chat_id=chat_id)
            await self.telegram.send_message(chat_id, text, parse_mode=None)
