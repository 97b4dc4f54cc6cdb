"""Async client for the Telegram Bot API."""

from typing import Any

import httpx
import structlog

from injaz.config import get_settings

logger = structlog.get_logger(__name__)


class TelegramAPIError(Exception):
    """Base exception for Telegram Bot API errors."""

    def __init__(self, message: str, status_code: int | None = None, details: Any = None):
        super().__init__(message)
        self.status_code = status_code
        self.details = details


class TelegramClient:
    """Thin wrapper over the Bot API methods the bridge needs."""

    def __init__(
        self,
        token: str | None = None,
        base_url: str | None = None,
        timeout: float | None = None,
    ):
        settings = get_settings()
        self._token = token or settings.telegram_bot_token.get_secret_value()
        self.base_url = (base_url or settings.telegram_api_url).rstrip("/")
        self._timeout = timeout or settings.telegram_timeout
        self._client: httpx.AsyncClient | None = None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self._timeout),
            )
        return self._client

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._client:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "TelegramClient":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()

    async def _call(self, method: str, payload: dict[str, Any]) -> Any:
        """POST a Bot API method and return its ``result``."""
        if not self._token:
            raise TelegramAPIError("TELEGRAM_BOT_TOKEN is not configured")
        client = await self._get_client()

        try:
            response = await client.post(f"/bot{self._token}/{method}", json=payload)
        except httpx.RequestError as e:
            logger.error("telegram_request_failed", method=method, error=str(e))
            raise TelegramAPIError(f"Request to {method} failed: {e}") from e

        try:
            data = response.json()
        except ValueError:
            data = {"raw": response.text[:500] if response.text else "empty response"}

        if response.status_code >= 400 or not data.get("ok", False):
            raise TelegramAPIError(
                f"Telegram {method} failed: {data.get('description', response.status_code)}",
                status_code=response.status_code,
                details=data,
            )
        return data.get("result")

    async def send_message(
        self, chat_id: int | str, text: str, parse_mode: str | None = "Markdown"
    ) -> dict[str, Any]:
        payload: dict[str, Any] = {"chat_id": chat_id, "text": text}
        if parse_mode:
            payload["parse_mode"] = parse_mode
        result = await self._call("sendMessage", payload)
        logger.debug("telegram_message_sent", chat_id=chat_id, chars=len(text))
        return result

    async def get_file_path(self, file_id: str) -> str | None:
        """Resolve a file id to the path used for downloading it."""
        result = await self._call("getFile", {"file_id": file_id})
        return (result or {}).get("file_path")

    async def download_file(self, file_path: str) -> bytes:
        client = await self._get_client()
        try:
            response = await client.get(f"/file/bot{self._token}/{file_path}")
        except httpx.RequestError as e:
            raise TelegramAPIError(f"Download of {file_path} failed: {e}") from e
        if response.status_code >= 400:
            raise TelegramAPIError(
                f"Download of {file_path} failed: {response.status_code}",
                status_code=response.status_code,
            )
        return response.content
