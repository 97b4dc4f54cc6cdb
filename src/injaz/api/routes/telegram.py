"""Telegram webhook."""

import structlog
from fastapi import APIRouter, Depends, Header, Request

from injaz.api.deps import get_telegram_bridge
from injaz.telegram.bridge import TelegramBridge

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/telegram", tags=["telegram"])


@router.post("/webhook")
async def webhook(
    request: Request,
    bridge: TelegramBridge = Depends(get_telegram_bridge),
    x_telegram_bot_api_secret_token: str | None = Header(default=None),
) -> dict[str, bool]:
    """Always acknowledge, so Telegram never retries an update."""
    if not bridge.is_authorized(x_telegram_bot_api_secret_token):
        logger.warning("telegram_webhook_unauthorized")
        return {"ok": True}
    try:
        update = await request.json()
    except ValueError:
        logger.warning("telegram_webhook_invalid_body")
        return {"ok": True}
    if not isinstance(update, dict):
        return {"ok": True}
    return await bridge.handle_update(update)
