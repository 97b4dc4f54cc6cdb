"""Telegram bot integration."""

from injaz.telegram.bridge import TelegramBridge
from injaz.telegram.client import TelegramAPIError, TelegramClient

__all__ = ["TelegramAPIError", "TelegramBridge", "TelegramClient"]
