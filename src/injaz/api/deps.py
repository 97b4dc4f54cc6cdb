"""FastAPI dependencies."""

from functools import lru_cache

from fastapi import Depends, Query
from sqlalchemy.orm import Session

from injaz.clients.gemini import GeminiClient
from injaz.db.session import get_db, get_session_factory
from injaz.services.users import get_or_create_organization
from injaz.telegram.bridge import TelegramBridge
from injaz.telegram.client import TelegramClient

__all__ = ["get_db", "get_llm_client", "get_org_id", "get_telegram_bridge"]


@lru_cache
def get_llm_client() -> GeminiClient:
    return GeminiClient()


@lru_cache
def get_telegram_bridge() -> TelegramBridge:
    return TelegramBridge(
        telegram=TelegramClient(),
        llm=get_llm_client(),
        session_factory=get_session_factory(),
    )


def get_org_id(
    org_id: str | None = Query(default=None),
    db: Session = Depends(get_db),
) -> str:
    """The requested organization, or the installation's first one."""
    if org_id:
        return org_id
    organization = get_or_create_organization(db)
    db.commit()
    return organization.id
