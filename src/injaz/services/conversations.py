"""Stored assistant conversations and key/value system settings."""

from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from injaz.db.models import AiConversation, AiMessage, SystemSetting
from injaz.services.base import get_or_404, utcnow

AI_SETTINGS_KEY = "ai_settings"


def list_conversations(session: Session, user_id: str, limit: int = 20) -> list[AiConversation]:
    stmt = (
        select(AiConversation)
        .where(AiConversation.user_id == user_id)
        .order_by(AiConversation.updated_at.desc())
        .limit(limit)
    )
    return list(session.scalars(stmt))


def get_conversation(session: Session, conversation_id: str) -> AiConversation:
    return get_or_404(session, AiConversation, conversation_id)


def create_conversation(session: Session, user_id: str, title: str | None = None) -> AiConversation:
    conversation = AiConversation(user_id=user_id, title=title or "New conversation")
    session.add(conversation)
    session.flush()
    return conversation


def add_message(
    session: Session,
    conversation_id: str,
    role: str,
    content: str,
    function_call: Any = None,
    function_result: Any = None,
) -> AiMessage:
    """Append a message and bump the conversation's ``updated_at``."""
    conversation = get_conversation(session, conversation_id)
    message = AiMessage(
        conversation_id=conversation.id,
        role=role,
        content=content,
        function_call=function_call,
        function_result=function_result,
    )
    session.add(message)
    conversation.updated_at = utcnow()
    session.flush()
    return message


def rename_conversation(session: Session, conversation_id: str, title: str) -> AiConversation:
    conversation = get_conversation(session, conversation_id)
    conversation.title = title
    session.flush()
    return conversation


def delete_conversation(session: Session, conversation_id: str) -> None:
    session.delete(get_conversation(session, conversation_id))
    session.flush()


# === System settings ===


def get_system_setting(session: Session, key: str) -> Any:
    setting = session.get(SystemSetting, key)
    return setting.value if setting else None


def save_system_setting(session: Session, key: str, value: Any) -> SystemSetting:
    setting = session.get(SystemSetting, key)
    if setting is None:
        setting = SystemSetting(id=key)
        session.add(setting)
    setting.value = value
    session.flush()
    return setting


def extra_system_prompt(session: Session) -> str | None:
    """The admin-configured prompt addition stored under ``ai_settings``."""
    value = get_system_setting(session, AI_SETTINGS_KEY)
    if not isinstance(value, dict):
        return None
    prompt = value.get("system_prompt") or value.get("systemPrompt")
    if isinstance(prompt, str) and prompt.strip():
        return prompt.strip()
    return None
