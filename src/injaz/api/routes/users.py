"""Users, notifications, assistant conversations and system settings."""

from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from injaz.api.deps import get_db
from injaz.api.schemas import (
    ConversationCreate,
    ConversationRename,
    MessageCreate,
    NotificationCreate,
    ProfileUpdate,
    RoleUpdate,
    SettingSave,
    StatusUpdate,
    UserSync,
)
from injaz.services import conversations, notifications, users

router = APIRouter(prefix="/api", tags=["users"])


# === Users ===


@router.post("/users/sync")
def sync_user(body: UserSync, db: Session = Depends(get_db)) -> dict[str, Any]:
    user = users.sync_user(db, body.uid, body.email, body.display_name)
    db.commit()
    return user.to_dict()


@router.get("/users")
def list_users(db: Session = Depends(get_db)) -> list[dict[str, Any]]:
    return [u.to_dict() for u in users.list_users(db)]


@router.get("/users/{user_id}")
def get_user(user_id: str, db: Session = Depends(get_db)) -> dict[str, Any]:
    return users.get_user(db, user_id).to_dict()


@router.patch("/users/{user_id}/role")
def update_role(user_id: str, body: RoleUpdate, db: Session = Depends(get_db)) -> dict[str, Any]:
    user = users.update_user_role(db, user_id, body.role)
    db.commit()
    return user.to_dict()


@router.patch("/users/{user_id}/approval")
def update_approval(user_id: str, body: StatusUpdate, db: Session = Depends(get_db)) -> dict[str, Any]:
    user = users.update_user_approval(db, user_id, body.status)
    db.commit()
    return user.to_dict()


@router.patch("/users/{user_id}/profile")
def update_profile(user_id: str, body: ProfileUpdate, db: Session = Depends(get_db)) -> dict[str, Any]:
    user = users.update_user_profile(db, user_id, body.changes())
    db.commit()
    return user.to_dict()


# === Notifications ===


@router.get("/notifications")
def list_notifications(
    user_id: str, limit: int = 20, db: Session = Depends(get_db)
) -> dict[str, Any]:
    found = notifications.list_notifications(db, user_id, limit=limit)
    return {
        "notifications": [n.to_dict() for n in found],
        "unread": notifications.unread_count(db, user_id),
    }


@router.post("/notifications", status_code=201)
def create_notification(body: NotificationCreate, db: Session = Depends(get_db)) -> dict[str, Any]:
    notification = notifications.create_notification(db, body.user_id, body.message, body.link)
    db.commit()
    return notification.to_dict()


@router.post("/notifications/{notification_id}/read")
def mark_as_read(notification_id: str, db: Session = Depends(get_db)) -> dict[str, Any]:
    notification = notifications.mark_as_read(db, notification_id)
    db.commit()
    return notification.to_dict()


@router.post("/notifications/read-all")
def mark_all_as_read(user_id: str, db: Session = Depends(get_db)) -> dict[str, int]:
    updated = notifications.mark_all_as_read(db, user_id)
    db.commit()
    return {"updated": updated}


@router.delete("/notifications/{notification_id}", status_code=204)
def delete_notification(notification_id: str, db: Session = Depends(get_db)) -> None:
    notifications.delete_notification(db, notification_id)
    db.commit()


# === Conversations ===


@router.get("/conversations")
def list_conversations(user_id: str, db: Session = Depends(get_db)) -> list[dict[str, Any]]:
    return [c.to_dict() for c in conversations.list_conversations(db, user_id)]


@router.get("/conversations/{conversation_id}")
def get_conversation(conversation_id: str, db: Session = Depends(get_db)) -> dict[str, Any]:
    conversation = conversations.get_conversation(db, conversation_id)
    data = conversation.to_dict()
    data["messages"] = [m.to_dict() for m in conversation.messages]
    return data


@router.post("/conversations", status_code=201)
def create_conversation(body: ConversationCreate, db: Session = Depends(get_db)) -> dict[str, Any]:
    conversation = conversations.create_conversation(db, body.user_id, body.title)
    db.commit()
    return conversation.to_dict()


@router.post("/conversations/{conversation_id}/messages", status_code=201)
def add_message(
    conversation_id: str, body: MessageCreate, db: Session = Depends(get_db)
) -> dict[str, Any]:
    message = conversations.add_message(
        db,
        conversation_id,
        body.role,
        body.content,
        function_call=body.function_call,
        function_result=body.function_result,
    )
    db.commit()
    return message.to_dict()


@router.patch("/conversations/{conversation_id}")
def rename_conversation(
    conversation_id: str, body: ConversationRename, db: Session = Depends(get_db)
) -> dict[str, Any]:
    conversation = conversations.rename_conversation(db, conversation_id, body.title)
    db.commit()
    return conversation.to_dict()


@router.delete("/conversations/{conversation_id}", status_code=204)
def delete_conversation(conversation_id: str, db: Session = Depends(get_db)) -> None:
    conversations.delete_conversation(db, conversation_id)
    db.commit()


# === System settings ===


@router.get("/settings/{key}")
def get_setting(key: str, db: Session = Depends(get_db)) -> dict[str, Any]:
    return {"key": key, "value": conversations.get_system_setting(db, key)}


@router.put("/settings/{key}")
def save_setting(key: str, body: SettingSave, db: Session = Depends(get_db)) -> dict[str, Any]:
    setting = conversations.save_system_setting(db, key, body.value)
    db.commit()
    return setting.to_dict()
