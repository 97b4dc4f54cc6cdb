"""In-app notifications."""

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from injaz.db.models import Notification
from injaz.services.base import get_or_404


def list_notifications(session: Session, user_id: str, limit: int = 20) -> list[Notification]:
    stmt = (
        select(Notification)
        .where(Notification.user_id == user_id)
        .order_by(Notification.created_at.desc())
        .limit(limit)
    )
    return list(session.scalars(stmt))


def unread_count(session: Session, user_id: str) -> int:
    return session.scalar(
        select(func.count())
        .select_from(Notification)
        .where(Notification.user_id == user_id, Notification.is_read.is_(False))
    ) or 0


def mark_as_read(session: Session, notification_id: str) -> Notification:
    notification = get_or_404(session, Notification, notification_id)
    notification.is_read = True
    session.flush()
    return notification


def mark_all_as_read(session: Session, user_id: str) -> int:
    """Mark every unread notification of a user; returns how many changed."""
    result = session.execute(
        update(Notification)
        .where(Notification.user_id == user_id, Notification.is_read.is_(False))
        .values(is_read=True)
        .execution_options(synchronize_session="fetch")
    )
    return result.rowcount


def create_notification(session: Session, user_id: str, message: str, link: str = "") -> Notification:
    notification = Notification(user_id=user_id, message=message, link=link)
    session.add(notification)
    session.flush()
    return notification


def delete_notification(session: Session, notification_id: str) -> None:
    session.delete(get_or_404(session, Notification, notification_id))
    session.flush()
