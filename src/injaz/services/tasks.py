"""Tasks, per-user quick tasks and the saved ordering of a user's day."""

from typing import Any

import structlog
from sqlalchemy import select
from sqlalchemy.orm import Session

from injaz.db.models import DayOrder, QuickTask, Task
from injaz.services.base import apply_updates, clean, get_or_404, parse_datetime
from injaz.services.errors import InvalidInputError

logger = structlog.get_logger(__name__)

_DATE_FIELDS = ("due_date", "start_date", "end_date")


def _parse_dates(data: dict[str, Any]) -> dict[str, Any]:
    for key in _DATE_FIELDS:
        if key in data:
            data[key] = parse_datetime(data[key])
    return data


# === Tasks ===


def list_tasks(
    session: Session,
    project_id: str | None = None,
    assignee_id: str | None = None,
    status: str | None = None,
    limit: int | None = None,
) -> list[Task]:
    stmt = select(Task)
    if project_id:
        stmt = stmt.where(Task.project_id == project_id)
    if assignee_id:
        stmt = stmt.where(Task.assignee_id == assignee_id)
    if status:
        stmt = stmt.where(Task.status == status)
    stmt = stmt.order_by(Task.created_at.desc())
    if limit:
        stmt = stmt.limit(limit)
    return list(session.scalars(stmt))


def get_task(session: Session, task_id: str) -> Task:
    return get_or_404(session, Task, task_id)


def create_task(session: Session, data: dict[str, Any]) -> Task:
    data = _parse_dates(clean(data))
    if "title" not in data:
        raise InvalidInputError("title is required")
    task = Task(**data)
    session.add(task)
    session.flush()
    logger.info("task_created", task_id=task.id, title=task.title)
    return task


def update_task(session: Session, task_id: str, data: dict[str, Any]) -> Task:
    task = get_task(session, task_id)
    apply_updates(task, _parse_dates(dict(data)))
    session.flush()
    return task


def delete_task(session: Session, task_id: str) -> None:
    session.delete(get_task(session, task_id))
    session.flush()


# === Quick tasks ===


def list_quick_tasks(session: Session, user_id: str, date: str) -> list[QuickTask]:
    stmt = (
        select(QuickTask)
        .where(QuickTask.owner_uid == user_id, QuickTask.date == date)
        .order_by(QuickTask.created_at.asc())
    )
    return list(session.scalars(stmt))


def create_quick_task(
    session: Session, user_id: str, title: str, date: str, details: str | None = None
) -> QuickTask:
    quick_task = QuickTask(owner_uid=user_id, title=title, date=date, details=details)
    session.add(quick_task)
    session.flush()
    return quick_task


def update_quick_task(session: Session, quick_task_id: str, data: dict[str, Any]) -> QuickTask:
    quick_task = get_or_404(session, QuickTask, quick_task_id)
    allowed = {key: value for key, value in data.items() if key in ("title", "status", "details")}
    apply_updates(quick_task, allowed)
    session.flush()
    return quick_task


def delete_quick_task(session: Session, quick_task_id: str) -> None:
    session.delete(get_or_404(session, QuickTask, quick_task_id))
    session.flush()


# === Day order ===


def day_order_id(user_id: str, date_key: str) -> str:
    return f"{user_id}_{date_key}"


def get_day_order(session: Session, user_id: str, date_key: str) -> DayOrder | None:
    return session.get(DayOrder, day_order_id(user_id, date_key))


def save_day_order(session: Session, user_id: str, date_key: str, order_data: Any) -> DayOrder:
    """Insert or replace the ordering for one user and day."""
    day_order = get_day_order(session, user_id, date_key)
    if day_order is None:
        day_order = DayOrder(
            id=day_order_id(user_id, date_key), uid=user_id, date_key=date_key
        )
        session.add(day_order)
    day_order.order_data = order_data
    session.flush()
    return day_order
