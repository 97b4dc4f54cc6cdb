"""Tasks, quick tasks and per-day ordering."""

from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from injaz.api.deps import get_db
from injaz.api.schemas import (
    DayOrderSave,
    QuickTaskCreate,
    QuickTaskUpdate,
    TaskCreate,
    TaskFields,
    task_out,
)
from injaz.services import tasks

router = APIRouter(prefix="/api", tags=["tasks"])


@router.get("/tasks")
def list_tasks(
    project_id: str | None = None,
    assignee_id: str | None = None,
    status: str | None = None,
    limit: int | None = None,
    db: Session = Depends(get_db),
) -> list[dict[str, Any]]:
    found = tasks.list_tasks(
        db, project_id=project_id, assignee_id=assignee_id, status=status, limit=limit
    )
    return [task_out(t) for t in found]


@router.get("/tasks/{task_id}")
def get_task(task_id: str, db: Session = Depends(get_db)) -> dict[str, Any]:
    return task_out(tasks.get_task(db, task_id))


@router.post("/tasks", status_code=201)
def create_task(body: TaskCreate, db: Session = Depends(get_db)) -> dict[str, Any]:
    task = tasks.create_task(db, body.model_dump())
    db.commit()
    return task_out(task)


@router.patch("/tasks/{task_id}")
def update_task(task_id: str, body: TaskFields, db: Session = Depends(get_db)) -> dict[str, Any]:
    task = tasks.update_task(db, task_id, body.changes())
    db.commit()
    return task_out(task)


@router.delete("/tasks/{task_id}", status_code=204)
def delete_task(task_id: str, db: Session = Depends(get_db)) -> None:
    tasks.delete_task(db, task_id)
    db.commit()


# === Quick tasks ===


@router.get("/quick-tasks")
def list_quick_tasks(user_id: str, date: str, db: Session = Depends(get_db)) -> list[dict[str, Any]]:
    return [q.to_dict() for q in tasks.list_quick_tasks(db, user_id, date)]


@router.post("/quick-tasks", status_code=201)
def create_quick_task(body: QuickTaskCreate, db: Session = Depends(get_db)) -> dict[str, Any]:
    quick = tasks.create_quick_task(db, body.user_id, body.title, body.date, body.details)
    db.commit()
    return quick.to_dict()


@router.patch("/quick-tasks/{quick_task_id}")
def update_quick_task(
    quick_task_id: str, body: QuickTaskUpdate, db: Session = Depends(get_db)
) -> dict[str, Any]:
    quick = tasks.update_quick_task(db, quick_task_id, body.changes())
    db.commit()
    return quick.to_dict()


@router.delete("/quick-tasks/{quick_task_id}", status_code=204)
def delete_quick_task(quick_task_id: str, db: Session = Depends(get_db)) -> None:
    tasks.delete_quick_task(db, quick_task_id)
    db.commit()


# === Day order ===


@router.get("/day-order/{user_id}/{date_key}")
def get_day_order(user_id: str, date_key: str, db: Session = Depends(get_db)) -> dict[str, Any]:
    day_order = tasks.get_day_order(db, user_id, date_key)
    return {"order_data": day_order.order_data if day_order else None}


@router.put("/day-order/{user_id}/{date_key}")
def save_day_order(
    user_id: str, date_key: str, body: DayOrderSave, db: Session = Depends(get_db)
) -> dict[str, Any]:
    day_order = tasks.save_day_order(db, user_id, date_key, body.order_data)
    db.commit()
    return day_order.to_dict()
