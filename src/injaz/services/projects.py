"""Projects."""

from typing import Any

import structlog
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from injaz.db.enums import ProjectStatus
from injaz.db.models import Project, Task
from injaz.financials import to_decimal
from injaz.services.base import apply_updates, clean, coerce_enum, get_or_404
from injaz.services.errors import InvalidInputError

logger = structlog.get_logger(__name__)


def _normalize(data: dict[str, Any]) -> dict[str, Any]:
    if data.get("status") is not None:
        data["status"] = coerce_enum(ProjectStatus, data["status"], "project status")
    if data.get("budget") is not None:
        data["budget"] = to_decimal(data["budget"])
    return data


def list_projects(
    session: Session, org_id: str, status: str | None = None, limit: int | None = None
) -> list[Project]:
    stmt = select(Project).where(Project.organization_id == org_id)
    if status:
        stmt = stmt.where(Project.status == coerce_enum(ProjectStatus, status, "project status"))
    stmt = stmt.order_by(Project.created_at.desc())
    if limit:
        stmt = stmt.limit(limit)
    return list(session.scalars(stmt))


def task_counts(session: Session, project_ids: list[str]) -> dict[str, int]:
    """Number of tasks per project id."""
    if not project_ids:
        return {}
    rows = session.execute(
        select(Task.project_id, func.count())
        .where(Task.project_id.in_(project_ids))
        .group_by(Task.project_id)
    ).all()
    return dict(rows)


def get_project(session: Session, project_id: str) -> Project:
    return get_or_404(session, Project, project_id)


def create_project(session: Session, org_id: str, data: dict[str, Any]) -> Project:
    data = _normalize(clean(data))
    if "name" not in data:
        raise InvalidInputError("name is required")
    project = Project(organization_id=org_id, **data)
    session.add(project)
    session.flush()
    logger.info("project_created", project_id=project.id, name=project.name)
    return project


def update_project(session: Session, project_id: str, data: dict[str, Any]) -> Project:
    project = get_project(session, project_id)
    apply_updates(project, _normalize(data))
    session.flush()
    return project


def delete_project(session: Session, project_id: str) -> None:
    session.delete(get_project(session, project_id))
    session.flush()
    logger.info("project_deleted", project_id=project_id)


def project_stats(session: Session, org_id: str) -> dict[str, int]:
    rows = session.execute(
        select(Project.status, func.count())
        .where(Project.organization_id == org_id)
        .group_by(Project.status)
    ).all()
    counts = dict(rows)
    active = counts.get(ProjectStatus.ACTIVE, 0)
    completed = counts.get(ProjectStatus.COMPLETED, 0)
    on_hold = counts.get(ProjectStatus.ON_HOLD, 0)
    return {
        "active": active,
        "completed": completed,
        "on_hold": on_hold,
        "total": active + completed + on_hold,
    }
