"""Project endpoints."""

from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from injaz.api.deps import get_db, get_org_id
from injaz.api.schemas import ProjectCreate, ProjectUpdate
from injaz.services import projects

router = APIRouter(prefix="/api/projects", tags=["projects"])


@router.get("")
def list_projects(
    status: str | None = None, org_id: str = Depends(get_org_id), db: Session = Depends(get_db)
) -> list[dict[str, Any]]:
    found = projects.list_projects(db, org_id, status=status)
    counts = projects.task_counts(db, [p.id for p in found])
    return [{**p.to_dict(), "task_count": counts.get(p.id, 0)} for p in found]


@router.get("/stats")
def project_stats(org_id: str = Depends(get_org_id), db: Session = Depends(get_db)) -> dict[str, int]:
    return projects.project_stats(db, org_id)


@router.get("/{project_id}")
def get_project(project_id: str, db: Session = Depends(get_db)) -> dict[str, Any]:
    return projects.get_project(db, project_id).to_dict()


@router.post("", status_code=201)
def create_project(
    body: ProjectCreate, org_id: str = Depends(get_org_id), db: Session = Depends(get_db)
) -> dict[str, Any]:
    project = projects.create_project(db, org_id, body.model_dump())
    db.commit()
    return project.to_dict()


@router.patch("/{project_id}")
def update_project(
    project_id: str, body: ProjectUpdate, db: Session = Depends(get_db)
) -> dict[str, Any]:
    project = projects.update_project(db, project_id, body.changes())
    db.commit()
    return project.to_dict()


@router.delete("/{project_id}", status_code=204)
def delete_project(project_id: str, db: Session = Depends(get_db)) -> None:
    projects.delete_project(db, project_id)
    db.commit()
