"""Dashboard, breakdowns and global search."""

from typing import Any

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from injaz.api.deps import get_db, get_org_id
from injaz.services import dashboard, search

router = APIRouter(prefix="/api", tags=["reports"])


@router.get("/dashboard")
def dashboard_stats(org_id: str = Depends(get_org_id), db: Session = Depends(get_db)) -> dict[str, Any]:
    return dashboard.dashboard_stats(db, org_id)


@router.get("/reports/categories")
def category_breakdown(
    org_id: str = Depends(get_org_id), db: Session = Depends(get_db)
) -> list[dict[str, Any]]:
    return dashboard.category_breakdown(db, org_id)


@router.get("/reports/monthly")
def monthly_breakdown(
    org_id: str = Depends(get_org_id), db: Session = Depends(get_db)
) -> list[dict[str, Any]]:
    return dashboard.monthly_breakdown(db, org_id)


@router.get("/reports/projects")
def project_breakdown(
    org_id: str = Depends(get_org_id), db: Session = Depends(get_db)
) -> list[dict[str, Any]]:
    return dashboard.project_breakdown(db, org_id)


@router.get("/reports/top-parties")
def top_parties(
    limit: int = Query(default=10, ge=1, le=100),
    org_id: str = Depends(get_org_id),
    db: Session = Depends(get_db),
) -> list[dict[str, Any]]:
    return dashboard.top_parties(db, org_id, limit=limit)


@router.get("/search")
def global_search(
    q: str = "", org_id: str = Depends(get_org_id), db: Session = Depends(get_db)
) -> dict[str, list[dict[str, Any]]]:
    return search.global_search(db, org_id, q)
