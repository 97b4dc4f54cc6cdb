"""CSV import and financial backfill endpoints."""

from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from injaz.api.deps import get_db
from injaz.api.schemas import ImportRequest
from injaz.backfill import backfill_financials
from injaz.importer import import_csv

router = APIRouter(prefix="/api", tags=["import"])


@router.post("/import")
def import_transactions(request: ImportRequest, db: Session = Depends(get_db)) -> dict[str, Any]:
    stats = import_csv(db, request.csv or "", request.user_id or "")
    db.commit()
    return {"success": True, "stats": stats}


@router.post("/backfill-financials")
def backfill(db: Session = Depends(get_db)) -> dict[str, Any]:
    result = backfill_financials(db)
    db.commit()
    return {"success": True, **result}
