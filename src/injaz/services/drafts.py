"""Free-form financial drafts captured from voice notes and scanned documents."""

from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from injaz.db.enums import Direction, DraftSource, DraftStatus, DraftType
from injaz.db.models import FinancialDraft
from injaz.financials import to_decimal
from injaz.services.base import clean, coerce_enum, get_or_404, parse_datetime, utcnow
from injaz.services.errors import InvalidInputError


def list_drafts(session: Session, status: str | None = None) -> list[FinancialDraft]:
    stmt = select(FinancialDraft)
    if status:
        stmt = stmt.where(FinancialDraft.status == coerce_enum(DraftStatus, status, "draft status"))
    return list(session.scalars(stmt.order_by(FinancialDraft.created_at.desc())))


def create_draft(session: Session, data: dict[str, Any]) -> FinancialDraft:
    data = clean(data)
    if "created_by_id" not in data:
        raise InvalidInputError("created_by_id is required")
    data["type"] = coerce_enum(DraftType, data.get("type", DraftType.PAYMENT), "draft type")
    data["source"] = coerce_enum(DraftSource, data.get("source", DraftSource.MANUAL), "draft source")
    if "direction" in data:
        data["direction"] = coerce_enum(Direction, data["direction"])
    if "amount" in data:
        data["amount"] = to_decimal(data["amount"])
    if "confidence" in data:
        data["confidence"] = to_decimal(data["confidence"])
    if "date" in data:
        data["date"] = parse_datetime(data["date"])

    draft = FinancialDraft(**data)
    session.add(draft)
    session.flush()
    return draft


def update_draft_status(session: Session, draft_id: str, status: str) -> FinancialDraft:
    draft = get_or_404(session, FinancialDraft, draft_id)
    draft.status = coerce_enum(DraftStatus, status, "draft status")
    if draft.status == DraftStatus.PUSHED:
        draft.pushed_at = utcnow()
    session.flush()
    return draft


def delete_draft(session: Session, draft_id: str) -> None:
    session.delete(get_or_404(session, FinancialDraft, draft_id))
    session.flush()
