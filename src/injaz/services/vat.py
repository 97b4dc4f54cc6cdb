"""Monthly VAT liabilities."""

from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from injaz.db.enums import VatStatus
from injaz.db.models import VatLiability
from injaz.financials import money, to_decimal, vat_due_date
from injaz.services.base import apply_updates, coerce_enum, get_or_404, parse_datetime
from injaz.services.errors import InvalidInputError

_AMOUNT_FIELDS = ("collected_vat", "deductible_vat", "net_vat_payable")


def _normalize(data: dict[str, Any]) -> dict[str, Any]:
    for key in _AMOUNT_FIELDS:
        if data.get(key) is not None:
            data[key] = to_decimal(data[key])
    for key in ("due_date", "paid_date"):
        if key in data:
            data[key] = parse_datetime(data[key])
    if data.get("status") is not None:
        data["status"] = coerce_enum(VatStatus, data["status"], "VAT status")
    return data


def list_vat_liabilities(session: Session, status: str | None = None) -> list[VatLiability]:
    stmt = select(VatLiability)
    if status:
        stmt = stmt.where(VatLiability.status == coerce_enum(VatStatus, status, "VAT status"))
    return list(session.scalars(stmt.order_by(VatLiability.due_date.desc())))


def get_vat_liability(session: Session, liability_id: str) -> VatLiability:
    return get_or_404(session, VatLiability, liability_id)


def create_vat_liability(session: Session, data: dict[str, Any]) -> VatLiability:
    """Record a month's liability; net payable and due date are derived when absent."""
    data = _normalize({key: value for key, value in data.items() if value is not None})
    month = data.get("month")
    if not month:
        raise InvalidInputError("month is required")
    collected = data.setdefault("collected_vat", to_decimal(0))
    deductible = data.setdefault("deductible_vat", to_decimal(0))
    data.setdefault("net_vat_payable", money(collected - deductible))
    data.setdefault("due_date", vat_due_date(month))
    liability = VatLiability(**data)
    session.add(liability)
    session.flush()
    return liability


def update_vat_liability(session: Session, liability_id: str, data: dict[str, Any]) -> VatLiability:
    liability = get_vat_liability(session, liability_id)
    apply_updates(liability, _normalize(dict(data)))
    session.flush()
    return liability


def delete_vat_liability(session: Session, liability_id: str) -> None:
    session.delete(get_vat_liability(session, liability_id))
    session.flush()
