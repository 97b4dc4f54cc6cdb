"""Loans between the business and its owners."""

from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from injaz.db.enums import Direction, LoanStatus
from injaz.db.models import OwnerLoan
from injaz.financials import to_decimal
from injaz.services.base import apply_updates, clean, coerce_enum, get_or_404, parse_datetime
from injaz.services.errors import InvalidInputError


def _normalize(data: dict[str, Any]) -> dict[str, Any]:
    for key in ("principal_amount", "current_balance"):
        if data.get(key) is not None:
            data[key] = to_decimal(data[key])
    if "loan_date" in data:
        data["loan_date"] = parse_datetime(data["loan_date"])
    if data.get("direction") is not None:
        data["direction"] = coerce_enum(Direction, data["direction"])
    if data.get("status") is not None:
        data["status"] = coerce_enum(LoanStatus, data["status"], "loan status")
    return data


def list_loans(session: Session, status: str | None = None) -> list[OwnerLoan]:
    stmt = select(OwnerLoan)
    if status:
        stmt = stmt.where(OwnerLoan.status == coerce_enum(LoanStatus, status, "loan status"))
    return list(session.scalars(stmt.order_by(OwnerLoan.loan_date.desc())))


def get_loan(session: Session, loan_id: str) -> OwnerLoan:
    return get_or_404(session, OwnerLoan, loan_id)


def create_loan(session: Session, data: dict[str, Any]) -> OwnerLoan:
    data = _normalize(clean(data))
    for key in ("owner_id", "owner_name", "direction", "principal_amount", "loan_date"):
        if key not in data:
            raise InvalidInputError(f"{key} is required")
    # A fresh loan is owed in full
    data.setdefault("current_balance", data["principal_amount"])
    loan = OwnerLoan(**data)
    session.add(loan)
    session.flush()
    return loan


def update_loan(session: Session, loan_id: str, data: dict[str, Any]) -> OwnerLoan:
    loan = get_loan(session, loan_id)
    apply_updates(loan, _normalize(dict(data)))
    session.flush()
    return loan


def delete_loan(session: Session, loan_id: str) -> None:
    session.delete(get_loan(session, loan_id))
    session.flush()
