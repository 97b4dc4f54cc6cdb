"""Recurring expenses such as rent and subscriptions."""

from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from injaz.db.enums import Frequency
from injaz.db.models import RecurringExpense
from injaz.financials import to_decimal
from injaz.services.base import apply_updates, clean, coerce_enum, get_or_404, parse_datetime
from injaz.services.errors import InvalidInputError

_REQUIRED = ("name", "vendor_name", "category", "amount", "frequency", "start_date")


def _normalize(data: dict[str, Any]) -> dict[str, Any]:
    if data.get("amount") is not None:
        data["amount"] = to_decimal(data["amount"])
    if data.get("frequency") is not None:
        data["frequency"] = coerce_enum(Frequency, data["frequency"], "frequency")
    for key in ("start_date", "end_date", "next_due_date"):
        if key in data:
            data[key] = parse_datetime(data[key])
    return data


def list_recurring_expenses(
    session: Session, is_active: bool | None = None
) -> list[RecurringExpense]:
    stmt = select(RecurringExpense)
    if is_active is not None:
        stmt = stmt.where(RecurringExpense.is_active.is_(is_active))
    return list(session.scalars(stmt.order_by(RecurringExpense.next_due_date.asc())))


def get_recurring_expense(session: Session, expense_id: str) -> RecurringExpense:
    return get_or_404(session, RecurringExpense, expense_id)


def create_recurring_expense(session: Session, data: dict[str, Any]) -> RecurringExpense:
    data = _normalize(clean(data))
    missing = [key for key in _REQUIRED if key not in data]
    if missing:
        raise InvalidInputError(f"Missing fields: {', '.join(missing)}")
    data.setdefault("next_due_date", data["start_date"])
    expense = RecurringExpense(**data)
    session.add(expense)
    session.flush()
    return expense


def update_recurring_expense(
    session: Session, expense_id: str, data: dict[str, Any]
) -> RecurringExpense:
    expense = get_recurring_expense(session, expense_id)
    apply_updates(expense, _normalize(dict(data)))
    session.flush()
    return expense


def delete_recurring_expense(session: Session, expense_id: str) -> None:
    session.delete(get_recurring_expense(session, expense_id))
    session.flush()
