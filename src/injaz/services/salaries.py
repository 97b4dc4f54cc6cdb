"""Monthly salaries."""

from decimal import Decimal
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from injaz.db.enums import SalaryStatus
from injaz.db.models import Salary
from injaz.financials import ZERO, to_decimal
from injaz.services.base import apply_updates, clean, coerce_enum, get_or_404, parse_datetime
from injaz.services.errors import InvalidInputError

_REQUIRED = ("user_id", "month", "gross_amount", "net_amount", "scheduled_date")


def _normalize(data: dict[str, Any]) -> dict[str, Any]:
    for key in ("gross_amount", "net_amount", "paid_amount"):
        if data.get(key) is not None:
            data[key] = to_decimal(data[key])
    for key in ("scheduled_date", "deferred_until"):
        if key in data:
            data[key] = parse_datetime(data[key])
    if data.get("status") is not None:
        data["status"] = coerce_enum(SalaryStatus, data["status"], "salary status")
    return data


def list_salaries(
    session: Session,
    user_id: str | None = None,
    status: str | None = None,
    month: str | None = None,
) -> list[Salary]:
    stmt = select(Salary)
    if user_id:
        stmt = stmt.where(Salary.user_id == user_id)
    if status:
        stmt = stmt.where(Salary.status == coerce_enum(SalaryStatus, status, "salary status"))
    if month:
        stmt = stmt.where(Salary.month == month)
    return list(session.scalars(stmt.order_by(Salary.scheduled_date.desc())))


def get_salary(session: Session, salary_id: str) -> Salary:
    return get_or_404(session, Salary, salary_id)


def create_salary(session: Session, data: dict[str, Any]) -> Salary:
    data = _normalize(clean(data))
    missing = [key for key in _REQUIRED if key not in data]
    if missing:
        raise InvalidInputError(f"Missing fields: {', '.join(missing)}")
    salary = Salary(**data)
    session.add(salary)
    session.flush()
    return salary


def update_salary(session: Session, salary_id: str, data: dict[str, Any]) -> Salary:
    salary = get_salary(session, salary_id)
    apply_updates(salary, _normalize(dict(data)))
    session.flush()
    return salary


def delete_salary(session: Session, salary_id: str) -> None:
    session.delete(get_salary(session, salary_id))
    session.flush()


def salary_stats(session: Session, month: str | None = None) -> dict[str, float | int]:
    """Gross total, net paid and net still pending (scheduled or deferred)."""
    salaries = list_salaries(session, month=month)
    total: Decimal = sum((to_decimal(s.gross_amount) for s in salaries), ZERO)
    paid: Decimal = sum(
        (to_decimal(s.net_amount) for s in salaries if s.status == SalaryStatus.PAID), ZERO
    )
    pending: Decimal = sum(
        (
            to_decimal(s.net_amount)
            for s in salaries
            if s.status in (SalaryStatus.SCHEDULED, SalaryStatus.DEFERRED)
        ),
        ZERO,
    )
    return {
        "total": float(total),
        "paid": float(paid),
        "pending": float(pending),
        "count": len(salaries),
    }
