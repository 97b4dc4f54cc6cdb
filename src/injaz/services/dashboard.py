"""Dashboard and report aggregates.

Every figure here is based on the expected amount of non-draft payments;
drafts are still awaiting review and never count towards totals.
"""

from collections import defaultdict
from decimal import Decimal
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from injaz.db.enums import Direction, PaymentStatus
from injaz.db.models import Party, Payment, Project, Task
from injaz.financials import ZERO, month_key, to_decimal

DONE_STATUS = "Done"


def _payments(session: Session, org_id: str) -> list[Payment]:
    stmt = select(Payment).where(Payment.organization_id == org_id, Payment.is_draft.is_(False))
    return list(session.scalars(stmt))


def _total(payments: list[Payment], direction: Direction, status: PaymentStatus | None = None) -> Decimal:
    return sum(
        (
            to_decimal(p.expected_amount)
            for p in payments
            if p.direction == direction and (status is None or p.status == status)
        ),
        ZERO,
    )


def dashboard_stats(session: Session, org_id: str) -> dict[str, Any]:
    payments = _payments(session, org_id)
    total_revenue = _total(payments, Direction.INBOUND)
    total_expenses = _total(payments, Direction.OUTBOUND)

    recent = sorted(payments, key=lambda p: p.planned_date, reverse=True)[:10]
    return {
        "total_revenue": float(total_revenue),
        "total_expenses": float(total_expenses),
        "completed_revenue": float(_total(payments, Direction.INBOUND, PaymentStatus.COMPLETED)),
        "completed_expenses": float(_total(payments, Direction.OUTBOUND, PaymentStatus.COMPLETED)),
        "planned_revenue": float(_total(payments, Direction.INBOUND, PaymentStatus.PLANNED)),
        "planned_expenses": float(_total(payments, Direction.OUTBOUND, PaymentStatus.PLANNED)),
        "net_profit": float(total_revenue - total_expenses),
        "payment_count": len(payments),
        "party_count": session.scalar(
            select(func.count()).select_from(Party).where(Party.organization_id == org_id)
        ),
        "project_count": session.scalar(
            select(func.count()).select_from(Project).where(Project.organization_id == org_id)
        ),
        "task_count": session.scalar(select(func.count()).select_from(Task)),
        "tasks_done": session.scalar(
            select(func.count()).select_from(Task).where(Task.status == DONE_STATUS)
        ),
        "recent_payments": [
            {
                "id": p.id,
                "number": p.number,
                "direction": p.direction.value,
                "status": p.status.value,
                "amount": float(to_decimal(p.expected_amount)),
                "party": p.party.name if p.party else None,
                "planned_date": p.planned_date.isoformat() if p.planned_date else None,
            }
            for p in recent
        ],
    }


def category_breakdown(session: Session, org_id: str) -> list[dict[str, Any]]:
    totals: dict[str, dict[str, Any]] = {}
    for payment in _payments(session, org_id):
        category = payment.category
        if category is None:
            continue
        entry = totals.setdefault(
            category.id,
            {"name": category.name, "type": category.type.value, "total": ZERO, "count": 0},
        )
        entry["total"] += to_decimal(payment.expected_amount)
        entry["count"] += 1

    rows = sorted(totals.values(), key=lambda row: row["total"], reverse=True)
    return [{**row, "total": float(row["total"])} for row in rows]


def monthly_breakdown(session: Session, org_id: str) -> list[dict[str, Any]]:
    months: dict[str, dict[str, Decimal]] = defaultdict(lambda: {"income": ZERO, "expense": ZERO})
    for payment in _payments(session, org_id):
        bucket = months[month_key(payment.planned_date)]
        key = "income" if payment.direction == Direction.INBOUND else "expense"
        bucket[key] += to_decimal(payment.expected_amount)

    return [
        {"month": month, "income": float(values["income"]), "expense": float(values["expense"])}
        for month, values in sorted(months.items())
    ]


def project_breakdown(session: Session, org_id: str) -> list[dict[str, Any]]:
    projects = session.scalars(
        select(Project)
        .where(Project.organization_id == org_id)
        .options(selectinload(Project.payments), selectinload(Project.tasks))
    )
    rows = []
    for project in projects:
        payments = [p for p in project.payments if not p.is_draft]
        income = _total(payments, Direction.INBOUND)
        expense = _total(payments, Direction.OUTBOUND)
        rows.append(
            {
                "id": project.id,
                "name": project.name,
                "color": project.color,
                "status": project.status.value,
                "task_count": len(project.tasks),
                "payment_count": len(payments),
                "income": float(income),
                "expense": float(expense),
                "profit": float(income - expense),
            }
        )
    return sorted(rows, key=lambda row: row["income"], reverse=True)


def top_parties(session: Session, org_id: str, limit: int = 10) -> list[dict[str, Any]]:
    parties = session.scalars(
        select(Party)
        .where(Party.organization_id == org_id)
        .options(selectinload(Party.payments), selectinload(Party.documents))
    )
    rows = []
    for party in parties:
        payments = [p for p in party.payments if not p.is_draft]
        volume = sum((to_decimal(p.expected_amount) for p in payments), ZERO)
        rows.append(
            {
                "id": party.id,
                "name": party.name,
                "type": party.type.value,
                "payment_count": len(payments),
                "document_count": len(party.documents),
                "total_volume": float(volume),
            }
        )
    rows.sort(key=lambda row: row["total_volume"], reverse=True)
    return rows[:limit]
