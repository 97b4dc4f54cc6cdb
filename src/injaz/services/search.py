"""Global search across the main record types."""

from typing import Any

from sqlalchemy import or_, select
from sqlalchemy.orm import Session

from injaz.db.models import Document, Party, Payment, Project, Task
from injaz.financials import to_decimal

MIN_QUERY_LENGTH = 2
RESULTS_PER_GROUP = 5


def _empty() -> dict[str, list[Any]]:
    return {"parties": [], "projects": [], "tasks": [], "payments": [], "documents": []}


def global_search(session: Session, org_id: str, query: str) -> dict[str, list[dict[str, Any]]]:
    """Up to five case-insensitive matches per record type."""
    query = (query or "").strip()
    if len(query) < MIN_QUERY_LENGTH:
        return _empty()

    def contains(column):
        return column.icontains(query, autoescape=True)

    parties = session.scalars(
        select(Party)
        .where(Party.organization_id == org_id, contains(Party.name))
        .limit(RESULTS_PER_GROUP)
    )
    projects = session.scalars(
        select(Project)
        .where(Project.organization_id == org_id, contains(Project.name))
        .limit(RESULTS_PER_GROUP)
    )
    tasks = session.scalars(select(Task).where(contains(Task.title)).limit(RESULTS_PER_GROUP))
    payments = session.scalars(
        select(Payment)
        .where(
            Payment.organization_id == org_id,
            or_(contains(Payment.number), contains(Payment.description)),
        )
        .limit(RESULTS_PER_GROUP)
    )
    documents = session.scalars(
        select(Document)
        .where(
            Document.organization_id == org_id,
            or_(contains(Document.number), contains(Document.notes)),
        )
        .limit(RESULTS_PER_GROUP)
    )

    return {
        "parties": [{"id": p.id, "name": p.name, "type": p.type.value} for p in parties],
        "projects": [
            {"id": p.id, "name": p.name, "status": p.status.value, "color": p.color}
            for p in projects
        ],
        "tasks": [
            {
                "id": t.id,
                "title": t.title,
                "status": t.status,
                "project": t.project.name if t.project else None,
            }
            for t in tasks
        ],
        "payments": [
            {
                "id": p.id,
                "number": p.number,
                "description": p.description,
                "direction": p.direction.value,
                "expected_amount": float(to_decimal(p.expected_amount)),
            }
            for p in payments
        ],
        "documents": [
            {"id": d.id, "number": d.number, "type": d.type.value, "notes": d.notes}
            for d in documents
        ],
    }
