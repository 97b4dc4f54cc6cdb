"""Clients, vendors and employees."""

from typing import Any

import structlog
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from injaz.db.enums import PartyType
from injaz.db.models import Party
from injaz.services.base import apply_updates, clean, coerce_enum, get_or_404

logger = structlog.get_logger(__name__)


def list_parties(session: Session, org_id: str, type: str | PartyType | None = None) -> list[Party]:
    stmt = select(Party).where(Party.organization_id == org_id)
    if type:
        stmt = stmt.where(Party.type == coerce_enum(PartyType, type, "party type"))
    return list(session.scalars(stmt.order_by(Party.name)))


def search_parties(
    session: Session,
    org_id: str,
    query: str,
    type: str | PartyType | None = None,
    limit: int = 20,
) -> list[Party]:
    """Case-insensitive substring search on the party name."""
    stmt = select(Party).where(
        Party.organization_id == org_id,
        Party.name.icontains(query, autoescape=True),
    )
    if type:
        stmt = stmt.where(Party.type == coerce_enum(PartyType, type, "party type"))
    return list(session.scalars(stmt.order_by(Party.name).limit(limit)))


def get_party(session: Session, party_id: str) -> Party:
    return get_or_404(session, Party, party_id)


def create_party(session: Session, org_id: str, data: dict[str, Any]) -> Party:
    data = clean(data)
    data["type"] = coerce_enum(PartyType, data.get("type", PartyType.VENDOR), "party type")
    party = Party(organization_id=org_id, **data)
    session.add(party)
    session.flush()
    logger.info("party_created", party_id=party.id, name=party.name, type=party.type.value)
    return party


def update_party(session: Session, party_id: str, data: dict[str, Any]) -> Party:
    party = get_party(session, party_id)
    if "type" in data and data["type"] is not None:
        data["type"] = coerce_enum(PartyType, data["type"], "party type")
    apply_updates(party, data)
    session.flush()
    return party


def delete_party(session: Session, party_id: str) -> None:
    session.delete(get_party(session, party_id))
    session.flush()
    logger.info("party_deleted", party_id=party_id)


def party_stats(session: Session, org_id: str) -> dict[str, int]:
    rows = session.execute(
        select(Party.type, func.count())
        .where(Party.organization_id == org_id)
        .group_by(Party.type)
    ).all()
    counts = {party_type: count for party_type, count in rows}
    clients = counts.get(PartyType.CLIENT, 0)
    vendors = counts.get(PartyType.VENDOR, 0)
    employees = counts.get(PartyType.EMPLOYEE, 0)
    return {
        "clients": clients,
        "vendors": vendors,
        "employees": employees,
        "total": clients + vendors + employees,
    }
