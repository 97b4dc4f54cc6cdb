"""Best-effort matching of free-text names to stored records.

Names coming from the model are fuzzy ("acme" for "ACME Supplies LLC"), so
matching is a case-insensitive substring search, ordered by name so the
same input always resolves to the same record.
"""

import structlog
from sqlalchemy import select
from sqlalchemy.orm import Session

from injaz.db.enums import Direction, PartyType
from injaz.db.models import Party, Project, User
from injaz.services.base import coerce_enum

logger = structlog.get_logger(__name__)


def _blank(name: str | None) -> bool:
    return name is None or not name.strip()


def find_party(
    session: Session, org_id: str, name: str | None, type: PartyType | str | None = None
) -> Party | None:
    if _blank(name):
        return None
    stmt = select(Party).where(
        Party.organization_id == org_id,
        Party.name.icontains(name.strip(), autoescape=True),
    )
    if type:
        stmt = stmt.where(Party.type == coerce_enum(PartyType, type, "party type"))
    return session.scalars(stmt.order_by(Party.name)).first()


def resolve_party(
    session: Session, org_id: str, name: str | None, direction: Direction | str
) -> Party | None:
    """Find a party by name or create one typed by the payment direction."""
    party = find_party(session, org_id, name)
    if party is not None or _blank(name):
        return party

    direction = coerce_enum(Direction, direction)
    party = Party(
        organization_id=org_id,
        name=name.strip(),
        type=PartyType.CLIENT if direction == Direction.INBOUND else PartyType.VENDOR,
    )
    session.add(party)
    session.flush()
    logger.info("party_auto_created", party_id=party.id, name=party.name, type=party.type.value)
    return party


def find_project(session: Session, org_id: str, name: str | None) -> Project | None:
    if _blank(name):
        return None
    stmt = select(Project).where(
        Project.organization_id == org_id,
        Project.name.icontains(name.strip(), autoescape=True),
    )
    return session.scalars(stmt.order_by(Project.name)).first()


def find_user(session: Session, name: str | None) -> User | None:
    if _blank(name):
        return None
    stmt = select(User).where(User.name.icontains(name.strip(), autoescape=True))
    return session.scalars(stmt.order_by(User.name)).first()
