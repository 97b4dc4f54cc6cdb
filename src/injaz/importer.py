"""Bulk import of historical transactions from a CSV export.

Expected columns: ``Date, Description, Amount, Type, Category, Party,
Project, Status``. ``Type`` is ``income`` or ``expense``; a ``Status`` of
``completed`` marks the payment as already settled.
"""

import csv
import io
from typing import Any

import structlog
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from injaz.db.enums import Direction, PartyType, PaymentStatus
from injaz.db.models import Category, Party, Payment, Project
from injaz.financials import to_decimal
from injaz.services.base import parse_datetime
from injaz.services.errors import InvalidInputError
from injaz.services.payments import next_payment_number, payment_prefix
from injaz.services.users import get_or_create_organization

logger = structlog.get_logger(__name__)


def _direction(row: dict[str, str]) -> Direction:
    return Direction.INBOUND if row.get("Type", "").lower() == "income" else Direction.OUTBOUND


def parse_rows(csv_text: str) -> list[dict[str, str]]:
    """Read CSV text into dicts of stripped strings keyed by header."""
    reader = csv.DictReader(io.StringIO(csv_text.strip()))
    if reader.fieldnames:
        reader.fieldnames = [name.strip() for name in reader.fieldnames]
    return [
        {key: (value or "").strip() for key, value in row.items() if key is not None}
        for row in reader
    ]


class _NumberSequence:
    """Hands out consecutive payment numbers for one prefix."""

    def __init__(self, session: Session, org_id: str, prefix: str):
        start = next_payment_number(session, org_id, prefix)
        self.prefix = prefix
        self.next_value = int(start.rsplit("-", 1)[1])

    def take(self) -> str:
        number = f"{self.prefix}-{self.next_value:04d}"
        self.next_value += 1
        return number


def _upsert_by_name(session: Session, model: Any, org_id: str, name: str, **defaults: Any) -> Any:
    record = session.scalars(
        select(model).where(model.organization_id == org_id, model.name == name)
    ).first()
    if record is None:
        record = model(organization_id=org_id, name=name, **defaults)
        session.add(record)
        session.flush()
    return record


def import_csv(session: Session, csv_text: str, user_id: str) -> dict[str, Any]:
    """Import transactions; the caller commits.

    Parties, categories and projects are matched by exact name and created
    when missing. Rows without a party, with a zero or unparseable amount,
    or that fail to insert are skipped and counted.
    """
    if not csv_text or not user_id:
        raise InvalidInputError("csv and userId required")

    organization = get_or_create_organization(session)
    org_id = organization.id
    rows = parse_rows(csv_text)
    log = logger.bind(org_id=org_id, rows=len(rows))
    log.info("csv_import_started")

    parties: dict[str, Party] = {}
    categories: dict[str, Category] = {}
    projects: dict[str, Project] = {}
    for row in rows:
        if row.get("Party") and row["Party"] not in parties:
            parties[row["Party"]] = _upsert_by_name(
                session, Party, org_id, row["Party"], type=PartyType.VENDOR
            )
        if row.get("Category") and row["Category"] not in categories:
            categories[row["Category"]] = _upsert_by_name(
                session, Category, org_id, row["Category"], type=_direction(row)
            )
        if row.get("Project") and row["Project"] not in projects:
            projects[row["Project"]] = _upsert_by_name(session, Project, org_id, row["Project"])

    # Anyone who paid us is a client
    for row in rows:
        if _direction(row) == Direction.INBOUND and row.get("Party") in parties:
            parties[row["Party"]].type = PartyType.CLIENT
    session.flush()

    sequences = {
        direction: _NumberSequence(session, org_id, payment_prefix(direction))
        for direction in Direction
    }
    created = 0
    skipped = 0
    for row in rows:
        party = parties.get(row.get("Party", ""))
        amount = to_decimal(row.get("Amount"))
        if party is None or amount == 0:
            skipped += 1
            continue
        try:
            planned_date = parse_datetime(row.get("Date"))
        except InvalidInputError:
            planned_date = None
        if planned_date is None:
            log.warning("csv_row_invalid_date", description=row.get("Description"))
            skipped += 1
            continue

        direction = _direction(row)
        completed = row.get("Status", "").lower() == "completed"
        category = categories.get(row.get("Category", ""))
        project = projects.get(row.get("Project", ""))
        try:
            with session.begin_nested():
                session.add(
                    Payment(
                        organization_id=org_id,
                        number=sequences[direction].take(),
                        direction=direction,
                        status=PaymentStatus.COMPLETED if completed else PaymentStatus.PLANNED,
                        party_id=party.id,
                        category_id=category.id if category else None,
                        project_id=project.id if project else None,
                        planned_date=planned_date,
                        actual_date=planned_date if completed else None,
                        expected_amount=amount,
                        actual_amount=amount if completed else None,
                        currency=organization.currency,
                        description=row.get("Description", ""),
                        created_by_id=user_id,
                    )
                )
            created += 1
        except SQLAlchemyError as e:
            log.error("csv_row_failed", description=row.get("Description"), error=str(e))
            skipped += 1

    stats = {
        "parties": len(parties),
        "categories": len(categories),
        "projects": len(projects),
        "payments": {"created": created, "skipped": skipped},
    }
    log.info("csv_import_finished", created=created, skipped=skipped)
    return stats
