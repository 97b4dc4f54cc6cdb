"""Payments, draft payments, categories and payment-to-document allocations."""

import re
from datetime import datetime
from decimal import Decimal
from typing import Any

import structlog
from sqlalchemy import select
from sqlalchemy.orm import Session

from injaz.db.enums import Direction, DocumentStatus, PaymentMethod, PaymentStatus
from injaz.db.models import Category, Document, Payment, PaymentAllocation
from injaz.financials import ZERO, summarize_payments, to_decimal
from injaz.services.base import (
    apply_updates,
    clean,
    coerce_enum,
    get_or_404,
    parse_datetime,
    utcnow,
)
from injaz.services.errors import InvalidInputError

logger = structlog.get_logger(__name__)

DRAFT_PREFIX = "DRF"
_NUMBER_SUFFIX = re.compile(r"(\d+)$")

_ENUM_FIELDS = {
    "direction": Direction,
    "status": PaymentStatus,
    "method": PaymentMethod,
}
_DATE_FIELDS = ("planned_date", "actual_date")
_MONEY_FIELDS = (
    "expected_amount",
    "actual_amount",
    "subtotal",
    "vat_amount",
    "income_tax_amount",
    "gross_amount",
    "net_bank_amount",
)
_RATE_FIELDS = ("vat_rate", "income_tax_rate")


def payment_prefix(direction: Direction | str) -> str:
    return "RCV" if coerce_enum(Direction, direction) == Direction.INBOUND else "PAY"


def next_payment_number(session: Session, org_id: str, prefix: str) -> str:
    """Next ``PREFIX-####`` number, one past the highest existing suffix."""
    numbers = session.scalars(
        select(Payment.number).where(
            Payment.organization_id == org_id,
            Payment.number.startswith(f"{prefix}-"),
        )
    )
    highest = 0
    for number in numbers:
        match = _NUMBER_SUFFIX.search(number)
        if match:
            highest = max(highest, int(match.group(1)))
    return f"{prefix}-{highest + 1:04d}"


def _normalize(data: dict[str, Any]) -> dict[str, Any]:
    for key, enum_cls in _ENUM_FIELDS.items():
        if data.get(key) is not None:
            data[key] = coerce_enum(enum_cls, data[key], key)
    for key in _DATE_FIELDS:
        if key in data and data[key] is not None:
            data[key] = parse_datetime(data[key])
    for key in _MONEY_FIELDS + _RATE_FIELDS:
        if data.get(key) is not None:
            data[key] = to_decimal(data[key])
    return data


# === Payments ===


def list_payments(
    session: Session,
    org_id: str,
    direction: str | None = None,
    status: str | None = None,
    party_id: str | None = None,
    project_id: str | None = None,
    category_id: str | None = None,
    date_from: datetime | str | None = None,
    date_to: datetime | str | None = None,
) -> list[Payment]:
    stmt = select(Payment).where(Payment.organization_id == org_id, Payment.is_draft.is_(False))
    if direction:
        stmt = stmt.where(Payment.direction == coerce_enum(Direction, direction))
    if status:
        stmt = stmt.where(Payment.status == coerce_enum(PaymentStatus, status))
    if party_id:
        stmt = stmt.where(Payment.party_id == party_id)
    if project_id:
        stmt = stmt.where(Payment.project_id == project_id)
    if category_id:
        stmt = stmt.where(Payment.category_id == category_id)
    if date_from:
        stmt = stmt.where(Payment.planned_date >= parse_datetime(date_from))
    if date_to:
        stmt = stmt.where(Payment.planned_date <= parse_datetime(date_to))
    return list(session.scalars(stmt.order_by(Payment.planned_date.desc())))


def get_payment(session: Session, payment_id: str) -> Payment:
    return get_or_404(session, Payment, payment_id)


def create_payment(session: Session, org_id: str, data: dict[str, Any]) -> Payment:
    """Create a confirmed (non-draft) payment; empty values are dropped."""
    data = _normalize(clean(data))
    if "direction" not in data:
        raise InvalidInputError("direction is required")
    if "expected_amount" not in data:
        raise InvalidInputError("expected_amount is required")
    if "number" not in data:
        data["number"] = next_payment_number(session, org_id, payment_prefix(data["direction"]))
    data.setdefault("planned_date", utcnow())

    payment = Payment(organization_id=org_id, is_draft=False, **data)
    session.add(payment)
    session.flush()
    logger.info(
        "payment_created",
        payment_id=payment.id,
        number=payment.number,
        direction=payment.direction.value,
        amount=str(payment.expected_amount),
    )
    return payment


def update_payment(session: Session, payment_id: str, data: dict[str, Any]) -> Payment:
    payment = get_payment(session, payment_id)
    apply_updates(payment, _normalize(data))
    session.flush()
    return payment


def delete_payment(session: Session, payment_id: str) -> None:
    session.delete(get_payment(session, payment_id))
    session.flush()
    logger.info("payment_deleted", payment_id=payment_id)


# === Draft payments (same table, is_draft=True) ===


def list_draft_payments(session: Session, org_id: str) -> list[Payment]:
    stmt = (
        select(Payment)
        .where(Payment.organization_id == org_id, Payment.is_draft.is_(True))
        .order_by(Payment.created_at.desc())
    )
    return list(session.scalars(stmt))


def create_draft_payment(session: Session, org_id: str, data: dict[str, Any]) -> Payment:
    """Stage a payment for review; the party may still be unknown."""
    data = _normalize(clean(data))
    if "direction" not in data:
        raise InvalidInputError("direction is required")
    if "expected_amount" not in data:
        raise InvalidInputError("expected_amount is required")
    data.setdefault("number", next_payment_number(session, org_id, DRAFT_PREFIX))
    data.setdefault("planned_date", utcnow())
    data["status"] = PaymentStatus.PLANNED

    payment = Payment(organization_id=org_id, is_draft=True, **data)
    session.add(payment)
    session.flush()
    logger.info(
        "draft_payment_created",
        payment_id=payment.id,
        number=payment.number,
        has_party=payment.party_id is not None,
    )
    return payment


def update_draft_payment(session: Session, payment_id: str, data: dict[str, Any]) -> Payment:
    payment = get_payment(session, payment_id)
    if not payment.is_draft:
        raise InvalidInputError(f"Payment {payment.number} is not a draft")
    apply_updates(payment, _normalize(data))
    session.flush()
    return payment


def confirm_draft_payment(session: Session, payment_id: str, data: dict[str, Any]) -> Payment:
    """Turn a draft into an authoritative payment; a party is mandatory."""
    payment = get_payment(session, payment_id)
    if not payment.is_draft:
        raise InvalidInputError(f"Payment {payment.number} is not a draft")
    data = _normalize(dict(data))
    party_id = data.get("party_id") or payment.party_id
    if not party_id:
        raise InvalidInputError("A party is required to confirm a draft payment")
    data["party_id"] = party_id
    data["status"] = data.get("status") or PaymentStatus.PLANNED
    apply_updates(payment, data)
    payment.is_draft = False
    session.flush()
    logger.info("draft_payment_confirmed", payment_id=payment.id, number=payment.number)
    return payment


# === Summary ===


def financial_summary(session: Session, org_id: str) -> dict[str, float | int]:
    payments = list(
        session.scalars(
            select(Payment).where(Payment.organization_id == org_id, Payment.is_draft.is_(False))
        )
    )
    return summarize_payments(payments)


# === Categories ===


def list_categories(session: Session, org_id: str, type: str | None = None) -> list[Category]:
    stmt = select(Category).where(Category.organization_id == org_id)
    if type:
        stmt = stmt.where(Category.type == coerce_enum(Direction, type, "category type"))
    return list(session.scalars(stmt.order_by(Category.name)))


def create_category(
    session: Session, org_id: str, name: str, type: str, color: str | None = None
) -> Category:
    category = Category(
        organization_id=org_id,
        name=name,
        type=coerce_enum(Direction, type, "category type"),
        color=color,
    )
    session.add(category)
    session.flush()
    return category


def delete_category(session: Session, category_id: str) -> None:
    session.delete(get_or_404(session, Category, category_id))
    session.flush()


# === Allocations ===


def list_allocations(session: Session, payment_id: str) -> list[PaymentAllocation]:
    stmt = select(PaymentAllocation).where(PaymentAllocation.payment_id == payment_id)
    return list(session.scalars(stmt))


def _recompute_document_balance(session: Session, document_id: str) -> None:
    document = session.get(Document, document_id)
    if document is None:
        return
    allocated = session.scalars(
        select(PaymentAllocation.amount).where(PaymentAllocation.document_id == document_id)
    )
    total_paid = sum((to_decimal(amount) for amount in allocated), ZERO)
    document.paid_amount = total_paid
    document.remaining_amount = to_decimal(document.net_amount) - total_paid


def create_allocation(
    session: Session, payment_id: str, document_id: str, amount: Decimal | float | str
) -> PaymentAllocation:
    get_payment(session, payment_id)
    get_or_404(session, Document, document_id)
    allocation = PaymentAllocation(
        payment_id=payment_id, document_id=document_id, amount=to_decimal(amount)
    )
    session.add(allocation)
    session.flush()
    _recompute_document_balance(session, document_id)
    session.flush()
    logger.info(
        "allocation_created",
        payment_id=payment_id,
        document_id=document_id,
        amount=str(allocation.amount),
    )
    return allocation


def delete_allocation(session: Session, allocation_id: str) -> None:
    allocation = session.get(PaymentAllocation, allocation_id)
    if allocation is None:
        return
    document_id = allocation.document_id
    session.delete(allocation)
    session.flush()
    _recompute_document_balance(session, document_id)
    session.flush()


def unpaid_documents_for_party(session: Session, party_id: str) -> list[Document]:
    stmt = (
        select(Document)
        .where(
            Document.party_id == party_id,
            Document.remaining_amount > 0,
            Document.status.not_in([DocumentStatus.CANCELLED, DocumentStatus.DRAFT]),
        )
        .order_by(Document.issue_date.desc())
    )
    return list(session.scalars(stmt))
