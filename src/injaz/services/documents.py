"""Quotations, invoices, purchase orders and vendor bills."""

from typing import Any

import structlog
from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from injaz.db.enums import Direction, DocumentStatus, DocumentType
from injaz.db.models import Document, DocumentLineItem
from injaz.financials import LineItemInput, compute_document_totals, to_decimal
from injaz.services.base import coerce_enum, get_or_404, parse_datetime, utcnow
from injaz.services.errors import InvalidInputError

logger = structlog.get_logger(__name__)


def list_documents(session: Session, org_id: str, type: str | None = None) -> list[Document]:
    stmt = select(Document).where(Document.organization_id == org_id)
    if type:
        stmt = stmt.where(Document.type == coerce_enum(DocumentType, type, "document type"))
    stmt = stmt.options(selectinload(Document.line_items)).order_by(Document.created_at.desc())
    return list(session.scalars(stmt))


def get_document(session: Session, document_id: str) -> Document:
    return get_or_404(session, Document, document_id)


def next_document_number(session: Session, org_id: str, type: DocumentType | str) -> str:
    doc_type = coerce_enum(DocumentType, type, "document type")
    count = session.scalar(
        select(func.count())
        .select_from(Document)
        .where(Document.organization_id == org_id, Document.type == doc_type)
    )
    return f"{doc_type.prefix}-{(count or 0) + 1:04d}"


def create_document(
    session: Session,
    org_id: str,
    type: DocumentType | str,
    party_id: str,
    line_items: list[dict[str, Any]],
    created_by_id: str | None = None,
    direction: Direction | str | None = None,
    project_id: str | None = None,
    issue_date: Any = None,
    due_date: Any = None,
    vat_rate: Any = None,
    income_tax_rate: Any = None,
    notes: str | None = None,
) -> Document:
    """Create a DRAFT document with its line items and tax totals.

    ``direction`` defaults to the one implied by the document type, and the
    whole net amount starts out as remaining.
    """
    doc_type = coerce_enum(DocumentType, type, "document type")
    if not party_id:
        raise InvalidInputError("party_id is required")
    if not line_items:
        raise InvalidInputError("At least one line item is required")

    items = [LineItemInput.from_mapping(item) for item in line_items]
    totals = compute_document_totals(
        items, to_decimal(vat_rate), to_decimal(income_tax_rate)
    )

    document = Document(
        organization_id=org_id,
        number=next_document_number(session, org_id, doc_type),
        type=doc_type,
        direction=coerce_enum(Direction, direction) if direction else doc_type.direction,
        status=DocumentStatus.DRAFT,
        party_id=party_id,
        project_id=project_id or None,
        issue_date=parse_datetime(issue_date) or utcnow(),
        due_date=parse_datetime(due_date),
        subtotal=totals.subtotal,
        vat_rate=totals.vat_rate,
        vat_amount=totals.vat_amount,
        income_tax_rate=totals.income_tax_rate,
        income_tax_amount=totals.income_tax_amount,
        gross_amount=totals.gross_amount,
        net_amount=totals.net_amount,
        paid_amount=to_decimal(0),
        remaining_amount=totals.net_amount,
        notes=notes,
        created_by_id=created_by_id,
        line_items=[
            DocumentLineItem(
                description=line.description,
                quantity=line.quantity,
                unit_price=line.unit_price,
                total=line.total,
                vat_amount=line.vat_amount,
                sort_order=line.sort_order,
            )
            for line in totals.lines
        ],
    )
    session.add(document)
    session.flush()
    logger.info(
        "document_created",
        document_id=document.id,
        number=document.number,
        net_amount=str(document.net_amount),
    )
    return document


def update_document_status(session: Session, document_id: str, status: str) -> Document:
    document = get_document(session, document_id)
    document.status = coerce_enum(DocumentStatus, status, "document status")
    session.flush()
    return document


def delete_document(session: Session, document_id: str) -> None:
    session.delete(get_document(session, document_id))
    session.flush()
    logger.info("document_deleted", document_id=document_id)


def document_stats(session: Session, org_id: str) -> dict[str, int]:
    rows = session.execute(
        select(Document.type, func.count())
        .where(Document.organization_id == org_id)
        .group_by(Document.type)
    ).all()
    counts = dict(rows)
    stats = {
        "quotations": counts.get(DocumentType.QUOTATION, 0),
        "invoices": counts.get(DocumentType.INVOICE, 0),
        "purchase_orders": counts.get(DocumentType.PURCHASE_ORDER, 0),
        "vendor_bills": counts.get(DocumentType.VENDOR_BILL, 0),
    }
    stats["total"] = sum(stats.values())
    return stats
