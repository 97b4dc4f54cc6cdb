"""Payments, draft payments, categories and allocations."""

from datetime import datetime
from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from injaz.api.deps import get_db, get_org_id
from injaz.api.schemas import (
    AllocationCreate,
    CategoryCreate,
    PaymentCreate,
    PaymentFields,
    payment_out,
)
from injaz.services import payments

router = APIRouter(prefix="/api", tags=["payments"])


# === Payments ===


@router.get("/payments")
def list_payments(
    direction: str | None = None,
    status: str | None = None,
    party_id: str | None = None,
    project_id: str | None = None,
    category_id: str | None = None,
    date_from: datetime | None = None,
    date_to: datetime | None = None,
    org_id: str = Depends(get_org_id),
    db: Session = Depends(get_db),
) -> list[dict[str, Any]]:
    found = payments.list_payments(
        db,
        org_id,
        direction=direction,
        status=status,
        party_id=party_id,
        project_id=project_id,
        category_id=category_id,
        date_from=date_from,
        date_to=date_to,
    )
    return [payment_out(p) for p in found]


@router.get("/payments/summary")
def financial_summary(
    org_id: str = Depends(get_org_id), db: Session = Depends(get_db)
) -> dict[str, float | int]:
    return payments.financial_summary(db, org_id)


@router.get("/payments/next-number")
def next_number(
    direction: str, org_id: str = Depends(get_org_id), db: Session = Depends(get_db)
) -> dict[str, str]:
    return {"number": payments.next_payment_number(db, org_id, payments.payment_prefix(direction))}


@router.get("/payments/{payment_id}")
def get_payment(payment_id: str, db: Session = Depends(get_db)) -> dict[str, Any]:
    payment = payments.get_payment(db, payment_id)
    data = payment_out(payment)
    data["allocations"] = [a.to_dict() for a in payment.allocations]
    return data


@router.post("/payments", status_code=201)
def create_payment(
    body: PaymentCreate, org_id: str = Depends(get_org_id), db: Session = Depends(get_db)
) -> dict[str, Any]:
    payment = payments.create_payment(db, org_id, body.model_dump())
    db.commit()
    return payment_out(payment)


@router.patch("/payments/{payment_id}")
def update_payment(
    payment_id: str, body: PaymentFields, db: Session = Depends(get_db)
) -> dict[str, Any]:
    payment = payments.update_payment(db, payment_id, body.changes())
    db.commit()
    return payment_out(payment)


@router.delete("/payments/{payment_id}", status_code=204)
def delete_payment(payment_id: str, db: Session = Depends(get_db)) -> None:
    payments.delete_payment(db, payment_id)
    db.commit()


# === Draft payments ===


@router.get("/draft-payments")
def list_draft_payments(
    org_id: str = Depends(get_org_id), db: Session = Depends(get_db)
) -> list[dict[str, Any]]:
    return [payment_out(p) for p in payments.list_draft_payments(db, org_id)]


@router.post("/draft-payments", status_code=201)
def create_draft_payment(
    body: PaymentCreate, org_id: str = Depends(get_org_id), db: Session = Depends(get_db)
) -> dict[str, Any]:
    draft = payments.create_draft_payment(db, org_id, body.model_dump())
    db.commit()
    return payment_out(draft)


@router.patch("/draft-payments/{payment_id}")
def update_draft_payment(
    payment_id: str, body: PaymentFields, db: Session = Depends(get_db)
) -> dict[str, Any]:
    draft = payments.update_draft_payment(db, payment_id, body.changes())
    db.commit()
    return payment_out(draft)


@router.post("/draft-payments/{payment_id}/confirm")
def confirm_draft_payment(
    payment_id: str, body: PaymentFields, db: Session = Depends(get_db)
) -> dict[str, Any]:
    payment = payments.confirm_draft_payment(db, payment_id, body.changes())
    db.commit()
    return payment_out(payment)


@router.delete("/draft-payments/{payment_id}", status_code=204)
def delete_draft_payment(payment_id: str, db: Session = Depends(get_db)) -> None:
    payments.delete_payment(db, payment_id)
    db.commit()


# === Categories ===


@router.get("/categories")
def list_categories(
    type: str | None = None, org_id: str = Depends(get_org_id), db: Session = Depends(get_db)
) -> list[dict[str, Any]]:
    return [c.to_dict() for c in payments.list_categories(db, org_id, type=type)]


@router.post("/categories", status_code=201)
def create_category(
    body: CategoryCreate, org_id: str = Depends(get_org_id), db: Session = Depends(get_db)
) -> dict[str, Any]:
    category = payments.create_category(db, org_id, body.name, body.type, body.color)
    db.commit()
    return category.to_dict()


@router.delete("/categories/{category_id}", status_code=204)
def delete_category(category_id: str, db: Session = Depends(get_db)) -> None:
    payments.delete_category(db, category_id)
    db.commit()


# === Allocations ===


@router.get("/payments/{payment_id}/allocations")
def list_allocations(payment_id: str, db: Session = Depends(get_db)) -> list[dict[str, Any]]:
    return [a.to_dict() for a in payments.list_allocations(db, payment_id)]


@router.post("/payments/{payment_id}/allocations", status_code=201)
def create_allocation(
    payment_id: str, body: AllocationCreate, db: Session = Depends(get_db)
) -> dict[str, Any]:
    allocation = payments.create_allocation(db, payment_id, body.document_id, body.amount)
    db.commit()
    return allocation.to_dict()


@router.delete("/allocations/{allocation_id}", status_code=204)
def delete_allocation(allocation_id: str, db: Session = Depends(get_db)) -> None:
    payments.delete_allocation(db, allocation_id)
    db.commit()
