"""Salaries, owner loans, recurring expenses, VAT liabilities and financial drafts."""

from typing import Any

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from injaz.api.deps import get_db
from injaz.api.schemas import (
    FinancialDraftCreate,
    LoanFields,
    RecurringFields,
    SalaryFields,
    StatusUpdate,
    VatFields,
)
from injaz.services import drafts, loans, recurring, salaries, vat

router = APIRouter(prefix="/api", tags=["finance"])


# === Salaries ===


@router.get("/salaries")
def list_salaries(
    user_id: str | None = None,
    status: str | None = None,
    month: str | None = None,
    db: Session = Depends(get_db),
) -> list[dict[str, Any]]:
    found = salaries.list_salaries(db, user_id=user_id, status=status, month=month)
    return [s.to_dict() for s in found]


@router.get("/salaries/stats")
def salary_stats(month: str | None = None, db: Session = Depends(get_db)) -> dict[str, float | int]:
    return salaries.salary_stats(db, month=month)


@router.get("/salaries/{salary_id}")
def get_salary(salary_id: str, db: Session = Depends(get_db)) -> dict[str, Any]:
    return salaries.get_salary(db, salary_id).to_dict()


@router.post("/salaries", status_code=201)
def create_salary(body: SalaryFields, db: Session = Depends(get_db)) -> dict[str, Any]:
    salary = salaries.create_salary(db, body.model_dump())
    db.commit()
    return salary.to_dict()


@router.patch("/salaries/{salary_id}")
def update_salary(salary_id: str, body: SalaryFields, db: Session = Depends(get_db)) -> dict[str, Any]:
    salary = salaries.update_salary(db, salary_id, body.changes())
    db.commit()
    return salary.to_dict()


@router.delete("/salaries/{salary_id}", status_code=204)
def delete_salary(salary_id: str, db: Session = Depends(get_db)) -> None:
    salaries.delete_salary(db, salary_id)
    db.commit()


# === Owner loans ===


@router.get("/loans")
def list_loans(status: str | None = None, db: Session = Depends(get_db)) -> list[dict[str, Any]]:
    return [loan.to_dict() for loan in loans.list_loans(db, status=status)]


@router.get("/loans/{loan_id}")
def get_loan(loan_id: str, db: Session = Depends(get_db)) -> dict[str, Any]:
    return loans.get_loan(db, loan_id).to_dict()


@router.post("/loans", status_code=201)
def create_loan(body: LoanFields, db: Session = Depends(get_db)) -> dict[str, Any]:
    loan = loans.create_loan(db, body.model_dump())
    db.commit()
    return loan.to_dict()


@router.patch("/loans/{loan_id}")
def update_loan(loan_id: str, body: LoanFields, db: Session = Depends(get_db)) -> dict[str, Any]:
    loan = loans.update_loan(db, loan_id, body.changes())
    db.commit()
    return loan.to_dict()


@router.delete("/loans/{loan_id}", status_code=204)
def delete_loan(loan_id: str, db: Session = Depends(get_db)) -> None:
    loans.delete_loan(db, loan_id)
    db.commit()


# === Recurring expenses ===


@router.get("/recurring-expenses")
def list_recurring(is_active: bool | None = None, db: Session = Depends(get_db)) -> list[dict[str, Any]]:
    return [e.to_dict() for e in recurring.list_recurring_expenses(db, is_active=is_active)]


@router.get("/recurring-expenses/{expense_id}")
def get_recurring(expense_id: str, db: Session = Depends(get_db)) -> dict[str, Any]:
    return recurring.get_recurring_expense(db, expense_id).to_dict()


@router.post("/recurring-expenses", status_code=201)
def create_recurring(body: RecurringFields, db: Session = Depends(get_db)) -> dict[str, Any]:
    expense = recurring.create_recurring_expense(db, body.model_dump())
    db.commit()
    return expense.to_dict()


@router.patch("/recurring-expenses/{expense_id}")
def update_recurring(
    expense_id: str, body: RecurringFields, db: Session = Depends(get_db)
) -> dict[str, Any]:
    expense = recurring.update_recurring_expense(db, expense_id, body.changes())
    db.commit()
    return expense.to_dict()


@router.delete("/recurring-expenses/{expense_id}", status_code=204)
def delete_recurring(expense_id: str, db: Session = Depends(get_db)) -> None:
    recurring.delete_recurring_expense(db, expense_id)
    db.commit()


# === VAT liabilities ===


@router.get("/vat-liabilities")
def list_vat(status: str | None = None, db: Session = Depends(get_db)) -> list[dict[str, Any]]:
    return [v.to_dict() for v in vat.list_vat_liabilities(db, status=status)]


@router.get("/vat-liabilities/{liability_id}")
def get_vat(liability_id: str, db: Session = Depends(get_db)) -> dict[str, Any]:
    return vat.get_vat_liability(db, liability_id).to_dict()


@router.post("/vat-liabilities", status_code=201)
def create_vat(body: VatFields, db: Session = Depends(get_db)) -> dict[str, Any]:
    liability = vat.create_vat_liability(db, body.model_dump())
    db.commit()
    return liability.to_dict()


@router.patch("/vat-liabilities/{liability_id}")
def update_vat(liability_id: str, body: VatFields, db: Session = Depends(get_db)) -> dict[str, Any]:
    liability = vat.update_vat_liability(db, liability_id, body.changes())
    db.commit()
    return liability.to_dict()


@router.delete("/vat-liabilities/{liability_id}", status_code=204)
def delete_vat(liability_id: str, db: Session = Depends(get_db)) -> None:
    vat.delete_vat_liability(db, liability_id)
    db.commit()


# === Financial drafts ===


@router.get("/financial-drafts")
def list_drafts(status: str | None = None, db: Session = Depends(get_db)) -> list[dict[str, Any]]:
    return [d.to_dict() for d in drafts.list_drafts(db, status=status)]


@router.post("/financial-drafts", status_code=201)
def create_draft(body: FinancialDraftCreate, db: Session = Depends(get_db)) -> dict[str, Any]:
    draft = drafts.create_draft(db, body.model_dump())
    db.commit()
    return draft.to_dict()


@router.patch("/financial-drafts/{draft_id}/status")
def update_draft_status(
    draft_id: str, body: StatusUpdate, db: Session = Depends(get_db)
) -> dict[str, Any]:
    draft = drafts.update_draft_status(db, draft_id, body.status)
    db.commit()
    return draft.to_dict()


@router.delete("/financial-drafts/{draft_id}", status_code=204)
def delete_draft(draft_id: str, db: Session = Depends(get_db)) -> None:
    drafts.delete_draft(db, draft_id)
    db.commit()
