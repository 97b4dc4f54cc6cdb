"""Fill in the tax breakdown of stored payments and rebuild VAT liabilities."""

from collections import defaultdict
from typing import Any

import structlog
from sqlalchemy import select
from sqlalchemy.orm import Session, selectinload

from injaz.db.enums import Direction, PaymentStatus, VatStatus
from injaz.db.models import Payment, VatLiability
from injaz.financials import (
    VatMonth,
    effective_rates,
    money,
    month_key,
    split_gross,
    to_decimal,
    vat_due_date,
)

logger = structlog.get_logger(__name__)


def backfill_payments(session: Session) -> dict[str, int]:
    """Split each payment's expected (gross) amount using its party's tax flags."""
    payments = list(session.scalars(select(Payment).options(selectinload(Payment.party))))
    updated = 0
    skipped = 0
    for payment in payments:
        gross = to_decimal(payment.expected_amount)
        if gross == 0:
            skipped += 1
            continue

        party = payment.party
        vat_rate, tax_rate = effective_rates(
            bool(party and party.has_vat),
            party.vat_rate if party else None,
            bool(party and party.has_income_tax_deduction),
            party.income_tax_rate if party else None,
        )
        breakdown = split_gross(gross, vat_rate, tax_rate)
        payment.gross_amount = breakdown.gross_amount
        payment.subtotal = breakdown.subtotal
        payment.vat_rate = breakdown.vat_rate
        payment.vat_amount = breakdown.vat_amount
        payment.income_tax_rate = breakdown.income_tax_rate
        payment.income_tax_amount = breakdown.income_tax_amount
        payment.net_bank_amount = breakdown.net_bank_amount
        if payment.status == PaymentStatus.COMPLETED and not to_decimal(payment.actual_amount):
            payment.actual_amount = breakdown.net_bank_amount
        updated += 1

    session.flush()
    return {"total": len(payments), "updated": updated, "skipped": skipped}


def rebuild_vat_liabilities(session: Session) -> dict[str, dict[str, float]]:
    """Upsert one liability per month from completed payments carrying VAT."""
    payments = session.scalars(
        select(Payment).where(
            Payment.is_draft.is_(False),
            Payment.status == PaymentStatus.COMPLETED,
            Payment.vat_amount > 0,
        )
    )
    months: dict[str, VatMonth] = defaultdict(VatMonth)
    for payment in payments:
        bucket = months[month_key(payment.planned_date)]
        if payment.direction == Direction.INBOUND:
            bucket.collected += to_decimal(payment.vat_amount)
        else:
            bucket.deductible += to_decimal(payment.vat_amount)

    for month, totals in months.items():
        liability = session.scalars(
            select(VatLiability).where(VatLiability.month == month)
        ).first()
        if liability is None:
            liability = VatLiability(
                month=month, due_date=vat_due_date(month), status=VatStatus.PENDING
            )
            session.add(liability)
        liability.collected_vat = money(totals.collected)
        liability.deductible_vat = money(totals.deductible)
        liability.net_vat_payable = totals.net_payable

    session.flush()
    return {
        month: {
            "collected": float(money(totals.collected)),
            "deductible": float(money(totals.deductible)),
        }
        for month, totals in sorted(months.items())
    }


def backfill_financials(session: Session) -> dict[str, Any]:
    payment_stats = backfill_payments(session)
    vat_months = rebuild_vat_liabilities(session)
    logger.info(
        "financials_backfilled",
        updated=payment_stats["updated"],
        skipped=payment_stats["skipped"],
        vat_months=len(vat_months),
    )
    return {
        "payments": payment_stats,
        "vat_liabilities": {"months": len(vat_months), "data": vat_months},
    }
