"""Money arithmetic: document totals, VAT/income-tax netting and summaries."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

CENT = Decimal("0.01")
ZERO = Decimal("0")

DEFAULT_VAT_RATE = Decimal("0.14")
DEFAULT_INCOME_TAX_RATE = Decimal("0.03")

# VAT returns for a month are due on this day of the following month
VAT_DUE_DAY = 25


def to_decimal(value: Any, default: Decimal = ZERO) -> Decimal:
    """Coerce numbers, numeric strings and None into a Decimal."""
    if value is None or value == "":
        return default
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value).strip().replace(",", ""))
    except (InvalidOperation, ValueError):
        return default


def money(value: Decimal) -> Decimal:
    """Round to cents, half up."""
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


# === Documents ===


@dataclass(frozen=True)
class LineItemInput:
    description: str
    quantity: Decimal
    unit_price: Decimal

    @classmethod
    def from_mapping(cls, data: dict[str, Any]) -> LineItemInput:
        """Build from a loose dict using either camelCase or snake_case keys."""
        unit_price = data.get("unit_price", data.get("unitPrice"))
        return cls(
            description=str(data.get("description") or "Item"),
            quantity=to_decimal(data.get("quantity"), Decimal("1")),
            unit_price=to_decimal(unit_price),
        )


@dataclass(frozen=True)
class LineItemTotals:
    description: str
    quantity: Decimal
    unit_price: Decimal
    total: Decimal
    vat_amount: Decimal
    sort_order: int


@dataclass(frozen=True)
class DocumentTotals:
    subtotal: Decimal
    vat_rate: Decimal
    vat_amount: Decimal
    income_tax_rate: Decimal
    income_tax_amount: Decimal
    gross_amount: Decimal
    net_amount: Decimal
    lines: list[LineItemTotals] = field(default_factory=list)


def compute_document_totals(
    items: Sequence[LineItemInput],
    vat_rate: Decimal | None = None,
    income_tax_rate: Decimal | None = None,
) -> DocumentTotals:
    """Compute document totals.

    VAT and income tax are both levied on the subtotal; VAT is added to get
    the gross amount and withheld income tax is subtracted to get the net.
    """
    vat_rate = vat_rate or ZERO
    income_tax_rate = income_tax_rate or ZERO

    lines = []
    for index, item in enumerate(items):
        total = money(item.quantity * item.unit_price)
        lines.append(
            LineItemTotals(
                description=item.description,
                quantity=item.quantity,
                unit_price=item.unit_price,
                total=total,
                vat_amount=money(total * vat_rate),
                sort_order=index,
            )
        )

    subtotal = money(sum((line.total for line in lines), ZERO))
    vat_amount = money(subtotal * vat_rate)
    income_tax_amount = money(subtotal * income_tax_rate)
    gross_amount = subtotal + vat_amount
    return DocumentTotals(
        subtotal=subtotal,
        vat_rate=vat_rate,
        vat_amount=vat_amount,
        income_tax_rate=income_tax_rate,
        income_tax_amount=income_tax_amount,
        gross_amount=gross_amount,
        net_amount=gross_amount - income_tax_amount,
        lines=lines,
    )


# === Payment gross split ===


@dataclass(frozen=True)
class GrossBreakdown:
    gross_amount: Decimal
    subtotal: Decimal
    vat_rate: Decimal
    vat_amount: Decimal
    income_tax_rate: Decimal
    income_tax_amount: Decimal
    net_bank_amount: Decimal


def effective_rates(
    has_vat: bool,
    vat_rate: Any,
    has_income_tax_deduction: bool,
    income_tax_rate: Any,
) -> tuple[Decimal, Decimal]:
    """Rates a party's flags imply; enabled flags with no rate use defaults."""
    vat = ZERO
    if has_vat:
        vat = to_decimal(vat_rate) or DEFAULT_VAT_RATE
    tax = ZERO
    if has_income_tax_deduction:
        tax = to_decimal(income_tax_rate) or DEFAULT_INCOME_TAX_RATE
    return vat, tax


def split_gross(gross: Decimal, vat_rate: Decimal, income_tax_rate: Decimal) -> GrossBreakdown:
    """Split an invoiced gross amount into subtotal, VAT, tax and bank net."""
    if vat_rate > 0:
        subtotal = money(gross / (1 + vat_rate))
        vat_amount = money(gross - subtotal)
    else:
        subtotal = gross
        vat_amount = ZERO
    income_tax_amount = money(subtotal * income_tax_rate) if income_tax_rate > 0 else ZERO
    return GrossBreakdown(
        gross_amount=gross,
        subtotal=subtotal,
        vat_rate=vat_rate,
        vat_amount=vat_amount,
        income_tax_rate=income_tax_rate,
        income_tax_amount=income_tax_amount,
        net_bank_amount=money(gross - income_tax_amount),
    )


# === VAT periods ===


def month_key(value: date | datetime) -> str:
    return f"{value.year:04d}-{value.month:02d}"


def vat_due_date(month: str) -> datetime:
    """Due date for a ``YYYY-MM`` VAT month: the 25th of the next month."""
    year, mon = (int(part) for part in month.split("-"))
    if mon == 12:
        year, mon = year + 1, 1
    else:
        mon += 1
    return datetime(year, mon, VAT_DUE_DAY, tzinfo=timezone.utc)


@dataclass
class VatMonth:
    collected: Decimal = ZERO
    deductible: Decimal = ZERO

    @property
    def net_payable(self) -> Decimal:
        return money(self.collected - self.deductible)


# === Summary ===


def _sum(rows: Iterable[Any], attr: str) -> Decimal:
    return sum((to_decimal(getattr(row, attr, None)) for row in rows), ZERO)


def _first_nonzero(*values: Decimal) -> Decimal:
    for value in values:
        if value:
            return value
    return ZERO


def summarize_payments(payments: Sequence[Any]) -> dict[str, float | int]:
    """Aggregate non-draft payments into the financial summary.

    Completed payments count as realized money; planned and pending ones as
    the forecast. A column that sums to zero falls back to the next best
    column (gross to expected, bank net to actual to gross).
    """
    completed = [p for p in payments if _status(p) == "COMPLETED"]
    planned = [p for p in payments if _status(p) in ("PLANNED", "PENDING")]

    in_completed = [p for p in completed if _direction(p) == "INBOUND"]
    out_completed = [p for p in completed if _direction(p) == "OUTBOUND"]
    in_planned = [p for p in planned if _direction(p) == "INBOUND"]
    out_planned = [p for p in planned if _direction(p) == "OUTBOUND"]

    gross_revenue = _first_nonzero(
        _sum(in_completed, "gross_amount"), _sum(in_completed, "expected_amount")
    )
    gross_expenses = _first_nonzero(
        _sum(out_completed, "gross_amount"), _sum(out_completed, "expected_amount")
    )

    vat_collected = _sum(in_completed, "vat_amount")
    vat_paid = _sum(out_completed, "vat_amount")

    bank_in = _first_nonzero(
        _sum(in_completed, "net_bank_amount"), _sum(in_completed, "actual_amount"), gross_revenue
    )
    bank_out = _first_nonzero(
        _sum(out_completed, "net_bank_amount"), _sum(out_completed, "actual_amount"), gross_expenses
    )
    bank_balance = bank_in - bank_out

    planned_in = _first_nonzero(
        _sum(in_planned, "gross_amount"), _sum(in_planned, "expected_amount")
    )
    planned_out = _first_nonzero(
        _sum(out_planned, "gross_amount"), _sum(out_planned, "expected_amount")
    )

    summary = {
        "gross_revenue": gross_revenue,
        "gross_expenses": gross_expenses,
        "net_profit": gross_revenue - gross_expenses,
        "vat_collected": vat_collected,
        "vat_paid": vat_paid,
        "net_vat_payable": vat_collected - vat_paid,
        "tax_deducted_by_clients": _sum(in_completed, "income_tax_amount"),
        "tax_we_deducted": _sum(out_completed, "income_tax_amount"),
        "bank_balance": bank_balance,
        "bank_in": bank_in,
        "bank_out": bank_out,
        "planned_in": planned_in,
        "planned_out": planned_out,
        "planned_balance": bank_balance + planned_in - planned_out,
    }
    result: dict[str, float | int] = {key: float(value) for key, value in summary.items()}
    result["total_payments"] = len(payments)
    return result


def _status(payment: Any) -> str:
    return getattr(payment.status, "value", payment.status)


def _direction(payment: Any) -> str:
    return getattr(payment.direction, "value", payment.direction)
