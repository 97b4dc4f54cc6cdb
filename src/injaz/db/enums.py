"""Enumerations shared by the ORM models and the service layer."""

from enum import Enum


class Direction(str, Enum):
    """Cash-flow direction of a payment, category or document."""

    INBOUND = "INBOUND"
    OUTBOUND = "OUTBOUND"


class PaymentStatus(str, Enum):
    PLANNED = "PLANNED"
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class PaymentMethod(str, Enum):
    CASH = "CASH"
    BANK_TRANSFER = "BANK_TRANSFER"
    CHEQUE = "CHEQUE"
    CARD = "CARD"
    WALLET = "WALLET"
    OTHER = "OTHER"


class PartyType(str, Enum):
    CLIENT = "CLIENT"
    VENDOR = "VENDOR"
    EMPLOYEE = "EMPLOYEE"
    OWNER = "OWNER"
    OTHER = "OTHER"


class DocumentType(str, Enum):
    QUOTATION = "QUOTATION"
    INVOICE = "INVOICE"
    PURCHASE_ORDER = "PURCHASE_ORDER"
    VENDOR_BILL = "VENDOR_BILL"

    @property
    def prefix(self) -> str:
        """Number prefix used when numbering documents of this type."""
        return _DOCUMENT_PREFIXES[self]

    @property
    def direction(self) -> Direction:
        """Quotations and invoices bring money in, the rest send it out."""
        if self in (DocumentType.QUOTATION, DocumentType.INVOICE):
            return Direction.INBOUND
        return Direction.OUTBOUND


_DOCUMENT_PREFIXES = {
    DocumentType.QUOTATION: "QT",
    DocumentType.INVOICE: "INV",
    DocumentType.PURCHASE_ORDER: "PO",
    DocumentType.VENDOR_BILL: "VB",
}


class DocumentStatus(str, Enum):
    DRAFT = "DRAFT"
    SENT = "SENT"
    ACCEPTED = "ACCEPTED"
    PARTIALLY_PAID = "PARTIALLY_PAID"
    PAID = "PAID"
    CANCELLED = "CANCELLED"


class ProjectStatus(str, Enum):
    ACTIVE = "ACTIVE"
    ON_HOLD = "ON_HOLD"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class DraftType(str, Enum):
    PAYMENT = "PAYMENT"
    EXPENSE = "EXPENSE"
    INVOICE = "INVOICE"
    BILL = "BILL"


class DraftSource(str, Enum):
    VOICE = "VOICE"
    DOCUMENT = "DOCUMENT"
    MANUAL = "MANUAL"
    TELEGRAM = "TELEGRAM"


class DraftStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    PUSHED = "PUSHED"


class SalaryStatus(str, Enum):
    SCHEDULED = "SCHEDULED"
    DEFERRED = "DEFERRED"
    PARTIALLY_PAID = "PARTIALLY_PAID"
    PAID = "PAID"


class LoanStatus(str, Enum):
    ACTIVE = "ACTIVE"
    SETTLED = "SETTLED"


class Frequency(str, Enum):
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"
    QUARTERLY = "QUARTERLY"
    YEARLY = "YEARLY"


class VatStatus(str, Enum):
    PENDING = "PENDING"
    PAID = "PAID"
