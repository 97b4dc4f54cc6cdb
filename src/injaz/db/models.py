"""SQLAlchemy models for the Injaz business records."""

from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum as PyEnum
from typing import Any
from uuid import uuid4

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    Enum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    TypeDecorator,
)
from sqlalchemy.orm import relationship

from injaz.db.enums import (
    Direction,
    DocumentStatus,
    DocumentType,
    DraftSource,
    DraftStatus,
    DraftType,
    Frequency,
    LoanStatus,
    PartyType,
    PaymentMethod,
    PaymentStatus,
    ProjectStatus,
    SalaryStatus,
    VatStatus,
)
from injaz.db.session import Base


def _uuid() -> str:
    return str(uuid4())


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _money(**kwargs: Any) -> Column:
    return Column(Numeric(14, 2), **kwargs)


def _rate(**kwargs: Any) -> Column:
    return Column(Numeric(6, 4), **kwargs)


class UTCDateTime(TypeDecorator):
    """Timezone-aware datetimes; naive values are taken to be UTC.

    SQLite drops the offset on storage, so values are re-tagged on load.
    """

    impl = DateTime
    cache_ok = True

    def __init__(self) -> None:
        super().__init__(timezone=True)

    def process_bind_param(self, value: datetime | None, dialect: Any) -> datetime | None:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

    def process_result_value(self, value: datetime | None, dialect: Any) -> datetime | None:
        if value is not None and value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value


def to_jsonable(value: Any) -> Any:
    """Convert column values into plain JSON types."""
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, PyEnum):
        return value.value
    return value


class SerializerMixin:
    """Adds a column-only ``to_dict`` to a model."""

    def to_dict(self) -> dict[str, Any]:
        return {
            column.key: to_jsonable(getattr(self, column.key))
            for column in self.__table__.columns  # type: ignore[attr-defined]
        }


class TimestampMixin:
    created_at = Column(UTCDateTime(), default=_now, nullable=False)
    updated_at = Column(UTCDateTime(), default=_now, onupdate=_now, nullable=False)


# === Organization & Users ===


class Organization(SerializerMixin, TimestampMixin, Base):
    __tablename__ = "organizations"

    id = Column(String(64), primary_key=True, default=_uuid)
    name = Column(String(255), nullable=False)
    currency = Column(String(8), nullable=False, default="EGP")

    users = relationship("User", back_populates="organization")


class User(SerializerMixin, TimestampMixin, Base):
    """A team member; the id is the identity provider's uid."""

    __tablename__ = "users"

    id = Column(String(128), primary_key=True)
    email = Column(String(255), nullable=False, unique=True)
    name = Column(String(255), nullable=False)
    phone = Column(String(64))
    avatar = Column(String(512))
    role = Column(String(32), nullable=False, default="Employee")
    approval_status = Column(String(32), nullable=False, default="pending")
    organization_id = Column(String(64), ForeignKey("organizations.id"))

    organization = relationship("Organization", back_populates="users")


# === Parties & Categories ===


class Party(SerializerMixin, TimestampMixin, Base):
    __tablename__ = "parties"

    id = Column(String(36), primary_key=True, default=_uuid)
    organization_id = Column(String(64), ForeignKey("organizations.id"), nullable=False)
    type = Column(Enum(PartyType), nullable=False, default=PartyType.VENDOR)
    name = Column(String(255), nullable=False)
    email = Column(String(255))
    phone = Column(String(64))
    contact_name = Column(String(255))
    address = Column(Text)
    notes = Column(Text)

    has_vat = Column(Boolean, nullable=False, default=False)
    vat_rate = _rate(nullable=False, default=Decimal("0"))
    has_income_tax_deduction = Column(Boolean, nullable=False, default=False)
    income_tax_rate = _rate(nullable=False, default=Decimal("0"))
    default_payment_terms_days = Column(Integer)

    bank_name = Column(String(255))
    account_number = Column(String(64))
    iban = Column(String(64))

    payments = relationship("Payment", back_populates="party")
    documents = relationship("Document", back_populates="party")
    projects = relationship("Project", back_populates="client_party")

    __table_args__ = (
        Index("idx_party_org_name", "organization_id", "name"),
        Index("idx_party_org_type", "organization_id", "type"),
    )


class Category(SerializerMixin, TimestampMixin, Base):
    __tablename__ = "categories"

    id = Column(String(36), primary_key=True, default=_uuid)
    organization_id = Column(String(64), ForeignKey("organizations.id"), nullable=False)
    name = Column(String(255), nullable=False)
    type = Column(Enum(Direction), nullable=False)
    color = Column(String(16))


# === Projects & Tasks ===


class Project(SerializerMixin, TimestampMixin, Base):
    __tablename__ = "projects"

    id = Column(String(36), primary_key=True, default=_uuid)
    organization_id = Column(String(64), ForeignKey("organizations.id"), nullable=False)
    name = Column(String(255), nullable=False)
    client_party_id = Column(String(36), ForeignKey("parties.id"))
    color = Column(String(16))
    status = Column(Enum(ProjectStatus), nullable=False, default=ProjectStatus.ACTIVE)
    budget = _money()
    description = Column(Text)

    client_party = relationship("Party", back_populates="projects")
    tasks = relationship("Task", back_populates="project")
    payments = relationship("Payment", back_populates="project")
    documents = relationship("Document", back_populates="project")


class Task(SerializerMixin, TimestampMixin, Base):
    __tablename__ = "tasks"

    id = Column(String(36), primary_key=True, default=_uuid)
    title = Column(String(255), nullable=False)
    description = Column(Text)
    project_id = Column(String(36), ForeignKey("projects.id"))
    assignee_id = Column(String(128), ForeignKey("users.id"))
    created_by_id = Column(String(128), ForeignKey("users.id"))
    priority = Column(String(16), nullable=False, default="Medium")
    status = Column(String(32), nullable=False, default="To Do")
    due_date = Column(UTCDateTime())
    start_date = Column(UTCDateTime())
    end_date = Column(UTCDateTime())
    sub_tasks = Column(JSON)

    project = relationship("Project", back_populates="tasks")
    assignee = relationship("User", foreign_keys=[assignee_id])
    created_by = relationship("User", foreign_keys=[created_by_id])


class QuickTask(SerializerMixin, TimestampMixin, Base):
    """A lightweight to-do pinned to one user's day plan."""

    __tablename__ = "quick_tasks"

    id = Column(String(36), primary_key=True, default=_uuid)
    owner_uid = Column(String(128), ForeignKey("users.id"), nullable=False)
    title = Column(String(255), nullable=False)
    date = Column(String(10), nullable=False)
    details = Column(Text)
    status = Column(String(32), nullable=False, default="open")


class DayOrder(SerializerMixin, TimestampMixin, Base):
    __tablename__ = "day_orders"

    # "{uid}_{YYYY-MM-DD}"
    id = Column(String(160), primary_key=True)
    uid = Column(String(128), nullable=False)
    date_key = Column(String(10), nullable=False)
    order_data = Column(JSON)


# === Payments & Documents ===


class Payment(SerializerMixin, TimestampMixin, Base):
    __tablename__ = "payments"

    id = Column(String(36), primary_key=True, default=_uuid)
    organization_id = Column(String(64), ForeignKey("organizations.id"), nullable=False)
    number = Column(String(32), nullable=False)
    direction = Column(Enum(Direction), nullable=False)
    status = Column(Enum(PaymentStatus), nullable=False, default=PaymentStatus.PLANNED)
    is_draft = Column(Boolean, nullable=False, default=False)

    party_id = Column(String(36), ForeignKey("parties.id"))
    category_id = Column(String(36), ForeignKey("categories.id"))
    project_id = Column(String(36), ForeignKey("projects.id"))
    salary_id = Column(String(36), ForeignKey("salaries.id"))
    loan_id = Column(String(36), ForeignKey("owner_loans.id"))
    vat_liability_id = Column(String(36), ForeignKey("vat_liabilities.id"))

    planned_date = Column(UTCDateTime(), nullable=False, default=_now)
    actual_date = Column(UTCDateTime())
    expected_amount = _money(nullable=False)
    actual_amount = _money()
    currency = Column(String(8), nullable=False, default="EGP")
    method = Column(Enum(PaymentMethod))
    reference = Column(String(255))
    description = Column(Text, default="")
    notes = Column(Text)
    voice_transcript = Column(Text)

    # Tax breakdown, filled on entry or by the financial backfill
    subtotal = _money()
    vat_rate = _rate()
    vat_amount = _money()
    income_tax_rate = _rate()
    income_tax_amount = _money()
    gross_amount = _money()
    net_bank_amount = _money()

    created_by_id = Column(String(128), ForeignKey("users.id"))

    party = relationship("Party", back_populates="payments")
    category = relationship("Category")
    project = relationship("Project", back_populates="payments")
    created_by = relationship("User")
    allocations = relationship(
        "PaymentAllocation", back_populates="payment", cascade="all, delete-orphan"
    )

    __table_args__ = (
        Index("idx_payment_org_number", "organization_id", "number"),
        Index("idx_payment_org_draft", "organization_id", "is_draft"),
    )


class Document(SerializerMixin, TimestampMixin, Base):
    __tablename__ = "documents"

    id = Column(String(36), primary_key=True, default=_uuid)
    organization_id = Column(String(64), ForeignKey("organizations.id"), nullable=False)
    number = Column(String(32), nullable=False)
    type = Column(Enum(DocumentType), nullable=False)
    direction = Column(Enum(Direction), nullable=False)
    status = Column(Enum(DocumentStatus), nullable=False, default=DocumentStatus.DRAFT)
    party_id = Column(String(36), ForeignKey("parties.id"), nullable=False)
    project_id = Column(String(36), ForeignKey("projects.id"))
    issue_date = Column(UTCDateTime(), nullable=False, default=_now)
    due_date = Column(UTCDateTime())

    subtotal = _money(nullable=False, default=Decimal("0"))
    vat_rate = _rate(nullable=False, default=Decimal("0"))
    vat_amount = _money(nullable=False, default=Decimal("0"))
    income_tax_rate = _rate(nullable=False, default=Decimal("0"))
    income_tax_amount = _money(nullable=False, default=Decimal("0"))
    gross_amount = _money(nullable=False, default=Decimal("0"))
    net_amount = _money(nullable=False, default=Decimal("0"))
    paid_amount = _money(nullable=False, default=Decimal("0"))
    remaining_amount = _money(nullable=False, default=Decimal("0"))

    notes = Column(Text)
    created_by_id = Column(String(128), ForeignKey("users.id"))

    party = relationship("Party", back_populates="documents")
    project = relationship("Project", back_populates="documents")
    created_by = relationship("User")
    line_items = relationship(
        "DocumentLineItem",
        back_populates="document",
        cascade="all, delete-orphan",
        order_by="DocumentLineItem.sort_order",
    )
    allocations = relationship(
        "PaymentAllocation", back_populates="document", cascade="all, delete-orphan"
    )


class DocumentLineItem(SerializerMixin, Base):
    __tablename__ = "document_line_items"

    id = Column(String(36), primary_key=True, default=_uuid)
    document_id = Column(String(36), ForeignKey("documents.id"), nullable=False)
    description = Column(Text, nullable=False)
    quantity = Column(Numeric(12, 3), nullable=False)
    unit_price = _money(nullable=False)
    total = _money(nullable=False)
    vat_amount = _money(nullable=False, default=Decimal("0"))
    sort_order = Column(Integer, nullable=False, default=0)

    document = relationship("Document", back_populates="line_items")


class PaymentAllocation(SerializerMixin, TimestampMixin, Base):
    """Portion of a payment settling a document."""

    __tablename__ = "payment_allocations"

    id = Column(String(36), primary_key=True, default=_uuid)
    payment_id = Column(String(36), ForeignKey("payments.id"), nullable=False)
    document_id = Column(String(36), ForeignKey("documents.id"), nullable=False)
    amount = _money(nullable=False)

    payment = relationship("Payment", back_populates="allocations")
    document = relationship("Document", back_populates="allocations")


class FinancialDraft(SerializerMixin, TimestampMixin, Base):
    """Free-form draft captured from a voice note or a scanned document."""

    __tablename__ = "financial_drafts"

    id = Column(String(36), primary_key=True, default=_uuid)
    type = Column(Enum(DraftType), nullable=False)
    source = Column(Enum(DraftSource), nullable=False)
    status = Column(Enum(DraftStatus), nullable=False, default=DraftStatus.PENDING)
    created_by_id = Column(String(128), ForeignKey("users.id"), nullable=False)
    party_name = Column(String(255))
    amount = _money()
    direction = Column(Enum(Direction))
    category = Column(String(255))
    date = Column(UTCDateTime())
    description = Column(Text)
    transcript = Column(Text)
    voice_note_url = Column(String(1024))
    document_url = Column(String(1024))
    document_name = Column(String(255))
    confidence = Column(Numeric(4, 3))
    raw_text = Column(Text)
    pushed_at = Column(UTCDateTime())


# === Payroll, Loans, Recurring, VAT ===


class Salary(SerializerMixin, TimestampMixin, Base):
    __tablename__ = "salaries"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(128), ForeignKey("users.id"), nullable=False)
    month = Column(String(7), nullable=False)
    gross_amount = _money(nullable=False)
    deductions = Column(JSON)
    net_amount = _money(nullable=False)
    paid_amount = _money(nullable=False, default=Decimal("0"))
    status = Column(Enum(SalaryStatus), nullable=False, default=SalaryStatus.SCHEDULED)
    scheduled_date = Column(UTCDateTime(), nullable=False)
    deferred_until = Column(UTCDateTime())
    deferral_reason = Column(Text)

    user = relationship("User")
    payments = relationship("Payment")


class OwnerLoan(SerializerMixin, TimestampMixin, Base):
    __tablename__ = "owner_loans"

    id = Column(String(36), primary_key=True, default=_uuid)
    owner_id = Column(String(128), ForeignKey("users.id"), nullable=False)
    owner_name = Column(String(255), nullable=False)
    # INBOUND: owner lent the business money; OUTBOUND: business lent the owner
    direction = Column(Enum(Direction), nullable=False)
    principal_amount = _money(nullable=False)
    current_balance = _money(nullable=False)
    loan_date = Column(UTCDateTime(), nullable=False)
    status = Column(Enum(LoanStatus), nullable=False, default=LoanStatus.ACTIVE)
    notes = Column(Text)

    owner = relationship("User")
    payments = relationship("Payment")


class RecurringExpense(SerializerMixin, TimestampMixin, Base):
    __tablename__ = "recurring_expenses"

    id = Column(String(36), primary_key=True, default=_uuid)
    name = Column(String(255), nullable=False)
    vendor_name = Column(String(255), nullable=False)
    category = Column(String(255), nullable=False)
    amount = _money(nullable=False)
    frequency = Column(Enum(Frequency), nullable=False)
    start_date = Column(UTCDateTime(), nullable=False)
    end_date = Column(UTCDateTime())
    next_due_date = Column(UTCDateTime(), nullable=False)
    is_active = Column(Boolean, nullable=False, default=True)


class VatLiability(SerializerMixin, TimestampMixin, Base):
    """Net VAT owed to the tax authority for one calendar month."""

    __tablename__ = "vat_liabilities"

    id = Column(String(36), primary_key=True, default=_uuid)
    month = Column(String(7), nullable=False, unique=True)
    collected_vat = _money(nullable=False, default=Decimal("0"))
    deductible_vat = _money(nullable=False, default=Decimal("0"))
    net_vat_payable = _money(nullable=False, default=Decimal("0"))
    due_date = Column(UTCDateTime(), nullable=False)
    status = Column(Enum(VatStatus), nullable=False, default=VatStatus.PENDING)
    paid_date = Column(UTCDateTime())

    payments = relationship("Payment")


# === Notifications, AI conversations, settings ===


class Notification(SerializerMixin, TimestampMixin, Base):
    __tablename__ = "notifications"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(128), ForeignKey("users.id"), nullable=False)
    message = Column(Text, nullable=False)
    link = Column(String(1024), nullable=False, default="")
    is_read = Column(Boolean, nullable=False, default=False)


class AiConversation(SerializerMixin, TimestampMixin, Base):
    __tablename__ = "ai_conversations"

    id = Column(String(36), primary_key=True, default=_uuid)
    user_id = Column(String(128), ForeignKey("users.id"), nullable=False)
    title = Column(String(255), nullable=False, default="New conversation")

    messages = relationship(
        "AiMessage",
        back_populates="conversation",
        cascade="all, delete-orphan",
        order_by="AiMessage.created_at",
    )


class AiMessage(SerializerMixin, Base):
    __tablename__ = "ai_messages"

    id = Column(String(36), primary_key=True, default=_uuid)
    conversation_id = Column(String(36), ForeignKey("ai_conversations.id"), nullable=False)
    role = Column(String(16), nullable=False)
    content = Column(Text, nullable=False)
    function_call = Column(JSON)
    function_result = Column(JSON)
    created_at = Column(UTCDateTime(), default=_now, nullable=False)

    conversation = relationship("AiConversation", back_populates="messages")


class SystemSetting(SerializerMixin, TimestampMixin, Base):
    __tablename__ = "system_settings"

    id = Column(String(64), primary_key=True)
    value = Column(JSON)
