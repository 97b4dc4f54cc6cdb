"""Request models and response serializers for the HTTP API."""

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from injaz.db.models import Document, Payment, Task


class _Body(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    def changes(self) -> dict[str, Any]:
        """Only the fields the client actually sent."""
        return self.model_dump(exclude_unset=True)


# === Assistant ===


class ChatMessage(BaseModel):
    role: str
    content: str = ""


class ChatRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    messages: list[ChatMessage] = Field(default_factory=list)
    user_id: str | None = Field(default=None, alias="userId")
    org_id: str | None = Field(default=None, alias="orgId")
    conversation_id: str | None = Field(default=None, alias="conversationId")


class ImportRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    csv: str | None = None
    user_id: str | None = Field(default=None, alias="userId")


# === Parties ===


class PartyCreate(_Body):
    name: str
    type: str = "VENDOR"
    email: str | None = None
    phone: str | None = None
    contact_name: str | None = None
    address: str | None = None
    notes: str | None = None
    has_vat: bool = False
    vat_rate: float | None = None
    has_income_tax_deduction: bool = False
    income_tax_rate: float | None = None
    default_payment_terms_days: int | None = None
    bank_name: str | None = None
    account_number: str | None = None
    iban: str | None = None


class PartyUpdate(_Body):
    name: str | None = None
    type: str | None = None
    email: str | None = None
    phone: str | None = None
    contact_name: str | None = None
    address: str | None = None
    notes: str | None = None
    has_vat: bool | None = None
    vat_rate: float | None = None
    has_income_tax_deduction: bool | None = None
    income_tax_rate: float | None = None
    default_payment_terms_days: int | None = None
    bank_name: str | None = None
    account_number: str | None = None
    iban: str | None = None


# === Payments ===


class PaymentFields(_Body):
    direction: str | None = None
    status: str | None = None
    party_id: str | None = None
    category_id: str | None = None
    project_id: str | None = None
    salary_id: str | None = None
    loan_id: str | None = None
    vat_liability_id: str | None = None
    planned_date: datetime | None = None
    actual_date: datetime | None = None
    expected_amount: float | None = None
    actual_amount: float | None = None
    currency: str | None = None
    method: str | None = None
    reference: str | None = None
    description: str | None = None
    notes: str | None = None
    voice_transcript: str | None = None
    subtotal: float | None = None
    vat_rate: float | None = None
    vat_amount: float | None = None
    income_tax_rate: float | None = None
    income_tax_amount: float | None = None
    gross_amount: float | None = None
    net_bank_amount: float | None = None
    created_by_id: str | None = None


class PaymentCreate(PaymentFields):
    direction: str
    expected_amount: float
    number: str | None = None


class CategoryCreate(_Body):
    name: str
    type: str
    color: str | None = None


class AllocationCreate(_Body):
    document_id: str
    amount: float


# === Documents ===


class LineItem(_Body):
    description: str
    quantity: float = 1
    unit_price: float


class DocumentCreate(_Body):
    type: str
    party_id: str
    line_items: list[LineItem]
    direction: str | None = None
    project_id: str | None = None
    issue_date: datetime | None = None
    due_date: datetime | None = None
    vat_rate: float | None = None
    income_tax_rate: float | None = None
    notes: str | None = None
    created_by_id: str | None = None


class StatusUpdate(_Body):
    status: str


# === Projects & Tasks ===


class ProjectCreate(_Body):
    name: str
    client_party_id: str | None = None
    color: str | None = None
    status: str | None = None
    budget: float | None = None
    description: str | None = None


class ProjectUpdate(_Body):
    name: str | None = None
    client_party_id: str | None = None
    color: str | None = None
    status: str | None = None
    budget: float | None = None
    description: str | None = None


class TaskFields(_Body):
    title: str | None = None
    description: str | None = None
    project_id: str | None = None
    assignee_id: str | None = None
    created_by_id: str | None = None
    priority: str | None = None
    status: str | None = None
    due_date: datetime | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    sub_tasks: list[dict[str, Any]] | None = None


class TaskCreate(TaskFields):
    title: str


class QuickTaskCreate(_Body):
    user_id: str
    title: str
    date: str
    details: str | None = None


class QuickTaskUpdate(_Body):
    title: str | None = None
    status: str | None = None
    details: str | None = None


class DayOrderSave(_Body):
    order_data: Any = None


# === Finance ===


class SalaryFields(_Body):
    user_id: str | None = None
    month: str | None = None
    gross_amount: float | None = None
    deductions: dict[str, Any] | list[Any] | None = None
    net_amount: float | None = None
    paid_amount: float | None = None
    status: str | None = None
    scheduled_date: datetime | None = None
    deferred_until: datetime | None = None
    deferral_reason: str | None = None


class LoanFields(_Body):
    owner_id: str | None = None
    owner_name: str | None = None
    direction: str | None = None
    principal_amount: float | None = None
    current_balance: float | None = None
    loan_date: datetime | None = None
    status: str | None = None
    notes: str | None = None


class RecurringFields(_Body):
    name: str | None = None
    vendor_name: str | None = None
    category: str | None = None
    amount: float | None = None
    frequency: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    next_due_date: datetime | None = None
    is_active: bool | None = None


class VatFields(_Body):
    month: str | None = None
    collected_vat: float | None = None
    deductible_vat: float | None = None
    net_vat_payable: float | None = None
    due_date: datetime | None = None
    status: str | None = None
    paid_date: datetime | None = None


class FinancialDraftCreate(_Body):
    type: str = "PAYMENT"
    source: str = "MANUAL"
    created_by_id: str
    party_name: str | None = None
    amount: float | None = None
    direction: str | None = None
    category: str | None = None
    date: datetime | None = None
    description: str | None = None
    transcript: str | None = None
    voice_note_url: str | None = None
    document_url: str | None = None
    document_name: str | None = None
    confidence: float | None = None
    raw_text: str | None = None


# === Users, notifications, conversations ===


class UserSync(_Body):
    uid: str
    email: str
    display_name: str | None = None


class RoleUpdate(_Body):
    role: str


class ProfileUpdate(_Body):
    name: str | None = None
    phone: str | None = None
    avatar: str | None = None


class NotificationCreate(_Body):
    user_id: str
    message: str
    link: str = ""


class ConversationCreate(_Body):
    user_id: str
    title: str | None = None


class MessageCreate(_Body):
    role: str
    content: str
    function_call: Any = None
    function_result: Any = None


class ConversationRename(_Body):
    title: str


class SettingSave(_Body):
    value: Any


# === Serializers ===


def payment_out(payment: Payment) -> dict[str, Any]:
    data = payment.to_dict()
    data["party"] = (
        {"id": payment.party.id, "name": payment.party.name, "type": payment.party.type.value}
        if payment.party
        else None
    )
    data["category"] = (
        {"id": payment.category.id, "name": payment.category.name, "color": payment.category.color}
        if payment.category
        else None
    )
    data["project"] = (
        {"id": payment.project.id, "name": payment.project.name}
        if payment.project
        else None
    )
    return data


def document_out(document: Document) -> dict[str, Any]:
    data = document.to_dict()
    data["party"] = {"id": document.party.id, "name": document.party.name} if document.party else None
    data["line_items"] = [item.to_dict() for item in document.line_items]
    return data


def task_out(task: Task) -> dict[str, Any]:
    data = task.to_dict()
    data["project"] = (
        {"id": task.project.id, "name": task.project.name, "color": task.project.color}
        if task.project
        else None
    )
    data["assignee"] = (
        {"id": task.assignee.id, "name": task.assignee.name, "avatar": task.assignee.avatar}
        if task.assignee
        else None
    )
    return data
