"""Tool executor that bridges LLM tool calls to the Injaz services."""

import asyncio
import json
from collections.abc import Callable
from dataclasses import dataclass
from decimal import Decimal
from typing import Any

import structlog
from sqlalchemy import select
from sqlalchemy.orm import Session

from injaz.db.enums import Direction, DocumentType, PaymentStatus
from injaz.db.models import Category, Payment
from injaz.financials import ZERO, effective_rates, money, to_decimal
from injaz.services import dashboard, documents, parties, payments, projects, tasks
from injaz.services.base import coerce_enum
from injaz.services.errors import ServiceError
from injaz.tools import resolver

logger = structlog.get_logger(__name__)

RECENT_PAYMENTS_LIMIT = 10
LOOKUP_PARTY_LIMIT = 5
LIST_LIMIT = 20


class ToolExecutionError(Exception):
    """Error during tool execution."""

    def __init__(self, tool_name: str, message: str, details: Any = None):
        super().__init__(f"Tool '{tool_name}' failed: {message}")
        self.tool_name = tool_name
        self.details = details


@dataclass
class ExecutionContext:
    """Who a tool call acts for, and the session it writes through."""

    org_id: str
    user_id: str | None
    session: Session


def _amount_text(amount: Decimal, currency: str) -> str:
    return f"{money(amount)} {currency}"


class ToolExecutor:
    """Executes LLM tool calls against the database.

    Each successful call is committed on its own; a failed call is rolled
    back and reported to the model as an error result instead of raising.
    """

    def __init__(self, context: ExecutionContext):
        self.context = context
        self._tool_handlers: dict[str, Any] = {
            # Payments
            "create_payment": self._create_payment,
            "create_draft_payment": self._create_draft_payment,
            "lookup_financials": self._lookup_financials,
            # Tasks & projects
            "create_task": self._create_task,
            "list_projects": self._list_projects,
            "list_tasks": self._list_tasks,
            # Parties
            "lookup_party": self._lookup_party,
            "create_party": self._create_party,
            # Documents
            "create_document": self._create_document,
            # Reports
            "get_dashboard": self._get_dashboard,
        }

    @property
    def session(self) -> Session:
        return self.context.session

    @property
    def org_id(self) -> str:
        return self.context.org_id

    async def execute(self, tool_name: str, arguments: dict[str, Any]) -> dict[str, Any]:
        """Execute a tool call and return the result envelope.

        Handlers are synchronous database work, so they run in a worker
        thread to keep the event loop free.
        """
        handler = self._tool_handlers.get(tool_name)
        if not handler:
            logger.warning("unknown_tool", tool=tool_name)
            return {"success": False, "error": f"Unknown tool: {tool_name}"}

        logger.info("executing_tool", tool=tool_name, args=arguments)

        try:
            result = await asyncio.to_thread(self._run_and_commit, handler, arguments or {})
            logger.info("tool_executed", tool=tool_name, success=True)
            return {"success": True, "result": result}
        except ServiceError as e:
            logger.warning(
                "tool_service_error",
                tool=tool_name,
                status=e.status_code,
                details=e.details,
            )
            return {"success": False, "error": str(e), "details": e.details}
        except ToolExecutionError as e:
            logger.warning("tool_rejected", tool=tool_name, error=str(e))
            return {"success": False, "error": str(e), "details": e.details}
        except Exception as e:
            logger.exception("tool_execution_error", tool=tool_name)
            return {"success": False, "error": str(e)}

    def _run_and_commit(self, handler: Callable[..., Any], arguments: dict[str, Any]) -> Any:
        try:
            result = handler(**arguments)
            self.session.commit()
        except Exception:
            self.session.rollback()
            raise
        return result

    def _match_category(self, name: str | None, direction: Direction) -> Category | None:
        if not name or not name.strip():
            return None
        stmt = select(Category).where(
            Category.organization_id == self.org_id,
            Category.type == direction,
            Category.name.icontains(name.strip(), autoescape=True),
        )
        return self.session.scalars(stmt.order_by(Category.name)).first()

    # === Payment Handlers ===

    def _create_payment(
        self,
        direction: str,
        party_name: str,
        amount: float,
        description: str | None = None,
        category: str | None = None,
        date: str | None = None,
    ) -> dict[str, Any]:
        direction = coerce_enum(Direction, direction)
        if not party_name or not party_name.strip():
            raise ToolExecutionError("create_payment", "party_name is required")
        party = resolver.resolve_party(self.session, self.org_id, party_name, direction)
        matched_category = self._match_category(category, direction)

        payment = payments.create_payment(
            self.session,
            self.org_id,
            {
                "direction": direction,
                "party_id": party.id,
                "category_id": matched_category.id if matched_category else None,
                "expected_amount": amount,
                "planned_date": date,
                "description": description or "",
                "status": PaymentStatus.PLANNED,
                "created_by_id": self.context.user_id,
            },
        )
        preposition = "from" if direction == Direction.INBOUND else "to"
        return {
            "message": (
                f"Payment {payment.number} created: "
                f"{_amount_text(payment.expected_amount, payment.currency)} {preposition} {party.name}"
            ),
            "payment_id": payment.id,
            "number": payment.number,
        }

    def _create_draft_payment(
        self,
        direction: str,
        amount: float,
        party_name: str | None = None,
        description: str | None = None,
        category: str | None = None,
        date: str | None = None,
        voice_transcript: str | None = None,
    ) -> dict[str, Any]:
        direction = coerce_enum(Direction, direction)
        # Drafts only link to a party that already exists
        party = resolver.find_party(self.session, self.org_id, party_name)
        matched_category = self._match_category(category, direction)

        draft = payments.create_draft_payment(
            self.session,
            self.org_id,
            {
                "direction": direction,
                "party_id": party.id if party else None,
                "category_id": matched_category.id if matched_category else None,
                "expected_amount": amount,
                "planned_date": date,
                "description": description or "",
                "voice_transcript": voice_transcript,
                "created_by_id": self.context.user_id,
            },
        )
        counterpart = party.name if party else (party_name or "an unknown party")
        preposition = "from" if direction == Direction.INBOUND else "to"
        message = (
            f"Draft payment {draft.number} created: "
            f"{_amount_text(draft.expected_amount, draft.currency)} {preposition} {counterpart}. "
            "Review and confirm it in Draft Payments."
        )
        if party is None and party_name:
            message += f" No existing party matched '{party_name}'."
        return {"message": message, "payment_id": draft.id, "number": draft.number}

    def _lookup_financials(
        self, type: str, party_name: str | None = None
    ) -> dict[str, Any]:
        if type == "summary":
            return self._completed_summary()
        if type == "recent_payments":
            return self._recent_payments()
        if type == "party_balance":
            return self._party_balance(party_name)
        return {"message": "Use type: summary, recent_payments or party_balance"}

    def _non_draft_payments(self):
        return select(Payment).where(
            Payment.organization_id == self.org_id, Payment.is_draft.is_(False)
        )

    def _completed_summary(self) -> dict[str, Any]:
        completed = self.session.scalars(
            self._non_draft_payments().where(Payment.status == PaymentStatus.COMPLETED)
        )
        revenue = ZERO
        expenses = ZERO
        for payment in completed:
            if payment.direction == Direction.INBOUND:
                revenue += to_decimal(payment.actual_amount)
            else:
                expenses += to_decimal(payment.actual_amount)
        return {
            "revenue": float(revenue),
            "expenses": float(expenses),
            "net_profit": float(revenue - expenses),
        }

    def _recent_payments(self) -> dict[str, Any]:
        recent = self.session.scalars(
            self._non_draft_payments()
            .order_by(Payment.created_at.desc())
            .limit(RECENT_PAYMENTS_LIMIT)
        )
        return {
            "payments": [
                {
                    "number": p.number,
                    "direction": p.direction.value,
                    "amount": float(to_decimal(p.expected_amount)),
                    "party": p.party.name if p.party else None,
                    "status": p.status.value,
                }
                for p in recent
            ]
        }

    def _party_balance(self, party_name: str | None) -> dict[str, Any]:
        party = resolver.find_party(self.session, self.org_id, party_name)
        if party is None:
            return {"message": f"No party found matching '{party_name or ''}'"}

        inbound = ZERO
        outbound = ZERO
        rows = list(self.session.scalars(self._non_draft_payments().where(Payment.party_id == party.id)))
        for payment in rows:
            if payment.direction == Direction.INBOUND:
                inbound += to_decimal(payment.expected_amount)
            else:
                outbound += to_decimal(payment.expected_amount)
        return {
            "party": party.name,
            "type": party.type.value,
            "inbound": float(inbound),
            "outbound": float(outbound),
            "net": float(inbound - outbound),
            "payment_count": len(rows),
        }

    # === Task & Project Handlers ===

    def _create_task(
        self,
        title: str,
        description: str | None = None,
        project_name: str | None = None,
        assignee_name: str | None = None,
        priority: str | None = None,
        due_date: str | None = None,
    ) -> dict[str, Any]:
        project = resolver.find_project(self.session, self.org_id, project_name)
        assignee = resolver.find_user(self.session, assignee_name)
        task = tasks.create_task(
            self.session,
            {
                "title": title,
                "description": description,
                "project_id": project.id if project else None,
                "assignee_id": assignee.id if assignee else None,
                "created_by_id": self.context.user_id,
                "priority": priority or "Medium",
                "due_date": due_date,
            },
        )
        message = f'Task "{task.title}" created'
        if project:
            message += f" (linked to project {project.name})"
        if assignee:
            message += f" and assigned to {assignee.name}"
        return {"message": message, "task_id": task.id}

    def _list_projects(self) -> dict[str, Any]:
        recent = projects.list_projects(self.session, self.org_id, limit=LIST_LIMIT)
        counts = projects.task_counts(self.session, [p.id for p in recent])
        return {
            "projects": [
                {"name": p.name, "status": p.status.value, "tasks": counts.get(p.id, 0)}
                for p in recent
            ]
        }

    def _list_tasks(
        self, status: str | None = None, assignee_name: str | None = None
    ) -> dict[str, Any]:
        assignee_id = None
        if assignee_name:
            assignee = resolver.find_user(self.session, assignee_name)
            if assignee is None:
                return {"tasks": [], "message": f"No team member matching '{assignee_name}'"}
            assignee_id = assignee.id

        found = tasks.list_tasks(
            self.session, assignee_id=assignee_id, status=status, limit=LIST_LIMIT
        )
        return {
            "tasks": [
                {
                    "title": t.title,
                    "status": t.status,
                    "priority": t.priority,
                    "project": t.project.name if t.project else None,
                    "assignee": t.assignee.name if t.assignee else None,
                }
                for t in found
            ]
        }

    # === Party Handlers ===

    def _lookup_party(self, name: str, type: str | None = None) -> dict[str, Any]:
        found = parties.search_parties(
            self.session, self.org_id, name, type=type, limit=LOOKUP_PARTY_LIMIT
        )
        return {
            "parties": [
                {"name": p.name, "type": p.type.value, "email": p.email, "phone": p.phone}
                for p in found
            ]
        }

    def _create_party(
        self,
        name: str,
        type: str,
        email: str | None = None,
        phone: str | None = None,
    ) -> dict[str, Any]:
        party = parties.create_party(
            self.session,
            self.org_id,
            {"name": name, "type": type, "email": email, "phone": phone},
        )
        return {"message": f'{party.type.value} "{party.name}" created', "party_id": party.id}

    # === Document Handlers ===

    def _create_document(
        self,
        type: str,
        party_name: str,
        line_items: str | list[dict[str, Any]],
        project_name: str | None = None,
        vat_rate: float | None = None,
        notes: str | None = None,
    ) -> dict[str, Any]:
        doc_type = coerce_enum(DocumentType, type, "document type")
        items = _parse_line_items(line_items)
        party = resolver.resolve_party(self.session, self.org_id, party_name, doc_type.direction)
        if party is None:
            raise ToolExecutionError("create_document", "party_name is required")
        project = resolver.find_project(self.session, self.org_id, project_name)

        party_vat, party_tax = effective_rates(
            party.has_vat,
            party.vat_rate,
            party.has_income_tax_deduction,
            party.income_tax_rate,
        )
        document = documents.create_document(
            self.session,
            self.org_id,
            type=doc_type,
            party_id=party.id,
            line_items=items,
            created_by_id=self.context.user_id,
            project_id=project.id if project else None,
            vat_rate=vat_rate if vat_rate is not None else party_vat,
            income_tax_rate=party_tax,
            notes=notes,
        )
        return {
            "message": (
                f"{doc_type.value.replace('_', ' ').title()} {document.number} created for "
                f"{party.name}: net {money(document.net_amount)}"
            ),
            "document_id": document.id,
            "number": document.number,
            "subtotal": float(document.subtotal),
            "vat_amount": float(document.vat_amount),
            "income_tax_amount": float(document.income_tax_amount),
            "net_amount": float(document.net_amount),
        }

    # === Report Handlers ===

    def _get_dashboard(self) -> dict[str, Any]:
        stats = dashboard.dashboard_stats(self.session, self.org_id)
        stats.pop("recent_payments", None)
        return stats


def _parse_line_items(line_items: str | list[dict[str, Any]]) -> list[dict[str, Any]]:
    """Accept line items as a JSON string or an already-decoded list."""
    if isinstance(line_items, str):
        try:
            line_items = json.loads(line_items)
        except json.JSONDecodeError as e:
            raise ToolExecutionError("create_document", f"line_items is not valid JSON: {e}") from e
    if isinstance(line_items, dict):
        line_items = [line_items]
    if not isinstance(line_items, list) or not line_items:
        raise ToolExecutionError("create_document", "line_items must be a non-empty list")
    if not all(isinstance(item, dict) for item in line_items):
        raise ToolExecutionError("create_document", "each line item must be an object")
    return line_items
