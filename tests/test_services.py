"""Tests for the CRUD service layer."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from injaz.db.enums import (
    Direction,
    DocumentStatus,
    DraftStatus,
    PartyType,
    PaymentStatus,
    SalaryStatus,
)
from injaz.services import (
    conversations,
    dashboard,
    documents,
    drafts,
    loans,
    notifications,
    parties,
    payments,
    projects,
    recurring,
    salaries,
    search,
    tasks,
    users,
    vat,
)
from injaz.services.errors import InvalidInputError, NotFoundError


class TestParties:
    def test_create_defaults_to_vendor(self, session, org):
        party = parties.create_party(session, org.id, {"name": "Cairo Print", "email": ""})

        assert party.type == PartyType.VENDOR
        assert party.email is None

    def test_invalid_type_rejected(self, session, org):
        with pytest.raises(InvalidInputError):
            parties.create_party(session, org.id, {"name": "X", "type": "alien"})

    def test_search_is_case_insensitive(self, session, client_party, vendor_party):
        found = parties.search_parties(session, client_party.organization_id, "acme")

        assert [p.name for p in found] == ["Acme Holdings"]

    def test_update_rejects_unknown_field(self, session, client_party):
        with pytest.raises(InvalidInputError):
            parties.update_party(session, client_party.id, {"nickname": "A"})

    def test_stats(self, session, org, client_party, vendor_party):
        stats = parties.party_stats(session, org.id)

        assert stats == {"clients": 1, "vendors": 1, "employees": 0, "total": 2}

    def test_missing_party_is_not_found(self, session):
        with pytest.raises(NotFoundError) as exc:
            parties.get_party(session, "nope")

        assert exc.value.status_code == 404


class TestPayments:
    def test_numbers_increment_per_direction(self, session, org, client_party):
        first = payments.create_payment(
            session, org.id, {"direction": "inbound", "expected_amount": 100, "party_id": client_party.id}
        )
        second = payments.create_payment(
            session, org.id, {"direction": "INBOUND", "expected_amount": 50}
        )
        outgoing = payments.create_payment(
            session, org.id, {"direction": "OUTBOUND", "expected_amount": 20}
        )

        assert first.number == "RCV-0001"
        assert second.number == "RCV-0002"
        assert outgoing.number == "PAY-0001"
        assert first.status == PaymentStatus.PLANNED
        assert first.is_draft is False

    def test_number_continues_after_highest_suffix(self, session, org):
        payments.create_payment(
            session, org.id, {"direction": "INBOUND", "expected_amount": 1, "number": "RCV-0041"}
        )

        assert payments.next_payment_number(session, org.id, "RCV") == "RCV-0042"

    def test_direction_and_amount_required(self, session, org):
        with pytest.raises(InvalidInputError):
            payments.create_payment(session, org.id, {"expected_amount": 10})
        with pytest.raises(InvalidInputError):
            payments.create_payment(session, org.id, {"direction": "INBOUND"})

    def test_list_filters_and_excludes_drafts(self, session, org, client_party):
        payments.create_payment(
            session,
            org.id,
            {"direction": "INBOUND", "expected_amount": 10, "planned_date": "2024-01-10"},
        )
        payments.create_payment(
            session,
            org.id,
            {"direction": "OUTBOUND", "expected_amount": 10, "planned_date": "2024-02-10"},
        )
        payments.create_draft_payment(session, org.id, {"direction": "INBOUND", "expected_amount": 5})

        assert len(payments.list_payments(session, org.id)) == 2
        assert len(payments.list_payments(session, org.id, direction="outbound")) == 1
        assert len(payments.list_payments(session, org.id, date_from="2024-02-01")) == 1


class TestDraftPayments:
    def test_draft_gets_draft_number_and_planned_status(self, session, org):
        draft = payments.create_draft_payment(
            session,
            org.id,
            {"direction": "OUTBOUND", "expected_amount": 75, "status": "COMPLETED"},
        )

        assert draft.number == "DRF-0001"
        assert draft.is_draft is True
        assert draft.status == PaymentStatus.PLANNED
        assert payments.list_draft_payments(session, org.id) == [draft]

    def test_confirm_requires_party(self, session, org):
        draft = payments.create_draft_payment(
            session, org.id, {"direction": "OUTBOUND", "expected_amount": 75}
        )

        with pytest.raises(InvalidInputError):
            payments.confirm_draft_payment(session, draft.id, {})

    def test_confirm_promotes_draft(self, session, org, vendor_party):
        draft = payments.create_draft_payment(
            session, org.id, {"direction": "OUTBOUND", "expected_amount": 75}
        )

        confirmed = payments.confirm_draft_payment(
            session, draft.id, {"party_id": vendor_party.id}
        )

        assert confirmed.is_draft is False
        assert confirmed.party_id == vendor_party.id
        assert confirmed.number == "DRF-0001"
        assert payments.list_draft_payments(session, org.id) == []
        assert len(payments.list_payments(session, org.id)) == 1

    def test_confirmed_payment_is_not_a_draft(self, session, org):
        payment = payments.create_payment(
            session, org.id, {"direction": "INBOUND", "expected_amount": 5}
        )

        with pytest.raises(InvalidInputError):
            payments.update_draft_payment(session, payment.id, {"notes": "x"})

    def test_summary_ignores_drafts(self, session, org):
        payments.create_payment(
            session,
            org.id,
            {"direction": "INBOUND", "expected_amount": 100, "status": "COMPLETED"},
        )
        payments.create_draft_payment(session, org.id, {"direction": "INBOUND", "expected_amount": 900})

        summary = payments.financial_summary(session, org.id)

        assert summary["gross_revenue"] == 100.0
        assert summary["total_payments"] == 1


class TestCategoriesAndAllocations:
    def test_category_types(self, session, org):
        payments.create_category(session, org.id, "Rent", "outbound")
        payments.create_category(session, org.id, "Sales", "INBOUND", "#00ff00")

        names = [c.name for c in payments.list_categories(session, org.id, type="INBOUND")]

        assert names == ["Sales"]

    def test_allocations_update_document_balance(self, session, org, client_party):
        document = documents.create_document(
            session,
            org.id,
            "INVOICE",
            client_party.id,
            [{"description": "Work", "quantity": 1, "unit_price": 1000}],
        )
        payment = payments.create_payment(
            session, org.id, {"direction": "INBOUND", "expected_amount": 400}
        )

        allocation = payments.create_allocation(session, payment.id, document.id, 400)

        assert document.paid_amount == Decimal("400")
        assert document.remaining_amount == Decimal("600")

        payments.delete_allocation(session, allocation.id)

        assert document.paid_amount == Decimal("0")
        assert document.remaining_amount == Decimal("1000")

    def test_unpaid_documents_skip_drafts(self, session, org, client_party):
        document = documents.create_document(
            session,
            org.id,
            "INVOICE",
            client_party.id,
            [{"description": "Work", "unit_price": 100}],
        )

        assert payments.unpaid_documents_for_party(session, client_party.id) == []

        documents.update_document_status(session, document.id, "sent")

        assert payments.unpaid_documents_for_party(session, client_party.id) == [document]


class TestDocuments:
    def test_create_invoice_with_totals(self, session, org, client_party, user):
        document = documents.create_document(
            session,
            org.id,
            "invoice",
            client_party.id,
            [
                {"description": "Design", "quantity": 2, "unit_price": 500},
                {"description": "Hosting", "unitPrice": 250},
            ],
            created_by_id=user.id,
            vat_rate=0.14,
            income_tax_rate=0.03,
        )

        assert document.number == "INV-0001"
        assert document.direction == Direction.INBOUND
        assert document.status == DocumentStatus.DRAFT
        assert document.subtotal == Decimal("1250.00")
        assert document.net_amount == Decimal("1387.50")
        assert document.remaining_amount == document.net_amount
        assert [item.description for item in document.line_items] == ["Design", "Hosting"]

    def test_vendor_bill_is_outbound(self, session, org, vendor_party):
        document = documents.create_document(
            session, org.id, "VENDOR_BILL", vendor_party.id, [{"unit_price": 10}]
        )

        assert document.number == "VB-0001"
        assert document.direction == Direction.OUTBOUND

    def test_line_items_required(self, session, org, client_party):
        with pytest.raises(InvalidInputError):
            documents.create_document(session, org.id, "QUOTATION", client_party.id, [])

    def test_stats(self, session, org, client_party):
        for doc_type in ("QUOTATION", "INVOICE", "INVOICE"):
            documents.create_document(
                session, org.id, doc_type, client_party.id, [{"unit_price": 1}]
            )

        stats = documents.document_stats(session, org.id)

        assert stats["quotations"] == 1
        assert stats["invoices"] == 2
        assert stats["total"] == 3
        assert documents.next_document_number(session, org.id, "INVOICE") == "INV-0003"


class TestProjectsAndTasks:
    def test_project_stats_and_task_counts(self, session, org):
        website = projects.create_project(session, org.id, {"name": "Website"})
        projects.create_project(session, org.id, {"name": "Audit", "status": "on_hold"})
        tasks.create_task(session, {"title": "Wireframes", "project_id": website.id})
        tasks.create_task(session, {"title": "Copy", "project_id": website.id})

        assert projects.project_stats(session, org.id) == {
            "active": 1,
            "completed": 0,
            "on_hold": 1,
            "total": 2,
        }
        assert projects.task_counts(session, [website.id]) == {website.id: 2}

    def test_project_requires_name(self, session, org):
        with pytest.raises(InvalidInputError):
            projects.create_project(session, org.id, {"name": ""})

    def test_task_dates_are_parsed(self, session):
        task = tasks.create_task(session, {"title": "Ship", "due_date": "2024-05-01"})

        assert task.due_date == datetime(2024, 5, 1, tzinfo=timezone.utc)
        assert task.status == "To Do"
        assert task.priority == "Medium"

    def test_quick_tasks_and_day_order(self, session, user):
        quick = tasks.create_quick_task(session, user.id, "Call bank", "2024-05-01")
        tasks.create_quick_task(session, user.id, "Other day", "2024-05-02")
        tasks.update_quick_task(session, quick.id, {"status": "done", "owner_uid": "someone"})

        assert [q.title for q in tasks.list_quick_tasks(session, user.id, "2024-05-01")] == [
            "Call bank"
        ]
        assert quick.status == "done"
        assert quick.owner_uid == user.id

        tasks.save_day_order(session, user.id, "2024-05-01", ["b", "a"])
        saved = tasks.save_day_order(session, user.id, "2024-05-01", ["a", "b"])

        assert saved.id == f"{user.id}_2024-05-01"
        assert tasks.get_day_order(session, user.id, "2024-05-01").order_data == ["a", "b"]


class TestPayrollLoansRecurringVat:
    def test_salary_stats(self, session, user):
        salaries.create_salary(
            session,
            {
                "user_id": user.id,
                "month": "2024-05",
                "gross_amount": 10000,
                "net_amount": 9000,
                "scheduled_date": "2024-05-28",
                "status": "PAID",
            },
        )
        salaries.create_salary(
            session,
            {
                "user_id": user.id,
                "month": "2024-05",
                "gross_amount": 5000,
                "net_amount": 4500,
                "scheduled_date": "2024-05-28",
                "status": SalaryStatus.DEFERRED,
            },
        )

        assert salaries.salary_stats(session, month="2024-05") == {
            "total": 15000.0,
            "paid": 9000.0,
            "pending": 4500.0,
            "count": 2,
        }

    def test_salary_missing_fields(self, session, user):
        with pytest.raises(InvalidInputError, match="scheduled_date"):
            salaries.create_salary(
                session,
                {"user_id": user.id, "month": "2024-05", "gross_amount": 1, "net_amount": 1},
            )

    def test_loan_balance_defaults_to_principal(self, session, user):
        loan = loans.create_loan(
            session,
            {
                "owner_id": user.id,
                "owner_name": user.name,
                "direction": "INBOUND",
                "principal_amount": 50000,
                "loan_date": "2024-01-01",
            },
        )

        assert loan.current_balance == Decimal("50000")

    def test_recurring_next_due_defaults_to_start(self, session):
        expense = recurring.create_recurring_expense(
            session,
            {
                "name": "Office rent",
                "vendor_name": "Landlord",
                "category": "Rent",
                "amount": 8000,
                "frequency": "monthly",
                "start_date": "2024-01-01",
            },
        )

        assert expense.next_due_date == expense.start_date
        assert recurring.list_recurring_expenses(session, is_active=True) == [expense]

    def test_vat_liability_derives_net_and_due_date(self, session):
        liability = vat.create_vat_liability(
            session, {"month": "2024-03", "collected_vat": 1400, "deductible_vat": 350}
        )

        assert liability.net_vat_payable == Decimal("1050.00")
        assert (liability.due_date.month, liability.due_date.day) == (4, 25)


class TestDrafts:
    def test_pushed_draft_records_time(self, session, user):
        draft = drafts.create_draft(
            session,
            {"created_by_id": user.id, "source": "voice", "amount": "120.5", "party_name": "Cafe"},
        )
        drafts.update_draft_status(session, draft.id, "pushed")

        assert draft.status == DraftStatus.PUSHED
        assert draft.pushed_at is not None
        assert drafts.list_drafts(session, status="PUSHED") == [draft]

    def test_creator_required(self, session):
        with pytest.raises(InvalidInputError):
            drafts.create_draft(session, {"amount": 1})


class TestDashboardAndSearch:
    def test_dashboard_excludes_drafts(self, session, org, client_party, vendor_party):
        payments.create_payment(
            session,
            org.id,
            {
                "direction": "INBOUND",
                "expected_amount": 1000,
                "status": "COMPLETED",
                "party_id": client_party.id,
                "planned_date": "2024-01-15",
            },
        )
        payments.create_payment(
            session,
            org.id,
            {"direction": "OUTBOUND", "expected_amount": 400, "party_id": vendor_party.id},
        )
        payments.create_draft_payment(
            session, org.id, {"direction": "INBOUND", "expected_amount": 5000}
        )

        stats = dashboard.dashboard_stats(session, org.id)

        assert stats["total_revenue"] == 1000.0
        assert stats["total_expenses"] == 400.0
        assert stats["completed_revenue"] == 1000.0
        assert stats["planned_expenses"] == 400.0
        assert stats["net_profit"] == 600.0
        assert stats["payment_count"] == 2
        assert stats["party_count"] == 2
        assert len(stats["recent_payments"]) == 2

        top = dashboard.top_parties(session, org.id, limit=1)
        assert top[0]["name"] == "Acme Holdings"
        assert top[0]["total_volume"] == 1000.0

        months = dashboard.monthly_breakdown(session, org.id)
        assert months[0] == {"month": "2024-01", "income": 1000.0, "expense": 0.0}

    def test_breakdowns(self, session, org):
        rent = payments.create_category(session, org.id, "Rent", "OUTBOUND")
        site = projects.create_project(session, org.id, {"name": "Site"})
        payments.create_payment(
            session,
            org.id,
            {
                "direction": "OUTBOUND",
                "expected_amount": 300,
                "category_id": rent.id,
                "project_id": site.id,
            },
        )
        payments.create_payment(
            session,
            org.id,
            {"direction": "INBOUND", "expected_amount": 900, "project_id": site.id},
        )
        session.commit()

        categories = dashboard.category_breakdown(session, org.id)
        assert categories == [{"name": "Rent", "type": "OUTBOUND", "total": 300.0, "count": 1}]

        project_rows = dashboard.project_breakdown(session, org.id)
        assert project_rows[0]["profit"] == 600.0
        assert project_rows[0]["payment_count"] == 2

    def test_search_groups(self, session, org, client_party):
        projects.create_project(session, org.id, {"name": "Acme rebrand"})
        payments.create_payment(
            session,
            org.id,
            {"direction": "INBOUND", "expected_amount": 1, "description": "Acme deposit"},
        )

        results = search.global_search(session, org.id, "acme")

        assert [p["name"] for p in results["parties"]] == ["Acme Holdings"]
        assert [p["name"] for p in results["projects"]] == ["Acme rebrand"]
        assert len(results["payments"]) == 1
        assert results["tasks"] == []

    def test_short_query_returns_nothing(self, session, org, client_party):
        results = search.global_search(session, org.id, "a")

        assert all(group == [] for group in results.values())


class TestUsersNotificationsConversations:
    def test_sync_user_roles(self, session, org):
        admin = users.sync_user(session, "admin-uid", "boss@example.com")
        member = users.sync_user(session, "u2", "new@example.com", "New Person")

        assert (admin.role, admin.approval_status) == ("Admin", "approved")
        assert admin.name == "boss"
        assert (member.role, member.approval_status) == ("Employee", "pending")

        users.update_user_role(session, "u2", "Manager")
        refreshed = users.sync_user(session, "u2", "renamed@example.com", "Renamed")

        assert refreshed.role == "Manager"
        assert refreshed.email == "renamed@example.com"

    def test_invalid_role(self, session, user):
        with pytest.raises(InvalidInputError):
            users.update_user_role(session, user.id, "Overlord")

    def test_default_organization_created_once(self, session):
        first = users.get_or_create_organization(session)
        second = users.get_or_create_organization(session)

        assert first is second
        assert first.id == "injaz-main"

    def test_notifications(self, session, user):
        first = notifications.create_notification(session, user.id, "Invoice paid")
        notifications.create_notification(session, user.id, "Task due", "/tasks")

        assert notifications.unread_count(session, user.id) == 2

        notifications.mark_as_read(session, first.id)
        assert notifications.unread_count(session, user.id) == 1

        assert notifications.mark_all_as_read(session, user.id) == 1
        assert notifications.unread_count(session, user.id) == 0

    def test_conversation_messages_and_prompt_setting(self, session, user):
        conversation = conversations.create_conversation(session, user.id)
        conversations.add_message(session, conversation.id, "user", "Hi")
        conversations.add_message(session, conversation.id, "assistant", "Hello")
        session.commit()

        stored = conversations.get_conversation(session, conversation.id)
        assert stored.title == "New conversation"
        assert sorted(m.content for m in stored.messages) == ["Hello", "Hi"]

        assert conversations.extra_system_prompt(session) is None
        conversations.save_system_setting(session, "ai_settings", {"systemPrompt": " Be brief. "})
        assert conversations.extra_system_prompt(session) == "Be brief."
