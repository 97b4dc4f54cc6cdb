"""Tests for the HTTP API."""

from unittest.mock import AsyncMock

import pytest
from fastapi.testclient import TestClient

from injaz.api import create_app
from injaz.api.deps import get_db, get_llm_client, get_telegram_bridge
from injaz.clients.gemini import GeminiResponse
from injaz.services import conversations


@pytest.fixture
def bridge():
    fake = AsyncMock()
    fake.is_authorized = lambda secret: secret != "wrong"
    fake.handle_update = AsyncMock(return_value={"ok": True})
    return fake


@pytest.fixture
def client(session_factory, org, user, mock_llm, bridge):
    app = create_app(create_tables=False)

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_llm_client] = lambda: mock_llm
    app.dependency_overrides[get_telegram_bridge] = lambda: bridge
    with TestClient(app) as test_client:
        yield test_client


def test_health(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert response.headers["X-Request-ID"]


def test_request_id_is_echoed(client):
    response = client.get("/health", headers={"X-Request-ID": "abc123"})

    assert response.headers["X-Request-ID"] == "abc123"


class TestChat:
    def test_missing_ids(self, client):
        response = client.post("/api/ai/chat", json={"messages": [{"role": "user", "content": "hi"}]})

        assert response.status_code == 400
        assert response.json() == {"error": "Missing userId or orgId"}

    def test_no_messages(self, client):
        response = client.post("/api/ai/chat", json={"userId": "user-1", "orgId": "org-test"})

        assert response.status_code == 400
        assert response.json() == {"error": "No messages provided"}

    def test_blank_last_message(self, client, mock_llm):
        response = client.post(
            "/api/ai/chat",
            json={
                "userId": "user-1",
                "orgId": "org-test",
                "messages": [
                    {"role": "user", "content": "hi"},
                    {"role": "assistant", "content": "Hello!"},
                    {"role": "user", "content": "   "},
                ],
            },
        )

        assert response.status_code == 400
        assert response.json() == {"error": "Last message is empty"}
        mock_llm.generate.assert_not_called()

    def test_unknown_conversation_rejected_before_tools_run(self, client, mock_llm):
        """No tool may write when the reply has nowhere to be stored."""
        mock_llm.generate.return_value = GeminiResponse(
            content="",
            tool_calls=[{"id": "1", "name": "create_party", "arguments": {"name": "Blue Ink", "type": "VENDOR"}}],
            stop_reason="tool_use",
            usage={},
        )

        response = client.post(
            "/api/ai/chat",
            json={
                "userId": "user-1",
                "orgId": "org-test",
                "conversationId": "missing",
                "messages": [{"role": "user", "content": "Add vendor Blue Ink"}],
            },
        )

        assert response.status_code == 404
        assert response.json()["details"] == {"id": "missing"}
        mock_llm.generate.assert_not_called()
        assert client.get("/api/parties", params={"q": "blue"}).json() == []

    def test_unknown_role(self, client):
        response = client.post(
            "/api/ai/chat",
            json={"userId": "user-1", "orgId": "org-test", "messages": [{"role": "system", "content": "x"}]},
        )

        assert response.status_code == 400

    def test_reply_with_tool_results_is_stored(self, client, mock_llm, session):
        conversation_id = conversations.create_conversation(session, "user-1", "Chat").id
        session.commit()
        mock_llm.generate.side_effect = [
            GeminiResponse(
                content="",
                tool_calls=[{"id": "1", "name": "create_party", "arguments": {"name": "Blue Ink", "type": "VENDOR"}}],
                stop_reason="tool_use",
                usage={},
            ),
            GeminiResponse(content="Added Blue Ink.", tool_calls=[], stop_reason="end_turn", usage={}),
        ]

        response = client.post(
            "/api/ai/chat",
            json={
                "userId": "user-1",
                "orgId": "org-test",
                "conversationId": conversation_id,
                "messages": [{"role": "user", "content": "Add vendor Blue Ink"}],
            },
        )

        assert response.status_code == 200
        body = response.json()
        assert body["content"] == "Added Blue Ink."
        assert body["toolResults"][0]["name"] == "create_party"
        assert body["toolResults"][0]["response"]["success"] is True
        parties = client.get("/api/parties", params={"q": "blue"}).json()
        assert [p["name"] for p in parties] == ["Blue Ink"]
        stored = client.get(f"/api/conversations/{conversation_id}").json()
        assert sorted(m["role"] for m in stored["messages"]) == ["assistant", "user"]

    def test_model_failure_is_500(self, client, mock_llm):
        mock_llm.generate.side_effect = RuntimeError("quota exceeded")

        response = client.post(
            "/api/ai/chat",
            json={"userId": "user-1", "orgId": "org-test", "messages": [{"role": "user", "content": "hi"}]},
        )

        assert response.status_code == 500
        assert response.json() == {"error": "AI request failed", "details": "quota exceeded"}


class TestTranscribe:
    def test_missing_file(self, client):
        response = client.post("/api/ai/transcribe")

        assert response.status_code == 400
        assert response.json() == {"error": "No audio file provided"}

    def test_non_audio_type_defaults_to_webm(self, client, mock_llm):
        mock_llm.transcribe.return_value = "hello"

        response = client.post(
            "/api/ai/transcribe",
            files={"audio": ("clip.bin", b"data", "application/octet-stream")},
        )

        assert response.json() == {"text": "hello"}
        mock_llm.transcribe.assert_awaited_once_with(b"data", "audio/webm")


class TestCrud:
    def test_party_lifecycle(self, client):
        created = client.post(
            "/api/parties", json={"name": "Delta Print", "type": "vendor", "has_vat": True}
        )
        assert created.status_code == 201
        party = created.json()
        assert party["type"] == "VENDOR"
        assert party["organization_id"] == "org-test"

        updated = client.patch(f"/api/parties/{party['id']}", json={"phone": "0100"})
        assert updated.json()["phone"] == "0100"
        assert updated.json()["has_vat"] is True

        assert client.get("/api/parties/stats").json()["vendors"] == 1
        assert client.delete(f"/api/parties/{party['id']}").status_code == 204
        assert client.get(f"/api/parties/{party['id']}").status_code == 404

    def test_unknown_field_rejected(self, client):
        response = client.post("/api/parties", json={"name": "X", "colour": "red"})

        assert response.status_code == 422

    def test_payment_and_draft_flow(self, client):
        party = client.post("/api/parties", json={"name": "Acme", "type": "CLIENT"}).json()

        payment = client.post(
            "/api/payments",
            json={"direction": "INBOUND", "expected_amount": 500, "party_id": party["id"]},
        ).json()
        assert payment["number"] == "RCV-0001"
        assert payment["party"]["name"] == "Acme"
        assert client.get("/api/payments/next-number", params={"direction": "INBOUND"}).json() == {
            "number": "RCV-0002"
        }

        draft = client.post(
            "/api/draft-payments", json={"direction": "OUTBOUND", "expected_amount": 40}
        ).json()
        assert draft["is_draft"] is True
        rejected = client.post(f"/api/draft-payments/{draft['id']}/confirm", json={})
        assert rejected.status_code == 400
        assert "party" in rejected.json()["detail"]

        confirmed = client.post(
            f"/api/draft-payments/{draft['id']}/confirm", json={"party_id": party["id"]}
        ).json()
        assert confirmed["is_draft"] is False
        assert confirmed["number"] == draft["number"]
        assert client.get("/api/draft-payments").json() == []

        summary = client.get("/api/payments/summary").json()
        assert summary["planned_in"] == 500.0
        assert summary["planned_out"] == 40.0

    def test_document_numbering(self, client):
        party = client.post("/api/parties", json={"name": "Acme", "type": "CLIENT"}).json()

        response = client.post(
            "/api/documents",
            json={
                "type": "INVOICE",
                "party_id": party["id"],
                "vat_rate": 0.14,
                "line_items": [{"description": "Design", "quantity": 2, "unit_price": 250}],
            },
        )

        assert response.status_code == 201
        document = response.json()
        assert document["number"] == "INV-0001"
        assert document["subtotal"] == 500.0
        assert document["vat_amount"] == 70.0
        assert len(document["line_items"]) == 1

    def test_not_found_shape(self, client):
        response = client.get("/api/payments/missing")

        assert response.status_code == 404
        assert response.json() == {"detail": "Payment missing not found", "details": {"id": "missing"}}


class TestTelegramWebhook:
    def test_update_is_forwarded(self, client, bridge):
        update = {"update_id": 3, "message": {"chat": {"id": 1}, "text": "hi"}}

        response = client.post("/api/telegram/webhook", json=update)

        assert response.json() == {"ok": True}
        bridge.handle_update.assert_awaited_once_with(update)

    def test_bad_secret_is_acknowledged_but_ignored(self, client, bridge):
        response = client.post(
            "/api/telegram/webhook",
            json={"message": {"text": "hi"}},
            headers={"X-Telegram-Bot-Api-Secret-Token": "wrong"},
        )

        assert response.json() == {"ok": True}
        bridge.handle_update.assert_not_called()

    def test_invalid_json_is_acknowledged(self, client, bridge):
        response = client.post(
            "/api/telegram/webhook",
            content=b"not json",
            headers={"content-type": "application/json"},
        )

        assert response.json() == {"ok": True}
        bridge.handle_update.assert_not_called()
