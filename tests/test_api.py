"""
Tests for the FastAPI application
"""

import pytest
from fastapi.testclient import TestClient

from src.api.app import create_app
from src.api.services import ServiceBundle
from tests.conftest import USER_ID
from tests.fakes import FakeLLM

HEADERS = {"X-User-Id": USER_ID}


@pytest.fixture
def services(gmail, calendar, hubspot, documents):
    return ServiceBundle(
        gmail=gmail,
        calendar=calendar,
        hubspot=hubspot,
        documents=documents,
        llm=FakeLLM("Understood."),
    )


@pytest.fixture
def client(store, services):
    with TestClient(create_app(store=store, services=services)) as test_client:
        yield test_client


@pytest.fixture
def store_only_client(store):
    with TestClient(create_app(store=store)) as test_client:
        yield test_client


class TestHealth:
    def test_health(self, client):
        response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {
            "status": "healthy",
            "service": "advisor-assistant-api",
            "version": "1.0.0",
            "database": True,
        }

    def test_root_lists_endpoints(self, client):
        assert client.get("/").json()["endpoints"]["query"] == "/api/query"


class TestQuery:
    def test_contact_listing(self, client):
        response = client.post("/api/query", json={"query": "Show me all my contacts"}, headers=HEADERS)

        assert response.status_code == 200
        body = response.json()
        assert body["response"].startswith("Here are your contacts:")
        assert body["intent"]["isContactQuery"] is True
        assert body["toolCalls"][0]["name"] == "get_all_contacts"
        assert body["executionLog"][0]["success"] is True

    def test_conversation_history_is_accepted(self, client, services):
        payload = {
            "query": "Thanks, anything else?",
            "conversationHistory": [{"role": "assistant", "content": "Jane prefers mornings."}],
        }

        response = client.post("/api/query", json=payload, headers=HEADERS)

        assert response.status_code == 200
        assert services.llm.calls[0]["messages"][1] == {"role": "assistant", "content": "Jane prefers mornings."}

    def test_user_header_is_required(self, client):
        assert client.post("/api/query", json={"query": "hi"}).status_code == 422
        blank = client.post("/api/query", json={"query": "hi"}, headers={"X-User-Id": "  "})
        assert blank.status_code == 401

    def test_empty_query_is_rejected(self, client):
        assert client.post("/api/query", json={"query": ""}, headers=HEADERS).status_code == 422

    def test_without_services(self, store_only_client):
        response = store_only_client.post("/api/query", json={"query": "hi"}, headers=HEADERS)

        assert response.status_code == 503
        assert response.json()["detail"] == "External services are not configured"


class TestInstructions:
    def test_crud(self, store_only_client):
        created = store_only_client.post(
            "/api/instructions",
            json={"instruction": "When someone emails me who is not in HubSpot, create a contact", "priority": "high"},
            headers=HEADERS,
        )
        assert created.status_code == 201
        instruction = created.json()
        assert instruction["isActive"] is True
        assert instruction["priority"] == "high"
        assert instruction["executionCount"] == 0

        updated = store_only_client.patch(
            f"/api/instructions/{instruction['id']}", json={"isActive": False}, headers=HEADERS
        )
        assert updated.status_code == 200
        assert updated.json()["isActive"] is False
        assert updated.json()["instruction"] == instruction["instruction"]

        listed = store_only_client.get("/api/instructions", headers=HEADERS).json()
        assert [i["id"] for i in listed] == [instruction["id"]]

        assert store_only_client.delete(f"/api/instructions/{instruction['id']}", headers=HEADERS).status_code == 204
        assert store_only_client.delete(f"/api/instructions/{instruction['id']}", headers=HEADERS).status_code == 404

    def test_instructions_are_per_user(self, store_only_client):
        created = store_only_client.post("/api/instructions", json={"instruction": "rule"}, headers=HEADERS).json()
        other = {"X-User-Id": "advisor-2"}

        assert store_only_client.get("/api/instructions", headers=other).json() == []
        patched = store_only_client.patch(f"/api/instructions/{created['id']}", json={"priority": "low"}, headers=other)
        assert patched.status_code == 404

    def test_invalid_priority(self, store_only_client):
        response = store_only_client.post(
            "/api/instructions", json={"instruction": "rule", "priority": "urgent"}, headers=HEADERS
        )
        assert response.status_code == 422


class TestEvents:
    RULE = "When someone emails me who is not in HubSpot, create a contact"

    def test_gmail_webhook_runs_matching_instruction(self, client, store, hubspot):
        store.create_instruction(USER_ID, self.RULE)

        response = client.post(
            "/api/events/gmail",
            json={"from": "Ann Lee <ann@lee.io>", "subject": "Hello", "snippet": "Nice to meet you"},
            headers=HEADERS,
        )

        assert response.status_code == 200
        body = response.json()
        assert body["matched"] == 1
        assert body["results"][0]["success"] is True
        assert body["autoReplied"] is False
        assert hubspot.created[0]["properties"] == {"email": "ann@lee.io", "firstname": "Ann", "lastname": "Lee"}
        assert client.get("/api/instructions", headers=HEADERS).json()[0]["executionCount"] == 1

    def test_normalised_event(self, client, store, gmail, calendar):
        calendar.meetings = [{"summary": "Review", "start": {"dateTime": "2030-07-16T14:00:00"}}]

        response = client.post(
            "/api/events",
            json={
                "event": "new_email",
                "service": "gmail",
                "data": {"senderEmail": "jane@acme.io", "subject": "Meeting", "content": "When is our next meeting?"},
            },
            headers=HEADERS,
        )

        assert response.status_code == 200
        assert response.json()["autoReplied"] is True
        assert gmail.sent[0]["subject"] == "Re: Meeting"

    def test_hubspot_webhook_without_instructions(self, client, gmail):
        response = client.post(
            "/api/events/hubspot",
            json={"id": "c-9", "properties": {"email": "new@client.io", "firstname": "New"}},
            headers=HEADERS,
        )

        assert response.json() == {"matched": 0, "results": [], "skipped": [], "errors": [], "autoReplied": False}
        assert gmail.sent == []

    def test_unknown_service_is_rejected(self, client):
        response = client.post("/api/events", json={"event": "x", "service": "slack"}, headers=HEADERS)
        assert response.status_code == 422
