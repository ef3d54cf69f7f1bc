import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from leadsync import main
from leadsync.errors import FetchError
from leadsync.schemas import SyncSummary

pytestmark = pytest.mark.asyncio

SAVE_LEAD_EVENT = {
    "type": "function-call",
    "call": {"id": "call-1", "customer": {"number": "+15550001111"}},
    "functionCall": {
        "name": "saveLead",
        "parameters": {
            "firstName": "Ana",
            "lastName": "Lopez",
            "email": "a@x.com",
            "company": "Acme",
            "jobTitle": "CTO",
            "eventQuestions": "Favorite sauce?",
        },
    },
}


@pytest_asyncio.fixture
async def client():
    transport = ASGITransport(app=main.app)
    async with AsyncClient(transport=transport, base_url="http://test") as http:
        yield http


@pytest.fixture
def saved_contacts(monkeypatch):
    saved = []

    async def fake_upsert(lead, phone):
        saved.append((lead, phone))
        return "contact-1"

    monkeypatch.setattr(main.hubspot, "create_or_update_contact", fake_upsert)
    return saved


async def test_health(client):
    response = await client.get("/healthz")

    assert response.status_code == 200
    assert response.json()["status"] == "ok"


async def test_save_lead_webhook(client, saved_contacts):
    response = await client.post("/vapi/webhook", json=SAVE_LEAD_EVENT)

    assert response.status_code == 200
    assert response.json()["result"].startswith("Successfully saved your information")
    lead, phone = saved_contacts[0]
    assert (lead.first_name, lead.email, lead.event_questions) == ("Ana", "a@x.com", "Favorite sauce?")
    assert phone == "+15550001111"


async def test_save_lead_without_parameters(client, saved_contacts):
    event = {"type": "function-call", "functionCall": {"name": "saveLead", "parameters": {}}}

    response = await client.post("/vapi/webhook", json=event)

    assert response.json() == {"result": "Error: No parameters provided"}
    assert saved_contacts == []


async def test_save_lead_crm_failure_is_soft(client, monkeypatch):
    async def failing_upsert(lead, phone):
        raise RuntimeError("HubSpot request failed")

    monkeypatch.setattr(main.hubspot, "create_or_update_contact", failing_upsert)

    response = await client.post("/vapi/webhook", json=SAVE_LEAD_EVENT)

    assert response.status_code == 200
    assert response.json()["result"].startswith("I've noted your information")


async def test_other_events_are_acknowledged(client, saved_contacts):
    for event in (
        {"type": "status-update", "call": {"id": "call-1"}},
        {"type": "transcript", "message": {"role": "user", "content": "hi"}},
        {"type": "end-of-call-report", "call": {"id": "call-1"}},
        {"type": "hang"},
    ):
        response = await client.post("/vapi/webhook", json=event)
        assert response.json() == {"success": True}
    assert saved_contacts == []


async def test_webhook_secret_is_enforced(client, monkeypatch, saved_contacts):
    monkeypatch.setenv("WEBHOOK_SECRET", "s3cret")
    main.get_settings.cache_clear()

    rejected = await client.post("/vapi/webhook", json=SAVE_LEAD_EVENT)
    accepted = await client.post("/vapi/webhook", json=SAVE_LEAD_EVENT, headers={"x-vapi-secret": "s3cret"})

    assert rejected.status_code == 401
    assert accepted.status_code == 200
    assert len(saved_contacts) == 1


async def test_manual_sync(client, monkeypatch):
    async def fake_sync():
        return SyncSummary(synced=2, skipped=1, incomplete=3, started_at="2026-03-01T10:00:00Z")

    monkeypatch.setattr(main, "sync_leads", fake_sync)

    response = await client.post("/sync")

    assert response.status_code == 200
    body = response.json()
    assert (body["synced"], body["skipped"], body["incomplete"]) == (2, 1, 3)


async def test_manual_sync_fetch_failure(client, monkeypatch):
    async def failing_sync():
        raise FetchError("Failed to fetch sessions: 503")

    monkeypatch.setattr(main, "sync_leads", failing_sync)

    response = await client.get("/sync")

    assert response.status_code == 500
    assert response.json() == {"detail": "Sync failed"}


async def test_sync_runs_and_integrations(client):
    main.monitoring.record_run(stage="sync", success=True, duration_ms=12.5, counters={"synced": 1})

    runs = (await client.get("/sync/runs")).json()
    integrations = {item["key"]: item["configured"] for item in (await client.get("/integrations/status")).json()}

    assert runs[0]["counters"] == {"synced": 1}
    assert integrations == {"vapi": True, "hubspot": False, "sheets": True}
