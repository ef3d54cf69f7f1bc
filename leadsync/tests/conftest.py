import pytest

from leadsync import monitoring, sync
from leadsync.config import get_settings
from leadsync.schemas import Session


@pytest.fixture(autouse=True)
def settings_env(monkeypatch):
    monkeypatch.setenv("VAPI_API_KEY", "test-vapi-key")
    monkeypatch.setenv("VAPI_API_URL", "https://vapi.test")
    monkeypatch.setenv("VAPI_BACKFILL_SESSION_ID", "backfill-session")
    monkeypatch.setenv("SYNC_CUTOFF", "2026-02-27T00:30:00Z")
    monkeypatch.setenv("SENTRY_DSN", "")
    monkeypatch.delenv("HUBSPOT_PRIVATE_APP_TOKEN", raising=False)
    monkeypatch.delenv("WEBHOOK_SECRET", raising=False)
    get_settings.cache_clear()
    monitoring.clear_runs()
    sync.delivered_sessions.clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def make_session():
    def _make(session_id="session-1", created_at="2026-03-01T10:00:00Z", messages=None):
        return Session.model_validate(
            {"id": session_id, "createdAt": created_at, "messages": messages or []}
        )

    return _make


@pytest.fixture
def save_lead_message():
    def _make(arguments, name="saveLead"):
        return {
            "role": "assistant",
            "tool_calls": [{"id": "call-1", "type": "function", "function": {"name": name, "arguments": arguments}}],
        }

    return _make
