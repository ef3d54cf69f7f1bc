from leadsync.assistant import ASSISTANT_NAME, SHEETS_TOOL_ID, build_assistant_config
from leadsync.config import get_settings


def test_assistant_config(monkeypatch):
    monkeypatch.setenv("WEBHOOK_SECRET", "s3cret")
    get_settings.cache_clear()

    config = build_assistant_config("https://hooks.test/vapi/webhook", event_name="Hot Ones")

    assert config["name"] == ASSISTANT_NAME
    assert config["model"]["toolIds"] == [SHEETS_TOOL_ID]
    assert "Hot Ones" in config["model"]["systemPrompt"]
    assert config["server"]["url"] == "https://hooks.test/vapi/webhook"
    assert config["serverUrlSecret"] == "s3cret"
    schema = config["analysisPlan"]["structuredDataPlan"]["schema"]
    assert schema["required"] == ["firstName", "lastName", "email", "company", "jobTitle", "eventQuestion"]


def test_assistant_config_uses_configured_event(monkeypatch):
    monkeypatch.setenv("EVENT_NAME", "Founder Night")
    get_settings.cache_clear()

    config = build_assistant_config("https://hooks.test/vapi/webhook")

    assert "Founder Night" in config["firstMessage"]
    assert "serverUrlSecret" not in config
