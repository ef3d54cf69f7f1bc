"""Static configuration for the event lead collection assistant."""

from typing import Any, Dict, Optional

from leadsync.config import get_settings

ASSISTANT_NAME = "Event Lead Collector"
# Google Sheets tool for append_lead_row_v2, managed in the Vapi dashboard.
SHEETS_TOOL_ID = "0227ae74-57bd-4df6-910e-14868c7d96f3"

LEAD_FIELDS = {
    "firstName": "The lead's first name",
    "lastName": "The lead's last name",
    "email": "The lead's email address",
    "company": "The lead's company name",
    "jobTitle": "The lead's job title or role",
    "eventQuestion": "The question the lead wants to ask at the event",
}

EXTRACTION_SYSTEM_PROMPT = (
    "You are an expert data extractor. You will be given a transcript of a call. "
    "Extract structured data per the JSON Schema. DO NOT return anything except the structured data."
    "\n\nJson Schema:\n{{schema}}\n\nOnly respond with the JSON."
)
EXTRACTION_USER_PROMPT = (
    "Here is the transcript:\n\n{{transcript}}\n\n. "
    "Here is the ended reason of the call:\n\n{{endedReason}}\n\n"
)


def build_system_prompt(event_name: str) -> str:
    return f"""You are a friendly event assistant helping collect information from attendees interested in {event_name}. Your goal is to have a natural conversation while gathering their contact details and learning about their interests.

CONVERSATION FLOW:

Intro: Welcome them to {event_name} and ask who you are talking to.
Name -> Question: Once you have their name, ask what question they would like to put to the speakers.
Question -> Email: Ask for their email address. Confirm the spelling before moving on.
Email -> Company: "Got it. And what company are you with?"
Company -> Role: "Nice, what's your role there?"
Save lead: Once you have all information, use the saveLead function to save their details.
Wrap up: Thank them by name and close the conversation.

GUIDELINES:
- Be conversational and friendly, not robotic
- If they give you their full name at once, acknowledge both first and last name
- Validate that the email format looks correct
- If they seem hesitant about any field, reassure them their info is secure
- Keep responses concise over SMS

IMPORTANT: Once you have ALL required information (first name, last name, email, company, job title, and event question), immediately call the saveLead function to save their information."""


def build_assistant_config(webhook_url: str, event_name: Optional[str] = None) -> Dict[str, Any]:
    settings = get_settings()
    event_name = event_name or settings.event_name
    config: Dict[str, Any] = {
        "name": ASSISTANT_NAME,
        "model": {
            "provider": "openai",
            "model": "gpt-4o-mini",
            "temperature": 0.2,
            "systemPrompt": build_system_prompt(event_name),
            "toolIds": [SHEETS_TOOL_ID],
        },
        "voice": {"provider": "vapi", "voiceId": "Jess"},
        "transcriber": {"provider": "deepgram", "model": "flux-general-en", "language": "en"},
        "analysisPlan": {
            "structuredDataPlan": {
                "enabled": True,
                "schema": {
                    "type": "object",
                    "properties": {
                        name: {"type": "string", "description": description}
                        for name, description in LEAD_FIELDS.items()
                    },
                    "required": list(LEAD_FIELDS),
                },
                "messages": [
                    {"role": "system", "content": EXTRACTION_SYSTEM_PROMPT},
                    {"role": "user", "content": EXTRACTION_USER_PROMPT},
                ],
            },
        },
        "firstMessage": f"Hey! You're officially on our radar for {event_name}. First things first, what's your name?",
        "serverUrl": webhook_url,
        "server": {"url": webhook_url, "timeoutSeconds": 20},
    }
    if settings.webhook_secret:
        config["serverUrlSecret"] = settings.webhook_secret
    return config
