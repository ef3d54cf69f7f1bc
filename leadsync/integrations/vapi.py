import logging
from typing import Any, Dict, List

import httpx
from pydantic import ValidationError

from leadsync import monitoring
from leadsync.config import get_settings
from leadsync.errors import ConfigurationError, DeliveryTransportError, FetchError, LeadSyncError
from leadsync.schemas import ChatResponse, Session

SESSION_PAGE_LIMIT = 100

logger = logging.getLogger("leadsync.vapi")


def _token() -> str:
    token = get_settings().vapi_api_key
    if not token:
        raise ConfigurationError("Vapi API key not configured")
    return token


def _headers() -> Dict[str, str]:
    return {
        "Authorization": f"Bearer {_token()}",
        "Content-Type": "application/json",
    }


def _client() -> httpx.AsyncClient:
    settings = get_settings()
    return httpx.AsyncClient(base_url=settings.vapi_api_url, timeout=settings.vapi_timeout_seconds)


def is_configured() -> bool:
    return bool(get_settings().vapi_api_key)


async def fetch_sessions() -> List[Session]:
    """Return the first page of chat sessions, newest state of each."""
    try:
        headers = _headers()
    except ConfigurationError as exc:
        raise FetchError(str(exc)) from exc
    try:
        async with _client() as client:
            response = await client.get("/session", params={"limit": SESSION_PAGE_LIMIT}, headers=headers)
        response.raise_for_status()
        data = response.json()
    except httpx.HTTPStatusError as exc:
        raise FetchError(
            f"Failed to fetch sessions: {exc.response.status_code} {exc.response.text}"
        ) from exc
    except (httpx.HTTPError, ValueError) as exc:
        raise FetchError(f"Failed to fetch sessions: {exc}") from exc

    if isinstance(data, dict):
        data = data.get("results") or []
    if not isinstance(data, list):
        raise FetchError(f"Unexpected session payload: {type(data).__name__}")

    sessions = []
    for record in data:
        try:
            sessions.append(Session.model_validate(record))
        except ValidationError as exc:
            # One unreadable record must not hide the rest of the page.
            logger.warning("Dropping unreadable session record: %s", exc.errors(include_url=False))
    return sessions


async def send_chat(session_id: str, text: str) -> ChatResponse:
    """Send ``text`` as a user turn into an existing chat session."""
    payload = {"sessionId": session_id, "input": text}
    try:
        async with _client() as client:
            response = await client.post("/chat", json=payload, headers=_headers())
        response.raise_for_status()
        return ChatResponse.model_validate(response.json())
    except httpx.HTTPStatusError as exc:
        raise DeliveryTransportError(
            f"Chat request failed: {exc.response.status_code} {exc.response.text}"
        ) from exc
    except (httpx.HTTPError, ValueError) as exc:
        raise DeliveryTransportError(f"Chat request failed: {exc}") from exc


async def _assistant_request(method: str, path: str, action: str, **kwargs: Any) -> Any:
    async with _client() as client:
        response = await client.request(method, path, headers=_headers(), **kwargs)
    try:
        response.raise_for_status()
        return response.json() if response.content else None
    except Exception as exc:
        monitoring.capture_exception(exc)
        raise LeadSyncError(f"Failed to {action} assistant: {response.text}") from exc


async def create_assistant(assistant_config: Dict[str, Any]) -> str:
    data = await _assistant_request("POST", "/assistant", "create", json=assistant_config)
    return data["id"]


async def update_assistant(assistant_id: str, changes: Dict[str, Any]) -> None:
    await _assistant_request("PATCH", f"/assistant/{assistant_id}", "update", json=changes)


async def list_assistants() -> List[Dict[str, Any]]:
    return await _assistant_request("GET", "/assistant", "list") or []
