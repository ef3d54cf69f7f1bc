import json
import logging
import os
from typing import Any, Dict, Optional

import httpx

from leadsync import monitoring
from leadsync.config import get_settings
from leadsync.schemas import LeadInfo

HUBSPOT_CONTACTS_URL = "https://api.hubapi.com/crm/v3/objects/contacts"
DEFAULT_TIMEOUT = float(os.getenv("HUBSPOT_TIMEOUT_SECONDS", "10"))

logger = logging.getLogger("leadsync.hubspot")


def _token() -> str:
    token = get_settings().hubspot_token
    if not token:
        raise RuntimeError("HubSpot private app token not configured")
    return token


def is_configured() -> bool:
    return bool(get_settings().hubspot_token)


def _headers() -> Dict[str, str]:
    return {
        "Authorization": f"Bearer {_token()}",
        "Content-Type": "application/json",
    }


def _client() -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=DEFAULT_TIMEOUT)


def _build_properties(lead: LeadInfo, phone_number: str) -> Dict[str, str]:
    properties = {
        "firstname": lead.first_name,
        "lastname": lead.last_name,
        "email": lead.email,
        "phone": phone_number,
        "company": lead.company,
        "jobtitle": lead.job_title,
        "hs_lead_status": "NEW",
    }
    if lead.event_questions:
        properties["notes"] = f"Event Questions/Interests: {lead.event_questions}"
    return properties


async def find_contact_by_email(email: str) -> Optional[str]:
    if not is_configured():
        return None
    payload = {
        "filterGroups": [
            {"filters": [{"propertyName": "email", "operator": "EQ", "value": email}]}
        ],
        "properties": ["email"],
        "limit": 1,
        "after": "0",
        "sorts": [],
    }
    try:
        async with _client() as client:
            response = await client.post(f"{HUBSPOT_CONTACTS_URL}/search", json=payload, headers=_headers())
        response.raise_for_status()
        results = response.json().get("results") or []
    except (httpx.HTTPError, ValueError) as exc:
        # A failed lookup falls through to creating a new contact.
        logger.warning("HubSpot contact lookup failed for %s: %s", email, exc)
        return None
    return results[0]["id"] if results else None


async def create_or_update_contact(lead: LeadInfo, phone_number: str) -> Optional[str]:
    """Upsert ``lead`` as a HubSpot contact keyed by email.

    Returns the contact id, or ``None`` when HubSpot is not configured.
    """
    if not is_configured():
        logger.info("HubSpot disabled - lead data: %s", json.dumps(lead.model_dump(by_alias=True), indent=2))
        return None

    payload: Dict[str, Any] = {"properties": _build_properties(lead, phone_number)}
    existing_id = await find_contact_by_email(lead.email)

    async with _client() as client:
        if existing_id:
            response = await client.patch(f"{HUBSPOT_CONTACTS_URL}/{existing_id}", json=payload, headers=_headers())
        else:
            payload["associations"] = []
            response = await client.post(HUBSPOT_CONTACTS_URL, json=payload, headers=_headers())
    try:
        response.raise_for_status()
        data = response.json()
    except Exception as exc:
        monitoring.capture_exception(exc)
        raise RuntimeError(f"HubSpot request failed: {exc}") from exc

    contact_id = str(data["id"])
    logger.info("%s HubSpot contact: %s", "Updated" if existing_id else "Created", contact_id)
    return contact_id


async def check_connection() -> bool:
    if not is_configured():
        logger.info("HubSpot integration disabled")
        return False
    try:
        async with _client() as client:
            response = await client.get(HUBSPOT_CONTACTS_URL, params={"limit": 1}, headers=_headers())
        response.raise_for_status()
    except httpx.HTTPError as exc:
        logger.error("HubSpot connection failed: %s", exc)
        return False
    logger.info("HubSpot connection successful")
    return True
