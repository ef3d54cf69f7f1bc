import logging
from typing import Optional

from leadsync.config import get_settings
from leadsync.errors import ConfigurationError
from leadsync.integrations import vapi
from leadsync.schemas import ChatResponse, ExtractedLead

logger = logging.getLogger("leadsync.delivery")

SHEETS_TOOL_NAME = "append_lead_row_v2"
ROWS_UPDATED_MARKER = "updatedRows"
SUCCESS_MARKER = "successfully"


def render_instruction(lead: ExtractedLead) -> str:
    return (
        f"Use {SHEETS_TOOL_NAME} to save: "
        f"firstName: {lead.first_name}, "
        f"lastName: {lead.last_name}, "
        f"email: {lead.email}, "
        f"company: {lead.company}, "
        f"jobTitle: {lead.job_title}, "
        f"eventQuestion: {lead.event_question}, "
        f"timestamp: {lead.timestamp}"
    )


def is_success(response: ChatResponse) -> bool:
    for entry in response.output:
        content = entry.content or ""
        if ROWS_UPDATED_MARKER in content or SUCCESS_MARKER in content.lower():
            return True
    return False


async def push_lead(session_id: str, lead: ExtractedLead, channel_id: Optional[str] = None) -> bool:
    """Ask the backfill chat session to append ``lead`` to the spreadsheet.

    Returns ``True`` only when the assistant reports a successful append. A
    missing channel is logged and reported as a failed push; transport faults
    propagate as ``DeliveryTransportError``.
    """
    channel_id = channel_id or get_settings().backfill_session_id
    if not channel_id:
        error = ConfigurationError("No VAPI_BACKFILL_SESSION_ID configured, cannot push leads")
        logger.error("%s (session %s)", error, session_id)
        return False

    response = await vapi.send_chat(channel_id, render_instruction(lead))
    success = is_success(response)
    if not success:
        logger.warning(
            "Sheets append not confirmed for session %s",
            session_id,
            extra={"sync": {"session_id": session_id, "channel_id": channel_id, "status": "unconfirmed"}},
        )
    return success
