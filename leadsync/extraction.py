"""Lead extraction from recorded assistant sessions.

A lead is derived from a session by trying an ordered list of strategies, each a
pure function ``Session -> Optional[ExtractedLead]``. The first strategy that
returns a complete lead wins. Malformed evidence never raises: a tool call whose
arguments cannot be decoded is simply not a candidate.
"""

import json
import logging
import re
from typing import Any, Callable, Dict, Optional, Sequence

from leadsync.schemas import ExtractedLead, Session

logger = logging.getLogger("leadsync.extraction")

SAVE_FUNCTION_NAME = "saveLead"
APPEND_FUNCTION_PREFIX = "append_lead_row"
MIN_USER_TURNS = 4

_EMAIL_RE = re.compile(r"Email:\s*(\S+@\S+)", re.IGNORECASE)
_NAME_RE = re.compile(r"Name:\s*(.+?)(?:\n|$)", re.IGNORECASE)
_COMPANY_RE = re.compile(r"Company:\s*(.+?)(?:\n|$)", re.IGNORECASE)
_ROLE_RE = re.compile(r"Role:\s*(.+?)(?:\n|$)", re.IGNORECASE)
_QUESTION_RE = re.compile(r"Question:\s*(.+?)(?:\n|$)", re.IGNORECASE)

Strategy = Callable[[Session], Optional[ExtractedLead]]


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def is_lead_function(name: str) -> bool:
    return name == SAVE_FUNCTION_NAME or name.startswith(APPEND_FUNCTION_PREFIX)


def parse_arguments(raw: Any) -> Optional[Dict[str, Any]]:
    """Decode a tool-call argument payload, or return ``None`` if it is unusable."""
    if isinstance(raw, dict):
        return raw
    if not isinstance(raw, (str, bytes)):
        return None
    try:
        data = json.loads(raw)
    except ValueError:
        return None
    return data if isinstance(data, dict) else None


def from_tool_calls(session: Session) -> Optional[ExtractedLead]:
    for message in session.messages:
        for tool_call in message.tool_calls:
            if not is_lead_function(tool_call.function.name):
                continue
            args = parse_arguments(tool_call.function.arguments)
            if args is None:
                logger.debug(
                    "Skipping malformed %s arguments in session %s",
                    tool_call.function.name,
                    session.id,
                )
                continue
            first_name = _text(args.get("firstName"))
            email = _text(args.get("email"))
            if not first_name or not email:
                continue
            return ExtractedLead(
                first_name=first_name,
                last_name=_text(args.get("lastName")),
                email=email,
                company=_text(args.get("company")),
                job_title=_text(args.get("jobTitle")),
                event_question=_text(args.get("eventQuestion") or args.get("eventQuestions")),
                timestamp=session.created_at,
            )
    return None


def _match(pattern: "re.Pattern[str]", content: str) -> str:
    found = pattern.search(content)
    return found.group(1).strip() if found else ""


def from_recap(session: Session) -> Optional[ExtractedLead]:
    """Read the labeled recap an assistant sends before saving a lead.

    The recap looks like::

        Name: Ana Lopez
        Email: ana@example.com
        Company: Acme
        Role: CTO
        Question: How hot is too hot?
    """
    for message in session.messages:
        if message.role != "assistant" or not message.content:
            continue
        content = message.content
        email = _match(_EMAIL_RE, content)
        name = _match(_NAME_RE, content)
        if not email or not name:
            continue
        name_parts = name.split()
        return ExtractedLead(
            first_name=name_parts[0] if name_parts else "",
            last_name=" ".join(name_parts[1:]),
            email=email[:-1] if email.endswith(",") else email,
            company=_match(_COMPANY_RE, content),
            job_title=_match(_ROLE_RE, content),
            event_question=_match(_QUESTION_RE, content),
            timestamp=session.created_at,
        )
    return None


DEFAULT_STRATEGIES: Sequence[Strategy] = (from_tool_calls, from_recap)


def extract_lead(session: Session, strategies: Sequence[Strategy] = DEFAULT_STRATEGIES) -> Optional[ExtractedLead]:
    """Return the first complete lead any strategy finds in ``session``."""
    for strategy in strategies:
        lead = strategy(session)
        if lead is not None and lead.is_complete:
            return lead

    # The user-turn threshold is informational only; deeper inference over
    # long transcripts is not attempted, so both branches yield no lead.
    user_turns = session.user_turns()
    if user_turns < MIN_USER_TURNS:
        logger.debug("Session %s too short for a lead (%d user turns)", session.id, user_turns)
        return None
    logger.debug("No lead found in session %s despite %d user turns", session.id, user_turns)
    return None
