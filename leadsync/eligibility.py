from enum import Enum
from typing import Optional

from leadsync.schemas import Session
from leadsync.store import DeliveredStore

# Present in the tool result of a successful Google Sheets append.
DELIVERY_MARKER = "updatedRows"


class SkipReason(str, Enum):
    BEFORE_CUTOFF = "before_cutoff"
    ALREADY_DELIVERED = "already_delivered"
    PRIOR_DELIVERY_EVIDENCE = "prior_delivery_evidence"
    IN_FLIGHT = "in_flight"


def has_delivery_evidence(session: Session) -> bool:
    for message in session.messages:
        if message.role == "tool" and message.content and DELIVERY_MARKER in message.content:
            return True
    return False


def check_eligibility(session: Session, cutoff: str, store: DeliveredStore) -> Optional[SkipReason]:
    """Return why ``session`` must not be synced, or ``None`` when it is eligible.

    ``created_at`` and ``cutoff`` are both ISO-8601 UTC strings, so a plain
    string comparison orders them chronologically.
    """
    if session.created_at < cutoff:
        return SkipReason.BEFORE_CUTOFF
    if store.contains(session.id):
        return SkipReason.ALREADY_DELIVERED
    if has_delivery_evidence(session):
        return SkipReason.PRIOR_DELIVERY_EVIDENCE
    return None
