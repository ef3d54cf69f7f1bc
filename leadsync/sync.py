import logging
import time
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, List, Optional

from leadsync import delivery, monitoring
from leadsync.config import get_settings
from leadsync.eligibility import SkipReason, check_eligibility
from leadsync.errors import DeliveryTransportError, FetchError, LeadSyncError
from leadsync.extraction import extract_lead
from leadsync.integrations import vapi
from leadsync.schemas import ExtractedLead, Session, SyncSummary
from leadsync.store import DeliveredStore, InFlightGuard, InMemoryDeliveredStore

FetchSessions = Callable[[], Awaitable[List[Session]]]
PushLead = Callable[[str, ExtractedLead], Awaitable[bool]]
ExtractLead = Callable[[Session], Optional[ExtractedLead]]

# Shared by every pass in this process, whether manual, scheduled or queued.
delivered_sessions = InMemoryDeliveredStore()
in_flight = InFlightGuard()


class LeadSync:
    """Runs one fetch → filter → extract → push pass over the session list."""

    def __init__(
        self,
        *,
        store: Optional[DeliveredStore] = None,
        guard: Optional[InFlightGuard] = None,
        cutoff: Optional[str] = None,
        fetch: Optional[FetchSessions] = None,
        push: Optional[PushLead] = None,
        extract: Optional[ExtractLead] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.store = store if store is not None else delivered_sessions
        self.guard = guard if guard is not None else in_flight
        self.cutoff = cutoff if cutoff is not None else get_settings().sync_cutoff
        self.fetch = fetch or vapi.fetch_sessions
        self.push = push or delivery.push_lead
        self.extract = extract or extract_lead
        self.logger = logger or logging.getLogger("leadsync.sync")

    async def run(self) -> SyncSummary:
        started_at = datetime.now(timezone.utc)
        started = time.perf_counter()
        self.logger.info("[SYNC] Starting lead sync at %s", started_at.isoformat())

        try:
            sessions = await self.fetch()
        except FetchError as exc:
            duration_ms = (time.perf_counter() - started) * 1000
            self.logger.error("[SYNC] Error during lead sync: %s", exc, extra={"sync": {"step": "fetch", "status": "failed"}})
            monitoring.record_run(
                stage="sync",
                success=False,
                duration_ms=duration_ms,
                error_text=monitoring.format_exception(exc),
            )
            raise

        summary = SyncSummary(started_at=started_at)
        for session in sessions:
            await self._process(session, summary)

        summary.duration_ms = (time.perf_counter() - started) * 1000
        self.logger.info(
            "[SYNC] Complete: %d pushed, %d already synced, %d incomplete",
            summary.synced,
            summary.skipped,
            summary.incomplete,
            extra={"sync": {"step": "complete", **summary.counters()}},
        )
        monitoring.record_run(
            stage="sync",
            success=True,
            duration_ms=summary.duration_ms,
            counters=summary.counters(),
        )
        return summary

    async def _process(self, session: Session, summary: SyncSummary) -> None:
        reason = check_eligibility(session, self.cutoff, self.store)
        if reason is not None:
            summary.skipped += 1
            self._log(session.id, "skipped", reason=reason.value)
            return

        lead = self.extract(session)
        if lead is None or not lead.is_complete:
            summary.incomplete += 1
            self._log(session.id, "incomplete")
            return

        if not self.guard.acquire(session.id):
            summary.skipped += 1
            self._log(session.id, "skipped", reason=SkipReason.IN_FLIGHT.value)
            return
        try:
            # Another pass may have finished this session while we were extracting.
            if self.store.contains(session.id):
                summary.skipped += 1
                self._log(session.id, "skipped", reason=SkipReason.ALREADY_DELIVERED.value)
                return
            if await self._push(session.id, lead):
                self.store.add(session.id)
                summary.synced += 1
                self.logger.info("[SYNC] Pushed lead: %s %s (%s)", lead.first_name, lead.last_name, lead.email)
            else:
                self.logger.error("[SYNC] Failed to push lead: %s %s", lead.first_name, lead.last_name)
        finally:
            self.guard.release(session.id)

    async def _push(self, session_id: str, lead: ExtractedLead) -> bool:
        try:
            return await self.push(session_id, lead)
        except DeliveryTransportError as exc:
            self._log(session_id, "push_failed", level=logging.ERROR, error=str(exc))
            return False
        except Exception as exc:
            self._log(session_id, "push_failed", level=logging.ERROR, error=repr(exc))
            monitoring.capture_exception(exc, session_id=session_id)
            return False

    def _log(self, session_id: str, status: str, level: int = logging.DEBUG, **extra: Any) -> None:
        payload: Dict[str, Any] = {"session_id": session_id, "status": status}
        payload.update(extra)
        self.logger.log(level, "session %s %s", session_id, status, extra={"sync": payload})


async def sync_leads() -> SyncSummary:
    return await LeadSync().run()


async def run_scheduled_sync() -> Optional[SyncSummary]:
    """Entry point for timers and workers; a failed pass is logged, never raised."""
    try:
        return await sync_leads()
    except LeadSyncError as exc:
        logging.getLogger("leadsync.sync").error("[SYNC] Scheduled pass aborted: %s", exc)
        return None
