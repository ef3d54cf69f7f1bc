import logging
import os
import traceback
from collections import deque
from datetime import datetime, timezone
from typing import Any, Deque, Dict, List, Optional

import sentry_sdk
from sentry_sdk.integrations.logging import LoggingIntegration

LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"
RUN_HISTORY_SIZE = int(os.getenv("RUN_HISTORY_SIZE", "50"))

_logger = logging.getLogger("leadsync")
_initialized = False
_run_history: Deque[Dict[str, Any]] = deque(maxlen=RUN_HISTORY_SIZE)


def _init_sentry(dsn: str) -> None:
    sentry_sdk.init(
        dsn=dsn,
        integrations=[LoggingIntegration(level=logging.INFO, event_level=logging.ERROR)],
        traces_sample_rate=float(os.getenv("SENTRY_TRACES_SAMPLE_RATE", "0.0")),
        environment=os.getenv("SENTRY_ENVIRONMENT", os.getenv("ENVIRONMENT", "development")),
    )


def init_monitoring() -> None:
    """Configure logging once per process and enable Sentry when a DSN is set."""
    global _initialized
    if _initialized:
        return

    level_name = os.getenv("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(level=getattr(logging, level_name, logging.INFO), format=LOG_FORMAT)

    dsn = os.getenv("SENTRY_DSN")
    if dsn:
        _init_sentry(dsn)
    _logger.info("Monitoring ready (log level %s, sentry %s)", level_name, "on" if dsn else "off")
    _initialized = True


def record_run(
    *,
    stage: str,
    success: bool,
    duration_ms: float,
    counters: Optional[Dict[str, int]] = None,
    error_text: Optional[str] = None,
) -> Dict[str, Any]:
    entry = {
        "stage": stage,
        "success": success,
        "duration_ms": round(duration_ms, 2),
        "counters": dict(counters or {}),
        "error_text": error_text[:1024] if error_text else None,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
    _run_history.append(entry)
    return entry


def recent_runs(limit: int = 20) -> List[Dict[str, Any]]:
    runs = list(_run_history)[-limit:]
    runs.reverse()
    return runs


def clear_runs() -> None:
    _run_history.clear()


def capture_exception(exc: BaseException, **context: Any) -> None:
    _logger.error("Exception captured %s", context or "", exc_info=exc)
    if not sentry_sdk.get_client().is_active():
        return
    with sentry_sdk.new_scope() as scope:
        if context:
            scope.set_context("leadsync", context)
        scope.capture_exception(exc)


def format_exception(exc: BaseException) -> str:
    """Error message first, then the traceback, so truncated records keep the cause."""
    trace = "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    return f"{type(exc).__name__}: {exc}\n{trace}"
