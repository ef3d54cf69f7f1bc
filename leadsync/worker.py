import asyncio
import os

from celery import Celery

from leadsync.config import get_settings
from leadsync.sync import run_scheduled_sync


def _broker_url() -> str:
    return os.getenv("CELERY_BROKER_URL") or os.getenv("REDIS_URL", "redis://localhost:6379/0")


celery_app = Celery(
    "leadsync",
    broker=_broker_url(),
    backend=os.getenv("CELERY_RESULT_BACKEND", _broker_url()),
)

if get_settings().sync_interval_seconds > 0:
    celery_app.conf.beat_schedule = {
        "lead-sync": {
            "task": "leadsync.worker.sync_leads_task",
            "schedule": float(get_settings().sync_interval_seconds),
        }
    }


@celery_app.task(name="leadsync.worker.sync_leads_task")
def sync_leads_task() -> dict:
    summary = asyncio.run(run_scheduled_sync())
    return summary.counters() if summary else {}
