from leadsync import worker
from leadsync.schemas import SyncSummary


def test_sync_task_returns_counters(monkeypatch):
    async def fake_sync():
        return SyncSummary(synced=1, skipped=0, incomplete=2, started_at="2026-03-01T10:00:00Z")

    monkeypatch.setattr(worker, "run_scheduled_sync", fake_sync)

    assert worker.sync_leads_task() == {"synced": 1, "skipped": 0, "incomplete": 2}


def test_sync_task_after_aborted_pass(monkeypatch):
    async def aborted():
        return None

    monkeypatch.setattr(worker, "run_scheduled_sync", aborted)

    assert worker.sync_leads_task() == {}
