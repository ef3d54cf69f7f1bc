"""FastAPI application: Vapi webhook, manual sync trigger and the sync scheduler."""

import json
import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, List

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from fastapi import Depends, FastAPI, HTTPException, Request

from leadsync import monitoring
from leadsync.config import get_settings, validate_config
from leadsync.errors import FetchError
from leadsync.integrations import hubspot, vapi
from leadsync.schemas import LeadInfo, SyncSummary, VapiWebhookMessage
from leadsync.sync import run_scheduled_sync, sync_leads

monitoring.init_monitoring()

logger = logging.getLogger("leadsync.api")

SYNC_JOB_ID = "lead-sync"

scheduler = AsyncIOScheduler()
app = FastAPI(title="leadsync API")


async def verify_webhook_secret(request: Request) -> None:
    expected = get_settings().webhook_secret
    if not expected:
        return
    provided = request.headers.get("x-vapi-secret") or ""
    if not secrets.compare_digest(provided, expected):
        raise HTTPException(status_code=401, detail="Invalid webhook secret")


def _integration_status() -> List[Dict[str, Any]]:
    settings = get_settings()
    return [
        {"key": "vapi", "name": "Vapi", "configured": vapi.is_configured()},
        {"key": "hubspot", "name": "HubSpot", "configured": hubspot.is_configured()},
        {"key": "sheets", "name": "Google Sheets sync", "configured": settings.sync_enabled},
    ]


@app.on_event("startup")
async def on_startup():
    settings = get_settings()
    validate_config(settings)

    if hubspot.is_configured():
        if not await hubspot.check_connection():
            logger.warning("Could not connect to HubSpot. Check your private app token.")
    else:
        logger.info("HubSpot integration disabled - leads will be logged only")

    if not settings.sync_enabled:
        logger.info("[SYNC] Disabled - set SYNC_INTERVAL_SECONDS and VAPI_BACKFILL_SESSION_ID to enable")
        return
    if not scheduler.running:
        scheduler.start()
    if not scheduler.get_job(SYNC_JOB_ID):
        scheduler.add_job(
            run_scheduled_sync,
            "interval",
            seconds=settings.sync_interval_seconds,
            next_run_time=datetime.now(timezone.utc) + timedelta(seconds=settings.sync_initial_delay_seconds),
            id=SYNC_JOB_ID,
        )
    logger.info("[SYNC] Enabled - syncing every %ss", settings.sync_interval_seconds)


@app.on_event("shutdown")
async def on_shutdown():
    if scheduler.running:
        scheduler.shutdown(wait=False)


@app.get("/healthz")
async def health_check():
    return {"status": "ok", "timestamp": datetime.now(timezone.utc).isoformat()}


@app.get("/integrations/status")
async def integrations_status():
    return _integration_status()


@app.api_route("/sync", methods=["GET", "POST"], response_model=SyncSummary)
async def trigger_sync():
    """Run one sync pass immediately, alongside any scheduled pass."""
    try:
        return await sync_leads()
    except FetchError as exc:
        logger.error("Manual sync failed: %s", exc)
        raise HTTPException(status_code=500, detail="Sync failed") from exc


@app.get("/sync/runs")
async def sync_runs(limit: int = 20):
    return monitoring.recent_runs(limit=limit)


@app.post("/vapi/webhook", dependencies=[Depends(verify_webhook_secret)])
async def vapi_webhook(request: Request):
    body = await request.json()
    logger.debug("Received Vapi webhook: %s", json.dumps(body, indent=2))
    message = VapiWebhookMessage.model_validate(body)

    if message.type == "function-call":
        if message.function_call and message.function_call.name == "saveLead":
            return await handle_save_lead(message)
    elif message.type == "status-update":
        logger.info("Call status update for %s", message.call.id if message.call else None)
    elif message.type == "end-of-call-report":
        logger.info("Call ended: %s", message.call.id if message.call else None)
    elif message.type == "transcript":
        logger.info("Transcript update: %s", message.message.content if message.message else "")
    else:
        logger.info("Unhandled message type: %s", message.type)
    return {"success": True}


async def handle_save_lead(message: VapiWebhookMessage) -> Dict[str, str]:
    params = message.function_call.parameters if message.function_call else {}
    if not params:
        return {"result": "Error: No parameters provided"}

    phone = ""
    if message.call and message.call.customer and message.call.customer.number:
        phone = message.call.customer.number
    lead = LeadInfo(
        first_name=str(params.get("firstName") or ""),
        last_name=str(params.get("lastName") or ""),
        email=str(params.get("email") or ""),
        phone=phone,
        company=str(params.get("company") or ""),
        job_title=str(params.get("jobTitle") or ""),
        event_questions=str(params.get("eventQuestions") or params.get("eventQuestion") or ""),
    )
    logger.info("Saving lead: %s %s (%s)", lead.first_name, lead.last_name, lead.email)

    try:
        contact_id = await hubspot.create_or_update_contact(lead, lead.phone)
    except Exception as exc:
        monitoring.capture_exception(exc)
        return {
            "result": "I've noted your information and our team will follow up with you soon. "
            "Is there anything else I can help you with?"
        }

    if contact_id:
        logger.info("Lead saved successfully. HubSpot contact ID: %s", contact_id)
    else:
        logger.info("Lead captured (HubSpot disabled)")
    return {
        "result": f"Successfully saved your information. Our team will follow up with you soon at {lead.email}. "
        "Is there anything else I can help you with?"
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=get_settings().api_port)
