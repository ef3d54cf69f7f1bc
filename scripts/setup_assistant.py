#!/usr/bin/env python
"""Create the lead collection assistant, or point an existing one at our webhook."""

import asyncio
import sys

from leadsync import monitoring
from leadsync.assistant import ASSISTANT_NAME, build_assistant_config
from leadsync.config import get_settings, validate_config
from leadsync.errors import LeadSyncError
from leadsync.integrations import vapi


async def main() -> int:
    monitoring.init_monitoring()
    settings = get_settings()
    try:
        validate_config(settings)
    except LeadSyncError as exc:
        print(f"Setup failed: {exc}")
        return 1
    if not settings.webhook_base_url:
        print("Error: WEBHOOK_BASE_URL is required to set up the assistant.")
        return 1

    webhook_url = f"{settings.webhook_base_url}/vapi/webhook"
    print("Checking for existing assistants...")
    try:
        assistants = await vapi.list_assistants()
        existing = next((a for a in assistants if a.get("name") == ASSISTANT_NAME), None)
        if existing:
            # Only the webhook URL changes; dashboard edits are preserved.
            await vapi.update_assistant(existing["id"], {"serverUrl": webhook_url})
            print(f"Updated webhook URL for assistant {existing['id']}: {webhook_url}")
        else:
            assistant_id = await vapi.create_assistant(build_assistant_config(webhook_url))
            print(f"Created assistant {assistant_id}")
    except LeadSyncError as exc:
        print(f"Setup failed: {exc}")
        return 1

    print("\n--- Next Steps ---")
    print("1. Go to https://dashboard.vapi.ai and open Phone Numbers")
    print(f'2. Assign the "{ASSISTANT_NAME}" assistant to your number and enable SMS')
    print("3. Send an SMS to your Vapi number to test")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
