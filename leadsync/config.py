import logging
import os
from dataclasses import dataclass
from functools import lru_cache

from leadsync.errors import ConfigurationError

logger = logging.getLogger("leadsync.config")

DEFAULT_VAPI_API_URL = "https://api.vapi.ai"
# Sessions created before auto-sync went live are never synced.
DEFAULT_SYNC_CUTOFF = "2026-02-27T00:30:00Z"


@dataclass(frozen=True)
class Settings:
    vapi_api_key: str = ""
    vapi_api_url: str = DEFAULT_VAPI_API_URL
    vapi_timeout_seconds: float = 30.0
    backfill_session_id: str = ""
    sync_cutoff: str = DEFAULT_SYNC_CUTOFF
    sync_interval_seconds: int = 300
    sync_initial_delay_seconds: int = 30
    hubspot_token: str = ""
    webhook_base_url: str = ""
    webhook_secret: str = ""
    event_name: str = "our upcoming event"
    api_port: int = 8000

    @property
    def sync_enabled(self) -> bool:
        return self.sync_interval_seconds > 0 and bool(self.backfill_session_id)


def load_settings() -> Settings:
    return Settings(
        vapi_api_key=os.getenv("VAPI_API_KEY", ""),
        vapi_api_url=os.getenv("VAPI_API_URL", DEFAULT_VAPI_API_URL).rstrip("/"),
        vapi_timeout_seconds=float(os.getenv("VAPI_TIMEOUT_SECONDS", "30")),
        backfill_session_id=os.getenv("VAPI_BACKFILL_SESSION_ID", ""),
        sync_cutoff=os.getenv("SYNC_CUTOFF", DEFAULT_SYNC_CUTOFF),
        sync_interval_seconds=int(os.getenv("SYNC_INTERVAL_SECONDS", "300")),
        sync_initial_delay_seconds=int(os.getenv("SYNC_INITIAL_DELAY_SECONDS", "30")),
        hubspot_token=os.getenv("HUBSPOT_PRIVATE_APP_TOKEN", ""),
        webhook_base_url=os.getenv("WEBHOOK_BASE_URL", "").rstrip("/"),
        webhook_secret=os.getenv("WEBHOOK_SECRET", ""),
        event_name=os.getenv("EVENT_NAME", "our upcoming event"),
        api_port=int(os.getenv("API_PORT", "8000")),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()


def validate_config(settings: Settings) -> None:
    if not settings.vapi_api_key:
        raise ConfigurationError("Missing required environment variable: VAPI_API_KEY")
    if not settings.hubspot_token:
        logger.warning("HUBSPOT_PRIVATE_APP_TOKEN not set; HubSpot integration disabled")
    if not settings.backfill_session_id:
        logger.warning("VAPI_BACKFILL_SESSION_ID not set; leads cannot be pushed to Sheets")
