"""Engine settings loaded from environment variables."""

from __future__ import annotations

import logging

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Engine configuration.

    Values are read from ``ELECTION_WIZARD_*`` environment variables (or a `.env` file).
    """

    # App
    log_level: str = "INFO"
    default_timezone: str = "UTC"
    scheduler_timezone: str = "UTC"

    # Autosave
    autosave_enabled: bool = True
    autosave_delay_seconds: float = 2.0
    autosave_slot_key: str = "election_autosave"
    autosave_schema_version: str = "1.0"
    autosave_max_age_hours: int = 24
    autosave_recent_hours: int = 1

    # Scratch storage
    storage_backend: str = "memory"
    storage_dir: str = ".autosave"

    # Supabase
    supabase_url: str | None = None
    supabase_service_key: str | None = None
    supabase_autosave_table: str = "autosave_slots"
    supabase_http_max_connections: int = 10
    supabase_http_max_keepalive_connections: int = 5
    supabase_postgrest_timeout_seconds: int = 10

    # Validation policy
    lottery_assumed_max_participants: int = 1000

    model_config = {
        "env_prefix": "ELECTION_WIZARD_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "extra": "ignore",
    }


settings = Settings()


def configure_logging(level: str | None = None) -> None:
    """Install the root log format used by hosts and maintenance scripts."""
    name = (level or settings.log_level).upper()
    logging.basicConfig(
        level=getattr(logging, name, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )
