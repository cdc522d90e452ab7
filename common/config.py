from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv


def _default_env_file() -> str:
    # .env at the repo root, next to the packages.
    repo_root = Path(__file__).resolve().parents[1]
    return str(repo_root / ".env")


@dataclass(frozen=True)
class Settings:
    database_url: str

    alert_webhook_url: Optional[str]
    alert_timeout_seconds: float
    alert_max_workers: int

    subscriber_queue_size: int
    cors_origins: tuple[str, ...]

    host: str
    port: int
    log_level: str


def get_settings() -> Settings:
    # Load env file (if present) but still allow overriding via real environment variables.
    env_file = os.getenv("READINGS_ENV_FILE", _default_env_file())
    if env_file and Path(env_file).exists():
        load_dotenv(env_file, override=False)

    database_url = os.getenv("DATABASE_URL", "sqlite:///weather.db")

    # Empty string means "disabled", same as unset.
    webhook = os.getenv("ALERT_WEBHOOK_URL") or os.getenv("DISCORD_WEBHOOK_URL") or ""
    alert_webhook_url = webhook.strip() or None

    origins = os.getenv("CORS_ORIGINS", "*")
    cors_origins = tuple(o.strip() for o in origins.split(",") if o.strip())

    return Settings(
        database_url=database_url,
        alert_webhook_url=alert_webhook_url,
        alert_timeout_seconds=float(os.getenv("ALERT_TIMEOUT_SECONDS", "5")),
        alert_max_workers=int(os.getenv("ALERT_MAX_WORKERS", "2")),
        subscriber_queue_size=int(os.getenv("SUBSCRIBER_QUEUE_SIZE", "64")),
        cors_origins=cors_origins or ("*",),
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "3000")),
        log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
    )
