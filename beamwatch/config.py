"""Application configuration via pydantic-settings."""

from __future__ import annotations

import os
import socket
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _default_worker_id() -> str:
    """Generate a unique worker ID from hostname + PID."""
    return f"{socket.gethostname()}-{os.getpid()}"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Reasoning service
    anthropic_api_key: str = ""
    llm_model: str = "claude-sonnet-4-5-20250929"
    llm_max_tokens: int = 4096
    llm_temperature: float = 0.3
    llm_timeout_s: float = 30.0

    # Search provider
    tavily_api_key: str = ""
    search_max_results: int = 10
    search_timeout_s: float = 20.0

    # E-mail delivery (SMTP)
    smtp_host: str = ""
    smtp_port: int = 587
    smtp_user: str = ""
    smtp_password: str = ""
    smtp_use_tls: bool = True
    email_from: str = "BEAM Reports <reports@beam.example.com>"

    # Automation schedule (crontab fields: minute hour day month day_of_week)
    weekly_refresh_cron: str = "0 2 * * 1"
    monthly_reports_cron: str = "0 3 1 * *"
    renewal_reminders_cron: str = "0 9 * * *"
    reminder_window_days: int = 7

    # An unfinished discovery job older than this no longer blocks a new run
    discovery_stale_minutes: int = 60

    # Data directory
    data_dir: Path = Path("./data")

    # Logging
    log_level: str = "INFO"
    log_format: str = "console"

    # API server
    api_host: str = "127.0.0.1"
    api_port: int = 8000

    # Huey settings
    huey_workers: int = 2
    huey_immediate: bool = False

    # Worker identity
    worker_id: str = Field(default_factory=_default_worker_id)

    @property
    def db_path(self) -> Path:
        return self.data_dir / "beamwatch.db"

    @property
    def huey_db_path(self) -> Path:
        return self.data_dir / "huey_queue.db"

    @property
    def smtp_configured(self) -> bool:
        return bool(self.smtp_host and self.smtp_user and self.smtp_password)

    def ensure_data_dir(self) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)
