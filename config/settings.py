"""Application settings loaded from environment variables.

Uses pydantic-settings for validation and type coercion. All keys use the
``LAKSHMAN_REKHA_`` prefix, except logging, which keeps its canonical
environment variable names via ``validation_alias``.
"""

from __future__ import annotations

from enum import StrEnum
from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(StrEnum):
    DEVELOPMENT = "development"
    PRODUCTION = "production"


class Settings(BaseSettings):
    """Central configuration for the Lakshman Rekha backend.

    Environment variables are loaded from a ``.env`` file when present.
    Escalation durations are expressed in ticks; ``tick_seconds`` maps a
    tick onto wall-clock time for the asyncio scheduler.
    """

    model_config = SettingsConfigDict(
        env_prefix="LAKSHMAN_REKHA_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    # ── App ────────────────────────────────────────────────────────────
    env: Literal["development", "production"] = "development"

    # ── Logging ────────────────────────────────────────────────────────
    log_level: str = Field(default="INFO", validation_alias="LOG_LEVEL")
    log_format: str = Field(default="json", validation_alias="LOG_FORMAT")

    # ── Escalation (ticks) ─────────────────────────────────────────────
    tick_seconds: float = Field(default=1.0, gt=0)
    response_countdown_ticks: int = Field(default=30, ge=1)
    auto_escalation_ticks: int = Field(default=20, ge=1)
    safe_report_delay_ticks: int = Field(default=1, ge=0)
    alarm_tone_timeout_ticks: int = Field(default=20, ge=1)  # countdown path
    need_help_tone_timeout_ticks: int = Field(default=30, ge=1)  # "I need help" path
    emergency_number: str = "112"

    # ── Periodic safety check (seconds) ────────────────────────────────
    safety_check_interval_seconds: float = 60.0
    safety_check_poll_seconds: float = 10.0

    # ── Datasets ───────────────────────────────────────────────────────
    data_dir: Path = Path("attached_assets")
    schemes_file: str = "updated_data[1]_1760544223833.csv"
    crime_csv_file: str = "crimes_against_women_2001-2014_1760601891621.csv"
    crime_pdf_file: str = "Crimes_1760597839379.pdf"
    disaster_csv_file: str = "disasterIND_1760601997610.csv"

    # ── Derived Properties ─────────────────────────────────────────────

    @property
    def is_production(self) -> bool:
        return self.env == Environment.PRODUCTION

    @property
    def schemes_path(self) -> Path:
        return self.data_dir / self.schemes_file

    @property
    def crime_csv_path(self) -> Path:
        return self.data_dir / self.crime_csv_file

    @property
    def crime_pdf_path(self) -> Path:
        return self.data_dir / self.crime_pdf_file

    @property
    def disaster_csv_path(self) -> Path:
        return self.data_dir / self.disaster_csv_file


# Module-level singleton: import ``settings`` everywhere.
settings = Settings()
