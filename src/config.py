"""
Farm Care Tracker: centralized configuration.

Loads static settings from .env. Everything that identifies a spreadsheet or
a Drive folder is dynamic configuration instead (see src.core.runtime_config):
it comes from the environment overlaid by the remote configuration sheet.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import BaseModel, field_validator

# Load .env from project root (two levels up from src/config.py)
_ENV_PATH = Path(__file__).resolve().parent.parent / ".env"
load_dotenv(_ENV_PATH)


class Settings(BaseModel):
    """Application settings loaded from environment variables."""

    # Runtime
    APP_ENV: str = "development"
    LOG_LEVEL: str = "INFO"
    HOST: str = "0.0.0.0"
    PORT: int = 8000
    API_PREFIX: str = "/api"

    # Dates are compared as calendar days in this timezone
    TIMEZONE: str = "Asia/Jerusalem"
    WEEKDAY_LOCALE: str = "he"

    # Google service account (Sheets + Drive)
    GOOGLE_SERVICE_ACCOUNT_EMAIL: str = ""
    GOOGLE_SHEETS_PRIVATE_KEY: str = ""
    GOOGLE_SERVICE_ACCOUNT_FILE: str = ""

    # Installed-app OAuth, only needed to provision new treatment sheets
    GOOGLE_OAUTH_CLIENT_PATH: str = "credentials.json"
    GOOGLE_OAUTH_TOKEN_PATH: str = "token.json"

    # Remote Key/Value configuration sheet (optional)
    CONFIGURATION_SHEET_ID: str = ""

    # Aggregation
    PROFILE_WINDOW_DAYS: int = 7
    RECENT_LOOKBACK_DAYS: int = 14
    SCAN_DELAY_SECONDS: float = 1.0

    @field_validator("GOOGLE_SHEETS_PRIVATE_KEY", mode="before")
    @classmethod
    def unescape_private_key(cls, v: str | None) -> str:
        # Keys pasted into .env files usually carry literal "\n" sequences
        if not v:
            return ""
        return v.replace("\\n", "\n")

    @field_validator("PROFILE_WINDOW_DAYS", "RECENT_LOOKBACK_DAYS", mode="before")
    @classmethod
    def parse_days(cls, v: str | int) -> int:
        days = int(v)
        if days < 0:
            raise ValueError("day windows must not be negative")
        return days

    @field_validator("SCAN_DELAY_SECONDS", mode="before")
    @classmethod
    def parse_delay(cls, v: str | float) -> float:
        return max(float(v), 0.0)

    @property
    def is_production(self) -> bool:
        return self.APP_ENV.lower() == "production"


def _load_settings() -> Settings:
    """Load settings from environment.

    Credentials are not validated here: a missing service account surfaces as
    a ConfigurationError on the first store call, so the API can still start
    and answer with a remediation hint.
    """
    return Settings(
        APP_ENV=os.getenv("APP_ENV", "development"),
        LOG_LEVEL=os.getenv("LOG_LEVEL", "INFO"),
        HOST=os.getenv("HOST", "0.0.0.0"),
        PORT=os.getenv("PORT", "8000"),
        API_PREFIX=os.getenv("API_PREFIX", "/api"),
        TIMEZONE=os.getenv("TIMEZONE", "Asia/Jerusalem"),
        WEEKDAY_LOCALE=os.getenv("WEEKDAY_LOCALE", "he"),
        GOOGLE_SERVICE_ACCOUNT_EMAIL=os.getenv("GOOGLE_SERVICE_ACCOUNT_EMAIL", ""),
        GOOGLE_SHEETS_PRIVATE_KEY=os.getenv("GOOGLE_SHEETS_PRIVATE_KEY", ""),
        GOOGLE_SERVICE_ACCOUNT_FILE=os.getenv("GOOGLE_SERVICE_ACCOUNT_FILE", ""),
        GOOGLE_OAUTH_CLIENT_PATH=os.getenv("GOOGLE_OAUTH_CLIENT_PATH", "credentials.json"),
        GOOGLE_OAUTH_TOKEN_PATH=os.getenv("GOOGLE_OAUTH_TOKEN_PATH", "token.json"),
        CONFIGURATION_SHEET_ID=os.getenv("CONFIGURATION_SHEET_ID", ""),
        PROFILE_WINDOW_DAYS=os.getenv("PROFILE_WINDOW_DAYS", "7"),
        RECENT_LOOKBACK_DAYS=os.getenv("RECENT_LOOKBACK_DAYS", "14"),
        SCAN_DELAY_SECONDS=os.getenv("SCAN_DELAY_SECONDS", "1.0"),
    )


# Singleton, imported by all other modules as:
#   from src.config import settings
settings = _load_settings()
