"""Tests for src.config.Settings validators."""

import pytest
from pydantic import ValidationError

from src.config import Settings


def test_private_key_newlines_unescaped():
    settings = Settings(GOOGLE_SHEETS_PRIVATE_KEY="-----BEGIN-----\\nabc\\n-----END-----")
    assert settings.GOOGLE_SHEETS_PRIVATE_KEY == "-----BEGIN-----\nabc\n-----END-----"


def test_empty_private_key():
    assert Settings(GOOGLE_SHEETS_PRIVATE_KEY=None).GOOGLE_SHEETS_PRIVATE_KEY == ""


def test_day_windows_parsed():
    settings = Settings(PROFILE_WINDOW_DAYS="3", RECENT_LOOKBACK_DAYS="0")
    assert settings.PROFILE_WINDOW_DAYS == 3
    assert settings.RECENT_LOOKBACK_DAYS == 0


def test_negative_window_rejected():
    with pytest.raises(ValidationError):
        Settings(PROFILE_WINDOW_DAYS="-1")


def test_negative_delay_clamped():
    assert Settings(SCAN_DELAY_SECONDS="-2").SCAN_DELAY_SECONDS == 0.0


def test_is_production():
    assert Settings(APP_ENV="Production").is_production
    assert not Settings(APP_ENV="test").is_production
