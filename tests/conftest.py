"""Shared test fixtures and configuration.

Sets up environment variables before any src import, and provides fixtures
over the in-memory store and locator in tests/fakes.py.
"""

import os

# Patch env vars BEFORE any src imports
os.environ["APP_ENV"] = "test"
os.environ["CONFIGURATION_SHEET_ID"] = ""
os.environ["SCAN_DELAY_SECONDS"] = "0"
os.environ.setdefault("TIMEZONE", "Asia/Jerusalem")
os.environ.setdefault("GOOGLE_SERVICE_ACCOUNT_EMAIL", "")
os.environ.setdefault("GOOGLE_SHEETS_PRIVATE_KEY", "")

import pytest

from src.data.columns import TREATMENT_HEADERS
from tests.fakes import CONFIG_VALUES, TODAY, FakeLocator, FakeStore


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def locator():
    return FakeLocator()


@pytest.fixture
def runtime_config():
    from src.core.runtime_config import RuntimeConfig
    return RuntimeConfig.from_values(CONFIG_VALUES)


@pytest.fixture
def test_settings():
    from src.config import settings
    return settings.model_copy(update={"SCAN_DELAY_SECONDS": 0.0})


@pytest.fixture
def context(store, locator, runtime_config, test_settings):
    """CareContext over the fakes, with a fixed clock and preloaded config."""
    from src.core.context import CareContext
    from src.core.runtime_config import ConfigGate

    async def _load():
        return runtime_config

    return CareContext(
        test_settings, store, locator, gate=ConfigGate(_load), clock=lambda: TODAY
    )


@pytest.fixture
def treatment_header():
    return list(TREATMENT_HEADERS)
