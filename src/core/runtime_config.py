"""
Farm Care Tracker: runtime configuration.

Sheet and folder IDs are read from the process environment, overlaid by the
Key/Value rows of the remote configuration sheet (CONFIGURATION_SHEET_ID).
The load runs once per process: the first caller starts it and every caller,
the first included, awaits the same task. There is no refresh.
"""

from __future__ import annotations

import asyncio
import logging
import os
from collections.abc import Awaitable, Callable, Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from src.core.animal_types import AnimalTypeRegistry
from src.core.errors import ConfigurationError
from src.data.columns import CONFIG_KEY_HEADER, CONFIG_VALUE_HEADER, header_index
from src.ports.tabular_port import StoreError

if TYPE_CHECKING:
    from src.config import Settings
    from src.ports.tabular_port import TabularStore

logger = logging.getLogger(__name__)

CAREGIVERS_SHEET_ID = "CAREGIVERS_SHEET_ID"
PROTOCOLS_SHEET_ID = "PROTOCOLS_SHEET_ID"
TREATMENT_TEMPLATE_SHEET_ID = "TREATMENT_TEMPLATE_SHEET_ID"


@dataclass
class RuntimeConfig:
    """Merged dynamic configuration plus the animal type lookup built from it."""

    values: dict[str, str] = field(default_factory=dict)
    registry: AnimalTypeRegistry = field(
        default_factory=lambda: AnimalTypeRegistry.from_config({})
    )

    @classmethod
    def from_values(cls, values: Mapping[str, str]) -> RuntimeConfig:
        merged = dict(values)
        return cls(values=merged, registry=AnimalTypeRegistry.from_config(merged))

    def get(self, key: str, default: str = "") -> str:
        return self.values.get(key, default) or default

    def require(self, key: str) -> str:
        value = self.get(key)
        if not value:
            raise ConfigurationError(
                f"{key} is not configured",
                hint=f"Add a '{key}' row to the configuration sheet or set it in the environment.",
            )
        return value


async def load_runtime_config(
    store: TabularStore,
    settings: Settings,
    environ: Mapping[str, str] | None = None,
) -> RuntimeConfig:
    """Read the configuration sheet and merge it over the environment.

    Without CONFIGURATION_SHEET_ID the environment is used as-is.

    Raises:
        ConfigurationError: If the configuration sheet cannot be read.
    """
    values = dict(os.environ if environ is None else environ)
    sheet_id = settings.CONFIGURATION_SHEET_ID
    if not sheet_id:
        logger.warning(
            "CONFIGURATION_SHEET_ID is not set, using environment variables directly"
        )
        return RuntimeConfig.from_values(values)

    logger.info("Reading configuration sheet %s", sheet_id)
    try:
        snapshot = await store.read_sheet(sheet_id)
    except StoreError as exc:
        logger.error("Error reading configuration sheet %s: %s", sheet_id, exc)
        raise ConfigurationError(
            f"Could not read configuration sheet {sheet_id}: {exc}",
            hint="Check CONFIGURATION_SHEET_ID and share the sheet with the service account.",
        ) from exc

    key_col = header_index(snapshot.header, CONFIG_KEY_HEADER)
    value_col = header_index(snapshot.header, CONFIG_VALUE_HEADER)
    key_col = 0 if key_col == -1 else key_col
    value_col = 1 if value_col == -1 else value_col

    loaded = 0
    for row in snapshot.rows:
        key = str(row.cell(key_col) or "").strip()
        value = row.cell(value_col)
        if key and value not in (None, ""):
            values[key] = str(value).strip()
            loaded += 1

    logger.info("Configuration sheet loaded: %d key(s)", loaded)
    return RuntimeConfig.from_values(values)


class ConfigGate:
    """Memoized one-time configuration load shared by all requests."""

    def __init__(self, loader: Callable[[], Awaitable[RuntimeConfig]]) -> None:
        self._loader = loader
        self._task: asyncio.Future[RuntimeConfig] | None = None

    @property
    def started(self) -> bool:
        return self._task is not None

    async def ready(self) -> RuntimeConfig:
        """Wait for the configuration, starting the load on first call.

        A failed load is cached as well: every later caller gets the same
        ConfigurationError.
        """
        if self._task is None:
            logger.info("Starting configuration load")
            self._task = asyncio.ensure_future(self._loader())
        # shield: one cancelled request must not cancel the shared load
        return await asyncio.shield(self._task)
