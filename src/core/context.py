"""
Farm Care Tracker: process context.

One object holds everything process-scoped: static settings, the store and
locator adapters, the configuration gate and the services built once the
configuration is ready. Routes receive it through FastAPI dependency
injection; tests build it around in-memory fakes.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import date
from typing import TYPE_CHECKING

from src.core.animal_directory import AnimalDirectory
from src.core.caregiver_directory import CaregiverDirectory
from src.core.dates import today_in
from src.core.protocol_catalog import ProtocolCatalog
from src.core.runtime_config import ConfigGate, RuntimeConfig, load_runtime_config
from src.core.treatment_aggregator import TreatmentAggregator
from src.core.treatment_writer import TreatmentWriter

if TYPE_CHECKING:
    from src.config import Settings
    from src.ports.locator_port import DocumentLocator
    from src.ports.tabular_port import TabularStore

logger = logging.getLogger(__name__)


@dataclass
class CareServices:
    config: RuntimeConfig
    animals: AnimalDirectory
    protocols: ProtocolCatalog
    caregivers: CaregiverDirectory
    aggregator: TreatmentAggregator
    writer: TreatmentWriter


class CareContext:
    def __init__(
        self,
        settings: Settings,
        store: TabularStore,
        locator: DocumentLocator,
        gate: ConfigGate | None = None,
        clock: Callable[[], date] | None = None,
    ) -> None:
        self.settings = settings
        self.store = store
        self.locator = locator
        self.gate = gate or ConfigGate(lambda: load_runtime_config(store, settings))
        self._clock = clock or (lambda: today_in(settings.TIMEZONE))
        self._services: CareServices | None = None

    def today(self) -> date:
        return self._clock()

    async def ready(self) -> RuntimeConfig:
        return await self.gate.ready()

    async def services(self) -> CareServices:
        """Wait for configuration, then build the services once."""
        config = await self.ready()
        if self._services is None:
            animals = AnimalDirectory(self.store, self.locator, config)
            self._services = CareServices(
                config=config,
                animals=animals,
                protocols=ProtocolCatalog(self.store, config),
                caregivers=CaregiverDirectory(self.store, config),
                aggregator=TreatmentAggregator(
                    self.store, self.locator, config, self.settings, animals
                ),
                writer=TreatmentWriter(self.store),
            )
            logger.info("Services ready")
        return self._services


def build_google_context(settings: Settings) -> CareContext:
    """Context backed by the Google Sheets and Drive adapters."""
    from src.adapters.google_drive import GoogleDriveLocator
    from src.adapters.google_sheets import GoogleSheetsStore

    return CareContext(settings, GoogleSheetsStore(), GoogleDriveLocator())
