"""
Farm Care Tracker: protocol catalog.

Reads the shared protocols sheet. Each row is a reusable treatment template
for one species and one diagnosis; the species cell holds the Hebrew label
but the English key is accepted too.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from src.core.runtime_config import PROTOCOLS_SHEET_ID
from src.data.columns import PROTOCOL_FIELD_TO_HEADER, header_index
from src.data.models import AnimalType, TreatmentProtocol

if TYPE_CHECKING:
    from src.core.runtime_config import RuntimeConfig
    from src.ports.tabular_port import TabularStore

logger = logging.getLogger(__name__)

_FALSE_FLAGS = {"", "0", "FALSE", "NO"}


def _positive_int(value: Any) -> int:
    try:
        number = int(str(value).strip())
    except (TypeError, ValueError):
        return 1
    return number if number >= 1 else 1


def _flag(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value or "").strip().upper() not in _FALSE_FLAGS


def decode_protocol(header: list[str], values: list[Any]) -> TreatmentProtocol:
    def cell(field_name: str) -> Any:
        idx = header_index(header, PROTOCOL_FIELD_TO_HEADER[field_name])
        return values[idx] if 0 <= idx < len(values) else ""

    return TreatmentProtocol(
        animal_type_label=str(cell("animal_type_label") or "").strip(),
        medical_case=str(cell("medical_case") or "").strip(),
        medication=str(cell("medication") or "").strip(),
        days=_positive_int(cell("days")),
        frequency=_positive_int(cell("frequency")),
        morning=_flag(cell("morning")),
        noon=_flag(cell("noon")),
        evening=_flag(cell("evening")),
        dosage=str(cell("dosage") or "").strip(),
        body_part=str(cell("body_part") or "").strip(),
    )


class ProtocolCatalog:
    def __init__(self, store: TabularStore, config: RuntimeConfig) -> None:
        self._store = store
        self._config = config

    async def list_protocols(self, animal_type: str | AnimalType) -> list[TreatmentProtocol]:
        """All protocols whose species cell names the given type."""
        info = self._config.registry.resolve(animal_type)
        sheet_id = self._config.require(PROTOCOLS_SHEET_ID)
        snapshot = await self._store.read_sheet(sheet_id)

        names = {info.label, info.key}
        protocols = [
            p
            for p in (decode_protocol(snapshot.header, row.values) for row in snapshot.rows)
            if p.animal_type_label in names
        ]
        logger.info("Found %d protocol(s) for %s", len(protocols), info.key)
        return protocols

    async def find_protocols(
        self, animal_type: str | AnimalType, medical_case: str
    ) -> list[TreatmentProtocol]:
        target = (medical_case or "").strip()
        return [p for p in await self.list_protocols(animal_type) if p.medical_case == target]
