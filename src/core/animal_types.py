"""
Farm Care Tracker: animal type registry.

One closed enum (AnimalType) plus one lookup built once from configuration.
Callers may name a type by key ("donkey") or by its sheet label ("חמור");
both resolve through the same table.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from src.data.models import AnimalType, AnimalTypeInfo

logger = logging.getLogger(__name__)

# type -> (label, emoji, config key prefix)
_STATIC = {
    AnimalType.DONKEY: ("חמור", "🫏", "DONKEYS"),
    AnimalType.HORSE: ("סוס", "🐴", "HORSES"),
    AnimalType.COW: ("פרה", "🐄", "COWS"),
    AnimalType.DOG: ("כלב", "🐕", "DOGS"),
    AnimalType.CAT: ("חתול", "🐈", "CATS"),
    AnimalType.GOAT: ("עז", "🐐", "GOATS"),
    AnimalType.SHEEP: ("כבשה", "🐑", "SHEEPS"),
    AnimalType.RABBIT: ("ארנב", "🐰", "RABBITS"),
    AnimalType.CHICKEN: ("עופות", "🐔", "CHICKENS"),
    AnimalType.PIG: ("חזיר", "🐖", "PIGS"),
}


def sheet_id_key(animal_type: AnimalType) -> str:
    return f"{_STATIC[animal_type][2]}_SHEET_ID"


def folder_id_key(animal_type: AnimalType) -> str:
    return f"{_STATIC[animal_type][2]}_DRIVE_FOLDER_ID"


class UnknownAnimalTypeError(ValueError):
    """Raised when a key or label does not name a known animal type."""


class AnimalTypeRegistry:
    """Bidirectional key/label lookup of configured animal types."""

    def __init__(self, infos: list[AnimalTypeInfo]) -> None:
        self._infos = {info.type: info for info in infos}
        self._by_name: dict[str, AnimalType] = {}
        for info in infos:
            self._by_name[info.key] = info.type
            self._by_name[info.label] = info.type

    @classmethod
    def from_config(cls, values: Mapping[str, str]) -> AnimalTypeRegistry:
        """Build the registry from merged configuration values.

        Every type in the enum is registered; its sheet and folder IDs are
        empty when not configured.
        """
        infos = []
        for animal_type, (label, emoji, _prefix) in _STATIC.items():
            infos.append(
                AnimalTypeInfo(
                    type=animal_type,
                    label=label,
                    emoji=emoji,
                    roster_sheet_id=values.get(sheet_id_key(animal_type), "") or "",
                    folder_id=values.get(folder_id_key(animal_type), "") or "",
                )
            )
        configured = [i.key for i in infos if i.roster_sheet_id or i.folder_id]
        logger.info("Animal types with sheets configured: %s", ", ".join(configured) or "none")
        return cls(infos)

    def resolve(self, name: str | AnimalType) -> AnimalTypeInfo:
        """Look up a type by enum, key or display label."""
        if isinstance(name, AnimalType):
            return self._infos[name]
        animal_type = self._by_name.get((name or "").strip())
        if animal_type is None:
            raise UnknownAnimalTypeError(f"Unknown animal type: {name!r}")
        return self._infos[animal_type]

    def label_for(self, name: str) -> str:
        return self.resolve(name).label

    def all(self) -> list[AnimalTypeInfo]:
        return list(self._infos.values())

    def with_folders(self) -> list[AnimalTypeInfo]:
        return [i for i in self._infos.values() if i.folder_id]

    def with_rosters(self) -> list[AnimalTypeInfo]:
        return [i for i in self._infos.values() if i.roster_sheet_id]
