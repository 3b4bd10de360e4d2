"""
Farm Care Tracker: animal directory.

Reads and edits the per-species roster sheets. Columns are located by header
label, never by position, because the rosters are edited by hand.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Mapping
from dataclasses import fields
from typing import TYPE_CHECKING, Any

from src.core.animal_types import folder_id_key, sheet_id_key
from src.core.errors import ConfigurationError, NotFoundError, SheetLayoutError
from src.core.naming import treatment_sheet_name
from src.core.runtime_config import TREATMENT_TEMPLATE_SHEET_ID
from src.data.columns import ANIMAL_FIELD_ALIASES, ANIMAL_FIELD_TO_HEADER, header_index
from src.data.models import AddAnimalResult, Animal, AnimalType, AnimalTypeInfo
from src.ports.tabular_port import CellUpdate, StoreError

if TYPE_CHECKING:
    from src.core.runtime_config import RuntimeConfig
    from src.ports.locator_port import DocumentLocator
    from src.ports.tabular_port import TabularStore

logger = logging.getLogger(__name__)

_ANIMAL_FIELDS = tuple(f.name for f in fields(Animal))
_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def _cell_text(value: Any) -> str:
    if value is None:
        return ""
    return str(value).strip()


def decode_animal(header: list[str], values: list[Any]) -> Animal:
    """Build an Animal from a roster row using the header labels."""
    data: dict[str, str] = {}
    for field_name in _ANIMAL_FIELDS:
        idx = header_index(header, ANIMAL_FIELD_TO_HEADER[field_name])
        data[field_name] = _cell_text(values[idx]) if 0 <= idx < len(values) else ""
    return Animal(**data)


def encode_animal(header: list[str], animal: Animal) -> list[str]:
    """Lay an Animal out in the roster's column order. Unknown headers stay blank."""
    by_header = {
        label: getattr(animal, field_name)
        for field_name, label in ANIMAL_FIELD_TO_HEADER.items()
    }
    return [by_header.get(str(h).strip(), "") if h else "" for h in header]


def field_for_key(key: str) -> str | None:
    """Map a patch key to an Animal field name.

    Accepts snake_case ("birth_date"), camelCase ("birthDate") and the short
    names older clients send ("id", "id2", "in_treatment").
    """
    if key in ANIMAL_FIELD_TO_HEADER:
        return key
    if key in ANIMAL_FIELD_ALIASES:
        return ANIMAL_FIELD_ALIASES[key]
    snake = _CAMEL_BOUNDARY.sub("_", key).lower()
    if snake in ANIMAL_FIELD_TO_HEADER:
        return snake
    return ANIMAL_FIELD_ALIASES.get(snake)


class AnimalDirectory:
    """Roster queries and edits for every configured species."""

    def __init__(
        self,
        store: TabularStore,
        locator: DocumentLocator,
        config: RuntimeConfig,
    ) -> None:
        self._store = store
        self._locator = locator
        self._config = config

    def _roster(self, animal_type: str | AnimalType) -> tuple[AnimalTypeInfo, str]:
        info = self._config.registry.resolve(animal_type)
        if not info.roster_sheet_id:
            raise ConfigurationError(
                f"No roster sheet configured for {info.key}",
                hint=f"Set {sheet_id_key(info.type)} in the configuration sheet.",
            )
        return info, info.roster_sheet_id

    async def list_animals(self, animal_type: str | AnimalType) -> list[Animal]:
        info, sheet_id = self._roster(animal_type)
        snapshot = await self._store.read_sheet(sheet_id)
        animals = [decode_animal(snapshot.header, row.values) for row in snapshot.rows]
        logger.info("Loaded %d %s animal(s) from roster", len(animals), info.key)
        return animals

    async def find_animal(self, animal_type: str | AnimalType, key: str) -> Animal | None:
        """First animal whose name, chip id or secondary chip id equals key."""
        target = (key or "").strip()
        if not target:
            return None
        for animal in await self.list_animals(animal_type):
            if target in (animal.name, animal.chip_id, animal.secondary_chip_id):
                return animal
        return None

    async def append_animal(self, animal_type: str | AnimalType, animal: Animal) -> None:
        """Append one row to the roster. Sort order is not maintained."""
        info, sheet_id = self._roster(animal_type)
        snapshot = await self._store.read_sheet(sheet_id)
        if header_index(snapshot.header, ANIMAL_FIELD_TO_HEADER["name"]) == -1:
            raise SheetLayoutError(
                f"Roster sheet {sheet_id} has no '{ANIMAL_FIELD_TO_HEADER['name']}' header"
            )
        await self._store.append_row(sheet_id, encode_animal(snapshot.header, animal))
        logger.info("Appended %s '%s' to roster", info.key, animal.name)

    async def update_animal_fields(
        self,
        animal_type: str | AnimalType,
        name: str,
        patch: Mapping[str, Any],
    ) -> list[str]:
        """Rewrite named columns of the first row whose trimmed name matches.

        Returns:
            The Animal field names that were written.

        Raises:
            NotFoundError: If no roster row carries the name.
        """
        info, sheet_id = self._roster(animal_type)
        snapshot = await self._store.read_sheet(sheet_id)
        name_col = header_index(snapshot.header, ANIMAL_FIELD_TO_HEADER["name"])
        if name_col == -1:
            raise SheetLayoutError(
                f"Roster sheet {sheet_id} has no '{ANIMAL_FIELD_TO_HEADER['name']}' header"
            )

        target = (name or "").strip()
        row = next(
            (r for r in snapshot.rows if _cell_text(r.cell(name_col)) == target),
            None,
        )
        if row is None:
            raise NotFoundError(
                f"Animal '{target}' not found in {info.key} roster",
                animalName=target,
                animalType=info.key,
            )

        updates: list[CellUpdate] = []
        written: list[str] = []
        for key, value in patch.items():
            field_name = field_for_key(key)
            if field_name is None:
                logger.warning("No header mapping for key '%s' in roster %s", key, sheet_id)
                continue
            label = ANIMAL_FIELD_TO_HEADER[field_name]
            column = header_index(snapshot.header, label)
            if column == -1:
                logger.warning(
                    "Header '%s' (for key '%s') not found in roster %s", label, key, sheet_id
                )
                continue
            updates.append(CellUpdate(row.index, column, "" if value is None else value))
            written.append(field_name)

        if updates:
            await self._store.update_cells(sheet_id, updates)
        logger.info(
            "Updated %d field(s) of %s '%s' (row %d)",
            len(updates), info.key, target, row.index + 1,
        )
        return written

    async def add_animal(self, animal_type: str | AnimalType, animal: Animal) -> AddAnimalResult:
        """Append to the roster, then provision the animal's treatment sheet.

        A roster failure propagates. A provisioning failure is reported in
        the result instead, since the roster row already exists.
        """
        if not animal.name.strip():
            raise ValueError("Animal name is required")

        info = self._config.registry.resolve(animal_type)
        await self.append_animal(info.type, animal)
        result = AddAnimalResult(animal=animal, primary_ok=True, secondary_ok=False)

        try:
            template_id = self._config.require(TREATMENT_TEMPLATE_SHEET_ID)
            if not info.folder_id:
                raise ConfigurationError(
                    f"No treatment folder configured for {info.key}",
                    hint=f"Set {folder_id_key(info.type)} in the configuration sheet.",
                )
            sheet_name = treatment_sheet_name(animal.name, animal.chip_id)
            result.treatment_sheet_id = await self._locator.copy_document(
                template_id, info.folder_id, sheet_name
            )
            result.secondary_ok = True
            logger.info("Provisioned treatment sheet '%s' for %s", sheet_name, info.key)
        except (ConfigurationError, StoreError) as exc:
            logger.error("Treatment sheet provisioning failed for '%s': %s", animal.name, exc)
            result.secondary_error = str(exc)
        return result

