"""
Farm Care Tracker: treatment aggregation.

Read-side queries over the per-animal treatment sheets:

- the profile window of one animal,
- the facility-wide schedule board for yesterday, today and tomorrow,
- the caregiver dashboard ("which of my animals have something today"),

plus the one write the board needs, toggling a slot's completion checkbox.
Dates are compared by integer key only (see src.core.dates).
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import TYPE_CHECKING
from zoneinfo import ZoneInfo

from src.core.animal_types import folder_id_key
from src.core.dates import date_key, key_of, window_keys
from src.core.errors import ConfigurationError, NotFoundError
from src.core.naming import animal_name_from_document
from src.core.treatment_codec import decode_row
from src.data.columns import EVENING_COLUMN, MORNING_COLUMN, NOON_COLUMN
from src.data.models import (
    CHECKBOX_SLOTS,
    Animal,
    AnimalType,
    AnimalTypeInfo,
    CompletionResult,
    ScheduleEntry,
    SlotState,
    TimeSlot,
    TreatmentRecord,
)
from src.ports.tabular_port import CellUpdate

if TYPE_CHECKING:
    from src.config import Settings
    from src.core.animal_directory import AnimalDirectory
    from src.core.runtime_config import RuntimeConfig
    from src.ports.locator_port import DocumentLocator, DocumentRef
    from src.ports.tabular_port import TabularStore

logger = logging.getLogger(__name__)

DEFAULT_MEDICAL_CASE = "ללא תיאור"
CAREGIVER_PLACEHOLDER = "נקבע לפי זמינות"

SLOT_LABELS = {
    TimeSlot.MORNING: "טיפול בוקר",
    TimeSlot.NOON: "טיפול צהריים",
    TimeSlot.EVENING: "טיפול ערב",
    TimeSlot.GENERAL: "טיפול כללי",
}

SLOT_TIMES = {
    TimeSlot.MORNING: "08:00",
    TimeSlot.NOON: "14:00",
    TimeSlot.EVENING: "19:00",
    TimeSlot.GENERAL: "12:00",
}

SLOT_COLUMNS = {
    TimeSlot.MORNING: MORNING_COLUMN,
    TimeSlot.NOON: NOON_COLUMN,
    TimeSlot.EVENING: EVENING_COLUMN,
}

# (label, offset from today) in board order
DAY_OFFSETS = (("yesterday", -1), ("today", 0), ("tomorrow", 1))


@dataclass
class SlotHit:
    """One due (or done) slot of one record on a given day."""

    slot: TimeSlot
    is_completed: bool
    record: TreatmentRecord


@dataclass
class FacilitySchedule:
    entries: list[ScheduleEntry] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)


def slots_on(records: list[TreatmentRecord], day_key: int) -> list[SlotHit]:
    """Board entries for the records dated on day_key.

    PENDING slots are due, DONE slots are listed as completed so they can be
    toggled back. A row with no applicable slot yields one general entry.
    """
    hits: list[SlotHit] = []
    for record in records:
        if date_key(record.date) != day_key:
            continue
        if not record.is_schedulable:
            hits.append(SlotHit(TimeSlot.GENERAL, False, record))
            continue
        for slot in CHECKBOX_SLOTS:
            state = record.slot(slot)
            if state is SlotState.PENDING:
                hits.append(SlotHit(slot, False, record))
            elif state is SlotState.DONE:
                hits.append(SlotHit(slot, True, record))
    return hits


def has_treatment_on(records: list[TreatmentRecord], day_key: int) -> bool:
    """Presence check: any row dated on the day, whatever its slot states."""
    return any(date_key(r.date) == day_key for r in records)


def parse_time_slot(value: str | TimeSlot) -> TimeSlot:
    """Resolve a checkbox slot name. "general" has no checkbox and is rejected."""
    try:
        slot = value if isinstance(value, TimeSlot) else TimeSlot((value or "").strip().lower())
    except ValueError:
        raise ValueError(f"Invalid time slot: {value!r}") from None
    if slot is TimeSlot.GENERAL:
        raise ValueError("General treatments have no checkbox to toggle")
    return slot


def _case_matches(record: TreatmentRecord, medical_case: str) -> bool:
    target = (medical_case or "").strip()
    if not target:
        return True
    row_case = record.medical_case.strip()
    # Board entries show the placeholder for rows without a case
    if target == DEFAULT_MEDICAL_CASE and not row_case:
        return True
    return row_case == target


class TreatmentAggregator:
    """Queries across treatment sheets, located through the document locator."""

    def __init__(
        self,
        store: TabularStore,
        locator: DocumentLocator,
        config: RuntimeConfig,
        settings: Settings,
        directory: AnimalDirectory,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self._store = store
        self._locator = locator
        self._config = config
        self._settings = settings
        self._directory = directory
        self._sleep = sleep

    # ------------------------------------------------------------------
    # Sheet lookup
    # ------------------------------------------------------------------

    def _folder(self, animal_type: str | AnimalType) -> AnimalTypeInfo:
        info = self._config.registry.resolve(animal_type)
        if not info.folder_id:
            raise ConfigurationError(
                f"No treatment folder configured for {info.key}",
                hint=f"Set {folder_id_key(info.type)} in the configuration sheet.",
            )
        return info

    async def find_treatment_sheet(
        self, animal_type: str | AnimalType, *keys: str, exact: bool = False
    ) -> str | None:
        """Try each key (name, chip id, ...) in order against the type's folder.

        With ``exact`` a sheet is only accepted when it is named for the key,
        so writes never land on a sheet that merely contains it.
        """
        info = self._folder(animal_type)
        for key in keys:
            key = (key or "").strip()
            if not key:
                continue
            document_id = await self._locator.find_document(info.folder_id, key, exact=exact)
            if document_id:
                return document_id
        logger.info("No treatment sheet for %s matching %s", info.key, [k for k in keys if k])
        return None

    async def read_records(self, document_id: str) -> list[TreatmentRecord]:
        snapshot = await self._store.read_sheet(document_id)
        return [decode_row(row.values, row.index) for row in snapshot.rows]

    # ------------------------------------------------------------------
    # Profile
    # ------------------------------------------------------------------

    async def profile_treatments(
        self, animal_type: str | AnimalType, animal: Animal, today: date
    ) -> list[TreatmentRecord]:
        """Records within +/- PROFILE_WINDOW_DAYS of today, all slots intact.

        An animal without a treatment sheet yet has an empty history.
        """
        document_id = await self.find_treatment_sheet(animal_type, animal.name, animal.chip_id)
        if document_id is None:
            logger.warning("Animal '%s' has no treatment sheet", animal.name)
            return []

        low, high = window_keys(today, self._settings.PROFILE_WINDOW_DAYS)
        records = [
            r for r in await self.read_records(document_id)
            if low <= date_key(r.date) <= high
        ]
        logger.info(
            "Profile window for '%s': %d record(s) between %d and %d",
            animal.name, len(records), low, high,
        )
        return records

    # ------------------------------------------------------------------
    # Schedule board
    # ------------------------------------------------------------------

    def _modified_since(self) -> datetime:
        now = datetime.now(ZoneInfo(self._settings.TIMEZONE))
        return now - timedelta(days=self._settings.RECENT_LOOKBACK_DAYS)

    async def entries_for_day(
        self,
        info: AnimalTypeInfo,
        day: date,
        label: str,
        documents: list[DocumentRef] | None = None,
        cache: dict[str, list[TreatmentRecord]] | None = None,
    ) -> list[ScheduleEntry]:
        """Board entries for one species on one day.

        Only sheets modified within RECENT_LOOKBACK_DAYS are scanned.
        """
        if documents is None:
            documents = await self._locator.list_recent(info.folder_id, self._modified_since())
        cache = {} if cache is None else cache

        day_key = key_of(day)
        entries: list[ScheduleEntry] = []
        for document in documents:
            if document.id not in cache:
                cache[document.id] = await self.read_records(document.id)
            hits = slots_on(cache[document.id], day_key)
            if not hits:
                continue

            animal_name = animal_name_from_document(document.name)
            for hit in hits:
                entries.append(
                    ScheduleEntry(
                        id=f"{info.key}_{document.id}_{hit.record.row_number}_{hit.slot.value}_{label}",
                        animal_name=animal_name,
                        animal_type=info.label,
                        animal_type_key=info.key,
                        medical_case=hit.record.medical_case.strip() or DEFAULT_MEDICAL_CASE,
                        medication=hit.record.medication,
                        treatment_type=SLOT_LABELS[hit.slot],
                        time=SLOT_TIMES[hit.slot],
                        time_slot=hit.slot,
                        caregiver=CAREGIVER_PLACEHOLDER,
                        emoji=info.emoji,
                        is_completed=hit.is_completed,
                        treatment_date=day.isoformat(),
                        date_label=label,
                        row_number=hit.record.row_number,
                    )
                )
        logger.info("Received %d entries for %s on %s", len(entries), info.key, label)
        return entries

    async def facility_schedule(self, today: date) -> FacilitySchedule:
        """Yesterday, today and tomorrow for every species with a folder.

        Each species/day pair is one batch. A failing batch is logged and
        reported in ``errors``; the others still return.
        """
        result = FacilitySchedule()
        for info in self._config.registry.all():
            if not info.folder_id:
                logger.info("Skipping %s: no folder ID configured", info.key)
                continue

            documents: list[DocumentRef] | None = None
            cache: dict[str, list[TreatmentRecord]] = {}
            for label, offset in DAY_OFFSETS:
                day = today + timedelta(days=offset)
                try:
                    if documents is None:
                        documents = await self._locator.list_recent(
                            info.folder_id, self._modified_since()
                        )
                    result.entries.extend(
                        await self.entries_for_day(info, day, label, documents, cache)
                    )
                except Exception as exc:
                    logger.error("Error fetching treatments for %s on %s: %s", info.key, label, exc)
                    result.errors.append(f"{info.key}/{label}: {exc}")
                await self._sleep(self._settings.SCAN_DELAY_SECONDS)

        logger.info(
            "Found %d treatment entries for yesterday, today and tomorrow (%d failed batch(es))",
            len(result.entries), len(result.errors),
        )
        return result

    # ------------------------------------------------------------------
    # Completion toggle
    # ------------------------------------------------------------------

    async def set_completion(
        self,
        animal_name: str,
        animal_type: str | AnimalType,
        medical_case: str,
        time_slot: str | TimeSlot,
        is_completed: bool,
        today: date,
    ) -> CompletionResult:
        """Set one slot on every row of today matching the case.

        Only rows that carry a checkbox in the slot are touched. Duplicate
        protocol rows for the same case and day are all updated.

        Raises:
            ValueError: If the slot is unknown or "general".
            NotFoundError: If the sheet or a matching checkbox row is missing.
        """
        slot = parse_time_slot(time_slot)
        info = self._config.registry.resolve(animal_type)
        document_id = await self.find_treatment_sheet(info.type, animal_name, exact=True)
        if document_id is None:
            raise NotFoundError(
                f"Could not find treatment sheet for animal: {animal_name}",
                animalName=animal_name,
                animalType=info.key,
            )

        today_key = key_of(today)
        matches = [
            r
            for r in await self.read_records(document_id)
            if date_key(r.date) == today_key
            and _case_matches(r, medical_case)
            and r.slot(slot).is_applicable
        ]
        if not matches:
            logger.warning(
                "No row with a %s checkbox for today, case '%s', animal '%s'",
                slot.value, medical_case, animal_name,
            )
            raise NotFoundError(
                f"No treatment row found with a checkbox in the {slot.value} column "
                f"for case: {medical_case or 'unspecified'}",
                animalName=animal_name,
                animalType=info.key,
            )

        state = SlotState.DONE if is_completed else SlotState.PENDING
        await self._store.update_cells(
            document_id,
            [CellUpdate(r.row_index, SLOT_COLUMNS[slot], state.value) for r in matches],
        )
        row_numbers = [r.row_number for r in matches]
        logger.info(
            "Marked %s %s for '%s' in row(s) %s",
            slot.value, state.value, animal_name, row_numbers,
        )
        return CompletionResult(rows_updated=len(matches), row_numbers=row_numbers)

    # ------------------------------------------------------------------
    # Caregiver dashboard
    # ------------------------------------------------------------------

    async def animals_with_treatment_today(
        self, caregiver: str, today: date
    ) -> list[tuple[AnimalTypeInfo, Animal]]:
        """Animals assigned to the caregiver with any row dated today."""
        today_key = key_of(today)
        found: list[tuple[AnimalTypeInfo, Animal]] = []
        for info in self._config.registry.with_rosters():
            assigned = [
                a for a in await self._directory.list_animals(info.type)
                if a.is_assigned_to(caregiver)
            ]
            for animal in assigned:
                if not info.folder_id:
                    logger.warning("No folder for %s, cannot check '%s'", info.key, animal.name)
                    continue
                document_id = await self.find_treatment_sheet(
                    info.type, animal.chip_id, animal.name
                )
                if document_id is None:
                    continue
                if has_treatment_on(await self.read_records(document_id), today_key):
                    found.append((info, animal))
                    logger.info("Animal '%s' has treatment today", animal.name)
            logger.info(
                "%d animal(s) with treatment today for %s after %s",
                len(found), caregiver, info.key,
            )
        return found
