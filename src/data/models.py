"""
Farm Care Tracker: data models.

Everything persistent lives in Google Sheets. These dataclasses are the typed
view of a sheet row once it has passed through a codec; raw cell values never
travel past src.core.treatment_codec or src.core.animal_directory.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class SlotState(Enum):
    """Tri-state checkbox cell. The value is what gets written to the sheet."""

    DONE = "TRUE"
    PENDING = "FALSE"
    NOT_APPLICABLE = ""

    @property
    def is_applicable(self) -> bool:
        return self is not SlotState.NOT_APPLICABLE


class TimeSlot(Enum):
    MORNING = "morning"
    NOON = "noon"
    EVENING = "evening"
    GENERAL = "general"   # rows with no slot checkbox at all


# Slots that own a checkbox column, in sheet order
CHECKBOX_SLOTS = (TimeSlot.MORNING, TimeSlot.NOON, TimeSlot.EVENING)


class AnimalType(Enum):
    HORSE = "horse"
    DONKEY = "donkey"
    COW = "cow"
    DOG = "dog"
    CAT = "cat"
    GOAT = "goat"
    SHEEP = "sheep"
    RABBIT = "rabbit"
    CHICKEN = "chicken"
    PIG = "pig"


@dataclass
class AnimalTypeInfo:
    """Static description of a species plus the sheet IDs configured for it."""

    type: AnimalType
    label: str                  # display label, e.g. "חמור"
    emoji: str
    roster_sheet_id: str = ""   # master animals sheet for the species
    folder_id: str = ""         # Drive folder holding per-animal sheets

    @property
    def key(self) -> str:
        return self.type.value


@dataclass
class Animal:
    """One row of a species roster."""

    name: str
    chip_id: str = ""
    secondary_chip_id: str = ""
    sex: str = ""
    description: str = ""
    weight: str = ""
    arrival_date: str = ""
    birth_date: str = ""
    location: str = ""
    special_trimming: str = ""
    notes: str = ""
    drugs: str = ""
    castration_date: str = ""
    deworming_date: str = ""
    source: str = ""
    status: str = ""
    friends: str = ""
    assigned_caregivers: str = ""   # comma-separated caregiver names

    def caregiver_names(self) -> list[str]:
        return [n.strip() for n in self.assigned_caregivers.split(",") if n.strip()]

    def is_assigned_to(self, caregiver: str) -> bool:
        return caregiver.strip() in self.caregiver_names()


@dataclass
class TreatmentRecord:
    """One row of an animal's treatment sheet (fixed column order A..L)."""

    date: str                                   # DD/MM/YYYY
    weekday: str = ""                           # derived display value
    morning: SlotState = SlotState.NOT_APPLICABLE
    noon: SlotState = SlotState.NOT_APPLICABLE
    evening: SlotState = SlotState.NOT_APPLICABLE
    medication: str = ""
    dosage: str = ""
    body_part: str = ""                         # administration route
    duration: str = ""                          # 1-based occurrence within a course
    location: str = ""
    medical_case: str = ""
    notes: str = ""
    row_index: int | None = None                # 0-based sheet index, header is 0

    def slot(self, slot: TimeSlot) -> SlotState:
        if slot is TimeSlot.MORNING:
            return self.morning
        if slot is TimeSlot.NOON:
            return self.noon
        if slot is TimeSlot.EVENING:
            return self.evening
        raise ValueError(f"{slot.value!r} has no checkbox column")

    @property
    def is_schedulable(self) -> bool:
        """False for no-op rows where none of the three slots applies."""
        return any(self.slot(s).is_applicable for s in CHECKBOX_SLOTS)

    @property
    def row_number(self) -> int | None:
        """1-based row number as shown in the spreadsheet UI."""
        return None if self.row_index is None else self.row_index + 1


@dataclass
class TreatmentProtocol:
    """A reusable treatment template from the shared protocols sheet."""

    animal_type_label: str
    medical_case: str
    medication: str = ""
    days: int = 1
    frequency: int = 1
    morning: bool = False
    noon: bool = False
    evening: bool = False
    dosage: str = ""
    body_part: str = ""

    @property
    def has_slots(self) -> bool:
        return self.morning or self.noon or self.evening


@dataclass
class ScheduleEntry:
    """One line on the schedule board: an animal, a day and a time slot."""

    id: str
    animal_name: str
    animal_type: str            # display label
    animal_type_key: str
    medical_case: str
    medication: str
    treatment_type: str
    time: str
    time_slot: TimeSlot
    caregiver: str
    emoji: str
    is_completed: bool
    treatment_date: str         # ISO YYYY-MM-DD
    date_label: str             # "yesterday" | "today" | "tomorrow"
    row_number: int | None = None


@dataclass
class DateRange:
    """Inclusive range of date keys (YYYYMMDD integers)."""

    start: int
    end: int

    def __contains__(self, key: int) -> bool:
        return self.start <= key <= self.end


@dataclass
class WriteResult:
    rows_written: int = 0
    rows_deleted: int = 0


@dataclass
class CompletionResult:
    rows_updated: int
    row_numbers: list[int] = field(default_factory=list)


@dataclass
class AddAnimalResult:
    """Composite outcome of the two-phase add-animal operation.

    The roster append is the primary phase; provisioning the animal's
    treatment sheet is secondary and may fail on its own.
    """

    animal: Animal
    primary_ok: bool
    secondary_ok: bool
    treatment_sheet_id: str | None = None
    secondary_error: str | None = None
