"""Request and response schemas for the HTTP API.

The web client speaks camelCase; treatment rows keep the short keys it has
always sent ("treatment", "case", "body part"), accepted as alternatives.
"""

from __future__ import annotations

from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from src.core.dates import normalize_date_text
from src.core.treatment_codec import normalize_checkbox
from src.data.models import (
    Animal,
    AnimalTypeInfo,
    ScheduleEntry,
    TreatmentProtocol,
    TreatmentRecord,
)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Animals
# ---------------------------------------------------------------------------


class AnimalOut(CamelModel):
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
    assigned_caregivers: str = ""

    @classmethod
    def from_animal(cls, animal: Animal) -> AnimalOut:
        return cls(**vars(animal))


class CaregiverAnimalOut(AnimalOut):
    animal_type: str


class AnimalIn(CamelModel):
    """Body of POST /animals: the animal type plus roster fields."""

    animal_type: str
    name: str
    chip_id: str = Field("", validation_alias=AliasChoices("chipId", "chip_id", "id"))
    secondary_chip_id: str = Field(
        "", validation_alias=AliasChoices("secondaryChipId", "secondary_chip_id", "id2")
    )
    sex: str = ""
    description: str = ""
    weight: str = ""
    arrival_date: str = ""
    birth_date: str = ""
    location: str = ""
    special_trimming: str = ""
    notes: str = ""
    drugs: str = ""
    castration_date: str = Field(
        "", validation_alias=AliasChoices("castrationDate", "castration_date", "castration")
    )
    deworming_date: str = Field(
        "", validation_alias=AliasChoices("dewormingDate", "deworming_date", "deworming")
    )
    source: str = ""
    status: str = ""
    friends: str = ""
    assigned_caregivers: str = Field(
        "",
        validation_alias=AliasChoices("assignedCaregivers", "assigned_caregivers", "in_treatment"),
    )

    def to_animal(self) -> Animal:
        data = self.model_dump(exclude={"animal_type"})
        return Animal(**{k: str(v or "").strip() for k, v in data.items()})


class AnimalUpdateIn(CamelModel):
    animal_type: str
    updated_animal: dict[str, Any]


class AddAnimalOut(CamelModel):
    success: bool
    animal: AnimalOut
    treatment_sheet_id: str | None = None
    treatment_sheet_error: str | None = None


# ---------------------------------------------------------------------------
# Treatments
# ---------------------------------------------------------------------------


class TreatmentRecordIO(CamelModel):
    """One treatment row as exchanged with the client."""

    date: str
    day: str = Field("", validation_alias=AliasChoices("day", "weekday"))
    morning: str = ""
    noon: str = ""
    evening: str = ""
    treatment: str = Field("", validation_alias=AliasChoices("treatment", "medication"))
    dosage: str = ""
    body_part: str = Field(
        "",
        serialization_alias="bodyPart",
        validation_alias=AliasChoices("body part", "bodyPart", "body_part", "administration"),
    )
    duration: str = ""
    location: str = ""
    case: str = Field(
        "", validation_alias=AliasChoices("case", "medicalCase", "medical_case")
    )
    notes: str = ""

    @field_validator("date", mode="before")
    @classmethod
    def normalize_date(cls, v: Any) -> str:
        return normalize_date_text(v)

    @field_validator("morning", "noon", "evening", mode="before")
    @classmethod
    def normalize_slot(cls, v: Any) -> str:
        return normalize_checkbox(v).value

    @field_validator("day", "treatment", "dosage", "duration", "location", "case", "notes",
                     "body_part", mode="before")
    @classmethod
    def stringify(cls, v: Any) -> str:
        return "" if v is None else str(v)

    @classmethod
    def from_record(cls, record: TreatmentRecord) -> TreatmentRecordIO:
        return cls(
            date=record.date,
            day=record.weekday,
            morning=record.morning.value,
            noon=record.noon.value,
            evening=record.evening.value,
            treatment=record.medication,
            dosage=record.dosage,
            body_part=record.body_part,
            duration=record.duration,
            location=record.location,
            case=record.medical_case,
            notes=record.notes,
        )

    def to_record(self) -> TreatmentRecord:
        return TreatmentRecord(
            date=self.date,
            weekday=self.day,
            morning=normalize_checkbox(self.morning),
            noon=normalize_checkbox(self.noon),
            evening=normalize_checkbox(self.evening),
            medication=self.treatment,
            dosage=self.dosage,
            body_part=self.body_part,
            duration=self.duration,
            location=self.location,
            medical_case=self.case,
            notes=self.notes,
        )


class ProfileOut(BaseModel):
    animal: AnimalOut
    treatments: list[TreatmentRecordIO]


class ProtocolIO(CamelModel):
    type: str = Field("", validation_alias=AliasChoices("type", "animalTypeLabel"))
    case: str = Field("", validation_alias=AliasChoices("case", "medicalCase", "medical_case"))
    medication: str = ""
    days: int = 1
    frequency: int = 1
    morning: bool = False
    noon: bool = False
    evening: bool = False
    dosage: str = ""
    body_part: str = Field(
        "",
        serialization_alias="bodyPart",
        validation_alias=AliasChoices("bodyPart", "body_part", "body part"),
    )

    @field_validator("days", "frequency", mode="before")
    @classmethod
    def at_least_one(cls, v: Any) -> int:
        try:
            number = int(v)
        except (TypeError, ValueError):
            return 1
        return number if number >= 1 else 1

    @classmethod
    def from_protocol(cls, protocol: TreatmentProtocol) -> ProtocolIO:
        return cls(
            type=protocol.animal_type_label,
            case=protocol.medical_case,
            medication=protocol.medication,
            days=protocol.days,
            frequency=protocol.frequency,
            morning=protocol.morning,
            noon=protocol.noon,
            evening=protocol.evening,
            dosage=protocol.dosage,
            body_part=protocol.body_part,
        )

    def to_protocol(self, default_label: str, default_case: str) -> TreatmentProtocol:
        return TreatmentProtocol(
            animal_type_label=self.type or default_label,
            medical_case=self.case or default_case,
            medication=self.medication,
            days=self.days,
            frequency=self.frequency,
            morning=self.morning,
            noon=self.noon,
            evening=self.evening,
            dosage=self.dosage,
            body_part=self.body_part,
        )


class TypeRosterOut(BaseModel):
    animals: list[AnimalOut]
    protocols: list[ProtocolIO]


class AnimalTypeOut(CamelModel):
    id: str
    display_name: str
    emoji: str

    @classmethod
    def from_info(cls, info: AnimalTypeInfo) -> AnimalTypeOut:
        return cls(id=info.key, display_name=info.label, emoji=info.emoji)


class BulkIn(BaseModel):
    treatments: list[TreatmentRecordIO]


class ScheduleIn(CamelModel):
    animal_type: str
    animal_name: str
    start_date: str
    medical_case: str
    notes: str = ""
    replace: bool = False
    protocols: list[ProtocolIO] | None = None


class WriteOut(CamelModel):
    success: bool = True
    rows_written: int
    rows_deleted: int


class ScheduleEntryOut(CamelModel):
    id: str
    animal_name: str
    animal_type: str
    animal_type_key: str
    medical_case: str
    medication: str
    treatment_type: str
    time: str
    time_slot: str
    caregiver: str
    emoji: str
    is_completed: bool
    treatment_date: str
    date_label: str
    row_number: int | None = None

    @classmethod
    def from_entry(cls, entry: ScheduleEntry) -> ScheduleEntryOut:
        data = vars(entry).copy()
        data["time_slot"] = entry.time_slot.value
        return cls(**data)


class TodayOut(CamelModel):
    success: bool = True
    treatments: list[ScheduleEntryOut]
    timestamp: str
    errors: list[str] = Field(default_factory=list)


class CompleteIn(CamelModel):
    animal_name: str
    animal_type: str
    medical_case: str = ""
    time_slot: str
    is_completed: bool


class CompleteOut(CamelModel):
    success: bool = True
    message: str
    rows_updated: int
    row_numbers: list[int]


class CaregiverNameOut(CamelModel):
    caregiver_name: str
