"""Tests for src.data.models."""

from dataclasses import asdict

import pytest

from src.data.models import (
    Animal,
    DateRange,
    SlotState,
    TimeSlot,
    TreatmentProtocol,
    TreatmentRecord,
)


def test_animal_defaults():
    animal = Animal(name="Max")
    assert animal.chip_id == ""
    assert animal.assigned_caregivers == ""
    assert animal.caregiver_names() == []


def test_animal_caregiver_assignment():
    animal = Animal(name="Max", assigned_caregivers="Dana, Yossi ,")
    assert animal.caregiver_names() == ["Dana", "Yossi"]
    assert animal.is_assigned_to(" Yossi")
    assert not animal.is_assigned_to("Dan")


def test_slot_state_applicability():
    assert SlotState.DONE.is_applicable
    assert SlotState.PENDING.is_applicable
    assert not SlotState.NOT_APPLICABLE.is_applicable


def test_record_slot_lookup():
    record = TreatmentRecord(date="10/03/2025", noon=SlotState.DONE)
    assert record.slot(TimeSlot.NOON) is SlotState.DONE
    assert record.slot(TimeSlot.EVENING) is SlotState.NOT_APPLICABLE
    with pytest.raises(ValueError):
        record.slot(TimeSlot.GENERAL)


def test_record_schedulable():
    assert not TreatmentRecord(date="10/03/2025").is_schedulable
    assert TreatmentRecord(date="10/03/2025", evening=SlotState.PENDING).is_schedulable


def test_record_row_number():
    assert TreatmentRecord(date="10/03/2025").row_number is None
    assert TreatmentRecord(date="10/03/2025", row_index=1).row_number == 2


def test_protocol_has_slots():
    protocol = TreatmentProtocol(animal_type_label="חמור", medical_case="Colic")
    assert protocol.has_slots is False
    assert TreatmentProtocol(animal_type_label="חמור", medical_case="Colic", noon=True).has_slots


def test_date_range_is_inclusive():
    span = DateRange(20250310, 20250312)
    assert 20250310 in span
    assert 20250312 in span
    assert 20250313 not in span


def test_record_serializable():
    data = asdict(TreatmentRecord(date="10/03/2025", medication="Bute"))
    assert data["medication"] == "Bute"
    assert data["morning"] is SlotState.NOT_APPLICABLE
