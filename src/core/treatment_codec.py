"""
Farm Care Tracker: treatment row codec.

Maps between a raw treatment-sheet row and a TreatmentRecord. Checkbox cells
arrive as native booleans or as "TRUE"/"FALSE"/"" depending on how the sheet
was read; they are normalized here into SlotState and nowhere else.
"""

from __future__ import annotations

import logging
from typing import Any

from src.data.columns import TREATMENT_COLUMN_COUNT
from src.data.models import SlotState, TreatmentRecord

logger = logging.getLogger(__name__)


def normalize_checkbox(value: Any) -> SlotState:
    """Map a raw checkbox cell to its tri-state meaning.

    True/"TRUE" -> DONE, False/"FALSE" -> PENDING, blank -> NOT_APPLICABLE.
    Free text in a checkbox column is not a checkbox, so it counts as blank.
    """
    if isinstance(value, SlotState):
        return value
    if value is True:
        return SlotState.DONE
    if value is False:
        return SlotState.PENDING
    if value is None:
        return SlotState.NOT_APPLICABLE

    text = str(value).strip().upper()
    if text == "TRUE":
        return SlotState.DONE
    if text == "FALSE":
        return SlotState.PENDING
    if text:
        logger.debug("Non-checkbox value %r in a slot column treated as blank", value)
    return SlotState.NOT_APPLICABLE


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def decode_row(values: list[Any], row_index: int | None = None) -> TreatmentRecord:
    """Decode one raw row (columns A..L). Missing trailing cells are blank."""
    cells = list(values) + [""] * (TREATMENT_COLUMN_COUNT - len(values))
    return TreatmentRecord(
        date=_text(cells[0]).strip(),
        weekday=_text(cells[1]),
        morning=normalize_checkbox(cells[2]),
        noon=normalize_checkbox(cells[3]),
        evening=normalize_checkbox(cells[4]),
        medication=_text(cells[5]),
        dosage=_text(cells[6]),
        body_part=_text(cells[7]),
        duration=_text(cells[8]),
        location=_text(cells[9]),
        medical_case=_text(cells[10]),
        notes=_text(cells[11]),
        row_index=row_index,
    )


def encode_row(record: TreatmentRecord) -> list[str]:
    """Encode a record in the fixed column order. Slot values pass through as-is."""
    return [
        record.date,
        record.weekday,
        record.morning.value,
        record.noon.value,
        record.evening.value,
        record.medication,
        record.dosage,
        record.body_part,
        record.duration,
        record.location,
        record.medical_case,
        record.notes,
    ]
