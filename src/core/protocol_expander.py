"""
Farm Care Tracker: protocol expansion.

Turns a treatment protocol (course length, dosing interval, applicable time
slots) into concrete dated rows. Every generated slot starts out PENDING:
scheduled, not yet done.
"""

from __future__ import annotations

import logging
from datetime import date, timedelta

from src.core.dates import date_key, format_date, weekday_name
from src.data.models import SlotState, TreatmentProtocol, TreatmentRecord

logger = logging.getLogger(__name__)


def _slot(flag: bool) -> SlotState:
    return SlotState.PENDING if flag else SlotState.NOT_APPLICABLE


def expand_protocol(
    protocol: TreatmentProtocol,
    start_date: date,
    notes: str = "",
    medical_case: str | None = None,
    weekday_locale: str = "he",
) -> list[TreatmentRecord]:
    """Expand one protocol into dated records, ascending by date.

    Args:
        protocol: The template to expand.
        start_date: Date of the first dose (offset 0).
        notes: Free text attached to every generated record.
        medical_case: Overrides the protocol's case when given.
        weekday_locale: "he" or "en" weekday names.

    Returns:
        One record per dosing day at offsets 0, f, 2f, ... < days.
        An empty list if the protocol has no time slot set.
    """
    if not protocol.has_slots:
        logger.info(
            "Protocol '%s' / '%s' has no time slot set, nothing to schedule",
            protocol.medical_case, protocol.medication,
        )
        return []

    days = protocol.days if protocol.days >= 1 else 1
    frequency = protocol.frequency if protocol.frequency >= 1 else 1
    case = medical_case or protocol.medical_case

    records: list[TreatmentRecord] = []
    for step, offset in enumerate(range(0, days, frequency), start=1):
        day = start_date + timedelta(days=offset)
        records.append(
            TreatmentRecord(
                date=format_date(day),
                weekday=weekday_name(day, weekday_locale),
                morning=_slot(protocol.morning),
                noon=_slot(protocol.noon),
                evening=_slot(protocol.evening),
                medication=protocol.medication,
                dosage=protocol.dosage,
                body_part=protocol.body_part,
                duration=str(step),
                medical_case=case,
                notes=notes,
            )
        )

    logger.debug(
        "Expanded '%s' into %d record(s) from %s (every %d day(s) for %d day(s))",
        protocol.medication, len(records), start_date, frequency, days,
    )
    return records


def expand_protocols(
    protocols: list[TreatmentProtocol],
    start_date: date,
    notes: str = "",
    medical_case: str | None = None,
    weekday_locale: str = "he",
) -> list[TreatmentRecord]:
    """Expand several protocols and concatenate the results."""
    records: list[TreatmentRecord] = []
    for protocol in protocols:
        records.extend(
            expand_protocol(protocol, start_date, notes, medical_case, weekday_locale)
        )
    return records


def sort_descending(records: list[TreatmentRecord]) -> list[TreatmentRecord]:
    """Newest first, the order rows are kept in on the sheet."""
    return sorted(records, key=lambda r: date_key(r.date), reverse=True)
