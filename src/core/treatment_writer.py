"""
Farm Care Tracker: treatment writer.

Adds a batch of treatment records to an animal's sheet:

1. optionally delete every row dated inside a range,
2. insert blank rows right under the header and write the batch into them,
3. apply a checkbox rule to TRUE/FALSE slot cells and clear it on blank ones,
4. re-sort the data range by date, newest first.

The store has no transactions. A failure after step 1 leaves the deleted rows
gone; the error propagates and the caller may retry the whole batch.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from src.core.dates import date_key
from src.core.treatment_codec import encode_row
from src.data.columns import (
    DATE_COLUMN,
    EVENING_COLUMN,
    MORNING_COLUMN,
    NOON_COLUMN,
    TEXT_COLUMNS_START,
)
from src.data.models import DateRange, TreatmentRecord, WriteResult
from src.ports.tabular_port import CheckboxCell

if TYPE_CHECKING:
    from src.ports.tabular_port import TabularStore

logger = logging.getLogger(__name__)

# First data row, directly under the header
_TOP_INDEX = 1


def checkbox_cells(records: list[TreatmentRecord], start_index: int) -> list[CheckboxCell]:
    """Checkbox rule changes for records written from start_index downwards."""
    cells: list[CheckboxCell] = []
    for offset, record in enumerate(records):
        row_index = start_index + offset
        for column, state in (
            (MORNING_COLUMN, record.morning),
            (NOON_COLUMN, record.noon),
            (EVENING_COLUMN, record.evening),
        ):
            cells.append(CheckboxCell(row_index, column, enabled=state.is_applicable))
    return cells


def range_of(records: list[TreatmentRecord]) -> DateRange | None:
    """Inclusive date-key range covered by records, ignoring malformed dates."""
    keys = [k for k in (date_key(r.date) for r in records) if k]
    if not keys:
        return None
    return DateRange(min(keys), max(keys))


class TreatmentWriter:
    """Writes treatment batches through a TabularStore."""

    def __init__(self, store: TabularStore) -> None:
        self._store = store

    async def delete_between(self, document_id: str, date_range: DateRange) -> int:
        """Delete every row whose date key falls in the inclusive range.

        Returns the number of rows deleted. Running it twice deletes nothing
        the second time.
        """
        snapshot = await self._store.read_sheet(document_id)
        doomed = [
            row.index
            for row in snapshot.rows
            if date_key(row.cell(DATE_COLUMN)) in date_range
        ]
        if not doomed:
            logger.info(
                "No treatment rows between %d and %d in %s",
                date_range.start, date_range.end, document_id,
            )
            return 0

        # Highest index first so no deletion shifts a row still to be deleted
        await self._store.delete_rows(document_id, sorted(doomed, reverse=True))
        logger.info(
            "Deleted %d treatment row(s) between %d and %d in %s",
            len(doomed), date_range.start, date_range.end, document_id,
        )
        return len(doomed)

    async def write_batch(
        self,
        document_id: str,
        records: list[TreatmentRecord],
        delete_range: DateRange | None = None,
    ) -> WriteResult:
        """Insert records at the top of the sheet and restore date order.

        Args:
            document_id: The animal's treatment spreadsheet.
            records: Rows to add, in any order.
            delete_range: If given, rows dated inside it are deleted first.

        Returns:
            WriteResult with the number of rows written and deleted.

        Raises:
            StoreError: If any store call fails. Nothing is rolled back.
        """
        result = WriteResult()
        if delete_range is not None:
            result.rows_deleted = await self.delete_between(document_id, delete_range)

        if not records:
            logger.info("Empty treatment batch for %s, nothing to write", document_id)
            return result

        for record in records:
            if not record.is_schedulable:
                logger.warning(
                    "Treatment row dated %s ('%s') has no time slot; writing it as a general row",
                    record.date, record.medication,
                )

        values = [encode_row(r) for r in records]
        await self._store.insert_rows(document_id, _TOP_INDEX, len(records))
        await self._store.write_rows(
            document_id, _TOP_INDEX, values, raw_from_column=TEXT_COLUMNS_START
        )
        await self._store.set_checkbox_cells(document_id, checkbox_cells(records, _TOP_INDEX))
        await self._store.sort_rows(document_id, DATE_COLUMN, descending=True)

        result.rows_written = len(records)
        logger.info(
            "Wrote %d treatment row(s) to %s (%d deleted first)",
            result.rows_written, document_id, result.rows_deleted,
        )
        return result
