"""Tabular store port: abstract interface over a spreadsheet backend.

Core modules depend on this protocol, never on the Google Sheets client.
Every operation targets the first tab of the document identified by
``document_id``. Row indices are 0-based and include the header row, so the
first data row is index 1.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol


class StoreError(Exception):
    """Raised when any tabular store operation fails."""


class DocumentNotFoundError(StoreError):
    """Raised when the document ID does not resolve to a spreadsheet."""


@dataclass
class SheetRow:
    index: int                      # 0-based, stable until the next structural change
    values: list[Any]

    def cell(self, column: int) -> Any:
        if 0 <= column < len(self.values):
            return self.values[column]
        return ""


@dataclass
class SheetSnapshot:
    """Header plus all data rows of a tab, as read in one call."""

    header: list[str] = field(default_factory=list)
    rows: list[SheetRow] = field(default_factory=list)


@dataclass
class CheckboxCell:
    """A single cell whose boolean validation rule is applied or cleared."""

    row_index: int
    column_index: int
    enabled: bool


@dataclass
class CellUpdate:
    row_index: int
    column_index: int
    value: Any


class TabularStore(Protocol):
    """Abstract spreadsheet interface used by core modules."""

    async def read_sheet(self, document_id: str) -> SheetSnapshot: ...

    async def insert_rows(
        self, document_id: str, start_index: int, count: int
    ) -> None: ...

    async def write_rows(
        self,
        document_id: str,
        start_index: int,
        values: list[list[Any]],
        raw_from_column: int | None = None,
    ) -> None:
        """Write a block of rows. Columns at or after ``raw_from_column`` are
        stored as literal text; the others are parsed like typed input."""
        ...

    async def delete_rows(self, document_id: str, row_indices: list[int]) -> None: ...

    async def sort_rows(
        self, document_id: str, column_index: int, descending: bool = True
    ) -> None: ...

    async def set_checkbox_cells(
        self, document_id: str, cells: list[CheckboxCell]
    ) -> None: ...

    async def update_cells(self, document_id: str, cells: list[CellUpdate]) -> None: ...

    async def append_row(self, document_id: str, values: list[Any]) -> None: ...
