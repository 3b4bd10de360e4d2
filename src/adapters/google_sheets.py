"""Google Sheets adapter: implements TabularStore with the Sheets API v4.

The googleapiclient is synchronous, so every request runs in a worker thread
via asyncio.to_thread. Every operation targets the first tab of the
spreadsheet; its title and numeric sheetId are cached per instance.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any, TypeVar

from googleapiclient.errors import HttpError

from src.core.errors import ConfigurationError
from src.integrations.google_auth import get_service_account_credentials, get_sheets_service
from src.ports.tabular_port import (
    CellUpdate,
    CheckboxCell,
    DocumentNotFoundError,
    SheetRow,
    SheetSnapshot,
    StoreError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


def column_letter(index: int) -> str:
    """0-based column index to A1 letters (0 -> A, 26 -> AA)."""
    letters = ""
    index += 1
    while index:
        index, rem = divmod(index - 1, 26)
        letters = chr(65 + rem) + letters
    return letters


def _quote(title: str) -> str:
    return "'" + title.replace("'", "''") + "'"


class GoogleSheetsStore:
    """TabularStore backed by the Google Sheets API."""

    def __init__(self, service=None) -> None:
        self._service = service
        self._credentials = None
        self._meta: dict[str, tuple[str, int]] = {}

    def _api(self):
        """Sheets client for the current request.

        Runs inside the worker thread. httplib2 connections are not
        thread-safe, so every request builds its own client from the cached
        credentials; an injected service is used as-is.
        """
        if self._service is not None:
            return self._service
        if self._credentials is None:
            self._credentials = get_service_account_credentials()
        return get_sheets_service(self._credentials)

    async def _run(self, document_id: str, action: str, call: Callable[[], T]) -> T:
        try:
            return await asyncio.to_thread(call)
        except HttpError as exc:
            status = getattr(exc.resp, "status", None)
            logger.error("Sheets API error during %s on %s (%s): %s", action, document_id, status, exc)
            if status == 404:
                raise DocumentNotFoundError(f"Spreadsheet {document_id} not found") from exc
            raise StoreError(f"Failed to {action} on {document_id}: {exc}") from exc
        except ConfigurationError:
            raise
        except Exception as exc:
            logger.error("Sheets request failed during %s on %s: %s", action, document_id, exc)
            raise StoreError(f"Failed to {action} on {document_id}: {exc}") from exc

    async def _first_tab(self, document_id: str) -> tuple[str, int]:
        if document_id not in self._meta:
            meta = await self._run(
                document_id,
                "load document info",
                lambda: self._api()
                .spreadsheets()
                .get(
                    spreadsheetId=document_id,
                    fields="properties.title,sheets.properties(sheetId,title)",
                )
                .execute(),
            )
            sheets = meta.get("sheets", [])
            if not sheets:
                raise StoreError(f"Spreadsheet {document_id} has no tabs")
            props = sheets[0]["properties"]
            self._meta[document_id] = (props["title"], props["sheetId"])
            logger.debug(
                "Loaded document '%s' (first tab '%s')",
                meta.get("properties", {}).get("title", ""), props["title"],
            )
        return self._meta[document_id]

    async def _batch_update(self, document_id: str, action: str, requests: list[dict]) -> None:
        if not requests:
            return
        await self._run(
            document_id,
            action,
            lambda: self._api()
            .spreadsheets()
            .batchUpdate(spreadsheetId=document_id, body={"requests": requests})
            .execute(),
        )

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    async def read_sheet(self, document_id: str) -> SheetSnapshot:
        title, _ = await self._first_tab(document_id)
        result = await self._run(
            document_id,
            "read rows",
            lambda: self._api()
            .spreadsheets()
            .values()
            .get(
                spreadsheetId=document_id,
                range=_quote(title),
                valueRenderOption="FORMATTED_VALUE",
            )
            .execute(),
        )
        values = result.get("values", [])
        if not values:
            return SheetSnapshot()

        header = [str(h) for h in values[0]]
        rows = [SheetRow(index=i, values=list(row)) for i, row in enumerate(values[1:], start=1)]
        logger.debug("Read %d row(s) from %s", len(rows), document_id)
        return SheetSnapshot(header=header, rows=rows)

    # ------------------------------------------------------------------
    # Structural writes
    # ------------------------------------------------------------------

    async def insert_rows(self, document_id: str, start_index: int, count: int) -> None:
        if count <= 0:
            return
        _, sheet_id = await self._first_tab(document_id)
        await self._batch_update(
            document_id,
            "insert rows",
            [
                {
                    "insertDimension": {
                        "range": {
                            "sheetId": sheet_id,
                            "dimension": "ROWS",
                            "startIndex": start_index,
                            "endIndex": start_index + count,
                        },
                        "inheritFromBefore": False,
                    }
                }
            ],
        )

    async def delete_rows(self, document_id: str, row_indices: list[int]) -> None:
        """Delete rows in one batch, highest index first."""
        _, sheet_id = await self._first_tab(document_id)
        requests = [
            {
                "deleteDimension": {
                    "range": {
                        "sheetId": sheet_id,
                        "dimension": "ROWS",
                        "startIndex": idx,
                        "endIndex": idx + 1,
                    }
                }
            }
            for idx in sorted(set(row_indices), reverse=True)
        ]
        await self._batch_update(document_id, "delete rows", requests)

    async def sort_rows(
        self, document_id: str, column_index: int, descending: bool = True
    ) -> None:
        """Sort every row below the header by one column."""
        _, sheet_id = await self._first_tab(document_id)
        await self._batch_update(
            document_id,
            "sort rows",
            [
                {
                    "sortRange": {
                        "range": {"sheetId": sheet_id, "startRowIndex": 1},
                        "sortSpecs": [
                            {
                                "dimensionIndex": column_index,
                                "sortOrder": "DESCENDING" if descending else "ASCENDING",
                            }
                        ],
                    }
                }
            ],
        )

    async def set_checkbox_cells(self, document_id: str, cells: list[CheckboxCell]) -> None:
        _, sheet_id = await self._first_tab(document_id)
        requests = []
        for cell in cells:
            request: dict[str, Any] = {
                "range": {
                    "sheetId": sheet_id,
                    "startRowIndex": cell.row_index,
                    "endRowIndex": cell.row_index + 1,
                    "startColumnIndex": cell.column_index,
                    "endColumnIndex": cell.column_index + 1,
                }
            }
            # No rule clears any validation left on the cell
            if cell.enabled:
                request["rule"] = {"condition": {"type": "BOOLEAN"}, "showCustomUi": True}
            requests.append({"setDataValidation": request})
        await self._batch_update(document_id, "set checkboxes", requests)

    # ------------------------------------------------------------------
    # Value writes
    # ------------------------------------------------------------------

    async def write_rows(
        self,
        document_id: str,
        start_index: int,
        values: list[list[Any]],
        raw_from_column: int | None = None,
    ) -> None:
        """Write a block of rows starting at ``start_index``.

        Columns before ``raw_from_column`` go in as USER_ENTERED so dates and
        checkbox booleans are parsed. The rest go in as RAW, so a dosage of
        "1/2" or a note starting with "=" is stored as typed.
        """
        if not values:
            return
        title, _ = await self._first_tab(document_id)
        width = max(len(row) for row in values)
        split = width if raw_from_column is None else min(max(raw_from_column, 0), width)

        for first, last, option in ((0, split, "USER_ENTERED"), (split, width, "RAW")):
            if first >= last:
                continue
            block = [row[first:last] for row in values]
            a1 = (
                f"{_quote(title)}!{column_letter(first)}{start_index + 1}:"
                f"{column_letter(last - 1)}{start_index + len(values)}"
            )
            await self._run(
                document_id,
                "write rows",
                lambda a1=a1, block=block, option=option: self._api()
                .spreadsheets()
                .values()
                .update(
                    spreadsheetId=document_id,
                    range=a1,
                    valueInputOption=option,
                    body={"values": block},
                )
                .execute(),
            )
            logger.debug("Wrote %d row(s) to %s at %s (%s)", len(block), document_id, a1, option)

    async def update_cells(self, document_id: str, cells: list[CellUpdate]) -> None:
        if not cells:
            return
        title, _ = await self._first_tab(document_id)
        data = [
            {
                "range": f"{_quote(title)}!{column_letter(c.column_index)}{c.row_index + 1}",
                "values": [[c.value]],
            }
            for c in cells
        ]
        await self._run(
            document_id,
            "update cells",
            lambda: self._api()
            .spreadsheets()
            .values()
            .batchUpdate(
                spreadsheetId=document_id,
                body={"valueInputOption": "USER_ENTERED", "data": data},
            )
            .execute(),
        )

    async def append_row(self, document_id: str, values: list[Any]) -> None:
        title, _ = await self._first_tab(document_id)
        await self._run(
            document_id,
            "append row",
            lambda: self._api()
            .spreadsheets()
            .values()
            .append(
                spreadsheetId=document_id,
                range=_quote(title),
                valueInputOption="USER_ENTERED",
                insertDataOption="INSERT_ROWS",
                body={"values": [values]},
            )
            .execute(),
        )
