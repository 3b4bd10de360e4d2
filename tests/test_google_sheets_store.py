"""Tests for the Google Sheets adapter. All Google API calls are mocked."""

from unittest.mock import MagicMock, patch

import pytest
from googleapiclient.errors import HttpError

from src.adapters.google_sheets import GoogleSheetsStore, column_letter
from src.ports.tabular_port import (
    CellUpdate,
    CheckboxCell,
    DocumentNotFoundError,
    StoreError,
)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _mock_service(values=None, title="Sheet1", sheet_id=7):
    """Create a mock Sheets service whose first tab is ``title``."""
    service = MagicMock()
    spreadsheets = service.spreadsheets.return_value
    spreadsheets.get.return_value.execute.return_value = {
        "properties": {"title": "Max 985112345678901"},
        "sheets": [{"properties": {"title": title, "sheetId": sheet_id}}],
    }
    if values is not None:
        spreadsheets.values.return_value.get.return_value.execute.return_value = {
            "values": values
        }
    return service


def _http_error(status):
    return HttpError(resp=MagicMock(status=status, reason="error"), content=b"")


def _batch_requests(service):
    call = service.spreadsheets.return_value.batchUpdate.call_args
    return call.kwargs["body"]["requests"]


# ---------------------------------------------------------------------------
# column_letter
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    "index, expected", [(0, "A"), (11, "L"), (25, "Z"), (26, "AA"), (701, "ZZ"), (702, "AAA")]
)
def test_column_letter(index, expected):
    assert column_letter(index) == expected


# ---------------------------------------------------------------------------
# Reads
# ---------------------------------------------------------------------------


class TestReadSheet:
    @pytest.mark.asyncio
    async def test_header_and_row_indices(self):
        service = _mock_service(values=[["שם", "שבב"], ["Max", "1"], ["Luna"]])
        store = GoogleSheetsStore(service)

        snapshot = await store.read_sheet("doc")

        assert snapshot.header == ["שם", "שבב"]
        assert [r.index for r in snapshot.rows] == [1, 2]
        assert snapshot.rows[1].cell(1) == ""
        kwargs = service.spreadsheets.return_value.values.return_value.get.call_args.kwargs
        assert kwargs["range"] == "'Sheet1'"
        assert kwargs["valueRenderOption"] == "FORMATTED_VALUE"

    @pytest.mark.asyncio
    async def test_empty_tab(self):
        store = GoogleSheetsStore(_mock_service(values=[]))
        snapshot = await store.read_sheet("doc")
        assert snapshot.header == []
        assert snapshot.rows == []

    @pytest.mark.asyncio
    async def test_tab_metadata_cached(self):
        service = _mock_service(values=[["h"]])
        store = GoogleSheetsStore(service)
        await store.read_sheet("doc")
        await store.read_sheet("doc")
        assert service.spreadsheets.return_value.get.call_count == 1

    @pytest.mark.asyncio
    async def test_title_with_quote_is_escaped(self):
        service = _mock_service(values=[["h"]], title="Max's sheet")
        await GoogleSheetsStore(service).read_sheet("doc")
        kwargs = service.spreadsheets.return_value.values.return_value.get.call_args.kwargs
        assert kwargs["range"] == "'Max''s sheet'"

    @pytest.mark.asyncio
    async def test_document_without_tabs(self):
        service = _mock_service()
        service.spreadsheets.return_value.get.return_value.execute.return_value = {"sheets": []}
        with pytest.raises(StoreError):
            await GoogleSheetsStore(service).read_sheet("doc")


class TestErrors:
    @pytest.mark.asyncio
    async def test_404_is_document_not_found(self):
        service = _mock_service()
        service.spreadsheets.return_value.get.return_value.execute.side_effect = _http_error(404)
        with pytest.raises(DocumentNotFoundError):
            await GoogleSheetsStore(service).read_sheet("missing")

    @pytest.mark.asyncio
    async def test_other_http_error_is_store_error(self):
        service = _mock_service(values=[["h"]])
        service.spreadsheets.return_value.values.return_value.get.return_value.execute.side_effect = (
            _http_error(429)
        )
        with pytest.raises(StoreError) as exc_info:
            await GoogleSheetsStore(service).read_sheet("doc")
        assert not isinstance(exc_info.value, DocumentNotFoundError)

    @pytest.mark.asyncio
    async def test_unexpected_error_is_store_error(self):
        service = _mock_service()
        service.spreadsheets.return_value.get.return_value.execute.side_effect = TimeoutError("slow")
        with pytest.raises(StoreError, match="slow"):
            await GoogleSheetsStore(service).read_sheet("doc")


# ---------------------------------------------------------------------------
# Structural writes
# ---------------------------------------------------------------------------


class TestStructuralWrites:
    @pytest.mark.asyncio
    async def test_insert_rows(self):
        service = _mock_service()
        await GoogleSheetsStore(service).insert_rows("doc", 1, 3)
        request = _batch_requests(service)[0]["insertDimension"]
        assert request["range"] == {
            "sheetId": 7, "dimension": "ROWS", "startIndex": 1, "endIndex": 4,
        }
        assert request["inheritFromBefore"] is False

    @pytest.mark.asyncio
    async def test_insert_zero_rows_is_noop(self):
        service = _mock_service()
        await GoogleSheetsStore(service).insert_rows("doc", 1, 0)
        service.spreadsheets.return_value.batchUpdate.assert_not_called()

    @pytest.mark.asyncio
    async def test_delete_rows_highest_first_in_one_batch(self):
        service = _mock_service()
        await GoogleSheetsStore(service).delete_rows("doc", [2, 5, 3, 5])
        requests = _batch_requests(service)
        assert [r["deleteDimension"]["range"]["startIndex"] for r in requests] == [5, 3, 2]
        assert service.spreadsheets.return_value.batchUpdate.call_count == 1

    @pytest.mark.asyncio
    async def test_delete_nothing(self):
        service = _mock_service()
        await GoogleSheetsStore(service).delete_rows("doc", [])
        service.spreadsheets.return_value.batchUpdate.assert_not_called()

    @pytest.mark.asyncio
    async def test_sort_rows_below_header(self):
        service = _mock_service()
        await GoogleSheetsStore(service).sort_rows("doc", 0)
        sort = _batch_requests(service)[0]["sortRange"]
        assert sort["range"] == {"sheetId": 7, "startRowIndex": 1}
        assert sort["sortSpecs"] == [{"dimensionIndex": 0, "sortOrder": "DESCENDING"}]

    @pytest.mark.asyncio
    async def test_checkbox_rules_set_and_cleared(self):
        service = _mock_service()
        await GoogleSheetsStore(service).set_checkbox_cells(
            "doc", [CheckboxCell(1, 2, True), CheckboxCell(1, 3, False)]
        )
        enabled, disabled = (r["setDataValidation"] for r in _batch_requests(service))
        assert enabled["rule"]["condition"] == {"type": "BOOLEAN"}
        assert enabled["range"]["startColumnIndex"] == 2
        assert enabled["range"]["endRowIndex"] == 2
        assert "rule" not in disabled


# ---------------------------------------------------------------------------
# Value writes
# ---------------------------------------------------------------------------


class TestValueWrites:
    @pytest.mark.asyncio
    async def test_write_rows_range(self):
        service = _mock_service()
        rows = [["10/03/2025"] + [""] * 11, ["11/03/2025"] + [""] * 11]
        await GoogleSheetsStore(service).write_rows("doc", 1, rows)
        kwargs = service.spreadsheets.return_value.values.return_value.update.call_args.kwargs
        assert kwargs["range"] == "'Sheet1'!A2:L3"
        assert kwargs["valueInputOption"] == "USER_ENTERED"
        assert kwargs["body"] == {"values": rows}

    @pytest.mark.asyncio
    async def test_text_columns_written_raw(self):
        service = _mock_service()
        rows = [["10/03/2025", "", "FALSE", "", "", "=1+1", "1g", "PO", "1", "", "Colic", "+note"]]
        await GoogleSheetsStore(service).write_rows("doc", 1, rows, raw_from_column=5)

        calls = service.spreadsheets.return_value.values.return_value.update.call_args_list
        assert [c.kwargs["range"] for c in calls] == ["'Sheet1'!A2:E2", "'Sheet1'!F2:L2"]
        assert [c.kwargs["valueInputOption"] for c in calls] == ["USER_ENTERED", "RAW"]
        assert calls[0].kwargs["body"] == {"values": [rows[0][:5]]}
        assert calls[1].kwargs["body"] == {"values": [rows[0][5:]]}

    @pytest.mark.asyncio
    async def test_update_cells_one_batch(self):
        service = _mock_service()
        await GoogleSheetsStore(service).update_cells(
            "doc", [CellUpdate(1, 3, "TRUE"), CellUpdate(4, 27, "x")]
        )
        body = service.spreadsheets.return_value.values.return_value.batchUpdate.call_args.kwargs["body"]
        assert [d["range"] for d in body["data"]] == ["'Sheet1'!D2", "'Sheet1'!AB5"]
        assert body["data"][0]["values"] == [["TRUE"]]

    @pytest.mark.asyncio
    async def test_append_row(self):
        service = _mock_service()
        await GoogleSheetsStore(service).append_row("roster", ["Pepper", "444"])
        kwargs = service.spreadsheets.return_value.values.return_value.append.call_args.kwargs
        assert kwargs["insertDataOption"] == "INSERT_ROWS"
        assert kwargs["body"] == {"values": [["Pepper", "444"]]}


class TestClientPerRequest:
    @pytest.mark.asyncio
    async def test_credentials_cached_client_built_per_call(self):
        creds = MagicMock()
        with patch(
            "src.adapters.google_sheets.get_service_account_credentials", return_value=creds
        ) as load, patch(
            "src.adapters.google_sheets.get_sheets_service",
            side_effect=lambda c: _mock_service(values=[["h"]]),
        ) as build:
            store = GoogleSheetsStore()
            await store.read_sheet("doc")
            await store.read_sheet("doc")

        load.assert_called_once_with()
        # document info once, then one values read per call
        assert build.call_count == 3
        assert all(call.args == (creds,) for call in build.call_args_list)
