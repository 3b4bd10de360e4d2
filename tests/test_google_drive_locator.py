"""Tests for the Google Drive adapter. All Google API calls are mocked."""

from datetime import datetime, timezone
from unittest.mock import MagicMock, patch

import pytest

from src.adapters.google_drive import GoogleDriveLocator
from src.ports.tabular_port import StoreError

_PATCH_OAUTH = "src.adapters.google_drive.load_oauth_credentials"
_PATCH_DRIVE = "src.adapters.google_drive.get_drive_service"


def _mock_service(*pages):
    """Create a mock Drive service returning the given files.list pages."""
    service = MagicMock()
    service.files.return_value.list.return_value.execute.side_effect = list(pages)
    return service


def _query(service, call=0):
    return service.files.return_value.list.call_args_list[call].kwargs["q"]


class TestFindDocument:
    @pytest.mark.asyncio
    async def test_prefers_exact_derived_name(self):
        service = _mock_service(
            {
                "files": [
                    {"id": "a", "name": "Maxine 985112345678902"},
                    {"id": "b", "name": "עותק של Max 985112345678901"},
                ]
            }
        )
        assert await GoogleDriveLocator(service).find_document("folder", "Max") == "b"

    @pytest.mark.asyncio
    async def test_falls_back_to_first_match(self):
        service = _mock_service({"files": [{"id": "a", "name": "Max 1"}, {"id": "b", "name": "Max 2"}]})
        assert await GoogleDriveLocator(service).find_document("folder", "985") == "a"

    @pytest.mark.asyncio
    async def test_no_match(self):
        service = _mock_service({"files": []})
        assert await GoogleDriveLocator(service).find_document("folder", "Ghost") is None

    @pytest.mark.asyncio
    async def test_query_escapes_and_skips_trash(self):
        service = _mock_service({"files": []})
        await GoogleDriveLocator(service).find_document("folder", "O'Malley")
        query = _query(service)
        assert "'folder' in parents" in query
        assert "name contains 'O\\'Malley'" in query
        assert "mimeType='application/vnd.google-apps.spreadsheet'" in query
        assert query.endswith("trashed=false")

    @pytest.mark.asyncio
    async def test_search_failure_is_store_error(self):
        service = MagicMock()
        service.files.return_value.list.return_value.execute.side_effect = RuntimeError("503")
        with pytest.raises(StoreError):
            await GoogleDriveLocator(service).find_document("folder", "Max")

    @pytest.mark.asyncio
    async def test_exact_rejects_longer_name(self):
        service = _mock_service({"files": [{"id": "a", "name": "Maxine 985112345678902"}]})
        assert await GoogleDriveLocator(service).find_document("folder", "Max", exact=True) is None

    @pytest.mark.asyncio
    async def test_exact_accepts_trailing_chip(self):
        service = _mock_service(
            {"files": [{"id": "a", "name": "Maxine 9851123456789012"}, {"id": "b", "name": "Max 985112345678901"}]}
        )
        locator = GoogleDriveLocator(service)
        assert await locator.find_document("folder", "985112345678901", exact=True) == "b"


class TestListRecent:
    @pytest.mark.asyncio
    async def test_follows_pagination(self):
        service = _mock_service(
            {"files": [{"id": "a", "name": "Max", "modifiedTime": "2025-03-09T10:00:00Z"}], "nextPageToken": "t1"},
            {"files": [{"id": "b", "name": "Luna"}]},
        )
        since = datetime(2025, 3, 1, tzinfo=timezone.utc)
        docs = await GoogleDriveLocator(service).list_recent("folder", since)

        assert [d.id for d in docs] == ["a", "b"]
        assert docs[0].modified_time == "2025-03-09T10:00:00Z"
        assert "modifiedTime >= '2025-03-01T00:00:00Z'" in _query(service)
        assert service.files.return_value.list.call_args_list[1].kwargs["pageToken"] == "t1"

    @pytest.mark.asyncio
    async def test_naive_datetime_treated_as_utc(self):
        service = _mock_service({"files": []})
        await GoogleDriveLocator(service).list_recent("folder", datetime(2025, 3, 1, 12, 30))
        assert "'2025-03-01T12:30:00Z'" in _query(service)


class TestCopyDocument:
    @pytest.mark.asyncio
    async def test_uses_copy_service(self):
        copy_service = MagicMock()
        copy_service.files.return_value.copy.return_value.execute.return_value = {"id": "new"}
        locator = GoogleDriveLocator(MagicMock(), copy_service=copy_service)

        assert await locator.copy_document("template", "folder", "Pepper 444") == "new"
        kwargs = copy_service.files.return_value.copy.call_args.kwargs
        assert kwargs["fileId"] == "template"
        assert kwargs["body"] == {"name": "Pepper 444", "parents": ["folder"]}

    @pytest.mark.asyncio
    async def test_without_token_copies_as_service_account(self):
        service = MagicMock()
        service.files.return_value.copy.return_value.execute.return_value = {"id": "new"}
        with patch(_PATCH_OAUTH, return_value=None):
            assert await GoogleDriveLocator(service).copy_document("t", "f", "n") == "new"

    @pytest.mark.asyncio
    async def test_with_token_builds_user_service(self):
        user_service = MagicMock()
        user_service.files.return_value.copy.return_value.execute.return_value = {"id": "new"}
        creds = MagicMock()
        with patch(_PATCH_OAUTH, return_value=creds), patch(_PATCH_DRIVE, return_value=user_service) as build:
            await GoogleDriveLocator(MagicMock()).copy_document("t", "f", "n")
        build.assert_called_once_with(creds)

    @pytest.mark.asyncio
    async def test_copy_failure_is_store_error(self):
        copy_service = MagicMock()
        copy_service.files.return_value.copy.return_value.execute.side_effect = RuntimeError(
            "storageQuotaExceeded"
        )
        locator = GoogleDriveLocator(MagicMock(), copy_service=copy_service)
        with pytest.raises(StoreError, match="Pepper"):
            await locator.copy_document("template", "folder", "Pepper")


class TestClientPerRequest:
    @pytest.mark.asyncio
    async def test_credentials_cached_client_built_per_call(self):
        creds = MagicMock()
        with patch(
            "src.adapters.google_drive.get_service_account_credentials", return_value=creds
        ) as load, patch(_PATCH_DRIVE, side_effect=lambda c: _mock_service({"files": []})) as build:
            locator = GoogleDriveLocator()
            await locator.find_document("folder", "Max")
            await locator.list_recent("folder", datetime(2025, 3, 1))

        load.assert_called_once_with()
        assert build.call_count == 2
        assert all(call.args == (creds,) for call in build.call_args_list)
