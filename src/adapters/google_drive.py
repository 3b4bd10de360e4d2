"""Google Drive adapter: implements DocumentLocator with the Drive API v3.

Per-animal treatment spreadsheets are found by folder + name search. Search
failures raise StoreError; only an empty result means "not found".
"""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone

from src.core.errors import ConfigurationError
from src.core.naming import animal_name_from_document, document_matches
from src.integrations.google_auth import (
    get_drive_service,
    get_service_account_credentials,
    load_oauth_credentials,
)
from src.ports.locator_port import DocumentRef
from src.ports.tabular_port import StoreError

logger = logging.getLogger(__name__)

SPREADSHEET_MIME = "application/vnd.google-apps.spreadsheet"


def _escape(value: str) -> str:
    return value.replace("\\", "\\\\").replace("'", "\\'")


def _rfc3339(moment: datetime) -> str:
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return moment.astimezone(timezone.utc).strftime("%Y-%m-%dT%H:%M:%SZ")


class GoogleDriveLocator:
    """DocumentLocator backed by Google Drive folder search."""

    def __init__(self, service=None, copy_service=None) -> None:
        self._service = service
        self._copy_service = copy_service
        self._credentials = None

    def _api(self):
        # Called inside the worker thread: one client per request, since
        # httplib2 connections are not thread-safe
        if self._service is not None:
            return self._service
        if self._credentials is None:
            self._credentials = get_service_account_credentials()
        return get_drive_service(self._credentials)

    def _copy_api(self):
        # Copies run as the authorized user when a token exists
        if self._copy_service is not None:
            return self._copy_service
        user_creds = load_oauth_credentials()
        if user_creds is None:
            logger.warning("No OAuth token, copying as the service account")
            return self._api()
        return get_drive_service(user_creds)

    def _list_all(self, query: str) -> list[dict]:
        api = self._api()
        files: list[dict] = []
        page_token = None
        while True:
            response = (
                api.files()
                .list(
                    q=query,
                    spaces="drive",
                    fields="nextPageToken, files(id, name, modifiedTime)",
                    pageToken=page_token,
                    supportsAllDrives=True,
                    includeItemsFromAllDrives=True,
                )
                .execute()
            )
            files.extend(response.get("files", []))
            page_token = response.get("nextPageToken")
            if not page_token:
                return files

    async def _search(self, query: str) -> list[dict]:
        try:
            return await asyncio.to_thread(self._list_all, query)
        except ConfigurationError:
            raise
        except Exception as exc:
            logger.error("Error searching Drive folder: %s", exc)
            raise StoreError(f"Drive search failed: {exc}") from exc

    async def find_document(
        self, folder_id: str, name_fragment: str, exact: bool = False
    ) -> str | None:
        """Best match for the fragment.

        A file whose derived animal name equals the fragment wins. Otherwise,
        with ``exact`` only a file whose name or trailing chip equals the
        fragment is accepted; without it the first hit is used.
        """
        query = (
            f"'{_escape(folder_id)}' in parents and mimeType='{SPREADSHEET_MIME}' "
            f"and name contains '{_escape(name_fragment)}' and trashed=false"
        )
        files = await self._search(query)
        if not files:
            logger.info("No treatment sheet found for '%s'", name_fragment)
            return None

        target = name_fragment.strip()
        for f in files:
            if animal_name_from_document(f.get("name", "")) == target:
                return f["id"]
        if exact:
            for f in files:
                if document_matches(f.get("name", ""), target):
                    return f["id"]
            logger.info(
                "%d sheet(s) contain '%s' but none is named for it", len(files), name_fragment
            )
            return None
        if len(files) > 1:
            logger.info(
                "%d sheets match '%s', using '%s'", len(files), name_fragment, files[0].get("name")
            )
        return files[0]["id"]

    async def list_recent(self, folder_id: str, modified_since: datetime) -> list[DocumentRef]:
        query = (
            f"'{_escape(folder_id)}' in parents and mimeType='{SPREADSHEET_MIME}' "
            f"and modifiedTime >= '{_rfc3339(modified_since)}' and trashed=false"
        )
        files = await self._search(query)
        logger.info("%d sheet(s) modified since %s in folder %s", len(files), modified_since, folder_id)
        return [
            DocumentRef(id=f["id"], name=f.get("name", ""), modified_time=f.get("modifiedTime", ""))
            for f in files
        ]

    async def copy_document(self, template_id: str, folder_id: str, name: str) -> str:
        def _copy() -> str:
            created = (
                self._copy_api()
                .files()
                .copy(
                    fileId=template_id,
                    body={"name": name, "parents": [folder_id]},
                    fields="id",
                    supportsAllDrives=True,
                )
                .execute()
            )
            return created["id"]

        try:
            document_id = await asyncio.to_thread(_copy)
        except ConfigurationError:
            raise
        except Exception as exc:
            logger.error("Failed to copy template %s into %s: %s", template_id, folder_id, exc)
            raise StoreError(f"Failed to create '{name}': {exc}") from exc
        logger.info("Created '%s' (%s) in folder %s", name, document_id, folder_id)
        return document_id
