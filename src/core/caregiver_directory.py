"""Caregiver roster lookups: email to display name, and the full name list."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from src.core.errors import SheetLayoutError
from src.core.runtime_config import CAREGIVERS_SHEET_ID
from src.data.columns import CAREGIVER_EMAIL_HEADER, CAREGIVER_NAME_HEADER, header_index

if TYPE_CHECKING:
    from src.core.runtime_config import RuntimeConfig
    from src.ports.tabular_port import SheetSnapshot, TabularStore

logger = logging.getLogger(__name__)


class CaregiverDirectory:
    def __init__(self, store: TabularStore, config: RuntimeConfig) -> None:
        self._store = store
        self._config = config

    async def _read(self) -> tuple[SheetSnapshot, int]:
        sheet_id = self._config.require(CAREGIVERS_SHEET_ID)
        snapshot = await self._store.read_sheet(sheet_id)
        name_col = header_index(snapshot.header, CAREGIVER_NAME_HEADER)
        if name_col == -1:
            raise SheetLayoutError(
                f"Could not find '{CAREGIVER_NAME_HEADER}' header in sheet {sheet_id}"
            )
        return snapshot, name_col

    async def name_for_email(self, email: str) -> str:
        """Caregiver name for an email address, or "" when unknown."""
        target = (email or "").strip().lower()
        if not target:
            return ""
        snapshot, name_col = await self._read()
        email_col = header_index(snapshot.header, CAREGIVER_EMAIL_HEADER)
        if email_col == -1:
            logger.warning("Caregivers sheet has no '%s' column", CAREGIVER_EMAIL_HEADER)
            return ""

        for row in snapshot.rows:
            if str(row.cell(email_col) or "").strip().lower() == target:
                name = str(row.cell(name_col) or "").strip()
                logger.info("Found caregiver %s for %s", name, email)
                return name
        logger.info("No caregiver registered for %s", email)
        return ""

    async def list_caregivers(self) -> list[str]:
        """Unique trimmed names in roster order."""
        snapshot, name_col = await self._read()
        names: list[str] = []
        for row in snapshot.rows:
            name = str(row.cell(name_col) or "").strip()
            if name and name not in names:
                names.append(name)
        return names
