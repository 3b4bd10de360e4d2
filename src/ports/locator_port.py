"""Document locator port: finds per-animal spreadsheets inside a folder.

Core modules depend on this protocol, never on the Drive client.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Protocol


@dataclass
class DocumentRef:
    id: str
    name: str
    modified_time: str = ""


class DocumentLocator(Protocol):
    """Abstract folder search interface used by core modules."""

    async def find_document(
        self, folder_id: str, name_fragment: str, exact: bool = False
    ) -> str | None: ...

    async def list_recent(
        self, folder_id: str, modified_since: datetime
    ) -> list[DocumentRef]: ...

    async def copy_document(
        self, template_id: str, folder_id: str, name: str
    ) -> str: ...
