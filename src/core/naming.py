"""Display names derived from per-animal spreadsheet file names."""

from __future__ import annotations

import re

_EXTENSION = re.compile(r"\.xlsx?$", re.IGNORECASE)
_COPY_PREFIX = re.compile(r"^(עותק של|Copy of)\s+", re.IGNORECASE)
_TRAILING_CHIP = re.compile(r"\s+\d{15}$")


def animal_name_from_document(file_name: str) -> str:
    """Strip extension, copy prefix and trailing 15-digit chip number.

    "עותק של Max 985112345678901.xlsx" -> "Max". Falls back to the
    extension-less file name when nothing would be left.
    """
    base = _EXTENSION.sub("", (file_name or "").strip())
    name = _COPY_PREFIX.sub("", base).strip()
    name = _TRAILING_CHIP.sub("", name).strip()
    return name or base


def treatment_sheet_name(animal_name: str, chip_id: str = "") -> str:
    """File name given to a newly provisioned treatment spreadsheet."""
    return f"{animal_name.strip()} {chip_id.strip()}".strip()


def document_matches(file_name: str, key: str) -> bool:
    """True when ``key`` names the file exactly: its animal name, its whole
    base name or its trailing chip number. "Max" does not match "Maxine"."""
    key = (key or "").strip()
    if not key:
        return False
    base = _COPY_PREFIX.sub("", _EXTENSION.sub("", (file_name or "").strip())).strip()
    chip = _TRAILING_CHIP.search(base)
    return key in (animal_name_from_document(file_name), base) or (
        chip is not None and chip.group().strip() == key
    )
