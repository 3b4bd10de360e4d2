"""
Farm Care Tracker: date keys.

Sheets store dates as display strings, usually DD/MM/YYYY and sometimes ISO.
All comparisons go through an integer key YYYY*10000 + MM*100 + DD instead of
datetime arithmetic, so a row written in one timezone never drifts a day when
read in another. Malformed input maps to key 0.
"""

from __future__ import annotations

import logging
import re
from datetime import date, datetime, timedelta
from zoneinfo import ZoneInfo

logger = logging.getLogger(__name__)

_DMY_SPLIT = re.compile(r"[/.]")

# Python weekday() order: Monday == 0
_WEEKDAY_NAMES = {
    "he": ("יום שני", "יום שלישי", "יום רביעי", "יום חמישי", "יום שישי", "יום שבת", "יום ראשון"),
    "en": ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"),
}


def parse_date(value: object) -> date | None:
    """Parse a sheet/API date value into a date, or None if malformed.

    Accepts DD/MM/YYYY (also D/M/YYYY and dot-separated), YYYY-MM-DD with an
    optional time part after 'T', and date/datetime objects.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if value is None:
        return None

    text = str(value).strip()
    if not text:
        return None
    if "T" in text:
        text = text.split("T", 1)[0]

    try:
        if "-" in text:
            parts = text.split("-")
            if len(parts) == 3:
                year, month, day = (int(p) for p in parts)
                return date(year, month, day)
        else:
            parts = _DMY_SPLIT.split(text)
            if len(parts) == 3:
                day, month, year = (int(p) for p in parts)
                return date(year, month, day)
    except ValueError:
        pass

    logger.debug("Date string not in expected format: %r", value)
    return None


def date_key(value: object) -> int:
    """Return the sortable YYYYMMDD key of a date value; 0 if unparseable."""
    parsed = parse_date(value)
    if parsed is None:
        return 0
    return key_of(parsed)


def key_of(d: date) -> int:
    return d.year * 10000 + d.month * 100 + d.day


def key_to_date(key: int) -> date | None:
    if key <= 0:
        return None
    try:
        return date(key // 10000, (key // 100) % 100, key % 100)
    except ValueError:
        return None


def format_date(d: date) -> str:
    """Format a date the way the treatment sheets display it (DD/MM/YYYY)."""
    return f"{d.day:02d}/{d.month:02d}/{d.year}"


def normalize_date_text(value: object) -> str:
    """Rewrite any accepted date form as DD/MM/YYYY; unparseable text passes through."""
    parsed = parse_date(value)
    if parsed is None:
        return "" if value is None else str(value)
    return format_date(parsed)


def weekday_name(d: date, locale: str = "he") -> str:
    names = _WEEKDAY_NAMES.get(locale, _WEEKDAY_NAMES["en"])
    return names[d.weekday()]


def today_in(timezone: str) -> date:
    """Today's calendar date in the facility timezone."""
    return datetime.now(ZoneInfo(timezone)).date()


def window_keys(center: date, days: int) -> tuple[int, int]:
    """Inclusive date-key bounds of center +/- days."""
    return key_of(center - timedelta(days=days)), key_of(center + timedelta(days=days))
