"""
salespivot/engine/dates.py

Normalizes the heterogeneous date encodings found in voucher line-items into a canonical
ISO calendar date ("YYYY-MM-DD").

Accepted inputs, tried in order:
- "2024-06-01" (already ISO) -> returned as-is
- "20240601" (8-digit YYYYMMDD) -> sliced
- "1-Jun-24" / "01-Jun-2024" (day, 3-letter month, 2 or 4 digit year)
- anything pandas can parse, accepted only if the year falls in (1900, 2100)

Unparseable values return None. Callers route those records to the "Unknown" bucket.
"""

from __future__ import annotations

import logging
import re
from datetime import date, datetime
from typing import Any, Optional

import pandas as pd

logger = logging.getLogger(__name__)

MONTH_ABBREVIATIONS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]
_MONTH_INDEX = {name.lower(): i + 1 for i, name in enumerate(MONTH_ABBREVIATIONS)}

_ISO_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
_COMPACT_RE = re.compile(r"^\d{8}$")
_DAY_MON_YEAR_RE = re.compile(r"^(\d{1,2})-([A-Za-z]{3})-(\d{2}|\d{4})$")

# Two-digit years below this pivot belong to the 2000s, the rest to the 1900s.
_TWO_DIGIT_YEAR_PIVOT = 50


def _is_valid(year: int, month: int, day: int) -> bool:
    try:
        date(year, month, day)
    except ValueError:
        return False
    return True


def _from_compact(text: str) -> Optional[str]:
    year, month, day = int(text[:4]), int(text[4:6]), int(text[6:8])
    if not _is_valid(year, month, day):
        return None
    return f"{text[:4]}-{text[4:6]}-{text[6:8]}"


def _from_day_mon_year(match: re.Match) -> Optional[str]:
    day_s, mon_s, year_s = match.groups()
    month = _MONTH_INDEX.get(mon_s.lower())
    if month is None:
        return None
    year = int(year_s)
    if len(year_s) == 2:
        year += 2000 if year < _TWO_DIGIT_YEAR_PIVOT else 1900
    day = int(day_s)
    if not _is_valid(year, month, day):
        return None
    return f"{year:04d}-{month:02d}-{day:02d}"


def _from_pandas(text: str) -> Optional[str]:
    try:
        parsed = pd.to_datetime(text, errors="coerce")
    except (ValueError, TypeError, OverflowError):
        return None
    if parsed is None or pd.isna(parsed):
        return None
    if not 1900 < parsed.year < 2100:
        return None
    return parsed.strftime("%Y-%m-%d")


def normalize_date(raw: Any) -> Optional[str]:
    """
    Converts a raw date value into "YYYY-MM-DD", or None when it cannot be parsed.
    Never raises.
    """
    if raw is None or isinstance(raw, bool):
        return None
    if isinstance(raw, datetime):
        return raw.strftime("%Y-%m-%d") if 1900 < raw.year < 2100 else None
    if isinstance(raw, date):
        return raw.isoformat() if 1900 < raw.year < 2100 else None
    if isinstance(raw, float) and raw.is_integer():
        raw = int(raw)

    text = str(raw).strip()
    if not text:
        return None

    if _ISO_RE.match(text):
        return text

    if _COMPACT_RE.match(text):
        compact = _from_compact(text)
        if compact is not None:
            return compact

    match = _DAY_MON_YEAR_RE.match(text)
    if match:
        return _from_day_mon_year(match)

    return _from_pandas(text)


def parse_iso(iso: str) -> date:
    """
    Parses a string produced by normalize_date() back into a date object.
    """
    return date.fromisoformat(iso)


def to_date(raw: Any) -> Optional[date]:
    normalized = normalize_date(raw)
    if normalized is None:
        return None
    try:
        return parse_iso(normalized)
    except ValueError:
        # "already ISO" inputs are passed through untouched and may still be impossible dates
        logger.debug("Discarding impossible ISO date: %s", normalized)
        return None


def format_display_date(d: date) -> str:
    """
    Display format used on day buckets, e.g. 2024-06-01 -> "01-Jun-24".
    """
    return f"{d.day:02d}-{MONTH_ABBREVIATIONS[d.month - 1]}-{d.year % 100:02d}"
