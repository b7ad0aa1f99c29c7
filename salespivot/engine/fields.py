"""
salespivot/engine/fields.py

Field access over loosely-typed records.

Records have no fixed schema: keys come from whatever the upstream voucher parser produced, with
inconsistent casing ("Amount", "amount", "AMOUNT"). Every read in the engine goes through
get_field_value() so that the lookup strategy lives in one place:
- exact key, then lower-case, then upper-case, then a case-insensitive scan of all keys
- dotted paths ("ledgerentries.amount") walk nested mappings, taking the first element of lists
- "month", "year", "quarter" and "week" are always derived from the record's date field

It also holds the small coercion helpers (text and number) shared by filters, bucketing and aggregation.
"""

from __future__ import annotations

import math
import re
from typing import Any, Mapping, Optional

from .dates import MONTH_ABBREVIATIONS, to_date

Record = Mapping[str, Any]

DERIVED_DATE_FIELDS = frozenset({"month", "year", "quarter", "week"})

# Fields holding the transaction date, in lookup order.
DATE_SOURCE_FIELDS = ("date", "cp_date")

# Leading numeric prefix accepted by JavaScript's parseFloat ("12.5kg" -> 12.5).
_NUMBER_PREFIX_RE = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def _lookup_key(record: Record, name: str) -> Any:
    if name in record:
        return record[name]
    lower = name.lower()
    if lower in record:
        return record[lower]
    upper = name.upper()
    if upper in record:
        return record[upper]
    for key in record:
        if isinstance(key, str) and key.lower() == lower:
            return record[key]
    return None


def _lookup_path(record: Record, path: str) -> Any:
    current: Any = record
    for part in path.split("."):
        if isinstance(current, (list, tuple)):
            current = current[0] if current else None
        if not isinstance(current, Mapping):
            return None
        current = _lookup_key(current, part)
        if current is None:
            return None
    if isinstance(current, (list, tuple)):
        return current[0] if current else None
    return current


def get_raw_value(record: Record, field_name: str) -> Any:
    """
    Reads a field without the derived date names, e.g. a literal "month" column.
    """
    if not isinstance(record, Mapping) or not field_name:
        return None
    value = _lookup_key(record, field_name)
    if value is None and "." in field_name:
        value = _lookup_path(record, field_name)
    return value


def get_record_date(record: Record):
    """
    Parsed date of the record (from "date", falling back to "cp_date"), or None.
    """
    for name in DATE_SOURCE_FIELDS:
        raw = get_raw_value(record, name)
        if raw is None or raw == "":
            continue
        return to_date(raw)
    return None


def _week_of_year(d) -> int:
    # 0-based day of year and Sunday-based weekday of Jan 1st
    jan1 = d.replace(month=1, day=1)
    day_of_year = (d - jan1).days
    jan1_weekday = (jan1.weekday() + 1) % 7
    return math.ceil((day_of_year + jan1_weekday + 1) / 7)


def derive_date_field(record: Record, field_name: str) -> Optional[str]:
    """
    Computes "month" ("Jun-24"), "year" ("2024"), "quarter" ("Q2 2024") or "week" ("Week 23, 2024").
    """
    d = get_record_date(record)
    if d is None:
        return None
    name = field_name.lower()
    if name == "month":
        return f"{MONTH_ABBREVIATIONS[d.month - 1]}-{d.year % 100:02d}"
    if name == "year":
        return str(d.year)
    if name == "quarter":
        return f"Q{(d.month - 1) // 3 + 1} {d.year}"
    if name == "week":
        return f"Week {_week_of_year(d)}, {d.year}"
    return None


def derived_sort_key(record: Record, field_name: str) -> Optional[tuple]:
    """
    Chronological sort key matching derive_date_field(), since its labels do not sort as strings.
    """
    d = get_record_date(record)
    if d is None:
        return None
    name = field_name.lower()
    if name == "month":
        return (d.year, d.month)
    if name == "year":
        return (d.year,)
    if name == "quarter":
        return (d.year, (d.month - 1) // 3 + 1)
    if name == "week":
        return (d.year, _week_of_year(d))
    return None


def is_derived_date_field(field_name: str) -> bool:
    return field_name.lower() in DERIVED_DATE_FIELDS


def get_field_value(record: Record, field_name: str) -> Any:
    """
    Case-insensitive field lookup with derived date fields. Returns None when nothing matches.
    """
    if not isinstance(record, Mapping) or not field_name:
        return None
    if is_derived_date_field(field_name):
        return derive_date_field(record, field_name)
    return get_raw_value(record, field_name)


def to_text(value: Any) -> Optional[str]:
    """
    String form of a scalar as the dashboard shows it: integral floats lose their ".0",
    booleans become "true"/"false". None stays None.
    """
    if value is None:
        return None
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return None
        if value.is_integer():
            return str(int(value))
    return str(value)


def to_number(value: Any) -> Optional[float]:
    """
    parseFloat-style coercion. Returns None for anything without a finite numeric prefix.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return None
    else:
        match = _NUMBER_PREFIX_RE.match(str(value).strip())
        if not match:
            return None
        number = float(match.group(0))
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def number_or_zero(value: Any) -> float:
    number = to_number(value)
    return 0.0 if number is None else number


def field_number(record: Record, field_name: str) -> float:
    return number_or_zero(get_field_value(record, field_name))
