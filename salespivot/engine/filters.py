"""
salespivot/engine/filters.py

Inclusion filters applied to records before bucketing.

A record passes when, for every active filter, its trimmed and case-folded field value is one of the
filter's included values (AND across filters, OR inside one filter). A record that lacks the field
fails that filter.
"""

from __future__ import annotations

from typing import Iterable, Sequence

from .aggregation_spec import Filter
from .fields import Record, get_field_value, to_text


def normalize_filter_value(value) -> str | None:
    text = to_text(value)
    if text is None:
        return None
    return text.strip().casefold()


def passes_filter(record: Record, flt: Filter) -> bool:
    if not flt.is_active:
        return True
    value = normalize_filter_value(get_field_value(record, flt.field))
    if value is None:
        return False
    return value in flt.included_values


def passes_filters(record: Record, filters: Sequence[Filter]) -> bool:
    return all(passes_filter(record, f) for f in filters)


def apply_filters(records: Iterable[Record], filters: Sequence[Filter]) -> list[Record]:
    """
    Returns the records passing every filter, in input order.
    """
    active = [f for f in filters if f.is_active]
    if not active:
        return list(records)
    return [r for r in records if passes_filters(r, active)]
