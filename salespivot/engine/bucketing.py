"""
salespivot/engine/bucketing.py

Maps every record to a bucket key and a human-readable label.

Grouping modes, selected from AggregationSpec.group_by_field:
- date fields ("date", "cp_date", ...): bucketed by date_granularity (day/week/month/year)
- "profit_margin": rounded margin percentage of the line ("12%")
- "order_value": fixed bands over amount ("<1K" ... ">50K")
- "month"/"year"/"quarter"/"week": derived from the record date by fields.py
- anything else: case-insensitive grouping on the field value

The first record that reaches a key decides its display label.
Records whose key cannot be computed go to the "Unknown" bucket, they are never dropped.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any, Iterable, Optional

from .aggregation_spec import AggregationSpec
from .dates import format_display_date, to_date
from .fields import (
    Record,
    derived_sort_key,
    field_number,
    get_field_value,
    get_raw_value,
    is_derived_date_field,
    to_text,
)

logger = logging.getLogger(__name__)

UNKNOWN_LABEL = "Unknown"
UNKNOWN_KEY = "unknown"

# Fields bucketed by calendar date (granularity applies).
DATE_GROUP_FIELDS = frozenset({
    "date", "cp_date", "cpdate", "transaction_date", "voucher_date", "bill_date",
})

PROFIT_MARGIN_FIELD = "profit_margin"
ORDER_VALUE_FIELD = "order_value"

# (upper bound, label); amounts at or above the last bound fall into ">50K"
ORDER_VALUE_BANDS = (
    (1_000, "<1K"),
    (5_000, "1K–5K"),
    (10_000, "5K–10K"),
    (50_000, "10K–50K"),
)
ORDER_VALUE_TOP_BAND = ">50K"

# Unknown sorts after every real period.
_UNKNOWN_SORT = (1,)


@dataclass(frozen=True)
class BucketKey:
    key: str
    label: str
    sort_key: Optional[tuple] = None


@dataclass
class Bucket:
    """
    Transient group of records sharing one key. Lives only for one pipeline execution.
    """
    key: str
    label: str
    sort_key: Optional[tuple] = None
    records: list = field(default_factory=list)


@dataclass
class BucketAssignment:
    buckets: dict
    unparseable_dates: int = 0

    @property
    def unknown_records(self) -> int:
        total = 0
        for key in (UNKNOWN_LABEL, UNKNOWN_KEY):
            bucket = self.buckets.get(key)
            if bucket is not None:
                total += len(bucket.records)
        return total


def is_date_group_field(field_name: str) -> bool:
    return field_name.lower() in DATE_GROUP_FIELDS


def is_chronological(group_by_field: str) -> bool:
    """
    True when buckets of this group-by field are ordered by time instead of by value.
    """
    return is_date_group_field(group_by_field) or is_derived_date_field(group_by_field)


def js_round(value: float) -> int:
    """
    Rounds half up, like Math.round ("12.5" -> 13, "-12.5" -> -12).
    """
    return math.floor(value + 0.5)


def _unknown_date() -> BucketKey:
    return BucketKey(UNKNOWN_LABEL, UNKNOWN_LABEL, _UNKNOWN_SORT)


def _date_bucket(raw: Any, granularity: Optional[str]) -> BucketKey:
    d = to_date(raw)
    if d is None:
        return _unknown_date()

    if granularity == "week":
        # weeks start on Sunday; numbered within the month of the week start
        week_start = d - timedelta(days=(d.weekday() + 1) % 7)
        n = math.ceil((week_start.day + 6) / 7)
        key = f"{week_start.year}-W{n}"
        return BucketKey(key, key, (0, key))
    if granularity == "month":
        key = f"{d.year:04d}-{d.month:02d}"
        return BucketKey(key, key, (0, key))
    if granularity == "year":
        key = f"{d.year:04d}"
        return BucketKey(key, key, (0, d.year))

    iso = d.isoformat()
    return BucketKey(iso, format_display_date(d), (0, iso))


def _profit_margin_bucket(record: Record) -> BucketKey:
    amount = field_number(record, "amount")
    profit = field_number(record, "profit")
    margin = profit / amount * 100 if amount > 0 else 0.0
    key = f"{js_round(margin)}%"
    return BucketKey(key, key)


def order_value_band(amount: float) -> str:
    for upper, label in ORDER_VALUE_BANDS:
        if amount < upper:
            return label
    return ORDER_VALUE_TOP_BAND


def _derived_bucket(record: Record, field_name: str) -> BucketKey:
    value = get_field_value(record, field_name)
    if value is None:
        return BucketKey(UNKNOWN_LABEL, UNKNOWN_LABEL, _UNKNOWN_SORT)
    return BucketKey(value, value, (0, derived_sort_key(record, field_name)))


def _generic_bucket(record: Record, field_name: str) -> BucketKey:
    text = to_text(get_field_value(record, field_name))
    text = text.strip() if text is not None else ""
    if not text:
        return BucketKey(UNKNOWN_KEY, UNKNOWN_LABEL)
    return BucketKey(text.lower(), text)


def bucket_key_and_label(record: Record, spec: AggregationSpec) -> BucketKey:
    """
    Computes the bucket of one record. Never raises for malformed record data.
    """
    group_by = spec.group_by_field
    name = group_by.lower()

    if name in DATE_GROUP_FIELDS:
        return _date_bucket(get_raw_value(record, group_by), spec.date_granularity)
    if name == PROFIT_MARGIN_FIELD:
        return _profit_margin_bucket(record)
    if name == ORDER_VALUE_FIELD:
        key = order_value_band(field_number(record, "amount"))
        return BucketKey(key, key)
    if is_derived_date_field(name):
        return _derived_bucket(record, name)
    return _generic_bucket(record, group_by)


def assign_buckets(records: Iterable[Record], spec: AggregationSpec) -> BucketAssignment:
    """
    Partitions records into buckets keyed by bucket key, in first-encounter order.
    """
    buckets: dict = {}
    date_mode = is_date_group_field(spec.group_by_field)
    unparseable = 0

    for record in records:
        bk = bucket_key_and_label(record, spec)
        if date_mode and bk.key == UNKNOWN_LABEL:
            unparseable += 1
        bucket = buckets.get(bk.key)
        if bucket is None:
            bucket = Bucket(key=bk.key, label=bk.label, sort_key=bk.sort_key)
            buckets[bk.key] = bucket
        bucket.records.append(record)

    if unparseable:
        logger.warning(
            "%d record(s) with unparseable '%s' values routed to the %s bucket",
            unparseable, spec.group_by_field, UNKNOWN_LABEL,
        )
    logger.debug("Assigned records to %d bucket(s) on '%s'", len(buckets), spec.group_by_field)
    return BucketAssignment(buckets=buckets, unparseable_dates=unparseable)
