"""
salespivot/engine/aggregator.py

Reduces the records of one bucket to a single number.

Aggregation functions: sum, count, average, min, max.

Besides plain record fields, value_field can name a synthetic measure:
- tax_amount: cgst + sgst per record, then reduced normally
- order_value: amount per record, then reduced normally
- profit_margin: total profit / total amount * 100 over the whole bucket
- avg_order_value: total amount / number of distinct orders (masterid)
- profit_per_quantity: total profit / total quantity
- transactions, unique_customers, unique_items, unique_orders: always counts
  (records, or distinct customer / item / masterid values)

Every ratio is guarded: a zero denominator gives 0, never NaN or inf.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional, Sequence

from .fields import Record, field_number, get_field_value, to_number, to_text

logger = logging.getLogger(__name__)

# Count-style measures and the field whose distinct values they count (None = count records).
COUNT_FIELDS: dict[str, Optional[str]] = {
    "transactions": None,
    "unique_customers": "customer",
    "unique_items": "item",
    "unique_orders": "masterid",
}

# Measures computed once over the whole bucket instead of per record.
RATIO_FIELDS = frozenset({"profit_margin", "avg_order_value", "profit_per_quantity"})

# Per-record synthetic values, reduced like any other field.
_PER_RECORD_VALUES: dict[str, Callable[[Record], float]] = {
    "tax_amount": lambda r: field_number(r, "cgst") + field_number(r, "sgst"),
    "order_value": lambda r: field_number(r, "amount"),
}


def safe_ratio(numerator: float, denominator: float) -> float:
    if denominator <= 0:
        return 0.0
    return numerator / denominator


def _total(records: Sequence[Record], field_name: str) -> float:
    return sum(field_number(r, field_name) for r in records)


def count_distinct(records: Sequence[Record], field_name: str) -> int:
    """
    Number of distinct non-empty values of a field (compared on their trimmed text).
    """
    seen = set()
    for record in records:
        text = to_text(get_field_value(record, field_name))
        if text is None:
            continue
        text = text.strip()
        if text:
            seen.add(text)
    return len(seen)


def _ratio_value(records: Sequence[Record], value_field: str) -> float:
    if value_field == "profit_margin":
        return safe_ratio(_total(records, "profit"), _total(records, "amount")) * 100
    if value_field == "avg_order_value":
        return safe_ratio(_total(records, "amount"), count_distinct(records, "masterid"))
    if value_field == "profit_per_quantity":
        return safe_ratio(_total(records, "profit"), _total(records, "quantity"))
    raise ValueError(f"Unsupported ratio field: {value_field}")


def reduce_values(values: Sequence[float], aggregation_fn: str) -> float:
    if aggregation_fn == "sum":
        return float(sum(values))
    if aggregation_fn == "count":
        return float(len(values))
    if aggregation_fn == "average":
        return float(sum(values)) / len(values) if values else 0.0
    if aggregation_fn == "min":
        return float(min(values)) if values else 0.0
    if aggregation_fn == "max":
        return float(max(values)) if values else 0.0
    raise ValueError(f"Unsupported aggregation function: {aggregation_fn}")


def _record_values(records: Sequence[Record], value_field: str, aggregation_fn: str) -> list[float]:
    per_record = _PER_RECORD_VALUES.get(value_field)
    if per_record is not None:
        return [per_record(r) for r in records]

    raw = [to_number(get_field_value(r, value_field)) for r in records]
    if aggregation_fn in ("min", "max"):
        # min/max only look at values that actually parse
        return [v for v in raw if v is not None]
    return [0.0 if v is None else v for v in raw]


def aggregate(records: Sequence[Record], value_field: str, aggregation_fn: str) -> float:
    """
    Aggregated value of one bucket. An empty bucket yields 0 for every function.
    """
    name = value_field.lower()

    if name in COUNT_FIELDS:
        distinct_on = COUNT_FIELDS[name]
        if distinct_on is None:
            return float(len(records))
        return float(count_distinct(records, distinct_on))

    if name in RATIO_FIELDS:
        return _ratio_value(records, name)

    if aggregation_fn == "count":
        return float(len(records))

    values = _record_values(records, name if name in _PER_RECORD_VALUES else value_field, aggregation_fn)
    return reduce_values(values, aggregation_fn)
