"""
salespivot/engine/segmenter.py

Second-level grouping inside a bucket, used by stacked bar charts.

Segments are grouped on the trimmed segment value ("Unknown" when absent), aggregated with the same
value field and function as the bucket, and sorted by value descending. The bucket's stacked total
is the sum of its segment values.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from .aggregator import aggregate
from .bucketing import UNKNOWN_LABEL
from .fields import Record, get_field_value, to_text


@dataclass(frozen=True)
class Segment:
    label: str
    value: float


def segment_label(record: Record, segment_field: str) -> str:
    text = to_text(get_field_value(record, segment_field))
    text = text.strip() if text is not None else ""
    return text or UNKNOWN_LABEL


def build_segments(
    records: Sequence[Record],
    segment_field: str,
    value_field: str,
    aggregation_fn: str,
) -> list[Segment]:
    groups: dict[str, list] = {}
    for record in records:
        groups.setdefault(segment_label(record, segment_field), []).append(record)

    segments = [
        Segment(label=label, value=aggregate(members, value_field, aggregation_fn))
        for label, members in groups.items()
    ]
    # sorted() is stable, equal values keep encounter order
    return sorted(segments, key=lambda s: s.value, reverse=True)


def stacked_total(segments: Sequence[Segment]) -> float:
    return float(sum(s.value for s in segments))
