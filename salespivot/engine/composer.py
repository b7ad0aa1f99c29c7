"""
salespivot/engine/composer.py

Builds multi-series results for multi-axis charts.

Each SeriesSpec is aggregated on its own (no truncation, no stacking) over the same filtered records
and the same group-by. The category axis is the union of all bucket labels, ranked exactly like a
single series but on the combined total of every series, then truncated with top_n. Each series then
gets one value per surviving category, 0 where it produced no bucket.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from .aggregation_spec import AggregationSpec, SeriesSpec
from .bucketing import BucketAssignment, is_chronological
from .fields import Record
from .pipeline import build_rank_items
from .ranking import RankItem, palette_color, rank_items
from .results import MultiSeriesResult, SeriesResult

logger = logging.getLogger(__name__)


def series_spec_for(spec: AggregationSpec, series: SeriesSpec) -> AggregationSpec:
    """
    Spec used to aggregate one series: same grouping, series' own value, full (untruncated) output.
    """
    return spec.model_copy(update={
        "value_field": series.field,
        "aggregation_fn": series.aggregation_fn,
        "top_n": None,
        "stacking": None,
        "multi_series": None,
        "filters": [],
    })


def compose_multi_series(
    records: Sequence[Record],
    spec: AggregationSpec,
) -> tuple[MultiSeriesResult, Optional[BucketAssignment]]:
    """
    records must already be filtered. Returns the result and the bucket assignment of the first series
    (every series buckets the same records, so it describes all of them).
    """
    if not spec.multi_series:
        raise ValueError("compose_multi_series requires at least one series in multi_series")

    union: dict[str, dict] = {}
    per_series: list[dict[str, float]] = []
    first_assignment: Optional[BucketAssignment] = None

    for series in spec.multi_series:
        series_pass = build_rank_items(records, series_spec_for(spec, series))
        if first_assignment is None:
            first_assignment = series_pass.assignment

        values: dict[str, float] = {}
        for item in series_pass.items:
            values[item.label] = item.value
            entry = union.setdefault(item.label, {"total": 0.0, "sort_key": item.sort_key})
            entry["total"] += item.value
        per_series.append(values)

    combined = [
        RankItem(label=label, value=entry["total"], sort_key=entry["sort_key"])
        for label, entry in union.items()
    ]
    ranked = rank_items(combined, chronological=is_chronological(spec.group_by_field), top_n=spec.top_n)
    categories = [item.label for item in ranked]

    series_results = [
        SeriesResult(
            name=series.name,
            series_type=series.series_type,
            axis_side=series.axis_side,
            color=palette_color(index),
            values=[values.get(label, 0.0) for label in categories],
        )
        for index, (series, values) in enumerate(zip(spec.multi_series, per_series))
    ]

    logger.debug("Composed %d series over %d categor(ies)", len(series_results), len(categories))
    return MultiSeriesResult(categories=categories, series=series_results), first_assignment
