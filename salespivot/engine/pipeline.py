"""
salespivot/engine/pipeline.py

Single-series pass over already filtered records: bucket -> aggregate (-> segment).
Ranking and coloring are left to the caller so the multi-series composer can rank the union.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from .aggregation_spec import AggregationSpec
from .aggregator import aggregate
from .bucketing import BucketAssignment, assign_buckets
from .fields import Record
from .ranking import RankItem
from .segmenter import build_segments, stacked_total

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SeriesPass:
    items: list[RankItem]
    assignment: BucketAssignment


def build_rank_items(records: Sequence[Record], spec: AggregationSpec) -> SeriesPass:
    """
    One RankItem per bucket, in first-encounter order.
    With stacking, the bucket value is the sum of its segment values.
    """
    assignment = assign_buckets(records, spec)
    segment_field = spec.segment_field

    items: list[RankItem] = []
    for bucket in assignment.buckets.values():
        if segment_field:
            segments = build_segments(bucket.records, segment_field, spec.value_field, spec.aggregation_fn)
            items.append(RankItem(
                label=bucket.label,
                value=stacked_total(segments),
                sort_key=bucket.sort_key,
                segments=segments,
            ))
        else:
            items.append(RankItem(
                label=bucket.label,
                value=aggregate(bucket.records, spec.value_field, spec.aggregation_fn),
                sort_key=bucket.sort_key,
            ))

    logger.debug(
        "Aggregated %d bucket(s): value_field=%s fn=%s stacked=%s",
        len(items), spec.value_field, spec.aggregation_fn, bool(segment_field),
    )
    return SeriesPass(items=items, assignment=assignment)
