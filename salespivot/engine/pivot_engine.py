"""
salespivot/engine/pivot_engine.py

Executes an AggregationSpec on a list of sales records.

Records are plain mappings (one sale line-item each) with no fixed schema; all field reads go through
fields.py. The engine never mutates the records or the spec and keeps no state between calls, so it is
safe to call on every re-render. Memoizing on (records, spec) is up to the caller.

The output is:
- a list of BucketResult for single-series specs
- a MultiSeriesResult for specs with multi_series

It is also added an execution method that returns:
- the result
- the filtered subset the result was computed from
- diagnostics (record counts, unparseable dates)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, Optional

from .aggregation_spec import AggregationSpec, SpecLike, coerce_spec
from .bucketing import BucketAssignment, is_chronological
from .composer import compose_multi_series
from .fields import Record
from .filters import apply_filters
from .pipeline import build_rank_items
from .ranking import rank_items, to_bucket_results
from .results import PipelineDiagnostics, PivotResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ExecutionResult:
    """
    result: the chart-ready output
    subset: the records left after applying the filters (input order)
    diagnostics: counters about the execution
    """
    result: PivotResult
    subset: tuple
    diagnostics: PipelineDiagnostics


class PivotEngine:
    """
    Executes AggregationSpecs on an immutable snapshot of the records.
    The same engine can run any number of specs; each call builds and discards its own buckets.
    """
    def __init__(self, records: Iterable[Record]) -> None:
        self.records = tuple(records)

    def execute_with_subset(self, spec: SpecLike) -> ExecutionResult:
        """
        Executes the spec and returns the result together with the filtered subset and diagnostics.
        Useful when the caller wants to show which records a chart was built from.
        """
        spec = coerce_spec(spec)
        subset = tuple(apply_filters(self.records, spec.filters))
        logger.debug("Filters kept %d of %d record(s)", len(subset), len(self.records))

        if spec.is_multi_series:
            result, assignment = compose_multi_series(subset, spec)
        else:
            result, assignment = self._run_single_series(subset, spec)

        diagnostics = self._diagnostics(subset, assignment)
        return ExecutionResult(result=result, subset=subset, diagnostics=diagnostics)

    def execute(self, spec: SpecLike) -> PivotResult:
        return self.execute_with_subset(spec).result

    @staticmethod
    def _run_single_series(records: tuple, spec: AggregationSpec):
        """
        Example: "Top 10 customers by revenue"
            - group_by_field: "customer"
            - value_field: "amount", aggregation_fn: "sum"
            - top_n: 10

        Example: "Monthly revenue split by region"
            - group_by_field: "date", date_granularity: "month"
            - value_field: "amount", aggregation_fn: "sum"
            - stacking: {segment_field: "region"}
        """
        series_pass = build_rank_items(records, spec)
        ranked = rank_items(
            series_pass.items,
            chronological=is_chronological(spec.group_by_field),
            top_n=spec.top_n,
        )
        return to_bucket_results(ranked), series_pass.assignment

    def _diagnostics(self, subset: tuple, assignment: Optional[BucketAssignment]) -> PipelineDiagnostics:
        if assignment is None:
            return PipelineDiagnostics(total_records=len(self.records), filtered_records=len(subset))
        return PipelineDiagnostics(
            total_records=len(self.records),
            filtered_records=len(subset),
            unparseable_dates=assignment.unparseable_dates,
            unknown_bucket_records=assignment.unknown_records,
        )


def run_pivot(records: Iterable[Record], spec: SpecLike) -> PivotResult:
    """
    Functional entry point: (records, spec) -> result.
    """
    return PivotEngine(records).execute(spec)

