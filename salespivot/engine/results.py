"""
salespivot/engine/results.py

Output contract handed to the chart renderers.

- single series: list[BucketResult]
- multi series: MultiSeriesResult (categories + positionally aligned series values)

Results are plain frozen dataclasses; to_dict() gives the JSON shape the dashboard consumes.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Optional, Union


@dataclass(frozen=True)
class SegmentResult:
    label: str
    value: float
    color: str


@dataclass(frozen=True)
class BucketResult:
    label: str
    value: float
    color: str
    segments: Optional[list[SegmentResult]] = None

    def to_dict(self) -> dict[str, Any]:
        out = asdict(self)
        if self.segments is None:
            out.pop("segments")
        return out


@dataclass(frozen=True)
class SeriesResult:
    name: str
    series_type: str
    axis_side: str
    color: str
    values: list[float] = field(default_factory=list)


@dataclass(frozen=True)
class MultiSeriesResult:
    categories: list[str] = field(default_factory=list)
    series: list[SeriesResult] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class PipelineDiagnostics:
    """
    Counters describing one execution, for callers that want to surface data quality issues.

    total_records: records given to the engine
    filtered_records: records left after filters
    unparseable_dates: records whose date could not be bucketed (date group-by only)
    unknown_bucket_records: records that ended in the Unknown bucket
    """
    total_records: int = 0
    filtered_records: int = 0
    unparseable_dates: int = 0
    unknown_bucket_records: int = 0


PivotResult = Union[list[BucketResult], MultiSeriesResult]
