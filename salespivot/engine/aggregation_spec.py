"""
salespivot/engine/aggregation_spec.py

Defines the structured "AggregationSpec" used to describe one chart/card.
An AggregationSpec is produced by:
- the dashboard card builder (built-in charts and user-defined custom cards)
- a YAML/JSON spec file when running the CLI

Then the AggregationSpec is executed on a list of records by pivot_engine.py.

"""

from __future__ import annotations

from typing import Any, Literal, Mapping, Optional, Set, Union

from pydantic import BaseModel, Field, field_validator

from .fields import to_text

# Allowed reductions applied to the values of one bucket.
AggregationFn = Literal["sum", "count", "average", "min", "max"]

# Date bucketing resolution, only used when grouping by a date field.
DateGranularity = Literal["day", "week", "month", "year"]

# How a series is drawn in a multi-axis chart and which y-axis it uses.
SeriesType = Literal["bar", "line", "area"]
AxisSide = Literal["left", "right"]


def _require_name(value: str) -> str:
    value = value.strip()
    if not value:
        raise ValueError("field name must not be blank")
    return value


class Filter(BaseModel):
    """
    Inclusion filter on one field, e.g. region in {"kerala", "goa"}.

    Values are stored trimmed and case-folded, the same normalization applied to the record value
    before the membership test. An empty set means "no constraint".
    """
    field: str
    included_values: Set[str] = Field(default_factory=set)

    @field_validator("field")
    @classmethod
    def _check_field(cls, value: str) -> str:
        return _require_name(value)

    @field_validator("included_values", mode="before")
    @classmethod
    def _normalize_values(cls, values: Any) -> Any:
        if values is None:
            return set()
        if isinstance(values, str):
            values = [values]
        texts = (to_text(v) for v in values)
        return {t.strip().casefold() for t in texts if t is not None}

    @property
    def is_active(self) -> bool:
        return bool(self.included_values)


class StackingSpec(BaseModel):
    """
    Second-level grouping inside every bucket, used by stacked bars.
    """
    segment_field: str

    @field_validator("segment_field")
    @classmethod
    def _check_field(cls, value: str) -> str:
        return _require_name(value)


class SeriesSpec(BaseModel):
    """
    One line/bar of a multi-axis chart.
    Each series is aggregated on its own and then aligned on the shared category axis.
    """
    field: str
    aggregation_fn: AggregationFn = "sum"
    series_type: SeriesType = "bar"
    axis_side: AxisSide = "left"
    display_label: Optional[str] = None

    @field_validator("field")
    @classmethod
    def _check_field(cls, value: str) -> str:
        return _require_name(value)

    @property
    def name(self) -> str:
        return self.display_label or self.field


class AggregationSpec(BaseModel):
    """
    Main structured request.

    - group_by_field: dimension that defines the buckets (a record field, "date", a derived
      date field such as "month", or a banding rule such as "order_value")
    - date_granularity: day/week/month/year, only meaningful for date fields (default day)
    - value_field + aggregation_fn: what to compute per bucket
    - filters: inclusion filters applied before bucketing
    - top_n: keep only the first N buckets after ranking (None or <= 0 keeps all)
    - stacking: optional sub-segmentation of every bucket
    - multi_series: optional list of series sharing the category axis; when present the
      value_field/aggregation_fn pair is ignored and each series brings its own
    """
    group_by_field: str
    value_field: str
    aggregation_fn: AggregationFn
    date_granularity: Optional[DateGranularity] = None

    filters: list[Filter] = Field(default_factory=list)

    top_n: Optional[int] = None
    stacking: Optional[StackingSpec] = None
    multi_series: Optional[list[SeriesSpec]] = None

    @field_validator("group_by_field", "value_field")
    @classmethod
    def _check_names(cls, value: str) -> str:
        return _require_name(value)

    @property
    def is_multi_series(self) -> bool:
        return bool(self.multi_series)

    @property
    def segment_field(self) -> Optional[str]:
        return self.stacking.segment_field if self.stacking else None


SpecLike = Union[AggregationSpec, Mapping[str, Any]]


def coerce_spec(spec: SpecLike) -> AggregationSpec:
    """
    Accepts either an AggregationSpec or a plain mapping (e.g. parsed from a YAML card definition).
    Validation errors are raised as pydantic.ValidationError.
    """
    if isinstance(spec, AggregationSpec):
        return spec
    return AggregationSpec.model_validate(spec)
