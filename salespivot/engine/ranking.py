"""
salespivot/engine/ranking.py

Orders buckets, applies top-N truncation and assigns colors.

- date group-bys: ascending by period, "Unknown" last
- everything else: descending by value; ties keep encounter order (stable sort)
- top_n is applied after sorting, so the kept buckets are always the true first N
- colors cycle through a fixed palette by output position; stacked buckets get
  STACKED_BUCKET_COLOR and their segments cycle the palette on their own
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence, TypeVar

from .results import BucketResult, SegmentResult
from .segmenter import Segment

PALETTE: tuple[str, ...] = (
    "#3b82f6",  # blue
    "#10b981",  # green
    "#f59e0b",  # amber
    "#ef4444",  # red
    "#8b5cf6",  # violet
    "#ec4899",  # pink
    "#06b6d4",  # cyan
    "#84cc16",  # lime
    "#f97316",  # orange
    "#6366f1",  # indigo
    "#14b8a6",  # teal
    "#f43f5e",  # rose
    "#8b5a2b",  # brown
    "#6b7280",  # gray
    "#dc2626",
    "#059669",
    "#d97706",
    "#7c3aed",
    "#0891b2",
    "#ca8a04",
)

# Stacked bars are drawn from their segments, the bucket itself carries no fill.
STACKED_BUCKET_COLOR = "transparent"


def palette_color(index: int) -> str:
    return PALETTE[index % len(PALETTE)]


@dataclass(frozen=True)
class RankItem:
    label: str
    value: float
    sort_key: Optional[tuple] = None
    segments: Optional[list[Segment]] = None


T = TypeVar("T", bound=RankItem)


def sort_items(items: Sequence[T], chronological: bool) -> list[T]:
    if chronological:
        return sorted(items, key=lambda i: i.sort_key if i.sort_key is not None else (0, i.label))
    return sorted(items, key=lambda i: i.value, reverse=True)


def truncate(items: list[T], top_n: Optional[int]) -> list[T]:
    if top_n is not None and top_n > 0:
        return items[:top_n]
    return items


def rank_items(items: Sequence[T], *, chronological: bool, top_n: Optional[int]) -> list[T]:
    return truncate(sort_items(items, chronological), top_n)


def to_bucket_results(items: Sequence[RankItem]) -> list[BucketResult]:
    out: list[BucketResult] = []
    for index, item in enumerate(items):
        if item.segments is None:
            out.append(BucketResult(label=item.label, value=item.value, color=palette_color(index)))
            continue
        segments = [
            SegmentResult(label=s.label, value=s.value, color=palette_color(i))
            for i, s in enumerate(item.segments)
        ]
        out.append(BucketResult(
            label=item.label,
            value=item.value,
            color=STACKED_BUCKET_COLOR,
            segments=segments,
        ))
    return out
