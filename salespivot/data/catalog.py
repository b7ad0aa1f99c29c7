"""
salespivot/data/catalog.py

Builds the list of fields offered by the custom card builder (group-by, value and filter pickers).

The first few records are traversed (nested mappings and the first element of lists, up to a fixed
depth) and every scalar path is classified:
- "category": text, booleans, and any field whose name marks it as an id, date, code or contact
- "value": numbers and numeric strings, with a default aggregation ("average" for rates, prices,
  margins and percentages, "sum" otherwise)

Paths use dot notation ("ledgerentries.amount") and are resolved by the engine's field accessor.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence

from salespivot.engine.fields import to_number

from .schema import HIERARCHY_MAP, HIERARCHY_ORDER, SalesSchema

logger = logging.getLogger(__name__)

SAMPLE_SIZE = 10
MAX_DEPTH = 5


@dataclass(frozen=True)
class FieldInfo:
    path: str
    label: str
    type: str  # "category" | "value"
    hierarchy: str
    aggregation: Optional[str] = None


@dataclass
class FieldGroup:
    name: str
    level: str
    fields: List[FieldInfo] = field(default_factory=list)


@dataclass(frozen=True)
class FieldCatalog:
    fields: List[FieldInfo]
    grouped: Dict[str, FieldGroup]

    def category_fields(self) -> List[FieldInfo]:
        return [f for f in self.fields if f.type == "category"]

    def value_fields(self) -> List[FieldInfo]:
        return [f for f in self.fields if f.type == "value"]


def hierarchy_level(field_path: str) -> str:
    parts = [p.lower() for p in field_path.split(".")]
    first = parts[0]
    second = parts[1] if len(parts) > 1 else None

    if first in ("ledgerentries", "allledgerentries"):
        return "billallocations" if second == "billallocations" else "ledgerentries"
    if first in ("allinventoryentries", "inventoryentries"):
        if second in ("batchallocation", "accountingallocation"):
            return second
        return "allinventoryentries"
    if first == "address":
        return "address"
    return "voucher"


def format_field_label(field_path: str) -> str:
    """
    "ledgerentries.billAmount" -> "Ledger Entries → Bill Amount"
    """
    parts = field_path.split(".")
    words = re.sub(r"([A-Z])", r" \1", parts[-1]).replace("_", " ")
    formatted = re.sub(r"\b\w", lambda m: m.group(0).upper(), words).strip()
    formatted = re.sub(r"\s+", " ", formatted)
    if len(parts) > 1:
        level = hierarchy_level(field_path)
        return f"{HIERARCHY_MAP.get(level, level)} → {formatted}"
    return formatted


def field_type(value: Any, field_path: str, schema: SalesSchema) -> Optional[str]:
    """
    "category", "value", or None when the sample value says nothing (missing/empty).
    """
    if schema.is_forced_category(field_path):
        return "category"
    if value is None or value == "":
        return None
    if isinstance(value, bool):
        return "category"
    if isinstance(value, (int, float)):
        return "value"
    if isinstance(value, str):
        return "value" if to_number(value) is not None else "category"
    return "category"


class _Collector:
    def __init__(self, schema: SalesSchema) -> None:
        self.schema = schema
        self.fields: Dict[str, FieldInfo] = {}

    def visit(self, obj: Any, path: str = "", depth: int = 0) -> None:
        if depth >= MAX_DEPTH or not isinstance(obj, Mapping):
            return
        for key, value in obj.items():
            key = str(key)
            if key.startswith("_") or key.startswith("$"):
                continue
            field_path = f"{path}.{key}" if path else key

            if isinstance(value, Mapping):
                self.visit(value, field_path, depth + 1)
                continue
            if isinstance(value, (list, tuple)):
                if value and isinstance(value[0], Mapping):
                    self.visit(value[0], field_path, depth + 1)
                    continue
                value = value[0] if value else None

            self._add(field_path, value)

    def _add(self, field_path: str, value: Any) -> None:
        kind = field_type(value, field_path, self.schema)
        if kind is None or field_path.lower() in self.fields:
            return
        self.fields[field_path.lower()] = FieldInfo(
            path=field_path,
            label=format_field_label(field_path),
            type=kind,
            hierarchy=hierarchy_level(field_path),
            aggregation=self.schema.default_aggregation(field_path) if kind == "value" else None,
        )


def _hierarchy_rank(level: str) -> int:
    return HIERARCHY_ORDER.index(level) if level in HIERARCHY_ORDER else len(HIERARCHY_ORDER)


def extract_field_catalog(records: Sequence[Mapping[str, Any]], schema: SalesSchema | None = None) -> FieldCatalog:
    """
    Field catalog of a record set. An empty record set gives an empty catalog.
    """
    collector = _Collector(schema or SalesSchema.sales_default())
    for record in records[:SAMPLE_SIZE]:
        if record:
            collector.visit(record)

    fields = sorted(collector.fields.values(), key=lambda f: (_hierarchy_rank(f.hierarchy), f.label.lower()))

    grouped: Dict[str, FieldGroup] = {}
    for info in fields:
        group = grouped.get(info.hierarchy)
        if group is None:
            group = FieldGroup(name=HIERARCHY_MAP.get(info.hierarchy, info.hierarchy), level=info.hierarchy)
            grouped[info.hierarchy] = group
        group.fields.append(info)

    logger.info("Extracted %d field(s) from %d sampled record(s)", len(fields), min(len(records), SAMPLE_SIZE))
    return FieldCatalog(fields=fields, grouped=grouped)
