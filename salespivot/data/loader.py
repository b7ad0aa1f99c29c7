"""
salespivot/data/loader.py

Loads sales line-items from disk as plain records (list of dicts) for the engine.
Moreover, it:
- reads CSV with pandas, keeping every cell as text (the engine does its own coercion)
- reads JSON as a list of objects, or an object wrapping one under "vouchers" / "records"
- reports the row count and the date range found in the records

Parsing upstream voucher XML and fetching from the accounting server are done elsewhere.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd

from salespivot.engine.dates import normalize_date
from salespivot.engine.fields import get_raw_value

from .schema import SalesSchema

logger = logging.getLogger(__name__)

# Keys under which a JSON export may wrap its list of line-items.
_JSON_LIST_KEYS = ("vouchers", "records", "data")


@dataclass(frozen=True)
class LoadResult:
    """
    Class that is used to return the records and the min and max dates found in them
    """
    records: List[Dict[str, Any]]
    min_date: Optional[str]
    max_date: Optional[str]

    @property
    def row_count(self) -> int:
        return len(self.records)


class SalesRecordLoader:
    """
    Class defined to load sales records from CSV or JSON files.
    We initialize the class with the schema attribute, taken from SalesSchema, to know which fields hold dates.
    """
    def __init__(self, schema: SalesSchema | None = None) -> None:
        self.schema = schema or SalesSchema.sales_default()

    def load(self, path: str) -> LoadResult:
        """
        Method that returns the LoadResult with the records plus the most and least recent dates.
        """
        file_path = Path(path)
        if not file_path.exists():
            raise FileNotFoundError(f"Records file not found: {path}")

        suffix = file_path.suffix.lower()
        if suffix == ".csv":
            records = self._read_csv(file_path)
        elif suffix == ".json":
            records = self._read_json(file_path)
        else:
            raise ValueError(f"Unsupported records file type '{suffix}' (expected .csv or .json)")

        min_date, max_date = self._date_range(records)
        logger.info("Loaded %d record(s) from %s (dates %s..%s)", len(records), path, min_date, max_date)
        return LoadResult(records=records, min_date=min_date, max_date=max_date)

    @staticmethod
    def _read_csv(path: Path) -> List[Dict[str, Any]]:
        # dtype=str + keep_default_na=False keeps "" for empty cells instead of NaN
        df = pd.read_csv(path, dtype=str, keep_default_na=False)
        return df.to_dict(orient="records")

    @staticmethod
    def _read_json(path: Path) -> List[Dict[str, Any]]:
        with path.open("r", encoding="utf-8") as f:
            payload = json.load(f)

        if isinstance(payload, dict):
            for key in _JSON_LIST_KEYS:
                if isinstance(payload.get(key), list):
                    payload = payload[key]
                    break

        if not isinstance(payload, list):
            raise ValueError("JSON records file must contain a list of objects")

        records = [r for r in payload if isinstance(r, dict)]
        skipped = len(payload) - len(records)
        if skipped:
            logger.warning("Skipped %d non-object entr(ies) in %s", skipped, path)
        return records

    def _date_range(self, records: List[Dict[str, Any]]) -> tuple[Optional[str], Optional[str]]:
        """
        Min and max ISO dates over the schema's date fields (first one present per record).
        """
        dates = []
        for record in records:
            for name in self.schema.date_fields:
                iso = normalize_date(get_raw_value(record, name))
                if iso is not None:
                    dates.append(iso)
                    break
        if not dates:
            return None, None
        return min(dates), max(dates)
