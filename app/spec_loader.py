# app/spec_loader.py
"""
app/spec_loader.py

Reads a card definition (AggregationSpec) from a YAML or JSON file.

Expected structure (YAML):

  group_by_field: date
  date_granularity: month
  value_field: amount
  aggregation_fn: sum
  top_n: 12
  filters:
    - field: region
      included_values: [Kerala, Goa]
  stacking:
    segment_field: category

A file may also hold several cards under a top-level "cards" list; every card is validated.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import List

import yaml

from salespivot.engine.aggregation_spec import AggregationSpec

logger = logging.getLogger(__name__)


def load_specs(path: str) -> List[AggregationSpec]:
    """
    Reads the file and returns the validated specs, in file order.
    YAML is a superset of JSON, so both formats go through yaml.safe_load.
    """
    spec_path = Path(path)
    if not spec_path.exists():
        raise FileNotFoundError(f"Spec file not found: {path}")

    with open(spec_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if isinstance(data, dict) and isinstance(data.get("cards"), list):
        raw_cards = data["cards"]
    elif isinstance(data, dict):
        raw_cards = [data]
    else:
        raise ValueError("Spec file must contain a mapping or a 'cards' list at the top level.")

    specs = [AggregationSpec.model_validate(card) for card in raw_cards]
    logger.info("Loaded %d card spec(s) from %s", len(specs), path)
    return specs
