# app/main.py
"""
app/main.py

CLI entrypoint for running dashboard cards on a local export of sales records.

Main responsibilities:
- Load environment variables (.env)
- Load Settings from salespivot/config.py
- Load the sales records (CSV or JSON)
- Show the headline KPIs and, on request, the field catalog of the dataset
- Load one or more card specs (YAML or JSON)
- Run every card through the PivotEngine and render the results as tables

Run:
  DATASET_PATH=sales.csv SPEC_PATH=cards.yaml python -m app.main
  DATASET_PATH=sales.csv SPEC_PATH= python -m app.main      (fields only)
"""

from __future__ import annotations

import logging

from dotenv import load_dotenv

from salespivot.config import Settings, get_settings
from salespivot.data.catalog import extract_field_catalog
from salespivot.data.loader import SalesRecordLoader
from salespivot.engine.aggregation_spec import AggregationSpec
from salespivot.engine.metrics import compute_sales_metrics
from salespivot.engine.pivot_engine import PivotEngine
from salespivot.engine.results import MultiSeriesResult

from app.render import (
    render_buckets,
    render_diagnostics,
    render_field_catalog,
    render_header,
    render_info_panel,
    render_kpi_panel,
    render_multi_series,
)
from app.spec_loader import load_specs

# Initializing here the logger for the main module, other modules will initialize their own loggers with their respective __name__.
logger = logging.getLogger(__name__)


def _configure_logging(level: int) -> None:
    """
    Configure basic logging for the CLI app. Logs go to stderr (standard behavior).
    """
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def card_title(spec: AggregationSpec) -> str:
    if spec.is_multi_series:
        names = ", ".join(s.name for s in spec.multi_series or [])
        return f"{names} by {spec.group_by_field}"
    granularity = f" ({spec.date_granularity})" if spec.date_granularity else ""
    return f"{spec.aggregation_fn}({spec.value_field}) by {spec.group_by_field}{granularity}"


def run_card(engine: PivotEngine, spec: AggregationSpec, cfg: Settings) -> None:
    exec_res = engine.execute_with_subset(spec)
    title = card_title(spec)

    if isinstance(exec_res.result, MultiSeriesResult):
        render_multi_series(exec_res.result, title=title, max_rows=cfg.max_render_rows)
    else:
        render_buckets(
            exec_res.result,
            title=title,
            max_rows=cfg.max_render_rows,
            show_segments=cfg.show_segments,
        )
    render_diagnostics(exec_res.diagnostics)
    logger.info("Card executed ok (%s, rows_used=%d)", title, exec_res.diagnostics.filtered_records)


def main() -> None:
    load_dotenv()

    # Define environment variables as attributes of a Settings dataclass (see salespivot/config.py)
    cfg = get_settings()
    _configure_logging(cfg.log_level)

    load_result = SalesRecordLoader().load(cfg.dataset_path)
    # An empty SPEC_PATH only describes the dataset
    specs = load_specs(cfg.spec_path) if cfg.spec_path else []

    render_header(cfg.app_title)
    render_info_panel(
        rows=load_result.row_count,
        min_date=load_result.min_date,
        max_date=load_result.max_date,
        cards=len(specs),
    )
    render_kpi_panel(compute_sales_metrics(load_result.records))
    if cfg.show_fields or not specs:
        render_field_catalog(extract_field_catalog(load_result.records), max_rows=cfg.max_render_rows)

    engine = PivotEngine(load_result.records)
    for spec in specs:
        run_card(engine, spec, cfg)


if __name__ == "__main__":
    main()
