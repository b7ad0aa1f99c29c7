# app/render.py
"""
app/render.py

Terminal rendering utilities using rich.

This module keeps all CLI presentation concerns in one place.

We render:
- header / session info panels
- headline KPIs of the dataset
- the field catalog (names usable in card specs)
- single-series bucket results (with stacked segments when present)
- multi-series results (one column per series)
- diagnostics of the execution

Results are first turned into pandas DataFrames so every table goes through the same helper.
All printing is done via Rich's Console.
"""

from __future__ import annotations

import logging
from typing import List, Optional

import pandas as pd
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from salespivot.data.catalog import FieldCatalog
from salespivot.data.schema import HIERARCHY_MAP
from salespivot.engine.metrics import SalesMetrics
from salespivot.engine.results import BucketResult, MultiSeriesResult, PipelineDiagnostics

logger = logging.getLogger(__name__)
console = Console()


def render_header(title: str) -> None:
    """
    Prints a simple header panel at startup.
    """
    panel = Panel.fit(Text(title, style="bold"), title="Sales Pivot", border_style="cyan")
    console.print(panel)
    logger.info("Rendered header: %s", title)


def render_info_panel(*, rows: int, min_date: Optional[str], max_date: Optional[str], cards: int) -> None:
    """
    Prints dataset information (useful for debugging and transparency).
    """
    info = (
        f"[bold]Dataset[/bold]\n"
        f"- Rows: {rows}\n"
        f"- Date range: {min_date or 'n/a'} → {max_date or 'n/a'}\n\n"
        f"[bold]Cards[/bold]\n"
        f"- Loaded: {cards}"
    )
    console.print(Panel(info, title="Session", border_style="green"))
    logger.info("Rendered info panel (rows=%d, range=%s..%s)", rows, min_date, max_date)


def render_kpi_panel(metrics: SalesMetrics) -> None:
    """
    Prints the headline KPIs of the whole dataset.
    """
    info = (
        f"- Revenue: {metrics.total_revenue:,.2f}\n"
        f"- Orders: {metrics.total_orders}\n"
        f"- Quantity: {_format_cell(metrics.total_quantity)}\n"
        f"- Customers: {metrics.unique_customers}\n"
        f"- Avg order value: {metrics.avg_order_value:,.2f}"
    )
    console.print(Panel(info, title="KPIs", border_style="magenta"))
    logger.info("Rendered KPI panel (orders=%d)", metrics.total_orders)


def catalog_to_frame(catalog: FieldCatalog) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "group": HIERARCHY_MAP.get(f.hierarchy, f.hierarchy),
                "path": f.path,
                "label": f.label,
                "type": f.type,
                "aggregation": f.aggregation or "",
            }
            for f in catalog.fields
        ],
        columns=["group", "path", "label", "type", "aggregation"],
    )


def render_field_catalog(catalog: FieldCatalog, *, max_rows: int = 20) -> None:
    # Every field is listed: these are the names a card spec can use.
    df = catalog_to_frame(catalog)
    _render_frame(df, title="Fields", max_rows=max(max_rows, len(df)))


def buckets_to_frame(buckets: List[BucketResult]) -> pd.DataFrame:
    return pd.DataFrame(
        [{"label": b.label, "value": b.value, "color": b.color} for b in buckets],
        columns=["label", "value", "color"],
    )


def multi_series_to_frame(result: MultiSeriesResult) -> pd.DataFrame:
    data = {"category": result.categories}
    for series in result.series:
        data[f"{series.name} ({series.series_type}, {series.axis_side})"] = series.values
    return pd.DataFrame(data)


def _df_to_rich_table(df: pd.DataFrame, *, title: str, max_rows: int = 20) -> Table:
    """
    Convert a pandas DataFrame into a Rich Table.

    - Limits rows to avoid flooding the terminal.
    - Converts values to string for stable display.
    """
    table = Table(title=title, show_lines=False)
    for col in df.columns:
        table.add_column(str(col))

    safe_df = df.head(max_rows)
    for _, row in safe_df.iterrows():
        table.add_row(*[_format_cell(v) for v in row.values])

    if len(df) > max_rows:
        table.caption = f"Showing first {max_rows} of {len(df)} rows"
    return table


def _format_cell(value) -> str:
    if isinstance(value, float):
        return f"{value:,.2f}"
    return str(value)


def _render_frame(df: pd.DataFrame, *, title: str, max_rows: int) -> None:
    if df is None or len(df) == 0:
        console.print(Panel("No rows to display.", title=title, border_style="yellow"))
        logger.info("Rendered empty table: %s", title)
        return
    console.print(_df_to_rich_table(df, title=title, max_rows=max_rows))
    logger.info("Rendered table: %s (rows=%d, cols=%d)", title, len(df), len(df.columns))


def render_buckets(buckets: List[BucketResult], *, title: str, max_rows: int = 20, show_segments: bool = True) -> None:
    """
    Renders a single-series result. Stacked buckets get one extra table each with their segments.
    """
    _render_frame(buckets_to_frame(buckets), title=title, max_rows=max_rows)
    if not show_segments:
        return
    for bucket in buckets[:max_rows]:
        if not bucket.segments:
            continue
        seg_df = pd.DataFrame([{"segment": s.label, "value": s.value, "color": s.color} for s in bucket.segments])
        _render_frame(seg_df, title=f"{bucket.label}: segments", max_rows=max_rows)


def render_multi_series(result: MultiSeriesResult, *, title: str, max_rows: int = 20) -> None:
    _render_frame(multi_series_to_frame(result), title=title, max_rows=max_rows)


def render_diagnostics(diagnostics: PipelineDiagnostics) -> None:
    """
    Prints record counts; highlighted when some records could not be bucketed by date.
    """
    style = "yellow" if diagnostics.unparseable_dates else "blue"
    text = (
        f"- Records: {diagnostics.total_records}\n"
        f"- After filters: {diagnostics.filtered_records}\n"
        f"- Unparseable dates: {diagnostics.unparseable_dates}\n"
        f"- In Unknown bucket: {diagnostics.unknown_bucket_records}"
    )
    console.print(Panel(text, title="Diagnostics", border_style=style))
