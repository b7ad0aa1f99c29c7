"""
salespivot/engine/metrics.py

Headline KPIs shown above the dashboard charts:
- total revenue (sum of amount)
- total orders (distinct masterid among records flagged as sales)
- total quantity
- unique customers
- average order value (revenue / orders, 0 without orders)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Sequence

from .aggregation_spec import Filter
from .aggregator import count_distinct, safe_ratio
from .fields import Record, field_number, get_field_value
from .filters import apply_filters

# Values of the "issales" flag that mark a record as a sale.
_TRUTHY_FLAGS = {"1", "yes", "true", "y"}


@dataclass(frozen=True)
class SalesMetrics:
    total_revenue: float
    total_orders: int
    total_quantity: float
    unique_customers: int
    avg_order_value: float


def is_sale(record: Record) -> bool:
    flag = get_field_value(record, "issales")
    if isinstance(flag, bool):
        return flag
    if isinstance(flag, (int, float)):
        return flag == 1
    if isinstance(flag, str):
        return flag.strip().lower() in _TRUTHY_FLAGS
    return False


def compute_sales_metrics(records: Iterable[Record], filters: Sequence[Filter] = ()) -> SalesMetrics:
    subset = apply_filters(records, filters)
    revenue = sum(field_number(r, "amount") for r in subset)
    orders = count_distinct([r for r in subset if is_sale(r)], "masterid")
    return SalesMetrics(
        total_revenue=revenue,
        total_orders=orders,
        total_quantity=sum(field_number(r, "quantity") for r in subset),
        unique_customers=count_distinct(subset, "customer"),
        avg_order_value=safe_ratio(revenue, orders),
    )
