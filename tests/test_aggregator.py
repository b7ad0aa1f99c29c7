"""
tests/test_aggregator.py

Aggregation tests: the five functions on plain fields, the synthetic measures
and the zero-denominator guards.
"""

from __future__ import annotations

import math

import pytest

from salespivot.engine.aggregator import aggregate, reduce_values


@pytest.fixture
def lines():
    return [
        {"customer": "A", "item": "Tea", "masterid": "1", "amount": 100, "profit": 20, "quantity": 2, "cgst": 9, "sgst": 9},
        {"customer": "A", "item": "Coffee", "masterid": "1", "amount": "50", "profit": "5", "quantity": 3, "cgst": "4.5", "sgst": 4.5},
        {"customer": "B", "item": "Tea", "masterid": "2", "amount": 30, "profit": 5, "quantity": 0},
    ]


def test_plain_field_functions(lines):
    assert aggregate(lines, "amount", "sum") == 180
    assert aggregate(lines, "amount", "count") == 3
    assert aggregate(lines, "amount", "average") == 60
    assert aggregate(lines, "amount", "min") == 30
    assert aggregate(lines, "amount", "max") == 100


def test_value_field_lookup_is_case_insensitive(lines):
    assert aggregate(lines, "Amount", "sum") == 180


def test_non_numeric_values_count_as_zero_for_sum_and_average():
    records = [{"amount": 10}, {"amount": "n/a"}, {"amount": "20"}]
    assert aggregate(records, "amount", "sum") == 30
    assert aggregate(records, "amount", "average") == 10


def test_min_max_ignore_non_numeric_values():
    records = [{"amount": "n/a"}, {"amount": 7}, {}]
    assert aggregate(records, "amount", "min") == 7
    assert aggregate(records, "amount", "max") == 7
    assert aggregate([{"amount": "n/a"}], "amount", "min") == 0


@pytest.mark.parametrize("fn", ["sum", "count", "average", "min", "max"])
def test_empty_bucket_is_zero(fn):
    assert aggregate([], "amount", fn) == 0


def test_tax_amount(lines):
    assert aggregate(lines, "tax_amount", "sum") == 27
    assert aggregate(lines, "tax_amount", "max") == 18


def test_order_value_is_the_line_amount(lines):
    assert aggregate(lines, "order_value", "average") == 60


def test_profit_margin_is_computed_on_bucket_totals(lines):
    # (20 + 5 + 5) / (100 + 50 + 30) * 100
    assert aggregate(lines, "profit_margin", "average") == pytest.approx(30 / 180 * 100)


def test_profit_margin_without_amount_is_zero():
    value = aggregate([{"amount": 0, "profit": 10}, {"profit": 3}], "profit_margin", "sum")
    assert value == 0
    assert not math.isnan(value)


def test_avg_order_value_uses_distinct_orders(lines):
    assert aggregate(lines, "avg_order_value", "sum") == 90
    assert aggregate([{"amount": 50}], "avg_order_value", "sum") == 0


def test_profit_per_quantity(lines):
    assert aggregate(lines, "profit_per_quantity", "sum") == pytest.approx(30 / 5)
    assert aggregate([{"profit": 10, "quantity": 0}], "profit_per_quantity", "sum") == 0


def test_count_measures_ignore_the_requested_function(lines):
    assert aggregate(lines, "transactions", "sum") == 3
    assert aggregate(lines, "unique_customers", "max") == 2
    assert aggregate(lines, "unique_items", "average") == 2
    assert aggregate(lines, "unique_orders", "sum") == 2


def test_unknown_function_is_rejected():
    with pytest.raises(ValueError):
        reduce_values([1.0], "median")
