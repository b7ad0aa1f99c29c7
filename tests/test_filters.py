"""
tests/test_filters.py

Inclusion filter tests: normalization of both sides, AND/OR semantics,
missing fields and inactive filters.
"""

from __future__ import annotations

from salespivot.engine.aggregation_spec import Filter
from salespivot.engine.filters import apply_filters, passes_filter, passes_filters


def test_included_values_are_normalized():
    f = Filter(field="region", included_values={" Kerala ", "GOA"})
    assert f.included_values == {"kerala", "goa"}


def test_record_value_is_trimmed_and_case_folded():
    f = Filter(field="region", included_values={"Kerala"})
    assert passes_filter({"Region": "  KERALA "}, f)
    assert not passes_filter({"region": "Goa"}, f)


def test_missing_field_fails_an_active_filter():
    f = Filter(field="region", included_values={"kerala"})
    assert not passes_filter({"customer": "Acme"}, f)


def test_empty_filter_is_no_constraint():
    f = Filter(field="region", included_values=set())
    assert passes_filter({"customer": "Acme"}, f)


def test_numeric_values_compare_on_display_text():
    f = Filter(field="qty", included_values=["10"])
    assert passes_filter({"qty": 10.0}, f)
    assert passes_filter({"qty": "10"}, f)


def test_numeric_included_values_use_the_same_text_form():
    f = Filter(field="qty", included_values=[10.0, True, None])
    assert f.included_values == {"10", "true"}
    assert passes_filter({"qty": 10.0}, f)
    assert passes_filter({"qty": 10}, f)
    assert passes_filter({"qty": True}, f)


def test_and_across_filters_or_within_one():
    filters = [
        Filter(field="region", included_values={"kerala", "goa"}),
        Filter(field="item", included_values={"tea"}),
    ]
    assert passes_filters({"region": "Goa", "item": "Tea"}, filters)
    assert passes_filters({"region": "Kerala", "item": "tea"}, filters)
    assert not passes_filters({"region": "Goa", "item": "Coffee"}, filters)
    assert not passes_filters({"region": "Delhi", "item": "Tea"}, filters)


def test_apply_filters_keeps_input_order():
    records = [{"id": i, "region": "goa" if i % 2 else "delhi"} for i in range(6)]
    out = apply_filters(records, [Filter(field="region", included_values={"goa"})])
    assert [r["id"] for r in out] == [1, 3, 5]
