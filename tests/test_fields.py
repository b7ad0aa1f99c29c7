"""
tests/test_fields.py

Field access tests: case-insensitive lookup order, dotted paths, derived date fields
and the text/number coercion helpers.
"""

from __future__ import annotations

import math

from salespivot.engine.fields import get_field_value, to_number, to_text


def test_lookup_order_exact_lower_upper_scan():
    record = {"amount": 1, "Amount": 2, "CuStOmer": "Acme", "REGION": "Goa"}

    assert get_field_value(record, "Amount") == 2  # exact
    assert get_field_value(record, "AMOUNT") == 1  # lower-case
    assert get_field_value(record, "region") == "Goa"  # upper-case
    assert get_field_value(record, "customer") == "Acme"  # scan


def test_missing_field_returns_none():
    assert get_field_value({"amount": 1}, "profit") is None
    assert get_field_value({}, "amount") is None
    assert get_field_value(None, "amount") is None


def test_nested_paths_take_first_list_element():
    record = {
        "ledgerentries": [{"Amount": 10}, {"amount": 20}],
        "address": {"state": "Goa"},
    }
    assert get_field_value(record, "ledgerentries.amount") == 10
    assert get_field_value(record, "Address.State") == "Goa"
    assert get_field_value(record, "address.pincode") is None


def test_derived_date_fields_ignore_literal_columns():
    record = {"date": "2024-06-15", "month": "literal", "Year": 1999}

    assert get_field_value(record, "month") == "Jun-24"
    assert get_field_value(record, "year") == "2024"
    assert get_field_value(record, "quarter") == "Q2 2024"
    # Jan 1st 2024 is a Monday: (166 + 1 + 1) / 7 = 24
    assert get_field_value(record, "week") == "Week 24, 2024"


def test_first_week_of_year():
    assert get_field_value({"date": "2024-01-01"}, "week") == "Week 1, 2024"


def test_derived_fields_fall_back_to_cp_date():
    assert get_field_value({"cp_date": "20240105"}, "Year") == "2024"
    assert get_field_value({"cp_date": "5-Jan-24"}, "quarter") == "Q1 2024"


def test_derived_fields_without_a_date():
    assert get_field_value({"amount": 1}, "month") is None
    assert get_field_value({"date": "garbage"}, "year") is None


def test_to_number_follows_parse_float():
    assert to_number("12.5kg") == 12.5
    assert to_number("  -3e2") == -300.0
    assert to_number(".5") == 0.5
    assert to_number("1,234") == 1.0
    assert to_number(7) == 7.0
    assert to_number("abc") is None
    assert to_number("") is None
    assert to_number(True) is None
    assert to_number(math.nan) is None
    assert to_number(math.inf) is None


def test_to_text():
    assert to_text(100.0) == "100"
    assert to_text(1.5) == "1.5"
    assert to_text(True) == "true"
    assert to_text(None) is None
    assert to_text("Acme") == "Acme"
