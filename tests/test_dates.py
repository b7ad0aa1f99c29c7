"""
tests/test_dates.py

Date normalization tests:
- each supported encoding maps to the same ISO date
- two-digit year pivot
- fallback parsing and its year bounds
- unparseable values return None instead of raising
"""

from __future__ import annotations

from datetime import date, datetime

import pytest

from salespivot.engine.dates import format_display_date, normalize_date, to_date


@pytest.mark.parametrize("raw", ["2025-06-01", "20250601", 20250601, "1-Jun-25", "01-jun-2025", "1-JUN-2025"])
def test_same_calendar_day_in_every_encoding(raw):
    assert normalize_date(raw) == "2025-06-01"


def test_iso_is_returned_as_is():
    assert normalize_date("2024-02-29") == "2024-02-29"


def test_two_digit_year_pivot():
    # years below 50 are 20YY, the rest 19YY
    assert normalize_date("5-Mar-49") == "2049-03-05"
    assert normalize_date("5-Mar-50") == "1950-03-05"
    assert normalize_date("5-Mar-99") == "1999-03-05"


def test_day_and_month_are_zero_padded():
    assert normalize_date("7-Feb-2024") == "2024-02-07"


def test_fallback_parsing():
    assert normalize_date("2024/06/01") == "2024-06-01"
    assert normalize_date("June 1, 2024") == "2024-06-01"


def test_fallback_rejects_years_out_of_range():
    assert normalize_date("1850/03/05") is None


def test_date_objects_are_accepted():
    assert normalize_date(date(2024, 6, 1)) == "2024-06-01"
    assert normalize_date(datetime(2024, 6, 1, 15, 30)) == "2024-06-01"


@pytest.mark.parametrize("raw", [None, "", "   ", "not a date", True, "31-Foo-24"])
def test_unparseable_values_return_none(raw):
    assert normalize_date(raw) is None


def test_to_date_discards_impossible_iso_dates():
    # "2024-02-30" matches the ISO shape and is passed through, but it is not a real day
    assert normalize_date("2024-02-30") == "2024-02-30"
    assert to_date("2024-02-30") is None
    assert to_date("1-Jun-25") == date(2025, 6, 1)


def test_display_format():
    assert format_display_date(date(2024, 6, 1)) == "01-Jun-24"
    assert format_display_date(date(2005, 12, 25)) == "25-Dec-05"
