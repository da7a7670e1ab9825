from __future__ import annotations

from datetime import date, datetime

import pytest

from finance_tracker.months import (
    current_month_key,
    month_bounds,
    parse_month_key,
    previous_month_key,
    shift_month_key,
)


def test_previous_month_rolls_back_across_year_boundary() -> None:
    assert previous_month_key("2024-01") == "2023-12"
    assert previous_month_key("2024-03") == "2024-02"


def test_shift_month_key_handles_large_deltas() -> None:
    assert shift_month_key("2024-05", -17) == "2022-12"
    assert shift_month_key("2023-11", 3) == "2024-02"


def test_month_bounds_are_half_open() -> None:
    start, end = month_bounds("2023-12")
    assert start == datetime(2023, 12, 1)
    assert end == datetime(2024, 1, 1)


def test_current_month_key_uses_given_day() -> None:
    assert current_month_key(date(2025, 2, 28)) == "2025-02"


@pytest.mark.parametrize("bad", ["2024-13", "2024-00", "24-01", "2024/01", "", "2024-1"])
def test_parse_month_key_rejects_malformed(bad: str) -> None:
    with pytest.raises(ValueError):
        parse_month_key(bad)
