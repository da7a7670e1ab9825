from __future__ import annotations

import pytest

from finance_tracker.categories import (
    Category,
    category_color,
    category_icon,
    format_category_name,
)
from finance_tracker.categorize import classify


@pytest.mark.parametrize(
    ("description", "expected"),
    [
        ("Monthly RENT payment", Category.HOUSING),
        ("Starbucks Coffee #123", Category.FOOD),
        ("UBER *TRIP", Category.TRANSPORTATION),
        ("City Electric Co", Category.UTILITIES),
        ("Netflix.com", Category.ENTERTAINMENT),
        ("AMAZON MKTPLACE", Category.SHOPPING),
        ("CVS Pharmacy", Category.HEALTHCARE),
        ("State University tuition", Category.EDUCATION),
        ("Downtown Salon", Category.PERSONAL),
        ("Marriott Hotel", Category.TRAVEL),
        ("ACME PAYROLL SALARY", Category.INCOME),
        ("zzz", Category.OTHER),
    ],
)
def test_classify_keyword_table(description: str, expected: Category) -> None:
    assert classify(description) == expected


def test_classify_first_category_in_table_order_wins() -> None:
    # "gas bill" is a utilities keyword, but "gas" (transportation) comes first.
    assert classify("Gas bill for October") == Category.TRANSPORTATION
    # "store" is shopping; "grocery" (food) is declared earlier.
    assert classify("Grocery store") == Category.FOOD


def test_classify_empty_and_none_are_other() -> None:
    assert classify("") == Category.OTHER
    assert classify(None) == Category.OTHER


def test_classify_accepts_custom_table() -> None:
    table = ((Category.TRAVEL, ("kiosk",)),)
    assert classify("Airport kiosk", table=table) == Category.TRAVEL
    assert classify("Rent", table=table) == Category.OTHER


def test_category_coerce_falls_back_to_other() -> None:
    assert Category.coerce(" Food ") == Category.FOOD
    assert Category.coerce("groceries") == Category.OTHER
    assert Category.coerce(None) == Category.OTHER
    assert Category.coerce(Category.TRAVEL) is Category.TRAVEL


def test_display_lookups() -> None:
    assert category_color("income") == "#2ecc71"
    assert category_color("not-a-category") == "#adb5bd"
    assert category_icon(Category.TRAVEL) == "plane"
    assert category_icon("mystery") == "circle"
    assert format_category_name("food") == "Food & Dining"
    assert format_category_name("groceries") == "Groceries"
