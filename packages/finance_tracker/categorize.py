"""Keyword classifier mapping free-text descriptions to a :class:`Category`.

The table below is ordered. A description may contain keywords from several
categories (``"gas bill"`` contains ``"gas"``); the first category in table
order with any substring match wins. Reordering entries changes results.
"""

from __future__ import annotations

from collections.abc import Sequence

from .categories import Category

KEYWORD_TABLE: tuple[tuple[Category, tuple[str, ...]], ...] = (
    (
        Category.HOUSING,
        ("rent", "mortgage", "apartment", "property", "housing", "hoa", "management"),
    ),
    (
        Category.FOOD,
        (
            "grocery",
            "restaurant",
            "food",
            "meal",
            "dining",
            "cafe",
            "coffee",
            "dinner",
            "lunch",
            "breakfast",
        ),
    ),
    (
        Category.TRANSPORTATION,
        (
            "gas",
            "uber",
            "lyft",
            "taxi",
            "car",
            "auto",
            "vehicle",
            "bus",
            "train",
            "subway",
            "transport",
        ),
    ),
    (
        Category.UTILITIES,
        (
            "electric",
            "water",
            "gas bill",
            "internet",
            "phone",
            "cell",
            "utility",
            "cable",
            "heating",
        ),
    ),
    (
        Category.ENTERTAINMENT,
        (
            "movie",
            "theatre",
            "theater",
            "concert",
            "netflix",
            "spotify",
            "subscription",
            "entertainment",
        ),
    ),
    (
        Category.SHOPPING,
        ("amazon", "walmart", "target", "shop", "store", "mall", "purchase", "retail"),
    ),
    (
        Category.HEALTHCARE,
        (
            "doctor",
            "medical",
            "health",
            "dental",
            "pharmacy",
            "hospital",
            "clinic",
            "insurance",
        ),
    ),
    (
        Category.EDUCATION,
        ("tuition", "school", "university", "college", "course", "book", "education"),
    ),
    (
        Category.PERSONAL,
        ("haircut", "salon", "spa", "gym", "fitness", "personal"),
    ),
    (
        Category.TRAVEL,
        ("hotel", "airbnb", "flight", "airline", "vacation", "travel", "trip"),
    ),
    (
        Category.INCOME,
        (
            "salary",
            "paycheck",
            "deposit",
            "income",
            "direct deposit",
            "payment received",
            "refund",
        ),
    ),
)


def classify(
    description: str | None,
    *,
    table: Sequence[tuple[Category, Sequence[str]]] = KEYWORD_TABLE,
) -> Category:
    """Return the first category in ``table`` with a keyword inside ``description``.

    Matching is a case-insensitive substring test. Descriptions with no match
    (including ``None``/empty) classify as ``Category.OTHER``.
    """

    desc = (description or "").lower()
    if not desc:
        return Category.OTHER
    for category, keywords in table:
        if any(keyword in desc for keyword in keywords):
            return category
    return Category.OTHER


__all__ = ["KEYWORD_TABLE", "classify"]
