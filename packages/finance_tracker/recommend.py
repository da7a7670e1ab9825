"""Budget recommendation from a monthly income figure.

A fixed percentage-of-income policy. The allocated shares sum to 90%; the
remaining 10% is left unallocated as savings headroom.
"""

from __future__ import annotations

import math
from decimal import Decimal

from .categories import Category, category_icon
from .models import MAX_MONEY, BudgetRecommendation, quantize_money

# (category, percent of income), in presentation order.
RECOMMENDATION_POLICY: tuple[tuple[Category, int], ...] = (
    (Category.HOUSING, 30),
    (Category.FOOD, 15),
    (Category.TRANSPORTATION, 10),
    (Category.UTILITIES, 10),
    (Category.SHOPPING, 10),
    (Category.ENTERTAINMENT, 5),
    (Category.HEALTHCARE, 5),
    (Category.PERSONAL, 5),
    (Category.EDUCATION, 5),
    (Category.TRAVEL, 5),
)


def is_valid_income(income: object) -> bool:
    """True for a finite real number in (0, MAX_MONEY] (booleans excluded)."""

    if isinstance(income, bool):
        return False
    if isinstance(income, Decimal):
        return income.is_finite() and 0 < income <= MAX_MONEY
    if isinstance(income, int | float):
        return math.isfinite(income) and 0 < income <= MAX_MONEY
    return False


def recommend(income: Decimal | int | float) -> list[BudgetRecommendation]:
    """Split ``income`` across :data:`RECOMMENDATION_POLICY`.

    Callers validate ``income`` at the request boundary; a non-positive or
    non-finite value here is a programming error and raises ``ValueError``.
    """

    if not is_valid_income(income):
        raise ValueError(f"income must be a finite number > 0, got {income!r}")
    base = income if isinstance(income, Decimal) else Decimal(str(income))
    return [
        BudgetRecommendation(
            category=category,
            percentage=pct,
            amount=quantize_money(base * pct / 100),
            icon=category_icon(category),
        )
        for category, pct in RECOMMENDATION_POLICY
    ]


__all__ = ["RECOMMENDATION_POLICY", "is_valid_income", "recommend"]
