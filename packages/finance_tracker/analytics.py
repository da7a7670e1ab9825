"""Monthly analytics over stored transactions.

All functions read through the :class:`~finance_tracker.store.TransactionStore`
contract and keep no state between calls. A month without transactions is a
valid zero result, never an error.

Totals are plain sums of signed amounts. With the negative-expense convention
that means income rows reduce ``total_spent``; this is long-standing reported
behavior and is preserved as-is.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import date
from decimal import Decimal

from .categories import Category, category_color
from .logging_setup import get_logger
from .models import (
    BUDGET_CATEGORY_FIELDS,
    BudgetStatus,
    CategoryBreakdownItem,
    CategoryBudgetStatus,
    MonthlySummary,
    Transaction,
)
from .months import current_month_key, parse_month_key, previous_month_key, shift_month_key
from .store import TransactionStore

_logger = get_logger("finance_tracker.analytics")

_ZERO = Decimal("0.00")


def _total(transactions: Iterable[Transaction]) -> Decimal:
    return sum((t.amount for t in transactions), _ZERO)


def _sum_by_category(transactions: Iterable[Transaction]) -> dict[str, Decimal]:
    # Insertion order follows first appearance, which is the breakdown's
    # tie-break for equal amounts.
    sums: dict[str, Decimal] = {}
    for t in transactions:
        key = str(t.category)
        sums[key] = sums.get(key, _ZERO) + t.amount
    return sums


def percent_change(current: Decimal, previous: Decimal) -> float:
    """Percent change from ``previous`` to ``current``; ``0.0`` unless ``previous > 0``."""

    if previous <= 0:
        return 0.0
    return float((current - previous) / previous * 100)


def monthly_summary(store: TransactionStore, user_id: int, month_key: str) -> MonthlySummary:
    """Total, per-category sums, and change versus the prior calendar month."""

    parse_month_key(month_key)
    transactions = store.get_transactions_by_user_and_month(user_id, month_key)
    total = _total(transactions)

    prev_key = previous_month_key(month_key)
    prev_total = _total(store.get_transactions_by_user_and_month(user_id, prev_key))

    summary = MonthlySummary(
        month=month_key,
        total_spent=total,
        compared_to_previous=percent_change(total, prev_total),
        categories=_sum_by_category(transactions),
    )
    _logger.debug(
        "monthly_summary user_id=%d month=%s count=%d total=%s prev_total=%s",
        user_id,
        month_key,
        len(transactions),
        total,
        prev_total,
    )
    return summary


def category_breakdown(
    store: TransactionStore, user_id: int, month_key: str
) -> list[CategoryBreakdownItem]:
    """Per-category sums for the month with share of total and display color.

    Sorted by amount, largest first. Percentages are ``0.0`` when the month's
    total is not positive.
    """

    parse_month_key(month_key)
    transactions = store.get_transactions_by_user_and_month(user_id, month_key)
    total = _total(transactions)
    items = [
        CategoryBreakdownItem(
            category=category,
            amount=amount,
            percentage=float(amount / total * 100) if total > 0 else 0.0,
            color=category_color(category),
        )
        for category, amount in _sum_by_category(transactions).items()
    ]
    return sorted(items, key=lambda item: item.amount, reverse=True)


def monthly_comparison(
    store: TransactionStore,
    user_id: int,
    months: int,
    *,
    today: date | None = None,
) -> list[MonthlySummary]:
    """Summaries for the last ``months`` calendar months, current month first."""

    if months < 1:
        return []
    anchor = current_month_key(today)
    return [monthly_summary(store, user_id, shift_month_key(anchor, -i)) for i in range(months)]


def budget_status(store: TransactionStore, user_id: int, month_key: str) -> BudgetStatus | None:
    """Month summary set against that month's budget; ``None`` without a budget."""

    budget = store.get_budget_by_user_and_month(user_id, month_key)
    if budget is None:
        return None
    summary = monthly_summary(store, user_id, month_key)
    categories: list[CategoryBudgetStatus] = []
    for category in BUDGET_CATEGORY_FIELDS:
        spent = summary.categories.get(str(category), _ZERO)
        budgeted = budget.category_budget(category)
        if budgeted is None and spent == 0:
            continue
        categories.append(CategoryBudgetStatus(category=category, spent=spent, budgeted=budgeted))
    income = summary.categories.get(str(Category.INCOME))
    if income is not None:
        categories.append(CategoryBudgetStatus(category=Category.INCOME, spent=income, budgeted=None))
    return BudgetStatus(
        month=month_key,
        total_budget=budget.total_budget,
        total_spent=summary.total_spent,
        categories=tuple(categories),
    )


__all__ = [
    "budget_status",
    "category_breakdown",
    "monthly_comparison",
    "monthly_summary",
    "percent_change",
]
