from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

import pytest

from finance_tracker.analytics import (
    budget_status,
    category_breakdown,
    monthly_comparison,
    monthly_summary,
    percent_change,
)
from finance_tracker.categories import Category
from finance_tracker.models import BudgetIn, TransactionCreate, UserSettings
from finance_tracker.persistence import SqlAlchemyStore


def _add(store: SqlAlchemyStore, user_id: int, *rows: tuple[str, str, str, Category]) -> None:
    store.create_transactions(
        [
            TransactionCreate(
                user_id=user_id,
                date=datetime.fromisoformat(d),
                description=desc,
                amount=amount,
                category=cat,
            )
            for d, desc, amount, cat in rows
        ]
    )


def test_percent_change_guards_non_positive_previous() -> None:
    assert percent_change(Decimal("150"), Decimal("100")) == pytest.approx(50.0)
    assert percent_change(Decimal("50"), Decimal("0")) == 0.0
    assert percent_change(Decimal("50"), Decimal("-20")) == 0.0


def test_monthly_summary_empty_month_is_zero(store: SqlAlchemyStore, user: UserSettings) -> None:
    summary = monthly_summary(store, user.id, "2024-02")
    assert summary.month == "2024-02"
    assert summary.total_spent == Decimal("0")
    assert summary.compared_to_previous == 0.0
    assert dict(summary.categories) == {}


def test_monthly_summary_sums_signed_amounts_and_compares(
    store: SqlAlchemyStore, user: UserSettings
) -> None:
    _add(
        store,
        user.id,
        ("2023-12-10", "Rent", "100.00", Category.HOUSING),
        ("2024-01-01T00:00:00", "Rent", "120.00", Category.HOUSING),
        ("2024-01-15", "Dinner", "30.00", Category.FOOD),
        ("2024-01-31T23:59:59", "Salary", "-50.00", Category.INCOME),
        ("2024-02-01", "Rent", "999.00", Category.HOUSING),
    )

    summary = monthly_summary(store, user.id, "2024-01")

    # Year rollover: January compares against December of the prior year.
    assert summary.total_spent == Decimal("100.00")
    assert summary.compared_to_previous == pytest.approx(0.0)
    assert dict(summary.categories) == {
        "housing": Decimal("120.00"),
        "food": Decimal("30.00"),
        "income": Decimal("-50.00"),
    }
    assert summary.to_dict() == {
        "month": "2024-01",
        "totalSpent": 100.0,
        "comparedToPrevious": 0.0,
        "categories": {"housing": 120.0, "food": 30.0, "income": -50.0},
    }


def test_monthly_summary_ignores_other_users(store: SqlAlchemyStore, user: UserSettings) -> None:
    other = store.create_user("bob")
    _add(store, other.id, ("2024-01-05", "Rent", "500.00", Category.HOUSING))
    assert monthly_summary(store, user.id, "2024-01").total_spent == Decimal("0")


def test_category_breakdown_orders_by_amount_with_percentages(
    store: SqlAlchemyStore, user: UserSettings
) -> None:
    _add(
        store,
        user.id,
        ("2024-03-01", "Groceries", "25.00", Category.FOOD),
        ("2024-03-02", "Rent", "50.00", Category.HOUSING),
        ("2024-03-03", "Bus", "25.00", Category.TRANSPORTATION),
    )

    items = category_breakdown(store, user.id, "2024-03")

    assert [i.category for i in items] == ["housing", "food", "transportation"]
    assert [i.percentage for i in items] == pytest.approx([50.0, 25.0, 25.0])
    assert items[0].color == "#0466c8"
    assert items[0].to_dict() == {
        "category": "housing",
        "amount": 50.0,
        "percentage": 50.0,
        "color": "#0466c8",
    }


def test_category_breakdown_percentages_zero_when_total_not_positive(
    store: SqlAlchemyStore, user: UserSettings
) -> None:
    _add(store, user.id, ("2024-03-01", "Paycheck", "-200.00", Category.INCOME))
    items = category_breakdown(store, user.id, "2024-03")
    assert [(i.category, i.percentage) for i in items] == [("income", 0.0)]


def test_monthly_comparison_current_month_first(
    store: SqlAlchemyStore, user: UserSettings
) -> None:
    _add(
        store,
        user.id,
        ("2023-12-20", "Rent", "100.00", Category.HOUSING),
        ("2024-01-20", "Rent", "200.00", Category.HOUSING),
    )

    months = monthly_comparison(store, user.id, 3, today=date(2024, 2, 10))

    assert [m.month for m in months] == ["2024-02", "2024-01", "2023-12"]
    assert [m.total_spent for m in months] == [Decimal("0"), Decimal("200.00"), Decimal("100.00")]
    assert months[0].compared_to_previous == pytest.approx(-100.0)
    assert months[1].compared_to_previous == pytest.approx(100.0)
    assert monthly_comparison(store, user.id, 0, today=date(2024, 2, 10)) == []


def test_budget_status_against_budget(store: SqlAlchemyStore, user: UserSettings) -> None:
    assert budget_status(store, user.id, "2024-04") is None

    store.upsert_budget(
        user.id,
        BudgetIn(month_year="2024-04", total_budget="100", food_budget="20"),
    )
    _add(
        store,
        user.id,
        ("2024-04-02", "Lunch", "35.00", Category.FOOD),
        ("2024-04-03", "Bus", "10.00", Category.TRANSPORTATION),
    )

    status = budget_status(store, user.id, "2024-04")

    assert status is not None
    assert status.total_spent == Decimal("45.00")
    assert status.remaining == Decimal("55.00")
    assert status.over_budget is False
    by_cat = {c.category: c for c in status.categories}
    assert set(by_cat) == {Category.FOOD, Category.TRANSPORTATION}
    assert by_cat[Category.FOOD].over_budget is True
    assert by_cat[Category.TRANSPORTATION].budgeted is None
    assert by_cat[Category.TRANSPORTATION].over_budget is False
