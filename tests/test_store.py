from __future__ import annotations

from datetime import datetime
from decimal import Decimal

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from db.client import session_scope
from db.models.finance import FtBudget
from finance_tracker.categories import Category
from finance_tracker.models import (
    BudgetIn,
    BudgetUpdate,
    TransactionCreate,
    TransactionUpdate,
    UserSettings,
    UserSettingsUpdate,
)
from finance_tracker import persistence
from finance_tracker.persistence import SqlAlchemyStore
from finance_tracker.store import TransactionStore


def _tx(user_id: int, day: int, amount: str, description: str = "Coffee") -> TransactionCreate:
    return TransactionCreate(
        user_id=user_id,
        date=datetime(2024, 5, day),
        description=description,
        amount=amount,
        category=Category.FOOD,
    )


def test_sqlalchemy_store_satisfies_protocol(store: SqlAlchemyStore) -> None:
    assert isinstance(store, TransactionStore)


def test_create_transactions_assigns_ids_in_input_order(
    store: SqlAlchemyStore, user: UserSettings
) -> None:
    created = store.create_transactions(
        [_tx(user.id, 3, "-1.00", "a"), _tx(user.id, 1, "-2.00", "b"), _tx(user.id, 2, "-3.00", "c")]
    )

    assert [t.description for t in created] == ["a", "b", "c"]
    ids = [t.id for t in created]
    assert ids == sorted(ids)
    assert store.create_transactions([]) == []

    # Month reads come back in date order.
    month = store.get_transactions_by_user_and_month(user.id, "2024-05")
    assert [t.description for t in month] == ["b", "c", "a"]
    assert month[0].amount == Decimal("-2.00")
    assert month[0].category == Category.FOOD


def test_update_and_delete_transaction(store: SqlAlchemyStore, user: UserSettings) -> None:
    tx = store.create_transaction(_tx(user.id, 4, "-9.99"))

    updated = store.update_transaction(
        tx.id, TransactionUpdate(category="travel", notes="moved", description=None)
    )

    assert updated is not None
    assert updated.category == Category.TRAVEL
    assert updated.notes == "moved"
    # Required columns are not cleared by an explicit None.
    assert updated.description == "Coffee"

    assert store.delete_transaction(tx.id) is True
    assert store.get_transaction(tx.id) is None
    assert store.delete_transaction(tx.id) is False
    assert store.update_transaction(tx.id, TransactionUpdate(notes="x")) is None


def test_upsert_budget_keeps_one_row_per_user_month(
    store: SqlAlchemyStore, user: UserSettings
) -> None:
    first = store.upsert_budget(
        user.id,
        BudgetIn(month_year="2024-05", total_budget="2000", housing_budget="900", food_budget="300"),
    )
    second = store.upsert_budget(
        user.id,
        BudgetIn(month_year="2024-05", total_budget="2500", food_budget="350"),
    )

    assert second.id == first.id
    assert second.total_budget == Decimal("2500.00")
    assert second.food_budget == Decimal("350.00")
    # Omitted fields keep their stored values.
    assert second.housing_budget == Decimal("900.00")

    count = store.session.execute(
        select(func.count()).select_from(FtBudget).where(FtBudget.user_id == user.id)
    ).scalar_one()
    assert count == 1

    other_month = store.upsert_budget(user.id, BudgetIn(month_year="2024-06", total_budget="10"))
    assert other_month.id != first.id


def test_upsert_budget_without_on_conflict_support(
    store: SqlAlchemyStore, user: UserSettings, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(persistence, "_UPSERT_INSERTS", {})

    first = store.upsert_budget(
        user.id, BudgetIn(month_year="2024-08", total_budget="500", food_budget="120")
    )
    second = store.upsert_budget(user.id, BudgetIn(month_year="2024-08", total_budget="650"))

    assert second.id == first.id
    assert second.total_budget == Decimal("650.00")
    assert second.food_budget == Decimal("120.00")
    count = store.session.execute(
        select(func.count()).select_from(FtBudget).where(FtBudget.month_year == "2024-08")
    ).scalar_one()
    assert count == 1


def test_unique_constraint_rejects_duplicate_budget_insert(db_url: str) -> None:
    with session_scope(database_url=db_url) as session:
        user = SqlAlchemyStore(session).create_user("carol")
        session.add(FtBudget(user_id=user.id, month_year="2024-05", total_budget=Decimal("1")))
        session.flush()
        session.add(FtBudget(user_id=user.id, month_year="2024-05", total_budget=Decimal("2")))
        with pytest.raises(IntegrityError):
            session.flush()
        session.rollback()


def test_update_budget_partial(store: SqlAlchemyStore, user: UserSettings) -> None:
    budget = store.create_budget(
        user.id, BudgetIn(month_year="2024-07", total_budget="100", travel_budget="40")
    )

    updated = store.update_budget(budget.id, BudgetUpdate(savings_goal="25"))

    assert updated is not None
    assert updated.total_budget == Decimal("100.00")
    assert updated.travel_budget == Decimal("40.00")
    assert updated.savings_goal == Decimal("25.00")
    assert store.get_budget_by_user_and_month(user.id, "2024-07") == updated


def test_user_settings_partial_update(store: SqlAlchemyStore, user: UserSettings) -> None:
    assert user.currency == "USD"
    assert user.enable_budget_warnings is True
    assert user.payment_integrations == []

    updated = store.update_user(
        user.id,
        UserSettingsUpdate.model_validate(
            {"paymentIntegrations": ["Stripe", "paypal", "stripe"]}
        ),
    )

    assert updated is not None
    assert updated.payment_integrations == ["paypal", "stripe"]
    assert updated.currency == "USD"

    updated = store.update_user(user.id, UserSettingsUpdate(currency="eur"))
    assert updated is not None
    assert updated.currency == "EUR"
    assert updated.payment_integrations == ["paypal", "stripe"]
    assert store.update_user(9999, UserSettingsUpdate(currency="GBP")) is None
