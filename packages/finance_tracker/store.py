"""Persistence contract consumed by the analytics and ingestion code.

Analytics and ingestion depend only on :class:`TransactionStore`; the
SQLAlchemy-backed implementation lives in :mod:`finance_tracker.persistence`.
Implementations own the uniqueness guarantee for budgets: at most one record
per ``(user_id, month_year)`` even under concurrent upserts.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from .models import (
    Budget,
    BudgetIn,
    BudgetUpdate,
    Transaction,
    TransactionCreate,
    TransactionUpdate,
    UserSettings,
    UserSettingsUpdate,
)


@runtime_checkable
class TransactionStore(Protocol):
    # Users
    def get_user(self, user_id: int) -> UserSettings | None: ...

    def get_user_by_username(self, username: str) -> UserSettings | None: ...

    def create_user(self, username: str, *, currency: str = "USD") -> UserSettings: ...

    def update_user(self, user_id: int, changes: UserSettingsUpdate) -> UserSettings | None: ...

    # Transactions
    def get_transaction(self, transaction_id: int) -> Transaction | None: ...

    def list_transactions(self, user_id: int) -> list[Transaction]: ...

    def get_transactions_by_user_and_month(
        self, user_id: int, month_key: str
    ) -> list[Transaction]: ...

    def create_transaction(self, transaction: TransactionCreate) -> Transaction: ...

    def create_transactions(
        self, transactions: Sequence[TransactionCreate]
    ) -> list[Transaction]: ...

    def update_transaction(
        self, transaction_id: int, changes: TransactionUpdate
    ) -> Transaction | None: ...

    def delete_transaction(self, transaction_id: int) -> bool: ...

    # Budgets
    def get_budget(self, budget_id: int) -> Budget | None: ...

    def get_budget_by_user_and_month(self, user_id: int, month_key: str) -> Budget | None: ...

    def create_budget(self, user_id: int, budget: BudgetIn) -> Budget: ...

    def update_budget(self, budget_id: int, changes: BudgetUpdate) -> Budget | None: ...

    def upsert_budget(self, user_id: int, budget: BudgetIn) -> Budget: ...


__all__ = ["TransactionStore"]
