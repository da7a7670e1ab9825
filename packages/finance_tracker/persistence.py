# ruff: noqa: I001
"""SQLAlchemy-backed :class:`~finance_tracker.store.TransactionStore`.

Reads and writes the ``ft_*`` tables owned by ``libs/db``. The store works on
a caller-provided session and never commits; callers wrap a logical operation
in :func:`db.client.session_scope` so a bulk import or budget upsert commits or
rolls back as a unit.

Budget upserts use the dialect's native ``INSERT ... ON CONFLICT DO UPDATE``
against the ``(user_id, month_year)`` unique constraint, so two concurrent
submissions for the same month resolve to one row (last write wins).
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.orm import Session

from db.models.finance import BUDGET_VALUE_COLUMNS, FtBudget, FtTransaction, FtUser, row_as_dict
from .logging_setup import get_logger
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
from .months import month_bounds

_logger = get_logger("finance_tracker.persistence")

_UPSERT_INSERTS = {
    "postgresql": pg_insert,
    "sqlite": sqlite_insert,
}

# Columns that may not be cleared by a partial update.
_TX_REQUIRED = frozenset({"date", "description", "amount", "category"})


# ---------------------------------------------------------------------------
# Row → model mapping
# ---------------------------------------------------------------------------


def _to_settings(row: FtUser) -> UserSettings:
    return UserSettings(
        id=row.id,
        username=row.username,
        currency=row.currency or "USD",
        enable_budget_warnings=bool(row.enable_budget_warnings),
        payment_integrations=list(row.payment_integrations or []),
    )


def _to_transaction(row: FtTransaction) -> Transaction:
    return Transaction(
        id=row.id,
        user_id=row.user_id,
        date=row.date,
        description=row.description,
        amount=row.amount,
        category=row.category,
        merchant=row.merchant,
        notes=row.notes,
    )


def _to_budget(row: FtBudget) -> Budget:
    return Budget(
        id=row.id,
        user_id=row.user_id,
        month_year=row.month_year,
        **row_as_dict(row, BUDGET_VALUE_COLUMNS),
    )


def _tx_values(tx: TransactionCreate) -> dict[str, Any]:
    return {
        "user_id": tx.user_id,
        "date": tx.date,
        "description": tx.description,
        "amount": tx.amount,
        "category": str(tx.category),
        "merchant": tx.merchant,
        "notes": tx.notes,
    }


class SqlAlchemyStore:
    """Transaction/budget/user persistence over a SQLAlchemy ``Session``."""

    def __init__(self, session: Session) -> None:
        self._session = session

    @property
    def session(self) -> Session:
        return self._session

    # ---- Users -------------------------------------------------------------

    def get_user(self, user_id: int) -> UserSettings | None:
        row = self._session.get(FtUser, user_id)
        return _to_settings(row) if row is not None else None

    def get_user_by_username(self, username: str) -> UserSettings | None:
        row = self._session.execute(
            select(FtUser).where(FtUser.username == username)
        ).scalar_one_or_none()
        return _to_settings(row) if row is not None else None

    def create_user(self, username: str, *, currency: str = "USD") -> UserSettings:
        row = FtUser(
            username=username,
            currency=currency,
            enable_budget_warnings=True,
            payment_integrations=[],
        )
        self._session.add(row)
        self._session.flush()
        return _to_settings(row)

    def update_user(self, user_id: int, changes: UserSettingsUpdate) -> UserSettings | None:
        row = self._session.get(FtUser, user_id)
        if row is None:
            return None
        for name, value in changes.model_dump(exclude_unset=True, exclude_none=True).items():
            setattr(row, name, value)
        row.updated_at = func.now()
        self._session.flush()
        return _to_settings(row)

    # ---- Transactions ------------------------------------------------------

    def get_transaction(self, transaction_id: int) -> Transaction | None:
        row = self._session.get(FtTransaction, transaction_id)
        return _to_transaction(row) if row is not None else None

    def list_transactions(self, user_id: int) -> list[Transaction]:
        rows = self._session.execute(
            select(FtTransaction)
            .where(FtTransaction.user_id == user_id)
            .order_by(FtTransaction.date.desc(), FtTransaction.id.desc())
        ).scalars()
        return [_to_transaction(r) for r in rows]

    def get_transactions_by_user_and_month(
        self, user_id: int, month_key: str
    ) -> list[Transaction]:
        start, end = month_bounds(month_key)
        rows = self._session.execute(
            select(FtTransaction)
            .where(
                FtTransaction.user_id == user_id,
                FtTransaction.date >= start,
                FtTransaction.date < end,
            )
            .order_by(FtTransaction.date, FtTransaction.id)
        ).scalars()
        return [_to_transaction(r) for r in rows]

    def create_transaction(self, transaction: TransactionCreate) -> Transaction:
        return self.create_transactions([transaction])[0]

    def create_transactions(self, transactions: Sequence[TransactionCreate]) -> list[Transaction]:
        """Insert ``transactions`` in order; ids are assigned on a single flush."""

        rows = [FtTransaction(**_tx_values(tx)) for tx in transactions]
        if not rows:
            return []
        self._session.add_all(rows)
        self._session.flush()
        _logger.debug("create_transactions:flushed count=%d", len(rows))
        return [_to_transaction(r) for r in rows]

    def update_transaction(
        self, transaction_id: int, changes: TransactionUpdate
    ) -> Transaction | None:
        row = self._session.get(FtTransaction, transaction_id)
        if row is None:
            return None
        for name, value in changes.model_dump(exclude_unset=True).items():
            if value is None and name in _TX_REQUIRED:
                continue
            setattr(row, name, str(value) if name == "category" else value)
        self._session.flush()
        return _to_transaction(row)

    def delete_transaction(self, transaction_id: int) -> bool:
        row = self._session.get(FtTransaction, transaction_id)
        if row is None:
            return False
        self._session.delete(row)
        self._session.flush()
        return True

    # ---- Budgets -----------------------------------------------------------

    def get_budget(self, budget_id: int) -> Budget | None:
        row = self._session.get(FtBudget, budget_id)
        return _to_budget(row) if row is not None else None

    def get_budget_by_user_and_month(self, user_id: int, month_key: str) -> Budget | None:
        row = self._session.execute(
            select(FtBudget).where(FtBudget.user_id == user_id, FtBudget.month_year == month_key)
        ).scalar_one_or_none()
        return _to_budget(row) if row is not None else None

    def create_budget(self, user_id: int, budget: BudgetIn) -> Budget:
        row = FtBudget(user_id=user_id, **budget.model_dump())
        self._session.add(row)
        self._session.flush()
        return _to_budget(row)

    def update_budget(self, budget_id: int, changes: BudgetUpdate) -> Budget | None:
        row = self._session.get(FtBudget, budget_id)
        if row is None:
            return None
        return self._apply_budget_changes(row, changes)

    def _apply_budget_changes(self, row: FtBudget, changes: BudgetUpdate) -> Budget:
        for name, value in changes.model_dump(exclude_unset=True).items():
            if name == "total_budget" and value is None:
                continue
            setattr(row, name, value)
        row.updated_at = func.now()
        self._session.flush()
        return _to_budget(row)

    def upsert_budget(self, user_id: int, budget: BudgetIn) -> Budget:
        """Create or update the budget keyed by ``(user_id, budget.month_year)``.

        Only fields present in the submission are written on update, so an
        omitted category budget keeps its stored value.
        """

        values = budget.model_dump(exclude_unset=True)
        values["month_year"] = budget.month_year
        values["total_budget"] = budget.total_budget
        dialect = self._session.get_bind().dialect.name
        insert_fn = _UPSERT_INSERTS.get(dialect)
        if insert_fn is None:
            return self._upsert_budget_fallback(user_id, budget)

        stmt = insert_fn(FtBudget).values(user_id=user_id, **values)
        set_ = {name: stmt.excluded[name] for name in values if name != "month_year"}
        set_["updated_at"] = func.now()
        stmt = stmt.on_conflict_do_update(
            index_elements=[FtBudget.user_id, FtBudget.month_year],
            set_=set_,
        ).returning(FtBudget.id)
        budget_id = self._session.execute(stmt).scalar_one()
        row = self._session.execute(
            select(FtBudget)
            .where(FtBudget.id == budget_id)
            .execution_options(populate_existing=True)
        ).scalar_one()
        return _to_budget(row)

    def _upsert_budget_fallback(self, user_id: int, budget: BudgetIn) -> Budget:
        # Dialects without ON CONFLICT: check-then-act inside a savepoint; the
        # unique constraint still rejects a concurrent duplicate insert.
        with self._session.begin_nested():
            row = self._session.execute(
                select(FtBudget).where(
                    FtBudget.user_id == user_id, FtBudget.month_year == budget.month_year
                )
            ).scalar_one_or_none()
            if row is None:
                return self.create_budget(user_id, budget)
            changes = BudgetUpdate(**budget.model_dump(exclude_unset=True, exclude={"month_year"}))
            return self._apply_budget_changes(row, changes)


__all__ = ["SqlAlchemyStore"]
