from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import (
    CHAR,
    JSON,
    Boolean,
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    func,
    text,
)
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
    pass


# Closed category set mirrored from ``finance_tracker.categories.Category``.
# Kept literal here so migrations and the ORM do not import the domain package.
CATEGORY_CODES: tuple[str, ...] = (
    "housing",
    "food",
    "transportation",
    "utilities",
    "entertainment",
    "shopping",
    "healthcare",
    "education",
    "personal",
    "travel",
    "income",
    "other",
)

# Monetary columns: fixed-point, two fractional digits.
_MONEY = Numeric(10, 2)


# ---------------------------
# Reference: ft_users
# ---------------------------


class FtUser(Base):
    __tablename__ = "ft_users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    username: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    currency: Mapped[str] = mapped_column(CHAR(3), nullable=False, server_default=text("'USD'"))
    enable_budget_warnings: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default=text("true")
    )
    # Stored sorted and de-duplicated; the set has no meaningful order.
    payment_integrations: Mapped[list[str]] = mapped_column(JSON, nullable=False, default=list)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )


# ---------------------------
# Core: ft_transactions
# ---------------------------


class FtTransaction(Base):
    __tablename__ = "ft_transactions"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("ft_users.id", ondelete="CASCADE"), nullable=False
    )
    # Naive timestamp; month membership is computed against naive calendar
    # boundaries (see ``finance_tracker.months.month_bounds``).
    date: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    # Signed: negative = expense, positive = income/credit.
    amount: Mapped[Decimal] = mapped_column(_MONEY, nullable=False)
    category: Mapped[str] = mapped_column(String, nullable=False, server_default=text("'other'"))
    merchant: Mapped[str | None] = mapped_column(Text, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    __table_args__ = (
        CheckConstraint(
            "category in (" + ",".join(f"'{c}'" for c in CATEGORY_CODES) + ")",
            name="ck_ft_tx_category",
        ),
        Index("ix_ft_tx_user_date", "user_id", "date"),
    )


# ---------------------------
# Core: ft_budgets
# ---------------------------


class FtBudget(Base):
    __tablename__ = "ft_budgets"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("ft_users.id", ondelete="CASCADE"), nullable=False
    )
    month_year: Mapped[str] = mapped_column(CHAR(7), nullable=False)
    total_budget: Mapped[Decimal] = mapped_column(_MONEY, nullable=False)
    housing_budget: Mapped[Decimal | None] = mapped_column(_MONEY, nullable=True)
    food_budget: Mapped[Decimal | None] = mapped_column(_MONEY, nullable=True)
    transportation_budget: Mapped[Decimal | None] = mapped_column(_MONEY, nullable=True)
    utilities_budget: Mapped[Decimal | None] = mapped_column(_MONEY, nullable=True)
    entertainment_budget: Mapped[Decimal | None] = mapped_column(_MONEY, nullable=True)
    shopping_budget: Mapped[Decimal | None] = mapped_column(_MONEY, nullable=True)
    healthcare_budget: Mapped[Decimal | None] = mapped_column(_MONEY, nullable=True)
    education_budget: Mapped[Decimal | None] = mapped_column(_MONEY, nullable=True)
    personal_budget: Mapped[Decimal | None] = mapped_column(_MONEY, nullable=True)
    travel_budget: Mapped[Decimal | None] = mapped_column(_MONEY, nullable=True)
    other_budget: Mapped[Decimal | None] = mapped_column(_MONEY, nullable=True)
    savings_goal: Mapped[Decimal | None] = mapped_column(_MONEY, nullable=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    __table_args__ = (
        # Natural key for the budget upsert; at most one budget per user/month.
        UniqueConstraint("user_id", "month_year", name="uq_ft_budgets_user_month"),
    )


# Budget columns that callers may set, in display order.
BUDGET_VALUE_COLUMNS: tuple[str, ...] = (
    "total_budget",
    "housing_budget",
    "food_budget",
    "transportation_budget",
    "utilities_budget",
    "entertainment_budget",
    "shopping_budget",
    "healthcare_budget",
    "education_budget",
    "personal_budget",
    "travel_budget",
    "other_budget",
    "savings_goal",
)


def row_as_dict(row: Any, columns: tuple[str, ...]) -> dict[str, Any]:
    """Return ``{column: value}`` for ``columns`` read off an ORM row."""

    return {c: getattr(row, c) for c in columns}


__all__ = [
    "Base",
    "BUDGET_VALUE_COLUMNS",
    "CATEGORY_CODES",
    "FtBudget",
    "FtTransaction",
    "FtUser",
    "row_as_dict",
]
