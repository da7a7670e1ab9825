# ruff: noqa: I001
"""Finance tracker core tables: users, transactions, budgets.

Revision ID: 0001_ft_core
Revises: None
Create Date: 2026-10-18
"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op


# revision identifiers, used by Alembic.
revision: str = "0001_ft_core"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

# Mirrors db.models.finance.CATEGORY_CODES at the time of this revision.
_CATEGORIES = (
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

_BUDGET_CATEGORY_COLUMNS = (
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
)


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
    ]


def upgrade() -> None:
    op.create_table(
        "ft_users",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("username", sa.String(), nullable=False, unique=True),
        sa.Column("currency", sa.CHAR(3), nullable=False, server_default=sa.text("'USD'")),
        sa.Column(
            "enable_budget_warnings",
            sa.Boolean(),
            nullable=False,
            server_default=sa.text("true"),
        ),
        sa.Column(
            "payment_integrations",
            sa.JSON(),
            nullable=False,
            server_default=sa.text("'[]'"),
        ),
        *_timestamps(),
    )

    op.create_table(
        "ft_transactions",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("ft_users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("date", sa.DateTime(timezone=False), nullable=False),
        sa.Column("description", sa.Text(), nullable=False),
        sa.Column("amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("category", sa.String(), nullable=False, server_default=sa.text("'other'")),
        sa.Column("merchant", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.CheckConstraint(
            "category in (" + ",".join(f"'{c}'" for c in _CATEGORIES) + ")",
            name="ck_ft_tx_category",
        ),
    )
    op.create_index("ix_ft_tx_user_date", "ft_transactions", ["user_id", "date"])

    op.create_table(
        "ft_budgets",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column(
            "user_id",
            sa.Integer(),
            sa.ForeignKey("ft_users.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("month_year", sa.CHAR(7), nullable=False),
        sa.Column("total_budget", sa.Numeric(10, 2), nullable=False),
        *[sa.Column(name, sa.Numeric(10, 2), nullable=True) for name in _BUDGET_CATEGORY_COLUMNS],
        sa.Column("savings_goal", sa.Numeric(10, 2), nullable=True),
        *_timestamps(),
        sa.UniqueConstraint("user_id", "month_year", name="uq_ft_budgets_user_month"),
    )


def downgrade() -> None:
    op.drop_table("ft_budgets")
    op.drop_index("ix_ft_tx_user_date", table_name="ft_transactions")
    op.drop_table("ft_transactions")
    op.drop_table("ft_users")
