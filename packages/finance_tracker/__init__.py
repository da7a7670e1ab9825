"""Public interface for the ``finance_tracker`` package.

This module exposes the package's core functions and public models/types as
the stable import surface. There is no runtime logic here, only symbol
re-exports. Request-boundary operations live in ``finance_tracker.api``.
"""

from .analytics import budget_status, category_breakdown, monthly_comparison, monthly_summary
from .categories import Category
from .categorize import classify
from .errors import FinanceTrackerError, InternalError, NotFoundError, RequestValidationError
from .models import (
    Budget,
    BudgetIn,
    BudgetRecommendation,
    BudgetStatus,
    CategoryBreakdownItem,
    MonthlySummary,
    Transaction,
    TransactionDraft,
    UserSettings,
)
from .normalizers import CSVNormalizer, NormalizationResult, normalize_rows
from .recommend import recommend
from .store import TransactionStore

__all__ = [
    # Core
    "classify",
    "normalize_rows",
    "CSVNormalizer",
    "monthly_summary",
    "category_breakdown",
    "monthly_comparison",
    "budget_status",
    "recommend",
    # Models / types
    "Category",
    "Transaction",
    "TransactionDraft",
    "Budget",
    "BudgetIn",
    "UserSettings",
    "MonthlySummary",
    "CategoryBreakdownItem",
    "BudgetRecommendation",
    "BudgetStatus",
    "NormalizationResult",
    "TransactionStore",
    # Errors
    "FinanceTrackerError",
    "RequestValidationError",
    "NotFoundError",
    "InternalError",
]
