"""Service-layer operations behind the finance tracker's request surface.

Each function corresponds to one route of the web layer (which itself lives
outside this package) and takes the store and the acting ``user_id``
explicitly. Request bodies arrive as plain decoded JSON values and are
validated here.

Error mapping
-------------
- :class:`~finance_tracker.errors.RequestValidationError` (400): body has the
  wrong structure or fails a precondition; nothing was written.
- :class:`~finance_tracker.errors.NotFoundError` (404): the addressed budget,
  user or transaction does not exist for this user.
- :class:`~finance_tracker.errors.InternalError` (500): anything unexpected.
  The underlying exception is logged here and chained as ``__cause__``.

Row-level CSV problems are not errors; they come back as ``errors`` on the
:class:`ImportResult` while the valid rows are stored.
"""

from __future__ import annotations

import csv
import functools
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, ParamSpec, TypeVar

from pydantic import TypeAdapter, ValidationError

from . import analytics
from .errors import FinanceTrackerError, InternalError, NotFoundError, RequestValidationError
from .logging_setup import get_logger
from .models import (
    Budget,
    BudgetIn,
    BudgetRecommendation,
    BudgetStatus,
    CategoryBreakdownItem,
    CsvTransactionRow,
    MonthlySummary,
    Transaction,
    TransactionDraft,
    TransactionUpdate,
    UserSettings,
    UserSettingsUpdate,
)
from .months import parse_month_key
from .normalizers import NormalizationResult, normalize_rows, read_csv_rows
from .recommend import is_valid_income, recommend
from .store import TransactionStore

_logger = get_logger("finance_tracker.api")

DEFAULT_COMPARISON_MONTHS = 6

_CSV_UPLOAD = TypeAdapter(list[CsvTransactionRow])
_LEADING_INT_RE = re.compile(r"^\s*([+-]?\d+)")

P = ParamSpec("P")
R = TypeVar("R")


def _service(failure_message: str) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """Surface unexpected exceptions as :class:`InternalError` after logging them."""

    def decorate(fn: Callable[P, R]) -> Callable[P, R]:
        @functools.wraps(fn)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            try:
                return fn(*args, **kwargs)
            except FinanceTrackerError:
                raise
            except Exception as exc:
                _logger.exception("%s:failed error=%s", fn.__name__, exc.__class__.__name__)
                raise InternalError(failure_message) from exc

        return wrapper

    return decorate


def _require_month(month: str) -> str:
    try:
        parse_month_key(month)
    except ValueError as exc:
        raise RequestValidationError(
            "Invalid month (expected YYYY-MM)",
            errors=[{"path": ["month"], "message": str(exc), "type": "value_error"}],
        ) from exc
    return month.strip()


# ---------------------------------------------------------------------------
# CSV import
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class ImportResult:
    """Outcome of a bulk import: stored rows plus per-row diagnostics."""

    transactions: list[Transaction]
    errors: list[str] = field(default_factory=list)
    invalid_rows: list[int] = field(default_factory=list)

    @property
    def message(self) -> str:
        return f"Successfully imported {len(self.transactions)} transactions"

    def to_dict(self) -> dict[str, Any]:
        body: dict[str, Any] = {
            "message": self.message,
            "transactions": [t.model_dump(mode="json", by_alias=True) for t in self.transactions],
        }
        if self.errors:
            body["errors"] = list(self.errors)
        return body


def _store_normalized(
    store: TransactionStore, user_id: int, result: NormalizationResult
) -> ImportResult:
    created = store.create_transactions([d.for_user(user_id) for d in result.valid_transactions])
    _logger.info(
        "import_csv:done user_id=%d created=%d invalid=%d",
        user_id,
        len(created),
        len(result.invalid_rows),
    )
    return ImportResult(
        transactions=created,
        errors=list(result.errors),
        invalid_rows=list(result.invalid_rows),
    )


@_service("Failed to process CSV upload")
def import_csv(store: TransactionStore, user_id: int, payload: Any) -> ImportResult:
    """Import an uploaded list of CSV-row objects (``POST /api/upload/csv``)."""

    if not isinstance(payload, list):
        raise RequestValidationError(
            "Invalid CSV data format",
            errors=[{"path": [], "message": "Expected a list of CSV rows", "type": "list_type"}],
        )
    try:
        rows = _CSV_UPLOAD.validate_python(payload)
    except ValidationError as exc:
        raise RequestValidationError.from_pydantic("Invalid CSV data format", exc) from exc
    result = normalize_rows(r.model_dump(exclude_none=True) for r in rows)
    return _store_normalized(store, user_id, result)


@_service("Failed to process CSV upload")
def import_csv_text(store: TransactionStore, user_id: int, csv_text: str) -> ImportResult:
    """Import a raw CSV export; headers are resolved by alias detection."""

    try:
        rows = read_csv_rows(csv_text)
    except csv.Error as exc:
        raise RequestValidationError(f"Failed to parse CSV: {exc}") from exc
    return _store_normalized(store, user_id, normalize_rows(rows))


# ---------------------------------------------------------------------------
# Transactions (direct entry)
# ---------------------------------------------------------------------------


@_service("Failed to fetch transactions")
def list_transactions(store: TransactionStore, user_id: int) -> list[Transaction]:
    return store.list_transactions(user_id)


@_service("Failed to fetch monthly transactions")
def list_transactions_for_month(
    store: TransactionStore, user_id: int, month: str
) -> list[Transaction]:
    return store.get_transactions_by_user_and_month(user_id, _require_month(month))


@_service("Failed to create transaction")
def create_transaction(store: TransactionStore, user_id: int, payload: Any) -> Transaction:
    try:
        draft = TransactionDraft.model_validate(payload)
    except ValidationError as exc:
        raise RequestValidationError.from_pydantic("Invalid transaction data", exc) from exc
    return store.create_transaction(draft.for_user(user_id))


def _owned_transaction(store: TransactionStore, user_id: int, transaction_id: int) -> Transaction:
    tx = store.get_transaction(transaction_id)
    if tx is None or tx.user_id != user_id:
        raise NotFoundError("Transaction not found")
    return tx


@_service("Failed to update transaction")
def update_transaction(
    store: TransactionStore, user_id: int, transaction_id: int, payload: Any
) -> Transaction:
    try:
        changes = TransactionUpdate.model_validate(payload)
    except ValidationError as exc:
        raise RequestValidationError.from_pydantic("Invalid transaction data", exc) from exc
    _owned_transaction(store, user_id, transaction_id)
    updated = store.update_transaction(transaction_id, changes)
    if updated is None:
        raise NotFoundError("Transaction not found")
    return updated


@_service("Failed to delete transaction")
def delete_transaction(store: TransactionStore, user_id: int, transaction_id: int) -> None:
    _owned_transaction(store, user_id, transaction_id)
    if not store.delete_transaction(transaction_id):
        raise NotFoundError("Transaction not found")


# ---------------------------------------------------------------------------
# Analytics
# ---------------------------------------------------------------------------


def parse_months_param(value: Any, default: int = DEFAULT_COMPARISON_MONTHS) -> int:
    """Lenient month-count parsing: leading integer, else ``default``.

    Zero, negative and unparsable values all fall back to ``default``.
    """

    if isinstance(value, bool):
        return default
    if isinstance(value, int):
        n = value
    else:
        m = _LEADING_INT_RE.match(str(value)) if value is not None else None
        if m is None:
            return default
        n = int(m.group(1))
    return n if n > 0 else default


@_service("Failed to fetch monthly summary")
def get_monthly_summary(store: TransactionStore, user_id: int, month: str) -> MonthlySummary:
    return analytics.monthly_summary(store, user_id, _require_month(month))


@_service("Failed to fetch category breakdown")
def get_category_breakdown(
    store: TransactionStore, user_id: int, month: str
) -> list[CategoryBreakdownItem]:
    return analytics.category_breakdown(store, user_id, _require_month(month))


@_service("Failed to fetch monthly comparison")
def get_monthly_comparison(
    store: TransactionStore, user_id: int, months: Any = DEFAULT_COMPARISON_MONTHS
) -> list[MonthlySummary]:
    return analytics.monthly_comparison(store, user_id, parse_months_param(months))


# ---------------------------------------------------------------------------
# Budgets
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class SaveBudgetResult:
    budget: Budget
    created: bool

    @property
    def status_code(self) -> int:
        return 201 if self.created else 200


@_service("Failed to fetch budget")
def get_budget(store: TransactionStore, user_id: int, month: str) -> Budget:
    budget = store.get_budget_by_user_and_month(user_id, _require_month(month))
    if budget is None:
        raise NotFoundError("Budget not found for the specified month")
    return budget


@_service("Failed to save budget")
def save_budget(store: TransactionStore, user_id: int, payload: Any) -> SaveBudgetResult:
    """Create or update the budget for ``payload.monthYear`` (one per user/month)."""

    try:
        data = BudgetIn.model_validate(payload)
    except ValidationError as exc:
        raise RequestValidationError.from_pydantic("Invalid budget data", exc) from exc
    existed = store.get_budget_by_user_and_month(user_id, data.month_year) is not None
    budget = store.upsert_budget(user_id, data)
    _logger.info(
        "save_budget:%s user_id=%d month=%s",
        "updated" if existed else "created",
        user_id,
        data.month_year,
    )
    return SaveBudgetResult(budget=budget, created=not existed)


@_service("Failed to fetch budget status")
def get_budget_status(store: TransactionStore, user_id: int, month: str) -> BudgetStatus:
    status = analytics.budget_status(store, user_id, _require_month(month))
    if status is None:
        raise NotFoundError("Budget not found for the specified month")
    return status


@_service("Failed to generate budget recommendations")
def budget_recommendation(payload: Any) -> list[BudgetRecommendation]:
    """Recommendation for ``{"income": number}``; income must be a number > 0."""

    income = payload.get("income") if isinstance(payload, Mapping) else None
    if not is_valid_income(income):
        raise RequestValidationError("Valid income amount is required")
    return recommend(income)


# ---------------------------------------------------------------------------
# User settings
# ---------------------------------------------------------------------------


@_service("Failed to fetch user settings")
def get_user_settings(store: TransactionStore, user_id: int) -> UserSettings:
    user = store.get_user(user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


@_service("Failed to update user settings")
def update_user_settings(store: TransactionStore, user_id: int, payload: Any) -> UserSettings:
    """Apply a partial settings update; omitted fields keep stored values."""

    try:
        changes = UserSettingsUpdate.model_validate(payload if payload is not None else {})
    except ValidationError as exc:
        raise RequestValidationError.from_pydantic("Invalid settings data", exc) from exc
    updated = store.update_user(user_id, changes)
    if updated is None:
        raise NotFoundError("User not found")
    return updated


__all__ = [
    "DEFAULT_COMPARISON_MONTHS",
    "ImportResult",
    "SaveBudgetResult",
    "budget_recommendation",
    "create_transaction",
    "delete_transaction",
    "get_budget",
    "get_budget_status",
    "get_category_breakdown",
    "get_monthly_comparison",
    "get_monthly_summary",
    "get_user_settings",
    "import_csv",
    "import_csv_text",
    "list_transactions",
    "list_transactions_for_month",
    "parse_months_param",
    "save_budget",
    "update_transaction",
    "update_user_settings",
]
