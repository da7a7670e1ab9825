"""Data models for ``finance_tracker``.

Two families live here:

- Pydantic models for anything that crosses a boundary (CSV upload rows,
  normalized transactions, budgets, user settings). They validate on
  construction and dump to the camelCase wire shape with
  ``model_dump(by_alias=True)``.
- Frozen dataclasses for derived analytics values (summaries, breakdowns,
  recommendations). Those are computed, never parsed, so they skip
  validation and expose ``to_dict()`` for the wire shape instead.

Money is ``Decimal`` quantized to two places everywhere; percentages are
``float``.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Annotated, Any

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    StringConstraints,
    field_validator,
)
from pydantic.alias_generators import to_camel

from .categories import Category
from .months import parse_month_key

_CENTS = Decimal("0.01")

# Largest magnitude the NUMERIC(10, 2) money columns hold.
MAX_MONEY = Decimal("99999999.99")

# Accepted non-ISO date layouts, tried in order after ``datetime.fromisoformat``.
_DATE_FORMATS: tuple[str, ...] = (
    "%m/%d/%Y",
    "%m/%d/%y",
    "%Y/%m/%d",
    "%m-%d-%Y",
    "%d-%b-%Y",
    "%b %d, %Y",
    "%B %d, %Y",
    "%d %b %Y",
)


# ---------------------------------------------------------------------------
# Scalar coercions shared by the models
# ---------------------------------------------------------------------------


def quantize_money(value: Decimal) -> Decimal:
    return value.quantize(_CENTS, rounding=ROUND_HALF_UP)


def to_money(value: Any) -> Decimal:
    """Coerce ``value`` to a finite two-place ``Decimal``.

    Booleans are rejected explicitly (they are ints in Python). Floats go
    through ``str`` to avoid binary-representation noise.
    """

    if value is None:
        raise ValueError("amount is required")
    if isinstance(value, bool):
        raise ValueError(f"invalid amount: {value!r}")
    if isinstance(value, Decimal):
        d = value
    elif isinstance(value, int | float):
        d = Decimal(str(value))
    elif isinstance(value, str):
        s = value.strip()
        if not s:
            raise ValueError("amount is empty")
        try:
            d = Decimal(s)
        except InvalidOperation as exc:
            raise ValueError(f"invalid amount: {value!r}") from exc
    else:
        raise ValueError(f"invalid amount: {value!r}")
    if not d.is_finite():
        raise ValueError(f"amount must be finite: {value!r}")
    if abs(d) > MAX_MONEY:
        raise ValueError(f"amount out of range (max {MAX_MONEY}): {value!r}")
    return quantize_money(d)


def _naive_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(UTC).replace(tzinfo=None)


def parse_datetime(value: Any) -> datetime:
    """Parse a transaction timestamp into a naive ``datetime``.

    Aware timestamps are converted to UTC first. Strings accept ISO 8601 and
    the common bank-export layouts in ``_DATE_FORMATS``; a trailing time part
    after whitespace is ignored for the non-ISO layouts.
    """

    if isinstance(value, datetime):
        return _naive_utc(value)
    if isinstance(value, date):
        return datetime(value.year, value.month, value.day)
    if not isinstance(value, str):
        raise ValueError(f"invalid date: {value!r}")
    s = value.strip()
    if not s:
        raise ValueError("date is empty")
    try:
        return _naive_utc(datetime.fromisoformat(s.replace("Z", "+00:00")))
    except ValueError:
        pass
    candidates = [s]
    first = s.split()[0]
    if first != s:
        candidates.append(first)
    for candidate in candidates:
        for fmt in _DATE_FORMATS:
            try:
                return datetime.strptime(candidate, fmt)
            except ValueError:
                continue
    raise ValueError(f"invalid date: {value!r}")


def _check_month_key(value: str) -> str:
    parse_month_key(value)
    return value.strip()


def _dedupe_integrations(value: Any) -> list[str]:
    if value is None:
        return []
    if isinstance(value, str) or not isinstance(value, list | tuple | set | frozenset):
        raise ValueError("payment integrations must be a list of provider ids")
    out: set[str] = set()
    for item in value:
        if not isinstance(item, str):
            raise ValueError(f"invalid provider id: {item!r}")
        s = item.strip().lower()
        if s:
            out.add(s)
    return sorted(out)


def _check_currency(value: str) -> str:
    code = value.strip().upper()
    if len(code) != 3 or not code.isalpha():
        raise ValueError(f"currency must be a 3-letter ISO code: {value!r}")
    return code


Money = Annotated[Decimal, BeforeValidator(to_money)]
Timestamp = Annotated[datetime, BeforeValidator(parse_datetime)]
CategoryField = Annotated[Category, BeforeValidator(Category.coerce)]
MonthKey = Annotated[str, AfterValidator(_check_month_key)]
CurrencyCode = Annotated[str, AfterValidator(_check_currency)]
Integrations = Annotated[list[str], BeforeValidator(_dedupe_integrations)]
Description = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]

# Wire payloads use camelCase keys; Python callers may use field names.
_WIRE_CONFIG = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# CSV upload rows
# ---------------------------------------------------------------------------


class CsvTransactionRow(BaseModel):
    """One raw CSV row as posted to the upload endpoint.

    Every field is a string exactly as exported; parsing happens during
    normalization. Unknown keys are ignored.
    """

    model_config = ConfigDict(strict=True, extra="ignore")

    date: str
    description: str
    amount: str
    category: str | None = None
    merchant: str | None = None
    notes: str | None = None


# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------


class TransactionDraft(BaseModel):
    """A normalized transaction not yet bound to a user or persisted."""

    model_config = _WIRE_CONFIG

    date: Timestamp
    description: Description
    amount: Money
    category: CategoryField = Category.OTHER
    merchant: str | None = None
    notes: str | None = None

    def for_user(self, user_id: int) -> TransactionCreate:
        return TransactionCreate(user_id=user_id, **self.model_dump())


class TransactionCreate(TransactionDraft):
    user_id: int


class Transaction(TransactionCreate):
    id: int


class TransactionUpdate(BaseModel):
    """Partial update; only fields explicitly set are applied."""

    model_config = _WIRE_CONFIG

    date: Timestamp | None = None
    description: Description | None = None
    amount: Money | None = None
    category: CategoryField | None = None
    merchant: str | None = None
    notes: str | None = None


# ---------------------------------------------------------------------------
# Budgets
# ---------------------------------------------------------------------------

# Per-category budget fields, keyed by the category they cap.
BUDGET_CATEGORY_FIELDS: dict[Category, str] = {
    Category.HOUSING: "housing_budget",
    Category.FOOD: "food_budget",
    Category.TRANSPORTATION: "transportation_budget",
    Category.UTILITIES: "utilities_budget",
    Category.ENTERTAINMENT: "entertainment_budget",
    Category.SHOPPING: "shopping_budget",
    Category.HEALTHCARE: "healthcare_budget",
    Category.EDUCATION: "education_budget",
    Category.PERSONAL: "personal_budget",
    Category.TRAVEL: "travel_budget",
    Category.OTHER: "other_budget",
}


class BudgetValues(BaseModel):
    """Optional monetary fields shared by budget payloads and records."""

    model_config = _WIRE_CONFIG

    housing_budget: Money | None = None
    food_budget: Money | None = None
    transportation_budget: Money | None = None
    utilities_budget: Money | None = None
    entertainment_budget: Money | None = None
    shopping_budget: Money | None = None
    healthcare_budget: Money | None = None
    education_budget: Money | None = None
    personal_budget: Money | None = None
    travel_budget: Money | None = None
    other_budget: Money | None = None
    savings_goal: Money | None = None


class BudgetIn(BudgetValues):
    """Budget submission body (``POST /api/budget``)."""

    month_year: MonthKey
    total_budget: Money


class BudgetUpdate(BudgetValues):
    total_budget: Money | None = None


class Budget(BudgetIn):
    id: int
    user_id: int

    def category_budget(self, category: Category) -> Decimal | None:
        name = BUDGET_CATEGORY_FIELDS.get(category)
        return getattr(self, name) if name else None


# ---------------------------------------------------------------------------
# Users / settings
# ---------------------------------------------------------------------------


class UserSettings(BaseModel):
    model_config = _WIRE_CONFIG

    id: int
    username: str
    currency: CurrencyCode = "USD"
    enable_budget_warnings: bool = True
    payment_integrations: Integrations = Field(default_factory=list)


class UserSettingsUpdate(BaseModel):
    """Partial settings update; omitted fields keep their stored values."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    currency: CurrencyCode | None = None
    enable_budget_warnings: bool | None = None
    payment_integrations: Integrations | None = None

    @field_validator("enable_budget_warnings", mode="before")
    @classmethod
    def _strict_bool(cls, v: Any) -> Any:
        if v is None or isinstance(v, bool):
            return v
        raise ValueError("enableBudgetWarnings must be a boolean")


# ---------------------------------------------------------------------------
# Derived analytics values
# ---------------------------------------------------------------------------


def _num(d: Decimal) -> float:
    return float(d)


@dataclass(frozen=True, slots=True)
class MonthlySummary:
    """Totals for one calendar month.

    ``total_spent`` is the plain sum of signed amounts, so income entries
    reduce it. ``compared_to_previous`` is the percent change against the
    prior month's total, or ``0.0`` when that total is not positive.
    """

    month: str
    total_spent: Decimal
    compared_to_previous: float
    categories: Mapping[str, Decimal] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "month": self.month,
            "totalSpent": _num(self.total_spent),
            "comparedToPrevious": self.compared_to_previous,
            "categories": {str(k): _num(v) for k, v in self.categories.items()},
        }


@dataclass(frozen=True, slots=True)
class CategoryBreakdownItem:
    category: str
    amount: Decimal
    percentage: float
    color: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "category": str(self.category),
            "amount": _num(self.amount),
            "percentage": self.percentage,
            "color": self.color,
        }


@dataclass(frozen=True, slots=True)
class BudgetRecommendation:
    category: Category
    percentage: int
    amount: Decimal
    icon: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "category": str(self.category),
            "percentage": self.percentage,
            "amount": _num(self.amount),
            "icon": self.icon,
        }


@dataclass(frozen=True, slots=True)
class CategoryBudgetStatus:
    category: Category
    spent: Decimal
    budgeted: Decimal | None

    @property
    def over_budget(self) -> bool:
        return self.budgeted is not None and self.spent > self.budgeted

    def to_dict(self) -> dict[str, Any]:
        return {
            "category": str(self.category),
            "spent": _num(self.spent),
            "budgeted": _num(self.budgeted) if self.budgeted is not None else None,
            "overBudget": self.over_budget,
        }


@dataclass(frozen=True, slots=True)
class BudgetStatus:
    """Spending for a month set against that month's budget."""

    month: str
    total_budget: Decimal
    total_spent: Decimal
    categories: tuple[CategoryBudgetStatus, ...] = ()

    @property
    def remaining(self) -> Decimal:
        return self.total_budget - self.total_spent

    @property
    def over_budget(self) -> bool:
        return self.total_spent > self.total_budget

    def to_dict(self) -> dict[str, Any]:
        return {
            "month": self.month,
            "totalBudget": _num(self.total_budget),
            "totalSpent": _num(self.total_spent),
            "remaining": _num(self.remaining),
            "overBudget": self.over_budget,
            "categories": [c.to_dict() for c in self.categories],
        }


__all__ = [
    "MAX_MONEY",
    "BUDGET_CATEGORY_FIELDS",
    "Budget",
    "BudgetIn",
    "BudgetRecommendation",
    "BudgetStatus",
    "BudgetUpdate",
    "BudgetValues",
    "CategoryBreakdownItem",
    "CategoryBudgetStatus",
    "CsvTransactionRow",
    "MonthlySummary",
    "Transaction",
    "TransactionCreate",
    "TransactionDraft",
    "TransactionUpdate",
    "UserSettings",
    "UserSettingsUpdate",
    "parse_datetime",
    "quantize_money",
    "to_money",
]
