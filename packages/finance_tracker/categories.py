"""Category domain: the closed category set and its display lookups.

``Category`` is the only category type that flows through the package. Raw
labels from CSV exports or request bodies are coerced with
:meth:`Category.coerce`, which maps anything unrecognized to
``Category.OTHER`` so unknown labels never propagate silently.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any


class Category(StrEnum):
    """Transaction categories, in schema declaration order."""

    HOUSING = "housing"
    FOOD = "food"
    TRANSPORTATION = "transportation"
    UTILITIES = "utilities"
    ENTERTAINMENT = "entertainment"
    SHOPPING = "shopping"
    HEALTHCARE = "healthcare"
    EDUCATION = "education"
    PERSONAL = "personal"
    TRAVEL = "travel"
    INCOME = "income"
    OTHER = "other"

    @classmethod
    def coerce(cls, value: Any) -> Category:
        """Return the member matching ``value`` (trimmed, case-insensitive).

        Falls back to ``Category.OTHER`` for ``None``, empty, or unknown labels.
        """

        if isinstance(value, Category):
            return value
        if value is None:
            return cls.OTHER
        key = str(value).strip().lower()
        try:
            return cls(key)
        except ValueError:
            return cls.OTHER


# ---------------------------
# Display lookups
# ---------------------------

DEFAULT_COLOR = "#adb5bd"
DEFAULT_ICON = "circle"

CATEGORY_COLORS: dict[Category, str] = {
    Category.HOUSING: "#0466c8",
    Category.FOOD: "#ff5400",
    Category.TRANSPORTATION: "#38b000",
    Category.UTILITIES: "#9c9ca9",
    Category.SHOPPING: "#d00000",
    Category.ENTERTAINMENT: "#ffbe0b",
    Category.HEALTHCARE: "#4ea8de",
    Category.EDUCATION: "#8338ec",
    Category.PERSONAL: "#fb5607",
    Category.TRAVEL: "#3a86ff",
    Category.INCOME: "#2ecc71",
    Category.OTHER: DEFAULT_COLOR,
}

CATEGORY_ICONS: dict[Category, str] = {
    Category.HOUSING: "home",
    Category.FOOD: "restaurant",
    Category.TRANSPORTATION: "car",
    Category.UTILITIES: "service",
    Category.SHOPPING: "shopping-bag",
    Category.ENTERTAINMENT: "film",
    Category.HEALTHCARE: "heart-pulse",
    Category.EDUCATION: "graduation-cap",
    Category.PERSONAL: "user",
    Category.TRAVEL: "plane",
    Category.INCOME: "wallet",
    Category.OTHER: DEFAULT_ICON,
}

CATEGORY_LABELS: dict[Category, str] = {
    Category.HOUSING: "Housing",
    Category.FOOD: "Food & Dining",
    Category.TRANSPORTATION: "Transportation",
    Category.UTILITIES: "Utilities",
    Category.SHOPPING: "Shopping",
    Category.ENTERTAINMENT: "Entertainment",
    Category.HEALTHCARE: "Healthcare",
    Category.EDUCATION: "Education",
    Category.PERSONAL: "Personal",
    Category.TRAVEL: "Travel",
    Category.INCOME: "Income",
    Category.OTHER: "Other",
}


def category_color(value: str) -> str:
    """Hex display color for ``value``; gray when the label is not a known category."""

    # StrEnum members hash and compare equal to their plain string values.
    return CATEGORY_COLORS.get(str(value).strip().lower(), DEFAULT_COLOR)


def category_icon(value: str) -> str:
    return CATEGORY_ICONS.get(str(value).strip().lower(), DEFAULT_ICON)


def format_category_name(value: str) -> str:
    """Human label for ``value``; unknown labels are capitalized as-is."""

    label = CATEGORY_LABELS.get(str(value).strip().lower())
    if label is not None:
        return label
    return value[:1].upper() + value[1:]


__all__ = [
    "CATEGORY_COLORS",
    "CATEGORY_ICONS",
    "CATEGORY_LABELS",
    "Category",
    "DEFAULT_COLOR",
    "DEFAULT_ICON",
    "category_color",
    "category_icon",
    "format_category_name",
]
