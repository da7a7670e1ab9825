"""CSV → normalized transaction drafts for heterogeneous bank exports.

Bank and card exports disagree on header names ("Date", "Transaction Date",
"Posted", ...). Instead of per-institution adapters, each semantic field has
an ordered alias list and the row's headers are searched in two passes:

1. exact, case-insensitive header match, aliases in priority order;
2. substring ("includes") match, aliases in priority order.

The first alias that matches any header wins. Parsing of the CSV text itself
follows RFC 4180 via the stdlib :mod:`csv` module.

Rows that fail validation do not abort the batch: they are replaced by an
"Invalid entry" placeholder at the same position and the reasons are appended
to the diagnostics list.
"""

from __future__ import annotations

import csv
import re
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from datetime import UTC, datetime
from decimal import Decimal
from io import StringIO
from typing import Any

from pydantic import ValidationError

from .categories import Category
from .categorize import classify
from .logging_setup import get_logger
from .models import TransactionDraft

_logger = get_logger("finance_tracker.normalizers")

# ---------------------------------------------------------------------------
# Header aliases (priority order matters)
# ---------------------------------------------------------------------------

FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "date": ("date", "time", "posted", "transaction date"),
    "description": ("description", "desc", "detail", "narration", "transaction", "memo"),
    "amount": ("amount", "sum", "value", "transaction amount"),
    "merchant": ("merchant", "payee", "vendor", "store", "retailer"),
    "category": ("category", "type", "transaction type", "classification"),
    "notes": ("notes", "note", "comment", "comments", "memo"),
    "debit": ("debit", "withdrawal", "expense"),
    "credit": ("credit", "deposit", "income"),
}

UNKNOWN_DESCRIPTION = "Unknown transaction"
PLACEHOLDER_DESCRIPTION = "Invalid entry"
PLACEHOLDER_NOTES = "Error in parsing"

_UNIFIED_AMOUNT_STRIP_RE = re.compile(r"[^0-9.\-]")
_SPLIT_AMOUNT_STRIP_RE = re.compile(r"[^0-9.]")


def find_column(headers: Iterable[str], aliases: Sequence[str]) -> str | None:
    """Return the header matching ``aliases`` using the two-pass strategy."""

    keys = [h for h in headers if isinstance(h, str)]
    lowered = [k.lower() for k in keys]
    for alias in aliases:
        a = alias.lower()
        for key, low in zip(keys, lowered, strict=True):
            if low == a:
                return key
    for alias in aliases:
        a = alias.lower()
        for key, low in zip(keys, lowered, strict=True):
            if a in low:
                return key
    return None


@dataclass(frozen=True, slots=True)
class ColumnMap:
    """Resolved source header per semantic field (``None`` when absent)."""

    date: str | None
    description: str | None
    amount: str | None
    merchant: str | None
    category: str | None
    notes: str | None
    debit: str | None
    credit: str | None

    @classmethod
    def detect(cls, headers: Iterable[str]) -> ColumnMap:
        hs = list(headers)
        return cls(**{name: find_column(hs, aliases) for name, aliases in FIELD_ALIASES.items()})


# ---------------------------------------------------------------------------
# Row mapping
# ---------------------------------------------------------------------------


def _cell(row: Mapping[str, Any], key: str | None) -> str:
    if key is None:
        return ""
    v = row.get(key)
    if v is None:
        return ""
    return str(v).strip()


def clean_amount(raw: str) -> str:
    """Strip everything except digits, ``.`` and ``-`` from a unified amount."""

    return _UNIFIED_AMOUNT_STRIP_RE.sub("", raw)


def resolve_amount(row: Mapping[str, Any], columns: ColumnMap) -> str:
    """Return the amount string for ``row``.

    A non-empty debit cell wins and is negated; otherwise a non-empty credit
    cell is kept positive; otherwise the unified amount column is cleaned.
    """

    debit = _cell(row, columns.debit)
    if debit:
        return "-" + _SPLIT_AMOUNT_STRIP_RE.sub("", debit)
    credit = _cell(row, columns.credit)
    if credit:
        return _SPLIT_AMOUNT_STRIP_RE.sub("", credit)
    return clean_amount(_cell(row, columns.amount) or "0")


def map_row(row: Mapping[str, Any], *, now: datetime | None = None) -> dict[str, Any]:
    """Map one raw row onto the canonical draft fields (unvalidated).

    Missing cells fall back to: date → ``now``; description →
    ``"Unknown transaction"``; amount → ``"0"``; merchant/notes → ``""``.
    The category is the row's own label when present, else the keyword
    classifier's verdict on the description.
    """

    columns = ColumnMap.detect(row.keys())
    description = _cell(row, columns.description) or UNKNOWN_DESCRIPTION
    raw_category = _cell(row, columns.category)
    category = Category.coerce(raw_category) if raw_category else classify(description)
    return {
        "date": _cell(row, columns.date) or (now or _utcnow()),
        "description": description,
        "amount": resolve_amount(row, columns),
        "category": category,
        "merchant": _cell(row, columns.merchant),
        "notes": _cell(row, columns.notes),
    }


def _utcnow() -> datetime:
    return datetime.now(UTC).replace(tzinfo=None)


def placeholder_draft(*, now: datetime | None = None) -> TransactionDraft:
    return TransactionDraft(
        date=now or _utcnow(),
        description=PLACEHOLDER_DESCRIPTION,
        amount=Decimal("0"),
        category=Category.OTHER,
        merchant="",
        notes=PLACEHOLDER_NOTES,
    )


@dataclass(frozen=True, slots=True)
class NormalizationResult:
    """Normalized drafts in input order plus per-row diagnostics.

    ``invalid_rows`` holds the 0-based positions whose draft is a placeholder.
    """

    transactions: tuple[TransactionDraft, ...]
    errors: tuple[str, ...] = ()
    invalid_rows: tuple[int, ...] = ()

    @property
    def valid_transactions(self) -> list[TransactionDraft]:
        bad = set(self.invalid_rows)
        return [t for i, t in enumerate(self.transactions) if i not in bad]


def _format_errors(row_number: int, exc: ValidationError) -> list[str]:
    out: list[str] = []
    for err in exc.errors(include_url=False):
        loc = ".".join(str(p) for p in err.get("loc", ())) or "row"
        out.append(f"Validation error in row {row_number}: {loc}: {err.get('msg', '')}")
    return out


def normalize_rows(
    rows: Iterable[Mapping[str, Any]],
    *,
    now: datetime | None = None,
) -> NormalizationResult:
    """Normalize raw key/value rows into :class:`TransactionDraft` records.

    Never raises for row-level problems. Output order matches input order;
    row numbers in diagnostics are 1-based.
    """

    drafts: list[TransactionDraft] = []
    errors: list[str] = []
    invalid: list[int] = []
    for pos, row in enumerate(rows):
        mapped = map_row(row, now=now)
        try:
            drafts.append(TransactionDraft.model_validate(mapped))
        except ValidationError as exc:
            row_errors = _format_errors(pos + 1, exc)
            _logger.warning(
                "normalize_rows:row_invalid row=%d errors=%d", pos + 1, len(row_errors)
            )
            errors.extend(row_errors)
            invalid.append(pos)
            drafts.append(placeholder_draft(now=now))
    _logger.info(
        "normalize_rows:done rows=%d invalid=%d", len(drafts), len(invalid)
    )
    return NormalizationResult(
        transactions=tuple(drafts), errors=tuple(errors), invalid_rows=tuple(invalid)
    )


# ---------------------------------------------------------------------------
# CSV loading
# ---------------------------------------------------------------------------


def read_csv_rows(csv_text: str) -> list[dict[str, str]]:
    """Parse CSV text (header row first) into dict rows, skipping blank lines."""

    with StringIO(csv_text.lstrip("\ufeff")) as f:
        reader = csv.DictReader(f)
        rows: list[dict[str, str]] = []
        for row in reader:
            # DictReader aggregates overflow cells under a ``None`` key; drop it.
            normalized = {k: (v if v is not None else "") for k, v in row.items() if k is not None}
            if all(not (v or "").strip() for v in normalized.values()):
                continue
            rows.append(normalized)
        return rows


class CSVNormalizer:
    """Normalize CSV text from any supported bank export.

    Usage
    -----
    result = CSVNormalizer.normalize(csv_text=...)  # -> NormalizationResult
    """

    @staticmethod
    def normalize(*, csv_text: str, now: datetime | None = None) -> NormalizationResult:
        return normalize_rows(read_csv_rows(csv_text), now=now)


__all__ = [
    "CSVNormalizer",
    "ColumnMap",
    "FIELD_ALIASES",
    "NormalizationResult",
    "clean_amount",
    "find_column",
    "map_row",
    "normalize_rows",
    "placeholder_draft",
    "read_csv_rows",
    "resolve_amount",
]
