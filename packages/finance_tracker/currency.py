"""Currency display formatting for the user's preferred currency."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal


@dataclass(frozen=True, slots=True)
class CurrencyFormat:
    symbol: str
    placement: str  # "before" | "after"
    decimals: int = 2


CURRENCY_FORMATS: dict[str, CurrencyFormat] = {
    "USD": CurrencyFormat("$", "before"),
    "EUR": CurrencyFormat("€", "after"),
    "GBP": CurrencyFormat("£", "before"),
    "JPY": CurrencyFormat("¥", "before", decimals=0),
    "CAD": CurrencyFormat("C$", "before"),
    "AUD": CurrencyFormat("A$", "before"),
    "CNY": CurrencyFormat("¥", "before"),
    "INR": CurrencyFormat("₹", "before"),
    "BRL": CurrencyFormat("R$", "before"),
    "ZAR": CurrencyFormat("R", "before"),
}

DEFAULT_CURRENCY = "USD"


def is_supported_currency(code: str) -> bool:
    return code.strip().upper() in CURRENCY_FORMATS


def currency_symbol(code: str = DEFAULT_CURRENCY) -> str:
    return CURRENCY_FORMATS.get(code.strip().upper(), CURRENCY_FORMATS[DEFAULT_CURRENCY]).symbol


def format_currency(amount: Decimal | int | float, code: str = DEFAULT_CURRENCY) -> str:
    """Render ``amount`` with thousands separators and the currency symbol.

    Unknown codes format as USD. Negative amounts get a leading minus.
    """

    fmt = CURRENCY_FORMATS.get(code.strip().upper(), CURRENCY_FORMATS[DEFAULT_CURRENCY])
    d = amount if isinstance(amount, Decimal) else Decimal(str(amount))
    q = d.quantize(Decimal(1).scaleb(-fmt.decimals), rounding=ROUND_HALF_UP)
    sign = "-" if q < 0 else ""
    body = f"{abs(q):,.{fmt.decimals}f}"
    if fmt.placement == "after":
        return f"{sign}{body} {fmt.symbol}"
    return f"{sign}{fmt.symbol}{body}"


def format_percentage(value: float, decimal_places: int = 1) -> str:
    return f"{value:.{decimal_places}f}%"


__all__ = [
    "CURRENCY_FORMATS",
    "CurrencyFormat",
    "DEFAULT_CURRENCY",
    "currency_symbol",
    "format_currency",
    "format_percentage",
    "is_supported_currency",
]
