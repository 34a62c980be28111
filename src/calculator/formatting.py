"""
QuickQuote - Currency Formatting

Locale-aware money formatting with a USD fallback for currency codes
that cannot be formatted.
"""

import logging
import math
from functools import lru_cache
from typing import Any, FrozenSet

from babel import Locale, UnknownLocaleError
from babel.core import get_global
from babel.numbers import UnknownCurrencyError, format_currency, get_territory_currencies

logger = logging.getLogger(__name__)

DEFAULT_LOCALE = "en_US"
FALLBACK_CURRENCY = "USD"


@lru_cache(maxsize=1)
def legal_tender_currencies() -> FrozenSet[str]:
    """Currency codes that are legal tender today in at least one territory."""
    codes = set()
    for territory in get_global("territory_currencies"):
        codes.update(get_territory_currencies(territory, tender=True))
    return frozenset(codes)


def validate_currency(currency_code: Any) -> None:
    """Raise UnknownCurrencyError unless the code is current legal tender."""
    if currency_code not in legal_tender_currencies():
        raise UnknownCurrencyError(currency_code)


def _amount(value: Any) -> float:
    if isinstance(value, bool):
        return float(value)
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


class CurrencyFormatter:
    """Formats amounts in one currency for one locale."""

    def __init__(self, currency_code: str, locale: str = DEFAULT_LOCALE):
        if isinstance(currency_code, str):
            currency_code = currency_code.strip().upper()
        validate_currency(currency_code)
        self.currency_code = currency_code
        self.locale = Locale.parse(locale)
        self.requested_currency = currency_code
        self.is_fallback = False

    def format(self, amount: Any) -> str:
        """Render an amount; anything that is not a finite number renders as 0."""
        return format_currency(_amount(amount), self.currency_code, locale=self.locale)

    def __repr__(self):
        return f"CurrencyFormatter({self.currency_code!r}, {str(self.locale)!r})"


def make_formatter(currency_code: str, locale: str = DEFAULT_LOCALE) -> CurrencyFormatter:
    """
    Build a formatter for a currency code, falling back to USD.

    Never raises: an unknown currency code (or a bad locale) gives a
    USD formatter whose ``requested_currency`` keeps the original code.
    """
    try:
        return CurrencyFormatter(currency_code, locale)
    except (UnknownCurrencyError, UnknownLocaleError, ValueError, TypeError) as e:
        logger.warning(
            "Cannot format currency %r (%s), falling back to %s", currency_code, e, FALLBACK_CURRENCY,
            extra={"requested_currency": currency_code},
        )

    try:
        formatter = CurrencyFormatter(FALLBACK_CURRENCY, locale)
    except (UnknownLocaleError, ValueError, TypeError):
        formatter = CurrencyFormatter(FALLBACK_CURRENCY, DEFAULT_LOCALE)
    formatter.requested_currency = currency_code
    formatter.is_fallback = True
    return formatter


def format_range(formatter: CurrencyFormatter, low: Any, high: Any) -> str:
    """Render a low/high pair as a single range string."""
    return f"{formatter.format(low)} – {formatter.format(high)}"
