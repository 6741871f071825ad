"""Conversion of native-currency amounts into the EUR reporting currency.

Rates follow the "units of foreign currency per 1 EUR" convention, so a
native amount is converted by DIVIDING by its rate:

    110 USD at USD=1.10  ->  110 / 1.10 = 100 EUR

A missing, zero, negative or NaN rate is treated as unavailable and the
hard-coded approximate rate for that currency is used instead.
"""
from __future__ import annotations

from ..models import FxRates

BASE_CURRENCY = "EUR"

# Approximate EUR cross rates used when the live rate is unavailable.
FALLBACK_RATES: dict[str, float] = {
    "USD": 1.08,
    "GBP": 0.87,
}

SUPPORTED_CURRENCIES: tuple[str, ...] = (BASE_CURRENCY, *FALLBACK_RATES)


class UnsupportedCurrencyError(ValueError):
    """Raised for a currency outside USD/GBP/EUR."""

    def __init__(self, currency: str) -> None:
        super().__init__(
            f"Unsupported currency '{currency}' "
            f"(expected one of {', '.join(SUPPORTED_CURRENCIES)})"
        )
        self.currency = currency


def fallback_rate(currency: str) -> float:
    """Return the hard-coded EUR cross rate for ``currency``."""
    try:
        return FALLBACK_RATES[currency]
    except KeyError:
        raise UnsupportedCurrencyError(currency) from None


def effective_rate(currency: str, fx: FxRates) -> float:
    """Return the live rate for ``currency`` or its fallback when unusable."""
    fallback = fallback_rate(currency)
    rate = fx.rates.get(currency)
    if rate is None or not rate > 0:
        return fallback
    return float(rate)


def convert_to_eur(amount: float, currency: str, fx: FxRates) -> float:
    """Convert ``amount`` in ``currency`` to EUR using ``fx``."""
    if currency == BASE_CURRENCY:
        return amount
    return amount / effective_rate(currency, fx)
