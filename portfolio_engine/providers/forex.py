"""Live FX rate providers, quoted per 1 unit of the base currency."""
from __future__ import annotations

import logging
from typing import Any

from .http import ProviderError, fetch_json, to_float

logger = logging.getLogger(__name__)

EXCHANGERATE_API_URL = "https://api.exchangerate-api.com/v4/latest"
FIXER_URL = "https://api.fixer.io/latest"
CURRENCYAPI_URL = "https://api.currencyapi.com/v3/latest"

REQUIRED_CURRENCIES = ("USD", "GBP", "INR")


def _require_rates(raw: dict[str, Any], source: str) -> dict[str, float]:
    rates = {c: to_float(raw.get(c)) for c in REQUIRED_CURRENCIES}
    missing = [c for c, r in rates.items() if r <= 0]
    if missing:
        raise ProviderError(f"Missing rates for {', '.join(missing)}")

    logger.debug("%s rates: %s", source, rates)
    return rates


class ExchangeRateApiProvider:
    """Rates from exchangerate-api.com, quoted per 1 unit of ``base``."""

    def __init__(self, timeout: float = 8, url: str = EXCHANGERATE_API_URL) -> None:
        self.timeout = timeout
        self.url = url

    @property
    def name(self) -> str:
        return "exchangerate-api.com"

    async def fetch_rates(self, base: str = "EUR") -> dict[str, float]:
        data = await fetch_json(f"{self.url}/{base}", timeout=self.timeout)
        return _require_rates((data or {}).get("rates") or {}, self.name)


class FixerFxProvider:
    """Rates from fixer.io."""

    def __init__(self, timeout: float = 8, url: str = FIXER_URL) -> None:
        self.timeout = timeout
        self.url = url

    @property
    def name(self) -> str:
        return "fixer.io"

    async def fetch_rates(self, base: str = "EUR") -> dict[str, float]:
        data = await fetch_json(
            self.url,
            params={"base": base, "symbols": ",".join(REQUIRED_CURRENCIES)},
            timeout=self.timeout,
        )
        return _require_rates((data or {}).get("rates") or {}, self.name)


class CurrencyApiFxProvider:
    """Rates from currencyapi.com; values arrive as ``{"USD": {"value": ...}}``."""

    def __init__(self, api_key: str = "cur_live_demo", timeout: float = 8, url: str = CURRENCYAPI_URL) -> None:
        self.api_key = api_key
        self.timeout = timeout
        self.url = url

    @property
    def name(self) -> str:
        return "currencyapi.com"

    async def fetch_rates(self, base: str = "EUR") -> dict[str, float]:
        data = await fetch_json(
            self.url,
            params={
                "apikey": self.api_key,
                "base_currency": base,
                "currencies": ",".join(REQUIRED_CURRENCIES),
            },
            timeout=self.timeout,
        )
        entries = (data or {}).get("data") or {}
        raw = {
            currency: entry.get("value")
            for currency, entry in entries.items()
            if isinstance(entry, dict)
        }
        return _require_rates(raw, self.name)
