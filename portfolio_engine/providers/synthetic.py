"""Synthetic quote and FX providers: the always-succeeding last resort.

Prices are jittered around fixed reference levels so a dashboard stays
usable (and plausible) when every live source is down.
"""
from __future__ import annotations

import random
from typing import Optional

from ..models import Quote

# symbol -> (reference price in native currency, display name)
REFERENCE_PRICES: dict[str, tuple[float, str]] = {
    "AAPL": (190.0, "Apple Inc."),
    "MSFT": (430.0, "Microsoft Corporation"),
    "GOOGL": (150.0, "Alphabet Inc."),
    "AMZN": (160.0, "Amazon.com Inc."),
    "NVDA": (875.0, "NVIDIA Corporation"),
    "TSLA": (250.0, "Tesla Inc."),
    "AMD": (142.0, "Advanced Micro Devices"),
    "PLTR": (28.0, "Palantir Technologies"),
    "CRWD": (312.0, "CrowdStrike Holdings"),
    "JPM": (180.0, "JPMorgan Chase & Co."),
    "JNJ": (170.0, "Johnson & Johnson"),
    "PFE": (43.0, "Pfizer Inc."),
    "KO": (60.0, "The Coca-Cola Company"),
    "CAT": (280.0, "Caterpillar Inc."),
    "VNQ": (95.0, "Vanguard REIT ETF"),
    "XAUUSD=X": (2080.0, "Gold Spot"),
    "SHEL.L": (26.0, "Shell PLC"),
    "AZN.L": (110.0, "AstraZeneca PLC"),
    "HSBA.L": (6.8, "HSBC Holdings PLC"),
    "VOD.L": (0.9, "Vodafone Group PLC"),
    "BP.L": (5.2, "BP PLC"),
    "LLOY.L": (0.55, "Lloyds Banking Group"),
    "BARC.L": (2.0, "Barclays PLC"),
}

HIGH_VOLATILITY_SYMBOLS = frozenset({"PLTR", "CRWD", "SNOW"})

DEFAULT_REFERENCE_PRICE = 100.0

# EUR cross rates the synthetic FX provider jitters around: (centre, full spread)
REFERENCE_FX: dict[str, tuple[float, float]] = {
    "USD": (1.08, 0.03),
    "GBP": (0.87, 0.015),
    "INR": (90.0, 2.5),
}


def is_london_listing(symbol: str) -> bool:
    return symbol.upper().endswith(".L")


class SyntheticQuoteProvider:
    """Generate plausible quotes for any symbol; never fails."""

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self._rng = rng or random.Random()

    @property
    def name(self) -> str:
        return "synthetic"

    def _reference(self, symbol: str) -> tuple[float, str]:
        if symbol in REFERENCE_PRICES:
            return REFERENCE_PRICES[symbol]
        if is_london_listing(symbol):
            return self._rng.random() * 20 + 5, f"{symbol[:-2]} PLC"
        return DEFAULT_REFERENCE_PRICE, symbol

    def quote(self, symbol: str) -> Quote:
        base_price, name = self._reference(symbol)
        jitter = 0.08 if symbol in HIGH_VOLATILITY_SYMBOLS else 0.04

        price = base_price + (self._rng.random() - 0.5) * base_price * jitter
        change_percent = (self._rng.random() - 0.5) * 3
        previous_close = price / (1 + change_percent / 100)
        london = is_london_listing(symbol)

        return Quote(
            symbol=symbol,
            name=name,
            price=max(0.01, round(price, 2)),
            previous_close=max(0.01, round(previous_close, 2)),
            change=round(price - previous_close, 2),
            change_percent=round(change_percent, 2),
            currency="GBP" if london else "USD",
            exchange="LSE" if london else "NASDAQ",
            market_state="REGULAR",
        )

    async def fetch_quotes(self, symbols: list[str]) -> list[Quote]:
        return [self.quote(s) for s in symbols]


class SyntheticFxProvider:
    """Jittered EUR cross rates around their long-run levels; never fails."""

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self._rng = rng or random.Random()

    @property
    def name(self) -> str:
        return "synthetic"

    def rate(self, currency: str) -> float:
        centre, spread = REFERENCE_FX[currency]
        return centre + (self._rng.random() - 0.5) * spread

    async def fetch_rates(self, base: str = "EUR") -> dict[str, float]:
        return {currency: self.rate(currency) for currency in REFERENCE_FX}
