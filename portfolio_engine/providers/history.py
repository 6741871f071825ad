"""Historical price series: Yahoo chart API and a synthetic random walk."""
from __future__ import annotations

import logging
import random
import time
from typing import Any, Callable, Optional

from ..models import PricePoint, Timeframe
from .http import ProviderError, fetch_json, to_float
from .synthetic import DEFAULT_REFERENCE_PRICE, REFERENCE_PRICES

logger = logging.getLogger(__name__)

YAHOO_CHART_URL = "https://query1.finance.yahoo.com/v8/finance/chart"

_DAY = 24 * 60 * 60

# timeframe -> (lookback in seconds, Yahoo bar interval)
CHART_RANGES: dict[str, tuple[int, str]] = {
    "1D": (_DAY, "5m"),
    "1W": (7 * _DAY, "30m"),
    "1M": (30 * _DAY, "1d"),
    "3M": (90 * _DAY, "1d"),
    "6M": (180 * _DAY, "1d"),
    "1Y": (365 * _DAY, "1d"),
    "ALL": (5 * 365 * _DAY, "1wk"),
}

# timeframe -> (number of bars, seconds between bars) for generated series
SYNTHETIC_SERIES: dict[str, tuple[int, int]] = {
    "1D": (78, 5 * 60),
    "1W": (35, 30 * 60),
    "1M": (30, _DAY),
    "3M": (90, _DAY),
    "6M": (180, _DAY),
    "1Y": (252, _DAY),
    "ALL": (1260, _DAY),
}

# Bars per year for each timeframe's bar size; intraday bars are not annualised.
PERIODS_PER_YEAR: dict[str, int] = {"1M": 252, "3M": 252, "6M": 252, "1Y": 252, "ALL": 52}


def parse_yahoo_chart(data: dict[str, Any]) -> list[PricePoint]:
    """Map a v8 chart payload onto price points, dropping bars with no close."""
    results = ((data or {}).get("chart") or {}).get("result") or []
    if not results:
        raise ProviderError("No chart data")

    result = results[0]
    timestamps = result.get("timestamp") or []
    quote = ((result.get("indicators") or {}).get("quote") or [{}])[0]
    closes = quote.get("close") or []
    volumes = quote.get("volume") or []

    points: list[PricePoint] = []
    for i, ts in enumerate(timestamps):
        price = round(to_float(closes[i] if i < len(closes) else None), 2)
        if price <= 0:
            continue
        volume = to_float(volumes[i] if i < len(volumes) else None)
        points.append(PricePoint(timestamp=float(ts), price=price, volume=volume))
    return points


class YahooHistoryProvider:
    """Price series from the Yahoo Finance chart endpoint."""

    def __init__(
        self,
        timeout: float = 10,
        url: str = YAHOO_CHART_URL,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.timeout = timeout
        self.url = url
        self._clock = clock

    @property
    def name(self) -> str:
        return "yahoo"

    async def fetch_history(self, symbol: str, timeframe: Timeframe) -> list[PricePoint]:
        lookback, interval = CHART_RANGES.get(timeframe, CHART_RANGES["1D"])
        now = int(self._clock())
        data = await fetch_json(
            f"{self.url}/{symbol}",
            params={"period1": str(now - lookback), "period2": str(now), "interval": interval},
            headers={"User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"},
            timeout=self.timeout,
        )
        points = parse_yahoo_chart(data)
        logger.debug("Yahoo chart for %s (%s): %d points", symbol, timeframe, len(points))
        return points


class SyntheticHistoryProvider:
    """Random-walk series around the symbol's reference price; never fails."""

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._rng = rng or random.Random()
        self._clock = clock

    @property
    def name(self) -> str:
        return "synthetic"

    def series(self, symbol: str, timeframe: Timeframe) -> list[PricePoint]:
        bars, step = SYNTHETIC_SERIES.get(timeframe, (100, 60 * 60))
        base_price = REFERENCE_PRICES.get(symbol, (DEFAULT_REFERENCE_PRICE, symbol))[0]
        noise_scale = 0.003 if timeframe == "1D" else 0.01
        now = self._clock()

        price = base_price
        points: list[PricePoint] = []
        for i in range(bars, -1, -1):
            trend = (self._rng.random() - 0.5) * 0.002
            noise = (self._rng.random() - 0.5) * noise_scale
            # Floor at 70% of the reference so long walks stay plausible.
            price = max(price * (1 + trend + noise), base_price * 0.7)
            points.append(
                PricePoint(
                    timestamp=now - i * step,
                    price=round(price, 2),
                    volume=float(self._rng.randint(500_000, 5_500_000)),
                )
            )
        return points

    async def fetch_history(self, symbol: str, timeframe: Timeframe) -> list[PricePoint]:
        return self.series(symbol, timeframe)
