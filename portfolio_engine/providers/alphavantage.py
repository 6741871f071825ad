"""Alpha Vantage quote provider (GLOBAL_QUOTE, one request per symbol)."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

from ..models import Quote
from .http import ProviderError, fetch_json, to_float

logger = logging.getLogger(__name__)

ALPHAVANTAGE_URL = "https://www.alphavantage.co/query"


def parse_change_percent(raw: Any) -> Optional[float]:
    """Parse Alpha Vantage's ``"1.2345%"`` strings."""
    if raw is None:
        return None
    text = str(raw).strip().rstrip("%")
    try:
        return float(text)
    except ValueError:
        return None


def parse_global_quote(symbol: str, payload: dict[str, Any]) -> Optional[Quote]:
    """Map a GLOBAL_QUOTE payload onto a Quote, None when it carries no price."""
    q = payload.get("Global Quote") or {}
    price = to_float(q.get("05. price"))
    if price <= 0:
        return None

    previous_close = to_float(q.get("08. previous close"))
    return Quote(
        symbol=symbol,
        name=symbol,
        price=price,
        previous_close=previous_close,
        change=to_float(q.get("09. change"), price - previous_close),
        change_percent=parse_change_percent(q.get("10. change percent")),
    )


class AlphaVantageQuoteProvider:
    """Sequential GLOBAL_QUOTE lookups, paced to respect the free-tier limit."""

    def __init__(
        self,
        api_key: str,
        timeout: float = 10,
        pause_seconds: float = 0.35,
        max_symbols: int | None = None,
    ) -> None:
        self.api_key = api_key
        self.timeout = timeout
        self.pause_seconds = pause_seconds
        self.max_symbols = max_symbols

    @property
    def name(self) -> str:
        return "alphavantage"

    async def fetch_quotes(self, symbols: list[str]) -> list[Quote]:
        if not self.api_key:
            raise ProviderError("Alpha Vantage API key not configured")

        wanted = symbols[: self.max_symbols] if self.max_symbols else list(symbols)
        quotes: list[Quote] = []

        for i, symbol in enumerate(wanted):
            try:
                payload = await fetch_json(
                    ALPHAVANTAGE_URL,
                    params={"function": "GLOBAL_QUOTE", "symbol": symbol, "apikey": self.api_key},
                    timeout=self.timeout,
                )
                quote = parse_global_quote(symbol, payload or {})
                if quote is not None:
                    quotes.append(quote)
            except Exception as e:
                logger.warning("Alpha Vantage failed for %s: %s", symbol, e)

            if i < len(wanted) - 1 and self.pause_seconds > 0:
                await asyncio.sleep(self.pause_seconds)

        logger.info("Alpha Vantage quotes: %d/%d valid", len(quotes), len(wanted))
        if not quotes:
            raise ProviderError("No Alpha Vantage data")
        return quotes
