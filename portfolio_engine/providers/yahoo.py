"""Yahoo Finance quote provider (v7 quote endpoint)."""
from __future__ import annotations

import logging
from typing import Any

from ..models import Quote
from .http import ProviderError, fetch_json, to_float

logger = logging.getLogger(__name__)

YAHOO_QUOTE_URLS = (
    "https://query1.finance.yahoo.com/v7/finance/quote",
    "https://query2.finance.yahoo.com/v7/finance/quote",
)

_HEADERS = {
    "User-Agent": (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
        "(KHTML, like Gecko) Chrome/124.0 Safari/537.36"
    ),
    "Accept": "application/json",
    "Accept-Language": "en-US,en;q=0.9",
    "Referer": "https://finance.yahoo.com/",
}


def parse_yahoo_result(item: dict[str, Any]) -> Quote:
    """Map one ``quoteResponse.result`` entry onto a Quote."""
    price = item.get("regularMarketPrice")
    if price is None:
        price = item.get("postMarketPrice")
    if price is None:
        price = item.get("preMarketPrice")

    return Quote(
        symbol=item.get("symbol", ""),
        name=item.get("shortName") or item.get("longName") or item.get("symbol"),
        price=to_float(price),
        previous_close=to_float(item.get("regularMarketPreviousClose")),
        change=to_float(item.get("regularMarketChange")),
        change_percent=to_float(item.get("regularMarketChangePercent")),
        currency=item.get("currency") or "USD",
        exchange=item.get("fullExchangeName"),
        market_state=item.get("marketState"),
    )


class YahooQuoteProvider:
    """Fetch quotes from Yahoo Finance, trying each mirror host in turn."""

    def __init__(self, timeout: float = 8, urls: tuple[str, ...] = YAHOO_QUOTE_URLS) -> None:
        self.timeout = timeout
        self.urls = urls

    @property
    def name(self) -> str:
        return "yahoo"

    async def fetch_quotes(self, symbols: list[str]) -> list[Quote]:
        if not symbols:
            return []

        last_error: Exception | None = None
        for url in self.urls:
            try:
                data = await fetch_json(
                    url,
                    params={"symbols": ",".join(symbols)},
                    headers=_HEADERS,
                    timeout=self.timeout,
                )
                results = (data or {}).get("quoteResponse", {}).get("result") or []
                if not results:
                    raise ProviderError("No results")
                return [parse_yahoo_result(item) for item in results]
            except Exception as e:
                last_error = e
                logger.warning("Yahoo endpoint %s failed: %s", url, e)
                continue

        raise ProviderError(f"All Yahoo endpoints failed. Last error: {last_error}")
