"""Financial Modeling Prep quote provider."""
from __future__ import annotations

import logging
from typing import Any

from ..models import Quote
from .http import ProviderError, fetch_json, to_float

logger = logging.getLogger(__name__)

FMP_QUOTE_URL = "https://financialmodelingprep.com/api/v3/quote"


def parse_fmp_item(item: dict[str, Any]) -> Quote:
    return Quote(
        symbol=item.get("symbol", ""),
        name=item.get("name") or item.get("symbol"),
        price=to_float(item.get("price")),
        previous_close=to_float(item.get("previousClose")),
        change=to_float(item.get("change")),
        change_percent=to_float(item.get("changesPercentage")),
        currency="USD",
        exchange=item.get("exchange"),
        market_state="REGULAR",
    )


class FmpQuoteProvider:
    """Batch quotes from the FMP ``/quote`` endpoint (USD listings only)."""

    def __init__(self, api_key: str = "demo", timeout: float = 8) -> None:
        self.api_key = api_key
        self.timeout = timeout

    @property
    def name(self) -> str:
        return "fmp"

    async def fetch_quotes(self, symbols: list[str]) -> list[Quote]:
        if not symbols:
            return []

        url = f"{FMP_QUOTE_URL}/{','.join(symbols)}"
        data = await fetch_json(url, params={"apikey": self.api_key}, timeout=self.timeout)
        if not isinstance(data, list) or not data:
            raise ProviderError("No data from FMP")

        quotes = [parse_fmp_item(item) for item in data]
        logger.debug("FMP returned %d quotes", len(quotes))
        return quotes
