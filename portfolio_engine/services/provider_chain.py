"""Provider chain: try each quote source in order, filling the gaps."""
from __future__ import annotations

import logging
from typing import Sequence

from ..interfaces.quote_provider import QuoteProvider
from ..models import Quote

logger = logging.getLogger(__name__)


class ChainedQuoteProvider:
    """Ask providers in sequence until every symbol has a positive price.

    Each later provider is only asked for the symbols still missing. A
    provider that raises is logged and skipped. Put an always-succeeding
    provider last to guarantee a complete result.
    """

    def __init__(self, providers: Sequence[QuoteProvider]) -> None:
        if not providers:
            raise ValueError("At least one quote provider is required")
        self.providers = list(providers)
        self.last_sources: dict[str, str] = {}

    @property
    def name(self) -> str:
        return " -> ".join(p.name for p in self.providers)

    async def fetch_quotes(self, symbols: list[str]) -> list[Quote]:
        results: dict[str, Quote] = {}
        remaining = list(dict.fromkeys(symbols))

        for provider in self.providers:
            if not remaining:
                break
            try:
                quotes = await provider.fetch_quotes(remaining)
            except Exception as e:
                logger.warning("Quote provider %s failed: %s", provider.name, e)
                continue

            wanted = set(remaining)
            for quote in quotes:
                if quote.symbol in wanted and quote.price > 0:
                    results[quote.symbol] = quote
                    self.last_sources[quote.symbol] = provider.name

            before = len(remaining)
            remaining = [s for s in remaining if s not in results]
            logger.info(
                "%s priced %d symbols (%d still missing)",
                provider.name,
                before - len(remaining),
                len(remaining),
            )

        if remaining:
            logger.warning("No quote for: %s", ", ".join(remaining))

        return [results[s] for s in dict.fromkeys(symbols) if s in results]
