"""Market data service: quotes through the provider chain, FX with caching."""
from __future__ import annotations

import logging
import random
import time
from typing import Any, Callable, Optional, Sequence

from ..config import AppConfig
from ..interfaces.fx_provider import FxProvider
from ..interfaces.history_provider import HistoryProvider
from ..interfaces.quote_provider import QuoteProvider
from ..models import FxRates, PricePoint, Quote, Timeframe
from ..providers import (
    AlphaVantageQuoteProvider,
    CurrencyApiFxProvider,
    ExchangeRateApiProvider,
    FixerFxProvider,
    FmpQuoteProvider,
    SyntheticFxProvider,
    SyntheticHistoryProvider,
    SyntheticQuoteProvider,
    YahooHistoryProvider,
    YahooQuoteProvider,
)
from ..valuation.currency import BASE_CURRENCY, FALLBACK_RATES
from .cache import KeyValueCache
from .provider_chain import ChainedQuoteProvider

logger = logging.getLogger(__name__)

FX_CACHE_KEY = f"fx:{BASE_CURRENCY}"
INR_FALLBACK_RATE = 90.0


def build_quote_chain(config: AppConfig, rng: Optional[random.Random] = None) -> ChainedQuoteProvider:
    """Assemble the ordered quote strategies for the configured data provider."""
    data = config.data
    synthetic = SyntheticQuoteProvider(rng)

    if data.provider == "alphavantage" and data.alphavantage_key:
        providers: list[QuoteProvider] = [
            AlphaVantageQuoteProvider(data.alphavantage_key, timeout=data.request_timeout),
            synthetic,
        ]
    else:
        if data.provider == "alphavantage":
            logger.warning("Alpha Vantage selected without an API key, using Yahoo chain")
        providers = [
            YahooQuoteProvider(timeout=data.request_timeout),
            FmpQuoteProvider(api_key=data.fmp_key, timeout=data.request_timeout),
            # The demo key only serves a handful of symbols per minute.
            AlphaVantageQuoteProvider(
                "demo", timeout=data.request_timeout, pause_seconds=0.5, max_symbols=3
            ),
            synthetic,
        ]
    return ChainedQuoteProvider(providers)


class MarketDataService:
    """Fetch fresh quotes and FX rates for one refresh cycle."""

    def __init__(
        self,
        quote_provider: QuoteProvider,
        fx_providers: Sequence[FxProvider],
        fallback_fx: FxProvider,
        cache: KeyValueCache | None = None,
        fx_cache_ttl_hours: float = 4.0,
        clock: Callable[[], float] = time.time,
        history_providers: Sequence[HistoryProvider] = (),
        fallback_history: HistoryProvider | None = None,
    ) -> None:
        self._quote_provider = quote_provider
        self._fx_providers = list(fx_providers)
        self._fallback_fx = fallback_fx
        self._cache = cache
        self._fx_cache_ttl = fx_cache_ttl_hours * 3600
        self._clock = clock
        self._history_providers = list(history_providers)
        self._fallback_history = fallback_history or SyntheticHistoryProvider(clock=clock)

    @classmethod
    def from_config(cls, config: AppConfig, rng: Optional[random.Random] = None) -> MarketDataService:
        data = config.data
        return cls(
            quote_provider=build_quote_chain(config, rng),
            fx_providers=[
                ExchangeRateApiProvider(timeout=data.request_timeout),
                FixerFxProvider(timeout=data.request_timeout),
                CurrencyApiFxProvider(api_key=data.currencyapi_key, timeout=data.request_timeout),
            ],
            fallback_fx=SyntheticFxProvider(rng),
            cache=KeyValueCache(data.cache_dir),
            fx_cache_ttl_hours=data.fx_cache_ttl_hours,
            history_providers=[YahooHistoryProvider(timeout=data.request_timeout)],
            fallback_history=SyntheticHistoryProvider(rng),
        )

    # ------------------------------------------------------------------
    # Quotes
    # ------------------------------------------------------------------

    async def get_quotes(self, symbols: Sequence[str]) -> dict[str, Quote]:
        """Return a symbol → Quote map; unpriced symbols are left out."""
        logger.info("Fetching quotes for %d symbols via %s", len(symbols), self._quote_provider.name)
        try:
            quotes = await self._quote_provider.fetch_quotes(list(symbols))
        except Exception as e:
            logger.error("Quote fetch failed: %s", e)
            return {}
        return {q.symbol: q for q in quotes if q.price > 0}

    # ------------------------------------------------------------------
    # FX
    # ------------------------------------------------------------------

    def _build_fx(self, raw: dict[str, float], source: str) -> FxRates:
        rates: dict[str, float] = {
            currency: raw.get(currency) or fallback
            for currency, fallback in FALLBACK_RATES.items()
        }
        if raw.get("INR"):
            rates["INR"] = raw["INR"]
        return FxRates(base=BASE_CURRENCY, rates=rates, fetched_at=self._clock(), source=source)

    def _store_fx(self, fx: FxRates) -> None:
        if self._cache is None:
            return
        self._cache.set(
            FX_CACHE_KEY,
            {
                "base": fx.base,
                "rates": dict(fx.rates),
                "fetched_at": fx.fetched_at,
                "source": fx.source,
            },
        )

    def _load_cached_fx(self) -> FxRates | None:
        if self._cache is None:
            return None
        cached: Any = self._cache.get(FX_CACHE_KEY)
        if not isinstance(cached, dict):
            return None
        try:
            fx = FxRates(
                base=cached.get("base", BASE_CURRENCY),
                rates={k: float(v) for k, v in cached["rates"].items()},
                fetched_at=float(cached["fetched_at"]),
                source=cached.get("source", ""),
            )
        except (KeyError, TypeError, ValueError, AttributeError) as e:
            logger.warning("Discarding malformed cached FX rates: %s", e)
            return None

        age = self._clock() - fx.fetched_at
        if age >= self._fx_cache_ttl:
            logger.info("Cached FX rates are stale (%.1f h old)", age / 3600)
            return None
        return fx

    async def get_fx_rates(self) -> FxRates:
        """Live rates, else recent cached rates, else synthetic rates."""
        for provider in self._fx_providers:
            try:
                raw = await provider.fetch_rates(BASE_CURRENCY)
            except Exception as e:
                logger.warning("FX provider %s failed: %s", provider.name, e)
                continue

            fx = self._build_fx(raw, provider.name)
            self._store_fx(fx)
            logger.info("FX rates loaded from %s: %s", provider.name, dict(fx.rates))
            return fx

        cached = self._load_cached_fx()
        if cached is not None:
            logger.info("Using cached FX rates: %s", dict(cached.rates))
            return cached

        fx = self._build_fx(await self._fallback_fx.fetch_rates(BASE_CURRENCY), self._fallback_fx.name)
        logger.warning("Using fallback FX rates: %s", dict(fx.rates))
        return fx

    async def get_eur_to_inr_rate(self, fx: FxRates | None = None) -> float:
        """EUR → INR rate for secondary display."""
        if fx is None:
            fx = await self.get_fx_rates()
        rate = fx.rates.get("INR")
        if rate and rate > 0:
            return float(rate)

        fallback = await self._fallback_fx.fetch_rates(BASE_CURRENCY)
        rate = fallback.get("INR") or INR_FALLBACK_RATE
        logger.warning("EUR->INR rate unavailable, using fallback %.2f", rate)
        return float(rate)

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    async def get_history(self, symbol: str, timeframe: Timeframe = "1D") -> tuple[list[PricePoint], str]:
        """Price series for ``symbol`` and the name of the source that served it.

        Live providers are tried in order; an empty series counts as a miss.
        The synthetic series is the last resort.
        """
        for provider in self._history_providers:
            try:
                points = await provider.fetch_history(symbol, timeframe)
            except Exception as e:
                logger.warning("History provider %s failed for %s: %s", provider.name, symbol, e)
                continue
            if points:
                return points, provider.name
            logger.info("History provider %s returned no data for %s", provider.name, symbol)

        logger.warning("Using %s price series for %s", self._fallback_history.name, symbol)
        return await self._fallback_history.fetch_history(symbol, timeframe), self._fallback_history.name
