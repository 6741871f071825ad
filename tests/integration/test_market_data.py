"""Integration tests for MarketDataService: FX caching and fallbacks."""
from __future__ import annotations

import random
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from portfolio_engine.config import load_config
from portfolio_engine.models import PricePoint, Quote
from portfolio_engine.providers import (
    CurrencyApiFxProvider,
    ExchangeRateApiProvider,
    FixerFxProvider,
    ProviderError,
    SyntheticFxProvider,
    SyntheticHistoryProvider,
    YahooHistoryProvider,
)
from portfolio_engine.services import KeyValueCache, MarketDataService
from portfolio_engine.services.market_data import FX_CACHE_KEY

NOW = 1_700_000_000.0


def _fx_provider(rates: dict[str, float] | None = None, error: Exception | None = None) -> AsyncMock:
    provider = AsyncMock()
    provider.name = "live"
    if error is not None:
        provider.fetch_rates.side_effect = error
    else:
        provider.fetch_rates.return_value = rates
    return provider


def _service(
    tmp_path: Path,
    fx_provider: AsyncMock,
    quote_provider: AsyncMock | None = None,
    now: float = NOW,
) -> MarketDataService:
    return MarketDataService(
        quote_provider=quote_provider or AsyncMock(),
        fx_providers=[fx_provider],
        fallback_fx=SyntheticFxProvider(random.Random(0)),
        cache=KeyValueCache(tmp_path),
        fx_cache_ttl_hours=4.0,
        clock=lambda: now,
    )


class TestGetFxRates:
    @pytest.mark.asyncio
    async def test_live_rates_are_cached(self, tmp_path: Path) -> None:
        service = _service(tmp_path, _fx_provider({"USD": 1.1, "GBP": 0.85, "INR": 92.0}))
        fx = await service.get_fx_rates()

        assert fx.rates == {"USD": 1.1, "GBP": 0.85, "INR": 92.0}
        assert fx.source == "live"
        assert KeyValueCache(tmp_path).get(FX_CACHE_KEY)["rates"]["USD"] == 1.1

    @pytest.mark.asyncio
    async def test_zero_live_rate_replaced_by_fallback(self, tmp_path: Path) -> None:
        service = _service(tmp_path, _fx_provider({"USD": 0.0, "GBP": 0.85}))
        fx = await service.get_fx_rates()
        assert fx.rates["USD"] == 1.08
        assert "INR" not in fx.rates

    @pytest.mark.asyncio
    async def test_recent_cache_used_when_live_fails(self, tmp_path: Path) -> None:
        await _service(tmp_path, _fx_provider({"USD": 1.1, "GBP": 0.85, "INR": 92.0})).get_fx_rates()

        later = _service(tmp_path, _fx_provider(error=ProviderError("down")), now=NOW + 3600)
        fx = await later.get_fx_rates()
        assert fx.rates["USD"] == 1.1
        assert fx.source == "live"

    @pytest.mark.asyncio
    async def test_stale_cache_falls_back_to_synthetic(self, tmp_path: Path) -> None:
        await _service(tmp_path, _fx_provider({"USD": 1.1, "GBP": 0.85, "INR": 92.0})).get_fx_rates()

        later = _service(tmp_path, _fx_provider(error=ProviderError("down")), now=NOW + 5 * 3600)
        fx = await later.get_fx_rates()
        assert fx.source == "synthetic"
        assert 1.065 <= fx.rates["USD"] <= 1.095

    @pytest.mark.asyncio
    async def test_malformed_cache_falls_back(self, tmp_path: Path) -> None:
        KeyValueCache(tmp_path).set(FX_CACHE_KEY, {"rates": "garbage"})
        fx = await _service(tmp_path, _fx_provider(error=ProviderError("down"))).get_fx_rates()
        assert fx.source == "synthetic"


    @pytest.mark.asyncio
    async def test_unwritable_cache_still_returns_live_rates(self, tmp_path: Path) -> None:
        blocker = tmp_path / "cache"
        blocker.write_text("")
        service = _service(blocker, _fx_provider({"USD": 1.1, "GBP": 0.85, "INR": 92.0}))

        fx = await service.get_fx_rates()
        assert fx.rates["USD"] == 1.1
        assert fx.source == "live"

    @pytest.mark.asyncio
    async def test_next_provider_used_when_first_fails(self, tmp_path: Path) -> None:
        failing = _fx_provider(error=ProviderError("down"))
        backup = _fx_provider({"USD": 1.12, "GBP": 0.86, "INR": 93.0})
        backup.name = "fixer.io"
        service = MarketDataService(
            quote_provider=AsyncMock(),
            fx_providers=[failing, backup],
            fallback_fx=SyntheticFxProvider(random.Random(0)),
            cache=KeyValueCache(tmp_path),
            clock=lambda: NOW,
        )

        fx = await service.get_fx_rates()
        assert fx.source == "fixer.io"
        assert fx.rates["USD"] == 1.12
        failing.fetch_rates.assert_awaited_once_with("EUR")

    def test_from_config_orders_fx_sources(self, sample_yaml_path: Path) -> None:
        service = MarketDataService.from_config(load_config(sample_yaml_path))
        assert [type(p) for p in service._fx_providers] == [
            ExchangeRateApiProvider,
            FixerFxProvider,
            CurrencyApiFxProvider,
        ]
        assert isinstance(service._history_providers[0], YahooHistoryProvider)


class TestEurToInr:
    @pytest.mark.asyncio
    async def test_uses_fx_inr(self, tmp_path: Path) -> None:
        service = _service(tmp_path, _fx_provider({"USD": 1.1, "GBP": 0.85, "INR": 92.0}))
        fx = await service.get_fx_rates()
        assert await service.get_eur_to_inr_rate(fx) == 92.0

    @pytest.mark.asyncio
    async def test_synthetic_when_missing(self, tmp_path: Path) -> None:
        service = _service(tmp_path, _fx_provider({"USD": 1.1, "GBP": 0.85}))
        rate = await service.get_eur_to_inr_rate()
        assert 88.75 <= rate <= 91.25


class TestGetQuotes:
    @pytest.mark.asyncio
    async def test_drops_unpriced(self, tmp_path: Path) -> None:
        quote_provider = AsyncMock()
        quote_provider.name = "stub"
        quote_provider.fetch_quotes.return_value = [
            Quote(symbol="AAPL", price=190.0),
            Quote(symbol="MSFT", price=0.0),
        ]
        service = _service(tmp_path, _fx_provider({}), quote_provider)
        quotes = await service.get_quotes(["AAPL", "MSFT"])
        assert list(quotes) == ["AAPL"]

    @pytest.mark.asyncio
    async def test_provider_failure_returns_empty(self, tmp_path: Path) -> None:
        quote_provider = AsyncMock()
        quote_provider.name = "stub"
        quote_provider.fetch_quotes.side_effect = RuntimeError("boom")
        service = _service(tmp_path, _fx_provider({}), quote_provider)
        assert await service.get_quotes(["AAPL"]) == {}


def _history_provider(
    points: list[PricePoint] | None = None, error: Exception | None = None
) -> AsyncMock:
    provider = AsyncMock()
    provider.name = "yahoo"
    if error is not None:
        provider.fetch_history.side_effect = error
    else:
        provider.fetch_history.return_value = points or []
    return provider


def _history_service(tmp_path: Path, provider: AsyncMock) -> MarketDataService:
    return MarketDataService(
        quote_provider=AsyncMock(),
        fx_providers=[],
        fallback_fx=SyntheticFxProvider(random.Random(0)),
        cache=KeyValueCache(tmp_path),
        clock=lambda: NOW,
        history_providers=[provider],
        fallback_history=SyntheticHistoryProvider(random.Random(0), clock=lambda: NOW),
    )


class TestGetHistory:
    @pytest.mark.asyncio
    async def test_live_series(self, tmp_path: Path) -> None:
        points = [PricePoint(NOW - 60, 189.5), PricePoint(NOW, 190.0)]
        provider = _history_provider(points)
        series, source = await _history_service(tmp_path, provider).get_history("AAPL", "1W")

        assert series == points
        assert source == "yahoo"
        provider.fetch_history.assert_awaited_once_with("AAPL", "1W")

    @pytest.mark.asyncio
    async def test_failure_falls_back_to_synthetic(self, tmp_path: Path) -> None:
        service = _history_service(tmp_path, _history_provider(error=ProviderError("HTTP 404")))
        series, source = await service.get_history("AAPL", "1M")

        assert source == "synthetic"
        assert len(series) == 31
        assert series[-1].timestamp == NOW

    @pytest.mark.asyncio
    async def test_empty_series_falls_back_to_synthetic(self, tmp_path: Path) -> None:
        service = _history_service(tmp_path, _history_provider([]))
        series, source = await service.get_history("MSFT", "1D")
        assert source == "synthetic"
        assert all(p.price >= 430.0 * 0.7 for p in series)
