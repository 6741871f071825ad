"""Unit tests for the dashboard summary figures."""
from __future__ import annotations

import pytest

from portfolio_engine.config import SnapshotConfig
from portfolio_engine.models import FxRates, Holding, Quote
from portfolio_engine.valuation import compute_holdings, summarize


class TestSummarize:
    def test_live_values(
        self,
        aapl: Holding,
        shell: Holding,
        quotes: dict[str, Quote],
        fx: FxRates,
        sample_snapshot: SnapshotConfig,
    ) -> None:
        valuation = compute_holdings([aapl, shell], quotes, fx)
        summary = summarize(valuation, sample_snapshot, eur_inr_rate=90.0)

        assert summary.has_valid_data is True
        assert summary.current_value_eur == pytest.approx(8880.91, abs=0.01)
        assert summary.current_value_inr == pytest.approx(summary.current_value_eur * 90.0)
        assert summary.total_growth_eur == pytest.approx(summary.current_value_eur - 12184.06)
        assert summary.total_growth_percent == pytest.approx(
            summary.total_growth_eur / 12184.06 * 100
        )
        assert summary.valid_holdings == 2

    def test_top_performers_sorted_by_change(
        self, aapl, shell, quotes, fx, sample_snapshot
    ) -> None:
        valuation = compute_holdings([shell, aapl], quotes, fx)
        summary = summarize(valuation, sample_snapshot, 90.0)
        assert [r.symbol for r in summary.top_performers] == ["AAPL", "SHEL.L"]

        summary = summarize(valuation, sample_snapshot, 90.0, top_n=1)
        assert [r.symbol for r in summary.top_performers] == ["AAPL"]

    def test_category_allocation_priced_only(
        self, aapl, shell, quotes, fx, sample_snapshot
    ) -> None:
        valuation = compute_holdings([aapl, shell], {"AAPL": quotes["AAPL"]}, fx)
        summary = summarize(valuation, sample_snapshot, 90.0)
        assert set(summary.category_allocation) == {"US Stocks"}
        assert summary.category_allocation["US Stocks"] == pytest.approx(4398.15, abs=0.01)
        assert summary.valid_holdings == 1

    def test_nothing_priced_uses_recorded_total(
        self, aapl, shell, fx, sample_snapshot
    ) -> None:
        valuation = compute_holdings([aapl, shell], {}, fx)
        summary = summarize(valuation, sample_snapshot, 90.0)
        assert summary.has_valid_data is False
        assert summary.current_value_eur == 54762.25
        assert summary.total_growth_eur == pytest.approx(54762.25 - 12184.06)
        assert summary.valid_holdings == 0
        assert summary.top_performers == ()
        assert summary.category_allocation == {}

    def test_zero_deposit(self, aapl, quotes, fx) -> None:
        valuation = compute_holdings([aapl], quotes, fx)
        summary = summarize(valuation, SnapshotConfig(), 90.0)
        assert summary.total_growth_percent == 0.0
