"""Unit tests for plain-text report builders."""
from __future__ import annotations

from portfolio_engine.config import SnapshotConfig
from portfolio_engine.models import (
    FxRates,
    GrowthMetrics,
    Holding,
    PriceAlert,
    PricePoint,
    Quote,
    WatchlistItem,
)
from portfolio_engine.services.report import (
    build_alert_message,
    build_growth_report,
    build_history_report,
    build_holdings_report,
    build_metrics_report,
    build_refresh_log,
    build_watchlist_report,
)
from portfolio_engine.valuation import PortfolioCalculator, compute_holdings, summarize


class TestHoldingsReport:
    def test_contains_rows_and_totals(
        self,
        aapl: Holding,
        shell: Holding,
        quotes: dict[str, Quote],
        fx: FxRates,
        sample_snapshot: SnapshotConfig,
    ) -> None:
        valuation = compute_holdings([aapl, shell], {"AAPL": quotes["AAPL"]}, fx)
        summary = summarize(valuation, sample_snapshot, 90.0)
        report = build_holdings_report("Test Portfolio", valuation, fx, summary)

        assert "Test Portfolio" in report
        assert "€4,398.15" in report
        assert "n/a" in report
        assert "Priced holdings: 1/2" in report
        assert "1 EUR = 1.0800 USD" in report

    def test_stale_marker_when_nothing_priced(self, aapl, fx, sample_snapshot) -> None:
        valuation = compute_holdings([aapl], {}, fx)
        summary = summarize(valuation, sample_snapshot, 90.0)
        report = build_holdings_report("P", valuation, fx, summary)
        assert "€54,762.25 (last recorded value" in report


class TestOtherReports:
    def test_metrics_report(self, aapl, shell, quotes, fx, profiles) -> None:
        metrics = PortfolioCalculator([aapl, shell], quotes, fx, profiles=profiles).portfolio_metrics()
        report = build_metrics_report(metrics)
        assert "Sectors" in report
        assert "Technology" in report
        assert "United Kingdom" in report

    def test_growth_report(self) -> None:
        growth = GrowthMetrics(
            initial_value=10000.0,
            current_value=12100.0,
            total_return=2100.0,
            total_return_percent=21.0,
            annualized_return=10.0,
            cagr=10.0,
            time_horizon_years=2,
            average_annual_growth=10.5,
        )
        report = build_growth_report(growth)
        assert "2 years" in report
        assert "+21.00%" in report
        assert "CAGR: 10.00%" in report

    def test_alert_message_without_quote(self) -> None:
        alert = PriceAlert(
            id="AAPL_1", symbol="AAPL", type="price_above", condition=200.0,
            message="AAPL above 200", created_at=0.0,
        )
        message = build_alert_message(alert, None)
        assert "price above 200" in message
        assert "Last price: n/a" in message


class TestRefreshLog:
    def test_summary_line(self, aapl, shell, quotes, fx, sample_snapshot) -> None:
        valuation = compute_holdings([aapl, shell], quotes, fx)
        summary = summarize(valuation, sample_snapshot, 90.0)
        message = build_refresh_log(valuation, summary, fx, alerts_triggered=2)

        assert "Value: €8,880.91" in message
        assert "Priced: 2/2" in message
        assert "2 alert(s) triggered" in message
        assert "No live quotes" not in message

    def test_flags_missing_quotes(self, aapl, fx, sample_snapshot) -> None:
        valuation = compute_holdings([aapl], {}, fx)
        summary = summarize(valuation, sample_snapshot, 90.0)
        message = build_refresh_log(valuation, summary, fx)

        assert "Value: €54,762.25" in message
        assert "No live quotes" in message
        assert "alert" not in message


class TestHistoryReport:
    def test_series_statistics(self) -> None:
        points = [
            PricePoint(1_700_000_000.0, 100.0),
            PricePoint(1_700_086_400.0, 120.0),
            PricePoint(1_700_172_800.0, 90.0),
            PricePoint(1_700_259_200.0, 110.0),
        ]
        report = build_history_report("AAPL", "1M", points, "yahoo", periods_per_year=252)

        assert "AAPL · 1M (4 bars from yahoo)" in report
        assert "Open: 100 · Close: 110 · Change: +10.00%" in report
        assert "High: 120 · Low: 90" in report
        assert "Realized volatility:" in report

    def test_intraday_omits_volatility(self) -> None:
        points = [PricePoint(0.0, 50.0), PricePoint(300.0, 51.0)]
        report = build_history_report("MSFT", "1D", points, "synthetic")
        assert "Realized volatility" not in report

    def test_empty_series(self) -> None:
        assert "no price data" in build_history_report("X", "1D", [], "yahoo")


class TestWatchlistReport:
    def test_rows(self) -> None:
        items = [WatchlistItem(symbol="NVDA", added_at=0.0), WatchlistItem(symbol="ZZZ", added_at=0.0)]
        quotes = {"NVDA": Quote(symbol="NVDA", price=875.5, currency="USD", change_percent=1.25)}
        report = build_watchlist_report("tech", items, quotes)

        assert report.startswith("👀 tech")
        assert "875.5 USD" in report
        assert "+1.25%" in report
        assert "ZZZ" in report and "n/a" in report

    def test_empty(self) -> None:
        assert build_watchlist_report("tech", [], {}) == "👀 tech: empty"
