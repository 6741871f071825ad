"""Plain-text report builders for the CLI and notifications."""
from __future__ import annotations

from datetime import datetime, timezone

from ..formatting import format_currency_eur, format_currency_inr, format_percent, sig
from ..models import (
    FxRates,
    GrowthMetrics,
    HoldingComputed,
    PortfolioMetrics,
    PriceAlert,
    PricePoint,
    Quote,
    Valuation,
    DashboardSummary,
    WatchlistItem,
)
from ..valuation.metrics import realized_volatility, series_return

_RULE = "━" * 78


def _now_str() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%S")


def _qty(row: HoldingComputed) -> str:
    return f"{sig(row.qty, 4)} {row.unit}" if row.unit else sig(row.qty, 4)


def _holding_line(row: HoldingComputed) -> str:
    if row.last_price > 0:
        price = f"{sig(row.last_price, 2)} {row.currency}"
        change = format_percent(row.change_pct) if row.change_pct is not None else "—"
    else:
        price, change = "n/a", "—"
    return (
        f"{row.symbol:<10} {_qty(row):>10} {price:>14} {change:>8} "
        f"{format_currency_eur(row.value_eur):>14} {format_currency_eur(row.pnl_eur):>13} "
        f"{format_percent(row.pnl_pct):>9}"
    )


def build_holdings_report(
    title: str,
    valuation: Valuation,
    fx: FxRates,
    summary: DashboardSummary,
) -> str:
    header = (
        f"{'Symbol':<10} {'Qty':>10} {'Price':>14} {'Day':>8} "
        f"{'Value':>14} {'P&L':>13} {'P&L %':>9}"
    )
    lines = [_holding_line(row) for row in valuation.rows]
    totals = valuation.totals
    usd = fx.rates.get("USD", 0.0)
    gbp = fx.rates.get("GBP", 0.0)

    stale = "" if summary.has_valid_data else " (last recorded value, no live quotes)"
    return (
        f"📊 {title}\n"
        f"{_RULE}\n"
        f"{header}\n"
        f"{_RULE}\n"
        + "\n".join(lines)
        + f"\n{_RULE}\n"
        f"Total value: {format_currency_eur(totals.value_eur)} · "
        f"Cost: {format_currency_eur(totals.cost_eur)} · "
        f"P&L: {format_currency_eur(totals.pnl_eur)} ({format_percent(totals.pnl_pct)})\n"
        f"Current: {format_currency_eur(summary.current_value_eur)}{stale} · "
        f"{format_currency_inr(summary.current_value_inr)}\n"
        f"Growth since inception: {format_currency_eur(summary.total_growth_eur)} "
        f"({format_percent(summary.total_growth_percent)})\n"
        f"Priced holdings: {summary.valid_holdings}/{len(valuation.rows)}\n"
        f"FX: 1 EUR = {usd:.4f} USD · {gbp:.4f} GBP ({fx.source or 'unknown'})\n"
        f"\n"
        f"{_now_str()} UTC"
    )


def _weights_block(title: str, weights: dict[str, float]) -> str:
    ordered = sorted(weights.items(), key=lambda kv: kv[1], reverse=True)
    body = "\n".join(f"  {name:<22} {weight:6.2f}%" for name, weight in ordered)
    return f"{title}\n{body or '  —'}"


def build_metrics_report(metrics: PortfolioMetrics) -> str:
    return (
        f"📈 Portfolio metrics\n"
        f"{_RULE}\n"
        f"Value: {format_currency_eur(metrics.total_value)} · "
        f"P&L: {format_currency_eur(metrics.total_pnl)} "
        f"({format_percent(metrics.total_pnl_percent)})\n"
        f"Day change: {format_currency_eur(metrics.day_change)} "
        f"({format_percent(metrics.day_change_percent)})\n"
        f"Volatility: {metrics.volatility * 100:.2f}% · Beta: {metrics.beta:.2f} · "
        f"Sharpe: {metrics.sharpe_ratio:.2f} · Max drawdown: {metrics.max_drawdown * 100:.2f}%\n"
        f"\n"
        f"{_weights_block('Sectors', metrics.sector_weights)}\n"
        f"\n"
        f"{_weights_block('Regions', metrics.geographic_weights)}\n"
        f"\n"
        f"{_now_str()} UTC"
    )


def build_growth_report(growth: GrowthMetrics) -> str:
    return (
        f"🌱 Growth over {sig(growth.time_horizon_years)} years\n"
        f"Initial: {format_currency_eur(growth.initial_value)} → "
        f"Current: {format_currency_eur(growth.current_value)}\n"
        f"Total return: {format_currency_eur(growth.total_return)} "
        f"({format_percent(growth.total_return_percent)})\n"
        f"CAGR: {growth.cagr:.2f}% · "
        f"Average annual growth: {growth.average_annual_growth:.2f}%"
    )


def build_alert_message(alert: PriceAlert, quote: Quote | None) -> str:
    price = f"{sig(quote.price, 2)} {quote.currency or ''}".strip() if quote else "n/a"
    return (
        f"🔔 {alert.symbol} · {alert.type.replace('_', ' ')} {sig(alert.condition, 4)}\n"
        f"\n"
        f"{alert.message}\n"
        f"Last price: {price}\n"
        f"\n"
        f"{_now_str()} UTC"
    )


def build_refresh_log(
    valuation: Valuation,
    summary: DashboardSummary,
    fx: FxRates,
    alerts_triggered: int = 0,
) -> str:
    """Short per-refresh status line pushed silently to the log channel."""
    totals = valuation.totals
    lines = [
        f"Value: {format_currency_eur(summary.current_value_eur)} · "
        f"P&L: {format_currency_eur(totals.pnl_eur)} ({format_percent(totals.pnl_pct)})",
        f"Priced: {summary.valid_holdings}/{len(valuation.rows)} · FX: {fx.source or 'unknown'}",
    ]
    if not summary.has_valid_data:
        lines.append("⚠️ No live quotes, showing last recorded value")
    if alerts_triggered:
        lines.append(f"🔔 {alerts_triggered} alert(s) triggered")
    lines.append(f"{_now_str()} UTC")
    return "\n".join(lines)


def build_history_report(
    symbol: str,
    timeframe: str,
    points: list[PricePoint],
    source: str,
    periods_per_year: int | None = None,
) -> str:
    if not points:
        return f"📉 {symbol} · {timeframe}: no price data ({source})"

    prices = [p.price for p in points]
    first = datetime.fromtimestamp(points[0].timestamp, timezone.utc).strftime("%Y-%m-%d %H:%M")
    last = datetime.fromtimestamp(points[-1].timestamp, timezone.utc).strftime("%Y-%m-%d %H:%M")
    lines = [
        f"📉 {symbol} · {timeframe} ({len(points)} bars from {source})",
        f"{first} → {last} UTC",
        f"Open: {sig(prices[0], 2)} · Close: {sig(prices[-1], 2)} · "
        f"Change: {format_percent(series_return(prices))}",
        f"High: {sig(max(prices), 2)} · Low: {sig(min(prices), 2)}",
    ]
    if periods_per_year:
        lines.append(f"Realized volatility: {realized_volatility(prices, periods_per_year) * 100:.2f}%")
    return "\n".join(lines)


def build_watchlist_report(name: str, items: list[WatchlistItem], quotes: dict[str, Quote]) -> str:
    if not items:
        return f"👀 {name}: empty"
    lines = [f"👀 {name}"]
    for item in items:
        quote = quotes.get(item.symbol)
        if quote is None:
            lines.append(f"  {item.symbol:<10} {'n/a':>14}")
            continue
        price = f"{sig(quote.price, 2)} {quote.currency or ''}".strip()
        change = format_percent(quote.change_percent) if quote.change_percent is not None else "—"
        lines.append(f"  {item.symbol:<10} {price:>14} {change:>8}")
    return "\n".join(lines)
