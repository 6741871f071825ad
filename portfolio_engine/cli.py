"""Command-line interface for the portfolio engine."""
from __future__ import annotations

import argparse
import asyncio
import sys
from datetime import date
from typing import get_args

from .config import AppConfig, load_config
from .interfaces.notifier import Notifier
from .logging_setup import configure_logging
from .models import AlertType, PortfolioSnapshot, PriceAlert
from .notifications import TelegramNotifier
from .providers.history import CHART_RANGES, PERIODS_PER_YEAR
from .services import KeyValueCache, MarketDataService, PortfolioRefresher, WatchlistManager
from .services.report import (
    build_growth_report,
    build_history_report,
    build_holdings_report,
    build_metrics_report,
    build_watchlist_report,
)
from .valuation import PortfolioCalculator

TIMEFRAMES = list(CHART_RANGES)
ALERT_TYPES = list(get_args(AlertType))


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse CLI parser."""
    parser = argparse.ArgumentParser(
        prog="portfolio-engine",
        description="Multi-currency portfolio valuation in EUR",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to config.yaml (default: config.yaml in project root)",
    )
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level (default: INFO)",
    )

    sub = parser.add_subparsers(dest="command")

    sub.add_parser("value", help="Value every holding once and print the table")
    sub.add_parser("metrics", help="Print risk and allocation metrics")

    growth_parser = sub.add_parser("growth", help="Print growth since the initial deposit")
    growth_parser.add_argument(
        "--initial",
        type=float,
        default=None,
        help="Initial value in EUR (default: snapshot.initial_deposit_eur)",
    )
    growth_parser.add_argument(
        "--years",
        type=float,
        default=None,
        help="Time horizon in years (default: years since snapshot.initial_year)",
    )

    watch_parser = sub.add_parser("watch", help="Refresh continuously and print each snapshot")
    watch_parser.add_argument(
        "interval",
        nargs="?",
        type=int,
        default=None,
        help="Refresh interval in seconds (overrides config)",
    )

    history_parser = sub.add_parser("history", help="Print a price series summary for one symbol")
    history_parser.add_argument("symbol", help="Ticker, e.g. AAPL or SHEL.L")
    history_parser.add_argument(
        "--timeframe",
        default="1M",
        choices=TIMEFRAMES,
        help="Series length (default: 1M)",
    )

    alert_parser = sub.add_parser("alert", help="Manage price alerts")
    alert_sub = alert_parser.add_subparsers(dest="alert_command", required=True)
    alert_add = alert_sub.add_parser("add", help="Create an alert")
    alert_add.add_argument("symbol")
    alert_add.add_argument("type", choices=ALERT_TYPES)
    alert_add.add_argument("condition", type=float, help="Price threshold (ignored for volume_spike)")
    alert_add.add_argument("--message", default="", help="Text sent when the alert fires")
    alert_list = alert_sub.add_parser("list", help="List alerts")
    alert_list.add_argument("--symbol", default=None, help="Only alerts for this symbol")
    alert_dismiss = alert_sub.add_parser("dismiss", help="Delete an alert by id")
    alert_dismiss.add_argument("alert_id")

    watchlist_parser = sub.add_parser("watchlist", help="Manage named watchlists")
    watchlist_sub = watchlist_parser.add_subparsers(dest="watchlist_command", required=True)
    for action, help_text in (("add", "Add a symbol"), ("remove", "Remove a symbol")):
        action_parser = watchlist_sub.add_parser(action, help=help_text)
        action_parser.add_argument("name", help="Watchlist name")
        action_parser.add_argument("symbol")
    watchlist_show = watchlist_sub.add_parser("show", help="Show a watchlist with live quotes")
    watchlist_show.add_argument("name", nargs="?", default=None, help="Omit to list watchlist names")

    return parser


def _build_notifiers(config: AppConfig) -> list[Notifier]:
    notifiers: list[Notifier] = []
    if config.notifications.telegram.enabled:
        notifiers.append(TelegramNotifier(config.notifications.telegram))
    return notifiers


def _default_years(config: AppConfig) -> float:
    if config.snapshot.initial_year <= 0:
        return 0.0
    return float(max(date.today().year - config.snapshot.initial_year, 0))


def _print_snapshot(config: AppConfig, snapshot: PortfolioSnapshot) -> None:
    print(build_holdings_report(config.dashboard.name, snapshot.valuation, snapshot.fx, snapshot.summary))
    print()


def _alert_line(alert: PriceAlert) -> str:
    state = "triggered" if alert.triggered else "active"
    line = f"{alert.id:<28} {alert.symbol:<10} {alert.type:<12} {alert.condition:>12,.2f}  {state}"
    return f"{line}  {alert.message}" if alert.message else line


def _run_alert(args: argparse.Namespace, watchlist: WatchlistManager) -> None:
    if args.alert_command == "add":
        message = args.message or f"{args.symbol} {args.type.replace('_', ' ')} {args.condition:g}"
        print(watchlist.create_alert(args.symbol, args.type, args.condition, message))
    elif args.alert_command == "list":
        alerts = watchlist.get_alerts(args.symbol)
        if not alerts:
            print("No alerts.")
        for alert in alerts:
            print(_alert_line(alert))
    elif args.alert_command == "dismiss":
        if not watchlist.dismiss_alert(args.alert_id):
            print(f"No alert with id {args.alert_id}", file=sys.stderr)
            sys.exit(1)
        print(f"Dismissed {args.alert_id}")


async def _run_watchlist(
    args: argparse.Namespace, watchlist: WatchlistManager, market_data: MarketDataService
) -> None:
    if args.watchlist_command == "add":
        watchlist.add_to_watchlist(args.name, args.symbol)
        print(f"{args.symbol} on {args.name}")
    elif args.watchlist_command == "remove":
        watchlist.remove_from_watchlist(args.name, args.symbol)
        print(f"{args.symbol} removed from {args.name}")
    elif args.watchlist_command == "show":
        if args.name is None:
            names = watchlist.watchlist_names()
            print("\n".join(names) if names else "No watchlists.")
            return
        items = watchlist.get_watchlist(args.name)
        quotes = await market_data.get_quotes([item.symbol for item in items]) if items else {}
        print(build_watchlist_report(args.name, items, quotes))


async def _run(args: argparse.Namespace) -> None:
    """Execute the selected command."""
    configure_logging(args.log_level)
    config = load_config(args.config)
    market_data = MarketDataService.from_config(config)
    watchlist = WatchlistManager(KeyValueCache(config.data.cache_dir))
    refresher = PortfolioRefresher(
        config,
        market_data,
        watchlist=watchlist,
        notifiers=_build_notifiers(config),
        interval_sec=getattr(args, "interval", None),
    )

    if args.command == "value":
        snapshot = await refresher.refresh_once()
        _print_snapshot(config, snapshot)
    elif args.command == "metrics":
        snapshot = await refresher.refresh_once()
        print(build_metrics_report(snapshot.metrics))
    elif args.command == "growth":
        fx = await market_data.get_fx_rates()
        quotes = await market_data.get_quotes([h.symbol for h in config.holdings])
        calculator = PortfolioCalculator(
            config.holdings,
            quotes,
            fx,
            profiles=config.symbols,
            default_profile=config.default_profile,
            risk_free_rate=config.risk.risk_free_rate,
            benchmark_return=config.risk.benchmark_return,
        )
        initial = args.initial if args.initial is not None else config.snapshot.initial_deposit_eur
        years = args.years if args.years is not None else _default_years(config)
        print(build_growth_report(calculator.growth_metrics(initial, years)))
    elif args.command == "history":
        points, source = await market_data.get_history(args.symbol, args.timeframe)
        print(
            build_history_report(
                args.symbol, args.timeframe, points, source, PERIODS_PER_YEAR.get(args.timeframe)
            )
        )
    elif args.command == "alert":
        _run_alert(args, watchlist)
    elif args.command == "watchlist":
        await _run_watchlist(args, watchlist, market_data)
    elif args.command == "watch":
        refresher.subscribe(lambda snapshot: _print_snapshot(config, snapshot))
        await refresher.run_forever()
    else:
        build_parser().print_help()
        sys.exit(1)


def main() -> None:
    """Entry point."""
    parser = build_parser()
    args = parser.parse_args()

    if not args.command:
        parser.print_help()
        sys.exit(1)

    try:
        asyncio.run(_run(args))
    except KeyboardInterrupt:
        print("\nStopped.")
