"""Periodic refresh of quotes/FX and re-valuation of the portfolio."""
from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable, Optional, Sequence

from ..config import AppConfig
from ..interfaces.notifier import Notifier
from ..models import PortfolioSnapshot, PriceAlert, Quote
from ..valuation import PortfolioCalculator, compute_holdings, summarize
from .market_data import MarketDataService
from .report import build_alert_message, build_refresh_log
from .watchlist import WatchlistManager

logger = logging.getLogger(__name__)

Subscriber = Callable[[PortfolioSnapshot], None]


class PortfolioRefresher:
    """Fetch fresh market data on an interval and publish portfolio snapshots.

    Constructed once per session and passed to whoever needs snapshots;
    ``start()``/``stop()`` bound the background task.
    """

    def __init__(
        self,
        config: AppConfig,
        market_data: MarketDataService,
        watchlist: WatchlistManager | None = None,
        notifiers: Sequence[Notifier] = (),
        interval_sec: float | None = None,
    ) -> None:
        self._config = config
        self._market_data = market_data
        self._watchlist = watchlist
        self._notifiers = list(notifiers)
        self.interval_sec = interval_sec or config.dashboard.refresh_interval_sec
        self._subscribers: list[Subscriber] = []
        self._task: Optional[asyncio.Task[None]] = None
        self.latest: PortfolioSnapshot | None = None

    # ------------------------------------------------------------------
    # Subscribers
    # ------------------------------------------------------------------

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register ``callback`` for every new snapshot; returns an unsubscriber."""
        self._subscribers.append(callback)

        def unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return unsubscribe

    def _publish(self, snapshot: PortfolioSnapshot) -> None:
        for callback in list(self._subscribers):
            try:
                callback(snapshot)
            except Exception as e:
                logger.error("Snapshot subscriber failed: %s", e)

    # ------------------------------------------------------------------
    # Notifications
    # ------------------------------------------------------------------

    async def _dispatch_alerts(
        self, alerts: Sequence[PriceAlert], quotes: dict[str, Quote]
    ) -> None:
        for alert in alerts:
            message = build_alert_message(alert, quotes.get(alert.symbol))
            for notifier in self._notifiers:
                try:
                    await notifier.send_alert(message, subject=f"Price alert: {alert.symbol}")
                except Exception as e:
                    logger.error("Notifier send_alert failed: %s", e)

    async def _send_log(self, message: str) -> None:
        for notifier in self._notifiers:
            try:
                await notifier.send_log(message, silent=True)
            except Exception as e:
                logger.error("Notifier send_log failed: %s", e)

    # ------------------------------------------------------------------
    # Core workflow
    # ------------------------------------------------------------------

    async def refresh_once(self) -> PortfolioSnapshot:
        """Fetch market data, re-value the portfolio and publish the snapshot."""
        cfg = self._config
        symbols = [h.symbol for h in cfg.holdings]
        if self._watchlist is not None:
            extra = [a.symbol for a in self._watchlist.get_alerts()] + self._watchlist.watched_symbols()
            symbols += [s for s in dict.fromkeys(extra) if s not in symbols]

        fx = await self._market_data.get_fx_rates()
        quotes = await self._market_data.get_quotes(symbols)
        eur_inr = await self._market_data.get_eur_to_inr_rate(fx)

        valuation = compute_holdings(cfg.holdings, quotes, fx)
        metrics = PortfolioCalculator(
            cfg.holdings,
            quotes,
            fx,
            profiles=cfg.symbols,
            default_profile=cfg.default_profile,
            risk_free_rate=cfg.risk.risk_free_rate,
            benchmark_return=cfg.risk.benchmark_return,
        ).portfolio_metrics()
        summary = summarize(valuation, cfg.snapshot, eur_inr)

        triggered: list[PriceAlert] = []
        if self._watchlist is not None:
            triggered = self._watchlist.check_alerts(quotes)
            await self._dispatch_alerts(triggered, quotes)
        await self._send_log(build_refresh_log(valuation, summary, fx, len(triggered)))

        snapshot = PortfolioSnapshot(
            taken_at=time.time(),
            fx=fx,
            quotes=quotes,
            valuation=valuation,
            metrics=metrics,
            summary=summary,
            triggered_alerts=tuple(triggered),
        )
        logger.info(
            "Portfolio refreshed - value: %.2f EUR  P&L: %.2f EUR (%.2f%%)  priced: %d/%d",
            valuation.totals.value_eur,
            valuation.totals.pnl_eur,
            valuation.totals.pnl_pct,
            summary.valid_holdings,
            len(valuation.rows),
        )

        self.latest = snapshot
        self._publish(snapshot)
        return snapshot

    async def _run(self) -> None:
        logger.info("Starting portfolio refresh (every %s seconds)", self.interval_sec)
        while True:
            try:
                await self.refresh_once()
            except Exception as e:
                logger.error("Error in refresh loop: %s", e)
            await asyncio.sleep(self.interval_sec)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start the background refresh task on the running event loop."""
        if self.is_running:
            return
        self._task = asyncio.get_running_loop().create_task(self._run())

    async def stop(self) -> None:
        """Cancel the background task and wait for it to finish."""
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        try:
            await task
        except asyncio.CancelledError:
            pass
        logger.info("Portfolio refresh stopped")

    async def run_forever(self) -> None:
        """Run until cancelled (e.g. Ctrl+C from the CLI)."""
        self.start()
        task = self._task
        try:
            if task is not None:
                await task
        finally:
            await self.stop()
