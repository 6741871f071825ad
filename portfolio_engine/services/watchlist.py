"""Named watchlists and per-symbol price alerts, persisted in the local cache."""
from __future__ import annotations

import logging
import random
import time
import uuid
from dataclasses import asdict, replace
from typing import Any, Callable, Mapping, Optional

from ..models import AlertType, PriceAlert, Quote, WatchlistItem
from .cache import KeyValueCache

logger = logging.getLogger(__name__)

WATCHLIST_CACHE_KEY = "investment_watchlists"

# Chance that a volume_spike alert fires on a check; there is no volume feed.
VOLUME_SPIKE_PROBABILITY = 0.1


class WatchlistManager:
    """Keep watchlists and alerts, evaluating alerts against fresh quotes."""

    def __init__(
        self,
        cache: KeyValueCache | None = None,
        rng: Optional[random.Random] = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._cache = cache
        self._rng = rng or random.Random()
        self._clock = clock
        self._watchlists: dict[str, list[WatchlistItem]] = {}
        self._alerts: dict[str, list[PriceAlert]] = {}
        self._load()

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def _load(self) -> None:
        if self._cache is None:
            return
        stored: Any = self._cache.get(WATCHLIST_CACHE_KEY)
        if not isinstance(stored, dict):
            return
        try:
            self._watchlists = {
                name: [WatchlistItem(**item) for item in items]
                for name, items in stored.get("watchlists", {}).items()
            }
            self._alerts = {
                symbol: [PriceAlert(**alert) for alert in alerts]
                for symbol, alerts in stored.get("alerts", {}).items()
            }
        except (TypeError, AttributeError) as e:
            logger.error("Failed to load watchlists: %s", e)
            self._watchlists, self._alerts = {}, {}

    def _save(self) -> None:
        if self._cache is None:
            return
        self._cache.set(
            WATCHLIST_CACHE_KEY,
            {
                "watchlists": {
                    name: [asdict(item) for item in items]
                    for name, items in self._watchlists.items()
                },
                "alerts": {
                    symbol: [asdict(alert) for alert in alerts]
                    for symbol, alerts in self._alerts.items()
                },
            },
        )

    # ------------------------------------------------------------------
    # Watchlists
    # ------------------------------------------------------------------

    def add_to_watchlist(self, list_name: str, symbol: str) -> None:
        items = self._watchlists.setdefault(list_name, [])
        if any(item.symbol == symbol for item in items):
            return
        items.append(WatchlistItem(symbol=symbol, added_at=self._clock()))
        self._save()

    def remove_from_watchlist(self, list_name: str, symbol: str) -> None:
        items = self._watchlists.get(list_name)
        if not items:
            return
        remaining = [item for item in items if item.symbol != symbol]
        if len(remaining) != len(items):
            self._watchlists[list_name] = remaining
            self._save()

    def get_watchlist(self, list_name: str) -> list[WatchlistItem]:
        return list(self._watchlists.get(list_name, []))

    def is_in_watchlist(self, list_name: str, symbol: str) -> bool:
        return any(item.symbol == symbol for item in self._watchlists.get(list_name, []))

    def watchlist_names(self) -> list[str]:
        return sorted(self._watchlists)

    def watched_symbols(self) -> list[str]:
        """Every symbol on any watchlist, in first-added order, without repeats."""
        seen: dict[str, None] = {}
        for items in self._watchlists.values():
            for item in items:
                seen.setdefault(item.symbol, None)
        return list(seen)

    # ------------------------------------------------------------------
    # Alerts
    # ------------------------------------------------------------------

    def create_alert(self, symbol: str, type: AlertType, condition: float, message: str) -> str:
        alert = PriceAlert(
            id=f"{symbol}_{uuid.uuid4().hex[:12]}",
            symbol=symbol,
            type=type,
            condition=condition,
            message=message,
            created_at=self._clock(),
        )
        self._alerts.setdefault(symbol, []).append(alert)
        self._save()
        return alert.id

    def dismiss_alert(self, alert_id: str) -> bool:
        for symbol, alerts in self._alerts.items():
            remaining = [a for a in alerts if a.id != alert_id]
            if len(remaining) != len(alerts):
                self._alerts[symbol] = remaining
                self._save()
                return True
        return False

    def get_alerts(self, symbol: str | None = None) -> list[PriceAlert]:
        if symbol is not None:
            return list(self._alerts.get(symbol, []))
        return [alert for alerts in self._alerts.values() for alert in alerts]

    def _should_trigger(self, alert: PriceAlert, quote: Quote) -> bool:
        if alert.type == "price_above":
            return quote.price >= alert.condition
        if alert.type == "price_below":
            return quote.price <= alert.condition
        if alert.type == "volume_spike":
            return self._rng.random() < VOLUME_SPIKE_PROBABILITY
        return False

    def check_alerts(self, quotes: Mapping[str, Quote]) -> list[PriceAlert]:
        """Flag and return alerts whose condition the current quotes meet."""
        triggered: list[PriceAlert] = []

        for symbol, alerts in self._alerts.items():
            quote = quotes.get(symbol)
            if quote is None:
                continue
            for i, alert in enumerate(alerts):
                if alert.triggered or not self._should_trigger(alert, quote):
                    continue
                fired = replace(alert, triggered=True)
                alerts[i] = fired
                triggered.append(fired)

        if triggered:
            logger.info("%d alert(s) triggered", len(triggered))
            self._save()
        return triggered
