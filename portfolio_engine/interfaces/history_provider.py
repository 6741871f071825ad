"""History provider protocol — historical price series abstraction."""
from typing import Protocol

from ..models import PricePoint, Timeframe


class HistoryProvider(Protocol):
    """Abstract interface for fetching a symbol's price series over a timeframe."""

    @property
    def name(self) -> str: ...

    async def fetch_history(self, symbol: str, timeframe: Timeframe) -> list[PricePoint]: ...
