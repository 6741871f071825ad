"""FX provider protocol — exchange rate source abstraction."""
from typing import Protocol


class FxProvider(Protocol):
    """Abstract interface for fetching rates quoted per 1 unit of ``base``."""

    @property
    def name(self) -> str: ...

    async def fetch_rates(self, base: str = "EUR") -> dict[str, float]: ...
