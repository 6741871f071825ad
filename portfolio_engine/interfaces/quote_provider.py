"""Quote provider protocol — market quote source abstraction."""
from typing import Protocol

from ..models import Quote


class QuoteProvider(Protocol):
    """Abstract interface for fetching quotes for a batch of symbols.

    Implementations raise on failure; symbols they cannot price are simply
    absent from the result (or priced ``<= 0``).
    """

    @property
    def name(self) -> str: ...

    async def fetch_quotes(self, symbols: list[str]) -> list[Quote]: ...
