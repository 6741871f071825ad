"""Protocol interfaces for the portfolio engine collaborators."""
from .fx_provider import FxProvider
from .history_provider import HistoryProvider
from .notifier import Notifier
from .quote_provider import QuoteProvider

__all__ = ["FxProvider", "HistoryProvider", "Notifier", "QuoteProvider"]
