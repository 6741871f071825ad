"""Service modules"""
from .cache import KeyValueCache
from .market_data import MarketDataService, build_quote_chain
from .provider_chain import ChainedQuoteProvider
from .refresher import PortfolioRefresher
from .watchlist import WatchlistManager

__all__ = [
    "ChainedQuoteProvider",
    "KeyValueCache",
    "MarketDataService",
    "PortfolioRefresher",
    "WatchlistManager",
    "build_quote_chain",
]
