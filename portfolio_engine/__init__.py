"""Portfolio valuation engine: multi-currency holdings valued in EUR."""

__version__ = "0.1.0"
