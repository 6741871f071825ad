"""Per-holding valuation and portfolio aggregation: pure, no I/O."""
from __future__ import annotations

from typing import Iterable, Mapping, Sequence

from ..models import FxRates, Holding, HoldingComputed, PortfolioTotals, Quote, Valuation
from .currency import convert_to_eur


def pnl_percent(pnl: float, cost: float) -> float:
    """Return ``pnl`` as a percentage of ``cost``; 0 for a zero cost basis."""
    return pnl / cost * 100 if cost != 0 else 0.0


def value_holding(
    holding: Holding,
    quotes: Mapping[str, Quote],
    fx: FxRates,
) -> HoldingComputed:
    """Value one holding against the current quote map.

    A missing quote is not an error: the row is valued at a zero price and
    ``change_pct`` is left as ``None``. A quote priced ``<= 0`` carries no
    valid price and is valued the same way.
    """
    quote = quotes.get(holding.symbol)
    last_price = quote.price if quote is not None and quote.price > 0 else 0.0

    value_native = last_price * holding.qty
    cost_native = holding.avg_price * holding.qty
    value_eur = convert_to_eur(value_native, holding.currency, fx)
    cost_eur = convert_to_eur(cost_native, holding.currency, fx)
    pnl_eur = value_eur - cost_eur

    return HoldingComputed(
        symbol=holding.symbol,
        name=holding.name,
        category=holding.category,
        currency=holding.currency,
        qty=holding.qty,
        unit=holding.unit,
        avg_price=holding.avg_price,
        last_price=last_price,
        value_eur=value_eur,
        cost_eur=cost_eur,
        pnl_eur=pnl_eur,
        pnl_pct=pnl_percent(pnl_eur, cost_eur),
        change_pct=quote.change_percent if quote is not None else None,
    )


def aggregate(rows: Iterable[HoldingComputed]) -> PortfolioTotals:
    """Sum rows into portfolio totals.

    Every row counts, priced or not: an unpriced holding still adds its
    cost basis to the denominator.
    """
    value_eur = 0.0
    cost_eur = 0.0
    for row in rows:
        value_eur += row.value_eur
        cost_eur += row.cost_eur

    pnl_eur = value_eur - cost_eur
    return PortfolioTotals(
        value_eur=value_eur,
        cost_eur=cost_eur,
        pnl_eur=pnl_eur,
        pnl_pct=pnl_percent(pnl_eur, cost_eur),
    )


def compute_holdings(
    holdings: Sequence[Holding],
    quotes: Mapping[str, Quote],
    fx: FxRates,
) -> Valuation:
    """Value every holding and reduce the rows into totals."""
    rows = tuple(value_holding(h, quotes, fx) for h in holdings)
    return Valuation(rows=rows, totals=aggregate(rows))
