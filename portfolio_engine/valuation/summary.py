"""Headline dashboard figures derived from a valuation."""
from __future__ import annotations

from ..config import SnapshotConfig
from ..models import DashboardSummary, Valuation


def summarize(
    valuation: Valuation,
    snapshot: SnapshotConfig,
    eur_inr_rate: float,
    top_n: int = 5,
) -> DashboardSummary:
    """Build the summary card figures.

    When no holding is priced the last recorded portfolio value from
    ``snapshot`` stands in for the live total.
    """
    has_valid_data = valuation.totals.value_eur > 0
    current_value_eur = (
        valuation.totals.value_eur if has_valid_data else snapshot.as_of_total_eur
    )
    total_growth_eur = current_value_eur - snapshot.initial_deposit_eur
    total_growth_percent = (
        total_growth_eur / snapshot.initial_deposit_eur * 100
        if snapshot.initial_deposit_eur > 0
        else 0.0
    )

    priced = [r for r in valuation.rows if r.value_eur > 0]
    top_performers = sorted(
        (r for r in priced if r.change_pct is not None),
        key=lambda r: r.change_pct,  # type: ignore[arg-type, return-value]
        reverse=True,
    )[:top_n]

    allocation: dict[str, float] = {}
    for row in priced:
        allocation[row.category] = allocation.get(row.category, 0.0) + row.value_eur

    return DashboardSummary(
        has_valid_data=has_valid_data,
        current_value_eur=current_value_eur,
        current_value_inr=current_value_eur * eur_inr_rate,
        total_growth_eur=total_growth_eur,
        total_growth_percent=total_growth_percent,
        valid_holdings=len(priced),
        top_performers=tuple(top_performers),
        category_allocation=allocation,
    )
