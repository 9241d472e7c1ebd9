"""
Rank proposals by engine output.

The engine computes one proposal at a time; picking the lowest-cost option is
done here over the returned metrics, the same way the summary cards and the
report's executive summary do it.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from engine.compute import calculate_metrics
from models import ComparisonMetrics, ComparisonResult, LeaseProposal

logger = logging.getLogger(__name__)

RANKED_FIELDS = ("npv", "effective_monthly_rent", "total_cash_out", "average_monthly_rent")


def lowest_by(metrics: Sequence[ComparisonMetrics], field: str) -> Optional[float]:
    """Minimum of a scalar metric across proposals, or None when there are none."""
    if field not in RANKED_FIELDS:
        raise ValueError(f"Unsupported ranking field: {field}")
    if not metrics:
        return None
    return min(getattr(m, field) for m in metrics)


def winners_by(metrics: Sequence[ComparisonMetrics], field: str) -> List[str]:
    """
    Ids of every proposal tied for the lowest value of field.
    A single proposal is never a winner; there is nothing to compare it to.
    """
    if len(metrics) < 2:
        return []
    lowest = lowest_by(metrics, field)
    return [m.proposal_id for m in metrics if getattr(m, field) == lowest]


def compare_proposals(
    proposals: Sequence[LeaseProposal],
    annual_discount_rate: float,
) -> ComparisonResult:
    """Compute metrics for each proposal (input order kept) and mark the lowest-cost ones."""
    metrics = [calculate_metrics(p, annual_discount_rate) for p in proposals]
    result = ComparisonResult(
        discount_rate=annual_discount_rate,
        metrics=metrics,
        lowest_npv_ids=winners_by(metrics, "npv"),
        lowest_effective_rent_ids=winners_by(metrics, "effective_monthly_rent"),
    )
    logger.debug(
        "[compare] proposals=%d rate=%s lowest_npv=%s lowest_emr=%s",
        len(metrics),
        annual_discount_rate,
        result.lowest_npv_ids,
        result.lowest_effective_rent_ids,
    )
    return result
