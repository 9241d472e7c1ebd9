"""
Engine output models: per-month cash flow rows and per-proposal metrics.

Both are rebuilt from scratch on every calculation and never mutated.
"""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field


class CashFlowMonth(BaseModel):
    """One month in the cash flow timeline (tenant POV, positive = cost)."""

    model_config = ConfigDict(frozen=True)

    month: int = Field(ge=1, description="1-indexed month within the lease")
    date_label: str = Field(description="Short month label, e.g. 'Mar 2026'")
    lease_year: int = Field(ge=1)
    scheduled_rent: float = 0.0
    nnn: float = 0.0
    is_abated: bool = False
    actual_rent: float = 0.0
    ti_offset: float = 0.0
    net_cash_out: float = 0.0
    cumulative_cash_out: float = 0.0


class ComparisonMetrics(BaseModel):
    """Summary metrics plus the full timeline for one proposal."""

    model_config = ConfigDict(frozen=True)

    proposal_id: str
    proposal_name: str = ""
    total_cash_out: float = 0.0
    average_monthly_rent: float = 0.0
    npv: float = 0.0
    effective_monthly_rent: float = 0.0
    total_months: int = 0
    cash_flows: List[CashFlowMonth] = Field(default_factory=list)


class ComparisonResult(BaseModel):
    """Metrics for every proposal in a comparison, with the lowest-cost winners."""

    model_config = ConfigDict(frozen=True)

    discount_rate: float
    metrics: List[ComparisonMetrics] = Field(default_factory=list)
    lowest_npv_ids: List[str] = Field(default_factory=list)
    lowest_effective_rent_ids: List[str] = Field(default_factory=list)
