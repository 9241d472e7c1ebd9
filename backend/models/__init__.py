"""Lease comparison models."""

from models.comparison import CashFlowMonth, ComparisonMetrics, ComparisonResult
from models.lease_proposal import (
    CURRENCIES,
    CurrencyCode,
    CurrencyConfig,
    EscalationType,
    LeaseProposal,
)

__all__ = [
    "CURRENCIES",
    "CashFlowMonth",
    "ComparisonMetrics",
    "ComparisonResult",
    "CurrencyCode",
    "CurrencyConfig",
    "EscalationType",
    "LeaseProposal",
]
