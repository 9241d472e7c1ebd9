"""Backend services."""

from services.lease_session import (
    LeaseSession,
    clamp_discount_rate,
    default_proposal,
)

__all__ = [
    "LeaseSession",
    "clamp_discount_rate",
    "default_proposal",
]
