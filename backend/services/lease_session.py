"""
Application state for a comparison session: the proposals being compared,
the annual discount rate and the display currency.

A session is immutable. Every update returns a new session, so callers own
their state explicitly instead of sharing a mutable global store.
"""

from __future__ import annotations

import logging
import uuid
from datetime import date
from typing import Any, List

from pydantic import BaseModel, ConfigDict, Field

from engine.compare import compare_proposals
from models import ComparisonResult, CurrencyCode, EscalationType, LeaseProposal

logger = logging.getLogger(__name__)

MAX_PROPOSALS = 4
MIN_PROPOSALS = 1
MIN_DISCOUNT_RATE = 0.0
MAX_DISCOUNT_RATE = 20.0
DEFAULT_DISCOUNT_RATE = 5.0

# Fixed ids for the initial proposals so a fresh session is reproducible.
DEFAULT_IDS = (
    "default-proposal-a",
    "default-proposal-b",
    "default-proposal-c",
    "default-proposal-d",
)
PROPOSAL_NAMES = ("Proposal A", "Proposal B", "Proposal C", "Proposal D")


def clamp_discount_rate(rate: float) -> float:
    return max(MIN_DISCOUNT_RATE, min(MAX_DISCOUNT_RATE, float(rate)))


def default_proposal(index: int, dynamic: bool = False) -> LeaseProposal:
    """Starter proposal for slot `index`; dynamic ones get a random id."""
    if dynamic or index >= len(DEFAULT_IDS):
        proposal_id = str(uuid.uuid4())
    else:
        proposal_id = DEFAULT_IDS[index]
    name = PROPOSAL_NAMES[index] if index < len(PROPOSAL_NAMES) else f"Proposal {index + 1}"
    return LeaseProposal(
        id=proposal_id,
        name=name,
        term_years=5,
        start_date=date(2026, 2, 15),
        base_rent_monthly=5000,
        escalation_type=EscalationType.NONE,
        escalation_value=0,
        free_rent_months=0,
        ti_allowance=0,
        square_footage=1000,
        nnn_monthly=0,
    )


def _default_proposals() -> List[LeaseProposal]:
    return [default_proposal(0), default_proposal(1)]


class LeaseSession(BaseModel):
    model_config = ConfigDict(frozen=True)

    proposals: List[LeaseProposal] = Field(default_factory=_default_proposals)
    discount_rate: float = DEFAULT_DISCOUNT_RATE
    currency: CurrencyCode = CurrencyCode.USD

    def add_proposal(self) -> "LeaseSession":
        """Append a starter proposal; unchanged once MAX_PROPOSALS is reached."""
        if len(self.proposals) >= MAX_PROPOSALS:
            return self
        added = default_proposal(len(self.proposals), dynamic=True)
        logger.info("[session] add proposal id=%s name=%s", added.id, added.name)
        return self.model_copy(update={"proposals": [*self.proposals, added]})

    def remove_proposal(self, proposal_id: str) -> "LeaseSession":
        """Drop a proposal; the last remaining one is never removed."""
        if len(self.proposals) <= MIN_PROPOSALS:
            return self
        kept = [p for p in self.proposals if p.id != proposal_id]
        if len(kept) == len(self.proposals):
            return self
        logger.info("[session] remove proposal id=%s", proposal_id)
        return self.model_copy(update={"proposals": kept})

    def update_proposal(self, proposal_id: str, **changes: Any) -> "LeaseSession":
        """
        Replace the matching proposal with a validated copy carrying `changes`.
        Unknown ids leave the session as-is; unknown field names raise ValueError.
        """
        unknown = sorted(set(changes) - set(LeaseProposal.model_fields))
        if unknown:
            raise ValueError(f"Unknown proposal fields: {', '.join(unknown)}")
        if not any(p.id == proposal_id for p in self.proposals):
            return self
        updated = [
            LeaseProposal.model_validate({**p.model_dump(), **changes}) if p.id == proposal_id else p
            for p in self.proposals
        ]
        return self.model_copy(update={"proposals": updated})

    def set_discount_rate(self, rate: float) -> "LeaseSession":
        return self.model_copy(update={"discount_rate": clamp_discount_rate(rate)})

    def set_currency(self, currency: CurrencyCode | str) -> "LeaseSession":
        return self.model_copy(update={"currency": CurrencyCode(currency)})

    def compare(self) -> ComparisonResult:
        return compare_proposals(self.proposals, self.discount_rate)
