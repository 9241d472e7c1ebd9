from datetime import date

import pytest
from pydantic import ValidationError

from models import CURRENCIES, CurrencyCode, EscalationType
from services.lease_session import (
    DEFAULT_IDS,
    MAX_PROPOSALS,
    LeaseSession,
    clamp_discount_rate,
    default_proposal,
)


def test_default_session():
    session = LeaseSession()
    assert [p.id for p in session.proposals] == ["default-proposal-a", "default-proposal-b"]
    assert [p.name for p in session.proposals] == ["Proposal A", "Proposal B"]
    assert session.discount_rate == 5
    assert session.currency == CurrencyCode.USD
    first = session.proposals[0]
    assert first.term_years == 5
    assert first.start_date == date(2026, 2, 15)
    assert first.base_rent_monthly == 5000
    assert first.escalation_type == EscalationType.NONE
    assert first.square_footage == 1000


def test_add_proposal_returns_new_session_up_to_limit():
    session = LeaseSession()
    grown = session.add_proposal()
    assert len(session.proposals) == 2
    assert len(grown.proposals) == 3
    added = grown.proposals[-1]
    assert added.name == "Proposal C"
    assert added.id not in DEFAULT_IDS

    full = grown.add_proposal()
    assert len(full.proposals) == MAX_PROPOSALS
    assert full.proposals[-1].name == "Proposal D"
    assert full.add_proposal() is full


def test_remove_proposal_never_drops_the_last_one():
    session = LeaseSession()
    one = session.remove_proposal("default-proposal-a")
    assert [p.id for p in one.proposals] == ["default-proposal-b"]
    assert one.remove_proposal("default-proposal-b") is one
    assert session.remove_proposal("missing") is session


def test_update_proposal_replaces_only_the_match():
    session = LeaseSession()
    updated = session.update_proposal(
        "default-proposal-b",
        base_rent_monthly=4500,
        escalation_type="percentage",
        escalation_value=3,
    )
    changed = updated.proposals[1]
    assert changed.base_rent_monthly == 4500
    assert changed.escalation_type == EscalationType.PERCENTAGE
    assert updated.proposals[0] == session.proposals[0]
    assert session.proposals[1].base_rent_monthly == 5000


def test_update_proposal_unknown_id_or_field():
    session = LeaseSession()
    assert session.update_proposal("missing", base_rent_monthly=1) is session
    with pytest.raises(ValueError):
        session.update_proposal("default-proposal-a", monthly_rent=1)


def test_update_proposal_validates_types():
    with pytest.raises(ValidationError):
        LeaseSession().update_proposal("default-proposal-a", term_years="five")


@pytest.mark.parametrize("rate,expected", [(7.5, 7.5), (25, 20), (-3, 0), (0, 0), (20, 20)])
def test_set_discount_rate_clamps(rate, expected):
    assert LeaseSession().set_discount_rate(rate).discount_rate == expected
    assert clamp_discount_rate(rate) == expected


def test_set_currency():
    session = LeaseSession().set_currency("PHP")
    assert session.currency == CurrencyCode.PHP
    with pytest.raises(ValueError):
        session.set_currency("EUR")


def test_session_is_immutable():
    session = LeaseSession()
    with pytest.raises(ValidationError):
        session.discount_rate = 10


def test_session_compare_uses_its_rate():
    session = LeaseSession().update_proposal("default-proposal-b", free_rent_months=3).set_discount_rate(8)
    result = session.compare()
    assert result.discount_rate == 8
    assert result.lowest_npv_ids == ["default-proposal-b"]
    assert result.lowest_effective_rent_ids == ["default-proposal-b"]


def test_default_proposal_beyond_named_slots():
    proposal = default_proposal(5)
    assert proposal.name == "Proposal 6"
    assert proposal.id not in DEFAULT_IDS


def test_currency_table_covers_every_code():
    assert set(CURRENCIES) == set(CurrencyCode)
    for code, config in CURRENCIES.items():
        assert config.code == code
    assert CURRENCIES[CurrencyCode.USD].symbol == "$"
    assert CURRENCIES[CurrencyCode.PHP].locale == "en-PH"
