from __future__ import annotations

from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from math import floor, isfinite, pow
from typing import List, Sequence

from models import CashFlowMonth, ComparisonMetrics, EscalationType, LeaseProposal

_CENT = Decimal("0.01")
# Floats this large carry no cent digits.
_ROUNDING_LIMIT = 1e15
_RATE_EPSILON = 1e-10
_FACTOR_EPSILON = 1e-15
_MONTH_ABBR = ("Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec")


def round2(value: float) -> float:
    """Round half-up to cents. Non-finite and very large values pass through unchanged."""
    if not isfinite(value) or abs(value) >= _ROUNDING_LIMIT:
        return value
    return float(Decimal(repr(float(value))).quantize(_CENT, rounding=ROUND_HALF_UP))


def month_label(anchor: date, month_number: int) -> str:
    """Label for 1-indexed lease month, e.g. 'Mar 2026'. Locale-independent."""
    years, month_index = divmod(anchor.month - 1 + month_number - 1, 12)
    return f"{_MONTH_ABBR[month_index]} {anchor.year + years}"


def _total_months(term_years: float) -> int:
    """Whole months in the term, rounded half-up, never fewer than one."""
    months = term_years * 12
    if not isfinite(months):
        return 0
    return max(1, int(floor(months + 0.5)))


def _escalate(rent: float, proposal: LeaseProposal) -> float:
    if proposal.escalation_type == EscalationType.PERCENTAGE:
        return rent * (1.0 + proposal.escalation_value / 100.0)
    if proposal.escalation_type == EscalationType.FIXED:
        return rent + proposal.escalation_value
    return rent


def annual_to_monthly_rate(annual_percent: float) -> float:
    """
    Convert an annual discount rate in percent (5 = 5%) to the equivalent
    effective monthly rate: (1 + annual)^(1/12) - 1.
    Negative annual rates are clamped to 0.
    """
    if annual_percent < 0:
        return 0.0
    return pow(1.0 + annual_percent / 100.0, 1.0 / 12.0) - 1.0


def generate_timeline(proposal: LeaseProposal) -> List[CashFlowMonth]:
    """
    Build the month-by-month cash flow schedule for one proposal.

    - Year 1 rent is base_rent_monthly. At months 13, 25, 37, ... the running
      rent is escalated, compounding on the prior year's rent.
    - Months 1..free_rent_months have zero base rent; NNN is still due.
    - The TI allowance is a one-time credit against month 1.

    Monetary fields are rounded to cents per row, and the cumulative total is
    the running sum of the rounded net amounts.
    """
    total_months = _total_months(proposal.term_years)
    anchor = proposal.start_date or date.today()
    nnn = round2(proposal.nnn_monthly)

    rows: List[CashFlowMonth] = []
    running_rent = proposal.base_rent_monthly
    cumulative = 0.0

    for m in range(1, total_months + 1):
        if m > 1 and (m - 1) % 12 == 0:
            running_rent = _escalate(running_rent, proposal)

        scheduled = round2(running_rent)
        is_abated = m <= proposal.free_rent_months
        actual = 0.0 if is_abated else scheduled
        ti_offset = round2(proposal.ti_allowance) if m == 1 else 0.0
        net = round2(actual + nnn - ti_offset)
        cumulative = round2(cumulative + net)

        rows.append(
            CashFlowMonth(
                month=m,
                date_label=month_label(anchor, m),
                lease_year=(m + 11) // 12,
                scheduled_rent=scheduled,
                nnn=nnn,
                is_abated=is_abated,
                actual_rent=actual,
                ti_offset=ti_offset,
                net_cash_out=net,
                cumulative_cash_out=cumulative,
            )
        )

    return rows


def calculate_npv(cash_flows: Sequence[CashFlowMonth], monthly_rate: float) -> float:
    """
    Net present value of net_cash_out, discounting month t by (1 + r)^t for
    t = 1..N (month 1 is discounted one full period).
    A negative monthly rate falls back to the undiscounted sum.
    """
    if monthly_rate < 0:
        return round2(sum(cf.net_cash_out for cf in cash_flows))
    npv = sum(
        cf.net_cash_out / pow(1.0 + monthly_rate, t)
        for t, cf in enumerate(cash_flows, start=1)
    )
    return round2(npv)


def calculate_effective_monthly_rent(npv: float, months: int, monthly_rate: float) -> float:
    """
    Flat monthly payment whose NPV over `months` at `monthly_rate` equals npv:

        PMT = NPV * r / (1 - (1 + r)^-n)

    Falls back to npv / months when r is effectively zero or the annuity
    factor degenerates.
    """
    if months <= 0:
        return 0.0
    if monthly_rate <= _RATE_EPSILON:
        return round2(npv / months)

    factor = 1.0 - pow(1.0 + monthly_rate, -months)
    if abs(factor) < _FACTOR_EPSILON:
        return round2(npv / months)
    return round2(npv * monthly_rate / factor)


def calculate_metrics(proposal: LeaseProposal, annual_discount_rate: float) -> ComparisonMetrics:
    """
    Full comparison record for one proposal. Depends only on its two inputs.
    """
    cash_flows = generate_timeline(proposal)
    total_months = len(cash_flows)
    monthly_rate = annual_to_monthly_rate(annual_discount_rate)

    total_cash_out = cash_flows[-1].cumulative_cash_out if cash_flows else 0.0
    average_monthly_rent = round2(total_cash_out / total_months) if total_months > 0 else 0.0

    npv = calculate_npv(cash_flows, monthly_rate)
    effective_monthly_rent = calculate_effective_monthly_rent(npv, total_months, monthly_rate)

    return ComparisonMetrics(
        proposal_id=proposal.id,
        proposal_name=proposal.name,
        total_cash_out=total_cash_out,
        average_monthly_rent=average_monthly_rent,
        npv=npv,
        effective_monthly_rent=effective_monthly_rent,
        total_months=total_months,
        cash_flows=cash_flows,
    )
