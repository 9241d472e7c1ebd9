"""
Lease proposal input model.

A proposal is created and edited by the client and is read-only to the engine.
Field values are trusted as-is: the engine does not re-validate ranges, so the
only constraints here are types.
"""

from __future__ import annotations

from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator


class EscalationType(str, Enum):
    NONE = "none"
    PERCENTAGE = "percentage"
    FIXED = "fixed"


class CurrencyCode(str, Enum):
    USD = "USD"
    PHP = "PHP"


class CurrencyConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    code: CurrencyCode
    symbol: str
    locale: str
    name: str


CURRENCIES: Dict[CurrencyCode, CurrencyConfig] = {
    CurrencyCode.USD: CurrencyConfig(code=CurrencyCode.USD, symbol="$", locale="en-US", name="US Dollar"),
    CurrencyCode.PHP: CurrencyConfig(code=CurrencyCode.PHP, symbol="₱", locale="en-PH", name="Philippine Peso"),
}


def _parse_start_date(value: Any) -> Optional[date]:
    """Parse YYYY-MM-DD (or a full ISO timestamp) to date; None when absent or unparseable."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        return None
    try:
        return datetime.fromisoformat(text.replace("Z", "+00:00").split("T")[0]).date()
    except ValueError:
        return None


class LeaseProposal(BaseModel):
    """
    One lease offer under comparison.

    - base_rent_monthly: rent in lease-year 1
    - escalation_value: percentage points for PERCENTAGE, monetary delta for FIXED
    - free_rent_months: months from commencement with zero base rent (NNN still due)
    - ti_allowance: one-time tenant improvement credit, applied in month 1
    - square_footage: informational only
    """

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")

    id: str
    name: str = ""
    term_years: float = Field(validation_alias=AliasChoices("term_years", "termYears"))
    start_date: Optional[date] = Field(
        default=None, validation_alias=AliasChoices("start_date", "startDate")
    )
    base_rent_monthly: float = Field(
        validation_alias=AliasChoices("base_rent_monthly", "baseRentMonthly")
    )
    escalation_type: EscalationType = Field(
        default=EscalationType.NONE,
        validation_alias=AliasChoices("escalation_type", "escalationType"),
    )
    escalation_value: float = Field(
        default=0.0, validation_alias=AliasChoices("escalation_value", "escalationValue")
    )
    free_rent_months: int = Field(
        default=0, validation_alias=AliasChoices("free_rent_months", "freeRentMonths")
    )
    ti_allowance: float = Field(default=0.0, validation_alias=AliasChoices("ti_allowance", "tiAllowance"))
    square_footage: float = Field(
        default=0.0, validation_alias=AliasChoices("square_footage", "squareFootage")
    )
    nnn_monthly: float = Field(default=0.0, validation_alias=AliasChoices("nnn_monthly", "nnnMonthly"))

    @field_validator("start_date", mode="before")
    @classmethod
    def coerce_start_date(cls, v: Any) -> Optional[date]:
        """Empty or unparseable dates become None so the engine anchors on today."""
        return _parse_start_date(v)

    @field_validator("escalation_type", mode="before")
    @classmethod
    def coerce_escalation_type(cls, v: Any) -> Any:
        if v is None:
            return EscalationType.NONE
        if isinstance(v, str):
            s = v.strip().lower()
            if s in ("percent", "pct", "%"):
                return EscalationType.PERCENTAGE
            return s or EscalationType.NONE
        return v
