from __future__ import annotations
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .constants import RATE_TYPES


class Currency(BaseModel):
    id: str
    name: str
    symbol: str
    decimal_places: int = Field(2, ge=0, le=8)
    is_active: bool = True


class HouseholdCurrency(BaseModel):
    id: int
    household_id: str
    currency_id: str
    is_primary: bool = False
    display_order: int = 0


class HouseholdCurrencyIn(BaseModel):
    currency_id: str = Field(..., min_length=1)
    is_primary: bool = False
    display_order: Optional[int] = Field(None, ge=0)

    @field_validator("currency_id")
    @classmethod
    def upper_code(cls, v: str) -> str:
        return v.strip().upper()


class ExchangeRate(BaseModel):
    """Directed quote: 1 unit of from_currency buys `rate` units of to_currency."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    household_id: str
    from_currency: str
    to_currency: str
    rate: float = Field(..., gt=0)
    rate_type: str
    valid_from: datetime
    is_active: bool = True
    notes: Optional[str] = None


class ExchangeRateIn(BaseModel):
    from_currency: str = Field(..., min_length=1)
    to_currency: str = Field(..., min_length=1)
    rate: float = Field(..., gt=0, allow_inf_nan=False, description="Units of to_currency per 1 from_currency")
    rate_type: str = "manual"
    notes: Optional[str] = None
    valid_from: Optional[datetime] = None

    @field_validator("from_currency", "to_currency")
    @classmethod
    def upper_code(cls, v: str) -> str:
        return v.strip().upper()

    @field_validator("rate_type")
    @classmethod
    def valid_rate_type(cls, v: str) -> str:
        if v not in RATE_TYPES:
            raise ValueError("unsupported rate type")
        return v

    @model_validator(mode="after")
    def distinct_pair(self) -> "ExchangeRateIn":
        if self.from_currency == self.to_currency:
            raise ValueError("to_currency cannot equal from_currency")
        return self


class RateQuote(BaseModel):
    """Outcome of a rate lookup.

    source is one of identity (same currency), direct, inverse (1 / stored
    rate) or fallback (no matching record; identity rate used).
    """

    rate: float
    source: str
    rate_id: Optional[int] = None
