from __future__ import annotations
from pydantic import BaseModel, ConfigDict, Field, field_validator
from typing import Optional
from datetime import date as date_type, datetime
from .constants import RATE_TYPES, TRANSACTION_TYPES


class TransactionIn(BaseModel):
    type: str
    amount: float = Field(..., gt=0, allow_inf_nan=False)
    currency_id: Optional[str] = None  # defaults to household primary
    exchange_rate_type: str = "manual"
    description: str = Field(..., min_length=1)
    category: str = Field(..., min_length=1)
    date: date_type = Field(default_factory=date_type.today)

    @field_validator("type")
    @classmethod
    def valid_type(cls, v: str) -> str:
        if v not in TRANSACTION_TYPES:
            raise ValueError("unsupported transaction type")
        return v

    @field_validator("currency_id")
    @classmethod
    def upper_code(cls, v: Optional[str]) -> Optional[str]:
        return v.strip().upper() if v else None

    @field_validator("exchange_rate_type")
    @classmethod
    def valid_rate_type(cls, v: str) -> str:
        if v not in RATE_TYPES:
            raise ValueError("unsupported rate type")
        return v

    @field_validator("description", "category")
    @classmethod
    def required_text(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("field is required")
        return v


class TransactionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    household_id: str
    user_id: str
    type: str
    amount: float
    currency_id: str
    amount_usd: float
    exchange_rate: float
    exchange_rate_type: str
    description: str
    category: str
    date: date_type
    created_at: datetime
    updated_at: datetime
