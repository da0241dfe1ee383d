"""Pydantic domain models for the household finance service."""

from .constants import (
    RATE_TYPES,
    TRANSACTION_TYPES,
    CATEGORIES,
)  # re-export
from .currency import (
    Currency,
    HouseholdCurrency,
    HouseholdCurrencyIn,
    ExchangeRate,
    ExchangeRateIn,
    RateQuote,
)
from .transaction import TransactionIn, TransactionOut
from .household import (
    UserCreate,
    UserOut,
    HouseholdCreate,
    HouseholdOut,
    MemberInvite,
    MemberOut,
)

__all__ = [
    "RATE_TYPES",
    "TRANSACTION_TYPES",
    "CATEGORIES",
    "Currency",
    "HouseholdCurrency",
    "HouseholdCurrencyIn",
    "ExchangeRate",
    "ExchangeRateIn",
    "RateQuote",
    "TransactionIn",
    "TransactionOut",
    "UserCreate",
    "UserOut",
    "HouseholdCreate",
    "HouseholdOut",
    "MemberInvite",
    "MemberOut",
]
