"""Write-boundary checks for exchange-rate records.

Pydantic already rejects non-positive rates, unknown rate tags and
identical from/to codes on the HTTP payload. These checks repeat the value
rules for callers that bypass the payload model and add the ones that need
ledger state (currency must exist and be active).
"""

from __future__ import annotations
import math
from typing import Container, Optional

from household_finance.models.constants import RATE_TYPES


class RateValidationError(ValueError):
    pass


def validate_rate_domain(
    from_currency: str,
    to_currency: str,
    rate: float,
    rate_type: str,
    known_currencies: Optional[Container[str]] = None,
) -> None:
    if rate is None or not math.isfinite(rate) or rate <= 0:
        raise RateValidationError("rate must be a positive number")
    if from_currency == to_currency:
        raise RateValidationError("to_currency cannot equal from_currency")
    if rate_type not in RATE_TYPES:
        raise RateValidationError(f"unsupported rate type '{rate_type}'")
    if known_currencies is not None:
        for code in (from_currency, to_currency):
            if code not in known_currencies:
                raise RateValidationError(f"unknown or inactive currency '{code}'")
