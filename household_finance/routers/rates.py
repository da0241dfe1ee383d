"""Exchange-rate router.

Endpoints:
    - GET /households/{id}/rates              -> active rates, newest first
    - POST /households/{id}/rates             -> append a rate (history kept)
    - DELETE /households/{id}/rates/{rate_id} -> deactivate a rate
    - GET /households/{id}/rates/latest       -> rate lookup for a pair/type
    - GET /households/{id}/rates/convert      -> calculator (amount conversion)

Lookups never fail for missing data: an unknown pair resolves to the
identity rate and the response says so through `source`.
"""

from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel

from household_finance.db.dal import Database
from household_finance.models import ExchangeRate, ExchangeRateIn, RATE_TYPES
from household_finance.services.household_context import (
    get_db,
    get_ledger,
    require_member,
)
from household_finance.services.ledger import CurrencyLedger
from household_finance.services.rate_validation import RateValidationError

router = APIRouter(prefix="/households/{household_id}/rates", tags=["rates"])


class RateLookupOut(BaseModel):
    from_currency: str
    to_currency: str
    rate_type: str
    rate: float
    source: str
    rate_id: Optional[int] = None


class ConversionOut(RateLookupOut):
    amount: float
    converted: float
    formatted: str


def _codes(from_currency: str, to_currency: str, rate_type: Optional[str], ledger: CurrencyLedger):
    rate_type = rate_type or ledger.default_rate_type
    if rate_type not in RATE_TYPES:
        raise HTTPException(status_code=400, detail="unsupported rate type")
    return from_currency.strip().upper(), to_currency.strip().upper(), rate_type


@router.get("/", response_model=List[ExchangeRate], summary="List active exchange rates")
async def list_rates(ledger: CurrencyLedger = Depends(get_ledger)):
    return list(ledger.exchange_rates)


@router.post(
    "/", response_model=ExchangeRate, status_code=201, summary="Add an exchange rate"
)
async def add_rate(payload: ExchangeRateIn, ledger: CurrencyLedger = Depends(get_ledger)):
    try:
        return ledger.add_rate(
            payload.from_currency,
            payload.to_currency,
            payload.rate,
            payload.rate_type,
            notes=payload.notes,
            valid_from=payload.valid_from,
        )
    except RateValidationError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e


@router.delete("/{rate_id}", status_code=204, summary="Deactivate an exchange rate")
async def deactivate_rate(
    household_id: str,
    rate_id: int,
    _: Dict[str, Any] = Depends(require_member),
    db: Database = Depends(get_db),
):
    if not db.deactivate_rate(household_id, rate_id):
        raise HTTPException(status_code=404, detail="rate not found")
    return None


@router.get("/latest", response_model=RateLookupOut, summary="Resolve a rate for a pair")
async def latest_rate(
    from_currency: str = Query(..., alias="from"),
    to_currency: str = Query(..., alias="to"),
    rate_type: Optional[str] = Query(None),
    as_of: Optional[date] = Query(None, description="Prefer rates valid on this date"),
    ledger: CurrencyLedger = Depends(get_ledger),
):
    src, dst, rtype = _codes(from_currency, to_currency, rate_type, ledger)
    quote = ledger.resolve_rate(src, dst, rtype, as_of=as_of)
    return RateLookupOut(
        from_currency=src,
        to_currency=dst,
        rate_type=rtype,
        rate=quote.rate,
        source=quote.source,
        rate_id=quote.rate_id,
    )


@router.get("/convert", response_model=ConversionOut, summary="Convert an amount")
async def convert(
    amount: float = Query(..., allow_inf_nan=False),
    from_currency: str = Query(..., alias="from"),
    to_currency: str = Query(..., alias="to"),
    rate_type: Optional[str] = Query(None),
    as_of: Optional[date] = Query(None, description="Prefer rates valid on this date"),
    ledger: CurrencyLedger = Depends(get_ledger),
):
    src, dst, rtype = _codes(from_currency, to_currency, rate_type, ledger)
    quote = ledger.resolve_rate(src, dst, rtype, as_of=as_of)
    converted = ledger.convert(amount, src, dst, rtype, as_of=as_of)
    return ConversionOut(
        from_currency=src,
        to_currency=dst,
        rate_type=rtype,
        rate=quote.rate,
        source=quote.source,
        rate_id=quote.rate_id,
        amount=amount,
        converted=converted,
        formatted=ledger.format(converted, dst),
    )
