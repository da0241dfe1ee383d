from __future__ import annotations

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from household_finance.core.errors import StoreError
from household_finance.db.dal import Database, StoreConflictError
from household_finance.models import Currency, HouseholdCurrency, HouseholdCurrencyIn
from household_finance.services.household_context import get_db, get_ledger
from household_finance.services.ledger import CurrencyLedger

router = APIRouter(tags=["currencies"])


class HouseholdCurrencyOut(HouseholdCurrency):
    currency: Optional[Currency] = None


class HouseholdCurrenciesOut(BaseModel):
    primary_currency: str
    currencies: List[HouseholdCurrencyOut]


class PrimaryCurrencyIn(BaseModel):
    currency_id: str = Field(..., min_length=1)


def _household_currencies_out(ledger: CurrencyLedger) -> HouseholdCurrenciesOut:
    return HouseholdCurrenciesOut(
        primary_currency=ledger.primary_currency(),
        currencies=[
            HouseholdCurrencyOut(
                **hc.model_dump(), currency=ledger.currency_info(hc.currency_id)
            )
            for hc in ledger.household_currencies
        ],
    )


@router.get("/currencies", response_model=List[Currency], summary="Active currencies")
async def list_currencies(db: Database = Depends(get_db)):
    return [Currency(**r) for r in db.list_active_currencies()]


@router.get(
    "/households/{household_id}/currencies",
    response_model=HouseholdCurrenciesOut,
    summary="Currencies enabled for a household",
)
async def list_household_currencies(ledger: CurrencyLedger = Depends(get_ledger)):
    return _household_currencies_out(ledger)


@router.post(
    "/households/{household_id}/currencies",
    response_model=HouseholdCurrenciesOut,
    status_code=201,
    summary="Enable a currency for a household",
)
async def add_household_currency(
    household_id: str,
    payload: HouseholdCurrencyIn,
    ledger: CurrencyLedger = Depends(get_ledger),
    db: Database = Depends(get_db),
):
    info = ledger.currency_info(payload.currency_id)
    if info is None:
        raise HTTPException(status_code=400, detail="unknown or inactive currency")
    try:
        db.add_household_currency(
            household_id,
            payload.currency_id,
            is_primary=payload.is_primary,
            display_order=payload.display_order,
        )
    except StoreConflictError as e:
        raise HTTPException(
            status_code=409, detail="currency already enabled for this household"
        ) from e
    if not ledger.refresh():
        raise StoreError(ledger.error or "error reloading currency data")
    return _household_currencies_out(ledger)


@router.put(
    "/households/{household_id}/currencies/primary",
    response_model=HouseholdCurrenciesOut,
    summary="Set the household primary currency",
)
async def set_primary_currency(
    household_id: str,
    payload: PrimaryCurrencyIn,
    ledger: CurrencyLedger = Depends(get_ledger),
    db: Database = Depends(get_db),
):
    try:
        db.set_primary_currency(household_id, payload.currency_id.strip().upper())
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    if not ledger.refresh():
        raise StoreError(ledger.error or "error reloading currency data")
    return _household_currencies_out(ledger)
