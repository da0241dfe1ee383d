from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from household_finance.core.config import Settings
from household_finance.db.dal import Database
from household_finance.services.balances import compute_balances
from household_finance.services.household_context import (
    get_app_settings,
    get_db,
    get_ledger,
)
from household_finance.services.ledger import CurrencyLedger

router = APIRouter(prefix="/households/{household_id}/balances", tags=["balances"])


class BalanceLineOut(BaseModel):
    type: str
    amount: float
    formatted: str
    reference_amount: float
    reference_formatted: str


class BalancesOut(BaseModel):
    primary_currency: str
    reference_currency: str
    transaction_count: int
    lines: List[BalanceLineOut]


@router.get(
    "/",
    response_model=BalancesOut,
    summary="Totals per transaction type in the primary and reference currency",
)
async def balances(
    household_id: str,
    ledger: CurrencyLedger = Depends(get_ledger),
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    rows = db.list_transactions(household_id)
    summary = compute_balances(ledger, rows, reference_currency=settings.reference_currency)
    return BalancesOut(
        primary_currency=summary.primary_currency,
        reference_currency=summary.reference_currency,
        transaction_count=summary.transaction_count,
        lines=[BalanceLineOut(**line.__dict__) for line in summary.lines],
    )
