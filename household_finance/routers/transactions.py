from datetime import date
from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from household_finance.core.config import Settings
from household_finance.db.dal import Database
from household_finance.models import CATEGORIES, TRANSACTION_TYPES
from household_finance.models.transaction import TransactionIn, TransactionOut
from household_finance.services.household_context import (
    get_app_settings,
    get_db,
    get_ledger,
    require_member,
)
from household_finance.services.ledger import CurrencyLedger
from household_finance.services.transactions import (
    TransactionNotFound,
    TransactionValidationError,
    create_transaction,
    delete_transaction,
)

router = APIRouter(tags=["transactions"])


@router.get(
    "/transactions/categories",
    response_model=Dict[str, List[str]],
    summary="Suggested categories per transaction type",
)
async def list_categories():
    return CATEGORIES


@router.get(
    "/households/{household_id}/transactions",
    response_model=List[TransactionOut],
    summary="List household transactions (newest first)",
)
async def list_transactions(
    household_id: str,
    type: Optional[str] = Query(None, description="Filter by transaction type"),
    start_date: Optional[date] = Query(None, description="Filter: start date inclusive"),
    end_date: Optional[date] = Query(None, description="Filter: end date inclusive"),
    _: Dict[str, Any] = Depends(require_member),
    db: Database = Depends(get_db),
):
    if type is not None and type not in TRANSACTION_TYPES:
        raise HTTPException(status_code=400, detail="unsupported transaction type")
    if start_date and end_date and start_date > end_date:
        raise HTTPException(status_code=400, detail="start_date cannot be after end_date")
    rows = db.list_transactions(
        household_id, type=type, start_date=start_date, end_date=end_date
    )
    return [TransactionOut(**r) for r in rows]


@router.post(
    "/households/{household_id}/transactions",
    response_model=TransactionOut,
    status_code=201,
    summary="Record a transaction",
)
async def add_transaction(
    payload: TransactionIn,
    membership: Dict[str, Any] = Depends(require_member),
    ledger: CurrencyLedger = Depends(get_ledger),
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    try:
        row = create_transaction(
            db,
            ledger,
            payload,
            user_id=membership["user_id"],
            reference_currency=settings.reference_currency,
        )
    except TransactionValidationError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e
    return TransactionOut(**row)


@router.delete(
    "/households/{household_id}/transactions/{transaction_id}",
    status_code=204,
    summary="Delete a transaction",
)
async def remove_transaction(
    household_id: str,
    transaction_id: int,
    membership: Dict[str, Any] = Depends(require_member),
    db: Database = Depends(get_db),
):
    try:
        delete_transaction(db, transaction_id, household_id, membership["user_id"])
    except TransactionNotFound as e:
        raise HTTPException(status_code=404, detail=str(e)) from e
    except PermissionError as e:
        raise HTTPException(status_code=403, detail=str(e)) from e
    return None
