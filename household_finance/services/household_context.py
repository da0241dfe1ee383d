"""Request-scoped context: store handle, acting user, household membership.

The store and settings live on `app.state` (set by create_app) and reach
routers only through these dependencies. The acting user id comes from the
`X-User-Id` header supplied by the external auth layer.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import Depends, Header, HTTPException, Path, Request

from household_finance.core.config import Settings
from household_finance.core.errors import StoreError
from household_finance.db.dal import Database
from household_finance.services.ledger import CurrencyLedger


def get_db(request: Request) -> Database:
    return request.app.state.db


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_current_user(
    x_user_id: Optional[str] = Header(None, description="Acting user id"),
    db: Database = Depends(get_db),
) -> Dict[str, Any]:
    if not x_user_id:
        raise HTTPException(status_code=401, detail="missing X-User-Id header")
    user = db.get_user(x_user_id)
    if user is None:
        raise HTTPException(status_code=401, detail="unknown user")
    return user


def require_member(
    household_id: str = Path(..., description="Household identifier"),
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
) -> Dict[str, Any]:
    membership = db.get_membership(household_id, user["id"])
    if membership is None:
        if db.get_household(household_id) is None:
            raise HTTPException(status_code=404, detail="household not found")
        raise HTTPException(
            status_code=403, detail="you are not a member of this household"
        )
    return membership


def get_ledger(
    membership: Dict[str, Any] = Depends(require_member),
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
) -> CurrencyLedger:
    """Fresh ledger snapshot for the household of the current request."""
    ledger = CurrencyLedger.from_settings(db, membership["household_id"], settings)
    if not ledger.refresh():
        raise StoreError(ledger.error or "error loading currency data")
    return ledger


__all__ = [
    "get_db",
    "get_app_settings",
    "get_current_user",
    "require_member",
    "get_ledger",
]
