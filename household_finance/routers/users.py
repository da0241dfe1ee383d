"""Users router.

Authentication is delegated to an external provider; this only registers
the identities that provider hands out so they can own households and
transactions.
"""

from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, status

from household_finance.db.dal import Database, StoreConflictError
from household_finance.models.household import UserCreate, UserOut
from household_finance.services.household_context import get_current_user, get_db

router = APIRouter(prefix="/users", tags=["users"])


@router.post(
    "/",
    response_model=UserOut,
    status_code=status.HTTP_201_CREATED,
    summary="Register a user",
)
async def register_user(payload: UserCreate, db: Database = Depends(get_db)):
    try:
        row = db.create_user(str(payload.email).lower())
    except StoreConflictError as e:
        raise HTTPException(status_code=409, detail="email already registered") from e
    return UserOut(**row)


@router.get("/me", response_model=UserOut, summary="Acting user")
async def me(user: Dict[str, Any] = Depends(get_current_user)):
    return UserOut(**user)
