from __future__ import annotations

import logging
from typing import Any, Dict, List

from fastapi import APIRouter, Depends, HTTPException, status

from household_finance.core.config import Settings
from household_finance.db.dal import Database, StoreConflictError
from household_finance.models.household import (
    HouseholdCreate,
    HouseholdOut,
    MemberInvite,
    MemberOut,
)
from household_finance.services.household_context import (
    get_app_settings,
    get_current_user,
    get_db,
    require_member,
)

router = APIRouter(prefix="/households", tags=["households"])
logger = logging.getLogger("household_finance.households")


@router.get("/", response_model=List[HouseholdOut], summary="Households of the acting user")
async def list_households(
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
):
    rows = db.list_user_households(user["id"])
    return [HouseholdOut(**r) for r in rows]


@router.post(
    "/",
    response_model=HouseholdOut,
    status_code=status.HTTP_201_CREATED,
    summary="Create a household owned by the acting user",
)
async def create_household(
    payload: HouseholdCreate,
    user: Dict[str, Any] = Depends(get_current_user),
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_app_settings),
):
    household_id = db.create_household_with_owner(
        payload.name, user["id"], currencies=settings.starter_currencies
    )
    logger.info("created household %s", household_id)
    row = db.get_household(household_id)
    if not row:
        raise HTTPException(status_code=500, detail="household not found after creation")
    return HouseholdOut(**row, role="owner")


@router.post(
    "/{household_id}/members",
    response_model=MemberOut,
    status_code=status.HTTP_201_CREATED,
    summary="Invite a registered user by email",
)
async def invite_member(
    household_id: str,
    payload: MemberInvite,
    _: Dict[str, Any] = Depends(require_member),
    db: Database = Depends(get_db),
):
    invitee = db.get_user_by_email(str(payload.email).lower())
    if invitee is None:
        raise HTTPException(
            status_code=404,
            detail="user not found; they must register before being invited",
        )
    try:
        row = db.add_member(household_id, invitee["id"], role="member")
    except StoreConflictError as e:
        raise HTTPException(status_code=409, detail="user is already a member") from e
    return MemberOut(**row)


@router.delete(
    "/{household_id}/members/me",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Leave a household",
)
async def leave_household(
    household_id: str,
    membership: Dict[str, Any] = Depends(require_member),
    db: Database = Depends(get_db),
):
    db.remove_member(household_id, membership["user_id"])
    logger.info("user left household %s", household_id)
    return None
