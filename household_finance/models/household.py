from __future__ import annotations
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field, field_validator


class UserCreate(BaseModel):
    email: EmailStr


class UserOut(BaseModel):
    id: str
    email: str
    created_at: datetime


class HouseholdCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name is required")
        return v


class HouseholdOut(BaseModel):
    id: str
    name: str
    created_at: datetime
    role: Optional[str] = None


class MemberInvite(BaseModel):
    email: EmailStr


class MemberOut(BaseModel):
    household_id: str
    user_id: str
    role: str
    joined_at: datetime
