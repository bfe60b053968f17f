"""
Pydantic models for identities.

``Caller`` is the explicit identity handed to every service call once
the bearer token has been resolved.  ``Profile`` is the record the
built‑in identity provider keeps for each account.
"""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class Role(str, Enum):
    PARENT = "parent"
    STUDENT = "student"


class Caller(BaseModel):
    user_id: str
    role: Role
    name: str = ""


class ProfileBase(BaseModel):
    email: str = Field(..., examples=["parent@example.com"])
    name: str = Field(..., examples=["Sarah Parent"])
    role: Role = Field(..., examples=["parent"])


class SignupRequest(ProfileBase):
    password: str = Field(..., min_length=6, examples=["strongpassword"])


class LoginRequest(BaseModel):
    email: str
    password: str


class ProfileRead(ProfileBase):
    id: str
    created_at: datetime


class Profile(ProfileRead):
    """Stored profile, including the password hash."""

    password_hash: Optional[str] = None

    def public(self) -> ProfileRead:
        return ProfileRead(**self.model_dump(exclude={"password_hash"}))


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    profile: ProfileRead
