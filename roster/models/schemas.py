"""
Roster API: Pydantic data models.

Request bodies are validated here before any service or store code runs, so
the store itself never sees malformed members. Every response goes out in
the :class:`ApiResponse` envelope.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Generic, Literal, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, EmailStr, Field

T = TypeVar("T")


class Action(str, Enum):
    """What an endpoint did; echoed in every envelope."""

    read = "READ"
    insert = "INSERT"
    update = "UPDATE"
    delete = "DELETE"


class ApiResponse(BaseModel, Generic[T]):
    """Uniform envelope: ``{action, message, success, data}``."""

    action: Action
    message: str
    success: bool = True
    data: Optional[T] = None


def envelope(action: Action, message: str, data: Any = None, *, success: bool = True) -> dict:
    return {"action": action.value, "message": message, "success": success, "data": data}


# ---------------------------------------------------------------------------
# Members
# ---------------------------------------------------------------------------

Role = Literal["member", "admin"]


class _MemberFields(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True, extra="forbid")


class MemberCreate(_MemberFields):
    first_name: str = Field(min_length=1, max_length=60, examples=["Ada"])
    last_name: str = Field(min_length=1, max_length=60, examples=["Lovelace"])
    age: int = Field(ge=0, le=150, examples=[30])
    email: EmailStr = Field(examples=["ada@example.com"])
    role: Role = "member"


class MemberReplace(MemberCreate):
    """Full replacement body for ``PUT``; omitted optional fields fall back to defaults."""


class MemberUpdate(_MemberFields):
    """Partial body for ``PATCH``; only fields the client sent are merged."""

    first_name: Optional[str] = Field(default=None, min_length=1, max_length=60)
    last_name: Optional[str] = Field(default=None, min_length=1, max_length=60)
    age: Optional[int] = Field(default=None, ge=0, le=150)
    email: Optional[EmailStr] = None
    role: Optional[Role] = None


class Member(BaseModel):
    id: int
    first_name: str
    last_name: str
    age: int
    email: str
    role: str = "member"
    full_name: str


# ---------------------------------------------------------------------------
# Accounts / auth
# ---------------------------------------------------------------------------

class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=8, max_length=128)


class AccountOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    email: str
    role: str


class TokenResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: int


class PasswordChange(BaseModel):
    current_password: str
    new_password: str = Field(min_length=8, max_length=128)
