from __future__ import annotations

import uuid
from datetime import datetime

from pydantic import EmailStr, Field, field_validator

from bragger.schemas.common import CamelModel

MIN_PASSWORD_LENGTH = 8


def _validate_password_strength(v: str) -> str:
    if len(v) < MIN_PASSWORD_LENGTH:
        raise ValueError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
    return v


class RegisterRequest(CamelModel):
    email: EmailStr
    name: str = Field(..., min_length=1, max_length=200)
    password: str

    @field_validator("password")
    @classmethod
    def validate_password(cls, v: str) -> str:
        return _validate_password_strength(v)


class LoginRequest(CamelModel):
    email: EmailStr
    password: str


class UserResponse(CamelModel):
    id: uuid.UUID
    email: str
    name: str
    created_at: datetime | None = None
    updated_at: datetime | None = None


class AuthResponse(CamelModel):
    user: UserResponse
    token: str
