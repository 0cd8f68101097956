from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from app.schemas.primitives import KenyanPhone, NonEmptyStr


class RegisterRequest(BaseModel):
    name: NonEmptyStr
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=128)
    phone: Optional[KenyanPhone] = None


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class TokenResponse(BaseModel):
    success: bool = True
    token: str
    token_type: str = "bearer"
    name: str
