from __future__ import annotations

from pydantic import BaseModel, Field

from app.schemas.primitives import NonEmptyStr


class CoverageRequest(BaseModel):
    address: NonEmptyStr = Field(..., max_length=512)


class SmsRequest(BaseModel):
    phone: NonEmptyStr = Field(..., max_length=32)
    message: NonEmptyStr = Field(..., max_length=480)
