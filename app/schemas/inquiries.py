from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from app.models.enums import InquiryType
from app.schemas.primitives import NonEmptyStr


class InquiryCreateRequest(BaseModel):
    name: NonEmptyStr
    email: EmailStr
    phone: NonEmptyStr = Field(..., max_length=32)
    inquiryType: InquiryType
    message: Optional[str] = Field(default=None, max_length=5000)
