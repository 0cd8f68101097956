from __future__ import annotations

from pydantic import BaseModel, Field

from app.schemas.primitives import KenyanPhone


class MpesaPayRequest(BaseModel):
    phone: KenyanPhone
    amount: float = Field(..., ge=1, description="Amount must be at least KES 1")
    quoteId: str = Field(..., min_length=1, max_length=64)


class MpesaPayResponse(BaseModel):
    success: bool = True
    message: str = "M-Pesa payment request sent"
    transactionId: str
