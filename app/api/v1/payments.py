# app/api/v1/payments.py
from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body, Depends
from sqlalchemy.orm import Session

from app.core.auth_deps import get_current_principal
from app.core.deps import get_callback_handler, get_payment_initiator
from app.db.session import get_db
from app.policies.rbac import Principal
from app.schemas.payments import MpesaPayRequest, MpesaPayResponse
from app.services.callback_service import PaymentCallbackHandler
from app.services.payment_service import PaymentInitiator

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/mpesa-pay", response_model=MpesaPayResponse)
def mpesa_pay(
    payload: MpesaPayRequest,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    initiator: PaymentInitiator = Depends(get_payment_initiator),
):
    result = initiator.initiate(
        db,
        principal,
        quote_id=payload.quoteId,
        phone=payload.phone,
        amount=payload.amount,
    )
    return MpesaPayResponse(transactionId=result.checkout_request_id)


# ---------------------------------------------------------------------
# POST /mpesa-callback  (gateway-invoked, unauthenticated)
# Always 200 so Safaricom stops redelivering.
# ---------------------------------------------------------------------


@router.post("/mpesa-callback")
def mpesa_callback(
    payload: Any = Body(default=None),
    db: Session = Depends(get_db),
    handler: PaymentCallbackHandler = Depends(get_callback_handler),
):
    if not isinstance(payload, dict):
        logger.warning("mpesa callback with non-object body")
        return {"success": True}
    return handler.handle_callback(db, payload)
