from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, Optional

from sqlalchemy.orm import Session

from app.core.errors import Conflict, PaymentInitiationError, ValidationError
from app.models.enums import PaymentStatus
from app.models.quote import Quote
from app.policies.rbac import ACTION_PAY_QUOTE, Principal, require_action
from app.services.mpesa_gateway import (
    ChargeRequest,
    GatewayAuthError,
    GatewayError,
    PaymentGateway,
    account_reference,
)
from app.services.quote_ledger import QuoteLedger
from app.services.sms import Notifier

logger = logging.getLogger(__name__)

KENYAN_MSISDN = re.compile(r"^\+?254\d{9}$")


@dataclass(frozen=True)
class PaymentInitiation:
    checkout_request_id: str
    quote: Quote
    customer_message: Optional[str] = None


def validate_phone(phone: Any) -> str:
    value = str(phone or "").strip()
    if not KENYAN_MSISDN.match(value):
        raise ValidationError("Invalid Kenyan phone number", details={"field": "phone"})
    # Daraja wants 2547XXXXXXXX without the plus
    return value.lstrip("+")


def validate_amount(amount: Any) -> int:
    """
    M-Pesa only charges whole shillings; fractional amounts are rounded
    half-up after the >= 1 check.
    """
    try:
        value = Decimal(str(amount))
    except (InvalidOperation, TypeError):
        raise ValidationError("Amount must be at least KES 1", details={"field": "amount"})
    if not value.is_finite() or value < 1:
        raise ValidationError("Amount must be at least KES 1", details={"field": "amount"})
    return int(value.quantize(Decimal("1"), rounding=ROUND_HALF_UP))


class PaymentInitiator:
    def __init__(
        self,
        gateway: PaymentGateway,
        ledger: QuoteLedger,
        notifier: Optional[Notifier] = None,
        description: str = "Mosquito Mesh Payment",
    ):
        self.gateway = gateway
        self.ledger = ledger
        self.notifier = notifier
        self.description = description

    def _charge(self, charge: ChargeRequest):
        token = self.gateway.get_access_token()
        try:
            return self.gateway.submit_charge(token, charge)
        except GatewayAuthError:
            # 401: token expired between fetch and use; nothing was charged
            logger.info("mpesa token rejected, refreshing once")
            return self.gateway.submit_charge(self.gateway.get_access_token(), charge)

    def initiate(
        self,
        db: Session,
        principal: Principal,
        *,
        quote_id: Any,
        phone: Any,
        amount: Any,
    ) -> PaymentInitiation:
        """
        Sends an STK push for the caller's quote and marks it payment-pending.

        Gateway or network failure raises PaymentInitiationError and
        leaves the quote exactly as it was.
        """
        require_action(principal, ACTION_PAY_QUOTE)

        msisdn = validate_phone(phone)
        whole_amount = validate_amount(amount)

        quote = self.ledger.get_by_id(db, quote_id, owner_id=principal.user_id)
        if quote.payment_status == PaymentStatus.completed.value:
            raise Conflict("Quote has already been paid.", details={"quote_id": str(quote.id)})

        charge = ChargeRequest(
            phone=msisdn,
            amount=whole_amount,
            account_reference=account_reference(quote.id),
            description=self.description,
        )

        try:
            response = self._charge(charge)
        except (GatewayError, ValueError) as e:
            logger.error(
                "mpesa initiation failed",
                extra={"quote_id": str(quote.id), "error": str(e)},
            )
            raise PaymentInitiationError("Failed to initiate M-Pesa payment") from e

        quote_ref = str(quote.id)
        try:
            quote = self.ledger.update_payment_status(
                db,
                quote.id,
                PaymentStatus.pending,
                checkout_request_id=response.checkout_request_id,
            )
        except Conflict:
            # the prompt is already on the payer's phone; keep the reference for reconciliation
            logger.error(
                "mpesa stk push accepted but quote not marked pending",
                extra={
                    "quote_id": quote_ref,
                    "checkout_request_id": response.checkout_request_id,
                    "amount": whole_amount,
                },
            )
            raise

        logger.info(
            "mpesa stk push accepted",
            extra={
                "quote_id": str(quote.id),
                "checkout_request_id": response.checkout_request_id,
                "amount": whole_amount,
            },
        )

        if self.notifier is not None:
            self.notifier.notify(
                msisdn,
                f"Payment request of KES {whole_amount} for Quote #{quote.id} sent to "
                f"{phone}. Check your phone to complete via M-Pesa.",
            )

        return PaymentInitiation(
            checkout_request_id=response.checkout_request_id,
            quote=quote,
            customer_message=response.customer_message,
        )
