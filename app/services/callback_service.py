from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional

from sqlalchemy.orm import Session

from app.core.errors import ServiceError
from app.models.enums import PaymentStatus
from app.models.quote import Quote
from app.services.quote_ledger import QuoteLedger
from app.services.sms import Notifier

logger = logging.getLogger(__name__)

ACK = {"success": True}


@dataclass(frozen=True)
class StkCallback:
    checkout_request_id: Optional[str]
    result_code: Optional[int]
    result_desc: Optional[str]
    metadata: Dict[str, Any]

    @property
    def succeeded(self) -> bool:
        return self.result_code == 0

    @property
    def account_reference(self) -> Optional[str]:
        ref = self.metadata.get("AccountReference")
        return str(ref) if ref is not None else None


def parse_stk_callback(payload: Mapping[str, Any]) -> StkCallback:
    """
    {"Body": {"stkCallback": {"CheckoutRequestID", "ResultCode", "ResultDesc",
      "CallbackMetadata": {"Item": [{"Name": ..., "Value": ...}, ...]}}}}
    """
    body = payload.get("Body") if isinstance(payload, Mapping) else None
    cb = body.get("stkCallback") if isinstance(body, Mapping) else None
    if not isinstance(cb, Mapping):
        raise ValueError("Callback payload missing Body.stkCallback.")

    raw_code = cb.get("ResultCode")
    try:
        result_code = int(raw_code) if raw_code is not None else None
    except (TypeError, ValueError):
        raise ValueError(f"Unparseable ResultCode: {raw_code!r}")

    items = (cb.get("CallbackMetadata") or {}).get("Item") or []
    metadata = {
        item.get("Name"): item.get("Value")
        for item in items
        if isinstance(item, Mapping) and item.get("Name")
    }

    return StkCallback(
        checkout_request_id=cb.get("CheckoutRequestID"),
        result_code=result_code,
        result_desc=cb.get("ResultDesc"),
        metadata=metadata,
    )


def quote_id_from_reference(reference: str) -> str:
    """
    "QUOTE-<id>" -> "<id>". Splits once, since ids may contain '-'.
    """
    parts = reference.split("-", 1)
    if len(parts) != 2 or not parts[1]:
        raise ValueError(f"Malformed account reference: {reference!r}")
    return parts[1]


class PaymentCallbackHandler:
    """
    Reconciles gateway result notifications against the quote ledger.

    handle_callback() always returns the acknowledgement; whatever goes
    wrong inside is logged so the gateway does not keep redelivering.
    """

    def __init__(self, ledger: QuoteLedger, notifier: Optional[Notifier] = None):
        self.ledger = ledger
        self.notifier = notifier

    def _locate(self, db: Session, cb: StkCallback) -> Optional[Quote]:
        if cb.account_reference:
            return self.ledger.get_by_id(db, quote_id_from_reference(cb.account_reference))
        if cb.checkout_request_id:
            return self.ledger.find_by_checkout_request(db, cb.checkout_request_id)
        return None

    def handle_callback(self, db: Session, payload: Mapping[str, Any]) -> Dict[str, Any]:
        try:
            cb = parse_stk_callback(payload)
            if cb.succeeded:
                self._on_success(db, cb)
            else:
                self._on_failure(db, cb)
        except ServiceError as e:
            logger.warning(
                "mpesa callback not applied",
                extra={"kind": e.kind, "error": e.message},
            )
        except Exception:
            db.rollback()
            logger.exception("mpesa callback error")
        return dict(ACK)

    def _on_success(self, db: Session, cb: StkCallback) -> None:
        quote = self._locate(db, cb)
        if quote is None:
            logger.warning(
                "mpesa callback for unknown quote",
                extra={"checkout_request_id": cb.checkout_request_id},
            )
            return

        already_paid = quote.payment_status == PaymentStatus.completed.value
        amount = cb.metadata.get("Amount")
        phone = cb.metadata.get("PhoneNumber")
        details = {
            "transactionId": cb.checkout_request_id,
            "amount": amount,
            "phone": str(phone) if phone is not None else None,
            "date": datetime.now(timezone.utc).isoformat(),
        }
        receipt = cb.metadata.get("MpesaReceiptNumber")
        if receipt:
            details["receiptNumber"] = receipt

        quote = self.ledger.update_payment_status(db, quote.id, PaymentStatus.completed, details)

        if already_paid:
            return
        if self.notifier is not None and phone is not None:
            self.notifier.notify(
                str(phone),
                f"Payment of KES {amount} for Quote #{quote.id} received. "
                f"We'll contact you to schedule installation.",
            )

    def _on_failure(self, db: Session, cb: StkCallback) -> None:
        quote = self._locate(db, cb)
        if quote is None:
            logger.warning(
                "failed mpesa callback for unknown quote",
                extra={"checkout_request_id": cb.checkout_request_id},
            )
            return

        if (
            quote.checkout_request_id
            and cb.checkout_request_id
            and quote.checkout_request_id != cb.checkout_request_id
        ):
            # failure for a superseded attempt; a newer push is outstanding
            logger.info(
                "stale mpesa failure ignored",
                extra={"quote_id": str(quote.id), "checkout_request_id": cb.checkout_request_id},
            )
            return

        logger.info(
            "mpesa payment failed",
            extra={
                "quote_id": str(quote.id),
                "result_code": cb.result_code,
                "result_desc": cb.result_desc,
            },
        )
        self.ledger.update_payment_status(db, quote.id, PaymentStatus.failed)
