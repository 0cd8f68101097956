# app/services/quote_ledger.py
from __future__ import annotations

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import desc, select
from sqlalchemy.orm import Session

from app.core.errors import Conflict, NotFound, ValidationError
from app.models.enums import PaymentStatus, QuoteStatus
from app.models.quote import Quote
from app.services.pricing import calculate_quote, normalize_measurements
from app.services.sms import Notifier

logger = logging.getLogger(__name__)

DEFAULT_VALIDITY_DAYS = 7

# current -> targets that may be written
_PAYMENT_TRANSITIONS = {
    PaymentStatus.pending: {PaymentStatus.pending, PaymentStatus.completed, PaymentStatus.failed},
    PaymentStatus.failed: {PaymentStatus.pending},
    PaymentStatus.completed: set(),
}


def _now() -> datetime:
    return datetime.now(timezone.utc)


def coerce_quote_id(raw: Any) -> uuid.UUID:
    """
    Quote ids arrive as strings from routes and callbacks. A malformed id
    cannot exist in the ledger, so it is reported as NotFound.
    """
    if isinstance(raw, uuid.UUID):
        return raw
    try:
        return uuid.UUID(str(raw).strip())
    except (ValueError, AttributeError):
        raise NotFound("Quote not found")


class QuoteLedger:
    """
    Owns every write to the quotes table.

    Pricing columns are computed once in create(); afterwards only the
    lifecycle status and the payment fields are ever touched.
    """

    def __init__(self, notifier: Optional[Notifier] = None, validity_days: int = DEFAULT_VALIDITY_DAYS):
        self.notifier = notifier
        self.validity_days = validity_days

    # ---------------------------
    # READS
    # ---------------------------

    def get_by_id(self, db: Session, quote_id: Any, *, owner_id: Optional[uuid.UUID] = None) -> Quote:
        """
        With owner_id set, a quote owned by someone else is reported as
        NotFound rather than forbidden, so ids cannot be probed.
        """
        qid = coerce_quote_id(quote_id)
        quote = db.get(Quote, qid)
        if quote is None or (owner_id is not None and quote.user_id != owner_id):
            raise NotFound("Quote not found")
        return quote

    def list_by_owner(self, db: Session, owner_id: uuid.UUID, limit: Optional[int] = None) -> List[Quote]:
        stmt = (
            select(Quote)
            .where(Quote.user_id == owner_id)
            .order_by(desc(Quote.created_at))
        )
        if limit:
            stmt = stmt.limit(limit)
        return list(db.execute(stmt).scalars().all())

    def list_all(self, db: Session) -> List[Quote]:
        return list(db.execute(select(Quote).order_by(desc(Quote.created_at))).scalars().all())

    def find_by_checkout_request(self, db: Session, checkout_request_id: str) -> Optional[Quote]:
        return db.execute(
            select(Quote).where(Quote.checkout_request_id == checkout_request_id)
        ).scalars().first()

    def _get_for_update(self, db: Session, quote_id: Any) -> Quote:
        qid = coerce_quote_id(quote_id)
        quote = db.execute(
            select(Quote)
            .where(Quote.id == qid)
            .with_for_update()
            # callers usually hold this Quote already; overwrite it with the locked row
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
        if quote is None:
            raise NotFound("Quote not found")
        return quote

    # ---------------------------
    # MUTATIONS
    # ---------------------------

    def create(
        self,
        db: Session,
        *,
        owner_id: uuid.UUID,
        window_count: int,
        measurements: Iterable[Any],
        material: Any,
        mesh_type: Any,
        location: str,
        warranty: Any,
        owner_phone: Optional[str] = None,
    ) -> Quote:
        rows = normalize_measurements(measurements)
        pricing = calculate_quote(
            window_count=window_count,
            measurements=rows,
            material=material,
            mesh_type=mesh_type,
            location=location,
            warranty=warranty,
        )

        now = _now()
        quote = Quote(
            id=uuid.uuid4(),
            user_id=owner_id,
            window_count=window_count,
            measurements=rows,
            material=getattr(material, "value", material),
            mesh_type=getattr(mesh_type, "value", mesh_type),
            location=location.strip(),
            warranty=getattr(warranty, "value", warranty),
            total_area=pricing.total_area,
            base_cost=pricing.base_cost,
            warranty_cost=pricing.warranty_cost,
            total_cost=pricing.total_cost,
            status=QuoteStatus.pending.value,
            payment_status=PaymentStatus.pending.value,
            valid_until=now + timedelta(days=self.validity_days),
            created_at=now,
        )
        db.add(quote)
        db.commit()
        db.refresh(quote)

        logger.info(
            "quote created",
            extra={"quote_id": str(quote.id), "total_cost": quote.total_cost},
        )

        if self.notifier is not None:
            self.notifier.notify(
                owner_phone,
                f"Your quote for {window_count} {quote.material} {quote.mesh_type} windows "
                f"is KES {round(quote.total_cost)}. "
                f"Valid until {quote.valid_until:%d/%m/%Y}.",
            )
        return quote

    def update_payment_status(
        self,
        db: Session,
        quote_id: Any,
        status: Any,
        details: Optional[Dict[str, Any]] = None,
        *,
        checkout_request_id: Optional[str] = None,
    ) -> Quote:
        """
        Rules:
        - completed never regresses (pending/failed -> Conflict)
        - completed -> completed is a no-op; stored details are kept
        - failed -> failed is a no-op
        - failed -> pending opens a new payment attempt
        - failed -> completed is rejected; a new attempt must be initiated
        """
        try:
            target = PaymentStatus(getattr(status, "value", status))
        except ValueError:
            raise ValidationError(f"Invalid payment status: {status!r}")

        quote = self._get_for_update(db, quote_id)
        current = PaymentStatus(quote.payment_status)
        qid = str(quote.id)

        if current == target and current != PaymentStatus.pending:
            # redelivered callback
            db.rollback()
            logger.info(
                "payment status unchanged",
                extra={"quote_id": qid, "payment_status": current.value},
            )
            return quote

        if target not in _PAYMENT_TRANSITIONS[current]:
            db.rollback()
            raise Conflict(
                f"Cannot change payment status from {current.value} to {target.value}.",
                details={"quote_id": qid},
            )

        quote.payment_status = target.value
        if details is not None:
            quote.payment_details = dict(details)
        if checkout_request_id is not None:
            quote.checkout_request_id = checkout_request_id
        db.commit()
        db.refresh(quote)

        logger.info(
            "payment status updated",
            extra={
                "quote_id": str(quote.id),
                "from": current.value,
                "to": target.value,
            },
        )
        return quote

    def mark_accepted(self, db: Session, quote_id: Any, *, commit: bool = True) -> Quote:
        """
        pending -> accepted, once an Order exists for the quote.
        With commit=False the caller owns the transaction.
        """
        quote = self._get_for_update(db, quote_id)
        if quote.status != QuoteStatus.pending.value:
            current, qid = quote.status, str(quote.id)
            db.rollback()
            raise Conflict(
                f"Quote is already {current}.",
                details={"quote_id": qid},
            )
        quote.status = QuoteStatus.accepted.value
        if commit:
            db.commit()
            db.refresh(quote)
        return quote
