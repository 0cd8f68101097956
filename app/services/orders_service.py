from __future__ import annotations

import logging
import uuid
from typing import Any, List

from sqlalchemy import desc, select
from sqlalchemy.orm import Session

from app.models.order import Order
from app.policies.rbac import ACTION_PLACE_ORDER, Principal, require_action
from app.services.quote_ledger import QuoteLedger

logger = logging.getLogger(__name__)


class OrderService:
    def __init__(self, ledger: QuoteLedger):
        self.ledger = ledger

    def place_order(self, db: Session, principal: Principal, quote_id: Any) -> Order:
        """
        Converts the caller's quote into an order and marks the quote
        accepted in the same transaction. A quote can be ordered once.
        """
        require_action(principal, ACTION_PLACE_ORDER)

        quote = self.ledger.get_by_id(db, quote_id, owner_id=principal.user_id)
        self.ledger.mark_accepted(db, quote.id, commit=False)

        order = Order(id=uuid.uuid4(), user_id=principal.user_id, quote_id=quote.id)
        db.add(order)
        db.commit()
        db.refresh(order)

        logger.info(
            "order placed",
            extra={"order_id": str(order.id), "quote_id": str(quote.id)},
        )
        return order

    def list_for_user(self, db: Session, user_id: uuid.UUID) -> List[Order]:
        return list(
            db.execute(
                select(Order).where(Order.user_id == user_id).order_by(desc(Order.created_at))
            ).scalars().all()
        )
