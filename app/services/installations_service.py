from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, List, Optional

from sqlalchemy import desc, select
from sqlalchemy.orm import Session

from app.core.errors import Conflict, NotFound
from app.models.enums import PaymentStatus
from app.models.installation import Installation
from app.policies.rbac import ACTION_SCHEDULE_INSTALLATION, Principal, require_action
from app.services.quote_ledger import QuoteLedger


class InstallationService:
    def __init__(self, ledger: QuoteLedger):
        self.ledger = ledger

    def get_for_owner(self, db: Session, installation_id: Any, owner_id: uuid.UUID) -> Installation:
        try:
            iid = uuid.UUID(str(installation_id))
        except ValueError:
            raise NotFound("Installation not found")
        inst = db.get(Installation, iid)
        if inst is None or inst.user_id != owner_id:
            raise NotFound("Installation not found")
        return inst

    def list_for_owner(self, db: Session, owner_id: uuid.UUID, limit: Optional[int] = None) -> List[Installation]:
        stmt = (
            select(Installation)
            .where(Installation.user_id == owner_id)
            .order_by(desc(Installation.scheduled_date))
        )
        if limit:
            stmt = stmt.limit(limit)
        return list(db.execute(stmt).scalars().unique().all())

    def schedule(
        self,
        db: Session,
        principal: Principal,
        *,
        quote_id: Any,
        scheduled_date: datetime,
        notes: Optional[str] = None,
    ) -> Installation:
        """
        Back-office scheduling. Only paid quotes get an installation slot.
        """
        require_action(principal, ACTION_SCHEDULE_INSTALLATION)
        quote = self.ledger.get_by_id(db, quote_id)
        if quote.payment_status != PaymentStatus.completed.value:
            raise Conflict("Quote has not been paid yet.", details={"quote_id": str(quote.id)})

        inst = Installation(
            user_id=quote.user_id,
            quote_id=quote.id,
            scheduled_date=scheduled_date,
            notes=notes,
        )
        db.add(inst)
        db.commit()
        db.refresh(inst)
        return inst
