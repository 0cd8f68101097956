from __future__ import annotations

import uuid
from typing import Any, Dict

from sqlalchemy import desc, select
from sqlalchemy.orm import Session

from app.models.inquiry import Inquiry
from app.services.installations_service import InstallationService
from app.services.quote_ledger import QuoteLedger

LATEST = 5


def build_dashboard(
    db: Session,
    user_id: uuid.UUID,
    ledger: QuoteLedger,
    installations: InstallationService,
) -> Dict[str, Any]:
    quotes = ledger.list_by_owner(db, user_id, limit=LATEST)
    inquiries = list(
        db.execute(
            select(Inquiry)
            .where(Inquiry.user_id == user_id)
            .order_by(desc(Inquiry.created_at))
            .limit(LATEST)
        ).scalars().all()
    )
    upcoming = installations.list_for_owner(db, user_id, limit=LATEST)
    return {
        "quotes": quotes,
        "inquiries": inquiries,
        "installations": upcoming,
    }
