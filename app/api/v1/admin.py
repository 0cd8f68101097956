# app/api/v1/admin.py
from __future__ import annotations

import logging
import uuid

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.core.auth_deps import require_admin
from app.core.deps import get_installation_service, get_ledger, get_notifier
from app.core.errors import NotificationError
from app.db.session import get_db
from app.policies.rbac import ACTION_SEND_SMS, ACTION_VIEW_ALL_QUOTES, Principal, require_action
from app.schemas.installations import InstallationScheduleRequest, installation_out
from app.schemas.misc import SmsRequest
from app.schemas.quotes import quote_detail
from app.schemas.reviews import ReviewApprovalRequest, review_out
from app.services.installations_service import InstallationService
from app.services.quote_ledger import QuoteLedger
from app.services.reviews_service import ReviewService
from app.services.sms import Notifier

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/admin/quotes")
def all_quotes(
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_admin),
    ledger: QuoteLedger = Depends(get_ledger),
):
    require_action(principal, ACTION_VIEW_ALL_QUOTES)
    rows = ledger.list_all(db)
    return {"success": True, "quotes": [quote_detail(q, include_owner=True) for q in rows]}


@router.get("/admin/reviews")
def all_reviews(db: Session = Depends(get_db), principal: Principal = Depends(require_admin)):
    rows = ReviewService().list_all(db)
    return {"success": True, "reviews": [review_out(r) for r in rows]}


@router.patch("/admin/reviews/{review_id}")
def moderate_review(
    review_id: uuid.UUID,
    payload: ReviewApprovalRequest,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_admin),
):
    review = ReviewService().set_approved(db, principal, review_id, payload.approved)
    return {"success": True, "review": review_out(review)}


@router.post("/admin/installations", status_code=201)
def schedule_installation(
    payload: InstallationScheduleRequest,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_admin),
    installations: InstallationService = Depends(get_installation_service),
):
    inst = installations.schedule(
        db,
        principal,
        quote_id=payload.quoteId,
        scheduled_date=payload.scheduledDate,
        notes=payload.notes,
    )
    return {"success": True, "installation": installation_out(inst)}


@router.post("/send-sms")
def send_sms(
    payload: SmsRequest,
    principal: Principal = Depends(require_admin),
    notifier: Notifier = Depends(get_notifier),
):
    require_action(principal, ACTION_SEND_SMS)
    try:
        notifier.send(payload.phone, payload.message)
    except NotificationError as e:
        logger.error("admin sms failed", extra={"error": e.message})
        raise HTTPException(status_code=500, detail="Error sending SMS")
    return {"success": True, "message": "SMS sent successfully"}
