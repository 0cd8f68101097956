from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.auth_deps import get_current_principal
from app.db.session import get_db
from app.policies.rbac import Principal
from app.schemas.reviews import ReviewCreateRequest, review_out
from app.services.reviews_service import ReviewService

router = APIRouter(prefix="/reviews")


@router.post("", status_code=201)
def submit_review(
    payload: ReviewCreateRequest,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
):
    ReviewService().submit(db, principal, rating=payload.rating, comment=payload.comment)
    return {"success": True, "message": "Review submitted, pending approval"}


@router.get("")
def list_reviews(db: Session = Depends(get_db)):
    """
    Public: latest approved reviews only.
    """
    rows = ReviewService().list_public(db)
    return {"success": True, "reviews": [review_out(r) for r in rows]}
