from __future__ import annotations

import uuid
from typing import List, Optional

from sqlalchemy import desc, select
from sqlalchemy.orm import Session

from app.core.errors import NotFound
from app.models.review import Review
from app.policies.rbac import (
    ACTION_MODERATE_REVIEWS,
    ACTION_SUBMIT_REVIEW,
    Principal,
    require_action,
)

PUBLIC_REVIEW_LIMIT = 10


class ReviewService:
    def submit(self, db: Session, principal: Principal, *, rating: int, comment: Optional[str]) -> Review:
        # new reviews stay hidden until an admin approves them
        require_action(principal, ACTION_SUBMIT_REVIEW)
        review = Review(
            user_id=principal.user_id,
            rating=rating,
            comment=comment.strip() if comment else None,
            approved=False,
        )
        db.add(review)
        db.commit()
        db.refresh(review)
        return review

    def list_public(self, db: Session, limit: int = PUBLIC_REVIEW_LIMIT) -> List[Review]:
        return list(
            db.execute(
                select(Review)
                .where(Review.approved.is_(True))
                .order_by(desc(Review.created_at))
                .limit(limit)
            ).scalars().unique().all()
        )

    def list_all(self, db: Session) -> List[Review]:
        return list(
            db.execute(select(Review).order_by(desc(Review.created_at))).scalars().unique().all()
        )

    def set_approved(self, db: Session, principal: Principal, review_id: uuid.UUID, approved: bool) -> Review:
        require_action(principal, ACTION_MODERATE_REVIEWS)
        review = db.get(Review, review_id)
        if review is None:
            raise NotFound("Review not found")
        review.approved = approved
        db.commit()
        db.refresh(review)
        return review
