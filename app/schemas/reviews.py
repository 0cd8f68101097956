from __future__ import annotations

from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from app.models.review import Review


class ReviewCreateRequest(BaseModel):
    rating: int = Field(..., ge=1, le=5, description="Rating must be between 1 and 5")
    comment: Optional[str] = Field(default=None, max_length=2000)


class ReviewApprovalRequest(BaseModel):
    approved: bool


def review_out(review: Review) -> Dict[str, Any]:
    return {
        "id": str(review.id),
        "user": {"name": review.user.name} if review.user else None,
        "rating": review.rating,
        "comment": review.comment,
        "approved": review.approved,
        "createdAt": review.created_at.isoformat() if review.created_at else None,
    }
