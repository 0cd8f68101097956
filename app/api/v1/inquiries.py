from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.auth_deps import get_optional_principal
from app.core.deps import get_inquiry_service
from app.db.session import get_db
from app.policies.rbac import Principal
from app.schemas.inquiries import InquiryCreateRequest
from app.services.inquiries_service import InquiryService

router = APIRouter(prefix="/inquiries")


@router.post("", status_code=201)
def submit_inquiry(
    payload: InquiryCreateRequest,
    db: Session = Depends(get_db),
    principal: Optional[Principal] = Depends(get_optional_principal),
    inquiries: InquiryService = Depends(get_inquiry_service),
):
    inquiry = inquiries.submit(
        db,
        user_id=principal.user_id if principal else None,
        name=payload.name,
        email=payload.email,
        phone=payload.phone,
        inquiry_type=payload.inquiryType,
        message=payload.message,
    )
    return {"success": True, "inquiry": {"id": str(inquiry.id), "status": inquiry.status}}
