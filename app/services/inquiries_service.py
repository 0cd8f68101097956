from __future__ import annotations

import logging
import uuid
from typing import Optional

from sqlalchemy.orm import Session

from app.models.enums import InquiryStatus, InquiryType
from app.models.inquiry import Inquiry
from app.services.sms import Notifier

logger = logging.getLogger(__name__)


class InquiryService:
    def __init__(self, notifier: Optional[Notifier] = None):
        self.notifier = notifier

    def submit(
        self,
        db: Session,
        *,
        user_id: Optional[uuid.UUID],
        name: str,
        email: str,
        phone: str,
        inquiry_type: InquiryType,
        message: Optional[str],
    ) -> Inquiry:
        inquiry = Inquiry(
            user_id=user_id,
            name=name.strip(),
            email=email.strip().lower(),
            phone=phone.strip(),
            inquiry_type=inquiry_type.value,
            message=message.strip() if message else None,
            status=InquiryStatus.new.value,
        )
        db.add(inquiry)
        db.commit()
        db.refresh(inquiry)

        logger.info("inquiry received", extra={"inquiry_id": str(inquiry.id), "type": inquiry.inquiry_type})

        if self.notifier is not None:
            self.notifier.notify(
                inquiry.phone,
                f"Thank you for your {inquiry.inquiry_type} inquiry. We'll respond within 24 hours.",
            )
        return inquiry
