#app/models/quote.py
from __future__ import annotations

import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from sqlalchemy import (
    JSON,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


def _now() -> datetime:
    return datetime.now(timezone.utc)


class Quote(Base):
    """
    A priced estimate for mesh installation.

    Pricing columns are written once at creation. After that only
    status, payment_status, payment_details and checkout_request_id
    change, and only through QuoteLedger.
    """
    __tablename__ = "quotes"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )

    # inputs
    window_count: Mapped[int] = mapped_column(Integer, nullable=False)
    measurements: Mapped[List[Dict[str, float]]] = mapped_column(JSON, nullable=False)
    material: Mapped[str] = mapped_column(String(32), nullable=False)
    mesh_type: Mapped[str] = mapped_column(String(32), nullable=False)
    location: Mapped[str] = mapped_column(String(256), nullable=False)
    warranty: Mapped[str] = mapped_column(String(16), nullable=False)

    # derived (immutable)
    total_area: Mapped[float] = mapped_column(Float, nullable=False)
    base_cost: Mapped[float] = mapped_column(Float, nullable=False)
    warranty_cost: Mapped[float] = mapped_column(Float, nullable=False)
    total_cost: Mapped[float] = mapped_column(Float, nullable=False)

    # mutable
    status: Mapped[str] = mapped_column(String(16), nullable=False, default="pending")
    payment_status: Mapped[str] = mapped_column(
        String(16), nullable=False, default="pending"
    )
    payment_details: Mapped[Optional[Dict[str, Any]]] = mapped_column(
        JSON, nullable=True
    )
    checkout_request_id: Mapped[Optional[str]] = mapped_column(
        String(128), nullable=True
    )

    valid_until: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=_now
    )

    __table_args__ = (
        Index("ix_quotes_user_created", "user_id", "created_at"),
        Index("ix_quotes_checkout_request_id", "checkout_request_id"),
    )
