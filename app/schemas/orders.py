from __future__ import annotations

from typing import Any, Dict

from pydantic import BaseModel, Field

from app.models.order import Order


class OrderCreateRequest(BaseModel):
    quoteId: str = Field(..., min_length=1, max_length=64)


def order_out(order: Order) -> Dict[str, Any]:
    return {
        "id": str(order.id),
        "quote": str(order.quote_id),
        "status": order.status,
        "createdAt": order.created_at.isoformat() if order.created_at else None,
    }
