from __future__ import annotations

from typing import Any, Dict, List

from pydantic import BaseModel, Field

from app.models.enums import Material, MeshType, WarrantyTier
from app.models.quote import Quote
from app.schemas.primitives import Measurement, NonEmptyStr
from app.services.pricing import build_breakdown, installation_time, next_steps


class QuoteCreateRequest(BaseModel):
    windowCount: int = Field(..., ge=1, le=500)
    measurements: List[Measurement] = Field(..., min_length=1, max_length=500)
    material: Material
    type: MeshType
    location: NonEmptyStr = Field(..., max_length=256)
    warranty: WarrantyTier


def _iso(dt) -> str | None:
    return dt.isoformat() if dt else None


def quote_summary(quote: Quote) -> Dict[str, Any]:
    """
    Response body for POST /quotes.
    """
    return {
        "id": str(quote.id),
        "totalCost": round(quote.total_cost),
        "breakdown": build_breakdown(
            material=quote.material,
            mesh_type=quote.mesh_type,
            location=quote.location,
            warranty=quote.warranty,
        ),
        "estimatedInstallation": installation_time(quote.location),
        "nextSteps": next_steps(quote.location),
        "validUntil": _iso(quote.valid_until),
    }


def quote_detail(quote: Quote, *, include_owner: bool = False) -> Dict[str, Any]:
    out = {
        "id": str(quote.id),
        "windowCount": quote.window_count,
        "measurements": quote.measurements,
        "material": quote.material,
        "type": quote.mesh_type,
        "location": quote.location,
        "warranty": quote.warranty,
        "totalArea": quote.total_area,
        "baseCost": quote.base_cost,
        "warrantyCost": quote.warranty_cost,
        "totalCost": quote.total_cost,
        "status": quote.status,
        "paymentStatus": quote.payment_status,
        "paymentDetails": quote.payment_details,
        "validUntil": _iso(quote.valid_until),
        "createdAt": _iso(quote.created_at),
    }
    if include_owner:
        out["user"] = str(quote.user_id)
    return out
