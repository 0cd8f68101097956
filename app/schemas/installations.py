from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field

from app.models.installation import Installation


class InstallationScheduleRequest(BaseModel):
    quoteId: str = Field(..., min_length=1, max_length=64)
    scheduledDate: datetime
    notes: Optional[str] = Field(default=None, max_length=2000)


def installation_out(inst: Installation) -> Dict[str, Any]:
    quote = inst.quote
    return {
        "id": str(inst.id),
        "scheduledDate": inst.scheduled_date.isoformat(),
        "status": inst.status,
        "notes": inst.notes,
        "quote": {
            "id": str(quote.id),
            "totalCost": quote.total_cost,
            "material": quote.material,
            "type": quote.mesh_type,
            "location": quote.location,
        }
        if quote
        else None,
    }
