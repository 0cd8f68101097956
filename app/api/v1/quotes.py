# app/api/v1/quotes.py
from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.auth_deps import get_current_principal
from app.core.deps import get_ledger
from app.db.session import get_db
from app.policies.rbac import ACTION_REQUEST_QUOTE, Principal, require_action
from app.schemas.quotes import QuoteCreateRequest, quote_detail, quote_summary
from app.services.quote_ledger import QuoteLedger

router = APIRouter()


# ---------------------------------------------------------------------
# POST /quotes  (price + persist)
# ---------------------------------------------------------------------


@router.post("/quotes", status_code=201)
def create_quote(
    payload: QuoteCreateRequest,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    ledger: QuoteLedger = Depends(get_ledger),
):
    require_action(principal, ACTION_REQUEST_QUOTE)

    quote = ledger.create(
        db,
        owner_id=principal.user_id,
        window_count=payload.windowCount,
        measurements=[m.model_dump() for m in payload.measurements],
        material=payload.material,
        mesh_type=payload.type,
        location=payload.location,
        warranty=payload.warranty,
        owner_phone=principal.phone,
    )
    return {"success": True, "quote": quote_summary(quote)}


# ---------------------------------------------------------------------
# Owner reads
# ---------------------------------------------------------------------


@router.get("/user/quotes")
def list_my_quotes(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    ledger: QuoteLedger = Depends(get_ledger),
):
    quotes = ledger.list_by_owner(db, principal.user_id)
    return {
        "success": True,
        "count": len(quotes),
        "quotes": [quote_detail(q) for q in quotes],
    }


@router.get("/quotes/{quote_id}")
def get_my_quote(
    quote_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    ledger: QuoteLedger = Depends(get_ledger),
):
    quote = ledger.get_by_id(db, quote_id, owner_id=principal.user_id)
    return {"success": True, "quote": quote_detail(quote)}
