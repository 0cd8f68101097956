from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.auth_deps import get_current_principal
from app.core.deps import get_installation_service, get_ledger
from app.db.session import get_db
from app.policies.rbac import Principal
from app.schemas.installations import installation_out
from app.schemas.quotes import quote_detail
from app.services.dashboard_service import build_dashboard
from app.services.installations_service import InstallationService
from app.services.quote_ledger import QuoteLedger

router = APIRouter()


@router.get("/dashboard")
def dashboard(
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    ledger: QuoteLedger = Depends(get_ledger),
    installations: InstallationService = Depends(get_installation_service),
):
    data = build_dashboard(db, principal.user_id, ledger, installations)
    return {
        "success": True,
        "dashboard": {
            "quoteCount": len(data["quotes"]),
            "latestQuotes": [quote_detail(q) for q in data["quotes"]],
            "inquiryCount": len(data["inquiries"]),
            "latestInquiries": [
                {
                    "id": str(i.id),
                    "inquiryType": i.inquiry_type,
                    "status": i.status,
                    "createdAt": i.created_at.isoformat() if i.created_at else None,
                }
                for i in data["inquiries"]
            ],
            "upcomingInstallations": [installation_out(x) for x in data["installations"]],
        },
    }
