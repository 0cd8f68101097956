from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.core.auth_deps import get_current_principal
from app.core.deps import get_installation_service
from app.db.session import get_db
from app.policies.rbac import Principal
from app.schemas.installations import installation_out
from app.services.installations_service import InstallationService

router = APIRouter(prefix="/installations")


@router.get("/{installation_id}")
def track_installation(
    installation_id: str,
    db: Session = Depends(get_db),
    principal: Principal = Depends(get_current_principal),
    installations: InstallationService = Depends(get_installation_service),
):
    inst = installations.get_for_owner(db, installation_id, principal.user_id)
    return {"success": True, "installation": installation_out(inst)}
