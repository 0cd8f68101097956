#app/core/auth_deps.py
from __future__ import annotations

import uuid
from typing import Optional

from fastapi import Depends, HTTPException, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError

from app.core.security import decode_token
from app.models.enums import UserRole
from app.policies.rbac import Principal

bearer = HTTPBearer(auto_error=True)
optional_bearer = HTTPBearer(auto_error=False)


def _principal_from_token(token: str) -> Principal:
    try:
        payload = decode_token(token)
    except JWTError:
        raise HTTPException(status_code=403, detail="Invalid or expired token")

    user_id = payload.get("user_id") or payload.get("sub")
    role = payload.get("role")
    name = payload.get("name") or "Unknown"

    if not user_id or not role:
        raise HTTPException(status_code=401, detail="Token missing required claims.")

    try:
        user_uuid = uuid.UUID(str(user_id))
        role_enum = UserRole(role)
    except ValueError:
        raise HTTPException(status_code=401, detail="Invalid claims in token.")

    return Principal(
        user_id=user_uuid,
        role=role_enum,
        name=str(name),
        phone=payload.get("phone"),
    )


def get_current_principal(
    request: Request,
    creds: HTTPAuthorizationCredentials = Depends(bearer),
) -> Principal:
    """
    Canonical authentication dependency.

    Guarantees:
    - JWT is valid and unexpired
    - user_id and role are present
    - role is a valid UserRole
    """
    principal = _principal_from_token(creds.credentials)

    # Make principal available to downstream middleware / handlers
    request.state.principal = principal
    return principal


def get_optional_principal(
    request: Request,
    creds: Optional[HTTPAuthorizationCredentials] = Depends(optional_bearer),
) -> Optional[Principal]:
    """
    Same as get_current_principal but anonymous callers get None.
    A present-but-invalid token is still rejected.
    """
    if creds is None:
        return None
    principal = _principal_from_token(creds.credentials)
    request.state.principal = principal
    return principal


def require_admin(principal: Principal = Depends(get_current_principal)) -> Principal:
    if principal.role != UserRole.ADMIN:
        raise HTTPException(status_code=403, detail="Admin access required")
    return principal
