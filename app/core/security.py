# app/core/security.py
from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import jwt
from passlib.context import CryptContext

from app.core.config import get_settings
from app.policies.rbac import Principal

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=12)


def hash_password(raw: str) -> str:
    return pwd_context.hash(raw)


def verify_password(raw: str, hashed: str) -> bool:
    return pwd_context.verify(raw, hashed)


def principal_claims(principal: Principal) -> Dict[str, Any]:
    """
    Everything the API needs about the caller rides in the token, so
    routes never reload the user row. phone feeds the SMS confirmations.
    """
    return {
        "user_id": str(principal.user_id),
        "role": principal.role.value,
        "name": principal.name,
        "phone": principal.phone,
    }


def create_access_token(principal: Principal, expires_minutes: Optional[int] = None) -> str:
    settings = get_settings()
    now = datetime.now(timezone.utc)
    lifetime = timedelta(minutes=expires_minutes or settings.jwt_access_token_minutes)
    payload = {
        "sub": str(principal.user_id),
        "iat": int(now.timestamp()),
        "exp": int((now + lifetime).timestamp()),
        **principal_claims(principal),
    }
    return jwt.encode(payload, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> Dict[str, Any]:
    # raises jose.JWTError (incl. ExpiredSignatureError); auth_deps maps it to 403
    settings = get_settings()
    return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
