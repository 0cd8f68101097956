# app/services/auth_service.py
from __future__ import annotations

import logging
import uuid
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.core.errors import Conflict, NotFound
from app.core.security import hash_password, verify_password
from app.models.enums import UserRole
from app.models.user import User
from app.policies.rbac import Principal

logger = logging.getLogger(__name__)


def _normalize_email(email: str) -> str:
    return email.strip().lower()


def principal_for(user: User) -> Principal:
    return Principal(
        user_id=user.id,
        role=UserRole(user.role),
        name=user.name,
        phone=user.phone,
    )


def get_user(db: Session, user_id: uuid.UUID) -> User:
    user = db.get(User, user_id)
    if user is None:
        raise NotFound("User not found")
    return user


def register(
    db: Session,
    *,
    name: str,
    email: str,
    password: str,
    phone: Optional[str] = None,
    role: UserRole = UserRole.CUSTOMER,
) -> User:
    email_norm = _normalize_email(email)
    existing = db.execute(select(User).where(User.email == email_norm)).scalar_one_or_none()
    if existing:
        raise Conflict("An account with this email already exists")

    user = User(
        name=name.strip(),
        email=email_norm,
        password_hash=hash_password(password),
        role=role.value,
        phone=phone,
    )
    db.add(user)
    try:
        db.commit()
    except IntegrityError:
        # concurrent registration with the same email
        db.rollback()
        raise Conflict("An account with this email already exists")
    db.refresh(user)

    logger.info("user registered", extra={"user_id": str(user.id)})
    return user


def authenticate(db: Session, email: str, password: str) -> Principal | None:
    user = db.execute(
        select(User).where(User.email == _normalize_email(email))
    ).scalar_one_or_none()

    if not user:
        return None

    if not verify_password(password, user.password_hash):
        return None

    return principal_for(user)
