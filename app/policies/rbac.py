#app/policies/rbac.py
from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Optional, Set

from app.models.enums import UserRole


@dataclass(frozen=True)
class Principal:
    user_id: uuid.UUID
    role: UserRole
    name: str
    phone: Optional[str] = None


# --- Core action constants ---
ACTION_REQUEST_QUOTE = "REQUEST_QUOTE"
ACTION_PAY_QUOTE = "PAY_QUOTE"
ACTION_PLACE_ORDER = "PLACE_ORDER"
ACTION_SUBMIT_REVIEW = "SUBMIT_REVIEW"
ACTION_MODERATE_REVIEWS = "MODERATE_REVIEWS"
ACTION_VIEW_ALL_QUOTES = "VIEW_ALL_QUOTES"
ACTION_SCHEDULE_INSTALLATION = "SCHEDULE_INSTALLATION"
ACTION_SEND_SMS = "SEND_SMS"

_CUSTOMER_ACTIONS = {
    ACTION_REQUEST_QUOTE,
    ACTION_PAY_QUOTE,
    ACTION_PLACE_ORDER,
    ACTION_SUBMIT_REVIEW,
}


def allowed_actions(role: UserRole) -> Set[str]:
    """
    Pure RBAC: which actions a role may attempt.
    Admins can do everything a customer can, plus back-office actions.
    """
    if role == UserRole.CUSTOMER:
        return set(_CUSTOMER_ACTIONS)

    if role == UserRole.ADMIN:
        return _CUSTOMER_ACTIONS | {
            ACTION_MODERATE_REVIEWS,
            ACTION_VIEW_ALL_QUOTES,
            ACTION_SCHEDULE_INSTALLATION,
            ACTION_SEND_SMS,
        }

    return set()


def require_action(principal: Principal, action: str) -> None:
    if action not in allowed_actions(principal.role):
        raise PermissionError(
            f"Role {principal.role.value} not permitted for action {action}."
        )
