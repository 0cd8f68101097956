# app/core/errors.py
from __future__ import annotations

from typing import Any, Dict, Optional


class ServiceError(Exception):
    """
    Base class for failures raised by the service layer.

    Routers never build HTTP errors from these by hand; the exception
    handlers registered in app.main render them as the uniform
    {"success": false, "kind": ..., "message": ...} envelope.
    """

    kind: str = "error"
    status_code: int = 500

    def __init__(self, message: str, *, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_envelope(self) -> Dict[str, Any]:
        body: Dict[str, Any] = {
            "success": False,
            "kind": self.kind,
            "message": self.message,
        }
        if self.details:
            body["details"] = self.details
        return body


class ValidationError(ServiceError):
    kind = "validation_error"
    status_code = 400


class NotFound(ServiceError):
    kind = "not_found"
    status_code = 404


class Conflict(ServiceError):
    kind = "conflict"
    status_code = 409


class PaymentInitiationError(ServiceError):
    kind = "payment_initiation_error"
    status_code = 500


class NotificationError(ServiceError):
    # never surfaced to callers; see app.services.sms
    kind = "notification_error"
    status_code = 502
