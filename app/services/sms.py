from __future__ import annotations

import logging
from typing import Optional, Protocol

import requests

from app.core.config import Settings
from app.core.errors import NotificationError

logger = logging.getLogger(__name__)


def to_msisdn(phone: str) -> str:
    """
    "0712345678", "254712345678", "+254712345678" -> "+254712345678"
    Only the trailing 9 digits are kept.
    """
    digits = "".join(ch for ch in (phone or "") if ch.isdigit())
    if len(digits) < 9:
        raise NotificationError(f"Cannot build MSISDN from {phone!r}.")
    return f"+254{digits[-9:]}"


class SmsClient(Protocol):
    def send(self, to: str, message: str) -> None:
        ...


class AfricasTalkingSms:
    """
    Thin wrapper over the Africa's Talking messaging REST endpoint.
    Raises NotificationError on any transport or gateway failure.
    """

    def __init__(
        self,
        *,
        username: str,
        api_key: str,
        base_url: str,
        timeout: float = 5.0,
        session: Optional[requests.Session] = None,
    ):
        self.username = username
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"Accept": "application/json", "apiKey": api_key})

    @classmethod
    def from_settings(cls, settings: Settings) -> "AfricasTalkingSms":
        return cls(
            username=settings.at_username,
            api_key=settings.at_api_key,
            base_url=settings.at_base_url,
            timeout=settings.at_timeout_seconds,
        )

    def send(self, to: str, message: str) -> None:
        if not self.api_key:
            raise NotificationError("SMS gateway is not configured.")
        try:
            response = self.session.post(
                f"{self.base_url}/version1/messaging",
                data={"username": self.username, "to": to, "message": message},
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as e:
            raise NotificationError(f"SMS delivery failed: {e}") from e

        recipients = (response.json().get("SMSMessageData") or {}).get("Recipients") or []
        if recipients and recipients[0].get("status") != "Success":
            raise NotificationError(
                f"SMS rejected for {to}: {recipients[0].get('status')}"
            )


class Notifier:
    """
    Best-effort customer notifications.

    notify() never raises: a flaky SMS channel must not fail the
    quote or payment operation that triggered it.
    """

    def __init__(self, client: SmsClient, brand: str = "PolyMesh Kenya"):
        self.client = client
        self.brand = brand

    def notify(self, phone: Optional[str], message: str) -> bool:
        if not phone:
            logger.info("sms skipped: no phone on record")
            return False
        try:
            to = to_msisdn(phone)
            self.client.send(to, f"{self.brand}: {message}")
        except NotificationError as e:
            logger.warning("sms sending failed", extra={"error": e.message})
            return False
        except Exception:
            # Unexpected client bug; still not allowed to escape.
            logger.exception("sms client raised unexpectedly")
            return False
        return True

    def send(self, phone: str, message: str) -> None:
        """
        Strict variant for the admin SMS endpoint, where delivery
        failure is the result the caller asked about.
        """
        self.client.send(to_msisdn(phone), f"{self.brand}: {message}")
