from __future__ import annotations

import base64
import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from http import HTTPStatus
from typing import Any, Dict, Optional, Protocol

import requests
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_none

from app.core.config import Settings

logger = logging.getLogger(__name__)

# Daraja timestamps are East Africa Time
EAT = timezone(timedelta(hours=3))

ACCOUNT_REFERENCE_PREFIX = "QUOTE"


class GatewayError(Exception):
    pass


class GatewayAuthError(GatewayError):
    """401 from the gateway: credentials rejected or token expired."""


def account_reference(quote_id: Any) -> str:
    return f"{ACCOUNT_REFERENCE_PREFIX}-{quote_id}"


def stk_timestamp(now: Optional[datetime] = None) -> str:
    now = now or datetime.now(EAT)
    return now.astimezone(EAT).strftime("%Y%m%d%H%M%S")


def stk_password(shortcode: str, passkey: str, timestamp: str) -> str:
    return base64.b64encode(f"{shortcode}{passkey}{timestamp}".encode("utf-8")).decode("ascii")


@dataclass(frozen=True)
class ChargeRequest:
    phone: str
    amount: int
    account_reference: str
    description: str


@dataclass(frozen=True)
class ChargeResponse:
    checkout_request_id: str
    merchant_request_id: Optional[str] = None
    customer_message: Optional[str] = None


class PaymentGateway(Protocol):
    def get_access_token(self) -> str:
        ...

    def submit_charge(self, token: str, charge: ChargeRequest) -> ChargeResponse:
        ...


class DarajaGateway:
    """
    Safaricom Daraja client: OAuth client-credentials token + STK push.

    Constructed once per process (see app.main.create_app) and handed to
    the payment service through a dependency. Tokens are not cached.
    """

    def __init__(
        self,
        *,
        base_url: str,
        consumer_key: str,
        consumer_secret: str,
        shortcode: str,
        passkey: str,
        callback_url: str,
        timeout: float = 5.0,
        session: Optional[requests.Session] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.consumer_key = consumer_key
        self.consumer_secret = consumer_secret
        self.shortcode = shortcode
        self.passkey = passkey
        self.callback_url = callback_url
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({"accept": "application/json"})

    @classmethod
    def from_settings(cls, settings: Settings) -> "DarajaGateway":
        return cls(
            base_url=settings.mpesa_base_url,
            consumer_key=settings.mpesa_consumer_key,
            consumer_secret=settings.mpesa_consumer_secret,
            shortcode=settings.mpesa_shortcode,
            passkey=settings.mpesa_passkey,
            callback_url=settings.mpesa_callback_url,
            timeout=settings.mpesa_timeout_seconds,
        )

    @retry(
        stop=stop_after_attempt(2),
        wait=wait_none(),
        retry=retry_if_exception_type(GatewayAuthError),
        reraise=True,
    )
    def get_access_token(self) -> str:
        try:
            response = self.session.get(
                f"{self.base_url}/oauth/v1/generate",
                params={"grant_type": "client_credentials"},
                auth=(self.consumer_key, self.consumer_secret),
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise GatewayError(f"Token request failed: {e}") from e

        if response.status_code == HTTPStatus.UNAUTHORIZED.value:
            logger.warning("mpesa token request unauthorized")
            raise GatewayAuthError("Gateway rejected consumer credentials.")
        if response.status_code != HTTPStatus.OK.value:
            raise GatewayError(f"Token request returned {response.status_code}: {response.text}")

        token = response.json().get("access_token")
        if not token:
            raise GatewayError("Token response missing access_token.")
        return token

    def build_stk_payload(self, charge: ChargeRequest, timestamp: Optional[str] = None) -> Dict[str, Any]:
        ts = timestamp or stk_timestamp()
        return {
            "BusinessShortCode": self.shortcode,
            "Password": stk_password(self.shortcode, self.passkey, ts),
            "Timestamp": ts,
            "TransactionType": "CustomerPayBillOnline",
            "Amount": charge.amount,
            "PartyA": charge.phone,
            "PartyB": self.shortcode,
            "PhoneNumber": charge.phone,
            "CallBackURL": self.callback_url,
            "AccountReference": charge.account_reference,
            "TransactionDesc": charge.description,
        }

    def submit_charge(self, token: str, charge: ChargeRequest) -> ChargeResponse:
        # Never retried here: a repeated STK push is a repeated charge prompt.
        try:
            response = self.session.post(
                f"{self.base_url}/mpesa/stkpush/v1/processrequest",
                json=self.build_stk_payload(charge),
                headers={"Authorization": f"Bearer {token}"},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise GatewayError(f"STK push failed: {e}") from e

        if response.status_code == HTTPStatus.UNAUTHORIZED.value:
            raise GatewayAuthError("Access token rejected by gateway.")
        if response.status_code != HTTPStatus.OK.value:
            raise GatewayError(f"STK push returned {response.status_code}: {response.text}")

        data = response.json()
        if str(data.get("ResponseCode")) != "0" or not data.get("CheckoutRequestID"):
            raise GatewayError(
                f"STK push not accepted: {data.get('ResponseDescription') or data.get('errorMessage')}"
            )

        return ChargeResponse(
            checkout_request_id=data["CheckoutRequestID"],
            merchant_request_id=data.get("MerchantRequestID"),
            customer_message=data.get("CustomerMessage"),
        )
