from __future__ import annotations

from typing import List, Optional, Tuple

from app.core.errors import NotificationError
from app.services.mpesa_gateway import (
    ChargeRequest,
    ChargeResponse,
    GatewayAuthError,
    GatewayError,
)


class FakeGateway:
    """
    In-memory stand-in for the Daraja client.

    auth_failures: number of submit_charge calls that answer 401 first
    submit_error: raised from every submit_charge once auth passes
    """

    def __init__(self):
        self.tokens_issued = 0
        self.charges: List[Tuple[str, ChargeRequest]] = []
        self.auth_failures = 0
        self.submit_error: Optional[Exception] = None
        self.token_error: Optional[Exception] = None

    def get_access_token(self) -> str:
        if self.token_error is not None:
            raise self.token_error
        self.tokens_issued += 1
        return f"token-{self.tokens_issued}"

    def submit_charge(self, token: str, charge: ChargeRequest) -> ChargeResponse:
        if self.auth_failures:
            self.auth_failures -= 1
            raise GatewayAuthError("expired")
        if self.submit_error is not None:
            raise self.submit_error
        self.charges.append((token, charge))
        return ChargeResponse(
            checkout_request_id=f"ws_CO_{len(self.charges):04d}",
            merchant_request_id="29115-34620561-1",
            customer_message="Success. Request accepted for processing",
        )


class FakeSms:
    def __init__(self, fail: bool = False):
        self.fail = fail
        self.sent: List[Tuple[str, str]] = []

    def send(self, to: str, message: str) -> None:
        if self.fail:
            raise NotificationError("gateway down")
        self.sent.append((to, message))


def stk_callback(
    *,
    result_code: int = 0,
    checkout_request_id: str = "ws_CO_0001",
    account_reference: Optional[str] = None,
    amount=3150,
    phone="+254712345678",
    receipt: Optional[str] = "NLJ7RT61SV",
) -> dict:
    cb = {
        "MerchantRequestID": "29115-34620561-1",
        "CheckoutRequestID": checkout_request_id,
        "ResultCode": result_code,
        "ResultDesc": "The service request is processed successfully."
        if result_code == 0
        else "Request cancelled by user",
    }
    if result_code == 0:
        items = [
            {"Name": "Amount", "Value": amount},
            {"Name": "PhoneNumber", "Value": phone},
        ]
        if receipt:
            items.append({"Name": "MpesaReceiptNumber", "Value": receipt})
        if account_reference is not None:
            items.append({"Name": "AccountReference", "Value": account_reference})
        cb["CallbackMetadata"] = {"Item": items}
    elif account_reference is not None:
        cb["CallbackMetadata"] = {"Item": [{"Name": "AccountReference", "Value": account_reference}]}
    return {"Body": {"stkCallback": cb}}


__all__ = ["FakeGateway", "FakeSms", "GatewayError", "stk_callback"]
