import base64
from datetime import datetime, timezone
from http import HTTPStatus
from unittest.mock import Mock

import pytest
import requests

from app.services.mpesa_gateway import (
    ChargeRequest,
    DarajaGateway,
    GatewayAuthError,
    GatewayError,
    stk_password,
    stk_timestamp,
)


def _response(status: int, payload=None, text: str = "") -> Mock:
    resp = Mock()
    resp.status_code = status
    resp.json.return_value = payload or {}
    resp.text = text
    return resp


def _gateway(session: Mock) -> DarajaGateway:
    session.headers = {}
    return DarajaGateway(
        base_url="https://sandbox.example/",
        consumer_key="key",
        consumer_secret="secret",
        shortcode="174379",
        passkey="pk",
        callback_url="https://example.test/api/mpesa-callback",
        timeout=5.0,
        session=session,
    )


CHARGE = ChargeRequest(
    phone="254712345678", amount=3150, account_reference="QUOTE-abc123", description="Mosquito Mesh Payment"
)


def test_timestamp_and_password():
    ts = stk_timestamp(datetime(2026, 10, 17, 7, 5, 9, tzinfo=timezone.utc))
    assert ts == "20261017100509"
    assert base64.b64decode(stk_password("174379", "pk", ts)).decode() == f"174379pk{ts}"


def test_get_access_token_uses_basic_auth_and_timeout():
    session = Mock()
    gw = _gateway(session)
    session.get.return_value = _response(HTTPStatus.OK, {"access_token": "abc", "expires_in": "3599"})

    assert gw.get_access_token() == "abc"
    _, kwargs = session.get.call_args
    assert kwargs["auth"] == ("key", "secret")
    assert kwargs["timeout"] == 5.0
    assert kwargs["params"] == {"grant_type": "client_credentials"}


def test_token_401_is_retried_once_then_raised():
    session = Mock()
    gw = _gateway(session)
    session.get.return_value = _response(HTTPStatus.UNAUTHORIZED)

    with pytest.raises(GatewayAuthError):
        gw.get_access_token()
    assert session.get.call_count == 2


def test_token_network_error_is_gateway_error():
    session = Mock()
    gw = _gateway(session)
    session.get.side_effect = requests.Timeout("slow")

    with pytest.raises(GatewayError):
        gw.get_access_token()
    assert session.get.call_count == 1


def test_submit_charge_builds_stk_push():
    session = Mock()
    gw = _gateway(session)
    session.post.return_value = _response(
        HTTPStatus.OK,
        {
            "MerchantRequestID": "29115-34620561-1",
            "CheckoutRequestID": "ws_CO_191220191020363925",
            "ResponseCode": "0",
            "ResponseDescription": "Success. Request accepted for processing",
            "CustomerMessage": "Success. Request accepted for processing",
        },
    )

    out = gw.submit_charge("tok", CHARGE)

    assert out.checkout_request_id == "ws_CO_191220191020363925"
    args, kwargs = session.post.call_args
    assert args[0] == "https://sandbox.example/mpesa/stkpush/v1/processrequest"
    assert kwargs["headers"] == {"Authorization": "Bearer tok"}
    body = kwargs["json"]
    assert body["AccountReference"] == "QUOTE-abc123"
    assert body["TransactionType"] == "CustomerPayBillOnline"
    assert body["PartyA"] == body["PhoneNumber"] == "254712345678"
    assert body["PartyB"] == body["BusinessShortCode"] == "174379"
    assert body["Amount"] == 3150
    assert body["CallBackURL"] == "https://example.test/api/mpesa-callback"
    assert session.post.call_count == 1


@pytest.mark.parametrize(
    "response, error",
    [
        (_response(HTTPStatus.UNAUTHORIZED), GatewayAuthError),
        (_response(HTTPStatus.INTERNAL_SERVER_ERROR, text="boom"), GatewayError),
        (_response(HTTPStatus.OK, {"ResponseCode": "1", "ResponseDescription": "Rejected"}), GatewayError),
    ],
)
def test_submit_charge_failures_are_not_retried(response, error):
    session = Mock()
    gw = _gateway(session)
    session.post.return_value = response

    with pytest.raises(error):
        gw.submit_charge("tok", CHARGE)
    assert session.post.call_count == 1


def test_submit_charge_timeout():
    session = Mock()
    gw = _gateway(session)
    session.post.side_effect = requests.ConnectTimeout("5s")

    with pytest.raises(GatewayError):
        gw.submit_charge("tok", CHARGE)
