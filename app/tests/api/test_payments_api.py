import pytest

from app.models.quote import Quote
from app.services.mpesa_gateway import GatewayError
from app.tests.fakes import stk_callback

QUOTE_BODY = {
    "windowCount": 1,
    "measurements": [{"width": 1.5, "height": 1.4}],
    "material": "polyester",
    "type": "magnetic",
    "location": "Westlands",
    "warranty": "basic",
}


@pytest.fixture
def customer(make_user):
    return make_user(email="payer@example.com")


@pytest.fixture
def quote_id(client, customer, auth_headers):
    r = client.post("/api/quotes", json=QUOTE_BODY, headers=auth_headers(customer))
    assert r.status_code == 201, r.text
    return r.json()["quote"]["id"]


def _stored(session_factory, quote_id):
    import uuid

    with session_factory() as s:
        return s.get(Quote, uuid.UUID(quote_id))


def _pay(client, headers, quote_id, **overrides):
    body = {"phone": "+254712345678", "amount": 3150, "quoteId": quote_id}
    body.update(overrides)
    return client.post("/api/mpesa-pay", json=body, headers=headers)


def test_pay_sends_stk_push(client, customer, auth_headers, quote_id, gateway, session_factory):
    r = _pay(client, auth_headers(customer), quote_id)
    assert r.status_code == 200, r.text
    assert r.json() == {
        "success": True,
        "message": "M-Pesa payment request sent",
        "transactionId": "ws_CO_0001",
    }

    _, charge = gateway.charges[0]
    assert charge.account_reference == f"QUOTE-{quote_id}"
    assert charge.phone == "254712345678"

    stored = _stored(session_factory, quote_id)
    assert stored.payment_status == "pending"
    assert stored.checkout_request_id == "ws_CO_0001"


def test_pay_for_other_users_quote(client, make_user, auth_headers, quote_id, gateway):
    intruder = make_user(email="intruder@example.com")
    r = _pay(client, auth_headers(intruder), quote_id)
    assert r.status_code == 404
    assert gateway.charges == []


@pytest.mark.parametrize(
    "override",
    [{"phone": "0712345678"}, {"phone": "+25471234567"}, {"amount": 0}, {"amount": -5}],
)
def test_pay_rejects_bad_input(client, customer, auth_headers, quote_id, gateway, override):
    r = _pay(client, auth_headers(customer), quote_id, **override)
    assert r.status_code == 400
    assert r.json()["success"] is False
    assert gateway.charges == []


def test_gateway_failure_leaves_quote_untouched(client, customer, auth_headers, quote_id, gateway, session_factory):
    gateway.submit_error = GatewayError("503 from Daraja")

    r = _pay(client, auth_headers(customer), quote_id)
    assert r.status_code == 500
    assert r.json() == {
        "success": False,
        "kind": "payment_initiation_error",
        "message": "Failed to initiate M-Pesa payment",
    }
    assert _stored(session_factory, quote_id).checkout_request_id is None


def test_pay_requires_auth(client, quote_id):
    r = client.post("/api/mpesa-pay", json={"phone": "254712345678", "amount": 10, "quoteId": quote_id})
    assert r.status_code in (401, 403)


def test_full_payment_flow(client, customer, auth_headers, quote_id, session_factory, sms):
    _pay(client, auth_headers(customer), quote_id)

    cb = stk_callback(checkout_request_id="ws_CO_0001", account_reference=f"QUOTE-{quote_id}")
    r = client.post("/api/mpesa-callback", json=cb)
    assert r.status_code == 200
    assert r.json() == {"success": True}

    stored = _stored(session_factory, quote_id)
    assert stored.payment_status == "completed"
    assert stored.payment_details["transactionId"] == "ws_CO_0001"
    assert stored.payment_details["receiptNumber"] == "NLJ7RT61SV"
    assert any("received" in text for _, text in sms.sent)

    # paid quotes cannot be charged again
    again = _pay(client, auth_headers(customer), quote_id)
    assert again.status_code == 409


def test_cancelled_payment_marks_failed_then_retry(client, customer, auth_headers, quote_id, session_factory, gateway):
    _pay(client, auth_headers(customer), quote_id)
    client.post(
        "/api/mpesa-callback",
        json=stk_callback(result_code=1032, checkout_request_id="ws_CO_0001"),
    )
    assert _stored(session_factory, quote_id).payment_status == "failed"

    retry = _pay(client, auth_headers(customer), quote_id)
    assert retry.status_code == 200
    assert retry.json()["transactionId"] == "ws_CO_0002"
    stored = _stored(session_factory, quote_id)
    assert stored.payment_status == "pending"
    assert stored.checkout_request_id == "ws_CO_0002"


@pytest.mark.parametrize(
    "body",
    [
        {},
        {"Body": {}},
        {"Body": {"stkCallback": {"ResultCode": 0}}},
        [1, 2, 3],
        "plain text",
        stk_callback(account_reference="QUOTE-00000000-0000-0000-0000-000000000000"),
    ],
)
def test_callback_is_always_acknowledged(client, body):
    r = client.post("/api/mpesa-callback", json=body)
    assert r.status_code == 200
    assert r.json() == {"success": True}


def test_callback_is_not_rate_limited(client):
    for _ in range(5):
        assert client.post("/api/mpesa-callback", json={}).status_code == 200
    assert "x-request-id" in {k.lower() for k in client.get("/api/health").headers}
