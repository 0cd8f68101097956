import pytest

QUOTE_BODY = {
    "windowCount": 2,
    "measurements": [{"width": 1, "height": 1}, {"width": 2, "height": 1}],
    "material": "fiberglass",
    "type": "sliding",
    "location": "Nairobi",
    "warranty": "standard",
}


@pytest.fixture
def customer(make_user):
    return make_user(email="jane@example.com", phone="+254712345678")


def test_register_then_login(client):
    r = client.post(
        "/api/users/register",
        json={"name": "Wanjiru", "email": "Wanjiru@Example.com", "password": "secret12", "phone": "254711000111"},
    )
    assert r.status_code == 201, r.text

    dup = client.post(
        "/api/users/register",
        json={"name": "Other", "email": "wanjiru@example.com", "password": "secret12"},
    )
    assert dup.status_code == 409
    assert dup.json()["success"] is False

    login = client.post("/api/users/login", json={"email": "wanjiru@example.com", "password": "secret12"})
    assert login.status_code == 200, login.text
    token = login.json()["token"]

    me = client.get("/api/users/me", headers={"Authorization": f"Bearer {token}"})
    assert me.status_code == 200
    assert me.json()["user"]["email"] == "wanjiru@example.com"


def test_login_with_wrong_password(client, customer):
    r = client.post("/api/users/login", json={"email": "jane@example.com", "password": "nope"})
    assert r.status_code == 401
    assert r.json()["success"] is False


def test_create_quote_prices_and_persists(client, customer, auth_headers, sms):
    r = client.post("/api/quotes", json=QUOTE_BODY, headers=auth_headers(customer))
    assert r.status_code == 201, r.text

    body = r.json()
    assert body["success"] is True
    quote = body["quote"]
    assert quote["totalCost"] == 6300
    assert quote["estimatedInstallation"] == "3-5 working days"
    assert set(quote["breakdown"]) == {"material", "type", "location", "warranty"}
    assert quote["nextSteps"][-1] == "Installation in 3-5 working days"
    assert quote["validUntil"]

    # owner phone from the token gets the confirmation
    assert sms.sent and sms.sent[0][0] == "+254712345678"

    listing = client.get("/api/user/quotes", headers=auth_headers(customer)).json()
    assert listing["count"] == 1
    stored = listing["quotes"][0]
    assert stored["id"] == quote["id"]
    assert stored["totalArea"] == pytest.approx(3.0)
    assert stored["baseCost"] == pytest.approx(5400.0)
    assert stored["warrantyCost"] == pytest.approx(900.0)
    assert stored["paymentStatus"] == "pending"
    assert stored["status"] == "pending"


def test_quote_detail_is_owner_only(client, customer, make_user, auth_headers):
    created = client.post("/api/quotes", json=QUOTE_BODY, headers=auth_headers(customer)).json()
    qid = created["quote"]["id"]

    mine = client.get(f"/api/quotes/{qid}", headers=auth_headers(customer))
    assert mine.status_code == 200
    assert mine.json()["quote"]["material"] == "fiberglass"

    other = make_user(email="other@example.com")
    theirs = client.get(f"/api/quotes/{qid}", headers=auth_headers(other))
    assert theirs.status_code == 404
    assert theirs.json() == {"success": False, "kind": "not_found", "message": "Quote not found"}

    bogus = client.get("/api/quotes/not-a-uuid", headers=auth_headers(customer))
    assert bogus.status_code == 404


@pytest.mark.parametrize(
    "override",
    [
        {"material": "wood"},
        {"type": "rolling"},
        {"warranty": "lifetime"},
        {"windowCount": 0},
        {"measurements": []},
        {"measurements": [{"width": 0, "height": 1}]},
        {"measurements": [{"width": -1, "height": 1}]},
        {"location": "   "},
    ],
)
def test_invalid_quote_requests(client, customer, auth_headers, override):
    body = dict(QUOTE_BODY, **override)
    r = client.post("/api/quotes", json=body, headers=auth_headers(customer))
    assert r.status_code == 400
    payload = r.json()
    assert payload["success"] is False
    assert payload["errors"]

    assert client.get("/api/user/quotes", headers=auth_headers(customer)).json()["count"] == 0


def test_quotes_require_authentication(client):
    assert client.post("/api/quotes", json=QUOTE_BODY).status_code in (401, 403)
    assert client.get("/api/user/quotes").status_code in (401, 403)


def test_garbage_token_is_rejected(client):
    r = client.get("/api/user/quotes", headers={"Authorization": "Bearer not.a.jwt"})
    assert r.status_code == 403
    assert r.json()["success"] is False


def test_admin_sees_every_quote(client, customer, make_user, auth_headers):
    from app.models.enums import UserRole

    client.post("/api/quotes", json=QUOTE_BODY, headers=auth_headers(customer))
    admin = make_user(email="admin@example.com", role=UserRole.ADMIN)

    r = client.get("/api/admin/quotes", headers=auth_headers(admin))
    assert r.status_code == 200
    quotes = r.json()["quotes"]
    assert len(quotes) == 1
    assert quotes[0]["user"] == str(customer.id)

    forbidden = client.get("/api/admin/quotes", headers=auth_headers(customer))
    assert forbidden.status_code == 403
