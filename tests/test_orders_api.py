from conftest import make_admin, order_payload, register


def _submit(client, **overrides):
    return client.post("/api/orders", json=order_payload(**overrides))


# ORD-001: customer places an order and sees it in their list
def test_submit_and_list(client, customer):
    r = _submit(client)
    assert r.status_code == 201, r.json
    order_id = r.json["id"]
    assert r.json["confirmation_url"] == f"/confirmation/{order_id}"

    r = client.get("/api/orders")
    assert r.status_code == 200
    items = r.json["items"]
    assert [o["id"] for o in items] == [order_id]
    assert items[0]["status"] == "pending"
    assert items[0]["payment_contact_status"] == "notContacted"
    assert items[0]["owner"] == customer


def test_order_detail_includes_id_info(client, customer):
    order_id = _submit(client).json["id"]
    r = client.get(f"/api/orders/{order_id}")
    assert r.status_code == 200
    assert r.json["id_info"]["name"] == "Jane Doe"
    assert r.json["id_info"]["photo_url"]


def test_submit_requires_login(client):
    r = _submit(client)
    assert r.status_code == 401
    assert r.json["error"]["code"] == "not_authenticated"


# ORD-002: missing fields are reported per field
def test_submit_validation_errors(client, customer):
    r = _submit(client, customerName="", zip="12", photo=None, signature=None)
    assert r.status_code == 400
    fields = r.json["error"]["details"]["fields"]
    assert fields["customerName"] == "Full name is required"
    assert fields["zip"] == "Please enter a valid ZIP code"
    assert fields["photo"] == "Photo is required"
    assert fields["signature"] == "Signature is required"
    assert client.get("/api/orders").json["items"] == []


def test_submit_rejects_non_image_photo(client, customer):
    r = _submit(client, photo="data:text/plain;base64,aGVsbG8=")
    assert r.status_code == 400
    assert "photo" in r.json["error"]["details"]["fields"]


def test_validate_field(client):
    r = client.post("/api/orders/validate-field", json={"field": "email", "value": "nope"})
    assert r.status_code == 200
    assert r.json == {"field": "email", "valid": False, "error": "Please enter a valid email address"}

    r = client.post("/api/orders/validate-field", json={"field": "email", "value": "a@b.co"})
    assert r.json["valid"] is True and r.json["error"] is None


# ORD-003: generated ID values replace the typed ones
def test_generate_name_and_address(client, customer):
    r = _submit(client, idName="", idStreet="", idCity="", idState="", idZip="", generateName=True, generateIdAddress=True)
    assert r.status_code == 201, r.json
    detail = client.get(f"/api/orders/{r.json['id']}").json["id_info"]
    assert detail["name"].strip()
    assert len(detail["address"]["zip"]) == 5
    assert detail["address"]["state"]


# ORD-004: orders are private to their owner
def test_other_user_cannot_read_order(app, client, customer, other_client):
    order_id = _submit(client).json["id"]
    register(other_client, email="nosy@example.com")
    r = other_client.get(f"/api/orders/{order_id}")
    assert r.status_code == 403
    assert r.json["error"]["code"] == "not_authorized"
    assert other_client.get("/api/orders").json["items"] == []


def test_missing_order_is_404(client, customer):
    assert client.get("/api/orders/999").status_code == 404
    assert client.get("/api/orders/abc").status_code == 404


def test_order_status_endpoint(client, customer):
    order_id = _submit(client).json["id"]
    r = client.get(f"/api/orders/{order_id}/status")
    assert r.status_code == 200
    assert r.json == {"id": order_id, "status": "pending"}


# ORD-005: banned users cannot order
def test_banned_user_cannot_submit(app, client, customer, other_client, admin):
    r = other_client.post("/api/admin/bans", json={"principal": customer})
    assert r.status_code == 201
    r = _submit(client)
    assert r.status_code == 403
    assert r.json["error"]["code"] == "banned"


def test_prices(client):
    r = client.get("/api/prices")
    assert r.status_code == 200
    assert r.json["price_per_id_cents"] == 10000
    assert r.json["copies_per_id"] == 2
    assert [t["quantity"] for t in r.json["tiers"]] == [1, 2, 3, 4, 5]


def test_me_reports_profile_and_role(client, customer):
    r = client.get("/api/users/me")
    assert r.status_code == 200
    assert r.json["principal"] == customer
    assert r.json["role"] == "user"
    assert r.json["is_admin"] is False
    assert r.json["profile"]["name"] == "Jane Doe"


def test_duplicate_registration(client):
    register(client, email="dupe@example.com")
    r = client.post("/api/users", json={"email": "dupe@example.com", "password": "x"})
    assert r.status_code == 409


def test_login_logout(client):
    register(client, email="back@example.com", password="secret-1")
    client.post("/api/auth/logout")
    assert client.get("/api/users/me").status_code == 401
    assert client.post("/api/auth/login", json={"email": "back@example.com", "password": "wrong"}).status_code == 401
    r = client.post("/api/auth/login", json={"email": "back@example.com", "password": "secret-1"})
    assert r.status_code == 200
    assert client.get("/api/users/me").status_code == 200


def test_banned_user_cannot_read_orders(client, customer, other_client, admin):
    order_id = _submit(client).json["id"]
    other_client.post("/api/admin/bans", json={"principal": customer})

    r = client.get("/api/orders")
    assert r.status_code == 403
    assert r.json["error"]["code"] == "banned"
    r = client.get(f"/api/orders/{order_id}")
    assert r.status_code == 403
    assert r.json["error"]["code"] == "banned"
