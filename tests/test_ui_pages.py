import io

from falconids.app.backend.interface import BackendTrap
from falconids.app.backend.local import LocalBackend

from conftest import PNG_BYTES, PNG_DATA_URL, order_payload, register


def _order_form(**overrides):
    form = {k: v for k, v in order_payload().items() if k not in ("photo", "signature")}
    form["signature"] = PNG_DATA_URL
    form["photo"] = (io.BytesIO(PNG_BYTES), "photo.png", "image/png")
    form.update(overrides)
    return form


def test_home_and_prices(client):
    r = client.get("/")
    assert r.status_code == 200
    assert b"Custom ID cards" in r.data

    r = client.get("/prices")
    assert r.status_code == 200
    assert r.data.count(b"Most popular") == 1
    assert b"$500" in r.data


# PAGE-001: unknown locations fall back to the home page
def test_unknown_location_renders_home(client):
    r = client.get("/no/such/page")
    assert r.status_code == 200
    assert b"Custom ID cards" in r.data


def test_go_follows_hash_links(client):
    r = client.get("/go", query_string={"to": "#/prices"})
    assert r.status_code == 302
    assert r.headers["Location"].endswith("/prices")

    r = client.get("/go", query_string={"to": "#/admin/orders/42"})
    assert r.headers["Location"].endswith("/admin/orders/42")


# GATE-001: order page needs a login and a profile
def test_order_page_requires_login(client):
    r = client.get("/order")
    assert r.status_code == 401
    assert b"Login Required" in r.data


def test_order_page_requires_profile(client):
    register(client)
    r = client.get("/order")
    assert r.status_code == 302
    assert r.headers["Location"].endswith("/profile")


def test_order_page_renders_for_customer(client, customer):
    r = client.get("/order")
    assert r.status_code == 200
    assert b'name="customerName"' in r.data


# ORD-UI-001: form submission with an uploaded photo
def test_submit_order_form(client, customer):
    r = client.post("/order", data=_order_form(), content_type="multipart/form-data")
    assert r.status_code == 302
    assert r.headers["Location"].endswith("/confirmation/1")

    r = client.get("/confirmation/1")
    assert r.status_code == 200
    assert b"Thank you for your order!" in r.data

    r = client.get("/my-orders/1")
    assert r.status_code == 200


def test_submit_empty_order_form(client, customer):
    r = client.post("/order", data={}, content_type="multipart/form-data")
    assert r.status_code == 400
    assert b"Full name is required" in r.data
    assert b"Photo is required" in r.data


def test_submit_rejects_non_image_upload(client, customer):
    form = _order_form(photo=(io.BytesIO(b"plain text"), "notes.txt", "text/plain"))
    r = client.post("/order", data=form, content_type="multipart/form-data")
    assert r.status_code == 400
    assert b"Please upload a valid image file" in r.data


# BLOB-001: uploads are visible to their owner only
def test_blob_access(client, customer, other_client):
    client.post("/order", data=_order_form(), content_type="multipart/form-data")
    r = client.get("/blobs/1")
    assert r.status_code == 200
    assert r.mimetype == "image/png"
    assert r.data == PNG_BYTES

    register(other_client, email="other@example.com")
    assert other_client.get("/blobs/1").status_code == 403
    assert client.get("/blobs/999").status_code == 404


# GATE-002: admin pages
def test_admin_page_denied_for_customer(client, customer):
    r = client.get("/admin")
    assert r.status_code == 403
    assert b"Access Denied" in r.data


def test_admin_page_for_admin(client, customer, other_client, admin):
    client.post("/order", data=_order_form(), content_type="multipart/form-data")
    r = other_client.get("/admin")
    assert r.status_code == 200
    assert b"Admin Dashboard" in r.data
    assert b"Jane Doe" in r.data

    assert other_client.get("/admin/orders/1").status_code == 200
    assert other_client.get("/admin/orders/999").status_code == 404
    assert other_client.get("/admin/users").status_code == 200


def test_admin_check_failure_offers_retry(client, customer, monkeypatch):
    def broken(self):
        raise BackendTrap("replica unavailable")

    monkeypatch.setattr(LocalBackend, "is_caller_admin", broken)
    r = client.get("/admin")
    assert r.status_code == 503
    assert b"Unable to verify admin access" in r.data
    assert b"Retry" in r.data


def test_admin_status_form(client, customer, other_client, admin):
    client.post("/order", data=_order_form(), content_type="multipart/form-data")
    r = other_client.post("/admin/orders/1/status", data={"status": "shipped"})
    assert r.status_code == 302
    assert r.headers["Location"].endswith("/admin/orders/1")
    assert client.get("/api/orders/1/status").json["status"] == "shipped"


def test_admin_ban_form_shows_validation_error(other_client, admin):
    r = other_client.post("/admin/users/ban", data={"principal": "bad"}, follow_redirects=True)
    assert r.status_code == 200
    assert b"Invalid principal ID format" in r.data


# GATE-003: banned users see the restricted screen
def test_banned_user_profile_page(client, customer, other_client, admin):
    other_client.post("/admin/users/ban", data={"principal": customer})
    r = client.get("/profile")
    assert r.status_code == 403
    assert b"Access Restricted" in r.data


def test_profile_form(client):
    register(client)
    r = client.post("/profile", data={"name": "", "email": "", "phone": ""})
    assert r.status_code == 400
    assert b"All fields are required" in r.data

    r = client.post("/profile", data={"name": "Jo Doe", "email": "jo@example.com", "phone": "5551112222"})
    assert r.status_code == 302
    assert client.get("/order").status_code == 200


def test_login_and_register_forms(client):
    r = client.post("/register", data={"email": "form@example.com", "password": "pw-12345"})
    assert r.status_code == 302
    assert r.headers["Location"].endswith("/profile")

    client.post("/logout")
    r = client.post("/login", data={"email": "form@example.com", "password": "bad"})
    assert r.headers["Location"].endswith("/login")

    r = client.post("/login", data={"email": "form@example.com", "password": "pw-12345", "next": "/my-orders"})
    assert r.headers["Location"].endswith("/my-orders")


def test_banned_user_my_orders_page(client, customer, other_client, admin):
    other_client.post("/admin/users/ban", data={"principal": customer})
    r = client.get("/my-orders")
    assert r.status_code == 403
    assert b"Access Restricted" in r.data


# GATE-005: panel login redirect keeps the requested page
def test_panel_gate_redirect_encodes_next(app, other_client, admin):
    app.config["ADMIN_GATE"] = "panel"
    r = other_client.get("/admin/orders/1")
    assert r.status_code == 302
    assert r.headers["Location"].endswith("/admin/login?next=%2Fadmin%2Forders%2F1")


# INVITE-001: invitations on the profile page
def test_invitation_card_accept(client, customer, other_client, admin):
    assert b"Admin Access Invitation" not in client.get("/profile").data

    r = other_client.post("/admin/users/invite", data={"principal": customer}, follow_redirects=True)
    assert b"Admin invitation sent" in r.data
    assert b"Admin Access Invitation" in client.get("/profile").data

    r = client.post("/profile", data={"action": "accept-invitation"}, follow_redirects=True)
    assert b"Admin access granted! You can now access the Admin Panel." in r.data
    assert b"Admin Access Invitation" not in r.data
    assert client.get("/admin").status_code == 200


def test_invitation_card_decline(client, customer, other_client, admin):
    other_client.post("/admin/users/invite", data={"principal": customer})
    r = client.post("/profile", data={"action": "decline-invitation"}, follow_redirects=True)
    assert b"Admin invitation declined" in r.data
    assert b"Admin Access Invitation" not in r.data
    assert client.get("/admin").status_code == 403


def test_invite_form_validation(other_client, admin):
    r = other_client.post("/admin/users/invite", data={"principal": ""}, follow_redirects=True)
    assert b"Please enter a principal ID" in r.data
