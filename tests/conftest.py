import base64

import pytest
from werkzeug.security import generate_password_hash

from falconids.app.config import Config
from falconids.app.extensions import db
from falconids.app.factory import create_app
from falconids.app.models import RoleAssignment

PANEL_PASSWORD = "panel-pass-123"

PNG_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16
PNG_DATA_URL = "data:image/png;base64," + base64.b64encode(PNG_BYTES).decode("ascii")


class TestConfig(Config):
    TESTING = True
    SECRET_KEY = "test-secret"
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    BOOTSTRAP_ADMIN_PRINCIPAL = ""
    ADMIN_PANEL_USERNAME = "admin"
    ADMIN_PANEL_PASSWORD_HASH = generate_password_hash(PANEL_PASSWORD)
    ADMIN_GATE = "role"
    ADMIN_PANEL_SESSION_STORE = "memory"
    ADMIN_CHECK_RETRY_DELAY = 0
    ADMIN_INVITATION_RETRY_BASE = 0
    ADMIN_INVITATION_RETRY_CAP = 0
    QUERY_STALE_SECONDS = 30.0


@pytest.fixture()
def app():
    app = create_app(TestConfig)
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


# Separate cookie jar, so a second user can be signed in at the same time.
@pytest.fixture()
def other_client(app):
    return app.test_client()


def register(client, email="user@example.com", password="Password123!"):
    """Create an account through the API; the client stays signed in. Returns the principal."""
    r = client.post("/api/users", json={"email": email, "password": password})
    assert r.status_code == 201, r.json
    return r.json["principal"]


def save_profile(client, name="Jane Doe", email="jane@example.com", phone="5551234567"):
    r = client.put("/api/profile", json={"name": name, "email": email, "phone": phone})
    assert r.status_code == 200, r.json
    return r


def make_admin(app, principal):
    with app.app_context():
        row = db.session.get(RoleAssignment, principal)
        if row is None:
            db.session.add(RoleAssignment(principal=principal, role="admin"))
        else:
            row.role = "admin"
        db.session.commit()


def order_payload(**overrides):
    data = {
        "customerName": "Jane Doe",
        "email": "jane@example.com",
        "phone": "5551234567",
        "street": "123 Main St",
        "city": "Springfield",
        "state": "IL",
        "zip": "62701",
        "idName": "Jane Doe",
        "idDateOfBirth": "1990-01-01",
        "idSex": "F",
        "idHeight": "5'6\"",
        "idWeight": "130",
        "idHairColor": "Brown",
        "idEyeColor": "Green",
        "idStreet": "123 Main St",
        "idCity": "Springfield",
        "idState": "IL",
        "idZip": "62701",
        "photo": PNG_DATA_URL,
        "signature": PNG_DATA_URL,
    }
    data.update(overrides)
    return data


@pytest.fixture()
def customer(client):
    """Signed-in customer with a profile. Returns the principal."""
    principal = register(client)
    save_profile(client)
    return principal


@pytest.fixture()
def admin(app, other_client):
    """`other_client` signed in as an admin. Returns the principal."""
    principal = register(other_client, email="admin@example.com")
    make_admin(app, principal)
    return principal
