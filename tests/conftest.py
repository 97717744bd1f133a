import os
import tempfile

# Settings are read at import time, so the environment must be ready first
_DB_DIR = tempfile.mkdtemp(prefix="devgad-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_DB_DIR, 'test.db')}"
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["ADMIN_EMAILS"] = "owner@devgadhapus.in, Manager@DevgadHapus.in"
os.environ["FEDERATED_AUTH_SECRET"] = "federated-test-secret"
os.environ.pop("REDIS_URL", None)

import pytest
from fastapi.testclient import TestClient

from devgad.main import app
from devgad.db.session import Base, SessionLocal, engine
from devgad.db.events import change_feed
from devgad.services.cart_service import cart_registry
from devgad.services.mailer import mailer

ADMIN_EMAIL = "owner@devgadhapus.in"


@pytest.fixture(autouse=True)
def clean_state():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    change_feed.clear()
    cart_registry.reset()
    mailer.reset()
    yield
    change_feed.clear()


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    return TestClient(app)


def registration(email, **overrides):
    data = {
        "name": "Asha Patil",
        "email": email,
        "phone": "9876543210",
        "address": "12 Hill Road, Bandra",
        "pincode": "400050",
        "password": "alphonso",
        "confirm_password": "alphonso",
    }
    data.update(overrides)
    return data


def outbox_code(email, kind="verify_email"):
    mail = mailer.last_to(email, kind)
    assert mail is not None, f"no {kind} mail for {email}"
    return mail.link.split("oobCode=")[1]


def bearer(token):
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def make_user(client):
    """Register through the API; returns (uid, auth headers)."""

    def _make_user(email, verified=True, **overrides):
        response = client.post("/api/auth/register", json=registration(email, **overrides))
        assert response.status_code == 201, response.text
        body = response.json()
        if verified:
            verify = client.post("/api/auth/verify-email", json={"code": outbox_code(body["email"])})
            assert verify.status_code == 200, verify.text
        return body["uid"], bearer(body["access_token"])

    return _make_user


@pytest.fixture
def admin_user(make_user):
    return make_user(ADMIN_EMAIL)
