# tests/conftest.py
import os
import tempfile
from datetime import datetime, timedelta, timezone

# app.main builds an app at import time; give it a throwaway environment first
os.environ.setdefault("JWT_SECRET", "test-secret")
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="jobtracker-uploads-"))

import pytest
from fastapi.testclient import TestClient

from app.core.config import Settings
from app.main import create_app
from app.services.email import Notifier
from app.services.storage import LocalBlobStore


class RecordingNotifier(Notifier):
    def __init__(self):
        self.sent = []

    def send(self, to, subject, html):
        self.sent.append({"to": to, "subject": subject, "html": html})


class FailingNotifier(Notifier):
    def send(self, to, subject, html):
        raise ConnectionError("smtp down")


class FakeClock:
    def __init__(self, now=None):
        self.now = now or datetime.now(timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now += timedelta(**kwargs)


@pytest.fixture
def settings(tmp_path):
    return Settings(
        JWT_SECRET="test-secret",
        DATABASE_URL="sqlite://",
        FRONTEND_URL="http://frontend.test",
        BACKEND_URL="http://backend.test",
        UPLOAD_DIR=str(tmp_path / "uploads"),
        MAX_UPLOAD_BYTES=1024,
    )


@pytest.fixture
def notifier():
    return RecordingNotifier()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def blob_store(settings):
    return LocalBlobStore(settings.UPLOAD_DIR)


@pytest.fixture
def app(settings, notifier, blob_store, clock):
    return create_app(settings, notifier=notifier, blob_store=blob_store, clock=clock)


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def db(app):
    session = app.state.session_factory()
    try:
        yield session
    finally:
        session.close()


def token_from_email(html):
    marker = "token="
    start = html.index(marker) + len(marker)
    end = html.index('"', start)
    return html[start:end]


@pytest.fixture
def verified_user(client, notifier):
    """Sign up and verify a@x.com; returns (email, password, bearer token)."""
    email, password = "a@x.com", "password1"
    r = client.post("/auth/signup", json={"email": email, "password": password, "first": "Ada"})
    assert r.status_code == 201
    token = token_from_email(notifier.sent[-1]["html"])
    r = client.get("/auth/verify", params={"token": token, "format": "json"})
    assert r.status_code == 200
    r = client.post("/auth/login", json={"email": email, "password": password})
    assert r.status_code == 200
    return email, password, r.json()["token"]


@pytest.fixture
def auth_headers(verified_user):
    return {"Authorization": f"Bearer {verified_user[2]}"}
