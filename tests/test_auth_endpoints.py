from datetime import datetime, timedelta, timezone

from fastapi.testclient import TestClient

from app.core.security import TokenCodec
from app.main import create_app
from app.models.user import User

from conftest import FailingNotifier, token_from_email

SENSITIVE_KEYS = {"password", "passwordHash", "password_hash", "verificationToken",
                  "verification_token", "verificationTokenExpires"}


def test_full_signup_verify_login_me_flow(client, notifier):
    r = client.post("/auth/signup", json={"email": "a@x.com", "password": "password1", "first": "Ada"})
    assert r.status_code == 201
    body = r.json()
    assert body["user"]["email"] == "a@x.com"
    assert set(body["user"]) == {"id", "email"}

    r = client.post("/auth/login", json={"email": "a@x.com", "password": "password1"})
    assert r.status_code == 403
    assert r.json()["code"] == "EMAIL_NOT_VERIFIED"

    token = token_from_email(notifier.sent[-1]["html"])
    r = client.get("/auth/verify", params={"token": token}, follow_redirects=False)
    assert r.status_code == 302
    assert r.headers["location"] == "http://frontend.test/login?verified=1"

    r = client.post("/auth/login", json={"email": "a@x.com", "password": "password1"})
    assert r.status_code == 200
    login = r.json()
    assert login["user"]["email"] == "a@x.com"
    assert not SENSITIVE_KEYS & set(login["user"])

    r = client.get("/auth/me", headers={"Authorization": f"Bearer {login['token']}"})
    assert r.status_code == 200
    user = r.json()["user"]
    assert user["email"] == "a@x.com"
    assert user["firstName"] == "Ada"
    assert user["isVerified"] is True
    assert not SENSITIVE_KEYS & set(user)
    assert user["profile"]["userId"] == user["id"]


def test_signup_validation_and_conflict(client):
    r = client.post("/auth/signup", json={"email": "bad", "password": "password1"})
    assert r.status_code == 400
    assert r.json()["detail"] == "Invalid email"

    r = client.post("/auth/signup", json={"email": "a@x.com"})
    assert r.status_code == 400

    r = client.post("/auth/signup", json={"email": "a@x.com", "password": 123})
    assert r.status_code == 400
    assert r.json()["code"] == "VALIDATION_ERROR"

    assert client.post("/auth/signup", json={"email": "a@x.com", "password": "password1"}).status_code == 201
    r = client.post("/auth/signup", json={"email": "A@X.COM", "password": "password1"})
    assert r.status_code == 409


def test_login_401_bodies_are_identical(client, verified_user):
    missing = client.post("/auth/login", json={"email": "missing@x.com", "password": "whatever"})
    wrong = client.post("/auth/login", json={"email": "a@x.com", "password": "wrongpass"})
    assert missing.status_code == wrong.status_code == 401
    assert missing.json() == wrong.json()


def test_login_missing_fields(client):
    r = client.post("/auth/login", json={"email": "a@x.com"})
    assert r.status_code == 400


def test_verify_json_variants(client, notifier):
    client.post("/auth/signup", json={"email": "a@x.com", "password": "password1"})
    token = token_from_email(notifier.sent[-1]["html"])

    r = client.post("/auth/verify", json={"token": token}, headers={"Accept": "application/json"})
    assert r.status_code == 200
    assert r.json() == {"message": "Email verified"}

    r = client.get("/auth/verify", params={"token": token}, headers={"Accept": "application/json"})
    assert r.status_code == 400
    assert len(notifier.sent) == 1


def test_verify_without_token(client):
    r = client.get("/auth/verify", params={"format": "json"})
    assert r.status_code == 400
    assert r.json()["detail"] == "Missing token"


def test_verify_expired_token(client, notifier, clock):
    client.post("/auth/signup", json={"email": "a@x.com", "password": "password1"})
    token = token_from_email(notifier.sent[-1]["html"])
    clock.advance(hours=25)

    r = client.get("/auth/verify", params={"token": token, "format": "json"})
    assert r.status_code == 400
    assert r.json()["detail"] == "Token has expired"


def test_resend_verification_endpoint(client, notifier):
    client.post("/auth/signup", json={"email": "a@x.com", "password": "password1"})
    old = token_from_email(notifier.sent[-1]["html"])

    r = client.post("/auth/resend-verification", json={"email": "a@x.com"})
    assert r.status_code == 200
    assert r.json() == {"message": "Verification email sent"}
    new = token_from_email(notifier.sent[-1]["html"])
    assert new != old

    assert client.get("/auth/verify", params={"token": old, "format": "json"}).status_code == 400
    assert client.get("/auth/verify", params={"token": new, "format": "json"}).status_code == 200

    assert client.post("/auth/resend-verification", json={"email": "a@x.com"}).status_code == 400
    assert client.post("/auth/resend-verification", json={"email": "z@x.com"}).status_code == 404


def test_me_requires_bearer(client):
    r = client.get("/auth/me")
    assert r.status_code == 401
    assert r.json()["code"] == "TOKEN_MISSING"
    assert r.headers["www-authenticate"] == "Bearer"

    r = client.get("/auth/me", headers={"Authorization": "Basic abc"})
    assert r.status_code == 401


def test_me_distinguishes_expired_from_forged(client, verified_user):
    past = datetime.now(timezone.utc) - timedelta(days=30)
    expired = TokenCodec("test-secret", clock=lambda: past).issue(1)
    forged = TokenCodec("someone-else").issue(1)

    r_expired = client.get("/auth/me", headers={"Authorization": f"Bearer {expired}"})
    r_forged = client.get("/auth/me", headers={"Authorization": f"Bearer {forged}"})

    assert r_expired.status_code == r_forged.status_code == 401
    assert r_expired.json()["code"] == "TOKEN_EXPIRED"
    assert r_forged.json()["code"] == "TOKEN_INVALID"
    assert r_expired.json()["details"] != r_forged.json()["details"]


def test_me_for_deleted_user_is_404(client, app, verified_user):
    token = app.state.token_codec.issue(9999)
    r = client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
    assert r.status_code == 404


def test_me_with_stale_profile_link(client, db, verified_user, auth_headers):
    user = db.query(User).filter(User.email == "a@x.com").one()
    profile_id = user.profile_id
    user.profile_id = None
    db.commit()

    r = client.get("/auth/me", headers=auth_headers)
    assert r.status_code == 200
    assert r.json()["user"]["profile"]["id"] == profile_id


def test_logout_and_health(client):
    assert client.post("/auth/logout").json() == {"ok": True, "message": "Logged out"}
    r = client.get("/api/health")
    assert r.status_code == 200
    assert r.json()["ok"] is True


def test_notifier_failure_returns_generic_500(settings, blob_store, clock):
    app = create_app(settings, notifier=FailingNotifier(), blob_store=blob_store, clock=clock)
    with TestClient(app, raise_server_exceptions=False) as c:
        r = c.post("/auth/signup", json={"email": "a@x.com", "password": "password1"})
        assert r.status_code == 500
        assert r.json() == {"detail": "Internal server error", "code": "INTERNAL_ERROR"}

        # the account was still created and stays pending
        r = c.post("/auth/login", json={"email": "a@x.com", "password": "password1"})
        assert r.status_code == 403


def test_password_is_hashed_exactly_as_submitted(client, notifier):
    r = client.post("/auth/signup", json={"email": "a@x.com", "password": "  password1  "})
    assert r.status_code == 201
    token = token_from_email(notifier.sent[-1]["html"])
    client.get("/auth/verify", params={"token": token, "format": "json"})

    assert client.post("/auth/login", json={"email": "a@x.com", "password": "password1"}).status_code == 401
    assert client.post("/auth/login", json={"email": "a@x.com", "password": "  password1  "}).status_code == 200


def test_trailing_space_counts_toward_password_length(client):
    r = client.post("/auth/signup", json={"email": "a@x.com", "password": "1234567 "})
    assert r.status_code == 201


def test_bearer_token_expires_on_app_clock(client, clock, auth_headers):
    assert client.get("/auth/me", headers=auth_headers).status_code == 200

    clock.advance(days=8)
    r = client.get("/auth/me", headers=auth_headers)
    assert r.status_code == 401
    assert r.json()["code"] == "TOKEN_EXPIRED"
