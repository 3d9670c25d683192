# Admin Auth Tests
# Login, session cookie, OTP and credential management endpoints
# Dependent files: app/routers/auth.py, app/dependencies/access_control.py

from datetime import datetime, timedelta, timezone

import jwt
import pytest

from app.dependencies.access_control import (
    ADMIN_ROLE,
    REMEMBER_ME_SESSION,
    SHORT_SESSION,
    AdminPrincipal,
    create_access_token,
    decode_access_token,
    hash_secret,
    verify_secret,
)
from db.collections import ADMIN, ADMIN_OTP

ADMIN_USERNAME = "testadmin"
ADMIN_PASSWORD = "testpass123"
SECRET = "test-secret-key-for-testing-only"


# --- Hashing & tokens ---

def test_hash_secret_round_trip():
    hashed = hash_secret("s3cret")
    assert hashed != "s3cret"
    assert hashed.startswith("$2")
    assert verify_secret("s3cret", hashed)
    assert not verify_secret("wrong", hashed)


def test_verify_secret_rejects_missing_or_garbage_hash():
    assert not verify_secret("s3cret", None)
    assert not verify_secret(None, hash_secret("x"))
    assert not verify_secret("s3cret", "not-a-bcrypt-hash")


def test_token_carries_admin_claims():
    token = create_access_token(AdminPrincipal(subject="admin"), SECRET, SHORT_SESSION)
    payload = jwt.decode(token, SECRET, algorithms=["HS256"])
    assert payload["sub"] == "admin"
    assert payload["role"] == ADMIN_ROLE
    assert payload["exp"] - payload["iat"] == int(SHORT_SESSION.total_seconds())
    assert decode_access_token(token, SECRET).subject == "admin"


def test_expired_token_is_rejected():
    token = create_access_token(AdminPrincipal(subject="admin"), SECRET, timedelta(seconds=-5))
    with pytest.raises(jwt.ExpiredSignatureError):
        decode_access_token(token, SECRET)


def test_token_without_admin_role_is_rejected():
    token = create_access_token(AdminPrincipal(subject="admin", role="viewer"), SECRET, SHORT_SESSION)
    with pytest.raises(jwt.InvalidTokenError):
        decode_access_token(token, SECRET)


# --- Login flow ---

def test_compare_admin_name(client, seeded_admin):
    resp = client.post("/compareAdminName", json={"userName": ADMIN_USERNAME})
    assert resp.status_code == 200
    assert resp.json() == {"success": True}


def test_compare_admin_name_wrong(client, seeded_admin):
    resp = client.post("/compareAdminName", json={"userName": "intruder"})
    assert resp.status_code == 401
    assert resp.json()["message"] == "Incorrect Username"


def test_compare_admin_name_without_admin(client):
    resp = client.post("/compareAdminName", json={"userName": ADMIN_USERNAME})
    assert resp.status_code == 404


def test_compare_admin_password_sets_cookie(client, seeded_admin):
    resp = client.post("/compareAdminPassword", json={"password": ADMIN_PASSWORD})
    assert resp.status_code == 200
    data = resp.json()
    assert data["success"] is True
    assert data["otpSent"] is False

    set_cookie = resp.headers["set-cookie"]
    assert set_cookie.startswith("token=")
    assert "HttpOnly" in set_cookie
    assert f"Max-Age={int(SHORT_SESSION.total_seconds())}" in set_cookie


def test_remember_me_extends_cookie(client, seeded_admin):
    resp = client.post("/compareAdminPassword", json={"password": ADMIN_PASSWORD, "rememberMe": True})
    assert resp.status_code == 200
    assert f"Max-Age={int(REMEMBER_ME_SESSION.total_seconds())}" in resp.headers["set-cookie"]


def test_compare_admin_password_wrong(client, seeded_admin):
    resp = client.post("/compareAdminPassword", json={"password": "wrongpass"})
    assert resp.status_code == 401
    assert "set-cookie" not in resp.headers


def test_check_auth_and_logout(admin_client):
    assert admin_client.get("/checkAuth").json() == {"authenticated": True}

    resp = admin_client.post("/logout")
    assert resp.status_code == 200
    assert admin_client.get("/checkAuth").json() == {"authenticated": False}


def test_check_auth_without_cookie(client):
    assert client.get("/checkAuth").json() == {"authenticated": False}


def test_tampered_cookie_is_not_authenticated(client):
    forged = create_access_token(AdminPrincipal(subject="admin"), "some-other-secret", SHORT_SESSION)
    client.cookies.set("token", forged)
    assert client.get("/checkAuth").json() == {"authenticated": False}
    assert client.post("/addproject", json={"projectTitle": "x"}).status_code == 401


# --- OTP ---

def test_compare_otp_success_consumes_otp(client, database):
    database[ADMIN_OTP].insert_one({
        "otp": "123456",
        "expireTime": datetime.now(timezone.utc) + timedelta(minutes=5),
    })
    resp = client.post("/compareOTP", json={"otp": "123456"})
    assert resp.status_code == 200
    assert resp.headers["set-cookie"].startswith("token=")
    assert database[ADMIN_OTP].count_documents({}) == 0


def test_compare_otp_wrong_code(client, database):
    database[ADMIN_OTP].insert_one({
        "otp": "123456",
        "expireTime": datetime.now(timezone.utc) + timedelta(minutes=5),
    })
    resp = client.post("/compareOTP", json={"otp": "000000"})
    assert resp.status_code == 400
    assert resp.json()["message"] == "Invalid OTP"


def test_compare_otp_expired(client, database):
    database[ADMIN_OTP].insert_one({
        "otp": "123456",
        "expireTime": datetime.now(timezone.utc) - timedelta(minutes=1),
    })
    resp = client.post("/compareOTP", json={"otp": "123456"})
    assert resp.status_code == 400
    assert resp.json()["message"] == "OTP expired"


# --- Credential management ---

def test_initialize_admin_from_bootstrap(client, database):
    resp = client.post("/initializeAdmin")
    assert resp.status_code == 200
    assert resp.json()["username"] == "kale"

    admin = database[ADMIN].find_one({})
    assert verify_secret("kale", admin["userName"])
    assert verify_secret("bootstrap-pass", admin["password"])
    assert "createdAt" in admin


def test_initialize_admin_refuses_when_present(client, seeded_admin):
    resp = client.post("/initializeAdmin")
    assert resp.status_code == 400


def test_initialize_admin_requires_bootstrap_password(config, database):
    from starlette.testclient import TestClient
    from app.main import create_app

    config["auth"]["bootstrap_password"] = ""
    with TestClient(create_app(config=config, database=database)) as c:
        resp = c.post("/initializeAdmin")
    assert resp.status_code == 400
    assert database[ADMIN].count_documents({}) == 0


def test_set_admin_credentials(client, seeded_admin, database):
    resp = client.post("/setAdminCredentials", json={
        "userName": "newadmin",
        "password": "newpass456",
        "currentPassword": ADMIN_PASSWORD,
    })
    assert resp.status_code == 200
    assert database[ADMIN].count_documents({}) == 1

    assert client.post("/compareAdminName", json={"userName": "newadmin"}).status_code == 200
    assert client.post("/compareAdminPassword", json={"password": "newpass456"}).status_code == 200


def test_set_admin_credentials_wrong_current_password(client, seeded_admin):
    resp = client.post("/setAdminCredentials", json={
        "userName": "newadmin",
        "password": "newpass456",
        "currentPassword": "nope",
    })
    assert resp.status_code == 401


def test_reset_admin_requires_session(client, seeded_admin):
    assert client.post("/resetAdmin").status_code == 401


def test_reset_admin(admin_client, database):
    resp = admin_client.post("/resetAdmin")
    assert resp.status_code == 200
    admin = database[ADMIN].find_one({})
    assert verify_secret("kale", admin["userName"])


def test_debug_admin_reports_lengths_only(admin_client):
    resp = admin_client.get("/debugAdmin")
    assert resp.status_code == 200
    data = resp.json()
    assert data["found"] is True
    assert data["hasPassword"] is True
    assert data["passwordLength"] == 60
    assert "password" not in data


# --- Rate limiting ---

def test_login_is_rate_limited(config, database):
    from starlette.testclient import TestClient
    from app.dependencies.rate_limit import limiter
    from app.main import create_app

    config["rate_limit"].update({"enabled": True, "login": "2/minute"})
    limiter.reset()
    try:
        with TestClient(create_app(config=config, database=database)) as c:
            codes = [c.post("/compareAdminName", json={"userName": "x"}).status_code for _ in range(3)]
    finally:
        limiter.reset()
    assert codes == [404, 404, 429]
