import importlib
from datetime import datetime, timedelta, timezone

from jose import jwt
from starlette.requests import Request

import config
from auth import (
    create_token_pair, get_current_user, verify_token, generate_reset_token, hash_reset_token,
    hash_password, verify_password,
)
from config import JWT_ACCESS_SECRET, JWT_ALGORITHM
from models.user import User

PASSWORD = "Secret123"


# ── Token service ────────────────────────────────────────────────
def test_token_pair_round_trip():
    tokens = create_token_pair(7, "alice@example.com", "user")
    access = verify_token(tokens["access_token"], "access")
    refresh = verify_token(tokens["refresh_token"], "refresh")
    assert access["user_id"] == 7 and access["email"] == "alice@example.com" and access["role"] == "user"
    assert refresh["user_id"] == 7


def test_tokens_are_not_interchangeable():
    tokens = create_token_pair(7, "alice@example.com", "user")
    assert verify_token(tokens["access_token"], "refresh") is None
    assert verify_token(tokens["refresh_token"], "access") is None


def test_every_pair_is_unique():
    first = create_token_pair(7, "alice@example.com", "user")
    second = create_token_pair(7, "alice@example.com", "user")
    assert first["access_token"] != second["access_token"]
    assert first["refresh_token"] != second["refresh_token"]


def test_verify_token_rejects_garbage_and_expired():
    assert verify_token("not-a-jwt") is None
    assert verify_token("") is None
    assert verify_token("anything", "bogus-kind") is None

    expired = jwt.encode(
        {"user_id": 1, "email": "a@b.co", "role": "user", "exp": datetime.now(timezone.utc) - timedelta(seconds=5)},
        JWT_ACCESS_SECRET, algorithm=JWT_ALGORITHM,
    )
    assert verify_token(expired) is None


def test_verify_token_requires_identity_claims():
    token = jwt.encode(
        {"email": "a@b.co", "exp": datetime.now(timezone.utc) + timedelta(minutes=5)},
        JWT_ACCESS_SECRET, algorithm=JWT_ALGORITHM,
    )
    assert verify_token(token) is None


def test_reset_token_hashing():
    plain, hashed = generate_reset_token()
    assert len(plain) == 64
    assert hashed != plain
    assert hash_reset_token(plain) == hashed


def test_password_hashing():
    hashed = hash_password(PASSWORD)
    assert hashed != PASSWORD
    assert verify_password(PASSWORD, hashed)
    assert not verify_password("Wrong1234", hashed)
    assert not verify_password(PASSWORD, "not-a-bcrypt-hash")


# ── Signup / login ───────────────────────────────────────────────
def test_signup_returns_user_and_tokens(client):
    res = client.post("/api/v1/auth/signup", json={
        "name": "Alice Doe", "email": "Alice@Example.com", "password": PASSWORD,
    })
    assert res.status_code == 201
    body = res.json()
    assert body["success"] is True
    user = body["data"]["user"]
    assert user["email"] == "alice@example.com"
    assert user["role"] == "user"
    assert "hashed_password" not in user and "refresh_token" not in user
    assert body["data"]["access_token"] and body["data"]["refresh_token"]


def test_signup_duplicate_email_conflicts(client, alice):
    res = client.post("/api/v1/auth/signup", json={
        "name": "Other", "email": "ALICE@example.com", "password": PASSWORD,
    })
    assert res.status_code == 409
    assert res.json()["success"] is False


def test_signup_rejects_weak_password(client):
    res = client.post("/api/v1/auth/signup", json={
        "name": "Weak", "email": "weak@example.com", "password": "password",
    })
    assert res.status_code == 400
    assert res.json()["message"].startswith("password:")


def test_login(client, alice):
    res = client.post("/api/v1/auth/login", json={"email": alice["email"], "password": PASSWORD})
    assert res.status_code == 200
    assert res.json()["data"]["user"]["id"] == alice["id"]


def test_login_wrong_password_and_unknown_email(client, alice):
    bad = client.post("/api/v1/auth/login", json={"email": alice["email"], "password": "Wrong1234"})
    unknown = client.post("/api/v1/auth/login", json={"email": "nobody@example.com", "password": PASSWORD})
    assert bad.status_code == 401
    assert unknown.status_code == 401
    assert bad.json()["message"] == unknown.json()["message"] == "Invalid email or password"


def test_login_blocked_user(client, db, alice):
    db.query(User).filter_by(id=alice["id"]).update({"is_blocked": True})
    db.commit()
    res = client.post("/api/v1/auth/login", json={"email": alice["email"], "password": PASSWORD})
    assert res.status_code == 401
    assert "blocked" in res.json()["message"]


# ── Gate ─────────────────────────────────────────────────────────
def test_gate_missing_and_invalid_token(client):
    missing = client.get("/api/v1/auth/me")
    assert missing.status_code == 401
    assert missing.json()["message"] == "Access token is required"

    invalid = client.get("/api/v1/auth/me", headers={"Authorization": "Bearer nope"})
    assert invalid.status_code == 401

    not_bearer = client.get("/api/v1/auth/me", headers={"Authorization": "Basic abc"})
    assert not_bearer.status_code == 401


def test_gate_rejects_refresh_token_as_access(client, alice):
    res = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {alice['refresh_token']}"})
    assert res.status_code == 401


def test_gate_blocked_user_with_valid_token(client, db, alice):
    db.query(User).filter_by(id=alice["id"]).update({"is_blocked": True})
    db.commit()
    res = client.get("/api/v1/auth/me", headers=alice["headers"])
    assert res.status_code == 403


def test_gate_token_for_missing_user(client):
    tokens = create_token_pair(999, "ghost@example.com", "user")
    res = client.get("/api/v1/auth/me", headers={"Authorization": f"Bearer {tokens['access_token']}"})
    assert res.status_code == 401
    assert res.json()["message"] == "User no longer exists"


def test_me(client, alice):
    res = client.get("/api/v1/auth/me", headers=alice["headers"])
    assert res.status_code == 200
    assert res.json()["data"]["user"]["email"] == alice["email"]


def test_health_reports_optional_identity(client, alice):
    anonymous = client.get("/api/v1/health")
    assert anonymous.status_code == 200
    assert anonymous.json()["data"]["authenticated"] is False

    signed_in = client.get("/api/v1/health", headers=alice["headers"])
    assert signed_in.json()["data"]["authenticated"] is True

    garbage = client.get("/api/v1/health", headers={"Authorization": "Bearer nope"})
    assert garbage.status_code == 200
    assert garbage.json()["data"]["authenticated"] is False


# ── Refresh / logout ─────────────────────────────────────────────
def test_refresh_rotates_pair(client, alice):
    res = client.post("/api/v1/auth/refresh", json={"refresh_token": alice["refresh_token"]})
    assert res.status_code == 200
    new_tokens = res.json()["data"]
    assert new_tokens["refresh_token"] != alice["refresh_token"]

    # The previous refresh token is no longer the stored one
    replay = client.post("/api/v1/auth/refresh", json={"refresh_token": alice["refresh_token"]})
    assert replay.status_code == 401

    again = client.post("/api/v1/auth/refresh", json={"refresh_token": new_tokens["refresh_token"]})
    assert again.status_code == 200


def test_login_elsewhere_revokes_previous_refresh_token(client, alice):
    client.post("/api/v1/auth/login", json={"email": alice["email"], "password": PASSWORD})
    res = client.post("/api/v1/auth/refresh", json={"refresh_token": alice["refresh_token"]})
    assert res.status_code == 401


def test_refresh_rejects_access_token(client, alice):
    res = client.post("/api/v1/auth/refresh", json={"refresh_token": alice["access_token"]})
    assert res.status_code == 401


def test_logout_clears_refresh_token(client, alice):
    res = client.post("/api/v1/auth/logout", headers=alice["headers"])
    assert res.status_code == 200
    refresh = client.post("/api/v1/auth/refresh", json={"refresh_token": alice["refresh_token"]})
    assert refresh.status_code == 401


# ── Password reset ───────────────────────────────────────────────
def test_forgot_password_same_answer_for_unknown_email(client, alice):
    known = client.post("/api/v1/auth/forgot-password", json={"email": alice["email"]})
    unknown = client.post("/api/v1/auth/forgot-password", json={"email": "nobody@example.com"})
    assert known.status_code == unknown.status_code == 200
    assert known.json()["message"] == unknown.json()["message"]
    assert "data" not in unknown.json()


def test_reset_password_flow(client, db, alice):
    res = client.post("/api/v1/auth/forgot-password", json={"email": alice["email"]})
    token = res.json()["data"]["reset_token"]

    stored = db.query(User).filter_by(id=alice["id"]).one()
    assert stored.reset_password_token == hash_reset_token(token)

    reset = client.post("/api/v1/auth/reset-password", json={"token": token, "password": "NewSecret456"})
    assert reset.status_code == 200

    assert client.post("/api/v1/auth/login", json={"email": alice["email"], "password": PASSWORD}).status_code == 401
    assert client.post("/api/v1/auth/login", json={"email": alice["email"], "password": "NewSecret456"}).status_code == 200
    # Sessions from before the reset are gone and the token is single-use
    assert client.post("/api/v1/auth/refresh", json={"refresh_token": alice["refresh_token"]}).status_code == 401
    again = client.post("/api/v1/auth/reset-password", json={"token": token, "password": "Another789"})
    assert again.status_code == 400


def test_reset_token_older_than_an_hour_is_rejected(client, db, alice):
    res = client.post("/api/v1/auth/forgot-password", json={"email": alice["email"]})
    token = res.json()["data"]["reset_token"]

    db.query(User).filter_by(id=alice["id"]).update({
        "reset_password_expires": datetime.now(timezone.utc) - timedelta(minutes=1),
    })
    db.commit()

    reset = client.post("/api/v1/auth/reset-password", json={"token": token, "password": "NewSecret456"})
    assert reset.status_code == 400
    assert reset.json()["message"] == "Invalid or expired reset token"


def test_forgot_password_hides_token_outside_development(client, db, alice, monkeypatch):
    monkeypatch.setattr("routes.auth_routes.APP_ENV", "production")
    res = client.post("/api/v1/auth/forgot-password", json={"email": alice["email"]})
    assert res.status_code == 200
    assert "data" not in res.json()

    # A token was still issued and stored, just not echoed
    assert db.query(User).filter_by(id=alice["id"]).one().reset_password_token


def test_app_env_defaults_to_production(monkeypatch):
    monkeypatch.delenv("APP_ENV")
    try:
        assert importlib.reload(config).APP_ENV == "production"
    finally:
        monkeypatch.undo()
        importlib.reload(config)


# ── Gate identity ────────────────────────────────────────────────
def test_gate_reports_current_email_after_change(client, db, alice):
    res = client.put("/api/v1/users/email", json={"email": "alice.new@example.com", "password": PASSWORD},
                     headers=alice["headers"])
    assert res.status_code == 200

    request = Request({"type": "http", "headers": [(b"authorization", f"Bearer {alice['access_token']}".encode())]})
    current = get_current_user(request, db)
    assert current.user_id == alice["id"]
    assert current.email == "alice.new@example.com"
