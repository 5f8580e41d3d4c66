from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from cookmate.app import app
from cookmate.auth.users import authenticate, reset_users, set_active, users_collection

client = TestClient(app)


def _login_user(c):
    return c.post("/auth/login", json={"email": "user@cookmate.app", "password": "user123"})


def _login_admin(c):
    return c.post("/auth/login", json={"email": "admin@cookmate.app", "password": "admin123"})


@pytest.fixture(autouse=True)
def _demo_accounts():
    reset_users()
    yield
    reset_users()


# ── Login / Logout ───────────────────────────────────────────────────────


def test_login_success_user():
    resp = client.post("/auth/login", json={"email": "user@cookmate.app", "password": "user123"})
    assert resp.status_code == 200
    body = resp.json()
    assert body["status"] == "success"
    assert body["data"]["user"]["email"] == "user@cookmate.app"
    assert body["data"]["user"]["role"] == "user"


def test_login_success_admin():
    resp = client.post("/auth/login", json={"email": "ADMIN@cookmate.app", "password": "admin123"})
    assert resp.status_code == 200
    assert resp.json()["data"]["user"]["role"] == "admin"


def test_login_wrong_password():
    resp = client.post("/auth/login", json={"email": "user@cookmate.app", "password": "wrong"})
    assert resp.status_code == 401
    assert resp.json()["code"] == "invalid_credentials"


def test_login_unknown_user():
    resp = client.post("/auth/login", json={"email": "nobody@cookmate.app", "password": "x"})
    assert resp.status_code == 401


def test_login_stamps_last_login():
    identity = authenticate("user@cookmate.app", "user123")
    user = users_collection().require(identity["id"])
    assert user.last_login is not None


def test_deactivated_account_cannot_login():
    identity = authenticate("user@cookmate.app", "user123")
    set_active(identity["id"], False)
    assert authenticate("user@cookmate.app", "user123") is None


def test_auth_me_when_logged_in():
    c = TestClient(app)
    _login_user(c)
    resp = c.get("/auth/me")
    assert resp.status_code == 200
    user = resp.json()["data"]["user"]
    assert user["email"] == "user@cookmate.app"
    assert user["profile"]["cooking_experience"] == "beginner"
    assert "password_hash" not in user


def test_auth_me_not_logged_in():
    c = TestClient(app)  # fresh client, no session
    resp = c.get("/auth/me")
    assert resp.status_code == 401
    assert resp.json()["code"] == "not_authenticated"


def test_logout():
    c = TestClient(app)
    _login_user(c)
    resp = c.post("/auth/logout")
    assert resp.status_code == 200
    assert resp.json()["status"] == "success"
    # Session should be cleared
    assert c.get("/auth/me").status_code == 401


# ── Registration ─────────────────────────────────────────────────────────


def test_register_logs_the_new_account_in():
    c = TestClient(app)
    resp = c.post("/auth/register", json={
        "name": "Asha",
        "email": "Asha@Example.com",
        "password": "secret1",
    })
    assert resp.status_code == 201
    assert resp.json()["data"]["user"]["role"] == "user"
    me = c.get("/auth/me").json()["data"]["user"]
    assert me["email"] == "asha@example.com"


def test_register_duplicate_email():
    resp = client.post("/auth/register", json={
        "name": "Copy",
        "email": "user@cookmate.app",
        "password": "secret1",
    })
    assert resp.status_code == 409


@pytest.mark.parametrize("body", [
    {"name": "A", "email": "bad-email", "password": "secret1"},
    {"name": "A", "email": "a@example.com", "password": "123"},
    {"name": "", "email": "a@example.com", "password": "secret1"},
])
def test_register_validation(body):
    resp = client.post("/auth/register", json=body)
    assert resp.status_code == 422


# ── Route protection ─────────────────────────────────────────────────────


def test_recommendations_requires_login():
    c = TestClient(app)
    assert c.get("/recipes/recommendations").status_code == 401


def test_favorites_requires_login():
    c = TestClient(app)
    assert c.get("/recipes/favorites").status_code == 401


def test_analytics_requires_admin():
    c = TestClient(app)
    _login_user(c)
    resp = c.get("/analytics")
    assert resp.status_code == 403
    assert resp.json()["code"] == "forbidden"


def test_analytics_allowed_for_admin():
    c = TestClient(app)
    _login_admin(c)
    assert c.get("/analytics").status_code == 200


def test_user_listing_requires_admin():
    c = TestClient(app)
    _login_user(c)
    assert c.get("/users").status_code == 403


# ── Public endpoints stay public ─────────────────────────────────────────


def test_health_is_public():
    c = TestClient(app)
    assert c.get("/health").json() == {"status": "success", "message": "Cookmate API is running"}


def test_metadata_is_public():
    c = TestClient(app)
    resp = c.get("/metadata")
    assert resp.status_code == 200
    data = resp.json()["data"]
    assert "extra-hot" in data["spice_levels"]
    assert "quick-meals" in data["interests"]


def test_recipe_listing_is_public():
    c = TestClient(app)
    assert c.get("/recipes").status_code == 200
