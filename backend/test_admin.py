import pytest

from create_admin import ensure_admin, main as create_admin_main
from errors import BadRequest
from models.user import User


def test_non_admin_is_forbidden(client, alice):
    for path in ("/api/v1/admin/users", "/api/v1/admin/stats", f"/api/v1/admin/users/{alice['id']}"):
        res = client.get(path, headers=alice["headers"])
        assert res.status_code == 403
        assert res.json()["message"] == "Admin access required"


def test_anonymous_is_unauthorized(client):
    assert client.get("/api/v1/admin/stats").status_code == 401


def test_list_users_with_search(client, admin, alice, bob):
    res = client.get("/api/v1/admin/users", headers=admin["headers"]).json()
    assert res["pagination"]["total"] == 3

    found = client.get("/api/v1/admin/users?search=smith", headers=admin["headers"]).json()
    assert [u["email"] for u in found["data"]["users"]] == ["bob@example.com"]


def test_user_detail_with_stats(client, admin, alice, categories, add_expense, add_income):
    add_expense(alice, categories["Rent"], 700, "2025-03-01")
    add_expense(alice, categories["Travel"], 50.5, "2025-03-02")
    add_income(alice, 3000, "2025-03-01")

    res = client.get(f"/api/v1/admin/users/{alice['id']}", headers=admin["headers"])
    assert res.status_code == 200
    data = res.json()["data"]
    assert data["user"]["email"] == alice["email"]
    assert data["stats"] == {"expense_count": 2, "income_count": 1, "total_expenses": 750.5}


def test_unknown_user(client, admin):
    assert client.get("/api/v1/admin/users/9999", headers=admin["headers"]).status_code == 404


def test_block_toggle(client, db, admin, alice):
    res = client.put(f"/api/v1/admin/users/{alice['id']}/block", headers=admin["headers"])
    assert res.status_code == 200
    assert res.json()["data"]["is_blocked"] is True
    assert res.json()["message"] == "User blocked successfully"

    stored = db.query(User).filter_by(id=alice["id"]).one()
    assert stored.refresh_token is None

    # Existing tokens stop working immediately
    assert client.get("/api/v1/auth/me", headers=alice["headers"]).status_code == 403
    assert client.post("/api/v1/auth/refresh", json={"refresh_token": alice["refresh_token"]}).status_code == 401

    res = client.put(f"/api/v1/admin/users/{alice['id']}/block", headers=admin["headers"])
    assert res.json()["data"]["is_blocked"] is False
    assert client.get("/api/v1/auth/me", headers=alice["headers"]).status_code == 200


def test_admin_cannot_block_self(client, admin):
    res = client.put(f"/api/v1/admin/users/{admin['id']}/block", headers=admin["headers"])
    assert res.status_code == 400


def test_platform_stats(client, db, admin, alice, bob, categories, add_expense, add_income):
    add_expense(alice, categories["Rent"], 100, "2025-03-01")
    add_expense(bob, categories["Rent"], 200, "2025-03-01")
    add_income(bob, 1000, "2025-03-01")
    client.put(f"/api/v1/admin/users/{bob['id']}/block", headers=admin["headers"])

    data = client.get("/api/v1/admin/stats", headers=admin["headers"]).json()["data"]
    assert data["users"] == {"total": 3, "active": 2, "blocked": 1, "new_this_month": 3}
    assert data["expenses"] == {"count": 2, "total_amount": 300}
    assert data["income"] == {"count": 1, "total_amount": 1000}
    assert sum(day["count"] for day in data["recent_registrations"]) == 3


# ── Bootstrap script ─────────────────────────────────────────────
def test_ensure_admin_creates_account(client, db):
    user, created = ensure_admin(db, "Root@Example.com", "Root Admin", "Secret123")
    assert created is True
    assert user.role == "admin"

    res = client.post("/api/v1/auth/login", json={"email": "root@example.com", "password": "Secret123"})
    assert res.status_code == 200
    assert res.json()["data"]["user"]["role"] == "admin"


def test_ensure_admin_promotes_existing_user(client, db, alice):
    user, created = ensure_admin(db, alice["email"])
    assert created is False
    assert user.id == alice["id"]
    assert client.get("/api/v1/admin/stats", headers=alice["headers"]).status_code == 200


def test_ensure_admin_needs_password_for_new_account(db):
    with pytest.raises(BadRequest):
        ensure_admin(db, "nobody@example.com")


def test_create_admin_cli(capsys):
    assert create_admin_main(["cli@example.com", "--password", "Secret123"]) == 0
    assert "Created admin ID" in capsys.readouterr().out
    assert create_admin_main(["cli@example.com"]) == 0
    assert "Updated admin ID" in capsys.readouterr().out
    assert create_admin_main(["other@example.com"]) == 1
