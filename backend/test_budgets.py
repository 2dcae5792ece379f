from services.analytics_service import utc_today
from services.budget_service import BudgetService


def _create(client, user, **overrides):
    body = {"month": 3, "year": 2025, "limit": 1000, **overrides}
    return client.post("/api/v1/budgets", json=body, headers=user["headers"])


def test_create_and_fetch_by_period(client, alice, categories):
    res = _create(client, alice, category_limits=[{"category_id": categories["Food & Dining"], "limit": 400}])
    assert res.status_code == 201
    budget = res.json()["data"]["budget"]
    assert budget["limit"] == 1000
    assert budget["category_limits"][0]["category"]["name"] == "Food & Dining"
    assert budget["category_limits"][0]["limit"] == 400

    fetched = client.get("/api/v1/budgets/2025/3", headers=alice["headers"])
    assert fetched.status_code == 200
    assert fetched.json()["data"]["budget"]["id"] == budget["id"]


def test_duplicate_period_conflicts(client, alice):
    assert _create(client, alice).status_code == 201
    res = _create(client, alice, limit=2000)
    assert res.status_code == 409
    assert res.json()["message"] == "Budget already exists for this period. Use PUT to update."


def test_same_period_for_different_users(client, alice, bob):
    assert _create(client, alice).status_code == 201
    assert _create(client, bob).status_code == 201


def test_validation(client, alice):
    assert _create(client, alice, month=13).status_code == 400
    assert _create(client, alice, year=2019).status_code == 400
    assert _create(client, alice, limit=-1).status_code == 400


def test_missing_period_is_not_found(client, alice):
    res = client.get("/api/v1/budgets/2025/7", headers=alice["headers"])
    assert res.status_code == 404


def test_current_budget(client, alice):
    empty = client.get("/api/v1/budgets/current", headers=alice["headers"])
    assert empty.status_code == 200
    assert empty.json()["data"]["budget"] is None

    today = utc_today()
    _create(client, alice, month=today.month, year=today.year)
    current = client.get("/api/v1/budgets/current", headers=alice["headers"])
    assert current.json()["data"]["budget"]["month"] == today.month


def test_list_newest_first(client, alice):
    _create(client, alice, month=1)
    _create(client, alice, month=2, year=2026)
    _create(client, alice, month=12, year=2024)
    budgets = client.get("/api/v1/budgets", headers=alice["headers"]).json()["data"]["budgets"]
    assert [(b["year"], b["month"]) for b in budgets] == [(2026, 2), (2025, 1), (2024, 12)]


def test_update_replaces_category_limits(client, alice, categories):
    budget = _create(client, alice, category_limits=[{"category_id": categories["Rent"], "limit": 500}]).json()
    budget_id = budget["data"]["budget"]["id"]

    res = client.put(f"/api/v1/budgets/{budget_id}", json={
        "limit": 1500,
        "category_limits": [{"category_id": categories["Travel"], "limit": 300}],
    }, headers=alice["headers"])
    assert res.status_code == 200
    updated = res.json()["data"]["budget"]
    assert updated["limit"] == 1500
    assert [cl["category"]["name"] for cl in updated["category_limits"]] == ["Travel"]


def test_update_and_delete_require_ownership(client, alice, bob):
    budget_id = _create(client, alice).json()["data"]["budget"]["id"]
    assert client.put(f"/api/v1/budgets/{budget_id}", json={"limit": 1}, headers=bob["headers"]).status_code == 403
    assert client.delete(f"/api/v1/budgets/{budget_id}", headers=bob["headers"]).status_code == 403
    assert client.delete(f"/api/v1/budgets/{budget_id}", headers=alice["headers"]).status_code == 200
    assert client.get("/api/v1/budgets/2025/3", headers=alice["headers"]).status_code == 404


def test_category_limit_must_be_usable(client, alice, bob):
    res = client.post("/api/v1/categories", json={"name": "Bob Only", "color": "#123456"}, headers=bob["headers"])
    bob_category = res.json()["data"]["category"]["id"]
    res = _create(client, alice, category_limits=[{"category_id": bob_category, "limit": 10}])
    assert res.status_code == 403


def test_status(client, alice, categories, add_expense):
    _create(client, alice, category_limits=[
        {"category_id": categories["Food & Dining"], "limit": 200},
        {"category_id": categories["Travel"], "limit": 0},
        {"category_id": categories["Rent"], "limit": 800},
    ])
    add_expense(alice, categories["Food & Dining"], 250, "2025-03-04")
    add_expense(alice, categories["Rent"], 200, "2025-03-01")
    add_expense(alice, categories["Rent"], 999, "2025-04-01")

    res = client.get("/api/v1/budgets/2025/3/status", headers=alice["headers"])
    assert res.status_code == 200
    rows = {row["category"]["name"]: row for row in res.json()["data"]["categories"]}

    food = rows["Food & Dining"]
    assert food["spent"] == 250 and food["remaining"] == -50
    assert food["percentage_used"] == 125
    assert food["is_over_limit"] is True

    assert rows["Travel"]["spent"] == 0
    assert rows["Travel"]["percentage_used"] == 0
    assert rows["Travel"]["is_over_limit"] is False

    rent = rows["Rent"]
    assert rent["spent"] == 200 and rent["remaining"] == 600
    assert rent["percentage_used"] == 25
    assert rent["is_over_limit"] is False


def test_status_without_budget(client, alice):
    assert client.get("/api/v1/budgets/2025/3/status", headers=alice["headers"]).status_code == 404


def test_concurrent_create_for_same_period_conflicts(client, alice, monkeypatch):
    # Both requests pass the existence check; the unique constraint decides
    monkeypatch.setattr(BudgetService, "get_for_period", staticmethod(lambda *args, **kwargs: None))
    assert _create(client, alice).status_code == 201
    res = _create(client, alice, limit=2000)
    assert res.status_code == 409
    assert res.json()["message"] == "Budget already exists for this period. Use PUT to update."
