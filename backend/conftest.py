import os
import tempfile

# Configure an isolated environment before any application module reads config
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["APP_ENV"] = "development"
os.environ["FRONTEND_URL"] = "http://testserver"
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="fintrack-uploads-")

import pytest
from fastapi.testclient import TestClient

from database import Base, SessionLocal, engine
from main import app
from models.category import Category
from services.category_service import CategoryService
from services.user_service import UserService

PASSWORD = "Secret123"


@pytest.fixture(autouse=True)
def fresh_db():
    """Every test starts from empty tables plus the seeded default categories."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        CategoryService.seed_defaults(session)
    finally:
        session.close()
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    with TestClient(app) as c:
        yield c


def _session_info(data: dict) -> dict:
    return {
        "id": data["user"]["id"],
        "email": data["user"]["email"],
        "access_token": data["access_token"],
        "refresh_token": data["refresh_token"],
        "headers": {"Authorization": f"Bearer {data['access_token']}"},
    }


@pytest.fixture
def make_user(client):
    """Factory: sign up a user through the API and return its ids, tokens and auth headers."""
    def _make(email="alice@example.com", name="Alice Doe", password=PASSWORD):
        res = client.post("/api/v1/auth/signup", json={"name": name, "email": email, "password": password})
        assert res.status_code == 201, res.text
        return _session_info(res.json()["data"])
    return _make


@pytest.fixture
def alice(make_user):
    return make_user()


@pytest.fixture
def bob(make_user):
    return make_user("bob@example.com", "Bob Smith")


@pytest.fixture
def admin(client, db):
    UserService.create_user(db, "Admin User", "admin@example.com", PASSWORD, role="admin")
    res = client.post("/api/v1/auth/login", json={"email": "admin@example.com", "password": PASSWORD})
    assert res.status_code == 200, res.text
    return _session_info(res.json()["data"])


@pytest.fixture
def categories(db):
    """Default category ids keyed by name."""
    return {c.name: c.id for c in db.query(Category).filter_by(is_default=True)}


@pytest.fixture
def add_expense(client):
    def _add(user, category_id, amount, on, description="Test expense", **extra):
        body = {"amount": amount, "category_id": category_id, "date": on, "description": description, **extra}
        res = client.post("/api/v1/expenses", json=body, headers=user["headers"])
        assert res.status_code == 201, res.text
        return res.json()["data"]["expense"]
    return _add


@pytest.fixture
def add_income(client):
    def _add(user, amount, on, source="Salary", **extra):
        body = {"amount": amount, "date": on, "source": source, **extra}
        res = client.post("/api/v1/incomes", json=body, headers=user["headers"])
        assert res.status_code == 201, res.text
        return res.json()["data"]["income"]
    return _add
