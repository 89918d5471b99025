"""
Shared test configuration and fixtures
"""
import pytest
import os
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

# Set test environment before importing app
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["JWT_SECRET"] = "test-secret-key-for-testing-only"
os.environ["SKIP_SCHEDULER"] = "true"  # Skip scheduler during tests
os.environ["RATE_LIMIT_ENABLED"] = "false"
for key in ("ADMIN_EMAIL", "ADMIN_PASSWORD", "LEGACY_ADMIN_USERNAME", "TRIAL_DAYS"):
    os.environ.pop(key, None)

from main import app
from db.base import Base
from db.models import User, UserPreference, Settings  # noqa: F401
from db.repositories.user_repository import UserRepository
from api.services.user_service import UserService

TEST_DATABASE_URL = "sqlite:///:memory:"
test_engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)

PASSWORD = "strongpassword123"


def override_get_db():
    """Override database dependency for tests"""
    db = TestSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="function")
def test_db():
    """Create a fresh database for each test"""
    Base.metadata.create_all(bind=test_engine)
    yield
    Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def db_session(test_db):
    session = TestSessionLocal()
    yield session
    session.close()


@pytest.fixture
def client(test_db):
    """Create a test client with overridden database"""
    from api.dependencies import get_db
    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db_session):
    """Create a user, then apply any extra column values"""
    user_repo = UserRepository(db_session)
    user_service = UserService(user_repo)

    def _make_user(username="tester", email=None, password=PASSWORD, **fields):
        user = user_service.signup(
            email or f"{username}@example.com",
            password,
            username=username,
            full_name=fields.pop("full_name", username.title()),
        )
        if fields:
            user = user_repo.update_user(user.id, fields)
        return user

    return _make_user


@pytest.fixture
def login(client):
    """Log in and return bearer headers; the session cookie is dropped so headers decide"""

    def _login(identifier, password=PASSWORD):
        response = client.post("/api/login", data={"username": identifier, "password": password})
        assert response.status_code == 200, response.text
        client.cookies.clear()
        return {"Authorization": f"Bearer {response.json()['access_token']}"}

    return _login


@pytest.fixture
def make_legacy_user(make_user, monkeypatch):
    """Create a user the way accounts existed before the legacy admin username was reserved"""

    def _make_legacy_user(username="admin", **fields):
        monkeypatch.setenv("LEGACY_ADMIN_USERNAME", "")
        try:
            return make_user(username, **fields)
        finally:
            monkeypatch.delenv("LEGACY_ADMIN_USERNAME")

    return _make_legacy_user
