"""Pytest configuration and fixtures."""

import os

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from src.database import Base, get_db
from src.main import app
from src.models import Offer, Wish
from src.services.storage import PictureStorage, get_picture_storage

TEST_PASSWORD = "testpass123"


class AuthHeaders(dict):
    """Dict subclass that also stores the user's id and email."""

    def __init__(self, *args, user_id: int | None = None, email: str | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.user_id = user_id
        self.email = email


# Use test database - PostgreSQL when configured, SQLite locally
if os.getenv("DATABASE_URL"):
    # Same server, dedicated test database
    SQLALCHEMY_DATABASE_URL = os.getenv("DATABASE_URL").rsplit("/", 1)[0] + "/otroc_test"
else:
    SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"

connect_args = {"check_same_thread": False} if "sqlite" in SQLALCHEMY_DATABASE_URL else {}
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args=connect_args)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="session", autouse=True)
def setup_test_database():
    """Create test database schema once at the start of the test session."""
    if "postgresql" in SQLALCHEMY_DATABASE_URL:
        from sqlalchemy_utils import create_database, database_exists

        if not database_exists(SQLALCHEMY_DATABASE_URL):
            create_database(SQLALCHEMY_DATABASE_URL)

    Base.metadata.create_all(bind=engine)
    yield
    # Don't drop database - just leave it for next run (each test cleans up after itself)


@pytest.fixture(scope="function", autouse=True)
def db():
    """Create a fresh database session for each test with cleanup."""
    session = TestingSessionLocal()

    yield session

    # Clean up all data after test
    session.rollback()
    for table in reversed(Base.metadata.sorted_tables):
        session.execute(table.delete())
    session.commit()
    session.close()


@pytest.fixture
def storage(tmp_path):
    """Picture storage rooted in a temporary directory."""
    return PictureStorage(tmp_path / "media", "http://testserver/media")


@pytest.fixture(scope="function")
def client(db, storage):
    """Create a test client with database and storage overrides."""

    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_picture_storage] = lambda: storage
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def register(client):
    """Register a user, log them in and return their auth headers."""

    def _register(email: str, name: str | None = None, password: str = TEST_PASSWORD):
        response = client.post(
            "/api/users",
            json={"email": email, "password": password, "name": name},
        )
        assert response.status_code == 201
        user_id = response.json()["id"]

        response = client.post("/api/auth/login", json={"email": email, "password": password})
        assert response.status_code == 200
        token = response.json()["access_token"]

        return AuthHeaders({"Authorization": f"Bearer {token}"}, user_id=user_id, email=email)

    return _register


@pytest.fixture
def auth_headers(register):
    """Create a user and return auth headers with user info."""
    return register("test@example.com", "Test User")


@pytest.fixture
def add_ads(db):
    """Insert offers and wishes for a user directly, as they have no endpoints here."""

    def _add_ads(owner_id: int, offers=(), wishes=()):
        created = []
        for title, is_active in offers:
            created.append(Offer(owner_id=owner_id, title=title, is_active=is_active))
        for title, is_active in wishes:
            created.append(Wish(owner_id=owner_id, title=title, is_active=is_active))
        db.add_all(created)
        db.commit()
        return created

    return _add_ads
