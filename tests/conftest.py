"""
Pytest configuration and fixtures for SocialNet API tests.
"""
import os

# Settings are read once, so the environment must be in place before the app is imported
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ACCESS_TOKEN_SECRET"] = "test-access-secret"
os.environ["REFRESH_TOKEN_SECRET"] = "test-refresh-secret"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["DB_CONNECT_RETRY_DELAY"] = "0"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from socialnet.database import Base, get_db
from socialnet.limiter import limiter
from socialnet.main import app
from socialnet.models.user import User
from socialnet.passwords import get_password_hash
from socialnet.tokens import get_token_service

# Disable rate limiting for tests
limiter.enabled = False

# Use in-memory SQLite for tests with shared connection
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    bind=engine,
    expire_on_commit=False,
)

# Global session for sharing across requests
_test_session = None

PASSWORD = "testpassword123"


def get_test_db():
    """Get the shared test database session."""
    yield _test_session


@pytest.fixture(scope="function")
def db():
    """Create a fresh database for each test."""
    global _test_session

    Base.metadata.create_all(bind=engine)
    _test_session = TestingSessionLocal()
    app.dependency_overrides[get_db] = get_test_db

    yield _test_session

    # Cleanup
    app.dependency_overrides.clear()
    _test_session.close()
    _test_session = None
    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db):
    """Create a test client."""
    with TestClient(app) as c:
        yield c


def make_user(db, username: str, email: str, is_admin: bool = False) -> User:
    user = User(
        username=username,
        email=email,
        hashed_password=get_password_hash(PASSWORD),
        is_admin=is_admin,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def bearer(user: User) -> dict:
    token = get_token_service().issue_access(user.id, email=user.email)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture(scope="function")
def test_user(db):
    """Create a test user."""
    return make_user(db, "alice", "alice@example.com")


@pytest.fixture(scope="function")
def other_user(db):
    return make_user(db, "bob", "bob@example.com")


@pytest.fixture(scope="function")
def admin_user(db):
    return make_user(db, "root", "admin@example.com", is_admin=True)


@pytest.fixture(scope="function")
def auth_headers(test_user):
    """Get auth headers for the test user."""
    return bearer(test_user)


@pytest.fixture(scope="function")
def other_headers(other_user):
    return bearer(other_user)


@pytest.fixture(scope="function")
def admin_headers(admin_user):
    return bearer(admin_user)
