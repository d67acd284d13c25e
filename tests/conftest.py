"""
Test configuration and fixtures for the link page service.
This centralizes all test setup, making individual tests clean.
"""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from main import app
from linkpage_app.cache.strategies import InMemoryCache
from linkpage_app.database.connection import Base, get_db
from linkpage_app.dependencies import get_cache, get_session_factory
from linkpage_app.schemas.user import CurrentUser

# Test database configuration
SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"
engine = create_engine(SQLALCHEMY_DATABASE_URL, connect_args={"check_same_thread": False})
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """
    Create a fresh database session for each test.
    This ensures tests are isolated and don't affect each other.
    """
    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()

    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def cache():
    """A private in-memory cache per test"""
    return InMemoryCache()


@pytest.fixture(scope="function")
def client(db_session, cache):
    """
    Create a test client with database, cache and background session
    dependencies overridden.
    """
    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_cache] = lambda: cache
    app.dependency_overrides[get_session_factory] = lambda: TestingSessionLocal

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def headers():
    """
    Build identity headers as the auth gateway would send them.

    Defaults to a pro caller, whose new pages start without starter blocks.
    """
    def _headers(user_id: str = "alice", plan: str = "pro", role: str = "tenant"):
        return {"X-User-Id": user_id, "X-User-Plan": plan, "X-User-Role": role}
    return _headers


@pytest.fixture
def alice():
    return CurrentUser(user_id="alice", plan="free")


@pytest.fixture
def pro_user():
    return CurrentUser(user_id="paula", plan="pro")


@pytest.fixture
def session_factory():
    """The factory background trackers use to open their own sessions"""
    return TestingSessionLocal
