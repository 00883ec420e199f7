"""
Pytest configuration file for all tests.
This file is automatically loaded by pytest.
"""

import os
import sys
import pytest
from unittest.mock import AsyncMock, MagicMock
from dotenv import load_dotenv
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Add the project root to the Python path
sys.path.insert(0, os.path.abspath(os.path.dirname(os.path.dirname(__file__))))

# Load test environment variables
def load_test_env():
    """Load environment variables from .env.test file"""
    # Get the project root directory
    root_dir = os.path.abspath(os.path.dirname(os.path.dirname(__file__)))

    # Path to .env.test file
    env_test_path = os.path.join(root_dir, '.env.test')

    # Load environment variables from .env.test
    if os.path.exists(env_test_path):
        print(f"Loading test environment from: {env_test_path}")
        load_dotenv(env_test_path, override=True)
        return True
    else:
        print(f"Warning: Test environment file not found: {env_test_path}")
        return False

# Load test environment variables before the app reads its settings
load_test_env()

from app.main import app
from app.core.database import Base, get_db, get_session_factory
from app.core.rate_limit import SlidingWindowRateLimiter, get_search_rate_limiter
from app.modules.auth.models import User, UserRole, SubscriptionTier, SubscriptionStatus
from app.modules.auth.services import get_password_hash, create_access_token
from app.modules.search.client import PccClient, get_pcc_client

TEST_PASSWORD = "Test123!"


def _enable_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


@pytest.fixture
def engine():
    """In-memory SQLite database shared by every session of a test"""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    event.listen(engine, "connect", _enable_foreign_keys)
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def pcc_client():
    """Procurement API client double; tests set the return values they need"""
    client = MagicMock(spec=PccClient)
    client.search_tenders = AsyncMock(return_value=[])
    client.fetch_tender_history = AsyncMock(return_value=[])
    return client


@pytest.fixture
def rate_limiter():
    return SlidingWindowRateLimiter(limit=1000, window_seconds=60)


@pytest.fixture
def client(session_factory, pcc_client, rate_limiter):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    app.dependency_overrides[get_pcc_client] = lambda: pcc_client
    app.dependency_overrides[get_search_rate_limiter] = lambda: rate_limiter

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
def make_user(db_session):
    """Factory creating users directly in the test database"""
    def _make_user(email="user@example.com", role=UserRole.CLIENT.value,
                   tier=SubscriptionTier.FREE.value, status=None):
        user = User(
            email=email,
            password_hash=get_password_hash(TEST_PASSWORD),
            role=role,
            subscription_tier=tier,
            subscription_status=status
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user
    return _make_user


@pytest.fixture
def user(make_user):
    return make_user()


@pytest.fixture
def pro_user(make_user):
    return make_user(
        email="pro@example.com",
        tier=SubscriptionTier.PRO.value,
        status=SubscriptionStatus.ACTIVE.value
    )


def auth_headers_for(user):
    token = create_access_token(user)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers(user):
    return auth_headers_for(user)


@pytest.fixture
def headers_for():
    return auth_headers_for
