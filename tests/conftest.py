"""
Shared fixtures: an in-memory SQLite store swapped in for the real database.
"""
import os
import tempfile

# Must be set before app modules read their config
os.environ.setdefault("SECRET_KEY", "test-secret-key")
os.environ.setdefault("BCRYPT_ROUNDS", "4")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("LOG_DIR", tempfile.mkdtemp(prefix="gradtrack-logs-"))

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app.main import app
from app.db.base import Base
from app.db.session import get_db, register_sqlite_functions
from app.core.rate_limit import reset_rate_limits
from app.core.security import create_access_token
from app.services import user_service


# Setup in-memory SQLite database for testing
TEST_DATABASE_URL = "sqlite:///:memory:"
test_engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
register_sqlite_functions(test_engine)
TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)


def override_get_db():
    """Override get_db dependency for testing."""
    db = TestSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(scope="function", autouse=True)
def setup_db():
    """Create and drop tables for each test."""
    Base.metadata.create_all(bind=test_engine)
    reset_rate_limits()
    yield
    Base.metadata.drop_all(bind=test_engine)


@pytest.fixture
def db():
    """Provide a database session for tests."""
    db = TestSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def test_user(db):
    return user_service.create_user(db, "alice@example.com", "testpass123", "Alice")


@pytest.fixture
def other_user(db):
    return user_service.create_user(db, "bob@example.com", "testpass456", "Bob")


@pytest.fixture
def auth_headers(test_user):
    return {"Authorization": f"Bearer {create_access_token(test_user.id)}"}


@pytest.fixture
def other_headers(other_user):
    return {"Authorization": f"Bearer {create_access_token(other_user.id)}"}


@pytest.fixture
def application_fields():
    """A complete, valid application body."""
    return {
        "universityName": "Technical University of Munich",
        "degree": "MSc Informatics",
        "numberOfSemesters": 4,
        "applicationPortal": "https://www.tum.de/apply",
        "city": "Munich",
        "country": "Germany",
        "location": "Garching Campus",
        "startingSemester": "Winter 2025",
        "tuitionFees": 3000,
        "livingExpenses": 12000,
        "documentsRequired": ["CV", "Transcript"],
        "deadline": "2025-05-31",
    }
