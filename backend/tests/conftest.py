"""Shared pytest fixtures for test suite"""
import os
import sys
from pathlib import Path
from typing import Generator
from unittest.mock import Mock, patch

import pytest

# Settings are read at import time
os.environ.setdefault("JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "test")

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

# Add backend directory to Python path
backend_dir = Path(__file__).parent.parent
if str(backend_dir) not in sys.path:
    sys.path.insert(0, str(backend_dir))

from app.main import app
from app.db.session import get_db
from app.models import Base
from app.models.api_key import ApiKey
from app.models.project import Project
from app.models.project_identity import ProjectIdentity
from app.models.user import User
from app.services.api_key_service import create_api_key
from app.services.auth_service import create_user
from app.services.session_service import SessionResolver


# SQLite in-memory database for testing
TEST_DATABASE_URL = "sqlite:///:memory:"

# Create test engine with StaticPool for in-memory database
test_engine = create_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

# Create test session factory
TestSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)

TEST_PASSWORD = "TestPassword123!"
TEST_MESSAGE_ID = "0100018e-test-message-id"


@pytest.fixture(scope="function")
def db_session() -> Generator[Session, None, None]:
    """Create a fresh SQLite in-memory database session for each test"""
    # Create all tables
    Base.metadata.create_all(bind=test_engine)

    # Create session
    session = TestSessionLocal()

    try:
        yield session
    finally:
        session.close()
        # Drop all tables after test
        Base.metadata.drop_all(bind=test_engine)


@pytest.fixture(scope="function")
def session_factory(db_session: Session) -> sessionmaker:
    """Session factory bound to the test database, for the session resolver"""
    return TestSessionLocal


@pytest.fixture(scope="function")
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """FastAPI test client with test database and a test session resolver"""

    # Override get_db dependency to use test database
    def override_get_db():
        try:
            yield db_session
        finally:
            pass  # Don't close session here, handled by fixture

    app.dependency_overrides[get_db] = override_get_db
    original_resolver = app.state.session_resolver
    app.state.session_resolver = SessionResolver(TestSessionLocal, development=False)

    try:
        with patch("app.main.init_db"):
            with TestClient(app) as test_client:
                yield test_client
    finally:
        # Cleanup - always clear overrides
        app.dependency_overrides.clear()
        app.state.session_resolver = original_resolver


@pytest.fixture(scope="function")
def test_user(db_session: Session) -> User:
    """Create a verified test user"""
    return create_user(
        email="hello@mly.fyi",
        password=TEST_PASSWORD,
        name="Mly Tester",
        db=db_session,
        verified=True
    )


@pytest.fixture(scope="function")
def project(db_session: Session) -> Project:
    """Project with SES credentials"""
    project = Project(
        name="Mly",
        access_key_id="AKIATESTKEY",
        secret_access_key="test-secret-access-key",
        region="eu-west-1"
    )
    db_session.add(project)
    db_session.commit()
    db_session.refresh(project)
    return project


@pytest.fixture(scope="function")
def identity(db_session: Session, project: Project) -> ProjectIdentity:
    """Verified mly.fyi identity with a configuration set"""
    identity = ProjectIdentity(
        project_id=project.id,
        domain="mly.fyi",
        status="success",
        configuration_set_name="mly-tracking"
    )
    db_session.add(identity)
    db_session.commit()
    db_session.refresh(identity)
    return identity


@pytest.fixture(scope="function")
def api_key(db_session: Session, project: Project) -> ApiKey:
    """Active API key for the test project"""
    return create_api_key(project.id, db_session)


@pytest.fixture(scope="function")
def api_headers(api_key: ApiKey) -> dict:
    return {"X-Mly-Api-Key": api_key.key}


@pytest.fixture(scope="function")
def mock_ses():
    """Mock SES client so no real email is sent"""
    ses_client = Mock()
    ses_client.send_email = Mock(return_value={"MessageId": TEST_MESSAGE_ID})
    with patch("app.services.email_provider.get_ses_client", return_value=ses_client) as factory:
        ses_client.factory = factory
        yield ses_client


@pytest.fixture(scope="function")
def valid_email_body() -> dict:
    return {
        "from": "hello@mly.fyi",
        "to": "a@b.com",
        "subject": "Hello",
        "text": "Hello World",
        "html": "<p>Hello World</p>",
    }
