"""Pytest configuration and shared fixtures."""
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi import FastAPI
from fastapi.testclient import TestClient

# Import all models to ensure they are registered with Base.metadata
from shared.models.entities import *  # noqa: F401,F403
from shared.models.entities import Base
from database import get_db
from auth.dependencies import require_admin


@pytest.fixture(scope="function")
def db_session():
    """
    Create a test database session with in-memory SQLite.

    A StaticPool keeps the single in-memory database alive across the
    connections the TestClient thread opens.
    """
    engine = create_engine(
        "sqlite:///:memory:",
        echo=False,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)

    SessionLocal = sessionmaker(bind=engine)
    session = SessionLocal()

    yield session

    session.close()
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def make_client(db_session):
    """
    Build a TestClient for the given routers, backed by ``db_session``.

    Admin auth is bypassed; auth itself is covered in unit/test_exceptions_and_auth.py.
    """
    def _make(*routers):
        app = FastAPI()
        for router in routers:
            app.include_router(router)
        app.dependency_overrides[get_db] = lambda: db_session
        app.dependency_overrides[require_admin] = lambda: "admin"
        return TestClient(app)

    return _make


@pytest.fixture
def mock_llm_service(mocker):
    """Mock chat model for testing without API calls."""
    mock_llm = mocker.Mock()
    mock_llm.chat.return_value = {
        "output_text": "Great answer!",
        "usage": {"input_tokens": 100, "output_tokens": 50, "total_tokens": 150},
    }
    return mock_llm


@pytest.fixture
def session_factory(db_session):
    """Create a session through the service layer."""
    from tutor.services.session_service import CourseSessionService

    def _create(session_id="sess-1", course_type="build-apps", difficulty="default"):
        return CourseSessionService(db_session).create_session(
            session_id, course_type=course_type, difficulty=difficulty
        )

    return _create
