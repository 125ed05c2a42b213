"""
Integration test fixtures. Overrides get_db for API tests with in-memory DB.
"""
import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool


@pytest.fixture
def override_get_db():
    """Create in-memory engine and session factory for API tests."""
    import miniapp.models  # noqa: F401
    from miniapp.config import Base

    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    def _get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    return _get_db


@pytest.fixture
def api_client(override_get_db):
    """FastAPI TestClient with in-memory DB override."""
    from fastapi.testclient import TestClient
    from miniapp.api import app
    from miniapp.config import get_db

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture
def onboarded_user(api_client):
    """Create a user through the onboarding endpoint; returns the profile."""
    response = api_client.post(
        "/api/users",
        json={"telegramId": 1001, "nickname": "learner_1", "avatar": "🐻", "level": "A1", "theme": "dark"},
    )
    assert response.status_code == 201
    return response.json()["user"]


@pytest.fixture
def seeded_lesson(api_client):
    """A1 lesson with quiz (10 XP) and fill-in-the-blank (10 XP) exercises."""
    lesson = api_client.post(
        "/api/lessons",
        json={"title": "Greetings", "level": "A1", "order": 1, "description": "Say hello"},
    ).json()["lesson"]
    api_client.post(
        "/api/exercises",
        json={
            "lessonId": lesson["id"],
            "type": "quiz",
            "order": 1,
            "xpReward": 10,
            "content": {"question": "'Привет' means?", "options": ["Hello", "Bye", "Thanks", "Sorry"], "correct": "Hello"},
        },
    )
    api_client.post(
        "/api/exercises",
        json={
            "lessonId": lesson["id"],
            "type": "fill-in-the-blank",
            "order": 2,
            "content": {"sentence": "Good ___!", "options": ["morning", "table"], "correct": "morning"},
        },
    )
    return lesson
