"""
Pytest configuration and shared fixtures for the test suite.
Ensures proper Python path and provides common fixtures for unit and integration tests.
"""
import os
import sys
from datetime import datetime
from pathlib import Path

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Settings are cached on first use; point the app at a throwaway database first.
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("LOG_DIR", str(Path(__file__).parent / ".logs"))

# Add project root to Python path for imports
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))


QUIZ_CONTENT = {
    "question": "How do you say 'кошка' in English?",
    "options": ["dog", "cat", "cow", "fox"],
    "correct": "cat",
}

FILL_CONTENT = {
    "sentence": "She ___ to school every day.",
    "options": ["go", "goes", "going"],
    "correct": "goes",
}


# ----- In-memory DB (for tests that need DB without touching real DB) -----
@pytest.fixture
def in_memory_engine():
    """Single shared in-memory SQLite connection, so every session sees the same tables."""
    return create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )


@pytest.fixture
def db_session(in_memory_engine):
    """Create an in-memory database session. Uses miniapp.config.Base for schema."""
    import miniapp.models  # noqa: F401
    from miniapp.config import Base

    Base.metadata.create_all(in_memory_engine)
    SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=in_memory_engine)
    session = SessionLocal()
    yield session
    session.close()
    Base.metadata.drop_all(in_memory_engine)


@pytest.fixture
def test_user(db_session):
    """An onboarded A1 user with no XP."""
    from miniapp.models.models import User

    user = User(
        telegram_id=111222333,
        nickname="alice",
        avatar="🦊",
        level="A1",
        theme="light",
        is_onboarded=True,
        total_xp=0,
        xp=0,
        current_streak=0,
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def legacy_user(db_session):
    """A row written before the profile migration: only username/first_name/xp."""
    from miniapp.models.models import User

    user = User(
        telegram_id=444555666,
        username="old_timer",
        first_name="Bob",
        level="A1",
        xp=40,
        total_xp=None,
        avatar=None,
        nickname=None,
        is_onboarded=None,
        current_streak=None,
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture
def test_lesson(db_session):
    """A1 lesson with a quiz and a fill-in-the-blank exercise, 10 XP each."""
    from miniapp.models.models import Exercise, Lesson

    now = datetime.utcnow()
    lesson = Lesson(title="Animals", description="Basic animal words", level="A1", order=1, created_at=now, updated_at=now)
    db_session.add(lesson)
    db_session.commit()
    db_session.refresh(lesson)
    db_session.add_all(
        [
            Exercise(lesson_id=lesson.id, type="quiz", order=1, content_json=QUIZ_CONTENT, xp_reward=10),
            Exercise(lesson_id=lesson.id, type="fill-in-the-blank", order=2, content_json=FILL_CONTENT, xp_reward=10),
        ]
    )
    db_session.commit()
    db_session.refresh(lesson)
    return lesson
