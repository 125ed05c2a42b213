from datetime import datetime
from uuid import uuid4

from sqlalchemy import (
    JSON,
    BigInteger,
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    text,
)
from sqlalchemy.orm import relationship

from miniapp.config import Base


def _uuid() -> str:
    return str(uuid4())


class User(Base):
    __tablename__ = "users"
    id = Column(String, primary_key=True, default=_uuid)  # uuid
    telegram_id = Column(BigInteger, unique=True, index=True, nullable=False)

    nickname = Column(String, nullable=True, index=True)
    avatar = Column(String, nullable=True)
    level = Column(String, nullable=False, default="A1")  # A1..C2
    theme = Column(String, nullable=True, default="light")  # light|dark
    is_onboarded = Column(Boolean, nullable=True, default=True)
    total_xp = Column(Integer, nullable=True, default=0)
    current_streak = Column(Integer, nullable=True, default=0)
    last_activity_date = Column(Date, nullable=True)

    # Pre-migration columns; still read and written until every row has the new ones.
    username = Column(String, nullable=True, index=True)
    first_name = Column(String, nullable=True)
    xp = Column(Integer, nullable=True, default=0)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    progress = relationship("UserProgress", backref="user", cascade="all, delete-orphan")


class Lesson(Base):
    __tablename__ = "lessons"
    __table_args__ = (UniqueConstraint("level", "order", name="uq_lessons_level_order"),)
    id = Column(String, primary_key=True, default=_uuid)  # uuid
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    level = Column(String, nullable=False, index=True)
    order = Column(Integer, nullable=False)  # 1-based within level
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, nullable=False)

    exercises = relationship(
        "Exercise",
        backref="lesson",
        cascade="all, delete-orphan",
        order_by="Exercise.order",
    )


class Exercise(Base):
    __tablename__ = "exercises"
    __table_args__ = (UniqueConstraint("lesson_id", "order", name="uq_exercises_lesson_order"),)
    id = Column(String, primary_key=True, default=_uuid)  # uuid
    lesson_id = Column(String, ForeignKey("lessons.id", ondelete="CASCADE"), index=True, nullable=False)
    type = Column(String, nullable=False)  # see miniapp.exercises.ExerciseType
    content_json = Column(JSON, nullable=False)
    xp_reward = Column(Integer, nullable=False, default=10)
    order = Column(Integer, nullable=False)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, nullable=False)


class UserProgress(Base):
    __tablename__ = "user_progress"
    __table_args__ = (
        UniqueConstraint("user_id", "exercise_id", name="uq_user_progress_user_exercise"),
        # NULL exercise_id marks the lesson-level row; one per (user, lesson).
        Index(
            "uq_user_progress_user_lesson",
            "user_id",
            "lesson_id",
            unique=True,
            sqlite_where=text("exercise_id IS NULL"),
            postgresql_where=text("exercise_id IS NULL"),
        ),
    )
    id = Column(String, primary_key=True, default=_uuid)  # uuid
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), index=True, nullable=False)
    lesson_id = Column(String, ForeignKey("lessons.id", ondelete="CASCADE"), index=True, nullable=False)
    exercise_id = Column(String, ForeignKey("exercises.id", ondelete="CASCADE"), nullable=True)
    completed = Column(Boolean, default=False, nullable=False)
    score = Column(Integer, nullable=True)
    completed_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime, default=datetime.utcnow, nullable=False)
