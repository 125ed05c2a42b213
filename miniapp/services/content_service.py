"""
Lessons and exercises: listing for players, creation for content editors.
"""

import logging
from datetime import datetime
from typing import Any, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session as DBSession

from miniapp.config import get_settings
from miniapp.errors import ConflictError, LessonNotFound, PersistenceError, ValidationError
from miniapp.models.levels import LEVEL_ORDER, CefrLevel
from miniapp.models.models import Exercise, Lesson
from miniapp.schemas.exercise_schemas import ExerciseType, parse_content

logger = logging.getLogger(__name__)


def _level_rank(lesson: Lesson) -> int:
    try:
        return CefrLevel(lesson.level).rank
    except ValueError:
        return len(LEVEL_ORDER)


class ContentService:
    def __init__(self, db: DBSession):
        self.db = db

    # ---- Lessons ----

    def list_lessons(self, level: Optional[str] = None) -> list[Lesson]:
        """Lessons ordered by CEFR level, then by order within the level."""
        try:
            q = self.db.query(Lesson)
            if level:
                q = q.filter(Lesson.level == level)
            lessons = q.order_by(Lesson.order.asc()).all()
        except SQLAlchemyError as e:
            logger.exception("lesson listing failed level=%s", level)
            raise PersistenceError(f"Could not load lessons: {e.__class__.__name__}")
        return sorted(lessons, key=lambda l: (_level_rank(l), l.order))

    def get_lesson(self, lesson_id: str) -> Lesson:
        try:
            lesson = self.db.query(Lesson).filter(Lesson.id == lesson_id).first()
        except SQLAlchemyError as e:
            raise PersistenceError(f"Could not load lesson: {e.__class__.__name__}")
        if lesson is None:
            raise LessonNotFound(lesson_id)
        return lesson

    def create_lesson(self, *, title: str, level: CefrLevel | str, order: int, description: str) -> Lesson:
        level = CefrLevel(level).value
        if self.db.query(Lesson.id).filter(Lesson.level == level, Lesson.order == order).first():
            raise ConflictError(f"Lesson with order {order} already exists for level {level}")
        now = datetime.utcnow()
        lesson = Lesson(title=title, level=level, order=order, description=description, created_at=now, updated_at=now)
        self._save(lesson, conflict=f"Lesson with order {order} already exists for level {level}")
        logger.info("lesson created id=%s level=%s order=%s", lesson.id, level, order)
        return lesson

    # ---- Exercises ----

    def list_exercises(self, lesson_id: Optional[str] = None) -> list[Exercise]:
        try:
            q = self.db.query(Exercise)
            if lesson_id:
                q = q.filter(Exercise.lesson_id == lesson_id)
            return q.order_by(Exercise.lesson_id.asc(), Exercise.order.asc()).all()
        except SQLAlchemyError as e:
            logger.exception("exercise listing failed lesson_id=%s", lesson_id)
            raise PersistenceError(f"Could not load exercises: {e.__class__.__name__}")

    def create_exercise(
        self,
        *,
        lesson_id: str,
        exercise_type: ExerciseType | str,
        order: int,
        content: Any,
        xp_reward: Optional[int] = None,
    ) -> Exercise:
        parsed = parse_content(exercise_type, content)
        xp_reward = get_settings().default_xp_reward if xp_reward is None else int(xp_reward)
        if xp_reward <= 0:
            raise ValidationError("xp_reward must be a positive integer")

        self.get_lesson(lesson_id)
        if self.db.query(Exercise.id).filter(Exercise.lesson_id == lesson_id, Exercise.order == order).first():
            raise ConflictError(f"Exercise with order {order} already exists for this lesson")

        now = datetime.utcnow()
        exercise = Exercise(
            lesson_id=lesson_id,
            type=ExerciseType(exercise_type).value,
            order=order,
            content_json=parsed.model_dump(),
            xp_reward=xp_reward,
            created_at=now,
            updated_at=now,
        )
        self._save(exercise, conflict=f"Exercise with order {order} already exists for this lesson")
        logger.info("exercise created id=%s lesson_id=%s type=%s", exercise.id, lesson_id, exercise.type)
        return exercise

    # -----Helpers-----

    def _save(self, entity, *, conflict: str) -> None:
        try:
            self.db.add(entity)
            self.db.commit()
            self.db.refresh(entity)
        except IntegrityError:
            # Lost a race with a concurrent insert of the same order.
            self.db.rollback()
            raise ConflictError(conflict)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception("content write failed")
            raise PersistenceError(f"Could not save content: {e.__class__.__name__}")
