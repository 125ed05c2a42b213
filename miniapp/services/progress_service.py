"""
Progress recording: turns completion events into user_progress rows and
additive XP credits on the user.

The progress upsert and the XP credit are two separate commits. If the credit
fails after the upsert succeeded the call still returns, flagged partial; a
repeated call is safe because the upsert updates the same row.
"""

import logging
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Optional

from sqlalchemy import func, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session as DBSession

from miniapp.errors import NotFoundError, PersistenceError
from miniapp.models.levels import level_for_xp, xp_for_next_level
from miniapp.models.models import Exercise, User, UserProgress
from miniapp.services.content_service import ContentService
from miniapp.services.user_service import SessionContext, UserService
from miniapp.utils.common import lesson_to_dict, normalize_user, progress_to_dict, today
from miniapp.utils.logger import log_request

logger = logging.getLogger(__name__)

LESSON_COMPLETED_MESSAGE = "Lesson completed!"
PROGRESS_SAVED_MESSAGE = "Progress saved!"


@dataclass
class ProgressResult:
    progress: UserProgress
    xp_applied: int
    partial: bool
    message: str

    def to_dict(self) -> dict:
        return {
            "success": True,
            "progress": progress_to_dict(self.progress),
            "xp_earned": self.xp_applied,
            "partial": self.partial,
            "message": self.message,
        }


def next_streak(current: int, last_activity: Optional[date], on: date) -> int:
    """Consecutive-day streak after activity on `on`."""
    if last_activity == on:
        return max(current, 1)
    if last_activity == on - timedelta(days=1):
        return current + 1
    return 1


class ProgressRecorder:
    def __init__(self, db: DBSession):
        self.db = db
        self.users = UserService(db)

    def record(
        self,
        context: SessionContext,
        lesson_id: str,
        exercise_id: Optional[str] = None,
        completed: bool = False,
        xp_earned: int = 0,
        score: Optional[int] = None,
    ) -> ProgressResult:
        user = self.users.require_row(context.telegram_id)
        ContentService(self.db).get_lesson(lesson_id)
        if exercise_id is not None:
            self._require_exercise(lesson_id, exercise_id)

        with log_request(logger, f"progress upsert user={user.id} lesson={lesson_id} exercise={exercise_id}"):
            progress = self._upsert(user.id, lesson_id, exercise_id, completed, score)

        xp_applied, partial = 0, False
        try:
            xp_applied = self._credit(user, max(0, int(xp_earned)))
        except SQLAlchemyError:
            self.db.rollback()
            partial = True
            logger.exception("xp credit failed after progress saved user=%s xp=%s", user.id, xp_earned)

        return ProgressResult(
            progress=progress,
            xp_applied=xp_applied,
            partial=partial,
            message=LESSON_COMPLETED_MESSAGE if completed else PROGRESS_SAVED_MESSAGE,
        )

    def overview(self, context: SessionContext) -> dict:
        """Profile, lessons at the user's level, progress rows and summary stats."""
        user = self.users.require_row(context.telegram_id)
        profile = normalize_user(user)
        lessons = ContentService(self.db).list_lessons(level=profile["level"])
        try:
            rows = self.db.query(UserProgress).filter(UserProgress.user_id == user.id).all()
        except SQLAlchemyError as e:
            logger.exception("progress listing failed user=%s", user.id)
            raise PersistenceError(f"Could not load progress: {e.__class__.__name__}")

        done = {p.lesson_id for p in rows if p.exercise_id is None and p.completed}
        next_lesson = next((l for l in lessons if l.id not in done), None)
        return {
            "user": profile,
            "lessons": [lesson_to_dict(l) for l in lessons],
            "progress": [progress_to_dict(p) for p in rows],
            "stats": {
                "total_lessons": len(lessons),
                "completed_lessons": sum(1 for l in lessons if l.id in done),
                "total_xp": profile["total_xp"],
                "current_streak": profile["current_streak"],
                "xp_for_next_level": xp_for_next_level(profile["level"]),
                "xp_level": level_for_xp(profile["total_xp"]).value,
                "next_lesson": lesson_to_dict(next_lesson) if next_lesson else None,
            },
        }

    # -----Helpers-----

    def _require_exercise(self, lesson_id: str, exercise_id: str) -> None:
        found = (
            self.db.query(Exercise.id)
            .filter(Exercise.id == exercise_id, Exercise.lesson_id == lesson_id)
            .first()
        )
        if found is None:
            raise NotFoundError("Exercise not found")

    def _find(self, user_id: str, lesson_id: str, exercise_id: Optional[str]) -> Optional[UserProgress]:
        q = self.db.query(UserProgress).filter(UserProgress.user_id == user_id)
        if exercise_id is not None:
            q = q.filter(UserProgress.exercise_id == exercise_id)
        else:
            q = q.filter(UserProgress.lesson_id == lesson_id, UserProgress.exercise_id.is_(None))
        return q.first()

    def _upsert(
        self,
        user_id: str,
        lesson_id: str,
        exercise_id: Optional[str],
        completed: bool,
        score: Optional[int],
    ) -> UserProgress:
        try:
            existing = self._find(user_id, lesson_id, exercise_id)
            if existing is None:
                try:
                    return self._insert(user_id, lesson_id, exercise_id, completed, score)
                except IntegrityError:
                    # A concurrent request inserted the same key first; update that row instead.
                    self.db.rollback()
                    existing = self._find(user_id, lesson_id, exercise_id)
                    if existing is None:
                        raise
            return self._update(existing, completed, score)
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.exception("progress upsert failed user=%s lesson=%s", user_id, lesson_id)
            raise PersistenceError(f"Could not save progress: {e.__class__.__name__}")

    def _insert(self, user_id, lesson_id, exercise_id, completed, score) -> UserProgress:
        now = datetime.utcnow()
        progress = UserProgress(
            user_id=user_id,
            lesson_id=lesson_id,
            exercise_id=exercise_id,
            completed=completed,
            score=score,
            completed_at=now if completed else None,
            created_at=now,
            updated_at=now,
        )
        self.db.add(progress)
        self.db.commit()
        self.db.refresh(progress)
        return progress

    def _update(self, progress: UserProgress, completed: bool, score: Optional[int]) -> UserProgress:
        now = datetime.utcnow()
        # A completed row is never reopened by a later non-completing event.
        progress.completed = bool(progress.completed) or completed
        if completed:
            progress.completed_at = now
        if score is not None:
            progress.score = score
        progress.updated_at = now
        self.db.add(progress)
        self.db.commit()
        self.db.refresh(progress)
        return progress

    def _credit(self, user: User, xp: int) -> int:
        """
        Add xp relative to the stored value in a single UPDATE and bump the
        activity streak. Returns the XP credited.
        """
        on = today()
        values = {
            "current_streak": next_streak(int(user.current_streak or 0), user.last_activity_date, on),
            "last_activity_date": on,
            "updated_at": datetime.utcnow(),
        }
        if xp > 0:
            stored = func.coalesce(User.total_xp, User.xp, 0)
            values["total_xp"] = stored + xp
            values["xp"] = stored + xp
        self.db.execute(
            update(User).where(User.id == user.id).values(**values).execution_options(synchronize_session=False)
        )
        self.db.commit()
        self.db.refresh(user)
        if xp > 0:
            logger.info("xp credited user=%s xp=%s total=%s", user.id, xp, user.total_xp)
        return xp
