"""
Lesson runner: plays a lesson's exercises in order, totals session XP and
reports every outcome to a progress recorder.

States: loading -> running(index) -> completed, or loading -> empty when the
lesson has no playable exercises (or they could not be fetched). Saving
progress is best effort; a failed save is logged and counted, and the lesson
goes on.
"""

import logging
import random
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional, Protocol

from miniapp.errors import ValidationError
from miniapp.exercises.base import MAX_SCORE, BaseExercise, Transition
from miniapp.exercises.registry import build_exercise
from miniapp.models.models import Exercise
from miniapp.services.user_service import SessionContext

logger = logging.getLogger(__name__)

LESSON_COMPLETION_XP = 50

# Actions whose argument needs a specific type; the rest take str or nothing.
_ARG_TYPES: dict[str, type] = {"add_word": int, "remove_word": int, "select": str, "flip": str}


class RunnerState(str, Enum):
    LOADING = "loading"
    RUNNING = "running"
    COMPLETED = "completed"
    EMPTY = "empty"


@dataclass(frozen=True)
class LessonExercise:
    id: str
    type: str
    order: int
    xp_reward: int
    content: dict

    @classmethod
    def from_model(cls, exercise: Exercise) -> "LessonExercise":
        return cls(
            id=exercise.id,
            type=exercise.type,
            order=int(exercise.order),
            xp_reward=int(exercise.xp_reward),
            content=dict(exercise.content_json or {}),
        )


ExerciseLoader = Callable[[str], list[LessonExercise]]


class ProgressSink(Protocol):
    def record(
        self,
        context: SessionContext,
        lesson_id: str,
        exercise_id: Optional[str] = None,
        completed: bool = False,
        xp_earned: int = 0,
        score: Optional[int] = None,
    ) -> Any: ...


class LessonRunner:
    def __init__(
        self,
        context: SessionContext,
        lesson_id: str,
        loader: ExerciseLoader,
        recorder: Optional[ProgressSink] = None,
        *,
        completion_xp: int = LESSON_COMPLETION_XP,
        rng: Optional[random.Random] = None,
    ):
        self.context = context
        self.lesson_id = lesson_id
        self.loader = loader
        self.recorder = recorder
        self.completion_xp = completion_xp
        self.rng = rng or random.Random()

        self.state = RunnerState.LOADING
        self.exercises: list[LessonExercise] = []
        self.index = 0
        self.xp_total = 0
        self.failed_saves = 0
        self.played = 0
        self.active: Optional[BaseExercise] = None

    # -----Public API-----

    def attach(self, recorder: Optional[ProgressSink]) -> None:
        """Swap the recorder, e.g. to bind a fresh DB session per request."""
        self.recorder = recorder

    def load(self) -> RunnerState:
        if self.state != RunnerState.LOADING:
            return self.state
        try:
            self.exercises = list(self.loader(self.lesson_id))
        except Exception:
            # No retry: an unreachable exercise list is shown as an empty lesson.
            logger.exception("exercise list fetch failed lesson=%s", self.lesson_id)
            self.exercises = []
        if not self.exercises:
            self.state = RunnerState.EMPTY
            return self.state
        self.state = RunnerState.RUNNING
        self._start_current()
        return self.state

    @property
    def current(self) -> Optional[LessonExercise]:
        if self.state != RunnerState.RUNNING or self.index >= len(self.exercises):
            return None
        return self.exercises[self.index]

    def act(self, action: str, value: Any = None) -> Transition:
        """Feed one input to the active exercise."""
        if self.state != RunnerState.RUNNING or self.active is None:
            raise ValidationError(f"Lesson is {self.state.value}; no exercise is active")
        handler = self.active.actions.get(action)
        if handler is None:
            raise ValidationError(f"Unknown action '{action}' for {self.current.type}")
        arg_type = _ARG_TYPES.get(action)
        if arg_type is None:
            return handler()
        if value is None:
            raise ValidationError(f"Action '{action}' needs a value")
        try:
            return handler(arg_type(value))
        except (TypeError, ValueError):
            raise ValidationError(f"Action '{action}' needs a {arg_type.__name__} value")

    def on_exercise_complete(self, correct: bool, score: Optional[int] = None) -> None:
        """Completion callback handed to every exercise engine."""
        exercise = self.current
        if exercise is None:
            return
        self.played += 1
        earned = exercise.xp_reward if correct else 0
        self.xp_total += earned
        self._save(exercise_id=exercise.id, completed=False, xp_earned=earned, score=score)
        self.index += 1
        self._start_current()

    def snapshot(self) -> dict:
        current = self.current
        return {
            "lesson_id": self.lesson_id,
            "state": self.state.value,
            "index": self.index,
            "total": len(self.exercises),
            "xp_total": self.xp_total,
            "failed_saves": self.failed_saves,
            "exercise": (
                {
                    "id": current.id,
                    "type": current.type,
                    "order": current.order,
                    "xp_reward": current.xp_reward,
                    "view": self.active.view() if self.active else {},
                }
                if current
                else None
            ),
        }

    # -----Helpers-----

    def _start_current(self) -> None:
        self.active = None
        while self.index < len(self.exercises):
            exercise = self.exercises[self.index]
            try:
                self.active = build_exercise(
                    exercise.type, exercise.content, on_complete=self.on_exercise_complete, rng=self.rng
                )
                return
            except ValidationError as e:
                logger.warning("skipping unplayable exercise id=%s type=%s: %s", exercise.id, exercise.type, e.detail)
                self.index += 1
        if self.played == 0:
            # Nothing was playable; no completion bonus without a single answer.
            logger.warning("no playable exercises lesson=%s", self.lesson_id)
            self.state = RunnerState.EMPTY
            return
        self._finish()

    def _finish(self) -> None:
        self.state = RunnerState.COMPLETED
        self.xp_total += self.completion_xp
        self._save(exercise_id=None, completed=True, xp_earned=self.completion_xp, score=MAX_SCORE)
        logger.info(
            "lesson completed lesson=%s telegram_id=%s xp_total=%s failed_saves=%s",
            self.lesson_id,
            self.context.telegram_id,
            self.xp_total,
            self.failed_saves,
        )

    def _save(self, *, exercise_id: Optional[str], completed: bool, xp_earned: int, score: Optional[int]) -> None:
        if self.recorder is None:
            return
        try:
            self.recorder.record(
                self.context,
                self.lesson_id,
                exercise_id=exercise_id,
                completed=completed,
                xp_earned=xp_earned,
                score=score,
            )
        except Exception:
            # Save failures never interrupt the lesson.
            self.failed_saves += 1
            logger.exception("progress save failed lesson=%s exercise=%s", self.lesson_id, exercise_id)
