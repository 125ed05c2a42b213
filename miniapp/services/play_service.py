"""
In-process play sessions: one LessonRunner per started lesson, driven by
HTTP actions. A runner stays registered only while its lesson is running;
once it reaches completed or empty it is dropped, and the response that
finished it carries the final snapshot.
"""

import logging
import threading
from dataclasses import asdict
from typing import Any, Dict
from uuid import uuid4

from sqlalchemy.orm import Session as DBSession

from miniapp.config import get_settings
from miniapp.errors import NotFoundError
from miniapp.exercises.base import Transition
from miniapp.services.content_service import ContentService
from miniapp.services.lesson_runner import LessonExercise, LessonRunner, RunnerState
from miniapp.services.progress_service import ProgressRecorder
from miniapp.services.user_service import SessionContext, UserService

logger = logging.getLogger(__name__)

_runners: Dict[str, LessonRunner] = {}
_lock = threading.Lock()

FINISHED_STATES = (RunnerState.COMPLETED, RunnerState.EMPTY)


def transition_to_dict(transition: Transition) -> dict:
    effects = []
    for effect in transition.effects:
        data = asdict(effect)
        for key, value in data.items():
            if isinstance(value, tuple):
                data[key] = list(value)
            elif hasattr(value, "value"):
                data[key] = value.value
        effects.append(data)
    return {
        "state": transition.state.value,
        "effects": effects,
        "completion": asdict(transition.completion) if transition.completion else None,
    }


class PlayService:
    def __init__(self, db: DBSession):
        self.db = db

    def start(self, context: SessionContext, lesson_id: str) -> tuple[str, LessonRunner]:
        UserService(self.db).require_row(context.telegram_id)
        ContentService(self.db).get_lesson(lesson_id)

        runner = LessonRunner(
            context,
            lesson_id,
            loader=self._loader,
            recorder=ProgressRecorder(self.db),
            completion_xp=get_settings().lesson_completion_xp,
        )
        runner.load()
        runner.attach(None)
        session_id = str(uuid4())
        if runner.state not in FINISHED_STATES:
            with _lock:
                _runners[session_id] = runner
        logger.info(
            "play session started id=%s lesson=%s telegram_id=%s state=%s",
            session_id,
            lesson_id,
            context.telegram_id,
            runner.state.value,
        )
        return session_id, runner

    def get(self, session_id: str) -> LessonRunner:
        with _lock:
            runner = _runners.get(session_id)
        if runner is None:
            raise NotFoundError("Play session not found or already finished")
        return runner

    def act(self, session_id: str, action: str, value: Any = None) -> tuple[dict, LessonRunner]:
        runner = self.get(session_id)
        # Each request has its own DB session; rebind before the runner can save.
        runner.attach(ProgressRecorder(self.db))
        try:
            transition = runner.act(action, value)
        finally:
            runner.attach(None)
        if runner.state in FINISHED_STATES:
            self.end(session_id)
        return transition_to_dict(transition), runner

    def end(self, session_id: str) -> None:
        with _lock:
            runner = _runners.pop(session_id, None)
        if runner is not None:
            logger.info("play session ended id=%s state=%s", session_id, runner.state.value)

    def _loader(self, lesson_id: str) -> list[LessonExercise]:
        return [LessonExercise.from_model(e) for e in ContentService(self.db).list_exercises(lesson_id)]


def snapshot(session_id: str, runner: LessonRunner) -> dict:
    return {"session_id": session_id, **runner.snapshot()}
