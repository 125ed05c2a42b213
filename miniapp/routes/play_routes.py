"""
Play endpoints: run a lesson's exercises server-side, one action at a time.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from miniapp.config import get_db
from miniapp.schemas.play_schemas import (
    PlayActionRequest,
    PlayActionResponse,
    PlaySnapshot,
    StartPlayRequest,
    TransitionResponse,
)
from miniapp.services.play_service import PlayService, snapshot
from miniapp.services.user_service import SessionContext

play_routes = APIRouter()


@play_routes.post("/lessons/{lesson_id}/play", response_model=PlaySnapshot, status_code=201)
async def start_play(lesson_id: str, body: StartPlayRequest, db: Session = Depends(get_db)) -> PlaySnapshot:
    """Start a lesson. An empty lesson comes back in the "empty" state, not "completed"."""
    session_id, runner = PlayService(db).start(SessionContext(telegram_id=body.telegram_id), lesson_id)
    return PlaySnapshot(**snapshot(session_id, runner))


@play_routes.get("/play/{session_id}", response_model=PlaySnapshot)
async def get_play(session_id: str, db: Session = Depends(get_db)) -> PlaySnapshot:
    runner = PlayService(db).get(session_id)
    return PlaySnapshot(**snapshot(session_id, runner))


@play_routes.post("/play/{session_id}/actions", response_model=PlayActionResponse)
async def play_action(
    session_id: str,
    body: PlayActionRequest,
    db: Session = Depends(get_db),
) -> PlayActionResponse:
    """
    Apply one input to the current exercise. After an answer locks, the
    response carries an auto_advance effect; post "advance" once its delay has
    passed to complete the exercise and move on.
    """
    transition, runner = PlayService(db).act(session_id, body.action, body.value)
    return PlayActionResponse(
        transition=TransitionResponse(**transition),
        session=PlaySnapshot(**snapshot(session_id, runner)),
    )
