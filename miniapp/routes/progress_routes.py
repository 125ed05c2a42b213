"""
Progress endpoints: per-user overview and completion recording.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from miniapp.config import get_db
from miniapp.schemas.progress_schemas import (
    ProgressOverviewResponse,
    RecordProgressRequest,
    RecordProgressResponse,
)
from miniapp.services.progress_service import ProgressRecorder
from miniapp.services.user_service import SessionContext

progress_routes = APIRouter()


@progress_routes.get("/users/progress", response_model=ProgressOverviewResponse)
async def get_progress(
    telegram_id: str = Query(..., description="Telegram user id"),
    db: Session = Depends(get_db),
) -> ProgressOverviewResponse:
    """Lessons at the user's level with progress rows and summary stats."""
    overview = ProgressRecorder(db).overview(SessionContext.from_raw(telegram_id))
    return ProgressOverviewResponse(**overview)


@progress_routes.post("/users/progress", response_model=RecordProgressResponse)
async def record_progress(body: RecordProgressRequest, db: Session = Depends(get_db)) -> RecordProgressResponse:
    """
    Record an exercise or lesson completion. Repeating a call updates the same
    row; xpEarned is added to the stored total, never written as an absolute.
    """
    result = ProgressRecorder(db).record(
        SessionContext(telegram_id=body.telegram_id),
        body.lesson_id,
        exercise_id=body.exercise_id,
        completed=body.completed,
        xp_earned=body.xp_earned,
        score=body.score,
    )
    return RecordProgressResponse(**result.to_dict())
