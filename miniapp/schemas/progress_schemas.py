"""
Progress recording and progress overview schemas.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from miniapp.schemas.exercise_schemas import LessonResponse
from miniapp.schemas.user_schemas import UserProfile


class RecordProgressRequest(BaseModel):
    """Accepts the web client's camelCase keys as well as snake_case."""
    model_config = ConfigDict(populate_by_name=True)

    telegram_id: int = Field(alias="telegramId")
    lesson_id: str = Field(alias="lessonId", min_length=1)
    exercise_id: Optional[str] = Field(default=None, alias="exerciseId")
    completed: bool = False
    xp_earned: int = Field(default=0, alias="xpEarned", ge=0)
    score: Optional[int] = Field(default=None, ge=0, le=100)


class ProgressRecord(BaseModel):
    id: str
    user_id: str
    lesson_id: str
    exercise_id: Optional[str] = None
    completed: bool
    score: Optional[int] = None
    completed_at: Optional[str] = None
    created_at: Optional[str] = None
    updated_at: Optional[str] = None


class RecordProgressResponse(BaseModel):
    success: bool
    progress: ProgressRecord
    xp_earned: int  # XP actually credited; 0 when the XP update failed
    partial: bool = False  # progress saved but XP update failed
    message: str


class ProgressStats(BaseModel):
    total_lessons: int
    completed_lessons: int
    total_xp: int
    current_streak: int
    xp_for_next_level: int
    xp_level: str  # CEFR level the total XP alone would reach
    next_lesson: Optional[LessonResponse] = None


class ProgressOverviewResponse(BaseModel):
    user: UserProfile
    lessons: list[LessonResponse]
    progress: list[ProgressRecord]
    stats: ProgressStats
