"""
Lesson and exercise endpoints.
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from miniapp.config import get_db
from miniapp.schemas.exercise_schemas import (
    CreateExerciseRequest,
    CreateExerciseResponse,
    CreateLessonRequest,
    CreateLessonResponse,
    ExerciseListResponse,
    ExerciseResponse,
    LessonListResponse,
    LessonResponse,
)
from miniapp.services.content_service import ContentService
from miniapp.utils.common import exercise_to_dict, lesson_to_dict

content_routes = APIRouter()


@content_routes.get("/lessons", response_model=LessonListResponse)
async def list_lessons(
    level: Optional[str] = Query(None, description="CEFR level filter"),
    db: Session = Depends(get_db),
) -> LessonListResponse:
    lessons = ContentService(db).list_lessons(level=level)
    return LessonListResponse(lessons=[LessonResponse(**lesson_to_dict(l)) for l in lessons])


@content_routes.post("/lessons", response_model=CreateLessonResponse, status_code=201)
async def create_lesson(body: CreateLessonRequest, db: Session = Depends(get_db)) -> CreateLessonResponse:
    """Create a lesson; the (level, order) pair must be unused."""
    lesson = ContentService(db).create_lesson(
        title=body.title,
        level=body.level,
        order=body.order,
        description=body.description,
    )
    return CreateLessonResponse(lesson=LessonResponse(**lesson_to_dict(lesson)))


@content_routes.get("/exercises", response_model=ExerciseListResponse)
async def list_exercises(
    lesson_id: Optional[str] = Query(None),
    db: Session = Depends(get_db),
) -> ExerciseListResponse:
    exercises = ContentService(db).list_exercises(lesson_id=lesson_id)
    return ExerciseListResponse(exercises=[ExerciseResponse(**exercise_to_dict(e)) for e in exercises])


@content_routes.post("/exercises", response_model=CreateExerciseResponse, status_code=201)
async def create_exercise(body: CreateExerciseRequest, db: Session = Depends(get_db)) -> CreateExerciseResponse:
    """Create an exercise; content is validated against the shape of its type."""
    exercise = ContentService(db).create_exercise(
        lesson_id=body.lesson_id,
        exercise_type=body.type,
        order=body.order,
        content=body.content,
        xp_reward=body.xp_reward,
    )
    return CreateExerciseResponse(exercise=ExerciseResponse(**exercise_to_dict(exercise)))
