"""
Exercise content payloads (one shape per exercise type) and the
lesson/exercise request and response models.
"""

import json
from enum import Enum
from typing import Any, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from miniapp.errors import ValidationError
from miniapp.models.levels import CefrLevel

BLANK = "___"


class ExerciseType(str, Enum):
    QUIZ = "quiz"
    FILL_IN_THE_BLANK = "fill-in-the-blank"
    WORD_PUZZLE = "word-puzzle"
    SENTENCE_BUILDER = "sentence-builder"
    READING = "reading"
    MEMORY_MATCH = "memory-match"
    AUDIO_QUIZ = "audio-quiz"


class _Content(BaseModel):
    model_config = ConfigDict(frozen=True)


class QuizContent(_Content):
    question: str
    options: list[str] = Field(min_length=4, max_length=4)
    correct: str


class AudioQuizContent(QuizContent):
    audio_url: str


class FillInTheBlankContent(_Content):
    sentence: str
    options: list[str] = Field(min_length=1)
    correct: str

    @field_validator("sentence")
    @classmethod
    def one_blank(cls, v: str) -> str:
        if v.count(BLANK) != 1:
            raise ValueError(f"sentence must contain exactly one '{BLANK}' placeholder")
        return v


class WordPuzzleContent(_Content):
    target: str
    words: list[str] = Field(min_length=1)


class SentenceBuilderContent(_Content):
    translation: str
    correct_order: list[str] = Field(min_length=1)
    extra_words: list[str] = Field(default_factory=list)


class ReadingQuestion(_Content):
    question: str
    options: list[str] = Field(min_length=1)
    correct: str


class ReadingContent(_Content):
    text: str
    questions: list[ReadingQuestion] = Field(min_length=1)


class WordPair(_Content):
    english: str
    russian: str


class MemoryMatchContent(_Content):
    word_pairs: list[WordPair] = Field(min_length=1)


CONTENT_MODELS: dict[ExerciseType, type[_Content]] = {
    ExerciseType.QUIZ: QuizContent,
    ExerciseType.AUDIO_QUIZ: AudioQuizContent,
    ExerciseType.FILL_IN_THE_BLANK: FillInTheBlankContent,
    ExerciseType.WORD_PUZZLE: WordPuzzleContent,
    ExerciseType.SENTENCE_BUILDER: SentenceBuilderContent,
    ExerciseType.READING: ReadingContent,
    ExerciseType.MEMORY_MATCH: MemoryMatchContent,
}


def parse_content(exercise_type: Union[ExerciseType, str], raw: Any) -> _Content:
    """Validate a raw payload (dict or JSON string) against the type's content shape."""
    try:
        etype = ExerciseType(exercise_type)
    except ValueError:
        raise ValidationError(f"Unknown exercise type: {exercise_type}")
    if isinstance(raw, str):
        try:
            raw = json.loads(raw)
        except json.JSONDecodeError:
            raise ValidationError("Invalid JSON format in content")
    if not isinstance(raw, dict):
        raise ValidationError("Exercise content must be a JSON object")
    try:
        return CONTENT_MODELS[etype].model_validate(raw)
    except PydanticValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc']) or 'content'}: {err['msg']}" for err in e.errors()
        )
        raise ValidationError(f"Invalid {etype.value} content: {problems}")


# ---- Lessons ----

class LessonResponse(BaseModel):
    id: str
    title: str
    description: Optional[str] = None
    level: str
    order: int
    created_at: str
    updated_at: str


class LessonListResponse(BaseModel):
    lessons: list[LessonResponse]


class CreateLessonRequest(BaseModel):
    title: str = Field(min_length=1)
    level: CefrLevel
    order: int = Field(ge=1)
    description: str = Field(min_length=1)


class CreateLessonResponse(BaseModel):
    lesson: LessonResponse


# ---- Exercises ----

class LessonSummary(BaseModel):
    id: str
    title: str
    level: str


class ExerciseResponse(BaseModel):
    id: str
    lesson_id: str
    type: str
    order: int
    content_json: dict
    xp_reward: int
    created_at: str
    updated_at: str
    lessons: Optional[LessonSummary] = None


class ExerciseListResponse(BaseModel):
    exercises: list[ExerciseResponse]


class CreateExerciseRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    lesson_id: str = Field(alias="lessonId")
    type: ExerciseType
    order: int = Field(ge=1)
    content: Union[dict, str]
    xp_reward: Optional[int] = Field(default=None, alias="xpReward", gt=0)


class CreateExerciseResponse(BaseModel):
    exercise: ExerciseResponse
