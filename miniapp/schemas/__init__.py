"""
API schemas package. Import from submodules or from this package.

Example:
    from miniapp.schemas import RecordProgressRequest, UserProfile
    from miniapp.schemas.exercise_schemas import parse_content
"""

from miniapp.schemas.exercise_schemas import (
    ExerciseType,
    QuizContent,
    AudioQuizContent,
    FillInTheBlankContent,
    WordPuzzleContent,
    SentenceBuilderContent,
    ReadingContent,
    ReadingQuestion,
    MemoryMatchContent,
    WordPair,
    parse_content,
    LessonResponse,
    LessonListResponse,
    CreateLessonRequest,
    CreateLessonResponse,
    LessonSummary,
    ExerciseResponse,
    ExerciseListResponse,
    CreateExerciseRequest,
    CreateExerciseResponse,
)
from miniapp.schemas.user_schemas import (
    UserProfile,
    UserResponse,
    CreateUserRequest,
    UpdateUserRequest,
    NicknameCheckResponse,
)
from miniapp.schemas.progress_schemas import (
    RecordProgressRequest,
    ProgressRecord,
    RecordProgressResponse,
    ProgressStats,
    ProgressOverviewResponse,
)
from miniapp.schemas.play_schemas import (
    StartPlayRequest,
    PlayActionRequest,
    PlayExercise,
    PlaySnapshot,
    CompletionResponse,
    TransitionResponse,
    PlayActionResponse,
)

__all__ = [
    # exercise content
    "ExerciseType",
    "QuizContent",
    "AudioQuizContent",
    "FillInTheBlankContent",
    "WordPuzzleContent",
    "SentenceBuilderContent",
    "ReadingContent",
    "ReadingQuestion",
    "MemoryMatchContent",
    "WordPair",
    "parse_content",
    # lessons / exercises
    "LessonResponse",
    "LessonListResponse",
    "CreateLessonRequest",
    "CreateLessonResponse",
    "LessonSummary",
    "ExerciseResponse",
    "ExerciseListResponse",
    "CreateExerciseRequest",
    "CreateExerciseResponse",
    # users
    "UserProfile",
    "UserResponse",
    "CreateUserRequest",
    "UpdateUserRequest",
    "NicknameCheckResponse",
    # progress
    "RecordProgressRequest",
    "ProgressRecord",
    "RecordProgressResponse",
    "ProgressStats",
    "ProgressOverviewResponse",
    # play
    "StartPlayRequest",
    "PlayActionRequest",
    "PlayExercise",
    "PlaySnapshot",
    "CompletionResponse",
    "TransitionResponse",
    "PlayActionResponse",
]
