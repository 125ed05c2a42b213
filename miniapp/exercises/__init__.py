"""
Exercise engine: one state machine per exercise type.

Transitions return plain data (new state, effect requests, optional
completion) so the engine can run without a UI or a database.
"""

from miniapp.exercises.base import (
    AutoAdvance,
    BaseExercise,
    Completion,
    ExerciseState,
    Haptic,
    HapticStyle,
    HideCards,
    Transition,
)
from miniapp.exercises.choice import FillInTheBlankExercise, QuizExercise, WordPuzzleExercise
from miniapp.exercises.memory_match import MemoryMatchExercise
from miniapp.exercises.reading import ReadingExercise
from miniapp.exercises.registry import REGISTRY, ExerciseRegistry, build_exercise, build_registry
from miniapp.exercises.sentence_builder import SentenceBuilderExercise
from miniapp.schemas.exercise_schemas import ExerciseType

__all__ = [
    "AutoAdvance",
    "BaseExercise",
    "Completion",
    "ExerciseState",
    "Haptic",
    "HapticStyle",
    "HideCards",
    "Transition",
    "QuizExercise",
    "FillInTheBlankExercise",
    "WordPuzzleExercise",
    "SentenceBuilderExercise",
    "ReadingExercise",
    "MemoryMatchExercise",
    "ExerciseRegistry",
    "ExerciseType",
    "REGISTRY",
    "build_exercise",
    "build_registry",
]
