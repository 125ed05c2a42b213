import random
from typing import Any, Callable, Dict, Optional

from miniapp.exercises.base import BaseExercise, OnComplete
from miniapp.exercises.choice import FillInTheBlankExercise, QuizExercise, WordPuzzleExercise
from miniapp.exercises.memory_match import MemoryMatchExercise
from miniapp.exercises.reading import ReadingExercise
from miniapp.exercises.sentence_builder import SentenceBuilderExercise
from miniapp.schemas.exercise_schemas import ExerciseType, parse_content

ExerciseFactory = Callable[[Any, Optional[OnComplete], random.Random], BaseExercise]


class ExerciseRegistry:
    def __init__(self):
        self._factories: Dict[ExerciseType, ExerciseFactory] = {}

    def register(self, exercise_type: ExerciseType, factory: ExerciseFactory) -> None:
        if exercise_type in self._factories:
            raise ValueError(f"Exercise type {exercise_type.value} already registered")
        self._factories[exercise_type] = factory

    def missing(self) -> list[ExerciseType]:
        return [t for t in ExerciseType if t not in self._factories]

    def build(
        self,
        exercise_type: ExerciseType | str,
        content: Any,
        on_complete: Optional[OnComplete] = None,
        rng: Optional[random.Random] = None,
    ) -> BaseExercise:
        """Validate raw content for the type and construct its engine."""
        parsed = parse_content(exercise_type, content)
        etype = ExerciseType(exercise_type)
        return self._factories[etype](parsed, on_complete, rng or random.Random())

    def list_types(self) -> list[str]:
        return [t.value for t in self._factories]


def build_registry() -> ExerciseRegistry:
    registry = ExerciseRegistry()

    registry.register(ExerciseType.QUIZ, lambda c, cb, rng: QuizExercise(c, cb))
    # Same engine as quiz; the audio clip is played by the client.
    registry.register(ExerciseType.AUDIO_QUIZ, lambda c, cb, rng: QuizExercise(c, cb))
    registry.register(ExerciseType.FILL_IN_THE_BLANK, lambda c, cb, rng: FillInTheBlankExercise(c, cb))
    registry.register(ExerciseType.WORD_PUZZLE, lambda c, cb, rng: WordPuzzleExercise(c, cb))
    registry.register(ExerciseType.SENTENCE_BUILDER, lambda c, cb, rng: SentenceBuilderExercise(c, cb, rng))
    registry.register(ExerciseType.READING, lambda c, cb, rng: ReadingExercise(c, cb))
    registry.register(ExerciseType.MEMORY_MATCH, lambda c, cb, rng: MemoryMatchExercise(c, cb, rng))

    missing = registry.missing()
    if missing:
        raise RuntimeError(f"No exercise engine registered for: {', '.join(t.value for t in missing)}")
    return registry


REGISTRY = build_registry()


def build_exercise(
    exercise_type: ExerciseType | str,
    content: Any,
    on_complete: Optional[OnComplete] = None,
    rng: Optional[random.Random] = None,
) -> BaseExercise:
    return REGISTRY.build(exercise_type, content, on_complete, rng)
