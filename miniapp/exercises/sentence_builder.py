import random
from typing import Callable, Optional

from miniapp.exercises.base import MAX_SCORE, BaseExercise, ExerciseState, Transition
from miniapp.schemas.exercise_schemas import SentenceBuilderContent


class SentenceBuilderExercise(BaseExercise):
    """
    Build a sentence by moving words from a shuffled pool (correct words plus
    decoys) into an ordered sequence. check() locks the answer; only the exact
    correct_order counts.
    """

    advance_delay_ms = 2000
    content: SentenceBuilderContent

    def __init__(self, content, on_complete=None, rng: Optional[random.Random] = None):
        super().__init__(content, on_complete)
        self._rng = rng or random.Random()
        self.pool: list[str] = []
        self.built: list[str] = []
        self._shuffle_pool()

    @property
    def actions(self) -> dict[str, Callable[..., Transition]]:
        return {
            **super().actions,
            "add_word": self.add_word,
            "remove_word": self.remove_word,
            "reset": self.reset,
            "check": self.check,
        }

    @property
    def can_check(self) -> bool:
        return len(self.built) == len(self.content.correct_order)

    def add_word(self, position: int) -> Transition:
        """Move pool[position] to the end of the built sentence."""
        if self.state != ExerciseState.UNANSWERED or not 0 <= position < len(self.pool):
            return self._noop()
        self.built.append(self.pool.pop(position))
        return self._noop()

    def remove_word(self, position: int) -> Transition:
        """Move built[position] back to the end of the pool."""
        if self.state != ExerciseState.UNANSWERED or not 0 <= position < len(self.built):
            return self._noop()
        self.pool.append(self.built.pop(position))
        return self._noop()

    def reset(self) -> Transition:
        if self.state != ExerciseState.UNANSWERED:
            return self._noop()
        self.built = []
        self._shuffle_pool()
        return self._noop()

    def check(self) -> Transition:
        if self.state != ExerciseState.UNANSWERED:
            return self._noop()
        correct = self.built == list(self.content.correct_order)
        return self._lock(correct, MAX_SCORE if correct else 0)

    def view(self) -> dict:
        return {
            **super().view(),
            "translation": self.content.translation,
            "pool": list(self.pool),
            "built": list(self.built),
            "can_check": self.can_check,
        }

    def _shuffle_pool(self) -> None:
        self.pool = [*self.content.correct_order, *self.content.extra_words]
        self._rng.shuffle(self.pool)
