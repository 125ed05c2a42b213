from abc import ABC
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional

OnComplete = Callable[[bool, int], None]

MAX_SCORE = 100


class ExerciseState(str, Enum):
    UNANSWERED = "unanswered"
    ANSWERED = "answered"
    COMPLETED = "completed"


class HapticStyle(str, Enum):
    LIGHT = "light"
    HEAVY = "heavy"


@dataclass(frozen=True)
class Haptic:
    """Tactile feedback request for the host app; light on success, heavy on failure."""
    style: HapticStyle
    kind: str = field(default="haptic", init=False)


@dataclass(frozen=True)
class AutoAdvance:
    """The host should call advance() once delay_ms has elapsed."""
    delay_ms: int
    kind: str = field(default="auto_advance", init=False)


@dataclass(frozen=True)
class HideCards:
    card_ids: tuple[str, ...]
    delay_ms: int
    kind: str = field(default="hide_cards", init=False)


Effect = Haptic | AutoAdvance | HideCards


@dataclass(frozen=True)
class Completion:
    correct: bool
    score: int


@dataclass(frozen=True)
class Transition:
    state: ExerciseState
    effects: tuple[Effect, ...] = ()
    completion: Optional[Completion] = None


def feedback(correct: bool) -> Haptic:
    return Haptic(HapticStyle.LIGHT if correct else HapticStyle.HEAVY)


class BaseExercise(ABC):
    """
    Lifecycle shared by every exercise: unanswered -> answered -> completed.

    Subclasses lock an answer through _lock(); the host fires advance() after
    the AutoAdvance delay, which emits the Completion and calls on_complete.
    Completion happens at most once per instance. Input arriving after an
    answer is locked is ignored and yields an empty transition.
    """

    advance_delay_ms = 1500

    def __init__(self, content: Any, on_complete: Optional[OnComplete] = None):
        self.content = content
        self.on_complete = on_complete
        self.state = ExerciseState.UNANSWERED
        self._result: Optional[Completion] = None

    # -----Public API-----

    @property
    def actions(self) -> dict[str, Callable[..., Transition]]:
        """Input handlers by name; every exercise accepts "advance"."""
        return {"advance": self.advance}

    @property
    def result(self) -> Optional[Completion]:
        return self._result if self.state == ExerciseState.COMPLETED else None

    def advance(self) -> Transition:
        if self.state != ExerciseState.ANSWERED:
            return self._noop()
        return self._complete()

    def view(self) -> dict:
        """Public, JSON-friendly snapshot of the interaction state."""
        return {"state": self.state.value}

    # -----Helpers-----

    def _noop(self) -> Transition:
        return Transition(self.state)

    def _lock(self, correct: bool, score: int, *extra_effects: Effect) -> Transition:
        self._result = Completion(correct=correct, score=score)
        self.state = ExerciseState.ANSWERED
        return Transition(
            self.state,
            (feedback(correct), *extra_effects, AutoAdvance(self.advance_delay_ms)),
        )

    def _complete(self) -> Transition:
        assert self._result is not None
        self.state = ExerciseState.COMPLETED
        if self.on_complete is not None:
            self.on_complete(self._result.correct, self._result.score)
        return Transition(self.state, (), self._result)
