from typing import Callable, Optional

from miniapp.exercises.base import (
    MAX_SCORE,
    AutoAdvance,
    BaseExercise,
    Completion,
    ExerciseState,
    Transition,
    feedback,
)
from miniapp.schemas.exercise_schemas import ReadingContent, ReadingQuestion


def reading_score(correct_count: int, total: int) -> int:
    # Half-up rounding, so 1 of 2 gives 50 and 2 of 3 gives 67.
    if total <= 0:
        return 0
    return int(MAX_SCORE * correct_count / total + 0.5)


class ReadingExercise(BaseExercise):
    """
    A text followed by sub-questions answered one at a time. Each answer
    locks, then advance() moves to the next question; after the last one the
    exercise completes with partial-credit scoring. The completion is flagged
    correct when at least one sub-answer was right.
    """

    content: ReadingContent

    def __init__(self, content, on_complete=None):
        super().__init__(content, on_complete)
        self.index = 0
        self.answers: list[Optional[str]] = [None] * len(content.questions)

    @property
    def actions(self) -> dict[str, Callable[..., Transition]]:
        return {**super().actions, "select": self.select}

    @property
    def current_question(self) -> ReadingQuestion:
        return self.content.questions[self.index]

    @property
    def is_last_question(self) -> bool:
        return self.index == len(self.content.questions) - 1

    @property
    def correct_count(self) -> int:
        return sum(
            1 for answer, q in zip(self.answers, self.content.questions) if answer is not None and answer == q.correct
        )

    def select(self, option: str) -> Transition:
        if self.state != ExerciseState.UNANSWERED:
            return self._noop()
        self.answers[self.index] = option
        self.state = ExerciseState.ANSWERED
        return Transition(
            self.state,
            (feedback(option == self.current_question.correct), AutoAdvance(self.advance_delay_ms)),
        )

    def advance(self) -> Transition:
        if self.state != ExerciseState.ANSWERED:
            return self._noop()
        if not self.is_last_question:
            self.index += 1
            self.state = ExerciseState.UNANSWERED
            return Transition(self.state)
        count = self.correct_count
        self._result = Completion(correct=count > 0, score=reading_score(count, len(self.content.questions)))
        return self._complete()

    def view(self) -> dict:
        q = self.current_question
        return {
            **super().view(),
            "text": self.content.text,
            "question_index": self.index,
            "question_count": len(self.content.questions),
            "question": q.question,
            "choices": list(q.options),
            "selected": self.answers[self.index],
        }
