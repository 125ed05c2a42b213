"""
Single-pick exercises: one option is chosen and the answer locks immediately.
"""

from abc import abstractmethod
from typing import Callable, Optional

from miniapp.exercises.base import MAX_SCORE, BaseExercise, ExerciseState, Transition
from miniapp.schemas.exercise_schemas import FillInTheBlankContent, QuizContent, WordPuzzleContent


class ChoiceExercise(BaseExercise):
    def __init__(self, content, on_complete=None):
        super().__init__(content, on_complete)
        self.selected: Optional[str] = None

    @property
    @abstractmethod
    def answer(self) -> str:
        ...

    @property
    @abstractmethod
    def choices(self) -> list[str]:
        ...

    @property
    def actions(self) -> dict[str, Callable[..., Transition]]:
        return {**super().actions, "select": self.select}

    def select(self, option: str) -> Transition:
        if self.state != ExerciseState.UNANSWERED:
            return self._noop()
        self.selected = option
        correct = option == self.answer
        return self._lock(correct, MAX_SCORE if correct else 0)

    def view(self) -> dict:
        return {**super().view(), "choices": list(self.choices), "selected": self.selected}


class QuizExercise(ChoiceExercise):
    content: QuizContent

    @property
    def answer(self) -> str:
        return self.content.correct

    @property
    def choices(self) -> list[str]:
        return self.content.options


class FillInTheBlankExercise(ChoiceExercise):
    content: FillInTheBlankContent

    @property
    def answer(self) -> str:
        return self.content.correct

    @property
    def choices(self) -> list[str]:
        return self.content.options

    def filled_sentence(self) -> str:
        return self.content.sentence.replace("___", f"[{self.selected or '___'}]", 1)

    def view(self) -> dict:
        return {**super().view(), "sentence": self.filled_sentence()}


class WordPuzzleExercise(ChoiceExercise):
    content: WordPuzzleContent

    @property
    def answer(self) -> str:
        return self.content.target

    @property
    def choices(self) -> list[str]:
        return self.content.words
