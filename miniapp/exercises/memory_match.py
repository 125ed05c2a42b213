import random
from dataclasses import dataclass
from typing import Callable, Optional

from miniapp.exercises.base import (
    MAX_SCORE,
    BaseExercise,
    ExerciseState,
    HapticStyle,
    Haptic,
    HideCards,
    Transition,
)
from miniapp.schemas.exercise_schemas import MemoryMatchContent

MISMATCH_PENALTY = 10


@dataclass(frozen=True)
class Card:
    id: str
    text: str
    language: str  # english|russian
    pair_id: str


def build_deck(content: MemoryMatchContent, rng: random.Random) -> list[Card]:
    deck: list[Card] = []
    for index, pair in enumerate(content.word_pairs):
        pair_id = f"pair-{index}"
        deck.append(Card(id=f"en-{index}", text=pair.english, language="english", pair_id=pair_id))
        deck.append(Card(id=f"ru-{index}", text=pair.russian, language="russian", pair_id=pair_id))
    rng.shuffle(deck)
    return deck


class MemoryMatchExercise(BaseExercise):
    """
    Flip two cards at a time looking for English/Russian pairs. Every
    mismatched pair costs 10 points (never below 0). The game has no failing
    end: it completes, always correct, once every pair has been matched.
    """

    content: MemoryMatchContent
    reveal_ms = 500
    mismatch_reveal_ms = 1000

    def __init__(self, content, on_complete=None, rng: Optional[random.Random] = None):
        super().__init__(content, on_complete)
        self.deck = build_deck(content, rng or random.Random())
        self._cards = {c.id: c for c in self.deck}
        self.selected: list[str] = []
        self.matched_pairs: list[str] = []
        self.score = MAX_SCORE
        self.mistakes = 0

    @property
    def actions(self) -> dict[str, Callable[..., Transition]]:
        return {**super().actions, "flip": self.flip}

    @property
    def pair_count(self) -> int:
        return len(self.content.word_pairs)

    def flip(self, card_id: str) -> Transition:
        card = self._cards.get(card_id)
        if (
            self.state != ExerciseState.UNANSWERED
            or card is None
            or card_id in self.selected
            or card.pair_id in self.matched_pairs
        ):
            return self._noop()

        self.selected.append(card_id)
        if len(self.selected) < 2:
            return self._noop()

        first, second = (self._cards[cid] for cid in self.selected)
        shown = (first.id, second.id)
        self.selected = []
        if first.pair_id != second.pair_id:
            self.mistakes += 1
            self.score = max(0, self.score - MISMATCH_PENALTY)
            return Transition(
                self.state,
                (Haptic(HapticStyle.HEAVY), HideCards(shown, self.mismatch_reveal_ms)),
            )

        self.matched_pairs.append(first.pair_id)
        if len(self.matched_pairs) < self.pair_count:
            return Transition(self.state, (Haptic(HapticStyle.LIGHT), HideCards(shown, self.reveal_ms)))
        return self._lock(True, self.score, HideCards(shown, self.reveal_ms))

    def view(self) -> dict:
        return {
            **super().view(),
            "cards": [
                {
                    "id": c.id,
                    "text": c.text,
                    "language": c.language,
                    "matched": c.pair_id in self.matched_pairs,
                    "selected": c.id in self.selected,
                }
                for c in self.deck
            ],
            "matched_pairs": len(self.matched_pairs),
            "pair_count": self.pair_count,
            "score": self.score,
            "mistakes": self.mistakes,
        }
