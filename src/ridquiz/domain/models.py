"""
Domain models for the quiz.

These are pure data structures with no I/O or external dependencies.
"""

from dataclasses import dataclass, field
from enum import Enum


class Gender(str, Enum):
    """Grammatical gender of a noun. Compares equal to its plain string value."""

    MASCULINE = "masculine"
    FEMININE = "feminine"
    NEUTER = "neuter"

    def __str__(self) -> str:
        return self.value


class Phase(str, Enum):
    """Position of a card in its two-step answer sequence."""

    AWAITING_MEANING = "awaiting_meaning"
    AWAITING_GENDER = "awaiting_gender"
    COMPLETED = "completed"

    @property
    def rank(self) -> int:
        return _PHASE_RANK[self]


_PHASE_RANK = {
    Phase.AWAITING_MEANING: 0,
    Phase.AWAITING_GENDER: 1,
    Phase.COMPLETED: 2,
}


@dataclass(frozen=True)
class VocabEntry:
    """
    A single vocabulary item.

    Attributes:
        id: Stable identifier assigned when the catalog is loaded.
        word: The word in the language being learned.
        meaning: Translation; also the correct answer token within a deck.
        gender: Grammatical gender.
        categories: Zero or more category tags.
    """

    id: str
    word: str
    meaning: str
    gender: Gender
    categories: frozenset[str] = frozenset()


@dataclass
class CardState:
    """
    Answer progress for one card in the working deck.

    The scored flags make score grants idempotent: each sub-question pays out
    at most once per card, however often the card is revisited.
    """

    selected_meaning: str | None = None
    selected_gender: str | None = None
    meaning_correct: bool | None = None
    gender_correct: bool | None = None
    phase: Phase = Phase.AWAITING_MEANING
    meaning_scored: bool = False
    gender_scored: bool = False

    @property
    def fully_correct(self) -> bool:
        # Unset counts as wrong
        return bool(self.meaning_correct) and bool(self.gender_correct)


@dataclass
class SessionState:
    """Mutable state of the active session, owned by the session engine."""

    working_deck: list[VocabEntry] = field(default_factory=list)
    current_index: int = 0
    score: float = 0.0
    total_asked: int = 0
    back_history: list[int] = field(default_factory=list)
    missed_items: list[VocabEntry] = field(default_factory=list)
    show_summary: bool = False
    meaning_options: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class SessionSummary:
    """End-of-session numbers shown when the deck is exhausted."""

    total: int
    correct: int
    missed: int
    accuracy: int  # whole percent
    missed_items: tuple[VocabEntry, ...] = ()

    @property
    def perfect(self) -> bool:
        return self.total > 0 and self.missed == 0
