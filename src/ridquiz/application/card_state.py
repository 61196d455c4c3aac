"""Per-card answer state for the working deck, keyed by entry id."""

from collections.abc import Callable
from dataclasses import replace

from ridquiz.domain.models import CardState


class CardStateStore:
    """
    Holds one CardState per visited card.

    Single writer; states are created lazily and discarded on deck rebuild.
    """

    def __init__(self):
        self._states: dict[str, CardState] = {}

    def get(self, entry_id: str) -> CardState | None:
        return self._states.get(entry_id)

    def get_or_create(self, entry_id: str) -> CardState:
        state = self._states.get(entry_id)
        if state is None:
            state = CardState()
            self._states[entry_id] = state
        return state

    def update(self, entry_id: str, mutator: Callable[[CardState], None]) -> CardState:
        """
        Apply a mutation to a card's state and store the result.

        The mutator works on a copy; nothing is stored if it raises.

        Raises:
            ValueError: The mutation would move the phase backwards.
        """
        current = self.get_or_create(entry_id)
        draft = replace(current)
        mutator(draft)
        if draft.phase.rank < current.phase.rank:
            raise ValueError(
                f"Card {entry_id}: phase cannot go from {current.phase.value} "
                f"back to {draft.phase.value}"
            )
        self._states[entry_id] = draft
        return draft

    def reset_score_flags(self) -> None:
        """Forget granted scores; phases and selections are kept."""
        for state in self._states.values():
            state.meaning_scored = False
            state.gender_scored = False

    def clear_all(self) -> None:
        self._states.clear()

    def __len__(self) -> int:
        return len(self._states)

    def __contains__(self, entry_id: object) -> bool:
        return entry_id in self._states
