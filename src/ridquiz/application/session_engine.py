"""
Quiz session engine.

Sequences two-step cards (meaning, then gender) over a working deck, grants
score at most once per correct sub-answer, keeps a short back-navigation
history, and tracks missed words for a focused retry.

Every mutating operation is total: calls that do not apply in the current
state are rejected (return False) instead of raising.
"""

import logging
import random

from ridquiz.application.card_state import CardStateStore
from ridquiz.application.catalog import VocabularyCatalog
from ridquiz.application.deck_builder import build_deck_from_settings
from ridquiz.domain.constants import BACK_HISTORY_LIMIT, MEANING_OPTION_COUNT, SCORE_STEP
from ridquiz.domain.models import (
    CardState,
    Phase,
    SessionState,
    SessionSummary,
    VocabEntry,
)
from ridquiz.domain.ports import NotificationSink, SettingsStore
from ridquiz.infrastructure.notifications import NullNotificationSink

logger = logging.getLogger(__name__)


class QuizSession:
    """
    The single active quiz session.

    Depends on the SettingsStore and NotificationSink abstractions; the
    settings are read afresh at every rebuild.
    """

    def __init__(
        self,
        catalog: VocabularyCatalog,
        settings_store: SettingsStore,
        notifier: NotificationSink | None = None,
        rng: random.Random | None = None,
        cards: CardStateStore | None = None,
    ):
        """
        Args:
            catalog: Words to draw decks from.
            settings_store: Source of shuffle/length/filter/speech settings.
            notifier: Feedback sink; defaults to one that does nothing.
            rng: Random source for shuffles and answer options.
            cards: Card state store; a fresh one by default.
        """
        self._catalog = catalog
        self._settings_store = settings_store
        self._notifier = notifier or NullNotificationSink()
        self._rng = rng or random.Random()
        self._cards = cards if cards is not None else CardStateStore()
        self._state = SessionState()
        self.rebuild_working_deck()

    # --- Read accessors ---

    @property
    def working_deck(self) -> list[VocabEntry]:
        return list(self._state.working_deck)

    @property
    def current_index(self) -> int:
        return self._state.current_index

    @property
    def current(self) -> VocabEntry | None:
        deck = self._state.working_deck
        if 0 <= self._state.current_index < len(deck):
            return deck[self._state.current_index]
        return None

    @property
    def current_state(self) -> CardState | None:
        entry = self.current
        if entry is None:
            return None
        return self._cards.get(entry.id)

    @property
    def phase(self) -> Phase | None:
        state = self.current_state
        return state.phase if state else None

    @property
    def meaning_options(self) -> list[str]:
        return list(self._state.meaning_options)

    @property
    def score(self) -> float:
        return self._state.score

    @property
    def total_asked(self) -> int:
        return self._state.total_asked

    @property
    def score_text(self) -> str:
        return f"Score: {self._state.score:.1f} / {self._state.total_asked}"

    @property
    def counter_text(self) -> str:
        deck = self._state.working_deck
        if not deck:
            return ""
        return f"Word {self._state.current_index + 1} of {len(deck)}"

    @property
    def progress(self) -> float:
        """Fraction of the deck done, with partial credit for the current card."""
        n = len(self._state.working_deck)
        if n == 0:
            return 0.0
        base = self._state.current_index / n
        phase = self.phase
        if phase == Phase.AWAITING_GENDER:
            return min(1.0, base + 0.5 / n)
        if phase == Phase.COMPLETED:
            return min(1.0, base + 1.0 / n)
        return base

    @property
    def can_go_back(self) -> bool:
        return bool(self._state.back_history)

    @property
    def back_history(self) -> list[int]:
        return list(self._state.back_history)

    @property
    def show_summary(self) -> bool:
        return self._state.show_summary

    @property
    def missed_items(self) -> list[VocabEntry]:
        return list(self._state.missed_items)

    def summary(self) -> SessionSummary:
        total = self._state.total_asked
        missed = len(self._state.missed_items)
        correct = max(0, total - missed)
        accuracy = int(correct * 100 / total + 0.5) if total > 0 else 0
        return SessionSummary(
            total=total,
            correct=correct,
            missed=missed,
            accuracy=accuracy,
            missed_items=tuple(self._state.missed_items),
        )

    # --- Answering ---

    def submit_meaning(self, choice: str) -> bool:
        """
        Answer the meaning question of the current card.

        Returns:
            True if the answer was accepted, False if there is no current
            card or it is not awaiting a meaning.
        """
        entry = self.current
        if entry is None or self.phase != Phase.AWAITING_MEANING:
            logger.debug(f"submit_meaning({choice!r}) rejected in phase {self.phase}")
            return False

        is_correct = choice == entry.meaning
        granted = False

        def apply(st: CardState) -> None:
            nonlocal granted
            st.selected_meaning = choice
            st.meaning_correct = is_correct
            if is_correct and not st.meaning_scored:
                st.meaning_scored = True
                granted = True
            st.phase = Phase.AWAITING_GENDER

        self._cards.update(entry.id, apply)
        if granted:
            self._state.score += SCORE_STEP
            self._notify(self._notifier.notify_correct)
        elif not is_correct:
            self._notify(self._notifier.notify_incorrect)
        return True

    def submit_gender(self, choice: str) -> bool:
        """
        Answer the gender question of the current card, completing it.

        Returns:
            True if the answer was accepted, False if there is no current
            card or it is not awaiting a gender.
        """
        entry = self.current
        if entry is None or self.phase != Phase.AWAITING_GENDER:
            logger.debug(f"submit_gender({choice!r}) rejected in phase {self.phase}")
            return False

        is_correct = choice == entry.gender
        granted = False
        first_completion = False

        def apply(st: CardState) -> None:
            nonlocal granted, first_completion
            st.selected_gender = choice
            st.gender_correct = is_correct
            if is_correct and not st.gender_scored:
                st.gender_scored = True
                granted = True
            first_completion = st.phase != Phase.COMPLETED
            st.phase = Phase.COMPLETED

        state = self._cards.update(entry.id, apply)
        if granted:
            self._state.score += SCORE_STEP
            self._notify(self._notifier.notify_correct)
        elif not is_correct:
            self._notify(self._notifier.notify_incorrect)

        if first_completion:
            self._state.total_asked += 1

        if not state.fully_correct and all(m.id != entry.id for m in self._state.missed_items):
            self._state.missed_items.append(entry)
        return True

    # --- Navigation ---

    def next(self) -> bool:
        """
        Move to the next card, or flag the summary when the deck is exhausted.

        Returns:
            True if the index advanced.
        """
        if not self._state.working_deck:
            return False

        history = self._state.back_history
        if not history or history[-1] != self._state.current_index:
            history.append(self._state.current_index)
            del history[:-BACK_HISTORY_LIMIT]

        advanced = self._state.current_index + 1 < len(self._state.working_deck)
        if advanced:
            self._state.current_index += 1
        else:
            self._state.show_summary = True

        self.prime_card()
        return advanced

    def previous(self) -> bool:
        """Return to the most recently left card. False when history is empty."""
        if not self._state.back_history:
            return False
        self._state.current_index = self._state.back_history.pop()
        self.prime_card()
        return True

    def prime_card(self) -> None:
        """Create state for the current card if needed and regenerate its options."""
        entry = self.current
        if entry is None:
            self._state.meaning_options = []
            return
        self._cards.get_or_create(entry.id)
        self._state.meaning_options = self._make_meaning_options(entry)

    def _make_meaning_options(self, entry: VocabEntry) -> list[str]:
        options = {entry.meaning}
        pool = list(self._state.working_deck)
        self._rng.shuffle(pool)
        while len(options) < MEANING_OPTION_COUNT and pool:
            options.add(pool.pop().meaning)
        # Sort first so the seeded shuffle does not depend on set ordering
        result = sorted(options)
        self._rng.shuffle(result)
        return result

    # --- Session lifecycle ---

    def reset_score(self) -> None:
        """Zero the score and let already-answered cards be scored again."""
        self._state.score = 0.0
        self._state.total_asked = 0
        self._cards.reset_score_flags()

    def rebuild_working_deck(self) -> None:
        """Start over with a deck derived from the current settings."""
        settings = self._settings_store.load()
        deck = build_deck_from_settings(self._catalog, settings, self._rng)
        self._start(deck)
        self._state.missed_items = []
        logger.info(f"New session with {len(deck)} words")

    def start_new_session_from_filters(self) -> None:
        self.rebuild_working_deck()
        self._state.show_summary = False

    def retry_missed_only(self) -> bool:
        """
        Start a session over the missed words only, in random order.

        Returns:
            False (and only hides the summary) when nothing was missed.
        """
        if not self._state.missed_items:
            self._state.show_summary = False
            return False
        deck = list(self._state.missed_items)
        self._rng.shuffle(deck)
        self._start(deck)
        self._state.missed_items = []
        logger.info(f"Retrying {len(deck)} missed words")
        return True

    def toggle_category(self, name: str) -> bool:
        """
        Flip a category in the persisted filter and rebuild the deck.

        Returns:
            True if the category is now active.
        """
        settings = self._settings_store.load()
        active = set(settings.active_categories)
        if name in active:
            active.discard(name)
        else:
            if name not in self._catalog.categories():
                logger.info(f"Category {name!r} is not in the catalog; it matches no words")
            active.add(name)
        self._settings_store.save(settings.model_copy(update={"active_categories": active}))
        self.rebuild_working_deck()
        return name in active

    def speak_current_word(self) -> bool:
        entry = self.current
        if entry is None:
            return False
        settings = self._settings_store.load()
        self._notify(self._notifier.speak, entry.word, settings.speech_rate, settings.speech_enabled)
        return True

    def _start(self, deck: list[VocabEntry]) -> None:
        self._state.working_deck = deck
        self._state.current_index = 0
        self._state.back_history = []
        self._state.score = 0.0
        self._state.total_asked = 0
        self._state.show_summary = False
        self._cards.clear_all()
        self.prime_card()

    def _notify(self, fn, *args) -> None:
        try:
            fn(*args)
        except Exception as e:
            logger.warning(f"Notification {getattr(fn, '__name__', fn)} failed: {e}")
