"""
Deck builder for quiz sessions.

Derives the working deck from the catalog by:
1. Filtering on active categories
2. Optionally shuffling
3. Capping at the session length
"""

import logging
import random
from collections.abc import Iterable, Sequence

from ridquiz.application.catalog import VocabularyCatalog
from ridquiz.domain.models import VocabEntry
from ridquiz.domain.settings import QuizSettings

logger = logging.getLogger(__name__)


def build_deck(
    entries: Sequence[VocabEntry],
    active_categories: Iterable[str],
    shuffle: bool,
    session_length: int,
    rng: random.Random | None = None,
) -> list[VocabEntry]:
    """
    Build an ordered working deck.

    Args:
        entries: Catalog entries in catalog order.
        active_categories: Category filter. Empty means every entry passes;
            otherwise an entry must share at least one category with it, so
            uncategorized entries never pass an active filter.
        shuffle: Uniformly random order instead of catalog order.
        session_length: Maximum deck size. 0 means no cap.
        rng: Random source, for reproducible shuffles.

    Returns:
        A new list; may be empty.
    """
    selected = set(active_categories)
    if selected:
        deck = [e for e in entries if e.categories and not selected.isdisjoint(e.categories)]
    else:
        deck = list(entries)

    if shuffle:
        (rng or random).shuffle(deck)

    if session_length < 0:
        logger.warning(f"Ignoring negative session length {session_length}")
        session_length = 0

    if session_length > 0:
        deck = deck[:session_length]

    return deck


def build_deck_from_settings(
    catalog: VocabularyCatalog,
    settings: QuizSettings,
    rng: random.Random | None = None,
) -> list[VocabEntry]:
    """Build a deck using the filter, shuffle and length stored in settings."""
    deck = build_deck(
        catalog.all(),
        settings.active_categories,
        settings.shuffle,
        settings.session_length,
        rng,
    )
    logger.debug(
        f"Built deck of {len(deck)}/{len(catalog)} words "
        f"(categories={sorted(settings.active_categories)}, shuffle={settings.shuffle}, "
        f"length={settings.session_length})"
    )
    return deck
