import random
from unittest.mock import MagicMock

import pytest

from ridquiz.application.catalog import VocabularyCatalog, make_entry
from ridquiz.application.session_engine import QuizSession
from ridquiz.domain.ports import NotificationSink
from ridquiz.domain.settings import QuizSettings
from ridquiz.infrastructure.settings_store import InMemorySettingsStore


@pytest.fixture
def table():
    return make_entry("стіл", "table", "masculine", ["Objects", "Home"], entry_id="w_table")


@pytest.fixture
def book():
    return make_entry("книга", "book", "feminine", ["Objects", "School"], entry_id="w_book")


@pytest.fixture
def window():
    return make_entry("вікно", "window", "neuter", ["Objects", "Home"], entry_id="w_window")


@pytest.fixture
def small_catalog(table, book, window):
    """The three-word catalog used by the walkthrough scenarios."""
    return VocabularyCatalog([table, book, window])


@pytest.fixture
def large_catalog():
    """Ten words across a few categories, plus one uncategorized word."""
    rows = [
        ("хліб", "bread", "masculine", ["Food"]),
        ("чай", "tea", "masculine", ["Food"]),
        ("день", "day", "masculine", ["Time"]),
        ("рік", "year", "masculine", ["Time"]),
        ("ніч", "night", "feminine", ["Time"]),
        ("вода", "water", "feminine", ["Food"]),
        ("сестра", "sister", "feminine", ["Family"]),
        ("море", "sea", "neuter", ["Nature", "Places"]),
        ("молоко", "milk", "neuter", ["Food"]),
        ("слово", "word", "neuter", []),
    ]
    return VocabularyCatalog(
        make_entry(w, m, g, c, entry_id=f"w_{m}") for w, m, g, c in rows
    )


@pytest.fixture
def plain_settings():
    """Catalog order, no cap, no filter."""
    return QuizSettings(shuffle=False, session_length=0)


@pytest.fixture
def store(plain_settings):
    return InMemorySettingsStore(plain_settings)


@pytest.fixture
def sink():
    return MagicMock(spec=NotificationSink)


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def session(small_catalog, store, sink, rng):
    return QuizSession(small_catalog, store, notifier=sink, rng=rng)


@pytest.fixture
def mock_home(tmp_path, monkeypatch):
    """Mocks Path.home() to point to a temp dir."""
    home = tmp_path / "home"
    home.mkdir()

    # Mocking HOME to a temp directory to isolate config and settings files
    monkeypatch.setenv("HOME", str(home))
    return home
