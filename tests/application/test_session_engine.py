"""Tests for the quiz session engine."""

import logging
import random

import pytest

from ridquiz.application.session_engine import QuizSession
from ridquiz.domain.models import Phase
from ridquiz.domain.settings import QuizSettings
from ridquiz.infrastructure.settings_store import InMemorySettingsStore


def answer_current(session: QuizSession, meaning_ok: bool = True, gender_ok: bool = True):
    entry = session.current
    session.submit_meaning(entry.meaning if meaning_ok else "__wrong__")
    wrong_gender = "neuter" if entry.gender != "neuter" else "masculine"
    session.submit_gender(entry.gender.value if gender_ok else wrong_gender)


@pytest.fixture
def big_session(large_catalog, store, sink, rng):
    return QuizSession(large_catalog, store, notifier=sink, rng=rng)


class TestWalkthrough:
    """The стіл / книга / вікно walkthrough."""

    def test_initial_deck_in_catalog_order(self, session, table, book, window):
        assert session.working_deck == [table, book, window]
        assert session.current == table
        assert session.phase == Phase.AWAITING_MEANING
        assert session.score == 0
        assert session.total_asked == 0
        assert not session.show_summary

    def test_meaning_right_gender_wrong(self, session, table, sink):
        assert session.submit_meaning("table")
        assert session.score == 0.5
        assert session.phase == Phase.AWAITING_GENDER
        sink.notify_correct.assert_called_once()

        assert session.submit_gender("feminine")
        assert session.score == 0.5
        assert session.phase == Phase.COMPLETED
        assert session.total_asked == 1
        assert session.missed_items == [table]
        sink.notify_incorrect.assert_called_once()

    def test_reset_score_after_walkthrough(self, session):
        session.submit_meaning("table")
        session.submit_gender("feminine")

        session.reset_score()

        assert session.score == 0
        assert session.total_asked == 0
        st = session.current_state
        assert st.phase == Phase.COMPLETED
        assert st.selected_meaning == "table"
        assert st.selected_gender == "feminine"
        assert not st.meaning_scored and not st.gender_scored

    def test_retry_missed_only(self, session, table):
        session.submit_meaning("table")
        session.submit_gender("feminine")
        session.next()
        session.next()
        session.next()
        assert session.show_summary

        assert session.retry_missed_only()

        assert session.working_deck == [table]
        assert session.current == table
        assert session.score == 0
        assert session.total_asked == 0
        assert not session.can_go_back
        assert session.missed_items == []
        assert not session.show_summary
        assert session.phase == Phase.AWAITING_MEANING


class TestScoring:
    def test_full_card_scores_one(self, session):
        answer_current(session)
        assert session.score == 1.0
        assert session.missed_items == []

    def test_wrong_meaning_still_advances_phase(self, session, sink):
        assert session.submit_meaning("book")
        assert session.score == 0
        assert session.phase == Phase.AWAITING_GENDER
        assert session.current_state.meaning_correct is False
        sink.notify_incorrect.assert_called_once()
        sink.notify_correct.assert_not_called()

    def test_card_score_never_exceeds_one(self, session):
        answer_current(session)
        session.next()
        session.previous()

        # Revisited card is completed: further answers are rejected
        assert not session.submit_meaning("table")
        assert not session.submit_gender("masculine")
        assert session.score == 1.0

    def test_total_asked_counts_each_card_once(self, session):
        answer_current(session)
        session.next()
        session.previous()
        session.next()
        session.previous()
        assert session.total_asked == 1

        session.next()
        answer_current(session, gender_ok=False)
        assert session.total_asked == 2

    def test_scores_across_cards(self, session):
        answer_current(session)
        session.next()
        answer_current(session, meaning_ok=False)
        session.next()
        answer_current(session, meaning_ok=False, gender_ok=False)
        assert session.score == 1.5
        assert session.total_asked == 3
        assert [e.meaning for e in session.missed_items] == ["book", "window"]

    def test_reset_score_allows_rescoring_a_pending_gender(self, session):
        session.submit_meaning("table")
        session.reset_score()
        assert session.score == 0

        session.submit_gender("masculine")
        assert session.score == 0.5
        assert session.total_asked == 1


class TestPhaseGuards:
    def test_gender_before_meaning_rejected(self, session):
        assert not session.submit_gender("masculine")
        assert session.phase == Phase.AWAITING_MEANING
        assert session.total_asked == 0

    def test_meaning_twice_rejected(self, session):
        session.submit_meaning("table")
        assert not session.submit_meaning("table")
        assert session.score == 0.5

    def test_rejections_are_logged(self, session, caplog):
        with caplog.at_level(logging.DEBUG, logger="ridquiz.application.session_engine"):
            session.submit_gender("masculine")
        assert "rejected" in caplog.text


class TestMissedItems:
    def test_no_duplicates_when_revisited(self, session, table):
        answer_current(session, gender_ok=False)
        session.next()
        session.previous()
        session.next()
        session.previous()
        assert session.missed_items == [table]

    def test_no_duplicates_on_second_completion(self, small_catalog, store, table):
        from ridquiz.application.card_state import CardStateStore

        cards = CardStateStore()
        session = QuizSession(small_catalog, store, cards=cards)
        answer_current(session, gender_ok=False)

        # Force the card back to the gender step and complete it again
        cards.get(table.id).phase = Phase.AWAITING_GENDER
        session.submit_gender("neuter")

        assert session.missed_items == [table]

    def test_correct_cards_not_missed(self, session):
        answer_current(session)
        assert session.missed_items == []


class TestNavigation:
    def test_next_advances_and_primes(self, session, book):
        assert session.next()
        assert session.current == book
        assert session.phase == Phase.AWAITING_MEANING
        assert "book" in session.meaning_options
        assert session.can_go_back

    def test_previous_restores_answers(self, session, table):
        session.submit_meaning("table")
        session.next()
        assert session.previous()
        assert session.current == table
        assert session.phase == Phase.AWAITING_GENDER
        assert session.current_state.selected_meaning == "table"

    def test_previous_with_empty_history_is_noop(self, session, table):
        assert not session.previous()
        assert session.current == table

    def test_back_history_capped_at_five(self, big_session):
        for _ in range(6):
            big_session.next()
        assert big_session.current_index == 6
        assert big_session.back_history == [1, 2, 3, 4, 5]

        results = [big_session.previous() for _ in range(6)]
        assert results == [True] * 5 + [False]
        assert big_session.current_index == 1

    def test_next_does_not_push_duplicate_top(self, session):
        session.next()
        session.next()
        session.next()  # deck exhausted, index stays at 2
        session.next()
        assert session.back_history == [0, 1, 2]

    def test_exhausted_deck_shows_summary(self, session, window):
        session.next()
        session.next()
        assert not session.show_summary

        assert not session.next()
        assert session.show_summary
        assert session.current_index == 2
        assert session.current == window

    def test_previous_keeps_score(self, session):
        answer_current(session)
        session.next()
        answer_current(session)
        session.previous()
        assert session.score == 2.0
        assert session.total_asked == 2


class TestMeaningOptions:
    def test_small_deck_offers_all_meanings(self, session):
        assert sorted(session.meaning_options) == ["book", "table", "window"]

    def test_four_distinct_options_with_correct_one(self, big_session, large_catalog):
        meanings = {e.meaning for e in large_catalog}
        for _ in range(len(large_catalog)):
            opts = big_session.meaning_options
            assert len(opts) == 4
            assert len(set(opts)) == 4
            assert big_session.current.meaning in opts
            assert set(opts) <= meanings
            big_session.next()

    def test_single_word_deck(self, table):
        from ridquiz.application.catalog import VocabularyCatalog

        session = QuizSession(
            VocabularyCatalog([table]),
            InMemorySettingsStore(QuizSettings(shuffle=False, session_length=0)),
        )
        assert session.meaning_options == ["table"]

    def test_options_regenerated_on_navigation(self, big_session):
        first = big_session.current.meaning
        big_session.next()
        assert big_session.current.meaning in big_session.meaning_options
        big_session.previous()
        assert first in big_session.meaning_options


class TestProgressAndText:
    def test_progress_steps(self, session):
        assert session.progress == 0
        session.submit_meaning("table")
        assert session.progress == pytest.approx(0.5 / 3)
        session.submit_gender("masculine")
        assert session.progress == pytest.approx(1 / 3)
        session.next()
        assert session.progress == pytest.approx(1 / 3)

    def test_progress_capped(self, session):
        session.next()
        session.next()
        answer_current(session)
        assert session.progress == 1.0

    def test_score_and_counter_text(self, session):
        assert session.counter_text == "Word 1 of 3"
        session.submit_meaning("table")
        session.submit_gender("masculine")
        assert session.score_text == "Score: 1.0 / 1"
        session.next()
        assert session.counter_text == "Word 2 of 3"


class TestEmptyDeck:
    @pytest.fixture
    def empty(self, small_catalog, sink):
        store = InMemorySettingsStore(QuizSettings(active_categories={"Weather"}))
        return QuizSession(small_catalog, store, notifier=sink)

    def test_everything_is_a_safe_noop(self, empty, sink):
        assert empty.current is None
        assert empty.phase is None
        assert empty.meaning_options == []
        assert not empty.submit_meaning("table")
        assert not empty.submit_gender("masculine")
        assert not empty.next()
        assert not empty.previous()
        assert not empty.speak_current_word()
        assert empty.progress == 0
        assert empty.counter_text == ""
        assert not empty.show_summary
        sink.speak.assert_not_called()


class TestRebuild:
    def test_rebuild_reads_settings_each_time(self, small_catalog, store):
        session = QuizSession(small_catalog, store)
        assert len(session.working_deck) == 3

        store.save(QuizSettings(shuffle=False, session_length=0, active_categories={"School"}))
        assert len(session.working_deck) == 3  # not until rebuild

        session.rebuild_working_deck()
        assert [e.meaning for e in session.working_deck] == ["book"]

    def test_rebuild_resets_session(self, session):
        answer_current(session, gender_ok=False)
        session.next()

        session.rebuild_working_deck()

        assert session.current_index == 0
        assert session.score == 0
        assert session.total_asked == 0
        assert session.missed_items == []
        assert not session.can_go_back
        assert session.phase == Phase.AWAITING_MEANING

    def test_start_new_session_clears_summary(self, session):
        answer_current(session, meaning_ok=False)
        session.next()
        session.next()
        session.next()
        assert session.show_summary

        session.start_new_session_from_filters()

        assert not session.show_summary
        assert len(session.working_deck) == 3
        assert session.missed_items == []

    def test_retry_with_nothing_missed_only_hides_summary(self, session):
        for _ in range(3):
            answer_current(session)
            session.next()
        assert session.show_summary

        assert not session.retry_missed_only()

        assert not session.show_summary
        assert session.score == 3.0
        assert session.current_index == 2

    def test_shuffle_setting_uses_rng(self, large_catalog):
        settings = QuizSettings(shuffle=True, session_length=0)
        a = QuizSession(large_catalog, InMemorySettingsStore(settings), rng=random.Random(5))
        b = QuizSession(large_catalog, InMemorySettingsStore(settings), rng=random.Random(5))
        assert a.working_deck == b.working_deck
        assert sorted(e.id for e in a.working_deck) == sorted(e.id for e in large_catalog)


class TestCategories:
    def test_toggle_on_and_off(self, session, store, book):
        assert session.toggle_category("School")
        assert store.load().active_categories == {"School"}
        assert session.working_deck == [book]

        assert not session.toggle_category("School")
        assert store.load().active_categories == set()
        assert len(session.working_deck) == 3

    def test_unknown_category_gives_empty_deck(self, session, caplog):
        with caplog.at_level(logging.INFO, logger="ridquiz.application.session_engine"):
            assert session.toggle_category("Weather")
        assert session.current is None
        assert "not in the catalog" in caplog.text


class TestNotifications:
    def test_speak_uses_settings(self, small_catalog, sink):
        store = InMemorySettingsStore(
            QuizSettings(shuffle=False, session_length=0, speech_rate=0.7, speech_enabled=False)
        )
        session = QuizSession(small_catalog, store, notifier=sink)

        assert session.speak_current_word()

        sink.speak.assert_called_once_with("стіл", 0.7, False)

    def test_sink_failures_do_not_affect_state(self, session, sink, caplog):
        sink.notify_correct.side_effect = RuntimeError("no audio device")
        sink.notify_incorrect.side_effect = OSError("gone")

        with caplog.at_level(logging.WARNING):
            assert session.submit_meaning("table")
            assert session.submit_gender("neuter")

        assert session.score == 0.5
        assert session.phase == Phase.COMPLETED
        assert session.total_asked == 1
        assert "no audio device" in caplog.text

    def test_gender_notifies_correct_after_score_reset(self, session, sink):
        session.submit_meaning("table")
        session.reset_score()
        sink.reset_mock()
        session.submit_gender("masculine")
        sink.notify_correct.assert_called_once()


class TestSummary:
    def test_summary_counts(self, session):
        answer_current(session)
        session.next()
        answer_current(session, gender_ok=False)
        session.next()
        answer_current(session)

        summary = session.summary()

        assert summary.total == 3
        assert summary.missed == 1
        assert summary.correct == 2
        assert summary.accuracy == 67
        assert [e.meaning for e in summary.missed_items] == ["book"]
        assert not summary.perfect

    def test_empty_summary(self, session):
        summary = session.summary()
        assert summary.total == 0
        assert summary.accuracy == 0
        assert not summary.perfect

    def test_perfect(self, session):
        answer_current(session)
        assert session.summary().perfect
        assert session.summary().accuracy == 100
