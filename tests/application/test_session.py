"""Tests for the review session lifecycle."""

import copy
from datetime import timedelta

import pytest

from mnemo.application.session import (
    SessionStatus,
    append_session,
    average_difficulty,
    end_session,
    record_review,
    skip_card,
    start_session,
)
from mnemo.domain.constants import SESSION_HISTORY_LIMIT
from mnemo.domain.errors import NotFoundError, ValidationError
from mnemo.domain.models import SessionRecord, SessionType, StudyFilters


@pytest.fixture
def session(now):
    return start_session(SessionType.DUE, now=now)


def _record(i, now):
    return SessionRecord(
        id=f"session_{i}",
        start_time=now,
        end_time=now,
        cards_studied=1,
        correct_answers=1,
        incorrect_answers=0,
        average_difficulty=1.0,
        session_type=SessionType.DUE,
    )


class TestStartSession:
    def test_starts_active(self, session, now):
        assert session.status is SessionStatus.ACTIVE
        assert session.start_time == now
        assert session.id.startswith("session_")
        assert session.cards_studied == 0

    def test_records_filter_snapshot(self, now):
        filters = StudyFilters(tags=("js",), limit=5, random_order=True)
        session = start_session(SessionType.CUSTOM, filters, now)
        assert session.filters == {"tags": ["js"], "limit": 5, "randomOrder": True}

    def test_accepts_string_type(self, now):
        assert start_session("new", now=now).session_type is SessionType.NEW

    def test_rejects_unknown_type(self, now):
        with pytest.raises(ValidationError):
            start_session("everything", now=now)


class TestRecordReview:
    def test_updates_card_and_counters(self, session, state, now):
        updated = record_review(session, state, "c1", 5, now)

        assert state.cards[0] is updated
        assert updated.repetitions == 1
        assert updated.last_review == now
        assert session.cards_studied == 1
        assert session.correct_answers == 1
        assert session.incorrect_answers == 0

    def test_counts_failures(self, session, state, now):
        record_review(session, state, "c1", 4, now)
        record_review(session, state, "c3", 2, now)
        assert session.cards_studied == 2
        assert session.correct_answers == 1
        assert session.incorrect_answers == 1
        assert session.correct_answers + session.incorrect_answers == session.cards_studied

    def test_unknown_card_changes_nothing(self, session, state, now):
        before = copy.deepcopy(state)
        with pytest.raises(NotFoundError):
            record_review(session, state, "missing", 4, now)
        assert state == before
        assert session.cards_studied == 0

    @pytest.mark.parametrize("quality", [-1, 6, 3.5])
    def test_bad_quality_changes_nothing(self, session, state, now, quality):
        before = copy.deepcopy(state)
        with pytest.raises(ValidationError):
            record_review(session, state, "c1", quality, now)
        assert state == before
        assert session.cards_studied == 0

    def test_malformed_id_rejected(self, session, state, now):
        with pytest.raises(ValidationError):
            record_review(session, state, "../etc", 4, now)

    def test_skip_does_not_count(self, session, state, now):
        skip_card(session, state, "c2")
        assert session.skipped == ["c2"]
        assert session.cards_studied == 0
        assert state.cards[1].repetitions == 2


class TestEndSession:
    def test_builds_record_and_appends_history(self, session, state, now):
        record_review(session, state, "c1", 5, now)
        record_review(session, state, "c3", 1, now)
        record = end_session(session, state, now=now + timedelta(minutes=3))

        assert state.session_history == [record]
        assert record.cards_studied == 2
        assert record.correct_answers == 1
        assert record.average_difficulty == pytest.approx(2.0)
        assert record.duration_seconds == pytest.approx(180)
        assert record.quit_early is False
        assert session.status is SessionStatus.COMPLETED

    def test_quit_early_keeps_reviews(self, session, state, now):
        record_review(session, state, "c1", 5, now)
        record = end_session(session, state, quit_early=True, now=now)

        assert record.quit_early is True
        assert session.status is SessionStatus.ABANDONED
        assert state.cards[0].repetitions == 1

    def test_empty_session(self, session, state, now):
        record = end_session(session, state, now=now)
        assert record.cards_studied == 0
        assert record.average_difficulty == 0.0
        assert record.accuracy is None

    def test_closed_session_rejects_everything(self, session, state, now):
        end_session(session, state, now=now)
        with pytest.raises(ValidationError):
            end_session(session, state, now=now)
        with pytest.raises(ValidationError):
            record_review(session, state, "c1", 4, now)
        with pytest.raises(ValidationError):
            skip_card(session, state, "c1")
        assert len(state.session_history) == 1


class TestHelpers:
    def test_average_difficulty(self):
        assert average_difficulty([5, 5]) == 0.0
        assert average_difficulty([0, 4]) == pytest.approx(3.0)
        assert average_difficulty([]) == 0.0

    def test_history_is_capped(self, now):
        history = [_record(i, now) for i in range(SESSION_HISTORY_LIMIT)]
        result = append_session(history, _record("new", now))

        assert len(result) == SESSION_HISTORY_LIMIT
        assert result[0].id == "session_1"
        assert result[-1].id == "session_new"
        assert len(history) == SESSION_HISTORY_LIMIT
