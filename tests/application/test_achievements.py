"""Tests for achievement unlocking."""

from datetime import timedelta

import pytest

from mnemo.application.achievements import (
    ACHIEVEMENT_RULES,
    check_achievements,
    default_achievements,
    ensure_achievements,
    unlocked,
)
from mnemo.domain.models import SessionRecord, SessionType
from mnemo.domain.stats import AggregateStats


def _session(now, studied, correct, quit_early=False):
    return SessionRecord(
        id="session_x",
        start_time=now,
        end_time=now,
        cards_studied=studied,
        correct_answers=correct,
        incorrect_answers=studied - correct,
        average_difficulty=1.0,
        session_type=SessionType.DUE,
        quit_early=quit_early,
    )


def _by_id(achievements):
    return {a.id: a for a in achievements}


def test_defaults_cover_every_rule():
    achievements = default_achievements()
    assert [a.id for a in achievements] == [r.id for r in ACHIEVEMENT_RULES]
    assert not unlocked(achievements)


def test_first_card_unlocks(now):
    achievements, new = check_achievements(default_achievements(), AggregateStats(total=1), now=now)

    assert [a.id for a in new] == ["first_card"]
    first = _by_id(achievements)["first_card"]
    assert first.unlocked_at == now
    assert first.progress.current == 1
    assert _by_id(achievements)["cards_10"].progress.current == 1


def test_check_is_idempotent(now):
    stats = AggregateStats(total=1)
    achievements, _ = check_achievements(default_achievements(), stats, now=now)
    again, new = check_achievements(achievements, stats, now=now + timedelta(hours=1))

    assert new == []
    assert _by_id(again)["first_card"].unlocked_at == now


def test_unlocks_are_monotonic(now):
    achievements, _ = check_achievements(default_achievements(), AggregateStats(total=1), now=now)
    after_delete, new = check_achievements(achievements, AggregateStats(total=0), now=now)

    first = _by_id(after_delete)["first_card"]
    assert first.unlocked
    assert first.progress.current == 1
    assert new == []


def test_accuracy_needs_a_session(now):
    achievements, new = check_achievements(default_achievements(), AggregateStats(), now=now)
    assert "accuracy_90" not in [a.id for a in new]
    assert _by_id(achievements)["accuracy_90"].progress.current == 0


@pytest.mark.parametrize(
    "studied,correct,expected",
    [(10, 9, True), (10, 8, False), (3, 3, True)],
)
def test_session_accuracy(now, studied, correct, expected):
    stats = AggregateStats(sessions_recorded=1, sessions_completed=1)
    achievements, new = check_achievements(
        default_achievements(), stats, _session(now, studied, correct), now
    )
    assert ("accuracy_90" in [a.id for a in new]) is expected
    assert _by_id(achievements)["accuracy_90"].progress.current == correct * 100 // studied


def test_perfect_session(now):
    stats = AggregateStats(sessions_recorded=1)
    _, new = check_achievements(default_achievements(), stats, _session(now, 4, 4), now)
    assert {"first_session", "perfect_session", "accuracy_90"} <= {a.id for a in new}


def test_empty_session_does_not_count_as_perfect(now):
    _, new = check_achievements(default_achievements(), AggregateStats(), _session(now, 0, 0), now)
    assert "perfect_session" not in [a.id for a in new]


def test_streak_and_mastery(now):
    stats = AggregateStats(current_streak=7, mature=20, total_reviews=150)
    _, new = check_achievements(default_achievements(), stats, now=now)
    assert {"streak_3", "streak_7", "mature_20", "reviews_100"} <= {a.id for a in new}
    assert "streak_30" not in {a.id for a in new}


def test_ensure_adds_missing_and_keeps_existing(now):
    achievements, _ = check_achievements(
        default_achievements()[:1], AggregateStats(total=1), now=now
    )
    merged = ensure_achievements(achievements)

    assert len(merged) == len(ACHIEVEMENT_RULES)
    assert merged[0].unlocked_at == now
    assert ensure_achievements(merged) == merged


def test_unknown_ids_pass_through(now):
    stray = default_achievements()[0]
    stray.id = "retired_badge"
    achievements, new = check_achievements([stray], AggregateStats(total=5), now=now)
    assert achievements == [stray]
    assert new == []
