"""Tests for card collection operations."""

import pytest

from mnemo.application.collection import (
    add_card,
    check_integrity,
    delete_card,
    find_integrity_problems,
    get_card,
    update_tags,
)
from mnemo.domain.errors import IntegrityError, NotFoundError, ValidationError
from mnemo.domain.models import AppState


def test_add_card_is_due_immediately(now):
    state = AppState()
    card = add_card(state, "  Capital of France?  ", "Paris", ["Geo", "geo ", "Europe"], now)

    assert state.cards == [card]
    assert card.id.startswith("card_")
    assert card.front == "Capital of France?"
    assert card.tags == ["geo", "europe"]
    assert card.next_review == now
    assert card.created_at == now
    assert card.easiness == 2.5
    assert card.repetitions == 0


def test_add_card_ids_are_unique(now):
    state = AppState()
    first = add_card(state, "a", "b", now=now)
    second = add_card(state, "a", "b", now=now)
    assert first.id != second.id


@pytest.mark.parametrize(
    "front,back,tags",
    [
        ("", "back", None),
        ("front", "   ", None),
        ("x" * 1001, "back", None),
        ("front", "back", "not-a-list"),
        ("front", "back", [""]),
        ("front", "back", [f"t{i}" for i in range(21)]),
    ],
)
def test_add_card_rejects_bad_input(now, front, back, tags):
    state = AppState()
    with pytest.raises(ValidationError):
        add_card(state, front, back, tags, now)
    assert state.cards == []


def test_get_and_delete(state):
    assert get_card(state, "c2").front == "Hoisting"

    removed = delete_card(state, "c2")
    assert removed.id == "c2"
    assert [c.id for c in state.cards] == ["c1", "c3", "c4"]

    with pytest.raises(NotFoundError) as exc:
        get_card(state, "c2")
    assert exc.value.card_id == "c2"


def test_update_tags_leaves_scheduling_alone(state):
    before = get_card(state, "c3")
    updated = update_tags(state, "c3", ["Python", "Basics"])

    assert updated.tags == ["python", "basics"]
    assert updated.interval == before.interval
    assert updated.next_review == before.next_review
    assert get_card(state, "c3") is updated


def test_integrity_clean(state):
    assert find_integrity_problems(state) == []
    check_integrity(state)


def test_integrity_reports_every_problem(state, card_factory):
    state.cards.append(card_factory("c1"))
    state.cards[1].easiness = 1.1

    with pytest.raises(IntegrityError) as exc:
        check_integrity(state)
    assert len(exc.value.problems) == 2
    assert "duplicate card id c1" in str(exc.value)
