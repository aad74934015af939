from datetime import datetime, timedelta, timezone

import pytest

from mnemo.domain.models import AppState, Card

NOW = datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)


def make_card(
    card_id: str = "card_a",
    front: str = "What is 2+2?",
    back: str = "4",
    tags: list[str] | None = None,
    easiness: float = 2.5,
    interval: int = 1,
    repetitions: int = 0,
    next_review: datetime | None = None,
    last_review: datetime | None = None,
    created_at: datetime | None = None,
) -> Card:
    """Card factory with sensible defaults; due at NOW unless told otherwise."""
    return Card(
        id=card_id,
        front=front,
        back=back,
        tags=list(tags or []),
        easiness=easiness,
        interval=interval,
        repetitions=repetitions,
        next_review=next_review or NOW,
        last_review=last_review,
        created_at=created_at or NOW - timedelta(days=30),
    )


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def card_factory():
    return make_card


@pytest.fixture
def state():
    """A small collection spanning every difficulty tier."""
    return AppState(
        cards=[
            make_card("c1", "Closures in JS", "Functions + scope", tags=["js"], interval=1),
            make_card("c2", "Hoisting", "Declarations move up", tags=["js"], interval=4,
                      repetitions=2, next_review=NOW + timedelta(days=2)),
            make_card("c3", "List comprehension", "[x for x in y]", tags=["python"],
                      interval=15, repetitions=3, next_review=NOW - timedelta(days=1)),
            make_card("c4", "GIL", "Global interpreter lock", tags=["python", "cpython"],
                      interval=45, repetitions=5, next_review=NOW + timedelta(days=20)),
        ]
    )


@pytest.fixture
def mock_home(tmp_path, monkeypatch):
    """Mocks Path.home() to point to a temp dir."""
    home = tmp_path / "home"
    home.mkdir()

    # Mocking HOME to a temp directory to isolate config and data
    monkeypatch.setenv("HOME", str(home))
    for var in (
        "MNEMO_DATA_FILE",
        "MNEMO_BACKUP_DIR",
        "MNEMO_BACKUP_ON_SAVE",
        "MNEMO_SESSION_SIZE",
        "MNEMO_SHUFFLE_SEED",
    ):
        monkeypatch.delenv(var, raising=False)
    return home
