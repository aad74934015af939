import json
from datetime import date, datetime, timezone

import pytest

from mnemo.application.achievements import default_achievements
from mnemo.application.streak import update_streak
from mnemo.domain.errors import PersistenceError
from mnemo.domain.models import AppState, SessionRecord, SessionType
from mnemo.infrastructure.persistence import JsonStateRepository


@pytest.fixture
def data_file(tmp_path):
    return tmp_path / "data" / "flashcards.json"


@pytest.fixture
def repo(data_file, tmp_path):
    return JsonStateRepository(data_file, backup_dir=tmp_path / "backups")


@pytest.fixture
def full_state(state, now):
    state.cards[0].last_review = now
    state.session_history.append(
        SessionRecord(
            id="session_1",
            start_time=now,
            end_time=now,
            cards_studied=3,
            correct_answers=2,
            incorrect_answers=1,
            average_difficulty=1.5,
            session_type=SessionType.CUSTOM,
            quit_early=True,
            filters={"tags": ["js"]},
            duration_seconds=90.5,
        )
    )
    state.learning_streak = update_streak(state.learning_streak, now, today=now.date())
    state.achievements = default_achievements()
    state.achievements[0].unlocked_at = now
    return state


def test_missing_file_loads_empty_state(repo, data_file):
    assert repo.load() == AppState()
    assert not data_file.exists()


def test_round_trip(repo, full_state):
    repo.save(full_state)
    assert repo.load() == full_state


def test_wire_format_is_camel_case(repo, data_file, full_state):
    repo.save(full_state)
    raw = json.loads(data_file.read_text())

    assert set(raw) == {"cards", "sessionHistory", "learningStreak", "achievements"}
    card = raw["cards"][0]
    assert card["nextReview"].startswith("2024-03-15T12:00:00")
    assert "createdAt" in card and "lastReview" in card
    session = raw["sessionHistory"][0]
    assert session["duration"] == pytest.approx(90500)
    assert session["customFilters"] == {"tags": ["js"]}
    assert session["sessionType"] == "custom"
    assert raw["learningStreak"]["lastStudyDate"] == "2024-03-15"
    assert raw["learningStreak"]["studyDates"] == ["2024-03-15"]
    assert raw["achievements"][0]["unlockedAt"] is not None


def test_save_leaves_no_temp_files(repo, data_file, full_state):
    repo.save(full_state)
    repo.save(full_state)
    assert [p.name for p in data_file.parent.iterdir()] == ["flashcards.json"]


def test_malformed_json(repo, data_file):
    data_file.parent.mkdir(parents=True)
    data_file.write_text("{not json")
    with pytest.raises(PersistenceError, match="Malformed JSON"):
        repo.load()


def test_non_object_root(repo, data_file):
    data_file.parent.mkdir(parents=True)
    data_file.write_text("[]")
    with pytest.raises(PersistenceError):
        repo.load()


def test_invalid_card(repo, data_file):
    data_file.parent.mkdir(parents=True)
    data_file.write_text(json.dumps({"cards": [{"id": "c1", "front": "f"}]}))
    with pytest.raises(PersistenceError, match="Invalid data"):
        repo.load()


def test_legacy_fields(repo, data_file):
    data_file.parent.mkdir(parents=True)
    data_file.write_text(
        json.dumps(
            {
                "cards": [
                    {
                        "id": "c1",
                        "front": "f",
                        "back": "b",
                        "tags": ["JS"],
                        "nextReview": "2024-03-15T12:00:00",
                        "createdAt": "2024-03-01T08:00:00.000Z",
                    }
                ],
                "sessionHistory": [
                    {"id": "s1", "startTime": "2024-03-14T10:00:00Z", "sessionType": "all"}
                ],
                "learningStreak": {
                    "currentStreak": 1,
                    "longestStreak": 1,
                    "lastStudyDate": "2024-03-14T10:00:00.000Z",
                    "studyDates": ["2024-03-14", "2024-03-12", "2024-03-14"],
                },
                "achievements": None,
            }
        )
    )
    state = repo.load()

    card = state.cards[0]
    assert card.tags == ["js"]
    assert card.next_review == datetime(2024, 3, 15, 12, tzinfo=timezone.utc)
    assert card.easiness == 2.5
    assert state.session_history[0].session_type is SessionType.REVIEW
    assert state.learning_streak.last_study_date == date(2024, 3, 14)
    assert state.learning_streak.study_dates == ["2024-03-12", "2024-03-14"]
    assert state.achievements == []


def test_backup_and_restore(repo, data_file, full_state, tmp_path):
    repo.save(full_state)
    backup = repo.backup()
    assert backup.parent == tmp_path / "backups"
    assert backup.name.startswith("flashcards.backup.")

    repo.save(AppState())
    assert repo.load() == AppState()

    repo.restore(backup)
    assert repo.load() == full_state
    assert len(list((tmp_path / "backups").iterdir())) == 2


def test_backup_without_data(repo):
    with pytest.raises(PersistenceError):
        repo.backup()


def test_restore_rejects_invalid_backup(repo, data_file, full_state, tmp_path):
    repo.save(full_state)
    bad = tmp_path / "bad.json"
    bad.write_text("nope")

    with pytest.raises(PersistenceError):
        repo.restore(bad)
    assert repo.load() == full_state


def test_restore_missing_source(repo, tmp_path):
    with pytest.raises(PersistenceError, match="does not exist"):
        repo.restore(tmp_path / "missing.json")


def test_backup_on_save(data_file, tmp_path, full_state):
    repo = JsonStateRepository(data_file, backup_dir=tmp_path / "bk", backup_on_save=True)
    repo.save(full_state)
    assert not (tmp_path / "bk").exists()
    repo.save(full_state)
    assert len(list((tmp_path / "bk").iterdir())) == 1


def test_save_error_is_wrapped(tmp_path, full_state):
    blocker = tmp_path / "blocker"
    blocker.write_text("")
    repo = JsonStateRepository(blocker / "flashcards.json")
    with pytest.raises(PersistenceError):
        repo.save(full_state)
