"""
Domain models for the study collection.

These are pure data structures with no I/O or external dependencies.
"""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum

from .constants import FIRST_INTERVAL, INITIAL_EASINESS


class Difficulty(str, Enum):
    """Coarse bucket derived from a card's interval."""

    NEW = "new"
    LEARNING = "learning"
    YOUNG = "young"
    MATURE = "mature"


class SessionType(str, Enum):
    DUE = "due"
    CUSTOM = "custom"
    NEW = "new"
    REVIEW = "review"


class AchievementCategory(str, Enum):
    CARDS = "cards"
    SESSIONS = "sessions"
    STREAKS = "streaks"
    MASTERY = "mastery"


class SortKey(str, Enum):
    CREATED = "created"
    MODIFIED = "modified"
    EASINESS = "easiness"
    INTERVAL = "interval"
    NEXT_REVIEW = "next_review"
    REPETITIONS = "repetitions"


@dataclass
class Card:
    """
    A single flashcard and its SM-2 scheduling state.

    Attributes:
        easiness: Growth multiplier for the interval, kept within [1.3, 3.0].
        interval: Days until the next review after a success.
        repetitions: Consecutive successful reviews; reset to 0 on failure.
        next_review: When the card becomes due.
        last_review: When the card was last rated (None if never).
    """

    id: str
    front: str
    back: str
    created_at: datetime
    next_review: datetime
    tags: list[str] = field(default_factory=list)
    easiness: float = INITIAL_EASINESS
    interval: int = FIRST_INTERVAL
    repetitions: int = 0
    last_review: datetime | None = None


@dataclass(frozen=True)
class StudyFilters:
    """
    Criteria for building a study set or searching the collection.

    Every unset field is inactive. Tags are OR-ed together; the other
    criteria are AND-ed.
    """

    query: str | None = None
    tags: tuple[str, ...] = ()
    difficulty: Difficulty | None = None
    due_only: bool = False
    limit: int | None = None
    random_order: bool = False

    # Advanced search ranges
    min_easiness: float | None = None
    max_easiness: float | None = None
    min_interval: int | None = None
    max_interval: int | None = None
    created_after: datetime | None = None
    created_before: datetime | None = None

    def snapshot(self) -> dict:
        """The subset recorded on a session record."""
        data: dict = {}
        if self.tags:
            data["tags"] = list(self.tags)
        if self.difficulty is not None:
            data["difficulty"] = self.difficulty.value
        if self.limit is not None:
            data["limit"] = self.limit
        if self.random_order:
            data["randomOrder"] = True
        return data


@dataclass(frozen=True)
class SessionRecord:
    """Summary of one finished (or abandoned) review session."""

    id: str
    start_time: datetime
    end_time: datetime | None
    cards_studied: int
    correct_answers: int
    incorrect_answers: int
    average_difficulty: float
    session_type: SessionType
    quit_early: bool = False
    filters: dict | None = None
    duration_seconds: float = 0.0

    @property
    def accuracy(self) -> float | None:
        """Percentage of correct answers, or None when nothing was studied."""
        if self.cards_studied == 0:
            return None
        return self.correct_answers / self.cards_studied * 100


@dataclass
class StreakState:
    current_streak: int = 0
    longest_streak: int = 0
    last_study_date: date | None = None
    study_dates: list[str] = field(default_factory=list)  # YYYY-MM-DD, sorted


@dataclass
class AchievementProgress:
    current: int
    required: int
    description: str = ""


@dataclass
class Achievement:
    id: str
    name: str
    description: str
    category: AchievementCategory
    progress: AchievementProgress
    icon: str = ""
    unlocked_at: datetime | None = None

    @property
    def unlocked(self) -> bool:
        return self.unlocked_at is not None


@dataclass
class AppState:
    """
    The whole persisted blob.

    Owned by the driving process and mutated in place by the engine;
    the repository is the only thing that reads or writes it to disk.
    """

    cards: list[Card] = field(default_factory=list)
    session_history: list[SessionRecord] = field(default_factory=list)
    learning_streak: StreakState = field(default_factory=StreakState)
    achievements: list[Achievement] = field(default_factory=list)

    def find_card(self, card_id: str) -> Card | None:
        for card in self.cards:
            if card.id == card_id:
                return card
        return None
