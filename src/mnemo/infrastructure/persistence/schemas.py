"""
Wire schemas for the JSON state file.

Keys are camelCase on disk. Every timestamp is written as an ISO-8601
string and revived to an aware UTC datetime on load; naive values from
older files are taken to be UTC.
"""

from datetime import date, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from mnemo.application.utils.dates import ensure_utc
from mnemo.domain.models import (
    Achievement,
    AchievementCategory,
    AchievementProgress,
    AppState,
    Card,
    SessionRecord,
    SessionType,
    StreakState,
)


class _WireModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


def _utc(v: datetime | None) -> datetime | None:
    return ensure_utc(v) if v is not None else None


class CardModel(_WireModel):
    id: str = Field(min_length=1)
    front: str
    back: str
    tags: list[str] = Field(default_factory=list)
    easiness: float = 2.5
    interval: int = Field(default=1, ge=0)
    repetitions: int = Field(default=0, ge=0)
    next_review: datetime = Field(alias="nextReview")
    last_review: datetime | None = Field(default=None, alias="lastReview")
    created_at: datetime = Field(alias="createdAt")

    @field_validator("tags", mode="before")
    @classmethod
    def tags_or_empty(cls, v: Any) -> Any:
        return v if v is not None else []

    @field_validator("next_review", "last_review", "created_at")
    @classmethod
    def to_utc(cls, v: datetime | None) -> datetime | None:
        return _utc(v)

    def to_domain(self) -> Card:
        return Card(
            id=self.id,
            front=self.front,
            back=self.back,
            tags=[t.lower() for t in self.tags],
            easiness=self.easiness,
            interval=self.interval,
            repetitions=self.repetitions,
            next_review=self.next_review,
            last_review=self.last_review,
            created_at=self.created_at,
        )

    @classmethod
    def from_domain(cls, card: Card) -> "CardModel":
        return cls(
            id=card.id,
            front=card.front,
            back=card.back,
            tags=list(card.tags),
            easiness=card.easiness,
            interval=card.interval,
            repetitions=card.repetitions,
            next_review=card.next_review,
            last_review=card.last_review,
            created_at=card.created_at,
        )


class SessionRecordModel(_WireModel):
    id: str = Field(min_length=1)
    start_time: datetime = Field(alias="startTime")
    end_time: datetime | None = Field(default=None, alias="endTime")
    cards_studied: int = Field(default=0, ge=0, alias="cardsStudied")
    correct_answers: int = Field(default=0, ge=0, alias="correctAnswers")
    incorrect_answers: int = Field(default=0, ge=0, alias="incorrectAnswers")
    average_difficulty: float = Field(default=0.0, ge=0, le=5, alias="averageDifficulty")
    session_type: SessionType = Field(default=SessionType.DUE, alias="sessionType")
    quit_early: bool = Field(default=False, alias="quitEarly")
    custom_filters: dict[str, Any] | None = Field(default=None, alias="customFilters")
    duration: float = 0.0  # milliseconds

    @field_validator("session_type", mode="before")
    @classmethod
    def legacy_session_type(cls, v: Any) -> Any:
        # Older files used "all" for whole-collection sessions.
        return SessionType.REVIEW.value if v == "all" else v

    @field_validator("start_time", "end_time")
    @classmethod
    def to_utc(cls, v: datetime | None) -> datetime | None:
        return _utc(v)

    def to_domain(self) -> SessionRecord:
        return SessionRecord(
            id=self.id,
            start_time=self.start_time,
            end_time=self.end_time,
            cards_studied=self.cards_studied,
            correct_answers=self.correct_answers,
            incorrect_answers=self.incorrect_answers,
            average_difficulty=self.average_difficulty,
            session_type=self.session_type,
            quit_early=self.quit_early,
            filters=self.custom_filters,
            duration_seconds=self.duration / 1000,
        )

    @classmethod
    def from_domain(cls, record: SessionRecord) -> "SessionRecordModel":
        return cls(
            id=record.id,
            start_time=record.start_time,
            end_time=record.end_time,
            cards_studied=record.cards_studied,
            correct_answers=record.correct_answers,
            incorrect_answers=record.incorrect_answers,
            average_difficulty=record.average_difficulty,
            session_type=record.session_type,
            quit_early=record.quit_early,
            custom_filters=record.filters,
            duration=record.duration_seconds * 1000,
        )


class StreakModel(_WireModel):
    current_streak: int = Field(default=0, ge=0, alias="currentStreak")
    longest_streak: int = Field(default=0, ge=0, alias="longestStreak")
    last_study_date: date | None = Field(default=None, alias="lastStudyDate")
    study_dates: list[str] = Field(default_factory=list, alias="studyDates")

    @field_validator("last_study_date", mode="before")
    @classmethod
    def date_from_timestamp(cls, v: Any) -> Any:
        # Older files stored a full timestamp here.
        if isinstance(v, str) and "T" in v:
            return ensure_utc(datetime.fromisoformat(v.replace("Z", "+00:00"))).date()
        return v

    @field_validator("study_dates")
    @classmethod
    def sorted_unique(cls, v: list[str]) -> list[str]:
        for item in v:
            date.fromisoformat(item)
        return sorted(set(v))

    def to_domain(self) -> StreakState:
        return StreakState(
            current_streak=self.current_streak,
            longest_streak=self.longest_streak,
            last_study_date=self.last_study_date,
            study_dates=list(self.study_dates),
        )

    @classmethod
    def from_domain(cls, streak: StreakState) -> "StreakModel":
        return cls(
            current_streak=streak.current_streak,
            longest_streak=streak.longest_streak,
            last_study_date=streak.last_study_date,
            study_dates=list(streak.study_dates),
        )


class ProgressModel(_WireModel):
    current: int = Field(default=0, ge=0)
    required: int = Field(ge=1)
    description: str = ""


class AchievementModel(_WireModel):
    id: str = Field(min_length=1)
    name: str
    description: str
    icon: str = ""
    category: AchievementCategory
    progress: ProgressModel
    unlocked_at: datetime | None = Field(default=None, alias="unlockedAt")

    @field_validator("unlocked_at")
    @classmethod
    def to_utc(cls, v: datetime | None) -> datetime | None:
        return _utc(v)

    def to_domain(self) -> Achievement:
        return Achievement(
            id=self.id,
            name=self.name,
            description=self.description,
            icon=self.icon,
            category=self.category,
            progress=AchievementProgress(
                current=self.progress.current,
                required=self.progress.required,
                description=self.progress.description,
            ),
            unlocked_at=self.unlocked_at,
        )

    @classmethod
    def from_domain(cls, achievement: Achievement) -> "AchievementModel":
        return cls(
            id=achievement.id,
            name=achievement.name,
            description=achievement.description,
            icon=achievement.icon,
            category=achievement.category,
            progress=ProgressModel(
                current=achievement.progress.current,
                required=achievement.progress.required,
                description=achievement.progress.description,
            ),
            unlocked_at=achievement.unlocked_at,
        )


class StateModel(_WireModel):
    cards: list[CardModel] = Field(default_factory=list)
    session_history: list[SessionRecordModel] = Field(default_factory=list, alias="sessionHistory")
    learning_streak: StreakModel = Field(default_factory=StreakModel, alias="learningStreak")
    achievements: list[AchievementModel] = Field(default_factory=list)

    @field_validator("cards", "session_history", "achievements", mode="before")
    @classmethod
    def list_or_empty(cls, v: Any) -> Any:
        return v if v is not None else []

    @field_validator("learning_streak", mode="before")
    @classmethod
    def streak_or_default(cls, v: Any) -> Any:
        return v if v is not None else {}

    def to_domain(self) -> AppState:
        return AppState(
            cards=[c.to_domain() for c in self.cards],
            session_history=[s.to_domain() for s in self.session_history],
            learning_streak=self.learning_streak.to_domain(),
            achievements=[a.to_domain() for a in self.achievements],
        )

    @classmethod
    def from_domain(cls, state: AppState) -> "StateModel":
        return cls(
            cards=[CardModel.from_domain(c) for c in state.cards],
            session_history=[SessionRecordModel.from_domain(s) for s in state.session_history],
            learning_streak=StreakModel.from_domain(state.learning_streak),
            achievements=[AchievementModel.from_domain(a) for a in state.achievements],
        )

    def to_json(self) -> str:
        return self.model_dump_json(by_alias=True, indent=2)
