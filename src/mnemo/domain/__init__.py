# Domain Package
from .errors import (
    IntegrityError,
    MnemoError,
    NotFoundError,
    PersistenceError,
    ValidationError,
)
from .models import (
    Achievement,
    AchievementCategory,
    AchievementProgress,
    AppState,
    Card,
    Difficulty,
    SessionRecord,
    SessionType,
    SortKey,
    StreakState,
    StudyFilters,
)
from .ports import StateRepository
from .stats import AggregateStats, ExtendedStats, WeeklyProgress

__all__ = [
    "Achievement",
    "AchievementCategory",
    "AchievementProgress",
    "AggregateStats",
    "AppState",
    "Card",
    "Difficulty",
    "ExtendedStats",
    "IntegrityError",
    "MnemoError",
    "NotFoundError",
    "PersistenceError",
    "SessionRecord",
    "SessionType",
    "SortKey",
    "StateRepository",
    "StreakState",
    "StudyFilters",
    "ValidationError",
    "WeeklyProgress",
]
