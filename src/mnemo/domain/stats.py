"""
Aggregate statistics models.

Named structures so the achievement rule table and the CLI read typed
fields instead of untyped dictionaries.
"""

from dataclasses import dataclass, field

from .models import Achievement, SessionRecord


@dataclass(frozen=True)
class AggregateStats:
    """
    Collection-wide counters.

    Attributes:
        total: Number of cards in the collection.
        due: Cards whose next review has passed.
        new/learning/young/mature: Cards per difficulty tier.
        total_reviews: Sum of every card's repetition counter.
        study_days: Distinct calendar days with a recorded session.
        sessions_recorded: All sessions in history, quit early or not.
        sessions_completed: Sessions that were not abandoned.
    """

    total: int = 0
    due: int = 0
    new: int = 0
    learning: int = 0
    young: int = 0
    mature: int = 0
    total_reviews: int = 0
    average_easiness: float = 0.0
    current_streak: int = 0
    longest_streak: int = 0
    study_days: int = 0
    sessions_recorded: int = 0
    sessions_completed: int = 0


@dataclass(frozen=True)
class WeeklyProgress:
    label: str
    cards_studied: int
    accuracy: float  # percent
    session_count: int


@dataclass
class ExtendedStats:
    """Aggregate stats enriched with history-derived analytics."""

    basic: AggregateStats
    tag_distribution: dict[str, int] = field(default_factory=dict)
    weekly_progress: list[WeeklyProgress] = field(default_factory=list)
    total_study_minutes: float = 0.0
    average_session_minutes: float = 0.0
    recent_sessions: list[SessionRecord] = field(default_factory=list)
    achievements: list[Achievement] = field(default_factory=list)
