"""Achievement system for tracking and celebrating milestones."""

import logging
import math
from collections.abc import Callable
from dataclasses import dataclass, replace
from datetime import datetime

from mnemo.application.utils.dates import utcnow
from mnemo.domain.models import (
    Achievement,
    AchievementCategory,
    AchievementProgress,
    SessionRecord,
)
from mnemo.domain.stats import AggregateStats

logger = logging.getLogger(__name__)

StatSource = Callable[[AggregateStats, SessionRecord | None], int | None]


@dataclass(frozen=True)
class AchievementRule:
    """
    One row of the rule table.

    `stat` returns the progress value, or None when the latest session
    gives nothing to measure (progress is then left as it was).
    """

    id: str
    name: str
    description: str
    category: AchievementCategory
    required: int
    stat: StatSource
    stat_label: str
    icon: str = ""

    def initial(self) -> Achievement:
        return Achievement(
            id=self.id,
            name=self.name,
            description=self.description,
            category=self.category,
            icon=self.icon,
            progress=AchievementProgress(
                current=0, required=self.required, description=self.stat_label
            ),
        )


def _total_cards(stats: AggregateStats, _session: SessionRecord | None) -> int:
    return stats.total


def _sessions_recorded(stats: AggregateStats, _session: SessionRecord | None) -> int:
    return stats.sessions_recorded


def _sessions_completed(stats: AggregateStats, _session: SessionRecord | None) -> int:
    return stats.sessions_completed


def _total_reviews(stats: AggregateStats, _session: SessionRecord | None) -> int:
    return stats.total_reviews


def _current_streak(stats: AggregateStats, _session: SessionRecord | None) -> int:
    return stats.current_streak


def _mature_cards(stats: AggregateStats, _session: SessionRecord | None) -> int:
    return stats.mature


def _session_accuracy(_stats: AggregateStats, session: SessionRecord | None) -> int | None:
    if session is None or session.accuracy is None:
        return None
    return math.floor(session.accuracy)


def _perfect_session(_stats: AggregateStats, session: SessionRecord | None) -> int | None:
    if session is None or session.cards_studied == 0:
        return None
    return 1 if session.correct_answers == session.cards_studied else 0


CARDS = AchievementCategory.CARDS
SESSIONS = AchievementCategory.SESSIONS
STREAKS = AchievementCategory.STREAKS
MASTERY = AchievementCategory.MASTERY

# fmt: off
ACHIEVEMENT_RULES: tuple[AchievementRule, ...] = (
    AchievementRule("first_card", "First Steps", "Create your first flashcard",
                    CARDS, 1, _total_cards, "cards created", "◎"),
    AchievementRule("cards_10", "Growing Collection", "Create 10 flashcards",
                    CARDS, 10, _total_cards, "cards created", "◐"),
    AchievementRule("card_collector", "Card Collector", "Create 50 flashcards",
                    CARDS, 50, _total_cards, "cards created", "◑"),
    AchievementRule("card_master", "Card Master", "Create 200 flashcards",
                    CARDS, 200, _total_cards, "cards created", "◒"),
    AchievementRule("first_session", "Study Beginner", "Complete your first study session",
                    SESSIONS, 1, _sessions_recorded, "sessions recorded", "◉"),
    AchievementRule("sessions_10", "Study Regular", "Complete 10 study sessions",
                    SESSIONS, 10, _sessions_completed, "sessions completed", "★"),
    AchievementRule("sessions_50", "Study Warrior", "Complete 50 study sessions",
                    SESSIONS, 50, _sessions_completed, "sessions completed", "✦"),
    AchievementRule("reviews_100", "Dedicated Learner", "Complete 100 card reviews",
                    MASTERY, 100, _total_reviews, "total reviews", "◰"),
    AchievementRule("streak_3", "3-Day Streak", "Study for 3 consecutive days",
                    STREAKS, 3, _current_streak, "day streak", "◈"),
    AchievementRule("streak_7", "Week Warrior", "Study for 7 consecutive days",
                    STREAKS, 7, _current_streak, "day streak", "◊"),
    AchievementRule("streak_30", "Learning Machine", "Study for 30 consecutive days",
                    STREAKS, 30, _current_streak, "day streak", "◆"),
    AchievementRule("streak_100", "Unstoppable", "Study for 100 consecutive days",
                    STREAKS, 100, _current_streak, "day streak", "❖"),
    AchievementRule("accuracy_90", "Accuracy Master", "Achieve 90% accuracy in a session",
                    MASTERY, 90, _session_accuracy, "session accuracy %", "◎"),
    AchievementRule("perfect_session", "Perfect Score", "Answer every card correctly in a session",
                    MASTERY, 1, _perfect_session, "perfect sessions", "✪"),
    AchievementRule("mature_20", "Seasoned Learner", "Have 20 mature cards",
                    MASTERY, 20, _mature_cards, "mature cards", "❂"),
)
# fmt: on

RULES_BY_ID = {rule.id: rule for rule in ACHIEVEMENT_RULES}


def default_achievements() -> list[Achievement]:
    return [rule.initial() for rule in ACHIEVEMENT_RULES]


def ensure_achievements(existing: list[Achievement]) -> list[Achievement]:
    """
    Add any rule missing from a loaded list, keeping existing entries
    (and their unlock state) untouched and in their stored order.
    """
    present = {a.id for a in existing}
    missing = [rule.initial() for rule in ACHIEVEMENT_RULES if rule.id not in present]
    return [*existing, *missing]


def check_achievements(
    achievements: list[Achievement],
    stats: AggregateStats,
    latest_session: SessionRecord | None = None,
    now: datetime | None = None,
) -> tuple[list[Achievement], list[Achievement]]:
    """
    Re-evaluate every locked achievement.

    Unlocked achievements are returned as-is: their unlock time and
    progress never change again.

    Returns:
        (all achievements, the ones unlocked by this call)
    """
    now = now or utcnow()
    updated: list[Achievement] = []
    newly_unlocked: list[Achievement] = []

    for achievement in achievements:
        rule = RULES_BY_ID.get(achievement.id)
        if achievement.unlocked or rule is None:
            updated.append(achievement)
            continue

        value = rule.stat(stats, latest_session)
        if value is None:
            updated.append(achievement)
            continue

        progress = replace(achievement.progress, current=value)
        unlocked_at = now if value >= achievement.progress.required else None
        evaluated = replace(achievement, progress=progress, unlocked_at=unlocked_at)
        updated.append(evaluated)

        if unlocked_at is not None:
            newly_unlocked.append(evaluated)
            logger.info(f"Achievement unlocked: {evaluated.name} ({evaluated.id})")

    return updated, newly_unlocked


def unlocked(achievements: list[Achievement]) -> list[Achievement]:
    return [a for a in achievements if a.unlocked]
