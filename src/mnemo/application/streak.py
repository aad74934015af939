"""
Learning streak tracking.

A streak is the number of consecutive UTC calendar days with at least one
recorded session. Counters only move for sessions dated today or yesterday;
older dates are still added to the study calendar but never disturb the
live streak.
"""

import logging
from dataclasses import replace
from datetime import date, datetime, timedelta

from mnemo.application.utils.dates import days_between, to_date_string, to_utc_date, utcnow
from mnemo.domain.models import StreakState

logger = logging.getLogger(__name__)


def update_streak(
    streak: StreakState,
    session_date: datetime | date,
    today: date | None = None,
) -> StreakState:
    """
    Record a study day and return the updated streak.

    Args:
        streak: Current streak state (not modified).
        session_date: When the session happened.
        today: Reference day for the today/yesterday check (defaults to the
            current UTC date).
    """
    if today is None:
        today = utcnow().date()

    day = to_utc_date(session_date)
    day_str = to_date_string(day)

    study_dates = list(streak.study_dates)
    if day_str not in study_dates:
        study_dates.append(day_str)
        study_dates.sort()

    updated = replace(streak, study_dates=study_dates)

    if day not in (today, today - timedelta(days=1)):
        logger.debug(f"Backfilled study date {day_str}; streak counters unchanged")
        return updated

    if streak.last_study_date is None:
        current = 1
    else:
        gap = days_between(streak.last_study_date, day)
        if gap < 0:
            # Older than the last counted day: last_study_date must not move back.
            return updated
        if gap == 0:
            current = streak.current_streak
        elif gap == 1:
            current = streak.current_streak + 1
        else:
            current = 1

    updated.current_streak = current
    updated.longest_streak = max(streak.longest_streak, current)
    updated.last_study_date = day
    return updated


def is_streak_active(streak: StreakState, today: date | None = None) -> bool:
    """Studied today or yesterday, so the streak can still continue."""
    if streak.last_study_date is None:
        return False
    if today is None:
        today = utcnow().date()
    return days_between(streak.last_study_date, today) <= 1


def effective_streak(streak: StreakState, today: date | None = None) -> int:
    """The current streak, or 0 if it lapsed since it was last recorded."""
    return streak.current_streak if is_streak_active(streak, today) else 0
