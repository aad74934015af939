"""
SM-2 scheduling.

Pure functions that compute the next easiness, interval and due time for a
card from a 0-5 recall quality rating. Nothing here touches I/O or mutates
its inputs; callers validate the quality before calling in.

Quality scale:
    0  complete blackout
    1  wrong, but the answer seemed easy once seen
    2  wrong, but remembered on seeing the answer
    3  correct with serious difficulty
    4  correct after some hesitation
    5  perfect recall
"""

import math
from dataclasses import dataclass, replace
from datetime import datetime, timedelta

from mnemo.application.utils.dates import add_days, utcnow
from mnemo.domain.constants import (
    FAILED_INTERVAL,
    FAILED_REVIEW_DELAY_MINUTES,
    FIRST_INTERVAL,
    LEARNING_MAX_INTERVAL,
    MAX_EASINESS,
    MAX_QUALITY,
    MIN_EASINESS,
    MIN_QUALITY,
    NEW_MAX_INTERVAL,
    PASSING_QUALITY,
    SECOND_INTERVAL,
    SESSION_SIZE_INTENSIVE,
    SESSION_SIZE_MAX,
    SESSION_SIZE_QUICK,
    SESSION_SIZE_STANDARD,
    YOUNG_MAX_INTERVAL,
)
from mnemo.domain.errors import ValidationError
from mnemo.domain.models import Card, Difficulty


@dataclass(frozen=True)
class ReviewResult:
    """Immutable result of a review calculation."""

    easiness: float
    interval: int  # days
    repetitions: int
    next_review: datetime


def validate_quality(quality: int) -> int:
    """Reject anything that is not an integer in 0..5."""
    if isinstance(quality, bool) or not isinstance(quality, int):
        raise ValidationError(f"Quality must be an integer, got {quality!r}")
    if quality < MIN_QUALITY or quality > MAX_QUALITY:
        raise ValidationError(
            f"Quality must be between {MIN_QUALITY} and {MAX_QUALITY}, got {quality}"
        )
    return quality


def calculate_easiness(current: float, quality: int) -> float:
    """
    EF' = EF + (0.1 - (5 - q) * (0.08 + (5 - q) * 0.02)), held within [1.3, 3.0].
    """
    miss = MAX_QUALITY - quality
    adjusted = current + (0.1 - miss * (0.08 + miss * 0.02))
    return min(MAX_EASINESS, max(MIN_EASINESS, adjusted))


def calculate_interval(
    current_interval: int, new_repetitions: int, new_easiness: float, quality: int
) -> int:
    """
    Interval in days for the updated repetition count.

    The third and later successes multiply the previous interval by the
    post-update easiness.
    """
    if quality < PASSING_QUALITY:
        return FAILED_INTERVAL
    if new_repetitions == 1:
        return FIRST_INTERVAL
    if new_repetitions == 2:
        return SECOND_INTERVAL
    return math.ceil(current_interval * new_easiness)


def calculate_next_review(
    card: Card,
    quality: int,
    now: datetime | None = None,
    failed_delay_minutes: int = FAILED_REVIEW_DELAY_MINUTES,
) -> ReviewResult:
    """
    Calculate the complete review result for a card.

    Args:
        card: Card in its current scheduling state.
        quality: Recall quality (0-5), already validated by the caller.
        now: Time of review (defaults to now).
        failed_delay_minutes: Retry delay applied to failed reviews.

    Returns:
        ReviewResult with the new scheduling parameters.
    """
    if now is None:
        now = utcnow()

    passed = quality >= PASSING_QUALITY
    repetitions = card.repetitions + 1 if passed else 0
    easiness = calculate_easiness(card.easiness, quality)
    interval = calculate_interval(card.interval, repetitions, easiness, quality)

    if passed:
        next_review = add_days(now, interval)
    else:
        next_review = now + timedelta(minutes=failed_delay_minutes)

    return ReviewResult(
        easiness=easiness,
        interval=interval,
        repetitions=repetitions,
        next_review=next_review,
    )


def apply_review(card: Card, result: ReviewResult, now: datetime) -> Card:
    """Return a copy of the card carrying the review result."""
    return replace(
        card,
        easiness=result.easiness,
        interval=result.interval,
        repetitions=result.repetitions,
        next_review=result.next_review,
        last_review=now,
    )


def is_due(card: Card, reference: datetime | None = None) -> bool:
    if reference is None:
        reference = utcnow()
    return card.next_review <= reference


def days_until_due(card: Card, reference: datetime | None = None) -> int:
    """Whole days until due, rounded up; negative when overdue."""
    if reference is None:
        reference = utcnow()
    seconds = (card.next_review - reference).total_seconds()
    return math.ceil(seconds / 86400)


def get_difficulty_tier(card: Card) -> Difficulty:
    """Classify by interval: <=1 new, 2-7 learning, 8-30 young, >30 mature."""
    if card.interval <= NEW_MAX_INTERVAL:
        return Difficulty.NEW
    if card.interval <= LEARNING_MAX_INTERVAL:
        return Difficulty.LEARNING
    if card.interval <= YOUNG_MAX_INTERVAL:
        return Difficulty.YOUNG
    return Difficulty.MATURE


def predict_next_interval(card: Card, quality: int) -> int:
    """Interval the card would get if rated `quality` now."""
    passed = quality >= PASSING_QUALITY
    repetitions = card.repetitions + 1 if passed else 0
    easiness = calculate_easiness(card.easiness, quality)
    return calculate_interval(card.interval, repetitions, easiness, quality)


def recommended_session_size(due_count: int) -> int:
    if due_count <= SESSION_SIZE_QUICK:
        return due_count
    if due_count <= SESSION_SIZE_STANDARD:
        return SESSION_SIZE_STANDARD
    if due_count <= SESSION_SIZE_INTENSIVE:
        return SESSION_SIZE_INTENSIVE
    return min(SESSION_SIZE_MAX, math.ceil(due_count * 0.3))


def card_priority(card: Card, reference: datetime | None = None) -> int:
    """
    Study priority: overdue days weigh most, then due today, then
    new and learning cards get a small boost.
    """
    days = days_until_due(card, reference)
    priority = 0
    if days < 0:
        priority += abs(days) * 10
    elif days == 0:
        priority += 5

    tier = get_difficulty_tier(card)
    if tier is Difficulty.NEW:
        priority += 3
    elif tier is Difficulty.LEARNING:
        priority += 2
    return priority


def sort_by_priority(cards: list[Card], reference: datetime | None = None) -> list[Card]:
    """Highest priority first; ties keep their original order."""
    if reference is None:
        reference = utcnow()
    return sorted(cards, key=lambda c: card_priority(c, reference), reverse=True)
