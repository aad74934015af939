"""
Card filtering pipeline for building study sets and searching.

Builds study sets by:
1. Applying every active predicate (AND across kinds, OR within tags)
2. Truncating to an optional limit
3. Optionally shuffling the result

All functions return new lists and leave their input untouched.
"""

import logging
import random
from collections import Counter
from collections.abc import Iterable
from datetime import datetime, timedelta
from functools import cmp_to_key

from mnemo.application.scheduler import get_difficulty_tier, is_due
from mnemo.application.utils.dates import utcnow
from mnemo.domain.errors import ValidationError
from mnemo.domain.models import Card, Difficulty, SortKey, StudyFilters

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------


def matches_query(card: Card, query: str | None) -> bool:
    """Case-insensitive substring match on front, back or any tag."""
    needle = (query or "").strip().lower()
    if not needle:
        return True
    return (
        needle in card.front.lower()
        or needle in card.back.lower()
        or any(needle in tag.lower() for tag in card.tags)
    )


def matches_tags(card: Card, tags: Iterable[str]) -> bool:
    """True if the card carries ANY of the tags. No tags matches everything."""
    wanted = {t.lower() for t in tags}
    if not wanted:
        return True
    return any(tag.lower() in wanted for tag in card.tags)


def matches_difficulty(card: Card, difficulty: Difficulty) -> bool:
    return get_difficulty_tier(card) == difficulty


def matches_filters(card: Card, filters: StudyFilters, reference: datetime) -> bool:
    if filters.query and not matches_query(card, filters.query):
        return False
    if filters.tags and not matches_tags(card, filters.tags):
        return False
    if filters.difficulty is not None and not matches_difficulty(card, filters.difficulty):
        return False
    if filters.due_only and not is_due(card, reference):
        return False

    # Range criteria
    if filters.min_easiness is not None and card.easiness < filters.min_easiness:
        return False
    if filters.max_easiness is not None and card.easiness > filters.max_easiness:
        return False
    if filters.min_interval is not None and card.interval < filters.min_interval:
        return False
    if filters.max_interval is not None and card.interval > filters.max_interval:
        return False
    if filters.created_after is not None and card.created_at < filters.created_after:
        return False
    if filters.created_before is not None and card.created_at > filters.created_before:
        return False
    return True


# ---------------------------------------------------------------------------
# Collection operators
# ---------------------------------------------------------------------------


def filter_cards(
    cards: list[Card], filters: StudyFilters, reference: datetime | None = None
) -> list[Card]:
    """Keep the cards matching every active predicate, in their original order."""
    if reference is None:
        reference = utcnow()
    return [card for card in cards if matches_filters(card, filters, reference)]


def limit_cards(cards: list[Card], limit: int | None) -> list[Card]:
    """Keep the first `limit` cards. None means no limit."""
    if limit is None:
        return list(cards)
    if limit < 0:
        raise ValidationError(f"Limit must not be negative, got {limit}")
    return list(cards[:limit])


def shuffle_cards(cards: list[Card], rng: random.Random | None = None) -> list[Card]:
    """
    Fisher-Yates shuffle into a new list.

    Walks from the last index down to 1, swapping each position with a
    uniformly chosen index in [0, i].
    """
    rng = rng or random.Random()
    shuffled = list(cards)
    for i in range(len(shuffled) - 1, 0, -1):
        j = rng.randint(0, i)
        shuffled[i], shuffled[j] = shuffled[j], shuffled[i]
    return shuffled


def build_study_set(
    cards: list[Card],
    filters: StudyFilters,
    rng: random.Random | None = None,
    reference: datetime | None = None,
) -> list[Card]:
    """
    Filter, then limit, then optionally shuffle.

    Args:
        cards: The whole collection.
        filters: Criteria; an empty StudyFilters returns every card in order.
        rng: Random source used when `filters.random_order` is set.
        reference: Time used for the due check (defaults to now).

    Raises:
        ValidationError: If the limit is negative. Checked before any work.
    """
    if filters.limit is not None and filters.limit < 0:
        raise ValidationError(f"Limit must not be negative, got {filters.limit}")

    selected = filter_cards(cards, filters, reference)
    selected = limit_cards(selected, filters.limit)
    if filters.random_order:
        selected = shuffle_cards(selected, rng)

    logger.debug(f"Study set: {len(selected)}/{len(cards)} cards selected")
    return selected


def _sort_value(card: Card, key: SortKey):
    if key is SortKey.CREATED:
        return card.created_at
    if key is SortKey.MODIFIED:
        return card.last_review or card.created_at
    if key is SortKey.EASINESS:
        return card.easiness
    if key is SortKey.INTERVAL:
        return card.interval
    if key is SortKey.NEXT_REVIEW:
        return card.next_review
    if key is SortKey.REPETITIONS:
        return card.repetitions
    raise ValidationError(f"Unknown sort key: {key!r}")


def sort_cards(cards: list[Card], key: SortKey, descending: bool = False) -> list[Card]:
    """
    Stable sort by one field.

    Each card is tagged with its original index so equal keys keep their
    relative order in both directions.
    """
    key = SortKey(key)
    tagged = [(index, _sort_value(card, key), card) for index, card in enumerate(cards)]

    def compare(a, b) -> int:
        if a[1] != b[1]:
            result = -1 if a[1] < b[1] else 1
            return -result if descending else result
        return a[0] - b[0]

    return [card for _, _, card in sorted(tagged, key=cmp_to_key(compare))]


# ---------------------------------------------------------------------------
# Convenience queries
# ---------------------------------------------------------------------------


def search_cards(cards: list[Card], query: str) -> list[Card]:
    return [card for card in cards if matches_query(card, query)]


def get_due_cards(cards: list[Card], reference: datetime | None = None) -> list[Card]:
    if reference is None:
        reference = utcnow()
    return [card for card in cards if is_due(card, reference)]


def get_unique_tags(cards: list[Card]) -> list[str]:
    return sorted({tag for card in cards for tag in card.tags})


def get_tag_distribution(cards: list[Card]) -> dict[str, int]:
    counts = Counter(tag for card in cards for tag in card.tags)
    return dict(sorted(counts.items()))


def get_stale_cards(
    cards: list[Card], days: int = 7, reference: datetime | None = None
) -> list[Card]:
    """Cards with no activity (review or creation) in the last `days` days."""
    threshold = (reference or utcnow()) - timedelta(days=days)
    return [card for card in cards if (card.last_review or card.created_at) < threshold]


def get_upcoming_cards(
    cards: list[Card], days: int = 3, reference: datetime | None = None
) -> list[Card]:
    """Cards that fall due within the next `days` days."""
    start = reference or utcnow()
    end = start + timedelta(days=days)
    return [card for card in cards if start <= card.next_review <= end]


def get_recently_studied(
    cards: list[Card], hours: int = 24, reference: datetime | None = None
) -> list[Card]:
    threshold = (reference or utcnow()) - timedelta(hours=hours)
    return [
        card for card in cards if card.last_review is not None and card.last_review >= threshold
    ]
