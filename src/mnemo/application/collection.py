"""Card collection operations: add, delete, re-tag, and integrity checks."""

import logging
from collections import Counter
from dataclasses import replace
from datetime import datetime

from mnemo.application.id_service import generate_card_id
from mnemo.application.utils.dates import utcnow
from mnemo.application.validation import normalize_tags, validate_card_id, validate_card_input
from mnemo.domain.constants import MAX_EASINESS, MIN_EASINESS
from mnemo.domain.errors import IntegrityError, NotFoundError
from mnemo.domain.models import AppState, Card

logger = logging.getLogger(__name__)


def add_card(
    state: AppState,
    front: str,
    back: str,
    tags: list[str] | None = None,
    now: datetime | None = None,
) -> Card:
    """
    Create a new card, due immediately, and append it to the collection.

    Raises:
        ValidationError: Empty or oversized text, or bad tags.
    """
    data = validate_card_input(front, back, tags)
    now = now or utcnow()

    card = Card(
        id=generate_card_id(),
        front=data.front,
        back=data.back,
        tags=data.tags,
        created_at=now,
        next_review=now,
    )
    state.cards.append(card)
    logger.info(f"Added card {card.id}")
    return card


def get_card(state: AppState, card_id: str) -> Card:
    validate_card_id(card_id)
    card = state.find_card(card_id)
    if card is None:
        raise NotFoundError(card_id)
    return card


def delete_card(state: AppState, card_id: str) -> Card:
    """Remove a card. Unlocked achievements are unaffected."""
    card = get_card(state, card_id)
    state.cards = [c for c in state.cards if c.id != card_id]
    logger.info(f"Deleted card {card_id}")
    return card


def update_tags(state: AppState, card_id: str, tags: list[str]) -> Card:
    """Replace a card's tags. Scheduling fields are left alone."""
    card = get_card(state, card_id)
    clean = normalize_tags(tags)

    updated = replace(card, tags=clean)
    state.cards = [updated if c.id == card_id else c for c in state.cards]
    logger.info(f"Updated tags on {card_id}: {', '.join(clean) or '(none)'}")
    return updated


def find_integrity_problems(state: AppState) -> list[str]:
    """Describe every duplicate id and every easiness outside [1.3, 3.0]."""
    problems: list[str] = []

    counts = Counter(card.id for card in state.cards)
    for card_id, count in counts.items():
        if count > 1:
            problems.append(f"duplicate card id {card_id} ({count} copies)")

    for card in state.cards:
        if not MIN_EASINESS <= card.easiness <= MAX_EASINESS:
            problems.append(f"card {card.id} has easiness {card.easiness:.2f} outside [1.3, 3.0]")

    session_counts = Counter(s.id for s in state.session_history)
    for session_id, count in session_counts.items():
        if count > 1:
            problems.append(f"duplicate session id {session_id} ({count} copies)")

    return problems


def check_integrity(state: AppState) -> None:
    """
    Raises:
        IntegrityError: Listing every problem found.
    """
    problems = find_integrity_problems(state)
    if problems:
        raise IntegrityError(problems)
