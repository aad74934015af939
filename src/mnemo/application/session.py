"""
Review session lifecycle.

IDLE -> ACTIVE -> COMPLETED | ABANDONED

A session is a small mutable tally. Each rating is applied to the card in
the shared state straight away, so ending a session early never loses the
reviews already made.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from mnemo.application.id_service import generate_session_id
from mnemo.application.scheduler import (
    apply_review,
    calculate_next_review,
    validate_quality,
)
from mnemo.application.utils.dates import utcnow
from mnemo.application.validation import validate_card_id
from mnemo.domain.constants import (
    FAILED_REVIEW_DELAY_MINUTES,
    MAX_QUALITY,
    PASSING_QUALITY,
    SESSION_HISTORY_LIMIT,
)
from mnemo.domain.errors import NotFoundError, ValidationError
from mnemo.domain.models import AppState, Card, SessionRecord, SessionType, StudyFilters

logger = logging.getLogger(__name__)


class SessionStatus(str, Enum):
    IDLE = "idle"
    ACTIVE = "active"
    COMPLETED = "completed"
    ABANDONED = "abandoned"


@dataclass
class ActiveSession:
    """Running tally for one session. Becomes a SessionRecord on end."""

    id: str
    session_type: SessionType
    start_time: datetime
    filters: dict | None = None
    status: SessionStatus = SessionStatus.ACTIVE
    cards_studied: int = 0
    correct_answers: int = 0
    incorrect_answers: int = 0
    qualities: list[int] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    end_time: datetime | None = None

    @property
    def is_active(self) -> bool:
        return self.status is SessionStatus.ACTIVE


def start_session(
    session_type: SessionType | str = SessionType.DUE,
    filters: StudyFilters | None = None,
    now: datetime | None = None,
) -> ActiveSession:
    try:
        session_type = SessionType(session_type)
    except ValueError as e:
        raise ValidationError(f"Unknown session type: {session_type!r}") from e

    session = ActiveSession(
        id=generate_session_id(),
        session_type=session_type,
        start_time=now or utcnow(),
        filters=filters.snapshot() if filters is not None else None,
    )
    logger.info(f"Session {session.id} started ({session.session_type.value})")
    return session


def _require_active(session: ActiveSession) -> None:
    if not session.is_active:
        raise ValidationError(f"Session {session.id} is {session.status.value}, not active")


def _card_index(state: AppState, card_id: str) -> int:
    validate_card_id(card_id)
    for index, card in enumerate(state.cards):
        if card.id == card_id:
            return index
    raise NotFoundError(card_id)


def record_review(
    session: ActiveSession,
    state: AppState,
    card_id: str,
    quality: int,
    now: datetime | None = None,
    failed_delay_minutes: int = FAILED_REVIEW_DELAY_MINUTES,
) -> Card:
    """
    Apply one rating to a card and count it toward the session.

    Returns:
        The updated card, already stored back into `state.cards`.

    Raises:
        ValidationError: Session not active, malformed id or quality out of range.
        NotFoundError: No card with that id. Nothing is mutated.
    """
    _require_active(session)
    validate_quality(quality)
    index = _card_index(state, card_id)
    now = now or utcnow()

    card = state.cards[index]
    result = calculate_next_review(card, quality, now, failed_delay_minutes)
    updated = apply_review(card, result, now)
    state.cards[index] = updated

    session.cards_studied += 1
    session.qualities.append(quality)
    if quality >= PASSING_QUALITY:
        session.correct_answers += 1
    else:
        session.incorrect_answers += 1

    logger.debug(
        f"Reviewed {card_id} q={quality}: interval {card.interval}->{updated.interval}, "
        f"easiness {card.easiness:.2f}->{updated.easiness:.2f}"
    )
    return updated


def skip_card(session: ActiveSession, state: AppState, card_id: str) -> None:
    """Pass over a card without rating it. It does not count as studied."""
    _require_active(session)
    _card_index(state, card_id)
    session.skipped.append(card_id)


def average_difficulty(qualities: list[int]) -> float:
    """Mean of (5 - quality): 0 is easiest, 5 is hardest."""
    if not qualities:
        return 0.0
    return sum(MAX_QUALITY - q for q in qualities) / len(qualities)


def append_session(history: list[SessionRecord], record: SessionRecord) -> list[SessionRecord]:
    """Append and keep only the most recent SESSION_HISTORY_LIMIT records."""
    combined = [*history, record]
    return combined[-SESSION_HISTORY_LIMIT:]


def end_session(
    session: ActiveSession,
    state: AppState,
    quit_early: bool = False,
    now: datetime | None = None,
) -> SessionRecord:
    """
    Close the session, append its record to the state's history and return it.

    Card mutations made during the session are kept either way.
    """
    _require_active(session)
    end_time = now or utcnow()

    record = SessionRecord(
        id=session.id,
        start_time=session.start_time,
        end_time=end_time,
        cards_studied=session.cards_studied,
        correct_answers=session.correct_answers,
        incorrect_answers=session.incorrect_answers,
        average_difficulty=average_difficulty(session.qualities),
        session_type=session.session_type,
        quit_early=quit_early,
        filters=session.filters,
        duration_seconds=max(0.0, (end_time - session.start_time).total_seconds()),
    )
    state.session_history = append_session(state.session_history, record)

    session.end_time = end_time
    session.status = SessionStatus.ABANDONED if quit_early else SessionStatus.COMPLETED
    logger.info(
        f"Session {session.id} {session.status.value}: "
        f"{record.correct_answers}/{record.cards_studied} correct"
    )
    return record
