"""
Study engine: the context object the driver builds once.

Holds a reference to the caller's AppState together with the repository,
clock and random source, and sequences every mutation so it is followed by
a whole-state save. All scheduling, filtering, streak and achievement
logic lives in the stateless modules it calls.
"""

import logging
import random
from collections.abc import Callable
from datetime import datetime

from mnemo.application import collection
from mnemo.application.achievements import check_achievements, ensure_achievements
from mnemo.application.filtering import build_study_set, get_due_cards, sort_cards
from mnemo.application.scheduler import sort_by_priority, validate_quality
from mnemo.application.session import (
    ActiveSession,
    SessionStatus,
    end_session,
    record_review,
    skip_card,
    start_session,
)
from mnemo.application.stats import StatsCalculator
from mnemo.application.streak import update_streak
from mnemo.application.utils.dates import utcnow
from mnemo.domain.constants import FAILED_REVIEW_DELAY_MINUTES
from mnemo.domain.errors import ValidationError
from mnemo.domain.models import (
    Achievement,
    AppState,
    Card,
    SessionRecord,
    SessionType,
    SortKey,
    StudyFilters,
)
from mnemo.domain.ports import StateRepository
from mnemo.domain.stats import AggregateStats, ExtendedStats

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


class StudyEngine:
    """
    Single-writer facade over one AppState.

    Every public mutation validates first, mutates the state in place, then
    saves. A rejected mutation leaves the state untouched; a failed save
    raises PersistenceError but keeps the in-memory changes so the caller
    can retry with `save()`.
    """

    def __init__(
        self,
        state: AppState,
        repository: StateRepository,
        rng: random.Random | None = None,
        clock: Clock | None = None,
        failed_delay_minutes: int = FAILED_REVIEW_DELAY_MINUTES,
    ):
        self.state = state
        self._repo = repository
        self._rng = rng or random.Random()
        self._clock = clock or utcnow
        self._failed_delay = failed_delay_minutes
        self._calc = StatsCalculator()
        self._session: ActiveSession | None = None

        self.state.achievements = ensure_achievements(self.state.achievements)

    @classmethod
    def open(cls, repository: StateRepository, **kwargs) -> "StudyEngine":
        """Load state from the repository and wrap it."""
        return cls(repository.load(), repository, **kwargs)

    def now(self) -> datetime:
        return self._clock()

    def save(self) -> None:
        logger.debug(
            f"Saving state: {len(self.state.cards)} cards, "
            f"{len(self.state.session_history)} sessions"
        )
        self._repo.save(self.state)

    def verify(self) -> None:
        """Raises IntegrityError if the state breaks a collection invariant."""
        collection.check_integrity(self.state)

    # ------------------------------------------------------------------
    # Cards
    # ------------------------------------------------------------------

    def add_card(self, front: str, back: str, tags: list[str] | None = None) -> Card:
        card = collection.add_card(self.state, front, back, tags, self.now())
        self._refresh_achievements(None)
        self.save()
        return card

    def delete_card(self, card_id: str) -> Card:
        card = collection.delete_card(self.state, card_id)
        self.save()
        return card

    def update_tags(self, card_id: str, tags: list[str]) -> Card:
        card = collection.update_tags(self.state, card_id, tags)
        self.save()
        return card

    def get_card(self, card_id: str) -> Card:
        return collection.get_card(self.state, card_id)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def due_cards(self, prioritized: bool = False) -> list[Card]:
        now = self.now()
        due = get_due_cards(self.state.cards, now)
        return sort_by_priority(due, now) if prioritized else due

    def study_set(self, filters: StudyFilters | None = None) -> list[Card]:
        return build_study_set(self.state.cards, filters or StudyFilters(), self._rng, self.now())

    def sorted_cards(self, key: SortKey, descending: bool = False) -> list[Card]:
        return sort_cards(self.state.cards, key, descending)

    def stats(self) -> AggregateStats:
        return self._calc.basic(self.state, self.now())

    def extended_stats(self) -> ExtendedStats:
        return self._calc.extended(self.state, self.now())

    # ------------------------------------------------------------------
    # Sessions
    # ------------------------------------------------------------------

    @property
    def session(self) -> ActiveSession | None:
        return self._session

    @property
    def session_status(self) -> SessionStatus:
        if self._session is None:
            return SessionStatus.IDLE
        return self._session.status

    def start_session(
        self,
        session_type: SessionType | str = SessionType.DUE,
        filters: StudyFilters | None = None,
    ) -> ActiveSession:
        if self._session is not None and self._session.is_active:
            raise ValidationError(f"Session {self._session.id} is still active")
        self._session = start_session(session_type, filters, self.now())
        return self._session

    def review(self, card_id: str, quality: int) -> Card:
        """Rate one card in the active session and save."""
        card = record_review(
            self._active(), self.state, card_id, quality, self.now(), self._failed_delay
        )
        self.save()
        return card

    def skip(self, card_id: str) -> None:
        skip_card(self._active(), self.state, card_id)

    def end_session(self, quit_early: bool = False) -> tuple[SessionRecord, list[Achievement]]:
        """
        Close the active session, then update the streak and achievements
        from it and save everything in one write. The streak is credited to
        the day the session ends.

        Returns:
            (the session record, achievements unlocked by it)
        """
        session = self._active()
        now = self.now()
        record = end_session(session, self.state, quit_early, now)

        self.state.learning_streak = update_streak(
            self.state.learning_streak, now, now.date()
        )
        unlocked = self._refresh_achievements(record)
        self.save()
        return record, unlocked

    def review_single(
        self, card_id: str, quality: int
    ) -> tuple[Card, SessionRecord, list[Achievement]]:
        """One-card review session, used by non-interactive drivers."""
        validate_quality(quality)
        self.get_card(card_id)
        self.start_session(SessionType.REVIEW)
        card = self.review(card_id, quality)
        record, unlocked = self.end_session()
        return card, record, unlocked

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _active(self) -> ActiveSession:
        if self._session is None:
            raise ValidationError("No session has been started")
        return self._session

    def _refresh_achievements(self, latest: SessionRecord | None) -> list[Achievement]:
        achievements, unlocked = check_achievements(
            self.state.achievements, self.stats(), latest, self.now()
        )
        self.state.achievements = achievements
        return unlocked
