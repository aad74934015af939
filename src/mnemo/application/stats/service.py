"""
Stats Service — Application layer orchestrator.

Coordinates loading state from the repository and computing statistics,
for read-only callers that do not hold a live StudyEngine.
"""

import logging
from datetime import datetime

from mnemo.domain.ports import StateRepository
from mnemo.domain.stats import AggregateStats, ExtendedStats

from .metrics_calculator import StatsCalculator

logger = logging.getLogger(__name__)


class StatsService:
    """
    Application service for reporting on the stored collection.

    Depends on the StateRepository abstraction, not a concrete adapter.
    """

    def __init__(
        self,
        repository: StateRepository,
        calculator: StatsCalculator | None = None,
    ):
        """
        Args:
            repository: The repository (port) holding the state.
            calculator: Optional custom calculator; uses default if not provided.
        """
        self._repo = repository
        self._calc = calculator or StatsCalculator()

    def get_basic_stats(self, now: datetime | None = None) -> AggregateStats:
        return self._calc.basic(self._repo.load(), now)

    def get_extended_stats(self, now: datetime | None = None) -> ExtendedStats:
        state = self._repo.load()
        logger.debug(f"Computing extended stats over {len(state.cards)} cards")
        return self._calc.extended(state, now)
