"""
Statistics calculator for deriving progress signals from the state.

This is a pure computation module with no I/O.
"""

from datetime import datetime, timedelta

from mnemo.application.filtering import get_tag_distribution
from mnemo.application.scheduler import get_difficulty_tier, is_due
from mnemo.application.streak import effective_streak
from mnemo.application.utils.dates import start_of_day, utcnow
from mnemo.domain.constants import RECENT_SESSIONS_SHOWN, WEEKS_OF_PROGRESS
from mnemo.domain.models import AppState, Difficulty, SessionRecord
from mnemo.domain.stats import AggregateStats, ExtendedStats, WeeklyProgress


class StatsCalculator:
    """
    Computes aggregate and extended statistics from an AppState.

    Stateless and side-effect free.
    """

    def basic(self, state: AppState, now: datetime | None = None) -> AggregateStats:
        now = now or utcnow()
        cards = state.cards

        tiers = {tier: 0 for tier in Difficulty}
        for card in cards:
            tiers[get_difficulty_tier(card)] += 1

        total = len(cards)
        streak = state.learning_streak
        return AggregateStats(
            total=total,
            due=sum(1 for card in cards if is_due(card, now)),
            new=tiers[Difficulty.NEW],
            learning=tiers[Difficulty.LEARNING],
            young=tiers[Difficulty.YOUNG],
            mature=tiers[Difficulty.MATURE],
            total_reviews=sum(card.repetitions for card in cards),
            average_easiness=sum(card.easiness for card in cards) / total if total else 0.0,
            current_streak=effective_streak(streak, now.date()),
            longest_streak=streak.longest_streak,
            study_days=len(streak.study_dates),
            sessions_recorded=len(state.session_history),
            sessions_completed=sum(1 for s in state.session_history if not s.quit_early),
        )

    def extended(self, state: AppState, now: datetime | None = None) -> ExtendedStats:
        now = now or utcnow()
        completed = [s for s in state.session_history if not s.quit_early]

        total_minutes = sum(self._session_minutes(s) for s in completed)
        average_minutes = total_minutes / len(completed) if completed else 0.0

        return ExtendedStats(
            basic=self.basic(state, now),
            tag_distribution=get_tag_distribution(state.cards),
            weekly_progress=self.weekly_progress(completed, now),
            total_study_minutes=total_minutes,
            average_session_minutes=average_minutes,
            recent_sessions=completed[-RECENT_SESSIONS_SHOWN:],
            achievements=list(state.achievements),
        )

    def weekly_progress(
        self, sessions: list[SessionRecord], now: datetime | None = None
    ) -> list[WeeklyProgress]:
        """
        Volume and accuracy for each of the last four 7-day windows, oldest first.

        Window i (0 = current) spans the whole days from today - (7i + 6) to
        today - 7i inclusive.
        """
        now = now or utcnow()
        today = now.date()
        weeks: list[WeeklyProgress] = []

        for i in range(WEEKS_OF_PROGRESS - 1, -1, -1):
            window_start = start_of_day(today - timedelta(days=i * 7 + 6))
            window_end = start_of_day(today - timedelta(days=i * 7)) + timedelta(days=1)
            in_window = [s for s in sessions if window_start <= s.start_time < window_end]

            studied = sum(s.cards_studied for s in in_window)
            correct = sum(s.correct_answers for s in in_window)
            weeks.append(
                WeeklyProgress(
                    label=f"Week {WEEKS_OF_PROGRESS - i}",
                    cards_studied=studied,
                    accuracy=correct / studied * 100 if studied else 0.0,
                    session_count=len(in_window),
                )
            )
        return weeks

    def _session_minutes(self, session: SessionRecord) -> float:
        if session.end_time is None:
            return 0.0
        return (session.end_time - session.start_time).total_seconds() / 60
