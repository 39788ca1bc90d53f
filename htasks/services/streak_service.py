"""
Streak calculation service.
Derives streak statistics from the completion event log. Every function is
pure: the reference time is passed in rather than read from the clock.
"""
from collections import Counter
from dataclasses import dataclass
from datetime import datetime, date, tzinfo
from typing import Dict, Iterable, List, Optional

from htasks.services.date_service import DateService
from htasks.constants import (
    STREAK_TIER_MOMENTUM,
    STREAK_TIER_GREAT,
    STREAK_TIER_IMPRESSIVE,
)


@dataclass(frozen=True)
class CompletionEvent:
    """A chore marked complete. Created once by the host, never mutated."""
    entity_id: str
    completed_at: datetime
    category_id: Optional[str] = None
    due_at: Optional[datetime] = None


@dataclass(frozen=True)
class StreakState:
    current_streak: int = 0
    longest_streak: int = 0
    total_completions: int = 0


class StreakService:
    """Service for streak calculation"""

    @staticmethod
    def bucket_date(
        event: CompletionEvent,
        reference_day: date,
        tz: Optional[tzinfo] = None
    ) -> date:
        """
        Get the local day an event counts for.

        Completions stamped after the reference time are clamped into the
        reference day instead of being rejected.
        """
        day = DateService.local_date(event.completed_at, tz)
        return min(day, reference_day)

    @staticmethod
    def active_days(
        events: Iterable[CompletionEvent],
        reference_now: datetime,
        tz: Optional[tzinfo] = None
    ) -> List[date]:
        """
        Get distinct days with at least one completion, sorted ascending.

        Args:
            events: Completion event log
            reference_now: Evaluation time
            tz: Timezone of the day boundary

        Returns:
            Sorted list of active days
        """
        reference_day = DateService.local_date(reference_now, tz)
        return sorted({
            StreakService.bucket_date(event, reference_day, tz)
            for event in events
        })

    @staticmethod
    def compute_streak(
        events: Iterable[CompletionEvent],
        reference_now: datetime,
        tz: Optional[tzinfo] = None
    ) -> StreakState:
        """
        Calculate current and longest streaks.

        A run continues while consecutive active days are exactly one day
        apart. The current streak is the run ending at the last active day,
        and only counts if that day is today or yesterday.

        Args:
            events: Completion event log
            reference_now: Evaluation time
            tz: Timezone of the day boundary

        Returns:
            StreakState (all zeros for an empty log)
        """
        events = list(events)
        days = StreakService.active_days(events, reference_now, tz)
        if not days:
            return StreakState(total_completions=len(events))

        longest = 1
        run = 1
        for previous_day, day in zip(days, days[1:]):
            if DateService.days_between(previous_day, day) == 1:
                run += 1
            else:
                run = 1
            longest = max(longest, run)

        reference_day = DateService.local_date(reference_now, tz)
        current = 0
        if DateService.days_between(days[-1], reference_day) <= 1:
            current = 1
            for index in range(len(days) - 1, 0, -1):
                if DateService.days_between(days[index - 1], days[index]) != 1:
                    break
                current += 1

        return StreakState(
            current_streak=current,
            longest_streak=longest,
            total_completions=len(events)
        )

    @staticmethod
    def completions_by_day(
        events: Iterable[CompletionEvent],
        reference_now: datetime,
        tz: Optional[tzinfo] = None
    ) -> Dict[date, int]:
        """Count completions per local day (same clamping as streaks)"""
        reference_day = DateService.local_date(reference_now, tz)
        counts = Counter(
            StreakService.bucket_date(event, reference_day, tz)
            for event in events
        )
        return dict(sorted(counts.items()))

    @staticmethod
    def streak_message(current_streak: int) -> str:
        """Motivational text for the current streak length"""
        if current_streak <= 0:
            return "Complete a chore today to start your streak!"
        if current_streak < STREAK_TIER_MOMENTUM:
            return "You're building momentum! Keep it going."
        if current_streak < STREAK_TIER_GREAT:
            return "Great job maintaining your streak!"
        if current_streak < STREAK_TIER_IMPRESSIVE:
            return "Impressive consistency! You're developing a solid habit."
        return "Amazing discipline! Your consistency is inspiring."
