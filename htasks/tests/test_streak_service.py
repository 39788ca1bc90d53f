"""
Tests for StreakService.

Tests cover:
1. Current and longest streak calculation
2. Same-day completions and future timestamps
3. Timezone bucketing
4. Per-day counts and streak messages
"""
import pytest
from datetime import date, datetime, timedelta, timezone

from htasks.services.streak_service import CompletionEvent, StreakService, StreakState


def event_on(day: date, hour: int = 12, entity_id: str = "chore") -> CompletionEvent:
    return CompletionEvent(
        entity_id=entity_id,
        completed_at=datetime.combine(day, datetime.min.time()) + timedelta(hours=hour)
    )


def events_on_offsets(today: date, offsets) -> list:
    """Events on today minus each offset"""
    return [event_on(today - timedelta(days=offset)) for offset in offsets]


class TestComputeStreak:
    """Tests for compute_streak function"""

    def test_empty_log_is_all_zeros(self, now):
        """Empty event list should give zero streaks and completions"""
        result = StreakService.compute_streak([], now)

        assert result == StreakState(0, 0, 0)

    def test_three_consecutive_days(self, today, now):
        """Days 1,2,3 evaluated on day 3 -> current 3, longest 3"""
        events = events_on_offsets(today, [2, 1, 0])

        result = StreakService.compute_streak(events, now)

        assert result.current_streak == 3
        assert result.longest_streak == 3
        assert result.total_completions == 3

    def test_gap_resets_run(self, today, now):
        """Days 1,2,5 evaluated on day 5 -> longest 2, current 1"""
        events = events_on_offsets(today, [4, 3, 0])

        result = StreakService.compute_streak(events, now)

        assert result.longest_streak == 2
        assert result.current_streak == 1

    def test_streak_ending_yesterday_still_counts(self, today, now):
        """No completion yet today should not break the streak"""
        events = events_on_offsets(today, [3, 2, 1])

        result = StreakService.compute_streak(events, now)

        assert result.current_streak == 3

    def test_streak_broken_after_two_days(self, today, now):
        """Last completion two days ago -> current streak 0"""
        events = events_on_offsets(today, [4, 3, 2])

        result = StreakService.compute_streak(events, now)

        assert result.current_streak == 0
        assert result.longest_streak == 3

    def test_same_day_completions_count_once_for_streak(self, today, now):
        """Multiple completions on one day add one active day but count fully"""
        events = [
            event_on(today, 8, "dishes"),
            event_on(today, 9, "laundry"),
            event_on(today, 20, "trash"),
            event_on(today - timedelta(days=1), 12, "vacuum"),
        ]

        result = StreakService.compute_streak(events, now)

        assert result.current_streak == 2
        assert result.longest_streak == 2
        assert result.total_completions == 4

    def test_order_of_events_does_not_matter(self, today, now):
        """Unsorted input should give the same result"""
        events = events_on_offsets(today, [0, 5, 1, 6, 2, 7])

        forward = StreakService.compute_streak(events, now)
        backward = StreakService.compute_streak(list(reversed(events)), now)

        assert forward == backward
        assert forward.current_streak == 3
        assert forward.longest_streak == 3

    def test_longest_streak_in_the_past(self, today, now):
        """An older, longer run should be reported as longest"""
        events = events_on_offsets(today, [10, 9, 8, 7, 6, 1, 0])

        result = StreakService.compute_streak(events, now)

        assert result.longest_streak == 5
        assert result.current_streak == 2

    def test_future_completion_clamped_to_today(self, today, now):
        """Completions stamped after the reference time count for today"""
        events = [
            event_on(today - timedelta(days=1)),
            event_on(today + timedelta(days=3)),
        ]

        result = StreakService.compute_streak(events, now)

        assert result.current_streak == 2
        assert result.longest_streak == 2
        assert result.total_completions == 2

    def test_streak_across_month_boundary(self):
        """Jan 31 -> Feb 1 is consecutive"""
        events = [event_on(date(2026, 1, 30)), event_on(date(2026, 1, 31)), event_on(date(2026, 2, 1))]
        now = datetime(2026, 2, 1, 18, 0)

        result = StreakService.compute_streak(events, now)

        assert result.current_streak == 3

    def test_timezone_moves_completion_to_next_day(self):
        """23:30 UTC is already the next day at UTC+3"""
        tz = timezone(timedelta(hours=3))
        events = [
            CompletionEvent("a", datetime(2026, 1, 29, 12, 0, tzinfo=timezone.utc)),
            CompletionEvent("b", datetime(2026, 1, 29, 23, 30, tzinfo=timezone.utc)),
        ]
        now = datetime(2026, 1, 30, 12, 0, tzinfo=tz)

        in_utc = StreakService.compute_streak(events, now, timezone.utc)
        in_tz = StreakService.compute_streak(events, now, tz)

        assert in_utc.longest_streak == 1
        assert in_tz.longest_streak == 2
        assert in_tz.current_streak == 2

    @pytest.mark.parametrize("offsets", [
        [0],
        [0, 1, 2, 3],
        [1, 3, 5, 7],
        [0, 2, 3, 4, 9, 10],
        [6, 5, 4, 1],
    ])
    def test_longest_never_below_current(self, today, now, offsets):
        """longest_streak >= current_streak for any log"""
        result = StreakService.compute_streak(events_on_offsets(today, offsets), now)

        assert result.longest_streak >= result.current_streak
        assert result.total_completions == len(offsets)

    def test_evaluation_is_deterministic(self, today, now):
        """Same inputs give the same output"""
        events = events_on_offsets(today, [0, 1, 4])

        assert StreakService.compute_streak(events, now) == StreakService.compute_streak(events, now)


class TestCompletionsByDay:
    """Tests for completions_by_day function"""

    def test_counts_per_day(self, today, now):
        events = [event_on(today, 8), event_on(today, 9), event_on(today - timedelta(days=2))]

        result = StreakService.completions_by_day(events, now)

        assert result == {today - timedelta(days=2): 1, today: 2}
        assert list(result) == sorted(result)

    def test_empty_log(self, now):
        assert StreakService.completions_by_day([], now) == {}


class TestStreakMessage:
    """Tests for streak_message function"""

    @pytest.mark.parametrize("streak, expected", [
        (0, "Complete a chore today to start your streak!"),
        (1, "You're building momentum! Keep it going."),
        (3, "Great job maintaining your streak!"),
        (7, "Impressive consistency! You're developing a solid habit."),
        (14, "Amazing discipline! Your consistency is inspiring."),
    ])
    def test_message_tiers(self, streak, expected):
        assert StreakService.streak_message(streak) == expected
