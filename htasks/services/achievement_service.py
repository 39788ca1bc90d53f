"""
Achievement evaluation service.
Computes achievement progress from the completion event log and a fixed
catalog of definitions. Unlocks are one-way: once a previous evaluation
unlocked an achievement, later evaluations keep it unlocked.
"""
from dataclasses import dataclass
from datetime import datetime, tzinfo
from enum import Enum
from typing import Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from htasks.services.streak_service import CompletionEvent, StreakService, StreakState
from htasks.constants import (
    ACHIEVEMENT_FIRST_COMPLETION,
    ACHIEVEMENT_VOLUME_THRESHOLD,
    ACHIEVEMENT_CATEGORY_DIVERSITY,
    ACHIEVEMENT_STREAK_THRESHOLD,
    ACHIEVEMENT_EARLY_COMPLETION,
    ACHIEVEMENT_CATEGORY_COUNT,
    ACHIEVEMENT_CONSISTENCY_STREAK,
    TASK_MASTER_REQUIRED,
    CATEGORY_EXPLORER_REQUIRED,
    STREAK_MASTER_REQUIRED,
    ORGANIZER_REQUIRED,
    CONSISTENCY_REQUIRED,
)


class AchievementKind(str, Enum):
    FIRST_COMPLETION = ACHIEVEMENT_FIRST_COMPLETION
    VOLUME_THRESHOLD = ACHIEVEMENT_VOLUME_THRESHOLD
    CATEGORY_DIVERSITY = ACHIEVEMENT_CATEGORY_DIVERSITY
    STREAK_THRESHOLD = ACHIEVEMENT_STREAK_THRESHOLD
    EARLY_COMPLETION = ACHIEVEMENT_EARLY_COMPLETION
    CATEGORY_COUNT = ACHIEVEMENT_CATEGORY_COUNT
    CONSISTENCY_STREAK = ACHIEVEMENT_CONSISTENCY_STREAK


# Kinds that unlock on the first qualifying event regardless of threshold
BINARY_KINDS = frozenset({
    AchievementKind.FIRST_COMPLETION,
    AchievementKind.EARLY_COMPLETION,
})


@dataclass(frozen=True)
class AchievementDefinition:
    id: str
    kind: AchievementKind
    required_progress: int
    name: str
    description: str


@dataclass(frozen=True)
class AchievementState:
    progress: int = 0
    unlocked: bool = False
    unlocked_at: Optional[datetime] = None


DEFAULT_ACHIEVEMENTS: Tuple[AchievementDefinition, ...] = (
    AchievementDefinition(
        id=AchievementKind.FIRST_COMPLETION.value,
        kind=AchievementKind.FIRST_COMPLETION,
        required_progress=1,
        name="First Task",
        description="Complete your first task",
    ),
    AchievementDefinition(
        id=AchievementKind.VOLUME_THRESHOLD.value,
        kind=AchievementKind.VOLUME_THRESHOLD,
        required_progress=TASK_MASTER_REQUIRED,
        name="Task Master",
        description=f"Complete {TASK_MASTER_REQUIRED} tasks",
    ),
    AchievementDefinition(
        id=AchievementKind.CATEGORY_DIVERSITY.value,
        kind=AchievementKind.CATEGORY_DIVERSITY,
        required_progress=CATEGORY_EXPLORER_REQUIRED,
        name="Category Explorer",
        description=f"Complete tasks in {CATEGORY_EXPLORER_REQUIRED} different categories",
    ),
    AchievementDefinition(
        id=AchievementKind.STREAK_THRESHOLD.value,
        kind=AchievementKind.STREAK_THRESHOLD,
        required_progress=STREAK_MASTER_REQUIRED,
        name="Streak Master",
        description=f"Complete tasks for {STREAK_MASTER_REQUIRED} days in a row",
    ),
    AchievementDefinition(
        id=AchievementKind.EARLY_COMPLETION.value,
        kind=AchievementKind.EARLY_COMPLETION,
        required_progress=1,
        name="Early Bird",
        description="Complete a task before its due date",
    ),
    AchievementDefinition(
        id=AchievementKind.CATEGORY_COUNT.value,
        kind=AchievementKind.CATEGORY_COUNT,
        required_progress=ORGANIZER_REQUIRED,
        name="Organizer",
        description=f"Create {ORGANIZER_REQUIRED} categories",
    ),
    AchievementDefinition(
        id=AchievementKind.CONSISTENCY_STREAK.value,
        kind=AchievementKind.CONSISTENCY_STREAK,
        required_progress=CONSISTENCY_REQUIRED,
        name="Consistency",
        description=f"Complete tasks for {CONSISTENCY_REQUIRED} days in a row",
    ),
)


def _naive_local(ts: datetime, tz: Optional[tzinfo]) -> datetime:
    if ts.tzinfo is None:
        return ts
    return ts.astimezone(tz).replace(tzinfo=None)


class AchievementService:
    """Service for achievement evaluation"""

    @staticmethod
    def is_early(event: CompletionEvent, tz: Optional[tzinfo] = None) -> bool:
        """
        Check whether an event was completed before it was due.

        Mixed naive/aware timestamps are compared as local wall-clock time.
        """
        if event.due_at is None:
            return False
        completed_at, due_at = event.completed_at, event.due_at
        if (completed_at.tzinfo is None) != (due_at.tzinfo is None):
            completed_at = _naive_local(completed_at, tz)
            due_at = _naive_local(due_at, tz)
        return completed_at < due_at

    @staticmethod
    def calculate_progress(
        definition: AchievementDefinition,
        events: Sequence[CompletionEvent],
        streak: StreakState,
        category_count: int = 0,
        tz: Optional[tzinfo] = None
    ) -> int:
        """
        Calculate raw progress for one definition.

        Args:
            definition: Achievement definition
            events: Completion event log
            streak: Streak state from the same evaluation
            category_count: Number of categories the user has created
            tz: Timezone for comparing mixed timestamps

        Returns:
            Progress value (>= 0)
        """
        kind = definition.kind

        if kind == AchievementKind.FIRST_COMPLETION:
            return 1 if events else 0
        if kind == AchievementKind.VOLUME_THRESHOLD:
            return streak.total_completions
        if kind == AchievementKind.CATEGORY_DIVERSITY:
            return len({e.category_id for e in events if e.category_id is not None})
        if kind in (AchievementKind.STREAK_THRESHOLD, AchievementKind.CONSISTENCY_STREAK):
            return streak.longest_streak
        if kind == AchievementKind.EARLY_COMPLETION:
            return sum(1 for e in events if AchievementService.is_early(e, tz))
        if kind == AchievementKind.CATEGORY_COUNT:
            return max(0, category_count)
        return 0

    @staticmethod
    def is_unlocked(definition: AchievementDefinition, progress: int) -> bool:
        """Check the unlock condition for a progress value"""
        if definition.kind in BINARY_KINDS:
            return progress >= 1
        return progress >= definition.required_progress

    @staticmethod
    def evaluate_achievements(
        events: Iterable[CompletionEvent],
        streak: StreakState,
        reference_now: datetime,
        definitions: Sequence[AchievementDefinition] = DEFAULT_ACHIEVEMENTS,
        previous: Optional[Mapping[str, AchievementState]] = None,
        category_count: int = 0,
        tz: Optional[tzinfo] = None
    ) -> Dict[str, AchievementState]:
        """
        Evaluate every definition against the event log.

        With a previous evaluation, progress never decreases and unlocked
        achievements keep their original unlock time. A definition unlocking
        in this evaluation gets reference_now as its unlock time.

        Returns:
            Mapping of achievement id to its state
        """
        events = list(events)
        previous = previous or {}
        states = {}

        for definition in definitions:
            progress = AchievementService.calculate_progress(
                definition, events, streak, category_count, tz
            )
            prior = previous.get(definition.id)

            if prior is not None:
                progress = max(progress, prior.progress)
                if prior.unlocked:
                    states[definition.id] = AchievementState(
                        progress=progress,
                        unlocked=True,
                        unlocked_at=prior.unlocked_at or reference_now
                    )
                    continue

            unlocked = AchievementService.is_unlocked(definition, progress)
            states[definition.id] = AchievementState(
                progress=progress,
                unlocked=unlocked,
                unlocked_at=reference_now if unlocked else None
            )

        return states

    @staticmethod
    def evaluate(
        events: Iterable[CompletionEvent],
        reference_now: datetime,
        definitions: Sequence[AchievementDefinition] = DEFAULT_ACHIEVEMENTS,
        previous: Optional[Mapping[str, AchievementState]] = None,
        category_count: int = 0,
        tz: Optional[tzinfo] = None
    ) -> Tuple[StreakState, Dict[str, AchievementState]]:
        """
        Evaluate streaks and achievements in one pass over the event log.

        Pure: identical inputs always give identical outputs.
        """
        events = list(events)
        streak = StreakService.compute_streak(events, reference_now, tz)
        achievements = AchievementService.evaluate_achievements(
            events, streak, reference_now, definitions, previous, category_count, tz
        )
        return streak, achievements

    @staticmethod
    def newly_unlocked(
        previous: Mapping[str, AchievementState],
        current: Mapping[str, AchievementState]
    ) -> List[str]:
        """Get ids of achievements that went from locked to unlocked"""
        return [
            achievement_id
            for achievement_id, state in current.items()
            if state.unlocked and not (
                achievement_id in previous and previous[achievement_id].unlocked
            )
        ]
