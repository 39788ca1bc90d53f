"""
Progress service.
Host side of the streak and achievement engine: loads the completion log,
runs the pure evaluation and caches the result.
"""
import logging
from datetime import datetime, timedelta
from typing import Dict, List, Optional, Tuple
from sqlalchemy.orm import Session

from htasks.models import Completion, Achievement
from htasks.schemas import CompletionCreate
from htasks.repositories.completion_repository import CompletionRepository, CategoryRepository
from htasks.repositories.achievement_repository import (
    AchievementRepository, StreakSnapshotRepository
)
from htasks.services.achievement_service import (
    AchievementService, AchievementState, DEFAULT_ACHIEVEMENTS
)
from htasks.services.date_service import DateService
from htasks.services.settings_service import SettingsService
from htasks.services.streak_service import CompletionEvent, StreakService, StreakState
from htasks.exceptions import InvalidArgumentException
from htasks.constants import (
    ACHIEVEMENT_FILTER_ALL, ACHIEVEMENT_FILTER_UNLOCKED, ACHIEVEMENT_FILTERS, DEFAULT_TIMEFRAME
)

logger = logging.getLogger("htasks.progress")


class ProgressService:
    """Service for recording completions and reading progress"""

    def __init__(self, db: Session, definitions=DEFAULT_ACHIEVEMENTS):
        self.db = db
        self.definitions = definitions
        self.completion_repo = CompletionRepository()
        self.category_repo = CategoryRepository()
        self.achievement_repo = AchievementRepository()
        self.snapshot_repo = StreakSnapshotRepository()
        self.settings_service = SettingsService(db)

    def _now(self, now: Optional[datetime] = None) -> datetime:
        tz = self.settings_service.get_timezone()
        if now is None:
            return DateService.now_local(tz)
        return DateService.to_local_naive(now, tz)

    def _load_events(self) -> List[CompletionEvent]:
        return [
            CompletionEvent(
                entity_id=row.entity_id,
                completed_at=row.completed_at,
                category_id=row.category_id,
                due_at=row.due_at
            )
            for row in self.completion_repo.get_all(self.db)
        ]

    @staticmethod
    def _to_state(row: Achievement) -> AchievementState:
        return AchievementState(
            progress=row.progress or 0,
            unlocked=bool(row.unlocked),
            unlocked_at=row.unlocked_at
        )

    def _evaluate_and_store(
        self,
        reference_now: datetime
    ) -> Tuple[StreakState, Dict[str, AchievementState], List[str]]:
        """
        Evaluate streaks and achievements and store the result.

        Stored achievement states are passed back in as the previous
        evaluation, so unlocks survive edits to the completion log.
        """
        rows = self.achievement_repo.get_all(self.db)
        previous = {achievement_id: self._to_state(row) for achievement_id, row in rows.items()}

        # Stored timestamps are naive local time, so no timezone is needed here
        streak, states = AchievementService.evaluate(
            self._load_events(),
            reference_now,
            self.definitions,
            previous,
            self.category_repo.count(self.db)
        )
        newly_unlocked = AchievementService.newly_unlocked(previous, states)

        self._store(rows, streak, states, reference_now)

        for achievement_id in newly_unlocked:
            logger.info(f"Achievement unlocked: {achievement_id}")

        return streak, states, newly_unlocked

    def get_progress(
        self,
        now: Optional[datetime] = None,
        status: str = ACHIEVEMENT_FILTER_ALL
    ) -> dict:
        """
        Evaluate progress and return a report.

        Args:
            now: Reference time (defaults to the current local time)
            status: Achievement list filter: all, unlocked or locked

        Returns:
            Progress report with streak, achievements and newly unlocked ids

        Raises:
            InvalidArgumentException: If the status filter is unknown
        """
        if status not in ACHIEVEMENT_FILTERS:
            raise InvalidArgumentException(
                "status", f"must be one of {', '.join(ACHIEVEMENT_FILTERS)}"
            )
        streak, states, newly_unlocked = self._evaluate_and_store(self._now(now))
        return self._build_report(streak, states, newly_unlocked, status)

    def _store(
        self,
        rows: Dict[str, Achievement],
        streak: StreakState,
        states: Dict[str, AchievementState],
        evaluated_at: datetime
    ) -> None:
        for achievement_id, state in states.items():
            row = rows.get(achievement_id)
            if row is None:
                row = Achievement(achievement_id=achievement_id)
                self.achievement_repo.add(self.db, row)
            row.progress = state.progress
            row.unlocked = state.unlocked
            row.unlocked_at = state.unlocked_at

        snapshot = self.snapshot_repo.get_or_create(self.db)
        snapshot.current_streak = streak.current_streak
        snapshot.longest_streak = streak.longest_streak
        snapshot.total_completions = streak.total_completions
        snapshot.evaluated_at = evaluated_at

        self.achievement_repo.save(self.db)

    def _build_report(
        self,
        streak: StreakState,
        states: Dict[str, AchievementState],
        newly_unlocked: List[str],
        status: str = ACHIEVEMENT_FILTER_ALL
    ) -> dict:
        definitions = self.definitions
        if status != ACHIEVEMENT_FILTER_ALL:
            wanted = status == ACHIEVEMENT_FILTER_UNLOCKED
            definitions = [d for d in definitions if states[d.id].unlocked == wanted]

        # Unlocked first, then by name
        definitions = sorted(
            definitions,
            key=lambda d: (not states[d.id].unlocked, d.name)
        )
        return {
            "streak": {
                "current_streak": streak.current_streak,
                "longest_streak": streak.longest_streak,
                "total_completions": streak.total_completions,
                "message": StreakService.streak_message(streak.current_streak)
            },
            "achievements": [
                {
                    "id": d.id,
                    "kind": d.kind.value,
                    "name": d.name,
                    "description": d.description,
                    "required_progress": d.required_progress,
                    "progress": states[d.id].progress,
                    "unlocked": states[d.id].unlocked,
                    "unlocked_at": states[d.id].unlocked_at
                }
                for d in definitions
            ],
            "newly_unlocked": newly_unlocked
        }

    def record_completion(self, data: CompletionCreate, now: Optional[datetime] = None) -> dict:
        """
        Append a completion to the log and re-evaluate progress.

        Args:
            data: Completion details; completed_at defaults to now
            now: Reference time (defaults to the current local time)

        Returns:
            Progress report including the stored completion
        """
        tz = self.settings_service.get_timezone()
        reference_now = self._now(now)
        completed_at = data.completed_at or reference_now

        completion = Completion(
            entity_id=data.entity_id,
            category_id=data.category_id,
            completed_at=DateService.to_local_naive(completed_at, tz),
            due_at=DateService.to_local_naive(data.due_at, tz) if data.due_at else None
        )
        completion = self.completion_repo.create(self.db, completion)
        logger.info(f"Recorded completion of {completion.entity_id} at {completion.completed_at}")

        report = self.get_progress(reference_now)
        report["completion"] = completion
        return report

    def refresh_snapshot(self, now: Optional[datetime] = None) -> StreakState:
        """Re-evaluate so the cached snapshot reflects a streak broken overnight"""
        streak, _, _ = self._evaluate_and_store(self._now(now))
        return streak

    def get_history(self, days: int, now: Optional[datetime] = None) -> List[dict]:
        """
        Get completions per local day for the last N days (today included).

        Days without completions are reported with a count of 0.
        """
        reference_now = self._now(now)
        today = reference_now.date()
        start_date = today - timedelta(days=days - 1)
        day_start, _ = DateService.get_day_range(start_date)

        events = [
            CompletionEvent(entity_id=row.entity_id, completed_at=row.completed_at)
            for row in self.completion_repo.get_since(self.db, day_start)
        ]
        counts = StreakService.completions_by_day(events, reference_now)

        return [
            {"day": start_date + timedelta(days=offset),
             "completions": counts.get(start_date + timedelta(days=offset), 0)}
            for offset in range(days)
        ]

    def get_category_breakdown(
        self,
        timeframe: str = DEFAULT_TIMEFRAME,
        now: Optional[datetime] = None
    ) -> dict:
        """
        Count completions per category within a time frame.

        Args:
            timeframe: day, week, month or all
            now: Reference time (defaults to the current local time)

        Returns:
            Breakdown with the frame start, total and per-category counts
            (most completions first, uncategorized as category_id None)

        Raises:
            InvalidArgumentException: If the time frame is unknown
        """
        since = DateService.timeframe_start(timeframe, self._now(now))
        names = {str(c.id): c.name for c in self.category_repo.get_all(self.db)}

        rows = sorted(
            self.completion_repo.count_by_category(self.db, since),
            key=lambda row: (-row[1], row[0] is None, row[0] or "")
        )
        return {
            "timeframe": timeframe,
            "since": since,
            "total": sum(count for _, count in rows),
            "categories": [
                {
                    "category_id": category_id,
                    "name": names.get(category_id) if category_id is not None else None,
                    "completions": count
                }
                for category_id, count in rows
            ]
        }

    def get_completions(self) -> List[Completion]:
        return self.completion_repo.get_all(self.db)
