"""
Achievement repository - Data access layer for cached progress state.
Handles persisted achievement states and the streak snapshot.
"""
from typing import Dict
from sqlalchemy.orm import Session

from htasks.models import Achievement, StreakSnapshot


class AchievementRepository:
    """Repository for Achievement data access"""

    @staticmethod
    def get_all(db: Session) -> Dict[str, Achievement]:
        """Get stored achievement rows keyed by achievement id"""
        return {row.achievement_id: row for row in db.query(Achievement).all()}

    @staticmethod
    def add(db: Session, achievement: Achievement) -> None:
        """Stage a new row; committed by save()"""
        db.add(achievement)

    @staticmethod
    def save(db: Session) -> None:
        db.commit()


class StreakSnapshotRepository:
    """Repository for StreakSnapshot data access"""

    @staticmethod
    def get_or_create(db: Session) -> StreakSnapshot:
        """Get the snapshot row, staging an empty one if missing"""
        snapshot = db.query(StreakSnapshot).first()
        if not snapshot:
            snapshot = StreakSnapshot()
            db.add(snapshot)
        return snapshot
