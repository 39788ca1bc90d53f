"""
Completion repository - Data access layer for Completion and Category models.
"""
from datetime import datetime
from typing import List, Optional, Tuple
from sqlalchemy import func
from sqlalchemy.orm import Session

from htasks.models import Completion, Category


class CompletionRepository:
    """Repository for Completion data access"""

    @staticmethod
    def get_all(db: Session) -> List[Completion]:
        """Get the full completion log in chronological order"""
        return db.query(Completion).order_by(Completion.completed_at, Completion.id).all()

    @staticmethod
    def get_since(db: Session, since: datetime) -> List[Completion]:
        """Get completions at or after a point in time"""
        return db.query(Completion).filter(
            Completion.completed_at >= since
        ).order_by(Completion.completed_at, Completion.id).all()

    @staticmethod
    def count_by_category(
        db: Session,
        since: Optional[datetime] = None
    ) -> List[Tuple[Optional[str], int]]:
        """Count completions per category_id, optionally from a point in time on"""
        query = db.query(Completion.category_id, func.count(Completion.id))
        if since is not None:
            query = query.filter(Completion.completed_at >= since)
        return [(category_id, count) for category_id, count in query.group_by(Completion.category_id).all()]

    @staticmethod
    def create(db: Session, completion: Completion) -> Completion:
        """Append a completion to the log"""
        db.add(completion)
        db.commit()
        db.refresh(completion)
        return completion


class CategoryRepository:
    """Repository for Category data access"""

    @staticmethod
    def get_all(db: Session) -> List[Category]:
        return db.query(Category).order_by(Category.id).all()

    @staticmethod
    def get_by_id(db: Session, category_id: int) -> Optional[Category]:
        return db.query(Category).filter(Category.id == category_id).first()

    @staticmethod
    def get_by_name(db: Session, name: str) -> Optional[Category]:
        return db.query(Category).filter(Category.name == name).first()

    @staticmethod
    def count(db: Session) -> int:
        return db.query(Category).count()

    @staticmethod
    def create(db: Session, category: Category) -> Category:
        db.add(category)
        db.commit()
        db.refresh(category)
        return category
