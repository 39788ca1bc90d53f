"""
Settings repository.
The settings table holds a single row, created with defaults on first read.
"""
from sqlalchemy.orm import Session
from htasks.models import Settings


class SettingsRepository:
    """Repository for the single Settings row"""

    @staticmethod
    def get(db: Session) -> Settings:
        settings = db.query(Settings).first()
        if settings is None:
            settings = SettingsRepository.create_default(db)
        return settings

    @staticmethod
    def create_default(db: Session) -> Settings:
        """Insert a row with the quota and timezone defaults"""
        settings = Settings()
        db.add(settings)
        db.commit()
        db.refresh(settings)
        return settings

    @staticmethod
    def save(db: Session, settings: Settings) -> Settings:
        db.commit()
        db.refresh(settings)
        return settings
