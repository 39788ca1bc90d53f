"""
Settings service.
Handles the runtime-tunable prompt quota and day-boundary timezone.
"""
import logging
from datetime import tzinfo
from typing import Optional
from sqlalchemy.orm import Session

from htasks.models import Settings
from htasks.schemas import SettingsUpdate
from htasks.repositories.settings_repository import SettingsRepository
from htasks.services.date_service import DateService

logger = logging.getLogger("htasks.settings")


class SettingsService:
    """Service for application settings"""

    def __init__(self, db: Session):
        self.db = db
        self.settings_repo = SettingsRepository()

    def get(self) -> Settings:
        return self.settings_repo.get(self.db)

    def get_timezone(self) -> Optional[tzinfo]:
        """Timezone of the local day boundary (None = server local time)"""
        return DateService.resolve_timezone(self.get().timezone)

    def update(self, settings_update: SettingsUpdate) -> Settings:
        """
        Update settings.

        Completions are stored as naive local wall-clock time, so a new
        timezone only applies to completions recorded after the change.
        Stored completions keep their time and calendar day.

        Raises:
            InvalidArgumentException: If the timezone name is unknown
        """
        settings = self.get()
        update_data = settings_update.model_dump(exclude_unset=True)
        previous_timezone = settings.timezone
        new_timezone = update_data.get("timezone")

        if new_timezone is not None:
            DateService.resolve_timezone(new_timezone)

        for key, value in update_data.items():
            if value is not None:
                setattr(settings, key, value)

        if new_timezone is not None and new_timezone != previous_timezone:
            logger.info(
                f"Timezone changed from '{previous_timezone or 'local'}' to "
                f"'{new_timezone or 'local'}'; stored completions keep their local times"
            )

        return self.settings_repo.save(self.db, settings)
