"""
Tests for SettingsService.

Tests cover:
1. Defaults of the single settings row
2. Timezone validation on update
3. Partial updates and timezone change logging
"""
import logging
import pytest

from htasks.models import Settings
from htasks.schemas import SettingsUpdate
from htasks.services.settings_service import SettingsService
from htasks.exceptions import InvalidArgumentException


class TestGetSettings:
    """Tests for get function"""

    def test_defaults(self, db_session):
        settings = SettingsService(db_session).get()

        assert settings.daily_prompt_quota == 15
        assert settings.timezone == ""
        assert SettingsService(db_session).get_timezone() is None

    def test_single_row(self, db_session):
        service = SettingsService(db_session)
        service.get()
        service.get()

        assert db_session.query(Settings).count() == 1


class TestUpdateSettings:
    """Tests for update function"""

    def test_update_timezone(self, db_session):
        service = SettingsService(db_session)

        service.update(SettingsUpdate(timezone="Europe/Berlin"))

        assert service.get().timezone == "Europe/Berlin"
        assert service.get_timezone() is not None

    @pytest.mark.parametrize("name", ["Nowhere/Special", "America"])
    def test_unknown_timezone_rejected(self, db_session, name):
        """Unknown names and zone folders leave the setting unchanged"""
        service = SettingsService(db_session)

        with pytest.raises(InvalidArgumentException):
            service.update(SettingsUpdate(timezone=name))

        assert service.get().timezone == ""

    def test_empty_timezone_means_local_time(self, db_session):
        service = SettingsService(db_session)
        service.update(SettingsUpdate(timezone="Europe/Berlin"))

        service.update(SettingsUpdate(timezone=""))

        assert service.get_timezone() is None

    def test_partial_update_keeps_other_fields(self, db_session):
        service = SettingsService(db_session)
        service.update(SettingsUpdate(timezone="Europe/Berlin"))

        service.update(SettingsUpdate(daily_prompt_quota=20))

        settings = service.get()
        assert settings.daily_prompt_quota == 20
        assert settings.timezone == "Europe/Berlin"

    def test_timezone_change_is_logged(self, db_session, caplog):
        with caplog.at_level(logging.INFO, logger="htasks.settings"):
            SettingsService(db_session).update(SettingsUpdate(timezone="Asia/Tokyo"))

        assert "'local' to 'Asia/Tokyo'" in caplog.text

    def test_same_timezone_not_logged(self, db_session, caplog):
        service = SettingsService(db_session)
        service.update(SettingsUpdate(timezone="Asia/Tokyo"))

        with caplog.at_level(logging.INFO, logger="htasks.settings"):
            service.update(SettingsUpdate(timezone="Asia/Tokyo"))

        assert "Timezone changed" not in caplog.text
