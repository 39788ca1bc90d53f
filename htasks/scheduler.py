"""
Background scheduler for day-boundary maintenance
Handles:
- Resetting the daily AI prompt quota at local midnight
- Refreshing the cached streak snapshot so broken streaks show as 0
"""

import logging
from apscheduler.schedulers.background import BackgroundScheduler
from apscheduler.triggers.cron import CronTrigger
from sqlalchemy.orm import Session
from htasks.database import SessionLocal
from htasks.services.progress_service import ProgressService
from htasks.services.prompt_service import PromptService
from htasks.services.settings_service import SettingsService

logger = logging.getLogger("htasks.scheduler")


def run_midnight_maintenance():
    """Apply the daily prompt reset and refresh the streak snapshot"""
    db: Session = SessionLocal()
    try:
        if PromptService(db).reset_daily():
            logger.info("Prompt quota reset at day boundary")
        else:
            logger.info("Prompt quota already reset for today")

        streak = ProgressService(db).refresh_snapshot()
        logger.info(
            f"Streak snapshot refreshed: current={streak.current_streak}, "
            f"longest={streak.longest_streak}"
        )
    except Exception as e:
        logger.error(f"Scheduler Error (Midnight maintenance): {e}")
    finally:
        db.close()


def _configured_timezone():
    db: Session = SessionLocal()
    try:
        return SettingsService(db).get_timezone()
    except Exception as e:
        logger.error(f"Could not read timezone setting, using server local time: {e}")
        return None
    finally:
        db.close()


def _midnight_trigger(tz) -> CronTrigger:
    if tz is None:
        return CronTrigger(hour=0, minute=0)
    return CronTrigger(hour=0, minute=0, timezone=tz)


# Create scheduler instance
scheduler = BackgroundScheduler()


def start_scheduler():
    """Start the background scheduler"""
    logger.info("Starting HTasks background scheduler")

    scheduler.add_job(
        run_midnight_maintenance,
        _midnight_trigger(_configured_timezone()),
        id='midnight_maintenance',
        replace_existing=True
    )

    scheduler.start()
    logger.info("Background scheduler started successfully")


def reschedule_midnight_job(tz):
    """Move the midnight job after the day-boundary timezone changed"""
    if scheduler.running:
        scheduler.reschedule_job("midnight_maintenance", trigger=_midnight_trigger(tz))
        logger.info(f"Midnight maintenance rescheduled for timezone {tz or 'local'}")


def stop_scheduler():
    """Stop the background scheduler"""
    if scheduler.running:
        scheduler.shutdown()
        logger.info("Background scheduler stopped")
