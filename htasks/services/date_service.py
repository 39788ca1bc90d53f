"""
Date calculation service.
Handles local calendar days, the boundary used by both streaks and the
daily prompt quota.
"""
import calendar
from datetime import datetime, timedelta, date, tzinfo
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from htasks.exceptions import InvalidArgumentException
from htasks.constants import (
    TIMEFRAME_DAY, TIMEFRAME_WEEK, TIMEFRAME_MONTH, TIMEFRAME_ALL, TIMEFRAMES
)


class DateService:
    """Service for date-related operations"""

    @staticmethod
    def resolve_timezone(name: Optional[str]) -> Optional[tzinfo]:
        """
        Resolve an IANA timezone name.

        Args:
            name: Timezone name like "Europe/Berlin". Empty or None means
                the server's local time.

        Returns:
            tzinfo, or None for local time

        Raises:
            InvalidArgumentException: If the name is not a known timezone
        """
        if not name:
            return None
        try:
            return ZoneInfo(name)
        except (ZoneInfoNotFoundError, ValueError, OSError):
            # Zone folders like "America" fail with IsADirectoryError
            raise InvalidArgumentException("timezone", f"unknown timezone '{name}'")

    @staticmethod
    def local_date(ts: datetime, tz: Optional[tzinfo] = None) -> date:
        """
        Get the local calendar day of a timestamp.

        Naive datetimes are already local wall-clock time and are used as-is.
        Aware datetimes are converted into tz (or the local zone if tz is None).

        Args:
            ts: Timestamp to bucket
            tz: Target timezone

        Returns:
            Calendar date in the target timezone
        """
        if ts.tzinfo is None:
            return ts.date()
        return ts.astimezone(tz).date()

    @staticmethod
    def today(tz: Optional[tzinfo] = None, now: Optional[datetime] = None) -> date:
        """
        Get the current local calendar day.

        Args:
            tz: Timezone of the day boundary
            now: Reference time (defaults to the system clock)

        Returns:
            Today's date in tz
        """
        if now is None:
            now = datetime.now(tz) if tz is not None else datetime.now()
        return DateService.local_date(now, tz)

    @staticmethod
    def to_local_naive(ts: datetime, tz: Optional[tzinfo] = None) -> datetime:
        """Convert a timestamp to naive local wall-clock time (storage format)"""
        if ts.tzinfo is None:
            return ts
        return ts.astimezone(tz).replace(tzinfo=None)

    @staticmethod
    def now_local(tz: Optional[tzinfo] = None) -> datetime:
        """Current naive local wall-clock time in tz"""
        if tz is None:
            return datetime.now()
        return datetime.now(tz).replace(tzinfo=None)

    @staticmethod
    def days_between(start: date, end: date) -> int:
        """Signed number of calendar days from start to end"""
        return (end - start).days

    @staticmethod
    def get_day_range(target_date: date, tz: Optional[tzinfo] = None) -> tuple[datetime, datetime]:
        """
        Get datetime range for a full day (local midnight to local midnight).

        Args:
            target_date: Date to get range for
            tz: Timezone of the range; naive datetimes when None

        Returns:
            Tuple of (day_start, day_end) datetimes
        """
        day_start = datetime.combine(target_date, datetime.min.time(), tzinfo=tz)
        day_end = datetime.combine(target_date + timedelta(days=1), datetime.min.time(), tzinfo=tz)
        return day_start, day_end

    @staticmethod
    def timeframe_start(timeframe: str, now: datetime) -> Optional[datetime]:
        """
        Get the start of an analytics time frame.

        day is local midnight today, week is 7 days back, month is one
        calendar month back (day clamped to the month's length), all has
        no start.

        Args:
            timeframe: One of day, week, month, all
            now: Reference time

        Returns:
            Start datetime, or None for all

        Raises:
            InvalidArgumentException: If the time frame is unknown
        """
        if timeframe == TIMEFRAME_DAY:
            return datetime.combine(now.date(), datetime.min.time(), tzinfo=now.tzinfo)
        if timeframe == TIMEFRAME_WEEK:
            return now - timedelta(days=7)
        if timeframe == TIMEFRAME_MONTH:
            year, month = (now.year, now.month - 1) if now.month > 1 else (now.year - 1, 12)
            day = min(now.day, calendar.monthrange(year, month)[1])
            return now.replace(year=year, month=month, day=day)
        if timeframe == TIMEFRAME_ALL:
            return None
        raise InvalidArgumentException(
            "timeframe", f"must be one of {', '.join(TIMEFRAMES)}"
        )
