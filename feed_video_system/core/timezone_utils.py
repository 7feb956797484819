"""
Timezone utilities for the Feed Video System.

Lock expiry times are kept as timezone-aware UTC datetimes internally and
rendered in the configured display timezone.
"""

import datetime
import logging
from typing import Optional

import pytz


class TimezoneManager:
    """Manages timezone-aware datetime operations"""

    def __init__(self, timezone_name: str = "UTC"):
        self.logger = logging.getLogger(__name__)
        try:
            self.timezone = pytz.timezone(timezone_name)
            self.timezone_name = timezone_name
        except pytz.UnknownTimeZoneError:
            self.logger.warning(f"Unknown timezone {timezone_name!r}, falling back to UTC")
            self.timezone = pytz.UTC
            self.timezone_name = "UTC"

    def now(self) -> datetime.datetime:
        """Get current time in the configured timezone"""
        return datetime.datetime.now(self.timezone)

    def utc_now(self) -> datetime.datetime:
        """Get current UTC time"""
        return datetime.datetime.now(pytz.UTC)

    def to_local(self, dt: datetime.datetime) -> datetime.datetime:
        """Convert datetime to local timezone"""
        if dt.tzinfo is None:
            # Assume UTC if no timezone info
            dt = pytz.UTC.localize(dt)
        return dt.astimezone(self.timezone)

    def to_utc(self, dt: datetime.datetime) -> datetime.datetime:
        """Convert datetime to UTC"""
        if dt.tzinfo is None:
            dt = self.timezone.localize(dt)
        return dt.astimezone(pytz.UTC)

    def format_timestamp(self, dt: Optional[datetime.datetime] = None,
                         include_timezone: bool = True) -> str:
        """Format datetime as a display timestamp"""
        if dt is None:
            dt = self.now()
        dt = self.to_local(dt)

        if include_timezone:
            return dt.strftime("%Y-%m-%d %H:%M:%S %Z")
        return dt.strftime("%Y-%m-%d %H:%M:%S")


def utc_now() -> datetime.datetime:
    """Current time as an aware UTC datetime"""
    return datetime.datetime.now(pytz.UTC)


def ensure_utc(dt: datetime.datetime) -> datetime.datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC"""
    if dt.tzinfo is None:
        return pytz.UTC.localize(dt)
    return dt.astimezone(pytz.UTC)
