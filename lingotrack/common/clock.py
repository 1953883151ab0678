"""
Clock Module

Wall-clock and calendar-day source for the trackers. Every day boundary in
the system is computed in one configured timezone; ``now()`` is always a
timezone-aware UTC datetime.
"""

import datetime
from typing import Optional, Union

import pytz

from lingotrack.common.exceptions import ConfigurationError

TimezoneArg = Union[str, datetime.tzinfo, None]


def resolve_timezone(tz: TimezoneArg) -> datetime.tzinfo:
    """
    Resolve a timezone name (or tzinfo) to a pytz timezone.

    Args:
        tz: IANA timezone name, tzinfo instance, or None for UTC

    Returns:
        tzinfo instance

    Raises:
        ConfigurationError: If the name is not a known timezone
    """
    if tz is None:
        return pytz.utc
    if isinstance(tz, datetime.tzinfo):
        return tz
    try:
        return pytz.timezone(tz)
    except pytz.UnknownTimeZoneError as e:
        raise ConfigurationError(f"Unknown timezone: {tz}", config_key="STREAK_TIMEZONE") from e


def utcnow() -> datetime.datetime:
    """Current UTC instant as a naive datetime, the form stored in the database."""
    return datetime.datetime.now(pytz.utc).replace(tzinfo=None)


class Clock:
    """System clock evaluated in a single timezone."""

    def __init__(self, timezone: TimezoneArg = None):
        self.timezone = resolve_timezone(timezone)

    def now(self) -> datetime.datetime:
        """Current instant as an aware UTC datetime."""
        return datetime.datetime.now(pytz.utc)

    def timestamp(self) -> float:
        """Current instant as epoch seconds."""
        return self.now().timestamp()

    def local_now(self) -> datetime.datetime:
        """Current instant in the configured timezone."""
        return self.now().astimezone(self.timezone)

    def today(self) -> datetime.date:
        """Current calendar day in the configured timezone."""
        return self.local_now().date()

    def end_of_today(self) -> datetime.datetime:
        """First instant of tomorrow in the configured timezone."""
        tomorrow = self.today() + datetime.timedelta(days=1)
        naive = datetime.datetime.combine(tomorrow, datetime.time.min)
        if hasattr(self.timezone, "localize"):
            return self.timezone.localize(naive)
        return naive.replace(tzinfo=self.timezone)


class ManualClock(Clock):
    """
    Clock whose current instant is set explicitly.

    Used by tests and simulations to step across day boundaries and
    cooldown expiries without sleeping.
    """

    def __init__(self, start: Optional[datetime.datetime] = None, timezone: TimezoneArg = None):
        super().__init__(timezone)
        self._now = self._as_utc(start or datetime.datetime.now(pytz.utc))

    @staticmethod
    def _as_utc(value: datetime.datetime) -> datetime.datetime:
        if value.tzinfo is None:
            return pytz.utc.localize(value)
        return value.astimezone(pytz.utc)

    def now(self) -> datetime.datetime:
        return self._now

    def set(self, value: datetime.datetime) -> None:
        self._now = self._as_utc(value)

    def advance(self, **delta) -> datetime.datetime:
        """Move the clock forward by ``datetime.timedelta(**delta)``."""
        self._now = self._now + datetime.timedelta(**delta)
        return self._now
