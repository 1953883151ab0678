"""
Streak Service Module

This module provides the continuity tracker for daily practice streaks:
1. Reading a streak with lazy invalidation of stale records
2. Crediting a qualifying activity, at most once per calendar day
3. Building the activity calendar

Reads fail soft so callers stay usable while the store is briefly down.
Writes that would lose an earned streak are raised to the caller.
"""

import datetime
from typing import List, Optional

from lingotrack.common.clock import Clock
from lingotrack.common.exceptions import StoreUnavailableError, ValidationError
from lingotrack.common.logger import app_logger, log_execution_time, with_context
from lingotrack.store.repository import ActivityRepository
from lingotrack.streaks.calculator import (
    analyze_streak_status, coerce_activity_date, compute_next_streak
)
from lingotrack.streaks.models import ActivityDay, StreakData, StreakRecord

# Set up module logger
logger = app_logger.getChild("streaks.service")

DEFAULT_CALENDAR_MONTHS = 3


def _require(value: str, field: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{field} must be a non-empty string", field=field)
    return value


class StreakService:
    """
    Service for per-language daily practice streaks.

    The stored record is never rewritten on read: a record whose last
    activity is older than yesterday is simply reported with a zero
    current streak until the next credited activity replaces it.
    """

    def __init__(
        self,
        repository: ActivityRepository,
        clock: Optional[Clock] = None,
        calendar_months: int = DEFAULT_CALENDAR_MONTHS
    ):
        """
        Initialize the streak service.

        Args:
            repository: Store holding streak and daily activity records
            clock: Clock that defines "today" (defaults to a UTC clock)
            calendar_months: Default calendar span in months of 30 days
        """
        self.repository = repository
        self.clock = clock or Clock()
        self.calendar_months = calendar_months

    def _to_streak_data(self, record: Optional[StreakRecord]) -> StreakData:
        if record is None:
            return StreakData.empty()

        status = analyze_streak_status(record.last_activity_date, self.clock)
        return StreakData(
            current_streak=record.current_streak if status.is_active else 0,
            longest_streak=record.longest_streak,
            last_activity_date=coerce_activity_date(record.last_activity_date),
            streak_active=status.is_active,
            is_at_risk=status.is_at_risk,
            risk_hours_remaining=status.hours_remaining
        )

    async def get_streak(self, user_id: str, language: str) -> StreakData:
        """
        Get a user's streak for a language.

        Args:
            user_id: User identifier
            language: Language the streak is scoped to

        Returns:
            StreakData; the zero state when no record exists or the store fails
        """
        _require(user_id, "user_id")
        _require(language, "language")
        log = with_context(logger, user_id=user_id, language=language)

        try:
            record = await self.repository.get_streak_record(user_id, language)
        except Exception as e:
            log.warning(f"Could not read streak, reporting zero state: {e}")
            return StreakData.empty()

        return self._to_streak_data(record)

    @log_execution_time(logger)
    async def record_activity(self, user_id: str, language: str) -> StreakData:
        """
        Credit a completed activity toward today's streak.

        Calling this several times on the same day leaves the streak as a
        single call would. The daily activity count is best effort; the
        streak record write is not.

        Args:
            user_id: User identifier
            language: Language the activity belongs to

        Returns:
            The streak after crediting today

        Raises:
            StoreUnavailableError: If the streak record cannot be read or written
        """
        _require(user_id, "user_id")
        _require(language, "language")
        log = with_context(logger, user_id=user_id, language=language)
        today = self.clock.today()

        try:
            await self.repository.upsert_daily_activity(user_id, language, today)
        except Exception as e:
            log.warning(f"Daily activity update failed, continuing with streak: {e}")

        try:
            prior = await self.repository.get_streak_record(user_id, language)
        except StoreUnavailableError:
            raise
        except Exception as e:
            raise StoreUnavailableError(str(e), operation="get_streak_record", original_exception=e) from e

        if prior is not None and prior.last_activity_date is not None:
            last_day = coerce_activity_date(prior.last_activity_date)
            if last_day is None or last_day > today:
                log.warning(f"Malformed last activity date {prior.last_activity_date!r}, restarting streak")

        current, longest = compute_next_streak(prior, today)
        record = StreakRecord(
            user_id=user_id,
            language=language,
            current_streak=current,
            longest_streak=longest,
            last_activity_date=today
        )

        try:
            stored = await self.repository.upsert_streak_record(record)
        except StoreUnavailableError:
            log.error("Streak write failed")
            raise
        except Exception as e:
            log.error(f"Streak write failed: {e}")
            raise StoreUnavailableError(str(e), operation="upsert_streak_record", original_exception=e) from e

        log.info(f"Streak credited: current={current} longest={longest}")
        return self._to_streak_data(stored or record)

    async def get_activity_calendar(
        self,
        user_id: str,
        language: str,
        months: Optional[int] = None
    ) -> List[ActivityDay]:
        """
        Get one entry per day from ``months`` x 30 days ago through today.

        Returns:
            Days in ascending order; empty if the store fails

        Raises:
            ValidationError: If months is not positive
        """
        _require(user_id, "user_id")
        _require(language, "language")
        if months is None:
            months = self.calendar_months
        if months <= 0:
            raise ValidationError(f"months must be positive, got {months}", field="months")
        end_date = self.clock.today()
        start_date = end_date - datetime.timedelta(days=months * 30)

        try:
            activities = await self.repository.get_daily_activities(
                user_id, language, start_date, end_date
            )
        except Exception as e:
            with_context(logger, user_id=user_id, language=language).warning(
                f"Could not read activity calendar: {e}"
            )
            return []

        counts = {a.activity_date: a.exercises_completed for a in activities}
        days: List[ActivityDay] = []
        current = start_date
        while current <= end_date:
            count = counts.get(current, 0)
            days.append(ActivityDay(date=current, has_activity=count > 0, exercise_count=count))
            current += datetime.timedelta(days=1)
        return days
