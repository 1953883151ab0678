"""
Streak tracking rules as pure functions, no store access.
"""

import datetime
import math
from typing import Any, Optional, Tuple

from lingotrack.common.clock import Clock
from lingotrack.streaks.models import StreakRecord, StreakStatus

ONE_DAY = datetime.timedelta(days=1)


def coerce_activity_date(value: Any) -> Optional[datetime.date]:
    """
    Normalize a stored last-activity value to a calendar day.

    Accepts dates, datetimes (their date part) and ISO-8601 strings.
    Anything else yields None, which the rules treat like a malformed date.
    """
    if value is None:
        return None
    if isinstance(value, datetime.datetime):
        return value.date()
    if isinstance(value, datetime.date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            return datetime.date.fromisoformat(text[:10])
        except ValueError:
            return None
    return None


def analyze_streak_status(last_activity_date: Any, clock: Clock) -> StreakStatus:
    """
    Decide whether a streak ending on ``last_activity_date`` is alive.

    Alive means the last credited day is today or yesterday in the clock's
    timezone. A streak last credited yesterday is alive but at risk, with
    the whole hours left before today ends.
    """
    last_day = coerce_activity_date(last_activity_date)
    if last_day is None:
        return StreakStatus(is_active=False)

    today = clock.today()
    if last_day == today:
        return StreakStatus(is_active=True, is_at_risk=False)

    if last_day == today - ONE_DAY:
        seconds_left = (clock.end_of_today() - clock.now()).total_seconds()
        hours_remaining = max(0, math.ceil(seconds_left / 3600))
        return StreakStatus(is_active=True, is_at_risk=True, hours_remaining=hours_remaining)

    return StreakStatus(is_active=False)


def compute_next_streak(
    record: Optional[StreakRecord],
    today: datetime.date
) -> Tuple[int, int]:
    """
    Apply one qualifying activity on ``today`` to a stored record.

    Returns:
        (new current streak, new longest streak)
    """
    if record is None:
        return 1, 1

    prior_current = max(0, int(record.current_streak or 0))
    prior_longest = max(0, int(record.longest_streak or 0))
    last_day = coerce_activity_date(record.last_activity_date)

    if last_day == today:
        # Already credited today
        current = max(prior_current, 1)
    elif last_day is not None and last_day == today - ONE_DAY:
        current = prior_current + 1
    else:
        # Never active, a gap of two or more days, a future date or garbage
        current = 1

    return current, max(prior_longest, current)
