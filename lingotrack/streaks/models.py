"""
Streak Models

Data carried between the streak service and the activity store. Records are
scoped per (user, language); a language is the "category" a streak counts.
"""

import datetime
from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional


@dataclass
class StreakRecord:
    """
    Stored streak state for one user and language.

    ``last_activity_date`` is a calendar day with no time-of-day meaning.
    A record read back from storage may carry an unparseable or future
    value; callers treat that as "not a continuation".
    """

    user_id: str
    language: str
    current_streak: int = 0
    longest_streak: int = 0
    last_activity_date: Optional[datetime.date] = None
    updated_at: Optional[datetime.datetime] = None


@dataclass
class DailyActivity:
    """Count of qualifying activities for one user, language and day."""

    user_id: str
    language: str
    activity_date: datetime.date
    activity_count: int = 0
    exercises_completed: int = 0


@dataclass
class StreakStatus:
    """Whether a streak is alive, and whether it needs today's credit to survive."""

    is_active: bool
    is_at_risk: bool = False
    hours_remaining: Optional[int] = None


@dataclass
class StreakData:
    """Streak as reported to callers, with lazy invalidation applied."""

    current_streak: int = 0
    longest_streak: int = 0
    last_activity_date: Optional[datetime.date] = None
    streak_active: bool = False
    is_at_risk: bool = False
    risk_hours_remaining: Optional[int] = None

    @classmethod
    def empty(cls) -> "StreakData":
        return cls()

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        if self.last_activity_date is not None:
            data["last_activity_date"] = self.last_activity_date.isoformat()
        return data


@dataclass
class ActivityDay:
    """One day of the activity calendar."""

    date: datetime.date
    has_activity: bool = False
    exercise_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "has_activity": self.has_activity,
            "exercise_count": self.exercise_count,
        }

