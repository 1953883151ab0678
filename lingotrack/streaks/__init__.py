"""
Daily practice streaks per user and language.

The service lives in ``lingotrack.streaks.service``; only the records are
exported here because the store layer imports them.
"""

from lingotrack.streaks.models import ActivityDay, DailyActivity, StreakData, StreakRecord

__all__ = ['ActivityDay', 'DailyActivity', 'StreakData', 'StreakRecord']
