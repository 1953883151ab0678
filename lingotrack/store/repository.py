"""
Activity Repository Module

This module defines the repository interface for the persistent store the
trackers consume: streak records, daily activity counts, and the practice
session history used to seed word avoidance.
"""

import abc
import datetime
from typing import List, Optional, Sequence

from lingotrack.streaks.models import DailyActivity, StreakRecord


class ActivityRepository(abc.ABC):
    """
    Abstract base class for activity stores.

    Implementations raise StoreUnavailableError when the backing store
    cannot be reached; a missing record is not an error.
    """

    @abc.abstractmethod
    async def get_streak_record(self, user_id: str, language: str) -> Optional[StreakRecord]:
        """
        Get the streak record for a user and language.

        Args:
            user_id: User identifier
            language: Language the streak is scoped to

        Returns:
            The StreakRecord if one exists, None otherwise
        """
        pass

    @abc.abstractmethod
    async def upsert_streak_record(self, record: StreakRecord) -> StreakRecord:
        """
        Create or fully replace a streak record.

        Args:
            record: The record to store

        Returns:
            The stored record
        """
        pass

    @abc.abstractmethod
    async def upsert_daily_activity(
        self,
        user_id: str,
        language: str,
        activity_date: datetime.date
    ) -> DailyActivity:
        """
        Increment the activity count for one day, creating the row if needed.

        Args:
            user_id: User identifier
            language: Language the activity belongs to
            activity_date: Calendar day of the activity

        Returns:
            The updated DailyActivity
        """
        pass

    @abc.abstractmethod
    async def get_daily_activities(
        self,
        user_id: str,
        language: str,
        start_date: datetime.date,
        end_date: datetime.date
    ) -> List[DailyActivity]:
        """
        Get daily activity rows in the inclusive range, oldest first.
        """
        pass

    @abc.abstractmethod
    async def get_recent_session_ids(
        self,
        user_id: str,
        language: str,
        limit: int
    ) -> List[str]:
        """
        Get the most recent practice session ids, most recent first.
        """
        pass

    @abc.abstractmethod
    async def get_exercise_target_words(
        self,
        session_ids: Sequence[str],
        limit: int
    ) -> List[str]:
        """
        Get the target words of the most recent exercises of the given sessions.

        Args:
            session_ids: Sessions to look in
            limit: Maximum number of exercises to read

        Returns:
            Flattened target words, most recent exercise first
        """
        pass

    @abc.abstractmethod
    async def add_session(
        self,
        user_id: str,
        language: str,
        session_id: Optional[str] = None,
        created_at: Optional[datetime.datetime] = None
    ) -> str:
        """
        Record a practice session in the history.

        Returns:
            The session id
        """
        pass

    @abc.abstractmethod
    async def add_exercise(
        self,
        session_id: str,
        target_words: Sequence[str],
        created_at: Optional[datetime.datetime] = None
    ) -> None:
        """
        Record an exercise and its target words under a session.
        """
        pass
