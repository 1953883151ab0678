"""
Memory Activity Repository Module

This module provides an in-memory implementation of the ActivityRepository
interface for development and testing purposes.
"""

import datetime
import itertools
import logging
import uuid
from dataclasses import replace
from typing import Dict, List, Optional, Sequence, Tuple

from lingotrack.common.clock import utcnow
from lingotrack.store.repository import ActivityRepository
from lingotrack.store.records import ExerciseRecord, PracticeSessionRecord
from lingotrack.streaks.models import DailyActivity, StreakRecord

# Setup logging
logger = logging.getLogger(__name__)


class MemoryActivityRepository(ActivityRepository):
    """
    In-memory implementation of the ActivityRepository.

    Records are copied on the way in and out so callers cannot mutate
    stored state by holding on to a returned object.
    """

    def __init__(self):
        self._streaks: Dict[Tuple[str, str], StreakRecord] = {}
        self._daily: Dict[Tuple[str, str, datetime.date], DailyActivity] = {}
        self._sessions: Dict[str, PracticeSessionRecord] = {}
        self._exercises: List[ExerciseRecord] = []
        # Tie-breaker for sessions created within the same instant
        self._sequence = itertools.count()
        self._session_order: Dict[str, int] = {}

    async def get_streak_record(self, user_id: str, language: str) -> Optional[StreakRecord]:
        record = self._streaks.get((user_id, language))
        return replace(record) if record else None

    async def upsert_streak_record(self, record: StreakRecord) -> StreakRecord:
        stored = replace(record, updated_at=utcnow())
        self._streaks[(record.user_id, record.language)] = stored
        return replace(stored)

    async def upsert_daily_activity(
        self,
        user_id: str,
        language: str,
        activity_date: datetime.date
    ) -> DailyActivity:
        key = (user_id, language, activity_date)
        activity = self._daily.get(key)
        if activity is None:
            activity = DailyActivity(user_id=user_id, language=language, activity_date=activity_date)
            self._daily[key] = activity
        activity.activity_count += 1
        activity.exercises_completed += 1
        return replace(activity)

    async def get_daily_activities(
        self,
        user_id: str,
        language: str,
        start_date: datetime.date,
        end_date: datetime.date
    ) -> List[DailyActivity]:
        rows = [
            replace(activity) for (uid, lang, day), activity in self._daily.items()
            if uid == user_id and lang == language and start_date <= day <= end_date
        ]
        return sorted(rows, key=lambda a: a.activity_date)

    async def get_recent_session_ids(self, user_id: str, language: str, limit: int) -> List[str]:
        sessions = [
            s for s in self._sessions.values()
            if s.user_id == user_id and s.language == language
        ]
        sessions.sort(key=lambda s: (s.created_at, self._session_order[s.session_id]), reverse=True)
        return [s.session_id for s in sessions[:limit]]

    async def get_exercise_target_words(self, session_ids: Sequence[str], limit: int) -> List[str]:
        wanted = set(session_ids)
        exercises = [
            (e.created_at, index, e) for index, e in enumerate(self._exercises)
            if e.session_id in wanted
        ]
        exercises.sort(key=lambda item: item[:2], reverse=True)
        words: List[str] = []
        for _, _, exercise in exercises[:limit]:
            words.extend(w for w in exercise.target_words if isinstance(w, str))
        return words

    async def add_session(
        self,
        user_id: str,
        language: str,
        session_id: Optional[str] = None,
        created_at: Optional[datetime.datetime] = None
    ) -> str:
        session = PracticeSessionRecord(
            session_id=session_id or str(uuid.uuid4()),
            user_id=user_id,
            language=language,
            created_at=created_at or utcnow()
        )
        self._sessions[session.session_id] = session
        self._session_order[session.session_id] = next(self._sequence)
        return session.session_id

    async def add_exercise(
        self,
        session_id: str,
        target_words: Sequence[str],
        created_at: Optional[datetime.datetime] = None
    ) -> None:
        exercise = ExerciseRecord(
            session_id=session_id,
            target_words=list(target_words),
            created_at=created_at or utcnow()
        )
        self._exercises.append(exercise)
