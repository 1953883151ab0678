"""
SQL Activity Repository

This module provides database access for streaks, daily activity and
practice history through SQLAlchemy async sessions.
"""

import datetime
import functools
import uuid
from typing import Any, Callable, List, Optional, Sequence, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from lingotrack.common.clock import utcnow
from lingotrack.common.exceptions import StoreUnavailableError
from lingotrack.common.logger import app_logger
from lingotrack.database.models import (
    PracticeExercise, PracticeSession, UserDailyActivity, UserLanguageStreak
)
from lingotrack.store.repository import ActivityRepository
from lingotrack.streaks.models import DailyActivity, StreakRecord

logger = app_logger.getChild("store.sql")

F = TypeVar('F', bound=Callable[..., Any])


def wraps_store_errors(func: F) -> F:
    """Translate driver and connection failures into StoreUnavailableError."""
    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return await func(*args, **kwargs)
        except (SQLAlchemyError, OSError) as e:
            logger.error(f"{func.__name__} failed: {e}")
            raise StoreUnavailableError(str(e), operation=func.__name__, original_exception=e) from e
    return wrapper  # type: ignore[return-value]


def _to_streak_record(row: UserLanguageStreak) -> StreakRecord:
    return StreakRecord(
        user_id=row.user_id,
        language=row.language,
        current_streak=row.current_streak or 0,
        longest_streak=row.longest_streak or 0,
        last_activity_date=row.last_activity_date,
        updated_at=row.updated_at
    )


def _to_daily_activity(row: UserDailyActivity) -> DailyActivity:
    return DailyActivity(
        user_id=row.user_id,
        language=row.language,
        activity_date=row.activity_date,
        activity_count=row.activity_count or 0,
        exercises_completed=row.exercises_completed or 0
    )


class SqlActivityRepository(ActivityRepository):
    """Repository for activity data in a relational database."""

    def __init__(self, session_factory: sessionmaker):
        """
        Initialize the repository with a session factory.

        Args:
            session_factory: SQLAlchemy session factory producing AsyncSession objects
        """
        self._session_factory = session_factory

    @wraps_store_errors
    async def get_streak_record(self, user_id: str, language: str) -> Optional[StreakRecord]:
        async with self._session_factory() as session:
            row = await session.get(UserLanguageStreak, (user_id, language))
            return _to_streak_record(row) if row else None

    @wraps_store_errors
    async def upsert_streak_record(self, record: StreakRecord) -> StreakRecord:
        async with self._session_factory() as session:
            row = await session.merge(UserLanguageStreak(
                user_id=record.user_id,
                language=record.language,
                current_streak=record.current_streak,
                longest_streak=record.longest_streak,
                last_activity_date=record.last_activity_date,
                updated_at=utcnow()
            ))
            await session.commit()
            return _to_streak_record(row)

    @wraps_store_errors
    async def upsert_daily_activity(
        self,
        user_id: str,
        language: str,
        activity_date: datetime.date
    ) -> DailyActivity:
        async with self._session_factory() as session:
            result = await session.execute(
                select(UserDailyActivity).where(
                    UserDailyActivity.user_id == user_id,
                    UserDailyActivity.language == language,
                    UserDailyActivity.activity_date == activity_date
                )
            )
            row = result.scalar_one_or_none()
            if row is None:
                row = UserDailyActivity(
                    user_id=user_id,
                    language=language,
                    activity_date=activity_date,
                    activity_count=1,
                    exercises_completed=1
                )
                session.add(row)
            else:
                row.activity_count = (row.activity_count or 0) + 1
                row.exercises_completed = (row.exercises_completed or 0) + 1
            await session.commit()
            return _to_daily_activity(row)

    @wraps_store_errors
    async def get_daily_activities(
        self,
        user_id: str,
        language: str,
        start_date: datetime.date,
        end_date: datetime.date
    ) -> List[DailyActivity]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(UserDailyActivity).where(
                    UserDailyActivity.user_id == user_id,
                    UserDailyActivity.language == language,
                    UserDailyActivity.activity_date >= start_date,
                    UserDailyActivity.activity_date <= end_date
                ).order_by(UserDailyActivity.activity_date.asc())
            )
            return [_to_daily_activity(row) for row in result.scalars().all()]

    @wraps_store_errors
    async def get_recent_session_ids(self, user_id: str, language: str, limit: int) -> List[str]:
        async with self._session_factory() as session:
            result = await session.execute(
                select(PracticeSession.id).where(
                    PracticeSession.user_id == user_id,
                    PracticeSession.language == language
                ).order_by(PracticeSession.created_at.desc()).limit(limit)
            )
            return list(result.scalars().all())

    @wraps_store_errors
    async def get_exercise_target_words(self, session_ids: Sequence[str], limit: int) -> List[str]:
        if not session_ids:
            return []
        async with self._session_factory() as session:
            result = await session.execute(
                select(PracticeExercise.target_words).where(
                    PracticeExercise.session_id.in_(list(session_ids))
                ).order_by(PracticeExercise.created_at.desc(), PracticeExercise.id.desc()).limit(limit)
            )
            words: List[str] = []
            for target_words in result.scalars().all():
                if isinstance(target_words, list):
                    words.extend(w for w in target_words if isinstance(w, str))
            return words

    @wraps_store_errors
    async def add_session(
        self,
        user_id: str,
        language: str,
        session_id: Optional[str] = None,
        created_at: Optional[datetime.datetime] = None
    ) -> str:
        row = PracticeSession(
            id=session_id or str(uuid.uuid4()),
            user_id=user_id,
            language=language,
            created_at=created_at or utcnow()
        )
        async with self._session_factory() as session:
            session.add(row)
            await session.commit()
        return row.id

    @wraps_store_errors
    async def add_exercise(
        self,
        session_id: str,
        target_words: Sequence[str],
        created_at: Optional[datetime.datetime] = None
    ) -> None:
        async with self._session_factory() as session:
            session.add(PracticeExercise(
                session_id=session_id,
                target_words=list(target_words),
                created_at=created_at or utcnow()
            ))
            await session.commit()
