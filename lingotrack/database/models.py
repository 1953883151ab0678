"""
SQLAlchemy ORM models for streaks, daily activity and practice history.
"""
import uuid

from sqlalchemy import (
    JSON, Column, Date, DateTime, ForeignKey, Index, Integer, String, UniqueConstraint
)

from lingotrack.common.clock import utcnow
from lingotrack.database.base import ModelBase


class UserLanguageStreak(ModelBase):
    """
    One streak row per user and language.
    """
    __tablename__ = 'user_language_streaks'

    user_id = Column(String(255), primary_key=True)
    language = Column(String(64), primary_key=True)

    current_streak = Column(Integer, nullable=False, default=0)
    longest_streak = Column(Integer, nullable=False, default=0)
    last_activity_date = Column(Date, nullable=True)

    updated_at = Column(DateTime, default=utcnow,
                        onupdate=utcnow, nullable=False)

    def __repr__(self):
        return (f"<UserLanguageStreak(user_id='{self.user_id}', language='{self.language}', "
                f"current={self.current_streak}, longest={self.longest_streak})>")


class UserDailyActivity(ModelBase):
    """
    Activity count for one user, language and calendar day.
    """
    __tablename__ = 'user_daily_activities'

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(String(255), nullable=False)
    language = Column(String(64), nullable=False)
    activity_date = Column(Date, nullable=False)
    activity_count = Column(Integer, nullable=False, default=0)
    exercises_completed = Column(Integer, nullable=False, default=0)

    __table_args__ = (
        UniqueConstraint('user_id', 'language', 'activity_date'),
        Index('idx_daily_activity_user_language_date', 'user_id', 'language', 'activity_date'),
    )


class PracticeSession(ModelBase):
    """
    A practice session, used to look back at recently practiced words.
    """
    __tablename__ = 'practice_sessions'

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(255), nullable=False)
    language = Column(String(64), nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    __table_args__ = (
        Index('idx_practice_session_user_language_created', 'user_id', 'language', 'created_at'),
    )


class PracticeExercise(ModelBase):
    """
    An exercise generated in a session, with the words it targeted.
    """
    __tablename__ = 'practice_exercises'

    id = Column(Integer, primary_key=True, autoincrement=True)
    session_id = Column(String(36), ForeignKey('practice_sessions.id'), nullable=False)
    target_words = Column(JSON, nullable=False, default=list)
    created_at = Column(DateTime, default=utcnow, nullable=False)

    __table_args__ = (
        Index('idx_practice_exercise_session_created', 'session_id', 'created_at'),
    )
