"""
Service dependencies for the API routes.

Singletons are built lazily from settings. Tests swap them out through
``app.dependency_overrides``.
"""

from typing import Optional

from lingotrack.common.clock import Clock
from lingotrack.common.logger import app_logger
from lingotrack.config import settings
from lingotrack.database.init_db import get_session_factory
from lingotrack.store.repository import ActivityRepository
from lingotrack.store.sql_repository import SqlActivityRepository
from lingotrack.streaks.service import StreakService
from lingotrack.words.state import create_word_state_backend
from lingotrack.words.tracker import SessionWordTracker

logger = app_logger.getChild("api.dependencies")

_clock: Optional[Clock] = None
_repository: Optional[ActivityRepository] = None
_streak_service: Optional[StreakService] = None
_word_tracker: Optional[SessionWordTracker] = None


def get_clock() -> Clock:
    global _clock
    if _clock is None:
        _clock = Clock(settings.STREAK_TIMEZONE)
    return _clock


def get_repository() -> ActivityRepository:
    global _repository
    if _repository is None:
        _repository = SqlActivityRepository(get_session_factory())
    return _repository


def get_streak_service() -> StreakService:
    global _streak_service
    if _streak_service is None:
        _streak_service = StreakService(
            repository=get_repository(),
            clock=get_clock(),
            calendar_months=settings.CALENDAR_MONTHS
        )
        logger.info("Streak service created")
    return _streak_service


def get_word_tracker() -> SessionWordTracker:
    global _word_tracker
    if _word_tracker is None:
        backend = create_word_state_backend(
            settings.WORD_STATE_BACKEND,
            redis_url=settings.REDIS_URL,
            key_prefix=settings.REDIS_KEY_PREFIX,
            session_ttl=settings.REDIS_SESSION_TTL_SECONDS
        )
        _word_tracker = SessionWordTracker(
            backend=backend,
            clock=get_clock(),
            repository=get_repository(),
            session_word_limit=settings.SESSION_WORD_LIMIT,
            cooldown_hours=settings.WORD_COOLDOWN_HOURS,
            recent_session_limit=settings.RECENT_SESSION_LIMIT,
            recent_exercise_limit=settings.RECENT_EXERCISE_LIMIT,
            recent_words_timeout=settings.RECENT_WORDS_TIMEOUT_SECONDS
        )
        logger.info(f"Word tracker created with {backend.name} backend")
    return _word_tracker


def reset_dependencies() -> None:
    """Forget the cached singletons, e.g. after the database is closed."""
    global _clock, _repository, _streak_service, _word_tracker
    _clock = None
    _repository = None
    _streak_service = None
    _word_tracker = None
