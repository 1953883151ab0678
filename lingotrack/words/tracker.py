"""
Session Word Tracker Module

This module keeps exercise generation from repeating target words:
1. Words used in the current session (bounded, oldest evicted first)
2. Per-user cooldowns that outlive a session for a fixed duration
3. Recently practiced words loaded from session history

It is an advisory layer: missing state means "no constraint", and failures
while loading history degrade to an empty list instead of reaching the caller.
"""

import asyncio
import datetime
from typing import Dict, Iterable, List, Optional

from lingotrack.common.clock import Clock
from lingotrack.common.logger import app_logger, with_context
from lingotrack.store.repository import ActivityRepository
from lingotrack.words.state import MemoryWordStateBackend, WordStateBackend

# Set up module logger
logger = app_logger.getChild("words.tracker")

DEFAULT_SESSION_WORD_LIMIT = 15
DEFAULT_COOLDOWN_HOURS = 24
DEFAULT_RECENT_SESSION_LIMIT = 3
DEFAULT_RECENT_EXERCISE_LIMIT = 30


def normalize_word(word: str) -> str:
    """Trim and lower-case a word; non-strings normalize to ''."""
    if not isinstance(word, str):
        return ""
    return word.strip().lower()


def _unique(words: Iterable[str]) -> List[str]:
    seen = set()
    result = []
    for word in words:
        if word and word not in seen:
            seen.add(word)
            result.append(word)
    return result


class SessionWordTracker:
    """
    Tracks word usage per session and per user to avoid repetition.

    All state lives in the injected backend, so two trackers built with
    their own backends never see each other's words.
    """

    def __init__(
        self,
        backend: Optional[WordStateBackend] = None,
        clock: Optional[Clock] = None,
        repository: Optional[ActivityRepository] = None,
        session_word_limit: int = DEFAULT_SESSION_WORD_LIMIT,
        cooldown_hours: float = DEFAULT_COOLDOWN_HOURS,
        recent_session_limit: int = DEFAULT_RECENT_SESSION_LIMIT,
        recent_exercise_limit: int = DEFAULT_RECENT_EXERCISE_LIMIT,
        recent_words_timeout: Optional[float] = None
    ):
        """
        Initialize the tracker.

        Args:
            backend: Word state storage (defaults to a private in-memory backend)
            clock: Clock used for cooldown expiry
            repository: Session history store for load_recent_words
            session_word_limit: Words kept per session
            cooldown_hours: How long a word stays in cooldown
            recent_session_limit: Past sessions consulted by load_recent_words
            recent_exercise_limit: Past exercises consulted by load_recent_words
            recent_words_timeout: Default timeout in seconds for load_recent_words
        """
        if session_word_limit <= 0:
            raise ValueError("session_word_limit must be positive")
        if cooldown_hours <= 0:
            raise ValueError("cooldown_hours must be positive")

        self.backend = backend or MemoryWordStateBackend()
        self.clock = clock or Clock()
        self.repository = repository
        self.session_word_limit = session_word_limit
        self.cooldown = datetime.timedelta(hours=cooldown_hours)
        self.recent_session_limit = recent_session_limit
        self.recent_exercise_limit = recent_exercise_limit
        self.recent_words_timeout = recent_words_timeout

    # Session words

    def add_word_to_session(self, session_id: str, word: str) -> None:
        """Record that a word was used in a session."""
        normalized = normalize_word(word)
        if not normalized:
            return

        evicted = self.backend.add_session_word(session_id, normalized, self.session_word_limit)
        log = with_context(logger, session_id=session_id)
        if evicted:
            log.debug(f"Evicted {len(evicted)} oldest words from session: {evicted}")
        log.debug(f"Added '{normalized}' to session")

    def is_word_used_in_session(self, session_id: str, word: str) -> bool:
        """Check whether a word was used in a session (case-insensitive)."""
        normalized = normalize_word(word)
        if not normalized:
            return False
        return self.backend.has_session_word(session_id, normalized)

    def get_session_words(self, session_id: str) -> List[str]:
        """Words used in a session, oldest first."""
        return self.backend.get_session_words(session_id)

    def clear_session(self, session_id: str) -> None:
        """Forget a session's words."""
        if self.backend.delete_session(session_id):
            with_context(logger, session_id=session_id).debug("Cleared session")

    # Cooldowns

    def set_cooldown(self, user_id: str, word: str) -> None:
        """
        Put a word in cooldown for the user.

        A word already in cooldown restarts its window from now.
        """
        normalized = normalize_word(word)
        if not normalized:
            return

        expires_at = self.clock.now() + self.cooldown
        self.backend.set_cooldown(user_id, normalized, expires_at.timestamp())
        with_context(logger, user_id=user_id).debug(
            f"Set cooldown for '{normalized}' until {expires_at.isoformat()}"
        )

    def prune_expired(self, user_id: str) -> Dict[str, float]:
        """
        Drop the user's expired cooldowns.

        Every cooldown read goes through here, so expiry is decided in one place.

        Returns:
            The remaining active cooldowns, word to expiry timestamp
        """
        now = self.clock.timestamp()
        cooldowns = self.backend.get_cooldowns(user_id)
        expired = [word for word, expires_at in cooldowns.items() if expires_at <= now]
        if expired:
            self.backend.remove_cooldowns(user_id, expired)
        return {word: expires_at for word, expires_at in cooldowns.items() if expires_at > now}

    def is_word_in_cooldown(self, user_id: str, word: str) -> bool:
        """Check whether a word is in an unexpired cooldown for the user."""
        normalized = normalize_word(word)
        if not normalized:
            return False
        return normalized in self.prune_expired(user_id)

    def get_cooldown_words(self, user_id: str) -> List[str]:
        """Words currently in cooldown for the user."""
        return list(self.prune_expired(user_id))

    # History

    async def load_recent_words(
        self,
        user_id: str,
        language: str,
        timeout: Optional[float] = None,
        cancel_event: Optional[asyncio.Event] = None
    ) -> List[str]:
        """
        Load target words from the user's most recent sessions.

        Args:
            user_id: User identifier
            language: Language of the sessions
            timeout: Seconds to wait before giving up (defaults to the tracker's)
            cancel_event: Setting this event abandons the fetch

        Returns:
            Normalized, de-duplicated words; empty on failure, timeout or cancellation
        """
        log = with_context(logger, user_id=user_id, language=language)
        if self.repository is None:
            log.debug("No history repository configured, skipping recent words")
            return []

        timeout = timeout if timeout is not None else self.recent_words_timeout
        fetch = asyncio.ensure_future(self._fetch_recent_words(user_id, language))
        waiters = {fetch}
        if cancel_event is not None:
            waiters.add(asyncio.ensure_future(cancel_event.wait()))

        try:
            done, _ = await asyncio.wait(
                waiters, timeout=timeout, return_when=asyncio.FIRST_COMPLETED
            )
        finally:
            for task in waiters:
                if not task.done():
                    task.cancel()

        if fetch not in done:
            reason = "cancelled" if cancel_event is not None and cancel_event.is_set() else "timed out"
            log.warning(f"Loading recent words {reason}, continuing without history")
            return []

        try:
            words = fetch.result()
        except Exception as e:
            log.error(f"Error loading recent words: {e}")
            return []

        log.info(f"Loaded {len(words)} recent words: {words[:5]}")
        return words

    async def _fetch_recent_words(self, user_id: str, language: str) -> List[str]:
        session_ids = await self.repository.get_recent_session_ids(
            user_id, language, self.recent_session_limit
        )
        if not session_ids:
            return []

        target_words = await self.repository.get_exercise_target_words(
            session_ids, self.recent_exercise_limit
        )
        return _unique(normalize_word(w) for w in target_words)

    # Merged view

    def get_avoidance_list(
        self,
        session_id: str,
        user_id: str,
        recent_words: Optional[Iterable[str]] = None
    ) -> List[str]:
        """
        Words exercise generation should not pick as a new target.

        Union of the session's words, the user's active cooldowns and the
        caller-supplied recent words, de-duplicated.
        """
        session_words = self.get_session_words(session_id)
        cooldown_words = self.get_cooldown_words(user_id)
        recent = [normalize_word(w) for w in (recent_words or [])]

        avoid = _unique([*session_words, *cooldown_words, *recent])
        with_context(logger, session_id=session_id, user_id=user_id).debug(
            f"Avoiding {len(avoid)} words: session({len(session_words)}) + "
            f"cooldown({len(cooldown_words)}) + recent({len(recent)})"
        )
        return avoid

    def get_stats(self) -> Dict[str, int]:
        """Counts of tracked sessions and stored cooldown entries."""
        stats = self.backend.get_stats()
        return {
            'active_sessions': int(stats.get('active_sessions', 0)),
            'total_cooldowns': int(stats.get('total_cooldowns', 0))
        }
