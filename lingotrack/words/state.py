"""
Word State Backend Module

Storage for the volatile state of the repetition tracker: the words used
in each practice session, and per-user word cooldown expiries. The memory
backend is process-local; the Redis backend shares state between processes.
"""

import logging
import threading
from abc import ABC, abstractmethod
from collections import OrderedDict
from typing import Any, Dict, Iterable, List, Optional

import redis
from redis.exceptions import RedisError, WatchError

# Setup logging
logger = logging.getLogger(__name__)


class WordStateBackend(ABC):
    """
    Abstract interface for word state storage.

    Words reaching a backend are already normalized. No method raises for
    an unknown session or user.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Get the name of this backend."""
        pass

    @abstractmethod
    def add_session_word(self, session_id: str, word: str, limit: int) -> List[str]:
        """
        Append a word to a session, keeping at most ``limit`` words.

        A word already in the session keeps its original position.

        Returns:
            Words evicted to stay within the limit, oldest first
        """
        pass

    @abstractmethod
    def get_session_words(self, session_id: str) -> List[str]:
        """Get a session's words in insertion order."""
        pass

    @abstractmethod
    def has_session_word(self, session_id: str, word: str) -> bool:
        """Check whether a word was used in a session."""
        pass

    @abstractmethod
    def delete_session(self, session_id: str) -> bool:
        """Drop a session. Returns True if it existed."""
        pass

    @abstractmethod
    def set_cooldown(self, user_id: str, word: str, expires_at: float) -> None:
        """Store a cooldown expiry (epoch seconds), replacing any previous one."""
        pass

    @abstractmethod
    def get_cooldowns(self, user_id: str) -> Dict[str, float]:
        """Get all stored cooldowns of a user, expired ones included."""
        pass

    @abstractmethod
    def remove_cooldowns(self, user_id: str, words: Iterable[str]) -> None:
        """Remove cooldown entries of a user."""
        pass

    @abstractmethod
    def get_stats(self) -> Dict[str, Any]:
        """Get counts of tracked sessions and cooldown entries."""
        pass


class MemoryWordStateBackend(WordStateBackend):
    """
    In-memory word state.

    Each tracker owns its own instance; nothing is shared between
    processes and everything is lost on restart.
    """

    def __init__(self):
        self._sessions: Dict[str, "OrderedDict[str, None]"] = {}
        self._cooldowns: Dict[str, Dict[str, float]] = {}
        self._lock = threading.RLock()

    @property
    def name(self) -> str:
        return "memory"

    def add_session_word(self, session_id: str, word: str, limit: int) -> List[str]:
        with self._lock:
            words = self._sessions.setdefault(session_id, OrderedDict())
            if word in words:
                return []
            words[word] = None
            evicted = []
            while len(words) > limit:
                oldest, _ = words.popitem(last=False)
                evicted.append(oldest)
            return evicted

    def get_session_words(self, session_id: str) -> List[str]:
        with self._lock:
            return list(self._sessions.get(session_id, ()))

    def has_session_word(self, session_id: str, word: str) -> bool:
        with self._lock:
            return word in self._sessions.get(session_id, ())

    def delete_session(self, session_id: str) -> bool:
        with self._lock:
            return self._sessions.pop(session_id, None) is not None

    def set_cooldown(self, user_id: str, word: str, expires_at: float) -> None:
        with self._lock:
            self._cooldowns.setdefault(user_id, {})[word] = expires_at

    def get_cooldowns(self, user_id: str) -> Dict[str, float]:
        with self._lock:
            return dict(self._cooldowns.get(user_id, {}))

    def remove_cooldowns(self, user_id: str, words: Iterable[str]) -> None:
        with self._lock:
            user_cooldowns = self._cooldowns.get(user_id)
            if user_cooldowns is None:
                return
            for word in words:
                user_cooldowns.pop(word, None)
            if not user_cooldowns:
                del self._cooldowns[user_id]

    def get_stats(self) -> Dict[str, Any]:
        with self._lock:
            return {
                'backend': self.name,
                'active_sessions': len(self._sessions),
                'total_cooldowns': sum(len(c) for c in self._cooldowns.values())
            }


class RedisWordStateBackend(WordStateBackend):
    """
    Redis-backed word state.

    Session words are a list per session that expires after ``session_ttl``
    seconds of inactivity; cooldowns are a hash per user mapping word to
    expiry. Session words are added in a WATCH/MULTI transaction so two
    writers cannot push the same word. Redis failures are logged and
    answered with "no constraint", the same as missing state.
    """

    MAX_WATCH_RETRIES = 5

    def __init__(
        self,
        client: redis.Redis,
        key_prefix: str = "lingotrack:",
        session_ttl: int = 86400
    ):
        """
        Initialize the Redis backend.

        Args:
            client: Synchronous Redis client
            key_prefix: Prefix for every key written
            session_ttl: Expiry in seconds of idle session keys
        """
        self._redis = client
        self._prefix = key_prefix
        self._session_ttl = session_ttl

    @property
    def name(self) -> str:
        return "redis"

    def _session_key(self, session_id: str) -> str:
        return f"{self._prefix}session:{session_id}"

    def _cooldown_key(self, user_id: str) -> str:
        return f"{self._prefix}cooldown:{user_id}"

    @staticmethod
    def _decode(value: Any) -> str:
        return value.decode("utf-8") if isinstance(value, bytes) else str(value)

    def add_session_word(self, session_id: str, word: str, limit: int) -> List[str]:
        key = self._session_key(session_id)
        pipe = self._redis.pipeline()
        try:
            for _ in range(self.MAX_WATCH_RETRIES):
                try:
                    # Commands run immediately between watch() and multi()
                    pipe.watch(key)
                    words = [self._decode(w) for w in pipe.lrange(key, 0, -1)]
                    if word in words:
                        pipe.expire(key, self._session_ttl)
                        return []
                    pipe.multi()
                    pipe.rpush(key, word)
                    pipe.ltrim(key, -limit, -1)
                    pipe.expire(key, self._session_ttl)
                    pipe.execute()
                except WatchError:
                    logger.debug(f"Session {session_id} changed while adding '{word}', retrying")
                    continue
                words.append(word)
                return words[:-limit] if len(words) > limit else []
        except RedisError as e:
            logger.error(f"Redis error adding word to session {session_id}: {e}")
            return []
        finally:
            pipe.reset()

        logger.warning(f"Gave up adding '{word}' to session {session_id} after concurrent updates")
        return []

    def get_session_words(self, session_id: str) -> List[str]:
        try:
            return [self._decode(w) for w in self._redis.lrange(self._session_key(session_id), 0, -1)]
        except RedisError as e:
            logger.error(f"Redis error reading session {session_id}: {e}")
            return []

    def has_session_word(self, session_id: str, word: str) -> bool:
        return word in self.get_session_words(session_id)

    def delete_session(self, session_id: str) -> bool:
        try:
            return bool(self._redis.delete(self._session_key(session_id)))
        except RedisError as e:
            logger.error(f"Redis error deleting session {session_id}: {e}")
            return False

    def set_cooldown(self, user_id: str, word: str, expires_at: float) -> None:
        key = self._cooldown_key(user_id)
        try:
            pipe = self._redis.pipeline()
            pipe.hset(key, word, repr(float(expires_at)))
            # The newest cooldown always expires last
            pipe.expireat(key, int(expires_at) + 1)
            pipe.execute()
        except RedisError as e:
            logger.error(f"Redis error setting cooldown for user {user_id}: {e}")

    def get_cooldowns(self, user_id: str) -> Dict[str, float]:
        try:
            raw = self._redis.hgetall(self._cooldown_key(user_id))
        except RedisError as e:
            logger.error(f"Redis error reading cooldowns for user {user_id}: {e}")
            return {}
        cooldowns = {}
        for word, expires_at in raw.items():
            try:
                cooldowns[self._decode(word)] = float(self._decode(expires_at))
            except ValueError:
                # Unreadable expiry counts as already expired
                cooldowns[self._decode(word)] = 0.0
        return cooldowns

    def remove_cooldowns(self, user_id: str, words: Iterable[str]) -> None:
        words = list(words)
        if not words:
            return
        try:
            self._redis.hdel(self._cooldown_key(user_id), *words)
        except RedisError as e:
            logger.error(f"Redis error removing cooldowns for user {user_id}: {e}")

    def get_stats(self) -> Dict[str, Any]:
        try:
            sessions = sum(1 for _ in self._redis.scan_iter(match=f"{self._prefix}session:*"))
            cooldowns = sum(
                self._redis.hlen(key)
                for key in self._redis.scan_iter(match=f"{self._prefix}cooldown:*")
            )
        except RedisError as e:
            logger.error(f"Redis error collecting stats: {e}")
            sessions, cooldowns = 0, 0
        return {
            'backend': self.name,
            'active_sessions': sessions,
            'total_cooldowns': cooldowns
        }


def create_word_state_backend(
    backend: str = "memory",
    redis_url: Optional[str] = None,
    key_prefix: str = "lingotrack:",
    session_ttl: int = 86400
) -> WordStateBackend:
    """
    Create a word state backend by name.

    Args:
        backend: "memory" or "redis"
        redis_url: Redis connection URL (required for "redis")
        key_prefix: Redis key prefix
        session_ttl: Redis session key expiry in seconds

    Returns:
        WordStateBackend instance
    """
    if backend == "redis":
        if not redis_url:
            raise ValueError("redis_url is required for the redis word state backend")
        client = redis.Redis.from_url(redis_url, decode_responses=True)
        logger.info(f"Using Redis word state backend at {redis_url.split('@')[-1]}")
        return RedisWordStateBackend(client, key_prefix=key_prefix, session_ttl=session_ttl)
    if backend == "memory":
        return MemoryWordStateBackend()
    raise ValueError(f"Unknown word state backend: {backend}")
