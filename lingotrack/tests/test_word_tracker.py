"""
Tests for the session word tracker.

This module tests:
1. Session word bounds and insertion-order eviction
2. Cooldown expiry, restart and lazy cleanup
3. The merged avoidance list
4. Loading recent words from history, including failure paths
"""

import asyncio
import datetime

import pytest
from unittest.mock import AsyncMock

from lingotrack.store.records import ExerciseRecord, PracticeSessionRecord
from lingotrack.words.state import MemoryWordStateBackend
from lingotrack.words.tracker import SessionWordTracker, normalize_word


class TestSessionWords:
    """Session-scoped word usage."""

    def test_bound_evicts_oldest_words(self, tracker):
        words = [f"word{i}" for i in range(20)]
        for word in words:
            tracker.add_word_to_session("s1", word)

        session_words = tracker.get_session_words("s1")
        assert len(session_words) == 15
        assert session_words == words[5:]
        for evicted in words[:5]:
            assert not tracker.is_word_used_in_session("s1", evicted)

    def test_custom_bound(self, clock):
        tracker = SessionWordTracker(clock=clock, session_word_limit=3)
        for word in ["a", "b", "c", "d"]:
            tracker.add_word_to_session("s1", word)
        assert tracker.get_session_words("s1") == ["b", "c", "d"]

    def test_eviction_is_by_insertion_not_access(self, clock):
        tracker = SessionWordTracker(clock=clock, session_word_limit=3)
        for word in ["a", "b", "c"]:
            tracker.add_word_to_session("s1", word)

        # Re-adding and looking up do not refresh "a"
        tracker.add_word_to_session("s1", "A")
        assert tracker.is_word_used_in_session("s1", "a")
        tracker.add_word_to_session("s1", "d")

        assert tracker.get_session_words("s1") == ["b", "c", "d"]

    def test_normalization(self, tracker):
        tracker.add_word_to_session("s1", " Haus ")

        assert tracker.is_word_used_in_session("s1", "haus")
        assert tracker.is_word_used_in_session("s1", "HAUS")
        assert tracker.get_session_words("s1") == ["haus"]

    def test_blank_words_are_ignored(self, tracker):
        tracker.add_word_to_session("s1", "   ")
        tracker.add_word_to_session("s1", "")

        assert tracker.get_session_words("s1") == []
        assert not tracker.is_word_used_in_session("s1", " ")

    def test_unknown_session(self, tracker):
        assert not tracker.is_word_used_in_session("missing", "haus")
        assert tracker.get_session_words("missing") == []
        tracker.clear_session("missing")

    def test_sessions_are_isolated(self, tracker):
        tracker.add_word_to_session("s1", "haus")
        assert not tracker.is_word_used_in_session("s2", "haus")

    def test_clear_session(self, tracker):
        tracker.add_word_to_session("s1", "haus")
        tracker.clear_session("s1")

        assert tracker.get_session_words("s1") == []
        assert tracker.get_stats()["active_sessions"] == 0

    def test_trackers_do_not_share_state(self, clock):
        first = SessionWordTracker(clock=clock)
        second = SessionWordTracker(clock=clock)
        first.add_word_to_session("s1", "haus")
        first.set_cooldown("u1", "haus")

        assert not second.is_word_used_in_session("s1", "haus")
        assert not second.is_word_in_cooldown("u1", "haus")

    def test_invalid_limits(self):
        with pytest.raises(ValueError):
            SessionWordTracker(session_word_limit=0)
        with pytest.raises(ValueError):
            SessionWordTracker(cooldown_hours=0)


class TestCooldowns:
    """Cross-session cooldowns."""

    def test_cooldown_expires_after_24_hours(self, tracker, clock, word_backend):
        tracker.set_cooldown("u1", "Haus")
        assert tracker.is_word_in_cooldown("u1", "haus")

        clock.advance(hours=23, minutes=59)
        assert tracker.is_word_in_cooldown("u1", "haus")

        clock.advance(minutes=2)
        assert not tracker.is_word_in_cooldown("u1", "haus")
        # The stale entry is gone after the read
        assert word_backend.get_cooldowns("u1") == {}
        assert "haus" not in tracker.get_avoidance_list("s1", "u1")

    def test_expiry_instant_is_not_in_cooldown(self, tracker, clock):
        tracker.set_cooldown("u1", "haus")
        clock.advance(hours=24)
        assert not tracker.is_word_in_cooldown("u1", "haus")

    def test_cooldown_restarts_on_new_trigger(self, tracker, clock):
        tracker.set_cooldown("u1", "haus")
        clock.advance(hours=12)
        tracker.set_cooldown("u1", "haus")
        clock.advance(hours=13)

        assert tracker.is_word_in_cooldown("u1", "haus")

        clock.advance(hours=12)
        assert not tracker.is_word_in_cooldown("u1", "haus")

    def test_cooldown_applies_across_sessions(self, tracker):
        tracker.add_word_to_session("s1", "haus")
        tracker.set_cooldown("u1", "haus")
        tracker.clear_session("s1")

        assert "haus" in tracker.get_avoidance_list("s2", "u1")

    def test_cooldowns_are_per_user(self, tracker):
        tracker.set_cooldown("u1", "haus")
        assert not tracker.is_word_in_cooldown("u2", "haus")

    def test_custom_duration(self, clock):
        tracker = SessionWordTracker(clock=clock, cooldown_hours=1)
        tracker.set_cooldown("u1", "haus")
        clock.advance(minutes=61)
        assert tracker.get_cooldown_words("u1") == []

    def test_prune_expired_keeps_active_entries(self, tracker, clock, word_backend):
        tracker.set_cooldown("u1", "alt")
        clock.advance(hours=20)
        tracker.set_cooldown("u1", "neu")
        clock.advance(hours=5)

        active = tracker.prune_expired("u1")

        assert list(active) == ["neu"]
        assert list(word_backend.get_cooldowns("u1")) == ["neu"]

    def test_unknown_user(self, tracker):
        assert not tracker.is_word_in_cooldown("nobody", "haus")
        assert tracker.get_cooldown_words("nobody") == []


class TestAvoidanceList:

    def test_union_of_all_sources(self, tracker):
        tracker.add_word_to_session("s1", "a")
        tracker.add_word_to_session("s1", "b")
        tracker.set_cooldown("u1", "b")
        tracker.set_cooldown("u1", "c")

        avoid = tracker.get_avoidance_list("s1", "u1", ["c", "D"])

        assert sorted(avoid) == ["a", "b", "c", "d"]
        assert len(avoid) == len(set(avoid))

    def test_without_recent_words(self, tracker):
        tracker.add_word_to_session("s1", "a")
        assert tracker.get_avoidance_list("s1", "u1") == ["a"]

    def test_empty_state(self, tracker):
        assert tracker.get_avoidance_list("s1", "u1", []) == []

    def test_stats(self, tracker):
        tracker.add_word_to_session("s1", "a")
        tracker.add_word_to_session("s2", "b")
        tracker.set_cooldown("u1", "a")
        tracker.set_cooldown("u2", "b")
        tracker.set_cooldown("u2", "c")

        assert tracker.get_stats() == {"active_sessions": 2, "total_cooldowns": 3}


class TestLoadRecentWords:

    @pytest.mark.asyncio
    async def test_words_from_last_three_sessions(self, tracker, repository):
        base = datetime.datetime(2024, 3, 1, 9, 0)
        sessions = []
        for day in range(4):
            session_id = await repository.add_session(
                "u1", "german", created_at=base + datetime.timedelta(days=day)
            )
            sessions.append(session_id)
            await repository.add_exercise(
                session_id, [f"Wort{day}", "Haus"], created_at=base + datetime.timedelta(days=day, minutes=5)
            )
        await repository.add_session("u1", "spanish", created_at=base + datetime.timedelta(days=9))

        words = await tracker.load_recent_words("u1", "german")

        assert words == ["wort3", "haus", "wort2", "wort1"]

    @pytest.mark.asyncio
    async def test_exercise_limit(self, repository, clock):
        tracker = SessionWordTracker(clock=clock, repository=repository, recent_exercise_limit=2)
        session_id = await repository.add_session("u1", "german")
        base = datetime.datetime(2024, 3, 1, 9, 0)
        for i in range(5):
            await repository.add_exercise(
                session_id, [f"w{i}"], created_at=base + datetime.timedelta(minutes=i)
            )

        assert await tracker.load_recent_words("u1", "german") == ["w4", "w3"]

    @pytest.mark.asyncio
    async def test_no_history(self, tracker):
        assert await tracker.load_recent_words("u1", "german") == []

    @pytest.mark.asyncio
    async def test_without_repository(self, clock):
        tracker = SessionWordTracker(clock=clock)
        assert await tracker.load_recent_words("u1", "german") == []

    @pytest.mark.asyncio
    async def test_fetch_failure_returns_empty(self, clock):
        repository = AsyncMock()
        repository.get_recent_session_ids.side_effect = RuntimeError("connection reset")
        tracker = SessionWordTracker(clock=clock, repository=repository)

        assert await tracker.load_recent_words("u1", "german") == []

    @pytest.mark.asyncio
    async def test_timeout_returns_empty(self, clock):
        async def slow_sessions(*args, **kwargs):
            await asyncio.sleep(5)
            return ["s1"]

        repository = AsyncMock()
        repository.get_recent_session_ids.side_effect = slow_sessions
        tracker = SessionWordTracker(clock=clock, repository=repository)

        assert await tracker.load_recent_words("u1", "german", timeout=0.01) == []
        repository.get_exercise_target_words.assert_not_called()

    @pytest.mark.asyncio
    async def test_default_timeout_from_tracker(self, clock):
        async def slow_sessions(*args, **kwargs):
            await asyncio.sleep(5)
            return ["s1"]

        repository = AsyncMock()
        repository.get_recent_session_ids.side_effect = slow_sessions
        tracker = SessionWordTracker(clock=clock, repository=repository, recent_words_timeout=0.01)

        assert await tracker.load_recent_words("u1", "german") == []

    @pytest.mark.asyncio
    async def test_cancellation_returns_empty(self, clock):
        async def slow_sessions(*args, **kwargs):
            await asyncio.sleep(5)
            return ["s1"]

        repository = AsyncMock()
        repository.get_recent_session_ids.side_effect = slow_sessions
        tracker = SessionWordTracker(clock=clock, repository=repository)
        cancel = asyncio.Event()
        asyncio.get_running_loop().call_later(0.01, cancel.set)

        assert await tracker.load_recent_words("u1", "german", cancel_event=cancel) == []

    @pytest.mark.asyncio
    async def test_recent_words_feed_avoidance(self, tracker, repository):
        session_id = await repository.add_session("u1", "german")
        await repository.add_exercise(session_id, ["Katze"])

        recent = await tracker.load_recent_words("u1", "german")
        assert "katze" in tracker.get_avoidance_list("s-new", "u1", recent)


def test_normalize_word():
    assert normalize_word("  Straße ") == "straße"
    assert normalize_word(None) == ""


def test_memory_backend_reports_evictions():
    backend = MemoryWordStateBackend()
    assert backend.add_session_word("s1", "a", 2) == []
    assert backend.add_session_word("s1", "b", 2) == []
    assert backend.add_session_word("s1", "a", 2) == []
    assert backend.add_session_word("s1", "c", 2) == ["a"]
    assert backend.delete_session("s1") is True
    assert backend.delete_session("s1") is False


@pytest.mark.asyncio
async def test_history_records_default_to_naive_utc(repository):
    before = datetime.datetime.now(datetime.timezone.utc).replace(tzinfo=None)
    session_id = await repository.add_session("u1", "german")
    await repository.add_exercise(session_id, ["haus"])

    session = repository._sessions[session_id]
    exercise = repository._exercises[-1]
    assert isinstance(session, PracticeSessionRecord)
    assert isinstance(exercise, ExerciseRecord)
    for created_at in (session.created_at, exercise.created_at):
        assert created_at.tzinfo is None
        assert before <= created_at <= before + datetime.timedelta(minutes=1)


def test_history_record_defaults():
    record = ExerciseRecord(session_id="s1")
    assert record.target_words == []
    assert record.created_at.tzinfo is None
