"""Shared fixtures for the tracker tests."""

import datetime

import pytest

from lingotrack.common.clock import ManualClock
from lingotrack.store.memory_repository import MemoryActivityRepository
from lingotrack.streaks.service import StreakService
from lingotrack.words.state import MemoryWordStateBackend
from lingotrack.words.tracker import SessionWordTracker

START = datetime.datetime(2024, 3, 10, 12, 0, tzinfo=datetime.timezone.utc)


@pytest.fixture
def clock():
    """A UTC clock frozen at noon on 2024-03-10."""
    return ManualClock(START)


@pytest.fixture
def repository():
    return MemoryActivityRepository()


@pytest.fixture
def streak_service(repository, clock):
    return StreakService(repository=repository, clock=clock)


@pytest.fixture
def word_backend():
    return MemoryWordStateBackend()


@pytest.fixture
def tracker(word_backend, clock, repository):
    return SessionWordTracker(backend=word_backend, clock=clock, repository=repository)
