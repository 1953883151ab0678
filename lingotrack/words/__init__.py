"""
Word repetition avoidance for exercise generation.
"""

from lingotrack.words.state import (
    MemoryWordStateBackend, RedisWordStateBackend, WordStateBackend, create_word_state_backend
)
from lingotrack.words.tracker import SessionWordTracker, normalize_word

__all__ = [
    'MemoryWordStateBackend', 'RedisWordStateBackend', 'WordStateBackend',
    'create_word_state_backend', 'SessionWordTracker', 'normalize_word',
]
