"""
Practice History Records

Sessions and the exercises generated in them, as kept by the activity
store. The word tracker reads target words back from these.
"""

import datetime
from dataclasses import dataclass, field
from typing import List

from lingotrack.common.clock import utcnow


@dataclass
class PracticeSessionRecord:
    """A finished or ongoing practice session in the history store."""

    session_id: str
    user_id: str
    language: str
    created_at: datetime.datetime = field(default_factory=utcnow)


@dataclass
class ExerciseRecord:
    """An exercise generated within a practice session."""

    session_id: str
    target_words: List[str] = field(default_factory=list)
    created_at: datetime.datetime = field(default_factory=utcnow)
