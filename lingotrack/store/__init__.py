"""
Activity store interfaces and implementations.
"""

from lingotrack.store.repository import ActivityRepository
from lingotrack.store.memory_repository import MemoryActivityRepository
from lingotrack.store.sql_repository import SqlActivityRepository

__all__ = ['ActivityRepository', 'MemoryActivityRepository', 'SqlActivityRepository']
