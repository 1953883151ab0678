"""
Database Module

This module provides the SQLAlchemy schema for the activity store.
"""

from lingotrack.database.base import Base, ModelBase, metadata

__all__ = ['Base', 'ModelBase', 'metadata']
