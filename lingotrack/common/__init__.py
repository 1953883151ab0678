"""
Common infrastructure shared by the streak and word trackers.
"""

from lingotrack.common.clock import Clock, ManualClock
from lingotrack.common.exceptions import (
    BaseError, ConfigurationError, StoreUnavailableError, ValidationError
)
from lingotrack.common.logger import app_logger

__all__ = [
    'Clock', 'ManualClock',
    'BaseError', 'ConfigurationError', 'StoreUnavailableError', 'ValidationError',
    'app_logger',
]
