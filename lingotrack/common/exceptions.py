"""
Common Exception Classes

This module defines the exceptions raised by the practice tracking core.
Only failures that would lose a durable achievement are raised to callers;
advisory lookups recover locally and log instead.
"""

from typing import Optional


class BaseError(Exception):
    """Base class for all custom exceptions."""

    def __init__(self, message: str, original_exception: Optional[Exception] = None):
        """
        Initialize the exception.

        Args:
            message: Error message
            original_exception: Original exception that caused this error
        """
        super().__init__(message)
        self.message = message
        self.original_exception = original_exception


class StoreUnavailableError(BaseError):
    """Raised when the persistent activity store cannot be read or written."""

    def __init__(
        self,
        message: str,
        operation: Optional[str] = None,
        original_exception: Optional[Exception] = None
    ):
        """
        Initialize the store error.

        Args:
            message: Error message
            operation: Store operation that failed (e.g. "upsert_streak_record")
            original_exception: Original driver exception
        """
        super().__init__(f"Store unavailable: {message}", original_exception)
        self.operation = operation
        self.retryable = True


class ValidationError(BaseError):
    """Exception raised for validation errors."""

    def __init__(self, message: str, field: Optional[str] = None):
        """
        Initialize the validation error.

        Args:
            message: Error message
            field: Name of the offending argument
        """
        super().__init__(f"Validation error: {message}")
        self.field = field


class ConfigurationError(BaseError):
    """Exception raised for configuration-related errors."""

    def __init__(self, message: str, config_key: Optional[str] = None):
        """
        Initialize the configuration error.

        Args:
            message: Error message
            config_key: The configuration key that caused the error
        """
        super().__init__(f"Configuration error: {message}")
        self.config_key = config_key
