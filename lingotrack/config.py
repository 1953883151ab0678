"""Application configuration module."""

from typing import Optional
from pydantic import BaseSettings, validator

class Settings(BaseSettings):
    """Application settings."""

    # Database settings
    DATABASE_URL: str = "sqlite+aiosqlite:///./lingotrack.db"
    SQL_ECHO: bool = False

    # Logging settings
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False
    LOG_FILE: Optional[str] = None

    # Streak settings
    STREAK_TIMEZONE: str = "UTC"
    CALENDAR_MONTHS: int = 3

    # Word repetition settings
    SESSION_WORD_LIMIT: int = 15
    WORD_COOLDOWN_HOURS: float = 24
    RECENT_SESSION_LIMIT: int = 3
    RECENT_EXERCISE_LIMIT: int = 30
    RECENT_WORDS_TIMEOUT_SECONDS: float = 5.0
    WORD_STATE_BACKEND: str = "memory"

    # Redis settings (only used by the redis word state backend)
    REDIS_URL: str = "redis://localhost:6379/0"
    REDIS_KEY_PREFIX: str = "lingotrack:"
    REDIS_SESSION_TTL_SECONDS: int = 86400

    # API settings
    PROJECT_NAME: str = "LingoTrack Practice Tracking"

    @validator('LOG_LEVEL')
    def validate_log_level(cls, v):
        """Validate log level"""
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v.upper()

    @validator(
        'CALENDAR_MONTHS', 'SESSION_WORD_LIMIT', 'WORD_COOLDOWN_HOURS',
        'RECENT_SESSION_LIMIT', 'RECENT_EXERCISE_LIMIT',
        'RECENT_WORDS_TIMEOUT_SECONDS', 'REDIS_SESSION_TTL_SECONDS'
    )
    def validate_positive(cls, v, field):
        """Limits and durations must be positive"""
        if v <= 0:
            raise ValueError(f"{field.name} must be positive, got {v}")
        return v

    @validator('WORD_STATE_BACKEND')
    def validate_backend(cls, v):
        """Validate word state backend"""
        valid_backends = ['memory', 'redis']
        if v.lower() not in valid_backends:
            raise ValueError(f"Invalid word state backend: {v}. Must be one of {valid_backends}")
        return v.lower()

    class Config:
        """Pydantic settings config."""
        env_file = ".env"
        case_sensitive = True

# Create global settings instance
settings = Settings()
