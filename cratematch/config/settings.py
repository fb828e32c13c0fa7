"""Configuration management using Pydantic Settings.

This module provides type-safe configuration management with automatic
environment variable loading and validation using Pydantic Settings.

The configuration is organized into logical groups:
- LoggingConfig: Logging levels, files, and debugging options
- MatchingConfig: Candidate caps, normalization cache and status thresholds
- ResilienceConfig: Circuit breaker, timeout and batch execution settings
"""

from pathlib import Path
from typing import Any

from pydantic import BaseModel, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class LoggingConfig(BaseModel):
    """Logging configuration for console and file output."""

    console_level: str = "INFO"
    file_level: str = "DEBUG"
    log_file: Path = Path("logs/cratematch.log")
    real_time_debug: bool = True


class MatchingConfig(BaseModel):
    """Scoring limits and thresholds for the matching engine."""

    max_candidates: int = 100
    normalization_cache_size: int = 1000
    # Status thresholds are fixed by the engine; exposed here for display only
    auto_match_threshold: int = 95
    review_threshold: int = 70


class ResilienceConfig(BaseModel):
    """Circuit breaker, timeout and batch execution configuration."""

    # Circuit breaker
    failure_threshold: int = 5
    reset_timeout_seconds: float = 60.0

    # Timeout enforcement
    default_timeout_ms: int = 5000
    min_timeout_ms: int = 1000
    max_timeout_ms: int = 30000
    slow_operation_seconds: float = 1.0

    # Batch execution
    batch_concurrency: int = 3
    max_batch_concurrency: int = 10
    chunk_delay_seconds: float = 0.1
    max_batch_size: int = 1000

    # Input validation
    max_field_length: int = 500
    max_releases: int = 1000


class Settings(BaseSettings):
    """Main application settings with environment variable support.

    Environment variables can be set using flat naming or nested naming:
    - Flat: CONSOLE_LOG_LEVEL, MATCH_TIMEOUT_MS, CIRCUIT_FAILURE_THRESHOLD
    - Nested: LOGGING__CONSOLE_LEVEL, RESILIENCE__DEFAULT_TIMEOUT_MS

    The .env file is automatically loaded for development convenience.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    logging: LoggingConfig = LoggingConfig()
    matching: MatchingConfig = MatchingConfig()
    resilience: ResilienceConfig = ResilienceConfig()

    @model_validator(mode="before")
    @classmethod
    def transform_flat_env_vars(cls, data: Any) -> Any:
        """Transform flat environment variables to nested structure.

        Maps flat env vars (CONSOLE_LOG_LEVEL) onto the nested
        structure expected by the models (logging.console_level).
        """
        if not isinstance(data, dict):
            return data

        transformed: dict[str, dict[str, Any]] = {}

        log_mapping = {
            "console_log_level": "console_level",
            "file_log_level": "file_level",
            "log_file": "log_file",
            "log_real_time_debug": "real_time_debug",
        }
        for env_key, field_key in log_mapping.items():
            if env_key in data:
                transformed.setdefault("logging", {})[field_key] = data.pop(env_key)

        matching_mapping = {
            "max_candidates": "max_candidates",
            "normalization_cache_size": "normalization_cache_size",
        }
        for env_key, field_key in matching_mapping.items():
            if env_key in data:
                transformed.setdefault("matching", {})[field_key] = data.pop(env_key)

        resilience_mapping = {
            "circuit_failure_threshold": "failure_threshold",
            "circuit_reset_timeout": "reset_timeout_seconds",
            "match_timeout_ms": "default_timeout_ms",
            "batch_concurrency": "batch_concurrency",
            "batch_chunk_delay": "chunk_delay_seconds",
        }
        for env_key, field_key in resilience_mapping.items():
            if env_key in data:
                transformed.setdefault("resilience", {})[field_key] = data.pop(
                    env_key
                )

        # Merge transformed nested structure back into data
        for section, values in transformed.items():
            existing = data.get(section)
            if isinstance(existing, dict):
                data[section] = {**existing, **values}
            else:
                data[section] = values

        return data


# Singleton instance for application use
settings = Settings()


# =============================================================================
# FLAT KEY ACCESS
# =============================================================================

_LEGACY_KEY_MAP = {
    # Logging settings
    "CONSOLE_LOG_LEVEL": lambda: settings.logging.console_level,
    "FILE_LOG_LEVEL": lambda: settings.logging.file_level,
    "LOG_FILE": lambda: settings.logging.log_file,
    "LOG_REAL_TIME_DEBUG": lambda: settings.logging.real_time_debug,
    # Matching settings
    "MAX_CANDIDATES": lambda: settings.matching.max_candidates,
    "NORMALIZATION_CACHE_SIZE": lambda: settings.matching.normalization_cache_size,
    "AUTO_MATCH_THRESHOLD": lambda: settings.matching.auto_match_threshold,
    "REVIEW_THRESHOLD": lambda: settings.matching.review_threshold,
    # Resilience settings
    "CIRCUIT_FAILURE_THRESHOLD": lambda: settings.resilience.failure_threshold,
    "CIRCUIT_RESET_TIMEOUT": lambda: settings.resilience.reset_timeout_seconds,
    "MATCH_TIMEOUT_MS": lambda: settings.resilience.default_timeout_ms,
    "BATCH_CONCURRENCY": lambda: settings.resilience.batch_concurrency,
    "MAX_BATCH_CONCURRENCY": lambda: settings.resilience.max_batch_concurrency,
    "BATCH_CHUNK_DELAY": lambda: settings.resilience.chunk_delay_seconds,
    "MAX_BATCH_SIZE": lambda: settings.resilience.max_batch_size,
}


def get_config(key: str, default=None):
    """Get configuration value by flat key with optional default.

    Maps flat keys to the nested Pydantic settings structure.

    Args:
        key: Configuration key to retrieve
        default: Default value if key not found

    Returns:
        Configuration value or default

    Example:
        >>> concurrency = get_config("BATCH_CONCURRENCY", 3)
    """
    if key in _LEGACY_KEY_MAP:
        return _LEGACY_KEY_MAP[key]()

    return default
