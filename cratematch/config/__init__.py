"""Configuration module for cratematch.

Type-safe configuration using Pydantic Settings plus Loguru logging helpers.

Public API:
----------
settings: Settings instance
    Pydantic settings object with nested configuration

get_config(key: str, default=None) -> Any
    Flat-key configuration access

get_logger(name: str) -> Logger
    Get a context-aware logger for your module

setup_loguru_logger(verbose: bool = False) -> None
    Configure Loguru logger for the application

log_startup_info() -> None
    Log configuration at startup

Usage:
------
```python
from cratematch.config import settings
threshold = settings.resilience.failure_threshold

from cratematch.config import get_logger
logger = get_logger(__name__)
```
"""

from .logging import get_logger, log_startup_info, setup_loguru_logger
from .settings import get_config, settings

__all__ = [
    "get_config",
    "get_logger",
    "log_startup_info",
    "settings",
    "setup_loguru_logger",
]
