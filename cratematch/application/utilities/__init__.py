"""Application utilities - shared utilities for application services."""

from .batching import ChunkedBatchExecutor, clamp_concurrency
from .results import (
    ErrorKind,
    MatchError,
    ResilienceEnvelope,
    ResultFactory,
    is_match_error,
)

__all__ = [
    "ChunkedBatchExecutor",
    "ErrorKind",
    "MatchError",
    "ResilienceEnvelope",
    "ResultFactory",
    "clamp_concurrency",
    "is_match_error",
]
