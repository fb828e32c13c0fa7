"""Resilience primitives: circuit breaker, request metrics and input validation."""

from .circuit_breaker import CircuitBreaker, CircuitBreakerState, CircuitState
from .metrics import MetricsCollector, MetricsSnapshot
from .validation import (
    ValidationFailure,
    ValidationResult,
    ValidationSuccess,
    validate_match_input,
)

__all__ = [
    "CircuitBreaker",
    "CircuitBreakerState",
    "CircuitState",
    "MetricsCollector",
    "MetricsSnapshot",
    "ValidationFailure",
    "ValidationResult",
    "ValidationSuccess",
    "validate_match_input",
]
