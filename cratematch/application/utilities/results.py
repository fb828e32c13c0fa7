"""Result envelopes returned by the safe matching service.

Every safe call yields either a ``MatchOutcome`` or a ``MatchError``. A
``MatchError`` always carries a fallback no-match outcome so callers can
render one consistent state without special-casing failures.
"""

from enum import Enum
from typing import Any, TypeGuard
from uuid import uuid4

from attrs import define, field

from cratematch.domain.matching.types import MatchOutcome, SearchQuery


class ErrorKind(str, Enum):
    """Failure taxonomy of the safe matcher."""

    INVALID_DATA = "invalid_data"
    RUNTIME_ERROR = "runtime_error"
    TIMEOUT = "timeout"
    CIRCUIT_OPEN = "circuit_open"


def _new_correlation_id() -> str:
    return uuid4().hex


@define(frozen=True, slots=True)
class MatchError:
    """Structured failure of one safe match call."""

    kind: ErrorKind = field(converter=ErrorKind)
    message: str
    fallback: MatchOutcome
    correlation_id: str = field(factory=_new_correlation_id)

    def as_dict(self) -> dict[str, Any]:
        return {
            "error": {
                "kind": self.kind.value,
                "message": self.message,
                "correlation_id": self.correlation_id,
            },
            "fallback": self.fallback.as_dict(),
        }


ResilienceEnvelope = MatchOutcome | MatchError


def is_match_error(result: ResilienceEnvelope) -> TypeGuard[MatchError]:
    """Narrow an envelope to its error variant."""
    return isinstance(result, MatchError)


class ResultFactory:
    """Builds the error envelopes of the safe matcher."""

    @staticmethod
    def error(
        kind: ErrorKind,
        message: str,
        search_query: SearchQuery | None = None,
        correlation_id: str | None = None,
    ) -> MatchError:
        """Create a MatchError whose fallback is an empty no-match outcome."""
        fallback = MatchOutcome.empty(search_query)
        if correlation_id is None:
            return MatchError(kind=kind, message=message, fallback=fallback)
        return MatchError(
            kind=kind,
            message=message,
            fallback=fallback,
            correlation_id=correlation_id,
        )
