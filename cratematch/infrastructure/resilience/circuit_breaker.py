"""Circuit breaker guarding the matching engine.

The breaker counts consecutive failures across calls. Once the threshold is
reached it opens and rejects calls outright; after the cool-down window it
admits a single probe call (half-open) whose result either closes the
breaker again or reopens it.
"""

from collections.abc import Callable
from enum import Enum
import threading
import time

from attrs import define

from cratematch.config import get_logger

logger = get_logger(__name__).bind(service="resilience")


class CircuitState(str, Enum):
    """Breaker states."""

    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half-open"


@define(frozen=True, slots=True)
class CircuitBreakerState:
    """Point-in-time view of a breaker."""

    failures: int
    last_failure: float | None
    state: CircuitState

    def as_dict(self) -> dict[str, object]:
        return {
            "failures": self.failures,
            "last_failure": self.last_failure,
            "state": self.state.value,
        }


class CircuitBreaker:
    """Consecutive-failure circuit breaker with a single half-open probe.

    Args:
        failure_threshold: Consecutive failures that open the breaker
        reset_timeout: Seconds after the last failure before a probe is allowed
        clock: Monotonic time source, injectable for tests
    """

    def __init__(
        self,
        failure_threshold: int = 5,
        reset_timeout: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if failure_threshold < 1:
            raise ValueError("failure_threshold must be at least 1")
        self.failure_threshold = failure_threshold
        self.reset_timeout = reset_timeout
        self._clock = clock
        self._lock = threading.Lock()
        self._failures = 0
        self._last_failure: float | None = None
        self._state = CircuitState.CLOSED
        self._probe_in_flight = False

    @property
    def state(self) -> CircuitState:
        return self._state

    @property
    def failures(self) -> int:
        return self._failures

    def allow_request(self) -> bool:
        """Whether a call may proceed; claims the probe slot when half-open."""
        with self._lock:
            if self._state == CircuitState.CLOSED:
                return True

            if self._state == CircuitState.OPEN:
                elapsed = self._clock() - (self._last_failure or 0.0)
                if elapsed < self.reset_timeout:
                    return False
                self._state = CircuitState.HALF_OPEN
                logger.info(
                    "Circuit breaker half-open, allowing probe",
                    failures=self._failures,
                )

            # Half-open admits exactly one call at a time
            if self._probe_in_flight:
                return False
            self._probe_in_flight = True
            return True

    def record_success(self) -> None:
        with self._lock:
            if self._state != CircuitState.CLOSED:
                logger.info("Circuit breaker closed after successful probe")
            self._state = CircuitState.CLOSED
            self._failures = 0
            self._probe_in_flight = False

    def record_failure(self) -> None:
        with self._lock:
            self._failures += 1
            self._last_failure = self._clock()
            self._probe_in_flight = False

            should_open = (
                self._state == CircuitState.HALF_OPEN
                or self._failures >= self.failure_threshold
            )
            if should_open and self._state != CircuitState.OPEN:
                logger.warning(
                    "Circuit breaker opened",
                    failures=self._failures,
                    threshold=self.failure_threshold,
                )
                self._state = CircuitState.OPEN

    def release_probe(self) -> None:
        """Give back a claimed probe slot without recording an outcome."""
        with self._lock:
            self._probe_in_flight = False

    def snapshot(self) -> CircuitBreakerState:
        with self._lock:
            return CircuitBreakerState(
                failures=self._failures,
                last_failure=self._last_failure,
                state=self._state,
            )

    def reset(self) -> None:
        with self._lock:
            self._failures = 0
            self._last_failure = None
            self._state = CircuitState.CLOSED
            self._probe_in_flight = False
