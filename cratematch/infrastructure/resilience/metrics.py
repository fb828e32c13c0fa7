"""Request counters for the safe matching wrapper."""

from collections.abc import Callable
import threading
import time

from attrs import define


@define(frozen=True, slots=True)
class MetricsSnapshot:
    """Counter values at one point in time."""

    total_requests: int = 0
    successful_requests: int = 0
    failed_requests: int = 0
    timeouts: int = 0
    validation_errors: int = 0
    uptime_seconds: float = 0.0

    @property
    def success_rate(self) -> float:
        """Successful requests as a percentage of all requests."""
        if self.total_requests == 0:
            return 0.0
        return round(self.successful_requests / self.total_requests * 100, 2)

    def as_dict(self) -> dict[str, float | int]:
        return {
            "total_requests": self.total_requests,
            "successful_requests": self.successful_requests,
            "failed_requests": self.failed_requests,
            "timeouts": self.timeouts,
            "validation_errors": self.validation_errors,
            "success_rate": self.success_rate,
            "uptime_seconds": round(self.uptime_seconds, 3),
        }


class MetricsCollector:
    """Monotonic request counters; only ``reset`` brings them back to zero."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._started = clock()
        self._lock = threading.Lock()
        self._counts = dict.fromkeys(
            (
                "total_requests",
                "successful_requests",
                "failed_requests",
                "timeouts",
                "validation_errors",
            ),
            0,
        )

    def _increment(self, key: str) -> None:
        with self._lock:
            self._counts[key] += 1

    def record_request(self) -> None:
        self._increment("total_requests")

    def record_success(self) -> None:
        self._increment("successful_requests")

    def record_failure(self) -> None:
        self._increment("failed_requests")

    def record_timeout(self) -> None:
        self._increment("timeouts")

    def record_validation_error(self) -> None:
        self._increment("validation_errors")

    def snapshot(self) -> MetricsSnapshot:
        with self._lock:
            return MetricsSnapshot(
                **self._counts,
                uptime_seconds=self._clock() - self._started,
            )

    def reset(self) -> None:
        with self._lock:
            for key in self._counts:
                self._counts[key] = 0
