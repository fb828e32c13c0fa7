"""Tests for the consecutive-failure circuit breaker."""

import pytest

from cratematch.infrastructure.resilience.circuit_breaker import (
    CircuitBreaker,
    CircuitState,
)


@pytest.fixture
def breaker(fake_clock):
    """Breaker with default thresholds on a controllable clock."""
    return CircuitBreaker(failure_threshold=5, reset_timeout=60.0, clock=fake_clock)


def _fail(breaker: CircuitBreaker, times: int) -> None:
    for _ in range(times):
        assert breaker.allow_request()
        breaker.record_failure()


class TestClosedState:
    """Test behaviour while the breaker is closed."""

    def test_starts_closed(self, breaker):
        """Test the initial state."""
        assert breaker.state == CircuitState.CLOSED
        assert breaker.allow_request()

    def test_stays_closed_below_threshold(self, breaker):
        """Test that four failures do not trip a threshold of five."""
        _fail(breaker, 4)

        assert breaker.state == CircuitState.CLOSED
        assert breaker.failures == 4

    def test_success_resets_consecutive_count(self, breaker):
        """Test that a success breaks the run of failures."""
        _fail(breaker, 4)
        breaker.record_success()
        _fail(breaker, 4)

        assert breaker.state == CircuitState.CLOSED
        assert breaker.failures == 4


class TestOpenState:
    """Test tripping and rejection."""

    def test_opens_at_threshold(self, breaker):
        """Test that the fifth consecutive failure opens the breaker."""
        _fail(breaker, 5)

        assert breaker.state == CircuitState.OPEN
        assert not breaker.allow_request()

    def test_rejects_until_cooldown_elapses(self, breaker, fake_clock):
        """Test that calls are rejected inside the cool-down window."""
        _fail(breaker, 5)
        fake_clock.advance(59.9)

        assert not breaker.allow_request()
        assert breaker.state == CircuitState.OPEN


class TestHalfOpenState:
    """Test the single recovery probe."""

    def test_probe_allowed_after_cooldown(self, breaker, fake_clock):
        """Test that one call is let through after the window."""
        _fail(breaker, 5)
        fake_clock.advance(60)

        assert breaker.allow_request()
        assert breaker.state == CircuitState.HALF_OPEN

    def test_only_one_probe_at_a_time(self, breaker, fake_clock):
        """Test that a second call waits while the probe is in flight."""
        _fail(breaker, 5)
        fake_clock.advance(60)

        assert breaker.allow_request()
        assert not breaker.allow_request()

    def test_probe_success_closes(self, breaker, fake_clock):
        """Test that a successful probe closes and resets the count."""
        _fail(breaker, 5)
        fake_clock.advance(60)
        breaker.allow_request()

        breaker.record_success()

        assert breaker.state == CircuitState.CLOSED
        assert breaker.failures == 0
        assert breaker.allow_request()

    def test_probe_failure_reopens(self, breaker, fake_clock):
        """Test that a failed probe reopens with a fresh cool-down."""
        _fail(breaker, 5)
        fake_clock.advance(60)
        breaker.allow_request()

        breaker.record_failure()

        assert breaker.state == CircuitState.OPEN
        assert not breaker.allow_request()
        fake_clock.advance(60)
        assert breaker.allow_request()

    def test_released_probe_can_be_claimed_again(self, breaker, fake_clock):
        """Test that an abandoned probe frees the slot."""
        _fail(breaker, 5)
        fake_clock.advance(60)
        breaker.allow_request()

        breaker.release_probe()

        assert breaker.allow_request()


class TestSnapshotAndReset:
    """Test state inspection and manual reset."""

    def test_snapshot(self, breaker, fake_clock):
        """Test that the snapshot reflects counters and timestamps."""
        _fail(breaker, 2)

        snapshot = breaker.snapshot()

        assert snapshot.failures == 2
        assert snapshot.last_failure == fake_clock.now
        assert snapshot.state == CircuitState.CLOSED
        assert snapshot.as_dict()["state"] == "closed"

    def test_reset(self, breaker):
        """Test that reset closes the breaker and clears counters."""
        _fail(breaker, 5)

        breaker.reset()

        snapshot = breaker.snapshot()
        assert snapshot.state == CircuitState.CLOSED
        assert snapshot.failures == 0
        assert snapshot.last_failure is None

    def test_threshold_must_be_positive(self):
        """Test that a zero threshold is refused."""
        with pytest.raises(ValueError):
            CircuitBreaker(failure_threshold=0)
