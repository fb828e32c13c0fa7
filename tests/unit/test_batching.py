"""Tests for chunked batch execution and batch matching."""

import asyncio
from unittest.mock import AsyncMock, patch

import pytest

from cratematch.application.services.matching_service import (
    SafeMatcher,
    compute_match_batch,
)
from cratematch.application.utilities.batching import (
    ChunkedBatchExecutor,
    clamp_concurrency,
)
from cratematch.application.utilities.results import ErrorKind, is_match_error
from cratematch.domain.entities import FormatCategory, PurchaseRecord
from cratematch.domain.errors import BatchTooLargeError
from cratematch.domain.matching import MatchOutcome, MatchStatus, Normalizer
from cratematch.infrastructure.resilience.circuit_breaker import CircuitBreaker
from cratematch.infrastructure.resilience.metrics import MetricsCollector


@pytest.fixture
def purchases():
    """Three CD purchases."""
    return [
        PurchaseRecord(artist="Radiohead", title=title, format=FormatCategory.CD)
        for title in ("OK Computer", "Kid A", "Amnesiac")
    ]


@pytest.fixture
def fetch_candidates(make_release):
    """Catalog lookup returning one exact release per purchase."""

    async def _fetch(purchase):
        return [make_release(release_id=len(purchase.title), title=purchase.title)]

    return _fetch


@pytest.fixture
def safe_matcher(fake_clock):
    """Safe matcher with isolated state."""
    return SafeMatcher(
        circuit_breaker=CircuitBreaker(clock=fake_clock),
        metrics=MetricsCollector(),
        normalizer=Normalizer(),
    )


class TestClampConcurrency:
    """Test concurrency bounds."""

    @pytest.mark.parametrize(
        ("requested", "expected"),
        [(None, 3), (0, 1), (-4, 1), (1, 1), (7, 7), (10, 10), (50, 10)],
    )
    def test_clamping(self, requested, expected):
        """Test that requests are clamped to 1-10 with a default of 3."""
        assert clamp_concurrency(requested) == expected


class TestChunkedBatchExecutor:
    """Test chunking, ordering and failure isolation."""

    async def test_results_in_input_order(self):
        """Test that results line up with inputs."""
        executor = ChunkedBatchExecutor(
            concurrency=2, on_error=lambda item, error: None, chunk_delay=0
        )

        async def double(item):
            await asyncio.sleep(0.01 * (5 - item))
            return item * 2

        assert await executor.process([1, 2, 3, 4, 5], double) == [2, 4, 6, 8, 10]

    async def test_concurrency_bounded_per_chunk(self):
        """Test that no more than `concurrency` items run at once."""
        in_flight = 0
        peak = 0

        async def track(item):
            nonlocal in_flight, peak
            in_flight += 1
            peak = max(peak, in_flight)
            await asyncio.sleep(0.01)
            in_flight -= 1
            return item

        executor = ChunkedBatchExecutor(
            concurrency=2, on_error=lambda item, error: None, chunk_delay=0
        )
        await executor.process(list(range(7)), track)

        assert peak == 2

    async def test_item_failure_isolated(self):
        """Test that one failing item does not affect the others."""

        async def process(item):
            if item == 2:
                raise ValueError("bad item")
            return item

        executor = ChunkedBatchExecutor(
            concurrency=3,
            on_error=lambda item, error: f"error:{item}:{error}",
            chunk_delay=0,
        )

        assert await executor.process([1, 2, 3], process) == [1, "error:2:bad item", 3]

    async def test_delay_between_chunks_only(self):
        """Test that the pause is inserted between chunks, not after the last."""
        executor = ChunkedBatchExecutor(
            concurrency=2, on_error=lambda item, error: None, chunk_delay=0.1
        )

        async def identity(item):
            return item

        with patch(
            "cratematch.application.utilities.batching.asyncio.sleep",
            new=AsyncMock(),
        ) as sleep:
            await executor.process([1, 2, 3, 4, 5], identity)

        assert sleep.await_count == 2
        sleep.assert_awaited_with(0.1)

    async def test_too_many_items(self):
        """Test that oversized batches are refused up front."""
        process = AsyncMock()
        executor = ChunkedBatchExecutor(
            concurrency=3, on_error=lambda item, error: None, max_items=1000
        )

        with pytest.raises(BatchTooLargeError):
            await executor.process(list(range(1001)), process)

        process.assert_not_awaited()

    async def test_empty(self):
        """Test that an empty batch does nothing."""
        executor = ChunkedBatchExecutor(concurrency=3, on_error=lambda item, error: None)

        assert await executor.process([], AsyncMock()) == []


class TestComputeMatchBatch:
    """Test batch matching through the safe matcher."""

    async def test_all_items_matched(self, safe_matcher, purchases, fetch_candidates):
        """Test that every purchase gets its own outcome in order."""
        results = await safe_matcher.compute_match_batch(purchases, fetch_candidates)

        assert len(results) == 3
        assert all(isinstance(result, MatchOutcome) for result in results)
        assert [r.search_query.title for r in results] == [
            "OK Computer",
            "Kid A",
            "Amnesiac",
        ]
        assert all(r.status == MatchStatus.MATCHED for r in results)

    async def test_failing_lookup_isolated(self, safe_matcher, purchases, fetch_candidates):
        """Test that if item 2 of 3 throws, items 1 and 3 still succeed."""

        async def flaky_fetch(purchase):
            if purchase.title == "Kid A":
                raise ConnectionError("catalog unavailable")
            return await fetch_candidates(purchase)

        results = await safe_matcher.compute_match_batch(purchases, flaky_fetch)

        assert isinstance(results[0], MatchOutcome)
        assert isinstance(results[2], MatchOutcome)
        assert is_match_error(results[1])
        assert results[1].kind == ErrorKind.RUNTIME_ERROR
        assert "catalog unavailable" in results[1].message
        assert results[1].fallback.search_query.title == "Kid A"
        assert results[1].fallback.status == MatchStatus.NO_MATCH

    async def test_lookup_failures_counted(self, safe_matcher, purchases):
        """Test that failed lookups show up in the metrics."""
        fetch = AsyncMock(side_effect=ConnectionError("down"))

        await safe_matcher.compute_match_batch(purchases, fetch)

        snapshot = safe_matcher.metrics.snapshot()
        assert snapshot.total_requests == 3
        assert snapshot.failed_requests == 3

    async def test_fetch_called_once_per_purchase(self, safe_matcher, purchases):
        """Test that the lookup collaborator is called for each purchase."""
        fetch = AsyncMock(return_value=[])

        await safe_matcher.compute_match_batch(purchases, fetch, concurrency=1)

        assert fetch.await_count == 3
        assert [c.args[0] for c in fetch.await_args_list] == purchases

    async def test_options_forwarded(self, safe_matcher, purchases, fetch_candidates):
        """Test that batch options apply to every item."""
        results = await safe_matcher.compute_match_batch(
            purchases, fetch_candidates, {"minConfidence": 100, "includeAlternatives": False}
        )

        assert all(r.alternatives == [] for r in results)

    async def test_batch_too_large(self, safe_matcher):
        """Test that more than 1000 purchases are refused."""
        fetch = AsyncMock(return_value=[])
        too_many = [
            PurchaseRecord(artist="A", title=str(i), format=FormatCategory.CD)
            for i in range(1001)
        ]

        with pytest.raises(BatchTooLargeError):
            await safe_matcher.compute_match_batch(too_many, fetch)

        fetch.assert_not_awaited()

    async def test_module_level_function(self, purchases, fetch_candidates):
        """Test the convenience function backed by the default service."""
        results = await compute_match_batch(purchases, fetch_candidates, concurrency=2)

        assert len(results) == 3
