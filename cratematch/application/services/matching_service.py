"""Safe matching service: the production entry point for matching.

Wraps the pure matching engine with input validation, a circuit breaker, a
timeout and request metrics, and runs batches with bounded, failure-isolated
concurrency. Breaker, metrics and normalizer are injected instances so each
service (and each test) owns its own state.
"""

import asyncio
from collections.abc import Callable, Mapping, Sequence
from functools import partial
import threading
import time
from typing import Any
from uuid import uuid4

from cratematch.application.utilities.batching import ChunkedBatchExecutor
from cratematch.application.utilities.results import (
    ErrorKind,
    MatchError,
    ResilienceEnvelope,
    ResultFactory,
)
from cratematch.config import get_config, get_logger, settings
from cratematch.domain.matching import (
    CandidateFetcher,
    MatchOptions,
    MatchOutcome,
    NormalizationCache,
    Normalizer,
    SearchQuery,
    compute_match,
)
from cratematch.infrastructure.resilience.circuit_breaker import CircuitBreaker
from cratematch.infrastructure.resilience.metrics import MetricsCollector
from cratematch.infrastructure.resilience.validation import (
    ValidationFailure,
    extract_search_query,
    validate_match_input,
)

logger = get_logger(__name__)

Matcher = Callable[..., MatchOutcome]

_LOG_PREVIEW_LENGTH = 50


def _preview(value: Any) -> str:
    text = value if isinstance(value, str) else repr(value)
    return text[:_LOG_PREVIEW_LENGTH]


class SafeMatcher:
    """Resilient wrapper around the matching engine.

    Args:
        circuit_breaker: Breaker shared by every call of this service
        metrics: Request counters
        normalizer: Normalizer (and cache) used by the default matcher
        matcher: Synchronous ``(purchase, candidates, options) -> MatchOutcome``;
            defaults to the matching engine bound to ``normalizer``
    """

    def __init__(
        self,
        circuit_breaker: CircuitBreaker | None = None,
        metrics: MetricsCollector | None = None,
        normalizer: Normalizer | None = None,
        matcher: Matcher | None = None,
    ):
        self.circuit_breaker = circuit_breaker or CircuitBreaker(
            failure_threshold=get_config("CIRCUIT_FAILURE_THRESHOLD", 5),
            reset_timeout=get_config("CIRCUIT_RESET_TIMEOUT", 60.0),
        )
        self.metrics = metrics or MetricsCollector()
        self.normalizer = normalizer or Normalizer(
            NormalizationCache(get_config("NORMALIZATION_CACHE_SIZE", 1000))
        )
        self.matcher = matcher or partial(compute_match, normalizer=self.normalizer)

    async def compute_match_safe(
        self,
        purchase: Any,
        candidates: Any,
        options: MatchOptions | Mapping[str, Any] | None = None,
    ) -> ResilienceEnvelope:
        """Match one purchase, never raising for bad input or engine failures.

        Args:
            purchase: PurchaseRecord or mapping
            candidates: Sequence of CandidateRelease instances or mappings
            options: MatchOptions or a mapping with snake_case or camelCase keys

        Returns:
            MatchOutcome on success, otherwise a MatchError carrying a fallback
        """
        correlation_id = uuid4().hex
        self.metrics.record_request()

        with logger.contextualize(correlation_id=correlation_id):
            try:
                match_options = _coerce_options(options)
            except (TypeError, ValueError) as e:
                return self._reject_invalid(
                    f"Invalid match options: {e}",
                    extract_search_query(purchase),
                    correlation_id,
                )

            validation = validate_match_input(purchase, candidates)
            if isinstance(validation, ValidationFailure):
                logger.warning(
                    "Rejected invalid match input",
                    artist=_preview(validation.search_query.artist),
                    title=_preview(validation.search_query.title),
                    errors=validation.errors[:5],
                )
                return self._reject_invalid(
                    validation.message, validation.search_query, correlation_id
                )

            record = validation.purchase
            search_query = SearchQuery(
                artist=record.artist, title=record.title, format=record.format.value
            )

            if not self.circuit_breaker.allow_request():
                self.metrics.record_failure()
                logger.warning(
                    "Circuit breaker open, skipping match",
                    failures=self.circuit_breaker.failures,
                )
                return ResultFactory.error(
                    ErrorKind.CIRCUIT_OPEN,
                    "Matching temporarily unavailable, circuit breaker is open",
                    search_query,
                    correlation_id,
                )

            return await self._run_guarded(
                record, validation.candidates, match_options, search_query, correlation_id
            )

    async def _run_guarded(
        self,
        purchase,
        candidates,
        options: MatchOptions,
        search_query: SearchQuery,
        correlation_id: str,
    ) -> ResilienceEnvelope:
        timeout = options.timeout_ms / 1000
        started = time.perf_counter()

        try:
            # The worker thread keeps running after a timeout; only the wait ends
            outcome = await asyncio.wait_for(
                asyncio.to_thread(self.matcher, purchase, candidates, options),
                timeout=timeout,
            )
        except TimeoutError:
            self.circuit_breaker.record_failure()
            self.metrics.record_timeout()
            self.metrics.record_failure()
            logger.error(
                f"Match timed out after {options.timeout_ms}ms",
                candidate_count=len(candidates),
            )
            return ResultFactory.error(
                ErrorKind.TIMEOUT,
                f"Matching timed out after {options.timeout_ms}ms",
                search_query,
                correlation_id,
            )
        except asyncio.CancelledError:
            self.circuit_breaker.release_probe()
            raise
        except Exception as e:
            self.circuit_breaker.record_failure()
            self.metrics.record_failure()
            logger.opt(exception=e).error(
                "Match failed: {}", e, error_type=type(e).__name__
            )
            return ResultFactory.error(
                ErrorKind.RUNTIME_ERROR,
                f"Matching failed: {e}",
                search_query,
                correlation_id,
            )

        elapsed = time.perf_counter() - started
        if elapsed > settings.resilience.slow_operation_seconds:
            logger.warning(
                f"Slow match: {elapsed:.2f}s",
                candidate_count=len(candidates),
            )

        self.circuit_breaker.record_success()
        self.metrics.record_success()
        logger.debug(
            "Match complete",
            status=outcome.status.value,
            elapsed=f"{elapsed:.3f}s",
        )
        return outcome

    def _reject_invalid(
        self, message: str, search_query: SearchQuery, correlation_id: str
    ) -> MatchError:
        self.metrics.record_validation_error()
        return ResultFactory.error(
            ErrorKind.INVALID_DATA, message, search_query, correlation_id
        )

    async def compute_match_batch(
        self,
        purchases: Sequence[Any],
        fetch_candidates: CandidateFetcher,
        options: MatchOptions | Mapping[str, Any] | None = None,
        concurrency: int | None = None,
    ) -> list[ResilienceEnvelope]:
        """Fetch candidates for and match many purchases.

        Args:
            purchases: Purchases to match
            fetch_candidates: Async catalog lookup, called once per purchase
            options: Options applied to every match
            concurrency: Purchases processed at once (clamped to 1-10)

        Returns:
            One envelope per purchase, in input order. A failing lookup or an
            unexpected exception only affects its own item.

        Raises:
            BatchTooLargeError: If more than the configured maximum is given
        """
        executor = ChunkedBatchExecutor(
            concurrency=concurrency, on_error=self._batch_item_error
        )

        async def _pipeline(purchase: Any) -> ResilienceEnvelope:
            candidates = await fetch_candidates(purchase)
            return await self.compute_match_safe(purchase, candidates, options)

        logger.info("Starting match batch", purchase_count=len(purchases))
        return await executor.process(list(purchases), _pipeline)

    def _batch_item_error(self, purchase: Any, error: Exception) -> MatchError:
        self.metrics.record_request()
        self.metrics.record_failure()
        return ResultFactory.error(
            ErrorKind.RUNTIME_ERROR,
            f"Batch item failed: {error}",
            extract_search_query(purchase),
        )

    def health(self) -> dict[str, Any]:
        """Breaker state and metrics for status displays."""
        return {
            "circuit_breaker": self.circuit_breaker.snapshot().as_dict(),
            "metrics": self.metrics.snapshot().as_dict(),
        }

    def reset(self) -> None:
        """Close the breaker, zero the metrics and clear the normalization cache."""
        self.circuit_breaker.reset()
        self.metrics.reset()
        self.normalizer.cache.clear()


def _coerce_options(options: MatchOptions | Mapping[str, Any] | None) -> MatchOptions:
    if options is None:
        return MatchOptions()
    if isinstance(options, MatchOptions):
        return options
    if not isinstance(options, Mapping):
        raise TypeError(f"options must be a mapping, got {type(options).__name__}")
    return MatchOptions.from_mapping(dict(options))


# =============================================================================
# DEFAULT SERVICE
# =============================================================================

_default_matcher: SafeMatcher | None = None
_default_lock = threading.Lock()


def get_default_matcher() -> SafeMatcher:
    """Process-wide SafeMatcher, created on first use."""
    global _default_matcher
    with _default_lock:
        if _default_matcher is None:
            _default_matcher = SafeMatcher()
        return _default_matcher


async def compute_match_safe(
    purchase: Any,
    candidates: Any,
    options: MatchOptions | Mapping[str, Any] | None = None,
) -> ResilienceEnvelope:
    """Match one purchase with the default service."""
    return await get_default_matcher().compute_match_safe(purchase, candidates, options)


async def compute_match_batch(
    purchases: Sequence[Any],
    fetch_candidates: CandidateFetcher,
    options: MatchOptions | Mapping[str, Any] | None = None,
    concurrency: int | None = None,
) -> list[ResilienceEnvelope]:
    """Match many purchases with the default service."""
    return await get_default_matcher().compute_match_batch(
        purchases, fetch_candidates, options, concurrency
    )
