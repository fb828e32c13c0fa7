"""Chunked batch execution with per-item failure isolation.

Items are processed in fixed-size chunks. All items of a chunk run
concurrently and the chunk is joined before the next one starts, with a
short pause in between to spare the downstream collaborator.
"""

import asyncio
from collections.abc import Awaitable, Callable, Sequence
from typing import Any, Generic, TypeVar

from attrs import define, field

from cratematch.config import get_config, get_logger
from cratematch.domain.errors import BatchTooLargeError

T = TypeVar("T")
R = TypeVar("R")


def clamp_concurrency(concurrency: int | None) -> int:
    """Clamp a requested chunk size into the configured range."""
    if concurrency is None:
        concurrency = get_config("BATCH_CONCURRENCY", 3)
    upper = get_config("MAX_BATCH_CONCURRENCY", 10)
    return max(1, min(upper, int(concurrency)))


@define(frozen=True, slots=True)
class ChunkedBatchExecutor(Generic[T, R]):
    """Run an async function over items in joined chunks.

    Attributes:
        concurrency: Items processed concurrently per chunk
        chunk_delay: Pause between chunks (seconds)
        max_items: Largest accepted batch
        on_error: Turns an item's exception into that item's result
        logger_instance: Logger for recording processing events
    """

    concurrency: int = field(converter=clamp_concurrency)
    on_error: Callable[[T, Exception], R]
    chunk_delay: float = field(factory=lambda: get_config("BATCH_CHUNK_DELAY", 0.1))
    max_items: int = field(factory=lambda: get_config("MAX_BATCH_SIZE", 1000))
    logger_instance: Any = field(factory=lambda: get_logger(__name__))

    async def _run_item(self, item: T, process_func: Callable[[T], Awaitable[R]]) -> R:
        try:
            return await process_func(item)
        except Exception as e:
            self.logger_instance.warning(
                "Batch item failed: {}", e, error_type=type(e).__name__
            )
            return self.on_error(item, e)

    async def process(
        self,
        items: Sequence[T],
        process_func: Callable[[T], Awaitable[R]],
    ) -> list[R]:
        """Process items chunk by chunk.

        Args:
            items: Items to process
            process_func: Async function that processes a single item

        Returns:
            One result per item, in input order

        Raises:
            BatchTooLargeError: If more than ``max_items`` items are given
        """
        if len(items) > self.max_items:
            raise BatchTooLargeError(
                f"Batch of {len(items)} items exceeds the maximum of {self.max_items}"
            )
        if not items:
            return []

        total_chunks = (len(items) + self.concurrency - 1) // self.concurrency
        results: list[R] = []

        for chunk_number, start in enumerate(
            range(0, len(items), self.concurrency), start=1
        ):
            chunk = items[start : start + self.concurrency]
            self.logger_instance.debug(
                f"Processing chunk {chunk_number}/{total_chunks}",
                chunk_size=len(chunk),
            )

            results.extend(
                await asyncio.gather(
                    *(self._run_item(item, process_func) for item in chunk)
                )
            )

            if chunk_number < total_chunks and self.chunk_delay > 0:
                await asyncio.sleep(self.chunk_delay)

        self.logger_instance.info(
            "Batch processing completed",
            total_items=len(items),
            chunks=total_chunks,
        )
        return results
