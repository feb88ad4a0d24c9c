"""Bounded-batch concurrent dispatch for independent I/O-bound targets."""
import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, List, Optional, Sequence, TypeVar

T = TypeVar("T")
R = TypeVar("R")

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BatchOutcome(Generic[T, R]):
    """Result of running the worker on one item."""
    item: T
    value: Optional[R] = None
    error: Optional[BaseException] = None

    @property
    def success(self) -> bool:
        return self.error is None

    @property
    def error_message(self) -> Optional[str]:
        if self.error is None:
            return None
        return str(self.error) or type(self.error).__name__


async def run_in_batches(
    items: Sequence[T],
    worker: Callable[[T], Awaitable[R]],
    batch_size: int = 2,
    delay_seconds: float = 0.0,
    on_progress: Optional[Callable[[int, int, T], Any]] = None,
) -> List[BatchOutcome[T, R]]:
    """
    Run worker over items in fixed-size concurrent batches.

    Every request in a batch runs to completion (success or failure) before
    the next batch starts; one failure never cancels its siblings. Outcomes
    are returned in input order.

    Args:
        items: Targets to process
        worker: Coroutine function called once per item
        batch_size: Number of concurrent requests per batch
        delay_seconds: Pause between batches to throttle external requests
        on_progress: Optional callback (done, total, item) after each item

    Returns:
        One BatchOutcome per item, in the same order as items
    """
    if batch_size < 1:
        raise ValueError(f"batch_size must be >= 1, got {batch_size}")

    outcomes: List[BatchOutcome[T, R]] = []
    total = len(items)

    for start in range(0, total, batch_size):
        batch = items[start:start + batch_size]
        logger.debug(f"Dispatching batch {start // batch_size + 1} ({len(batch)} items)")
        results = await asyncio.gather(*(worker(item) for item in batch), return_exceptions=True)

        for offset, (item, result) in enumerate(zip(batch, results)):
            if isinstance(result, Exception):
                logger.warning(f"Item {item!r} failed: {result}")
                outcomes.append(BatchOutcome(item=item, error=result))
            elif isinstance(result, BaseException):
                # Cancellation and interpreter exits are not per-item failures
                raise result
            else:
                outcomes.append(BatchOutcome(item=item, value=result))

            if on_progress:
                on_progress(start + offset + 1, total, item)

        if delay_seconds and start + batch_size < total:
            await asyncio.sleep(delay_seconds)

    return outcomes
