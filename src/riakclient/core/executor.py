"""
Bounded-concurrency batch executor.

Runs one asynchronous operation per input item with at most `limit`
operations in flight, returning results in input order.
"""

import asyncio
from typing import Any, Awaitable, Callable, List, Mapping, Optional, Sequence, TypeVar

import structlog

from riakclient.config import DEFAULT_CONCURRENCY_LIMIT
from riakclient.core.errors import InvalidArgumentError

logger = structlog.get_logger(__name__)

T = TypeVar("T")
R = TypeVar("R")


def _log_late_failure(task: "asyncio.Task") -> None:
    """Consume the outcome of a worker that finished after the batch already failed."""
    if task.cancelled():
        return
    error = task.exception()
    if error is not None:
        logger.warning("batch_late_failure", error=str(error))


class BatchExecutor:
    """
    Worker pool over a sequence of items.

    `min(limit, len(items))` workers share a single iterator over the input;
    each worker takes the next item as soon as its previous operation
    finishes. The first failure is raised to the caller immediately, no
    further items are admitted, and operations already in flight run to
    completion without being cancelled. Cancelling the batch itself stops
    admission the same way.

    Usage:
        ```python
        executor = BatchExecutor(limit=5)
        values = await executor.run(keys, client.get)
        ```
    """

    def __init__(self, limit: int = DEFAULT_CONCURRENCY_LIMIT):
        if not isinstance(limit, int) or isinstance(limit, bool) or limit < 1:
            raise InvalidArgumentError(f"Concurrency limit must be a positive integer: {limit!r}")
        self.limit = limit

    @staticmethod
    def validate(items: Any) -> Sequence:
        """Check that batch input is a sequence of items."""
        if (
            not isinstance(items, Sequence)
            or isinstance(items, (str, bytes, bytearray))
            or isinstance(items, Mapping)
        ):
            raise InvalidArgumentError(
                f"Batch input must be a sequence, got {type(items).__name__}"
            )
        return items

    async def run(
        self,
        items: Sequence[T],
        operation: Callable[[T], Awaitable[R]],
    ) -> List[R]:
        """
        Apply `operation` to every item.

        Args:
            items: Input sequence
            operation: Coroutine function called once per item

        Returns:
            Results aligned with the input order

        Raises:
            InvalidArgumentError: If items is not a sequence
            Exception: The first error raised by any operation
        """
        items = self.validate(items)
        results: List[Optional[R]] = [None] * len(items)

        if not items:
            return results

        pending = iter(enumerate(items))
        failed = False

        async def worker() -> None:
            nonlocal failed
            for index, item in pending:
                if failed:
                    return
                try:
                    results[index] = await operation(item)
                except Exception:
                    failed = True
                    raise

        workers = [
            asyncio.ensure_future(worker())
            for _ in range(min(self.limit, len(items)))
        ]

        logger.debug("batch_started", size=len(items), workers=len(workers))

        try:
            done, still_running = await asyncio.wait(
                workers,
                return_when=asyncio.FIRST_EXCEPTION,
            )
        except asyncio.CancelledError:
            failed = True
            for task in workers:
                task.add_done_callback(_log_late_failure)
            logger.warning(
                "batch_cancelled",
                size=len(items),
                in_flight=sum(1 for task in workers if not task.done()),
            )
            raise

        for task in still_running:
            task.add_done_callback(_log_late_failure)

        errors = [
            task.exception() for task in workers
            if task in done and task.exception() is not None
        ]
        if errors:
            logger.warning(
                "batch_failed",
                size=len(items),
                in_flight=len(still_running),
                error=str(errors[0]),
            )
            raise errors[0]

        logger.debug("batch_completed", size=len(items))
        return results
