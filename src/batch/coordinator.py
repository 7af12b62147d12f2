# src/batch/coordinator.py - v1
"""Batch coordinator: chunked, partially-failing batch execution.

Workflow:
    1. Split the inputs into consecutive chunks of ``batch_size``
    2. Run every item of a chunk concurrently through the OperationRunner
    3. Pause ``rate_limit_delay`` between chunks
    4. Return one BatchResult per input, in input order

Chunking only bounds how many items are submitted together; the gate
inside the runner is what throttles endpoint calls. A failing item is
reported as ``success=False`` and never affects its siblings.
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Sequence, TypeVar

from nutriscope.batch.models import BatchItem, BatchResult
from nutriscope.core.models import Operation, OperationRequest
from nutriscope.logging.context import batch_context, new_id

if TYPE_CHECKING:
    from nutriscope.pipeline.runner import OperationRunner

logger = logging.getLogger(__name__)

T = TypeVar("T")


def chunk_list(items: Sequence[T], size: int) -> list[list[T]]:
    """Split *items* into consecutive lists of at most *size* elements."""
    if size < 1:
        raise ValueError("chunk size must be >= 1")
    return [list(items[i : i + size]) for i in range(0, len(items), size)]


class BatchCoordinator:
    """Process lists of inputs through an OperationRunner.

    Args:
        runner: Single-item pipeline; its config supplies batch_size and
            the inter-chunk pause unless overridden per call.
        sleep: Awaitable sleep, replaceable in tests.
    """

    def __init__(
        self,
        runner: OperationRunner,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self._runner = runner
        self._sleep = sleep

    async def process_batch(
        self,
        items: Sequence[BatchItem | str],
        operation: Operation | str = Operation.ANALYZE,
        batch_size: int | None = None,
    ) -> list[BatchResult]:
        """Run *operation* over *items*.

        Args:
            items: Inputs; plain strings are treated as content.
            operation: Default operation for items without their own.
            batch_size: Chunk size override (defaults to config).

        Returns:
            Exactly one BatchResult per input, positionally aligned.
        """
        config = self._runner.config
        size = batch_size or config.batch_size
        pause_s = config.rate_limit_delay_s
        batch_items = [BatchItem(content=i) if isinstance(i, str) else i for i in items]
        chunks = chunk_list(batch_items, size)
        batch_id = new_id()

        logger.info(
            "Processing %d item(s) in %d chunk(s) of up to %d [batch %s]",
            len(batch_items), len(chunks), size, batch_id,
        )
        started = time.monotonic()
        results: list[BatchResult] = []

        for chunk_idx, chunk in enumerate(chunks):
            offset = chunk_idx * size
            logger.debug("Processing chunk %d/%d", chunk_idx + 1, len(chunks))
            chunk_results = await asyncio.gather(
                *(
                    self._run_item(batch_id, offset + j, item, operation)
                    for j, item in enumerate(chunk)
                )
            )
            results.extend(chunk_results)

            if chunk_idx < len(chunks) - 1 and pause_s > 0:
                await self._sleep(pause_s)

        failed = sum(1 for r in results if not r.success)
        logger.info(
            "Batch %s complete: %d ok, %d failed in %.1fs",
            batch_id, len(results) - failed, failed, time.monotonic() - started,
        )
        return results

    async def _run_item(
        self,
        batch_id: str,
        index: int,
        item: BatchItem,
        default_operation: Operation | str,
    ) -> BatchResult:
        with batch_context(batch_id, index):
            try:
                request = OperationRequest.create(
                    item.operation or default_operation, item.content, item.source_type
                )
                result = await self._runner.execute(request)
            except Exception as e:
                logger.warning("Batch item %d failed: %s", index, e)
                return BatchResult(
                    index=index,
                    success=False,
                    error_message=str(e) or type(e).__name__,
                    original_input=item,
                )
        return BatchResult(index=index, success=True, result=result, original_input=item)
