"""Batched fan-out helper shared by the cast and credits fetch passes.

The only backpressure protecting the lookup service is the shape of the
fan-out itself: units are split into fixed-size batches, the units of one
batch run concurrently through ``asyncio.gather``, and a fixed delay
separates consecutive batches.  Batch N+1 never starts before every request
of batch N has settled.

Failures follow the fan-out / merge pattern: an exception raised for one
unit is captured with ``return_exceptions=True``, logged, and reported in
the :class:`BatchOutcome` so callers can count and retry it later.  It
never aborts the batch or the pass.
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from typing import Any, Generic, TypeVar

import structlog

from castgraph.utils.logging import get_logger

_U = TypeVar("_U")
_T = TypeVar("_T")

_logger: structlog.BoundLogger = get_logger(__name__)


@dataclass
class BatchOutcome(Generic[_U, _T]):
    """What happened to the units of one batch.

    ``batch_index`` is zero-based; ``total_batches`` is the batch count of
    the whole pass, which lets listeners derive a completion percentage.
    """

    batch_index: int
    total_batches: int
    succeeded: list[tuple[_U, _T]] = field(default_factory=list)
    failed: list[tuple[_U, Exception]] = field(default_factory=list)

    @property
    def progress(self) -> float:
        """Percentage of batches completed once this batch has settled."""
        if self.total_batches == 0:
            return 100.0
        return (self.batch_index + 1) / self.total_batches * 100.0


def chunk(units: Sequence[_U], size: int) -> list[list[_U]]:
    """Split *units* into consecutive lists of at most *size* elements."""
    if size < 1:
        raise ValueError(f"batch size must be >= 1, got {size}")
    return [list(units[i:i + size]) for i in range(0, len(units), size)]


async def run_in_batches(
    units: Sequence[_U],
    worker: Callable[[_U], Awaitable[_T]],
    *,
    batch_size: int,
    delay: float,
    on_batch_complete: Callable[[BatchOutcome[_U, _T]], Any] | None = None,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    logger: structlog.BoundLogger | None = None,
    error_msg: str = "batch_unit_failed",
) -> list[BatchOutcome[_U, _T]]:
    """Run *worker* over *units* in sequential, internally concurrent batches.

    Parameters
    ----------
    units:
        Work items, processed in order of appearance.
    worker:
        Async callable invoked once per unit.
    batch_size:
        Maximum number of concurrent worker calls.
    delay:
        Seconds to wait between two batches.  No delay follows the last one.
    on_batch_complete:
        Optional sync or async callback invoked after each batch settles.
    sleep:
        Awaitable sleep function; injectable so tests can observe delays.
    logger:
        Structured logger for per-unit failures.
    error_msg:
        Event name logged for each failed unit.

    Returns
    -------
    list[BatchOutcome]
        One outcome per batch, in execution order.
    """
    if logger is None:
        logger = _logger

    batches = chunk(units, batch_size)
    outcomes: list[BatchOutcome[_U, _T]] = []

    for index, batch in enumerate(batches):
        results = await asyncio.gather(
            *(worker(unit) for unit in batch),
            return_exceptions=True,
        )

        outcome: BatchOutcome[_U, _T] = BatchOutcome(
            batch_index=index,
            total_batches=len(batches),
        )
        for unit, result in zip(batch, results):
            if isinstance(result, Exception):
                logger.warning(
                    error_msg,
                    unit=getattr(unit, "id", unit),
                    error_type=type(result).__name__,
                    error=str(result),
                )
                outcome.failed.append((unit, result))
            elif isinstance(result, BaseException):
                # Cancellation and interpreter exits are not per-unit failures.
                raise result
            else:
                outcome.succeeded.append((unit, result))
        outcomes.append(outcome)

        if on_batch_complete is not None:
            ret = on_batch_complete(outcome)
            if inspect.isawaitable(ret):
                await ret

        if index + 1 < len(batches):
            await sleep(delay)

    return outcomes
