"""
Batch processing with per-item failure isolation.

One item failing never stops the rest of the batch; callers inspect the
partial result instead of catching an exception.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Generic, Iterable, Optional, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


@dataclass
class BatchFailure(Generic[T]):
    """An item that failed processing and the error it raised."""
    item: T
    error: Exception

    @property
    def message(self) -> str:
        return str(self.error)


@dataclass
class BatchResult(Generic[T, R]):
    """Outcome of a best-effort batch."""
    succeeded: list[R] = field(default_factory=list)
    failed: list[BatchFailure[T]] = field(default_factory=list)

    @property
    def all_succeeded(self) -> bool:
        return not self.failed

    def summary(self) -> dict[str, int]:
        return {
            "total": len(self.succeeded) + len(self.failed),
            "succeeded": len(self.succeeded),
            "failed": len(self.failed),
        }


def process_batch(
    items: Iterable[T],
    fn: Callable[[T], R],
    describe: Optional[Callable[[T], Any]] = None,
) -> BatchResult[T, R]:
    """
    Apply ``fn`` to every item, collecting results and failures.

    Args:
        items: Items to process
        fn: Processing function; any ``Exception`` it raises is recorded
        describe: Optional label function used in the failure log line

    Returns:
        BatchResult with succeeded results (in input order) and failures
    """
    result: BatchResult[T, R] = BatchResult()

    for item in items:
        try:
            result.succeeded.append(fn(item))
        except Exception as e:
            label = describe(item) if describe else type(item).__name__
            logger.warning(f"Batch item {label} failed: {e}")
            result.failed.append(BatchFailure(item=item, error=e))

    return result
