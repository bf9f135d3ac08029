"""
Execution strategies for the per-document map step.

Noun-sequence extraction and per-document counting do not depend on each
other, so they may run on a thread pool. The frequency reduce step consumes
results in document order, which keeps the corpus aggregate (and every
ordering derived from it) identical whichever strategy ran the map.

Usage:
    with ThreadPoolStrategy(max_workers=4) as strategy:
        counts = list(strategy.map(count_document, indexed_documents))
"""

from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Iterator, TypeVar

from termbase.config import PARALLEL_MAX_WORKERS
from termbase.logging_config import debug_log

T = TypeVar('T')
R = TypeVar('R')


class ExecutorStrategy(ABC):
    """
    Runs the per-document map step.

    `map` yields results in document order; an exception raised for one
    document propagates when its result is reached and aborts the batch.
    """

    max_workers: int

    @abstractmethod
    def map(self, fn: Callable[[T], R], items: list[T]) -> Iterator[R]:
        """Apply fn to every item, yielding results in input order."""

    def shutdown(self) -> None:
        """Release worker resources (no-op by default)."""

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.shutdown()
        return False


class ThreadPoolStrategy(ExecutorStrategy):
    """
    Analyze documents on a thread pool.

    Pays off when the analyzer releases the GIL (spaCy's Cython pipeline
    components) or waits on a remote tagger.

    Args:
        max_workers: Maximum concurrent threads. Defaults to
                    PARALLEL_MAX_WORKERS (min(cpu_count, 4)).
    """

    def __init__(self, max_workers: int | None = None):
        if max_workers is None:
            max_workers = PARALLEL_MAX_WORKERS
        if max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {max_workers}")

        self.max_workers = max_workers
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="termbase-doc")
        debug_log(f"[PARALLEL] Thread pool with {max_workers} workers")

    def map(self, fn: Callable[[T], R], items: list[T]) -> Iterator[R]:
        return self._executor.map(fn, items)

    def shutdown(self) -> None:
        self._executor.shutdown(wait=True)


class SequentialStrategy(ExecutorStrategy):
    """Analyze documents one after another in the calling thread."""

    max_workers = 1

    def map(self, fn: Callable[[T], R], items: list[T]) -> Iterator[R]:
        for item in items:
            yield fn(item)
