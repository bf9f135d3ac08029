"""
Parallel execution utilities for Termbase.

The extraction pipeline treats per-document noun-sequence extraction and
counting as a map step. This package provides Strategy Pattern-based
executors for it:

    ExecutorStrategy - Abstract base class defining the execution interface
    ThreadPoolStrategy - Thread-based parallel execution (production)
    SequentialStrategy - Sequential execution (testing/debugging)

Both strategies return results in submission order, so the reduce step
(frequency aggregation) is independent of the strategy in use.

Usage Example:
    from termbase.parallel import ThreadPoolStrategy
    from termbase.extraction import TermCandidateExtractor

    with ThreadPoolStrategy(max_workers=4) as strategy:
        extractor = TermCandidateExtractor(noun_extractor, strategy=strategy)
        result = extractor.extract(documents)
"""

from .executor_strategy import (
    ExecutorStrategy,
    SequentialStrategy,
    ThreadPoolStrategy,
)

__all__ = [
    'ExecutorStrategy',
    'ThreadPoolStrategy',
    'SequentialStrategy',
]
