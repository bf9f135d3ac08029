"""
Frequency Aggregator

Scans the noun sequences of every document and accumulates corpus-wide
unigram and bigram statistics.

The work is split into a map step and a reduce step:
1. count_document() analyzes a single document (pure, runs on any
   ExecutorStrategy)
2. CorpusAccumulator.add() merges per-document counts with sums and
   document-set unions, so the aggregate does not depend on processing order
3. CorpusAccumulator.freeze() produces the read-only CorpusStatistics that
   scoring and candidate building work from

Token texts are lowercased before counting so "API" and "api" aggregate
together; offsets still point into the original text.
"""

from __future__ import annotations

from collections import Counter, defaultdict
from dataclasses import dataclass, field
from functools import cached_property
from typing import Sequence

from termbase.extraction.errors import NounSequenceExtractionError
from termbase.extraction.models import NgramStat, NounSequence, UnigramStat
from termbase.extraction.nouns.base import NounSequenceExtractor
from termbase.logging_config import debug_log
from termbase.parallel import ExecutorStrategy, SequentialStrategy


def normalize_token(term: str) -> str:
    """Normalize a token text for counting."""
    return term.lower()


@dataclass
class DocumentCounts:
    """
    Counts for a single document (the map step output).

    Attributes:
        index: Position of the document in the input list
        content: The document text (offsets point into it)
        sequences: Noun sequences returned by the analyzer
        sequence_terms: Normalized token texts of each sequence
        unigram_counts: Token -> occurrences in this document
        bigram_counts: (left, right) -> occurrences in this document
        token_total: Number of noun tokens in this document
    """
    index: int
    content: str
    sequences: list[NounSequence] = field(default_factory=list)
    sequence_terms: list[tuple[str, ...]] = field(default_factory=list)
    unigram_counts: Counter = field(default_factory=Counter)
    bigram_counts: Counter = field(default_factory=Counter)
    token_total: int = 0


def count_document(index: int, content: str, sequences: Sequence[NounSequence]) -> DocumentCounts:
    """
    Count unigrams and bigrams of one document's noun sequences.

    Raises:
        NounSequenceExtractionError: If a token offset lies outside content
    """
    counts = DocumentCounts(index=index, content=content)

    for sequence in sequences:
        last_token = max(sequence.tokens, key=lambda token: token.end_offset)
        if last_token.end_offset > len(content):
            raise NounSequenceExtractionError(
                index,
                f"token {last_token.term!r} ends at {last_token.end_offset}, "
                f"beyond the document length {len(content)}",
            )

        terms = tuple(normalize_token(token.term) for token in sequence.tokens)
        counts.sequences.append(sequence)
        counts.sequence_terms.append(terms)
        counts.unigram_counts.update(terms)
        counts.bigram_counts.update(zip(terms, terms[1:]))
        counts.token_total += len(terms)

    return counts


class CorpusAccumulator:
    """
    Mutable accumulator for the reduce step.

    Built once per extraction run and discarded after freeze(). Merges are
    sums and set unions, so documents can be added in any order; the
    pipeline still adds them in document order to keep the retained
    per-document list ordered.
    """

    def __init__(self):
        self.unigram_counts: Counter = Counter()
        self.bigram_counts: Counter = Counter()
        self.unigram_documents: dict[str, set[int]] = defaultdict(set)
        self.bigram_documents: dict[tuple[str, str], set[int]] = defaultdict(set)
        self.documents: list[DocumentCounts] = []

    def add(self, counts: DocumentCounts) -> None:
        """Merge one document's counts into the corpus aggregate."""
        self.unigram_counts.update(counts.unigram_counts)
        self.bigram_counts.update(counts.bigram_counts)
        for term in counts.unigram_counts:
            self.unigram_documents[term].add(counts.index)
        for pair in counts.bigram_counts:
            self.bigram_documents[pair].add(counts.index)
        self.documents.append(counts)

    def freeze(self, total_documents: int) -> CorpusStatistics:
        """Produce the read-only statistics used by scoring."""
        documents = sorted(self.documents, key=lambda d: d.index)
        return CorpusStatistics(
            total_documents=total_documents,
            unigram_counts=Counter(self.unigram_counts),
            bigram_counts=Counter(self.bigram_counts),
            unigram_documents={k: frozenset(v) for k, v in self.unigram_documents.items()},
            bigram_documents={k: frozenset(v) for k, v in self.bigram_documents.items()},
            documents=tuple(documents),
        )


@dataclass(frozen=True)
class CorpusStatistics:
    """
    Finished corpus aggregate.

    Attributes:
        total_documents: Number of input documents (including empty ones)
        unigram_counts / bigram_counts: Corpus-wide occurrence counters
        unigram_documents / bigram_documents: Document indices per key
        documents: Per-document counts ordered by document index
    """
    total_documents: int
    unigram_counts: Counter
    bigram_counts: Counter
    unigram_documents: dict[str, frozenset[int]]
    bigram_documents: dict[tuple[str, str], frozenset[int]]
    documents: tuple[DocumentCounts, ...]

    @cached_property
    def total_unigrams(self) -> int:
        return sum(self.unigram_counts.values())

    @cached_property
    def total_bigrams(self) -> int:
        return sum(self.bigram_counts.values())

    @cached_property
    def doc_token_totals(self) -> list[int]:
        """Noun-token total per document index (0 for documents without sequences)."""
        totals = [0] * self.total_documents
        for document in self.documents:
            totals[document.index] = document.token_total
        return totals

    def bigram_doc_frequencies(self, pair: tuple[str, str]) -> dict[int, int]:
        """Document index -> occurrences of the pair in that document."""
        return {
            doc: self.documents[doc].bigram_counts[pair]
            for doc in sorted(self.bigram_documents.get(pair, ()))
        }

    def unigram_stats(self) -> list[UnigramStat]:
        """Unigram statistics sorted by descending count, then term."""
        return [
            UnigramStat(term=term, count=count, doc_count=len(self.unigram_documents[term]))
            for term, count in sorted(self.unigram_counts.items(), key=lambda item: (-item[1], item[0]))
        ]

    def ngram_stats(self) -> list[NgramStat]:
        """Bigram statistics sorted by descending count, then pair."""
        return [
            NgramStat(term1=pair[0], term2=pair[1], count=count, doc_count=len(self.bigram_documents[pair]))
            for pair, count in sorted(self.bigram_counts.items(), key=lambda item: (-item[1], item[0]))
        ]


class FrequencyAggregator:
    """
    Runs the noun-sequence analyzer over every document and aggregates counts.

    Example:
        aggregator = FrequencyAggregator(noun_extractor)
        corpus = aggregator.aggregate(["공유 주차장 이용 안내", ...])
        corpus.unigram_stats()[0]  # UnigramStat(term='공유', count=2, doc_count=2)
    """

    def __init__(self, noun_extractor: NounSequenceExtractor, strategy: ExecutorStrategy | None = None):
        self.noun_extractor = noun_extractor
        self.strategy = strategy or SequentialStrategy()

    def _analyze(self, item: tuple[int, str]) -> DocumentCounts:
        index, content = item
        try:
            sequences = self.noun_extractor.extract_with_offsets(content)
        except NounSequenceExtractionError:
            raise
        except Exception as e:
            raise NounSequenceExtractionError(index, str(e) or type(e).__name__) from e
        return count_document(index, content, sequences)

    def aggregate(self, documents: Sequence[str]) -> CorpusStatistics:
        """
        Aggregate unigram and bigram statistics over all documents.

        Raises:
            NounSequenceExtractionError: If the analyzer fails for any document
        """
        accumulator = CorpusAccumulator()
        items = list(enumerate(documents))

        for counts in self.strategy.map(self._analyze, items):
            accumulator.add(counts)

        corpus = accumulator.freeze(total_documents=len(items))
        debug_log(
            f"[AGGREGATE] {corpus.total_documents} documents, "
            f"{sum(len(d.sequences) for d in corpus.documents)} noun sequences, "
            f"{corpus.total_unigrams} tokens, {len(corpus.unigram_counts)} unique terms, "
            f"{len(corpus.bigram_counts)} unique bigrams"
        )
        return corpus
