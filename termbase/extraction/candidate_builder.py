"""
Candidate Builder

Grows strong bigrams into multi-token term candidates and filters them.

Steps:
1. A bigram is strong when count >= min_count and NPMI >= npmi_threshold.
2. Every noun sequence is scanned left to right. A span opens at the first
   strong bigram and extends one token at a time while the next bigram is
   strong too; the first weak bigram closes it and scanning resumes after
   the break. Spans are discovered in document, sequence and position order.
3. The count, document frequencies and surface form of each distinct span
   are recomputed over every window of its exact token tuple, since a long
   span is usually rarer than any of its bigrams.
4. Spans whose joined text collides are merged by term text.
5. Stage filters: count, NPMI, excluded terms, stopwords, noise, and last
   the weighted relevance score. Its IDF and TF-IDF parts are min-max
   normalized over the fixed range [0, ln(total_documents)], so a span's
   relevance never depends on which other spans passed the thresholds.

Every rejected span is kept with its reason; the dictionary-gap pass uses
them to explain why a strong bigram never became a candidate.
"""

from __future__ import annotations

from collections import Counter, defaultdict
from dataclasses import dataclass, field
from decimal import Decimal
from typing import Mapping

from termbase.extraction.aggregator import CorpusStatistics
from termbase.extraction.candidate_filter import RejectionReason, TermCandidateFilter
from termbase.extraction.models import CandidateStat, TermExtractionConfig
from termbase.extraction.scoring import ZERO, BigramScore, CooccurrenceScorer, SpanScore
from termbase.logging_config import debug_log


def is_strong_bigram(score: BigramScore, config: TermExtractionConfig) -> bool:
    """True if the bigram may seed or extend a span."""
    return (
        score.count >= config.min_count
        and score.npmi is not None
        and score.npmi >= config.npmi_threshold
    )


@dataclass
class DiscoveredSpan:
    """
    A distinct token tuple found by agglomeration, with its corpus occurrences.

    Attributes:
        components: The exact (normalized) token tuple
        order: Discovery position, used to break ties deterministically
        count: Windows matching the tuple across the corpus
        doc_frequencies: Document index -> matching windows in that document
        surface_forms: Original-text phrase -> occurrences
    """
    components: tuple[str, ...]
    order: int
    count: int = 0
    doc_frequencies: Counter = field(default_factory=Counter)
    surface_forms: Counter = field(default_factory=Counter)

    @property
    def term(self) -> str:
        return "".join(self.components)

    @property
    def doc_count(self) -> int:
        return len(self.doc_frequencies)

    @property
    def surface_form(self) -> str:
        """Most frequent original phrase; ties go to the lexically smallest."""
        if not self.surface_forms:
            return self.term
        return min(self.surface_forms.items(), key=lambda item: (-item[1], item[0]))[0]


@dataclass(frozen=True)
class RejectedSpan:
    """A discovered span that failed a filter stage."""
    term: str
    components: tuple[str, ...]
    reason: RejectionReason
    count: int
    npmi: Decimal | None
    relevance_score: Decimal | None = None


@dataclass(frozen=True)
class CandidateBuildResult:
    """
    Output of the candidate builder.

    Attributes:
        strong_bigrams: Bigrams that passed the count and NPMI thresholds
        accepted: Candidates ordered by descending relevance, then term
        rejected: Spans that failed a lexical or threshold stage in discovery
            order, followed by those that failed the relevance stage
    """
    strong_bigrams: tuple[BigramScore, ...]
    accepted: tuple[CandidateStat, ...]
    rejected: tuple[RejectedSpan, ...]


@dataclass
class _ScoredSpan:
    span: DiscoveredSpan
    score: SpanScore


class CandidateBuilder:
    """
    Agglomerates and filters term candidates over a finished corpus aggregate.

    Example:
        builder = CandidateBuilder()
        result = builder.build(corpus, scorer.score_bigrams(corpus), config)
        [c.term for c in result.accepted]  # ['공유주차장', ...]
    """

    def __init__(
        self,
        scorer: CooccurrenceScorer | None = None,
        candidate_filter: TermCandidateFilter | None = None,
    ):
        self.scorer = scorer or CooccurrenceScorer()
        self.candidate_filter = candidate_filter or TermCandidateFilter()

    def build(
        self,
        corpus: CorpusStatistics,
        bigram_scores: Mapping[tuple[str, str], BigramScore],
        config: TermExtractionConfig,
    ) -> CandidateBuildResult:
        strong = {
            pair: score for pair, score in bigram_scores.items()
            if is_strong_bigram(score, config)
        }

        spans = self.discover_spans(corpus, strong.keys())
        self._count_windows(corpus, spans)
        merged = self._merge_by_term(spans)

        rejected: list[RejectedSpan] = []
        survivors: list[_ScoredSpan] = []
        for span in merged:
            score = self.scorer.score_span(span.components, span.count, span.doc_frequencies, corpus)
            reason = self._stage_reason(span, score, config)
            if reason is None:
                survivors.append(_ScoredSpan(span, score))
            else:
                rejected.append(RejectedSpan(span.term, span.components, reason, span.count, score.npmi))

        accepted = self._rank(survivors, corpus.total_documents, config, rejected)

        debug_log(
            f"[CANDIDATES] {len(strong)} strong bigrams, {len(merged)} spans, "
            f"{len(accepted)} accepted, {len(rejected)} rejected"
        )
        return CandidateBuildResult(
            strong_bigrams=tuple(strong.values()),
            accepted=tuple(accepted),
            rejected=tuple(rejected),
        )

    def discover_spans(self, corpus: CorpusStatistics, strong_pairs) -> list[DiscoveredSpan]:
        """
        Greedy left-to-right agglomeration over every noun sequence.

        Returns:
            One DiscoveredSpan per distinct token tuple, in discovery order
        """
        strong_pairs = set(strong_pairs)
        found: dict[tuple[str, ...], DiscoveredSpan] = {}

        for document in corpus.documents:
            for terms in document.sequence_terms:
                position = 0
                while position < len(terms) - 1:
                    if (terms[position], terms[position + 1]) not in strong_pairs:
                        position += 1
                        continue

                    end = position + 1
                    while end + 1 < len(terms) and (terms[end], terms[end + 1]) in strong_pairs:
                        end += 1

                    components = tuple(terms[position:end + 1])
                    if components not in found:
                        found[components] = DiscoveredSpan(components=components, order=len(found))
                    position = end + 1

        return list(found.values())

    def _count_windows(self, corpus: CorpusStatistics, spans: list[DiscoveredSpan]) -> None:
        by_length: dict[int, dict[tuple[str, ...], DiscoveredSpan]] = defaultdict(dict)
        for span in spans:
            by_length[len(span.components)][span.components] = span

        for document in corpus.documents:
            for sequence, terms in zip(document.sequences, document.sequence_terms):
                for length, lookup in by_length.items():
                    for start in range(len(terms) - length + 1):
                        span = lookup.get(terms[start:start + length])
                        if span is None:
                            continue
                        span.count += 1
                        span.doc_frequencies[document.index] += 1
                        phrase = sequence.original_phrase(document.content, start, start + length - 1)
                        span.surface_forms[phrase] += 1

    def _merge_by_term(self, spans: list[DiscoveredSpan]) -> list[DiscoveredSpan]:
        # ("공유", "주차장") and ("공유주차", "장") both join to "공유주차장"
        groups: dict[str, list[DiscoveredSpan]] = defaultdict(list)
        for span in spans:
            groups[span.term].append(span)

        merged = [
            min(group, key=lambda span: (-span.count, span.order))
            for group in groups.values()
        ]
        return sorted(merged, key=lambda span: span.order)

    def _stage_reason(
        self,
        span: DiscoveredSpan,
        score: SpanScore,
        config: TermExtractionConfig,
    ) -> RejectionReason | None:
        if span.count < config.min_count:
            return RejectionReason.COUNT
        if score.npmi is None or score.npmi < config.npmi_threshold:
            return RejectionReason.NPMI

        spaced = " ".join(span.components)
        blocked = config.excluded_terms | config.stopwords
        if span.term in blocked or spaced in blocked:
            return RejectionReason.EXCLUDED

        return self.candidate_filter.should_exclude(
            span.term, span.components, config.stopwords, config.noise_filter
        )

    def _rank(
        self,
        survivors: list[_ScoredSpan],
        total_documents: int,
        config: TermExtractionConfig,
        rejected: list[RejectedSpan],
    ) -> list[CandidateStat]:
        if not survivors:
            return []

        calc = self.scorer.calculator
        # Both IDF and average TF-IDF lie in [0, ln(D)] for a D-document corpus
        upper = calc.calculate_idf(1, total_documents)

        accepted: list[CandidateStat] = []
        for item in survivors:
            span, score = item.span, item.score
            relevance = calc.calculate_relevance_score(
                score.npmi,
                calc.min_max_normalize(score.idf, ZERO, upper),
                calc.min_max_normalize(score.avg_tfidf, ZERO, upper),
                config.weights,
            )
            if relevance < config.relevance_threshold:
                rejected.append(RejectedSpan(
                    span.term, span.components, RejectionReason.RELEVANCE,
                    span.count, score.npmi, relevance,
                ))
                continue

            accepted.append(CandidateStat(
                term=span.term,
                components=span.components,
                count=span.count,
                doc_count=span.doc_count,
                pmi=score.pmi,
                npmi=score.npmi,
                idf=score.idf,
                avg_tfidf=score.avg_tfidf,
                relevance_score=relevance,
                surface_form=span.surface_form,
            ))

        accepted.sort(key=lambda candidate: (-candidate.relevance_score, candidate.term))
        return accepted
