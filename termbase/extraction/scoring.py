"""
Co-occurrence scoring for term candidates.

All arithmetic is done with `decimal.Decimal` under a fixed context
(precision 28, round-half-up) and every emitted score is quantized to
6 fractional digits, so two runs over the same corpus produce identical
values on any platform.

Formulas (natural logarithms throughout):
    P(a,b)  = count(a,b) / total_bigrams
    P(a)    = count(a) / total_unigrams
    PMI     = ln( P(a,b) / (P(a) * P(b)) )
    NPMI    = PMI / -ln(P(a,b)), clamped to [-1, 1]; 1 when P(a,b) = 1
    IDF     = ln( total_documents / doc_count )
    avg TF-IDF = mean over documents containing the term of
                 (tf_in_doc / noun_tokens_in_doc) * IDF

The relevance score combines (npmi + 1) / 2 with IDF and average TF-IDF
min-max normalized over [0, ln(total_documents)], using configurable weights.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Context, Decimal
from typing import TYPE_CHECKING, Mapping, Sequence

from termbase.config import SCORE_CONTEXT_PRECISION, SCORE_DECIMAL_PLACES

if TYPE_CHECKING:
    from termbase.extraction.aggregator import CorpusStatistics

ZERO = Decimal(0)
ONE = Decimal(1)


class ScoreCalculator:
    """
    Fixed-point calculator for PMI, NPMI, IDF, TF-IDF and relevance.

    Degenerate inputs never raise: PMI/NPMI return None when a probability
    is zero (such pairs are excluded from promotion), IDF and TF-IDF return 0.
    """

    def __init__(self, decimal_places: int = SCORE_DECIMAL_PLACES):
        self.decimal_places = decimal_places
        self.context = Context(prec=SCORE_CONTEXT_PRECISION, rounding=ROUND_HALF_UP)
        self._quantum = Decimal(1).scaleb(-decimal_places)

    def quantize(self, value: Decimal) -> Decimal:
        """Round half-up to the configured number of fractional digits."""
        rounded = value.quantize(self._quantum, rounding=ROUND_HALF_UP, context=self.context)
        # Avoid emitting "-0.000000"
        if rounded.is_zero():
            return ZERO.quantize(self._quantum)
        return rounded

    def _ln(self, value: Decimal) -> Decimal:
        return value.ln(self.context)

    def _divide(self, numerator, denominator) -> Decimal:
        return self.context.divide(Decimal(numerator), Decimal(denominator))

    def _raw_pmi(
        self,
        joint_count: int,
        count1: int,
        count2: int,
        total_bigrams: int,
        total_unigrams: int,
    ) -> Decimal | None:
        if joint_count <= 0 or count1 <= 0 or count2 <= 0 or total_bigrams <= 0 or total_unigrams <= 0:
            return None
        # P(a,b) / (P(a) P(b)) = joint * N_uni^2 / (N_bi * c1 * c2)
        ratio = self._divide(
            joint_count * total_unigrams * total_unigrams,
            total_bigrams * count1 * count2,
        )
        return self._ln(ratio)

    def calculate_pmi(
        self,
        joint_count: int,
        count1: int,
        count2: int,
        total_bigrams: int,
        total_unigrams: int,
    ) -> Decimal | None:
        """
        Pointwise mutual information of a pair.

        Args:
            joint_count: Occurrences of the pair (or span)
            count1: Corpus count of the left token
            count2: Corpus count of the right token
            total_bigrams: Total bigram observations in the corpus
            total_unigrams: Total token observations in the corpus

        Returns:
            Quantized PMI, or None when any count or total is zero
        """
        pmi = self._raw_pmi(joint_count, count1, count2, total_bigrams, total_unigrams)
        return None if pmi is None else self.quantize(pmi)

    def calculate_npmi(
        self,
        joint_count: int,
        count1: int,
        count2: int,
        total_bigrams: int,
        total_unigrams: int,
    ) -> Decimal | None:
        """
        Normalized PMI of a pair, clamped to [-1, 1].

        Computed from the unrounded PMI. When the pair accounts for every
        bigram observation, -ln(P(a,b)) is zero and NPMI is defined as 1.

        Returns:
            Quantized NPMI, or None when PMI is undefined
        """
        pmi = self._raw_pmi(joint_count, count1, count2, total_bigrams, total_unigrams)
        if pmi is None:
            return None
        if joint_count >= total_bigrams:
            return self.quantize(ONE)

        denominator = -self._ln(self._divide(joint_count, total_bigrams))
        npmi = self.context.divide(pmi, denominator)
        return self.quantize(max(-ONE, min(ONE, npmi)))

    def _raw_idf(self, doc_count: int, total_documents: int) -> Decimal:
        if doc_count <= 0 or total_documents <= 0:
            return ZERO
        return self._ln(self._divide(total_documents, doc_count))

    def calculate_idf(self, doc_count: int, total_documents: int) -> Decimal:
        """Inverse document frequency ln(D / df); 0 for empty inputs."""
        return self.quantize(self._raw_idf(doc_count, total_documents))

    def calculate_avg_tfidf(
        self,
        doc_frequencies: Mapping[int, int],
        doc_token_totals: Sequence[int],
        total_documents: int,
    ) -> Decimal:
        """
        Average TF-IDF over the documents that contain the term.

        Args:
            doc_frequencies: Document index -> occurrences of the term there
            doc_token_totals: Noun-token total of every document, by index
            total_documents: Number of documents in the corpus

        Returns:
            Quantized mean of (tf / tokens_in_doc) * IDF; 0 if no document
            contains the term
        """
        containing = [(doc, tf) for doc, tf in doc_frequencies.items() if tf > 0]
        if not containing:
            return self.quantize(ZERO)

        idf = self._raw_idf(len(containing), total_documents)
        tf_sum = ZERO
        for doc, tf in sorted(containing):
            tf_sum = self.context.add(tf_sum, self._divide(tf, doc_token_totals[doc]))
        mean_tf = self._divide(tf_sum, len(containing))
        return self.quantize(self.context.multiply(mean_tf, idf))

    def normalize_npmi(self, npmi: Decimal) -> Decimal:
        """Map NPMI from [-1, 1] onto [0, 1]."""
        return self._divide(npmi + ONE, 2)

    def min_max_normalize(self, value: Decimal, low: Decimal, high: Decimal) -> Decimal:
        """
        Scale value into [0, 1] relative to the range [low, high].

        With an empty range (a one-document corpus) a positive
        value maps to 1 and anything else to 0.
        """
        if high > low:
            return self._divide(value - low, high - low)
        return ONE if value > 0 else ZERO

    def calculate_relevance_score(
        self,
        npmi: Decimal,
        idf_norm: Decimal,
        tfidf_norm: Decimal,
        weights: tuple[Decimal, Decimal, Decimal],
    ) -> Decimal:
        """
        Weighted relevance score.

        relevance = (w_npmi * (npmi + 1) / 2 + w_idf * idf_norm
                     + w_tfidf * tfidf_norm) / (w_npmi + w_idf + w_tfidf)

        With the default weights (0.4, 0.3, 0.3) the denominator is 1 and the
        score lies in [0, 1].
        """
        npmi_weight, idf_weight, tfidf_weight = weights
        weighted = (
            npmi_weight * self.normalize_npmi(npmi)
            + idf_weight * idf_norm
            + tfidf_weight * tfidf_norm
        )
        return self.quantize(self._divide(weighted, npmi_weight + idf_weight + tfidf_weight))


@dataclass(frozen=True)
class BigramScore:
    """Co-occurrence statistics of one adjacent token pair."""
    term1: str
    term2: str
    count: int
    doc_count: int
    pmi: Decimal | None
    npmi: Decimal | None
    idf: Decimal
    avg_tfidf: Decimal

    @property
    def pair(self) -> tuple[str, str]:
        return self.term1, self.term2


@dataclass(frozen=True)
class SpanScore:
    """Statistics of a merged multi-token span."""
    pmi: Decimal | None
    npmi: Decimal | None
    idf: Decimal
    avg_tfidf: Decimal


class CooccurrenceScorer:
    """
    Scores bigrams and merged spans against a finished corpus aggregate.

    Read-only over the aggregate; safe to call from several threads.
    """

    def __init__(self, calculator: ScoreCalculator | None = None):
        self.calculator = calculator or ScoreCalculator()

    def score_bigrams(self, corpus: CorpusStatistics) -> dict[tuple[str, str], BigramScore]:
        """Score every bigram of the corpus (insertion order: count desc, pair asc)."""
        calc = self.calculator
        scores: dict[tuple[str, str], BigramScore] = {}

        for stat in corpus.ngram_stats():
            pair = (stat.term1, stat.term2)
            doc_frequencies = corpus.bigram_doc_frequencies(pair)
            pmi = calc.calculate_pmi(
                stat.count,
                corpus.unigram_counts[stat.term1],
                corpus.unigram_counts[stat.term2],
                corpus.total_bigrams,
                corpus.total_unigrams,
            )
            npmi = calc.calculate_npmi(
                stat.count,
                corpus.unigram_counts[stat.term1],
                corpus.unigram_counts[stat.term2],
                corpus.total_bigrams,
                corpus.total_unigrams,
            )
            scores[pair] = BigramScore(
                term1=stat.term1,
                term2=stat.term2,
                count=stat.count,
                doc_count=stat.doc_count,
                pmi=pmi,
                npmi=npmi,
                idf=calc.calculate_idf(stat.doc_count, corpus.total_documents),
                avg_tfidf=calc.calculate_avg_tfidf(
                    doc_frequencies, corpus.doc_token_totals, corpus.total_documents
                ),
            )

        return scores

    def score_span(
        self,
        components: Sequence[str],
        count: int,
        doc_frequencies: Mapping[int, int],
        corpus: CorpusStatistics,
    ) -> SpanScore:
        """
        Score a merged span.

        PMI/NPMI use the boundary tokens as a proxy pair with the span's own
        occurrence count as the joint count; for a two-token span this is
        exactly the bigram score. IDF and average TF-IDF use the span's own
        document frequencies.
        """
        calc = self.calculator
        first, last = components[0], components[-1]
        args = (
            count,
            corpus.unigram_counts[first],
            corpus.unigram_counts[last],
            corpus.total_bigrams,
            corpus.total_unigrams,
        )
        doc_count = sum(1 for tf in doc_frequencies.values() if tf > 0)
        return SpanScore(
            pmi=calc.calculate_pmi(*args),
            npmi=calc.calculate_npmi(*args),
            idf=calc.calculate_idf(doc_count, corpus.total_documents),
            avg_tfidf=calc.calculate_avg_tfidf(
                doc_frequencies, corpus.doc_token_totals, corpus.total_documents
            ),
        )
