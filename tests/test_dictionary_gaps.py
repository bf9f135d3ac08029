"""
Tests for dictionary-gap detection.

Tests cover:
- Strong pair that failed to merge into an accepted candidate
- The stricter NPMI bar (nearest-rank quantile, capped)
- Exclusion of promoted pairs, stopwords and known terms
- Lexical signals and their confidence bonus
- Reason ordering and confidence bounds
"""

import math
import sys
from decimal import Decimal
from pathlib import Path

import pytest

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from termbase.extraction.candidate_builder import CandidateBuildResult, RejectedSpan  # noqa: E402
from termbase.extraction.candidate_filter import RejectionReason  # noqa: E402
from termbase.extraction.dictionary_gaps import (  # noqa: E402
    DISTINCT_DOCUMENTS,
    NOT_PROMOTED,
    TRANSLITERATION,
    DictionaryGapDetector,
    nearest_rank_quantile,
)
from termbase.extraction.models import CandidateStat, TermExtractionConfig  # noqa: E402
from termbase.extraction.scoring import BigramScore  # noqa: E402

LOANWORD_SPLIT = "looks like a loanword split by the tokenizer"


def _bigram(term1, term2, count, npmi, doc_count=5):
    return BigramScore(
        term1=term1,
        term2=term2,
        count=count,
        doc_count=doc_count,
        pmi=Decimal("3.000000"),
        npmi=Decimal(npmi),
        idf=Decimal("0.500000"),
        avg_tfidf=Decimal("0.010000"),
    )


def _candidate(*components):
    return CandidateStat(
        term="".join(components),
        components=tuple(components),
        count=10,
        doc_count=3,
        pmi=Decimal("2.000000"),
        npmi=Decimal("0.800000"),
        idf=Decimal("0.300000"),
        avg_tfidf=Decimal("0.010000"),
        relevance_score=Decimal("0.700000"),
    )


def _detect(strong, accepted=(), rejected=(), unigram_counts=None, **config_kwargs):
    build_result = CandidateBuildResult(tuple(strong), tuple(accepted), tuple(rejected))
    scores = {score.pair: score for score in strong}
    config = TermExtractionConfig(**config_kwargs)
    return DictionaryGapDetector().detect(scores, build_result, config, unigram_counts)


def _relevance_rejected(*components):
    return RejectedSpan("".join(components), components, RejectionReason.RELEVANCE, 50,
                        Decimal("0.9"), Decimal("0.2"))


class TestLowRelevancePair:
    """A very strong, frequent pair whose span fell below the relevance bar."""

    def test_reported_with_high_confidence(self):
        score = _bigram("data", "lake", 50, "0.9")

        gaps = _detect([score], rejected=[_relevance_rejected("data", "lake")])

        assert len(gaps) == 1
        gap = gaps[0]
        assert gap.original_term == "data lake"
        assert gap.suggested_term == "datalake"
        assert gap.npmi == Decimal("0.9")
        assert gap.reasons == ("high NPMI despite low span relevance", DISTINCT_DOCUMENTS)
        # 0.6 * 0.9 + 0.4 * ln(51) / ln(51)
        assert gap.confidence == pytest.approx(0.94)
        assert gap.confidence > 0.5

    def test_loanword_bonus_clamped(self):
        score = _bigram("정산", "역서", 50, "0.9")
        gaps = _detect([score])
        assert gaps[0].confidence == 1.0
        assert LOANWORD_SPLIT in gaps[0].reasons
        assert gaps[0].reasons[-1] == "contains an incomplete word: '역서'"


class TestNpmiBar:

    def test_nearest_rank_quantile(self):
        values = [Decimal(n) / 10 for n in range(1, 11)]
        assert nearest_rank_quantile(values, Decimal("0.9")) == Decimal("0.9")
        assert nearest_rank_quantile(values, Decimal("1")) == Decimal("1")
        assert nearest_rank_quantile(values, Decimal("0.01")) == Decimal("0.1")

    def test_only_top_of_strong_bigrams_reported(self):
        strong = [_bigram("data", "lake", 50, "0.9"), _bigram("event", "log", 10, "0.5")]
        gaps = _detect(strong)
        assert [g.suggested_term for g in gaps] == ["datalake"]

    def test_bar_never_below_npmi_threshold(self):
        detector = DictionaryGapDetector()
        strong = [_bigram("data", "lake", 5, "0.3")]
        config = TermExtractionConfig(npmi_threshold="0.5")
        assert detector.npmi_bar(strong, config) == Decimal("0.5")

    def test_lower_quantile_reports_more(self):
        strong = [_bigram("data", "lake", 50, "0.9"), _bigram("event", "log", 10, "0.5")]
        gaps = _detect(strong, dictionary_npmi_quantile="0.5")
        assert [g.suggested_term for g in gaps] == ["datalake", "eventlog"]

    def test_promoted_pairs_do_not_raise_bar(self):
        """Ten accepted pairs at 0.95 leave the unpromoted 0.9 pair reportable."""
        accepted = [_candidate(f"term{i}", f"part{i}") for i in range(10)]
        strong = [_bigram(f"term{i}", f"part{i}", 20, "0.95") for i in range(10)]
        strong.append(_bigram("data", "lake", 50, "0.9"))

        gaps = _detect(strong, accepted=accepted, rejected=[_relevance_rejected("data", "lake")])
        assert [g.suggested_term for g in gaps] == ["datalake"]

    def test_bar_capped_at_ceiling(self):
        strong = [_bigram(f"term{i}", f"part{i}", 20, "0.97") for i in range(10)]
        strong.append(_bigram("data", "lake", 50, "0.9"))

        assert DictionaryGapDetector().npmi_bar(strong, TermExtractionConfig()) == Decimal("0.9")
        assert len(_detect(strong)) == 11

    def test_npmi_threshold_above_ceiling_wins(self):
        strong = [_bigram("data", "lake", 50, "0.95"), _bigram("event", "log", 10, "0.92")]
        gaps = _detect(strong, npmi_threshold="0.95")
        assert [g.suggested_term for g in gaps] == ["datalake"]


class TestExclusions:

    def test_promoted_pair_not_reported(self):
        score = _bigram("data", "lake", 50, "0.9")
        assert _detect([score], accepted=[_candidate("raw", "data", "lake")]) == []

    def test_stopword_component_skipped(self):
        score = _bigram("data", "lake", 50, "0.9")
        assert _detect([score], stopwords={"lake"}) == []

    @pytest.mark.parametrize("excluded", ["data lake", "datalake"])
    def test_known_term_skipped(self, excluded):
        score = _bigram("data", "lake", 50, "0.9")
        assert _detect([score], excluded_terms={excluded}) == []

    def test_no_strong_bigrams(self):
        assert _detect([]) == []


class TestLexicalSignals:

    def test_known_compound_suffix(self):
        gap = _detect([_bigram("공유", "주차장", 50, "0.9")])[0]
        assert gap.reasons[-1] == "ends with a known compound suffix: -주차장"

    @pytest.mark.parametrize("components", [("마이그", "레이션"), ("쿠버", "네티스")])
    def test_transliteration(self, components):
        gap = _detect([_bigram(*components, 50, "0.9")])[0]
        assert gap.reasons[-1] == TRANSLITERATION

    def test_almost_always_together(self):
        score = _bigram("data", "lake", 50, "0.9")
        gap = _detect([score], unigram_counts={"data": 60, "lake": 200})[0]
        assert gap.reasons == (NOT_PROMOTED, DISTINCT_DOCUMENTS, "almost always appears together (50/60)")

    def test_together_ratio_below_threshold(self):
        score = _bigram("data", "lake", 50, "0.9")
        gap = _detect([score], unigram_counts={"data": 100, "lake": 200})[0]
        assert gap.reasons == (NOT_PROMOTED, DISTINCT_DOCUMENTS)

    def test_together_skipped_without_counts(self):
        score = _bigram("data", "lake", 50, "0.9")
        assert _detect([score], unigram_counts={})[0].reasons == (NOT_PROMOTED, DISTINCT_DOCUMENTS)

    def test_signal_adds_confidence(self):
        score = _bigram("data", "lake", 50, "0.9")
        plain = _detect([score])[0]
        together = _detect([score], unigram_counts={"data": 50, "lake": 50})[0]
        # 0.94 + 0.05
        assert together.confidence == pytest.approx(plain.confidence + 0.05)
        assert together.confidence == pytest.approx(0.99)

    def test_signals_follow_split_patterns(self):
        score = _bigram("정산", "역서", 2, "0.9", doc_count=1)
        gap = _detect([score], unigram_counts={"정산": 2, "역서": 2})[0]
        assert gap.reasons == (
            NOT_PROMOTED,
            LOANWORD_SPLIT,
            "contains an incomplete word: '역서'",
            "almost always appears together (2/2)",
        )


class TestReasonsAndOrdering:

    def test_fallback_reason_and_single_document(self):
        score = _bigram("data", "lake", 50, "0.9", doc_count=1)
        assert _detect([score])[0].reasons == (NOT_PROMOTED,)

    def test_reasons_follow_rejection_order_without_duplicates(self):
        score = _bigram("data", "lake", 50, "0.9")
        rejected = [
            RejectedSpan("rawdatalake", ("raw", "data", "lake"), RejectionReason.COUNT, 1, Decimal("0.9")),
            RejectedSpan("datalakefile", ("data", "lake", "file"), RejectionReason.COUNT, 1, Decimal("0.9")),
            RejectedSpan("datalake", ("data", "lake"), RejectionReason.RELEVANCE, 50,
                         Decimal("0.9"), Decimal("0.1")),
            RejectedSpan("lakedata", ("lake", "data"), RejectionReason.NOISE, 3, Decimal("0.9")),
        ]
        reasons = _detect([score], rejected=rejected)[0].reasons
        assert reasons == (
            "longer span too rare to reach the minimum count",
            "high NPMI despite low span relevance",
            DISTINCT_DOCUMENTS,
        )

    def test_sorted_by_confidence_then_term(self):
        strong = [
            _bigram("event", "log", 10, "0.95"),
            _bigram("data", "lake", 50, "0.95"),
            _bigram("cache", "key", 50, "0.95"),
        ]
        gaps = _detect(strong)
        assert [g.original_term for g in gaps] == ["cache key", "data lake", "event log"]
        assert gaps[0].confidence == gaps[1].confidence > gaps[2].confidence

    def test_confidence_bounds_and_rounding(self):
        strong = [_bigram("data", "lake", 50, "0.95"), _bigram("event", "log", 10, "0.95")]
        gaps = _detect(strong)
        low = next(g for g in gaps if g.suggested_term == "eventlog")
        expected = 0.6 * 0.95 + 0.4 * math.log(11) / math.log(51)
        assert low.confidence == round(expected, 4)
        assert all(0.0 <= g.confidence <= 1.0 for g in gaps)
