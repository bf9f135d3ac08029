"""
Tests for span agglomeration and candidate filtering.

Tests cover:
- Strong bigram selection
- Greedy left-to-right span discovery with breaks
- Span counts recomputed from exact token windows
- Surface forms and merging by term text
- Stage filters with recorded rejection reasons
- Relevance ranking
"""

import sys
from decimal import Decimal
from pathlib import Path

import pytest

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from termbase.extraction.aggregator import FrequencyAggregator  # noqa: E402
from termbase.extraction.candidate_builder import CandidateBuilder, is_strong_bigram  # noqa: E402
from termbase.extraction.candidate_filter import RejectionReason  # noqa: E402
from termbase.extraction.models import TermExtractionConfig  # noqa: E402
from termbase.extraction.scoring import BigramScore, CooccurrenceScorer  # noqa: E402


def _build(extractor, documents, **config_kwargs):
    corpus = FrequencyAggregator(extractor).aggregate(documents)
    scores = CooccurrenceScorer().score_bigrams(corpus)
    config = TermExtractionConfig(**config_kwargs)
    return CandidateBuilder().build(corpus, scores, config)


def _bigram(count, npmi):
    return BigramScore("a", "b", count, 1, Decimal(0), npmi, Decimal(0), Decimal(0))


class TestStrongBigram:

    def test_requires_count_and_npmi(self):
        config = TermExtractionConfig(min_count=2, npmi_threshold="0.5")
        assert is_strong_bigram(_bigram(2, Decimal("0.5")), config)
        assert not is_strong_bigram(_bigram(1, Decimal("0.9")), config)
        assert not is_strong_bigram(_bigram(5, Decimal("0.4")), config)

    def test_undefined_npmi_never_strong(self):
        assert not is_strong_bigram(_bigram(10, None), TermExtractionConfig(min_count=1))


class TestDiscoverSpans:
    """Spans open at a strong bigram and close at the first weak one."""

    @pytest.fixture
    def corpus(self, fake_extractor):
        return FrequencyAggregator(fake_extractor).aggregate(["데이터 레이크 구축 운영"])

    def test_break_splits_spans(self, corpus):
        strong = {("데이터", "레이크"), ("구축", "운영")}
        spans = CandidateBuilder().discover_spans(corpus, strong)
        assert [span.components for span in spans] == [("데이터", "레이크"), ("구축", "운영")]

    def test_consecutive_strong_bigrams_extend_span(self, corpus):
        strong = {("데이터", "레이크"), ("레이크", "구축"), ("구축", "운영")}
        spans = CandidateBuilder().discover_spans(corpus, strong)
        assert [span.components for span in spans] == [("데이터", "레이크", "구축", "운영")]

    def test_no_strong_bigrams(self, corpus):
        assert CandidateBuilder().discover_spans(corpus, set()) == []

    def test_duplicate_spans_discovered_once(self, fake_extractor):
        corpus = FrequencyAggregator(fake_extractor).aggregate(["데이터 레이크", "데이터 레이크"])
        spans = CandidateBuilder().discover_spans(corpus, {("데이터", "레이크")})
        assert len(spans) == 1
        assert spans[0].order == 0


class TestBuild:

    def test_two_document_example(self, fake_extractor, scenario_a_documents):
        result = _build(fake_extractor, scenario_a_documents, min_count=1)

        assert [c.term for c in result.accepted] == ["공유주차장이용안내", "공유주차장"]
        short = result.accepted[1]
        assert short.components == ("공유", "주차장")
        assert short.count == 2
        assert short.doc_count == 2
        assert short.npmi == Decimal("1.000000")
        assert short.relevance_score == Decimal("0.400000")
        assert short.surface_form == "공유 주차장"

        full = result.accepted[0]
        assert full.count == 1
        assert full.doc_count == 1
        assert full.relevance_score == Decimal("0.775000")
        assert result.rejected == ()
        assert len(result.strong_bigrams) == 3

    def test_span_count_recomputed_from_windows(self, fake_extractor, data_lake_documents):
        """The 3-token span occurs once though both of its bigrams occur twice."""
        result = _build(fake_extractor, data_lake_documents, min_count=2)

        assert [c.term for c in result.accepted] == ["데이터레이크", "레이크구축"]
        assert all(c.count == 2 for c in result.accepted)
        assert [(r.term, r.reason, r.count) for r in result.rejected] == [
            ("데이터레이크구축", RejectionReason.COUNT, 1),
        ]

    def test_equal_relevance_sorted_by_term(self, fake_extractor, data_lake_documents):
        result = _build(fake_extractor, data_lake_documents, min_count=2)
        assert result.accepted[0].relevance_score == result.accepted[1].relevance_score
        assert result.accepted[0].term < result.accepted[1].term

    def test_excluded_term(self, fake_extractor, data_lake_documents):
        result = _build(fake_extractor, data_lake_documents, min_count=2, excluded_terms={"데이터 레이크"})
        assert [c.term for c in result.accepted] == ["레이크구축"]
        assert (("데이터레이크", RejectionReason.EXCLUDED)
                in [(r.term, r.reason) for r in result.rejected])

    def test_joined_term_in_stopwords_is_excluded(self, fake_extractor, data_lake_documents):
        result = _build(fake_extractor, data_lake_documents, min_count=2, stopwords={"레이크구축"})
        assert [c.term for c in result.accepted] == ["데이터레이크"]

    def test_component_stopword(self, fake_extractor, data_lake_documents):
        result = _build(fake_extractor, data_lake_documents, min_count=2, stopwords={"레이크"})
        assert result.accepted == ()
        reasons = {r.term: r.reason for r in result.rejected}
        assert reasons["데이터레이크"] == RejectionReason.STOPWORD
        assert reasons["레이크구축"] == RejectionReason.STOPWORD

    def test_relevance_threshold(self, fake_extractor, scenario_a_documents):
        result = _build(fake_extractor, scenario_a_documents, min_count=1, relevance_threshold="0.5")
        assert [c.term for c in result.accepted] == ["공유주차장이용안내"]
        rejected = result.rejected[0]
        assert rejected.reason == RejectionReason.RELEVANCE
        assert rejected.relevance_score == Decimal("0.400000")

    def test_npmi_threshold_is_inclusive(self, fake_extractor, data_lake_documents):
        corpus = FrequencyAggregator(fake_extractor).aggregate(data_lake_documents)
        scores = CooccurrenceScorer().score_bigrams(corpus)
        config = TermExtractionConfig(min_count=1, npmi_threshold="1")
        # Every pair has NPMI exactly 1 here, so all stay strong
        assert len(CandidateBuilder().build(corpus, scores, config).strong_bigrams) == 2

    def test_no_candidates_from_unrelated_documents(self, fake_extractor):
        result = _build(fake_extractor, ["결제를 진행했습니다"], min_count=1)
        assert result.accepted == ()
        assert result.strong_bigrams == ()


class TestSurfaceFormsAndMerging:

    def test_most_frequent_surface_form(self, fake_extractor):
        result = _build(fake_extractor, ["공유 주차장", "공유 주차장", "공유  주차장"], min_count=1)
        assert result.accepted[0].surface_form == "공유 주차장"

    def test_surface_form_tie_takes_smallest(self, fake_extractor):
        result = _build(fake_extractor, ["공유 주차장", "공유  주차장"], min_count=1)
        assert result.accepted[0].surface_form == "공유  주차장"

    def test_spans_with_same_text_merged(self):
        from conftest import FakeNounSequenceExtractor

        extractor = FakeNounSequenceExtractor({"공유", "주차장", "공유주차", "장"})
        result = _build(extractor, ["공유 주차장", "공유 주차장", "공유주차 장"], min_count=1)

        assert [c.term for c in result.accepted] == ["공유주차장"]
        assert result.accepted[0].components == ("공유", "주차장")
        assert result.accepted[0].count == 2
