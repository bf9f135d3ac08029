"""
Term Candidate Extractor

Coordinates the full pipeline from raw documents to a TermExtractionResult:
1. AGGREGATE: Per-document noun sequences and counts (MAP, parallelizable),
   merged into corpus statistics (REDUCE)
2. SCORE: PMI, NPMI, IDF and average TF-IDF of every bigram
3. BUILD: Agglomerate strong bigrams into spans and filter them
4. DICTIONARY: Report strong pairs that look like tokenizer mis-splits

The run is a pure batch computation: configuration is validated before any
document is touched, any analyzer failure aborts the whole run, and no
partial result is ever returned. Persisting candidates and recording batch
history belong to the caller.
"""

from typing import Sequence

from termbase.extraction.aggregator import FrequencyAggregator
from termbase.extraction.candidate_builder import CandidateBuilder
from termbase.extraction.candidate_filter import TermCandidateFilter
from termbase.extraction.dictionary_gaps import DictionaryGapDetector
from termbase.extraction.models import TermExtractionConfig, TermExtractionResult
from termbase.extraction.nouns import get_noun_extractor
from termbase.extraction.nouns.base import NounSequenceExtractor
from termbase.extraction.scoring import CooccurrenceScorer, ScoreCalculator
from termbase.logging_config import Timer, debug_log
from termbase.parallel import ExecutorStrategy, SequentialStrategy


class TermCandidateExtractor:
    """
    Main coordinator for term-candidate extraction.

    Example:
        extractor = TermCandidateExtractor(get_noun_extractor("spacy"))
        result = extractor.extract(
            ["공유 주차장에서 결제를 진행했습니다", "공유 주차장 이용 안내"],
            TermExtractionConfig(min_count=1),
        )
        [c.term for c in result.candidates]  # ['공유주차장이용안내', '공유주차장']
    """

    def __init__(
        self,
        noun_extractor: NounSequenceExtractor,
        strategy: ExecutorStrategy | None = None,
        calculator: ScoreCalculator | None = None,
        candidate_filter: TermCandidateFilter | None = None,
    ):
        """
        Initialize the pipeline components.

        Args:
            noun_extractor: Analyzer providing noun sequences per document
            strategy: Executor for the per-document map step (sequential if None)
            calculator: Shared fixed-point score calculator
            candidate_filter: Lexical noise filter
        """
        self.noun_extractor = noun_extractor
        self.strategy = strategy or SequentialStrategy()
        calculator = calculator or ScoreCalculator()
        candidate_filter = candidate_filter or TermCandidateFilter()

        self.aggregator = FrequencyAggregator(noun_extractor, self.strategy)
        self.scorer = CooccurrenceScorer(calculator)
        self.builder = CandidateBuilder(self.scorer, candidate_filter)
        self.gap_detector = DictionaryGapDetector(candidate_filter, calculator)

    def extract(
        self,
        documents: Sequence[str],
        config: TermExtractionConfig | None = None,
    ) -> TermExtractionResult:
        """
        Run the full extraction over a batch of documents.

        Args:
            documents: Raw document texts, one entry per source document
            config: Filtering configuration (defaults if None)

        Returns:
            Unigram and bigram statistics, accepted candidates and
            dictionary-gap suspects

        Raises:
            TermExtractionConfigError: If the configuration is invalid
            NounSequenceExtractionError: If the analyzer fails for any document
        """
        config = config or TermExtractionConfig()
        config.validate()

        documents = list(documents or [])
        if not documents:
            debug_log("[EXTRACT] No documents, returning empty result")
            return TermExtractionResult.empty()

        debug_log(
            f"[EXTRACT] {len(documents)} documents, analyzer={self.noun_extractor.name}, "
            f"strategy={type(self.strategy).__name__}, min_count={config.min_count}, "
            f"npmi_threshold={config.npmi_threshold}, relevance_threshold={config.relevance_threshold}"
        )

        with Timer("FrequencyAggregation"):
            corpus = self.aggregator.aggregate(documents)

        with Timer("BigramScoring"):
            bigram_scores = self.scorer.score_bigrams(corpus)

        with Timer("CandidateBuilding"):
            build_result = self.builder.build(corpus, bigram_scores, config)

        with Timer("DictionaryGapDetection"):
            dictionary_candidates = self.gap_detector.detect(
                bigram_scores, build_result, config, unigram_counts=corpus.unigram_counts
            )

        debug_log(
            f"[EXTRACT] {len(build_result.accepted)} candidates, "
            f"{len(dictionary_candidates)} dictionary candidates"
        )
        return TermExtractionResult(
            total_documents=corpus.total_documents,
            unigrams=tuple(corpus.unigram_stats()),
            ngrams=tuple(corpus.ngram_stats()),
            candidates=build_result.accepted,
            dictionary_candidates=tuple(dictionary_candidates),
        )


def extract_terms(
    documents: Sequence[str],
    config: TermExtractionConfig | None = None,
    noun_extractor: NounSequenceExtractor | None = None,
) -> TermExtractionResult:
    """
    Convenience function for one-off extraction.

    Uses the spaCy analyzer with its default model when no analyzer is given.
    """
    extractor = TermCandidateExtractor(noun_extractor or get_noun_extractor("spacy"))
    return extractor.extract(documents, config)
