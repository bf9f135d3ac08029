"""
Term Candidate Extraction Package

Turns a batch of raw documents into ranked multi-token term candidates and
dictionary-gap suspects.

Main Components:
- TermCandidateExtractor: Pipeline orchestrator
- FrequencyAggregator: Per-document counting and corpus aggregation
- CooccurrenceScorer / ScoreCalculator: Fixed-point PMI, NPMI, IDF, TF-IDF
- CandidateBuilder: Greedy span agglomeration and stage filters
- DictionaryGapDetector: Tokenizer mis-split suspects
- nouns: Pluggable noun-sequence analyzers (spaCy, NLTK)

Usage:
    from termbase.extraction import TermCandidateExtractor, TermExtractionConfig
    from termbase.extraction.nouns import get_noun_extractor

    extractor = TermCandidateExtractor(get_noun_extractor("spacy"))
    result = extractor.extract(documents, TermExtractionConfig(min_count=2))
"""

from termbase.extraction.errors import NounSequenceExtractionError, TermExtractionConfigError
from termbase.extraction.models import (
    CandidateStat,
    DictionaryCandidateStat,
    NgramStat,
    NounSequence,
    TermExtractionConfig,
    TermExtractionResult,
    TokenWithOffset,
    UnigramStat,
)
from termbase.extraction.aggregator import CorpusStatistics, FrequencyAggregator
from termbase.extraction.scoring import CooccurrenceScorer, ScoreCalculator
from termbase.extraction.candidate_filter import RejectionReason, SplitPattern, TermCandidateFilter
from termbase.extraction.candidate_builder import CandidateBuilder, CandidateBuildResult
from termbase.extraction.dictionary_gaps import DictionaryGapDetector
from termbase.extraction.extractor import TermCandidateExtractor, extract_terms

__all__ = [
    'CandidateBuildResult',
    'CandidateBuilder',
    'CandidateStat',
    'CooccurrenceScorer',
    'CorpusStatistics',
    'DictionaryCandidateStat',
    'DictionaryGapDetector',
    'FrequencyAggregator',
    'NgramStat',
    'NounSequence',
    'NounSequenceExtractionError',
    'RejectionReason',
    'ScoreCalculator',
    'SplitPattern',
    'TermCandidateExtractor',
    'TermCandidateFilter',
    'TermExtractionConfig',
    'TermExtractionConfigError',
    'TermExtractionResult',
    'TokenWithOffset',
    'UnigramStat',
    'extract_terms',
]
