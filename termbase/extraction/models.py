"""
Value objects for term-candidate extraction.

Everything here is created once per extraction run and never mutated:
tokens and noun sequences come from the analyzer, statistics and candidates
are produced by the pipeline and handed to the caller, who owns persistence.

Key Types:
    TokenWithOffset - A noun token and its span in the original text
    NounSequence - A maximal run of consecutive noun tokens (length >= 2)
    TermExtractionConfig - Every filtering decision of a run
    UnigramStat / NgramStat - Corpus-wide occurrence statistics
    CandidateStat - A surviving multi-token term candidate
    DictionaryCandidateStat - A suspected tokenizer mis-split
    TermExtractionResult - The complete output of one run

Scores are fixed-point `Decimal` values quantized to 6 fractional digits so
results are reproducible across runs and platforms.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from pathlib import Path
from typing import Any, Iterable, Mapping

from termbase.config import (
    DICTIONARY_NPMI_QUANTILE,
    RELEVANCE_IDF_WEIGHT,
    RELEVANCE_NPMI_WEIGHT,
    RELEVANCE_TFIDF_WEIGHT,
    TERM_MIN_COUNT,
    TERM_NPMI_THRESHOLD,
    TERM_RELEVANCE_THRESHOLD,
    load_extraction_settings,
)
from termbase.extraction.errors import TermExtractionConfigError
from termbase.logging_config import debug_log, warning


@dataclass(frozen=True)
class TokenWithOffset:
    """
    A noun token and its exact span in the original document text.

    Attributes:
        term: Token text as produced by the analyzer
        start_offset: Start character index in the document (inclusive)
        end_offset: End character index in the document (exclusive)
    """
    term: str
    start_offset: int
    end_offset: int

    def __post_init__(self):
        if self.start_offset < 0 or self.start_offset >= self.end_offset:
            raise ValueError(
                f"Invalid offsets for token {self.term!r}: "
                f"[{self.start_offset}, {self.end_offset})"
            )


@dataclass(frozen=True)
class NounSequence:
    """
    One maximal run of consecutive noun tokens in a document.

    The analyzer drops particles and punctuation between nouns; the offsets
    let callers recover the original phrase, e.g. the tokens ["공유", "주차장"]
    of "공유 주차장에서" map back to "공유 주차장".
    """
    tokens: tuple[TokenWithOffset, ...]

    def __post_init__(self):
        object.__setattr__(self, 'tokens', tuple(self.tokens))
        if len(self.tokens) < 2:
            raise ValueError(f"A noun sequence needs at least 2 tokens, got {len(self.tokens)}")

    def __len__(self) -> int:
        return len(self.tokens)

    @property
    def terms(self) -> tuple[str, ...]:
        """Token texts in order."""
        return tuple(token.term for token in self.tokens)

    def original_phrase(self, content: str, from_index: int, to_index: int) -> str:
        """
        Return the original text spanning tokens [from_index, to_index].

        Args:
            content: The exact document text the sequence was extracted from
            from_index: First token index (inclusive)
            to_index: Last token index (inclusive)

        Raises:
            ValueError: If the index range is empty or out of bounds
        """
        if not 0 <= from_index < len(self.tokens):
            raise ValueError(f"from_index out of range: {from_index}")
        if not 0 <= to_index < len(self.tokens):
            raise ValueError(f"to_index out of range: {to_index}")
        if from_index > to_index:
            raise ValueError(f"from_index must be <= to_index ({from_index} > {to_index})")

        return content[self.tokens[from_index].start_offset:self.tokens[to_index].end_offset]

    def bigram_phrase(self, content: str, index: int) -> str:
        """Return the original text of the two tokens starting at index."""
        return self.original_phrase(content, index, index + 1)


def load_word_list(file_path: str | Path | None) -> set[str]:
    """Load a list of words (one per line) from a UTF-8 file."""
    if file_path is None:
        return set()

    file_path = Path(file_path)
    if not file_path.exists():
        warning(f"[CONFIG] Word list not found: {file_path}")
        return set()

    with open(file_path, encoding='utf-8') as f:
        word_list = {line.strip().lower() for line in f if line.strip()}
    debug_log(f"[CONFIG] Loaded {len(word_list)} words from {file_path}")
    return word_list


def _to_decimal(name: str, value: Any) -> Decimal:
    if isinstance(value, Decimal):
        return value
    if isinstance(value, bool):
        raise TermExtractionConfigError(f"{name} must be a number, got {value!r}")
    try:
        return Decimal(str(value))
    except InvalidOperation as e:
        raise TermExtractionConfigError(f"{name} must be a number, got {value!r}") from e


def _to_word_set(name: str, value: Any) -> frozenset[str]:
    if value is None:
        return frozenset()
    if isinstance(value, str):
        raise TermExtractionConfigError(f"{name} must be a collection of strings, not a single string")
    return frozenset(word.strip().lower() for word in value if word and word.strip())


_CONFIG_KEYS = {
    'min_count', 'npmi_threshold', 'relevance_threshold', 'stopwords',
    'stopwords_file', 'excluded_terms', 'excluded_terms_file', 'noise_filter',
    'weights', 'dictionary_npmi_quantile',
}
_WEIGHT_KEYS = {'npmi': 'npmi_weight', 'idf': 'idf_weight', 'tfidf': 'tfidf_weight'}


@dataclass(frozen=True)
class TermExtractionConfig:
    """
    Controls every filtering decision of an extraction run.

    Thresholds accept ints, floats, strings or Decimals and are stored as
    Decimals. Word sets are lowercased. Construction fails fast with
    TermExtractionConfigError on invalid values.

    Attributes:
        min_count: Minimum corpus occurrences of a bigram or merged span
        npmi_threshold: Minimum NPMI (-1..1) for strong bigrams and candidates
        relevance_threshold: Minimum weighted relevance score (>= 0)
        stopwords: Tokens that disqualify any span containing them
        excluded_terms: Known terms (glossary entries, synonyms, ignored
            terms) that are never proposed again
        noise_filter: Apply the built-in URL/markup/mis-split noise filter
        npmi_weight / idf_weight / tfidf_weight: Relevance score weights
        dictionary_npmi_quantile: NPMI quantile of strong bigrams that marks
            a dictionary-gap suspect
    """
    min_count: int = TERM_MIN_COUNT
    npmi_threshold: Decimal = Decimal(TERM_NPMI_THRESHOLD)
    relevance_threshold: Decimal = Decimal(TERM_RELEVANCE_THRESHOLD)
    stopwords: frozenset[str] = frozenset()
    excluded_terms: frozenset[str] = frozenset()
    noise_filter: bool = True
    npmi_weight: Decimal = Decimal(RELEVANCE_NPMI_WEIGHT)
    idf_weight: Decimal = Decimal(RELEVANCE_IDF_WEIGHT)
    tfidf_weight: Decimal = Decimal(RELEVANCE_TFIDF_WEIGHT)
    dictionary_npmi_quantile: Decimal = Decimal(DICTIONARY_NPMI_QUANTILE)

    def __post_init__(self):
        for name in ('npmi_threshold', 'relevance_threshold', 'npmi_weight',
                     'idf_weight', 'tfidf_weight', 'dictionary_npmi_quantile'):
            object.__setattr__(self, name, _to_decimal(name, getattr(self, name)))
        object.__setattr__(self, 'stopwords', _to_word_set('stopwords', self.stopwords))
        object.__setattr__(self, 'excluded_terms', _to_word_set('excluded_terms', self.excluded_terms))
        self.validate()

    def validate(self) -> None:
        """
        Check every field against its valid range.

        Raises:
            TermExtractionConfigError: On the first invalid field
        """
        if isinstance(self.min_count, bool) or not isinstance(self.min_count, int):
            raise TermExtractionConfigError(f"min_count must be an integer, got {self.min_count!r}")
        if self.min_count < 1:
            raise TermExtractionConfigError(f"min_count must be >= 1, got {self.min_count}")
        if not Decimal(-1) <= self.npmi_threshold <= Decimal(1):
            raise TermExtractionConfigError(
                f"npmi_threshold must be within [-1, 1], got {self.npmi_threshold}"
            )
        if self.relevance_threshold < 0:
            raise TermExtractionConfigError(
                f"relevance_threshold must be >= 0, got {self.relevance_threshold}"
            )
        if any(weight < 0 for weight in self.weights):
            raise TermExtractionConfigError(f"Relevance weights must be >= 0, got {self.weights}")
        if sum(self.weights) <= 0:
            raise TermExtractionConfigError("At least one relevance weight must be positive")
        if not Decimal(0) < self.dictionary_npmi_quantile <= Decimal(1):
            raise TermExtractionConfigError(
                f"dictionary_npmi_quantile must be within (0, 1], got {self.dictionary_npmi_quantile}"
            )
        if not isinstance(self.noise_filter, bool):
            raise TermExtractionConfigError(f"noise_filter must be a boolean, got {self.noise_filter!r}")

    @property
    def weights(self) -> tuple[Decimal, Decimal, Decimal]:
        """Relevance weights as (npmi, idf, tfidf)."""
        return self.npmi_weight, self.idf_weight, self.tfidf_weight

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, Any], base_dir: str | Path | None = None) -> TermExtractionConfig:
        """
        Build a config from a settings mapping (e.g. a YAML `extraction` section).

        Word-list files (`stopwords_file`, `excluded_terms_file`) are resolved
        relative to base_dir and merged with the inline lists.

        Raises:
            TermExtractionConfigError: On unknown keys or invalid values
        """
        unknown = set(mapping) - _CONFIG_KEYS
        if unknown:
            raise TermExtractionConfigError(f"Unknown extraction settings: {', '.join(sorted(unknown))}")

        base = Path(base_dir) if base_dir is not None else Path.cwd()
        kwargs: dict[str, Any] = {
            key: mapping[key]
            for key in ('min_count', 'npmi_threshold', 'relevance_threshold',
                        'noise_filter', 'dictionary_npmi_quantile')
            if key in mapping
        }

        for key in ('stopwords', 'excluded_terms'):
            words = set(_to_word_set(key, mapping.get(key)))
            list_file = mapping.get(f'{key}_file')
            if list_file:
                words |= load_word_list(base / list_file)
            kwargs[key] = frozenset(words)

        weights = mapping.get('weights') or {}
        if not isinstance(weights, Mapping):
            raise TermExtractionConfigError("weights must be a mapping of npmi/idf/tfidf")
        unknown_weights = set(weights) - set(_WEIGHT_KEYS)
        if unknown_weights:
            raise TermExtractionConfigError(f"Unknown relevance weights: {', '.join(sorted(unknown_weights))}")
        for key, field_name in _WEIGHT_KEYS.items():
            if key in weights:
                kwargs[field_name] = weights[key]

        return cls(**kwargs)

    @classmethod
    def from_yaml(cls, config_path: str | Path | None = None) -> TermExtractionConfig:
        """Build a config from the `extraction` section of a YAML settings file."""
        settings = load_extraction_settings(config_path)
        base_dir = Path(config_path).parent if config_path is not None else None
        return cls.from_mapping(settings, base_dir=base_dir)


@dataclass(frozen=True)
class UnigramStat:
    """Corpus-wide occurrence count and document count of a single token."""
    term: str
    count: int
    doc_count: int


@dataclass(frozen=True)
class NgramStat:
    """Corpus-wide occurrence count and document count of an adjacent token pair."""
    term1: str
    term2: str
    count: int
    doc_count: int


@dataclass(frozen=True)
class CandidateStat:
    """
    A multi-token term candidate that survived every filter.

    Attributes:
        term: Components joined without a separator
        components: Ordered constituent tokens (length >= 2)
        count: Occurrences of the exact token sequence in the corpus
        doc_count: Documents containing the token sequence
        pmi / npmi: Boundary-token co-occurrence scores
        idf / avg_tfidf: Rarity and average weight of the span itself
        relevance_score: Weighted combination used for ranking
        surface_form: Most frequent original-text phrase of the span
    """
    term: str
    components: tuple[str, ...]
    count: int
    doc_count: int
    pmi: Decimal
    npmi: Decimal
    idf: Decimal
    avg_tfidf: Decimal
    relevance_score: Decimal
    surface_form: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "term": self.term,
            "components": list(self.components),
            "count": self.count,
            "doc_count": self.doc_count,
            "pmi": str(self.pmi),
            "npmi": str(self.npmi),
            "idf": str(self.idf),
            "avg_tfidf": str(self.avg_tfidf),
            "relevance_score": str(self.relevance_score),
            "surface_form": self.surface_form,
        }


@dataclass(frozen=True)
class DictionaryCandidateStat:
    """
    A strongly co-occurring pair that the tokenizer probably mis-split.

    Attributes:
        original_term: The pair as split, e.g. "정산 역서"
        suggested_term: The proposed dictionary entry, e.g. "정산역서"
        npmi: NPMI of the pair
        reasons: Human-readable triggers, most specific first
        confidence: 0.0-1.0
    """
    original_term: str
    suggested_term: str
    npmi: Decimal
    reasons: tuple[str, ...]
    confidence: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "original_term": self.original_term,
            "suggested_term": self.suggested_term,
            "npmi": str(self.npmi),
            "reasons": list(self.reasons),
            "confidence": self.confidence,
        }


@dataclass(frozen=True)
class TermExtractionResult:
    """
    The complete, side-effect free output of one extraction run.

    Persistence of candidates and batch bookkeeping belong to the caller.
    """
    total_documents: int
    unigrams: tuple[UnigramStat, ...] = field(default_factory=tuple)
    ngrams: tuple[NgramStat, ...] = field(default_factory=tuple)
    candidates: tuple[CandidateStat, ...] = field(default_factory=tuple)
    dictionary_candidates: tuple[DictionaryCandidateStat, ...] = field(default_factory=tuple)

    @classmethod
    def empty(cls) -> TermExtractionResult:
        return cls(total_documents=0)

    def to_dict(self) -> dict[str, Any]:
        """Render a JSON-ready mapping (decimals as strings)."""
        return {
            "total_documents": self.total_documents,
            "unigrams": [
                {"term": u.term, "count": u.count, "doc_count": u.doc_count}
                for u in self.unigrams
            ],
            "ngrams": [
                {"term1": n.term1, "term2": n.term2, "count": n.count, "doc_count": n.doc_count}
                for n in self.ngrams
            ],
            "candidates": [c.to_dict() for c in self.candidates],
            "dictionary_candidates": [d.to_dict() for d in self.dictionary_candidates],
        }


def iter_adjacent_pairs(components: Iterable[str]) -> Iterable[tuple[str, str]]:
    """Yield each adjacent (left, right) pair of a token sequence."""
    items = list(components)
    return zip(items, items[1:])
