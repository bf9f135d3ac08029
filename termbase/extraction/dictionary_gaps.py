"""
Dictionary Gap Detector

Finds token pairs that co-occur so strongly they are probably one word the
tokenizer split ("마이 그레이" for "마이그레이션", "정산 역서"), but that did
not end up inside any accepted candidate. Registering such words in the
tokenizer's user dictionary improves the next extraction run.

A strong bigram is reported when:
- it is not an adjacent pair inside an accepted candidate
- neither token is a stopword and the pair is not already an excluded term
- its NPMI reaches the bar: the larger of npmi_threshold and the configured
  nearest-rank quantile of the remaining pairs' NPMI values, where the
  quantile never exceeds DICTIONARY_NPMI_CEILING

Confidence blends NPMI with the pair count relative to the most frequent
strong bigram:
    0.6 * max(npmi, 0) + 0.4 * ln(1 + count) / ln(1 + max_count)
plus 0.1 for a loanword-shaped split and 0.05 per lexical signal (an
incomplete part, a known compound suffix, a transliteration pattern, tokens
almost always seen together), clamped to [0, 1].

The output is advisory only; candidates are never changed.
"""

from decimal import ROUND_CEILING, ROUND_HALF_UP, Decimal
from typing import Mapping, Sequence

from termbase.config import (
    DICTIONARY_CONFIDENCE_PLACES,
    DICTIONARY_COUNT_CONFIDENCE_WEIGHT,
    DICTIONARY_LOANWORD_BONUS,
    DICTIONARY_NPMI_CEILING,
    DICTIONARY_NPMI_CONFIDENCE_WEIGHT,
    DICTIONARY_SIGNAL_BONUS,
    DICTIONARY_TOGETHER_RATIO,
)
from termbase.extraction.candidate_builder import CandidateBuildResult
from termbase.extraction.candidate_filter import RejectionReason, SplitPattern, TermCandidateFilter
from termbase.extraction.models import (
    DictionaryCandidateStat,
    TermExtractionConfig,
    iter_adjacent_pairs,
)
from termbase.extraction.scoring import BigramScore, ScoreCalculator
from termbase.logging_config import debug_log

ZERO = Decimal(0)
ONE = Decimal(1)

REJECTION_MESSAGES = {
    RejectionReason.RELEVANCE: "high NPMI despite low span relevance",
    RejectionReason.COUNT: "longer span too rare to reach the minimum count",
    RejectionReason.NPMI: "longer span below the NPMI threshold",
    RejectionReason.EXCLUDED: "longer span matches an excluded term",
    RejectionReason.STOPWORD: "longer span contains a stopword",
    RejectionReason.NOISE: "longer span rejected as text noise",
}
NOT_PROMOTED = "not promoted into any accepted candidate"
DISTINCT_DOCUMENTS = "frequent across distinct documents"
TRANSLITERATION = "matches a loanword transliteration pattern"


def nearest_rank_quantile(values: list[Decimal], quantile: Decimal) -> Decimal:
    """
    Nearest-rank quantile of a non-empty list.

    The value at 1-based rank ceil(quantile * n) of the ascending values.
    """
    ordered = sorted(values)
    rank = int((quantile * len(ordered)).to_integral_value(rounding=ROUND_CEILING))
    return ordered[min(max(rank, 1), len(ordered)) - 1]


class DictionaryGapDetector:
    """
    Reports strong bigrams that look like tokenizer mis-splits.

    Example:
        detector = DictionaryGapDetector()
        gaps = detector.detect(bigram_scores, build_result, config, corpus.unigram_counts)
        gaps[0].suggested_term  # '정산역서'
    """

    def __init__(
        self,
        candidate_filter: TermCandidateFilter | None = None,
        calculator: ScoreCalculator | None = None,
    ):
        self.candidate_filter = candidate_filter or TermCandidateFilter()
        self.calculator = calculator or ScoreCalculator()
        self._confidence_quantum = Decimal(1).scaleb(-DICTIONARY_CONFIDENCE_PLACES)

    def npmi_bar(self, pool: Sequence[BigramScore], config: TermExtractionConfig) -> Decimal:
        """The stricter NPMI level a pair from the pool needs to be reported."""
        values = [score.npmi for score in pool if score.npmi is not None]
        if not values:
            return config.npmi_threshold
        quantile = nearest_rank_quantile(values, config.dictionary_npmi_quantile)
        return max(config.npmi_threshold, min(Decimal(DICTIONARY_NPMI_CEILING), quantile))

    def detect(
        self,
        bigram_scores: Mapping[tuple[str, str], BigramScore],
        build_result: CandidateBuildResult,
        config: TermExtractionConfig,
        unigram_counts: Mapping[str, int] | None = None,
    ) -> list[DictionaryCandidateStat]:
        """
        Find dictionary-gap suspects among the strong bigrams.

        Args:
            bigram_scores: Every scored bigram of the corpus
            build_result: Output of the candidate builder for the same corpus
            config: The run's configuration
            unigram_counts: Corpus token counts; without them the
                "appears together" signal is skipped

        Returns:
            Suspects ordered by descending confidence, then original term
        """
        strong = [
            score for score in build_result.strong_bigrams
            if score.pair in bigram_scores and score.npmi is not None
        ]
        if not strong:
            return []

        max_count = max(score.count for score in strong)
        promoted = {
            pair
            for candidate in build_result.accepted
            for pair in iter_adjacent_pairs(candidate.components)
        }
        pool = [
            score for score in strong
            if score.pair not in promoted and not self._is_known(score, config)
        ]
        bar = self.npmi_bar(pool, config)

        suspects: list[DictionaryCandidateStat] = []
        for score in pool:
            if score.npmi < bar:
                continue

            patterns = self.candidate_filter.detect_split_pattern(score.pair)
            signals = self._lexical_signals(score, unigram_counts)
            suspects.append(DictionaryCandidateStat(
                original_term=f"{score.term1} {score.term2}",
                suggested_term=f"{score.term1}{score.term2}",
                npmi=score.npmi,
                reasons=tuple(self._reasons(score, build_result, patterns) + signals),
                confidence=self.confidence(score, max_count, patterns, signals),
            ))

        suspects.sort(key=lambda stat: (-stat.confidence, stat.original_term))
        debug_log(
            f"[DICT] NPMI bar {bar} over {len(pool)} unpromoted pairs, "
            f"{len(suspects)} dictionary candidates"
        )
        return suspects

    def _is_known(self, score: BigramScore, config: TermExtractionConfig) -> bool:
        if score.term1 in config.stopwords or score.term2 in config.stopwords:
            return True
        return (
            f"{score.term1} {score.term2}" in config.excluded_terms
            or f"{score.term1}{score.term2}" in config.excluded_terms
        )

    def _reasons(
        self,
        score: BigramScore,
        build_result: CandidateBuildResult,
        patterns: list[SplitPattern],
    ) -> list[str]:
        reasons: list[str] = []
        for span in build_result.rejected:
            if score.pair not in set(iter_adjacent_pairs(span.components)):
                continue
            message = REJECTION_MESSAGES[span.reason]
            if message not in reasons:
                reasons.append(message)

        if not reasons:
            reasons.append(NOT_PROMOTED)
        if score.doc_count >= 2:
            reasons.append(DISTINCT_DOCUMENTS)
        reasons.extend(pattern.description for pattern in patterns)
        return reasons

    def _lexical_signals(self, score: BigramScore, unigram_counts: Mapping[str, int] | None) -> list[str]:
        """Word-level hints that the pair is one word, in a fixed order."""
        candidate_filter = self.candidate_filter
        joined = f"{score.term1}{score.term2}"
        signals = []

        incomplete = candidate_filter.find_incomplete_part(score.pair)
        if incomplete is not None:
            signals.append(f"contains an incomplete word: '{incomplete}'")

        suffix = candidate_filter.find_compound_suffix(joined)
        if suffix is not None:
            signals.append(f"ends with a known compound suffix: -{suffix}")

        if candidate_filter.is_loanword_transliteration(joined):
            signals.append(TRANSLITERATION)

        if unigram_counts is not None:
            rarer = min(unigram_counts.get(score.term1, 0), unigram_counts.get(score.term2, 0))
            if rarer > 0 and Decimal(score.count) / Decimal(rarer) >= Decimal(DICTIONARY_TOGETHER_RATIO):
                signals.append(f"almost always appears together ({score.count}/{rarer})")

        return signals

    def confidence(
        self,
        score: BigramScore,
        max_count: int,
        patterns: list[SplitPattern],
        signals: Sequence[str] = (),
    ) -> float:
        """Bounded blend of NPMI and relative frequency, rounded to 4 digits."""
        calc = self.calculator
        context = calc.context

        npmi_part = Decimal(DICTIONARY_NPMI_CONFIDENCE_WEIGHT) * max(score.npmi, ZERO)
        count_ratio = context.divide(
            Decimal(1 + score.count).ln(context),
            Decimal(1 + max_count).ln(context),
        )
        value = npmi_part + Decimal(DICTIONARY_COUNT_CONFIDENCE_WEIGHT) * count_ratio
        if SplitPattern.LOANWORD_SPLIT in patterns:
            value += Decimal(DICTIONARY_LOANWORD_BONUS)
        value += Decimal(DICTIONARY_SIGNAL_BONUS) * len(signals)

        value = max(ZERO, min(ONE, value))
        return float(value.quantize(self._confidence_quantum, rounding=ROUND_HALF_UP))
