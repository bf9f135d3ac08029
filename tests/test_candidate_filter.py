"""
Tests for the lexical candidate filter.

Tests cover:
- User and built-in stopwords
- URL, markup and code-syntax noise
- Single-letter, hash-id, single-syllable and echo patterns
- Tokenizer split-pattern recognition
- Incomplete fragments, compound suffixes and transliterations
"""

import sys
from pathlib import Path

import pytest

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from termbase.extraction.candidate_filter import (  # noqa: E402
    RejectionReason,
    SplitPattern,
    TermCandidateFilter,
    is_hangul,
    is_likely_native_korean,
)


@pytest.fixture
def candidate_filter():
    return TermCandidateFilter()


def _exclude(candidate_filter, components, stopwords=(), noise_filter=True):
    return candidate_filter.should_exclude("".join(components), components, stopwords, noise_filter)


class TestStopwords:

    def test_clean_term_kept(self, candidate_filter):
        assert _exclude(candidate_filter, ["공유", "주차장"]) is None

    def test_user_stopword_component(self, candidate_filter):
        assert _exclude(candidate_filter, ["공유", "주차장"], {"주차장"}) == RejectionReason.STOPWORD

    def test_builtin_stopword_component(self, candidate_filter):
        assert _exclude(candidate_filter, ["item", "정책"]) == RejectionReason.STOPWORD

    def test_builtin_stopwords_follow_noise_switch(self, candidate_filter):
        assert _exclude(candidate_filter, ["item", "정책"], noise_filter=False) is None

    def test_user_stopwords_apply_without_noise_filter(self, candidate_filter):
        assert _exclude(candidate_filter, ["공유", "주차장"], {"공유"}, noise_filter=False) == RejectionReason.STOPWORD

    def test_components_compared_lowercased(self, candidate_filter):
        assert _exclude(candidate_filter, ["Daily", "회의"]) == RejectionReason.STOPWORD

    def test_custom_default_stopwords(self):
        custom = TermCandidateFilter(default_stopwords={"회의"})
        assert _exclude(custom, ["정기", "회의"]) == RejectionReason.STOPWORD
        assert _exclude(custom, ["item", "정책"]) is None


class TestNoise:

    @pytest.mark.parametrize("components", [
        ["github", "저장소"],
        ["회사", "wiki"],
        ["example.com", "주소"],
        ["mermaid", "도식"],
        ["logo", "이미지"],
        ["cdn", "경로"],
    ])
    def test_url_and_technical_patterns(self, candidate_filter, components):
        assert _exclude(candidate_filter, components) == RejectionReason.NOISE

    @pytest.mark.parametrize("components", [["group", "by"], ["left", "join"], ["note", "over"]])
    def test_code_syntax_phrases(self, candidate_filter, components):
        assert _exclude(candidate_filter, components) == RejectionReason.NOISE

    def test_code_syntax_needs_exact_phrase(self, candidate_filter):
        assert _exclude(candidate_filter, ["group", "by", "clause"]) is None

    def test_single_ascii_letter(self, candidate_filter):
        assert _exclude(candidate_filter, ["a", "정책"]) == RejectionReason.NOISE

    def test_single_digit_allowed(self, candidate_filter):
        assert _exclude(candidate_filter, ["2", "분기"]) is None

    def test_hex_id_fragment(self, candidate_filter):
        assert _exclude(candidate_filter, ["3fa9c2", "정책"]) == RejectionReason.NOISE

    def test_meaningless_single_syllable(self, candidate_filter):
        assert _exclude(candidate_filter, ["버", "젼"]) == RejectionReason.NOISE
        assert _exclude(candidate_filter, ["스크린", "샷"]) == RejectionReason.NOISE

    def test_meaningful_single_syllable_allowed(self, candidate_filter):
        assert _exclude(candidate_filter, ["월", "정산"]) is None

    def test_echo_pattern(self, candidate_filter):
        assert _exclude(candidate_filter, ["공휴일", "공휴"]) == RejectionReason.NOISE
        assert _exclude(candidate_filter, ["담당", "담당자"]) == RejectionReason.NOISE

    def test_noise_filter_disabled(self, candidate_filter):
        assert _exclude(candidate_filter, ["github", "저장소"], noise_filter=False) is None


class TestSplitPatterns:

    def test_loanword_split(self, candidate_filter):
        assert candidate_filter.detect_split_pattern(["마이", "그레이"]) == [SplitPattern.LOANWORD_SPLIT]
        assert candidate_filter.detect_split_pattern(["쿠버", "네티스"]) == [SplitPattern.LOANWORD_SPLIT]

    def test_native_looking_pair(self, candidate_filter):
        # Starts with the common prefix 대
        assert candidate_filter.detect_split_pattern(["대여", "기간"]) == [SplitPattern.SHORT_TWO_PART_SPLIT]

    def test_single_syllable_split(self, candidate_filter):
        assert candidate_filter.detect_split_pattern(["스크린", "샷"]) == [SplitPattern.SINGLE_SYLLABLE_SPLIT]

    def test_long_parts_no_pattern(self, candidate_filter):
        assert candidate_filter.detect_split_pattern(["데이터베이스", "서버"]) == []

    def test_non_hangul_no_pattern(self, candidate_filter):
        assert candidate_filter.detect_split_pattern(["data", "lake"]) == []

    def test_descriptions(self):
        for pattern in SplitPattern:
            assert pattern.description


class TestLexicalSignals:

    @pytest.mark.parametrize("word", ["역서", "션", "그레이", "문서"])
    def test_incomplete_word(self, candidate_filter, word):
        assert candidate_filter.is_incomplete_word(word)

    @pytest.mark.parametrize("word", ["데이터", "주차장", "공유", "data"])
    def test_complete_word(self, candidate_filter, word):
        assert not candidate_filter.is_incomplete_word(word)

    def test_find_incomplete_part(self, candidate_filter):
        assert candidate_filter.find_incomplete_part(["정산", "역서"]) == "역서"
        assert candidate_filter.find_incomplete_part(["데이터", "레이크"]) is None

    def test_find_compound_suffix(self, candidate_filter):
        assert candidate_filter.find_compound_suffix("공유주차장") == "주차장"
        assert candidate_filter.find_compound_suffix("거래내역서") == "내역서"
        assert candidate_filter.find_compound_suffix("데이터레이크") is None

    @pytest.mark.parametrize("term, expected", [
        ("마이그레이션", True),
        ("쿠버네티스", True),
        ("데이터레이크", False),
        ("공유주차장", False),
    ])
    def test_loanword_transliteration(self, candidate_filter, term, expected):
        assert candidate_filter.is_loanword_transliteration(term) is expected


class TestHelpers:

    def test_is_hangul(self):
        assert is_hangul("가")
        assert is_hangul("ㄱ")
        assert not is_hangul("a")

    def test_is_likely_native_korean(self):
        assert is_likely_native_korean("자동화")
        assert is_likely_native_korean("무인정산")
        assert not is_likely_native_korean("마이그레이")
