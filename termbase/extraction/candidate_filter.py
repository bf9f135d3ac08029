"""
Lexical filter for term candidates.

Collected documents (wiki pages, chat exports) carry a lot of text that
survives noun tagging but is not terminology: URL fragments, diagram and
markup keywords, SQL phrases, hash ids, and words the Korean tokenizer split
into meaningless pieces ("버 젼", "스크린 샷"). TermCandidateFilter rejects
those spans. It also recognizes the split shapes, incomplete fragments,
compound suffixes and transliterations that the dictionary-gap pass reports
as signs of a tokenizer mistake.

All checks work on lowercased text.
"""

import re
from enum import Enum
from typing import Iterable, Sequence

URL_PATTERNS = (
    "http", "https", "www", ".com", ".net", ".org", ".io", ".kr",
    "atlassian", "google", "slack", "jira", "confluence", "github", "wiki",
)

TECHNICAL_NOISE_PATTERNS = (
    # Diagrams
    "mermaid", "diagram", "subgraph",
    # Images and media
    "png", "jpg", "jpeg", "gif", "svg", "display", "logo",
    # CDN and web resources
    "cdn", "jsdelivr", "fetch", "static",
    # Markup macros and ids
    "macro", "extension", "containerid", "cloudid", "gid",
    "outbound", "inbound", "configs", "instructions",
)

# Matched against the whole space-joined phrase
CODE_SYNTAX_PATTERNS = frozenset({
    "left join", "right join", "inner join", "outer join", "group by", "order by",
    "end subgraph", "note over", "note right", "note left", "right of", "left of",
    "read write",
})

DEFAULT_STOPWORDS = frozenset({
    "daily", "item", "action",
    "spaces", "boards", "projects", "software",
    "err", "akc", "bfa", "inc",
})

# Hash or id fragments: hexadecimal only, 3+ characters
HEX_PATTERN = re.compile(r"^[a-f0-9]{3,}$")

# Single Hangul syllables that are words on their own
# (numerals, units, positions, common nouns)
MEANINGFUL_SINGLE_CHARS = frozenset({
    "일", "이", "삼", "사", "오", "육", "칠", "팔", "구", "십", "백", "천", "만", "억",
    "월", "년", "시", "분", "초", "개", "명", "건", "원", "회", "차", "번", "권",
    "상", "중", "하", "전", "후", "내", "외", "좌", "우",
    "장", "실", "과", "부", "팀", "비", "앱", "웹", "폰",
    "별", "용", "형", "화",
})

NATIVE_KOREAN_SUFFIXES = ("하다", "되다", "시키다", "화", "성", "적", "자", "가")
NATIVE_KOREAN_PREFIXES = ("대", "소", "신", "구", "재", "비", "불", "무")

# Tokenizer leftovers that mean nothing on their own ("정산 역서", "마이 그레이")
INCOMPLETE_WORD_PATTERNS = frozenset({
    "역서", "휴주", "그레이", "포지", "버네", "토리", "티스", "워크", "션", "먼트", "링", "터",
})
# Syllables that end a compound; a 1-2 syllable part ending in one is a fragment
FRAGMENT_END_SYLLABLES = ("서", "장", "소", "션", "트", "크", "스", "터", "링")

# Endings of compounds that belong in a user dictionary as one word
KNOWN_COMPOUND_SUFFIXES = (
    "내역서", "명세서", "신청서", "동의서", "계약서",
    "주차장", "휴게소", "관리소",
    "가입", "탈퇴", "신청", "취소", "완료", "시작",
)

# Hangul transliterations of English words
LOANWORD_SUFFIXES = ("션", "먼트", "링", "터", "니스", "티스", "워크", "포트", "넷", "북", "톤")
LOANWORD_FRAGMENTS = ("그레이션", "포지토리", "프레임워크", "쿠버네티스", "엔드포인트", "마이크로", "인프라")


class RejectionReason(Enum):
    """Why a discovered span did not become a candidate."""

    COUNT = "count"
    NPMI = "npmi"
    EXCLUDED = "excluded"
    STOPWORD = "stopword"
    NOISE = "noise"
    RELEVANCE = "relevance"


class SplitPattern(Enum):
    """Shapes of a token pair that suggest the tokenizer split one word."""

    LOANWORD_SPLIT = "loanword split"
    SHORT_TWO_PART_SPLIT = "short two-part split"
    SINGLE_SYLLABLE_SPLIT = "single-syllable split"

    @property
    def description(self) -> str:
        return _SPLIT_DESCRIPTIONS[self]


_SPLIT_DESCRIPTIONS = {
    SplitPattern.LOANWORD_SPLIT: "looks like a loanword split by the tokenizer",
    SplitPattern.SHORT_TWO_PART_SPLIT: "two short parts almost always used together",
    SplitPattern.SINGLE_SYLLABLE_SPLIT: "compound split into a single-syllable fragment",
}


def is_hangul(char: str) -> bool:
    """True for a Hangul syllable or compatibility jamo."""
    code = ord(char)
    return 0xAC00 <= code <= 0xD7A3 or 0x3131 <= code <= 0x3163


def is_all_hangul(text: str) -> bool:
    return bool(text) and all(is_hangul(char) for char in text)


def is_likely_native_korean(term: str) -> bool:
    """Native or Sino-Korean words tend to carry these affixes; loanwords don't."""
    return term.endswith(NATIVE_KOREAN_SUFFIXES) or term.startswith(NATIVE_KOREAN_PREFIXES)


class TermCandidateFilter:
    """
    Rejects spans that are stopwords or text noise.

    Example:
        candidate_filter = TermCandidateFilter()
        candidate_filter.should_exclude("githubpage", ["github", "page"], set())
        # RejectionReason.NOISE
    """

    def __init__(self, default_stopwords: Iterable[str] = DEFAULT_STOPWORDS):
        self.default_stopwords = frozenset(word.lower() for word in default_stopwords)

    def should_exclude(
        self,
        term: str,
        components: Sequence[str],
        stopwords: Iterable[str] = (),
        noise_filter: bool = True,
    ) -> RejectionReason | None:
        """
        Check a span against stopwords and the noise rules.

        Args:
            term: Joined span text
            components: Span tokens
            stopwords: User stopwords (always applied)
            noise_filter: Also apply the built-in stopwords and noise rules

        Returns:
            The rejection reason, or None if the span may be kept
        """
        lower_components = [component.lower() for component in components]
        all_stopwords = set(stopwords)
        if noise_filter:
            all_stopwords |= self.default_stopwords

        if any(component in all_stopwords for component in lower_components):
            return RejectionReason.STOPWORD

        if noise_filter and self.is_noise(term.lower(), lower_components):
            return RejectionReason.NOISE

        return None

    def is_noise(self, term: str, components: Sequence[str]) -> bool:
        if any(pattern in term for pattern in URL_PATTERNS):
            return True
        if any(pattern in term for pattern in TECHNICAL_NOISE_PATTERNS):
            return True
        if " ".join(components) in CODE_SYNTAX_PATTERNS:
            return True
        # Single ASCII letters; digits and Hangul syllables are handled separately
        if any(len(c) == 1 and ord(c) < 128 and not c.isdigit() for c in components):
            return True
        if any(HEX_PATTERN.match(c) for c in components):
            return True
        if self._has_single_syllable_fragment(components):
            return True
        return self._has_echo(components)

    def _has_single_syllable_fragment(self, components: Sequence[str]) -> bool:
        # "버 젼", "스크린 샷"
        return any(
            len(c) == 1 and is_hangul(c) and c not in MEANINGFUL_SINGLE_CHARS
            for c in components
        )

    def _has_echo(self, components: Sequence[str]) -> bool:
        # "공휴일 공휴", "담당자 담당"
        for a in components:
            for b in components:
                if len(a) > len(b) and (a.startswith(b) or a.endswith(b)):
                    return True
        return False

    def detect_split_pattern(self, components: Sequence[str]) -> list[SplitPattern]:
        """
        Recognize token shapes typical of a tokenizer mis-split.

        Only all-Hangul spans are considered. A pair of 2-3 syllable parts is a
        loanword split ("마이 그레이", "쿠버 네티스") unless the joined word looks
        native, in which case it is a short two-part split. Any 1-syllable part
        marks a single-syllable split.
        """
        lower_components = [component.lower() for component in components]
        if not lower_components or not all(is_all_hangul(c) for c in lower_components):
            return []

        patterns = []
        if len(lower_components) == 2 and all(2 <= len(c) <= 3 for c in lower_components):
            combined = "".join(lower_components)
            if len(combined) >= 4 and not is_likely_native_korean(combined):
                patterns.append(SplitPattern.LOANWORD_SPLIT)
            else:
                patterns.append(SplitPattern.SHORT_TWO_PART_SPLIT)
        if any(len(c) == 1 for c in lower_components):
            patterns.append(SplitPattern.SINGLE_SYLLABLE_SPLIT)
        return patterns

    def is_incomplete_word(self, word: str) -> bool:
        """True for a fragment that is not a word by itself ("역서", "션", "그레이")."""
        if len(word) == 1 and is_hangul(word):
            return True
        if word in INCOMPLETE_WORD_PATTERNS:
            return True
        return len(word) <= 2 and word.endswith(FRAGMENT_END_SYLLABLES)

    def find_incomplete_part(self, components: Sequence[str]) -> str | None:
        for component in components:
            if self.is_incomplete_word(component.lower()):
                return component
        return None

    def find_compound_suffix(self, term: str) -> str | None:
        """The known compound ending of a joined term, e.g. "주차장" for "공유주차장"."""
        term = term.lower()
        for suffix in KNOWN_COMPOUND_SUFFIXES:
            if term.endswith(suffix):
                return suffix
        return None

    def is_loanword_transliteration(self, term: str) -> bool:
        """True if the joined term reads like a transliterated English word."""
        term = term.lower()
        return term.endswith(LOANWORD_SUFFIXES) or any(fragment in term for fragment in LOANWORD_FRAGMENTS)
