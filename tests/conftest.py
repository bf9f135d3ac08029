"""
Shared fixtures for the extraction tests.

FakeNounSequenceExtractor stands in for a real tagger so tests run without
spaCy models: whitespace-separated words found in a small lexicon are nouns,
and a lexicon noun followed by a particle ("주차장에서", "결제를") is a noun
that ends the current run.
"""

import re
import sys
from pathlib import Path

import pytest

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from termbase.extraction.models import NounSequence, TokenWithOffset  # noqa: E402
from termbase.extraction.nouns.base import NounSequenceExtractor, collect_noun_runs  # noqa: E402

DEFAULT_LEXICON = frozenset({
    "공유", "주차장", "결제", "진행", "이용", "안내",
    "데이터", "레이크", "구축", "운영", "정산", "역서",
})

SCENARIO_A_DOCUMENTS = [
    "공유 주차장에서 결제를 진행했습니다",
    "공유 주차장 이용 안내",
]

# (데이터, 레이크) and (레이크, 구축) are strong; the 3-token span occurs once
DATA_LAKE_DOCUMENTS = [
    "데이터 레이크 구축",
    "데이터 레이크",
    "레이크 구축",
]


class FakeNounSequenceExtractor(NounSequenceExtractor):
    """Lexicon-driven analyzer with exact offsets."""

    name = "fake"

    def __init__(self, lexicon=DEFAULT_LEXICON, fail_on: str | None = None):
        self.lexicon = frozenset(lexicon)
        self.fail_on = fail_on
        self.calls: list[str] = []

    def extract_with_offsets(self, content: str) -> list[NounSequence]:
        self.calls.append(content)
        if self.fail_on is not None and self.fail_on in content:
            raise ValueError(f"cannot analyze {self.fail_on!r}")

        tagged = []
        for match in re.finditer(r"\S+", content):
            word, start = match.group(), match.start()
            if word in self.lexicon:
                tagged.append((TokenWithOffset(word, start, match.end()), True))
                continue

            noun = self._noun_prefix(word)
            if noun is not None:
                tagged.append((TokenWithOffset(noun, start, start + len(noun)), True))
            # Particle or any other word breaks the run
            tagged.append((TokenWithOffset(word, start, match.end()), False))

        return collect_noun_runs(tagged)

    def _noun_prefix(self, word: str) -> str | None:
        prefixes = [noun for noun in self.lexicon if word.startswith(noun) and len(word) > len(noun)]
        return max(prefixes, key=len) if prefixes else None


@pytest.fixture
def fake_extractor():
    """Lexicon analyzer over DEFAULT_LEXICON."""
    return FakeNounSequenceExtractor()


@pytest.fixture
def scenario_a_documents():
    return list(SCENARIO_A_DOCUMENTS)


@pytest.fixture
def data_lake_documents():
    return list(DATA_LAKE_DOCUMENTS)
