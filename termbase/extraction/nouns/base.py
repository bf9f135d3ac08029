"""
Base class for noun-sequence analyzers.

The extraction pipeline depends on a single capability: turning a document
into its maximal runs of consecutive noun tokens, each token carrying its
character offsets in the document. Any tagger or segmenter (spaCy pipeline,
NLTK tagger, a morphological analyzer behind an HTTP API) can provide it.

Contract:
- extract_with_offsets() is called once per document
- only sequences of length >= 2 are returned
- offsets are valid indices into the exact string passed in

Example:
    @register_noun_extractor("mecab")
    class MecabNounSequenceExtractor(NounSequenceExtractor):
        name = "mecab"

        def extract_with_offsets(self, content: str) -> list[NounSequence]:
            tagged = ((TokenWithOffset(...), is_noun) for ... in parse(content))
            return collect_noun_runs(tagged)
"""

from abc import ABC, abstractmethod
from typing import Any, Iterable

from termbase.extraction.models import NounSequence, TokenWithOffset


def collect_noun_runs(tagged_tokens: Iterable[tuple[TokenWithOffset, bool]]) -> list[NounSequence]:
    """
    Group tagged tokens into maximal noun runs.

    Args:
        tagged_tokens: (token, is_noun) pairs in document order

    Returns:
        One NounSequence per run of at least two consecutive nouns
    """
    sequences: list[NounSequence] = []
    run: list[TokenWithOffset] = []

    for token, is_noun in tagged_tokens:
        if is_noun:
            run.append(token)
            continue
        if len(run) >= 2:
            sequences.append(NounSequence(tuple(run)))
        run = []

    if len(run) >= 2:
        sequences.append(NounSequence(tuple(run)))
    return sequences


class NounSequenceExtractor(ABC):
    """
    Abstract base class for noun-sequence analyzers.

    Class Attributes:
        name: Registered analyzer name (for logging and CLI selection)
    """

    name: str = "BaseNounSequenceExtractor"

    @abstractmethod
    def extract_with_offsets(self, content: str) -> list[NounSequence]:
        """
        Extract the maximal noun runs of a document.

        Args:
            content: Document text

        Returns:
            Noun sequences (length >= 2) in document order
        """

    def extract(self, content: str) -> list[list[str]]:
        """Extract noun runs as plain token lists."""
        return [list(sequence.terms) for sequence in self.extract_with_offsets(content)]

    def get_config(self) -> dict[str, Any]:
        """Return analyzer configuration for logging."""
        return {"name": self.name}

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name={self.name!r})"
