"""
NLTK-based Noun Sequence Analyzer

A lightweight English analyzer: Punkt sentence spans, Treebank word spans
and the averaged-perceptron POS tagger. Tokens whose Penn Treebank tag
starts with "NN" (NN, NNS, NNP, NNPS) are nouns. Runs never cross sentence
boundaries.

The tagger data is downloaded on first use if it is missing.
"""

from typing import Any, Callable, Sequence

import nltk
from nltk.tokenize import TreebankWordTokenizer
from nltk.tokenize.punkt import PunktSentenceTokenizer

from termbase.config import NLTK_NOUN_TAG_PREFIXES
from termbase.extraction.models import NounSequence, TokenWithOffset
from termbase.extraction.nouns import register_noun_extractor
from termbase.extraction.nouns.base import NounSequenceExtractor, collect_noun_runs
from termbase.logging_config import debug_log

NLTK_TAGGER_RESOURCE = "averaged_perceptron_tagger_eng"


@register_noun_extractor("nltk")
class NltkNounSequenceExtractor(NounSequenceExtractor):
    """
    Noun-run analyzer backed by NLTK tokenizers and POS tagger.

    Attributes:
        noun_tag_prefixes: Tag prefixes that count as nouns
    """

    name = "nltk"

    def __init__(
        self,
        tagger: Callable[[Sequence[str]], list[tuple[str, str]]] | None = None,
        noun_tag_prefixes: Sequence[str] = NLTK_NOUN_TAG_PREFIXES,
    ):
        """
        Initialize the analyzer.

        Args:
            tagger: Callable mapping a word list to (word, tag) pairs.
                    Defaults to nltk.pos_tag.
            noun_tag_prefixes: Tag prefixes treated as nouns
        """
        self._tagger = tagger
        self.noun_tag_prefixes = tuple(noun_tag_prefixes)
        self._sentence_tokenizer = PunktSentenceTokenizer()
        self._word_tokenizer = TreebankWordTokenizer()

    @property
    def tagger(self) -> Callable[[Sequence[str]], list[tuple[str, str]]]:
        """Lazy-load the NLTK POS tagger on first access."""
        if self._tagger is None:
            self._ensure_nltk_data()
            self._tagger = nltk.pos_tag
        return self._tagger

    def extract_with_offsets(self, content: str) -> list[NounSequence]:
        sequences: list[NounSequence] = []

        for sentence_start, sentence_end in self._sentence_tokenizer.span_tokenize(content):
            sentence = content[sentence_start:sentence_end]
            spans = list(self._word_tokenizer.span_tokenize(sentence))
            if not spans:
                continue

            words = [sentence[start:end] for start, end in spans]
            tags = self.tagger(words)
            tagged = (
                (
                    TokenWithOffset(word, sentence_start + start, sentence_start + end),
                    tag.startswith(self.noun_tag_prefixes),
                )
                for (start, end), (word, tag) in zip(spans, tags)
            )
            sequences.extend(collect_noun_runs(tagged))

        return sequences

    def _ensure_nltk_data(self):
        """Ensure NLTK tagger data is available."""
        try:
            nltk.data.find(f"taggers/{NLTK_TAGGER_RESOURCE}")
        except LookupError:
            debug_log(f"[NOUNS] Downloading NLTK {NLTK_TAGGER_RESOURCE}...")
            nltk.download(NLTK_TAGGER_RESOURCE, quiet=True)

    def get_config(self) -> dict[str, Any]:
        return {
            **super().get_config(),
            "noun_tag_prefixes": list(self.noun_tag_prefixes),
        }
