"""
spaCy-based Noun Sequence Analyzer

Uses a spaCy pipeline's part-of-speech tagger to find maximal runs of
consecutive noun tokens. This is the default analyzer; the model is
configurable (SPACY_MODEL_NAME, the Korean "ko_core_news_sm" by default) so
the same pipeline serves any language spaCy ships a tagger for.

Whitespace tokens are skipped rather than treated as run breakers, so
"공유  주차장" (double space) still yields one run. Punctuation, particles
attached as separate tokens, verbs and so on end the current run.
"""

import subprocess
import sys
from typing import Any

import spacy

from termbase.config import NOUN_POS_TAGS, SPACY_DOWNLOAD_TIMEOUT_SEC, SPACY_MODEL_NAME
from termbase.extraction.models import NounSequence, TokenWithOffset
from termbase.extraction.nouns import register_noun_extractor
from termbase.extraction.nouns.base import NounSequenceExtractor, collect_noun_runs
from termbase.logging_config import debug_log


@register_noun_extractor("spacy")
class SpacyNounSequenceExtractor(NounSequenceExtractor):
    """
    Noun-run analyzer backed by a spaCy pipeline.

    Attributes:
        model_name: spaCy package loaded on first use
        noun_tags: Coarse POS tags (token.pos_) that count as nouns
    """

    name = "spacy"

    def __init__(self, nlp=None, model_name: str = SPACY_MODEL_NAME, noun_tags=NOUN_POS_TAGS):
        """
        Initialize the analyzer.

        Args:
            nlp: Pre-loaded spaCy pipeline (or any callable returning a Doc).
                 If None, model_name is loaded on first use.
            model_name: spaCy model package to load
            noun_tags: POS tags treated as nouns
        """
        self._nlp = nlp
        self.model_name = model_name
        self.noun_tags = frozenset(noun_tags)

    @property
    def nlp(self):
        """Lazy-load spaCy model on first access."""
        if self._nlp is None:
            self._nlp = self._load_spacy_model()
        return self._nlp

    def extract_with_offsets(self, content: str) -> list[NounSequence]:
        if not content.strip():
            return []

        doc = self.nlp(content)
        tagged = (
            (TokenWithOffset(token.text, token.idx, token.idx + len(token.text)), token.pos_ in self.noun_tags)
            for token in doc
            if not (token.is_space or token.pos_ == "SPACE")
        )
        return collect_noun_runs(tagged)

    def _load_spacy_model(self):
        """Load or download the spaCy model."""
        try:
            nlp = spacy.load(self.model_name)
            debug_log(f"[NOUNS] Loaded spaCy model: {self.model_name}")
            return nlp
        except OSError:
            debug_log(f"[NOUNS] Model {self.model_name} not found, downloading...")
            return self._download_and_load_model()

    def _download_and_load_model(self):
        """Download the spaCy model using subprocess."""
        try:
            result = subprocess.run(
                [sys.executable, "-m", "spacy", "download", self.model_name],
                check=True,
                capture_output=True,
                text=True,
                timeout=SPACY_DOWNLOAD_TIMEOUT_SEC,
            )
        except subprocess.TimeoutExpired as e:
            raise RuntimeError(f"spaCy model download timed out: {self.model_name}") from e
        except subprocess.CalledProcessError as e:
            raise RuntimeError(f"Failed to download spaCy model {self.model_name}: {e.stderr[:500]}") from e

        debug_log(f"[NOUNS] Download output: {result.stdout[:500]}")
        return spacy.load(self.model_name)

    def get_config(self) -> dict[str, Any]:
        return {
            **super().get_config(),
            "model_name": self.model_name,
            "noun_tags": sorted(self.noun_tags),
        }
