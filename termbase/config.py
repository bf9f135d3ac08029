"""
Termbase Configuration Module
Centralized configuration for the term-candidate extraction pipeline.
"""

import os
from pathlib import Path

import yaml

# Debug Mode Configuration
DEBUG_MODE = os.environ.get('DEBUG', 'false').lower() == 'true'

# Application Paths
APP_NAME = "Termbase"
APPDATA_DIR = Path(os.environ.get('APPDATA', os.path.expanduser('~/.config'))) / APP_NAME
LOGS_DIR = APPDATA_DIR / "logs"
CONFIG_DIR = APPDATA_DIR / "config"

# Logging Configuration
LOG_FILE = LOGS_DIR / "processing.log"
DEBUG_LOG_FILE = LOGS_DIR / "debug_flow.txt"
LOG_FORMAT = "[%(levelname)s %(asctime)s] %(message)s"
LOG_DATE_FORMAT = "%H:%M:%S"

# ============================================================================
# Term Candidate Extraction Defaults
# ============================================================================

# Minimum corpus occurrences for a bigram (and a merged span) to be kept
TERM_MIN_COUNT = 3
# NPMI cut-off for "strong" bigrams and for final candidates (range -1..1)
TERM_NPMI_THRESHOLD = "0.2"
# Minimum weighted relevance score (0..1 with the default weights)
TERM_RELEVANCE_THRESHOLD = "0.3"

# Fixed-point precision of every emitted score (round-half-up)
SCORE_DECIMAL_PLACES = 6
SCORE_CONTEXT_PRECISION = 28

# Relevance score weights: npmi, idf and avg TF-IDF (idf/tf-idf are
# normalized over [0, ln(total_documents)] before weighting)
RELEVANCE_NPMI_WEIGHT = "0.4"
RELEVANCE_IDF_WEIGHT = "0.3"
RELEVANCE_TFIDF_WEIGHT = "0.3"

# Dictionary gap detection
# Unpromoted strong bigrams at or above this NPMI quantile are dictionary-gap
# suspects; the quantile bar never exceeds DICTIONARY_NPMI_CEILING
DICTIONARY_NPMI_QUANTILE = "0.9"
DICTIONARY_NPMI_CEILING = "0.9"
DICTIONARY_NPMI_CONFIDENCE_WEIGHT = "0.6"
DICTIONARY_COUNT_CONFIDENCE_WEIGHT = "0.4"
# Extra confidence for splits that look like a loanword cut in two
DICTIONARY_LOANWORD_BONUS = "0.1"
# Extra confidence per lexical signal (incomplete part, known suffix,
# transliteration pattern, pair almost always seen together)
DICTIONARY_SIGNAL_BONUS = "0.05"
# Pair count / rarer token count at which the tokens "always" co-occur
DICTIONARY_TOGETHER_RATIO = "0.7"
DICTIONARY_CONFIDENCE_PLACES = 4

# ============================================================================
# Noun Sequence Analyzers
# ============================================================================

# spaCy model used by the default analyzer (Korean pipeline; any spaCy
# pipeline with a POS tagger works, e.g. "en_core_web_sm")
SPACY_MODEL_NAME = os.environ.get('TERMBASE_SPACY_MODEL', "ko_core_news_sm")
SPACY_DOWNLOAD_TIMEOUT_SEC = 600   # Overall timeout: 10 minutes
# Coarse POS tags that count as nouns
NOUN_POS_TAGS = frozenset({"NOUN", "PROPN"})

# NLTK tagger prefixes that count as nouns (NN, NNS, NNP, NNPS)
NLTK_NOUN_TAG_PREFIXES = ("NN",)

# Parallel Processing Configuration
# Per-document noun extraction is the map step; aggregation stays ordered.
# Auto-detect: min(cpu_count, 4) for memory safety
PARALLEL_MAX_WORKERS = min(os.cpu_count() or 4, 4)

# ============================================================================
# YAML Extraction Settings
# ============================================================================

EXTRACTION_CONFIG_FILE = Path(
    os.environ.get(
        'TERMBASE_EXTRACTION_CONFIG',
        Path(__file__).parent.parent / "config" / "term_extraction.yaml",
    )
)


def load_extraction_settings(config_path: str | Path | None = None) -> dict:
    """
    Load the `extraction` section of a YAML settings file.

    Args:
        config_path: YAML file to read. Defaults to EXTRACTION_CONFIG_FILE.

    Returns:
        The extraction settings mapping, or an empty dict when the file does
        not exist (built-in defaults then apply).

    Raises:
        ValueError: If the file is not a YAML mapping.
        yaml.YAMLError: If the file cannot be parsed.
    """
    path = Path(config_path) if config_path is not None else EXTRACTION_CONFIG_FILE

    try:
        with open(path, encoding='utf-8') as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        from termbase.logging_config import debug_log
        debug_log(f"[CONFIG] Extraction settings not found at {path}. Using built-in defaults.")
        return {}

    if not isinstance(data, dict):
        raise ValueError(f"Extraction settings in {path} must be a mapping, got {type(data).__name__}")

    settings = data.get('extraction', {}) or {}
    if not isinstance(settings, dict):
        raise ValueError(f"'extraction' section in {path} must be a mapping")

    if DEBUG_MODE:
        from termbase.logging_config import debug_log
        debug_log(f"[CONFIG] Loaded {len(settings)} extraction settings from {path}")
    return settings
