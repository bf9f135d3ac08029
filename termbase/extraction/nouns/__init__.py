"""
Noun Sequence Analyzers Package

Pluggable analyzers that supply the extraction pipeline with noun runs.
Each analyzer is registered via decorator and can be instantiated by name.

Usage:
    from termbase.extraction.nouns import get_noun_extractor

    analyzer = get_noun_extractor("spacy", model_name="ko_core_news_sm")
    sequences = analyzer.extract_with_offsets("공유 주차장 이용 안내")

Registration:
    @register_noun_extractor("MyAnalyzer")
    class MyAnalyzer(NounSequenceExtractor):
        name = "MyAnalyzer"
        ...
"""

from typing import Type

from termbase.extraction.nouns.base import (
    NounSequenceExtractor,
    collect_noun_runs,
)

# Registry of available analyzers (class references, not instances)
_EXTRACTOR_REGISTRY: dict[str, Type[NounSequenceExtractor]] = {}


def register_noun_extractor(name: str):
    """
    Decorator to register a noun-sequence analyzer class.

    Args:
        name: Unique name for the analyzer (e.g., "spacy", "nltk")

    Raises:
        ValueError: If name is already registered (prevents accidental overwrites)
    """
    def decorator(cls: Type[NounSequenceExtractor]) -> Type[NounSequenceExtractor]:
        if name in _EXTRACTOR_REGISTRY:
            raise ValueError(
                f"Noun extractor '{name}' is already registered. "
                f"Existing: {_EXTRACTOR_REGISTRY[name].__name__}, New: {cls.__name__}"
            )
        _EXTRACTOR_REGISTRY[name] = cls
        return cls
    return decorator


def _load_builtin_extractors() -> None:
    # Imported here to trigger their @register_noun_extractor decorators
    # without a circular import at package load time
    from termbase.extraction.nouns import nltk_extractor, spacy_extractor  # noqa: F401


def get_noun_extractor(name: str, **kwargs) -> NounSequenceExtractor:
    """
    Instantiate an analyzer by its registered name.

    Args:
        name: Registered analyzer name (case-sensitive)
        **kwargs: Constructor arguments passed to the analyzer class

    Raises:
        KeyError: If the name is not registered
    """
    _load_builtin_extractors()
    if name not in _EXTRACTOR_REGISTRY:
        available = ", ".join(sorted(_EXTRACTOR_REGISTRY.keys()))
        raise KeyError(
            f"Unknown noun extractor '{name}'. Available extractors: {available or '(none registered)'}"
        )
    return _EXTRACTOR_REGISTRY[name](**kwargs)


def get_available_noun_extractors() -> list[str]:
    """Return the sorted names accepted by get_noun_extractor()."""
    _load_builtin_extractors()
    return sorted(_EXTRACTOR_REGISTRY.keys())


__all__ = [
    'NounSequenceExtractor',
    'collect_noun_runs',
    'get_available_noun_extractors',
    'get_noun_extractor',
    'register_noun_extractor',
]
