"""
Termbase: term-candidate extraction for glossary building.

Mines multi-token domain terms from a batch of documents using
co-occurrence statistics (PMI, NPMI, IDF, TF-IDF), and flags token pairs
that a tokenizer probably split by mistake.
"""

__version__ = "0.1.0"
