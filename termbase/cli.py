"""
Command-line entry point for term-candidate extraction.

Reads UTF-8 text files (one document per file), runs the extraction
pipeline and writes the result as JSON or CSV.

Usage:
    termbase-extract --input docs/*.txt --min-count 2 --format csv --output terms.csv
    termbase-extract --input a.txt b.txt --analyzer nltk --stopword item

Settings come from the YAML file (--config, or config/term_extraction.yaml),
then command-line flags override individual values.
"""

import argparse
import csv
import io
import json
import sys
from pathlib import Path

import yaml

from termbase.config import EXTRACTION_CONFIG_FILE, load_extraction_settings
from termbase.extraction.errors import NounSequenceExtractionError, TermExtractionConfigError
from termbase.extraction.extractor import TermCandidateExtractor
from termbase.extraction.models import TermExtractionConfig, TermExtractionResult
from termbase.extraction.nouns import get_noun_extractor
from termbase.extraction.nouns.base import NounSequenceExtractor
from termbase.logging_config import close_debug_log, debug_log, error, info
from termbase.parallel import ExecutorStrategy, SequentialStrategy, ThreadPoolStrategy

CANDIDATE_COLUMNS = [
    "term", "components", "count", "doc_count", "pmi", "npmi",
    "idf", "avg_tfidf", "relevance_score", "surface_form",
]
DICTIONARY_COLUMNS = ["original_term", "suggested_term", "npmi", "confidence", "reasons"]


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="termbase-extract",
        description="Extract multi-token term candidates from text documents.",
    )
    parser.add_argument("--input", "-i", nargs="+", required=True, type=Path,
                        help="UTF-8 text files, one document each")
    parser.add_argument("--config", "-c", type=Path, default=None,
                        help=f"YAML settings file (default: {EXTRACTION_CONFIG_FILE})")
    parser.add_argument("--analyzer", default="spacy",
                        help="Noun-sequence analyzer: spacy or nltk (default: spacy)")
    parser.add_argument("--model", default=None,
                        help="spaCy model name (spacy analyzer only)")
    parser.add_argument("--min-count", type=int, default=None)
    parser.add_argument("--npmi-threshold", default=None)
    parser.add_argument("--relevance-threshold", default=None)
    parser.add_argument("--stopword", action="append", default=[],
                        help="Additional stopword (repeatable)")
    parser.add_argument("--workers", type=int, default=1,
                        help="Parallel workers for per-document analysis (default: 1)")
    parser.add_argument("--format", choices=("json", "csv"), default="json")
    parser.add_argument("--output", "-o", type=Path, default=None,
                        help="Output file (default: stdout)")
    return parser


def build_config(args: argparse.Namespace) -> TermExtractionConfig:
    """Merge YAML settings with command-line overrides."""
    settings = dict(load_extraction_settings(args.config))

    if args.min_count is not None:
        settings["min_count"] = args.min_count
    if args.npmi_threshold is not None:
        settings["npmi_threshold"] = args.npmi_threshold
    if args.relevance_threshold is not None:
        settings["relevance_threshold"] = args.relevance_threshold
    if args.stopword:
        settings["stopwords"] = list(settings.get("stopwords") or []) + args.stopword

    base_dir = (args.config or EXTRACTION_CONFIG_FILE).parent
    return TermExtractionConfig.from_mapping(settings, base_dir=base_dir)


def read_documents(paths: list[Path]) -> list[str]:
    documents = []
    for path in paths:
        with open(path, encoding="utf-8") as f:
            documents.append(f.read())
    debug_log(f"[CLI] Read {len(documents)} documents")
    return documents


def render_json(result: TermExtractionResult) -> str:
    return json.dumps(result.to_dict(), ensure_ascii=False, indent=2)


def render_csv(result: TermExtractionResult) -> str:
    """Candidate rows, a blank line, then dictionary-candidate rows."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")

    writer.writerow(CANDIDATE_COLUMNS)
    for candidate in result.candidates:
        row = candidate.to_dict()
        row["components"] = " ".join(candidate.components)
        writer.writerow([row[column] for column in CANDIDATE_COLUMNS])

    writer.writerow([])
    writer.writerow(DICTIONARY_COLUMNS)
    for gap in result.dictionary_candidates:
        row = gap.to_dict()
        row["reasons"] = "; ".join(gap.reasons)
        writer.writerow([row[column] for column in DICTIONARY_COLUMNS])

    return buffer.getvalue()


def _make_strategy(workers: int) -> ExecutorStrategy:
    if workers > 1:
        return ThreadPoolStrategy(max_workers=workers)
    return SequentialStrategy()


def main(argv: list[str] | None = None, noun_extractor: NounSequenceExtractor | None = None) -> int:
    """
    Run the extraction from the command line.

    Args:
        argv: Arguments (defaults to sys.argv[1:])
        noun_extractor: Pre-built analyzer; overrides --analyzer and --model

    Returns:
        Process exit status (0 on success, 1 on failure)
    """
    args = build_parser().parse_args(argv)

    try:
        config = build_config(args)
        if noun_extractor is None:
            kwargs = {"model_name": args.model} if args.model else {}
            noun_extractor = get_noun_extractor(args.analyzer, **kwargs)
        documents = read_documents(args.input)

        with _make_strategy(args.workers) as strategy:
            result = TermCandidateExtractor(noun_extractor, strategy=strategy).extract(documents, config)
    except (TermExtractionConfigError, NounSequenceExtractionError, KeyError,
            ValueError, OSError, yaml.YAMLError) as e:
        error(f"[CLI] Extraction failed: {e}")
        close_debug_log()
        return 1

    output = render_json(result) if args.format == "json" else render_csv(result)
    if args.output is None:
        sys.stdout.write(output)
        if not output.endswith("\n"):
            sys.stdout.write("\n")
    else:
        args.output.write_text(output, encoding="utf-8")
        info(f"[CLI] Wrote {len(result.candidates)} candidates to {args.output}")

    close_debug_log()
    return 0


if __name__ == "__main__":
    sys.exit(main())
