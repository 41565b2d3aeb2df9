"""Shared argparse wiring for extraction switches."""

from __future__ import annotations

import argparse
import logging

from pagextract.config import ExtractorSettings, parse_bool
from pagextract.extraction.extractor import ExtractionOptions

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _explicit_bool(raw_value: str) -> bool:
    try:
        return parse_bool(name="value", raw_value=raw_value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected true or false, got {raw_value!r}") from exc


def add_extraction_arguments(parser: argparse.ArgumentParser, settings: ExtractorSettings) -> None:
    """Register the boolean extraction switches with defaults from *settings*."""

    parser.add_argument(
        "-c",
        "--compress",
        type=_explicit_bool,
        default=settings.compress_text,
        metavar="BOOL",
        help="Compress extracted text, removing extra whitespace and trimming output",
    )
    parser.add_argument(
        "-M",
        "--raw-metadata",
        type=_explicit_bool,
        default=settings.raw_metadata,
        metavar="BOOL",
        help="Extract and return raw metadata",
    )
    parser.add_argument(
        "-m",
        "--metadata",
        type=_explicit_bool,
        default=settings.metadata,
        metavar="BOOL",
        help="Extract, unify and return metadata",
    )
    parser.add_argument(
        "-f",
        "--fulltext",
        type=_explicit_bool,
        default=settings.full_text,
        metavar="BOOL",
        help="Return full text, too (only applies to PDFs)",
    )
    parser.add_argument(
        "-l",
        "--detect-language",
        type=_explicit_bool,
        default=settings.detect_language,
        metavar="BOOL",
        help="Guess language if none found in metadata (requires --metadata)",
    )


def options_from_args(args: argparse.Namespace) -> ExtractionOptions:
    return ExtractionOptions(
        compress_text=args.compress,
        include_raw_metadata=args.raw_metadata,
        include_metadata=args.metadata,
        full_text=args.fulltext,
        detect_language=args.detect_language,
    )


def configure_logging(level: str) -> None:
    logging.basicConfig(format=LOG_FORMAT, level=getattr(logging, level, logging.INFO))
