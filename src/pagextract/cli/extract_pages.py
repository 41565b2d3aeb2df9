"""CLI command extracting pages and metadata from local files as JSON."""

from __future__ import annotations

import argparse
import json
from pathlib import Path

from dotenv import load_dotenv

from pagextract.cli.common import add_extraction_arguments, configure_logging, options_from_args
from pagextract.config import ExtractorSettings
from pagextract.extraction.extractor import DocumentExtractor, ExtractionError

_SUPPORTED_SUFFIXES = {
    ".pdf",
    ".epub",
    ".fb2",
    ".fbz",
    ".txt",
    ".odt",
    ".ods",
    ".odp",
    ".docx",
    ".xlsx",
    ".pptx",
    ".png",
    ".jpg",
    ".jpeg",
    ".gif",
    ".tif",
    ".tiff",
}


def _is_supported(path: Path) -> bool:
    suffixes = [part.lower() for part in path.suffixes]
    if not suffixes:
        return False
    if suffixes[-1] in _SUPPORTED_SUFFIXES:
        return True
    return suffixes[-2:] == [".fb2", ".zip"]


def _collect_inputs(target: Path) -> list[Path]:
    if target.is_file():
        return [target]
    if target.is_dir():
        return sorted(path for path in target.rglob("*") if path.is_file() and _is_supported(path))
    return []


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    try:
        settings = ExtractorSettings.from_env()
    except ValueError as exc:
        print(f"Invalid configuration: {exc}")
        return 2

    parser = argparse.ArgumentParser(description="Extract pages and unified metadata from documents")
    parser.add_argument("--path", required=True, help="Source file or directory")
    add_extraction_arguments(parser, settings)
    args = parser.parse_args(argv)
    configure_logging(settings.log_level)

    source_path = Path(args.path)
    extractor = DocumentExtractor(options_from_args(args))

    results: list[dict[str, object]] = []
    errors: list[dict[str, str]] = []

    for file_path in _collect_inputs(source_path):
        try:
            extracted = extractor.extract(file_path.name, file_path.read_bytes())
        except OSError as exc:
            errors.append({"source_path": str(file_path), "error": f"Failed to read source file: {exc}"})
            continue
        except ExtractionError as exc:
            errors.append({"source_path": str(file_path), "error": str(exc)})
            continue

        results.append({"source_path": str(file_path), **extracted.to_dict()})

    payload = {
        "path": str(source_path),
        "processed": len(results),
        "results": results,
        "errors": errors,
    }
    print(json.dumps(payload, ensure_ascii=False, indent=2))
    return 0 if not errors else 1


if __name__ == "__main__":
    raise SystemExit(main())
