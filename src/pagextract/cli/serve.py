"""CLI entrypoint starting the HTTP extraction service.

Usage (curl)::

    curl -X PUT -T file.pdf http://localhost:9090/file.pdf
"""

from __future__ import annotations

import argparse
import logging

from dotenv import load_dotenv

from pagextract.cli.common import add_extraction_arguments, configure_logging, options_from_args
from pagextract.config import ExtractorSettings
from pagextract.extraction.extractor import DocumentExtractor
from pagextract.service.server import build_server

logger = logging.getLogger(__name__)


def build_parser(settings: ExtractorSettings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Serve page and metadata extraction over HTTP")
    parser.add_argument("-i", "--host", default=settings.host, help="Hostname or IP address")
    parser.add_argument("-p", "--port", type=int, default=settings.port, help="Port to listen on")
    add_extraction_arguments(parser, settings)
    return parser


def main(argv: list[str] | None = None) -> int:
    load_dotenv()
    try:
        settings = ExtractorSettings.from_env()
    except ValueError as exc:
        print(f"Invalid configuration: {exc}")
        return 2

    args = build_parser(settings).parse_args(argv)
    configure_logging(settings.log_level)

    extractor = DocumentExtractor(options_from_args(args))
    try:
        server = build_server(args.host, args.port, extractor)
    except OSError as exc:
        logger.error("Server could not bind %s:%s: %s", args.host, args.port, exc)
        return 1

    try:
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("Shutting down")
    finally:
        server.server_close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
