"""HTTP front end accepting document uploads and answering with JSON."""

from __future__ import annotations

from http import HTTPStatus
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
import json
import logging
from urllib.parse import unquote, urlsplit

from pagextract.extraction.extractor import DocumentExtractor, ExtractionError

logger = logging.getLogger(__name__)

BANNER_TEXT = "This is a pagextract instance - please put PDF files."
UPLOAD_HINT_TEXT = (
    'Please put a file - add file name as path parameter like "http://localhost:9090/myfile.pdf".'
)


class PageExtractorServer(ThreadingHTTPServer):
    """Threaded HTTP server sharing one stateless extractor across requests."""

    daemon_threads = True

    def __init__(self, address: tuple[str, int], extractor: DocumentExtractor) -> None:
        super().__init__(address, PageExtractorHandler)
        self.extractor = extractor


class PageExtractorHandler(BaseHTTPRequestHandler):
    """Route ``GET /``, ``PUT /`` and ``PUT /<file>`` requests."""

    server: PageExtractorServer
    server_version = "pagextract"

    def do_GET(self) -> None:
        if self._path() == "/":
            self._send_text(HTTPStatus.OK, BANNER_TEXT)
            return
        self._send_text(HTTPStatus.NOT_FOUND, "Not found")

    def do_PUT(self) -> None:
        path = self._path()
        body = self._read_body()
        if body is None:
            self._send_text(HTTPStatus.BAD_REQUEST, "Invalid Content-Length header")
            return

        if path == "/":
            self._send_text(HTTPStatus.OK, UPLOAD_HINT_TEXT)
            return

        filename = unquote(path[1:])
        if not filename or "/" in filename:
            self._send_text(HTTPStatus.NOT_FOUND, "Not found")
            return

        logger.info("Uploaded file: %s", filename)
        try:
            result = self.server.extractor.extract(filename, body)
        except ExtractionError as exc:
            logger.error("Extraction failed for %s: %s", filename, exc.message)
            self._send_json(HTTPStatus.UNPROCESSABLE_ENTITY, {"filename": filename, "error": exc.message})
            return

        logger.info("Elapsed time: %dms", result.elapsed_ms)
        self._send_json(HTTPStatus.OK, result.to_dict())

    def log_message(self, format: str, *args: object) -> None:
        logger.debug("%s - %s", self.address_string(), format % args)

    def _path(self) -> str:
        return urlsplit(self.path).path or "/"

    def _read_body(self) -> bytes | None:
        try:
            length = int(self.headers.get("Content-Length") or 0)
        except ValueError:
            logger.warning("Rejecting upload with Content-Length %r", self.headers.get("Content-Length"))
            self.close_connection = True
            return None
        if length <= 0:
            return b""
        return self.rfile.read(length)

    def _send_text(self, status: HTTPStatus, text: str) -> None:
        self._send(status, text.encode("utf-8"), "text/plain; charset=utf-8")

    def _send_json(self, status: HTTPStatus, payload: dict[str, object]) -> None:
        body = json.dumps(payload, ensure_ascii=False).encode("utf-8")
        self._send(status, body, "application/json")

    def _send(self, status: HTTPStatus, body: bytes, content_type: str) -> None:
        self.send_response(status)
        self.send_header("Content-Type", content_type)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)


def build_server(host: str, port: int, extractor: DocumentExtractor) -> PageExtractorServer:
    """Bind the HTTP server; port 0 picks a free port."""

    server = PageExtractorServer((host, port), extractor)
    bound_host, bound_port = server.server_address[:2]
    logger.info("Server listening on %s:%s", bound_host, bound_port)
    return server
