"""HTTP service interfaces."""

from .server import PageExtractorServer, build_server

__all__ = ["PageExtractorServer", "build_server"]
