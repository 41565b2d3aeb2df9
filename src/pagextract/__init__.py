"""Page-delimited text and unified metadata extraction for uploaded documents."""

__version__ = "0.1.0"
