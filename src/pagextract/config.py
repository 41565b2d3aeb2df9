"""Runtime configuration for the extraction service and CLI."""

from __future__ import annotations

from dataclasses import dataclass
import os
from typing import Mapping


DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 9090
DEFAULT_LOG_LEVEL = "INFO"

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})
_LOG_LEVELS = frozenset({"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"})


def parse_bool(*, name: str, raw_value: str) -> bool:
    value = raw_value.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be one of true/false, yes/no, on/off, 1/0")


def _parse_port(*, name: str, raw_value: str) -> int:
    value = int(raw_value)
    if not 0 <= value <= 65535:
        raise ValueError(f"{name} must be between 0 and 65535")
    return value


@dataclass(frozen=True, slots=True)
class ExtractorSettings:
    """Validated settings for serving and running extractions."""

    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    compress_text: bool = True
    raw_metadata: bool = False
    metadata: bool = True
    full_text: bool = True
    detect_language: bool = True
    log_level: str = DEFAULT_LOG_LEVEL

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "ExtractorSettings":
        source: Mapping[str, str] = os.environ if environ is None else environ

        host = source.get("PAGEXTRACT_HOST", DEFAULT_HOST).strip() or DEFAULT_HOST

        port_raw = source.get("PAGEXTRACT_PORT", str(DEFAULT_PORT)).strip()
        if not port_raw:
            raise ValueError("PAGEXTRACT_PORT cannot be empty")
        port = _parse_port(name="PAGEXTRACT_PORT", raw_value=port_raw)

        log_level = source.get("PAGEXTRACT_LOG_LEVEL", DEFAULT_LOG_LEVEL).strip().upper()
        if log_level not in _LOG_LEVELS:
            raise ValueError(f"PAGEXTRACT_LOG_LEVEL must be one of {', '.join(sorted(_LOG_LEVELS))}")

        flags: dict[str, bool] = {}
        for field_name, env_name, default in (
            ("compress_text", "PAGEXTRACT_COMPRESS", True),
            ("raw_metadata", "PAGEXTRACT_RAW_METADATA", False),
            ("metadata", "PAGEXTRACT_METADATA", True),
            ("full_text", "PAGEXTRACT_FULLTEXT", True),
            ("detect_language", "PAGEXTRACT_DETECT_LANGUAGE", True),
        ):
            raw_flag = source.get(env_name)
            if raw_flag is None:
                flags[field_name] = default
                continue
            if not raw_flag.strip():
                raise ValueError(f"{env_name} cannot be empty")
            flags[field_name] = parse_bool(name=env_name, raw_value=raw_flag)

        return cls(host=host, port=port, log_level=log_level, **flags)
