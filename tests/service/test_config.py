from __future__ import annotations

import pytest

from pagextract.config import DEFAULT_HOST, DEFAULT_PORT, ExtractorSettings


def test_settings_defaults_from_empty_env() -> None:
    settings = ExtractorSettings.from_env({})

    assert settings.host == DEFAULT_HOST
    assert settings.port == DEFAULT_PORT
    assert settings.compress_text is True
    assert settings.raw_metadata is False
    assert settings.metadata is True
    assert settings.full_text is True
    assert settings.detect_language is True
    assert settings.log_level == "INFO"


def test_settings_parse_flags_and_port() -> None:
    settings = ExtractorSettings.from_env(
        {
            "PAGEXTRACT_HOST": "127.0.0.1",
            "PAGEXTRACT_PORT": "8080",
            "PAGEXTRACT_COMPRESS": "no",
            "PAGEXTRACT_RAW_METADATA": "TRUE",
            "PAGEXTRACT_DETECT_LANGUAGE": "0",
            "PAGEXTRACT_LOG_LEVEL": "debug",
        }
    )

    assert settings.host == "127.0.0.1"
    assert settings.port == 8080
    assert settings.compress_text is False
    assert settings.raw_metadata is True
    assert settings.detect_language is False
    assert settings.log_level == "DEBUG"


def test_settings_reject_invalid_values() -> None:
    with pytest.raises(ValueError, match="PAGEXTRACT_COMPRESS"):
        ExtractorSettings.from_env({"PAGEXTRACT_COMPRESS": "maybe"})

    with pytest.raises(ValueError, match="PAGEXTRACT_PORT"):
        ExtractorSettings.from_env({"PAGEXTRACT_PORT": "70000"})

    with pytest.raises(ValueError, match="PAGEXTRACT_FULLTEXT"):
        ExtractorSettings.from_env({"PAGEXTRACT_FULLTEXT": " "})

    with pytest.raises(ValueError, match="PAGEXTRACT_LOG_LEVEL"):
        ExtractorSettings.from_env({"PAGEXTRACT_LOG_LEVEL": "loud"})
