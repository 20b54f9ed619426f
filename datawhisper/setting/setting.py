"""DataWhisper Settings Module.

Loads configuration from config/datawhisper.yaml with environment variable
and Python defaults as fallback. Environment variables take precedence over
the YAML file.
"""

import logging
import os
from functools import lru_cache
from typing import Any, Callable, List

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from datawhisper.core.config.config_loader import get_config_value, reload_configs

load_dotenv()

logger = logging.getLogger(__name__)


def _env_or_config(
    name: str,
    cast: Callable[[Any], Any],
    config_type: str,
    key: str,
    default: Any,
) -> Any:
    """Environment variable if set and valid, else the config value, else default."""
    raw = os.getenv(name)
    if raw:
        try:
            return cast(raw)
        except ValueError:
            logger.warning(f"Ignoring invalid {name}={raw!r}, using config value")
    return cast(get_config_value(config_type, key, default=default))


class ParserSettings(BaseModel):
    """Tabular parser settings (loaded from config/datawhisper.yaml parser section)."""

    encodings: List[str] = Field(
        default_factory=lambda: get_config_value(
            "parser", "csv", "encodings",
            default=["utf-8-sig", "utf-8", "cp1252", "latin-1"],
        ),
        min_length=1,
        description="Encodings tried in order when decoding CSV bytes",
    )
    delimiter: str = Field(
        default_factory=lambda: get_config_value("parser", "csv", "delimiter", default=","),
        min_length=1,
        description="CSV field delimiter",
    )


class ProfilingSettings(BaseModel):
    """Column classification and statistics settings."""

    sample_size: int = Field(
        default_factory=lambda: _env_or_config(
            "DATAWHISPER_SAMPLE_SIZE", int, "profiling", "sample_size", 100
        ),
        ge=1,
        description="Rows inspected for classification and statistics",
    )
    type_threshold: float = Field(
        default_factory=lambda: _env_or_config(
            "DATAWHISPER_TYPE_THRESHOLD", float, "profiling", "type_threshold", 0.7
        ),
        ge=0.0,
        le=1.0,
        description="Fraction of the sample that must match a numeric/date predicate",
    )


class ChartSettings(BaseModel):
    """Chart selector settings."""

    unknown_label: str = Field(
        default_factory=lambda: get_config_value("charts", "unknown_label", default="Unknown"),
        description="Label for rows with a missing category value",
    )


class DataWhisperSettings(BaseModel):
    parser: ParserSettings = Field(default_factory=ParserSettings)
    profiling: ProfilingSettings = Field(default_factory=ProfilingSettings)
    charts: ChartSettings = Field(default_factory=ChartSettings)


@lru_cache(maxsize=1)
def get_settings() -> DataWhisperSettings:
    """Get singleton DataWhisperSettings instance. Use this instead of DataWhisperSettings()."""
    return DataWhisperSettings()


def reload_settings() -> DataWhisperSettings:
    """Drop cached config and settings and load them again."""
    reload_configs()
    get_settings.cache_clear()
    return get_settings()
