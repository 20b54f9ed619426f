from .setting import (
    DataWhisperSettings,
    ParserSettings,
    ProfilingSettings,
    ChartSettings,
    get_settings,
    reload_settings,
)

__all__ = [
    "DataWhisperSettings",
    "ParserSettings",
    "ProfilingSettings",
    "ChartSettings",
    "get_settings",
    "reload_settings",
]
