"""Configuration loading utilities."""

from .config_loader import (
    load_unified_config,
    get_parser_config,
    get_profiling_config,
    get_chart_config,
    get_config_value,
    get_config_path,
    reload_configs,
)

__all__ = [
    "load_unified_config",
    "get_parser_config",
    "get_profiling_config",
    "get_chart_config",
    "get_config_value",
    "get_config_path",
    "reload_configs",
]
