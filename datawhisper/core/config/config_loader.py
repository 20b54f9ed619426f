"""Configuration loader for YAML config files.

Loads configuration from config/datawhisper.yaml. The file is loaded once
and cached; call reload_configs() after editing it at runtime.
"""

import logging
import os
import yaml
from pathlib import Path
from functools import lru_cache
from typing import Any, Dict

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "datawhisper.yaml"
CONFIG_DIR_ENV = "DATAWHISPER_CONFIG_DIR"


def get_config_path() -> Path:
    """Get path to config directory.

    Searches in order:
    1. DATAWHISPER_CONFIG_DIR environment variable
    2. Relative to this file's project root
    3. Current working directory
    """
    env_dir = os.getenv(CONFIG_DIR_ENV)
    if env_dir:
        return Path(env_dir)

    # Go up: config_loader.py -> config -> core -> datawhisper -> project_root
    project_root = Path(__file__).parent.parent.parent.parent
    config_path = project_root / "config"

    if config_path.exists():
        return config_path

    cwd_config = Path.cwd() / "config"
    if cwd_config.exists():
        return cwd_config

    # Return project path even if doesn't exist (for error messages)
    return config_path


def _load_yaml_file(filename: str) -> Dict[str, Any]:
    """Load a YAML config file.

    Args:
        filename: Name of the YAML file (e.g., 'datawhisper.yaml')

    Returns:
        Parsed YAML as dictionary, empty dict if file not found or invalid
    """
    config_path = get_config_path() / filename

    if not config_path.exists():
        logger.debug(f"Config file not found: {config_path}")
        return {}

    try:
        with open(config_path, 'r') as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger.error(f"Error parsing {config_path}: {e}")
        return {}
    except OSError as e:
        logger.error(f"Error loading {config_path}: {e}")
        return {}

    if data is None:
        return {}
    if not isinstance(data, dict):
        logger.error(f"Ignoring {config_path}: top level must be a mapping")
        return {}

    logger.debug(f"Loaded config from {config_path}")
    return data


@lru_cache(maxsize=1)
def load_unified_config() -> Dict[str, Any]:
    """Load configuration from config/datawhisper.yaml.

    Returns:
        Dictionary with all configuration sections
    """
    config = _load_yaml_file(CONFIG_FILE_NAME)
    if config:
        logger.info(f"Loaded config from {CONFIG_FILE_NAME}")
    return config


def _get_section(section: str) -> Dict[str, Any]:
    value = load_unified_config().get(section, {})
    return value if isinstance(value, dict) else {}


def get_parser_config() -> Dict[str, Any]:
    """Get tabular parser configuration."""
    return _get_section("parser")


def get_profiling_config() -> Dict[str, Any]:
    """Get classifier and statistics configuration."""
    return _get_section("profiling")


def get_chart_config() -> Dict[str, Any]:
    """Get chart selector configuration."""
    return _get_section("charts")


def reload_configs() -> None:
    """Clear config caches to reload from files.

    Call this if config files are modified at runtime.
    """
    load_unified_config.cache_clear()
    logger.info("Config caches cleared - will reload on next access")


def get_config_value(
    config_type: str,
    *keys: str,
    default: Any = None
) -> Any:
    """Get a nested config value with fallback default.

    Args:
        config_type: Config section name. Supports:
            - 'datawhisper': Root of the config (navigate with keys)
            - 'parser': Parser section
            - 'profiling': Profiling section
            - 'charts': Chart selector section
        *keys: Nested keys to traverse
        default: Default value if key not found

    Returns:
        Config value or default

    Examples:
        get_config_value('profiling', 'sample_size', default=100)
        get_config_value('parser', 'csv', 'encodings', default=['utf-8'])
        get_config_value('datawhisper', 'charts', 'unknown_label')
    """
    if config_type == 'datawhisper':
        config: Any = load_unified_config()
    elif config_type == 'parser':
        config = get_parser_config()
    elif config_type == 'profiling':
        config = get_profiling_config()
    elif config_type == 'charts':
        config = get_chart_config()
    else:
        logger.warning(f"Unknown config type: {config_type}")
        return default

    for key in keys:
        if isinstance(config, dict) and key in config:
            config = config[key]
        else:
            return default

    return config
