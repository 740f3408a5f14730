"""YAML configuration loading.

Reads ``aspectloom.yaml`` from the config directory. The directory is
``config/`` at the repository root unless ``ASPECTLOOM_CONFIG_DIR`` is
set (a ``.env`` file is honoured). Missing or unreadable files yield an
empty configuration so the composer always runs on its defaults.
"""

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict

import yaml
from dotenv import load_dotenv

load_dotenv()

logger = logging.getLogger(__name__)

CONFIG_DIR_ENV = "ASPECTLOOM_CONFIG_DIR"
CONFIG_FILE_NAME = "aspectloom.yaml"


def get_config_path() -> Path:
    """Directory holding the YAML configuration files."""
    override = os.getenv(CONFIG_DIR_ENV)
    if override:
        return Path(override)
    return Path(__file__).parent.parent.parent.parent / "config"


@lru_cache(maxsize=1)
def load_unified_config() -> Dict[str, Any]:
    """Load and cache ``aspectloom.yaml``.

    Returns:
        Parsed top-level mapping, or an empty dict if the file is absent
        or cannot be parsed
    """
    config_file = get_config_path() / CONFIG_FILE_NAME
    if not config_file.exists():
        logger.warning(f"{CONFIG_FILE_NAME} not found at {config_file}, using defaults")
        return {}

    try:
        with open(config_file, "r", encoding="utf-8") as f:
            config = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Error loading {config_file}: {e}")
        return {}

    if not isinstance(config, dict):
        logger.warning(f"Ignoring {config_file}: top level is not a mapping")
        return {}

    logger.debug(f"Loaded configuration from {config_file}")
    return config


def reload_configs() -> None:
    """Drop cached configuration so the next read hits the file again."""
    load_unified_config.cache_clear()
    from aspectloom.setting.setting import get_settings
    get_settings.cache_clear()
