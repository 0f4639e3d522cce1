"""Tracker configuration management."""

import logging
from functools import lru_cache
from pathlib import Path

from .schemas import TrackerConfig
from .utils import load_json_safe

logger = logging.getLogger('tallylax.config')

CONFIG_PATH = Path(__file__).parent.parent / 'data' / 'tallylax_config.json'


@lru_cache(maxsize=1)
def get_config() -> TrackerConfig:
    """
    Load tracker configuration from data/tallylax_config.json.

    Configuration is cached after first load. A missing or invalid file
    falls back to the built-in defaults.

    Returns:
        TrackerConfig object with validated settings

    Example:
        from tallylax.config import get_config
        config = get_config()
        print(f"Storage directory: {config.storage_dir}")
    """
    config = load_json_safe(CONFIG_PATH, schema=TrackerConfig)
    if config is None:
        logger.debug(f'No usable config at {CONFIG_PATH}, using defaults')
        config = TrackerConfig()
    return config


def get_storage_dir() -> Path:
    """Get the directory holding the persisted state keys."""
    return Path(get_config().storage_dir)


def get_default_team_name() -> str:
    """Get the team name used for a fresh or reset tracker."""
    return get_config().default_team_name


def get_season_by_role() -> bool:
    """Whether season totals aggregate each player over their own role's categories."""
    return get_config().season_totals_by_role


def get_backup_filename() -> str:
    """Get the default file name for exported backups."""
    return get_config().backup_filename


def get_log_dir() -> Path:
    """Get the directory for log files."""
    return Path(get_config().log_dir)


def clear_config_cache() -> None:
    """
    Clear the configuration cache.

    Use this if the config file is modified during runtime
    and you need to reload it.
    """
    get_config.cache_clear()
