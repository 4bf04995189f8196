"""
Configuration loading for the Scholarship Search importer.

Priority (later wins):
1. Built-in defaults
2. JSON settings file (SCHOLARSHIP_SEARCH_CONFIG_PATH, the given path,
   or config/settings.json)
3. Individual environment variable overrides
"""

import os
from dataclasses import dataclass
from typing import Any, Dict, Optional

from scholarship_search.fetch import DEFAULT_INFO_URL
from scholarship_search.sources import MAX_PAGES, MIN_PAGES
from scholarship_search.store import DEFAULT_STORE_PATH
from scholarship_search.summary_cache import DEFAULT_SUMMARY_PATH
from scholarship_search.utils import get_logger, safe_read_json


DEFAULT_CONFIG_PATH = "config/settings.json"

# Schedule name -> interval in seconds
SCHEDULE_INTERVALS = {
    "hourly": 60 * 60,
    "twicedaily": 12 * 60 * 60,
    "daily": 24 * 60 * 60,
    "weekly": 7 * 24 * 60 * 60,
}
NEVER = "never"

ENV_OVERRIDES = {
    "SCHOLARSHIP_KEYWORDS": "keywords",
    "SCHOLARSHIP_MAX_PAGES": "max_pages",
    "SCHOLARSHIP_CRON_SCHEDULE": "cron_schedule",
    "DATA_PATH": "data_path",
    "SUMMARY_PATH": "summary_path",
    "SCHOLARSHIP_INFO_URL": "info_url",
}


class ConfigError(ValueError):
    """Raised for configuration values that cannot be honored."""


@dataclass
class ImporterConfig:
    """Resolved settings handed to the triggers."""
    keywords: str = ""
    max_pages: int = 1
    cron_schedule: str = NEVER
    data_path: str = DEFAULT_STORE_PATH
    summary_path: str = DEFAULT_SUMMARY_PATH
    info_url: str = DEFAULT_INFO_URL

    def to_dict(self) -> Dict[str, Any]:
        return {
            "keywords": self.keywords,
            "max_pages": self.max_pages,
            "cron_schedule": self.cron_schedule,
            "data_path": self.data_path,
            "summary_path": self.summary_path,
            "info_url": self.info_url,
        }


def validate_schedule(name: str) -> str:
    """
    Check a schedule name.

    Raises:
        ConfigError: If the name is neither a known interval nor "never".
    """
    name = (name or "").strip().lower()
    if name != NEVER and name not in SCHEDULE_INTERVALS:
        raise ConfigError(
            f"Unknown schedule '{name}'. Expected one of: "
            f"{', '.join(list(SCHEDULE_INTERVALS) + [NEVER])}"
        )
    return name


def _apply(config: ImporterConfig, values: Dict[str, Any], origin: str) -> None:
    logger = get_logger("config")

    for key, value in values.items():
        if value is None:
            continue
        if key == "keywords":
            config.keywords = str(value).strip()
        elif key == "max_pages":
            try:
                pages = int(value)
            except (TypeError, ValueError):
                logger.warning(f"Invalid max_pages {value!r} in {origin}, keeping {config.max_pages}")
                continue
            if not MIN_PAGES <= pages <= MAX_PAGES:
                logger.warning(
                    f"max_pages {pages} in {origin} outside {MIN_PAGES}-{MAX_PAGES}, clamping"
                )
                pages = max(MIN_PAGES, min(MAX_PAGES, pages))
            config.max_pages = pages
        elif key == "cron_schedule":
            try:
                config.cron_schedule = validate_schedule(str(value))
            except ConfigError as e:
                logger.warning(f"{e} (from {origin}), keeping '{config.cron_schedule}'")
        elif key in ("data_path", "summary_path", "info_url"):
            if str(value).strip():
                setattr(config, key, str(value).strip())
        else:
            logger.debug(f"Ignoring unknown setting '{key}' in {origin}")


def load_config(config_path: Optional[str] = None) -> ImporterConfig:
    """
    Load importer settings from file and environment.

    Args:
        config_path: Optional path to a JSON settings file.

    Returns:
        ImporterConfig with invalid values replaced by defaults.
    """
    logger = get_logger("config")
    config = ImporterConfig()

    file_path = (
        os.environ.get("SCHOLARSHIP_SEARCH_CONFIG_PATH", "").strip()
        or config_path
        or DEFAULT_CONFIG_PATH
    )
    data = safe_read_json(file_path, default=None)
    if isinstance(data, dict):
        logger.info(f"Loaded settings from {file_path}")
        _apply(config, data, file_path)
    elif data is not None:
        logger.warning(f"Ignoring settings file {file_path}: expected a JSON object")

    env_values = {}
    for env_name, key in ENV_OVERRIDES.items():
        value = os.environ.get(env_name, "").strip()
        if value:
            env_values[key] = value
    _apply(config, env_values, "environment")

    return config
