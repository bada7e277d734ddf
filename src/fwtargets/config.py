"""
Configuration for the target description loader.

Settings come from an optional fwtargets.yaml in the platformdirs user
config directory (or an explicit directory), then from environment
overrides. Missing keys keep their defaults.
"""

import os
from dataclasses import dataclass, field, fields
from typing import Any, Dict, Optional, Tuple

import platformdirs
import yaml

from fwtargets.constants import (
    APP_NAME,
    CONFIG_FILE_NAME,
    DEFAULT_LOCK_TIMEOUT_MS,
    DEFAULT_REPOSITORY_SRC_FOLDER,
    DEFAULT_REPOSITORY_URL,
    TARGET_STORAGE_DIR_NAME,
    TARGET_STORAGE_ENV_VAR,
)
from fwtargets.exceptions import ConfigFileError, ConfigValidationError
from fwtargets.log_utils import logger


def default_search_path() -> str:
    return os.environ.get("PATH", os.defpath)


def default_target_storage_path() -> str:
    return os.path.join(platformdirs.user_cache_dir(APP_NAME), TARGET_STORAGE_DIR_NAME)


@dataclass
class LoaderConfig:
    """Settings a DeviceDescriptionsLoader is constructed with."""

    search_path: str = field(default_factory=default_search_path)
    """os.pathsep separated directories searched for git"""

    target_storage_path: str = field(default_factory=default_target_storage_path)
    """Base directory for fetched target data"""

    lock_timeout_ms: int = DEFAULT_LOCK_TIMEOUT_MS
    """How long an operation waits for exclusive access"""

    repository_url: str = DEFAULT_REPOSITORY_URL
    repository_src_folder: str = DEFAULT_REPOSITORY_SRC_FOLDER
    log_level: Optional[str] = None
    log_dir: Optional[str] = None
    """Directory for the rotating log file; file logging is off when unset"""


_FIELD_TYPES = {
    "search_path": str,
    "target_storage_path": str,
    "lock_timeout_ms": int,
    "repository_url": str,
    "repository_src_folder": str,
    "log_level": str,
    "log_dir": str,
}


def get_config_dir() -> str:
    return platformdirs.user_config_dir(APP_NAME)


def config_exists(directory: Optional[str] = None) -> Tuple[bool, Optional[str]]:
    """
    Return whether a configuration file exists and its path.

    Returns:
        (bool, str|None): found flag and the path of the config file, or None.
    """
    config_path = os.path.join(directory or get_config_dir(), CONFIG_FILE_NAME)
    if os.path.exists(config_path):
        return True, config_path
    return False, None


def config_from_mapping(data: Dict[str, Any]) -> LoaderConfig:
    """
    Build a LoaderConfig from a mapping of lower-case setting names.

    Unknown keys are ignored with a warning.

    Raises:
        ConfigValidationError: a known key has a value of the wrong type.
    """
    known = {f.name for f in fields(LoaderConfig)}
    values: Dict[str, Any] = {}
    for key, value in data.items():
        if key not in known:
            logger.warning(f"Ignoring unknown configuration key: {key}")
            continue
        if value is None:
            continue
        expected = _FIELD_TYPES[key]
        if expected is int and isinstance(value, bool):
            raise ConfigValidationError(f"Configuration key {key} must be an integer")
        if not isinstance(value, expected):
            raise ConfigValidationError(
                f"Configuration key {key} must be of type {expected.__name__}",
                details=f"got {type(value).__name__}",
            )
        values[key] = value

    if values.get("lock_timeout_ms", DEFAULT_LOCK_TIMEOUT_MS) <= 0:
        raise ConfigValidationError("Configuration key lock_timeout_ms must be > 0")

    return LoaderConfig(**values)


def load_config(directory: Optional[str] = None) -> LoaderConfig:
    """
    Load the loader configuration.

    Reads fwtargets.yaml from `directory` when given, otherwise from the
    platformdirs user config directory. A missing file yields defaults. The
    FWTARGETS_TARGET_STORAGE environment variable overrides the storage path.

    Raises:
        ConfigFileError: the file exists but cannot be read or parsed.
        ConfigValidationError: a setting has the wrong type.
    """
    exists, config_path = config_exists(directory)
    data: Dict[str, Any] = {}
    if exists and config_path:
        try:
            with open(config_path, "r", encoding="utf-8") as f:
                loaded = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigFileError(
                f"Failed to read configuration file {config_path}", details=str(e)
            ) from e
        if loaded is None:
            loaded = {}
        if not isinstance(loaded, dict):
            raise ConfigFileError(
                f"Configuration file {config_path} must contain a mapping"
            )
        data = {str(k).lower(): v for k, v in loaded.items()}
        logger.debug(f"Loaded configuration from {config_path}")

    storage_override = os.environ.get(TARGET_STORAGE_ENV_VAR)
    if storage_override:
        data["target_storage_path"] = storage_override

    return config_from_mapping(data)
