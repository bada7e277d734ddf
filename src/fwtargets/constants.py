"""
Constants and configuration values for fwtargets.

This module contains the fixed paths, defaults and logging settings used
throughout the target description loader.
"""

# Repository defaults
DEFAULT_REPOSITORY_URL = "https://github.com/ExpressLRS/ExpressLRS"
DEFAULT_REPOSITORY_SRC_FOLDER = "src"
DEFAULT_GIT_BRANCH = "master"

# Layout of a materialized target data set
HARDWARE_DIR_NAME = "hardware"
TARGETS_JSON_FILE = "targets.json"
TARGET_STORAGE_DIR_NAME = "targets"
VENDOR_NAME_KEY = "name"

# Tools
GIT_EXECUTABLE_NAME = "git"
GIT_REMOTE_NAME = "origin"
GIT_FETCH_DEPTH = 1

# Locking
DEFAULT_LOCK_TIMEOUT_MS = 60000

# Configuration file names
APP_NAME = "fwtargets"
CONFIG_FILE_NAME = "fwtargets.yaml"

# Environment variable names
LOG_LEVEL_ENV_VAR = "FWTARGETS_LOG_LEVEL"
TARGET_STORAGE_ENV_VAR = "FWTARGETS_TARGET_STORAGE"

# Logging configuration
LOGGER_NAME = "fwtargets"
LOG_FILE_NAME = "fwtargets.log"
LOG_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
INFO_LOG_FORMAT = "%(asctime)s - %(levelname)s - %(message)s"
DEBUG_LOG_FORMAT = "%(asctime)s - %(levelname)s - %(name)s: %(message)s"
LOG_FILE_MAX_BYTES = 10 * 1024 * 1024  # 10 MB
LOG_FILE_BACKUP_COUNT = 5

# Platforms that ship the WiFi update stack
WIFI_PLATFORMS = ("esp32", "esp8285")

# Device feature flags understood by the option rules
FEATURE_BUZZER = "buzzer"
FEATURE_UNLOCK_HIGHER_POWER = "unlock-higher-power"
FEATURE_SBUS_UART = "sbus-uart"

# Target id fragments understood by the option rules
TARGET_FRAGMENT_2400 = "_2400."
TARGET_FRAGMENT_900 = "_900."
TARGET_FRAGMENT_TX = ".tx_"
TARGET_FRAGMENT_RX = ".rx_"
