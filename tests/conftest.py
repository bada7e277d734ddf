import json
import subprocess
from pathlib import Path

import platformdirs
import pytest

_SUBPROCESS_BLOCK_MSG = (
    "Running external commands is blocked during tests. Mock subprocess.run."
)


def _block_subprocess(*_args, **_kwargs):
    """
    Prevent real git invocations in tests by raising a RuntimeError.

    Raises:
        RuntimeError: with `_SUBPROCESS_BLOCK_MSG`.
    """
    raise RuntimeError(_SUBPROCESS_BLOCK_MSG)


def pytest_configure(config):
    """
    Register the markers used across the test suite.

    Parameters:
        config: pytest.Config
    """
    config.addinivalue_line("markers", "unit: fast isolated tests")
    config.addinivalue_line("markers", "core: resolution, locking and derivation")
    config.addinivalue_line("markers", "infrastructure: config, logging and CLI")


@pytest.fixture(autouse=True)
def _isolate_test_environment(tmp_path_factory, monkeypatch):
    """
    Point platformdirs and the fwtargets environment variables at temporary directories.

    Creates temp cache and config directories, patches platformdirs user_cache_dir and
    user_config_dir to return them, clears FWTARGETS_* variables and blocks
    subprocess.run so no test reaches a real git binary.
    """
    base = tmp_path_factory.mktemp("fwtargets")
    cache_dir = base / "cache"
    config_dir = base / "config"
    for path in (cache_dir, config_dir):
        path.mkdir(parents=True, exist_ok=True)

    monkeypatch.setattr(
        platformdirs, "user_cache_dir", lambda *_args, **_kwargs: str(cache_dir)
    )
    monkeypatch.setattr(
        platformdirs, "user_config_dir", lambda *_args, **_kwargs: str(config_dir)
    )
    monkeypatch.delenv("FWTARGETS_TARGET_STORAGE", raising=False)
    monkeypatch.delenv("FWTARGETS_LOG_LEVEL", raising=False)
    monkeypatch.setattr(subprocess, "run", _block_subprocess)


SAMPLE_TARGETS = {
    "happymodel": {
        "name": "HappyModel",
        "tx_2400": {
            "es24tx": {
                "product_name": "HappyModel ES24TX 2.4Ghz TX",
                "lua_name": "HM ES24TX",
                "layout_file": "HappyModel ES24TX.json",
                "upload_methods": ["uart", "wifi", "etx"],
                "platform": "esp32",
                "features": ["buzzer", "unlock-higher-power"],
                "firmware": "Unified_ESP32_2400_TX",
            }
        },
        "rx_2400": {
            "ep": {
                "product_name": "HappyModel EP1/EP2 2.4GHz RX",
                "upload_methods": ["UART", "betaflight", "wifi"],
                "platform": "esp8285",
                "firmware": "Unified_ESP8285_2400_RX",
            }
        },
    },
    "frsky": {
        "name": "FrSky",
        "rx_900": {
            "r9mm": {
                "product_name": "FrSky R9MM 900MHz RX",
                "upload_methods": ["stlink", "betaflight"],
                "platform": "stm32",
                "features": ["sbus-uart"],
            }
        },
        "tx_900": {
            "r9m": {
                "product_name": "FrSky R9M 900MHz TX",
                "upload_methods": ["stlink", "dfu"],
                "platform": "stm32",
            }
        },
    },
}


@pytest.fixture
def sample_targets():
    return json.loads(json.dumps(SAMPLE_TARGETS))


@pytest.fixture
def hardware_checkout(tmp_path, sample_targets) -> Path:
    """A local firmware checkout whose hardware directory holds targets.json."""
    root = tmp_path / "firmware"
    hardware = root / "hardware"
    hardware.mkdir(parents=True)
    (hardware / "targets.json").write_text(json.dumps(sample_targets), encoding="utf-8")
    return root
