"""
Loading device description documents (targets.json).

The hardware directory of the firmware repository holds a targets.json laid
out as::

    {
      "<vendor>": {
        "name": "<vendor display name>",
        "<device type>": {
          "<device>": {"product_name": ..., "platform": ..., "upload_methods": [...]}
        }
      }
    }

TargetsJSONLoader flattens it into a mapping keyed by
``<vendor>.<device type>.<device>`` whose category is the vendor name.
"""

import json
import os
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional

import aiofiles  # type: ignore[import-untyped]

from fwtargets.constants import TARGETS_JSON_FILE, VENDOR_NAME_KEY
from fwtargets.exceptions import (
    DescriptionNotFoundError,
    DescriptionParseError,
    UnknownDeviceError,
)
from fwtargets.log_utils import logger
from fwtargets.models import (
    DeviceDescription,
    DeviceDescriptionDocument,
    DeviceDescriptionRecord,
)

_OPTIONAL_STRING_FIELDS = (
    "lua_name",
    "layout_file",
    "firmware",
    "prior_target_name",
    "min_version",
)


class DescriptionParser(ABC):
    @abstractmethod
    async def load_device_descriptions(
        self, json_path: str
    ) -> DeviceDescriptionDocument:
        """
        Parse the description file at `json_path`.

        Raises:
            DescriptionNotFoundError: the file does not exist.
            DescriptionParseError: the file is not a valid description document.
        """


class TargetsJSONLoader(DescriptionParser):
    """DescriptionParser for the ExpressLRS targets.json layout."""

    async def load_device_descriptions(
        self, json_path: str
    ) -> DeviceDescriptionDocument:
        try:
            async with aiofiles.open(json_path, "r", encoding="utf-8") as f:
                raw = await f.read()
        except FileNotFoundError:
            raise DescriptionNotFoundError(
                "Device description file not found", path=json_path
            ) from None
        except (OSError, UnicodeDecodeError) as e:
            raise DescriptionParseError(
                "Could not read device description file", path=json_path, details=str(e)
            ) from e

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            raise DescriptionParseError(
                "Invalid JSON in device description file",
                path=json_path,
                details=str(e),
            ) from e

        document = parse_targets_document(data, json_path)
        logger.debug(f"Loaded {len(document)} device descriptions from {json_path}")
        return document


def parse_targets_document(
    data: Any, json_path: Optional[str] = None
) -> DeviceDescriptionDocument:
    """
    Flatten a decoded targets.json structure into a description document.

    Raises:
        DescriptionParseError: the structure does not match the expected layout.
    """
    if not isinstance(data, dict):
        raise DescriptionParseError(
            "Device description document must be a JSON object", path=json_path
        )

    document: DeviceDescriptionDocument = {}
    for vendor, vendor_entry in data.items():
        if not isinstance(vendor_entry, dict):
            raise DescriptionParseError(
                f"Vendor entry '{vendor}' must be an object", path=json_path
            )
        category = vendor_entry.get(VENDOR_NAME_KEY) or vendor
        for device_type, devices in vendor_entry.items():
            if device_type == VENDOR_NAME_KEY:
                continue
            if not isinstance(devices, dict):
                raise DescriptionParseError(
                    f"Device group '{vendor}.{device_type}' must be an object",
                    path=json_path,
                )
            for device, raw_config in devices.items():
                device_id = f"{vendor}.{device_type}.{device}"
                document[device_id] = DeviceDescriptionRecord(
                    category=str(category),
                    config=parse_device_description(device_id, raw_config, json_path),
                )
    return document


def _string_list(
    device_id: str, key: str, value: Any, json_path: Optional[str]
) -> List[str]:
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise DescriptionParseError(
            f"'{key}' of {device_id} must be a list of strings", path=json_path
        )
    return list(value)


def parse_device_description(
    device_id: str, raw_config: Any, json_path: Optional[str] = None
) -> DeviceDescription:
    """Validate and convert one raw device configuration."""
    if not isinstance(raw_config, dict):
        raise DescriptionParseError(
            f"Configuration of {device_id} must be an object", path=json_path
        )

    for key in ("product_name", "platform"):
        if not isinstance(raw_config.get(key), str):
            raise DescriptionParseError(
                f"'{key}' of {device_id} must be a string", path=json_path
            )

    upload_methods = _string_list(
        device_id, "upload_methods", raw_config.get("upload_methods", []), json_path
    )
    features = None
    if raw_config.get("features") is not None:
        features = _string_list(device_id, "features", raw_config["features"], json_path)

    optional: Dict[str, Optional[str]] = {}
    for key in _OPTIONAL_STRING_FIELDS:
        value = raw_config.get(key)
        optional[key] = None if value is None else str(value)

    return DeviceDescription(
        product_name=raw_config["product_name"],
        platform=raw_config["platform"],
        upload_methods=upload_methods,
        features=features,
        **optional,
    )


async def load_description_document(
    directory: str, parser: DescriptionParser
) -> DeviceDescriptionDocument:
    """Load targets.json from a resolved hardware directory."""
    return await parser.load_device_descriptions(
        os.path.join(directory, TARGETS_JSON_FILE)
    )


def lookup_device(
    document: DeviceDescriptionDocument, device_id: str
) -> DeviceDescriptionRecord:
    """
    Return the record stored under `device_id`.

    Raises:
        UnknownDeviceError: the id is not in the document.
    """
    record = document.get(device_id)
    if record is None:
        raise UnknownDeviceError(device_id)
    return record
