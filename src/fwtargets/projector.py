"""
Projecting raw device descriptions onto the public Device/Target shape.
"""

from typing import Dict, List

from fwtargets.exceptions import UnrecognizedUploadMethodError
from fwtargets.models import (
    Device,
    DeviceDescription,
    DeviceDescriptionDocument,
    DeviceType,
    FlashingMethod,
    Target,
)

UPLOAD_METHOD_FLASHING_METHODS: Dict[str, FlashingMethod] = {
    "betaflight": FlashingMethod.BetaflightPassthrough,
    "dfu": FlashingMethod.DFU,
    "etx": FlashingMethod.EdgeTxPassthrough,
    "stlink": FlashingMethod.STLink,
    "uart": FlashingMethod.UART,
    "wifi": FlashingMethod.WIFI,
}


def upload_method_to_flashing_method(upload_method: str) -> FlashingMethod:
    """
    Map an upload method from targets.json to a FlashingMethod, ignoring case.

    Raises:
        UnrecognizedUploadMethodError: the method is not one of the known ones.
    """
    try:
        return UPLOAD_METHOD_FLASHING_METHODS[upload_method.lower()]
    except KeyError:
        raise UnrecognizedUploadMethodError(upload_method) from None


def config_to_device(
    device_id: str, category: str, config: DeviceDescription
) -> Device:
    """
    Build a Device with one Target per upload method, in upload method order.

    Target ids keep the upload method exactly as written in the description.
    """
    targets = []
    for upload_method in config.upload_methods:
        target_name = f"{device_id}.{upload_method}"
        targets.append(
            Target(
                id=target_name,
                name=target_name,
                flashing_method=upload_method_to_flashing_method(upload_method),
            )
        )
    return Device(
        id=device_id,
        name=config.product_name,
        category=category,
        targets=targets,
        lua_targets=[],
        device_type=DeviceType.ExpressLRS,
        supported=True,
    )


def project_devices(document: DeviceDescriptionDocument) -> List[Device]:
    return [
        config_to_device(device_id, record.category, record.config)
        for device_id, record in document.items()
    ]
