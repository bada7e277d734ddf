"""
fwtargets - firmware target description loader.

Resolves a firmware version selector to a local hardware directory, loads
its targets.json and derives the flashable device catalog and per-target
user defines.
"""

from .loader import DeviceDescriptionsLoader
from .models import (
    Device,
    DeviceDescription,
    FirmwareSource,
    FlashingMethod,
    GitBranch,
    GitCommit,
    GitPullRequest,
    GitRepository,
    GitTag,
    LocalPath,
    Target,
    build_selector,
)
from .user_defines import UserDefine, UserDefineKey

__all__ = [
    "DeviceDescriptionsLoader",
    "Device",
    "DeviceDescription",
    "FirmwareSource",
    "FlashingMethod",
    "GitBranch",
    "GitCommit",
    "GitPullRequest",
    "GitRepository",
    "GitTag",
    "LocalPath",
    "Target",
    "UserDefine",
    "UserDefineKey",
    "build_selector",
]
