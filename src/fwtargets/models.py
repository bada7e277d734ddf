"""
Data model for fwtargets.

Version selectors describe *which* revision of the target data set to use,
GitRepository describes *where* it lives, and the remaining dataclasses are
the parsed description document and the values derived from it.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Union

from fwtargets.constants import HARDWARE_DIR_NAME
from fwtargets.exceptions import InvalidRequestError, UnsupportedSourceError


class FirmwareSource(str, Enum):
    """Reference kinds a firmware version can be selected by."""

    GitTag = "GitTag"
    GitBranch = "GitBranch"
    GitCommit = "GitCommit"
    Local = "Local"
    GitPullRequest = "GitPullRequest"


class FlashingMethod(str, Enum):
    BetaflightPassthrough = "BetaflightPassthrough"
    DFU = "DFU"
    EdgeTxPassthrough = "EdgeTxPassthrough"
    STLink = "STLink"
    UART = "UART"
    WIFI = "WIFI"


class DeviceType(str, Enum):
    ExpressLRS = "ExpressLRS"


# =============================================================================
# Version selectors
# =============================================================================


@dataclass(frozen=True)
class GitBranch:
    name: str

    @property
    def source(self) -> FirmwareSource:
        return FirmwareSource.GitBranch


@dataclass(frozen=True)
class GitTag:
    name: str

    @property
    def source(self) -> FirmwareSource:
        return FirmwareSource.GitTag


@dataclass(frozen=True)
class GitCommit:
    hash: str

    @property
    def source(self) -> FirmwareSource:
        return FirmwareSource.GitCommit


@dataclass(frozen=True)
class GitPullRequest:
    """
    Pull request selector, resolved through its head commit.

    The head commit hash may be absent when the request arrives; resolution
    rejects it with InvalidRequestError before anything is fetched.
    """

    head_commit_hash: Optional[str]
    number: Optional[int] = None

    @property
    def source(self) -> FirmwareSource:
        return FirmwareSource.GitPullRequest


@dataclass(frozen=True)
class LocalPath:
    """Selector for a target data set already present on disk."""

    path: str

    @property
    def source(self) -> FirmwareSource:
        return FirmwareSource.Local


VersionSelector = Union[GitBranch, GitTag, GitCommit, GitPullRequest, LocalPath]


def _require(value: Optional[str], field_name: str, source: FirmwareSource) -> str:
    if not value:
        raise InvalidRequestError(
            f"{source.value} selector requires a non-empty {field_name}",
            field=field_name,
            value=value,
        )
    return value


def build_selector(
    source: Union[FirmwareSource, str],
    *,
    git_tag: Optional[str] = None,
    git_branch: Optional[str] = None,
    git_commit: Optional[str] = None,
    local_path: Optional[str] = None,
    git_pull_request: Optional[str] = None,
    pull_request_number: Optional[int] = None,
) -> VersionSelector:
    """
    Build a selector from a flat firmware version record.

    Only the payload field matching `source` is read. A pull request keeps a
    missing head commit hash so that resolution reports it; every other kind
    must carry its payload.

    Raises:
        UnsupportedSourceError: `source` is not a known FirmwareSource.
        InvalidRequestError: the payload for `source` is empty.
    """
    try:
        kind = FirmwareSource(source)
    except ValueError:
        raise UnsupportedSourceError(source) from None

    if kind is FirmwareSource.GitBranch:
        return GitBranch(_require(git_branch, "git_branch", kind))
    if kind is FirmwareSource.GitTag:
        return GitTag(_require(git_tag, "git_tag", kind))
    if kind is FirmwareSource.GitCommit:
        return GitCommit(_require(git_commit, "git_commit", kind))
    if kind is FirmwareSource.Local:
        return LocalPath(_require(local_path, "local_path", kind))
    if kind is FirmwareSource.GitPullRequest:
        return GitPullRequest(
            head_commit_hash=git_pull_request or None, number=pull_request_number
        )
    raise UnsupportedSourceError(kind)


# =============================================================================
# Repository reference
# =============================================================================


@dataclass(frozen=True)
class GitRepository:
    url: str
    src_folder: str = ""

    @property
    def hardware_subpath(self) -> str:
        """Repository-relative path of the hardware directory."""
        prefix = "" if self.src_folder in ("/", "") else f"{self.src_folder}/"
        return f"{prefix}{HARDWARE_DIR_NAME}"


# =============================================================================
# Device description document
# =============================================================================


@dataclass(frozen=True)
class DeviceDescription:
    """Raw configuration of one device as found in targets.json."""

    product_name: str
    platform: str
    upload_methods: List[str] = field(default_factory=list)
    features: Optional[List[str]] = None
    lua_name: Optional[str] = None
    layout_file: Optional[str] = None
    firmware: Optional[str] = None
    prior_target_name: Optional[str] = None
    min_version: Optional[str] = None

    def has_feature(self, feature: str) -> bool:
        return bool(self.features) and feature in self.features


@dataclass(frozen=True)
class DeviceDescriptionRecord:
    category: str
    config: DeviceDescription


DeviceDescriptionDocument = Dict[str, DeviceDescriptionRecord]


# =============================================================================
# Derived values
# =============================================================================


@dataclass(frozen=True)
class Target:
    id: str
    name: str
    flashing_method: FlashingMethod


@dataclass(frozen=True)
class Device:
    id: str
    name: str
    category: str
    targets: List[Target]
    lua_targets: List[Target] = field(default_factory=list)
    device_type: DeviceType = DeviceType.ExpressLRS
    supported: bool = True
