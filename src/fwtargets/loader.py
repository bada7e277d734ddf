"""
Device descriptions loader.

Resolves a version selector and repository to a local hardware directory,
loads its targets.json and derives the device catalog or a target's user
defines. Every resolve-and-load cycle runs under the loader's
SingleFlightLock so no two operations observe a half-written directory.
"""

import logging
import os
from typing import Callable, List, Optional

from fwtargets.config import LoaderConfig
from fwtargets.constants import HARDWARE_DIR_NAME
from fwtargets.descriptions import (
    DescriptionParser,
    TargetsJSONLoader,
    load_description_document,
    lookup_device,
)
from fwtargets.exceptions import (
    InvalidRequestError,
    ToolNotFoundError,
    UnsupportedSourceError,
)
from fwtargets.git import (
    GitExecutableLocator,
    GitFirmwareDownloader,
    SourceFetcher,
    ToolLocator,
)
from fwtargets.log_utils import logger as default_logger
from fwtargets.models import (
    Device,
    DeviceDescription,
    DeviceDescriptionDocument,
    GitBranch,
    GitCommit,
    GitPullRequest,
    GitRepository,
    GitTag,
    LocalPath,
    VersionSelector,
)
from fwtargets.options import derive_user_defines
from fwtargets.projector import project_devices
from fwtargets.single_flight import SingleFlightLock
from fwtargets.user_defines import UserDefine

FetcherFactory = Callable[[str, str], SourceFetcher]


class DeviceDescriptionsLoader:
    """
    Loads device descriptions for a firmware version.

    Collaborators default to the git-backed production implementations and
    can be replaced, e.g. with in-memory fakes in tests.
    """

    def __init__(
        self,
        config: Optional[LoaderConfig] = None,
        *,
        tool_locator: Optional[ToolLocator] = None,
        fetcher_factory: Optional[FetcherFactory] = None,
        parser: Optional[DescriptionParser] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        """
        Parameters:
            config (Optional[LoaderConfig]): Search path, storage path and lock timeout; defaults when omitted.
            tool_locator (Optional[ToolLocator]): Finds git; GitExecutableLocator by default.
            fetcher_factory (Optional[FetcherFactory]): Called with (storage path, git path) to build the SourceFetcher.
            parser (Optional[DescriptionParser]): targets.json parser; TargetsJSONLoader by default.
            logger (Optional[logging.Logger]): Log sink; the package logger by default.
        """
        self.config = config or LoaderConfig()
        self.tool_locator = tool_locator or GitExecutableLocator()
        self.fetcher_factory = fetcher_factory or GitFirmwareDownloader
        self.parser = parser or TargetsJSONLoader()
        self.logger = logger or default_logger
        self.lock = SingleFlightLock()

    async def load_targets_list(
        self, selector: VersionSelector, repository: GitRepository
    ) -> List[Device]:
        """
        Return every device of the target data set selected by `selector`.

        Raises:
            LockTimeoutError: exclusive access was not obtained in time.
            UnrecognizedUploadMethodError: a device lists an unknown upload method.
        """
        document = await self._load_document(selector, repository)
        return project_devices(document)

    async def get_device_config(
        self, selector: VersionSelector, target: str, repository: GitRepository
    ) -> DeviceDescription:
        """
        Return the raw configuration of device `target`.

        Raises:
            UnknownDeviceError: `target` is not in the loaded document.
        """
        document = await self._load_document(selector, repository)
        return lookup_device(document, target).config

    async def target_device_options(
        self, selector: VersionSelector, target: str, repository: GitRepository
    ) -> List[UserDefine]:
        """Return the user defines applicable to device `target`, in order."""
        config = await self.get_device_config(selector, target, repository)
        return derive_user_defines(target, config)

    async def _load_document(
        self, selector: VersionSelector, repository: GitRepository
    ) -> DeviceDescriptionDocument:
        async with self.lock.exclusive(self.config.lock_timeout_ms):
            directory = await self._resolve_targets_directory(selector, repository)
            return await load_description_document(directory, self.parser)

    def _find_git(self) -> str:
        try:
            git_path = self.tool_locator.find(self.config.search_path)
        except ToolNotFoundError as e:
            self.logger.error(
                "failed to find git (PATH=%s): %s", self.config.search_path, e
            )
            raise
        self.logger.debug("git path: %s", git_path)
        return git_path

    async def _resolve_targets_directory(
        self, selector: VersionSelector, repository: GitRepository
    ) -> str:
        """
        Materialize the hardware directory for `selector` and return its path.

        Raises:
            ToolNotFoundError: git is not on the configured search path.
            InvalidRequestError: a pull request selector has no head commit.
            UnsupportedSourceError: `selector` is not a known selector type.
        """
        if isinstance(selector, GitPullRequest) and not selector.head_commit_hash:
            raise InvalidRequestError(
                "empty GitPullRequest head commit hash",
                field="head_commit_hash",
                value=selector.head_commit_hash,
            )

        git_path = self._find_git()
        fetcher = self.fetcher_factory(self.config.target_storage_path, git_path)
        subpath = repository.hardware_subpath

        if isinstance(selector, GitBranch):
            result = await fetcher.checkout_branch(repository.url, subpath, selector.name)
            return result.path
        if isinstance(selector, GitCommit):
            result = await fetcher.checkout_commit(repository.url, subpath, selector.hash)
            return result.path
        if isinstance(selector, GitTag):
            result = await fetcher.checkout_tag(repository.url, subpath, selector.name)
            return result.path
        if isinstance(selector, GitPullRequest):
            result = await fetcher.checkout_commit(
                repository.url, subpath, selector.head_commit_hash
            )
            return result.path
        if isinstance(selector, LocalPath):
            return os.path.join(selector.path, HARDWARE_DIR_NAME)
        raise UnsupportedSourceError(getattr(selector, "source", type(selector).__name__))
