"""
Materializing a repository subdirectory at a given revision.

GitFirmwareDownloader keeps one sparse, shallow working copy per repository
URL under its base directory and moves it to the requested revision on
every checkout. Callers are expected to serialize access to the base
directory (see SingleFlightLock).
"""

import asyncio
import hashlib
import os
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List

from fwtargets.constants import GIT_FETCH_DEPTH, GIT_REMOTE_NAME
from fwtargets.exceptions import GitCommandError
from fwtargets.log_utils import logger


@dataclass(frozen=True)
class CheckoutResult:
    path: str
    """Local directory holding the requested subpath"""


class SourceFetcher(ABC):
    """Materializes a repository subpath at a branch, tag or commit."""

    @abstractmethod
    async def checkout_branch(
        self, repo_url: str, subpath: str, branch: str
    ) -> CheckoutResult:
        """Check out the head of `branch` and return the local subpath directory."""

    @abstractmethod
    async def checkout_commit(
        self, repo_url: str, subpath: str, commit: str
    ) -> CheckoutResult:
        """Check out `commit` and return the local subpath directory."""

    @abstractmethod
    async def checkout_tag(
        self, repo_url: str, subpath: str, tag: str
    ) -> CheckoutResult:
        """Check out `tag` and return the local subpath directory."""


def repository_cache_dirname(repo_url: str) -> str:
    """Stable directory name for a repository URL."""
    return hashlib.sha1(repo_url.encode("utf-8")).hexdigest()


class GitFirmwareDownloader(SourceFetcher):
    """SourceFetcher driving the git executable."""

    def __init__(self, base_directory: str, git_binary_location: str) -> None:
        """
        Parameters:
            base_directory (str): Directory under which working copies are kept.
            git_binary_location (str): Absolute path of the git executable.
        """
        self.base_directory = base_directory
        self.git_binary_location = git_binary_location

    async def checkout_branch(
        self, repo_url: str, subpath: str, branch: str
    ) -> CheckoutResult:
        return await self._checkout(repo_url, subpath, f"refs/heads/{branch}")

    async def checkout_commit(
        self, repo_url: str, subpath: str, commit: str
    ) -> CheckoutResult:
        return await self._checkout(repo_url, subpath, commit)

    async def checkout_tag(
        self, repo_url: str, subpath: str, tag: str
    ) -> CheckoutResult:
        return await self._checkout(repo_url, subpath, f"refs/tags/{tag}")

    def _repo_dir(self, repo_url: str) -> str:
        return os.path.join(self.base_directory, repository_cache_dirname(repo_url))

    async def _checkout(self, repo_url: str, subpath: str, ref: str) -> CheckoutResult:
        repo_dir = self._repo_dir(repo_url)
        await self._ensure_repository(repo_url, repo_dir)

        logger.debug(f"Checking out {ref} of {repo_url} ({subpath}) into {repo_dir}")
        await self._git(
            repo_dir, "fetch", f"--depth={GIT_FETCH_DEPTH}", GIT_REMOTE_NAME, ref
        )
        await self._git(repo_dir, "sparse-checkout", "set", subpath)
        await self._git(repo_dir, "checkout", "--force", "FETCH_HEAD")

        return CheckoutResult(path=os.path.join(repo_dir, *subpath.split("/")))

    async def _ensure_repository(self, repo_url: str, repo_dir: str) -> None:
        if not os.path.isdir(os.path.join(repo_dir, ".git")):
            logger.info(f"Initializing target data repository for {repo_url}")
            os.makedirs(repo_dir, exist_ok=True)
            await self._git(repo_dir, "init", "--quiet")

        # An interrupted earlier setup can leave a repository without the remote
        if await self._has_remote(repo_dir):
            await self._git(repo_dir, "remote", "set-url", GIT_REMOTE_NAME, repo_url)
        else:
            await self._git(repo_dir, "remote", "add", GIT_REMOTE_NAME, repo_url)

    async def _has_remote(self, repo_dir: str) -> bool:
        result = await self._run_git(repo_dir, "remote", "get-url", GIT_REMOTE_NAME)
        if result.returncode != 0:
            logger.debug(f"No {GIT_REMOTE_NAME} remote configured in {repo_dir}")
            return False
        return True

    async def _run_git(
        self, repo_dir: str, *args: str
    ) -> "subprocess.CompletedProcess[str]":
        command: List[str] = [self.git_binary_location, "-C", repo_dir, *args]
        return await asyncio.to_thread(
            subprocess.run,
            command,
            capture_output=True,
            text=True,
            check=False,
        )

    async def _git(self, repo_dir: str, *args: str) -> str:
        result = await self._run_git(repo_dir, *args)
        if result.returncode != 0:
            logger.error(
                "git %s failed (%d): %s", args[0], result.returncode, result.stderr
            )
            raise GitCommandError(result.args, result.returncode, result.stderr)
        return result.stdout
