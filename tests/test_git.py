"""
Tests for the git locator and GitFirmwareDownloader.

subprocess.run is replaced with a recorder so no real git process starts.
"""

import os
import subprocess
from unittest.mock import patch

import pytest

from fwtargets.exceptions import GitCommandError, ToolNotFoundError
from fwtargets.git import GitExecutableLocator, GitFirmwareDownloader
from fwtargets.git.fetcher import repository_cache_dirname

pytestmark = [pytest.mark.unit, pytest.mark.core]

REPO_URL = "https://github.com/ExpressLRS/ExpressLRS"


class GitRecorder:
    """Stands in for subprocess.run and records git argument vectors."""

    def __init__(self, fail_on=(), returncode=128, stderr="fatal: error"):
        self.commands = []
        self.fail_on = (fail_on,) if isinstance(fail_on, str) else tuple(fail_on)
        self.returncode = returncode
        self.stderr = stderr

    def __call__(self, command, **kwargs):
        self.commands.append(command)
        if any(arg in command for arg in self.fail_on):
            return subprocess.CompletedProcess(command, self.returncode, "", self.stderr)
        return subprocess.CompletedProcess(command, 0, "", "")

    def git_args(self):
        # Drop "<git> -C <dir>"
        return [command[3:] for command in self.commands]


class TestGitExecutableLocator:
    def test_find_uses_search_path(self):
        with patch("fwtargets.git.locator.shutil.which", return_value="/opt/bin/git") as which:
            assert GitExecutableLocator().find("/opt/bin") == "/opt/bin/git"
        which.assert_called_once_with("git", path="/opt/bin")

    def test_not_found_raises(self):
        with patch("fwtargets.git.locator.shutil.which", return_value=None):
            with pytest.raises(ToolNotFoundError) as exc_info:
                GitExecutableLocator().find("/nowhere")
        assert exc_info.value.tool == "git"
        assert exc_info.value.search_path == "/nowhere"

    def test_finds_executable_on_real_directory(self, tmp_path):
        git = tmp_path / "git"
        git.write_text("#!/bin/sh\n")
        git.chmod(0o755)
        assert GitExecutableLocator().find(str(tmp_path)) == str(git)


@pytest.mark.asyncio
class TestGitFirmwareDownloader:
    async def test_first_checkout_initializes_repository(self, tmp_path, monkeypatch):
        recorder = GitRecorder(fail_on="get-url", returncode=2)
        monkeypatch.setattr(subprocess, "run", recorder)
        downloader = GitFirmwareDownloader(str(tmp_path), "/usr/bin/git")

        result = await downloader.checkout_branch(REPO_URL, "src/hardware", "master")

        repo_dir = os.path.join(str(tmp_path), repository_cache_dirname(REPO_URL))
        assert result.path == os.path.join(repo_dir, "src", "hardware")
        assert os.path.isdir(repo_dir)
        assert all(c[:3] == ["/usr/bin/git", "-C", repo_dir] for c in recorder.commands)
        assert recorder.git_args() == [
            ["init", "--quiet"],
            ["remote", "get-url", "origin"],
            ["remote", "add", "origin", REPO_URL],
            ["fetch", "--depth=1", "origin", "refs/heads/master"],
            ["sparse-checkout", "set", "src/hardware"],
            ["checkout", "--force", "FETCH_HEAD"],
        ]

    async def test_existing_repository_is_reused(self, tmp_path, monkeypatch):
        recorder = GitRecorder()
        monkeypatch.setattr(subprocess, "run", recorder)
        repo_dir = tmp_path / repository_cache_dirname(REPO_URL)
        (repo_dir / ".git").mkdir(parents=True)
        downloader = GitFirmwareDownloader(str(tmp_path), "git")

        await downloader.checkout_tag(REPO_URL, "hardware", "3.3.0")

        assert recorder.git_args() == [
            ["remote", "get-url", "origin"],
            ["remote", "set-url", "origin", REPO_URL],
            ["fetch", "--depth=1", "origin", "refs/tags/3.3.0"],
            ["sparse-checkout", "set", "hardware"],
            ["checkout", "--force", "FETCH_HEAD"],
        ]

    async def test_repository_without_remote_gets_remote_added(
        self, tmp_path, monkeypatch
    ):
        """A cache left behind after `git init` but before `remote add` recovers."""
        recorder = GitRecorder(
            fail_on="get-url", returncode=2, stderr="error: No such remote 'origin'"
        )
        monkeypatch.setattr(subprocess, "run", recorder)
        repo_dir = tmp_path / repository_cache_dirname(REPO_URL)
        (repo_dir / ".git").mkdir(parents=True)
        downloader = GitFirmwareDownloader(str(tmp_path), "git")

        result = await downloader.checkout_branch(REPO_URL, "hardware", "master")

        assert result.path == os.path.join(str(repo_dir), "hardware")
        assert recorder.git_args() == [
            ["remote", "get-url", "origin"],
            ["remote", "add", "origin", REPO_URL],
            ["fetch", "--depth=1", "origin", "refs/heads/master"],
            ["sparse-checkout", "set", "hardware"],
            ["checkout", "--force", "FETCH_HEAD"],
        ]

    async def test_failed_remote_add_is_retried_on_next_checkout(
        self, tmp_path, monkeypatch
    ):
        failing = GitRecorder(fail_on=("get-url", "add"), returncode=2)
        monkeypatch.setattr(subprocess, "run", failing)
        downloader = GitFirmwareDownloader(str(tmp_path), "git")

        with pytest.raises(GitCommandError):
            await downloader.checkout_branch(REPO_URL, "hardware", "master")
        assert os.path.isdir(tmp_path / repository_cache_dirname(REPO_URL))
        (tmp_path / repository_cache_dirname(REPO_URL) / ".git").mkdir()

        retry = GitRecorder(fail_on="get-url", returncode=2)
        monkeypatch.setattr(subprocess, "run", retry)
        await downloader.checkout_branch(REPO_URL, "hardware", "master")

        assert ["init", "--quiet"] not in retry.git_args()
        assert ["remote", "add", "origin", REPO_URL] in retry.git_args()

    async def test_commit_fetches_bare_hash(self, tmp_path, monkeypatch):
        recorder = GitRecorder()
        monkeypatch.setattr(subprocess, "run", recorder)
        downloader = GitFirmwareDownloader(str(tmp_path), "git")

        await downloader.checkout_commit(REPO_URL, "hardware", "0123abcd")

        assert ["fetch", "--depth=1", "origin", "0123abcd"] in recorder.git_args()

    async def test_failed_fetch_raises_git_command_error(self, tmp_path, monkeypatch):
        recorder = GitRecorder(fail_on="fetch", stderr="fatal: couldn't find remote ref")
        monkeypatch.setattr(subprocess, "run", recorder)
        downloader = GitFirmwareDownloader(str(tmp_path), "git")

        with pytest.raises(GitCommandError) as exc_info:
            await downloader.checkout_branch(REPO_URL, "hardware", "missing")

        assert exc_info.value.returncode == 128
        assert "couldn't find remote ref" in str(exc_info.value)
        assert not any("checkout" in c for c in recorder.git_args())


class TestRepositoryCacheDirname:
    def test_stable_per_url(self):
        assert repository_cache_dirname(REPO_URL) == repository_cache_dirname(REPO_URL)
        assert repository_cache_dirname(REPO_URL) != repository_cache_dirname(
            REPO_URL + ".git"
        )
