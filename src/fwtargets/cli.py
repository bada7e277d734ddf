# src/fwtargets/cli.py

import argparse
import asyncio
import json
import sys
from dataclasses import asdict
from enum import Enum
from pathlib import Path
from typing import Any, List, Optional

from fwtargets import log_utils
from fwtargets.config import LoaderConfig, load_config
from fwtargets.constants import DEFAULT_GIT_BRANCH
from fwtargets.exceptions import FwTargetsError
from fwtargets.loader import DeviceDescriptionsLoader
from fwtargets.models import (
    GitBranch,
    GitCommit,
    GitPullRequest,
    GitRepository,
    GitTag,
    LocalPath,
    VersionSelector,
)


def _to_jsonable(value: Any) -> Any:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {k: _to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_jsonable(v) for v in value]
    return value


def _dump(value: Any) -> str:
    if isinstance(value, list):
        payload = [_to_jsonable(asdict(item)) for item in value]
    else:
        payload = _to_jsonable(asdict(value))
    return json.dumps(payload, indent=2)


def selector_from_args(args: argparse.Namespace) -> VersionSelector:
    """
    Return the version selector named by the mutually exclusive selector flags.

    Falls back to the default branch when none is given.
    """
    if args.tag is not None:
        return GitTag(args.tag)
    if args.commit is not None:
        return GitCommit(args.commit)
    if args.pull_request is not None:
        return GitPullRequest(head_commit_hash=args.pull_request)
    if args.local is not None:
        return LocalPath(args.local)
    return GitBranch(args.branch or DEFAULT_GIT_BRANCH)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fwtargets",
        description="Resolve firmware target descriptions and derive build options.",
    )
    parser.add_argument("--config-dir", help="Directory holding fwtargets.yaml")
    parser.add_argument("--log-level", help="Log level (DEBUG, INFO, ...)")
    parser.add_argument(
        "--log-dir", help="Also write logs to fwtargets.log in this directory"
    )
    parser.add_argument("--repo-url", help="Firmware repository URL")
    parser.add_argument("--src-folder", help="Source folder inside the repository")
    parser.add_argument(
        "--lock-timeout-ms", type=int, help="Wait for exclusive access this long"
    )

    selector = parser.add_mutually_exclusive_group()
    selector.add_argument("--branch", help="Git branch (default: master)")
    selector.add_argument("--tag", help="Git tag")
    selector.add_argument("--commit", help="Git commit hash")
    selector.add_argument(
        "--pull-request", metavar="HEAD_COMMIT", help="Pull request head commit hash"
    )
    selector.add_argument("--local", metavar="PATH", help="Local firmware checkout")

    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("targets", help="List devices and their targets")
    device = subparsers.add_parser("device", help="Show a device's raw configuration")
    device.add_argument("target", help="Device id, e.g. happymodel.tx_2400.es24tx")
    options = subparsers.add_parser("options", help="List a device's user defines")
    options.add_argument("target", help="Device id, e.g. happymodel.rx_2400.ep")
    return parser


def _apply_overrides(config: LoaderConfig, args: argparse.Namespace) -> LoaderConfig:
    if args.repo_url:
        config.repository_url = args.repo_url
    if args.src_folder is not None:
        config.repository_src_folder = args.src_folder
    if args.lock_timeout_ms is not None:
        config.lock_timeout_ms = args.lock_timeout_ms
    if args.log_level:
        config.log_level = args.log_level
    if args.log_dir:
        config.log_dir = args.log_dir
    return config


async def run_command(
    args: argparse.Namespace, loader: DeviceDescriptionsLoader
) -> str:
    selector = selector_from_args(args)
    repository = GitRepository(
        url=loader.config.repository_url,
        src_folder=loader.config.repository_src_folder,
    )
    if args.command == "targets":
        return _dump(await loader.load_targets_list(selector, repository))
    if args.command == "device":
        return _dump(await loader.get_device_config(selector, args.target, repository))
    return _dump(await loader.target_device_options(selector, args.target, repository))


def main(argv: Optional[List[str]] = None) -> int:
    """
    Entry point of the fwtargets command.

    Returns:
        int: 0 on success, 1 when a fwtargets error was reported.
    """
    args = build_parser().parse_args(argv)

    try:
        config = _apply_overrides(load_config(args.config_dir), args)
    except FwTargetsError as e:
        log_utils.logger.error(f"Failed to load configuration: {e}")
        return 1
    if config.log_level:
        log_utils.set_log_level(config.log_level)
    if config.log_dir:
        log_utils.add_file_logging(Path(config.log_dir), config.log_level or "INFO")
    if config.lock_timeout_ms <= 0:
        log_utils.logger.error("--lock-timeout-ms must be greater than 0")
        return 1

    loader = DeviceDescriptionsLoader(config)
    try:
        output = asyncio.run(run_command(args, loader))
    except FwTargetsError as e:
        log_utils.logger.error(str(e))
        return 1

    print(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
