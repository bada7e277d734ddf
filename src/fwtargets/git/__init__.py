"""
Git capabilities used to materialize target data.
"""

from .fetcher import CheckoutResult, GitFirmwareDownloader, SourceFetcher
from .locator import GitExecutableLocator, ToolLocator

__all__ = [
    "CheckoutResult",
    "GitExecutableLocator",
    "GitFirmwareDownloader",
    "SourceFetcher",
    "ToolLocator",
]
