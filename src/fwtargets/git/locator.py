"""
Locating the git executable.
"""

import shutil
from abc import ABC, abstractmethod
from typing import Optional

from fwtargets.constants import GIT_EXECUTABLE_NAME
from fwtargets.exceptions import ToolNotFoundError


class ToolLocator(ABC):
    """Finds an executable on a search path."""

    @abstractmethod
    def find(self, search_path: Optional[str]) -> str:
        """
        Return the absolute path of the executable.

        Parameters:
            search_path (Optional[str]): os.pathsep separated directories to search; None means the process PATH.

        Raises:
            ToolNotFoundError: the executable is not on `search_path`.
        """


class GitExecutableLocator(ToolLocator):
    def __init__(self, executable: str = GIT_EXECUTABLE_NAME) -> None:
        self.executable = executable

    def find(self, search_path: Optional[str]) -> str:
        found = shutil.which(self.executable, path=search_path)
        if not found:
            raise ToolNotFoundError(
                self.executable,
                search_path=search_path,
                details=f"searched PATH={search_path}",
            )
        return found
