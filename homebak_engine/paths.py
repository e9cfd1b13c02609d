"""
Path resolution and home-directory portability.

This module turns user-supplied paths into canonical absolute paths and
converts parent paths to and from their portable form, where the user's home
directory is replaced by a fixed placeholder token. It performs no filesystem
access.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

HOME_PLACEHOLDER = "#/HomeDir#/"


@dataclass(frozen=True, slots=True)
class PathContext:
    """
    Per-invocation directories used to interpret paths.

    Attributes
    ----------
    home_dir:
        The user's home directory (absolute).
    cwd:
        The invocation's working directory (absolute).
    """

    home_dir: Path
    cwd: Path

    @classmethod
    def from_environment(cls) -> PathContext:
        """Capture the current user's home directory and working directory."""
        return cls(home_dir=Path.home(), cwd=Path.cwd())

    def resolve(self, path: str | os.PathLike[str]) -> Path:
        """
        Return an absolute, normalized form of ``path``.

        Parameters
        ----------
        path:
            Absolute or relative path. Relative paths are interpreted against
            ``cwd``.

        Returns
        -------
        pathlib.Path
            Absolute path with ``.`` / ``..`` segments collapsed. Symlinks are
            not resolved.
        """
        return Path(os.path.normpath(os.path.join(self.cwd, os.fspath(path))))

    def to_portable(self, parent_path: str) -> str:
        """
        Replace a leading home directory in ``parent_path`` with the placeholder.

        Parameters
        ----------
        parent_path:
            Parent path string as recorded in a slot (ends with a separator).

        Returns
        -------
        str
            Portable parent path. Paths outside the home directory are returned
            unchanged.
        """
        home = str(self.home_dir).rstrip(os.sep)
        if parent_path == home or parent_path == home + os.sep:
            return HOME_PLACEHOLDER
        if parent_path.startswith(home + os.sep):
            return HOME_PLACEHOLDER + parent_path[len(home) + 1 :]
        return parent_path

    def from_portable(self, parent_path: str) -> str:
        """
        Substitute this context's home directory back into a portable parent path.

        Parameters
        ----------
        parent_path:
            Parent path as stored in a restore mapping.

        Returns
        -------
        str
            Parent path rooted at ``home_dir`` when it carries the placeholder,
            otherwise ``parent_path`` unchanged.
        """
        if not parent_path.startswith(HOME_PLACEHOLDER):
            return parent_path
        home = str(self.home_dir).rstrip(os.sep)
        return home + os.sep + parent_path[len(HOME_PLACEHOLDER) :]
