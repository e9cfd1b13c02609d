"""
Domain exceptions for homebak.

Notes
-----
Engine code raises a domain exception for every expected failure mode so the
CLI can report it and exit non-zero. Wrapped ``OSError`` / ``JSONDecodeError``
instances are always chained with ``raise ... from exc``.
"""

from __future__ import annotations


class HomebakError(RuntimeError):
    """Base exception for all homebak domain failures."""


class PathStatError(HomebakError):
    """Raised when a path exists but cannot be inspected (permissions, I/O)."""


class PathNotFoundError(PathStatError):
    """Raised when a required path does not exist."""


class PathIsDirectoryError(HomebakError):
    """Raised when a file was required but the path is a directory."""


class OutputIsDirectoryError(HomebakError):
    """Raised when the resolved archive output path is an existing directory."""


class SelfRecursionError(HomebakError):
    """Raised when the output archive would be packed into itself."""


class DuplicateHeaderError(HomebakError):
    """Raised when an archive header name is already present in the restore mapping."""


class NoInputSpecifiedError(HomebakError):
    """Raised when a backup is requested without paths, tags or a usable config."""


class UnknownTagError(HomebakError):
    """Raised when a tag name is not present in the tag registry."""


class ConfigError(HomebakError):
    """Base class for backup config file failures."""


class ConfigReadError(ConfigError):
    """Raised when the backup config file cannot be read."""


class ConfigParseError(ConfigError):
    """Raised when the backup config file is not valid JSON or has the wrong shape."""


class NoModeSelectedError(HomebakError):
    """Raised when none of backup, restore, extract or version was requested."""


class ArchiveError(HomebakError):
    """Raised when an archive cannot be written or read."""


class RestoreMappingError(HomebakError):
    """Raised when the restore mapping sidecar is missing, malformed or incomplete."""
