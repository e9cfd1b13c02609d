"""Invocation data models for homebak.

This module defines the typed, immutable record of what the user asked for in
one invocation. Exactly one mode is active per invocation; the mode-specific
request carries that mode's inputs.

The models are standard-library-only (dataclasses), like the rest of the engine.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from homebak_engine.config import DEFAULT_CONFIG_FILE_NAME


class InvocationMode(str, Enum):
    """Mutually exclusive invocation modes."""

    BACKUP = "backup"
    RESTORE = "restore"
    EXTRACT = "extract"
    VERSION = "version"
    LIST_TAGS = "list_tags"


@dataclass(frozen=True, slots=True)
class BackupRequest:
    """
    Inputs for a backup run.

    Attributes
    ----------
    input_paths:
        Explicit paths to back up, in the order given.
    exclude_paths:
        Paths whose whole content must be left out of the archive.
    tags:
        Tag names to back up.
    output_path:
        Explicit archive path, or None to derive one.
    use_config:
        Whether the backup config file is also consulted.
    config_path:
        Path of the backup config file (relative paths use the working directory).
    dry_run:
        Build and print the plan without writing the archive.
    max_items:
        Maximum number of entries listed in the printed plan.
    """

    input_paths: tuple[str, ...] = ()
    exclude_paths: tuple[str, ...] = ()
    tags: tuple[str, ...] = ()
    output_path: str | None = None
    use_config: bool = False
    config_path: str = DEFAULT_CONFIG_FILE_NAME
    dry_run: bool = False
    max_items: int = 100


@dataclass(frozen=True, slots=True)
class RestoreRequest:
    """Archive to restore to its original locations."""

    archive_path: str


@dataclass(frozen=True, slots=True)
class ExtractRequest:
    """
    Archive to extract into a destination directory.

    Attributes
    ----------
    archive_path:
        Archive file to read.
    destination:
        Target directory, or None for ``<cwd>/<archive stem>``.
    """

    archive_path: str
    destination: str | None = None


@dataclass(frozen=True, slots=True)
class InputData:
    """User intent for one invocation."""

    mode: InvocationMode | None
    backup: BackupRequest = field(default_factory=BackupRequest)
    restore: RestoreRequest | None = None
    extract: ExtractRequest | None = None
