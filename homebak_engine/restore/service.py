"""
Restore and extract orchestration for homebak.

Both operations take an archive path, validate that it names an existing file,
and hand it to the archive reader together with its restore mapping sidecar.
"""

from __future__ import annotations

import logging
import stat
from pathlib import Path

from homebak_engine.archive import UnpackResult, extract_archive, restore_archive
from homebak_engine.data_models import ExtractRequest, RestoreRequest
from homebak_engine.errors import PathIsDirectoryError, PathNotFoundError, PathStatError
from homebak_engine.paths import PathContext

logger = logging.getLogger(__name__)


def resolve_archive_path(raw_path: str, context: PathContext) -> Path:
    """
    Resolve an archive path and require it to be an existing file.

    Raises
    ------
    PathNotFoundError
        If nothing exists at the path.
    PathIsDirectoryError
        If the path is a directory.
    PathStatError
        If the path cannot be inspected.
    """
    archive_path = context.resolve(raw_path)
    try:
        archive_stat = archive_path.stat()
    except FileNotFoundError as exc:
        raise PathNotFoundError(f"Archive does not exist: {archive_path}") from exc
    except OSError as exc:
        raise PathStatError(f"Cannot access archive: {archive_path} ({exc!s})") from exc

    if stat.S_ISDIR(archive_stat.st_mode):
        raise PathIsDirectoryError(f"The given path is a directory, not a file: {archive_path}")
    return archive_path


def run_restore(request: RestoreRequest, *, context: PathContext | None = None) -> UnpackResult:
    """
    Restore an archive's entries to their original locations.

    Parameters
    ----------
    request:
        Restore request naming the archive.
    context:
        Path context; its home directory is substituted into stored paths.

    Returns
    -------
    UnpackResult
        Destination of every restored member.
    """
    run_context = context or PathContext.from_environment()
    archive_path = resolve_archive_path(request.archive_path, run_context)

    result = restore_archive(archive_path, run_context)
    print(f"Restored {len(result.written_paths)} entries from {archive_path}")
    return result


def run_extract(request: ExtractRequest, *, context: PathContext | None = None) -> UnpackResult:
    """
    Extract an archive's entries below a destination directory.

    The destination defaults to ``<cwd>/<archive file name without suffix>``.
    """
    run_context = context or PathContext.from_environment()
    archive_path = resolve_archive_path(request.archive_path, run_context)

    if request.destination:
        destination_root = run_context.resolve(request.destination)
    else:
        destination_root = run_context.cwd / archive_path.stem
    logger.info("Extracting %s into %s", archive_path, destination_root)

    result = extract_archive(archive_path, destination_root)
    print(f"Extracted {len(result.written_paths)} entries into {destination_root}")
    return result
