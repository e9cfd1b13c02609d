"""
Archive output path resolution.

The archive path comes from, in order of preference: the explicit output path,
the config's backup name, or a generated ``Backup<YYYYMMDDHHMMSS>.hbak`` in the
working directory. An existing file is overwritten after a warning and a short
pause; an existing directory is an error.
"""

from __future__ import annotations

import logging
import stat
import time
from pathlib import Path
from typing import Callable

from homebak_engine.clock import Clock, format_compact_timestamp
from homebak_engine.config import BackupConfig
from homebak_engine.data_models import BackupRequest
from homebak_engine.errors import OutputIsDirectoryError, PathStatError
from homebak_engine.paths import PathContext

logger = logging.getLogger(__name__)

ARCHIVE_EXTENSION = ".hbak"
OVERWRITE_WARNING_DELAY_SECONDS = 5.0


def resolve_output_path(
    *,
    request: BackupRequest,
    config: BackupConfig | None,
    context: PathContext,
    clock: Clock,
    sleep: Callable[[float], None] = time.sleep,
) -> Path:
    """
    Decide where the archive is written.

    Parameters
    ----------
    request:
        Backup request; ``output_path`` and ``use_config`` are consulted.
    config:
        Loaded backup config, or None when config usage is disabled.
    context:
        Path context for resolving relative paths.
    clock:
        Time source for generated names.
    sleep:
        Called with the warning delay before an existing file is accepted.

    Returns
    -------
    pathlib.Path
        Absolute archive path.

    Raises
    ------
    OutputIsDirectoryError
        If the chosen path is an existing directory.
    PathStatError
        If the chosen path exists but cannot be inspected.
    """
    if request.output_path:
        return _check_output_candidate(context.resolve(request.output_path), sleep=sleep)

    backup_name = config.backup_name if (request.use_config and config is not None) else None
    if not backup_name:
        generated_name = f"Backup{format_compact_timestamp(clock.now_ns())}{ARCHIVE_EXTENSION}"
        return context.cwd / generated_name

    if not backup_name.endswith(ARCHIVE_EXTENSION):
        backup_name += ARCHIVE_EXTENSION
    return _check_output_candidate(context.resolve(backup_name), sleep=sleep)


def _check_output_candidate(path: Path, *, sleep: Callable[[float], None]) -> Path:
    try:
        path_stat = path.stat()
    except FileNotFoundError:
        return path
    except OSError as exc:
        raise PathStatError(f"Cannot access output path: {path} ({exc!s})") from exc

    if stat.S_ISDIR(path_stat.st_mode):
        raise OutputIsDirectoryError(f"The output path '{path}' is already taken as a directory")

    logger.warning("The output file '%s' already exists and will be overwritten", path)
    sleep(OVERWRITE_WARNING_DELAY_SECONDS)
    return path
