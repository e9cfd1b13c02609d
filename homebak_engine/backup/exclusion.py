"""
Exclusion set construction.

Exclude paths are expanded once per run, before any inclusion walking, into the
full set of absolute paths they cover. Failures here are never fatal: an exclude
path that cannot be inspected is dropped with a warning, and unreadable entries
below an excluded directory are skipped.
"""

from __future__ import annotations

import logging
import os
import stat
from pathlib import Path
from typing import Iterable

from homebak_engine.paths import PathContext

logger = logging.getLogger(__name__)


def build_exclusion_set(raw_paths: Iterable[str], context: PathContext) -> frozenset[Path]:
    """
    Expand exclude paths into a set of absolute paths.

    Parameters
    ----------
    raw_paths:
        User-supplied exclude paths (absolute or relative to ``context.cwd``).
    context:
        Path context used for resolution.

    Returns
    -------
    frozenset[pathlib.Path]
        Every excluded path: each file given, and each directory given together
        with all of its descendants.
    """
    excluded: set[Path] = set()

    for raw_path in raw_paths:
        absolute_path = context.resolve(raw_path)

        try:
            stat_result = absolute_path.stat()
        except OSError as exc:
            logger.warning(
                "Exclude path %s cannot be inspected and is removed from the exclude list: %s",
                raw_path,
                exc,
            )
            continue

        excluded.add(absolute_path)
        if stat.S_ISDIR(stat_result.st_mode):
            excluded.update(_iter_descendants(absolute_path))

    return frozenset(excluded)


def _iter_descendants(directory: Path) -> Iterable[Path]:
    # Unreadable subdirectories are listed by their parent but not entered.
    for directory_path, directory_names, file_names in os.walk(directory, followlinks=False):
        current = Path(directory_path)
        for name in directory_names:
            yield current / name
        for name in file_names:
            yield current / name
