"""
Inclusion walking: expand one backup root into archive entries.

A root file becomes a single entry named after its base name. A root directory
is walked top-down and every descendant becomes an entry named by its path
relative to the root's parent, so ``/home/u/proj/a.txt`` under root
``/home/u/proj`` is named ``proj/a.txt`` and restored below ``/home/u/``.

Policy
------
- Symlinks are recorded as symlinks and never followed.
- Enumeration order is deterministic: a directory first, then its files, then
  its subdirectories, names sorted.
- Paths in the exclusion set are skipped; excluded directories are not entered.
- Any stat or listing failure aborts the walk of the whole root.
"""

from __future__ import annotations

import logging
import os
import stat
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterator

from homebak_engine.clock import Clock, format_header_suffix
from homebak_engine.errors import PathNotFoundError, PathStatError, SelfRecursionError
from homebak_engine.paths import PathContext
from homebak_engine.restore_mapping import RestoreMapping, Slot

logger = logging.getLogger(__name__)

MAX_HEADER_NAME_LENGTH = 255


@dataclass(frozen=True, slots=True)
class Entry:
    """
    One file, directory or symlink destined for the archive.

    Attributes
    ----------
    header_name:
        Archive member name (semantic name plus timestamp suffix). Unique per plan.
    source_path:
        Absolute path to read from.
    is_directory:
        Whether the source is a directory (symlinks to directories are not).
    mode:
        ``st_mode`` from ``lstat``.
    size_bytes:
        Size in bytes from ``lstat``.
    modified_time_epoch_seconds:
        Modification time as seconds since epoch.
    """

    header_name: str
    source_path: Path
    is_directory: bool
    mode: int
    size_bytes: int
    modified_time_epoch_seconds: float


@dataclass(frozen=True, slots=True)
class WalkResult:
    """
    Entries and restore slots produced by walking one or more roots.

    Attributes
    ----------
    entries:
        Entries in walk order.
    restore_mapping:
        Slots keyed by each entry's header name, parent paths in portable form.
    """

    entries: list[Entry] = field(default_factory=list)
    restore_mapping: RestoreMapping = field(default_factory=RestoreMapping)


def make_header_name(semantic_name: str, clock: Clock) -> str:
    """
    Append a timestamp suffix to an entry name.

    Parameters
    ----------
    semantic_name:
        Entry name relative to its parent path.
    clock:
        Time source for the suffix.

    Returns
    -------
    str
        ``semantic_name`` plus a fixed-width nanosecond timestamp, or the
        timestamp alone when the combined name exceeds 255 characters.
    """
    suffix = format_header_suffix(clock.now_ns())
    header_name = semantic_name + suffix
    if len(header_name) > MAX_HEADER_NAME_LENGTH:
        return suffix
    return header_name


@dataclass(frozen=True, slots=True)
class InclusionWalker:
    """
    Walks backup roots for one backup run.

    Attributes
    ----------
    context:
        Path context (working directory, home directory).
    exclusions:
        Absolute paths that must not be included.
    output_path:
        Resolved archive path; it must never become one of its own entries.
    clock:
        Time source for header-name suffixes.
    """

    context: PathContext
    exclusions: frozenset[Path]
    output_path: Path
    clock: Clock

    def walk(self, root: str | os.PathLike[str]) -> WalkResult:
        """
        Expand ``root`` into entries and slots.

        Parameters
        ----------
        root:
            Path to back up (absolute or relative to the working directory).

        Returns
        -------
        WalkResult
            Entries and slots for ``root``; empty if ``root`` is excluded.

        Raises
        ------
        PathNotFoundError
            If ``root`` or a descendant disappears.
        PathStatError
            If ``root`` or a descendant cannot be inspected or listed.
        SelfRecursionError
            If the output archive is reached.
        DuplicateHeaderError
            If two entries get the same header name.
        """
        root_path = self.context.resolve(root)
        result = WalkResult()

        if root_path in self.exclusions:
            logger.info("Path %s is excluded.", root_path)
            return result

        root_stat = _lstat(root_path)

        if not stat.S_ISDIR(root_stat.st_mode):
            name = root_path.name
            slot = Slot(header_name=name, parent_path=_strip_suffix(str(root_path), name))
            self._accept(result, root_path, root_stat, slot)
            return result

        base = root_path.parent
        try:
            for visited_path, visited_stat in _iter_tree(root_path, self.exclusions):
                relative = str(visited_path.relative_to(base))
                slot = Slot(
                    header_name=Path(relative).as_posix(),
                    parent_path=_strip_suffix(str(visited_path), relative),
                )
                self._accept(result, visited_path, visited_stat, slot)
        except OSError as exc:
            raise _stat_error(Path(exc.filename) if exc.filename else root_path, exc) from exc

        return result

    def _accept(self, result: WalkResult, path: Path, path_stat: os.stat_result, slot: Slot) -> None:
        if path == self.output_path:
            raise SelfRecursionError(
                f"Output path {self.output_path} is also an input path, which would pack the "
                "archive into itself. Delete or move the existing file, or choose another output path."
            )

        header_name = make_header_name(slot.header_name, self.clock)
        portable_slot = Slot(
            header_name=slot.header_name,
            parent_path=self.context.to_portable(slot.parent_path),
        )
        result.restore_mapping.insert(header_name, portable_slot)
        result.entries.append(
            Entry(
                header_name=header_name,
                source_path=path,
                is_directory=stat.S_ISDIR(path_stat.st_mode),
                mode=path_stat.st_mode,
                size_bytes=int(path_stat.st_size),
                modified_time_epoch_seconds=float(path_stat.st_mtime),
            )
        )


def _iter_tree(root: Path, exclusions: frozenset[Path]) -> Iterator[tuple[Path, os.stat_result]]:
    """
    Yield ``root`` and every non-excluded descendant exactly once, with lstat results.

    Raises
    ------
    OSError
        On the first directory that cannot be listed or path that cannot be inspected.
    """

    def _raise(exc: OSError) -> None:
        raise exc

    for directory_path, directory_names, file_names in os.walk(
        root,
        topdown=True,
        onerror=_raise,
        followlinks=False,
    ):
        current = Path(directory_path)

        kept_directories: list[str] = []
        for name in sorted(directory_names):
            if current / name in exclusions:
                logger.info("Path %s is excluded.", current / name)
                continue
            kept_directories.append(name)
        directory_names[:] = kept_directories

        yield current, current.lstat()

        for name in sorted(file_names):
            file_path = current / name
            if file_path in exclusions:
                logger.info("Path %s is excluded.", file_path)
                continue
            yield file_path, file_path.lstat()

        # os.walk lists symlinked directories but never enters them.
        for name in kept_directories:
            link_path = current / name
            if link_path.is_symlink():
                yield link_path, link_path.lstat()


def _lstat(path: Path) -> os.stat_result:
    try:
        return path.lstat()
    except OSError as exc:
        raise _stat_error(path, exc) from exc


def _stat_error(path: Path, exc: OSError) -> PathStatError:
    if isinstance(exc, FileNotFoundError):
        return PathNotFoundError(f"Path does not exist: {path}")
    return PathStatError(f"Cannot access path: {path} ({exc!s})")


def _strip_suffix(path: str, suffix: str) -> str:
    if suffix and path.endswith(suffix):
        return path[: -len(suffix)]
    return path
