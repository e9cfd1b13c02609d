"""
Archive reading and writing.

Archives are plain (uncompressed) tar streams. Each member is named by its
entry's header name; member metadata comes from the source's ``lstat``. The
restore mapping is written as a JSON sidecar next to the archive and is
required to restore or extract it.

Design constraints
------------------
- Members are written in plan order and read back sequentially.
- Restore writes each member to its original location, with the current home
  directory substituted for the placeholder. Extract writes each member below a
  destination directory, keeping only the relative structure.
- Directory modes and mtimes are applied after all members are written, so
  read-only directories do not block their own contents.
- The archive is written to a temporary sibling and replaced into place, so a
  failed pack leaves any previous archive intact.
- Hard-linked sources are stored as independent regular members.
- Extract never writes through a symlink that leads outside the destination.
"""

from __future__ import annotations

import logging
import os
import shutil
import tarfile
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Callable

from homebak_engine.backup.plan import BackupPlan
from homebak_engine.backup.walk import Entry
from homebak_engine.errors import ArchiveError, RestoreMappingError
from homebak_engine.paths import PathContext
from homebak_engine.restore_mapping import (
    RestoreMapping,
    Slot,
    read_restore_mapping,
    sidecar_path_for,
    write_restore_mapping,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PackResult:
    """
    Result of writing an archive.

    Attributes
    ----------
    archive_path:
        Archive file written.
    sidecar_path:
        Restore mapping sidecar written next to the archive.
    member_count:
        Number of members written.
    """

    archive_path: Path
    sidecar_path: Path
    member_count: int


@dataclass(frozen=True, slots=True)
class UnpackResult:
    """
    Result of restoring or extracting an archive.

    Attributes
    ----------
    archive_path:
        Archive file read.
    written_paths:
        Destination of every member, in archive order.
    """

    archive_path: Path
    written_paths: list[Path]


def pack_archive(plan: BackupPlan) -> PackResult:
    """
    Write a plan's entries to its output archive, then its restore mapping sidecar.

    Parameters
    ----------
    plan:
        Completed backup plan.

    Returns
    -------
    PackResult
        Paths written and member count.

    Raises
    ------
    ArchiveError
        If the archive cannot be written.
    RestoreMappingError
        If the sidecar cannot be written.
    """
    archive_path = plan.output_path
    temp_path = archive_path.with_name(archive_path.name + ".tmp")
    member_count = 0
    try:
        archive_path.parent.mkdir(parents=True, exist_ok=True)
        with tarfile.open(temp_path, mode="w", format=tarfile.PAX_FORMAT) as archive:
            for entry in plan.entries:
                if _add_entry(archive, entry):
                    member_count += 1
        os.replace(temp_path, archive_path)
    except (OSError, tarfile.TarError) as exc:
        temp_path.unlink(missing_ok=True)
        raise ArchiveError(f"Failed to write archive: {archive_path} ({exc!s})") from exc

    sidecar_path = sidecar_path_for(archive_path)
    write_restore_mapping(sidecar_path, plan.restore_mapping)

    logger.info("Archive written: %s (%d members)", archive_path, member_count)
    return PackResult(archive_path=archive_path, sidecar_path=sidecar_path, member_count=member_count)


def restore_archive(archive_path: Path, context: PathContext) -> UnpackResult:
    """
    Restore every member of an archive to its original location.

    Parameters
    ----------
    archive_path:
        Archive file; its sidecar must sit next to it.
    context:
        Path context whose home directory replaces the placeholder.

    Returns
    -------
    UnpackResult
        Destination of every member.

    Raises
    ------
    RestoreMappingError
        If the sidecar is missing or invalid, or a member has no slot.
    ArchiveError
        If the archive cannot be read or a member cannot be written.
    """

    def _original_location(slot: Slot) -> Path:
        return Path(context.from_portable(slot.parent_path) + slot.header_name)

    mapping = read_restore_mapping(sidecar_path_for(archive_path))
    return _unpack(archive_path, mapping, _original_location)


def extract_archive(archive_path: Path, destination_root: Path) -> UnpackResult:
    """
    Extract every member of an archive below ``destination_root``.

    Parameters
    ----------
    archive_path:
        Archive file; its sidecar must sit next to it.
    destination_root:
        Directory receiving the relative structure of each entry.

    Returns
    -------
    UnpackResult
        Destination of every member.

    Raises
    ------
    RestoreMappingError
        If the sidecar is missing or invalid, or a member has no slot.
    ArchiveError
        If the archive cannot be read, a member cannot be written, or a member
        would land outside ``destination_root`` through an extracted symlink.
    """

    def _extracted_location(slot: Slot) -> Path:
        return destination_root / slot.header_name

    mapping = read_restore_mapping(sidecar_path_for(archive_path))
    return _unpack(archive_path, mapping, _extracted_location, confine_to=destination_root)


def _add_entry(archive: tarfile.TarFile, entry: Entry) -> bool:
    # Hard links are stored as full copies.
    archive.inodes.clear()
    info = archive.gettarinfo(str(entry.source_path), arcname=entry.header_name)
    if info is None:
        logger.warning("Skipping unsupported file type: %s", entry.source_path)
        return False

    if info.isreg():
        with entry.source_path.open("rb") as handle:
            archive.addfile(info, handle)
    else:
        archive.addfile(info)
    return True


def _unpack(
    archive_path: Path,
    mapping: RestoreMapping,
    locate: Callable[[Slot], Path],
    *,
    confine_to: Path | None = None,
) -> UnpackResult:
    written_paths: list[Path] = []
    directories: list[tuple[Path, tarfile.TarInfo]] = []
    seen: set[Path] = set()

    try:
        with tarfile.open(archive_path, mode="r") as archive:
            for member in archive:
                header_name = member.name.rstrip("/")
                slot = mapping.get(header_name)
                if slot is None:
                    raise RestoreMappingError(f"Archive member {header_name!r} has no restore slot.")
                if _is_unsafe_relative_path(slot.header_name):
                    raise RestoreMappingError(f"Unsafe entry name in restore slot: {slot.header_name!r}")

                destination = locate(slot)
                checked = destination if member.isdir() else destination.parent
                if confine_to is not None and not _is_within(confine_to, checked):
                    raise ArchiveError(
                        f"Archive member {header_name!r} would be written outside {confine_to}: {destination}"
                    )
                if destination in seen and not member.isdir():
                    logger.warning("Overwriting %s with a later archive member of the same name", destination)
                seen.add(destination)

                if not _write_member(archive, member, destination):
                    continue
                if member.isdir():
                    directories.append((destination, member))
                written_paths.append(destination)

        for destination, member in reversed(directories):
            _apply_metadata(destination, member)
    except (OSError, tarfile.TarError) as exc:
        raise ArchiveError(f"Failed to unpack archive: {archive_path} ({exc!s})") from exc

    logger.info("Unpacked %d members from %s", len(written_paths), archive_path)
    return UnpackResult(archive_path=archive_path, written_paths=written_paths)


def _write_member(archive: tarfile.TarFile, member: tarfile.TarInfo, destination: Path) -> bool:
    if member.isdir():
        destination.mkdir(parents=True, exist_ok=True)
        return True

    if not (member.issym() or member.isreg()):
        logger.warning("Skipping unsupported archive member type: %s", member.name)
        return False

    destination.parent.mkdir(parents=True, exist_ok=True)
    if destination.is_symlink():
        destination.unlink()

    if member.issym():
        if destination.exists():
            destination.unlink()
        os.symlink(member.linkname, destination)
        return True

    source = archive.extractfile(member)
    if source is None:
        raise ArchiveError(f"Archive member has no data: {member.name}")
    with source, destination.open("wb") as target:
        shutil.copyfileobj(source, target)
    _apply_metadata(destination, member)
    return True


def _is_within(root: Path, candidate: Path) -> bool:
    # Symlinks already written below root are followed.
    real_root = os.path.realpath(root)
    real_candidate = os.path.realpath(candidate)
    return os.path.commonpath([real_root, real_candidate]) == real_root


def _apply_metadata(destination: Path, member: tarfile.TarInfo) -> None:
    os.chmod(destination, member.mode)
    os.utime(destination, (member.mtime, member.mtime))


def _is_unsafe_relative_path(name: str) -> bool:
    relative_path = PurePosixPath(name)
    if relative_path.is_absolute():
        return True
    return any(part in (".", "..") for part in relative_path.parts)
