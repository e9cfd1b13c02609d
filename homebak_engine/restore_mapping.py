"""
Restore mapping: archive header name -> original location.

Every archive entry has one slot recording the entry's semantic name and the
parent directory it came from. Parent paths are stored in portable form (see
:mod:`homebak_engine.paths`). The mapping is written as a JSON sidecar next to
the archive and read back in full by restore and extract.

Design constraints
------------------
- Header names are unique: inserting at an occupied key is an error, never an
  overwrite. Occupancy is key presence, so an empty parent path is a valid slot.
- Sidecar writes are atomic (temp file + replace).
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterator, Mapping, Self

from homebak_engine.errors import DuplicateHeaderError, RestoreMappingError

RESTORE_MAPPING_SCHEMA_VERSION = "homebak_restore_mapping_v1"
SIDECAR_SUFFIX = ".restore.json"


@dataclass(frozen=True, slots=True)
class Slot:
    """
    Restore record for one archive entry.

    Attributes
    ----------
    header_name:
        Entry path relative to ``parent_path`` (no timestamp suffix).
    parent_path:
        Directory the entry was taken from, ending with a separator. Portable
        form once inserted into a :class:`RestoreMapping`.
    """

    header_name: str
    parent_path: str

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> Self:
        """Construct a :class:`Slot` from its sidecar representation."""
        header_name = payload.get("headerName")
        parent_path = payload.get("parentPath")
        if not isinstance(header_name, str) or not isinstance(parent_path, str):
            raise ValueError("slot requires string 'headerName' and 'parentPath'")
        return cls(header_name=header_name, parent_path=parent_path)

    def to_dict(self) -> dict[str, Any]:
        """Convert this slot to a JSON-serializable dict."""
        return {"parentPath": self.parent_path, "headerName": self.header_name}


class RestoreMapping:
    """
    Insert-only table of slots keyed by archive header name.

    Iteration yields header names in insertion order.
    """

    def __init__(self) -> None:
        self._slots: dict[str, Slot] = {}

    def __contains__(self, header: object) -> bool:
        return header in self._slots

    def __len__(self) -> int:
        return len(self._slots)

    def __iter__(self) -> Iterator[str]:
        return iter(self._slots)

    def __getitem__(self, header: str) -> Slot:
        return self._slots[header]

    def get(self, header: str) -> Slot | None:
        """Return the slot at ``header``, or None."""
        return self._slots.get(header)

    def items(self) -> Iterator[tuple[str, Slot]]:
        """Yield ``(header, slot)`` pairs in insertion order."""
        yield from self._slots.items()

    def insert(self, header: str, slot: Slot) -> None:
        """
        Insert a slot under a new header name.

        Parameters
        ----------
        header:
            Archive header name (with timestamp suffix).
        slot:
            Slot to record.

        Raises
        ------
        DuplicateHeaderError
            If ``header`` is already present.
        """
        existing = self._slots.get(header)
        if existing is not None:
            raise DuplicateHeaderError(
                f"Header name {header!r} is already in the restore mapping "
                f"(existing parent={existing.parent_path!r}, new parent={slot.parent_path!r})"
            )
        self._slots[header] = slot

    def merge(self, other: RestoreMapping) -> None:
        """
        Insert every slot of ``other``, in order.

        Raises
        ------
        DuplicateHeaderError
            On the first header already present in this mapping.
        """
        for header, slot in other.items():
            self.insert(header, slot)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> Self:
        """
        Parse a mapping from its sidecar representation.

        Raises
        ------
        ValueError
            If the payload is missing ``slots`` or has the wrong schema.
        """
        schema_version = payload.get("schema_version")
        if schema_version != RESTORE_MAPPING_SCHEMA_VERSION:
            raise ValueError(f"Unsupported restore mapping schema_version: {schema_version!r}")
        slots = payload.get("slots")
        if not isinstance(slots, dict):
            raise ValueError("restore mapping must contain an object 'slots'")

        mapping = cls()
        for header, slot_payload in slots.items():
            if not isinstance(slot_payload, dict):
                raise ValueError(f"slot {header!r} must be an object")
            mapping.insert(str(header), Slot.from_dict(slot_payload))
        return mapping

    def to_dict(self) -> dict[str, Any]:
        """Convert this mapping to a JSON-serializable dict."""
        return {
            "schema_version": RESTORE_MAPPING_SCHEMA_VERSION,
            "slots": {header: slot.to_dict() for header, slot in self._slots.items()},
        }


def sidecar_path_for(archive_path: Path) -> Path:
    """Return the restore mapping sidecar path for an archive."""
    return archive_path.with_name(archive_path.name + SIDECAR_SUFFIX)


def write_restore_mapping(sidecar_path: Path, mapping: RestoreMapping) -> None:
    """
    Atomically write a restore mapping sidecar.

    Raises
    ------
    RestoreMappingError
        If the file cannot be written.
    """
    temp_path = sidecar_path.with_suffix(sidecar_path.suffix + ".tmp")
    try:
        sidecar_path.parent.mkdir(parents=True, exist_ok=True)
        with temp_path.open("w", encoding="utf-8", newline="\n") as handle:
            json.dump(mapping.to_dict(), handle, indent=2, ensure_ascii=False)
            handle.write("\n")
        os.replace(temp_path, sidecar_path)
    except OSError as exc:
        temp_path.unlink(missing_ok=True)
        raise RestoreMappingError(f"Failed to write restore mapping: {sidecar_path} ({exc!s})") from exc


def read_restore_mapping(sidecar_path: Path) -> RestoreMapping:
    """
    Read and validate a restore mapping sidecar.

    Raises
    ------
    RestoreMappingError
        If the sidecar is missing, unreadable, not JSON, or has the wrong shape.
    """
    try:
        payload = json.loads(sidecar_path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise RestoreMappingError(f"Restore mapping not found next to archive: {sidecar_path}") from exc
    except OSError as exc:
        raise RestoreMappingError(f"Failed to read restore mapping: {sidecar_path}") from exc
    except json.JSONDecodeError as exc:
        raise RestoreMappingError(f"Invalid JSON in restore mapping: {sidecar_path}") from exc

    if not isinstance(payload, dict):
        raise RestoreMappingError(f"Restore mapping must be a JSON object: {sidecar_path}")

    try:
        return RestoreMapping.from_dict(payload)
    except (ValueError, DuplicateHeaderError) as exc:
        raise RestoreMappingError(f"Restore mapping validation failed: {sidecar_path} ({exc!s})") from exc
