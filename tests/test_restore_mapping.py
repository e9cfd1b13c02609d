from __future__ import annotations

import json
from pathlib import Path

import pytest

from homebak_engine.errors import DuplicateHeaderError, RestoreMappingError
from homebak_engine.restore_mapping import (
    RestoreMapping,
    Slot,
    read_restore_mapping,
    sidecar_path_for,
    write_restore_mapping,
)


def test_insert_rejects_occupied_header() -> None:
    mapping = RestoreMapping()
    mapping.insert("a.txt2025", Slot(header_name="a.txt", parent_path="#/HomeDir#/"))

    with pytest.raises(DuplicateHeaderError):
        mapping.insert("a.txt2025", Slot(header_name="a.txt", parent_path="/etc/"))

    assert mapping["a.txt2025"].parent_path == "#/HomeDir#/"
    assert len(mapping) == 1


def test_empty_parent_path_still_occupies_header() -> None:
    mapping = RestoreMapping()
    mapping.insert("h", Slot(header_name="", parent_path=""))

    assert "h" in mapping
    with pytest.raises(DuplicateHeaderError):
        mapping.insert("h", Slot(header_name="x", parent_path="/"))


def test_merge_keeps_order_and_fails_on_overlap() -> None:
    first = RestoreMapping()
    first.insert("one", Slot("one", "/a/"))
    second = RestoreMapping()
    second.insert("two", Slot("two", "/b/"))
    second.insert("three", Slot("three", "/c/"))

    first.merge(second)
    assert list(first) == ["one", "two", "three"]

    with pytest.raises(DuplicateHeaderError):
        first.merge(second)


def test_sidecar_path_sits_next_to_archive() -> None:
    assert sidecar_path_for(Path("/x/Backup1.hbak")) == Path("/x/Backup1.hbak.restore.json")


def test_sidecar_write_then_read(tmp_path: Path) -> None:
    mapping = RestoreMapping()
    mapping.insert("proj2025", Slot("proj", "#/HomeDir#/"))
    mapping.insert("proj/a.txt2025", Slot("proj/a.txt", "#/HomeDir#/"))
    sidecar = tmp_path / "out.hbak.restore.json"

    write_restore_mapping(sidecar, mapping)

    payload = json.loads(sidecar.read_text(encoding="utf-8"))
    assert payload["slots"]["proj/a.txt2025"] == {"parentPath": "#/HomeDir#/", "headerName": "proj/a.txt"}
    loaded = read_restore_mapping(sidecar)
    assert list(loaded.items()) == list(mapping.items())
    assert not sidecar.with_suffix(".json.tmp").exists()


def test_read_missing_sidecar_fails(tmp_path: Path) -> None:
    with pytest.raises(RestoreMappingError):
        read_restore_mapping(tmp_path / "missing.restore.json")


@pytest.mark.parametrize(
    "text",
    [
        "not json",
        "[]",
        json.dumps({"slots": {}}),
        json.dumps({"schema_version": "homebak_restore_mapping_v1", "slots": []}),
        json.dumps({"schema_version": "homebak_restore_mapping_v1", "slots": {"h": {"headerName": "h"}}}),
    ],
)
def test_read_malformed_sidecar_fails(tmp_path: Path, text: str) -> None:
    sidecar = tmp_path / "bad.restore.json"
    sidecar.write_text(text, encoding="utf-8")

    with pytest.raises(RestoreMappingError):
        read_restore_mapping(sidecar)
