from __future__ import annotations

from pathlib import Path

import pytest

from homebak_engine.backup.plan import BackupPlan
from homebak_engine.backup.render import render_backup_plan_text
from homebak_engine.backup.walk import Entry
from homebak_engine.restore_mapping import RestoreMapping, Slot


def _plan() -> BackupPlan:
    mapping = RestoreMapping()
    mapping.insert("proj#1", Slot(header_name="proj", parent_path="#/HomeDir#/"))
    mapping.insert("proj/a.txt#2", Slot(header_name="proj/a.txt", parent_path="#/HomeDir#/"))
    mapping.insert("proj/b.txt#3", Slot(header_name="proj/b.txt", parent_path="#/HomeDir#/"))
    entries = [
        Entry("proj#1", Path("/h/proj"), True, 0o40755, 4096, 0.0),
        Entry("proj/a.txt#2", Path("/h/proj/a.txt"), False, 0o100644, 10, 0.0),
        Entry("proj/b.txt#3", Path("/h/proj/b.txt"), False, 0o100644, 5, 0.0),
    ]
    return BackupPlan(output_path=Path("/out/b.hbak"), entries=entries, restore_mapping=mapping)


def test_render_counts_and_lists_entries() -> None:
    text = render_backup_plan_text(_plan(), max_items=10)

    assert "Output: /out/b.hbak" in text
    assert "directories: 1" in text
    assert "files: 2" in text
    assert "bytes: 15" in text
    assert "dir : #/HomeDir#/proj" in text
    assert "file: #/HomeDir#/proj/b.txt" in text
    assert "more not shown" not in text


def test_render_truncates_listing() -> None:
    text = render_backup_plan_text(_plan(), max_items=1)

    assert "file: " not in text
    assert text.endswith("... (2 more not shown)")


def test_render_rejects_negative_max_items() -> None:
    with pytest.raises(ValueError):
        render_backup_plan_text(_plan(), max_items=-1)
