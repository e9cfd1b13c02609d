from __future__ import annotations

from pathlib import Path

import pytest

from homebak.cli import build_parser, input_data_from_args, main
from homebak_engine.data_models import InvocationMode
from homebak_engine.dispatch import VERSION
from homebak_engine.restore_mapping import sidecar_path_for

pytestmark = pytest.mark.usefixtures("restore_root_logger")


@pytest.fixture
def home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    home_dir = tmp_path / "home" / "u"
    (home_dir / "docs").mkdir(parents=True)
    (home_dir / "docs" / "a.txt").write_text("a", encoding="utf-8")
    monkeypatch.setenv("HOME", str(home_dir))
    monkeypatch.delenv("HOMEBAK_LOG_FILE", raising=False)
    monkeypatch.chdir(home_dir)
    return home_dir


def test_help_smoke(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as exc_info:
        main(["--help"])

    assert exc_info.value.code == 0
    assert "--backup" in capsys.readouterr().out


def test_modes_are_mutually_exclusive(capsys: pytest.CaptureFixture[str]) -> None:
    with pytest.raises(SystemExit) as exc_info:
        main(["-B", "-V"])

    assert exc_info.value.code == 2


def test_version(home: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["-V"]) == 0
    assert capsys.readouterr().out.strip() == VERSION


def test_no_mode_is_an_error(home: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["-i", "docs"]) == 2
    assert capsys.readouterr().out.startswith("ERROR: Define a mode")


def test_list_tags(home: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["--list-tags"]) == 0
    out = capsys.readouterr().out
    assert "nvim" in out
    assert "(home)" in out


def test_repeatable_options_are_collected() -> None:
    args = build_parser().parse_args(["-B", "-i", "a", "-i", "b", "-x", "a/tmp", "-t", "nvim", "--dry-run"])

    data = input_data_from_args(args)

    assert data.mode is InvocationMode.BACKUP
    assert data.backup.input_paths == ("a", "b")
    assert data.backup.exclude_paths == ("a/tmp",)
    assert data.backup.tags == ("nvim",)
    assert data.backup.dry_run is True


def test_backup_without_input_fails(home: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["-B"]) == 2
    assert "ERROR: No paths or tags" in capsys.readouterr().out


def test_negative_max_items_fails(home: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["-B", "-i", "docs", "--max-items", "-1"]) == 2
    assert "ERROR:" in capsys.readouterr().out


def test_backup_then_extract_end_to_end(home: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["-q", "-B", "-i", "docs", "-o", "snap.hbak"]) == 0
    assert (home / "snap.hbak").is_file()
    assert sidecar_path_for(home / "snap.hbak").is_file()

    assert main(["-q", "-E", "snap.hbak", "-d", "out"]) == 0
    assert (home / "out" / "docs" / "a.txt").read_text(encoding="utf-8") == "a"

    out = capsys.readouterr().out
    assert "Backup written:" in out
    assert "Extracted 2 entries" in out


def test_restore_missing_archive_fails(home: Path, capsys: pytest.CaptureFixture[str]) -> None:
    assert main(["-R", "nope.hbak"]) == 2
    assert "ERROR: Archive does not exist" in capsys.readouterr().out
