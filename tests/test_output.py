from __future__ import annotations

import logging
from pathlib import Path

import pytest

from homebak_engine.backup.output import OVERWRITE_WARNING_DELAY_SECONDS, resolve_output_path
from homebak_engine.clock import FixedClock, format_compact_timestamp
from homebak_engine.config import BackupConfig
from homebak_engine.data_models import BackupRequest
from homebak_engine.errors import OutputIsDirectoryError
from homebak_engine.paths import PathContext

NOW_NS = 1_735_700_000_123_456_789


class RecordingSleep:
    def __init__(self) -> None:
        self.calls: list[float] = []

    def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


def _resolve(
    tmp_path: Path,
    request: BackupRequest,
    config: BackupConfig | None = None,
    sleep: RecordingSleep | None = None,
) -> Path:
    return resolve_output_path(
        request=request,
        config=config,
        context=PathContext(home_dir=tmp_path / "home", cwd=tmp_path),
        clock=FixedClock(NOW_NS),
        sleep=sleep or RecordingSleep(),
    )


def test_explicit_output_that_does_not_exist_is_accepted(tmp_path: Path) -> None:
    sleep = RecordingSleep()

    output = _resolve(tmp_path, BackupRequest(output_path="out/x.hbak"), sleep=sleep)

    assert output == tmp_path / "out" / "x.hbak"
    assert sleep.calls == []


def test_explicit_output_that_is_a_directory_is_rejected(tmp_path: Path) -> None:
    (tmp_path / "taken").mkdir()

    with pytest.raises(OutputIsDirectoryError):
        _resolve(tmp_path, BackupRequest(output_path="taken"))


def test_existing_output_file_warns_and_pauses(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    (tmp_path / "x.hbak").write_bytes(b"old")
    sleep = RecordingSleep()

    with caplog.at_level(logging.WARNING):
        output = _resolve(tmp_path, BackupRequest(output_path="x.hbak"), sleep=sleep)

    assert output == tmp_path / "x.hbak"
    assert sleep.calls == [OVERWRITE_WARNING_DELAY_SECONDS]
    assert "will be overwritten" in caplog.text
    assert (tmp_path / "x.hbak").read_bytes() == b"old"


def test_generated_name_uses_compact_timestamp(tmp_path: Path) -> None:
    output = _resolve(tmp_path, BackupRequest())

    assert output == tmp_path / f"Backup{format_compact_timestamp(NOW_NS)}.hbak"
    assert len(output.name) == len("Backup") + 14 + len(".hbak")


def test_config_name_gets_extension_appended(tmp_path: Path) -> None:
    config = BackupConfig(backup_name="weekly")

    output = _resolve(tmp_path, BackupRequest(use_config=True), config)

    assert output == tmp_path / "weekly.hbak"


def test_config_name_with_extension_is_kept(tmp_path: Path) -> None:
    config = BackupConfig(backup_name="weekly.hbak")

    output = _resolve(tmp_path, BackupRequest(use_config=True), config)

    assert output == tmp_path / "weekly.hbak"


def test_config_name_is_ignored_without_config_usage(tmp_path: Path) -> None:
    config = BackupConfig(backup_name="weekly")

    output = _resolve(tmp_path, BackupRequest(use_config=False), config)

    assert output.name.startswith("Backup")


def test_explicit_output_wins_over_config_name(tmp_path: Path) -> None:
    config = BackupConfig(backup_name="weekly")

    output = _resolve(tmp_path, BackupRequest(output_path="mine.hbak", use_config=True), config)

    assert output == tmp_path / "mine.hbak"
