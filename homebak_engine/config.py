"""
Backup config file loading.

The backup config is a JSON document describing a named backup::

    {
        "backupName": "dotfiles",
        "backupPaths": ["notes", "/etc/hosts"],
        "tags": ["nvim", "kitty"]
    }

All keys are optional. The file is read fully into memory; unreadable or
malformed content is fatal.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Self

from homebak_engine.errors import ConfigParseError, ConfigReadError

DEFAULT_CONFIG_FILE_NAME = "homebak.json"


def _optional_string_list(payload: Mapping[str, Any], key: str) -> list[str]:
    raw = payload.get(key)
    if raw is None:
        return []
    if not isinstance(raw, list) or not all(isinstance(item, str) for item in raw):
        raise ValueError(f"{key} must be a list of strings")
    return list(raw)


@dataclass(frozen=True, slots=True)
class BackupConfig:
    """
    Deserialized backup declaration.

    Attributes
    ----------
    backup_name:
        Optional archive name used when no explicit output path is given.
    backup_paths:
        Paths to back up, in declaration order.
    tags:
        Tag names to back up, in declaration order.
    """

    backup_name: str | None = None
    backup_paths: list[str] = field(default_factory=list)
    tags: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> Self:
        """
        Construct a :class:`BackupConfig` from a JSON mapping.

        Raises
        ------
        ValueError
            If a known key has the wrong type.
        """
        name = payload.get("backupName")
        if name is not None and not isinstance(name, str):
            raise ValueError("backupName must be a string")
        return cls(
            backup_name=name or None,
            backup_paths=_optional_string_list(payload, "backupPaths"),
            tags=_optional_string_list(payload, "tags"),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert this config to a JSON-serializable dict."""
        payload: dict[str, Any] = {
            "backupPaths": list(self.backup_paths),
            "tags": list(self.tags),
        }
        if self.backup_name is not None:
            payload["backupName"] = self.backup_name
        return payload


def read_backup_config(config_path: Path) -> BackupConfig:
    """
    Read and parse a backup config file.

    Parameters
    ----------
    config_path:
        Absolute path to the JSON config file.

    Returns
    -------
    BackupConfig
        Parsed config.

    Raises
    ------
    ConfigReadError
        If the path does not exist, is a directory, or cannot be read.
    ConfigParseError
        If the content is not valid JSON or does not have the expected shape.
    """
    if config_path.is_dir():
        raise ConfigReadError(f"Config path is a directory, not a file: {config_path}")

    try:
        text = config_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigReadError(f"Failed to read config file: {config_path} ({exc!s})") from exc

    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ConfigParseError(f"Invalid JSON in config file: {config_path} ({exc!s})") from exc

    if not isinstance(payload, dict):
        raise ConfigParseError(f"Config file must contain a JSON object: {config_path}")

    try:
        return BackupConfig.from_dict(payload)
    except ValueError as exc:
        raise ConfigParseError(f"Invalid config file: {config_path} ({exc!s})") from exc
