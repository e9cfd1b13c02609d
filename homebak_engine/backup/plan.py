"""
Backup planning for homebak.

This module merges the three input sources of a backup run into one plan:

1. explicit input paths, in the order given;
2. the backup config's paths, then its tags (when config usage is enabled);
3. tags given on the command line.

Each source only adds entries. A duplicate header name or a self-recursive
output path anywhere aborts the whole plan; partial plans are never returned.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from homebak_engine.backup.walk import Entry, InclusionWalker, WalkResult
from homebak_engine.config import BackupConfig
from homebak_engine.data_models import BackupRequest
from homebak_engine.errors import NoInputSpecifiedError
from homebak_engine.restore_mapping import RestoreMapping
from homebak_engine.tags import TagRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class BackupPlan:
    """
    A complete backup plan.

    Attributes
    ----------
    output_path:
        Resolved archive path.
    entries:
        Entries in packing order. Header names are unique.
    restore_mapping:
        One slot per entry, keyed by header name.
    """

    output_path: Path
    entries: list[Entry]
    restore_mapping: RestoreMapping


def build_backup_plan(
    *,
    request: BackupRequest,
    config: BackupConfig | None,
    walker: InclusionWalker,
    tag_registry: TagRegistry,
) -> BackupPlan:
    """
    Build the backup plan for one run.

    Parameters
    ----------
    request:
        Backup request (explicit paths, tags, config usage).
    config:
        Loaded backup config, or None when config usage is disabled.
    walker:
        Inclusion walker configured with exclusions and the output path.
    tag_registry:
        Registry used to resolve tag names.

    Returns
    -------
    BackupPlan
        Plan covering every input source.

    Raises
    ------
    NoInputSpecifiedError
        If no source contributes any path or tag.
    UnknownTagError
        If a tag is not in the registry.
    SelfRecursionError
        If the output path is reachable from an input.
    DuplicateHeaderError
        If two entries share a header name.
    PathStatError
        If an input path cannot be walked.
    """
    accumulated = WalkResult()

    if request.input_paths:
        for path in request.input_paths:
            _merge(accumulated, walker.walk(path))
    elif not request.use_config and not request.tags:
        raise NoInputSpecifiedError("No paths or tags are given for taking backup.")

    config_in_use = request.use_config and config is not None
    if config_in_use:
        if config.backup_paths:
            for path in config.backup_paths:
                _merge(accumulated, walker.walk(path))
        else:
            logger.info("No backup paths in the backup config file %s; continuing.", request.config_path)

        if config.tags:
            _walk_tags(accumulated, config.tags, walker=walker, tag_registry=tag_registry)
        else:
            logger.info("No tags in the backup config file %s; continuing.", request.config_path)

    config_has_input = config_in_use and bool(config.backup_paths or config.tags)
    if not request.input_paths and not request.tags and not config_has_input:
        raise NoInputSpecifiedError(
            "No paths or tags are given for taking backup (command line and config file are both empty)."
        )

    if request.tags:
        _walk_tags(accumulated, request.tags, walker=walker, tag_registry=tag_registry)

    logger.info("Backup plan for %s: %d entries", walker.output_path, len(accumulated.entries))
    return BackupPlan(
        output_path=walker.output_path,
        entries=accumulated.entries,
        restore_mapping=accumulated.restore_mapping,
    )


def _walk_tags(
    accumulated: WalkResult,
    tags: Iterable[str],
    *,
    walker: InclusionWalker,
    tag_registry: TagRegistry,
) -> None:
    for tag in tags:
        tag_path = tag_registry.resolve(tag, walker.context.home_dir)
        logger.debug("Tag %s resolves to %s", tag, tag_path)
        _merge(accumulated, walker.walk(tag_path))


def _merge(accumulated: WalkResult, part: WalkResult) -> None:
    accumulated.restore_mapping.merge(part.restore_mapping)
    accumulated.entries.extend(part.entries)
