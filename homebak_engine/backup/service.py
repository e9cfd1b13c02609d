"""
Backup orchestration for homebak.

This module coordinates:
- backup config loading (when requested)
- output path resolution (overwrite / directory checks)
- exclusion set construction
- plan building across explicit paths, config and tags
- deterministic reporting
- archive packing (unless plan-only)

The config is loaded first so its backup name can name the archive.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Callable

from homebak_engine.archive import PackResult, pack_archive
from homebak_engine.backup.exclusion import build_exclusion_set
from homebak_engine.backup.output import resolve_output_path
from homebak_engine.backup.plan import BackupPlan, build_backup_plan
from homebak_engine.backup.render import render_backup_plan_text
from homebak_engine.backup.walk import InclusionWalker
from homebak_engine.clock import Clock, SystemClock
from homebak_engine.config import BackupConfig, read_backup_config
from homebak_engine.data_models import BackupRequest
from homebak_engine.paths import PathContext
from homebak_engine.tags import DEFAULT_TAG_REGISTRY, TagRegistry

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class BackupRunResult:
    """
    Outcome of one backup run.

    Attributes
    ----------
    plan:
        The plan that was built.
    pack:
        Written archive details, or None in plan-only mode.
    """

    plan: BackupPlan
    pack: PackResult | None


def run_backup(
    request: BackupRequest,
    *,
    context: PathContext | None = None,
    clock: Clock | None = None,
    tag_registry: TagRegistry = DEFAULT_TAG_REGISTRY,
    sleep: Callable[[float], None] = time.sleep,
) -> BackupRunResult:
    """
    Plan and (unless ``request.dry_run``) write a backup archive.

    Parameters
    ----------
    request:
        Backup request.
    context:
        Path context; captured from the environment when omitted.
    clock:
        Time source; the system clock when omitted.
    tag_registry:
        Registry used to resolve tag names.
    sleep:
        Used for the pause before overwriting an existing archive.

    Returns
    -------
    BackupRunResult
        Plan and pack details.

    Raises
    ------
    HomebakError
        Any domain failure (config, output path, planning, archive writing).
    """
    if request.max_items < 0:
        raise ValueError("max_items must be non-negative.")

    run_context = context or PathContext.from_environment()
    run_clock = clock or SystemClock()

    config = _load_config(request, run_context)

    output_path = resolve_output_path(
        request=request,
        config=config,
        context=run_context,
        clock=run_clock,
        sleep=sleep,
    )
    exclusions = build_exclusion_set(request.exclude_paths, run_context)

    walker = InclusionWalker(
        context=run_context,
        exclusions=exclusions,
        output_path=output_path,
        clock=run_clock,
    )
    plan = build_backup_plan(
        request=request,
        config=config,
        walker=walker,
        tag_registry=tag_registry,
    )

    print(render_backup_plan_text(plan, max_items=request.max_items))

    if request.dry_run:
        return BackupRunResult(plan=plan, pack=None)

    pack = pack_archive(plan)

    print()
    print("Backup written:")
    print(f"  Archive        : {pack.archive_path}")
    print(f"  Restore mapping: {pack.sidecar_path}")
    print(f"  Members        : {pack.member_count}")

    return BackupRunResult(plan=plan, pack=pack)


def _load_config(request: BackupRequest, context: PathContext) -> BackupConfig | None:
    if not request.use_config:
        return None
    config_path: Path = context.resolve(request.config_path)
    logger.info("Reading backup config %s", config_path)
    return read_backup_config(config_path)
