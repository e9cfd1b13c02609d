"""
Mode dispatch: run exactly one of backup, restore, extract, version or list-tags.
"""

from __future__ import annotations

import time
from typing import Callable

from homebak_engine.backup.service import run_backup
from homebak_engine.clock import Clock
from homebak_engine.data_models import InputData, InvocationMode
from homebak_engine.errors import NoModeSelectedError
from homebak_engine.paths import PathContext
from homebak_engine.restore.service import run_extract, run_restore
from homebak_engine.tags import DEFAULT_TAG_REGISTRY, TagRegistry, render_tag_table

VERSION = "homebak 0.1.0"


def run_invocation(
    input_data: InputData,
    *,
    context: PathContext | None = None,
    clock: Clock | None = None,
    tag_registry: TagRegistry = DEFAULT_TAG_REGISTRY,
    sleep: Callable[[float], None] = time.sleep,
) -> None:
    """
    Run the mode selected in ``input_data``.

    Raises
    ------
    NoModeSelectedError
        If no mode was selected.
    HomebakError
        Any failure of the selected mode.
    """
    mode = input_data.mode

    if mode is InvocationMode.BACKUP:
        run_backup(
            input_data.backup,
            context=context,
            clock=clock,
            tag_registry=tag_registry,
            sleep=sleep,
        )
        return

    if mode is InvocationMode.RESTORE and input_data.restore is not None:
        run_restore(input_data.restore, context=context)
        return

    if mode is InvocationMode.EXTRACT and input_data.extract is not None:
        run_extract(input_data.extract, context=context)
        return

    if mode is InvocationMode.VERSION:
        print(VERSION)
        return

    if mode is InvocationMode.LIST_TAGS:
        print(render_tag_table(tag_registry))
        return

    raise NoModeSelectedError(
        "Define a mode: -B to back up, -R to restore, -E to extract, -V for the version "
        "(see --help)."
    )
