"""
Rendering for backup planning output.

This module renders a BackupPlan to deterministic, human-readable text.
"""

from __future__ import annotations

from homebak_engine.backup.plan import BackupPlan


def render_backup_plan_text(plan: BackupPlan, *, max_items: int) -> str:
    """
    Render a backup plan as deterministic plain text.

    Parameters
    ----------
    plan:
        The backup plan to render.
    max_items:
        Maximum number of entries to list. Counts always reflect the full plan.
        Must be non-negative.

    Returns
    -------
    str
        A deterministic text representation of the plan.

    Raises
    ------
    ValueError
        If max_items is negative.
    """
    if max_items < 0:
        raise ValueError("max_items must be non-negative.")

    directory_count = sum(1 for entry in plan.entries if entry.is_directory)
    file_count = len(plan.entries) - directory_count
    total_bytes = sum(entry.size_bytes for entry in plan.entries if not entry.is_directory)

    lines: list[str] = []
    lines.append("Backup plan")
    lines.append(f"Output: {plan.output_path}")
    lines.append("")
    lines.append(f"directories: {directory_count}")
    lines.append(f"files: {file_count}")
    lines.append(f"bytes: {total_bytes}")
    lines.append("")

    total_entries = len(plan.entries)
    shown_entries = plan.entries[:max_items] if max_items else []

    for entry in shown_entries:
        slot = plan.restore_mapping[entry.header_name]
        kind = "dir " if entry.is_directory else "file"
        lines.append(f"{kind}: {slot.parent_path}{slot.header_name}")

    if max_items < total_entries:
        remaining = total_entries - max_items
        lines.append(f"... ({remaining} more not shown)")

    return "\n".join(lines)
