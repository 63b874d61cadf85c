"""
Rendering for restore plans.

The same text is produced for a dry run and for a real run over the same plan;
only the heading and the closing notes differ.
"""

from __future__ import annotations

from .data_models import RestoreActionType, RestoreOutcome, RestorePlan

_RULE = "-" * 47

_ACTION_LABELS: dict[RestoreActionType, str] = {
    RestoreActionType.REPLACE_DIRECTORY: "REPLACE DIR",
    RestoreActionType.REPLACE_FILE: "REPLACE",
    RestoreActionType.COPY_NEW: "CREATE",
}


def render_restore_plan_text(plan: RestorePlan, *, dry_run: bool) -> str:
    """
    Render a restore plan as deterministic plain text.

    Parameters
    ----------
    plan:
        The plan to render.
    dry_run:
        Whether the heading should mark the plan as a dry run.

    Returns
    -------
    str
        One block per action, in manifest order.
    """
    lines: list[str] = []
    lines.append(f"Restore plan{' (dry-run)' if dry_run else ''}:")
    lines.append(_RULE)

    for action in plan.actions:
        label = _ACTION_LABELS[action.action_type]
        lines.append(f"{label}: {action.name} -> {action.destination_path}")
        if action.needs_backup:
            lines.append(f"   backup will be created at: {action.backup_path}")
        else:
            lines.append("   destination does not exist; nothing to back up")
        if action.source_is_dir:
            lines.append("   directory: all nested files and subdirectories are restored recursively")

    lines.append("")
    lines.append(f"Entries: {len(plan.actions)}  Backups needed: {plan.backups_needed}")
    return "\n".join(lines)


def render_dry_run_footer() -> str:
    """Closing notes printed after a dry run."""
    return "\n".join(
        [
            "Restore dry-run complete. Nothing was changed.",
            "If the plan looks correct, run `restitch restore` without --dry-run to apply it.",
            "Existing files and directories listed above would be moved into a backup root.",
            "Applied changes can be undone with `restitch revert`.",
            _RULE,
        ]
    )


def render_restore_summary(outcome: RestoreOutcome) -> str:
    """Closing notes printed after a real restore."""
    lines = [f"Restore completed: {len(outcome.results)} entries restored."]
    if outcome.backup_root is not None:
        lines.append(f"Backups saved to: {outcome.backup_root}")
        lines.append("These changes can be reverted with `restitch revert`.")
    else:
        lines.append("No existing destinations were replaced; no backup root was created.")
    lines.append(_RULE)
    return "\n".join(lines)
