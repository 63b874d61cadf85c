"""
Rendering for snapshot packaging output.

This module renders validation results and packaging summaries as
deterministic, human-readable text.
"""

from __future__ import annotations

from pathlib import Path

from restitch_engine.snapshot.plan import SnapshotPlan

_RULE = "-" * 46


def render_validation_text(plan: SnapshotPlan) -> str:
    """
    Render the validation summary for a snapshot plan.

    Parameters
    ----------
    plan:
        Plan to render.

    Returns
    -------
    str
        Counts of valid and invalid entries, followed by every invalid entry
        when packaging is blocked.
    """
    lines: list[str] = []
    lines.append("Restitch: validating selected config targets")
    lines.append(_RULE)
    lines.append(f"  Valid configs:   {len(plan.valid)}")
    lines.append(f"  Invalid configs: {len(plan.invalid)}")

    if plan.invalid:
        lines.append("")
        lines.append("Skipping packaging. The following entries are invalid:")
        for item in plan.invalid:
            lines.append(f"   - {item.entry.name} ({item.entry.path}): {item.reason}")
        lines.append("")
        lines.append("Fix or deselect these entries before proceeding.")

    return "\n".join(lines)


def render_packaging_text(plan: SnapshotPlan) -> str:
    """Render the tree of paths being packaged."""
    lines = ["Packaging:"]
    last = len(plan.valid) - 1
    for index, item in enumerate(plan.valid):
        bullet = "└─" if index == last else "├─"
        lines.append(f"  {bullet} {item.source_path}")
    return "\n".join(lines)


def render_output_summary(*, archive_path: Path, manifest_path: Path) -> str:
    """Render where the container and manifest were written."""
    lines = [
        "Output summary:",
        f"  Archive : {archive_path}",
        f"  Manifest: {manifest_path}",
        "",
        "Restitch archive complete. Ready to use `restitch restore --dry-run`.",
    ]
    return "\n".join(lines)
