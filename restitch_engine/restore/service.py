"""
Restore orchestration for Restitch.

This module coordinates:
- preflight checks (archive + manifest present, archive digest matches)
- extraction into a per-invocation workspace
- deterministic planning
- rendering
- confirmation and execution (or a dry run)

The backup label is taken from the clock once, at invocation start, and used
for every entry of the run.
"""

from __future__ import annotations

import shutil
import tempfile
from pathlib import Path

from restitch_engine.clock import Clock, SystemClock, format_backup_label
from restitch_engine.compression import extract_container
from restitch_engine.errors import RestitchIOError
from restitch_engine.manifest_store import read_manifest, sha256_file
from restitch_engine.paths_and_safety import DataPaths, is_within

from .data_models import RestoreOutcome
from .errors import RestorePreflightError
from .execute import Confirm, execute_restore_plan
from .journal import RestoreExecutionJournal
from .plan import build_restore_plan
from .render import render_dry_run_footer, render_restore_plan_text, render_restore_summary


def _preflight(archive_path: Path, manifest_path: Path) -> None:
    missing = [p for p in (archive_path, manifest_path) if not p.is_file()]
    if missing:
        listed = "\n".join(f"  - {p}" for p in missing)
        raise RestorePreflightError(
            "Archive or manifest not found:\n"
            f"{listed}\n"
            "Run `restitch` first to export a snapshot, or pass explicit paths:\n"
            "  restitch restore path/to/archive.tar.zst path/to/archive.manifest.toml"
        )


def _verify_archive_digest(archive_path: Path, expected: str | None) -> None:
    if expected is None:
        return
    try:
        actual = sha256_file(archive_path)
    except OSError as exc:
        raise RestorePreflightError(f"Failed to read archive: {archive_path} ({exc!s})") from exc
    if actual != expected:
        raise RestorePreflightError(
            f"Archive {archive_path} does not match its manifest "
            f"(sha256 {actual}, manifest expects {expected})."
        )


def _create_workspace(work_root: Path) -> Path:
    try:
        work_root.mkdir(parents=True, exist_ok=True)
        return Path(tempfile.mkdtemp(prefix="extract-", dir=work_root))
    except OSError as exc:
        raise RestitchIOError(
            f"Failed to create extraction workspace under {work_root} ({exc!s})"
        ) from exc


def _remove_workspace(workspace: Path, work_root: Path) -> None:
    if workspace == work_root or not is_within(workspace, work_root):
        return
    try:
        shutil.rmtree(workspace)
    except OSError as exc:
        print(f"WARNING: Extraction workspace was not removed: {workspace} ({exc!s})")


def run_restore(
    *,
    archive_path: Path,
    manifest_path: Path,
    dry_run: bool,
    home: Path,
    data_paths: DataPaths,
    confirm: Confirm | None = None,
    assume_yes: bool = False,
    clock: Clock | None = None,
) -> RestoreOutcome:
    """
    Restore a snapshot onto ``home``, or show what a restore would do.

    Parameters
    ----------
    archive_path:
        Snapshot container (``.tar.zst`` or ``.tar.gz``).
    manifest_path:
        Snapshot manifest (``.manifest.toml``).
    dry_run:
        If True, print the plan and mutate nothing under home or the backups root.
    home:
        Home directory destinations are relative to.
    data_paths:
        Resolved runtime data paths (backups, journals, work).
    confirm:
        Confirmation callback for real runs.
    assume_yes:
        Skip the confirmation callback.
    clock:
        Injectable clock for the backup label and journal timestamps.

    Returns
    -------
    RestoreOutcome
        Outcome of the run.

    Raises
    ------
    RestorePreflightError
        If the archive or manifest is missing or they do not match.
    RestitchIOError
        If the extraction workspace cannot be created.
    ManifestFormatError
        If the manifest cannot be parsed.
    ContainerError
        If the archive cannot be extracted.
    RestorePlanError
        If an entry cannot be planned.
    UserCancelledError
        If the operator declined.
    RestoreExecutionError
        If an entry fails during a real run.
    """
    run_clock = clock or SystemClock()
    backup_label = format_backup_label(run_clock.now())

    _preflight(archive_path, manifest_path)
    manifest = read_manifest(manifest_path)
    _verify_archive_digest(archive_path, manifest.archive_sha256)

    if not manifest.items:
        print(f"Manifest lists no entries. Nothing to restore: {manifest_path}")
        return RestoreOutcome(dry_run=dry_run, backup_root=None, results=())

    workspace = _create_workspace(data_paths.work_root)
    try:
        print("Extracting archive...")
        extract_container(archive_path=archive_path, destination_dir=workspace)
        print(f"Extracted to: {workspace}")
        print()

        plan = build_restore_plan(
            manifest=manifest,
            extraction_root=workspace,
            home=home,
            backups_root=data_paths.backups_root,
            backup_label=backup_label,
        )
        print(render_restore_plan_text(plan, dry_run=dry_run))
        print()

        if dry_run:
            outcome = execute_restore_plan(plan=plan, dry_run=True)
            print(render_dry_run_footer())
            return outcome

        journal = RestoreExecutionJournal(
            data_paths.journals_root / f"{backup_label}.jsonl",
            clock=run_clock,
        )
        outcome = execute_restore_plan(
            plan=plan,
            dry_run=False,
            confirm=confirm,
            assume_yes=assume_yes,
            journal=journal,
        )
        print()
        print(render_restore_summary(outcome))
        return outcome
    finally:
        _remove_workspace(workspace, data_paths.work_root)
