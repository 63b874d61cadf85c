"""
Restore execution for Restitch.

This module applies a restore plan entry by entry:

1. move an existing destination into the backup root (never copy-then-delete)
2. create the destination's parent directories
3. copy the extracted content into place

Safety posture
--------------
- Dry runs perform no filesystem mutation at all.
- Nothing is mutated until the operator has confirmed (or confirmation was
  waived with ``assume_yes``).
- Entries are independent. A failure on one entry leaves earlier entries
  restored and leaves the failing entry's backup in place.
- Backups are never deleted or overwritten.
"""

from __future__ import annotations

import shutil
from pathlib import Path
from typing import Callable

from restitch_engine.errors import UserCancelledError

from .data_models import EntryOutcome, EntryResult, RestoreAction, RestoreOutcome, RestorePlan
from .errors import RestoreExecutionError
from .journal import RestoreExecutionJournal

Confirm = Callable[[str], bool]

CONFIRM_PROMPT = "This will overwrite your current config files. Proceed?"


def _path_present(path: Path) -> bool:
    return path.is_symlink() or path.exists()


def _backup_destination(action: RestoreAction) -> None:
    backup_path = action.backup_path
    if _path_present(backup_path):
        raise RestoreExecutionError(f"Refusing to overwrite existing backup: {backup_path}")
    backup_path.parent.mkdir(parents=True, exist_ok=True)
    shutil.move(str(action.destination_path), str(backup_path))


def _copy_into_place(action: RestoreAction) -> None:
    action.destination_path.parent.mkdir(parents=True, exist_ok=True)
    if action.source_is_dir:
        shutil.copytree(action.source_path, action.destination_path, symlinks=True)
    else:
        shutil.copy2(action.source_path, action.destination_path, follow_symlinks=False)


def _journal(journal: RestoreExecutionJournal | None, event: str, data: dict[str, object]) -> None:
    if journal is None:
        return
    try:
        journal.append(event, data)
    except OSError as exc:
        raise RestoreExecutionError(
            f"Failed to write restore journal {journal.path} ({exc!s})"
        ) from exc


def execute_restore_plan(
    *,
    plan: RestorePlan,
    dry_run: bool,
    confirm: Confirm | None = None,
    assume_yes: bool = False,
    journal: RestoreExecutionJournal | None = None,
) -> RestoreOutcome:
    """
    Execute a restore plan.

    Parameters
    ----------
    plan:
        Plan from ``build_restore_plan``. Its backup label was fixed when the
        plan was built and is used for every entry of this run.
    dry_run:
        If True, no filesystem mutations are performed and no backup root is
        created.
    confirm:
        Callback asked once, before any mutation. Returning False cancels.
    assume_yes:
        Skip the confirmation callback.
    journal:
        Optional append-only execution journal (ignored for dry runs).

    Returns
    -------
    RestoreOutcome
        Per-entry results in manifest order.

    Raises
    ------
    UserCancelledError
        If the operator declined. Nothing was mutated.
    RestoreExecutionError
        If the backup root already exists, the journal cannot be written, or
        an entry fails mid-run.
    ValueError
        If a real run has neither a confirmation callback nor ``assume_yes``.
    """
    if dry_run:
        results = tuple(
            EntryResult(
                entry_index=action.entry_index,
                name=action.name,
                outcome=EntryOutcome.PLANNED_DRY_RUN,
                backup_path=action.backup_path if action.needs_backup else None,
            )
            for action in plan.actions
        )
        return RestoreOutcome(dry_run=True, backup_root=None, results=results)

    if not assume_yes and confirm is None:
        raise ValueError("A confirmation callback is required unless assume_yes is set.")

    if plan.backups_needed and _path_present(plan.backup_root):
        raise RestoreExecutionError(
            f"Backup root already exists: {plan.backup_root}. "
            "Backup roots are never merged; retry in a moment."
        )

    if not assume_yes and confirm is not None and not confirm(CONFIRM_PROMPT):
        raise UserCancelledError("Restore cancelled.")

    _journal(
        journal,
        "restore_started",
        {"backup_root": str(plan.backup_root), "entries": len(plan.actions)},
    )

    results: list[EntryResult] = []
    backup_root_used = False

    for action in plan.actions:
        step = "backup"
        moved = False
        try:
            if action.needs_backup:
                _backup_destination(action)
                moved = True
                backup_root_used = True
                _journal(
                    journal,
                    "entry_backed_up",
                    {
                        "name": action.name,
                        "destination_path": str(action.destination_path),
                        "backup_path": str(action.backup_path),
                    },
                )
            step = "copy"
            _copy_into_place(action)
        except (OSError, shutil.Error, RestoreExecutionError) as exc:
            hint = ""
            if moved:
                hint = f" Previous content is preserved at {action.backup_path}."
            try:
                _journal(
                    journal,
                    "entry_failed",
                    {
                        "name": action.name,
                        "step": step,
                        "error_type": type(exc).__name__,
                        "error": str(exc),
                        "backup_exists": _path_present(action.backup_path),
                    },
                )
            except RestoreExecutionError as journal_exc:
                hint += f" {journal_exc}."
            raise RestoreExecutionError(
                f"Failed to restore {action.name!r} to {action.destination_path} "
                f"during {step}: {exc!s}.{hint}"
            ) from exc

        _journal(
            journal,
            "entry_restored",
            {"name": action.name, "destination_path": str(action.destination_path)},
        )
        print(f"Restored: {action.destination_path}")
        results.append(
            EntryResult(
                entry_index=action.entry_index,
                name=action.name,
                outcome=EntryOutcome.RESTORED,
                backup_path=action.backup_path if action.needs_backup else None,
            )
        )

    _journal(journal, "restore_completed", {"restored": len(results)})

    return RestoreOutcome(
        dry_run=False,
        backup_root=plan.backup_root if backup_root_used else None,
        results=tuple(results),
    )
