"""
Revert for Restitch.

A revert replays one backup root onto the home directory: every file under the
root is copied to ``home / <relative path>``, overwriting what is there.

Notes
-----
- Backup roots are selected by label. Labels are fixed-width timestamps, so the
  lexicographically greatest label is the most recent root.
- Directories under the backups location whose names are not labels are ignored.
- A revert makes no backup of the current state and is not itself revertible.
  Whatever occupies a replayed path is replaced, including a directory where
  the backup holds a file.
- The backup root is left untouched after a revert.
"""

from __future__ import annotations

import os
import shutil
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Iterator

from restitch_engine.clock import parse_backup_label
from restitch_engine.errors import UserCancelledError
from restitch_engine.restore.execute import Confirm

from .errors import RevertError

CONFIRM_PROMPT = "This will overwrite your current config files. Proceed?"


@dataclass(frozen=True, slots=True)
class BackupRoot:
    """
    One timestamp-labelled backup root.

    Attributes
    ----------
    label:
        Directory name (``YYYY-MM-DD_HH-MM-SS``).
    path:
        Absolute path of the root.
    created:
        Time parsed from the label.
    """

    label: str
    path: Path
    created: datetime

    def describe(self) -> str:
        """Human-readable creation time, e.g. ``Jan 05, 2024 at 13:04``."""
        return self.created.strftime("%b %d, %Y at %H:%M")


class RevertStatus(str, Enum):
    """Outcome of a revert request."""

    REVERTED = "reverted"
    NOTHING_TO_REVERT = "nothing_to_revert"


@dataclass(frozen=True, slots=True)
class RevertOutcome:
    """
    Result of a revert request.

    Attributes
    ----------
    status:
        ``reverted`` or ``nothing_to_revert``.
    backup_root:
        The replayed root, if any.
    restored:
        Home paths written, in replay order.
    """

    status: RevertStatus
    backup_root: BackupRoot | None = None
    restored: tuple[Path, ...] = ()


def list_backup_roots(backups_root: Path) -> list[BackupRoot]:
    """
    Enumerate backup roots, oldest first.

    Parameters
    ----------
    backups_root:
        Parent directory of all backup roots. A missing directory has no roots.

    Returns
    -------
    list[BackupRoot]
        Roots sorted by label.

    Raises
    ------
    RevertError
        If the backups directory exists but cannot be read.
    """
    if not backups_root.exists():
        return []

    try:
        children = list(backups_root.iterdir())
    except OSError as exc:
        raise RevertError(f"Failed to read backups directory: {backups_root} ({exc!s})") from exc

    roots: list[BackupRoot] = []
    for child in children:
        if child.is_symlink() or not child.is_dir():
            continue
        created = parse_backup_label(child.name)
        if created is None:
            continue
        roots.append(BackupRoot(label=child.name, path=child, created=created))

    roots.sort(key=lambda root: root.label)
    return roots


def find_latest_backup_root(backups_root: Path) -> BackupRoot | None:
    """Return the root with the lexicographically greatest label, or None."""
    roots = list_backup_roots(backups_root)
    return roots[-1] if roots else None


def _select_root(backups_root: Path, label: str | None) -> BackupRoot | None:
    if label is None:
        return find_latest_backup_root(backups_root)
    for root in list_backup_roots(backups_root):
        if root.label == label:
            return root
    raise RevertError(f"No backup root labelled {label!r} in {backups_root}")


def _clear_for_file(destination: Path) -> None:
    if destination.is_symlink() or destination.is_file():
        destination.unlink()
    elif destination.is_dir():
        shutil.rmtree(destination)


def _clear_for_directory(destination: Path) -> None:
    # Symlinks to directories are kept and written through.
    if (destination.exists() or destination.is_symlink()) and not destination.is_dir():
        destination.unlink()


def _replace_file(source: Path, destination: Path) -> None:
    _clear_for_file(destination)
    destination.parent.mkdir(parents=True, exist_ok=True)
    shutil.copy2(source, destination, follow_symlinks=False)


def _replay(root: BackupRoot, home: Path) -> list[Path]:
    restored: list[Path] = []
    for current, names in _iter_backup_tree(root.path):
        relative_dir = current.relative_to(root.path)
        target_dir = home / relative_dir
        if relative_dir.parts:
            # A restore may have swapped a directory for a file at this path.
            _clear_for_directory(target_dir)
        target_dir.mkdir(parents=True, exist_ok=True)

        for name in names:
            destination = target_dir / name
            _replace_file(current / name, destination)
            print(f"Restored: {destination}")
            restored.append(destination)
    return restored


def _iter_backup_tree(top: Path) -> Iterator[tuple[Path, list[str]]]:
    def _raise(exc: OSError) -> None:
        raise exc

    for dirpath, dirnames, filenames in os.walk(top, onerror=_raise):
        current = Path(dirpath)
        # Directory symlinks are replayed as links, not descended into.
        link_dirs = [d for d in dirnames if (current / d).is_symlink()]
        dirnames[:] = sorted(d for d in dirnames if d not in link_dirs)
        yield current, sorted(filenames + link_dirs)


def run_revert(
    *,
    backups_root: Path,
    home: Path,
    label: str | None = None,
    confirm: Confirm | None = None,
    assume_yes: bool = False,
) -> RevertOutcome:
    """
    Replay the most recent (or an explicitly labelled) backup root onto home.

    Parameters
    ----------
    backups_root:
        Parent directory of all backup roots.
    home:
        Home directory files are restored into.
    label:
        Optional explicit backup label. Defaults to the most recent root.
    confirm:
        Confirmation callback, asked once before any mutation.
    assume_yes:
        Skip the confirmation callback.

    Returns
    -------
    RevertOutcome
        ``nothing_to_revert`` when no backup roots exist, otherwise ``reverted``.

    Raises
    ------
    UserCancelledError
        If the operator declined. Nothing was mutated.
    RevertError
        If the backups directory or root cannot be read, or a copy fails.
        Files already copied stay copied.
    ValueError
        If neither a confirmation callback nor ``assume_yes`` is given.
    """
    root = _select_root(backups_root, label)
    if root is None:
        print(f"No backup directories found in {backups_root}. Nothing to revert.")
        return RevertOutcome(status=RevertStatus.NOTHING_TO_REVERT)

    print(f"Backup root: {root.path}")
    print(f"Created: {root.describe()}")
    print()

    if not assume_yes:
        if confirm is None:
            raise ValueError("A confirmation callback is required unless assume_yes is set.")
        if not confirm(CONFIRM_PROMPT):
            raise UserCancelledError("Revert cancelled.")

    print("Reverting config files...")
    try:
        restored = _replay(root, home)
    except (OSError, shutil.Error) as exc:
        raise RevertError(f"Revert from {root.path} failed: {exc!s}") from exc

    print()
    print(f"Revert complete: {len(restored)} files restored from {root.label}.")
    return RevertOutcome(status=RevertStatus.REVERTED, backup_root=root, restored=tuple(restored))
