from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path, PurePosixPath
from typing import Any


class RestoreActionType(Enum):
    """Planned action for one manifest entry."""

    REPLACE_DIRECTORY = "replace_directory"
    REPLACE_FILE = "replace_file"
    COPY_NEW = "copy_new"


@dataclass(frozen=True, slots=True)
class RestoreAction:
    """
    A single planned restore action.

    Attributes
    ----------
    entry_index:
        Index of the entry in the manifest.
    name:
        Entry display name.
    relative_path:
        Home-relative path shared by the workspace, the backup root and home.
    source_path:
        Extracted content inside the workspace.
    destination_path:
        Absolute live destination.
    backup_path:
        Where an existing destination is moved to. Only meaningful when
        ``destination_exists`` is True.
    destination_exists:
        Whether the destination existed at planning time.
    destination_is_dir:
        Whether the existing destination is a directory.
    source_is_dir:
        Whether the extracted content is a directory (copied recursively).
    action_type:
        Planned action.
    """

    entry_index: int
    name: str
    relative_path: PurePosixPath
    source_path: Path
    destination_path: Path
    backup_path: Path
    destination_exists: bool
    destination_is_dir: bool
    source_is_dir: bool
    action_type: RestoreActionType

    @property
    def needs_backup(self) -> bool:
        """True when the destination must be moved aside before copying."""
        return self.destination_exists

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable payload."""
        return {
            "entry_index": self.entry_index,
            "name": self.name,
            "relative_path": self.relative_path.as_posix(),
            "source_path": str(self.source_path),
            "destination_path": str(self.destination_path),
            "backup_path": str(self.backup_path),
            "destination_exists": self.destination_exists,
            "destination_is_dir": self.destination_is_dir,
            "source_is_dir": self.source_is_dir,
            "action_type": self.action_type.value,
        }


@dataclass(frozen=True, slots=True)
class RestorePlan:
    """
    Deterministic restore plan.

    Attributes
    ----------
    backup_label:
        Label of the backup root this restore would create.
    backup_root:
        Backup root path (created lazily, only by a real restore that needs it).
    extraction_root:
        Workspace the container was extracted into.
    home:
        Home directory destinations are relative to.
    actions:
        One action per manifest entry, in manifest order.
    """

    backup_label: str
    backup_root: Path
    extraction_root: Path
    home: Path
    actions: tuple[RestoreAction, ...]

    @property
    def backups_needed(self) -> int:
        """Number of destinations that will be moved into the backup root."""
        return sum(1 for action in self.actions if action.needs_backup)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable payload."""
        return {
            "backup_label": self.backup_label,
            "backup_root": str(self.backup_root),
            "extraction_root": str(self.extraction_root),
            "home": str(self.home),
            "actions": [action.to_dict() for action in self.actions],
        }


class EntryOutcome(str, Enum):
    """Outcome of executing one restore action."""

    RESTORED = "restored"
    PLANNED_DRY_RUN = "planned_dry_run"


@dataclass(frozen=True, slots=True)
class EntryResult:
    """
    Result of executing one restore action.

    Attributes
    ----------
    entry_index:
        Index of the entry in the manifest.
    name:
        Entry display name.
    outcome:
        What happened.
    backup_path:
        Where the previous destination now lives, if it was backed up.
    """

    entry_index: int
    name: str
    outcome: EntryOutcome
    backup_path: Path | None = None


@dataclass(frozen=True, slots=True)
class RestoreOutcome:
    """
    Result of a restore execution.

    Attributes
    ----------
    dry_run:
        Whether the run was a dry run.
    backup_root:
        Backup root created by this run, or None if nothing was backed up.
    results:
        Per-entry results in manifest order.
    """

    dry_run: bool
    backup_root: Path | None
    results: tuple[EntryResult, ...]
