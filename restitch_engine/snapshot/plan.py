"""
Snapshot planning for Restitch.

This module validates selected entries and converts them into a deterministic
list of container members. Planning performs no filesystem writes.

Design Notes
------------
Packaging is all-or-nothing. Every entry is checked before anything is written,
and every invalid entry is collected so the operator sees the full list at once.
An entry that repeats or nests inside an earlier one is invalid, since a
restore addresses each home-relative path exactly once.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import Iterable

from restitch_engine.compression import ContainerMember
from restitch_engine.data_models import ConfigEntry
from restitch_engine.errors import PathMappingError
from restitch_engine.paths_and_safety import expand_entry_path, home_relative_path, paths_overlap


@dataclass(frozen=True, slots=True)
class ValidEntry:
    """
    A selected entry whose source exists and maps into the home directory.

    Attributes
    ----------
    entry:
        Entry as selected.
    source_path:
        Expanded absolute source path.
    relative_path:
        Home-relative container path.
    """

    entry: ConfigEntry
    source_path: Path
    relative_path: PurePosixPath


@dataclass(frozen=True, slots=True)
class InvalidEntry:
    """
    A selected entry that cannot be packaged.

    Attributes
    ----------
    entry:
        Entry as selected.
    reason:
        Human-readable reason (missing path, outside home, overlaps an
        earlier entry).
    """

    entry: ConfigEntry
    reason: str


@dataclass(frozen=True, slots=True)
class SnapshotPlan:
    """
    Validated packaging plan.

    Attributes
    ----------
    entries:
        Every entry that was passed in, verbatim, in selection order. These
        are written to the manifest.
    valid:
        Entries that will be packaged.
    invalid:
        Entries that block packaging.
    """

    entries: tuple[ConfigEntry, ...]
    valid: tuple[ValidEntry, ...]
    invalid: tuple[InvalidEntry, ...]

    def members(self) -> list[ContainerMember]:
        """Container members in selection order."""
        return [
            ContainerMember(source_path=v.source_path, relative_path=v.relative_path)
            for v in self.valid
        ]


def build_snapshot_plan(entries: Iterable[ConfigEntry], *, home: Path) -> SnapshotPlan:
    """
    Partition selected entries into packageable and invalid ones.

    Parameters
    ----------
    entries:
        Selected entries in selection order.
    home:
        Home directory used for ``~`` expansion and the relative mapping.

    Returns
    -------
    SnapshotPlan
        Deterministic plan. No filesystem writes are performed.
    """
    all_entries = tuple(entries)
    valid: list[ValidEntry] = []
    invalid: list[InvalidEntry] = []

    for entry in all_entries:
        source_path = expand_entry_path(entry.path, home)
        if not source_path.exists():
            invalid.append(InvalidEntry(entry=entry, reason="path does not exist"))
            continue
        try:
            relative_path = home_relative_path(source_path, home)
        except PathMappingError as exc:
            invalid.append(InvalidEntry(entry=entry, reason=str(exc)))
            continue
        clash = next((v for v in valid if paths_overlap(v.relative_path, relative_path)), None)
        if clash is not None:
            invalid.append(
                InvalidEntry(
                    entry=entry,
                    reason=f"overlaps {clash.entry.name!r} ({clash.relative_path})",
                )
            )
            continue
        valid.append(ValidEntry(entry=entry, source_path=source_path, relative_path=relative_path))

    return SnapshotPlan(entries=all_entries, valid=tuple(valid), invalid=tuple(invalid))
