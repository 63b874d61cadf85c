"""
Target discovery.

Turns pre-snapshot target definitions into selectable config entries. Targets
whose path does not exist on this machine are dropped silently: they are simply
not offered for selection.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

from .data_models import ConfigEntry, TargetDefinition
from .manifest_store import load_targets
from .paths_and_safety import expand_entry_path


def scan_targets(definitions: Iterable[TargetDefinition], *, home: Path) -> list[ConfigEntry]:
    """
    Expand target paths and keep the ones that exist.

    Parameters
    ----------
    definitions:
        Target definitions in file order.
    home:
        Home directory used for ``~`` expansion.

    Returns
    -------
    list[ConfigEntry]
        Entries with absolute paths, all pre-selected, in definition order.
    """
    entries: list[ConfigEntry] = []
    for definition in definitions:
        expanded = expand_entry_path(definition.path, home)
        if expanded.exists():
            entries.append(ConfigEntry(name=definition.name, path=str(expanded), selected=True))
    return entries


def discover_entries(targets_path: Path, *, home: Path) -> list[ConfigEntry]:
    """Load a targets file and return the entries present on this machine."""
    return scan_targets(load_targets(targets_path), home=home)
