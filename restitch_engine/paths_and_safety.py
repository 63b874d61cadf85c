"""
Filesystem path policy and safety gates.

This module is the single choke point for determining where Restitch reads and
writes its own data, and for mapping live paths to home-relative paths.

- Runtime data lives under a Restitch "data root"
  (default: ``$XDG_DATA_HOME/restitch`` or ``~/.local/share/restitch``).
- Under the data root, Restitch only ever deletes inside its own work directory.
- Every entry path is addressed by its home-relative path. The same relative
  path is used inside the container, inside a backup root and inside the
  extraction workspace.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path, PurePosixPath

from .errors import PathMappingError

DATA_ROOT_ENV = "RESTITCH_DATA_ROOT"
HOME_ENV = "RESTITCH_HOME"


@dataclass(frozen=True, slots=True)
class DataPaths:
    """
    Concrete resolved paths for Restitch runtime data.

    Attributes
    ----------
    data_root:
        The root directory for all Restitch runtime data.
    outputs_root:
        Snapshot containers and their manifests.
    backups_root:
        One timestamp-labelled backup root per real restore.
    journals_root:
        Restore execution journals. Kept outside backup roots so that a
        revert never replays them into the home directory.
    work_root:
        Parent of per-invocation extraction workspaces. This is the only
        directory under the data root whose contents Restitch ever deletes.
    """

    data_root: Path
    outputs_root: Path
    backups_root: Path
    journals_root: Path
    work_root: Path


def default_data_root() -> Path:
    """
    Resolve the default Restitch data root.

    Preference order:
    1) ``$RESTITCH_DATA_ROOT`` if set
    2) ``$XDG_DATA_HOME/restitch`` if set
    3) ``~/.local/share/restitch``
    """
    override = os.environ.get(DATA_ROOT_ENV)
    if override:
        return Path(override).expanduser()

    xdg = os.environ.get("XDG_DATA_HOME")
    if xdg:
        return Path(xdg).expanduser() / "restitch"

    return Path.home() / ".local" / "share" / "restitch"


def resolve_data_paths(data_root: Path | None = None) -> DataPaths:
    """
    Resolve and return all runtime data paths.

    Parameters
    ----------
    data_root:
        Optional override for the data root.

    Returns
    -------
    DataPaths
        Resolved paths. Nothing is created on disk.
    """
    root = (data_root or default_data_root()).expanduser().resolve()
    return DataPaths(
        data_root=root,
        outputs_root=root / "outputs",
        backups_root=root / "backups",
        journals_root=root / "journals",
        work_root=root / "work",
    )


def resolve_home(home: Path | None = None) -> Path:
    """
    Resolve the home directory that entry paths are relative to.

    Parameters
    ----------
    home:
        Explicit override. When None, ``$RESTITCH_HOME`` is consulted, then
        the current user's home directory.

    Returns
    -------
    pathlib.Path
        Absolute home directory path.
    """
    if home is None:
        env_home = os.environ.get(HOME_ENV)
        home = Path(env_home) if env_home else Path.home()
    return home.expanduser().absolute()


def expand_entry_path(raw_path: str, home: Path) -> Path:
    """
    Expand a leading ``~`` against ``home`` and return an absolute path.

    Notes
    -----
    ``~user`` forms are not supported; they are returned unchanged and will
    usually fail the home-relative mapping.
    """
    if raw_path == "~":
        return home
    if raw_path.startswith("~/"):
        return home / raw_path[2:]
    return Path(raw_path)


def home_relative_path(path: Path, home: Path) -> PurePosixPath:
    """
    Map an absolute path to its home-relative form.

    Parameters
    ----------
    path:
        Absolute path of an entry.
    home:
        Resolved home directory.

    Returns
    -------
    pathlib.PurePosixPath
        Relative path with at least one component and no ``..`` parts.

    Raises
    ------
    PathMappingError
        If the path is not absolute, lies outside ``home``, is ``home`` itself,
        or contains ``..`` components.
    """
    if not path.is_absolute():
        raise PathMappingError(f"Entry path must be absolute: {path}")

    if ".." in path.parts:
        raise PathMappingError(f"Entry path must not contain '..': {path}")

    try:
        relative = path.relative_to(home)
    except ValueError as exc:
        raise PathMappingError(
            f"Entry path is outside the home directory {home}: {path}"
        ) from exc

    if not relative.parts:
        raise PathMappingError(f"Entry path must not be the home directory itself: {path}")

    return PurePosixPath(*relative.parts)


def is_within(child: Path, parent: Path) -> bool:
    """Return True when ``child`` equals or lies under ``parent`` (lexically)."""
    try:
        child.relative_to(parent)
        return True
    except ValueError:
        return False


def paths_overlap(a: PurePosixPath, b: PurePosixPath) -> bool:
    """Return True when two home-relative paths are equal or one contains the other."""
    return a == b or a in b.parents or b in a.parents
