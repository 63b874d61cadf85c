"""
Snapshot orchestration for Restitch.

This module coordinates:
- validation of selected entries (all-or-nothing)
- deterministic reporting
- container writing at home-relative paths
- manifest emission alongside the container

Safety posture
--------------
- Nothing is written unless every selected entry is valid.
- Output lives in a dedicated outputs directory; an existing container or
  manifest with the same name is replaced.
- A failed write is not rolled back.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Sequence

from restitch_engine.clock import Clock, SystemClock
from restitch_engine.compression import ContainerFormat, write_container
from restitch_engine.data_models import ConfigEntry, SnapshotManifest
from restitch_engine.errors import RestitchIOError
from restitch_engine.manifest_store import sha256_file, write_manifest_atomic
from restitch_engine.snapshot.errors import SnapshotIOError, SnapshotValidationError
from restitch_engine.snapshot.plan import SnapshotPlan, build_snapshot_plan
from restitch_engine.snapshot.render import (
    render_output_summary,
    render_packaging_text,
    render_validation_text,
)

DEFAULT_SNAPSHOT_NAME = "restitch-archive"
MANIFEST_SUFFIX = ".manifest.toml"


class SnapshotStatus(str, Enum):
    """Outcome of a packaging request."""

    CREATED = "created"
    EMPTY = "empty"


@dataclass(frozen=True, slots=True)
class SnapshotResult:
    """
    Result of a packaging request.

    Attributes
    ----------
    status:
        ``created`` or ``empty`` (nothing was selected).
    archive_path:
        Written container, when created.
    manifest_path:
        Written manifest, when created.
    plan:
        The validated plan, when entries were given.
    """

    status: SnapshotStatus
    archive_path: Path | None = None
    manifest_path: Path | None = None
    plan: SnapshotPlan | None = None


def snapshot_paths(outputs_root: Path, name: str) -> tuple[Path, Path]:
    """
    Return ``(archive_path, manifest_path)`` for a snapshot name.

    Raises
    ------
    SnapshotValidationError
        If the name is empty or contains path separators.
    """
    cleaned = name.strip()
    if not cleaned or cleaned in {".", ".."} or "/" in cleaned or "\\" in cleaned:
        raise SnapshotValidationError(f"Snapshot name must be a simple file name: {name!r}")
    archive_path = outputs_root / f"{cleaned}.{ContainerFormat.TAR_ZST.value}"
    manifest_path = outputs_root / f"{cleaned}{MANIFEST_SUFFIX}"
    return archive_path, manifest_path


def build_snapshot(
    *,
    entries: Sequence[ConfigEntry],
    name: str,
    outputs_root: Path,
    home: Path,
    clock: Clock | None = None,
) -> SnapshotResult:
    """
    Package selected entries into a container and write its manifest.

    Parameters
    ----------
    entries:
        Selected entries, in selection order.
    name:
        Snapshot base name (``<name>.tar.zst`` / ``<name>.manifest.toml``).
    outputs_root:
        Output directory, created on demand.
    home:
        Home directory for ``~`` expansion and the relative mapping.
    clock:
        Injectable clock used for the manifest timestamp.

    Returns
    -------
    SnapshotResult
        ``empty`` when no entries were given, otherwise ``created``.

    Raises
    ------
    SnapshotValidationError
        If any entry is missing or outside the home directory. No output is
        created in this case.
    SnapshotIOError
        If the output directory, container or manifest cannot be written.
    """
    if not entries:
        print("No config items selected. Nothing to export.")
        return SnapshotResult(status=SnapshotStatus.EMPTY)

    archive_path, manifest_path = snapshot_paths(outputs_root, name)
    run_clock = clock or SystemClock()

    plan = build_snapshot_plan(entries, home=home)
    print(render_validation_text(plan))

    if plan.invalid:
        names = ", ".join(f"{item.entry.name} ({item.entry.path})" for item in plan.invalid)
        raise SnapshotValidationError(
            f"Packaging aborted; {len(plan.invalid)} selected entries are invalid: {names}",
            invalid=plan.invalid,
        )

    try:
        outputs_root.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise SnapshotIOError(f"Failed to create output directory: {outputs_root} ({exc!s})") from exc

    print()
    print(render_packaging_text(plan))

    try:
        write_container(output_path=archive_path, members=plan.members())
        digest = sha256_file(archive_path)
    except (OSError, RestitchIOError) as exc:
        raise SnapshotIOError(f"Failed to write snapshot container: {archive_path} ({exc!s})") from exc

    manifest = SnapshotManifest(
        items=plan.entries,
        archive_name=archive_path.name,
        archive_sha256=digest,
        created_at=run_clock.now().isoformat(timespec="seconds"),
    )
    try:
        write_manifest_atomic(manifest_path, manifest)
    except RestitchIOError as exc:
        raise SnapshotIOError(str(exc)) from exc

    print()
    print(render_output_summary(archive_path=archive_path, manifest_path=manifest_path))

    return SnapshotResult(
        status=SnapshotStatus.CREATED,
        archive_path=archive_path,
        manifest_path=manifest_path,
        plan=plan,
    )
