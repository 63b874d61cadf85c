from __future__ import annotations

from pathlib import Path, PurePosixPath

from restitch_engine.data_models import SnapshotManifest
from restitch_engine.errors import PathMappingError
from restitch_engine.paths_and_safety import expand_entry_path, home_relative_path, paths_overlap

from .data_models import RestoreAction, RestoreActionType, RestorePlan
from .errors import RestorePlanError


def _path_present(path: Path) -> bool:
    # A dangling symlink still occupies the destination name.
    return path.is_symlink() or path.exists()


def _classify(*, destination_exists: bool, destination_is_dir: bool) -> RestoreActionType:
    if not destination_exists:
        return RestoreActionType.COPY_NEW
    if destination_is_dir:
        return RestoreActionType.REPLACE_DIRECTORY
    return RestoreActionType.REPLACE_FILE


def build_restore_plan(
    *,
    manifest: SnapshotManifest,
    extraction_root: Path,
    home: Path,
    backups_root: Path,
    backup_label: str,
) -> RestorePlan:
    """
    Build a deterministic restore plan from a manifest and an extracted container.

    Parameters
    ----------
    manifest:
        Snapshot manifest; its entry order is the plan order.
    extraction_root:
        Workspace the container was fully extracted into.
    home:
        Home directory destinations are relative to.
    backups_root:
        Parent directory of all backup roots.
    backup_label:
        Timestamp label of the backup root for this restore.

    Returns
    -------
    RestorePlan
        One action per manifest entry. Calling this twice over unchanged
        inputs yields equal plans.

    Raises
    ------
    RestorePlanError
        If an entry cannot be mapped home-relative, two entries overlap, or an
        entry's content is missing from the extraction root.

    Notes
    -----
    Planning performs no filesystem mutation. It only inspects existence and
    type of the extracted content and of each destination.
    """
    backup_root = backups_root / backup_label
    actions: list[RestoreAction] = []
    seen: list[tuple[PurePosixPath, str]] = []

    for index, entry in enumerate(manifest.items):
        destination = expand_entry_path(entry.path, home)
        try:
            relative = home_relative_path(destination, home)
        except PathMappingError as exc:
            raise RestorePlanError(f"Cannot restore {entry.name!r}: {exc}") from exc

        for other_relative, other_name in seen:
            if paths_overlap(relative, other_relative):
                raise RestorePlanError(
                    f"Entries {other_name!r} ({other_relative}) and {entry.name!r} ({relative}) "
                    "overlap; a snapshot cannot restore the same path twice."
                )
        seen.append((relative, entry.name))

        source = extraction_root / relative
        if not _path_present(source):
            raise RestorePlanError(
                f"Archive does not contain content for {entry.name!r} (expected {relative}). "
                "The archive and manifest may not belong together."
            )

        destination_exists = _path_present(destination)
        destination_is_dir = destination_exists and destination.is_dir() and not destination.is_symlink()

        actions.append(
            RestoreAction(
                entry_index=index,
                name=entry.name,
                relative_path=relative,
                source_path=source,
                destination_path=destination,
                backup_path=backup_root / relative,
                destination_exists=destination_exists,
                destination_is_dir=destination_is_dir,
                source_is_dir=source.is_dir() and not source.is_symlink(),
                action_type=_classify(
                    destination_exists=destination_exists,
                    destination_is_dir=destination_is_dir,
                ),
            )
        )

    return RestorePlan(
        backup_label=backup_label,
        backup_root=backup_root,
        extraction_root=extraction_root,
        home=home,
        actions=tuple(actions),
    )
