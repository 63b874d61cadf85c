"""
Command-line interface for Restitch.

Notes
-----
The CLI is intentionally thin. It parses arguments and delegates to engine modules.

Commands
--------
- package (default): select config targets and write a snapshot.
- restore: restore a snapshot (``--dry-run`` shows the plan only).
- revert: replay the most recent backup root onto home.
- list-backups: show available backup roots.
- init-targets: write a starter targets file.

Exit codes
----------
- 0: success, dry run, nothing to do, or operator cancelled
- 1: validation, format or I/O failure
- 2: usage error
"""

from __future__ import annotations

import argparse
from pathlib import Path

from restitch_engine.data_models import TargetDefinition
from restitch_engine.errors import RestitchError, UsageError, UserCancelledError
from restitch_engine.manifest_store import write_targets
from restitch_engine.paths_and_safety import resolve_data_paths, resolve_home
from restitch_engine.restore.service import run_restore
from restitch_engine.revert.service import list_backup_roots, run_revert
from restitch_engine.snapshot.service import DEFAULT_SNAPSHOT_NAME, build_snapshot, snapshot_paths
from restitch_engine.targets import discover_entries

DEFAULT_TARGETS_PATH = Path("config_targets.toml")

STARTER_TARGETS: tuple[TargetDefinition, ...] = (
    TargetDefinition(name="Bash Config", path="~/.bashrc"),
    TargetDefinition(name="Zsh Config", path="~/.zshrc"),
    TargetDefinition(name="Git Config", path="~/.gitconfig"),
    TargetDefinition(name="Neovim", path="~/.config/nvim"),
    TargetDefinition(name="Starship Prompt", path="~/.config/starship.toml"),
    TargetDefinition(name="Kitty Terminal", path="~/.config/kitty"),
    TargetDefinition(name="Alacritty Terminal", path="~/.config/alacritty"),
)


def _confirm_on_terminal(prompt: str) -> bool:
    try:
        answer = input(f"{prompt} [y/N]: ")
    except EOFError:
        return False
    return answer.strip().lower() in {"y", "yes"}


def build_parser() -> argparse.ArgumentParser:
    """
    Build and return the top-level argument parser.

    Returns
    -------
    argparse.ArgumentParser
        Configured parser.
    """
    parser = argparse.ArgumentParser(
        prog="restitch",
        description="Restitch: export, restore, or revert Linux config files",
    )
    parser.add_argument(
        "--data-root",
        type=Path,
        default=None,
        help="Override the Restitch data root (outputs, backups, journals). "
        "Defaults to $RESTITCH_DATA_ROOT or ~/.local/share/restitch.",
    )
    parser.add_argument(
        "--home",
        type=Path,
        default=None,
        help="Override the home directory entries are relative to (default: $RESTITCH_HOME or ~).",
    )
    parser.add_argument(
        "--dry-run",
        dest="global_dry_run",
        action="store_true",
        help="Simulate a restore without writing files (only valid with 'restore').",
    )
    # Running without a subcommand packages with these defaults.
    parser.set_defaults(targets=DEFAULT_TARGETS_PATH, name=DEFAULT_SNAPSHOT_NAME, select_all=False)
    sub = parser.add_subparsers(dest="command", required=False)

    package_p = sub.add_parser(
        "package",
        help="Select config targets and write a snapshot (default command)",
    )
    _add_package_arguments(package_p)

    restore_p = sub.add_parser("restore", help="Restore a snapshot onto this machine")
    restore_p.add_argument(
        "archive",
        nargs="?",
        type=Path,
        default=None,
        help="Snapshot container (.tar.zst or .tar.gz). Defaults to the last exported snapshot.",
    )
    restore_p.add_argument(
        "manifest",
        nargs="?",
        type=Path,
        default=None,
        help="Snapshot manifest (.manifest.toml). Defaults to the file next to the archive.",
    )
    restore_p.add_argument(
        "--name",
        default=DEFAULT_SNAPSHOT_NAME,
        help=f"Snapshot name used when no archive is given (default: {DEFAULT_SNAPSHOT_NAME}).",
    )
    restore_p.add_argument(
        "--dry-run",
        action="store_true",
        help="Show the restore plan without writing files.",
    )
    restore_p.add_argument("--yes", action="store_true", help="Do not ask for confirmation.")

    revert_p = sub.add_parser("revert", help="Replay the most recent backup onto this machine")
    revert_p.add_argument(
        "--label",
        default=None,
        help="Revert a specific backup root (YYYY-MM-DD_HH-MM-SS) instead of the most recent.",
    )
    revert_p.add_argument("--yes", action="store_true", help="Do not ask for confirmation.")

    sub.add_parser("list-backups", help="List backup roots created by restores")

    init_p = sub.add_parser("init-targets", help="Write a starter targets file")
    init_p.add_argument(
        "--targets",
        type=Path,
        default=DEFAULT_TARGETS_PATH,
        help=f"Targets file to create (default: {DEFAULT_TARGETS_PATH}).",
    )
    init_p.add_argument("--overwrite", action="store_true", help="Replace an existing targets file.")

    return parser


def _add_package_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--targets",
        type=Path,
        default=DEFAULT_TARGETS_PATH,
        help=f"Targets file with [[config]] blocks (default: {DEFAULT_TARGETS_PATH}).",
    )
    parser.add_argument(
        "--name",
        default=DEFAULT_SNAPSHOT_NAME,
        help=f"Snapshot base name (default: {DEFAULT_SNAPSHOT_NAME}).",
    )
    parser.add_argument(
        "--all",
        dest="select_all",
        action="store_true",
        help="Package every discovered target without opening the selection dialog.",
    )


def _check_usage(args: argparse.Namespace) -> None:
    if args.global_dry_run and args.command != "restore":
        raise UsageError("'--dry-run' can only be used with 'restore'.")


def _resolve_restore_inputs(args: argparse.Namespace, outputs_root: Path) -> tuple[Path, Path]:
    if args.archive is None:
        return snapshot_paths(outputs_root, args.name)
    if args.manifest is not None:
        return args.archive, args.manifest
    archive: Path = args.archive
    base = archive.name
    for suffix in (".tar.zst", ".tzst", ".tar.gz", ".tgz"):
        if base.lower().endswith(suffix):
            base = base[: -len(suffix)]
            break
    return archive, archive.with_name(f"{base}.manifest.toml")


def _run_package(args: argparse.Namespace) -> int:
    home = resolve_home(args.home)
    paths = resolve_data_paths(args.data_root)

    targets_path: Path = args.targets
    entries = discover_entries(targets_path, home=home)
    if not entries:
        print(f"None of the targets in {targets_path} exist on this machine. Nothing to export.")
        return 0

    if args.select_all:
        selected = entries
    else:
        # Qt is imported only when the dialog is actually needed.
        from restitch_gui.selector import select_entries

        chosen = select_entries(entries)
        if chosen is None:
            print("Selection cancelled. Nothing to export.")
            return 0
        selected = chosen

    build_snapshot(entries=selected, name=args.name, outputs_root=paths.outputs_root, home=home)
    return 0


def _run_restore(args: argparse.Namespace) -> int:
    home = resolve_home(args.home)
    paths = resolve_data_paths(args.data_root)
    archive_path, manifest_path = _resolve_restore_inputs(args, paths.outputs_root)

    run_restore(
        archive_path=archive_path,
        manifest_path=manifest_path,
        dry_run=bool(args.dry_run or args.global_dry_run),
        home=home,
        data_paths=paths,
        confirm=_confirm_on_terminal,
        assume_yes=args.yes,
    )
    return 0


def _run_revert(args: argparse.Namespace) -> int:
    home = resolve_home(args.home)
    paths = resolve_data_paths(args.data_root)
    run_revert(
        backups_root=paths.backups_root,
        home=home,
        label=args.label,
        confirm=_confirm_on_terminal,
        assume_yes=args.yes,
    )
    return 0


def _run_list_backups(args: argparse.Namespace) -> int:
    paths = resolve_data_paths(args.data_root)
    roots = list_backup_roots(paths.backups_root)
    if not roots:
        print(f"No backup directories found in {paths.backups_root}.")
        return 0
    for root in roots:
        marker = "  (most recent)" if root is roots[-1] else ""
        print(f"{root.label}  {root.describe()}{marker}")
    return 0


def _run_init_targets(args: argparse.Namespace) -> int:
    targets_path: Path = args.targets
    if targets_path.exists() and not args.overwrite:
        raise UsageError(f"Targets file already exists (use --overwrite to replace): {targets_path}")
    write_targets(targets_path, list(STARTER_TARGETS))
    print(f"Targets file written: {targets_path}")
    return 0


def main(argv: list[str] | None = None) -> int:
    """
    CLI entry point.

    Parameters
    ----------
    argv:
        Optional argument vector. If None, argparse uses sys.argv.

    Returns
    -------
    int
        Process exit code.
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        _check_usage(args)
    except UsageError as exc:
        print(f"ERROR: {exc}")
        return 2

    handlers = {
        None: _run_package,
        "package": _run_package,
        "restore": _run_restore,
        "revert": _run_revert,
        "list-backups": _run_list_backups,
        "init-targets": _run_init_targets,
    }

    try:
        return handlers[args.command](args)
    except UserCancelledError as exc:
        print(str(exc))
        return 0
    except UsageError as exc:
        print(f"ERROR: {exc}")
        return 2
    except RestitchError as exc:
        print(f"ERROR: {exc}")
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
