from __future__ import annotations

import shutil
from datetime import datetime
from pathlib import Path

import pytest

from restitch_engine.clock import FixedClock
from restitch_engine.data_models import ConfigEntry
from restitch_engine.errors import UserCancelledError
from restitch_engine.paths_and_safety import resolve_data_paths
from restitch_engine.restore.service import run_restore
from restitch_engine.revert.errors import RevertError
from restitch_engine.revert.service import (
    RevertStatus,
    find_latest_backup_root,
    list_backup_roots,
    run_revert,
)
from restitch_engine.snapshot.service import build_snapshot


def _write(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")


def test_latest_backup_root_is_greatest_label(tmp_path: Path) -> None:
    backups = tmp_path / "backups"
    for label in ["2024-02-01_00-00-00", "2024-10-01_00-00-00", "2023-12-31_23-59-59"]:
        (backups / label).mkdir(parents=True)
    (backups / "notes").mkdir()
    (backups / "2099-01-01_00-00-00.txt").write_text("not a root", encoding="utf-8")

    roots = list_backup_roots(backups)
    assert [r.label for r in roots] == [
        "2023-12-31_23-59-59",
        "2024-02-01_00-00-00",
        "2024-10-01_00-00-00",
    ]
    latest = find_latest_backup_root(backups)
    assert latest is not None
    assert latest.label == "2024-10-01_00-00-00"
    assert latest.describe() == "Oct 01, 2024 at 00:00"


def test_revert_with_no_backups_is_not_an_error(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    home = tmp_path / "home"
    home.mkdir()

    outcome = run_revert(backups_root=tmp_path / "backups", home=home, assume_yes=True)

    assert outcome.status is RevertStatus.NOTHING_TO_REVERT
    assert list(home.iterdir()) == []
    assert "Nothing to revert" in capsys.readouterr().out


def test_revert_replays_latest_root_preserving_nested_paths(tmp_path: Path) -> None:
    home = tmp_path / "home"
    backups = tmp_path / "backups"
    _write(backups / "2024-01-01_00-00-00" / ".zshrc", "older")
    _write(backups / "2024-06-01_08-30-00" / ".zshrc", "Y")
    _write(backups / "2024-06-01_08-30-00" / ".config" / "nvim" / "lua" / "core.lua", "core")
    _write(home / ".zshrc", "X")
    _write(home / ".config" / "nvim" / "lua" / "core.lua", "changed")
    _write(home / ".config" / "nvim" / "extra.lua", "untouched")

    outcome = run_revert(backups_root=backups, home=home, assume_yes=True)

    assert outcome.status is RevertStatus.REVERTED
    assert outcome.backup_root is not None
    assert outcome.backup_root.label == "2024-06-01_08-30-00"
    assert (home / ".zshrc").read_text(encoding="utf-8") == "Y"
    assert (home / ".config" / "nvim" / "lua" / "core.lua").read_text(encoding="utf-8") == "core"
    assert (home / ".config" / "nvim" / "extra.lua").read_text(encoding="utf-8") == "untouched"
    assert outcome.restored == (
        home / ".zshrc",
        home / ".config" / "nvim" / "lua" / "core.lua",
    )
    assert (backups / "2024-06-01_08-30-00" / ".zshrc").read_text(encoding="utf-8") == "Y"


def test_revert_with_explicit_label(tmp_path: Path) -> None:
    home = tmp_path / "home"
    backups = tmp_path / "backups"
    _write(backups / "2024-01-01_00-00-00" / ".zshrc", "older")
    _write(backups / "2024-06-01_08-30-00" / ".zshrc", "newer")

    run_revert(backups_root=backups, home=home, label="2024-01-01_00-00-00", assume_yes=True)
    assert (home / ".zshrc").read_text(encoding="utf-8") == "older"

    with pytest.raises(RevertError):
        run_revert(backups_root=backups, home=home, label="2020-01-01_00-00-00", assume_yes=True)


def test_revert_declined_changes_nothing(tmp_path: Path) -> None:
    home = tmp_path / "home"
    backups = tmp_path / "backups"
    _write(backups / "2024-01-01_00-00-00" / ".zshrc", "Y")
    _write(home / ".zshrc", "X")

    with pytest.raises(UserCancelledError):
        run_revert(backups_root=backups, home=home, confirm=lambda _prompt: False)
    assert (home / ".zshrc").read_text(encoding="utf-8") == "X"


def test_restore_then_revert_restores_previous_content(tmp_path: Path) -> None:
    home = tmp_path / "home"
    _write(home / ".zshrc", "X")
    paths = resolve_data_paths(tmp_path / "data")
    result = build_snapshot(
        entries=[ConfigEntry(name="shell-rc", path=str(home / ".zshrc"))],
        name="snap",
        outputs_root=paths.outputs_root,
        home=home,
    )
    assert result.archive_path is not None and result.manifest_path is not None
    _write(home / ".zshrc", "Y")

    run_restore(
        archive_path=result.archive_path,
        manifest_path=result.manifest_path,
        dry_run=False,
        home=home,
        data_paths=paths,
        assume_yes=True,
        clock=FixedClock(datetime(2024, 1, 1, 12, 0, 0)),
    )
    assert (home / ".zshrc").read_text(encoding="utf-8") == "X"

    outcome = run_revert(backups_root=paths.backups_root, home=home, assume_yes=True)
    assert outcome.status is RevertStatus.REVERTED
    assert (home / ".zshrc").read_text(encoding="utf-8") == "Y"


def _package_restore_revert(tmp_path: Path, home: Path, before_restore) -> None:
    paths = resolve_data_paths(tmp_path / "data")
    result = build_snapshot(
        entries=[ConfigEntry(name="foo", path=str(home / ".config" / "foo"))],
        name="snap",
        outputs_root=paths.outputs_root,
        home=home,
    )
    assert result.archive_path is not None and result.manifest_path is not None
    before_restore()
    run_restore(
        archive_path=result.archive_path,
        manifest_path=result.manifest_path,
        dry_run=False,
        home=home,
        data_paths=paths,
        assume_yes=True,
        clock=FixedClock(datetime(2024, 1, 1, 12, 0, 0)),
    )
    run_revert(backups_root=paths.backups_root, home=home, assume_yes=True)


def test_revert_replaces_directory_restored_over_a_file(tmp_path: Path) -> None:
    home = tmp_path / "home"
    foo = home / ".config" / "foo"
    _write(foo / "settings.ini", "NEW")

    def _make_file() -> None:
        shutil.rmtree(foo)
        _write(foo, "OLD")

    _package_restore_revert(tmp_path, home, _make_file)

    assert foo.is_file()
    assert foo.read_text(encoding="utf-8") == "OLD"


def test_revert_replaces_file_restored_over_a_directory(tmp_path: Path) -> None:
    home = tmp_path / "home"
    foo = home / ".config" / "foo"
    _write(foo, "NEW")

    def _make_directory() -> None:
        foo.unlink()
        _write(foo / "settings.ini", "OLD")

    _package_restore_revert(tmp_path, home, _make_directory)

    assert foo.is_dir()
    assert (foo / "settings.ini").read_text(encoding="utf-8") == "OLD"


def test_revert_writes_through_symlinked_directories(tmp_path: Path) -> None:
    home = tmp_path / "home"
    home.mkdir()
    real_config = tmp_path / "dotfiles" / "config"
    real_config.mkdir(parents=True)
    (home / ".config").symlink_to(real_config)
    backups = tmp_path / "backups"
    _write(backups / "2024-01-01_00-00-00" / ".config" / "app.toml", "Y")

    run_revert(backups_root=backups, home=home, assume_yes=True)

    assert (home / ".config").is_symlink()
    assert (real_config / "app.toml").read_text(encoding="utf-8") == "Y"
