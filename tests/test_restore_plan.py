from __future__ import annotations

from pathlib import Path, PurePosixPath

import pytest

from restitch_engine.data_models import ConfigEntry, SnapshotManifest
from restitch_engine.restore.data_models import RestoreActionType
from restitch_engine.restore.errors import RestorePlanError
from restitch_engine.restore.plan import build_restore_plan

LABEL = "2024-01-01_12-00-00"


def _extraction(tmp_path: Path) -> Path:
    root = tmp_path / "extract"
    (root / ".config" / "nvim").mkdir(parents=True)
    (root / ".zshrc").write_text("X", encoding="utf-8")
    (root / ".gitconfig").write_text("[user]\n", encoding="utf-8")
    (root / ".config" / "nvim" / "init.lua").write_text("-- new\n", encoding="utf-8")
    return root


def _manifest(home: Path) -> SnapshotManifest:
    return SnapshotManifest(
        items=(
            ConfigEntry(name="shell-rc", path=str(home / ".zshrc")),
            ConfigEntry(name="editor", path=str(home / ".config" / "nvim")),
            ConfigEntry(name="git", path="~/.gitconfig"),
        )
    )


def test_plan_classifies_each_entry_in_manifest_order(tmp_path: Path) -> None:
    home = tmp_path / "home"
    (home / ".config" / "nvim").mkdir(parents=True)
    (home / ".zshrc").write_text("Y", encoding="utf-8")
    backups = tmp_path / "backups"

    plan = build_restore_plan(
        manifest=_manifest(home),
        extraction_root=_extraction(tmp_path),
        home=home,
        backups_root=backups,
        backup_label=LABEL,
    )

    assert [a.name for a in plan.actions] == ["shell-rc", "editor", "git"]
    assert [a.action_type for a in plan.actions] == [
        RestoreActionType.REPLACE_FILE,
        RestoreActionType.REPLACE_DIRECTORY,
        RestoreActionType.COPY_NEW,
    ]
    assert plan.backup_root == backups / LABEL
    assert plan.backups_needed == 2

    rc, editor, git = plan.actions
    assert rc.relative_path == PurePosixPath(".zshrc")
    assert rc.backup_path == backups / LABEL / ".zshrc"
    assert editor.source_is_dir is True
    assert editor.backup_path == backups / LABEL / ".config" / "nvim"
    assert git.destination_path == home / ".gitconfig"
    assert git.needs_backup is False


def test_plan_is_deterministic_and_does_not_mutate(tmp_path: Path) -> None:
    home = tmp_path / "home"
    home.mkdir()
    (home / ".zshrc").write_text("Y", encoding="utf-8")
    extraction = _extraction(tmp_path)
    backups = tmp_path / "backups"

    kwargs = dict(
        manifest=_manifest(home),
        extraction_root=extraction,
        home=home,
        backups_root=backups,
        backup_label=LABEL,
    )
    first = build_restore_plan(**kwargs)
    second = build_restore_plan(**kwargs)

    assert first == second
    assert first.to_dict() == second.to_dict()
    assert not backups.exists()
    assert sorted(p.name for p in home.iterdir()) == [".zshrc"]


def test_plan_rejects_entry_missing_from_extraction(tmp_path: Path) -> None:
    home = tmp_path / "home"
    home.mkdir()
    manifest = SnapshotManifest(items=(ConfigEntry(name="ghost", path=str(home / ".ghostrc")),))

    with pytest.raises(RestorePlanError, match="ghost"):
        build_restore_plan(
            manifest=manifest,
            extraction_root=_extraction(tmp_path),
            home=home,
            backups_root=tmp_path / "backups",
            backup_label=LABEL,
        )


def test_plan_rejects_entry_outside_home(tmp_path: Path) -> None:
    home = tmp_path / "home"
    home.mkdir()
    manifest = SnapshotManifest(items=(ConfigEntry(name="hosts", path="/etc/hosts"),))

    with pytest.raises(RestorePlanError, match="outside the home directory"):
        build_restore_plan(
            manifest=manifest,
            extraction_root=_extraction(tmp_path),
            home=home,
            backups_root=tmp_path / "backups",
            backup_label=LABEL,
        )


def test_plan_rejects_overlapping_entries(tmp_path: Path) -> None:
    home = tmp_path / "home"
    home.mkdir()
    manifest = SnapshotManifest(
        items=(
            ConfigEntry(name="nvim-dir", path=str(home / ".config" / "nvim")),
            ConfigEntry(name="nvim-init", path=str(home / ".config" / "nvim" / "init.lua")),
        )
    )

    with pytest.raises(RestorePlanError, match="overlap"):
        build_restore_plan(
            manifest=manifest,
            extraction_root=_extraction(tmp_path),
            home=home,
            backups_root=tmp_path / "backups",
            backup_label=LABEL,
        )


def test_plan_treats_dangling_symlink_as_existing_file(tmp_path: Path) -> None:
    home = tmp_path / "home"
    home.mkdir()
    (home / ".zshrc").symlink_to(home / "nowhere")
    manifest = SnapshotManifest(items=(ConfigEntry(name="shell-rc", path=str(home / ".zshrc")),))

    plan = build_restore_plan(
        manifest=manifest,
        extraction_root=_extraction(tmp_path),
        home=home,
        backups_root=tmp_path / "backups",
        backup_label=LABEL,
    )
    assert plan.actions[0].action_type is RestoreActionType.REPLACE_FILE
