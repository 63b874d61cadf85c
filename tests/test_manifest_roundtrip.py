from __future__ import annotations

from pathlib import Path

import pytest

from restitch_engine.data_models import ConfigEntry, SnapshotManifest, TargetDefinition
from restitch_engine.exceptions import ManifestFormatError, ManifestIOError, TargetsFormatError
from restitch_engine.manifest_store import (
    load_targets,
    read_manifest,
    write_manifest_atomic,
    write_targets,
)


def test_manifest_round_trip_preserves_order_and_integrity_fields(tmp_path: Path) -> None:
    manifest = SnapshotManifest(
        items=(
            ConfigEntry(name="shell-rc", path="/home/u/.zshrc"),
            ConfigEntry(name="editor", path="/home/u/.config/nvim"),
            ConfigEntry(name="shell-rc", path="/home/u/.bashrc"),
        ),
        archive_name="snap.tar.zst",
        archive_sha256="ab" * 32,
        created_at="2024-01-01T00:00:00+00:00",
    )

    path = tmp_path / "snap.manifest.toml"
    write_manifest_atomic(path, manifest)
    loaded = read_manifest(path)

    assert loaded == manifest
    assert not (tmp_path / "snap.manifest.toml.tmp").exists()


def test_manifest_uses_items_tables(tmp_path: Path) -> None:
    path = tmp_path / "m.manifest.toml"
    write_manifest_atomic(path, SnapshotManifest(items=(ConfigEntry(name="a", path="/h/.a"),)))
    text = path.read_text(encoding="utf-8")
    assert "[[items]]" in text
    assert 'name = "a"' in text
    assert "selected = true" in text


def test_read_manifest_resets_selected_flag(tmp_path: Path) -> None:
    path = tmp_path / "legacy.manifest.toml"
    path.write_text(
        '[[items]]\nname = "a"\npath = "/h/.a"\nselected = false\n',
        encoding="utf-8",
    )
    loaded = read_manifest(path)
    assert loaded.items[0].selected is True
    assert loaded.archive_sha256 is None


def test_read_manifest_reports_offending_path_on_invalid_toml(tmp_path: Path) -> None:
    path = tmp_path / "broken.manifest.toml"
    path.write_text("[[items]\nname = ", encoding="utf-8")
    with pytest.raises(ManifestFormatError) as excinfo:
        read_manifest(path)
    assert str(path) in str(excinfo.value)


def test_read_manifest_rejects_entries_without_path(tmp_path: Path) -> None:
    path = tmp_path / "bad.manifest.toml"
    path.write_text('[[items]]\nname = "a"\n', encoding="utf-8")
    with pytest.raises(ManifestFormatError):
        read_manifest(path)


def test_targets_round_trip(tmp_path: Path) -> None:
    path = tmp_path / "config_targets.toml"
    definitions = [
        TargetDefinition(name="Zsh Config", path="~/.zshrc"),
        TargetDefinition(name="Neovim", path="~/.config/nvim"),
    ]
    write_targets(path, definitions)
    assert "[[config]]" in path.read_text(encoding="utf-8")
    assert load_targets(path) == definitions


def test_load_targets_missing_file_shows_example(tmp_path: Path) -> None:
    with pytest.raises(TargetsFormatError) as excinfo:
        load_targets(tmp_path / "missing.toml")
    assert "[[config]]" in str(excinfo.value)


def test_load_targets_requires_config_tables(tmp_path: Path) -> None:
    path = tmp_path / "targets.toml"
    path.write_text('[[item]]\nname = "a"\npath = "~/.a"\n', encoding="utf-8")
    with pytest.raises(TargetsFormatError):
        load_targets(path)


def test_write_manifest_reports_unwritable_parent(tmp_path: Path) -> None:
    blocker = tmp_path / "outputs"
    blocker.write_text("not a directory", encoding="utf-8")

    with pytest.raises(ManifestIOError):
        write_manifest_atomic(blocker / "snap.manifest.toml", SnapshotManifest(items=()))
