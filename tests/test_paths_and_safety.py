from __future__ import annotations

from pathlib import Path, PurePosixPath

import pytest

from restitch_engine.errors import PathMappingError
from restitch_engine.paths_and_safety import (
    expand_entry_path,
    home_relative_path,
    resolve_data_paths,
    resolve_home,
)


def test_home_relative_path_strips_home_prefix(tmp_path: Path) -> None:
    home = tmp_path / "home"
    assert home_relative_path(home / ".zshrc", home) == PurePosixPath(".zshrc")
    assert home_relative_path(home / ".config" / "nvim", home) == PurePosixPath(".config/nvim")


@pytest.mark.parametrize("candidate", ["/etc/hosts", "relative/path"])
def test_home_relative_path_rejects_paths_outside_home(tmp_path: Path, candidate: str) -> None:
    with pytest.raises(PathMappingError):
        home_relative_path(Path(candidate), tmp_path / "home")


def test_home_relative_path_rejects_home_itself_and_parent_segments(tmp_path: Path) -> None:
    home = tmp_path / "home"
    with pytest.raises(PathMappingError):
        home_relative_path(home, home)
    with pytest.raises(PathMappingError):
        home_relative_path(home / ".." / "escape", home)


def test_expand_entry_path_expands_tilde_against_given_home(tmp_path: Path) -> None:
    home = tmp_path / "home"
    assert expand_entry_path("~/.zshrc", home) == home / ".zshrc"
    assert expand_entry_path("~", home) == home
    assert expand_entry_path("/abs/file", home) == Path("/abs/file")


def test_resolve_data_paths_layout(tmp_path: Path) -> None:
    paths = resolve_data_paths(tmp_path / "data")
    root = (tmp_path / "data").resolve()
    assert paths.data_root == root
    assert paths.outputs_root == root / "outputs"
    assert paths.backups_root == root / "backups"
    assert paths.journals_root == root / "journals"
    assert paths.work_root == root / "work"
    assert not root.exists()


def test_environment_overrides(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("RESTITCH_DATA_ROOT", str(tmp_path / "env-data"))
    monkeypatch.setenv("RESTITCH_HOME", str(tmp_path / "env-home"))
    assert resolve_data_paths().data_root == (tmp_path / "env-data").resolve()
    assert resolve_home() == tmp_path / "env-home"
    assert resolve_home(tmp_path / "explicit") == tmp_path / "explicit"
