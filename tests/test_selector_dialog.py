from __future__ import annotations

import os

import pytest

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
pytest.importorskip("PySide6.QtWidgets")

from restitch_engine.data_models import ConfigEntry  # noqa: E402
from restitch_gui.selector import (  # noqa: E402
    ChecklistDialog,
    SelectionUiError,
    qt_application,
    select_entries,
)

ENTRIES = [
    ConfigEntry(name="Zsh Config", path="/home/u/.zshrc"),
    ConfigEntry(name="Neovim", path="/home/u/.config/nvim"),
    ConfigEntry(name="Git Config", path="/home/u/.gitconfig", selected=False),
]


class _FakeDialog:
    def __init__(self, entries, *, title: str, accept: bool) -> None:
        self._entries = list(entries)
        self._accept = accept
        self.title = title

    def exec(self) -> int:
        return 1 if self._accept else 0

    def checked_entries(self) -> list[ConfigEntry]:
        return self._entries[:1]


def test_dialog_reports_checked_entries_in_order() -> None:
    with qt_application():
        dialog = ChecklistDialog(ENTRIES)
        assert [e.name for e in dialog.checked_entries()] == ["Zsh Config", "Neovim"]

        dialog.set_checked(0, False)
        dialog.set_checked(2, True)
        checked = dialog.checked_entries()
        assert [e.name for e in checked] == ["Neovim", "Git Config"]
        assert all(e.selected for e in checked)

        dialog.set_all_checked(False)
        assert dialog.checked_entries() == []
        dialog.set_all_checked(True)
        assert len(dialog.checked_entries()) == 3


def test_select_entries_returns_checked_entries_when_accepted() -> None:
    chosen = select_entries(
        ENTRIES,
        dialog_factory=lambda entries, *, title: _FakeDialog(entries, title=title, accept=True),
    )
    assert chosen == ENTRIES[:1]


def test_select_entries_returns_none_when_cancelled() -> None:
    chosen = select_entries(
        ENTRIES,
        dialog_factory=lambda entries, *, title: _FakeDialog(entries, title=title, accept=False),
    )
    assert chosen is None


def test_select_entries_wraps_ui_failures() -> None:
    def _broken(entries, *, title: str) -> ChecklistDialog:
        raise RuntimeError("no display")

    with pytest.raises(SelectionUiError, match="no display"):
        select_entries(ENTRIES, dialog_factory=_broken)
