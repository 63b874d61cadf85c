"""
Config target selection dialog (UI only).

Purpose
-------
- Present discovered config entries as a single checkable list.
- Return the checked entries in list order, or None when cancelled.

Notes
-----
- The dialog performs no filesystem access and no packaging.
- ``qt_application`` is the scoped interactive resource: it is acquired on
  entry and always released (windows closed, events flushed) on exit.
- ``select_entries`` is the error boundary around the interactive session.
"""

from __future__ import annotations

import sys
from contextlib import contextmanager
from typing import Callable, Iterator, Sequence

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QApplication,
    QDialog,
    QDialogButtonBox,
    QHBoxLayout,
    QLabel,
    QListWidget,
    QListWidgetItem,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from restitch_engine.data_models import ConfigEntry
from restitch_engine.errors import RestitchError


class SelectionUiError(RestitchError):
    """Raised when the selection UI fails unexpectedly."""


@contextmanager
def qt_application() -> Iterator[QApplication]:
    """
    Acquire a QApplication for the duration of an interactive session.

    Yields
    ------
    QApplication
        The existing application instance, or a new one.

    Notes
    -----
    On exit (normal or exceptional) every top-level window is closed and
    pending events are processed, so no half-drawn window outlives the session.
    """
    app = QApplication.instance()
    if app is None:
        app = QApplication(sys.argv[:1])
    try:
        yield app
    finally:
        for widget in app.topLevelWidgets():
            widget.close()
        app.processEvents()


class ChecklistDialog(QDialog):
    """
    Modal dialog listing config entries as checkable items.

    Responsibilities
    ----------------
    - Show one row per entry, prefilled from ``ConfigEntry.selected``.
    - Offer select-all / select-none shortcuts.
    - Report the checked entries when accepted.
    """

    def __init__(
        self,
        entries: Sequence[ConfigEntry],
        parent: QWidget | None = None,
        *,
        title: str = "Restitch: Select Configs",
    ) -> None:
        """
        Initialize the checklist dialog.

        Parameters
        ----------
        entries:
            Entries to offer, in display order.
        parent:
            Optional parent widget.
        title:
            Window title text.
        """
        super().__init__(parent)
        self.setWindowTitle(title)
        self.setModal(True)
        self.resize(560, 420)

        self._entries = list(entries)

        root = QVBoxLayout(self)
        root.setContentsMargins(12, 12, 12, 12)
        root.setSpacing(10)

        hint = QLabel("Space toggles the highlighted entry. Checked entries are packaged.")
        hint.setWordWrap(True)
        hint.setStyleSheet("color: #666;")
        root.addWidget(hint)

        self._list = QListWidget()
        for entry in self._entries:
            item = QListWidgetItem(entry.name)
            item.setToolTip(entry.path)
            item.setFlags(
                Qt.ItemFlag.ItemIsUserCheckable
                | Qt.ItemFlag.ItemIsEnabled
                | Qt.ItemFlag.ItemIsSelectable
            )
            item.setCheckState(Qt.CheckState.Checked if entry.selected else Qt.CheckState.Unchecked)
            self._list.addItem(item)
        if self._entries:
            self._list.setCurrentRow(0)
        root.addWidget(self._list, 1)

        shortcuts = QHBoxLayout()
        select_all = QPushButton("Select all")
        select_all.clicked.connect(lambda: self.set_all_checked(True))
        select_none = QPushButton("Select none")
        select_none.clicked.connect(lambda: self.set_all_checked(False))
        shortcuts.addWidget(select_all)
        shortcuts.addWidget(select_none)
        shortcuts.addStretch(1)
        root.addLayout(shortcuts)

        buttons = QDialogButtonBox(QDialogButtonBox.StandardButton.Ok | QDialogButtonBox.StandardButton.Cancel)
        buttons.accepted.connect(self.accept)
        buttons.rejected.connect(self.reject)
        root.addWidget(buttons)

    def set_all_checked(self, checked: bool) -> None:
        """Check or uncheck every row."""
        state = Qt.CheckState.Checked if checked else Qt.CheckState.Unchecked
        for row in range(self._list.count()):
            self._list.item(row).setCheckState(state)

    def set_checked(self, row: int, checked: bool) -> None:
        """Check or uncheck a single row."""
        state = Qt.CheckState.Checked if checked else Qt.CheckState.Unchecked
        self._list.item(row).setCheckState(state)

    def checked_entries(self) -> list[ConfigEntry]:
        """
        Return the checked entries.

        Returns
        -------
        list[ConfigEntry]
            Checked entries in display order, each with ``selected=True``.
        """
        checked: list[ConfigEntry] = []
        for row, entry in enumerate(self._entries):
            if self._list.item(row).checkState() == Qt.CheckState.Checked:
                checked.append(entry.with_selected(True))
        return checked


def select_entries(
    entries: Sequence[ConfigEntry],
    *,
    title: str = "Restitch: Select Configs",
    dialog_factory: Callable[..., ChecklistDialog] = ChecklistDialog,
) -> list[ConfigEntry] | None:
    """
    Run the selection dialog inside a scoped Qt session.

    Parameters
    ----------
    entries:
        Entries to offer.
    title:
        Window title text.
    dialog_factory:
        Dialog constructor (overridable for tests).

    Returns
    -------
    list[ConfigEntry] | None
        Checked entries, or None if the operator cancelled.

    Raises
    ------
    SelectionUiError
        If the interactive session fails. The session is cleaned up first.
    """
    try:
        with qt_application():
            dialog = dialog_factory(entries, title=title)
            # exec() returns 0 (Rejected) or 1 (Accepted).
            if not dialog.exec():
                return None
            return dialog.checked_entries()
    except Exception as exc:  # noqa: BLE001
        raise SelectionUiError(f"Selection UI failed: {exc!s}") from exc
