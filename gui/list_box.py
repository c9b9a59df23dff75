"""
List box widgets.

`ListBox` is a vertical, scrollable list of `ListBoxRow` widgets with an
explicit child-list API (`rows`, `insert`, `remove`). It is the widget that
stream bindings mutate.

Notes
-----
- `remove` detaches a row from the list box without deleting it. A detached row
  that nothing references is freed by Qt/Python ownership rules.
- `insert` wraps any non-row widget in a new `ListBoxRow`.
"""

from __future__ import annotations

import weakref
from typing import Iterable, TypeVar

from PySide6.QtCore import Signal
from PySide6.QtWidgets import QFrame, QScrollArea, QVBoxLayout, QWidget
from reactivex import Observable

from binding_engine.context import BindingContext
from binding_engine.data_source import RowFactory
from binding_engine.items import bind_items
from binding_engine.subscription import ProxySubscription
from gui.adapters.qt_toolkit import application_context

T = TypeVar("T")


class ListBoxRow(QFrame):
    """A single row of a `ListBox`, hosting one child widget."""

    def __init__(self, child: QWidget | None = None, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.setFrameShape(QFrame.Shape.NoFrame)
        self._layout = QVBoxLayout(self)
        self._layout.setContentsMargins(6, 3, 6, 3)
        self._child: QWidget | None = None
        self._owner: weakref.ref[ListBox] | None = None
        if child is not None:
            self.set_child(child)

    def child(self) -> QWidget | None:
        return self._child

    def set_child(self, widget: QWidget | None) -> None:
        """Replace the hosted widget; the previous one is detached."""
        if widget is self._child:
            return
        if self._child is not None:
            self._layout.removeWidget(self._child)
            self._child.setParent(None)
        self._child = widget
        if widget is not None:
            self._layout.addWidget(widget)

    def list_box(self) -> ListBox | None:
        """Return the list box currently displaying this row, if any."""
        return None if self._owner is None else self._owner()

    def index(self) -> int:
        """Return the display position of this row, or -1 when detached."""
        owner = self.list_box()
        if owner is None:
            return -1
        return owner.index_of(self)


class ListBox(QScrollArea):
    """
    Scrollable vertical list of rows.

    Signals
    -------
    rows_changed:
        Emitted after every insert or remove.
    """

    rows_changed = Signal()

    def __init__(self, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self.setWidgetResizable(True)
        self.setFrameShape(QFrame.Shape.StyledPanel)

        self._container = QWidget()
        self._layout = QVBoxLayout(self._container)
        self._layout.setContentsMargins(0, 0, 0, 0)
        self._layout.setSpacing(0)
        self._layout.addStretch(1)
        self.setWidget(self._container)

        self._rows: list[ListBoxRow] = []

    def rows(self) -> tuple[ListBoxRow, ...]:
        return tuple(self._rows)

    def row_count(self) -> int:
        return len(self._rows)

    def row_at(self, index: int) -> ListBoxRow | None:
        if 0 <= index < len(self._rows):
            return self._rows[index]
        return None

    def index_of(self, row: ListBoxRow) -> int:
        try:
            return self._rows.index(row)
        except ValueError:
            return -1

    def insert(self, widget: QWidget, position: int = -1) -> ListBoxRow:
        """
        Insert `widget` at `position`.

        Parameters
        ----------
        widget:
            Row to insert. Other widgets are wrapped in a new `ListBoxRow`.
        position:
            Target index. -1 or any index past the end appends.

        Returns
        -------
        ListBoxRow
            The inserted row.

        Raises
        ------
        ValueError
            If the row is already displayed by this list box.
        """
        row = widget if isinstance(widget, ListBoxRow) else ListBoxRow(widget)
        if row in self._rows:
            raise ValueError("Row is already displayed by this list box.")
        owner = row.list_box()
        if owner is not None:
            owner.remove(row)

        if position < 0 or position > len(self._rows):
            position = len(self._rows)
        self._layout.insertWidget(position, row)
        self._rows.insert(position, row)
        row._owner = weakref.ref(self)
        row.show()
        self.rows_changed.emit()
        return row

    def remove(self, row: ListBoxRow) -> None:
        """
        Detach `row` from this list box without deleting it.

        Raises
        ------
        ValueError
            If `row` is not displayed by this list box.
        """
        if row not in self._rows:
            raise ValueError("Row is not displayed by this list box.")
        self._layout.removeWidget(row)
        self._rows.remove(row)
        row._owner = None
        row.setParent(None)
        self.rows_changed.emit()

    def bind_items(
        self,
        source: Observable[Iterable[T]],
        row_factory: RowFactory,
        *,
        context: BindingContext | None = None,
    ) -> ProxySubscription[Iterable[T]]:
        """
        Drive the rows of this list box from `source`.

        Uses the running application's binding context unless `context` is given.
        """
        ctx = application_context() if context is None else context
        return bind_items(self, source, row_factory, context=ctx)
