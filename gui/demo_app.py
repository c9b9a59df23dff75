"""
rxlistbox demo app.

A single window whose list box is driven by a stream of string lists. Buttons
push new lists into the stream; an optional background producer emits from a
worker thread to exercise GUI-thread delivery.
"""

from __future__ import annotations

import logging
import random
import sys

import reactivex
from PySide6.QtWidgets import QApplication, QHBoxLayout, QLabel, QPushButton, QVBoxLayout, QWidget
from reactivex import operators as ops
from reactivex.abc import DisposableBase
from reactivex.scheduler import ThreadPoolScheduler
from reactivex.subject import BehaviorSubject

from binding_engine.config import BindingConfig
from binding_engine.context import BindingContext
from binding_engine.subscription import ProxySubscription
from gui.adapters.qt_toolkit import application_context
from gui.dialogs.binding_error_dialog import install_message_box_handler
from gui.list_box import ListBox, ListBoxRow

logger = logging.getLogger(__name__)

FRUITS = ("apple", "banana", "cherry", "damson", "elderberry", "fig", "grape", "huckleberry")


def seed_items(count: int) -> list[str]:
    """Return `count` deterministic demo items."""
    return [f"{FRUITS[i % len(FRUITS)]} #{i + 1}" for i in range(count)]


def build_row(host: object, index: int, element: str, previous: object | None) -> ListBoxRow:
    """
    Row factory for the demo list.

    Notes
    -----
    A previous row hosting a label is relabelled and reused; anything else is
    replaced by a fresh row.
    """
    text = f"{index + 1}. {element}"
    if isinstance(previous, ListBoxRow):
        label = previous.child()
        if isinstance(label, QLabel):
            label.setText(text)
            return previous
    return ListBoxRow(QLabel(text))


class DemoWindow(QWidget):
    """
    Main window for the demo.

    Responsibilities
    ----------------
    - Own the item stream and the list box binding
    - Dispose the binding and the background producer on close
    """

    def __init__(
        self,
        *,
        context: BindingContext,
        rows: int = 5,
        interval_ms: int | None = None,
    ) -> None:
        super().__init__()
        self.setWindowTitle("rxlistbox demo")
        self.resize(420, 520)

        self._items = seed_items(rows)
        self._next_id = rows + 1
        self._items_subject: BehaviorSubject[list[str]] = BehaviorSubject(list(self._items))
        self._producer: DisposableBase | None = None
        self._producer_scheduler: ThreadPoolScheduler | None = None
        self._producer_ticks = 0

        root = QVBoxLayout(self)
        root.setContentsMargins(8, 8, 8, 8)

        title = QLabel("Reactive list box")
        f = title.font()
        f.setPointSize(14)
        f.setBold(True)
        title.setFont(f)
        root.addWidget(title)

        self.status_label = QLabel()
        self.status_label.setStyleSheet("color: #666;")
        root.addWidget(self.status_label)

        self.list_box = ListBox()
        root.addWidget(self.list_box, 1)

        buttons = QHBoxLayout()
        self.btn_add = QPushButton("Add")
        self.btn_remove = QPushButton("Remove")
        self.btn_shuffle = QPushButton("Shuffle")
        self.btn_fail = QPushButton("Fail stream")
        self.btn_complete = QPushButton("Complete stream")
        for button in (self.btn_add, self.btn_remove, self.btn_shuffle, self.btn_fail, self.btn_complete):
            buttons.addWidget(button)
        root.addLayout(buttons)

        self.btn_add.clicked.connect(self.add_item)
        self.btn_remove.clicked.connect(self.remove_item)
        self.btn_shuffle.clicked.connect(self.shuffle_items)
        self.btn_fail.clicked.connect(self.fail_stream)
        self.btn_complete.clicked.connect(self.complete_stream)
        self.list_box.rows_changed.connect(self._refresh_status)

        self.subscription: ProxySubscription[list[str]] = self.list_box.bind_items(
            self._items_subject, build_row, context=context
        )

        if interval_ms is not None and interval_ms > 0:
            self._start_producer(interval_ms)
        self._refresh_status()

    @property
    def items(self) -> list[str]:
        return list(self._items)

    def _emit(self) -> None:
        self._items_subject.on_next(list(self._items))

    def add_item(self) -> None:
        self._items.append(f"{FRUITS[(self._next_id - 1) % len(FRUITS)]} #{self._next_id}")
        self._next_id += 1
        self._emit()

    def remove_item(self) -> None:
        if self._items:
            self._items.pop()
            self._emit()

    def shuffle_items(self) -> None:
        random.shuffle(self._items)
        self._emit()

    def fail_stream(self) -> None:
        self._items_subject.on_error(RuntimeError("Stream failed on request."))
        self._refresh_status()

    def complete_stream(self) -> None:
        self._items_subject.on_completed()
        self._refresh_status()

    @property
    def producer(self) -> DisposableBase | None:
        return self._producer

    @property
    def producer_ticks(self) -> int:
        return self._producer_ticks

    def _start_producer(self, interval_ms: int) -> None:
        # Emits from a pool thread; delivery is marshalled onto the GUI thread.
        self._producer_scheduler = ThreadPoolScheduler(1)
        self._producer = (
            reactivex.interval(interval_ms / 1000.0, scheduler=self._producer_scheduler)
            .pipe(ops.map(self._on_tick))
            .subscribe(on_next=self._items_subject.on_next, scheduler=self._producer_scheduler)
        )

    def _on_tick(self, tick: int) -> list[str]:
        self._producer_ticks += 1
        return seed_items(1 + tick % 8)

    def _refresh_status(self) -> None:
        self.status_label.setText(
            f"{self.list_box.row_count()} rows - binding {self.subscription.state.value}"
            if hasattr(self, "subscription")
            else f"{self.list_box.row_count()} rows"
        )

    def shutdown(self) -> None:
        """Stop the producer and unbind the list box."""
        if self._producer is not None:
            self._producer.dispose()
            self._producer = None
        if self._producer_scheduler is not None:
            self._producer_scheduler.executor.shutdown(wait=False)
            self._producer_scheduler = None
        self.subscription.dispose()

    def closeEvent(self, event) -> None:  # type: ignore[override]
        try:
            self.shutdown()
        finally:
            super().closeEvent(event)


def run_demo(*, config: BindingConfig, rows: int = 5, interval_ms: int | None = None) -> int:
    """
    Run the demo application.

    Returns
    -------
    int
        Qt application exit code.
    """
    app = QApplication.instance() or QApplication(sys.argv)
    context = application_context(app, config=config)
    uninstall = None
    if context.config.show_error_dialogs:
        uninstall = install_message_box_handler(context.error_reporter)
    try:
        window = DemoWindow(context=context, rows=rows, interval_ms=interval_ms)
        window.show()
        logger.info("Demo window shown with %d rows", rows)
        return app.exec()
    finally:
        if uninstall is not None:
            uninstall()
