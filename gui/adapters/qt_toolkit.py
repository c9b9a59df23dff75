"""
Qt adapter for the binding engine.

Threading model
--------------
- A `GuiThreadDispatcher` QObject lives on the GUI thread.
- `GuiThreadScheduler` posts every scheduled action to the dispatcher through a
  queued Qt signal, so actions run on the GUI thread in posting order no matter
  which thread scheduled them.
- `QtToolkit` combines the scheduler with shiboken-based identity and liveness
  checks and an observable view of `QObject.destroyed`.
"""

from __future__ import annotations

import logging
import weakref
from datetime import datetime, timedelta
from typing import Any, Callable, Hashable

import reactivex
import shiboken6
from PySide6.QtCore import QCoreApplication, QObject, Qt, QTimer, Signal, Slot
from reactivex import Observable
from reactivex.abc import DisposableBase, ObserverBase, SchedulerBase
from reactivex.disposable import CompositeDisposable, Disposable, SingleAssignmentDisposable
from reactivex.scheduler.periodicscheduler import PeriodicScheduler

from binding_engine.config import BindingConfig
from binding_engine.context import BindingContext
from binding_engine.errors import BindingError

logger = logging.getLogger(__name__)


class GuiThreadDispatcher(QObject):
    """Runs posted callables on the thread this object lives on."""

    _posted = Signal(object)

    def __init__(self, parent: QObject | None = None) -> None:
        super().__init__(parent)
        # Queued even when posting from the GUI thread itself, so delivery order
        # is the posting order.
        self._posted.connect(self._run, type=Qt.ConnectionType.QueuedConnection)

    def post(self, action: Callable[[], None]) -> None:
        """Queue `action`; safe to call from any thread."""
        self._posted.emit(action)

    @Slot(object)
    def _run(self, action: object) -> None:
        assert callable(action)
        action()


class GuiThreadScheduler(PeriodicScheduler):
    """
    Reactive scheduler that runs actions on the GUI thread.

    Notes
    -----
    Create it on the GUI thread (or pass a dispatcher living there). Delayed
    actions are timed with a single-shot `QTimer` started on the GUI thread.
    """

    def __init__(self, dispatcher: GuiThreadDispatcher | None = None) -> None:
        super().__init__()
        self._dispatcher = GuiThreadDispatcher() if dispatcher is None else dispatcher

    @property
    def dispatcher(self) -> GuiThreadDispatcher:
        return self._dispatcher

    def schedule(self, action: Any, state: Any | None = None) -> DisposableBase:
        return self.schedule_relative(0.0, action, state)

    def schedule_relative(
        self, duetime: float | timedelta, action: Any, state: Any | None = None
    ) -> DisposableBase:
        msecs = max(0, int(self.to_seconds(duetime) * 1000.0))
        sad = SingleAssignmentDisposable()
        is_disposed = False

        def invoke_action() -> None:
            if not is_disposed:
                sad.disposable = self.invoke_action(action, state)

        if msecs == 0:
            self._dispatcher.post(invoke_action)
        else:
            self._dispatcher.post(lambda: QTimer.singleShot(msecs, invoke_action))

        def dispose() -> None:
            nonlocal is_disposed
            is_disposed = True

        return CompositeDisposable(sad, Disposable(dispose))

    def schedule_absolute(
        self, duetime: float | datetime, action: Any, state: Any | None = None
    ) -> DisposableBase:
        delta: timedelta = self.to_datetime(duetime) - self.now
        return self.schedule_relative(delta, action, state)


def destroyed_signal(obj: QObject) -> Observable[object]:
    """
    Observe the destruction of `obj`.

    Returns
    -------
    Observable
        Emits once (then completes) when `obj` is destroyed. Subscribing after
        the object is gone emits immediately.
    """
    ref = weakref.ref(obj)

    def _subscribe(observer: ObserverBase[object], scheduler: SchedulerBase | None = None) -> DisposableBase:
        target = ref()
        if target is None or not shiboken6.isValid(target):
            observer.on_next(None)
            observer.on_completed()
            return Disposable()

        def _emit(*_args: object) -> None:
            observer.on_next(None)
            observer.on_completed()

        connection = target.destroyed.connect(_emit)

        def _disconnect() -> None:
            current = ref()
            if current is not None and shiboken6.isValid(current):
                QObject.disconnect(connection)

        return Disposable(_disconnect)

    return reactivex.create(_subscribe)


class QtToolkit:
    """`Toolkit` implementation for PySide6 widgets."""

    def __init__(self, scheduler: GuiThreadScheduler | None = None) -> None:
        self._scheduler = GuiThreadScheduler() if scheduler is None else scheduler

    def key(self, widget: object) -> Hashable:
        # Address of the wrapped C++ object; stable for the widget's lifetime.
        return shiboken6.getCppPointer(widget)[0]

    def is_alive(self, widget: object) -> bool:
        return shiboken6.isValid(widget)

    def destroyed(self, widget: object) -> Observable[object]:
        assert isinstance(widget, QObject)
        return destroyed_signal(widget)

    def scheduler(self) -> GuiThreadScheduler:
        return self._scheduler


_application_contexts: weakref.WeakKeyDictionary[QCoreApplication, BindingContext] = (
    weakref.WeakKeyDictionary()
)


def application_context(
    app: QCoreApplication | None = None,
    *,
    config: BindingConfig | None = None,
) -> BindingContext:
    """
    Return the binding context owned by the running application.

    Parameters
    ----------
    app:
        Application owning the context. Defaults to `QCoreApplication.instance()`.
    config:
        Used only when the context is created by this call.

    Raises
    ------
    BindingError
        If no Qt application exists yet.
    """
    owner = QCoreApplication.instance() if app is None else app
    if owner is None:
        raise BindingError("A QApplication must exist before widgets can be bound.")

    context = _application_contexts.get(owner)
    if context is None:
        context = BindingContext(
            toolkit=QtToolkit(),
            config=BindingConfig.defaults() if config is None else config,
        )
        _application_contexts[owner] = context
        logger.debug("Created binding context for %r", owner)
    return context
