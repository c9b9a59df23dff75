"""
Subscription wiring between a stream and a widget's proxy.

Responsibilities
----------------
- Register (or reuse) the widget's proxy in the context registry.
- Deliver every stream event on the GUI thread, in emission order.
- Report stream errors once through the context's error reporter.
- Ignore stream completion so the proxy stays registered.
- Dispose automatically when the widget is destroyed.

Notes
-----
The widget is only held through a weak reference. Events that arrive after the
widget is gone, or after disposal, are dropped.
"""

from __future__ import annotations

import logging
import weakref
from enum import Enum
from typing import Callable, Generic, TypeVar

from reactivex import Observable
from reactivex import operators as ops
from reactivex.abc import DisposableBase
from reactivex.disposable import CompositeDisposable

from binding_engine.context import BindingContext
from binding_engine.data_source import ListDataSource
from binding_engine.errors import ProxyChangedError

logger = logging.getLogger(__name__)

E = TypeVar("E")

Binding = Callable[[ListDataSource, object, E], None]


class SubscriptionState(str, Enum):
    """Lifecycle of a proxy subscription."""

    CREATED = "created"
    ACTIVE = "active"
    COMPLETED = "completed"
    FAILED = "failed"
    DISPOSED = "disposed"


class ProxySubscription(DisposableBase, Generic[E]):
    """
    Live connection from a stream to a widget proxy.

    Parameters
    ----------
    context:
        Binding context providing registry, toolkit, config and error channel.
    widget:
        Bound widget. Held weakly.
    source:
        Stream of values to deliver.
    proxy:
        Proxy registered for `widget` when the subscription was created.
    binding:
        Called as ``binding(proxy, widget, value)`` on the GUI thread.
    """

    def __init__(
        self,
        context: BindingContext,
        widget: object,
        source: Observable[E],
        proxy: ListDataSource,
        binding: Binding[E],
    ) -> None:
        self._context = context
        self._widget_ref = weakref.ref(widget)
        self._key = context.registry.key_for(widget)
        self._source = source
        self._proxy = proxy
        self._binding = binding
        self._disposables = CompositeDisposable()
        self._state = SubscriptionState.CREATED

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self._state.value} proxy={self._proxy!r}>"

    @property
    def state(self) -> SubscriptionState:
        return self._state

    @property
    def proxy(self) -> ListDataSource:
        return self._proxy

    @property
    def is_disposed(self) -> bool:
        return self._state is SubscriptionState.DISPOSED

    def start(self) -> "ProxySubscription[E]":
        """
        Subscribe to the stream and to the widget's destroyed signal.

        Returns
        -------
        ProxySubscription
            ``self``, to allow ``ProxySubscription(...).start()``.
        """
        if self._state is not SubscriptionState.CREATED:
            raise RuntimeError(f"Subscription already started ({self._state.value}).")
        widget = self._widget_ref()
        if widget is None or not self._context.toolkit.is_alive(widget):
            logger.debug("Widget gone before subscription started; disposing %r", self)
            self.dispose()
            return self

        self._state = SubscriptionState.ACTIVE
        toolkit = self._context.toolkit
        self._disposables.add(
            toolkit.destroyed(widget).subscribe(
                on_next=self._on_widget_destroyed,
                on_error=self._context.error_reporter.report,
            )
        )
        if self.is_disposed:
            return self
        self._disposables.add(
            self._source.pipe(ops.observe_on(toolkit.scheduler())).subscribe(
                on_next=self._on_next,
                on_error=self._on_error,
                on_completed=self._on_completed,
            )
        )
        logger.debug("Started %r", self)
        return self

    def dispose(self) -> None:
        """
        Cancel delivery and release the proxy.

        Notes
        -----
        The registry entry is cleared only if it still holds this subscription's
        proxy, so a newer binding on the same widget is left alone. Disposing
        twice, or after the widget was destroyed, is a no-op on the widget.
        """
        if self._state is SubscriptionState.DISPOSED:
            return
        self._state = SubscriptionState.DISPOSED
        self._context.registry.clear_if_assigned(self._key, self._proxy)
        self._disposables.dispose()
        logger.debug("Disposed subscription for widget key %r", self._key)

    def _live_widget(self) -> object | None:
        widget = self._widget_ref()
        if widget is None or not self._context.toolkit.is_alive(widget):
            return None
        return widget

    def _on_next(self, value: E) -> None:
        if self._state is not SubscriptionState.ACTIVE:
            logger.debug("Dropping value delivered in state %s", self._state.value)
            return
        widget = self._live_widget()
        if widget is None:
            return

        config = self._context.config
        try:
            if config.enforce_thread_affinity:
                self._context.registry.affinity.ensure_current("Binding delivery")
            if config.check_proxy_consistency:
                assigned = self._context.registry.assigned_proxy(widget)
                if assigned is not self._proxy:
                    raise ProxyChangedError(self._proxy, assigned)

            self._binding(self._proxy, widget, value)
        except Exception:
            # observe_on drops every later event once delivery raised.
            self._state = SubscriptionState.FAILED
            raise

    def _on_error(self, error: Exception) -> None:
        if self._state is not SubscriptionState.ACTIVE:
            logger.warning("Ignoring stream error after %s: %s", self._state.value, error)
            return
        self._state = SubscriptionState.FAILED
        self._context.error_reporter.report(error)

    def _on_completed(self) -> None:
        if self._state is not SubscriptionState.ACTIVE:
            return
        # Completion keeps the proxy registered until dispose or destruction.
        self._state = SubscriptionState.COMPLETED
        logger.debug("Stream completed; keeping %r bound", self._proxy)

    def _on_widget_destroyed(self, _: object) -> None:
        logger.debug("Widget for key %r destroyed", self._key)
        self.dispose()


def subscribe_proxy_data_source(
    source: Observable[E],
    widget: object,
    data_source: ListDataSource,
    binding: Binding[E],
    *,
    context: BindingContext,
) -> ProxySubscription[E]:
    """
    Bind `source` to `widget` through the widget's registered proxy.

    Parameters
    ----------
    source:
        Stream of values.
    widget:
        Widget to bind. Must be alive.
    data_source:
        Registered as the widget's proxy unless one already is.
    binding:
        Receives ``(proxy, widget, value)`` for each delivered value.
    context:
        Binding context owning the registry.

    Returns
    -------
    ProxySubscription
        Started subscription; dispose it to unbind.
    """
    proxy = context.registry.proxy_for(widget, lambda: data_source)
    return ProxySubscription(context, widget, source, proxy, binding).start()
