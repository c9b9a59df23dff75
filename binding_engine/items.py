"""
Public binding entry points.

These bind a stream of collections to a list widget. Each emitted collection
replaces every row of the widget; see `ReactiveListDataSource.reconcile`.
"""

from __future__ import annotations

from typing import Iterable, TypeVar

from reactivex import Observable

from binding_engine.context import BindingContext
from binding_engine.data_source import ListDataSource, ReactiveListDataSource, RowFactory, RowHost
from binding_engine.subscription import ProxySubscription, subscribe_proxy_data_source

T = TypeVar("T")


def bind_data_source(
    widget: RowHost,
    source: Observable[Iterable[T]],
    data_source: ReactiveListDataSource[T],
    *,
    context: BindingContext,
) -> ProxySubscription[Iterable[T]]:
    """
    Bind `source` to `widget` using an existing data source.

    Parameters
    ----------
    widget:
        List widget whose rows are rebuilt on each emission.
    source:
        Stream of finite collections.
    data_source:
        Reconciler receiving each collection. It stays referenced by the
        subscription until disposal.
    context:
        Binding context owning the proxy registry.

    Returns
    -------
    ProxySubscription
        Dispose to unbind.
    """

    def _binding(_proxy: ListDataSource, host: object, elements: Iterable[T]) -> None:
        data_source.reconcile(host, elements)  # type: ignore[arg-type]

    return subscribe_proxy_data_source(source, widget, data_source, _binding, context=context)


def bind_items(
    widget: RowHost,
    source: Observable[Iterable[T]],
    row_factory: RowFactory,
    *,
    context: BindingContext,
) -> ProxySubscription[Iterable[T]]:
    """
    Bind `source` to `widget`, building rows with `row_factory`.

    `row_factory` is called as ``row_factory(widget, index, element,
    previous_row)`` where ``previous_row`` is the row shown at ``index`` before
    the emission, or None.
    """
    data_source: ReactiveListDataSource[T] = ReactiveListDataSource(row_factory)
    return bind_data_source(widget, source, data_source, context=context)
