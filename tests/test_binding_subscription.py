from __future__ import annotations

import threading

import pytest
from reactivex.subject import Subject

from fake_toolkit import FakeListBox, RecordingRowFactory, make_context

from binding_engine.data_source import ReactiveListDataSource
from binding_engine.errors import IllegalThreadAccessError, ProxyChangedError
from binding_engine.items import bind_data_source, bind_items
from binding_engine.subscription import SubscriptionState


def _bind(**overrides: object):
    context = make_context(**overrides)
    host = FakeListBox()
    stream: Subject[list[str]] = Subject()
    factory = RecordingRowFactory()
    subscription = bind_items(host, stream, factory, context=context)
    return context, host, stream, factory, subscription


def test_each_emission_rebuilds_rows_in_order() -> None:
    context, host, stream, factory, subscription = _bind()

    stream.on_next(["a", "b", "c"])
    r0, r1, r2 = host.rows()
    assert host.elements() == ["a", "b", "c"]

    factory.calls.clear()
    stream.on_next(["x", "b"])

    assert factory.calls == [(0, "x", r0), (1, "b", r1)]
    assert host.rows() == (r0, r1)
    assert r2 not in host.rows()
    assert subscription.state is SubscriptionState.ACTIVE


def test_bind_registers_the_data_source_as_proxy() -> None:
    context, host, stream, _factory, subscription = _bind()

    proxy = context.registry.assigned_proxy(host)

    assert proxy is subscription.proxy
    assert isinstance(proxy, ReactiveListDataSource)
    stream.on_next(["a"])
    assert proxy.item_models == ("a",)


def test_completion_keeps_binding_registered() -> None:
    context, host, stream, _factory, subscription = _bind()

    stream.on_next(["a"])
    stream.on_completed()

    assert subscription.state is SubscriptionState.COMPLETED
    assert context.registry.assigned_proxy(host) is subscription.proxy
    assert host.elements() == ["a"]

    subscription.dispose()
    assert context.registry.assigned_proxy(host) is None


def test_error_is_reported_once_and_stops_reconciliation() -> None:
    context, host, stream, factory, subscription = _bind()
    reported: list[BaseException] = []
    context.error_reporter.install(reported.append)
    error = RuntimeError("upstream failed")

    stream.on_next(["a"])
    stream.on_error(error)
    stream.on_next(["b"])

    assert reported == [error]
    assert subscription.state is SubscriptionState.FAILED
    assert host.elements() == ["a"]
    assert len(factory.calls) == 1
    assert context.registry.assigned_proxy(host) is subscription.proxy


def test_widget_destruction_disposes_and_clears_registry() -> None:
    context, host, stream, factory, subscription = _bind()
    stream.on_next(["a"])

    context.toolkit.destroy(host)  # type: ignore[attr-defined]

    assert subscription.is_disposed
    assert context.registry.assigned_proxy(host) is None
    stream.on_next(["b"])
    assert len(factory.calls) == 1


def test_dispose_after_destruction_is_a_noop() -> None:
    context, host, stream, _factory, subscription = _bind()
    stream.on_next(["a"])
    context.toolkit.destroy(host)  # type: ignore[attr-defined]
    host.mutations.clear()

    subscription.dispose()
    subscription.dispose()

    assert host.mutations == []


def test_events_for_dead_widget_are_dropped() -> None:
    context, host, stream, factory, subscription = _bind()
    host.alive = False

    stream.on_next(["a"])

    assert factory.calls == []
    assert subscription.state is SubscriptionState.ACTIVE


def test_dispose_stops_delivery_and_is_idempotent() -> None:
    context, host, stream, factory, subscription = _bind()
    stream.on_next(["a"])

    subscription.dispose()
    subscription.dispose()
    stream.on_next(["b"])

    assert host.elements() == ["a"]
    assert len(factory.calls) == 1
    assert context.registry.assigned_proxy(host) is None


def test_dispose_does_not_clobber_a_newer_proxy() -> None:
    context, host, _stream, _factory, subscription = _bind()
    newer = ReactiveListDataSource(RecordingRowFactory())
    context.registry.set_proxy(host, newer)

    subscription.dispose()

    assert context.registry.assigned_proxy(host) is newer


def test_replaced_proxy_is_a_fatal_error() -> None:
    context, host, stream, _factory, _subscription = _bind()
    context.registry.set_proxy(host, ReactiveListDataSource(RecordingRowFactory()))

    with pytest.raises(ProxyChangedError):
        stream.on_next(["a"])

    assert _subscription.state is SubscriptionState.FAILED


def test_replaced_proxy_is_tolerated_when_checks_are_off() -> None:
    context, host, stream, _factory, _subscription = _bind(check_proxy_consistency=False)
    context.registry.set_proxy(host, None)

    stream.on_next(["a"])

    assert host.elements() == ["a"]


def test_second_bind_reuses_registered_proxy() -> None:
    context = make_context()
    host = FakeListBox()
    first = bind_items(host, Subject(), RecordingRowFactory(), context=context)
    second = bind_items(host, Subject(), RecordingRowFactory(), context=context)

    assert second.proxy is first.proxy
    assert len(context.registry) == 1


def test_bind_data_source_keeps_caller_data_source() -> None:
    context = make_context()
    host = FakeListBox()
    stream: Subject[tuple[int, ...]] = Subject()
    data_source: ReactiveListDataSource[int] = ReactiveListDataSource(RecordingRowFactory())

    bind_data_source(host, stream, data_source, context=context)
    stream.on_next((1, 2))

    assert data_source.item_models == (1, 2)
    assert context.registry.assigned_proxy(host) is data_source


def test_binding_a_dead_widget_starts_disposed() -> None:
    context = make_context()
    host = FakeListBox()
    host.alive = False

    subscription = bind_items(host, Subject(), RecordingRowFactory(), context=context)

    assert subscription.is_disposed
    assert context.registry.assigned_proxy(host) is None


def test_subscription_cannot_be_started_twice() -> None:
    _context, _host, _stream, _factory, subscription = _bind()

    with pytest.raises(RuntimeError):
        subscription.start()


def test_delivery_off_the_gui_thread_is_rejected() -> None:
    context, host, stream, factory, subscription = _bind()
    raised: list[BaseException] = []

    def emit() -> None:
        try:
            stream.on_next(["a"])
        except IllegalThreadAccessError as exc:
            raised.append(exc)

    worker = threading.Thread(target=emit, name="worker")
    worker.start()
    worker.join()

    assert len(raised) == 1
    assert "worker" in str(raised[0])
    assert factory.calls == []
    assert host.elements() == []
    assert subscription.state is SubscriptionState.FAILED


def test_off_thread_delivery_is_allowed_when_affinity_is_not_enforced() -> None:
    _context, host, stream, _factory, subscription = _bind(enforce_thread_affinity=False)

    worker = threading.Thread(target=lambda: stream.on_next(["a"]), name="worker")
    worker.start()
    worker.join()

    assert host.elements() == ["a"]
    assert subscription.state is SubscriptionState.ACTIVE


def test_failing_row_factory_marks_subscription_failed() -> None:
    context = make_context()
    host = FakeListBox()
    stream: Subject[list[str]] = Subject()

    def broken_factory(host: object, index: int, element: str, previous: object | None) -> object:
        raise ValueError(f"cannot build row for {element!r}")

    subscription = bind_items(host, stream, broken_factory, context=context)

    with pytest.raises(ValueError):
        stream.on_next(["a"])

    assert subscription.state is SubscriptionState.FAILED
    assert host.elements() == []
    assert context.registry.assigned_proxy(host) is subscription.proxy
