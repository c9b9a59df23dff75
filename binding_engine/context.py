"""
Binding context.

A `BindingContext` is the long-lived owner of binding state for one GUI
application: the proxy registry, the error reporter, the configuration, and the
toolkit bridge that knows how to identify widgets, test their liveness, watch
their destruction, and reach the GUI thread.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Hashable, Protocol

from reactivex import Observable
from reactivex.abc import SchedulerBase

from binding_engine.config import BindingConfig
from binding_engine.data_source import ListDataSource
from binding_engine.error_reporting import BindingErrorReporter, process_error_reporter
from binding_engine.registry import ProxyRegistry


class Toolkit(Protocol):
    """Widget toolkit operations a binding depends on."""

    def key(self, widget: object) -> Hashable:
        """Return a stable identity for `widget`."""
        ...

    def is_alive(self, widget: object) -> bool:
        """Return False once the underlying widget has been destroyed."""
        ...

    def destroyed(self, widget: object) -> Observable[object]:
        """Return an observable that emits once when `widget` is destroyed."""
        ...

    def scheduler(self) -> SchedulerBase:
        """Return a scheduler that runs actions on the GUI thread."""
        ...


@dataclass(slots=True)
class BindingContext:
    """Owner of the proxy registry and collaborators shared by bindings."""

    toolkit: Toolkit
    config: BindingConfig = field(default_factory=BindingConfig.defaults)
    error_reporter: BindingErrorReporter = field(default_factory=process_error_reporter)
    registry: ProxyRegistry[ListDataSource] = field(init=False)

    def __post_init__(self) -> None:
        self.registry = ProxyRegistry(
            key=self.toolkit.key,
            enforce_affinity=self.config.enforce_thread_affinity,
        )
