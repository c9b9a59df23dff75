"""
Test doubles for the binding engine.

These let engine tests run without Qt: a plain-Python list widget, a toolkit
whose scheduler runs actions immediately, and a factory that records every call.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from reactivex import Observable
from reactivex.scheduler import ImmediateScheduler
from reactivex.subject import Subject

from binding_engine.config import BindingConfig
from binding_engine.context import BindingContext
from binding_engine.error_reporting import BindingErrorReporter


@dataclass(eq=False)
class FakeRow:
    """A row widget carrying the element it was last built for."""

    element: object
    builds: int = 1

    def __repr__(self) -> str:
        return f"FakeRow({self.element!r})"


class FakeListBox:
    """List widget implementing the `RowHost` protocol."""

    def __init__(self) -> None:
        self._rows: list[FakeRow] = []
        self.alive = True
        self.mutations: list[tuple[str, object, int]] = []

    def rows(self) -> tuple[FakeRow, ...]:
        return tuple(self._rows)

    def remove(self, row: FakeRow) -> None:
        position = next(i for i, r in enumerate(self._rows) if r is row)
        del self._rows[position]
        self.mutations.append(("remove", row, position))

    def insert(self, row: FakeRow, position: int) -> None:
        self._rows.insert(position, row)
        self.mutations.append(("insert", row, position))

    def elements(self) -> list[object]:
        return [row.element for row in self._rows]


class FakeToolkit:
    """Toolkit with immediate delivery and manually triggered destruction."""

    def __init__(self) -> None:
        self._scheduler = ImmediateScheduler()
        self._destroyed: dict[int, Subject[object]] = {}

    def key(self, widget: object) -> int:
        return id(widget)

    def is_alive(self, widget: object) -> bool:
        return bool(getattr(widget, "alive", True))

    def destroyed(self, widget: object) -> Observable[object]:
        return self._destroyed.setdefault(id(widget), Subject())

    def scheduler(self) -> ImmediateScheduler:
        return self._scheduler

    def destroy(self, widget: FakeListBox) -> None:
        widget.alive = False
        subject = self._destroyed.setdefault(id(widget), Subject())
        subject.on_next(None)
        subject.on_completed()


@dataclass
class RecordingRowFactory:
    """Row factory that reuses hinted rows and records every call."""

    calls: list[tuple[int, object, FakeRow | None]] = field(default_factory=list)

    def __call__(self, host: object, index: int, element: object, previous: FakeRow | None) -> FakeRow:
        self.calls.append((index, element, previous))
        if previous is not None:
            previous.element = element
            previous.builds += 1
            return previous
        return FakeRow(element)


def make_context(**overrides: object) -> BindingContext:
    """Build a context over a fresh `FakeToolkit` and a private error reporter."""
    defaults = BindingConfig.defaults()
    config = BindingConfig(
        enforce_thread_affinity=bool(overrides.get("enforce_thread_affinity", defaults.enforce_thread_affinity)),
        check_proxy_consistency=bool(overrides.get("check_proxy_consistency", defaults.check_proxy_consistency)),
        log_level=defaults.log_level,
        show_error_dialogs=False,
    )
    return BindingContext(toolkit=FakeToolkit(), config=config, error_reporter=BindingErrorReporter())
