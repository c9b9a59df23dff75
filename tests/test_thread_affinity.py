from __future__ import annotations

import threading

import pytest

from binding_engine.affinity import ThreadAffinity
from binding_engine.errors import ContractViolationError, IllegalThreadAccessError


def test_current_thread_passes() -> None:
    affinity = ThreadAffinity.current()

    assert affinity.is_current()
    affinity.ensure_current()


def test_other_thread_is_rejected() -> None:
    affinity = ThreadAffinity.current()
    outcome: list[object] = []

    def worker() -> None:
        outcome.append(affinity.is_current())
        try:
            affinity.ensure_current("reconcile")
        except IllegalThreadAccessError as exc:
            outcome.append(exc)

    thread = threading.Thread(target=worker, name="worker-1")
    thread.start()
    thread.join()

    assert outcome[0] is False
    error = outcome[1]
    assert isinstance(error, ContractViolationError)
    assert "reconcile" in str(error)
    assert "worker-1" in str(error)


def test_affinity_is_immutable() -> None:
    affinity = ThreadAffinity.current()
    with pytest.raises(AttributeError):
        affinity.ident = 0  # type: ignore[misc]
