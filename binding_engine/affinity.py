"""
Thread affinity checks.

Notes
-----
Widgets may only be mutated on the thread that runs the GUI event loop. The
registry and subscriptions do not lock; they capture the GUI thread once and
fail fast when touched from anywhere else.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Self

from binding_engine.errors import IllegalThreadAccessError


@dataclass(frozen=True, slots=True)
class ThreadAffinity:
    """Identity of the thread that owns GUI state."""

    ident: int
    name: str

    @classmethod
    def current(cls) -> Self:
        """
        Capture the calling thread.

        Returns
        -------
        ThreadAffinity
            Affinity bound to the calling thread.
        """
        thread = threading.current_thread()
        return cls(ident=threading.get_ident(), name=thread.name)

    def is_current(self) -> bool:
        """Return True when called from the owning thread."""
        return threading.get_ident() == self.ident

    def ensure_current(self, operation: str = "operation") -> None:
        """
        Fail fast unless called from the owning thread.

        Parameters
        ----------
        operation:
            Short description used in the error message.

        Raises
        ------
        IllegalThreadAccessError
            If the caller runs on another thread.
        """
        if self.is_current():
            return
        caller = threading.current_thread().name
        raise IllegalThreadAccessError(
            f"{operation} must run on thread {self.name!r}, not {caller!r}."
        )
