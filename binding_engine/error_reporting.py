"""
Binding error channel.

Stream errors that reach a binding are not propagated to the producer. They are
reported here instead: logged with their traceback, then handed to every
installed handler (for example a GUI message box).
"""

from __future__ import annotations

import logging
from typing import Callable

logger = logging.getLogger(__name__)

BindingErrorHandler = Callable[[BaseException], None]


class BindingErrorReporter:
    """Fan-out of reported binding errors to installed handlers."""

    def __init__(self) -> None:
        self._handlers: list[BindingErrorHandler] = []

    @property
    def handlers(self) -> tuple[BindingErrorHandler, ...]:
        return tuple(self._handlers)

    def install(self, handler: BindingErrorHandler) -> Callable[[], None]:
        """
        Install `handler` and return a callable that uninstalls it.

        Notes
        -----
        Uninstalling twice is a no-op.
        """
        self._handlers.append(handler)

        def _uninstall() -> None:
            if handler in self._handlers:
                self._handlers.remove(handler)

        return _uninstall

    def report(self, error: BaseException) -> None:
        """
        Report a binding error.

        Parameters
        ----------
        error:
            Error raised by the bound stream.

        Notes
        -----
        A handler that raises is logged and does not stop the others.
        """
        logger.error(
            "Binding error: %s",
            error,
            exc_info=(type(error), error, error.__traceback__),
        )
        for handler in tuple(self._handlers):
            try:
                handler(error)
            except Exception:
                logger.exception("Binding error handler %r failed", handler)


_process_reporter = BindingErrorReporter()


def process_error_reporter() -> BindingErrorReporter:
    """Return the reporter shared by every binding context of this process."""
    return _process_reporter


def report_binding_error(error: BaseException) -> None:
    """Report `error` through the process-wide reporter."""
    _process_reporter.report(error)


def install_binding_error_handler(handler: BindingErrorHandler) -> Callable[[], None]:
    """Install a process-wide handler; returns its uninstaller."""
    return _process_reporter.install(handler)
