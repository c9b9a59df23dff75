"""
Binding error dialog.

Purpose
-------
- Surface stream errors reported by list box bindings to the user.

Notes
-----
- Reporting is fire-and-forget; the dialog never feeds anything back into the
  binding.
"""

from __future__ import annotations

from typing import Callable

from PySide6.QtWidgets import QMessageBox, QWidget

from binding_engine.error_reporting import BindingErrorReporter


def format_binding_error(error: BaseException) -> str:
    """Return the user-facing text for `error`."""
    message = str(error).strip()
    if not message:
        return type(error).__name__
    return f"{type(error).__name__}: {message}"


def show_binding_error(error: BaseException, parent: QWidget | None = None) -> None:
    """Show `error` in a modal critical message box."""
    QMessageBox.critical(parent, "Binding error", format_binding_error(error))


def install_message_box_handler(
    reporter: BindingErrorReporter, parent: QWidget | None = None
) -> Callable[[], None]:
    """
    Show every error reported through `reporter` in a message box.

    Returns
    -------
    Callable[[], None]
        Uninstalls the handler.
    """
    return reporter.install(lambda error: show_binding_error(error, parent))
