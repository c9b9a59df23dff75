"""
Domain exceptions for list box bindings.

Notes
-----
Expected failure modes map to a domain exception with clear meaning.
`ContractViolationError` and its subclasses are programming errors: they signal
a broken threading or ownership contract and are never recovered from.
"""

from __future__ import annotations


class BindingError(RuntimeError):
    """Base exception for all binding failures."""


class ItemsNotYetBoundError(BindingError):
    """Raised when a data source is queried before its first emission."""

    def __init__(self, source: object) -> None:
        super().__init__(f"Items are not yet bound to {source!r}.")
        self.source = source


class ContractViolationError(BindingError):
    """Raised when a threading or ownership contract is broken."""


class IllegalThreadAccessError(ContractViolationError):
    """Raised when GUI-affine state is touched from another thread."""


class ProxyChangedError(ContractViolationError):
    """Raised when the proxy registered for a widget changed unexpectedly."""

    def __init__(self, original: object, existing: object) -> None:
        super().__init__(
            "Proxy changed from the time it was first set.\n"
            f"Original: {original!r}\n"
            f"Existing: {existing!r}"
        )
        self.original = original
        self.existing = existing
