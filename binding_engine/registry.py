"""
Proxy registry.

Maps a widget identity to the single proxy bridging a stream to that widget.

Notes
-----
- The registry is owned by a `BindingContext`, not by the widget. Widgets never
  hold their proxy, so no widget -> proxy -> widget cycle can form.
- Keys are computed by a key function (Qt: the wrapped C++ address) so entries
  can still be cleared after the widget itself is gone.
- There is no lock. All access is expected on the GUI thread; `proxy_for`
  checks this and fails fast.
"""

from __future__ import annotations

import logging
from typing import Callable, Generic, Hashable, TypeVar

from binding_engine.affinity import ThreadAffinity
from binding_engine.errors import ProxyChangedError

logger = logging.getLogger(__name__)

P = TypeVar("P")

WidgetKey = Hashable
KeyFunction = Callable[[object], WidgetKey]


class ProxyRegistry(Generic[P]):
    """Side table of widget key -> proxy, at most one entry per key."""

    def __init__(
        self,
        *,
        key: KeyFunction = id,
        affinity: ThreadAffinity | None = None,
        enforce_affinity: bool = True,
    ) -> None:
        self._key = key
        self._affinity = ThreadAffinity.current() if affinity is None else affinity
        self._enforce_affinity = enforce_affinity
        self._proxies: dict[WidgetKey, P] = {}

    @property
    def affinity(self) -> ThreadAffinity:
        return self._affinity

    def __len__(self) -> int:
        return len(self._proxies)

    def __contains__(self, widget: object) -> bool:
        return self._key(widget) in self._proxies

    def key_for(self, widget: object) -> WidgetKey:
        """Return the identity key used for `widget`."""
        return self._key(widget)

    def proxy_for(self, widget: object, factory: Callable[[], P]) -> P:
        """
        Return the proxy registered for `widget`, creating it if absent.

        Parameters
        ----------
        widget:
            Widget the proxy belongs to.
        factory:
            Called once to build the proxy when none is registered.

        Returns
        -------
        P
            The registered proxy.

        Raises
        ------
        IllegalThreadAccessError
            If called off the registry's thread.
        ProxyChangedError
            If the entry changed between registration and lookup.
        """
        if self._enforce_affinity:
            self._affinity.ensure_current("proxy_for")

        existing = self.assigned_proxy(widget)
        if existing is not None:
            return existing

        proxy = factory()
        self.set_proxy(widget, proxy)
        assigned = self.assigned_proxy(widget)
        if assigned is not proxy:
            raise ProxyChangedError(proxy, assigned)
        logger.debug("Registered proxy %r for widget key %r", proxy, self._key(widget))
        return proxy

    def assigned_proxy(self, widget: object) -> P | None:
        """Return the registered proxy for `widget`, or None."""
        return self._proxies.get(self._key(widget))

    def set_proxy(self, widget: object, proxy: P | None) -> None:
        """Replace the entry for `widget`; None clears it."""
        key = self._key(widget)
        if proxy is None:
            self._proxies.pop(key, None)
        else:
            self._proxies[key] = proxy

    def clear_if_assigned(self, key: WidgetKey, proxy: P) -> bool:
        """
        Clear the entry for `key` only if it still holds `proxy`.

        Returns
        -------
        bool
            True if the entry was cleared.
        """
        if self._proxies.get(key) is not proxy:
            return False
        del self._proxies[key]
        logger.debug("Cleared proxy %r for widget key %r", proxy, key)
        return True
