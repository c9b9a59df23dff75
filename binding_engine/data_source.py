"""
List reconciler.

A `ReactiveListDataSource` rebuilds every row of a list box each time a new
collection is observed. Rows displayed before are offered back to the row
factory by position, never by matching elements.

Notes
-----
- Positional reuse under-reuses rows when elements are reordered rather than
  changed. That is accepted; there is no diffing.
- Rows left over when the collection shrinks are detached and not reinserted.
  Destroying them is left to the toolkit.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable, Generic, Iterable, Protocol, Sequence, TypeVar

from binding_engine.errors import ItemsNotYetBoundError

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


class RowHost(Protocol[R]):
    """The child-list API of a list widget."""

    def rows(self) -> Sequence[R]:
        """Return the current rows in display order."""
        ...

    def remove(self, row: R) -> None:
        """Detach `row` without destroying it."""
        ...

    def insert(self, row: R, position: int) -> None:
        """Insert `row` at `position`."""
        ...


RowFactory = Callable[[Any, int, Any, Any], Any]


class DataSourceState(str, Enum):
    """Lifecycle of a data source."""

    UNINITIALIZED = "uninitialized"
    POPULATED = "populated"


class ListDataSource:
    """Base type of everything registered as a list box proxy."""


class ReactiveListDataSource(ListDataSource, Generic[T]):
    """
    Data source that rebuilds rows from each observed collection.

    Parameters
    ----------
    row_factory:
        Called as ``row_factory(host, index, element, previous_row)`` once per
        element per pass, in ascending index order. ``previous_row`` is the row
        displayed at ``index`` before the pass, or None.
    """

    def __init__(self, row_factory: RowFactory) -> None:
        self._row_factory = row_factory
        self._item_models: list[T] | None = None

    def __repr__(self) -> str:
        count = "unbound" if self._item_models is None else len(self._item_models)
        return f"<{type(self).__name__} items={count} at {id(self):#x}>"

    @property
    def row_factory(self) -> RowFactory:
        return self._row_factory

    @property
    def state(self) -> DataSourceState:
        if self._item_models is None:
            return DataSourceState.UNINITIALIZED
        return DataSourceState.POPULATED

    @property
    def is_populated(self) -> bool:
        return self._item_models is not None

    @property
    def item_models(self) -> tuple[T, ...] | None:
        """Last observed collection, or None before the first emission."""
        if self._item_models is None:
            return None
        return tuple(self._item_models)

    def model_at(self, index: int) -> T | None:
        """
        Return the element displayed at `index`.

        Returns None before the first emission. Raises IndexError when `index`
        is out of range of the last observed collection.
        """
        if self._item_models is None:
            return None
        return self._item_models[index]

    def model(self, index_path: tuple[int, int]) -> T:
        """
        Return the element at a ``(section, row)`` index path.

        Raises
        ------
        ValueError
            If the section is not 0; list boxes have a single section.
        ItemsNotYetBoundError
            If nothing has been observed yet.
        """
        section, row = index_path
        if section != 0:
            raise ValueError(f"List boxes have a single section, got section {section}.")
        if self._item_models is None:
            raise ItemsNotYetBoundError(self)
        return self._item_models[row]

    def reconcile(self, host: RowHost, elements: Iterable[T]) -> None:
        """
        Rebuild the rows of `host` from `elements`.

        Parameters
        ----------
        host:
            List widget to mutate.
        elements:
            Finite iterable; it is materialized before any row is touched.

        Notes
        -----
        Row factory exceptions propagate. The last observed collection is only
        replaced once every row has been inserted.
        """
        observed = list(elements)
        cached_rows = list(host.rows())
        for row in cached_rows:
            host.remove(row)

        for index, element in enumerate(observed):
            previous = cached_rows[index] if index < len(cached_rows) else None
            row = self._row_factory(host, index, element, previous)
            host.insert(row, index)

        self._item_models = observed
        logger.debug(
            "Reconciled %d rows (%d previously displayed) for %r",
            len(observed),
            len(cached_rows),
            self,
        )
