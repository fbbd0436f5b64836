"""Ordered collection of discovered items across analyzed directories."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable, Iterator

    from gotestshard.models.item import DiscoveredItem

logger = logging.getLogger(__name__)


class NoTestsFoundError(LookupError):
    """Raised when analysis finished without finding a single test."""

    def __init__(self) -> None:
        super().__init__("no tests were found")


class Catalog:
    """Merged, sorted view of the items found in every analyzed directory.

    Batches are appended with :meth:`add`.  The first read sorts the items
    by ``pkg + name`` (stable, so ties keep insertion order) and seals the
    catalog against further additions.
    """

    def __init__(self, batches: Iterable[Iterable[DiscoveredItem]] = ()) -> None:
        self._items: list[DiscoveredItem] = []
        self._sealed = False
        for batch in batches:
            self.add(batch)

    def add(self, batch: Iterable[DiscoveredItem]) -> None:
        if self._sealed:
            raise RuntimeError("catalog is sealed; items can no longer be added")
        self._items.extend(batch)

    def items(self) -> list[DiscoveredItem]:
        """Return the sorted items.

        Raises:
            NoTestsFoundError: No batch contributed any item.
        """
        if not self._sealed:
            self._items.sort(key=lambda item: item.sort_key)
            self._sealed = True
            logger.debug("Catalog sealed with %d items", len(self._items))
        if not self._items:
            raise NoTestsFoundError
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[DiscoveredItem]:
        return iter(self.items())
