"""Tab-scoped page loading.

Each load issues two queries against the same tab predicate: an exact
``COUNT(*)`` and a bounded window ordered by ``created_at`` descending with
``id`` as the tiebreak.  The count is never reused across tabs.
"""

from __future__ import annotations

import logging
import threading
from typing import Protocol

from orderdesk.domain.models.query import OrderQuery, PageWindow
from orderdesk.domain.models.tabs import Tab
from orderdesk.domain.repositories import IOrderRepository
from orderdesk.errors import StaleResponse, ValidationError

LOGGER = logging.getLogger(__name__)


class OrderFinder(Protocol):
    """Minimal protocol for the query side of an order repository."""

    def count(self, query: OrderQuery) -> int: ...

    def find_by_query(self, query: OrderQuery) -> list: ...


class PagedQueryEngine:
    def __init__(self, finder: IOrderRepository | OrderFinder) -> None:
        self._finder = finder

    def load(self, tab: Tab | str, page: int, page_size: int) -> PageWindow:
        """Return the window for ``(tab, page, page_size)``.

        A page past the end yields no rows but still the correct total;
        clamping is left to the caller.  Backend failures propagate and
        nothing is cached here, so the caller's previous window stays valid.
        """
        tab = Tab(tab)
        if page < 1:
            raise ValidationError(f"page must be >= 1, got {page}")
        if page_size < 1:
            raise ValidationError(f"page_size must be >= 1, got {page_size}")

        base = OrderQuery.for_tab(tab)
        total = self._finder.count(base.unpaged())
        rows = self._finder.find_by_query(base.paginate(page, page_size))
        LOGGER.debug("Loaded tab=%s page=%d size=%d: %d rows of %d", tab.value, page, page_size, len(rows), total)
        return PageWindow(
            tab=tab,
            page=page,
            page_size=page_size,
            rows=tuple(rows),
            total_in_tab=total,
        )


class LoadGenerations:
    """Generation counter used to drop superseded load results.

    Every initiated load takes a ticket from :meth:`begin`; :meth:`invalidate`
    (tab/page/page-size change) makes all outstanding tickets stale without
    starting a load.  Only the most recently issued ticket is current.
    """

    def __init__(self) -> None:
        self._current = 0
        self._lock = threading.Lock()

    @property
    def current(self) -> int:
        return self._current

    def begin(self) -> int:
        with self._lock:
            self._current += 1
            return self._current

    def invalidate(self) -> None:
        with self._lock:
            self._current += 1

    def is_current(self, ticket: int) -> bool:
        return ticket == self._current

    def ensure_current(self, ticket: int) -> None:
        if ticket != self._current:
            raise StaleResponse(f"load #{ticket} superseded by #{self._current}")
