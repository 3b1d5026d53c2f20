"""Incremental repair of the visible page from the order change stream.

Two layers:

* reducers (``reduce_insert`` / ``reduce_update`` / ``reduce_delete``) patch
  the current :class:`PageWindow` immediately.  Their output is provisional.
* every update or delete also triggers a debounced full reload, which is
  the source of truth and overwrites whatever the reducers produced.
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, Optional, Protocol

from orderdesk.application.services.dispatch import Debouncer
from orderdesk.domain.models import Order, PageWindow, predicate_for

from .selection_model import SelectionModel

_logger = logging.getLogger(__name__)


def reduce_insert(window: PageWindow, order: Order) -> PageWindow:
    if not predicate_for(window.tab).matches(order):
        return window
    if window.index_of(order.id) >= 0:
        # Duplicate delivery; already counted and shown
        return window
    rows = window.rows
    if window.page == 1:
        rows = ((order,) + rows)[: window.page_size]
    return replace(window, rows=rows, total_in_tab=window.total_in_tab + 1)


def reduce_update(window: PageWindow, order: Order) -> PageWindow:
    index = window.index_of(order.id)
    if index < 0:
        return window
    rows = window.rows[:index] + (order,) + window.rows[index + 1:]
    return replace(window, rows=rows)


def reduce_delete(window: PageWindow, order_id: str, order: Optional[Order] = None) -> PageWindow:
    index = window.index_of(order_id)
    counted = index >= 0 or (order is not None and predicate_for(window.tab).matches(order))
    if not counted:
        return window
    rows = window.rows
    if index >= 0:
        rows = rows[:index] + rows[index + 1:]
    return replace(window, rows=rows, total_in_tab=max(0, window.total_in_tab - 1))


class ReconcileHost(Protocol):
    """What the reconciler needs from the list view model."""

    @property
    def window(self) -> PageWindow: ...

    def apply_window(self, window: PageWindow) -> None: ...

    @property
    def selection_model(self) -> SelectionModel: ...

    @property
    def preview(self) -> Optional[Order]: ...

    def set_preview(self, order: Optional[Order]) -> None: ...


class RealtimeReconciler:
    def __init__(self, host: ReconcileHost, debouncer: Debouncer) -> None:
        self._host = host
        self._debouncer = debouncer
        self._unsubscribe: Optional[Callable[[], None]] = None

    def attach(self, feed) -> None:
        """Start consuming *feed* (anything with ``subscribe(on_insert, on_update, on_delete)``)."""
        self.detach()
        self._unsubscribe = feed.subscribe(self.on_insert, self.on_update, self.on_delete)

    def detach(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self._debouncer.cancel()

    @property
    def attached(self) -> bool:
        return self._unsubscribe is not None

    def on_insert(self, order: Order) -> None:
        window = self._host.window
        updated = reduce_insert(window, order)
        if updated is not window:
            _logger.debug("Realtime insert %s into %s", order.id, window.tab.value)
            self._host.apply_window(updated)

    def on_update(self, order: Order) -> None:
        window = self._host.window
        updated = reduce_update(window, order)
        if updated is not window:
            self._host.apply_window(updated)
        preview = self._host.preview
        if preview is not None and preview.id == order.id:
            self._host.set_preview(order)
        # Membership may have changed (status, trash); only a reload can tell
        self._debouncer.trigger()

    def on_delete(self, order_id: str, order: Optional[Order] = None) -> None:
        window = self._host.window
        updated = reduce_delete(window, order_id, order)
        if updated is not window:
            self._host.apply_window(updated)
        self._host.selection_model.forget(order_id)
        preview = self._host.preview
        if preview is not None and preview.id == order_id:
            self._host.set_preview(None)
        self._debouncer.trigger()
