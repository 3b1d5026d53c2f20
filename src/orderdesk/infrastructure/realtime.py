"""Callback-style subscription to the order change stream."""

from __future__ import annotations

import logging
from typing import Callable, Optional

from orderdesk.domain.models import Order
from orderdesk.events.bus import EventBus
from orderdesk.events.order_events import (
    OrderChangeEvent,
    OrderDeletedEvent,
    OrderInsertedEvent,
    OrderUpdatedEvent,
)

_logger = logging.getLogger(__name__)

InsertHandler = Callable[[Order], None]
UpdateHandler = Callable[[Order], None]
DeleteHandler = Callable[[str, Optional[Order]], None]
Poster = Callable[[Callable[[], None]], None]


def _call_now(fn: Callable[[], None]) -> None:
    fn()


class OrderChangeFeed:
    """Adapt ``EventBus`` order events to ``subscribe(on_insert, on_update, on_delete)``.

    ``post`` decides where handlers run.  The default calls them on the
    publishing thread; the Qt relay posts them to the GUI thread instead.
    Events keep their publish order either way.
    """

    def __init__(self, event_bus: EventBus, post: Optional[Poster] = None) -> None:
        self._event_bus = event_bus
        self._post = post or _call_now

    def subscribe(
        self,
        on_insert: InsertHandler,
        on_update: UpdateHandler,
        on_delete: DeleteHandler,
    ) -> Callable[[], None]:
        def _dispatch(event: OrderChangeEvent) -> None:
            if isinstance(event, OrderInsertedEvent) and event.order is not None:
                self._post(lambda: on_insert(event.order))
            elif isinstance(event, OrderUpdatedEvent) and event.order is not None:
                self._post(lambda: on_update(event.order))
            elif isinstance(event, OrderDeletedEvent):
                self._post(lambda: on_delete(event.order_id, event.order))
            else:
                _logger.debug("Ignoring change event without payload: %r", event)

        subscription = self._event_bus.subscribe(OrderChangeEvent, _dispatch)

        def unsubscribe() -> None:
            self._event_bus.unsubscribe(subscription)

        return unsubscribe
