"""BaseViewModel, pure Python, no Qt dependency.

Tracks teardown callbacks (event-bus subscriptions, change-feed
unsubscribes) so ``dispose()`` releases everything a view model hooked up.
"""

from __future__ import annotations

from typing import Callable, Type

from orderdesk.events.bus import EventBus, Subscription


class BaseViewModel:
    def __init__(self) -> None:
        self._subscriptions: list[Subscription] = []
        self._teardowns: list[Callable[[], None]] = []

    def subscribe_event(
        self,
        event_bus: EventBus,
        event_type: Type,
        handler: Callable,
    ) -> Subscription:
        """Subscribe to an event type and track the subscription."""
        sub = event_bus.subscribe(event_type, handler)
        self._subscriptions.append(sub)
        return sub

    def add_teardown(self, callback: Callable[[], None]) -> None:
        self._teardowns.append(callback)

    def dispose(self) -> None:
        """Cancel tracked subscriptions and run teardown callbacks."""
        for sub in self._subscriptions:
            sub.cancel()
        self._subscriptions.clear()
        while self._teardowns:
            self._teardowns.pop()()
