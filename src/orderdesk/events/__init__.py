from .bus import Event, EventBus, Subscription
from .domain_events import DomainEvent
from .order_events import (
    BulkMutationCommittedEvent,
    OrderChangeEvent,
    OrderDeletedEvent,
    OrderInsertedEvent,
    OrderUpdatedEvent,
)

__all__ = [
    "BulkMutationCommittedEvent",
    "DomainEvent",
    "Event",
    "EventBus",
    "OrderChangeEvent",
    "OrderDeletedEvent",
    "OrderInsertedEvent",
    "OrderUpdatedEvent",
    "Subscription",
]
