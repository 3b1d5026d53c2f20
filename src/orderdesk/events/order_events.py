"""Change notifications for the order table.

The repository publishes one event per affected row after each committed
write, in commit order.  Subscribers that only care about the stream as a
whole subscribe to :class:`OrderChangeEvent`.
"""

from dataclasses import dataclass, field
from typing import FrozenSet, Optional

from orderdesk.domain.models import Order

from .domain_events import DomainEvent


@dataclass(frozen=True)
class OrderChangeEvent(DomainEvent):
    order_id: str = ""


@dataclass(frozen=True)
class OrderInsertedEvent(OrderChangeEvent):
    order: Optional[Order] = None


@dataclass(frozen=True)
class OrderUpdatedEvent(OrderChangeEvent):
    order: Optional[Order] = None


@dataclass(frozen=True)
class OrderDeletedEvent(OrderChangeEvent):
    # Last known state of the row; ``None`` when the backend only sent the key.
    order: Optional[Order] = None


@dataclass(frozen=True)
class BulkMutationCommittedEvent(DomainEvent):
    action: str = ""
    affected_ids: FrozenSet[str] = field(default_factory=frozenset)
    undoable: bool = False
