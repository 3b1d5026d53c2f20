"""Base type for everything published on the order desk :class:`EventBus`."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from uuid import uuid4


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class DomainEvent:
    """Immutable event record.

    ``timestamp`` is UTC like every other order desk timestamp.  ``source``
    names the publisher (``"repository"``, ``"bulk_action"``) so subscribers
    can tell store echoes from action summaries.
    """

    event_id: str = field(default_factory=lambda: str(uuid4()))
    timestamp: datetime = field(default_factory=_utc_now)
    source: str = ""
