from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional
import uuid


class OrderStatus(str, Enum):
    NEW = "new"
    IN_PROGRESS = "in_progress"
    DONE = "done"
    ARCHIVED = "archived"

    @classmethod
    def coerce(cls, value: Any) -> "OrderStatus":
        """Map raw storage values to a status; null/unknown read as ``NEW``."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return cls.NEW


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_utc(value: datetime) -> datetime:
    """Normalise *value* to an aware UTC datetime (naive values are taken as UTC)."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def format_timestamp(value: datetime) -> str:
    """Canonical storage form: fixed-width ISO-8601 in UTC.

    Fixed width keeps lexical order in SQL identical to chronological order
    in Python.
    """
    return to_utc(value).strftime("%Y-%m-%dT%H:%M:%S.%f+00:00")


def parse_timestamp(raw: Optional[str]) -> Optional[datetime]:
    if not raw:
        return None
    return to_utc(datetime.fromisoformat(raw.replace("Z", "+00:00")))


@dataclass
class Order:
    id: str
    created_at: datetime
    status: OrderStatus = OrderStatus.NEW
    is_read: bool = False
    deleted_at: Optional[datetime] = None

    # Descriptive fields shown by the list; never filtered on.
    name: Optional[str] = None
    email: Optional[str] = None
    script: Optional[str] = None
    language: Optional[str] = None
    voice: Optional[str] = None
    avatar_id: Optional[str] = None

    def __post_init__(self) -> None:
        self.status = OrderStatus.coerce(self.status)
        self.created_at = to_utc(self.created_at)
        if self.deleted_at is not None:
            self.deleted_at = to_utc(self.deleted_at)

    @property
    def in_trash(self) -> bool:
        return self.deleted_at is not None

    @classmethod
    def create(cls, created_at: Optional[datetime] = None, **fields: Any) -> Order:
        return cls(id=str(uuid.uuid4()), created_at=created_at or utc_now(), **fields)


class _Unset:
    """Marker for patch fields that should not be written."""

    _instance: Optional["_Unset"] = None

    def __new__(cls) -> "_Unset":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET: Any = _Unset()


@dataclass(frozen=True)
class OrderPatch:
    """Partial update over the mutable order fields.

    ``deleted_at=None`` means "restore" (write NULL); leaving it ``UNSET``
    means the column is not touched.
    """

    status: Any = UNSET
    is_read: Any = UNSET
    deleted_at: Any = UNSET

    def fields(self) -> Dict[str, Any]:
        values = {
            "status": self.status,
            "is_read": self.is_read,
            "deleted_at": self.deleted_at,
        }
        return {key: value for key, value in values.items() if value is not UNSET}

    @property
    def is_empty(self) -> bool:
        return not self.fields()

    def apply_to(self, order: Order) -> Order:
        """Return a copy of *order* with this patch applied in memory."""
        return replace(order, **self.fields())

    # -- common patches ----------------------------------------------------

    @classmethod
    def set_status(cls, status: OrderStatus | str) -> OrderPatch:
        return cls(status=status)

    @classmethod
    def soft_delete(cls, at: Optional[datetime] = None) -> OrderPatch:
        return cls(deleted_at=at or utc_now())

    @classmethod
    def restore(cls) -> OrderPatch:
        return cls(deleted_at=None)

    @classmethod
    def mark_read(cls, is_read: bool = True) -> OrderPatch:
        return cls(is_read=is_read)
