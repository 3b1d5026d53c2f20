"""Tab filters as declarative predicates.

A :class:`Predicate` is a plain conjunction of :class:`Condition` values.  It
is interpreted twice: in memory by :meth:`Predicate.matches` (realtime
reconciliation) and in SQL by
:func:`orderdesk.infrastructure.db.filter_compiler.compile_predicate`
(count, page and bulk queries).  Both interpreters read the same structure,
so a record counted in a tab is always a record shown in it.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Dict, FrozenSet, Tuple

from .core import Order, OrderStatus, to_utc


class Tab(str, Enum):
    ALL = "all"
    UNREAD = "unread"
    IN_PROGRESS = "in_progress"
    DONE = "done"
    ARCHIVED = "archived"
    TRASH = "trash"


class Field(str, Enum):
    ID = "id"
    STATUS = "status"
    IS_READ = "is_read"
    DELETED_AT = "deleted_at"
    CREATED_AT = "created_at"


class Op(str, Enum):
    EQ = "eq"
    IS_NULL = "is_null"
    NOT_NULL = "not_null"
    IN = "in"
    NOT_IN = "not_in"
    LT = "lt"


@dataclass(frozen=True)
class Condition:
    field: Field
    op: Op
    value: Any = None

    def __post_init__(self) -> None:
        if self.op in (Op.IN, Op.NOT_IN):
            object.__setattr__(self, "value", frozenset(self.value or ()))
        elif self.op is Op.LT and isinstance(self.value, datetime):
            object.__setattr__(self, "value", to_utc(self.value))

    def test(self, order: Order) -> bool:
        actual = getattr(order, self.field.value)
        if self.op is Op.IS_NULL:
            return actual is None
        if self.op is Op.NOT_NULL:
            return actual is not None
        if self.op is Op.IN:
            return actual in self.value
        if self.op is Op.NOT_IN:
            return actual not in self.value
        if self.op is Op.LT:
            # SQL semantics: comparisons against NULL are never true
            return actual is not None and actual < self.value
        return actual == self.value


@dataclass(frozen=True)
class Predicate:
    conditions: Tuple[Condition, ...] = ()

    def matches(self, order: Order) -> bool:
        return all(condition.test(order) for condition in self.conditions)

    def and_(self, *conditions: Condition) -> Predicate:
        return Predicate(self.conditions + tuple(conditions))

    # -- convenience builders ----------------------------------------------

    @staticmethod
    def id_in(ids) -> Predicate:
        return Predicate((Condition(Field.ID, Op.IN, ids),))

    def excluding(self, ids: FrozenSet[str]) -> Predicate:
        if not ids:
            return self
        return self.and_(Condition(Field.ID, Op.NOT_IN, ids))

    def deleted_before(self, cutoff: datetime) -> Predicate:
        return self.and_(Condition(Field.DELETED_AT, Op.LT, cutoff))


_ACTIVE = Condition(Field.DELETED_AT, Op.IS_NULL)

_TAB_PREDICATES: Dict[Tab, Predicate] = {
    Tab.ALL: Predicate((_ACTIVE,)),
    Tab.UNREAD: Predicate((_ACTIVE, Condition(Field.IS_READ, Op.EQ, False))),
    Tab.IN_PROGRESS: Predicate((_ACTIVE, Condition(Field.STATUS, Op.EQ, OrderStatus.IN_PROGRESS))),
    Tab.DONE: Predicate((_ACTIVE, Condition(Field.STATUS, Op.EQ, OrderStatus.DONE))),
    Tab.ARCHIVED: Predicate((_ACTIVE, Condition(Field.STATUS, Op.EQ, OrderStatus.ARCHIVED))),
    Tab.TRASH: Predicate((Condition(Field.DELETED_AT, Op.NOT_NULL),)),
}


def predicate_for(tab: Tab | str) -> Predicate:
    """Return the filter predicate of *tab*."""
    return _TAB_PREDICATES[Tab(tab)]


def tabs_of(order: Order) -> Tuple[Tab, ...]:
    """Every tab *order* is visible in, in declaration order."""
    return tuple(tab for tab, predicate in _TAB_PREDICATES.items() if predicate.matches(order))
