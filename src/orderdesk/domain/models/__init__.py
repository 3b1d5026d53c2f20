from .core import UNSET, Order, OrderPatch, OrderStatus, utc_now
from .query import OrderQuery, PageWindow, SortOrder
from .selection import (
    EMPTY_SELECTION,
    AllInTabSelection,
    ExplicitSelection,
    Selection,
    TargetDescriptor,
)
from .tabs import Condition, Field, Op, Predicate, Tab, predicate_for, tabs_of

__all__ = [
    "AllInTabSelection",
    "Condition",
    "EMPTY_SELECTION",
    "ExplicitSelection",
    "Field",
    "Op",
    "Order",
    "OrderPatch",
    "OrderQuery",
    "OrderStatus",
    "PageWindow",
    "Predicate",
    "Selection",
    "SortOrder",
    "Tab",
    "TargetDescriptor",
    "UNSET",
    "predicate_for",
    "tabs_of",
    "utc_now",
]
