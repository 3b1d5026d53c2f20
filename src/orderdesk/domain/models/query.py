from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

from .core import Order
from .tabs import Predicate, Tab, predicate_for


class SortOrder(Enum):
    ASC = "ASC"
    DESC = "DESC"


@dataclass
class OrderQuery:
    """Order query object - Fluent API for building a count/page request"""

    predicate: Predicate = field(default_factory=Predicate)
    limit: Optional[int] = None
    offset: int = 0
    order_by: str = "created_at"
    order: SortOrder = SortOrder.DESC
    # Stable secondary key so equal timestamps paginate deterministically
    tiebreak: str = "id"

    @classmethod
    def for_tab(cls, tab: Tab | str) -> OrderQuery:
        return cls(predicate=predicate_for(tab))

    def where(self, predicate: Predicate) -> OrderQuery:
        self.predicate = predicate
        return self

    def paginate(self, page: int, page_size: int) -> OrderQuery:
        self.offset = (page - 1) * page_size
        self.limit = page_size
        return self

    def unpaged(self) -> OrderQuery:
        """Clone with pagination stripped, for COUNT(*)."""
        return OrderQuery(predicate=self.predicate, order_by=self.order_by, order=self.order, tiebreak=self.tiebreak)


@dataclass(frozen=True)
class PageWindow:
    """One loaded page of a tab.

    ``total_in_tab`` is an exact count for the tab, independent of how many
    rows the page holds.
    """

    tab: Tab
    page: int
    page_size: int
    rows: Tuple[Order, ...] = ()
    total_in_tab: int = 0

    @property
    def total_pages(self) -> int:
        if self.page_size <= 0 or self.total_in_tab <= 0:
            return 1
        return (self.total_in_tab + self.page_size - 1) // self.page_size

    @property
    def visible_ids(self) -> Tuple[str, ...]:
        return tuple(order.id for order in self.rows)

    def index_of(self, order_id: str) -> int:
        for index, order in enumerate(self.rows):
            if order.id == order_id:
                return index
        return -1

    @classmethod
    def empty(cls, tab: Tab, page: int, page_size: int) -> PageWindow:
        return cls(tab=tab, page=page, page_size=page_size)
