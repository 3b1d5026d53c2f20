from abc import ABC, abstractmethod
from typing import List, Optional

from .models import Order, OrderPatch
from .models.query import OrderQuery
from .models.tabs import Predicate


class IOrderRepository(ABC):
    @abstractmethod
    def get(self, id: str) -> Optional[Order]:
        """Find single order by ID"""
        pass

    @abstractmethod
    def insert(self, order: Order) -> None:
        """Insert a new order (publishes an insert change)"""
        pass

    @abstractmethod
    def save(self, order: Order) -> None:
        """Insert or update a single order"""
        pass

    @abstractmethod
    def count(self, query: OrderQuery) -> int:
        """Exact count of orders matching the query predicate"""
        pass

    @abstractmethod
    def find_by_query(self, query: OrderQuery) -> List[Order]:
        """Bounded row window, ordered by created_at desc then id"""
        pass

    @abstractmethod
    def bulk_patch(self, predicate: Predicate, patch: OrderPatch) -> List[Order]:
        """Apply *patch* to every matching order in one statement; return updated rows"""
        pass

    @abstractmethod
    def bulk_delete(self, predicate: Predicate) -> List[str]:
        """Hard-delete every matching order in one statement; return deleted ids"""
        pass
