import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from orderdesk.domain.models import Order, OrderStatus  # noqa: E402
from orderdesk.events.bus import EventBus  # noqa: E402
from orderdesk.infrastructure.db.pool import ConnectionPool  # noqa: E402
from orderdesk.infrastructure.repositories.sqlite_order_repository import SQLiteOrderRepository  # noqa: E402

BASE_TIME = datetime(2024, 3, 1, 12, 0, tzinfo=timezone.utc)


def make_order(
    index: int,
    status: OrderStatus = OrderStatus.NEW,
    is_read: bool = False,
    deleted_at: datetime | None = None,
    created_at: datetime | None = None,
) -> Order:
    """Order ``o<index>``; higher indices are newer."""
    return Order(
        id=f"o{index:04d}",
        created_at=created_at or BASE_TIME + timedelta(minutes=index),
        status=status,
        is_read=is_read,
        deleted_at=deleted_at,
        name=f"Customer {index}",
        email=f"c{index}@example.com",
    )


@pytest.fixture
def bus():
    return EventBus()


@pytest.fixture
def pool(tmp_path):
    pool = ConnectionPool(tmp_path / "orders.db", pool_size=2)
    yield pool
    pool.close_all()


@pytest.fixture
def repo(pool, bus):
    return SQLiteOrderRepository(pool, bus)


@pytest.fixture
def seed(repo):
    """Insert orders without publishing change events; returns the list."""

    def _seed(orders):
        orders = list(orders)
        repo.insert_many(orders)
        return orders

    return _seed


@pytest.fixture
def order_factory():
    return make_order


@pytest.fixture
def base_time():
    return BASE_TIME
