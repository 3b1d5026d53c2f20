import logging
import sqlite3
from typing import Any, Iterable, List, Optional

from orderdesk.domain.models import Order, OrderPatch, OrderStatus
from orderdesk.domain.models.core import format_timestamp, parse_timestamp
from orderdesk.domain.models.query import OrderQuery
from orderdesk.domain.models.tabs import Predicate
from orderdesk.domain.repositories import IOrderRepository
from orderdesk.errors import PartialBulkFailure, TransportError
from orderdesk.events.bus import EventBus
from orderdesk.events.order_events import (
    OrderDeletedEvent,
    OrderInsertedEvent,
    OrderUpdatedEvent,
)
from orderdesk.infrastructure.db.filter_compiler import compile_predicate, encode_value
from orderdesk.infrastructure.db.pool import ConnectionPool

_logger = logging.getLogger(__name__)

_STATUS_VALUES = ", ".join(f"'{status.value}'" for status in OrderStatus)

_COLUMNS = (
    "id", "created_at", "status", "is_read", "deleted_at",
    "name", "email", "script", "language", "voice", "avatar_id",
)

# Whitelist for ORDER BY; query objects only ever name these.
ALLOWED_SORT_COLUMNS = {"created_at", "id", "status", "deleted_at"}


def _bulk_error(exc: sqlite3.Error) -> Exception:
    if isinstance(exc, sqlite3.IntegrityError):
        return PartialBulkFailure(f"Backend rejected the bulk change: {exc}")
    return TransportError(str(exc))


class SQLiteOrderRepository(IOrderRepository):
    """Order store on SQLite that also acts as the realtime source.

    Every committed write is followed by one change event per affected row
    on the ``EventBus``, in the order the rows were written.
    """

    def __init__(self, pool: ConnectionPool, event_bus: Optional[EventBus] = None):
        self._pool = pool
        self._events = event_bus
        _logger.info("[REPO-INIT] SQLiteOrderRepository created, db_path=%s", pool.db_path)
        self._init_table()
        self._ensure_indices()

    def _init_table(self):
        with self._pool.connection() as conn:
            conn.execute(f"""
                CREATE TABLE IF NOT EXISTS orders (
                    id TEXT PRIMARY KEY,
                    created_at TEXT NOT NULL,
                    status TEXT DEFAULT 'new'
                        CHECK (status IS NULL OR status IN ({_STATUS_VALUES})),
                    is_read INTEGER NOT NULL DEFAULT 0,
                    deleted_at TEXT,
                    name TEXT,
                    email TEXT,
                    script TEXT,
                    language TEXT,
                    voice TEXT,
                    avatar_id TEXT
                )
            """)

    def _ensure_indices(self):
        with self._pool.connection() as conn:
            conn.execute("CREATE INDEX IF NOT EXISTS idx_orders_created ON orders(created_at DESC, id DESC)")
            conn.execute("CREATE INDEX IF NOT EXISTS idx_orders_deleted_at ON orders(deleted_at)")
            conn.execute("CREATE INDEX IF NOT EXISTS idx_orders_status ON orders(status)")

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def get(self, id: str) -> Optional[Order]:
        with self._pool.connection() as conn:
            row = conn.execute("SELECT * FROM orders WHERE id = ?", (id,)).fetchone()
            if row:
                return self._map_row_to_order(row)
            return None

    def count(self, query: OrderQuery) -> int:
        where, params = compile_predicate(query.predicate)
        with self._pool.connection() as conn:
            return conn.execute(f"SELECT COUNT(*) FROM orders WHERE {where}", params).fetchone()[0]

    def find_by_query(self, query: OrderQuery) -> List[Order]:
        sql, params = self._build_sql(query)
        with self._pool.connection() as conn:
            rows = conn.execute(sql, params).fetchall()
        orders = [self._map_row_to_order(row) for row in rows]
        _logger.debug(
            "[REPO-QUERY] offset=%s limit=%s -> %d rows", query.offset, query.limit, len(orders)
        )
        return orders

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------
    def insert(self, order: Order) -> None:
        with self._pool.connection() as conn:
            conn.execute(
                f"INSERT INTO orders ({', '.join(_COLUMNS)}) VALUES ({', '.join('?' for _ in _COLUMNS)})",
                self._order_values(order),
            )
        self._publish(OrderInsertedEvent(order_id=order.id, order=order, source="repository"))

    def save(self, order: Order) -> None:
        assignments = ", ".join(f"{col} = excluded.{col}" for col in _COLUMNS[1:])
        with self._pool.connection() as conn:
            existed = conn.execute("SELECT 1 FROM orders WHERE id = ?", (order.id,)).fetchone() is not None
            conn.execute(
                f"INSERT INTO orders ({', '.join(_COLUMNS)}) VALUES ({', '.join('?' for _ in _COLUMNS)}) "
                f"ON CONFLICT(id) DO UPDATE SET {assignments}",
                self._order_values(order),
            )
        event_type = OrderUpdatedEvent if existed else OrderInsertedEvent
        self._publish(event_type(order_id=order.id, order=order, source="repository"))

    def insert_many(self, orders: Iterable[Order]) -> int:
        """Seed helper: insert without publishing one event per row."""
        data = [self._order_values(order) for order in orders]
        with self._pool.connection() as conn:
            conn.executemany(
                f"INSERT INTO orders ({', '.join(_COLUMNS)}) VALUES ({', '.join('?' for _ in _COLUMNS)})",
                data,
            )
        return len(data)

    def bulk_patch(self, predicate: Predicate, patch: OrderPatch) -> List[Order]:
        fields = patch.fields()
        if not fields:
            return []
        assignments = ", ".join(f"{name} = ?" for name in fields)
        values = [encode_value(value) for value in fields.values()]
        where, params = compile_predicate(predicate)
        with self._pool.connection(error_mapper=_bulk_error) as conn:
            rows = conn.execute(
                f"UPDATE orders SET {assignments} WHERE {where} RETURNING *",
                values + params,
            ).fetchall()
        updated = [self._map_row_to_order(row) for row in rows]
        _logger.info("[REPO-BULK] patch %s -> %d rows", sorted(fields), len(updated))
        for order in updated:
            self._publish(OrderUpdatedEvent(order_id=order.id, order=order, source="repository"))
        return updated

    def bulk_delete(self, predicate: Predicate) -> List[str]:
        where, params = compile_predicate(predicate)
        with self._pool.connection(error_mapper=_bulk_error) as conn:
            rows = conn.execute(f"DELETE FROM orders WHERE {where} RETURNING *", params).fetchall()
        deleted = [self._map_row_to_order(row) for row in rows]
        _logger.info("[REPO-BULK] delete -> %d rows", len(deleted))
        for order in deleted:
            self._publish(OrderDeletedEvent(order_id=order.id, order=order, source="repository"))
        return [order.id for order in deleted]

    # ------------------------------------------------------------------
    # Internal utilities
    # ------------------------------------------------------------------
    def _publish(self, event) -> None:
        if self._events is not None:
            self._events.publish(event)

    def _build_sql(self, query: OrderQuery):
        where, params = compile_predicate(query.predicate)
        sql = f"SELECT * FROM orders WHERE {where}"

        order_col = query.order_by if query.order_by in ALLOWED_SORT_COLUMNS else "created_at"
        tiebreak = query.tiebreak if query.tiebreak in ALLOWED_SORT_COLUMNS else "id"
        direction = query.order.value
        sql += f" ORDER BY {order_col} {direction}"
        if tiebreak != order_col:
            sql += f", {tiebreak} {direction}"

        if query.limit is not None:
            sql += " LIMIT ? OFFSET ?"
            params = params + [query.limit, query.offset]
        return sql, params

    @staticmethod
    def _order_values(order: Order) -> tuple:
        return (
            order.id,
            format_timestamp(order.created_at),
            order.status.value,
            int(order.is_read),
            format_timestamp(order.deleted_at) if order.deleted_at else None,
            order.name,
            order.email,
            order.script,
            order.language,
            order.voice,
            order.avatar_id,
        )

    @staticmethod
    def _map_row_to_order(row: Any) -> Order:
        keys = row.keys()

        def _opt(name: str) -> Optional[str]:
            return row[name] if name in keys else None

        return Order(
            id=row["id"],
            created_at=parse_timestamp(row["created_at"]),
            status=OrderStatus.coerce(row["status"]),
            is_read=bool(row["is_read"]),
            deleted_at=parse_timestamp(row["deleted_at"]),
            name=_opt("name"),
            email=_opt("email"),
            script=_opt("script"),
            language=_opt("language"),
            voice=_opt("voice"),
            avatar_id=_opt("avatar_id"),
        )
