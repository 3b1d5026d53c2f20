import logging
import queue
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Callable, Optional

from orderdesk.errors import ConnectionPoolExhausted, TransportError

_logger = logging.getLogger(__name__)


class ConnectionPool:
    """Small lazily-filled pool of SQLite connections.

    ``connection()`` yields a connection inside a transaction: commit on
    normal exit, rollback on error.  ``sqlite3.Error`` raised inside the
    block is re-raised as :class:`TransportError` unless an ``error_mapper``
    chooses something more specific.
    """

    def __init__(
        self,
        db_path: Path,
        pool_size: int = 5,
        timeout: float = 30.0,
        busy_timeout_ms: int = 5000,
    ):
        self._db_path = db_path
        self._pool_size = pool_size
        self._timeout = timeout
        self._busy_timeout_ms = busy_timeout_ms
        self._pool: queue.Queue = queue.Queue(maxsize=pool_size)
        self._created = 0
        self._lock = threading.Lock()
        self._closed = False

    @property
    def db_path(self) -> Path:
        return self._db_path

    def _create_connection(self) -> sqlite3.Connection:
        try:
            conn = sqlite3.connect(self._db_path, check_same_thread=False)
            conn.row_factory = sqlite3.Row
            conn.execute(f"PRAGMA busy_timeout = {int(self._busy_timeout_ms)}")
            conn.execute("PRAGMA journal_mode = WAL")
        except sqlite3.Error as exc:
            raise TransportError(f"Cannot open database {self._db_path}: {exc}") from exc
        _logger.debug("Opened connection %d/%d to %s", self._created, self._pool_size, self._db_path)
        return conn

    def _acquire(self) -> sqlite3.Connection:
        if self._closed:
            raise TransportError("Connection pool is closed")
        try:
            return self._pool.get_nowait()
        except queue.Empty:
            pass

        with self._lock:
            if self._created < self._pool_size:
                self._created += 1
                try:
                    return self._create_connection()
                except TransportError:
                    self._created -= 1
                    raise

        try:
            return self._pool.get(timeout=self._timeout)
        except queue.Empty:
            raise ConnectionPoolExhausted(
                f"No connections available within {self._timeout}s "
                f"(pool_size={self._pool_size})"
            )

    def _release(self, conn: sqlite3.Connection):
        if self._closed:
            conn.close()
            return
        try:
            self._pool.put_nowait(conn)
        except queue.Full:
            conn.close()

    @contextmanager
    def connection(self, error_mapper: Optional[Callable[[sqlite3.Error], Exception]] = None):
        conn = self._acquire()
        try:
            yield conn
            conn.commit()
        except sqlite3.Error as exc:
            conn.rollback()
            mapped = error_mapper(exc) if error_mapper else None
            raise (mapped or TransportError(str(exc))) from exc
        except Exception:
            conn.rollback()
            raise
        finally:
            self._release(conn)

    def close_all(self):
        self._closed = True
        while not self._pool.empty():
            try:
                conn = self._pool.get_nowait()
                conn.close()
            except queue.Empty:
                break
