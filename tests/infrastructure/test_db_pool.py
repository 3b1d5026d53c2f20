import sqlite3

import pytest

from orderdesk.errors import ConnectionPoolExhausted, TransportError
from orderdesk.infrastructure.db.pool import ConnectionPool


@pytest.fixture
def db_path(tmp_path):
    path = tmp_path / "test.db"
    conn = sqlite3.connect(path)
    conn.execute("CREATE TABLE test (id INTEGER PRIMARY KEY, name TEXT UNIQUE)")
    conn.close()
    return path


def test_connection_acquisition(db_path):
    pool = ConnectionPool(db_path, pool_size=1)

    with pool.connection() as conn:
        assert isinstance(conn, sqlite3.Connection)
        assert conn.execute("SELECT 1").fetchone()[0] == 1


def test_connection_recycling(db_path):
    pool = ConnectionPool(db_path, pool_size=1)

    with pool.connection() as conn:
        conn_id = id(conn)

    with pool.connection() as conn:
        assert id(conn) == conn_id


def test_transaction_commit(db_path):
    pool = ConnectionPool(db_path)

    with pool.connection() as conn:
        conn.execute("INSERT INTO test (name) VALUES (?)", ("foo",))

    conn = sqlite3.connect(db_path)
    assert conn.execute("SELECT name FROM test").fetchone()[0] == "foo"
    conn.close()


def test_transaction_rollback(db_path):
    pool = ConnectionPool(db_path)

    with pytest.raises(RuntimeError):
        with pool.connection() as conn:
            conn.execute("INSERT INTO test (name) VALUES (?)", ("bar",))
            raise RuntimeError("oops")

    conn = sqlite3.connect(db_path)
    assert conn.execute("SELECT name FROM test WHERE name='bar'").fetchone() is None
    conn.close()


def test_sqlite_errors_become_transport_errors(db_path):
    pool = ConnectionPool(db_path)

    with pytest.raises(TransportError):
        with pool.connection() as conn:
            conn.execute("SELECT * FROM missing_table")


def test_error_mapper_chooses_exception(db_path):
    pool = ConnectionPool(db_path)

    class Rejected(Exception):
        pass

    with pool.connection() as conn:
        conn.execute("INSERT INTO test (name) VALUES ('dup')")

    with pytest.raises(Rejected):
        with pool.connection(error_mapper=lambda exc: Rejected(str(exc))) as conn:
            conn.execute("INSERT INTO test (name) VALUES ('dup')")


def test_pool_exhaustion(db_path):
    pool = ConnectionPool(db_path, pool_size=1, timeout=0.05)

    with pool.connection():
        with pytest.raises(ConnectionPoolExhausted):
            with pool.connection():
                pass


def test_closed_pool_refuses_connections(db_path):
    pool = ConnectionPool(db_path)
    pool.close_all()

    with pytest.raises(TransportError):
        with pool.connection():
            pass
