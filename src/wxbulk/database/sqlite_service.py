"""SQLite implementation of DatabaseService."""

import sqlite3
import threading
from contextlib import contextmanager
from datetime import datetime
from queue import Empty, Queue
from typing import Any, Iterator, Sequence

from wxbulk.database.service import DatabaseService
from wxbulk.database.types import Params

# Store timestamps the way PostgreSQL renders them
sqlite3.register_adapter(datetime, lambda value: value.isoformat(" "))


class SQLiteDatabaseService(DatabaseService):
    """SQLite backend using stdlib sqlite3.

    Thread-safe via a connection pool (Queue). Each transaction() call
    acquires a dedicated connection and returns it on exit.
    """

    errors = (sqlite3.Error, ConnectionError)

    def __init__(self, db_path: str, pool_size: int = 4):
        self._db_path = db_path
        self._pool_size = pool_size
        self._pool: Queue[sqlite3.Connection] = Queue(maxsize=pool_size)
        self._local = threading.local()

    def connect(self) -> None:
        for _ in range(self._pool_size):
            conn = sqlite3.connect(self._db_path, check_same_thread=False, timeout=30)
            conn.row_factory = sqlite3.Row
            conn.execute("PRAGMA journal_mode=WAL")
            self._pool.put(conn)

    def close(self) -> None:
        while not self._pool.empty():
            try:
                conn = self._pool.get_nowait()
                conn.close()
            except Empty:
                break

    def _acquire(self) -> sqlite3.Connection:
        try:
            return self._pool.get(timeout=30)
        except Empty:
            raise ConnectionError("Timed out waiting for a pooled connection") from None

    def _release(self, conn: sqlite3.Connection) -> None:
        self._pool.put(conn)

    def _get_conn(self) -> sqlite3.Connection:
        """Get the connection bound to the current thread's transaction."""
        conn = getattr(self._local, "conn", None)
        if conn is not None:
            return conn
        raise RuntimeError(
            "No active transaction. Wrap calls in a `with service.transaction():` block."
        )

    @contextmanager
    def transaction(self) -> Iterator[None]:
        conn = self._acquire()
        self._local.conn = conn
        try:
            yield
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            self._local.conn = None
            self._release(conn)

    def execute(self, sql: str, params: Params | None = None) -> list[dict[str, Any]]:
        conn = self._get_conn()
        cursor = conn.execute(sql, params or ())
        if cursor.description is None:
            return []
        columns = [desc[0] for desc in cursor.description]
        return [dict(zip(columns, row)) for row in cursor.fetchall()]

    def execute_ddl(self, sql: str) -> None:
        conn = self._acquire()
        try:
            conn.executescript(sql)
            conn.commit()
        finally:
            self._release(conn)

    def create_schema(self, schema: str) -> None:
        raise ValueError(f"SQLite has no schemas; cannot create {schema!r}")

    def bulk_copy(self, table: str, columns: Sequence[str], rows: Sequence[tuple]) -> int:
        # No COPY in SQLite; a single executemany inside the caller's transaction
        # gives the same all-or-nothing semantics.
        if not rows:
            return 0
        cols = ", ".join(columns)
        placeholders = ", ".join("?" for _ in columns)
        sql = f"INSERT INTO {table} ({cols}) VALUES ({placeholders})"
        self._get_conn().executemany(sql, rows)
        return len(rows)
