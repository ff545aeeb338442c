"""PostgreSQL implementation of DatabaseService."""

import csv
import io
import threading
from contextlib import contextmanager
from queue import Empty, Queue
from typing import Any, Iterator, Sequence

import psycopg2
import psycopg2.extras

from wxbulk.database.service import DatabaseService
from wxbulk.database.types import Params


def _copy_buffer(rows: Sequence[tuple]) -> io.StringIO:
    """Render rows as CSV for COPY; None becomes an unquoted empty field (NULL)."""
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    for row in rows:
        writer.writerow(["" if value is None else value for value in row])
    buf.seek(0)
    return buf


class PostgresDatabaseService(DatabaseService):
    """PostgreSQL backend using psycopg2.

    Thread-safe via a connection pool (Queue). Each transaction() call
    acquires a dedicated connection and returns it on exit.
    """

    errors = (psycopg2.Error, ConnectionError)

    def __init__(self, dsn: str, pool_size: int = 4):
        self._dsn = dsn
        self._pool_size = pool_size
        self._pool: Queue = Queue(maxsize=pool_size)
        self._local = threading.local()

    def connect(self) -> None:
        for _ in range(self._pool_size):
            conn = psycopg2.connect(self._dsn)
            conn.autocommit = False
            self._pool.put(conn)

    def close(self) -> None:
        while not self._pool.empty():
            try:
                conn = self._pool.get_nowait()
                conn.close()
            except Empty:
                break

    def _acquire(self):
        try:
            conn = self._pool.get(timeout=30)
        except Empty:
            raise ConnectionError("Timed out waiting for a pooled connection") from None
        if conn.closed:
            # Replace connections the server dropped since the last flush
            try:
                fresh = psycopg2.connect(self._dsn)
            except Exception:
                # Keep the slot; the next acquire tries to reconnect again
                self._pool.put(conn)
                raise
            fresh.autocommit = False
            conn = fresh
        return conn

    def _release(self, conn) -> None:
        self._pool.put(conn)

    def _get_conn(self):
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
            if not conn.closed:
                conn.rollback()
            raise
        finally:
            self._local.conn = None
            self._release(conn)

    def execute(self, sql: str, params: Params | None = None) -> list[dict[str, Any]]:
        conn = self._get_conn()
        with conn.cursor(cursor_factory=psycopg2.extras.RealDictCursor) as cur:
            cur.execute(sql, params or ())
            if cur.description is None:
                return []
            return [dict(row) for row in cur.fetchall()]

    def execute_ddl(self, sql: str) -> None:
        conn = self._acquire()
        try:
            with conn.cursor() as cur:
                for statement in sql.split(";"):
                    statement = statement.strip()
                    if statement:
                        cur.execute(statement)
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            self._release(conn)

    def create_schema(self, schema: str) -> None:
        self.execute_ddl(f"CREATE SCHEMA IF NOT EXISTS {schema}")

    def bulk_copy(self, table: str, columns: Sequence[str], rows: Sequence[tuple]) -> int:
        if not rows:
            return 0
        conn = self._get_conn()
        cols = ", ".join(columns)
        sql = f"COPY {table} ({cols}) FROM STDIN WITH (FORMAT csv)"
        with conn.cursor() as cur:
            cur.copy_expert(sql, _copy_buffer(rows))
        return len(rows)
