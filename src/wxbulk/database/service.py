"""Abstract DatabaseService interface."""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Any, ClassVar, Iterator, Sequence

from wxbulk.database.types import Params


def qualified_name(schema: str | None, table: str) -> str:
    """Return ``schema.table``, or just ``table`` when no schema is given."""
    return f"{schema}.{table}" if schema else table


class DatabaseService(ABC):
    """Database-agnostic interface for the loader's DB operations.

    - Pooled: each transaction() acquires its own connection and returns it on exit
    - Thread-safe: concurrent batch flushes never share a connection
    - DB-agnostic: the pipeline programs against this ABC, never a concrete backend
    """

    #: Driver exceptions a caller may treat as a failed (retryable) write.
    errors: ClassVar[tuple[type[BaseException], ...]] = (ConnectionError,)

    @abstractmethod
    def connect(self) -> None:
        """Initialize the connection pool."""

    @abstractmethod
    def close(self) -> None:
        """Close all connections and release resources."""

    @abstractmethod
    def execute(self, sql: str, params: Params | None = None) -> list[dict[str, Any]]:
        """Execute a single SQL statement and return rows as dicts."""

    @abstractmethod
    @contextmanager
    def transaction(self) -> Iterator[None]:
        """Context manager: acquires a connection, commits on success, rolls back on error."""

    @abstractmethod
    def execute_ddl(self, sql: str) -> None:
        """Execute DDL statements (CREATE TABLE, CREATE INDEX, etc.)."""

    @abstractmethod
    def create_schema(self, schema: str) -> None:
        """Create a namespace for the destination table if the backend supports one."""

    @abstractmethod
    def bulk_copy(self, table: str, columns: Sequence[str], rows: Sequence[tuple]) -> int:
        """Load all rows in a single bulk operation and return the row count.

        Must be called inside ``transaction()``; the rows become visible
        together on commit or not at all.
        """
