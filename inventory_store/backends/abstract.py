"""
Abstract storage backend interfaces for the inventory store.

A backend owns one database (SQLite file or PostgreSQL database) and exposes:

- `session()`: scoped acquisition of a DB-API connection that commits on
  success, rolls back on error and is always released. Driver errors are
  wrapped in `StoreIoError`.
- Small data-access primitives (column log, item rows, users) that run inside
  a session. The schema registry, record store and credential store are built
  on these and never write SQL themselves.

Concrete backends implement `_acquire`, `insert_item` and `schema_statements`;
everything else is shared SQL using the backend's parameter placeholder.
"""

from __future__ import annotations

import abc
import json
from contextlib import closing, contextmanager
from datetime import datetime
from typing import (
    Any,
    ContextManager,
    Dict,
    Iterator,
    List,
    Optional,
    Protocol,
    Sequence,
    Tuple,
    Type,
    runtime_checkable,
)

from inventory_store.domain.errors import StoreIoError
from inventory_store.utils.logging import get_logger

log = get_logger(__name__)

# (id, name, part_number, quantity, attributes)
ItemRow = Tuple[Any, Any, Any, Any, Any]
# (position, name, added_at)
ColumnRow = Tuple[int, str, Any]


@runtime_checkable
class StorageBackend(Protocol):
    """
    Common interface all storage backends must implement.

    Attributes
    ----------
    name : str
        A short machine-friendly identifier.
    description : str
        A human-friendly summary of the backend.
    """

    name: str
    description: str

    def session(self) -> ContextManager[Any]:
        """Acquire a connection for the duration of one operation."""
        ...

    def initialize(self) -> None:
        """Create the store tables if they do not exist yet."""
        ...

    def close(self) -> None:
        """Release any long-lived resources (pools)."""
        ...


class AbstractStorageBackend(abc.ABC):
    """
    Shared implementation for class-based backends.

    Subclasses set `name`, `description`, `placeholder` and `driver_errors`, and
    implement `_acquire`, `insert_item` and `schema_statements`.
    """

    name: str
    description: str
    placeholder: str = "%s"
    driver_errors: Tuple[Type[BaseException], ...] = ()

    @abc.abstractmethod
    def _acquire(self) -> ContextManager[Any]:  # pragma: no cover - interface only
        """Yield a connection; commit on success, roll back on error, release always."""
        raise NotImplementedError

    @abc.abstractmethod
    def schema_statements(self) -> Sequence[str]:  # pragma: no cover - interface only
        """DDL statements creating the store tables idempotently."""
        raise NotImplementedError

    @abc.abstractmethod
    def insert_item(
        self,
        conn: Any,
        name: str,
        part_number: str,
        quantity: int,
        attributes: Dict[str, str],
    ) -> int:  # pragma: no cover - interface only
        """Insert one item row and return its new id."""
        raise NotImplementedError

    @property
    def target(self) -> str:
        """Where this backend stores data, for logs and `info` output."""
        return self.name

    @contextmanager
    def session(self) -> Iterator[Any]:
        """
        Scoped connection for one store operation.

        Example
        -------
            with backend.session() as conn:
                rows = backend.fetch_column_log(conn)
        """
        try:
            with self._acquire() as conn:
                yield conn
        except self.driver_errors as exc:
            log.error(
                f"[STORE ERROR] {self.name}: {exc}",
                extra={"backend": self.name, "target": self.target},
            )
            raise StoreIoError(f"{self.name} store error: {exc}") from exc

    def initialize(self) -> None:
        with self.session() as conn:
            with closing(conn.cursor()) as cur:
                for statement in self.schema_statements():
                    cur.execute(statement)
        log.info(f"[STORE READY] {self.name}", extra={"backend": self.name, "target": self.target})

    def close(self) -> None:
        """Nothing to release by default."""

    def _sql(self, template: str) -> str:
        return template.format(p=self.placeholder)

    # Column log -------------------------------------------------------------

    def fetch_column_log(self, conn: Any) -> List[ColumnRow]:
        with closing(conn.cursor()) as cur:
            cur.execute("SELECT position, name, added_at FROM inventory_columns ORDER BY position")
            return [tuple(row) for row in cur.fetchall()]

    def insert_column(self, conn: Any, name: str) -> bool:
        """Append `name` to the column log; False if it was already there."""
        with closing(conn.cursor()) as cur:
            cur.execute(
                self._sql(
                    "INSERT INTO inventory_columns (name) VALUES ({p}) "
                    "ON CONFLICT (name) DO NOTHING"
                ),
                (name,),
            )
            return cur.rowcount == 1

    # Items ------------------------------------------------------------------

    def _scan_cursor(self, conn: Any) -> Any:
        return conn.cursor()

    def iter_item_rows(self, conn: Any, batch_size: int) -> Iterator[ItemRow]:
        with closing(self._scan_cursor(conn)) as cur:
            cur.execute(
                "SELECT id, name, part_number, quantity, attributes "
                "FROM inventory_items ORDER BY id"
            )
            while True:
                batch = cur.fetchmany(batch_size)
                if not batch:
                    break
                yield from batch

    def count_items(self, conn: Any) -> int:
        with closing(conn.cursor()) as cur:
            cur.execute("SELECT COUNT(*) FROM inventory_items")
            return int(cur.fetchone()[0])

    def decode_attributes(self, raw: Any) -> Dict[str, Any]:
        """Turn a stored attributes payload into a dict; ValueError if it is not one."""
        if raw is None:
            return {}
        if isinstance(raw, (bytes, str)):
            raw = json.loads(raw)
        if not isinstance(raw, dict):
            raise ValueError(f"attributes payload is {type(raw).__name__}, expected object")
        return raw

    def decode_timestamp(self, raw: Any) -> Optional[datetime]:
        if raw is None or isinstance(raw, datetime):
            return raw
        return datetime.fromisoformat(str(raw))

    # Users ------------------------------------------------------------------

    def insert_user(self, conn: Any, username: str, password_hash: str) -> bool:
        """Insert a user; False if the username is taken."""
        with closing(conn.cursor()) as cur:
            cur.execute(
                self._sql(
                    "INSERT INTO users (username, password_hash) VALUES ({p}, {p}) "
                    "ON CONFLICT (username) DO NOTHING"
                ),
                (username, password_hash),
            )
            return cur.rowcount == 1

    def fetch_password_hash(self, conn: Any, username: str) -> Optional[str]:
        with closing(conn.cursor()) as cur:
            cur.execute(
                self._sql("SELECT password_hash FROM users WHERE username = {p}"),
                (username,),
            )
            row = cur.fetchone()
            return row[0] if row else None


__all__ = [
    "AbstractStorageBackend",
    "ColumnRow",
    "ItemRow",
    "StorageBackend",
]
