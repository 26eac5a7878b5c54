"""
PostgreSQL backend using psycopg 3 and a connection pool.

Sessions borrow a connection from a `psycopg_pool.ConnectionPool`; the pool's
context manager commits on success, rolls back on error and returns the
connection. Dynamic values live in a JSONB column, and full scans stream
through a server-side named cursor so large stores are never loaded at once.
"""

from __future__ import annotations

from contextlib import closing, contextmanager
from typing import Any, Dict, Iterator, Optional, Sequence

import psycopg
from psycopg.types.json import Jsonb
from psycopg_pool import ConnectionPool

from inventory_store.backends.abstract import AbstractStorageBackend
from inventory_store.config import Settings, get_settings
from inventory_store.infrastructure.db_factory import PoolManager, build_dsn

_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS inventory_columns (
        position BIGSERIAL PRIMARY KEY,
        name TEXT NOT NULL UNIQUE,
        added_at TIMESTAMPTZ NOT NULL DEFAULT now()
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS inventory_items (
        id BIGSERIAL PRIMARY KEY,
        name TEXT,
        part_number TEXT,
        quantity INTEGER,
        attributes JSONB NOT NULL DEFAULT '{}'::jsonb
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS users (
        id BIGSERIAL PRIMARY KEY,
        username TEXT NOT NULL UNIQUE,
        password_hash TEXT NOT NULL
    )
    """,
)


class PostgresBackend(AbstractStorageBackend):
    """
    Pooled PostgreSQL store.

    By default the process-wide pool from `PoolManager` is used. Passing
    `dsn_override` gives this backend its own pool, which `close()` releases
    (used by tests and by tools pointing at a second database).
    """

    name: str = "postgres"
    description: str = "PostgreSQL via psycopg pool (JSONB attributes, server-side scans)."
    placeholder: str = "%s"
    driver_errors = (psycopg.Error,)

    def __init__(
        self,
        settings: Optional[Settings] = None,
        dsn_override: Optional[str] = None,
        pool_min_size: Optional[int] = None,
        pool_max_size: Optional[int] = None,
    ) -> None:
        self._settings = settings or get_settings()
        self._dsn_override = dsn_override
        self.pool_min_size = pool_min_size or self._settings.db_pool_min
        self.pool_max_size = pool_max_size or self._settings.db_pool_max
        self._pool_instance: Optional[ConnectionPool] = None

    @property
    def target(self) -> str:
        dsn = self._dsn_override or build_dsn(self._settings)
        # Hide credentials in logs.
        return dsn.rsplit("@", 1)[-1]

    def _get_pool(self) -> ConnectionPool:
        if self._pool_instance is not None:
            return self._pool_instance
        if self._dsn_override:
            self._pool_instance = ConnectionPool(
                conninfo=self._dsn_override,
                min_size=self.pool_min_size,
                max_size=self.pool_max_size,
                open=True,
            )
        else:
            self._pool_instance = PoolManager().get_pool(
                self._settings, min_size=self.pool_min_size, max_size=self.pool_max_size
            )
        return self._pool_instance

    @contextmanager
    def _acquire(self) -> Iterator[psycopg.Connection]:
        with self._get_pool().connection() as conn:
            yield conn

    def close(self) -> None:
        """Close the pool if this backend owns it; the shared pool closes at exit."""
        if self._dsn_override and self._pool_instance is not None:
            self._pool_instance.close()
        self._pool_instance = None

    def schema_statements(self) -> Sequence[str]:
        return _SCHEMA

    def _scan_cursor(self, conn: Any) -> Any:
        # Named cursor keeps the result set on the server between fetchmany calls.
        return conn.cursor(name="inventory_scan")

    def insert_item(
        self,
        conn: Any,
        name: str,
        part_number: str,
        quantity: int,
        attributes: Dict[str, str],
    ) -> int:
        with closing(conn.cursor()) as cur:
            cur.execute(
                "INSERT INTO inventory_items (name, part_number, quantity, attributes) "
                "VALUES (%s, %s, %s, %s) RETURNING id",
                (name, part_number, quantity, Jsonb(attributes)),
            )
            return int(cur.fetchone()[0])


__all__ = ["PostgresBackend"]
