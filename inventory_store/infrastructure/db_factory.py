"""
Database connection factory utilities for the inventory store.

Provides centralized creation of SQLite connections and PostgreSQL
connections/pools. The PoolManager singleton owns the shared PostgreSQL pool
and ensures it is closed on application exit.

Includes retry logic for transient connection failures using tenacity: a
PostgreSQL server that is still starting up, or a SQLite file briefly locked by
another process.
"""

from __future__ import annotations

import atexit
import sqlite3
import threading
from pathlib import Path
from typing import Optional

import psycopg
from psycopg import Connection
from psycopg_pool import ConnectionPool
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from inventory_store.config import Settings, get_settings
from inventory_store.utils.logging import get_logger

log = get_logger(__name__)


def build_dsn(settings: Optional[Settings] = None) -> str:
    """Compose a PostgreSQL DSN string from settings."""
    settings = settings or get_settings()
    return (
        f"postgresql://{settings.db_user}:{settings.db_password}"
        f"@{settings.db_host}:{settings.db_port}/{settings.db_name}"
    )


class PoolManager:
    """
    Thread-safe singleton for managing the shared PostgreSQL connection pool.

    Handles lifecycle management with automatic cleanup via atexit hook.
    """

    _instance: Optional["PoolManager"] = None
    _lock = threading.Lock()

    def __new__(cls) -> "PoolManager":
        """Create or return the singleton instance."""
        with cls._lock:
            if cls._instance is None:
                cls._instance = super().__new__(cls)
                cls._instance._pool: Optional[ConnectionPool] = None
                atexit.register(cls._instance.close_all)
            return cls._instance

    def get_pool(
        self, settings: Optional[Settings] = None, min_size: int = 1, max_size: int = 4
    ) -> ConnectionPool:
        """
        Get or create the shared synchronous connection pool.

        Parameters
        ----------
        settings : Settings, optional
            Settings used to build the DSN on first use.
        min_size : int
            Minimum number of idle connections to keep.
        max_size : int
            Maximum total connections in the pool.

        Returns
        -------
        ConnectionPool
            The managed pool instance.
        """
        with self._lock:
            if self._pool is None:
                self._pool = ConnectionPool(
                    conninfo=build_dsn(settings),
                    min_size=min_size,
                    max_size=max_size,
                    open=True,
                )
                log.debug("PostgreSQL pool opened", extra={"min_size": min_size, "max_size": max_size})
            return self._pool

    def close_all(self) -> None:
        """
        Close the managed pool and release resources.

        This is called automatically on exit via atexit hook.
        """
        with self._lock:
            if self._pool is not None:
                try:
                    self._pool.close()
                except psycopg.Error:
                    log.warning("Error while closing PostgreSQL pool", exc_info=True)
                finally:
                    self._pool = None


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type((psycopg.OperationalError, psycopg.InterfaceError)),
    reraise=True,
)
def get_sync_connection(dsn: Optional[str] = None) -> Connection:
    """
    Acquire a dedicated PostgreSQL connection with automatic retry.

    Retries up to 3 times with exponential backoff for transient connection errors.
    Use this for one-off operations (schema setup, tests). Prefer the pool for
    repeated use.

    Raises
    ------
    psycopg.OperationalError
        If connection fails after all retry attempts.
    """
    return psycopg.connect(dsn or build_dsn())


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=0.2, min=0.2, max=2),
    retry=retry_if_exception_type(sqlite3.OperationalError),
    reraise=True,
)
def connect_sqlite(path: str | Path, timeout: float = 5.0) -> sqlite3.Connection:
    """
    Open a SQLite connection with automatic retry.

    The parent directory is created if missing. `timeout` is how long SQLite
    itself waits on a locked database before raising.

    Raises
    ------
    sqlite3.OperationalError
        If the file cannot be opened after all retry attempts.
    """
    db_path = Path(path)
    if str(db_path) != ":memory:":
        db_path.parent.mkdir(parents=True, exist_ok=True)
    return sqlite3.connect(str(db_path), timeout=timeout)


__all__ = [
    "PoolManager",
    "build_dsn",
    "connect_sqlite",
    "get_sync_connection",
]
