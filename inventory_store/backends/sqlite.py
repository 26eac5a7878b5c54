"""
SQLite backend: a single local database file.

This mirrors the embedded-database deployment of the mobile application the
store comes from. Every session opens its own connection and closes it before
returning, so no handle outlives the operation that acquired it.
"""

from __future__ import annotations

import json
import sqlite3
from contextlib import closing, contextmanager
from pathlib import Path
from typing import Any, Dict, Iterator, Optional, Sequence

from inventory_store.backends.abstract import AbstractStorageBackend
from inventory_store.config import Settings, get_settings
from inventory_store.infrastructure.db_factory import connect_sqlite

_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS inventory_columns (
        position INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT NOT NULL UNIQUE,
        added_at TEXT NOT NULL DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS inventory_items (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        name TEXT,
        part_number TEXT,
        quantity INTEGER,
        attributes TEXT NOT NULL DEFAULT '{}'
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS users (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        username TEXT NOT NULL UNIQUE,
        password_hash TEXT NOT NULL
    )
    """,
)


class SqliteBackend(AbstractStorageBackend):
    """
    File-backed store using the standard library `sqlite3` driver.

    AUTOINCREMENT keeps ids monotonic and never reuses the id of a row that
    failed or was removed.
    """

    name: str = "sqlite"
    description: str = "Local SQLite database file (one connection per session)."
    placeholder: str = "?"
    driver_errors = (sqlite3.Error,)

    def __init__(
        self,
        path: Optional[str | Path] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        settings = settings or get_settings()
        self.path = Path(path) if path is not None else Path(settings.sqlite_path)
        self.timeout = settings.sqlite_timeout_seconds

    @property
    def target(self) -> str:
        return str(self.path)

    @contextmanager
    def _acquire(self) -> Iterator[sqlite3.Connection]:
        conn = connect_sqlite(self.path, timeout=self.timeout)
        try:
            yield conn
            conn.commit()
        except BaseException:
            conn.rollback()
            raise
        finally:
            conn.close()

    def schema_statements(self) -> Sequence[str]:
        return _SCHEMA

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
                "VALUES (?, ?, ?, ?)",
                (name, part_number, quantity, json.dumps(attributes)),
            )
            return int(cur.lastrowid)


__all__ = ["SqliteBackend"]
