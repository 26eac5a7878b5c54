"""
Infrastructure package for the inventory store.

Centralizes database connectivity concerns (SQLite connections, PostgreSQL
connections and pooling). Keep this layer focused on I/O and resource
management, decoupled from registry/store/pipeline logic.
"""

from inventory_store.infrastructure.db_factory import (
    PoolManager,
    build_dsn,
    connect_sqlite,
    get_sync_connection,
)

__all__ = [
    "PoolManager",
    "build_dsn",
    "connect_sqlite",
    "get_sync_connection",
]
