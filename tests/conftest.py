"""
Pytest configuration for the inventory store.

Provides fixtures for:
- Settings pointing at a throwaway SQLite file per test
- A ready-to-use inventory (backend, registry, store, credentials)
- PostgreSQL connectivity for integration tests
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Generator

import psycopg
import pytest

from inventory_store.backends import SqliteBackend
from inventory_store.bootstrap import Inventory, open_inventory
from inventory_store.config import Settings
from inventory_store.infrastructure import get_sync_connection
from inventory_store.registry import SchemaRegistry
from inventory_store.store import RecordStore


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    """
    Settings fixture with test-specific overrides.

    Small scan batches exercise the batched read path; cost factor 4 keeps
    bcrypt fast.
    """
    return Settings(
        store_backend="sqlite",
        sqlite_path=str(tmp_path / "inventory.db"),
        log_level="DEBUG",
        scan_batch_size=2,
        job_workers=1,
        password_hash_rounds=4,
        alert_recipient="5550100",
        alert_message="Stock is low.",
        db_host=os.getenv("DB_HOST", "localhost"),
        db_port=int(os.getenv("DB_PORT", "5432")),
        db_user=os.getenv("DB_USER", "postgres"),
        db_password=os.getenv("DB_PASSWORD", "postgres"),
        db_name=os.getenv("DB_NAME", "inventory"),
    )


@pytest.fixture
def sqlite_backend(test_settings: Settings) -> Generator[SqliteBackend, None, None]:
    backend = SqliteBackend(settings=test_settings)
    backend.initialize()
    yield backend
    backend.close()


@pytest.fixture
def inventory(test_settings: Settings, sqlite_backend: SqliteBackend) -> Inventory:
    return open_inventory(test_settings, backend=sqlite_backend, initialize=False)


@pytest.fixture
def store(inventory: Inventory) -> RecordStore:
    return inventory.store


@pytest.fixture
def registry(inventory: Inventory) -> SchemaRegistry:
    return inventory.registry


@pytest.fixture(scope="session")
def test_dsn() -> str:
    """
    PostgreSQL connection string for integration tests.
    """
    return (
        f"postgresql://{os.getenv('DB_USER', 'postgres')}:{os.getenv('DB_PASSWORD', 'postgres')}"
        f"@{os.getenv('DB_HOST', 'localhost')}:{os.getenv('DB_PORT', '5432')}"
        f"/{os.getenv('DB_NAME', 'inventory')}"
    )


@pytest.fixture(scope="session")
def db_connection_available(test_dsn: str) -> bool:
    """
    Check if PostgreSQL is reachable.

    Used to conditionally skip integration tests when the database is not available.
    """
    try:
        with get_sync_connection(test_dsn) as conn:
            with conn.cursor() as cur:
                cur.execute("SELECT 1;")
                cur.fetchone()
        return True
    except psycopg.Error:
        return False
