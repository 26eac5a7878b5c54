"""
Storage backends for the inventory store.

Re-exports the abstract interfaces and the concrete backends, and provides the
registry used to pick a backend by name (`STORE_BACKEND` setting).
"""

from __future__ import annotations

from typing import Callable, Dict, List, Optional

from inventory_store.backends.abstract import AbstractStorageBackend, StorageBackend
from inventory_store.backends.postgres import PostgresBackend
from inventory_store.backends.sqlite import SqliteBackend
from inventory_store.config import Settings, get_settings


def _backend_factories(settings: Settings) -> Dict[str, Callable[[], AbstractStorageBackend]]:
    """Registry of available backends."""
    return {
        "sqlite": lambda: SqliteBackend(settings=settings),
        "postgres": lambda: PostgresBackend(settings=settings),
    }


def available_backends() -> List[str]:
    """List available backend names."""
    return sorted(_backend_factories(get_settings()).keys())


def create_backend(
    name: Optional[str] = None, settings: Optional[Settings] = None
) -> AbstractStorageBackend:
    """
    Build the backend called `name` (defaults to `settings.store_backend`).

    Raises
    ------
    ValueError
        If no backend with that name exists.
    """
    settings = settings or get_settings()
    key = (name or settings.store_backend).lower()
    factories = _backend_factories(settings)
    if key not in factories:
        raise ValueError(f"Unknown backend '{key}'. Available: {', '.join(sorted(factories))}")
    return factories[key]()


__all__ = [
    # Abstracts
    "AbstractStorageBackend",
    "StorageBackend",
    # Concrete backends
    "PostgresBackend",
    "SqliteBackend",
    # Registry
    "available_backends",
    "create_backend",
]
