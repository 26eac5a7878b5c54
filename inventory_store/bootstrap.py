"""
Composition root: wires a backend into the registry, store and credential store.

Usage:
    from inventory_store.bootstrap import open_inventory

    with open_inventory() as inventory:
        inventory.store.insert("Bolt", "B-100", 50)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from inventory_store.backends import AbstractStorageBackend, create_backend
from inventory_store.config import Settings, get_settings
from inventory_store.credentials import CredentialStore
from inventory_store.registry import SchemaRegistry
from inventory_store.store import RecordStore


@dataclass
class Inventory:
    """The components sharing one backend."""

    backend: AbstractStorageBackend
    registry: SchemaRegistry
    store: RecordStore
    credentials: CredentialStore

    def close(self) -> None:
        self.backend.close()

    def __enter__(self) -> "Inventory":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()


def open_inventory(
    settings: Optional[Settings] = None,
    backend: Optional[AbstractStorageBackend] = None,
    initialize: bool = True,
) -> Inventory:
    """
    Build an Inventory over `backend` (or the configured one).

    With `initialize=True` the store tables are created if missing.
    """
    settings = settings or get_settings()
    backend = backend or create_backend(settings=settings)
    if initialize:
        backend.initialize()
    registry = SchemaRegistry(backend)
    return Inventory(
        backend=backend,
        registry=registry,
        store=RecordStore(backend, registry=registry, settings=settings),
        credentials=CredentialStore(backend, settings=settings),
    )


__all__ = ["Inventory", "open_inventory"]
