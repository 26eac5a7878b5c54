"""
Credential store for inventory users.

Passwords are hashed with bcrypt (salted, adaptive cost). Only the hash is
stored, in the `users` table of the same backend as the inventory.
"""

from __future__ import annotations

from typing import Optional

import bcrypt

from inventory_store.backends.abstract import AbstractStorageBackend
from inventory_store.config import Settings, get_settings
from inventory_store.domain.errors import CredentialError
from inventory_store.utils.logging import get_logger

log = get_logger(__name__)

# bcrypt only looks at the first 72 bytes of a password.
MAX_PASSWORD_BYTES = 72


class CredentialStore:
    """
    Create and verify user accounts.

    Parameters
    ----------
    backend : AbstractStorageBackend
        Backend holding the `users` table.
    settings : Settings, optional
        Supplies the bcrypt cost factor (`PASSWORD_HASH_ROUNDS`).
    """

    def __init__(
        self, backend: AbstractStorageBackend, settings: Optional[Settings] = None
    ) -> None:
        self._backend = backend
        self.rounds = (settings or get_settings()).password_hash_rounds

    def hash_password(self, password: str) -> str:
        encoded = password.encode("utf-8")
        if len(encoded) > MAX_PASSWORD_BYTES:
            raise CredentialError(f"password is longer than {MAX_PASSWORD_BYTES} bytes")
        return bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=self.rounds)).decode("ascii")

    def create(self, username: str, password_hash: str) -> None:
        """
        Store a user with an already hashed password.

        Raises
        ------
        CredentialError
            If the username is empty or already taken.
        """
        username = username.strip()
        if not username:
            raise CredentialError("username is empty")
        with self._backend.session() as conn:
            created = self._backend.insert_user(conn, username, password_hash)
        if not created:
            raise CredentialError(f"user {username!r} already exists")
        log.info(f"[USER CREATED] {username}", extra={"username": username})

    def register(self, username: str, password: str) -> None:
        """Hash `password` and create the user."""
        if not password:
            raise CredentialError("password is empty")
        self.create(username, self.hash_password(password))

    def verify(self, username: str, password: str) -> bool:
        """True if the user exists and the password matches."""
        with self._backend.session() as conn:
            stored = self._backend.fetch_password_hash(conn, username.strip())
        if stored is None:
            log.info("[LOGIN FAILED] unknown user", extra={"username": username})
            return False
        try:
            ok = bcrypt.checkpw(password.encode("utf-8"), stored.encode("ascii"))
        except ValueError:
            log.warning("[LOGIN FAILED] unusable password or hash", extra={"username": username})
            return False
        if not ok:
            log.info("[LOGIN FAILED] wrong password", extra={"username": username})
        return ok


__all__ = ["CredentialStore", "MAX_PASSWORD_BYTES"]
