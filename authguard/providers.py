"""
AuthGuard - Identity providers.

- MemoryIdentityProvider: Dev/testing provider backed by dicts, with
  Argon2id password verification
"""

from __future__ import annotations

import asyncio
from typing import Any

from .core import Credentials, Identity
from .hashing import PasswordHasher


class MemoryIdentityProvider:
    """
    In-memory identity provider for development/testing.

    Credentials are matched attribute by attribute: every credential field
    except ``password`` must equal the identity attribute of the same name.
    The password is then checked against the stored Argon2id hash.
    """

    password_field = "password"

    def __init__(self, hasher: PasswordHasher | None = None):
        self.hasher = hasher or PasswordHasher()
        self._identities: dict[Any, Identity] = {}
        self._password_hashes: dict[Any, str] = {}
        self._lock = asyncio.Lock()

    async def add(self, identity: Identity, password: str | None = None) -> Identity:
        """Register an identity, optionally with a plain-text password."""
        async with self._lock:
            if identity.id in self._identities:
                raise ValueError(f"Identity {identity.id} already exists")

            self._identities[identity.id] = identity
            if password is not None:
                self._password_hashes[identity.id] = self.hasher.hash(password)

            return identity

    async def retrieve_by_id(self, identifier: Any) -> Identity | None:
        return self._identities.get(identifier)

    async def retrieve_by_credentials(self, credentials: Credentials) -> Identity | None:
        """Find the first identity whose attributes match the credentials."""
        criteria = {
            key: value
            for key, value in credentials.items()
            if key != self.password_field
        }
        if not criteria:
            return None

        for identity in self._identities.values():
            if all(
                identity.get_attribute(key) == value
                for key, value in criteria.items()
            ):
                return identity

        return None

    async def validate_credentials(self, identity: Identity, credentials: Credentials) -> bool:
        """
        Check the password for an active identity.

        Suspended or deleted identities never validate, whatever the password.
        """
        if not identity.is_active():
            return False

        password = credentials.get(self.password_field)
        password_hash = self._password_hashes.get(identity.get_auth_identifier())
        if password is None or password_hash is None:
            return False

        return self.hasher.verify(password_hash, password)
