"""
Shared test fixtures and helpers for the authguard test suite.
"""

from typing import Any, Dict, List, Optional, Tuple

import pytest

from authguard.cookies import CookieJar
from authguard.core import Identity
from authguard.guard import AuthGuard
from authguard.hashing import PasswordHasher
from authguard.sessions import Session


SECRET = "test-secret-key"


# ============================================================================
# Fakes
# ============================================================================


class CountingProvider:
    """
    Async identity provider over a dict that records every call.

    Credentials match on ``login_field``; validation compares the plain
    ``password`` credential against ``passwords[identity.id]``.
    """

    def __init__(
        self,
        identities: Tuple[Identity, ...] = (),
        passwords: Optional[Dict[Any, str]] = None,
        login_field: str = "username",
        password_field: str = "password",
    ):
        self.identities = {identity.id: identity for identity in identities}
        self.passwords = dict(passwords or {})
        self.login_field = login_field
        self.password_field = password_field
        self.calls: List[Tuple[str, Any]] = []

    async def retrieve_by_id(self, identifier):
        self.calls.append(("retrieve_by_id", identifier))
        return self.identities.get(identifier)

    async def retrieve_by_credentials(self, credentials):
        self.calls.append(("retrieve_by_credentials", dict(credentials)))
        for identity in self.identities.values():
            if identity.get_attribute(self.login_field) == credentials.get(self.login_field):
                return identity
        return None

    async def validate_credentials(self, identity, credentials):
        self.calls.append(("validate_credentials", identity.id))
        return self.passwords.get(identity.id) == credentials.get(self.password_field)

    def count(self, method: str) -> int:
        return sum(1 for name, _ in self.calls if name == method)


class SyncProvider(CountingProvider):
    """Same as CountingProvider, with plain (non-async) methods."""

    def retrieve_by_id(self, identifier):
        self.calls.append(("retrieve_by_id", identifier))
        return self.identities.get(identifier)

    def retrieve_by_credentials(self, credentials):
        self.calls.append(("retrieve_by_credentials", dict(credentials)))
        for identity in self.identities.values():
            if identity.get_attribute(self.login_field) == credentials.get(self.login_field):
                return identity
        return None

    def validate_credentials(self, identity, credentials):
        self.calls.append(("validate_credentials", identity.id))
        return self.passwords.get(identity.id) == credentials.get(self.password_field)


class RecordingDispatcher:
    """Notifier that records every fired event."""

    def __init__(self):
        self.fired: List[Tuple[str, tuple]] = []

    async def fire(self, event, payload=()):
        self.fired.append((event, payload))
        return []

    def events(self) -> List[str]:
        return [event for event, _ in self.fired]


class RecordingSession:
    """SessionStore fake that records writes."""

    def __init__(self, data: Optional[Dict[str, Any]] = None):
        self.data = dict(data or {})
        self.writes: List[Tuple[str, str, Any]] = []
        self.reads = 0

    def get(self, key, default=None):
        self.reads += 1
        return self.data.get(key, default)

    def put(self, key, value):
        self.writes.append(("put", key, value))
        self.data[key] = value

    def forget(self, key):
        self.writes.append(("forget", key, None))
        self.data.pop(key, None)


# ============================================================================
# Helpers
# ============================================================================


def sealed_cookies(name: str, value: Any, secret: str = SECRET) -> Dict[str, str]:
    """Request cookies carrying ``value`` sealed the way the jar expects."""
    return {name: CookieJar(secret).forever(name, value).value}


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def alice():
    return Identity(id=1, attributes={"username": "alice", "email": "alice@test.com"})


@pytest.fixture
def bob():
    return Identity(id=42, attributes={"username": "bob", "email": "bob@test.com"})


@pytest.fixture
def provider(alice, bob):
    return CountingProvider(
        identities=(alice, bob),
        passwords={alice.id: "wonderland", bob.id: "builder"},
    )


@pytest.fixture
def session():
    return RecordingSession()


@pytest.fixture
def dispatcher():
    return RecordingDispatcher()


@pytest.fixture
def jar():
    return CookieJar(SECRET)


@pytest.fixture
def guard(provider, session, jar, dispatcher):
    return AuthGuard(provider, session, cookie=jar, events=dispatcher)


@pytest.fixture
def fast_hasher():
    return PasswordHasher(time_cost=1, memory_cost=8, parallelism=1)


@pytest.fixture
def real_session():
    return Session()
