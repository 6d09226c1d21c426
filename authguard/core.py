"""
AuthGuard - Core types.

Identity, lookup results, resolution state, and the collaborator protocols
the guard talks to.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any, Awaitable, Mapping, Protocol, Union, runtime_checkable

if TYPE_CHECKING:
    from .cookies import CookieDirective


Credentials = Mapping[str, Any]


# ============================================================================
# Identity Model
# ============================================================================

@runtime_checkable
class Authenticatable(Protocol):
    """Anything that can produce a stable identifier for the session."""

    def get_auth_identifier(self) -> Any:
        ...


class IdentityStatus(str, Enum):
    """Identity status."""
    ACTIVE = "active"
    SUSPENDED = "suspended"
    DELETED = "deleted"


@dataclass(frozen=True)
class Identity:
    """
    Authenticated principal.

    Immutable once created. The guard only ever holds a transient reference
    for the lifetime of one request; records are owned by the provider.
    """
    id: Any
    attributes: dict[str, Any] = field(default_factory=dict)
    status: IdentityStatus = IdentityStatus.ACTIVE

    def get_auth_identifier(self) -> Any:
        return self.id

    def get_attribute(self, key: str, default: Any = None) -> Any:
        """Get attribute value with default."""
        return self.attributes.get(key, default)

    def is_active(self) -> bool:
        return self.status == IdentityStatus.ACTIVE


# ============================================================================
# Lookup Results
# ============================================================================

@dataclass(frozen=True)
class Found:
    """The provider returned a usable identity."""
    identity: Authenticatable


@dataclass(frozen=True)
class NotFound:
    """The provider returned nothing usable."""
    pass


LookupResult = Union[Found, NotFound]


def lookup(value: Any) -> LookupResult:
    """Normalise a raw provider return value into a lookup result."""
    if value is not None and isinstance(value, Authenticatable):
        return Found(value)
    return NotFound()


# ============================================================================
# Resolution State
# ============================================================================

@dataclass(frozen=True)
class Unresolved:
    """Nothing has been looked up for this request yet."""
    pass


@dataclass(frozen=True)
class Authenticated:
    """
    An identity is known for this request.

    ``via_remember`` is set when it came from the recall cookie rather than
    the session.
    """
    identity: Authenticatable
    via_remember: bool = False


@dataclass(frozen=True)
class Anonymous:
    """Resolution ran and found nobody."""
    pass


@dataclass(frozen=True)
class LoggedOut:
    """Logout happened during this request; no further resolution."""
    pass


ResolutionState = Union[Unresolved, Authenticated, Anonymous, LoggedOut]


# ============================================================================
# Collaborator Protocols
# ============================================================================

class IdentityProvider(Protocol):
    """
    Maps identifiers and credentials to identity records.

    Methods may be plain or ``async``; the guard awaits awaitable results.
    """

    def retrieve_by_id(self, identifier: Any) -> Authenticatable | None | Awaitable[Authenticatable | None]:
        ...

    def retrieve_by_credentials(self, credentials: Credentials) -> Authenticatable | None | Awaitable[Authenticatable | None]:
        ...

    def validate_credentials(self, identity: Authenticatable, credentials: Credentials) -> bool | Awaitable[bool]:
        ...


class SessionStore(Protocol):
    """Request-scoped key/value view of the actor's session."""

    def get(self, key: str, default: Any = None) -> Any:
        ...

    def put(self, key: str, value: Any) -> None:
        ...

    def forget(self, key: str) -> None:
        ...


class RecallTokenStore(Protocol):
    """Creates and reads long-lived "remember me" tokens."""

    def get(self, name: str) -> Any:
        """Identifier sealed in the named token, or None if absent/invalid."""
        ...

    def forever(self, name: str, value: Any) -> CookieDirective:
        ...

    def forget(self, name: str) -> CookieDirective:
        ...


class TransitionNotifier(Protocol):
    """Broadcasts guard transitions to interested listeners."""

    async def fire(self, event: str, payload: tuple[Any, ...] = ()) -> None:
        ...
