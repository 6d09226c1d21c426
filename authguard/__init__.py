"""
AuthGuard - Session authentication guard.

Resolves the current actor from the request session or a sealed "remember
me" cookie, and runs the login/logout state machine:
- AuthGuard: per-request guard
- AuthManager: app-scoped guard factory
- Reference collaborators: Session, CookieJar, Dispatcher,
  MemoryIdentityProvider
"""

from .core import (
    Anonymous,
    Authenticatable,
    Authenticated,
    Credentials,
    Found,
    Identity,
    IdentityProvider,
    IdentityStatus,
    LoggedOut,
    LookupResult,
    NotFound,
    RecallTokenStore,
    ResolutionState,
    SessionStore,
    TransitionNotifier,
    Unresolved,
    lookup,
)
from .cookies import CookieDirective, CookieJar, DirectiveKind
from .config import ConfigLoader, CookieConfig, GuardConfig
from .events import ATTEMPT, LOGIN, LOGOUT, Dispatcher, NullDispatcher
from .faults import (
    ConfigFault,
    ConfigInvalidFault,
    CookieJarNotSetFault,
    Fault,
    FaultDomain,
    Severity,
)
from .guard import AuthGuard
from .hashing import PasswordHasher
from .manager import AuthManager
from .providers import MemoryIdentityProvider
from .sessions import Session

__version__ = "0.1.0"

__all__ = [
    # Guard
    "AuthGuard",
    "AuthManager",
    # Core types
    "Authenticatable",
    "Identity",
    "IdentityStatus",
    "Credentials",
    "Found",
    "NotFound",
    "LookupResult",
    "lookup",
    "Unresolved",
    "Authenticated",
    "Anonymous",
    "LoggedOut",
    "ResolutionState",
    # Collaborator protocols
    "IdentityProvider",
    "SessionStore",
    "RecallTokenStore",
    "TransitionNotifier",
    # Reference collaborators
    "Session",
    "CookieJar",
    "CookieDirective",
    "DirectiveKind",
    "Dispatcher",
    "NullDispatcher",
    "MemoryIdentityProvider",
    "PasswordHasher",
    # Events
    "ATTEMPT",
    "LOGIN",
    "LOGOUT",
    # Config
    "ConfigLoader",
    "GuardConfig",
    "CookieConfig",
    # Faults
    "Fault",
    "FaultDomain",
    "Severity",
    "ConfigFault",
    "ConfigInvalidFault",
    "CookieJarNotSetFault",
]
