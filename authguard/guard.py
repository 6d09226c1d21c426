"""
AuthGuard - Session guard.

The guard answers "who is the current actor" for a single request and
performs the login/logout transitions. Identity comes from the session
first, then from the long-lived recall cookie, and is memoized for the rest
of the request.

A guard is request-scoped: build one per incoming request (see
``AuthManager.guard``) and never share it between requests or threads.
"""

from __future__ import annotations

import hashlib
import inspect
import logging
from typing import Any, Callable

from .core import (
    Anonymous,
    Authenticatable,
    Authenticated,
    Credentials,
    Found,
    IdentityProvider,
    LoggedOut,
    RecallTokenStore,
    ResolutionState,
    SessionStore,
    TransitionNotifier,
    Unresolved,
    lookup,
)
from .cookies import CookieDirective
from .events import ATTEMPT, LOGIN, LOGOUT, NullDispatcher
from .faults import CookieJarNotSetFault


class AuthGuard:
    """
    Per-request authentication guard.

    States:
        Unresolved -> Authenticated | Anonymous   (first ``user()`` call)
        any        -> Authenticated              (``login``/``set_user``)
        any        -> LoggedOut                  (``logout``; sticky)

    Example:
        >>> guard = AuthGuard(provider, session, cookie=CookieJar(secret, cookies))
        >>> if await guard.attempt({"email": email, "password": pw}, remember=True):
        ...     for directive in guard.get_queued_cookies():
        ...         response.headers.add("set-cookie", directive.to_header())
    """

    def __init__(
        self,
        provider: IdentityProvider,
        session: SessionStore,
        *,
        name: str | None = None,
        cookie: RecallTokenStore | None = None,
        events: TransitionNotifier | None = None,
        logger: logging.Logger | None = None,
    ):
        """
        Initialize guard.

        Args:
            provider: Identity provider (lookups and credential checks)
            session: Session for the current request
            name: Stable guard name the session/recall keys derive from
                (defaults to the guard class's qualified name)
            cookie: Recall cookie jar (optional; required for remember/logout)
            events: Transition notifier (defaults to a no-op dispatcher)
            logger: Optional logger
        """
        self.provider = provider
        self.session = session
        if name is None:
            name = f"{type(self).__module__}.{type(self).__qualname__}"
        self.name = str(name)
        self._cookie = cookie
        self._events = events or NullDispatcher()
        self.logger = logger or logging.getLogger("authguard.guard")

        self._state: ResolutionState = Unresolved()
        self._queued_cookies: list[CookieDirective] = []

    # ========================================================================
    # Identity Resolution
    # ========================================================================

    async def check(self) -> bool:
        """Determine if the current actor is authenticated."""
        return await self.user() is not None

    async def guest(self) -> bool:
        """Determine if the current actor is a guest."""
        return await self.user() is None

    async def user(self) -> Authenticatable | None:
        """
        Get the currently authenticated identity.

        Collaborators are consulted at most once per request; the outcome,
        including "nobody", is memoized. After ``logout()`` this returns
        None for the rest of the request without looking anything up.
        """
        state = self._state
        if isinstance(state, Authenticated):
            return state.identity
        if not isinstance(state, Unresolved):
            return None

        identity = None
        via_remember = False

        identifier = self.session.get(self.get_name())
        if identifier is not None:
            identity = await self._retrieve_by_id(identifier)

        if identity is None:
            recaller = self._get_recaller()
            if recaller is not None:
                identity = await self._retrieve_by_id(recaller)
                via_remember = identity is not None

        if identity is None:
            self._state = Anonymous()
            self.logger.debug(f"Guard '{self.name}': no identity for request")
            return None

        self._state = Authenticated(identity, via_remember=via_remember)
        self.logger.debug(
            f"Guard '{self.name}': identity {self._hash_identifier(identity.get_auth_identifier())} "
            f"resolved from {'recall cookie' if via_remember else 'session'}"
        )
        return identity

    async def id(self) -> Any:
        """Get the identifier of the current identity, if any."""
        identity = await self.user()
        return identity.get_auth_identifier() if identity is not None else None

    def via_remember(self) -> bool:
        """Whether the current identity was restored from the recall cookie."""
        return isinstance(self._state, Authenticated) and self._state.via_remember

    def _get_recaller(self) -> Any:
        """Identifier sealed in the recall cookie, if a jar is configured."""
        if self._cookie is None:
            return None
        return self._cookie.get(self.get_recaller_name())

    async def _retrieve_by_id(self, identifier: Any) -> Authenticatable | None:
        result = lookup(await self._call(self.provider.retrieve_by_id, identifier))
        return result.identity if isinstance(result, Found) else None

    # ========================================================================
    # Credential Operations
    # ========================================================================

    async def stateless(self, credentials: Credentials | None = None) -> bool:
        """
        Authenticate for this request only.

        Nothing is written to the session and no cookie is queued.
        """
        credentials = credentials or {}

        if await self.validate(credentials):
            result = lookup(await self._call(self.provider.retrieve_by_credentials, credentials))
            if isinstance(result, Found):
                self.set_user(result.identity)
            return True

        return False

    async def validate(self, credentials: Credentials | None = None) -> bool:
        """Check credentials without logging anyone in."""
        return await self.attempt(credentials, remember=False, login=False)

    async def attempt(
        self,
        credentials: Credentials | None = None,
        remember: bool = False,
        login: bool = True,
    ) -> bool:
        """
        Attempt to authenticate using the given credentials.

        Args:
            credentials: Field name -> value (e.g. email and password)
            remember: Queue a recall cookie on successful login
            login: Log the identity in when the credentials are valid

        Returns:
            True if the credentials are valid. Every failure looks the same.

        Note:
            ``attempt`` listeners receive ``credentials`` unmodified, secrets
            included. They must not log or store them.
        """
        credentials = credentials or {}

        await self._events.fire(ATTEMPT, (credentials, remember, login))

        result = lookup(await self._call(self.provider.retrieve_by_credentials, credentials))

        if isinstance(result, Found):
            valid = await self._call(self.provider.validate_credentials, result.identity, credentials)
            if valid:
                if login:
                    await self.login(result.identity, remember)
                return True

        self.logger.debug(f"Guard '{self.name}': credential attempt rejected")
        return False

    def attempting(self, listener: Callable[..., Any]) -> None:
        """Register a listener for the ``attempt`` event, if events support it."""
        listen = getattr(self._events, "listen", None)
        if listen is not None:
            listen(ATTEMPT, listener)

    # ========================================================================
    # Login / Logout
    # ========================================================================

    async def login(self, identity: Authenticatable, remember: bool = False) -> None:
        """
        Log an identity into the application.

        Args:
            identity: Identity to log in
            remember: Queue a "forever" recall cookie for it

        Raises:
            CookieJarNotSetFault: ``remember`` requested without a cookie jar
        """
        identifier = identity.get_auth_identifier()
        cookie = self.get_cookie_jar() if remember else None

        self.session.put(self.get_name(), identifier)

        if cookie is not None:
            self._queued_cookies.append(
                cookie.forever(self.get_recaller_name(), identifier)
            )

        await self._events.fire(LOGIN, (identity, remember))

        self.set_user(identity)
        self.logger.info(
            f"Guard '{self.name}': logged in {self._hash_identifier(identifier)}"
            + (" (remembered)" if remember else "")
        )

    async def login_using_id(self, identifier: Any, remember: bool = False) -> Authenticatable | None:
        """
        Log the given identifier into the application.

        The identifier is written to the session and the identity is then
        re-resolved through the provider, so it must hold that
        ``retrieve_by_id(identifier).get_auth_identifier() == identifier``.

        Returns:
            The logged-in identity, or None if the provider does not know it
        """
        if remember:
            self.get_cookie_jar()

        self.session.put(self.get_name(), identifier)
        self._state = Unresolved()

        identity = await self.user()
        if identity is None:
            return None

        if identity.get_auth_identifier() != identifier:
            self.logger.warning(
                f"Guard '{self.name}': provider resolved {self._hash_identifier(identifier)} "
                f"to {self._hash_identifier(identity.get_auth_identifier())}"
            )

        await self.login(identity, remember)
        return identity

    async def logout(self) -> None:
        """
        Log the current actor out for the rest of this request.

        Raises:
            CookieJarNotSetFault: No cookie jar to expire the recall cookie with
        """
        cookie = self.get_cookie_jar()
        identity = self.get_user()

        self.session.forget(self.get_name())
        self._queued_cookies.append(cookie.forget(self.get_recaller_name()))

        await self._events.fire(LOGOUT, (identity,))

        self._state = LoggedOut()
        if identity is not None:
            self.logger.info(
                f"Guard '{self.name}': logged out {self._hash_identifier(identity.get_auth_identifier())}"
            )

    # ========================================================================
    # State & Accessors
    # ========================================================================

    @property
    def state(self) -> ResolutionState:
        return self._state

    def get_user(self) -> Authenticatable | None:
        """Return the memoized identity without resolving anything."""
        if isinstance(self._state, Authenticated):
            return self._state.identity
        return None

    def set_user(self, identity: Authenticatable) -> None:
        """Set the current identity in memory only (clears a logout)."""
        self._state = Authenticated(identity)

    def get_queued_cookies(self) -> list[CookieDirective]:
        """Cookie directives queued during this request, oldest first."""
        return list(self._queued_cookies)

    def get_cookie_jar(self) -> RecallTokenStore:
        if self._cookie is None:
            raise CookieJarNotSetFault(self.name)
        return self._cookie

    def set_cookie_jar(self, cookie: RecallTokenStore) -> None:
        self._cookie = cookie

    def get_dispatcher(self) -> TransitionNotifier:
        return self._events

    def set_dispatcher(self, events: TransitionNotifier) -> None:
        self._events = events

    def get_session(self) -> SessionStore:
        return self.session

    def get_provider(self) -> IdentityProvider:
        return self.provider

    def get_name(self) -> str:
        """Session key the identifier is stored under."""
        return f"login_{self._key_digest()}"

    def get_recaller_name(self) -> str:
        """Name of the recall cookie."""
        return f"remember_{self._key_digest()}"

    def _key_digest(self) -> str:
        return hashlib.sha256(self.name.encode()).hexdigest()

    @staticmethod
    async def _call(method: Callable[..., Any], *args: Any) -> Any:
        result = method(*args)
        if inspect.isawaitable(result):
            result = await result
        return result

    @staticmethod
    def _hash_identifier(identifier: Any) -> str:
        """Hash identifier for logging (privacy)."""
        return f"sha256:{hashlib.sha256(str(identifier).encode()).hexdigest()[:16]}"
