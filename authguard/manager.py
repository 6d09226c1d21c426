"""
AuthGuard - Manager.

App-scoped factory that owns the long-lived pieces (provider, configuration,
event dispatcher) and builds one request-scoped ``AuthGuard`` per request.
"""

from __future__ import annotations

import logging
from typing import Any, Mapping

from .config import ConfigLoader, GuardConfig
from .cookies import CookieJar
from .core import IdentityProvider, SessionStore, TransitionNotifier
from .events import Dispatcher
from .guard import AuthGuard


class AuthManager:
    """
    Builds guards for incoming requests.

    Architecture:
        AuthManager is app-scoped (one per application)
        AuthGuard instances are request-scoped (one per request)

    Example:
        >>> manager = AuthManager(provider, GuardConfig(secret_key="..."))
        >>> guard = manager.guard(session, cookies=request_cookies)
        >>> identity = await guard.user()
    """

    def __init__(
        self,
        provider: IdentityProvider,
        config: GuardConfig | None = None,
        events: TransitionNotifier | None = None,
        logger: logging.Logger | None = None,
    ):
        """
        Initialize manager.

        Args:
            provider: Identity provider shared by all guards
            config: Guard configuration
            events: Event dispatcher shared by all guards
            logger: Optional logger
        """
        self.provider = provider
        self.config = config or GuardConfig()
        self.events = events if events is not None else Dispatcher()
        self.logger = logger or logging.getLogger("authguard.manager")

    @classmethod
    def from_loader(
        cls,
        loader: ConfigLoader,
        provider: IdentityProvider,
        events: TransitionNotifier | None = None,
    ) -> "AuthManager":
        """Create a manager from the ``guard`` section of a loaded config."""
        return cls(provider, GuardConfig.from_dict(loader.get_guard_config()), events)

    def guard(
        self,
        session: SessionStore,
        cookies: Mapping[str, str] | None = None,
        **kwargs: Any,
    ) -> AuthGuard:
        """
        Build a guard for one request.

        Args:
            session: The request's session
            cookies: Cookies sent with the request (name -> raw value)
            **kwargs: Extra keyword arguments for the guard class

        Returns:
            Fresh guard; recall cookies are enabled only with a secret key
        """
        return AuthGuard(
            self.provider,
            session,
            name=self.config.name,
            cookie=self.cookie_jar(cookies),
            events=self.events,
            **kwargs,
        )

    def cookie_jar(self, cookies: Mapping[str, str] | None = None) -> CookieJar | None:
        """Cookie jar for one request, or None when no secret key is configured."""
        if not self.config.secret_key:
            self.logger.debug("No secret key configured, recall cookies disabled")
            return None

        cookie = self.config.cookie
        return CookieJar(
            self.config.secret_key,
            cookies,
            path=cookie.path,
            domain=cookie.domain,
            secure=cookie.secure,
            httponly=cookie.httponly,
            samesite=cookie.samesite,
            forever_minutes=self.config.remember_minutes,
        )
