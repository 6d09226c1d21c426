"""
AuthGuard - Recall cookies.

- CookieDirective: Deferred Set-Cookie instruction
- CookieJar: Reads sealed cookies from the current request and produces
  directives for the response

Cookie values are JSON-encoded and sealed with Fernet (AES-128-CBC +
HMAC-SHA256), so a tampered or foreign value simply reads back as ``None``.
Applying directives to a response is the transport layer's job.
"""

from __future__ import annotations

import base64
import hashlib
import json
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any, Literal, Mapping

from cryptography.fernet import Fernet, InvalidToken


# Five years, which is what "forever" means for a browser cookie.
FOREVER_MINUTES = 2628000


class DirectiveKind(str, Enum):
    """What a directive does to the client's cookie."""
    SET = "set"
    FORGET = "forget"


# ============================================================================
# CookieDirective
# ============================================================================

@dataclass(frozen=True)
class CookieDirective:
    """
    An instruction to set or expire a cookie on the outgoing response.

    The guard only queues these; the response pipeline applies them.
    """

    name: str
    value: str
    max_age: int
    kind: DirectiveKind = DirectiveKind.SET
    path: str | None = "/"
    domain: str | None = None
    secure: bool = False
    httponly: bool = True
    samesite: Literal["strict", "lax", "none"] | None = "lax"

    @property
    def is_forget(self) -> bool:
        return self.kind == DirectiveKind.FORGET

    def to_header(self, now: datetime | None = None) -> str:
        """
        Render as a ``Set-Cookie`` header value.

        Args:
            now: Reference time for the Expires attribute (defaults to utcnow)
        """
        if self.is_forget:
            cookie_parts = [
                f"{self.name}=deleted",
                "Max-Age=0",
                "Expires=Thu, 01 Jan 1970 00:00:00 GMT",
            ]
        else:
            if now is None:
                now = datetime.now(timezone.utc)
            expires_at = now + timedelta(seconds=self.max_age)
            cookie_parts = [
                f"{self.name}={self.value}",
                f"Max-Age={self.max_age}",
                f"Expires={expires_at.strftime('%a, %d %b %Y %H:%M:%S GMT')}",
            ]

        if self.path:
            cookie_parts.append(f"Path={self.path}")

        if self.domain:
            cookie_parts.append(f"Domain={self.domain}")

        if self.httponly:
            cookie_parts.append("HttpOnly")

        if self.secure:
            cookie_parts.append("Secure")

        if self.samesite:
            cookie_parts.append(f"SameSite={self.samesite.capitalize()}")

        return "; ".join(cookie_parts)


# ============================================================================
# CookieJar
# ============================================================================

class CookieJar:
    """
    Sealed cookie container for one request.

    Example:
        >>> jar = CookieJar("app-secret")
        >>> directive = jar.forever("remember_abc", 42)
        >>> CookieJar("app-secret", {"remember_abc": directive.value}).get("remember_abc")
        42
    """

    def __init__(
        self,
        secret_key: str | bytes,
        cookies: Mapping[str, str] | None = None,
        *,
        path: str | None = "/",
        domain: str | None = None,
        secure: bool = False,
        httponly: bool = True,
        samesite: Literal["strict", "lax", "none"] | None = "lax",
        forever_minutes: int = FOREVER_MINUTES,
    ):
        """
        Initialize cookie jar.

        Args:
            secret_key: Application secret the Fernet key is derived from
            cookies: Cookies sent with the current request (name -> raw value)
            path: Cookie path attribute
            domain: Cookie domain attribute
            secure: Send only over HTTPS
            httponly: Hide from client-side scripts
            samesite: SameSite policy
            forever_minutes: Lifetime of "forever" cookies
        """
        self._fernet = Fernet(self.derive_key(secret_key))
        self._cookies = dict(cookies or {})
        self.path = path
        self.domain = domain
        self.secure = secure
        self.httponly = httponly
        self.samesite = samesite
        self.forever_minutes = forever_minutes

    @staticmethod
    def derive_key(secret_key: str | bytes) -> bytes:
        """Stretch an arbitrary application secret into a Fernet key."""
        if isinstance(secret_key, str):
            secret_key = secret_key.encode()
        return base64.urlsafe_b64encode(hashlib.sha256(secret_key).digest())

    def get(self, name: str) -> Any:
        """Unsealed value of a request cookie, or None if absent or invalid."""
        raw = self._cookies.get(name)
        if not raw:
            return None

        try:
            plaintext = self._fernet.decrypt(raw.encode())
            return json.loads(plaintext)
        except (InvalidToken, ValueError):
            return None

    def make(self, name: str, value: Any, minutes: int) -> CookieDirective:
        """Create a directive that sets a sealed cookie for ``minutes``."""
        token = self._fernet.encrypt(json.dumps(value).encode()).decode()
        return CookieDirective(
            name=name,
            value=token,
            max_age=minutes * 60,
            kind=DirectiveKind.SET,
            path=self.path,
            domain=self.domain,
            secure=self.secure,
            httponly=self.httponly,
            samesite=self.samesite,
        )

    def forever(self, name: str, value: Any) -> CookieDirective:
        return self.make(name, value, self.forever_minutes)

    def forget(self, name: str) -> CookieDirective:
        """Create a directive that expires the named cookie."""
        return CookieDirective(
            name=name,
            value="",
            max_age=0,
            kind=DirectiveKind.FORGET,
            path=self.path,
            domain=self.domain,
            secure=self.secure,
            httponly=self.httponly,
            samesite=self.samesite,
        )

    @staticmethod
    def parse_header(cookie_header: str) -> dict[str, str]:
        """
        Parse a ``Cookie`` request header into a dict.

        Args:
            cookie_header: Cookie header value

        Returns:
            Dict of cookie name -> value
        """
        cookies = {}

        for part in cookie_header.split(";"):
            part = part.strip()
            if "=" in part:
                name, value = part.split("=", 1)
                cookies[name.strip()] = value.strip()

        return cookies
