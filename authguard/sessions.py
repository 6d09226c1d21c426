"""
AuthGuard - Request session container.

A minimal session object satisfying the guard's ``SessionStore`` protocol.
Loading and persisting sessions between requests is left to the host
application, which can use ``is_dirty`` to skip writes for untouched sessions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class Session:
    """
    Request-scoped session state.

    Example:
        >>> session = Session({"cart_items": 3})
        >>> session.put("login_abc", 42)
        >>> session.is_dirty
        True
    """

    data: dict[str, Any] = field(default_factory=dict)

    _dirty: bool = field(default=False, repr=False)

    def __getitem__(self, key: str) -> Any:
        return self.data[key]

    def __contains__(self, key: str) -> bool:
        return key in self.data

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)

    def has(self, key: str) -> bool:
        """Present and not None."""
        return self.data.get(key) is not None

    def put(self, key: str, value: Any) -> None:
        self.data[key] = value
        self._dirty = True

    def forget(self, key: str) -> None:
        """Remove key; only a key that was present marks the session dirty."""
        if key in self.data:
            del self.data[key]
            self._dirty = True

    def all(self) -> dict[str, Any]:
        return dict(self.data)

    def flush(self) -> None:
        self.data.clear()
        self._dirty = True

    @property
    def is_dirty(self) -> bool:
        return self._dirty

    def mark_clean(self) -> None:
        """Call after the host has persisted the session."""
        self._dirty = False
