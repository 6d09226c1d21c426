"""
AuthGuard - Transition events.

Named-event dispatcher the guard announces ``attempt``, ``login`` and
``logout`` through. Listeners may be plain callables or coroutine functions
and receive the event payload as positional arguments.

The ``attempt`` payload is ``(credentials, remember, login)`` with the
credentials as submitted, password included. The dispatcher never logs
payloads.
"""

from __future__ import annotations

import inspect
import logging
from collections import defaultdict
from typing import Any, Callable


ATTEMPT = "attempt"
LOGIN = "login"
LOGOUT = "logout"


class Dispatcher:
    """
    Synchronous-order event dispatcher.

    Listeners run in registration order. A listener that raises stops the
    dispatch and the exception reaches the code that fired the event.

    Example:
        >>> events = Dispatcher()
        >>> events.listen("login", lambda identity, remember: audit(identity))
        >>> await events.fire("login", (identity, False))
    """

    def __init__(self, logger: logging.Logger | None = None):
        self._listeners: dict[str, list[Callable[..., Any]]] = defaultdict(list)
        self.logger = logger or logging.getLogger("authguard.events")

    def listen(self, event: str, listener: Callable[..., Any]) -> None:
        """Register a listener for ``event``."""
        self._listeners[event].append(listener)

    def forget(self, event: str) -> None:
        """Remove every listener for ``event``."""
        self._listeners.pop(event, None)

    def has_listeners(self, event: str) -> bool:
        return bool(self._listeners.get(event))

    def listeners(self, event: str) -> list[Callable[..., Any]]:
        return list(self._listeners.get(event, ()))

    async def fire(self, event: str, payload: tuple[Any, ...] = ()) -> list[Any]:
        """
        Call every listener for ``event`` with ``payload``.

        Returns:
            Listener return values, in call order
        """
        results = []
        for listener in self.listeners(event):
            if inspect.iscoroutinefunction(listener):
                result = await listener(*payload)
            else:
                result = listener(*payload)
            results.append(result)

        self.logger.debug(f"Fired '{event}' to {len(results)} listener(s)")
        return results


class NullDispatcher:
    """Dispatcher that accepts events and does nothing with them."""

    async def fire(self, event: str, payload: tuple[Any, ...] = ()) -> list[Any]:
        return []
