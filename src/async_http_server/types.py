"""Type aliases and protocols for the server lifecycle.

This module defines the semantic types used in configuration and the
listener protocol the lifecycle consumes, following the protocol-first-design
standard.
"""

from collections.abc import Callable
from typing import Any, NewType, Protocol, TypeAlias, runtime_checkable

# Semantic types for server configuration
Host = NewType("Host", str)
"""Network host address (IP or hostname)."""

Port = NewType("Port", int)
"""Network port number (0-65535, 0 lets the OS pick)."""

Endpoint: TypeAlias = int | str
"""A TCP port number or a unix socket path."""

Handler: TypeAlias = Callable[..., Any]
"""Opaque request handler, forwarded verbatim to the listener."""

ReadyCallback: TypeAlias = Callable[[], None]
FailureCallback: TypeAlias = Callable[[BaseException], None]
Unsubscribe: TypeAlias = Callable[[], None]


@runtime_checkable
class Listener(Protocol):
    """Protocol for a single-use network listener.

    A listener is created around a handler, asked to bind once, and reports
    the bind outcome through exactly one of two one-shot signals: ``ready``
    when it accepts connections, ``failure`` with the bind error otherwise.
    """

    @property
    def address(self) -> Any:
        """Bound socket name, or None when not bound."""
        ...

    def bind_to(self, endpoint: Endpoint, host: str | None = None) -> None:
        """Begin binding; the outcome arrives through the signals."""
        ...

    def once_ready(self, callback: ReadyCallback) -> Unsubscribe:
        """Subscribe once to the ready signal."""
        ...

    def once_failure(self, callback: FailureCallback) -> Unsubscribe:
        """Subscribe once to the failure signal."""
        ...

    async def close(self) -> None:
        """Stop accepting connections and release the socket."""
        ...


@runtime_checkable
class ListenerFactory(Protocol):
    """Protocol for callables that create a fresh listener for a handler."""

    def __call__(self, handler: Handler) -> Listener:
        """Create and return an unbound listener.

        Args:
            handler: The request handler the listener will serve.

        Returns:
            A new listener that has not been bound yet.
        """
        ...
