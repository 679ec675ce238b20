"""Error types for the server lifecycle.

Provides a closed taxonomy: configuration errors, sequencing errors, and the
one error the bundled listeners raise themselves. Bind and close failures from
the operating system are never wrapped.
"""

from __future__ import annotations

__all__ = [
    "AlreadyStartedError",
    "ConfigurationError",
    "ConfigurationMissingError",
    "EndpointMissingError",
    "HandlerMissingError",
    "ListenerNotRunningError",
    "NotStartedError",
    "SequencingError",
    "ServerLifecycleError",
]


class ServerLifecycleError(Exception):
    """Base class for errors raised by the lifecycle itself."""

    default_message: str = "Server lifecycle error."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)


class ConfigurationError(ServerLifecycleError):
    """Raised before any listener is created when the config is unusable."""


class ConfigurationMissingError(ConfigurationError):
    """Raised when neither a base nor an override config was given."""

    default_message = "No configuration has been provided."


class EndpointMissingError(ConfigurationError):
    """Raised when no config sets a port or socket path."""

    default_message = "No port/pipe is defined in the config."


class HandlerMissingError(ConfigurationError):
    """Raised when no config sets a handler."""

    default_message = "No handler is defined in the config."


class SequencingError(ServerLifecycleError):
    """Raised when start/stop are called in the wrong state."""


class AlreadyStartedError(SequencingError):
    """Raised by start() unless the lifecycle is idle."""

    default_message = "Server has been already started."


class NotStartedError(SequencingError):
    """Raised by stop() when no listener is running."""

    default_message = "Server is not started."


class ListenerNotRunningError(RuntimeError):
    """Raised by a bundled listener when closed while not bound."""

    def __init__(self, message: str = "Listener is not running.") -> None:
        super().__init__(message)
