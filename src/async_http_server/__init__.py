"""async-http-server: single-shot async start/stop for network listeners.

This package provides:
- ServerLifecycle: start() resolves once the listener accepts connections
  or raises the bind error; stop() resolves once it is closed
- ServerConfig and resolve_config(): base/override config merging
- UvicornListener (ASGI over HTTP) and StreamListener (raw asyncio streams)
- FakeListener for socket-free tests
"""

from async_http_server.config import ServerConfig, config_from_env, resolve_config
from async_http_server.errors import (
    AlreadyStartedError,
    ConfigurationError,
    ConfigurationMissingError,
    EndpointMissingError,
    HandlerMissingError,
    ListenerNotRunningError,
    NotStartedError,
    SequencingError,
    ServerLifecycleError,
)
from async_http_server.lifecycle import LifecycleState, ServerLifecycle
from async_http_server.listeners import StreamListener, UvicornListener
from async_http_server.types import Host, Listener, ListenerFactory, Port

__all__ = [
    # Lifecycle
    "LifecycleState",
    "ServerLifecycle",
    # Configuration
    "ServerConfig",
    "config_from_env",
    "resolve_config",
    # Listeners
    "Listener",
    "ListenerFactory",
    "StreamListener",
    "UvicornListener",
    # Types
    "Host",
    "Port",
    # Errors
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
__version__ = "0.1.0"
