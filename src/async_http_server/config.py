"""Server configuration and the merge policy between base and override configs."""

import os
from collections.abc import Mapping
from dataclasses import dataclass

from async_http_server.errors import (
    ConfigurationMissingError,
    EndpointMissingError,
    HandlerMissingError,
)
from async_http_server.types import Endpoint, Handler

__all__ = [
    "ENV_PREFIX",
    "ServerConfig",
    "TcpTarget",
    "UnixTarget",
    "bind_target",
    "config_from_env",
    "resolve_config",
]

ENV_PREFIX = "ASYNC_HTTP_SERVER_"

MAX_PORT = 65535


@dataclass(frozen=True)
class ServerConfig:
    """Partial or resolved server configuration.

    Every field is optional so a config can be used as an override that
    only replaces some fields of the construction-time config.
    """

    host: str | None = None  # None binds all interfaces
    endpoint: Endpoint | None = None  # int = TCP port, str = unix socket path
    handler: Handler | None = None

    @property
    def is_local(self) -> bool:
        """Return True when the endpoint is a unix socket path."""
        return isinstance(self.endpoint, str)


@dataclass(frozen=True)
class TcpTarget:
    """TCP/IP bind target."""

    port: int
    host: str | None = None


@dataclass(frozen=True)
class UnixTarget:
    """Unix domain socket bind target."""

    path: str


BindTarget = TcpTarget | UnixTarget


def _is_set(value: object) -> bool:
    return value is not None and value != ""


def _pick(override: object, base: object) -> object:
    return override if _is_set(override) else base


def resolve_config(
    base: ServerConfig | None, override: ServerConfig | None
) -> ServerConfig:
    """Merge a construction-time config with a call-time override.

    Pure function. For each field the override wins when it is set (not None
    and not empty), otherwise the base value is kept. Port 0 counts as set.

    Checks run in a fixed order so the first applicable error is reported:
    absence of both configs, then the endpoint, then the handler.

    Raises:
        ConfigurationMissingError: If both configs are None
        EndpointMissingError: If neither config sets an endpoint
        HandlerMissingError: If neither config sets a handler
    """
    if base is None and override is None:
        raise ConfigurationMissingError()

    base = base or ServerConfig()
    override = override or ServerConfig()

    if not _is_set(override.endpoint) and not _is_set(base.endpoint):
        raise EndpointMissingError()

    if override.handler is None and base.handler is None:
        raise HandlerMissingError()

    return ServerConfig(
        host=_pick(override.host, base.host),  # type: ignore[arg-type]
        endpoint=_pick(override.endpoint, base.endpoint),  # type: ignore[arg-type]
        handler=override.handler if override.handler is not None else base.handler,
    )


def bind_target(endpoint: Endpoint, host: str | None = None) -> BindTarget:
    """Work out where a listener should bind.

    A numeric endpoint binds TCP on ``host`` (all interfaces when None). A
    string endpoint binds a unix socket at that path and ignores ``host``.

    Raises:
        TypeError: If the endpoint is neither int nor str (bool included)
        ValueError: If a port is outside 0-65535
    """
    if isinstance(endpoint, bool) or not isinstance(endpoint, (int, str)):
        raise TypeError(
            f"Endpoint must be a port number or a socket path, got {endpoint!r}"
        )

    if isinstance(endpoint, str):
        return UnixTarget(path=endpoint)

    if not 0 <= endpoint <= MAX_PORT:
        raise ValueError(f"Port must be between 0 and {MAX_PORT}, got {endpoint}")

    return TcpTarget(port=endpoint, host=host or None)


def config_from_env(
    handler: Handler | None = None,
    environ: Mapping[str, str] | None = None,
    prefix: str = ENV_PREFIX,
) -> ServerConfig:
    """Build a config from ``<prefix>HOST`` and ``<prefix>ENDPOINT``.

    An all-digit endpoint becomes a port number, anything else a socket
    path. Unset variables leave the field as None, so the result works as
    either a base or an override config.

    Args:
        handler: Handler to attach; handlers cannot come from the environment
        environ: Mapping to read instead of ``os.environ``
        prefix: Variable name prefix
    """
    env = os.environ if environ is None else environ

    host = env.get(f"{prefix}HOST") or None
    raw_endpoint = env.get(f"{prefix}ENDPOINT", "").strip()

    endpoint: Endpoint | None
    if not raw_endpoint:
        endpoint = None
    elif raw_endpoint.isdigit():
        endpoint = int(raw_endpoint)
    else:
        endpoint = raw_endpoint

    return ServerConfig(host=host, endpoint=endpoint, handler=handler)
