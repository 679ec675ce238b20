"""ASGI listener served over HTTP by uvicorn.

The listener binds the socket itself so bind errors surface as the real
``OSError`` from the operating system, then hands the socket to
``uvicorn.Server.serve(sockets=...)`` running as a background task.
"""

import asyncio
import contextlib
import logging
import os
import socket
from typing import Any

import uvicorn

from async_http_server.config import BindTarget, TcpTarget, UnixTarget
from async_http_server.errors import ListenerNotRunningError
from async_http_server.listeners.base import SignalListener

__all__ = ["UvicornListener", "open_socket"]

logger = logging.getLogger(__name__)

DEFAULT_UVICORN_OPTIONS: dict[str, Any] = {
    "log_config": None,
    "access_log": False,
    "lifespan": "off",
}


def open_socket(target: BindTarget, backlog: int = 2048) -> socket.socket:
    """Create a bound, listening socket for ``target``.

    TCP binds all interfaces when no host is given, dual-stack where the
    platform supports it. Unix sockets bind at the target path.

    Raises:
        OSError: If binding fails (address in use, permission denied, ...)
    """
    if isinstance(target, UnixTarget):
        sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
        try:
            sock.bind(target.path)
            sock.listen(backlog)
        except OSError:
            sock.close()
            raise
        return sock

    if target.host is None:
        if socket.has_dualstack_ipv6():
            return socket.create_server(
                ("", target.port),
                family=socket.AF_INET6,
                backlog=backlog,
                dualstack_ipv6=True,
            )
        return socket.create_server(("", target.port), backlog=backlog)

    family = socket.AF_INET6 if ":" in target.host else socket.AF_INET
    return socket.create_server(
        (target.host, target.port), family=family, backlog=backlog
    )


class _NotifyingServer(uvicorn.Server):
    """uvicorn server that reports when startup has finished."""

    def __init__(self, config: uvicorn.Config, started: asyncio.Future[None]) -> None:
        super().__init__(config)
        self._started = started

    async def startup(self, sockets: list[socket.socket] | None = None) -> None:
        await super().startup(sockets=sockets)
        if self._started.done():
            return
        if self.should_exit:
            self._started.set_exception(RuntimeError("uvicorn startup failed"))
        else:
            self._started.set_result(None)


class UvicornListener(SignalListener):
    """Listener serving an ASGI application with uvicorn.

    Args:
        handler: ASGI application
        **uvicorn_options: Extra ``uvicorn.Config`` keywords; by default
            logging config, access log, and lifespan are turned off
    """

    def __init__(self, handler: Any, **uvicorn_options: Any) -> None:
        super().__init__(handler)
        self._options = {**DEFAULT_UVICORN_OPTIONS, **uvicorn_options}
        self._server: _NotifyingServer | None = None
        self._serve_task: asyncio.Task[None] | None = None
        self._socket: socket.socket | None = None

    @property
    def server(self) -> uvicorn.Server | None:
        """The running uvicorn server, or None when not bound."""
        return self._server

    @property
    def address(self) -> Any:
        if self._socket is None or self._server is None:
            return None
        return self._socket.getsockname()

    def _build_config(self, target: BindTarget) -> uvicorn.Config:
        # host/port/uds only drive uvicorn's startup message; the socket is ours
        if isinstance(target, TcpTarget):
            location = {"host": target.host or "0.0.0.0", "port": target.port}
        else:
            location = {"uds": target.path}
        return uvicorn.Config(self._handler, **location, **self._options)

    async def _bind(self, target: BindTarget) -> None:
        sock = open_socket(target, backlog=self._options.get("backlog", 2048))
        serve_task: asyncio.Task[None] | None = None
        try:
            config = self._build_config(target)
            started: asyncio.Future[None] = asyncio.get_running_loop().create_future()
            server = _NotifyingServer(config, started)
            serve_task = asyncio.create_task(
                server.serve(sockets=[sock]), name="uvicorn-serve"
            )

            await asyncio.wait({started, serve_task}, return_when=asyncio.FIRST_COMPLETED)
            if not started.done():
                # serve() returned or raised before startup completed
                if not serve_task.cancelled() and serve_task.exception() is not None:
                    raise serve_task.exception()  # type: ignore[misc]
                raise RuntimeError("uvicorn stopped before accepting connections")
            started.result()
        except BaseException:
            if serve_task is not None and not serve_task.done():
                serve_task.cancel()
            sock.close()
            raise

        self._socket = sock
        self._server = server
        self._serve_task = serve_task
        logger.debug("UvicornListener accepting on %s", self.address)

    async def close(self) -> None:
        """Ask uvicorn to exit and wait for the serve task to finish.

        Errors raised by the serve task propagate unmodified.

        Raises:
            ListenerNotRunningError: If the listener is not bound
        """
        server, self._server = self._server, None
        task, self._serve_task = self._serve_task, None
        sock, self._socket = self._socket, None
        if server is None or task is None:
            raise ListenerNotRunningError()

        server.should_exit = True
        try:
            await task
        finally:
            if sock is not None:
                sock.close()
            if isinstance(self._target, UnixTarget):
                with contextlib.suppress(FileNotFoundError):
                    os.unlink(self._target.path)
