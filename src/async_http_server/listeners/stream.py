"""Raw asyncio stream listener.

The handler is an ``async def handler(reader, writer)`` client-connected
callback, exactly what ``asyncio.start_server`` expects. No protocol is
spoken on the handler's behalf.
"""

import asyncio
import contextlib
import logging
import os
from typing import Any

from async_http_server.config import BindTarget, UnixTarget
from async_http_server.errors import ListenerNotRunningError
from async_http_server.listeners.base import SignalListener

__all__ = ["StreamListener"]

logger = logging.getLogger(__name__)


class StreamListener(SignalListener):
    """Listener backed by ``asyncio.start_server``/``start_unix_server``."""

    def __init__(self, handler: Any) -> None:
        super().__init__(handler)
        self._server: asyncio.AbstractServer | None = None

    @property
    def address(self) -> Any:
        if self._server is None or not self._server.sockets:
            return None
        return self._server.sockets[0].getsockname()

    async def _bind(self, target: BindTarget) -> None:
        if isinstance(target, UnixTarget):
            self._server = await asyncio.start_unix_server(
                self._handler, path=target.path
            )
        else:
            self._server = await asyncio.start_server(
                self._handler, host=target.host, port=target.port
            )
        logger.debug("StreamListener accepting on %s", self.address)

    async def close(self) -> None:
        """Close the server and wait until it has stopped.

        On Python 3.12+ this also waits for open connections to finish, so
        handlers are expected to close their writers.

        Raises:
            ListenerNotRunningError: If the listener is not bound
        """
        server, self._server = self._server, None
        if server is None:
            raise ListenerNotRunningError()

        server.close()
        await server.wait_closed()

        if isinstance(self._target, UnixTarget):
            with contextlib.suppress(FileNotFoundError):
                os.unlink(self._target.path)
