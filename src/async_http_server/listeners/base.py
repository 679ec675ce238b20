"""Signal plumbing shared by the bundled listeners."""

import asyncio
import contextlib
import logging
from abc import ABC, abstractmethod
from typing import Any

from async_http_server.config import BindTarget, bind_target
from async_http_server.types import (
    Endpoint,
    FailureCallback,
    Handler,
    ReadyCallback,
    Unsubscribe,
)

__all__ = ["SignalListener"]

logger = logging.getLogger(__name__)


class SignalListener(ABC):
    """Base listener that turns a bind coroutine into ready/failure signals.

    ``bind_to`` schedules ``_bind(target)`` as a task on the running loop.
    When the task finishes the listener emits ``ready`` if it returned and
    ``failure`` with the raised exception otherwise. Subscriptions are
    one-shot and each signal fires at most once.

    Subclasses implement:
    - _bind: open the socket and start accepting connections
    - close: stop accepting and release the socket
    - address: the bound socket name
    """

    def __init__(self, handler: Handler) -> None:
        self._handler = handler
        self._ready_callbacks: list[ReadyCallback] = []
        self._failure_callbacks: list[FailureCallback] = []
        self._bind_task: asyncio.Task[None] | None = None
        self._target: BindTarget | None = None

    @property
    def handler(self) -> Handler:
        """The handler this listener serves."""
        return self._handler

    @property
    def target(self) -> BindTarget | None:
        """Where bind_to() was asked to bind, or None before binding."""
        return self._target

    @property
    @abstractmethod
    def address(self) -> Any:
        """Bound socket name, or None when not bound."""

    def once_ready(self, callback: ReadyCallback) -> Unsubscribe:
        self._ready_callbacks.append(callback)
        return _remover(self._ready_callbacks, callback)

    def once_failure(self, callback: FailureCallback) -> Unsubscribe:
        self._failure_callbacks.append(callback)
        return _remover(self._failure_callbacks, callback)

    def bind_to(self, endpoint: Endpoint, host: str | None = None) -> None:
        """Start binding in the background.

        Argument errors raise immediately; bind errors arrive through the
        failure signal.

        Raises:
            RuntimeError: If this listener was already bound once
            TypeError: If the endpoint is neither int nor str
            ValueError: If the port is out of range
        """
        if self._bind_task is not None:
            raise RuntimeError(f"{type(self).__name__} can only be bound once")

        target = bind_target(endpoint, host)
        self._target = target
        logger.debug("Binding %s to %s", type(self).__name__, target)

        self._bind_task = asyncio.get_running_loop().create_task(
            self._bind(target), name=f"bind-{type(self).__name__}"
        )
        self._bind_task.add_done_callback(self._on_bind_done)

    def _on_bind_done(self, task: asyncio.Task[None]) -> None:
        if task.cancelled():
            self._emit_failure(asyncio.CancelledError("bind was cancelled"))
            return
        exc = task.exception()
        if exc is not None:
            self._emit_failure(exc)
        else:
            self._emit_ready()

    def _emit_ready(self) -> None:
        callbacks, self._ready_callbacks = self._ready_callbacks, []
        self._failure_callbacks = []
        if not callbacks:
            logger.warning("%s became ready with no subscriber", type(self).__name__)
        for callback in callbacks:
            callback()

    def _emit_failure(self, exc: BaseException) -> None:
        callbacks, self._failure_callbacks = self._failure_callbacks, []
        self._ready_callbacks = []
        if not callbacks:
            logger.warning(
                "%s failed with no subscriber: %s", type(self).__name__, exc
            )
        for callback in callbacks:
            callback(exc)

    @abstractmethod
    async def _bind(self, target: BindTarget) -> None:
        """Open the socket for ``target`` and start accepting connections."""

    @abstractmethod
    async def close(self) -> None:
        """Stop accepting connections and release the socket."""


def _remover(callbacks: list[Any], callback: Any) -> Unsubscribe:
    def unsubscribe() -> None:
        with contextlib.suppress(ValueError):
            callbacks.remove(callback)

    return unsubscribe
