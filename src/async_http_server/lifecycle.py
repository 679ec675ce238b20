"""Listener lifecycle management: single-shot start and stop."""

import asyncio
import logging
from enum import Enum
from types import TracebackType

from async_http_server.config import ServerConfig, resolve_config
from async_http_server.errors import AlreadyStartedError, NotStartedError
from async_http_server.listeners.asgi import UvicornListener
from async_http_server.types import Listener, ListenerFactory

__all__ = ["LifecycleState", "ServerLifecycle"]

logger = logging.getLogger(__name__)


class LifecycleState(Enum):
    """States a lifecycle moves through in one start/stop cycle."""

    IDLE = "idle"
    STARTING = "starting"
    RUNNING = "running"
    STOPPING = "stopping"


class ServerLifecycle:
    """Owns at most one listener and exposes start/stop as coroutines.

    ``start`` returns once the listener accepts connections or raises the
    bind error; ``stop`` returns once the listener is closed. Overlapping
    calls are rejected, not queued. Can be used as an async context manager.

    Args:
        config: Base config; call-time overrides passed to start() win
            field by field
        listener_factory: Creates a fresh listener for each start()
    """

    def __init__(
        self,
        config: ServerConfig | None = None,
        *,
        listener_factory: ListenerFactory = UvicornListener,
    ) -> None:
        self._config = config
        self._listener_factory = listener_factory
        self._listener: Listener | None = None
        self._running = False
        self._state = LifecycleState.IDLE
        # Listeners abandoned by a cancelled start() or stop(), still closing
        self._discarding: set[asyncio.Task[None]] = set()

    @property
    def config(self) -> ServerConfig | None:
        """The construction-time config."""
        return self._config

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def is_running(self) -> bool:
        """Check if a listener is bound and accepting connections."""
        return self._running

    @property
    def listener(self) -> Listener | None:
        """The active listener. Ownership stays with the lifecycle."""
        return self._listener

    async def start(self, config: ServerConfig | None = None) -> "ServerLifecycle":
        """Bind a new listener and wait until it accepts connections.

        Args:
            config: Override config merged over the base config

        Returns:
            This lifecycle, for chaining

        Raises:
            AlreadyStartedError: If the lifecycle is not idle
            ConfigurationError: If the merged config has no endpoint or handler
            OSError: The listener's bind error, unmodified

        If cancelled (e.g. by ``asyncio.timeout()``) while binding, the
        lifecycle returns to idle and the abandoned listener is closed in
        the background as soon as it reports ready. The next start() waits
        for that close.
        """
        if self._state is not LifecycleState.IDLE:
            raise AlreadyStartedError()

        self._state = LifecycleState.STARTING
        try:
            await self.wait_discarded()
            resolved = resolve_config(self._config, config)
            listener = self._listener_factory(resolved.handler)  # type: ignore[arg-type]
            await self._bind(listener, resolved)
        except asyncio.CancelledError:
            logger.debug("Server start cancelled")
            self._state = LifecycleState.IDLE
            raise
        except BaseException as exc:
            logger.warning("Server failed to start: %r", exc)
            self._state = LifecycleState.IDLE
            raise

        self._listener = listener
        self._running = True
        self._state = LifecycleState.RUNNING
        logger.info("Server listening on %s", listener.address)
        return self

    async def _bind(self, listener: Listener, resolved: ServerConfig) -> None:
        """Bind ``listener`` and settle on whichever signal fires first.

        ``signal`` is the settled guard: it records the first signal only,
        so a listener that wrongly fires both cannot settle twice. The
        losing subscription is removed before anything is settled.

        If the caller is cancelled first, ``outcome`` is cancelled with it
        but ``signal`` still settles when the listener reports. A listener
        that ends up bound is then closed in the background.
        """
        loop = asyncio.get_running_loop()
        outcome: asyncio.Future[None] = loop.create_future()
        # True if ready came first, False if failure did
        signal: asyncio.Future[bool] = loop.create_future()

        def on_ready() -> None:
            stop_failure()
            if signal.done():
                logger.debug("Ignoring ready signal after settlement")
                return
            signal.set_result(True)
            if not outcome.done():
                outcome.set_result(None)

        def on_failure(exc: BaseException) -> None:
            stop_ready()
            if signal.done():
                logger.debug("Ignoring failure signal after settlement: %r", exc)
                return
            signal.set_result(False)
            if not outcome.done():
                outcome.set_exception(exc)

        stop_ready = listener.once_ready(on_ready)
        stop_failure = listener.once_failure(on_failure)
        try:
            logger.debug(
                "Binding listener to endpoint=%r host=%r",
                resolved.endpoint,
                resolved.host,
            )
            listener.bind_to(resolved.endpoint, resolved.host)  # type: ignore[arg-type]
            await outcome
        except asyncio.CancelledError:
            # Subscriptions stay in place so a late signal reaches the close
            self._track(
                loop.create_task(
                    self._close_discarded(listener, signal),
                    name="close-discarded-listener",
                )
            )
            raise
        except BaseException:
            stop_ready()
            stop_failure()
            raise
        stop_ready()
        stop_failure()

    async def _close_discarded(
        self, listener: Listener, signal: asyncio.Future[bool]
    ) -> None:
        if not await signal:
            return
        logger.debug("Closing listener abandoned by a cancelled start")
        await listener.close()

    def _track(self, task: asyncio.Task[None]) -> None:
        self._discarding.add(task)
        task.add_done_callback(self._on_discarded_done)

    def _on_discarded_done(self, task: asyncio.Task[None]) -> None:
        self._discarding.discard(task)
        if not task.cancelled() and task.exception() is not None:
            logger.warning(
                "Abandoned listener failed to close: %r", task.exception()
            )

    async def wait_discarded(self) -> None:
        """Wait until listeners abandoned by cancelled calls are closed.

        Waiting never cancels the background closes, even if the waiter
        itself is cancelled.
        """
        if self._discarding:
            await asyncio.wait(set(self._discarding))

    async def stop(self) -> None:
        """Close the active listener.

        Running state is cleared before the close is issued, so a failed
        close still leaves the lifecycle idle and never closes twice.

        Raises:
            NotStartedError: If no listener is running
            Exception: The listener's close error, unmodified

        If cancelled while closing, the close keeps running in the
        background and the next start() waits for it.
        """
        listener = self._listener
        if not self._running or listener is None:
            self._running = False
            self._listener = None
            # An in-flight start or stop owns the state transition
            if self._state not in (LifecycleState.STARTING, LifecycleState.STOPPING):
                self._state = LifecycleState.IDLE
            raise NotStartedError()

        self._running = False
        self._listener = None
        self._state = LifecycleState.STOPPING
        closing = asyncio.ensure_future(listener.close())
        try:
            await asyncio.shield(closing)
        except asyncio.CancelledError:
            if closing.done():
                raise
            logger.debug("Server stop cancelled; closing in the background")
            self._track(closing)
            raise
        except BaseException as exc:
            logger.warning("Server failed to close cleanly: %r", exc)
            raise
        finally:
            self._state = LifecycleState.IDLE
        logger.info("Server stopped")

    async def __aenter__(self) -> "ServerLifecycle":
        """Async context manager entry - start the server."""
        return await self.start()

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        """Async context manager exit - stop the server if still running."""
        if self._running:
            await self.stop()

    def __repr__(self) -> str:
        return f"{type(self).__name__}(state={self._state.value}, listener={self._listener!r})"
