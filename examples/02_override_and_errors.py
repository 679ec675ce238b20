"""Example 02: Overrides and Errors

Shows call-time overrides and the errors start()/stop() raise.

This example shows:
- A base config supplying the handler, an override supplying the endpoint
- AlreadyStartedError on a second start()
- The raw OSError when a second instance binds the same port
- NotStartedError on stop() without a running listener

Tier: 1 (Async, loopback only)
"""

import asyncio
import errno

from starlette.applications import Starlette

from async_http_server import (
    AlreadyStartedError,
    NotStartedError,
    ServerConfig,
    ServerLifecycle,
)


def main() -> None:
    """Run the overrides and errors demonstration."""
    asyncio.run(async_main())


async def async_main() -> None:
    app = Starlette()
    base = ServerConfig(host="127.0.0.1", handler=app)

    first = await ServerLifecycle(base).start(ServerConfig(endpoint=0))
    port = first.listener.address[1]

    try:
        await first.start()
    except AlreadyStartedError as exc:
        print(f"second start: {exc}")

    second = ServerLifecycle(base)
    try:
        await second.start(ServerConfig(endpoint=port))
    except OSError as exc:
        assert exc.errno == errno.EADDRINUSE
        print(f"port conflict: {exc}")

    await first.stop()

    try:
        await first.stop()
    except NotStartedError as exc:
        print(f"stop again: {exc}")


if __name__ == "__main__":
    main()
