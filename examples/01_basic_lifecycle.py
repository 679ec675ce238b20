"""Example 01: Basic Lifecycle

Starts an ASGI application on an OS-assigned port, makes one request,
and stops the server.

This example shows:
- Passing the handler in the construction-time config
- start() returning the lifecycle once the port accepts connections
- Reading the bound address from the listener
- stop() releasing the port

Tier: 1 (Async, loopback only)
"""

import asyncio

import httpx
from starlette.applications import Starlette
from starlette.responses import PlainTextResponse
from starlette.routing import Route

from async_http_server import ServerConfig, ServerLifecycle


async def hello(request):
    return PlainTextResponse("hello")


def main() -> None:
    """Run the basic lifecycle demonstration."""
    asyncio.run(async_main())


async def async_main() -> None:
    app = Starlette(routes=[Route("/", hello)])
    server = ServerLifecycle(ServerConfig(host="127.0.0.1", endpoint=0, handler=app))

    await server.start()
    assert server.is_running
    host, port = server.listener.address[:2]
    print(f"Listening on {host}:{port}")

    async with httpx.AsyncClient() as client:
        response = await client.get(f"http://{host}:{port}/")
    assert response.text == "hello"
    print(f"GET / -> {response.status_code} {response.text!r}")

    await server.stop()
    assert not server.is_running
    print("Stopped")


if __name__ == "__main__":
    main()
