"""Pytest configuration and fixtures."""

import asyncio
import tempfile
from collections.abc import Awaitable, Callable, Iterator
from pathlib import Path

import pytest
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import PlainTextResponse, Response
from starlette.routing import Route

StreamHandler = Callable[[asyncio.StreamReader, asyncio.StreamWriter], Awaitable[None]]


def _single_route_app(status_code: int, body: str = "") -> Starlette:
    async def endpoint(request: Request) -> Response:
        if status_code == 204:
            return Response(status_code=204)
        return PlainTextResponse(body, status_code=status_code)

    return Starlette(routes=[Route("/", endpoint)])


def _stream_reply(reply: bytes) -> StreamHandler:
    async def handler(reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
        await reader.readline()
        writer.write(reply)
        await writer.drain()
        writer.close()
        await writer.wait_closed()

    return handler


@pytest.fixture
def no_content_app() -> Starlette:
    """ASGI app answering every GET / with 204."""
    return _single_route_app(204)


@pytest.fixture
def ok_app() -> Starlette:
    """ASGI app answering every GET / with 200 'ok'."""
    return _single_route_app(200, "ok")


@pytest.fixture
def ping_handler() -> StreamHandler:
    """Stream handler that answers one line with b'pong'."""
    return _stream_reply(b"pong\n")


@pytest.fixture
def echo_name_handler() -> Callable[[str], StreamHandler]:
    """Factory for stream handlers that answer with a fixed name."""

    def make(name: str) -> StreamHandler:
        return _stream_reply(f"{name}\n".encode())

    return make


@pytest.fixture
def socket_path() -> Iterator[str]:
    """Short unix socket path in a private temp dir (sun_path is ~104 bytes)."""
    with tempfile.TemporaryDirectory(prefix="ahs-") as tmp:
        yield str(Path(tmp) / "server.sock")
