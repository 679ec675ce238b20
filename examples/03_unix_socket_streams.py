"""Example 03: Unix Socket with Raw Streams

Serves a line-echo handler over a unix socket with StreamListener.

This example shows:
- Choosing a listener implementation with listener_factory
- A string endpoint binding a unix socket
- The lifecycle as an async context manager

Tier: 1 (Async, unix socket in a temp dir)
"""

import asyncio
import tempfile
from pathlib import Path

from async_http_server import ServerConfig, ServerLifecycle, StreamListener


async def echo(reader: asyncio.StreamReader, writer: asyncio.StreamWriter) -> None:
    line = await reader.readline()
    writer.write(line.upper())
    await writer.drain()
    writer.close()
    await writer.wait_closed()


def main() -> None:
    """Run the unix socket demonstration."""
    asyncio.run(async_main())


async def async_main() -> None:
    with tempfile.TemporaryDirectory() as tmp:
        path = str(Path(tmp) / "echo.sock")
        config = ServerConfig(endpoint=path, handler=echo)

        async with ServerLifecycle(config, listener_factory=StreamListener):
            reader, writer = await asyncio.open_unix_connection(path)
            writer.write(b"hello over a unix socket\n")
            reply = await reader.readline()
            writer.close()
            await writer.wait_closed()

        assert reply == b"HELLO OVER A UNIX SOCKET\n"
        print(reply.decode().strip())


if __name__ == "__main__":
    main()
