"""Listener implementations.

- UvicornListener: serves an ASGI application over HTTP (default)
- StreamListener: hands raw asyncio streams to the handler
"""

from async_http_server.listeners.asgi import UvicornListener
from async_http_server.listeners.base import SignalListener
from async_http_server.listeners.stream import StreamListener

__all__ = ["SignalListener", "StreamListener", "UvicornListener"]
