"""Testing utilities for code built on the server lifecycle.

Provides a fake listener so lifecycle behavior can be tested without sockets.
"""

from .fakes import FakeListener, RecordingFactory

__all__ = ["FakeListener", "RecordingFactory"]
