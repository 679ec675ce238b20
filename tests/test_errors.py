"""Tests for the error taxonomy."""

import pytest

from async_http_server.errors import (
    AlreadyStartedError,
    ConfigurationError,
    ConfigurationMissingError,
    EndpointMissingError,
    HandlerMissingError,
    ListenerNotRunningError,
    NotStartedError,
    SequencingError,
    ServerLifecycleError,
)


@pytest.mark.parametrize(
    ("error_class", "parent", "message"),
    [
        (ConfigurationMissingError, ConfigurationError, "No configuration has been provided."),
        (EndpointMissingError, ConfigurationError, "No port/pipe is defined in the config."),
        (HandlerMissingError, ConfigurationError, "No handler is defined in the config."),
        (AlreadyStartedError, SequencingError, "Server has been already started."),
        (NotStartedError, SequencingError, "Server is not started."),
    ],
)
def test_lifecycle_errors(error_class, parent, message):
    """Each lifecycle error has its parent category and default message."""
    error = error_class()
    assert isinstance(error, parent)
    assert isinstance(error, ServerLifecycleError)
    assert str(error) == message


def test_custom_message():
    """A custom message replaces the default."""
    assert str(NotStartedError("custom")) == "custom"


def test_listener_not_running_is_not_a_lifecycle_error():
    """Listener errors are environment errors, outside the lifecycle taxonomy."""
    error = ListenerNotRunningError()
    assert isinstance(error, RuntimeError)
    assert not isinstance(error, ServerLifecycleError)
    assert str(error) == "Listener is not running."
