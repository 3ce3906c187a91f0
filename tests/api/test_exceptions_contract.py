from __future__ import annotations

import httpx

from forge import ConfigError, ForgeConnectionError, ForgeError, ForgeServerError


def test_runtime_exception_hierarchy() -> None:
    assert issubclass(ForgeError, RuntimeError)
    assert issubclass(ForgeConnectionError, ForgeError)
    assert issubclass(ForgeServerError, ForgeError)
    assert not issubclass(ForgeConnectionError, ForgeServerError)
    assert not issubclass(ForgeServerError, ForgeConnectionError)
    assert issubclass(ConfigError, ValueError)


def test_server_error_fields() -> None:
    exc = ForgeServerError(503, "engine busy")

    assert exc.status_code == 503
    assert exc.message == "engine busy"
    assert str(exc) == "forge: server error (503): engine busy"


def test_connection_error_wraps_cause() -> None:
    cause = httpx.ConnectTimeout("timed out")
    exc = ForgeConnectionError(cause)

    assert exc.cause is cause
    assert str(exc) == "forge: connection error: timed out"
