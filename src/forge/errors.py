from __future__ import annotations

__all__ = ["ForgeConnectionError", "ForgeError", "ForgeServerError"]


class ForgeError(RuntimeError):
    """Base class for failures reported by the Forge client."""


class ForgeConnectionError(ForgeError):
    """Raised when no usable response was obtained from the server."""

    def __init__(self, cause: BaseException) -> None:
        super().__init__(f"forge: connection error: {cause}")
        self.cause = cause


class ForgeServerError(ForgeError):
    """Raised when the server answers with a non-success status."""

    def __init__(self, status_code: int, message: str) -> None:
        super().__init__(f"forge: server error ({status_code}): {message}")
        self.status_code = status_code
        self.message = message
