# pyright: standard

"""Wire helpers shared by the client: base URL handling and error bodies."""

from __future__ import annotations

import json
from urllib.parse import urlsplit

__all__ = [
    "DEFAULT_TIMEOUT",
    "RENDER_PATH",
    "HEALTH_PATH",
    "JSON_CONTENT_TYPE",
    "encode_payload",
    "normalize_base_url",
    "redact_url_for_logs",
    "server_error_message",
]

DEFAULT_TIMEOUT = 120.0
RENDER_PATH = "/render"
HEALTH_PATH = "/health"
JSON_CONTENT_TYPE = "application/json"


def normalize_base_url(base_url: str) -> str:
    """Strip trailing slashes so ``base + path`` never doubles the separator."""

    return base_url.rstrip("/")


def encode_payload(payload: dict[str, object]) -> bytes:
    """Serialize a finalized payload to the JSON request body."""

    return json.dumps(payload, separators=(",", ":")).encode("utf-8")


def server_error_message(status_code: int, body: bytes) -> str:
    """
    Resolve the message for a non-success response.

    Uses the ``error`` member of a JSON object body when it is a non-empty
    string, otherwise falls back to ``"HTTP <status>"``.
    """

    fallback = f"HTTP {status_code}"
    try:
        decoded = json.loads(body)
    except (ValueError, UnicodeDecodeError):
        return fallback
    if not isinstance(decoded, dict):
        return fallback
    message = decoded.get("error")
    if isinstance(message, str) and message:
        return message
    return fallback


def redact_url_for_logs(url: str) -> str:
    """Return a safe identifier for URLs when logging server endpoints."""

    try:
        parsed = urlsplit(url)
    except Exception:
        return "url"
    if parsed.netloc:
        # credentials never reach the logs
        return parsed.netloc.rsplit("@", 1)[-1]
    return parsed.path or "url"
