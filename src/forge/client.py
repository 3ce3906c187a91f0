# pyright: standard

"""HTTP client for a Forge rendering server."""

from __future__ import annotations

import logging
from types import TracebackType
from typing import TYPE_CHECKING, Any, Optional, Type

import httpx

from .errors import ForgeConnectionError, ForgeServerError
from .net import (
    DEFAULT_TIMEOUT,
    HEALTH_PATH,
    JSON_CONTENT_TYPE,
    RENDER_PATH,
    encode_payload,
    normalize_base_url,
    redact_url_for_logs,
    server_error_message,
)
from .request import RenderRequest

if TYPE_CHECKING:
    from .config import ClientConfig

__all__ = ["DEFAULT_TIMEOUT", "Client"]

logger = logging.getLogger(__name__)


class Client:
    """
    Communicates with a Forge rendering server.

    The base URL, timeout and HTTP execution mechanism are fixed at
    construction. A client may be shared between threads; each render call
    is an independent request/response exchange with no retries.

    Parameters:
        base_url (str): Server address; trailing slashes are ignored.
        timeout (float | None): HTTP timeout in seconds for every exchange
            (120 when omitted). With a custom ``http_client`` an omitted
            timeout leaves that client's own timeout in effect.
        http_client (httpx.Client | None): Replaces the whole HTTP stack,
            for custom proxying, pooling or instrumentation. The caller
            keeps ownership and must close it.
        transport (httpx.BaseTransport | None): Replaces only the transport
            of the internally created ``httpx.Client``.
    """

    def __init__(
        self,
        base_url: str,
        *,
        timeout: Optional[float] = None,
        http_client: Optional[httpx.Client] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ) -> None:
        self._base_url = normalize_base_url(base_url)
        self._explicit_timeout = timeout is not None
        self._timeout = DEFAULT_TIMEOUT if timeout is None else float(timeout)
        if http_client is not None:
            self._http = http_client
            self._owns_http = False
        else:
            self._http = httpx.Client(timeout=self._timeout, transport=transport)
            self._owns_http = True

    @classmethod
    def from_config(cls, config: "ClientConfig", **kwargs: Any) -> "Client":
        """Build a client from a loaded :class:`forge.config.ClientConfig`."""

        return cls(config.base_url, timeout=config.timeout, **kwargs)

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def timeout(self) -> float:
        return self._timeout

    def __repr__(self) -> str:
        return f"Client(base_url={self._base_url!r}, timeout={self._timeout})"

    def __enter__(self) -> "Client":
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc: Optional[BaseException],
        traceback: Optional[TracebackType],
    ) -> None:
        self.close()

    def close(self) -> None:
        """Release the HTTP client when this instance created it."""

        if self._owns_http:
            self._http.close()

    def render_html(self, html: str) -> RenderRequest:
        """Start a render request from an HTML string."""

        return RenderRequest(self, html=html)

    def render_url(self, url: str) -> RenderRequest:
        """Start a render request from a URL the server will fetch."""

        return RenderRequest(self, url=url)

    def health(self, *, timeout: Optional[float] = None) -> bool:
        """
        Return ``True`` when the server reports itself healthy.

        A non-200 status is reported as ``False``; only transport failures
        raise :class:`ForgeConnectionError`.
        """

        url = self._base_url + HEALTH_PATH
        try:
            response = self._http.get(url, timeout=self._effective_timeout(timeout))
        except httpx.RequestError as exc:
            logger.debug("Health check against %s failed: %s", redact_url_for_logs(url), exc)
            raise ForgeConnectionError(exc) from exc
        logger.debug("Health check against %s returned %s", redact_url_for_logs(url), response.status_code)
        return response.status_code == httpx.codes.OK

    def send(self, payload: dict[str, Any], *, timeout: Optional[float] = None) -> bytes:
        """
        POST a finalized payload to the render endpoint and classify the result.

        Parameters:
            payload (dict[str, Any]): Output of :meth:`RenderRequest.build_payload`.
            timeout (float | None): Per-call deadline overriding the client timeout.

        Returns:
            bytes: The rendered artifact, exactly as received.

        Raises:
            ForgeConnectionError: On any failure to obtain a usable response,
                including an expired deadline or an undecodable body.
            ForgeServerError: When the server answered with a non-200 status.
        """

        url = self._base_url + RENDER_PATH
        body = encode_payload(payload)
        logger.debug(
            "POST %s%s (%d byte payload, format=%s)",
            redact_url_for_logs(url),
            RENDER_PATH,
            len(body),
            payload.get("format"),
        )
        try:
            response = self._http.post(
                url,
                content=body,
                headers={"Content-Type": JSON_CONTENT_TYPE},
                timeout=self._effective_timeout(timeout),
            )
        except httpx.RequestError as exc:
            logger.debug("Render request to %s failed: %s", redact_url_for_logs(url), exc)
            raise ForgeConnectionError(exc) from exc

        data = response.content
        if response.status_code != httpx.codes.OK:
            message = server_error_message(response.status_code, data)
            logger.debug("Render rejected with status %s: %s", response.status_code, message)
            raise ForgeServerError(response.status_code, message)

        logger.debug("Render completed: %d bytes", len(data))
        return data

    def _effective_timeout(self, timeout: Optional[float]) -> Any:
        if timeout is not None:
            return float(timeout)
        if self._owns_http or self._explicit_timeout:
            return self._timeout
        return httpx.USE_CLIENT_DEFAULT
