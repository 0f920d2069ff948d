"""Transport layer -- the seam between jsonfetch and the HTTP stack.

:class:`~jsonfetch.client.FetchClient` never talks to the network itself.
It hands a :class:`~jsonfetch.models.PreparedRequest` to an object
implementing the :class:`Transport` protocol and gets back a
:class:`~jsonfetch.models.TransportResponse` (status code, raw header
lines, body bytes).

:class:`HttpxTransport` is the default implementation, backed by
:class:`httpx.Client`.  Tests plug in :class:`httpx.MockTransport` through
it, or provide their own object with a ``send`` method.

Only transport-level failures (connection refused, DNS resolution,
timeouts, protocol errors, redirect loops, undecodable content) raise
:class:`~jsonfetch.exceptions.TransportError`.
HTTP error statuses come back as ordinary responses unless the request
sets ``ignore_http_errors=False``.
"""

from __future__ import annotations

import logging
from typing import Any, Optional, Protocol, runtime_checkable

import httpx

from jsonfetch.exceptions import RequestError, TransportError
from jsonfetch.models import PreparedRequest, TransportResponse

logger = logging.getLogger(__name__)


@runtime_checkable
class Transport(Protocol):
    """Anything that can send a :class:`~jsonfetch.models.PreparedRequest`."""

    def send(self, request: PreparedRequest) -> TransportResponse:
        """Send *request* and return the raw response.

        Raises:
            TransportError: If no response could be obtained.
        """
        ...


class HttpxTransport:
    """Send prepared requests through an :class:`httpx.Client`.

    Args:
        client: An existing client to use.  When omitted a new one is
            created (with ``follow_redirects=True`` and *client_kwargs*) and
            closed by :meth:`close`.
        **client_kwargs: Extra arguments for the :class:`httpx.Client`
            created when *client* is ``None``.

    Example::

        with HttpxTransport() as transport:
            response = transport.send(prepared)
    """

    def __init__(self, client: Optional[httpx.Client] = None, **client_kwargs: Any) -> None:
        self._owns_client = client is None
        if client is None:
            client_kwargs.setdefault("follow_redirects", True)
            client = httpx.Client(**client_kwargs)
        self._client = client

    def __enter__(self) -> HttpxTransport:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def close(self) -> None:
        """Close the underlying client if this transport created it."""
        if self._owns_client:
            self._client.close()

    def send(self, request: PreparedRequest) -> TransportResponse:
        """Send *request* and return status, raw header lines, and body bytes.

        Raises:
            TransportError: When httpx cannot complete the request (connection,
                DNS, timeout, protocol, too many redirects, bad content encoding).
            RequestError: On a 4xx/5xx status when the request does not set
                ``ignore_http_errors``.
        """
        try:
            response = self._client.request(
                request.method,
                request.url,
                headers=request.headers,
                content=request.body or None,
                timeout=request.timeout,
            )
        except (httpx.RequestError, httpx.InvalidURL) as exc:
            logger.debug("Transport failure for %s %s: %r", request.method, request.url, exc)
            raise TransportError(str(exc) or type(exc).__name__) from exc

        if not request.ignore_http_errors:
            try:
                response.raise_for_status()
            except httpx.HTTPStatusError as exc:
                raise RequestError(f"HTTP {response.status_code}: {response.reason_phrase}") from exc

        return TransportResponse(
            status_code=response.status_code,
            headers=[f"{name}: {value}" for name, value in response.headers.multi_items()],
            content=response.content,
        )
