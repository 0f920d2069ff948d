"""Blocking JSON-over-HTTP client with Basic and OAuth 1.0a signing.

This module provides :class:`FetchClient`, the public entry point of
jsonfetch.  One call to :meth:`FetchClient.execute` is one blocking
request:

1. **Build** -- URL, query string and body via :mod:`jsonfetch.builder`
   (JSON by default, multipart/form-data for ``is_upload`` payloads).
2. **Sign** -- prepend an ``Authorization`` header from the client's auth
   slot via :func:`jsonfetch.auth.sign_request`.
3. **Send** -- hand the :class:`~jsonfetch.models.PreparedRequest` to the
   transport with ``ignore_http_errors=True``; 4xx/5xx bodies are
   returned, not raised.
4. **Decode** -- parse the body as JSON and return it verbatim.

Every call overwrites :attr:`FetchClient.last_exchange` with the request
and its outcome, whether the call succeeded or not.  A client is meant
for one logical conversation at a time; it keeps no locks, so concurrent
calls on the same instance must be serialised by the caller.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any, Optional
from urllib.parse import unquote_plus

from jsonfetch.auth import AUTHORIZATION, sign_request
from jsonfetch.builder import UPLOAD_MARKER, build_url, encode_body, merge_header, render_headers
from jsonfetch.client.response import decode_json
from jsonfetch.exceptions import DecodeError, TransportError, UploadError
from jsonfetch.models import (
    DEFAULT_TIMEOUT,
    AuthState,
    BasicCredentials,
    ClientConfig,
    ExchangeRecord,
    OAuthCredentials,
    PreparedRequest,
    RequestRecord,
    ResponseRecord,
    UploadFile,
)
from jsonfetch.transport import HttpxTransport, Transport

logger = logging.getLogger(__name__)

DEFAULT_ERROR_MESSAGE = "HTTP request failed"
CONTENT_TYPE = "Content-type"


def _mask_headers(headers: Iterable[tuple[str, str]]) -> list[tuple[str, str]]:
    masked: list[tuple[str, str]] = []
    for name, value in headers:
        if name.lower() == AUTHORIZATION.lower():
            scheme = value.split(" ", 1)[0]
            value = f"{scheme} ****"
        masked.append((name, value))
    return masked


class FetchClient:
    """Synchronous JSON client bound to one base URL.

    Args:
        base_url: Prefix for every request URL (``path`` is appended as-is).
        headers: Default headers.  When empty, ``Content-type`` and
            ``Accept`` are set to ``application/json``.
        method: HTTP method used by :meth:`execute`.
        timeout: Per-request timeout in seconds, passed to the transport.
        transport: Object with a ``send(PreparedRequest)`` method.  A new
            :class:`~jsonfetch.transport.HttpxTransport` is created (and
            closed by :meth:`close`) when omitted.
        strict_json: Raise :class:`~jsonfetch.exceptions.DecodeError` for
            non-JSON bodies instead of returning ``None``.
        signer_options: Keyword arguments for the OAuth signer
            (``clock``, ``nonce_factory``).

    Example::

        with FetchClient("https://api.example.com/v1") as client:
            client.set_basic_auth("user", "pass")
            users = client.execute("/users", {"page": 2})
    """

    def __init__(
        self,
        base_url: str,
        headers: Optional[Mapping[str, str]] = None,
        method: str = "GET",
        timeout: float = DEFAULT_TIMEOUT,
        *,
        transport: Optional[Transport] = None,
        strict_json: bool = False,
        signer_options: Optional[dict[str, Any]] = None,
    ) -> None:
        self._config = ClientConfig.with_defaults(
            base_url,
            headers=dict(headers) if headers else None,
            method=method,
            timeout=timeout,
            strict_json=strict_json,
        )
        self._owns_transport = transport is None
        self._transport: Transport = transport if transport is not None else HttpxTransport()
        self._auth: AuthState = None
        self._last_exchange: Optional[ExchangeRecord] = None

        self._signer_options: dict[str, Any] = dict(signer_options or {})

    @classmethod
    def from_config(cls, config: ClientConfig, **kwargs: Any) -> FetchClient:
        """Create a client from a :class:`~jsonfetch.models.ClientConfig`.

        Keyword arguments (``transport``, ``signer_options``) are
        passed through to the constructor.
        """
        return cls(
            config.base_url,
            headers=config.headers,
            method=config.method,
            timeout=config.timeout,
            strict_json=config.strict_json,
            **kwargs,
        )

    # ------------------------------------------------------------------ #
    # Context manager
    # ------------------------------------------------------------------ #

    def __enter__(self) -> FetchClient:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def close(self) -> None:
        """Close the transport if this client created it."""
        close = getattr(self._transport, "close", None)
        if self._owns_transport and callable(close):
            close()

    # ------------------------------------------------------------------ #
    # Configuration
    # ------------------------------------------------------------------ #

    @property
    def base_url(self) -> str:
        return self._config.base_url

    @property
    def timeout(self) -> float:
        return self._config.timeout

    @property
    def method(self) -> str:
        return self._config.method

    @property
    def strict_json(self) -> bool:
        return self._config.strict_json

    def set_method(self, method: str) -> None:
        """Set the HTTP method used by subsequent calls."""
        self._config.method = method.upper()

    def set_header(self, name: str, value: str) -> None:
        """Set (or replace) one default header."""
        self._config.headers[name] = value

    def get_headers(self) -> dict[str, str]:
        """Return a copy of the default headers."""
        return dict(self._config.headers)

    def get_headers_string(self) -> str:
        """Return the default headers rendered as a CRLF-separated block."""
        return render_headers(self._config.headers)

    # ------------------------------------------------------------------ #
    # Auth
    # ------------------------------------------------------------------ #

    @property
    def auth(self) -> AuthState:
        """The current auth slot: ``None``, Basic, or OAuth credentials."""
        return self._auth

    def set_auth(self, auth: AuthState) -> None:
        """Replace the auth slot.  Passing ``None`` disables auth."""
        self._auth = auth

    def set_basic_auth(self, username: str, password: str) -> None:
        """Use HTTP Basic auth for subsequent calls (replaces any OAuth credentials)."""
        self.set_auth(BasicCredentials(username=username, password=password))

    def set_oauth(self, consumer_key: str, consumer_secret: str, token: str, token_secret: str) -> None:
        """Use OAuth 1.0a signing for subsequent calls (replaces any Basic credentials)."""
        self.set_auth(
            OAuthCredentials(
                consumer_key=consumer_key,
                consumer_secret=consumer_secret,
                token=token,
                token_secret=token_secret,
            )
        )

    def clear_auth(self) -> None:
        self.set_auth(None)

    # ------------------------------------------------------------------ #
    # Requests
    # ------------------------------------------------------------------ #

    @property
    def last_exchange(self) -> Optional[ExchangeRecord]:
        """The exchange recorded by the most recent call, if any."""
        return self._last_exchange

    def prepare(
        self,
        path: str = "",
        params: Optional[Mapping[str, Any]] = None,
        payload: Any = None,
    ) -> PreparedRequest:
        """Assemble the request for *path* without sending it.

        Raises:
            UploadError: If an upload payload names a file that cannot be read.
        """
        method = self._config.method.upper()
        url = build_url(self._config.base_url, path, params)
        body = encode_body(payload)

        headers = list(self._config.headers.items())
        if body.content_type is not None:
            headers = merge_header(headers, CONTENT_TYPE, body.content_type)

        auth_header = sign_request(
            self._auth,
            method,
            f"{self._config.base_url}{path}",
            params,
            **self._signer_options,
        )
        if auth_header is not None:
            headers = merge_header(headers, *auth_header, prepend=True)

        return PreparedRequest(
            method=method,
            url=url,
            headers=headers,
            body=body.content,
            timeout=self._config.timeout,
            ignore_http_errors=True,
        )

    def send(
        self,
        path: str = "",
        params: Optional[Mapping[str, Any]] = None,
        payload: Any = None,
    ) -> ExchangeRecord:
        """Send one request and return the full exchange.

        The same record is stored as :attr:`last_exchange`.

        Raises:
            TransportError: If the transport failed or returned an empty body.
            DecodeError: In strict mode, if the body is not valid JSON.
            UploadError: If an upload file cannot be read.
        """
        try:
            prepared = self.prepare(path, params, payload)
        except UploadError as exc:
            self._last_exchange = ExchangeRecord(
                request=RequestRecord(
                    url=unquote_plus(build_url(self._config.base_url, path, params)),
                    method=self._config.method.upper(),
                    headers=_mask_headers(self._config.headers.items()),
                    payload=payload,
                ),
                response=ResponseRecord(error=str(exc)),
            )
            raise

        exchange = ExchangeRecord(
            request=RequestRecord(
                url=unquote_plus(prepared.url),
                method=prepared.method,
                headers=_mask_headers(prepared.headers),
                body=prepared.body,
                payload=payload,
            )
        )
        self._last_exchange = exchange

        logger.debug("%s %s (%d byte body)", prepared.method, exchange.request.url, len(prepared.body))
        try:
            result = self._transport.send(prepared)
        except TransportError as exc:
            raise self._failure(exchange, str(exc)) from exc

        if not result.content:
            exchange.response = ResponseRecord(status_code=result.status_code, headers=result.headers)
            raise self._failure(exchange, f"Empty response body (HTTP {result.status_code})")

        data, decode_error = decode_json(result.content)
        exchange.response = ResponseRecord(
            status_code=result.status_code,
            data=data,
            headers=result.headers,
            decode_error=decode_error,
        )
        logger.debug("HTTP %d from %s", result.status_code, exchange.request.url)

        if decode_error is not None:
            if self._config.strict_json:
                raise DecodeError(f"Response body is not valid JSON: {decode_error}", exchange=exchange)
            logger.warning("Response from %s is not valid JSON: %s", exchange.request.url, decode_error)

        return exchange

    def execute(
        self,
        path: str = "",
        params: Optional[Mapping[str, Any]] = None,
        payload: Any = None,
    ) -> Any:
        """Send one request and return the decoded JSON body.

        The value is returned as decoded (dict, list, scalar, or ``None``);
        HTTP error statuses are not raised, so callers inspect the body or
        :attr:`last_exchange` themselves.  A body that is not JSON yields
        ``None`` unless the client is in strict mode.

        Args:
            path: Appended to the base URL.
            params: Query parameters, encoded in iteration order.
            payload: JSON-serialisable body, or an upload mapping with a
                truthy ``is_upload`` key.

        Raises:
            TransportError: If the transport failed or returned an empty body.
            DecodeError: In strict mode, if the body is not valid JSON.
            UploadError: If an upload file cannot be read.
        """
        exchange = self.send(path, params, payload)
        assert exchange.response is not None
        return exchange.response.data

    def upload(
        self,
        path: str,
        files: Iterable[UploadFile | Mapping[str, Any]],
        params: Optional[Mapping[str, Any]] = None,
    ) -> Any:
        """Send *files* as a multipart/form-data body with the configured method.

        Each entry is an :class:`~jsonfetch.models.UploadFile` or a mapping
        coercible to one.
        """
        payload: dict[str, Any] = {UPLOAD_MARKER: True}
        for index, entry in enumerate(files):
            payload[f"file{index}"] = entry
        return self.execute(path, params, payload)

    def _failure(self, exchange: ExchangeRecord, message: str) -> TransportError:
        """Record a transport failure on *exchange* and return the error to raise."""
        message = message or DEFAULT_ERROR_MESSAGE
        if exchange.response is None:
            exchange.response = ResponseRecord()
        exchange.response.error = message
        logger.debug("Request to %s failed: %s", exchange.request.url, message)
        return TransportError(f"{DEFAULT_ERROR_MESSAGE}. Error was: {message}", exchange=exchange)
