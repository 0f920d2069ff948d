"""Canonical Pydantic models shared across all jsonfetch modules.

The models fall into three groups:

**Configuration** -- :class:`ClientConfig`, the per-client settings
(base URL, default method, headers, timeout, decode policy).

**Credentials** -- :class:`BasicCredentials` and :class:`OAuthCredentials`,
the two variants of the :data:`AuthState` tagged union.  A client holds at
most one of them at a time.

**Request/response artifacts** -- :class:`UploadFile`,
:class:`PreparedRequest`, :class:`TransportResponse`, and the diagnostic
:class:`ExchangeRecord` (with its :class:`RequestRecord` and
:class:`ResponseRecord` halves).
"""

from __future__ import annotations

from typing import Any, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

DEFAULT_HEADERS: dict[str, str] = {
    "Content-type": "application/json",
    "Accept": "application/json",
}
"""Headers injected by :meth:`ClientConfig.with_defaults` when none are given."""

DEFAULT_TIMEOUT = 60.0


# --- Configuration ---


class ClientConfig(BaseModel):
    """Settings for a :class:`~jsonfetch.client.FetchClient`.

    ``base_url`` and ``timeout`` stay fixed for the lifetime of a client;
    ``method`` and ``headers`` may be changed through the client's setters.
    Header insertion order is preserved when the header block is rendered.

    Example::

        cfg = ClientConfig.with_defaults("https://api.example.com/v1")
        assert cfg.headers["Accept"] == "application/json"
    """

    base_url: str = Field(description="Prefix for every request URL")
    method: str = Field(default="GET", description="HTTP method used by execute()")
    headers: dict[str, str] = Field(default_factory=dict)
    timeout: float = Field(default=DEFAULT_TIMEOUT, gt=0, description="Seconds")
    strict_json: bool = Field(
        default=False,
        description="Raise DecodeError instead of returning None for non-JSON bodies",
    )

    @classmethod
    def with_defaults(
        cls,
        base_url: str,
        headers: Optional[dict[str, str]] = None,
        method: str = "GET",
        timeout: float = DEFAULT_TIMEOUT,
        strict_json: bool = False,
    ) -> ClientConfig:
        """Build a config, injecting :data:`DEFAULT_HEADERS` when *headers* is empty."""
        return cls(
            base_url=base_url,
            method=method,
            headers=dict(headers) if headers else dict(DEFAULT_HEADERS),
            timeout=timeout,
            strict_json=strict_json,
        )


# --- Credentials ---


class BasicCredentials(BaseModel):
    """HTTP Basic credentials (:rfc:`7617`)."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["basic"] = "basic"
    username: str
    password: str


class OAuthCredentials(BaseModel):
    """OAuth 1.0a consumer and access-token credentials (:rfc:`5849`)."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["oauth1"] = "oauth1"
    consumer_key: str
    consumer_secret: str
    token: str
    token_secret: str


AuthState = Optional[Union[BasicCredentials, OAuthCredentials]]
"""The client's single auth slot: nothing, Basic, or OAuth 1.0a."""


# --- Request artifacts ---


class UploadFile(BaseModel):
    """A local file to send as one part of a multipart/form-data body.

    The camel-case keys used by older payloads (``fieldName``, ``name``,
    ``type``) are accepted as aliases.
    """

    field_name: str = Field(validation_alias=AliasChoices("field_name", "fieldName"))
    file_name: str = Field(validation_alias=AliasChoices("file_name", "name"))
    path: str
    mime_type: str = Field(
        default="application/octet-stream",
        validation_alias=AliasChoices("mime_type", "type"),
    )


class PreparedRequest(BaseModel):
    """A fully assembled request, ready to hand to a transport."""

    method: str
    url: str
    headers: list[tuple[str, str]] = Field(default_factory=list)
    body: bytes = b""
    timeout: float = DEFAULT_TIMEOUT
    ignore_http_errors: bool = True

    @property
    def header_block(self) -> str:
        """The headers rendered as ``Name: Value`` lines joined by CRLF."""
        from jsonfetch.builder import render_headers

        return render_headers(self.headers)


class TransportResponse(BaseModel):
    """What a transport hands back: status, raw header lines, and body bytes."""

    status_code: int
    headers: list[str] = Field(default_factory=list)
    content: bytes = b""


# --- Exchange record ---


class RequestRecord(BaseModel):
    """The request half of an :class:`ExchangeRecord`.

    ``url`` is percent-decoded for readability; the ``Authorization``
    header is masked.
    """

    url: str
    method: str
    headers: list[tuple[str, str]] = Field(default_factory=list)
    body: bytes = b""
    payload: Any = None


class ResponseRecord(BaseModel):
    """The response half of an :class:`ExchangeRecord`.

    Exactly one of ``data`` (possibly ``None``) or ``error`` describes the
    outcome; ``decode_error`` is set when a body arrived but was not JSON.
    """

    status_code: Optional[int] = None
    data: Any = None
    headers: list[str] = Field(default_factory=list)
    error: Optional[str] = None
    decode_error: Optional[str] = None

    @property
    def ok(self) -> bool:
        """``True`` when the transport produced a body."""
        return self.error is None


class ExchangeRecord(BaseModel):
    """The last request/response pair issued by a client, kept for diagnostics."""

    request: RequestRecord
    response: Optional[ResponseRecord] = None
