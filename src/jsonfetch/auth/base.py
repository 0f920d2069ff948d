"""Abstract base class for request signers.

This module defines :class:`AuthSigner`, the interface every
authentication scheme implements, and :func:`percent_encode`, the
:rfc:`3986` encoder shared by the OAuth signer and the exchange recorder.

A signer turns the client's credentials plus the outgoing request
(method, URL without query, query parameters) into the value of the
``Authorization`` header.  Signers never touch the body and never send
anything themselves.

See Also:
    :func:`jsonfetch.auth.sign_request` for dispatch over the client's
    auth slot.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from typing import Any
from urllib.parse import quote

AUTHORIZATION = "Authorization"


def percent_encode(value: Any) -> str:
    """Percent-encode *value* per :rfc:`3986` (only unreserved characters are kept)."""
    return quote(str(value), safe="~")


class AuthSigner(ABC):
    """Abstract base class for ``Authorization`` header producers.

    Subclasses provide:

    1. An :attr:`scheme` property naming the auth scheme (``"Basic"``,
       ``"OAuth"``).
    2. A :meth:`sign` implementation returning the full header value,
       scheme prefix included.
    """

    @property
    @abstractmethod
    def scheme(self) -> str:
        """Return the scheme token that prefixes the header value."""
        ...

    @abstractmethod
    def sign(self, method: str, url: str, params: Mapping[str, Any] | None = None) -> str:
        """Compute the ``Authorization`` header value for one request.

        Args:
            method: HTTP method, upper-case.
            url: Base URL plus path, without the query string.
            params: The caller's query parameters.

        Returns:
            The header value, e.g. ``"Basic dXNlcjpwYXNz"``.
        """
        ...

    def header(self, method: str, url: str, params: Mapping[str, Any] | None = None) -> tuple[str, str]:
        """Return the ``(name, value)`` header pair for one request."""
        return AUTHORIZATION, self.sign(method, url, params)
