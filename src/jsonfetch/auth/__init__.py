"""Request signing for jsonfetch.

A client holds a single auth slot (:data:`~jsonfetch.models.AuthState`):
nothing, :class:`~jsonfetch.models.BasicCredentials`, or
:class:`~jsonfetch.models.OAuthCredentials`.  :func:`create_signer` maps a
credential object to its :class:`AuthSigner`, and :func:`sign_request`
produces the ``Authorization`` header for one request (or ``None`` when no
auth is configured).

Typical usage::

    from jsonfetch.auth import sign_request

    header = sign_request(client.auth, "GET", "https://api.example.com/me", {})
    # ("Authorization", "Basic ...") or None
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Optional

from jsonfetch.auth.base import AUTHORIZATION, AuthSigner, percent_encode
from jsonfetch.auth.basic import BasicSigner
from jsonfetch.auth.oauth1 import OAuth1Signer
from jsonfetch.exceptions import AuthError
from jsonfetch.models import AuthState, BasicCredentials, OAuthCredentials


def create_signer(auth: AuthState, **options: Any) -> Optional[AuthSigner]:
    """Return the signer for *auth*, or ``None`` when *auth* is ``None``.

    Extra keyword *options* (``clock``, ``nonce_factory``) are passed to
    :class:`OAuth1Signer`.

    Raises:
        AuthError: If *auth* is not a known credential type.
    """
    if auth is None:
        return None
    if isinstance(auth, BasicCredentials):
        return BasicSigner(auth)
    if isinstance(auth, OAuthCredentials):
        return OAuth1Signer(auth, **options)
    raise AuthError(f"Unsupported auth credentials: {type(auth).__name__}")


def sign_request(
    auth: AuthState,
    method: str,
    url: str,
    params: Mapping[str, Any] | None = None,
    **options: Any,
) -> Optional[tuple[str, str]]:
    """Return the ``Authorization`` header pair for one request, or ``None``."""
    signer = create_signer(auth, **options)
    if signer is None:
        return None
    return signer.header(method, url, params)


__all__ = [
    "AUTHORIZATION",
    "AuthSigner",
    "BasicSigner",
    "OAuth1Signer",
    "create_signer",
    "percent_encode",
    "sign_request",
]
