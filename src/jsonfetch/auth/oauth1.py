"""OAuth 1.0a HMAC-SHA1 request signer.

Implements the signature flow of :rfc:`5849`:

1. Collect the protocol parameters (``oauth_consumer_key``,
   ``oauth_nonce``, ``oauth_signature_method``, ``oauth_timestamp``,
   ``oauth_token``, ``oauth_version``) and merge in the request's query
   parameters.
2. Build the signature base string:
   ``METHOD&pct(url)&pct(k1=v1&k2=v2...)`` with parameters sorted by key.
3. Sign it with HMAC-SHA1 under ``pct(consumer_secret)&pct(token_secret)``
   and Base64-encode the digest.
4. Render the ``Authorization: OAuth ...`` header.

The clock and the nonce source are injectable so signatures can be
reproduced in tests.
"""

from __future__ import annotations

import base64
import hashlib
import hmac
import secrets
import time
from collections.abc import Iterable, Mapping
from typing import Any, Callable, Optional

from jsonfetch.auth.base import AuthSigner, percent_encode
from jsonfetch.builder import query_pairs
from jsonfetch.models import OAuthCredentials

SIGNATURE_METHOD = "HMAC-SHA1"
OAUTH_VERSION = "1.0"


def _default_nonce() -> str:
    return secrets.token_hex(16)


def signature_base_string(
    method: str, url: str, params: Mapping[str, Any] | Iterable[tuple[str, Any]]
) -> str:
    """Return the signature base string for *method*, *url* and *params*.

    *params* is a mapping or a sequence of ``(key, value)`` pairs (repeated
    keys allowed).  Pairs are sorted by key, then value, and joined as
    ``key=value`` before the whole string is percent-encoded.
    """
    items = params.items() if isinstance(params, Mapping) else params
    pairs = sorted((str(key), str(value)) for key, value in items)
    joined = "&".join(f"{key}={value}" for key, value in pairs)
    return f"{method.upper()}&{percent_encode(url)}&{percent_encode(joined)}"


def signing_key(consumer_secret: str, token_secret: str) -> str:
    """Return the HMAC key ``pct(consumer_secret)&pct(token_secret)``."""
    return f"{percent_encode(consumer_secret)}&{percent_encode(token_secret)}"


def hmac_sha1_signature(base_string: str, key: str) -> str:
    """Return the Base64-encoded HMAC-SHA1 of *base_string* under *key*."""
    digest = hmac.new(key.encode("utf-8"), base_string.encode("utf-8"), hashlib.sha1).digest()
    return base64.b64encode(digest).decode("ascii")


class OAuth1Signer(AuthSigner):
    """Sign requests with OAuth 1.0a consumer and token credentials.

    Args:
        credentials: Consumer key/secret and access token/secret.
        clock: Returns the current Unix time in seconds.
        nonce_factory: Returns a fresh nonce per request.  ``None`` reuses
            the timestamp as the nonce, which older servers accept but
            which is not unique within one second.

    Example::

        signer = OAuth1Signer(creds, clock=lambda: 1700000000, nonce_factory=lambda: "abc")
        value = signer.sign("GET", "https://api.example.com/items", {"page": 2})
    """

    def __init__(
        self,
        credentials: OAuthCredentials,
        clock: Callable[[], float] = time.time,
        nonce_factory: Optional[Callable[[], str]] = _default_nonce,
    ) -> None:
        self._credentials = credentials
        self._clock = clock
        self._nonce_factory = nonce_factory

    @property
    def scheme(self) -> str:
        return "OAuth"

    def protocol_params(self) -> dict[str, str]:
        """Return a fresh set of ``oauth_*`` parameters (without the signature)."""
        timestamp = str(int(self._clock()))
        nonce = self._nonce_factory() if self._nonce_factory is not None else timestamp
        return {
            "oauth_consumer_key": self._credentials.consumer_key,
            "oauth_nonce": nonce,
            "oauth_signature_method": SIGNATURE_METHOD,
            "oauth_timestamp": timestamp,
            "oauth_token": self._credentials.token,
            "oauth_version": OAUTH_VERSION,
        }

    def signature(
        self,
        method: str,
        url: str,
        oauth_params: Mapping[str, str],
        params: Mapping[str, Any] | None = None,
    ) -> str:
        """Compute the signature for a request given its ``oauth_*`` parameters."""
        # query parameters are signed in their wire form; protocol parameters
        # win over query parameters of the same name
        pairs = [(key, value) for key, value in query_pairs(params) if key not in oauth_params]
        pairs.extend(oauth_params.items())
        base = signature_base_string(method, url, pairs)
        key = signing_key(self._credentials.consumer_secret, self._credentials.token_secret)
        return hmac_sha1_signature(base, key)

    def sign(self, method: str, url: str, params: Mapping[str, Any] | None = None) -> str:
        oauth_params = self.protocol_params()
        oauth_params["oauth_signature"] = self.signature(method, url, oauth_params, params)
        fields = ", ".join(
            f'{key}="{percent_encode(oauth_params[key])}"' for key in sorted(oauth_params)
        )
        return f"{self.scheme} {fields}"
