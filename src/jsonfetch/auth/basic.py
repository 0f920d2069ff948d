"""HTTP Basic authentication signer.

The ``username:password`` pair is Base64-encoded and sent as an
``Authorization: Basic <encoded>`` header per :rfc:`7617`.
"""

from __future__ import annotations

import base64
from collections.abc import Mapping
from typing import Any

from jsonfetch.auth.base import AuthSigner
from jsonfetch.models import BasicCredentials


class BasicSigner(AuthSigner):
    """Sign requests with HTTP Basic credentials.

    The header does not depend on the request, so :meth:`sign` ignores
    *method*, *url* and *params*.

    Example::

        signer = BasicSigner(BasicCredentials(username="user", password="pass"))
        assert signer.sign("GET", "https://x") == "Basic dXNlcjpwYXNz"
    """

    def __init__(self, credentials: BasicCredentials) -> None:
        self._credentials = credentials

    @property
    def scheme(self) -> str:
        return "Basic"

    def sign(self, method: str, url: str, params: Mapping[str, Any] | None = None) -> str:
        raw = f"{self._credentials.username}:{self._credentials.password}"
        encoded = base64.b64encode(raw.encode("utf-8")).decode("ascii")
        return f"{self.scheme} {encoded}"
