"""jsonfetch -- a small blocking HTTP helper for JSON APIs.

The package builds a request (URL and query string, JSON or
multipart/form-data body, headers), signs it with HTTP Basic or OAuth 1.0a
credentials, sends it through :mod:`httpx`, and decodes the JSON response.
HTTP error statuses are returned like any other response; only transport
failures raise.

Typical usage::

    from jsonfetch import FetchClient

    with FetchClient("https://api.example.com/v1") as client:
        client.set_oauth("ckey", "csecret", "token", "tsecret")
        items = client.execute("/items", {"page": 1})

Modules:
    app: Typer CLI entry point (``jsonfetch request ...``).
    builder: Query strings, bodies, and header blocks.
    auth: Basic and OAuth 1.0a signers.
    client: :class:`FetchClient` and response decoding.
    transport: The httpx-backed transport.
    config: Config files, environment overrides, credential sources.
    models: Pydantic models shared across the package.
    exceptions: Exception hierarchy with exit-code mapping.
    output: stdout/stderr formatting with Rich support.
"""

__version__ = "0.1.0"

from jsonfetch.client import FetchClient  # noqa: E402
from jsonfetch.exceptions import DecodeError, RequestError, TransportError  # noqa: E402

__all__ = ["FetchClient", "DecodeError", "RequestError", "TransportError", "__version__"]
