"""HTTP client module for jsonfetch.

Provides :class:`FetchClient`, a blocking client that builds the request,
signs it with Basic or OAuth 1.0a credentials, sends it through a
:class:`~jsonfetch.transport.Transport`, and decodes the JSON response.

Example::

    from jsonfetch.client import FetchClient

    with FetchClient("https://api.example.com") as client:
        data = client.execute("/status")
"""

from jsonfetch.client.fetch_client import FetchClient
from jsonfetch.client.response import decode_json, format_exchange

__all__ = ["FetchClient", "decode_json", "format_exchange"]
